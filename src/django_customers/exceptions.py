"""Custom exceptions for django-customers."""


class CustomerError(Exception):
    """Base exception for customer errors."""
    pass


class CustomerNotFound(CustomerError):
    """Raised when no customer exists with the requested id."""

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer '{customer_id}' not found")


class CustomerValidationError(CustomerError):
    """Raised when a customer payload fails validation."""

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        fields = ", ".join(sorted(errors))
        super().__init__(f"Invalid customer payload: {fields}")
