"""Custom exceptions for django-consent."""


class ConsentError(Exception):
    """Base exception for consent errors."""
    pass


class ConsentValidationError(ConsentError):
    """Raised when consent preference changes are rejected.

    ``errors`` maps category (or parameter) names to messages.
    """

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        fields = ", ".join(sorted(errors))
        super().__init__(f"Invalid consent preferences: {fields}")
