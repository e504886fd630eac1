"""Custom exceptions for django-agreements."""


class AgreementError(Exception):
    """Base exception for agreement errors."""
    pass


class AgreementValidationError(AgreementError):
    """Raised when an agreement payload fails validation.

    Carries every violation, not just the first one found.
    """

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        fields = ", ".join(sorted(errors))
        super().__init__(f"Invalid agreement payload: {fields}")


class NotFound(AgreementError):
    """Raised when no agreement exists with the requested id."""

    def __init__(self, agreement_id: str):
        self.agreement_id = agreement_id
        super().__init__(f"Agreement '{agreement_id}' not found")


class DuplicateKey(AgreementError):
    """Raised when creating an agreement whose id is already taken."""

    def __init__(self, agreement_id: str):
        self.agreement_id = agreement_id
        super().__init__(f"Agreement '{agreement_id}' already exists")


class StoreUnavailable(AgreementError):
    """Raised when the underlying persistence cannot be reached."""

    def __init__(self, reason: str, original_error: Exception = None):
        self.reason = reason
        self.original_error = original_error
        super().__init__(f"Agreement store unavailable: {reason}")


class InvalidStatusTransition(AgreementError):
    """Raised when a status change is not allowed by the transition table."""

    def __init__(self, from_status: str, to_status: str):
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Cannot transition agreement from '{from_status}' to '{to_status}'"
        )


class ImmutableAuditEntryError(AgreementError):
    """Raised when attempting to modify a stored audit entry."""

    def __init__(self, entry_id):
        self.entry_id = entry_id
        super().__init__(
            f"Cannot modify audit entry {entry_id} - audit entries are append-only."
        )


class StoreLoadError(AgreementError):
    """Raised when the configured store backend cannot be loaded."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load agreement store '{path}': {reason}")
