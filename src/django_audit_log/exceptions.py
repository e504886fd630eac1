"""Custom exceptions for django-audit-log."""


class AuditLogError(Exception):
    """Base exception for audit log errors."""
    pass


class AuditEventNotFound(AuditLogError):
    """Raised when no audit event exists with the requested id."""

    def __init__(self, event_id):
        self.event_id = event_id
        super().__init__(f"Audit event '{event_id}' not found")


class ImmutableAuditEventError(AuditLogError):
    """Raised when attempting to modify a stored audit event."""

    def __init__(self, event_id):
        self.event_id = event_id
        super().__init__(f"Cannot modify audit event {event_id} - audit events are append-only.")


class InvalidAuditEvent(AuditLogError):
    """Raised when an audit event cannot be recorded as given."""

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        super().__init__(f"Invalid audit event: {', '.join(sorted(errors))}")
