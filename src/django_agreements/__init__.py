"""Django Agreements - TMF651-style agreement records.

Models:
    Agreement: Aggregate root (items, period, specification as JSON)
    AgreementParty: Ordered engaged/related party references
    AgreementAuditEntry: Immutable append-only audit ledger

Services (the only supported write path):
    create_agreement: Validate and persist a new agreement
    get_agreement: Fetch one agreement
    list_agreements: Filtered, paginated listing
    update_agreement: Validate and apply a partial update
    transition_agreement: Move an agreement to another status
    delete_agreement: Hard-delete an agreement
    get_allowed_transitions: Next statuses for an agreement
"""

__version__ = "0.3.0"

__all__ = [
    # Models
    "Agreement",
    "AgreementParty",
    "AgreementAuditEntry",
    # Services
    "create_agreement",
    "get_agreement",
    "list_agreements",
    "update_agreement",
    "transition_agreement",
    "delete_agreement",
    "get_allowed_transitions",
    # Validation
    "validate_agreement",
    "validate_agreement_patch",
    # Exceptions
    "AgreementError",
    "AgreementValidationError",
    "NotFound",
    "DuplicateKey",
    "StoreUnavailable",
    "InvalidStatusTransition",
]

_MODELS = ("Agreement", "AgreementParty", "AgreementAuditEntry")
_SERVICES = (
    "create_agreement",
    "get_agreement",
    "list_agreements",
    "update_agreement",
    "transition_agreement",
    "delete_agreement",
    "get_allowed_transitions",
)
_VALIDATORS = ("validate_agreement", "validate_agreement_patch")
_EXCEPTIONS = (
    "AgreementError",
    "AgreementValidationError",
    "NotFound",
    "DuplicateKey",
    "StoreUnavailable",
    "InvalidStatusTransition",
)


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in _MODELS:
        from . import models
        return getattr(models, name)

    if name in _SERVICES:
        from . import services
        return getattr(services, name)

    if name in _VALIDATORS:
        from . import validators
        return getattr(validators, name)

    if name in _EXCEPTIONS:
        from . import exceptions
        return getattr(exceptions, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
