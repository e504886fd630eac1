"""Django Consent - Consent categories, preferences and reporting.

Services:
    get_preferences: Current consent preferences of a customer
    update_preferences: Grant or revoke categories (audited)

Selectors:
    get_overview, get_category_stats, build_bulk_report
"""

__version__ = "0.1.0"

__all__ = [
    "get_preferences",
    "update_preferences",
    "ConsentError",
    "ConsentValidationError",
]


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in ("get_preferences", "update_preferences"):
        from . import services
        return getattr(services, name)

    if name in ("ConsentError", "ConsentValidationError"):
        from . import exceptions
        return getattr(exceptions, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
