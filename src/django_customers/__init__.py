"""Django Customers - Data subjects and their consent preferences (TMF629).

Models:
    Customer: Profile plus {category: bool} consent preferences

Services:
    create_customer, get_customer, list_customers, update_customer,
    get_customer_stats
"""

__version__ = "0.1.0"

__all__ = [
    "Customer",
    "create_customer",
    "get_customer",
    "list_customers",
    "update_customer",
    "get_customer_stats",
    "CustomerError",
    "CustomerNotFound",
    "CustomerValidationError",
]


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name == "Customer":
        from .models import Customer
        return Customer

    if name in ("create_customer", "get_customer", "list_customers", "update_customer", "get_customer_stats"):
        from . import services
        return getattr(services, name)

    if name in ("CustomerError", "CustomerNotFound", "CustomerValidationError"):
        from . import exceptions
        return getattr(exceptions, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
