"""Django Customers configuration.

All settings can be overridden in your Django settings.py.
"""

from django.conf import settings


def get_setting(name: str, default=None):
    """Get a setting with CUSTOMERS_ prefix."""
    return getattr(settings, f"CUSTOMERS_{name}", default)


def get_id_prefix() -> str:
    return get_setting('ID_PREFIX', 'cust_')


def get_default_language() -> str:
    return get_setting('DEFAULT_LANGUAGE', 'en')


def get_default_page_size() -> int:
    return int(get_setting('DEFAULT_PAGE_SIZE', 10))


def get_max_page_size() -> int:
    return int(get_setting('MAX_PAGE_SIZE', 100))


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# CUSTOMERS_ID_PREFIX = 'cust_'
# CUSTOMERS_DEFAULT_LANGUAGE = 'en'
# CUSTOMERS_DEFAULT_PAGE_SIZE = 10
# CUSTOMERS_MAX_PAGE_SIZE = 100
