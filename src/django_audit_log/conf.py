"""Django Audit Log configuration.

Example:
    # settings.py
    AUDIT_LOG_DEFAULT_PAGE_SIZE = 25
"""

from django.conf import settings


def get_setting(name: str, default=None):
    """Get a setting with AUDIT_LOG_ prefix."""
    return getattr(settings, f"AUDIT_LOG_{name}", default)


def get_default_page_size() -> int:
    return int(get_setting('DEFAULT_PAGE_SIZE', 10))


def get_max_page_size() -> int:
    return int(get_setting('MAX_PAGE_SIZE', 100))


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# AUDIT_LOG_DEFAULT_PAGE_SIZE = 10
# AUDIT_LOG_MAX_PAGE_SIZE = 100
