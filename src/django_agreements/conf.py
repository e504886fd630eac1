"""Django Agreements configuration.

All settings can be overridden in your Django settings.py.

Example:
    # settings.py
    AGREEMENTS_STORE = 'django_agreements.stores.memory.InMemoryAgreementStore'
    AGREEMENTS_BASE_PATH = '/tmf-api/agreementManagement/v4/agreement'
"""

from functools import lru_cache
from importlib import import_module

from django.conf import settings

from .exceptions import StoreLoadError


DEFAULT_STORE = 'django_agreements.stores.orm.DjangoAgreementStore'


def get_setting(name: str, default=None):
    """Get a setting with AGREEMENTS_ prefix."""
    return getattr(settings, f"AGREEMENTS_{name}", default)


def get_base_path() -> str:
    """Path prefix used to build agreement hrefs."""
    return get_setting('BASE_PATH', '/agreement').rstrip('/')


def get_default_page_size() -> int:
    return int(get_setting('DEFAULT_PAGE_SIZE', 10))


def get_max_page_size() -> int:
    return int(get_setting('MAX_PAGE_SIZE', 100))


@lru_cache(maxsize=16)
def load_store(dotted_path: str):
    """
    Import and instantiate a store backend from dotted path.

    Raises StoreLoadError for bad imports or classes that are not stores.
    """
    from .stores.base import AgreementStore

    try:
        module_path, class_name = dotted_path.rsplit('.', 1)
    except ValueError:
        raise StoreLoadError(dotted_path, "Invalid dotted path format")

    try:
        module = import_module(module_path)
    except ImportError as e:
        raise StoreLoadError(dotted_path, f"Cannot import module: {e}")

    try:
        store_class = getattr(module, class_name)
    except AttributeError:
        raise StoreLoadError(dotted_path, f"Class '{class_name}' not found in module")

    if not isinstance(store_class, type) or not issubclass(store_class, AgreementStore):
        raise StoreLoadError(
            dotted_path,
            f"'{class_name}' must be a subclass of AgreementStore"
        )

    return store_class()


def get_store():
    """Return the configured store instance (cached per dotted path)."""
    return load_store(get_setting('STORE', DEFAULT_STORE))


def clear_store_cache():
    """Clear the store loading cache. Useful for testing."""
    load_store.cache_clear()


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# AGREEMENTS_STORE = 'django_agreements.stores.orm.DjangoAgreementStore'
# AGREEMENTS_BASE_PATH = '/agreement'  # Prefix for the href of each record
# AGREEMENTS_DEFAULT_PAGE_SIZE = 10
# AGREEMENTS_MAX_PAGE_SIZE = 100
