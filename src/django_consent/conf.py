"""Django Consent configuration.

All settings can be overridden in your Django settings.py.

Example:
    # settings.py
    CONSENT_CATEGORIES = {
        'dataProcessing': {
            'name': 'Essential Services',
            'description': 'Required for basic service delivery',
            'required': True,
            'default': True,
        },
        'newsletter': {
            'name': 'Newsletter',
            'description': 'Monthly product news',
            'required': False,
            'default': False,
        },
    }
"""

from django.conf import settings


DEFAULT_CATEGORIES = {
    'dataProcessing': {
        'name': 'Essential Data Processing',
        'description': 'Essential data processing for service delivery',
        'required': True,
        'default': True,
    },
    'marketing': {
        'name': 'Marketing Communications',
        'description': 'Marketing communications and promotions',
        'required': False,
        'default': False,
    },
    'analytics': {
        'name': 'Analytics & Research',
        'description': 'Analytics and service improvement',
        'required': False,
        'default': False,
    },
    'thirdPartySharing': {
        'name': 'Third-party Sharing',
        'description': 'Data sharing with partner organizations',
        'required': False,
        'default': False,
    },
    'sensitiveData': {
        'name': 'Sensitive Data Processing',
        'description': 'Processing of sensitive personal data',
        'required': False,
        'default': False,
    },
}

DEFAULT_METHODS = ('web', 'mobile', 'ussd', 'callCenter')


def get_setting(name: str, default=None):
    """Get a setting with CONSENT_ prefix."""
    return getattr(settings, f"CONSENT_{name}", default)


def get_categories() -> dict:
    return get_setting('CATEGORIES', DEFAULT_CATEGORIES)


def get_methods() -> tuple:
    return tuple(get_setting('METHODS', DEFAULT_METHODS))


def get_default_method() -> str:
    return get_setting('DEFAULT_METHOD', 'web')


def get_report_days() -> int:
    """Length of the default bulk report window, in days."""
    return int(get_setting('REPORT_DAYS', 30))


# =============================================================================
# DEFAULT SETTINGS REFERENCE
# =============================================================================

# CONSENT_CATEGORIES = DEFAULT_CATEGORIES  # category key -> name/description/required/default
# CONSENT_METHODS = ('web', 'mobile', 'ussd', 'callCenter')
# CONSENT_DEFAULT_METHOD = 'web'
# CONSENT_REPORT_DAYS = 30
