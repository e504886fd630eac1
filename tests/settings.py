"""Django settings for consent registry tests."""

SECRET_KEY = 'test-secret-key-for-consent-registry'

DEBUG = True

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'django.contrib.sessions',
    'django_audit_log',
    'django_agreements',
    'django_customers',
    'django_consent',
]

MIDDLEWARE = [
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django_audit_log.middleware.AuditContextMiddleware',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

ROOT_URLCONF = 'consent_registry.urls'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

USE_TZ = True
TIME_ZONE = 'UTC'

API_PREFIX = ''

AGREEMENTS_STORE = 'django_agreements.stores.orm.DjangoAgreementStore'
AGREEMENTS_BASE_PATH = '/agreement'
