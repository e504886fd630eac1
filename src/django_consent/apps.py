"""Django app configuration for django_consent."""
from django.apps import AppConfig


class DjangoConsentConfig(AppConfig):
    """Configuration for the Django Consent app."""

    name = "django_consent"
    label = "django_consent"
    verbose_name = "Consent"
