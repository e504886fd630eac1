"""Django app configuration for django-agreements."""

from django.apps import AppConfig


class DjangoAgreementsConfig(AppConfig):
    """App configuration for django-agreements."""

    name = 'django_agreements'
    verbose_name = 'Agreements'
    default_auto_field = 'django.db.models.BigAutoField'
