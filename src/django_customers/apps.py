"""Django app configuration for django_customers."""
from django.apps import AppConfig


class DjangoCustomersConfig(AppConfig):
    """Configuration for the Django Customers app."""

    name = "django_customers"
    label = "django_customers"
    verbose_name = "Customers"
    default_auto_field = "django.db.models.BigAutoField"
