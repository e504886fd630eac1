"""URL configuration for the consent_registry project."""

from django.conf import settings
from django.urls import include, path

from . import views

api_prefix = f"{settings.API_PREFIX}/" if settings.API_PREFIX else ""

urlpatterns = [
    # Health check
    path("health", views.health_check, name="health_check"),

    # API
    path(api_prefix, include("django_agreements.urls")),
    path(api_prefix, include("django_customers.urls")),
    path(api_prefix, include("django_consent.urls")),
    path(api_prefix, include("django_audit_log.urls")),
]
