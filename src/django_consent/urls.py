"""URL patterns for the consent API."""

from django.urls import path

from . import views

app_name = 'django_consent'

urlpatterns = [
    path('consent/overview', views.consent_overview, name='consent_overview'),
    path('consent/stats/categories', views.category_stats, name='category_stats'),
    path(
        'consent/customer/<str:customer_id>/preferences',
        views.customer_preferences,
        name='customer_preferences',
    ),
    path('consent/report/bulk', views.bulk_report, name='bulk_report'),
]
