"""URL patterns for the agreement API."""

from django.urls import path

from . import views

app_name = 'django_agreements'

urlpatterns = [
    path('agreement', views.agreement_collection, name='agreement_collection'),
    path('agreement/<str:agreement_id>', views.agreement_detail, name='agreement_detail'),
    path(
        'agreement/<str:agreement_id>/transitions',
        views.agreement_transitions,
        name='agreement_transitions',
    ),
]
