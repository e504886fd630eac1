"""URL patterns for the customer API."""

from django.urls import path

from . import views

app_name = 'django_customers'

urlpatterns = [
    path('customer', views.customer_collection, name='customer_collection'),
    path('customer/stats/overview', views.customer_stats, name='customer_stats'),
    path('customer/<str:customer_id>', views.customer_detail, name='customer_detail'),
    path('customer/<str:customer_id>/consents', views.customer_consents, name='customer_consents'),
]
