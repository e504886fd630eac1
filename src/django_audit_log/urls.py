"""URL patterns for django-audit-log.

Include at the API root:

    path('', include('django_audit_log.urls'))
"""
from django.urls import path

from . import views

app_name = 'django_audit_log'

urlpatterns = [
    path('event', views.event_collection, name='event_collection'),
    path('event/stats/overview', views.event_stats, name='event_stats'),
    path('event/export/csv', views.event_export_csv, name='event_export_csv'),
    path('event/<str:event_id>', views.event_detail, name='event_detail'),
]
