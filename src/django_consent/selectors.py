"""
Consent reporting selectors - read-only aggregates over customer preferences
and the consent audit trail.

Usage:
    from django_consent.selectors import get_overview, build_bulk_report
"""
import csv
import io
from datetime import timedelta

from django.utils import timezone

from django_audit_log.models import AuditEvent, AuditEventType
from django_audit_log.selectors import count_by_detail, csv_safe
from django_customers.models import Customer
from django_customers.services import percentage

from .conf import get_categories, get_report_days
from .services import CONSENT_EVENT_TYPES


def _tally():
    """Count granted and declined answers per category over all customers."""
    categories = get_categories()
    granted = dict.fromkeys(categories, 0)
    declined = dict.fromkeys(categories, 0)
    total_customers = 0
    for preferences in Customer.objects.values_list('consent_preferences', flat=True):
        total_customers += 1
        for key in categories:
            value = (preferences or {}).get(key)
            if value is True:
                granted[key] += 1
            elif value is False:
                declined[key] += 1
    return total_customers, granted, declined


def get_overview(now=None) -> dict:
    """Consent dashboard: totals, per-category rates, recent activity."""
    now = now or timezone.now()
    total_customers, granted, declined = _tally()
    categories = get_categories()

    recent = AuditEvent.objects.filter(
        event_type__in=CONSENT_EVENT_TYPES,
        timestamp__gte=now - timedelta(days=get_report_days()),
    )
    return {
        'totalCustomers': total_customers,
        'activeConsents': sum(granted.values()),
        'revokedConsents': sum(declined.values()),
        'consentCategories': {
            key: {
                'active': granted[key],
                'percentage': percentage(granted[key], total_customers),
                'description': spec.get('description', ''),
            }
            for key, spec in categories.items()
        },
        'recentActivity': {
            'consentGranted': recent.filter(event_type=AuditEventType.CONSENT_GRANTED).count(),
            'consentRevoked': recent.filter(event_type=AuditEventType.CONSENT_REVOKED).count(),
            'consentUpdated': recent.filter(event_type=AuditEventType.CONSENT_UPDATED).count(),
        },
    }


def get_category_stats() -> dict:
    """Per-category consent counts."""
    total_customers, granted, _declined = _tally()
    return {
        key: {
            'name': spec.get('name', key),
            'consents': granted[key],
            'percentage': percentage(granted[key], total_customers),
            'required': bool(spec.get('required')),
            'description': spec.get('description', ''),
        }
        for key, spec in get_categories().items()
    }


def build_bulk_report(start_date=None, end_date=None, now=None) -> dict:
    """
    Consent report for a period (default: the last CONSENT_REPORT_DAYS days).

    Category counts reflect current preferences; the by-method breakdown
    counts consent changes recorded in the period.
    """
    now = now or timezone.now()
    end_date = end_date or now
    start_date = start_date or end_date - timedelta(days=get_report_days())
    total_customers, granted, declined = _tally()

    return {
        'generatedAt': now,
        'period': {'startDate': start_date, 'endDate': end_date},
        'summary': {
            'totalCustomers': total_customers,
            'totalConsents': sum(granted.values()) + sum(declined.values()),
            'activeConsents': sum(granted.values()),
            'revokedConsents': sum(declined.values()),
        },
        'breakdown': {
            'byCategory': granted,
            'byMethod': count_by_detail(
                'method',
                event_types=CONSENT_EVENT_TYPES,
                from_date=start_date,
                to_date=end_date,
            ),
        },
    }


def render_report_csv(report: dict) -> str:
    """The by-category breakdown of a bulk report as CSV."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(['Category', 'Count'])
    for category, count in report['breakdown']['byCategory'].items():
        writer.writerow([csv_safe(category), count])
    return buffer.getvalue()
