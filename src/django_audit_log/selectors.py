"""
Audit Log Selectors - Public read-only API for audit events.

Usage:
    from django_audit_log.selectors import list_events, get_stats_overview
"""
import csv
import io
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.db.models import Count
from django.utils import timezone

from .exceptions import AuditEventNotFound
from .models import AuditEvent

CSV_HEADER = [
    'ID', 'Event Type', 'Customer ID', 'Agreement ID',
    'User ID', 'Timestamp', 'Action', 'IP Address',
]

# Leading characters a spreadsheet reads as the start of a formula.
FORMULA_PREFIXES = ('=', '+', '-', '@', '\t', '\r')


@dataclass
class AuditEventPage:
    """One page of audit events, newest first."""

    events: list
    total_count: int
    limit: int
    offset: int
    filters: dict = field(default_factory=dict)

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total_count


def serialize_event(event: AuditEvent) -> dict:
    """Wire representation of an audit event."""
    return {
        'id': str(event.pk),
        'eventType': event.event_type,
        'customerId': event.customer_id or None,
        'agreementId': event.agreement_id or None,
        'userId': event.user_id,
        'timestamp': event.timestamp,
        'details': event.details,
        'ipAddress': event.ip_address,
        'userAgent': event.user_agent or 'Unknown',
    }


def _filtered(customer_id=None, event_type=None, from_date=None, to_date=None):
    queryset = AuditEvent.objects.all()
    if customer_id:
        queryset = queryset.filter(customer_id=customer_id)
    if event_type:
        queryset = queryset.filter(event_type=event_type)
    if from_date is not None:
        queryset = queryset.filter(timestamp__gte=from_date)
    if to_date is not None:
        queryset = queryset.filter(timestamp__lte=to_date)
    return queryset.order_by('-timestamp')


def list_events(
    customer_id=None,
    event_type=None,
    from_date=None,
    to_date=None,
    limit: int = 10,
    offset: int = 0,
) -> AuditEventPage:
    """Filtered, paginated audit events, newest first."""
    queryset = _filtered(customer_id, event_type, from_date, to_date)
    return AuditEventPage(
        events=list(queryset[offset:offset + limit]),
        total_count=queryset.count(),
        limit=limit,
        offset=offset,
        filters={
            'customerId': customer_id,
            'eventType': event_type,
            'fromDate': from_date,
            'toDate': to_date,
        },
    )


def get_event(event_id) -> AuditEvent:
    """Get a single event or raise AuditEventNotFound."""
    try:
        uuid.UUID(str(event_id))
    except ValueError:
        raise AuditEventNotFound(event_id)
    try:
        return AuditEvent.objects.get(pk=event_id)
    except (AuditEvent.DoesNotExist, ValidationError):
        raise AuditEventNotFound(event_id)


def get_stats_overview(now=None) -> dict:
    """Event counts for the dashboard: overall, last 24 hours, last 7 days, by type."""
    now = now or timezone.now()
    events = AuditEvent.objects.all()

    breakdown = {
        row['event_type']: row['count']
        for row in events.values('event_type').annotate(count=Count('id')).order_by('event_type')
    }
    latest = events.order_by('-timestamp').values_list('timestamp', flat=True).first()

    return {
        'totalEvents': events.count(),
        'recentEvents': events.filter(timestamp__gte=now - timedelta(hours=24)).count(),
        'weeklyEvents': events.filter(timestamp__gte=now - timedelta(days=7)).count(),
        'eventTypeBreakdown': breakdown,
        'lastEventAt': latest,
    }


def count_by_detail(key: str, event_types=None, from_date=None, to_date=None) -> dict:
    """Count events grouped by ``details[key]``; events without the key are skipped."""
    queryset = _filtered(from_date=from_date, to_date=to_date)
    if event_types:
        queryset = queryset.filter(event_type__in=event_types)
    counter = Counter(
        details[key]
        for details in queryset.values_list('details', flat=True)
        if isinstance(details, dict) and details.get(key)
    )
    return dict(sorted(counter.items()))


def csv_safe(value):
    """Quote a text cell so spreadsheets show it as text, not a formula."""
    if isinstance(value, str) and value.startswith(FORMULA_PREFIXES):
        return "'" + value
    return value


def export_csv(customer_id=None, from_date=None, to_date=None) -> str:
    """Audit trail as CSV text for compliance reporting."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(CSV_HEADER)
    for event in _filtered(customer_id, from_date=from_date, to_date=to_date):
        writer.writerow([
            str(event.pk),
            csv_safe(event.event_type),
            csv_safe(event.customer_id),
            csv_safe(event.agreement_id),
            csv_safe(event.user_id),
            event.timestamp.isoformat(),
            csv_safe(str((event.details or {}).get('action', ''))),
            event.ip_address or '',
        ])
    return buffer.getvalue()
