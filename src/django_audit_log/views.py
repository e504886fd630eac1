"""Audit event REST API views (TMF688 event management)."""

import json
import logging
from datetime import datetime, time

from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from . import selectors
from .api import log_event
from .conf import get_default_page_size, get_max_page_size
from .exceptions import AuditEventNotFound, InvalidAuditEvent

logger = logging.getLogger(__name__)


def _error(message, details=None, status=400):
    return JsonResponse({"error": message, "details": details}, status=status)


def _int_param(request, name, default, minimum, maximum=None):
    raw = request.GET.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer")
    if value < minimum or (maximum is not None and value > maximum):
        bounds = f"between {minimum} and {maximum}" if maximum is not None else f">= {minimum}"
        raise ValueError(f"{name} must be {bounds}")
    return value


def date_param(request, name):
    raw = request.GET.get(name)
    if not raw:
        return None
    try:
        value = parse_datetime(raw)
        if value is None:
            day = parse_date(raw)
            value = datetime.combine(day, time.min) if day else None
    except ValueError:
        value = None
    if value is None:
        raise ValueError(f"{name} must be an ISO-8601 date or date-time")
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


@csrf_exempt
@require_http_methods(["GET", "POST"])
def event_collection(request):
    """API: List audit events (GET) or record a new one (POST)."""
    if request.method == "POST":
        return _create_event(request)

    try:
        limit = _int_param(request, "limit", get_default_page_size(), 1, get_max_page_size())
        offset = _int_param(request, "offset", 0, 0)
        from_date = date_param(request, "fromDate")
        to_date = date_param(request, "toDate")
    except ValueError as e:
        return _error("Invalid query parameters", str(e))

    page = selectors.list_events(
        customer_id=request.GET.get("customerId") or None,
        event_type=request.GET.get("eventType") or None,
        from_date=from_date,
        to_date=to_date,
        limit=limit,
        offset=offset,
    )
    return JsonResponse({
        "events": [selectors.serialize_event(e) for e in page.events],
        "totalCount": page.total_count,
        "hasMore": page.has_more,
        "filters": page.filters,
    })


def _create_event(request):
    try:
        body = json.loads(request.body or b"{}")
    except ValueError as e:
        return _error("Malformed JSON body", str(e))
    if not isinstance(body, dict):
        return _error("Failed to create audit event", {"payload": ["Expected a JSON object."]})

    try:
        event = log_event(
            body.get("eventType"),
            customer_id=body.get("customerId"),
            agreement_id=body.get("agreementId"),
            user_id=body.get("userId"),
            details=body.get("details"),
            request=request,
        )
    except InvalidAuditEvent as e:
        return _error("Failed to create audit event", e.errors)
    return JsonResponse(selectors.serialize_event(event), status=201)


@require_GET
def event_detail(request, event_id):
    """API: Get one audit event."""
    try:
        event = selectors.get_event(event_id)
    except AuditEventNotFound as e:
        return _error("Audit event not found", str(e), status=404)
    return JsonResponse(selectors.serialize_event(event))


@require_GET
def event_stats(request):
    """API: Audit statistics for the dashboard."""
    return JsonResponse(selectors.get_stats_overview())


@require_GET
def event_export_csv(request):
    """API: Export the audit trail as a CSV attachment."""
    try:
        from_date = date_param(request, "fromDate")
        to_date = date_param(request, "toDate")
    except ValueError as e:
        return _error("Invalid query parameters", str(e))

    content = selectors.export_csv(
        customer_id=request.GET.get("customerId") or None,
        from_date=from_date,
        to_date=to_date,
    )
    filename = f"audit_trail_{timezone.now().date().isoformat()}.csv"
    response = HttpResponse(content, content_type="text/csv")
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response
