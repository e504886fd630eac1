"""Consent preference and reporting API views."""

import json
import logging
from functools import wraps

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from django_audit_log.middleware import get_actor
from django_audit_log.views import date_param
from django_customers.exceptions import CustomerNotFound

from . import selectors, services
from .exceptions import ConsentValidationError

logger = logging.getLogger(__name__)


def _error(message, details=None, status=400):
    return JsonResponse({"error": message, "details": details}, status=status)


def _api_errors(view):
    """Answer unexpected failures with a JSON 500 instead of the HTML error page."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return _error("Internal server error", None, status=500)

    return wrapper


@require_GET
@_api_errors
def consent_overview(request):
    """API: Consent dashboard overview."""
    return JsonResponse(selectors.get_overview())


@require_GET
@_api_errors
def category_stats(request):
    """API: Consent statistics by category."""
    return JsonResponse(selectors.get_category_stats())


@csrf_exempt
@require_http_methods(["GET", "PATCH"])
@_api_errors
def customer_preferences(request, customer_id):
    """API: Get (GET) or update (PATCH) a customer's consent preferences.

    The PATCH body is a {category: bool} object; an optional "method" key
    records how consent was given (web, mobile, ussd, callCenter).
    """
    if request.method == "GET":
        try:
            return JsonResponse(services.get_preferences(customer_id))
        except CustomerNotFound as e:
            return _error("Customer not found", str(e), status=404)

    try:
        body = json.loads(request.body or b"{}")
    except ValueError as e:
        return _error("Malformed JSON body", str(e))
    method = body.pop("method", None) if isinstance(body, dict) else None

    try:
        data = services.update_preferences(
            customer_id,
            body,
            method=method,
            by=get_actor(request),
            request=request,
        )
    except CustomerNotFound as e:
        return _error("Customer not found", str(e), status=404)
    except ConsentValidationError as e:
        return _error("Failed to update consent preferences", e.errors)

    return JsonResponse({
        "success": True,
        "message": "Consent preferences updated successfully",
        "data": data,
    })


@require_GET
@_api_errors
def bulk_report(request):
    """API: Bulk consent report as JSON or CSV (?format=csv)."""
    report_format = request.GET.get("format", "json")
    if report_format not in ("json", "csv"):
        return _error("Invalid query parameters", "format must be 'json' or 'csv'")
    try:
        start_date = date_param(request, "startDate")
        end_date = date_param(request, "endDate")
    except ValueError as e:
        return _error("Invalid query parameters", str(e))
    if start_date and end_date and end_date < start_date:
        return _error("Invalid query parameters", "endDate must not be before startDate")

    report = selectors.build_bulk_report(start_date=start_date, end_date=end_date)
    if report_format == "csv":
        response = HttpResponse(selectors.render_report_csv(report), content_type="text/csv")
        response["Content-Disposition"] = 'attachment; filename="consent_report.csv"'
        return response
    return JsonResponse(report)
