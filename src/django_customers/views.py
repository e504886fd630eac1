"""Customer REST API views (TMF629 customer management)."""

import json
import logging
from functools import wraps

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from django_audit_log.middleware import get_actor
from django_consent import services as consent_services
from django_consent.exceptions import ConsentValidationError

from . import services
from .exceptions import CustomerNotFound, CustomerValidationError

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


def _int_param(request, name, default):
    raw = request.GET.get(name)
    if raw in (None, ""):
        return default
    return int(raw)


def _consents_view(preferences: dict) -> dict:
    return {
        "customerId": preferences["customerId"],
        "consentPreferences": preferences["preferences"],
        "lastUpdated": preferences["lastUpdated"],
    }


@csrf_exempt
@require_http_methods(["GET", "POST"])
@_api_errors
def customer_collection(request):
    """API: List customers (GET) or create one (POST)."""
    if request.method == "POST":
        try:
            body = json.loads(request.body or b"{}")
        except ValueError as e:
            return _error("Malformed JSON body", str(e))
        try:
            customer = services.create_customer(body, by=get_actor(request), request=request)
        except CustomerValidationError as e:
            return _error("Failed to create customer", e.errors)
        return JsonResponse(services.serialize_customer(customer), status=201)

    try:
        page = services.list_customers(
            limit=_int_param(request, "limit", None),
            offset=_int_param(request, "offset", 0),
            status=request.GET.get("status") or None,
        )
    except ValueError:
        return _error("Invalid query parameters", "limit and offset must be integers")
    except CustomerValidationError as e:
        return _error("Invalid query parameters", e.errors)

    return JsonResponse({
        "customers": [services.serialize_customer(c) for c in page.customers],
        "totalCount": page.total_count,
        "hasMore": page.has_more,
    })


@csrf_exempt
@require_http_methods(["GET", "PATCH"])
@_api_errors
def customer_detail(request, customer_id):
    """API: Get (GET) or update (PATCH) a customer."""
    if request.method == "GET":
        try:
            customer = services.get_customer(customer_id)
        except CustomerNotFound as e:
            return _error("Customer not found", str(e), status=404)
        return JsonResponse(services.serialize_customer(customer))

    try:
        body = json.loads(request.body or b"{}")
    except ValueError as e:
        return _error("Malformed JSON body", str(e))
    try:
        customer = services.update_customer(customer_id, body, by=get_actor(request), request=request)
    except CustomerNotFound as e:
        return _error("Customer not found", str(e), status=404)
    except CustomerValidationError as e:
        return _error("Failed to update customer", e.errors)
    return JsonResponse(services.serialize_customer(customer))


@csrf_exempt
@require_http_methods(["GET", "PATCH"])
@_api_errors
def customer_consents(request, customer_id):
    """API: Get (GET) or merge (PATCH) a customer's consent preferences."""
    if request.method == "GET":
        try:
            preferences = consent_services.get_preferences(customer_id)
        except CustomerNotFound as e:
            return _error("Customer not found", str(e), status=404)
        return JsonResponse(_consents_view(preferences))

    try:
        body = json.loads(request.body or b"{}")
    except ValueError as e:
        return _error("Malformed JSON body", str(e))
    try:
        preferences = consent_services.update_preferences(
            customer_id,
            body,
            by=get_actor(request),
            request=request,
        )
    except CustomerNotFound as e:
        return _error("Customer not found", str(e), status=404)
    except ConsentValidationError as e:
        return _error("Failed to update consent preferences", e.errors)
    return JsonResponse(_consents_view(preferences))


@require_GET
@_api_errors
def customer_stats(request):
    """API: Customer statistics for the dashboard."""
    return JsonResponse(services.get_customer_stats())
