"""Agreement REST API views (TMF651 agreement management).

Errors are JSON bodies of the form {"error": ..., "details": ...}:
    400  validation failure, malformed JSON, bad paging parameters
    404  unknown agreement id
    409  duplicate id, disallowed status transition
    405  unsupported verb
    500  store unavailable or unexpected failure
"""

import json
import logging
from functools import wraps

from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from django_audit_log.middleware import get_actor

from . import services
from .exceptions import (
    AgreementValidationError,
    DuplicateKey,
    InvalidStatusTransition,
    NotFound,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)


def _error(message, details=None, status=400):
    return JsonResponse({"error": message, "details": details}, status=status)


def _api_errors(view):
    """Translate agreement exceptions into JSON error responses."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except AgreementValidationError as e:
            return _error("Validation failed", e.errors, status=400)
        except NotFound as e:
            return _error("Agreement not found", str(e), status=404)
        except DuplicateKey as e:
            return _error("Agreement already exists", str(e), status=409)
        except InvalidStatusTransition as e:
            return _error(
                "Invalid status transition",
                {"from": e.from_status, "to": e.to_status},
                status=409,
            )
        except StoreUnavailable as e:
            logger.error("Agreement store unavailable: %s", e.reason)
            return _error("Agreement store unavailable", None, status=500)
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return _error("Internal server error", None, status=500)

    return wrapper


def _json_body(request):
    """Parse the request body; raises ValueError for malformed JSON."""
    if not request.body:
        return {}
    return json.loads(request.body)


def _int_param(request, name, default):
    raw = request.GET.get(name)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise AgreementValidationError({name: ["Must be an integer."]})


@csrf_exempt
@require_http_methods(["GET", "POST"])
@_api_errors
def agreement_collection(request):
    """API: List agreements (GET) or create one (POST)."""
    if request.method == "POST":
        try:
            payload = _json_body(request)
        except ValueError as e:
            return _error("Malformed JSON body", str(e))
        record = services.create_agreement(payload, by=get_actor(request), request=request)
        response = JsonResponse(record, status=201)
        response["Location"] = record["href"]
        return response

    page = services.list_agreements(
        status=request.GET.get("status") or None,
        engaged_party_id=request.GET.get("engagedPartyId") or None,
        agreement_type=request.GET.get("agreementType") or None,
        limit=_int_param(request, "limit", None),
        offset=_int_param(request, "offset", 0),
    )
    response = JsonResponse({
        "agreements": page.items,
        "totalCount": page.total_count,
        "hasMore": page.has_more,
        "limit": page.limit,
        "offset": page.offset,
    })
    response["X-Total-Count"] = str(page.total_count)
    response["X-Result-Count"] = str(len(page.items))
    return response


@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
@_api_errors
def agreement_detail(request, agreement_id):
    """API: Get (GET), partially update (PATCH) or delete (DELETE) an agreement."""
    if request.method == "GET":
        return JsonResponse(services.get_agreement(agreement_id))

    if request.method == "DELETE":
        services.delete_agreement(agreement_id, by=get_actor(request), request=request)
        return HttpResponse(status=204)

    try:
        payload = _json_body(request)
    except ValueError as e:
        return _error("Malformed JSON body", str(e))
    record = services.update_agreement(
        agreement_id,
        payload,
        by=get_actor(request),
        request=request,
    )
    return JsonResponse(record)


@require_GET
@_api_errors
def agreement_transitions(request, agreement_id):
    """API: Statuses the agreement may move to next."""
    record = services.get_agreement(agreement_id)
    return JsonResponse({
        "id": record["id"],
        "status": record["status"],
        "allowedTransitions": services.get_allowed_transitions(agreement_id),
    })
