"""Public API for audit logging.

This is the primary interface for applications:

    from django_audit_log import log_event

    log_event(
        'ConsentRevoked',
        customer_id='cust_001',
        user_id='cust_001',
        details={'consentType': 'marketing', 'method': 'web'},
        request=request,
    )

When no request is passed, the one captured by AuditContextMiddleware is
used for IP, user agent and request ID.
"""
import logging

from django.core.exceptions import ValidationError
from django.core.validators import validate_ipv46_address

from .exceptions import InvalidAuditEvent
from .middleware import get_current_actor, get_current_request, get_request_id
from .models import AuditEvent

logger = logging.getLogger(__name__)


def _get_client_ip(request):
    """Extract client IP from request, handling proxies.

    Values that are not IPv4/IPv6 addresses (e.g. ``unknown`` from some
    proxies) are dropped.
    """
    if not request:
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    if not ip:
        return None
    try:
        validate_ipv46_address(ip)
    except ValidationError:
        logger.debug("Ignoring non-IP client address %r", ip)
        return None
    return ip


def _get_user_agent(request):
    """Extract user agent from request."""
    if not request:
        return ''
    return request.META.get('HTTP_USER_AGENT', '')[:500]


def log_event(
    event_type,
    customer_id=None,
    agreement_id=None,
    user_id=None,
    details=None,
    request=None,
    timestamp=None,
):
    """Record an audit event.

    Args:
        event_type: Event type (ConsentGranted, AgreementDeleted, etc.)
        customer_id: Customer the event concerns (optional)
        agreement_id: Agreement the event concerns (optional)
        user_id: Who triggered it (defaults to the request actor, then "system")
        details: Additional context as dict
        request: HTTP request (for IP, user agent extraction)
        timestamp: When it happened (defaults to now)

    Returns:
        AuditEvent instance

    Raises:
        InvalidAuditEvent: If event_type is missing or details is not a dict
    """
    errors = {}
    if not isinstance(event_type, str) or not event_type.strip():
        errors['eventType'] = ["This field is required."]
    if details is not None and not isinstance(details, dict):
        errors['details'] = ["Must be an object."]
    if errors:
        raise InvalidAuditEvent(errors)

    if request is None:
        request = get_current_request()
    if not user_id:
        user_id = get_current_actor() or 'system'

    extra = {}
    if timestamp is not None:
        extra['timestamp'] = timestamp

    event = AuditEvent.objects.create(
        event_type=event_type,
        customer_id=str(customer_id) if customer_id else '',
        agreement_id=str(agreement_id) if agreement_id else '',
        user_id=str(user_id)[:200],
        details=details or {},
        ip_address=_get_client_ip(request),
        user_agent=_get_user_agent(request),
        request_id=getattr(request, 'audit_request_id', None) or get_request_id() or '',
        **extra,
    )
    logger.debug("Audit event %s recorded: %s", event.pk, event_type)
    return event
