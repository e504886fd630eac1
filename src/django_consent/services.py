"""Consent preference services.

Functions:
- get_preferences(): Current preferences of a customer with the latest consent context
- update_preferences(): Merge preference changes, one audit event per changed category
"""

import logging

from django.db import transaction
from django.utils import timezone

from django_audit_log import log_event
from django_audit_log.models import AuditEvent, AuditEventType
from django_customers.exceptions import CustomerNotFound
from django_customers.models import Customer

from .categories import validate_preference_changes
from .conf import get_default_method, get_methods
from .exceptions import ConsentValidationError

logger = logging.getLogger(__name__)

CONSENT_EVENT_TYPES = (
    AuditEventType.CONSENT_GRANTED,
    AuditEventType.CONSENT_REVOKED,
    AuditEventType.CONSENT_UPDATED,
)


def _latest_consent_event(customer_id):
    return (
        AuditEvent.objects
        .filter(customer_id=customer_id, event_type__in=CONSENT_EVENT_TYPES)
        .order_by('-timestamp')
        .first()
    )


def _preferences_view(customer: Customer) -> dict:
    latest = _latest_consent_event(customer.customer_id)
    return {
        'customerId': customer.customer_id,
        'preferences': customer.consent_preferences,
        'lastUpdated': customer.last_updated,
        'consentMethod': latest.details.get('method') if latest else None,
        'ipAddress': latest.ip_address if latest else None,
        'userAgent': (latest.user_agent or 'Unknown') if latest else None,
    }


def get_preferences(customer_id: str) -> dict:
    """
    Current consent preferences of a customer.

    consentMethod, ipAddress and userAgent describe the most recent consent
    change and are None when the customer never changed a preference.

    Raises:
        CustomerNotFound: If the customer does not exist
    """
    try:
        customer = Customer.objects.get(customer_id=customer_id)
    except Customer.DoesNotExist:
        raise CustomerNotFound(customer_id)
    return _preferences_view(customer)


def update_preferences(customer_id: str, changes, method: str = None, by: str = None, request=None) -> dict:
    """
    Merge ``changes`` into the customer's preferences.

    Each category whose value actually changes produces a ConsentGranted or
    ConsentRevoked audit event carrying the consent method.

    Raises:
        CustomerNotFound: If the customer does not exist
        ConsentValidationError: For unknown categories, non-boolean values,
            revoking a required category or an unknown method
    """
    method = method or get_default_method()
    if method not in get_methods():
        raise ConsentValidationError({'method': [f"Must be one of: {', '.join(get_methods())}."]})
    changes = validate_preference_changes(changes)
    if not changes:
        raise ConsentValidationError({'payload': ["No preferences to update."]})

    with transaction.atomic():
        try:
            customer = Customer.objects.select_for_update().get(customer_id=customer_id)
        except Customer.DoesNotExist:
            raise CustomerNotFound(customer_id)

        current = dict(customer.consent_preferences or {})
        changed = {key: value for key, value in changes.items() if current.get(key) is not value}
        current.update(changes)
        customer.consent_preferences = current
        customer.updated_at = timezone.now()
        customer.save(update_fields=['consent_preferences', 'updated_at'])

        for category, granted in changed.items():
            log_event(
                AuditEventType.CONSENT_GRANTED if granted else AuditEventType.CONSENT_REVOKED,
                customer_id=customer_id,
                user_id=by,
                details={
                    'action': f"{category} consent {'granted' if granted else 'revoked'}",
                    'consentType': category,
                    'method': method,
                },
                request=request,
            )

    logger.info(
        "Consent preferences updated for customer %s via %s: %s",
        customer_id, method, changed or "no changes",
    )
    return _preferences_view(customer)
