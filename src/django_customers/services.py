"""Customer service layer.

Functions:
- create_customer(): Validate and create a customer
- get_customer(): Fetch one customer
- list_customers(): Paginated listing
- update_customer(): Partial update of profile fields
- get_customer_stats(): Dashboard counts and consent opt-in rates
- serialize_customer(): Wire representation

Consent preferences are changed through django_consent.services.
"""

import logging
import uuid
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.utils import timezone

from django_audit_log import log_event
from django_audit_log.models import AuditEventType
from django_consent.categories import default_preferences, validate_preference_changes
from django_consent.exceptions import ConsentValidationError

from .conf import get_default_language, get_default_page_size, get_id_prefix, get_max_page_size
from .exceptions import CustomerNotFound, CustomerValidationError
from .models import Customer, CustomerStatus

logger = logging.getLogger(__name__)

READ_ONLY_FIELDS = ('id', 'createdAt', 'updatedAt')

# wire name -> model field, for fields editable through update_customer()
PROFILE_FIELDS = {
    'name': 'name',
    'email': 'email',
    'phone': 'phone',
    'preferredLanguage': 'preferred_language',
    'status': 'status',
}

STATS_CATEGORIES = ('marketing', 'analytics', 'thirdPartySharing')


@dataclass
class CustomerPage:
    customers: list
    total_count: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total_count


def percentage(count: int, total: int) -> int:
    """Whole-number percentage, halves rounded up; 0 when total is 0."""
    if not total:
        return 0
    return (count * 200 + total) // (total * 2)


def serialize_customer(customer: Customer) -> dict:
    return {
        'id': customer.customer_id,
        'name': customer.name,
        'email': customer.email,
        'phone': customer.phone,
        'preferredLanguage': customer.preferred_language,
        'consentPreferences': customer.consent_preferences,
        'status': customer.status,
        'createdAt': customer.created_at,
        'updatedAt': customer.updated_at,
    }


def _validate_profile(data: dict, errors: dict, partial: bool) -> dict:
    cleaned = {}
    for wire_name, field in PROFILE_FIELDS.items():
        if wire_name not in data:
            continue
        value = data[wire_name]
        if value is None:
            value = ''
        if not isinstance(value, str):
            errors[wire_name] = ["Must be a string."]
            continue
        value = value.strip()
        cleaned[field] = value

    if 'name' in cleaned and not cleaned['name']:
        errors['name'] = ["This field may not be blank."]
    if not partial and 'name' not in cleaned:
        errors['name'] = ["This field is required."]
    if cleaned.get('email'):
        try:
            validate_email(cleaned['email'])
        except ValidationError:
            errors['email'] = ["Enter a valid email address."]
    if 'preferred_language' in cleaned and not cleaned['preferred_language']:
        errors['preferredLanguage'] = ["This field may not be blank."]
    if 'status' in cleaned and cleaned['status'] not in CustomerStatus.values:
        errors['status'] = [f"Must be one of: {', '.join(CustomerStatus.values)}."]
    return cleaned


def create_customer(payload, by: str = None, request=None) -> Customer:
    """
    Create a customer.

    Consent preferences start from the category defaults; any supplied ones
    are validated and merged on top.

    Raises:
        CustomerValidationError: For missing name, bad email or bad preferences
    """
    if not isinstance(payload, dict):
        raise CustomerValidationError({'payload': ["Expected a JSON object."]})

    errors = {}
    for key in payload:
        if key in READ_ONLY_FIELDS:
            errors[key] = ["This field is read-only."]
        elif key not in PROFILE_FIELDS and key != 'consentPreferences':
            errors[key] = ["Unknown field."]
    fields = _validate_profile(payload, errors, partial=False)

    preferences = default_preferences()
    if payload.get('consentPreferences') is not None:
        try:
            preferences.update(validate_preference_changes(payload['consentPreferences']))
        except ConsentValidationError as e:
            for key, messages in e.errors.items():
                errors[f"consentPreferences.{key}"] = messages
    if errors:
        raise CustomerValidationError(errors)

    fields.setdefault('preferred_language', get_default_language())
    customer = Customer.objects.create(
        customer_id=f"{get_id_prefix()}{uuid.uuid4().hex[:12]}",
        consent_preferences=preferences,
        **fields,
    )
    logger.info("Customer %s created", customer.customer_id)

    log_event(
        AuditEventType.CUSTOMER_CREATED,
        customer_id=customer.customer_id,
        user_id=by,
        details={'action': f"Customer '{customer.name}' created"},
        request=request,
    )
    return customer


def get_customer(customer_id: str) -> Customer:
    """Get a customer or raise CustomerNotFound."""
    try:
        return Customer.objects.get(customer_id=customer_id)
    except Customer.DoesNotExist:
        raise CustomerNotFound(customer_id)


def list_customers(limit: int = None, offset: int = 0, status: str = None) -> CustomerPage:
    """
    Paginated customers in creation order.

    Raises:
        CustomerValidationError: For a limit or offset out of range
    """
    if limit is None:
        limit = get_default_page_size()
    errors = {}
    if not 1 <= limit <= get_max_page_size():
        errors['limit'] = [f"Must be between 1 and {get_max_page_size()}."]
    if offset < 0:
        errors['offset'] = ["Must be zero or greater."]
    if errors:
        raise CustomerValidationError(errors)

    queryset = Customer.objects.all()
    if status:
        queryset = queryset.filter(status=status)
    return CustomerPage(
        customers=list(queryset[offset:offset + limit]),
        total_count=queryset.count(),
        limit=limit,
        offset=offset,
    )


def update_customer(customer_id: str, payload, by: str = None, request=None) -> Customer:
    """
    Update profile fields (name, email, phone, preferredLanguage, status).

    Raises:
        CustomerNotFound: If the customer does not exist
        CustomerValidationError: For read-only, unknown or invalid fields
    """
    if not isinstance(payload, dict) or not payload:
        raise CustomerValidationError({'payload': ["Expected a non-empty JSON object."]})

    errors = {}
    for key in payload:
        if key in READ_ONLY_FIELDS:
            errors[key] = ["This field is read-only."]
        elif key == 'consentPreferences':
            errors[key] = ["Update consent preferences through the consents endpoint."]
        elif key not in PROFILE_FIELDS:
            errors[key] = ["Unknown field."]
    fields = _validate_profile(payload, errors, partial=True)
    if errors:
        raise CustomerValidationError(errors)

    with transaction.atomic():
        try:
            customer = Customer.objects.select_for_update().get(customer_id=customer_id)
        except Customer.DoesNotExist:
            raise CustomerNotFound(customer_id)

        changed = sorted(
            wire_name for wire_name, field in PROFILE_FIELDS.items()
            if field in fields and getattr(customer, field) != fields[field]
        )
        for field, value in fields.items():
            setattr(customer, field, value)
        customer.updated_at = timezone.now()
        customer.save()

    logger.info("Customer %s updated: %s", customer_id, ", ".join(changed) or "no changes")
    log_event(
        AuditEventType.CUSTOMER_UPDATED,
        customer_id=customer_id,
        user_id=by,
        details={'action': f"Customer '{customer.name}' updated", 'changedFields': changed},
        request=request,
    )
    return customer


def get_customer_stats() -> dict:
    """Customer totals and opt-in rates for the optional consent categories."""
    total = Customer.objects.count()
    active = Customer.objects.filter(status=CustomerStatus.ACTIVE).count()

    opt_ins = dict.fromkeys(STATS_CATEGORIES, 0)
    for preferences in Customer.objects.values_list('consent_preferences', flat=True):
        for category in STATS_CATEGORIES:
            if (preferences or {}).get(category) is True:
                opt_ins[category] += 1

    return {
        'totalCustomers': total,
        'activeCustomers': active,
        'consentStats': {
            category: {'optIns': count, 'percentage': percentage(count, total)}
            for category, count in opt_ins.items()
        },
    }
