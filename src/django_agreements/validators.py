"""
Validation layer for agreement payloads.

Pure functions: no database access, no side effects. Every violation is
collected into a ``{field_path: [messages]}`` dict so callers can report all
problems at once; ``AgreementValidationError`` is raised only at the end.

Write paths:
    validate_agreement(payload)        -> normalised creation payload
    validate_agreement_patch(payload)  -> normalised partial update
"""

import re
from datetime import datetime, time, timezone as dt_timezone
from urllib.parse import urlsplit

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .exceptions import AgreementValidationError
from .status import INITIAL_STATUS, AgreementStatus, is_valid_status


REQUIRED = "This field is required."
NOT_NULL = "This field may not be null."

READ_ONLY_FIELDS = ('id', 'href', 'createdAt', 'updatedAt', 'auditLog')

# TMF651 wire names accepted on input, mapped to the canonical names.
TMF_ALIASES = {
    'agreementItem': 'items',
    'agreementPeriod': 'period',
    'agreementSpecification': 'specification',
    'engagedParty': 'engagedParties',
    'relatedParty': 'relatedParties',
    'productOffering': 'productOfferings',
    'termOrCondition': 'terms',
    'validFor': 'validPeriod',
    'startDateTime': 'start',
    'endDateTime': 'end',
    '@referredType': 'referredType',
}

PARTY_REFERRED_TYPES = ('Organization', 'Individual')

# Column bounds of the agreement tables.
MAX_ID_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_TYPE_LENGTH = 100
MAX_VERSION_LENGTH = 50
MAX_ROLE_LENGTH = 100
MAX_URI_LENGTH = 500
MIN_DOCUMENT_NUMBER = -2 ** 63
MAX_DOCUMENT_NUMBER = 2 ** 63 - 1

_SCHEME_RE = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]*$')
# Ids become a single URL path segment.
_ID_RE = re.compile(r'^[A-Za-z0-9._~-]+$')


def _add(errors, path, message):
    errors.setdefault(path, []).append(message)


def normalize_aliases(value):
    """Rename TMF651 keys to canonical names, recursively.

    A canonical key already present wins over its alias.
    """
    if isinstance(value, list):
        return [normalize_aliases(v) for v in value]
    if not isinstance(value, dict):
        return value
    result = {}
    for key, item in value.items():
        canonical = TMF_ALIASES.get(key, key)
        if canonical != key and canonical in value:
            continue
        result[canonical] = normalize_aliases(item)
    return result


def is_uri(value) -> bool:
    """Well-formed absolute URI: a scheme followed by a non-empty remainder."""
    if not isinstance(value, str) or not value or any(c.isspace() for c in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    if not parts.scheme or not _SCHEME_RE.match(parts.scheme):
        return False
    return bool(parts.netloc or parts.path)


def parse_timestamp(value):
    """Parse an ISO-8601 date or date-time string into an aware datetime.

    Returns None when the value is not a valid timestamp.
    """
    if not isinstance(value, str):
        return None
    try:
        parsed = parse_datetime(value)
        if parsed is None:
            day = parse_date(value)
            if day is None:
                return None
            parsed = datetime.combine(day, time.min)
    except ValueError:
        return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    """ISO-8601 in UTC with a Z suffix, e.g. 2024-01-01T00:00:00Z."""
    return value.astimezone(dt_timezone.utc).isoformat().replace('+00:00', 'Z')


# =============================================================================
# Field helpers
# =============================================================================

def _check_keys(data, allowed, path, errors):
    for key in data:
        if key not in allowed:
            _add(errors, f"{path}.{key}" if path else key, "Unknown field.")


def _string(data, key, path, errors, required=False, max_length=None):
    value = data.get(key)
    if value is None:
        if required:
            _add(errors, path, REQUIRED)
        return None
    if not isinstance(value, str) or not value.strip():
        _add(errors, path, "Must be a non-empty string.")
        return None
    if max_length is not None and len(value) > max_length:
        _add(errors, path, f"Must be at most {max_length} characters.")
        return None
    return value


def _uri(data, key, path, errors, required=False, max_length=None):
    value = data.get(key)
    if value is None:
        if required:
            _add(errors, path, REQUIRED)
        return None
    if not is_uri(value):
        _add(errors, path, "Must be a well-formed URI.")
        return None
    if max_length is not None and len(value) > max_length:
        _add(errors, path, f"Must be at most {max_length} characters.")
        return None
    return value


def _timestamp(data, key, path, errors, required=False):
    value = data.get(key)
    if value is None:
        if required:
            _add(errors, path, REQUIRED)
        return None, None
    parsed = parse_timestamp(value)
    if parsed is None:
        _add(errors, path, "Must be a valid ISO-8601 date-time.")
        return None, None
    return format_timestamp(parsed), parsed


def _object(value, path, errors):
    if not isinstance(value, dict):
        _add(errors, path, "Must be an object.")
        return None
    return value


def _non_empty_list(value, path, errors):
    if not isinstance(value, list):
        _add(errors, path, "Must be a list.")
        return None
    if not value:
        _add(errors, path, "Must contain at least one element.")
        return None
    return value


def _period(value, path, errors, start_required=True):
    """Validate {start, end?}; end may not precede start."""
    data = _object(value, path, errors)
    if data is None:
        return None
    _check_keys(data, ('start', 'end'), path, errors)
    start, start_at = _timestamp(data, 'start', f"{path}.start", errors, required=start_required)
    end, end_at = _timestamp(data, 'end', f"{path}.end", errors)
    if start_at and end_at and end_at < start_at:
        _add(errors, f"{path}.end", "Must not be before start.")
    period = {}
    if start is not None:
        period['start'] = start
    if end is not None:
        period['end'] = end
    return period


# =============================================================================
# Nested structures
# =============================================================================

def _product_offering(value, path, errors):
    data = _object(value, path, errors)
    if data is None:
        return None
    _check_keys(data, ('id', 'name', 'href', 'referredType'), path, errors)
    referred_type = data.get('referredType', 'ProductOffering')
    if referred_type != 'ProductOffering':
        _add(errors, f"{path}.referredType", "Must be 'ProductOffering'.")
    return {
        'id': _string(data, 'id', f"{path}.id", errors, required=True),
        'name': _string(data, 'name', f"{path}.name", errors, required=True),
        'href': _uri(data, 'href', f"{path}.href", errors, required=True),
        'referredType': referred_type,
    }


def _term(value, path, errors):
    data = _object(value, path, errors)
    if data is None:
        return None
    _check_keys(data, ('id', 'description', 'validPeriod'), path, errors)
    term = {}
    term_id = _string(data, 'id', f"{path}.id", errors)
    if term_id is not None:
        term['id'] = term_id
    description = _string(data, 'description', f"{path}.description", errors)
    if description is not None:
        term['description'] = description
    if data.get('validPeriod') is not None:
        term['validPeriod'] = _period(data['validPeriod'], f"{path}.validPeriod", errors)
    return term


def _item(value, path, errors):
    data = _object(value, path, errors)
    if data is None:
        return None
    _check_keys(data, ('productOfferings', 'terms'), path, errors)

    offerings = []
    if data.get('productOfferings') is None:
        _add(errors, f"{path}.productOfferings", REQUIRED)
    else:
        raw = _non_empty_list(data['productOfferings'], f"{path}.productOfferings", errors)
        for i, offering in enumerate(raw or []):
            offerings.append(_product_offering(offering, f"{path}.productOfferings[{i}]", errors))

    terms = []
    raw_terms = data.get('terms')
    if raw_terms is not None:
        if not isinstance(raw_terms, list):
            _add(errors, f"{path}.terms", "Must be a list.")
        else:
            for i, term in enumerate(raw_terms):
                terms.append(_term(term, f"{path}.terms[{i}]", errors))

    return {'productOfferings': offerings, 'terms': terms}


def _party(value, path, errors):
    data = _object(value, path, errors)
    if data is None:
        return None
    _check_keys(data, ('id', 'name', 'role', 'href', 'referredType'), path, errors)
    referred_type = data.get('referredType', 'Organization')
    if referred_type not in PARTY_REFERRED_TYPES:
        _add(
            errors,
            f"{path}.referredType",
            f"Must be one of: {', '.join(PARTY_REFERRED_TYPES)}.",
        )
    party = {
        'id': _string(data, 'id', f"{path}.id", errors, required=True, max_length=MAX_ID_LENGTH),
        'role': _string(data, 'role', f"{path}.role", errors, required=True, max_length=MAX_ROLE_LENGTH),
        'referredType': referred_type,
    }
    name = _string(data, 'name', f"{path}.name", errors, max_length=MAX_NAME_LENGTH)
    if name is not None:
        party['name'] = name
    href = _uri(data, 'href', f"{path}.href", errors, max_length=MAX_URI_LENGTH)
    if href is not None:
        party['href'] = href
    return party


def _specification(value, path, errors):
    data = _object(value, path, errors)
    if data is None:
        return None
    _check_keys(data, ('id', 'name', 'href', 'referredType'), path, errors)
    referred_type = data.get('referredType', 'AgreementSpecification')
    if referred_type != 'AgreementSpecification':
        _add(errors, f"{path}.referredType", "Must be 'AgreementSpecification'.")
    return {
        'id': _string(data, 'id', f"{path}.id", errors, required=True),
        'name': _string(data, 'name', f"{path}.name", errors, required=True),
        'href': _uri(data, 'href', f"{path}.href", errors, required=True),
        'referredType': referred_type,
    }


# =============================================================================
# Top-level fields
# =============================================================================

def _validate_items(value, path, errors):
    items = _non_empty_list(value, path, errors)
    return [_item(item, f"{path}[{i}]", errors) for i, item in enumerate(items or [])]


def _validate_parties(value, path, errors):
    parties = _non_empty_list(value, path, errors)
    return [_party(party, f"{path}[{i}]", errors) for i, party in enumerate(parties or [])]


def _validate_document_number(value, path, errors):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _add(errors, path, "Must be an integer.")
        return None
    if isinstance(value, float):
        if not value.is_integer():
            _add(errors, path, "Must be an integer.")
            return None
        value = int(value)
    if not MIN_DOCUMENT_NUMBER <= value <= MAX_DOCUMENT_NUMBER:
        _add(errors, path, "Must be a 64-bit integer.")
        return None
    return value


def _validate_id(value, path, errors):
    value = _string({'v': value}, 'v', path, errors, max_length=MAX_ID_LENGTH)
    if value is None:
        return None
    if not _ID_RE.match(value) or value in ('.', '..'):
        _add(errors, path, "May only contain letters, digits and '.', '_', '~', '-'.")
        return None
    return value


def _validate_status(value, path, errors):
    if not is_valid_status(value):
        _add(errors, path, f"Must be one of: {', '.join(AgreementStatus.values)}.")
        return None
    return value


def _text(max_length=None):
    def validate(value, path, errors):
        return _string({'v': value}, 'v', path, errors, max_length=max_length)
    return validate


def _uri_value(value, path, errors):
    return _uri({'v': value}, 'v', path, errors, max_length=MAX_URI_LENGTH)


# field name -> (validator, required on create, default on create)
FIELDS = {
    'name': (_text(MAX_NAME_LENGTH), True, None),
    'agreementType': (_text(MAX_TYPE_LENGTH), True, None),
    'description': (_text(), False, None),
    'statementOfIntent': (_text(), False, None),
    'version': (_text(MAX_VERSION_LENGTH), False, '1.0'),
    'documentNumber': (_validate_document_number, False, None),
    'items': (_validate_items, True, None),
    'period': (_period, False, None),
    'specification': (_specification, False, None),
    'engagedParties': (_validate_parties, True, None),
    'relatedParties': (_validate_parties, True, None),
    'status': (_validate_status, False, INITIAL_STATUS),
    '@type': (_text(MAX_TYPE_LENGTH), False, 'Agreement'),
    '@baseType': (_text(MAX_TYPE_LENGTH), False, None),
    '@schemaLocation': (_uri_value, False, None),
}


def _as_payload(payload, errors):
    if not isinstance(payload, dict):
        _add(errors, 'payload', "Expected a JSON object.")
        return None
    return normalize_aliases(payload)


def validate_agreement(payload) -> dict:
    """
    Validate and normalise an agreement creation payload.

    A caller-supplied ``id`` is kept (the store checks uniqueness); other
    system-assigned fields are rejected. Defaults applied: ``version``
    '1.0', ``@type`` 'Agreement', ``status`` the initial status, and
    ``referredType`` on every reference. Period timestamps come back in
    UTC (``format_timestamp``); date-only values become midnight UTC.

    Raises:
        AgreementValidationError: listing every violated field
    """
    errors: dict[str, list[str]] = {}
    data = _as_payload(payload, errors)
    if data is None:
        raise AgreementValidationError(errors)

    allowed = set(FIELDS) | {'id'}
    for key in data:
        if key in READ_ONLY_FIELDS and key != 'id':
            _add(errors, key, "This field is read-only.")
        elif key not in allowed:
            _add(errors, key, "Unknown field.")

    result = {}
    if data.get('id') is not None:
        result['id'] = _validate_id(data['id'], 'id', errors)

    for field, (validator, required, default) in FIELDS.items():
        value = data.get(field)
        if value is None:
            if required:
                _add(errors, field, REQUIRED)
            elif default is not None:
                result[field] = default
            continue
        result[field] = validator(value, field, errors)

    if result.get('status') not in (None, INITIAL_STATUS):
        _add(errors, 'status', f"New agreements start in '{INITIAL_STATUS}'.")

    if errors:
        raise AgreementValidationError(errors)
    return result


def validate_agreement_patch(payload) -> dict:
    """
    Validate a partial update.

    Only the fields present are checked, with the same rules as creation.
    Optional fields may be cleared with null; required ones may not.
    Status values are checked for membership here and for reachability by
    the service layer.

    Raises:
        AgreementValidationError: listing every violated field
    """
    errors: dict[str, list[str]] = {}
    data = _as_payload(payload, errors)
    if data is None:
        raise AgreementValidationError(errors)
    if not data:
        _add(errors, 'payload', "No fields to update.")

    result = {}
    for field, value in data.items():
        if field in READ_ONLY_FIELDS:
            _add(errors, field, "This field is read-only.")
            continue
        if field not in FIELDS:
            _add(errors, field, "Unknown field.")
            continue
        validator, required, _default = FIELDS[field]
        if value is None:
            if required or field == 'status':
                _add(errors, field, NOT_NULL)
            else:
                result[field] = None
            continue
        result[field] = validator(value, field, errors)

    if errors:
        raise AgreementValidationError(errors)
    return result
