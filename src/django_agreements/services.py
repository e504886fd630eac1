"""Agreement service layer.

All write operations go through these functions.
Calling a store directly bypasses validation and audit events and is
unsupported.

Functions:
- create_agreement(): Validate and persist a new agreement
- get_agreement(): Fetch one agreement
- list_agreements(): Filtered, paginated listing
- update_agreement(): Validate and apply a partial update
- transition_agreement(): Move an agreement to another status
- delete_agreement(): Hard-delete an agreement
- get_allowed_transitions(): Statuses reachable from the current one

Every function accepts an optional ``store``; when omitted the store
configured by AGREEMENTS_STORE is used. Each write and its audit event
commit together: if the event cannot be recorded the write is rolled back
(ORM store).
"""

import logging
from dataclasses import dataclass

from django.db import transaction

from django_audit_log import log_event
from django_audit_log.models import AuditEventType

from . import status as agreement_status
from .conf import get_base_path, get_default_page_size, get_max_page_size, get_store
from .exceptions import AgreementValidationError
from .stores.base import AgreementFilter
from .validators import validate_agreement, validate_agreement_patch

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = 'system'


@dataclass
class AgreementPage:
    """One page of agreements in insertion order."""

    items: list
    total_count: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total_count


def _resolve_store(store):
    return store if store is not None else get_store()


def _project(record: dict) -> dict:
    """Add the resource href to a stored record."""
    record['href'] = f"{get_base_path()}/{record['id']}"
    return record


def create_agreement(payload, by: str = SYSTEM_ACTOR, store=None, request=None) -> dict:
    """
    Validate and create an agreement.

    Args:
        payload: Candidate agreement (wire shape, TMF651 aliases accepted)
        by: Who is creating it (recorded in the audit log)
        store: Store to use (defaults to the configured store)
        request: HTTP request, for audit event context

    Returns:
        The stored record with id, createdAt, status and auditLog set

    Raises:
        AgreementValidationError: If the payload is invalid (nothing is stored)
        DuplicateKey: If a caller-supplied id is already taken
    """
    data = validate_agreement(payload)
    store = _resolve_store(store)

    with transaction.atomic():
        record = store.create(data, {'action': 'create', 'by': by, 'changedFields': []})
        log_event(
            AuditEventType.AGREEMENT_CREATED,
            agreement_id=record['id'],
            user_id=by,
            details={
                'action': f"Agreement '{record['name']}' created",
                'agreementType': record['agreementType'],
            },
            request=request,
        )
    logger.info("Agreement %s created by %s", record['id'], by)
    return _project(record)


def get_agreement(agreement_id: str, store=None) -> dict:
    """
    Get an agreement by id.

    Raises:
        NotFound: If no agreement has this id
    """
    return _project(_resolve_store(store).get(agreement_id))


def list_agreements(
    status: str = None,
    engaged_party_id: str = None,
    agreement_type: str = None,
    limit: int = None,
    offset: int = 0,
    store=None,
) -> AgreementPage:
    """
    List agreements matching the optional filters, in insertion order.

    Raises:
        AgreementValidationError: For an unknown status filter or a limit or
            offset out of range
    """
    if limit is None:
        limit = get_default_page_size()

    errors = {}
    if status is not None and not agreement_status.is_valid_status(status):
        errors['status'] = [f"Must be one of: {', '.join(agreement_status.AgreementStatus.values)}."]
    if not 1 <= limit <= get_max_page_size():
        errors['limit'] = [f"Must be between 1 and {get_max_page_size()}."]
    if offset < 0:
        errors['offset'] = ["Must be zero or greater."]
    if errors:
        raise AgreementValidationError(errors)

    filters = AgreementFilter(
        status=status,
        engaged_party_id=engaged_party_id,
        agreement_type=agreement_type,
    )
    records, total = _resolve_store(store).list(filters, limit, offset)
    return AgreementPage(
        items=[_project(r) for r in records],
        total_count=total,
        limit=limit,
        offset=offset,
    )


def update_agreement(agreement_id: str, payload, by: str = SYSTEM_ACTOR, store=None, request=None) -> dict:
    """
    Apply a partial update.

    Provided fields replace the stored ones wholesale (nested objects such as
    ``period`` are not deep-merged). updatedAt is set and an audit entry
    listing the changed fields is appended, even when nothing differs.

    A status change is checked against the status read here and applied
    only if the stored status is still the same when the store writes it.

    Raises:
        AgreementValidationError: If the patch is invalid
        NotFound: If no agreement has this id
        InvalidStatusTransition: If the status change is not allowed, or the
            status changed concurrently
    """
    changes = validate_agreement_patch(payload)
    store = _resolve_store(store)

    current = store.get(agreement_id)
    expected_status = None
    if 'status' in changes:
        agreement_status.check_transition(current['status'], changes['status'])
        expected_status = current['status']

    changed_fields = sorted(key for key, value in changes.items() if current.get(key) != value)
    with transaction.atomic():
        record = store.update(
            agreement_id,
            changes,
            {'action': 'update', 'by': by, 'changedFields': changed_fields},
            expected_status=expected_status,
        )

        details = {
            'action': f"Agreement '{record['name']}' updated",
            'changedFields': changed_fields,
        }
        if 'status' in changed_fields:
            details['fromStatus'] = current['status']
            details['toStatus'] = record['status']
        log_event(
            AuditEventType.AGREEMENT_UPDATED,
            agreement_id=agreement_id,
            user_id=by,
            details=details,
            request=request,
        )
    logger.info("Agreement %s updated by %s: %s", agreement_id, by, ", ".join(changed_fields) or "no changes")
    return _project(record)


def transition_agreement(agreement_id: str, to_status: str, by: str = SYSTEM_ACTOR, store=None, request=None) -> dict:
    """Move an agreement to ``to_status`` (see status.TRANSITIONS)."""
    return update_agreement(agreement_id, {'status': to_status}, by=by, store=store, request=request)


def get_allowed_transitions(agreement_id: str, store=None) -> list[str]:
    """Statuses the agreement may move to next."""
    record = _resolve_store(store).get(agreement_id)
    return agreement_status.get_allowed_transitions(record['status'])


def delete_agreement(agreement_id: str, by: str = SYSTEM_ACTOR, store=None, request=None) -> None:
    """
    Hard-delete an agreement.

    The record and its audit log are removed; the deletion itself is kept
    as an AgreementDeleted audit event.

    Raises:
        NotFound: If no agreement has this id
    """
    store = _resolve_store(store)
    record = store.get(agreement_id)
    with transaction.atomic():
        store.delete(agreement_id)
        log_event(
            AuditEventType.AGREEMENT_DELETED,
            agreement_id=agreement_id,
            user_id=by,
            details={
                'action': f"Agreement '{record['name']}' deleted",
                'agreementType': record['agreementType'],
                'status': record['status'],
            },
            request=request,
        )
    logger.info("Agreement %s deleted by %s", agreement_id, by)
