"""Django ORM agreement store."""

import logging
from functools import wraps

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from ..exceptions import DuplicateKey, InvalidStatusTransition, NotFound, StoreUnavailable
from ..models import Agreement, AgreementAuditEntry, AgreementParty
from .base import AgreementFilter, AgreementStore, compact, new_agreement_id

logger = logging.getLogger(__name__)


# wire name -> Agreement column
FIELD_MAP = {
    'name': 'name',
    'agreementType': 'agreement_type',
    'description': 'description',
    'statementOfIntent': 'statement_of_intent',
    'version': 'version',
    'documentNumber': 'document_number',
    'items': 'items',
    'period': 'period',
    'specification': 'specification',
    'status': 'status',
    '@type': 'type_tag',
    '@baseType': 'base_type',
    '@schemaLocation': 'schema_location',
}

PARTY_FIELDS = {
    'engagedParties': AgreementParty.Relation.ENGAGED.value,
    'relatedParties': AgreementParty.Relation.RELATED.value,
}


def _translate_db_errors(func):
    """Surface database failures as StoreUnavailable."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as e:
            logger.exception("Agreement store operation '%s' failed", func.__name__)
            raise StoreUnavailable(str(e), original_error=e) from e

    return wrapper


class DjangoAgreementStore(AgreementStore):
    """Store backed by the Agreement, AgreementParty and AgreementAuditEntry tables."""

    store_name = "orm"

    @_translate_db_errors
    def create(self, record: dict, audit_entry: dict) -> dict:
        agreement_id = record.get('id') or new_agreement_id()
        now = timezone.now()

        with transaction.atomic():
            if Agreement.objects.filter(agreement_id=agreement_id).exists():
                raise DuplicateKey(agreement_id)

            agreement = Agreement(agreement_id=agreement_id, created_at=now)
            self._apply_fields(agreement, record)
            try:
                with transaction.atomic():
                    agreement.save()
            except IntegrityError:
                # Lost a race with a concurrent insert of the same id
                raise DuplicateKey(agreement_id)

            for key in PARTY_FIELDS:
                self._write_parties(agreement, key, record.get(key) or [])
            self._append_audit_entry(agreement, now, audit_entry)

        return self.get(agreement_id)

    @_translate_db_errors
    def get(self, agreement_id: str) -> dict:
        agreement = (
            Agreement.objects
            .prefetch_related('parties', 'audit_entries')
            .filter(agreement_id=agreement_id)
            .first()
        )
        if agreement is None:
            raise NotFound(agreement_id)
        return self._to_record(agreement)

    @_translate_db_errors
    def list(self, filters: AgreementFilter, limit: int, offset: int) -> tuple[list[dict], int]:
        queryset = Agreement.objects.all()
        if filters.status is not None:
            queryset = queryset.filter(status=filters.status)
        if filters.agreement_type is not None:
            queryset = queryset.filter(agreement_type=filters.agreement_type)
        if filters.engaged_party_id is not None:
            queryset = queryset.filter(
                parties__relation=AgreementParty.Relation.ENGAGED,
                parties__party_id=filters.engaged_party_id,
            ).distinct()

        total = queryset.count()
        page = queryset.order_by('pk').prefetch_related('parties', 'audit_entries')[offset:offset + limit]
        return [self._to_record(agreement) for agreement in page], total

    @_translate_db_errors
    def update(self, agreement_id: str, changes: dict, audit_entry: dict, expected_status: str = None) -> dict:
        with transaction.atomic():
            # Lock the row; concurrent updates apply one after the other
            try:
                agreement = Agreement.objects.select_for_update().get(agreement_id=agreement_id)
            except Agreement.DoesNotExist:
                raise NotFound(agreement_id)
            if expected_status is not None and agreement.status != expected_status:
                raise InvalidStatusTransition(agreement.status, changes.get('status'))

            now = timezone.now()
            self._apply_fields(agreement, changes)
            agreement.updated_at = now
            agreement.save()

            for key in PARTY_FIELDS:
                if key in changes:
                    self._write_parties(agreement, key, changes[key] or [], replace=True)
            self._append_audit_entry(agreement, now, audit_entry)

        return self.get(agreement_id)

    @_translate_db_errors
    def delete(self, agreement_id: str) -> None:
        deleted, _ = Agreement.objects.filter(agreement_id=agreement_id).delete()
        if not deleted:
            raise NotFound(agreement_id)

    # -------------------------------------------------------------------------
    # Row <-> record mapping
    # -------------------------------------------------------------------------

    def _apply_fields(self, agreement: Agreement, fields: dict) -> None:
        for wire_name, column in FIELD_MAP.items():
            if wire_name in fields:
                setattr(agreement, column, fields[wire_name])

    def _write_parties(self, agreement, key, parties, replace=False):
        relation = PARTY_FIELDS[key]
        if replace:
            agreement.parties.filter(relation=relation).delete()
        AgreementParty.objects.bulk_create([
            AgreementParty(
                agreement=agreement,
                relation=relation,
                position=position,
                party_id=party['id'],
                name=party.get('name'),
                role=party['role'],
                href=party.get('href'),
                referred_type=party.get('referredType', 'Organization'),
            )
            for position, party in enumerate(parties)
        ])

    def _append_audit_entry(self, agreement, timestamp, audit_entry):
        AgreementAuditEntry.objects.create(
            agreement=agreement,
            timestamp=timestamp,
            action=audit_entry['action'],
            by=audit_entry['by'],
            changed_fields=audit_entry.get('changedFields', []),
        )

    def _to_record(self, agreement: Agreement) -> dict:
        record = {'id': agreement.agreement_id}
        for wire_name, column in FIELD_MAP.items():
            record[wire_name] = getattr(agreement, column)

        parties = list(agreement.parties.all())
        for key, relation in PARTY_FIELDS.items():
            record[key] = [
                compact({
                    'id': party.party_id,
                    'name': party.name,
                    'role': party.role,
                    'href': party.href,
                    'referredType': party.referred_type,
                })
                for party in parties
                if party.relation == relation
            ]

        record['createdAt'] = agreement.created_at
        record['updatedAt'] = agreement.updated_at
        record['auditLog'] = [
            {
                'timestamp': entry.timestamp,
                'action': entry.action,
                'by': entry.by,
                'changedFields': entry.changed_fields,
            }
            for entry in agreement.audit_entries.all()
        ]
        return compact(record)
