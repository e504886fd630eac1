"""Tests for the agreement store backends."""
from unittest import mock

import pytest
from django.db import DatabaseError

from django_agreements.conf import get_store, load_store
from django_agreements.exceptions import (
    DuplicateKey,
    ImmutableAuditEntryError,
    InvalidStatusTransition,
    NotFound,
    StoreLoadError,
    StoreUnavailable,
)
from django_agreements.models import Agreement, AgreementAuditEntry
from django_agreements.stores.base import AgreementFilter
from django_agreements.stores.memory import InMemoryAgreementStore
from django_agreements.stores.orm import DjangoAgreementStore
from django_agreements.validators import validate_agreement


CREATE = {'action': 'create', 'by': 'tester', 'changedFields': []}
UPDATE = {'action': 'update', 'by': 'tester', 'changedFields': ['name']}


@pytest.fixture(params=['memory', 'orm'])
def store(request, db):
    if request.param == 'memory':
        return InMemoryAgreementStore()
    return DjangoAgreementStore()


@pytest.fixture
def record(valid_payload):
    return validate_agreement(valid_payload)


class TestAgreementStoreContract:
    """Behaviour shared by every store backend."""

    def test_create_assigns_system_fields(self, store, record):
        created = store.create(record, CREATE)

        assert created['id']
        assert created['createdAt'] is not None
        assert created['status'] == 'in process'
        assert 'updatedAt' not in created
        assert [e['action'] for e in created['auditLog']] == ['create']
        assert created['auditLog'][0]['by'] == 'tester'

    def test_created_ids_are_unique(self, store, record):
        first = store.create(record, CREATE)
        second = store.create(record, CREATE)

        assert first['id'] != second['id']

    def test_round_trip_preserves_payload(self, store, record):
        created = store.create(record, CREATE)
        fetched = store.get(created['id'])

        for key, value in record.items():
            assert fetched[key] == value

    def test_duplicate_id_rejected(self, store, record):
        record['id'] = 'agr-1'
        store.create(record, CREATE)

        with pytest.raises(DuplicateKey):
            store.create(record, CREATE)

    def test_get_unknown_raises_not_found(self, store):
        with pytest.raises(NotFound):
            store.get('missing')

    def test_update_merges_and_appends_audit(self, store, record):
        created = store.create(record, CREATE)

        updated = store.update(created['id'], {'name': 'X'}, UPDATE)

        assert updated['name'] == 'X'
        assert updated['updatedAt'] is not None
        assert updated['createdAt'] == created['createdAt']
        assert updated['agreementType'] == created['agreementType']
        assert updated['items'] == created['items']
        assert len(updated['auditLog']) == 2
        assert updated['auditLog'][0] == created['auditLog'][0]
        assert updated['auditLog'][1]['changedFields'] == ['name']

    def test_update_none_clears_optional_field(self, store, record):
        created = store.create(record, CREATE)

        updated = store.update(created['id'], {'description': None}, UPDATE)

        assert 'description' not in updated

    def test_update_replaces_parties(self, store, record):
        created = store.create(record, CREATE)
        parties = [{'id': 'p2', 'role': 'reseller', 'referredType': 'Organization'}]

        updated = store.update(created['id'], {'engagedParties': parties}, UPDATE)

        assert updated['engagedParties'] == parties
        assert updated['relatedParties'] == created['relatedParties']

    def test_update_unknown_raises_not_found(self, store):
        with pytest.raises(NotFound):
            store.update('missing', {'name': 'X'}, UPDATE)

    def test_update_applies_when_status_matches_expected(self, store, record):
        created = store.create(record, CREATE)

        updated = store.update(created['id'], {'status': 'active'}, UPDATE, expected_status='in process')

        assert updated['status'] == 'active'

    def test_update_rejected_when_status_moved_on(self, store, record):
        created = store.create(record, CREATE)
        store.update(created['id'], {'status': 'active'}, UPDATE)
        store.update(created['id'], {'status': 'terminated'}, UPDATE)

        with pytest.raises(InvalidStatusTransition) as exc_info:
            store.update(created['id'], {'status': 'suspended'}, UPDATE, expected_status='active')

        assert (exc_info.value.from_status, exc_info.value.to_status) == ('terminated', 'suspended')
        current = store.get(created['id'])
        assert current['status'] == 'terminated'
        assert len(current['auditLog']) == 3

    def test_delete_then_get_raises_not_found(self, store, record):
        created = store.create(record, CREATE)

        store.delete(created['id'])

        with pytest.raises(NotFound):
            store.get(created['id'])

    def test_delete_unknown_raises_not_found(self, store):
        with pytest.raises(NotFound):
            store.delete('missing')

    def test_list_pages_in_insertion_order(self, store, record):
        ids = [store.create(record, CREATE)['id'] for _ in range(5)]

        pages = [store.list(AgreementFilter(), 2, offset) for offset in (0, 2, 4)]

        assert [len(records) for records, _ in pages] == [2, 2, 1]
        assert all(total == 5 for _, total in pages)
        assert [r['id'] for records, _ in pages for r in records] == ids

    def test_list_filters(self, store, record):
        store.create(record, CREATE)
        other = dict(record, agreementType='Partnership Agreement')
        other['engagedParties'] = [{'id': 'p9', 'role': 'partner', 'referredType': 'Organization'}]
        store.create(other, CREATE)

        by_type, total = store.list(AgreementFilter(agreement_type='Partnership Agreement'), 10, 0)
        assert total == 1 and by_type[0]['agreementType'] == 'Partnership Agreement'

        by_party, total = store.list(AgreementFilter(engaged_party_id='p1'), 10, 0)
        assert total == 1 and by_party[0]['engagedParties'][0]['id'] == 'p1'

        by_status, total = store.list(AgreementFilter(status='active'), 10, 0)
        assert total == 0 and by_status == []


class TestInMemoryAgreementStore:

    def test_returned_records_are_copies(self, record):
        store = InMemoryAgreementStore()
        created = store.create(record, CREATE)
        created['auditLog'].clear()
        created['name'] = 'Tampered'

        fetched = store.get(created['id'])

        assert fetched['name'] == record['name']
        assert len(fetched['auditLog']) == 1

    def test_clear(self, record):
        store = InMemoryAgreementStore()
        store.create(record, CREATE)

        store.clear()

        assert store.list(AgreementFilter(), 10, 0) == ([], 0)


@pytest.mark.django_db
class TestDjangoAgreementStore:

    def test_delete_cascades_to_parties_and_audit(self, record):
        store = DjangoAgreementStore()
        created = store.create(record, CREATE)

        store.delete(created['id'])

        assert not Agreement.objects.exists()
        assert not AgreementAuditEntry.objects.exists()

    def test_audit_entries_are_immutable(self, record):
        store = DjangoAgreementStore()
        store.create(record, CREATE)
        entry = AgreementAuditEntry.objects.get()
        entry.by = 'someone else'

        with pytest.raises(ImmutableAuditEntryError):
            entry.save()

    def test_database_errors_surface_as_store_unavailable(self, caplog):
        store = DjangoAgreementStore()

        with mock.patch.object(Agreement.objects, 'prefetch_related', side_effect=DatabaseError('down')):
            with pytest.raises(StoreUnavailable) as exc_info:
                store.get('any')

        assert isinstance(exc_info.value.original_error, DatabaseError)
        assert "Agreement store operation 'get' failed" in caplog.text


class TestStoreLoading:

    def test_default_store_is_orm(self):
        assert isinstance(get_store(), DjangoAgreementStore)

    def test_store_setting_selects_backend(self, settings):
        settings.AGREEMENTS_STORE = 'django_agreements.stores.memory.InMemoryAgreementStore'

        assert isinstance(get_store(), InMemoryAgreementStore)

    @pytest.mark.parametrize(
        'path',
        [
            'nodots',
            'django_agreements.stores.missing.Store',
            'django_agreements.stores.memory.Missing',
            'django_agreements.exceptions.NotFound',
        ],
    )
    def test_bad_store_paths_raise(self, path):
        with pytest.raises(StoreLoadError):
            load_store(path)
