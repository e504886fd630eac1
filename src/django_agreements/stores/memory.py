"""In-memory agreement store.

Keeps records in an insertion-ordered dict guarded by a lock. Returned
records are deep copies, so callers can never reach stored state.
"""

import copy
import threading

from django.utils import timezone

from ..exceptions import DuplicateKey, InvalidStatusTransition, NotFound
from .base import AgreementFilter, AgreementStore, compact, new_agreement_id


class InMemoryAgreementStore(AgreementStore):
    """Process-local store for tests and demos."""

    store_name = "memory"

    def __init__(self):
        self._records: dict[str, dict] = {}
        self._lock = threading.Lock()

    def create(self, record: dict, audit_entry: dict) -> dict:
        agreement_id = record.get('id') or new_agreement_id()
        now = timezone.now()
        with self._lock:
            if agreement_id in self._records:
                raise DuplicateKey(agreement_id)
            stored = compact(copy.deepcopy(record))
            stored['id'] = agreement_id
            stored['createdAt'] = now
            stored['auditLog'] = [{'timestamp': now, **copy.deepcopy(audit_entry)}]
            self._records[agreement_id] = stored
            return copy.deepcopy(stored)

    def get(self, agreement_id: str) -> dict:
        with self._lock:
            try:
                return copy.deepcopy(self._records[agreement_id])
            except KeyError:
                raise NotFound(agreement_id)

    def list(self, filters: AgreementFilter, limit: int, offset: int) -> tuple[list[dict], int]:
        with self._lock:
            matching = [r for r in self._records.values() if filters.matches(r)]
            page = matching[offset:offset + limit]
            return copy.deepcopy(page), len(matching)

    def update(self, agreement_id: str, changes: dict, audit_entry: dict, expected_status: str = None) -> dict:
        now = timezone.now()
        with self._lock:
            try:
                stored = self._records[agreement_id]
            except KeyError:
                raise NotFound(agreement_id)
            if expected_status is not None and stored['status'] != expected_status:
                raise InvalidStatusTransition(stored['status'], changes.get('status'))
            for key, value in changes.items():
                if value is None:
                    stored.pop(key, None)
                else:
                    stored[key] = copy.deepcopy(value)
            stored['updatedAt'] = now
            stored['auditLog'].append({'timestamp': now, **copy.deepcopy(audit_entry)})
            return copy.deepcopy(stored)

    def delete(self, agreement_id: str) -> None:
        with self._lock:
            try:
                del self._records[agreement_id]
            except KeyError:
                raise NotFound(agreement_id)

    def clear(self) -> None:
        """Drop every record."""
        with self._lock:
            self._records.clear()
