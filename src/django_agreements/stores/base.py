"""Base store interface for agreement persistence."""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class AgreementFilter:
    """Optional list filters; None means "don't filter"."""

    status: Optional[str] = None
    engaged_party_id: Optional[str] = None
    agreement_type: Optional[str] = None

    def matches(self, record: dict) -> bool:
        if self.status is not None and record.get('status') != self.status:
            return False
        if self.agreement_type is not None and record.get('agreementType') != self.agreement_type:
            return False
        if self.engaged_party_id is not None:
            party_ids = [p.get('id') for p in record.get('engagedParties', [])]
            if self.engaged_party_id not in party_ids:
                return False
        return True


class AgreementStore(ABC):
    """Abstract base class for agreement stores.

    Records are plain dicts shaped like the wire representation (camelCase
    keys, datetimes for createdAt/updatedAt/audit timestamps). Absent
    optional fields are omitted rather than stored as None.

    Stores own the system-assigned fields: ``id`` (unless supplied),
    ``createdAt``, ``updatedAt`` and audit entry timestamps. There is no way
    to rewrite the audit log; ``create`` and ``update`` each append exactly
    one entry.
    """

    store_name: str = "base"

    @abstractmethod
    def create(self, record: dict, audit_entry: dict) -> dict:
        """Persist a validated record and return it as stored.

        Raises:
            DuplicateKey: If record['id'] is already taken
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, agreement_id: str) -> dict:
        """Return the stored record.

        Raises:
            NotFound: If no record has this id
        """
        raise NotImplementedError

    @abstractmethod
    def list(self, filters: AgreementFilter, limit: int, offset: int) -> tuple[list[dict], int]:
        """Return (page of records in insertion order, total matching count)."""
        raise NotImplementedError

    @abstractmethod
    def update(self, agreement_id: str, changes: dict, audit_entry: dict, expected_status: str = None) -> dict:
        """Shallow-merge ``changes`` (None clears a field), stamp updatedAt
        and append ``audit_entry`` in one atomic step.

        When ``expected_status`` is given the update applies only if the
        stored status still equals it.

        Raises:
            NotFound: If no record has this id
            InvalidStatusTransition: If the stored status is not ``expected_status``
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, agreement_id: str) -> None:
        """Hard-delete the record.

        Raises:
            NotFound: If no record has this id
        """
        raise NotImplementedError


def new_agreement_id() -> str:
    return str(uuid.uuid4())


def compact(record: dict) -> dict:
    """Drop keys whose value is None."""
    return {key: value for key, value in record.items() if value is not None}
