"""Shared fixtures for consent registry tests."""
import copy

import pytest

from django_agreements.conf import clear_store_cache
from django_agreements.stores.memory import InMemoryAgreementStore


VALID_AGREEMENT = {
    "name": "Data Processing Agreement",
    "agreementType": "Service Agreement",
    "description": "Processing of customer data for service delivery",
    "items": [
        {
            "productOfferings": [
                {"id": "po1", "name": "Broadband", "href": "https://x/po1"},
            ],
            "terms": [
                {
                    "id": "t1",
                    "description": "Data retained for 12 months",
                    "validPeriod": {"start": "2024-01-01T00:00:00Z"},
                },
            ],
        },
    ],
    "engagedParties": [
        {"id": "p1", "name": "Acme Telecom", "role": "provider"},
    ],
    "relatedParties": [
        {"id": "c1", "name": "John Doe", "role": "customer", "referredType": "Individual"},
    ],
    "period": {"start": "2024-01-01T00:00:00Z", "end": "2025-01-01T00:00:00Z"},
}


@pytest.fixture
def valid_payload():
    """A fresh, complete agreement creation payload."""
    return copy.deepcopy(VALID_AGREEMENT)


@pytest.fixture
def memory_store():
    """An empty in-memory agreement store."""
    return InMemoryAgreementStore()


@pytest.fixture(autouse=True)
def _reset_store_cache():
    clear_store_cache()
    yield
    clear_store_cache()
