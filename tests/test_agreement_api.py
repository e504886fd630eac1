"""HTTP tests for the agreement API."""
import json
from unittest import mock

import pytest
from django.db import DataError

from django_agreements.exceptions import StoreUnavailable
from django_agreements.models import Agreement
from django_audit_log.models import AuditEvent


def _post(client, payload, **extra):
    return client.post("/agreement", data=json.dumps(payload), content_type="application/json", **extra)


def _patch(client, agreement_id, payload, **extra):
    return client.patch(
        f"/agreement/{agreement_id}",
        data=json.dumps(payload),
        content_type="application/json",
        **extra,
    )


@pytest.mark.django_db
class TestAgreementCollection:

    def test_example_scenario_creates_agreement(self, client):
        payload = {
            "name": "Marketing Consent",
            "agreementType": "Service Agreement",
            "items": [{"productOfferings": [{"id": "po1", "name": "SMS Plan", "href": "https://x/po1"}]}],
            "engagedParties": [{"id": "p1", "name": "Acme", "role": "Customer"}],
            "relatedParties": [{"id": "p2", "name": "Acme Org", "role": "Provider"}],
        }

        response = _post(client, payload)

        assert response.status_code == 201
        body = response.json()
        assert body["id"]
        assert body["status"] == "in process"
        assert body["createdAt"]
        assert response["Location"] == f"/agreement/{body['id']}"

    def test_invalid_payload_returns_400_with_every_error(self, client, valid_payload):
        del valid_payload["name"]
        valid_payload["relatedParties"] = []

        response = _post(client, valid_payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed"
        assert set(body["details"]) == {"name", "relatedParties"}
        assert client.get("/agreement").json()["totalCount"] == 0

    def test_malformed_json_returns_400(self, client):
        response = client.post("/agreement", data="{not json", content_type="application/json")

        assert response.status_code == 400
        assert response.json()["error"] == "Malformed JSON body"

    def test_duplicate_id_returns_409(self, client, valid_payload):
        valid_payload["id"] = "agr-1"
        _post(client, valid_payload)

        response = _post(client, valid_payload)

        assert response.status_code == 409

    def test_actor_taken_from_header(self, client, valid_payload):
        response = _post(client, valid_payload, HTTP_X_USER_ID="dpo@example.com")

        assert response.json()["auditLog"][0]["by"] == "dpo@example.com"
        assert AuditEvent.objects.get().user_id == "dpo@example.com"

    def test_actor_defaults_to_system(self, client, valid_payload):
        response = _post(client, valid_payload)

        assert response.json()["auditLog"][0]["by"] == "system"

    def test_list_paginates_with_headers(self, client, valid_payload):
        for _ in range(5):
            _post(client, valid_payload)

        response = client.get("/agreement", {"limit": 2, "offset": 4})

        assert response.status_code == 200
        body = response.json()
        assert len(body["agreements"]) == 1
        assert body["totalCount"] == 5
        assert body["hasMore"] is False
        assert response["X-Total-Count"] == "5"
        assert response["X-Result-Count"] == "1"

    def test_list_filters_by_status(self, client, valid_payload):
        created = _post(client, valid_payload).json()
        _post(client, valid_payload)
        _patch(client, created["id"], {"status": "active"})

        body = client.get("/agreement", {"status": "active"}).json()

        assert [a["id"] for a in body["agreements"]] == [created["id"]]

    @pytest.mark.parametrize("params", [{"limit": "ten"}, {"limit": 0}, {"offset": -3}, {"status": "x"}])
    def test_bad_list_parameters_return_400(self, client, params):
        assert client.get("/agreement", params).status_code == 400

    def test_unsupported_verb_returns_405(self, client):
        assert client.put("/agreement").status_code == 405

    def test_client_id_is_reachable_by_href(self, client, valid_payload):
        valid_payload["id"] = "agr-2024.v1_~x"

        created = _post(client, valid_payload).json()

        assert client.get(created["href"]).status_code == 200
        assert client.delete(created["href"]).status_code == 204

    @pytest.mark.parametrize("agreement_id", ["a/b", "a b", "..", "x" * 256])
    def test_unroutable_client_id_returns_400(self, client, valid_payload, agreement_id):
        valid_payload["id"] = agreement_id

        response = _post(client, valid_payload)

        assert response.status_code == 400
        assert "id" in response.json()["details"]
        assert not Agreement.objects.exists()

    def test_document_number_beyond_64_bits_returns_400(self, client, valid_payload):
        valid_payload["documentNumber"] = 2 ** 64

        response = _post(client, valid_payload)

        assert response.status_code == 400
        assert "documentNumber" in response.json()["details"]

    def test_overlong_name_returns_400(self, client, valid_payload):
        valid_payload["name"] = "n" * 256

        response = _post(client, valid_payload)

        assert response.status_code == 400
        assert response.json()["details"]["name"] == ["Must be at most 255 characters."]

    def test_period_returned_in_utc(self, client, valid_payload):
        valid_payload["period"] = {"start": "2024-01-01T02:00:00+02:00", "end": "2025-01-01"}

        body = _post(client, valid_payload).json()

        assert body["period"] == {"start": "2024-01-01T00:00:00Z", "end": "2025-01-01T00:00:00Z"}

    def test_failed_audit_event_rolls_back_create(self, client, valid_payload):
        with mock.patch("django_agreements.services.log_event", side_effect=DataError("bad inet")):
            response = _post(client, valid_payload)

        assert response.status_code == 500
        assert not Agreement.objects.exists()

    def test_unparseable_forwarded_for_still_creates(self, client, valid_payload):
        response = _post(client, valid_payload, HTTP_X_FORWARDED_FOR="unknown")

        assert response.status_code == 201
        assert AuditEvent.objects.get().ip_address is None


@pytest.mark.django_db
class TestAgreementDetail:

    @pytest.fixture
    def agreement(self, client, valid_payload):
        return _post(client, valid_payload).json()

    def test_get_round_trips_payload(self, client, agreement, valid_payload):
        body = client.get(f"/agreement/{agreement['id']}").json()

        assert body["name"] == valid_payload["name"]
        assert body["items"][0]["productOfferings"][0]["href"] == "https://x/po1"
        assert body["period"] == valid_payload["period"]
        assert body["relatedParties"][0]["referredType"] == "Individual"

    def test_get_unknown_returns_404(self, client):
        response = client.get("/agreement/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error"] == "Agreement not found"

    def test_patch_updates_name_only(self, client, agreement):
        response = _patch(client, agreement["id"], {"name": "X"})

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "X"
        assert body["updatedAt"]
        assert body["items"] == agreement["items"]
        assert len(body["auditLog"]) == 2
        assert body["auditLog"][1]["changedFields"] == ["name"]

    def test_patch_invalid_returns_400(self, client, agreement):
        response = _patch(client, agreement["id"], {"engagedParties": []})

        assert response.status_code == 400

    def test_patch_read_only_field_returns_400(self, client, agreement):
        response = _patch(client, agreement["id"], {"createdAt": "2020-01-01T00:00:00Z"})

        assert response.status_code == 400
        assert "createdAt" in response.json()["details"]

    def test_patch_illegal_transition_returns_409(self, client, agreement):
        response = _patch(client, agreement["id"], {"status": "terminated"})

        assert response.status_code == 409
        assert response.json()["details"] == {"from": "in process", "to": "terminated"}

    def test_patch_unknown_returns_404(self, client):
        assert _patch(client, "missing", {"name": "X"}).status_code == 404

    def test_delete_returns_204_then_404(self, client, agreement):
        response = client.delete(f"/agreement/{agreement['id']}")

        assert response.status_code == 204
        assert client.get(f"/agreement/{agreement['id']}").status_code == 404
        assert client.delete(f"/agreement/{agreement['id']}").status_code == 404

    def test_failed_audit_event_rolls_back_update(self, client, agreement):
        with mock.patch("django_agreements.services.log_event", side_effect=DataError("bad inet")):
            response = _patch(client, agreement["id"], {"name": "X"})

        assert response.status_code == 500
        body = client.get(f"/agreement/{agreement['id']}").json()
        assert body["name"] == agreement["name"]
        assert len(body["auditLog"]) == 1

    def test_failed_audit_event_rolls_back_delete(self, client, agreement):
        with mock.patch("django_agreements.services.log_event", side_effect=DataError("bad inet")):
            response = client.delete(f"/agreement/{agreement['id']}")

        assert response.status_code == 500
        assert client.get(f"/agreement/{agreement['id']}").status_code == 200

    def test_transitions_endpoint(self, client, agreement):
        body = client.get(f"/agreement/{agreement['id']}/transitions").json()

        assert body == {"id": agreement["id"], "status": "in process", "allowedTransitions": ["active"]}

    def test_store_unavailable_returns_500(self, client, agreement):
        with mock.patch(
            "django_agreements.services.get_store",
        ) as get_store:
            get_store.return_value.get.side_effect = StoreUnavailable("database is down")
            response = client.get(f"/agreement/{agreement['id']}")

        assert response.status_code == 500
        assert response.json()["error"] == "Agreement store unavailable"

    def test_unexpected_error_returns_500_and_is_logged(self, client, agreement, caplog):
        with mock.patch("django_agreements.services.get_store") as get_store:
            get_store.return_value.get.side_effect = RuntimeError("boom")
            response = client.get(f"/agreement/{agreement['id']}")

        assert response.status_code == 500
        assert "Unhandled error in agreement_detail" in caplog.text
