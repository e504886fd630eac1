"""Tests for audit events: logging API, middleware, selectors and HTTP API."""
import csv
import io
import json
import uuid
from datetime import timedelta

import pytest
from django.http import HttpResponse
from django.test import RequestFactory
from django.utils import timezone

from django_audit_log import log_event
from django_audit_log.exceptions import AuditEventNotFound, ImmutableAuditEventError, InvalidAuditEvent
from django_audit_log.middleware import (
    AuditContextMiddleware,
    clear_request_context,
    get_actor,
    get_current_request,
    set_request_context,
)
from django_audit_log.models import AuditEvent
from django_audit_log.selectors import (
    CSV_HEADER,
    count_by_detail,
    csv_safe,
    export_csv,
    get_event,
    get_stats_overview,
    list_events,
    serialize_event,
)


@pytest.mark.django_db
class TestLogEvent:

    def test_log_event_captures_request_metadata(self):
        request = RequestFactory().get(
            "/",
            HTTP_X_FORWARDED_FOR="203.0.113.7, 10.0.0.1",
            HTTP_USER_AGENT="Mozilla/5.0",
        )

        event = log_event(
            "ConsentRevoked",
            customer_id="cust_001",
            user_id="cust_001",
            details={"consentType": "marketing", "method": "web"},
            request=request,
        )

        assert event.ip_address == "203.0.113.7"
        assert event.user_agent == "Mozilla/5.0"
        assert event.details["consentType"] == "marketing"

    @pytest.mark.parametrize("forwarded_for", ["unknown", "not-an-ip, 10.0.0.1", "_hidden"])
    def test_non_ip_forwarded_for_is_dropped(self, forwarded_for):
        request = RequestFactory().get("/", HTTP_X_FORWARDED_FOR=forwarded_for)

        event = log_event("ConsentGranted", request=request)

        assert event.ip_address is None

    def test_ipv6_client_address_kept(self):
        request = RequestFactory().get("/", REMOTE_ADDR="2001:db8::1")

        assert log_event("ConsentGranted", request=request).ip_address == "2001:db8::1"

    def test_defaults_to_system_actor(self):
        event = log_event("DataProcessing")

        assert event.user_id == "system"
        assert event.ip_address is None

    def test_uses_request_from_middleware_context(self):
        request = RequestFactory().get("/", REMOTE_ADDR="198.51.100.2")
        set_request_context(request=request, actor="agent-7", request_id="abc123")
        try:
            event = log_event("ConsentUpdated", customer_id="cust_001")
        finally:
            clear_request_context()

        assert event.user_id == "agent-7"
        assert event.ip_address == "198.51.100.2"
        assert event.request_id == "abc123"

    @pytest.mark.parametrize(
        "kwargs, field",
        [
            ({"event_type": ""}, "eventType"),
            ({"event_type": None}, "eventType"),
            ({"event_type": "ConsentGranted", "details": ["x"]}, "details"),
        ],
    )
    def test_invalid_events_rejected(self, kwargs, field):
        with pytest.raises(InvalidAuditEvent) as exc_info:
            log_event(**kwargs)

        assert field in exc_info.value.errors
        assert not AuditEvent.objects.exists()

    def test_events_are_immutable(self):
        event = log_event("ConsentGranted", customer_id="cust_001")
        event.user_id = "tampered"

        with pytest.raises(ImmutableAuditEventError):
            event.save()


class TestMiddleware:

    def test_sets_and_clears_context(self):
        seen = {}

        def view(request):
            seen["request"] = get_current_request()
            return HttpResponse()

        middleware = AuditContextMiddleware(view)
        request = RequestFactory().get("/", HTTP_X_REQUEST_ID="req-1")

        response = middleware(request)

        assert seen["request"] is request
        assert get_current_request() is None
        assert response["X-Request-ID"] == "req-1"

    def test_generates_request_id(self):
        response = AuditContextMiddleware(lambda request: HttpResponse())(RequestFactory().get("/"))

        assert len(response["X-Request-ID"]) == 8

    def test_get_actor_prefers_header(self):
        request = RequestFactory().get("/", HTTP_X_USER_ID="  dpo  ")

        assert get_actor(request) == "dpo"

    def test_get_actor_default(self):
        assert get_actor(RequestFactory().get("/")) == "system"
        assert get_actor(None, default="nobody") == "nobody"


@pytest.mark.django_db
class TestSelectors:

    @pytest.fixture
    def events(self):
        now = timezone.now()
        return [
            log_event("ConsentGranted", customer_id="cust_001", details={"method": "web", "action": "granted"},
                      timestamp=now - timedelta(days=10)),
            log_event("ConsentRevoked", customer_id="cust_001", details={"method": "mobile"},
                      timestamp=now - timedelta(days=2)),
            log_event("AgreementCreated", agreement_id="agr-1", timestamp=now - timedelta(hours=1)),
        ]

    def test_list_events_newest_first(self, events):
        page = list_events()

        assert [e.event_type for e in page.events] == ["AgreementCreated", "ConsentRevoked", "ConsentGranted"]
        assert page.total_count == 3
        assert page.has_more is False

    def test_list_events_filters(self, events):
        page = list_events(customer_id="cust_001", limit=1)

        assert page.total_count == 2
        assert page.has_more is True
        assert page.filters["customerId"] == "cust_001"

    def test_list_events_date_range(self, events):
        page = list_events(from_date=timezone.now() - timedelta(days=3))

        assert page.total_count == 2

    def test_get_event(self, events):
        assert get_event(str(events[0].pk)) == events[0]

    @pytest.mark.parametrize("event_id", ["not-a-uuid", str(uuid.uuid4())])
    def test_get_event_not_found(self, event_id):
        with pytest.raises(AuditEventNotFound):
            get_event(event_id)

    def test_stats_overview(self, events):
        stats = get_stats_overview()

        assert stats["totalEvents"] == 3
        assert stats["recentEvents"] == 1
        assert stats["weeklyEvents"] == 2
        assert stats["eventTypeBreakdown"] == {
            "AgreementCreated": 1,
            "ConsentGranted": 1,
            "ConsentRevoked": 1,
        }

    def test_count_by_detail(self, events):
        assert count_by_detail("method") == {"mobile": 1, "web": 1}
        assert count_by_detail("method", event_types=["ConsentGranted"]) == {"web": 1}

    def test_serialize_event(self, events):
        data = serialize_event(events[2])

        assert data["agreementId"] == "agr-1"
        assert data["customerId"] is None
        assert data["userAgent"] == "Unknown"

    def test_export_csv(self, events):
        rows = list(csv.reader(io.StringIO(export_csv(customer_id="cust_001"))))

        assert rows[0] == CSV_HEADER
        assert len(rows) == 3
        assert rows[2][1] == "ConsentGranted"
        assert rows[2][6] == "granted"

    def test_export_csv_neutralises_formulas(self):
        log_event(
            "DataProcessing",
            customer_id="cust_009",
            user_id="=HYPERLINK(\"http://evil\")",
            details={"action": "+SUM(A1:A9)"},
        )

        rows = list(csv.reader(io.StringIO(export_csv(customer_id="cust_009"))))

        assert rows[1][4] == "'=HYPERLINK(\"http://evil\")"
        assert rows[1][6] == "'+SUM(A1:A9)"

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("=1+1", "'=1+1"),
            ("-2", "'-2"),
            ("@cmd", "'@cmd"),
            ("plain", "plain"),
            ("", ""),
            (5, 5),
        ],
    )
    def test_csv_safe(self, value, expected):
        assert csv_safe(value) == expected


@pytest.mark.django_db
class TestAuditEventApi:

    def test_create_event(self, client):
        response = client.post(
            "/event",
            data=json.dumps({"eventType": "DataProcessing", "customerId": "cust_001", "details": {"action": "x"}}),
            content_type="application/json",
            HTTP_X_USER_ID="agent-1",
        )

        assert response.status_code == 201
        body = response.json()
        assert body["eventType"] == "DataProcessing"
        assert body["userId"] == "agent-1"

    def test_create_event_without_type_returns_400(self, client):
        response = client.post("/event", data=json.dumps({}), content_type="application/json")

        assert response.status_code == 400
        assert "eventType" in response.json()["details"]

    def test_list_and_detail(self, client):
        event = log_event("ConsentGranted", customer_id="cust_001")

        listing = client.get("/event", {"customerId": "cust_001"}).json()
        detail = client.get(f"/event/{event.pk}")

        assert listing["totalCount"] == 1
        assert detail.status_code == 200
        assert detail.json()["id"] == str(event.pk)

    def test_detail_unknown_returns_404(self, client):
        assert client.get(f"/event/{uuid.uuid4()}").status_code == 404

    def test_bad_dates_return_400(self, client):
        assert client.get("/event", {"fromDate": "soon"}).status_code == 400

    def test_stats(self, client):
        log_event("ConsentGranted")

        assert client.get("/event/stats/overview").json()["totalEvents"] == 1

    def test_export_csv_attachment(self, client):
        log_event("ConsentGranted", customer_id="cust_001")

        response = client.get("/event/export/csv")

        assert response["Content-Type"] == "text/csv"
        assert response["Content-Disposition"].startswith('attachment; filename="audit_trail_')
        assert response.content.decode().startswith("ID,Event Type,")
