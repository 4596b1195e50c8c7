"""Tests for the FastAPI endpoints."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from booking_patterns.analysis import RemoteAnalysisError
from booking_patterns.analysis.remote import OverallInsights
from booking_patterns.server import app
from booking_patterns.services.template_store import TemplateStore

RAW_BOOKINGS = [
    {"bookingId": "BK-1", "customerName": "Acme Hospital", "customer": "C-ACME",
     "surgeon": "Dr. A", "salesRepName": "Rep1", "equipment": "Drill"},
    {"bookingId": "BK-2", "customerName": "Acme Hospital", "customer": "C-ACME",
     "surgeon": "Dr. B", "salesRepName": "Rep2", "equipment": "Saw"},
    {"bookingId": "BK-3", "customerName": "Acme Hospital", "customer": "C-ACME",
     "surgeon": "Dr. A", "salesRepName": "Rep1", "equipment": "Drill"},
]


@pytest.fixture
def store():
    """Fresh store attached to app state (mirrors the lifespan)."""
    store = TemplateStore()
    app.state.store = store
    yield store
    app.state.store = None


@pytest.fixture
def client(store):
    return TestClient(app)


@pytest.fixture
def seeded(client):
    client.post("/api/bookings", json=RAW_BOOKINGS)
    client.post("/api/templates")
    return client


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "booking-patterns"}


# ── Bookings ─────────────────────────────────────────────────────────


class TestBookingsEndpoints:
    def test_store_bare_list(self, client, store):
        response = client.post("/api/bookings", json=RAW_BOOKINGS)
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["bookings_processed"] == 3
        assert len(store.bookings.bookings) == 3

    def test_store_tool_result_envelope(self, client):
        envelope = {"content": [{"type": "text", "text": json.dumps({"bookings": RAW_BOOKINGS})}]}
        response = client.post("/api/bookings", json=envelope)
        assert response.json()["bookings_processed"] == 3

    def test_list_bookings_returns_canonical_records(self, client):
        client.post("/api/bookings", json={"data": RAW_BOOKINGS})
        data = client.get("/api/bookings").json()
        assert data["count"] == 3
        first = data["bookings"][0]
        assert first["customer"] == "Acme Hospital"
        assert first["customerId"] == "C-ACME"
        assert first["salesRep"] == "Rep1"
        assert first["status"] == "Unknown Status"


# ── Templates ───────────────────────────────────────────────────────


class TestTemplatesEndpoints:
    def test_generate_templates(self, client):
        client.post("/api/bookings", json=RAW_BOOKINGS)
        response = client.post("/api/templates")
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Found 1 patterns"
        assert data["source_bookings"] == 3
        assert data["strategy"] == "deterministic"
        template = data["templates"][0]
        assert (template["equipment"], template["surgeon"], template["salesRep"]) == ("Drill", "Dr. A", "Rep1")
        assert (template["frequency"], template["totalBookings"]) == (2, 3)

    def test_generate_without_bookings_is_409(self, client):
        response = client.post("/api/templates")
        assert response.status_code == 409

    def test_unknown_strategy_is_400(self, client):
        client.post("/api/bookings", json=RAW_BOOKINGS)
        response = client.post("/api/templates", params={"strategy": "crystal_ball"})
        assert response.status_code == 400

    def test_remote_failure_is_502_without_leaking(self, client):
        client.post("/api/bookings", json=RAW_BOOKINGS)
        with patch(
            "booking_patterns.analysis.remote.RemoteModelAnalyzer.analyze",
            side_effect=RemoteAnalysisError("upstream secret detail"),
        ):
            response = client.post("/api/templates", params={"strategy": "remote_model"})
        assert response.status_code == 502
        assert "secret" not in response.json()["detail"]

    def test_unexpected_error_is_generic_500(self, client):
        client.post("/api/bookings", json=RAW_BOOKINGS)
        with patch(
            "booking_patterns.analysis.DeterministicAnalyzer.analyze",
            side_effect=RuntimeError("analysis exploded"),
        ):
            response = client.post("/api/templates")
        assert response.status_code == 500
        detail = response.json()["detail"]
        assert "exploded" not in detail
        assert "internal error" in detail.lower()

    def test_cached_templates(self, seeded):
        data = seeded.get("/api/templates/cached").json()
        assert data["success"] is True
        assert len(data["templates"]) == 1

    def test_new_bookings_clear_cached_templates(self, seeded):
        seeded.post("/api/bookings", json=RAW_BOOKINGS[:1])
        data = seeded.get("/api/templates/cached").json()
        assert data["success"] is False
        assert data["templates"] == []

    def test_reset(self, seeded, store):
        response = seeded.post("/api/reset")
        assert response.status_code == 200
        assert store.bookings.bookings == ()
        assert store.templates.templates == ()


# ── Insights ────────────────────────────────────────────────────────


class TestInsightsEndpoint:
    def test_without_bookings_is_409(self, client):
        assert client.post("/api/insights").status_code == 409

    def test_returns_model_insights(self, client):
        client.post("/api/bookings", json=RAW_BOOKINGS)
        insights = OverallInsights(overall_insights=["Acme is loyal."], recommendations=["Call Acme."])
        with patch(
            "booking_patterns.analysis.remote.RemoteModelAnalyzer.get_overall_insights",
            return_value=insights,
        ):
            response = client.post("/api/insights")
        assert response.status_code == 200
        assert response.json() == {
            "overall_insights": ["Acme is loyal."],
            "recommendations": ["Call Acme."],
        }


# ── Booking requests ────────────────────────────────────────────────


class TestRequestsEndpoint:
    def test_creates_request_body(self, seeded):
        response = seeded.post("/api/requests", json={"customer": "acm"})
        assert response.status_code == 200
        data = response.json()
        assert data["customerName"] == "Acme Hospital"
        assert data["isDraft"] is True
        assert data["isSimulation"] is True
        assert data["items"] == [{"materialId": "DRILL", "quantity": 1}]

    def test_customization_in_camel_case(self, seeded):
        response = seeded.post(
            "/api/requests",
            json={
                "customer": "acme",
                "customization": {
                    "isDraft": False,
                    "notes": "Urgent",
                    "date": {"date": "2026-11-03", "time": "2pm"},
                },
            },
        )
        data = response.json()
        assert data["isDraft"] is False
        assert data["notes"] == [{"language": "EN", "noteContent": "Urgent"}]
        assert data["dayOfUse"] == "2026-11-03T14:00:00.000Z"

    def test_miss_is_404_with_suggestions(self, seeded):
        response = seeded.post("/api/requests", json={"customer": "zeta"})
        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["found"] is False
        assert detail["availableCustomers"] == ["Acme Hospital"]
        assert detail["availableSurgeons"] == ["Dr. A"]


# ── Plumbing ────────────────────────────────────────────────────────


class TestRequestTagging:
    def test_response_includes_request_id_header(self, client):
        assert "X-Request-ID" in client.get("/api/health").headers

    def test_client_supplied_request_id_is_echoed(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "my-trace-id-123"})
        assert response.headers["X-Request-ID"] == "my-trace-id-123"

    def test_store_version_tracks_writes(self, client):
        assert client.get("/api/health").headers["X-Store-Version"] == "0"
        response = client.post("/api/bookings", json=RAW_BOOKINGS)
        assert response.headers["X-Store-Version"] == "1"
        assert client.post("/api/templates").headers["X-Store-Version"] == "2"


class TestStoreNotReady:
    def test_returns_503_when_store_not_initialised(self):
        with TestClient(app) as tc:
            app.state.store = None
            response = tc.get("/api/bookings")
            assert response.status_code == 503
            assert "starting up" in response.json()["detail"].lower()
            assert "X-Store-Version" not in response.headers


class TestRootEndpoint:
    def test_root_returns_service_info(self, client):
        data = client.get("/").json()
        assert data["service"] == "Booking Pattern Templates"
        assert "docs" in data

    def test_root_lists_strategies(self, client):
        data = client.get("/").json()
        assert data["strategies"] == ["deterministic", "remote_model"]
        assert data["defaultStrategy"] == "deterministic"
