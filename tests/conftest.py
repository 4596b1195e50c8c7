"""Shared test fixtures for the booking pattern test suite."""

from __future__ import annotations

import os
from datetime import UTC, datetime

import pytest


def pytest_configure(config):
    """Set test environment variables BEFORE collection starts.

    This runs before any imports, so config.py picks up test values and the
    metrics client never starts its CloudWatch flush thread.
    """
    os.environ.setdefault("ANTHROPIC_API_KEY", "test-anthropic-key-123")
    os.environ["METRICS_ENABLED"] = "false"
    os.environ.setdefault("ANALYZER_STRATEGY", "deterministic")


# Wednesday, mid-morning UTC
WEDNESDAY = datetime(2026, 10, 14, 9, 30, tzinfo=UTC)


@pytest.fixture
def now() -> datetime:
    return WEDNESDAY


@pytest.fixture
def make_raw_booking():
    """Factory fixture for raw booking payloads as a booking source returns them."""

    def _make(**overrides) -> dict:
        raw = {
            "bookingId": "BK-1",
            "customerName": "Acme Hospital",
            "customerId": "C-ACME",
            "surgeon": "Dr. A",
            "salesRepName": "Rep1",
            "equipment": "Drill",
            "dayOfUse": "2026-09-01T08:00:00.000Z",
            "bookingStatus": "confirmed",
            "estimatedValue": "1500",
        }
        raw.update(overrides)
        return raw

    return _make


@pytest.fixture
def make_record():
    """Factory fixture for canonical booking records."""
    from booking_patterns.models import BookingRecord

    counter = iter(range(1, 10_000))

    def _make(
        customer: str = "Acme Hospital",
        equipment: str = "Drill",
        surgeon: str = "Dr. A",
        sales_rep: str = "Rep1",
        **overrides,
    ) -> BookingRecord:
        fields = {
            "id": f"BK-{next(counter)}",
            "customer": customer,
            "customer_id": f"C-{customer.split()[0].upper()}",
            "surgeon": surgeon,
            "sales_rep": sales_rep,
            "equipment": equipment,
            "date": "2026-09-01T08:00:00.000Z",
            "status": "confirmed",
            "value": 1500.0,
        }
        fields.update(overrides)
        return BookingRecord(**fields)

    return _make


@pytest.fixture
def acme_records(make_record):
    """Three Acme bookings: Drill / Dr. A / Rep1 twice, Saw / Dr. B / Rep2 once."""
    return [
        make_record(),
        make_record(equipment="Saw", surgeon="Dr. B", sales_rep="Rep2"),
        make_record(),
    ]


@pytest.fixture
def acme_template(acme_records):
    from booking_patterns.analysis import analyze

    return analyze(acme_records)[0]
