"""Pydantic schemas for the FastAPI endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from booking_patterns.models import Customization


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    service: str = "booking-patterns"


class StoreBookingsResponse(BaseModel):
    """Result of installing a new booking history."""

    success: bool = True
    bookings_processed: int
    version: int
    received_at: str | None = None


class BookingsResponse(BaseModel):
    bookings: list[dict[str, Any]]
    count: int
    version: int
    received_at: str | None = None


class TemplatesResponse(BaseModel):
    """Ranked templates from the current snapshot."""

    success: bool
    message: str
    templates: list[dict[str, Any]]
    generated_at: str | None = None
    source_bookings: int = 0
    strategy: str | None = None
    version: int = 0


class InsightsResponse(BaseModel):
    overall_insights: list[str]
    recommendations: list[str]


class ResetResponse(BaseModel):
    success: bool = True
    version: int


class ProposalRequest(BaseModel):
    """Look up a template and turn it into a booking request."""

    customer: str | None = Field(default=None, max_length=200, description="Customer name or fragment")
    surgeon: str | None = Field(default=None, max_length=200, description="Surgeon name or fragment")
    customization: Customization | None = Field(
        default=None, description="Overrides for the generated request",
    )
