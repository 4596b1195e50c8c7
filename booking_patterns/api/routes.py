"""FastAPI route definitions for the booking pattern API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException, Request

from booking_patterns.analysis import (
    RemoteAnalysisError,
    RemoteModelAnalyzer,
    UnknownAnalyzerError,
    get_analyzer,
    normalize_records,
)
from booking_patterns.api.schemas import (
    BookingsResponse,
    HealthResponse,
    InsightsResponse,
    ProposalRequest,
    ResetResponse,
    StoreBookingsResponse,
    TemplatesResponse,
)
from booking_patterns.models import TemplateNotFound, TemplateSnapshot
from booking_patterns.services.payloads import extract_booking_payloads
from booking_patterns.services.template_store import NoBookingsError, TemplateStore
from booking_patterns.synthesis import propose_booking

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_store(request: Request) -> TemplateStore:
    """Retrieve the template store created in the FastAPI lifespan."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(
            status_code=503,
            detail="The service is still starting up. Please try again in a moment.",
        )
    return store


def _templates_response(snapshot: TemplateSnapshot) -> TemplatesResponse:
    count = len(snapshot.templates)
    return TemplatesResponse(
        success=count > 0,
        message=f"Found {count} patterns" if count else "No templates generated yet",
        templates=[template.to_dict() for template in snapshot.templates],
        generated_at=snapshot.generated_at,
        source_bookings=snapshot.source_bookings,
        strategy=snapshot.strategy,
        version=snapshot.version,
    )


# ── Endpoints ────────────────────────────────────────────────────────


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse()


@router.post("/bookings", response_model=StoreBookingsResponse)
async def store_bookings(http_request: Request, payload: Any = Body(...)):
    """Normalize and install a booking history.

    Accepts a bare list of raw bookings, ``{"bookings": [...]}``,
    ``{"data": [...]}`` or a tool-call result with JSON ``content`` blocks.
    Templates from the previous history are discarded.
    """
    store = _get_store(http_request)
    raw = extract_booking_payloads(payload)
    snapshot = store.set_bookings(normalize_records(raw))
    return StoreBookingsResponse(
        bookings_processed=len(snapshot.bookings),
        version=snapshot.version,
        received_at=snapshot.received_at,
    )


@router.get("/bookings", response_model=BookingsResponse)
async def list_bookings(http_request: Request):
    snapshot = _get_store(http_request).bookings
    return BookingsResponse(
        bookings=[record.to_dict() for record in snapshot.bookings],
        count=len(snapshot.bookings),
        version=snapshot.version,
        received_at=snapshot.received_at,
    )


@router.post("/templates", response_model=TemplatesResponse)
async def generate_templates(http_request: Request, strategy: str | None = None):
    """Analyse the stored bookings and install a fresh template snapshot.

    The remote strategy blocks on the Anthropic API, so the analysis is
    offloaded with ``asyncio.to_thread`` to keep the event loop responsive.
    """
    store = _get_store(http_request)
    request_id = getattr(http_request.state, "request_id", "?")

    try:
        analyzer = get_analyzer(strategy)
    except UnknownAnalyzerError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    try:
        snapshot = await asyncio.to_thread(store.regenerate, analyzer)
    except NoBookingsError as e:
        raise HTTPException(status_code=409, detail="No booking data available.") from e
    except RemoteAnalysisError as e:
        logger.warning("[%s] Remote analysis failed: %s", request_id, e)
        raise HTTPException(
            status_code=502,
            detail="The remote analysis service failed. Please try again.",
        ) from e
    except Exception as e:
        # Full traceback stays server-side
        logger.exception("[%s] Error generating templates", request_id)
        raise HTTPException(
            status_code=500,
            detail="An internal error occurred. Please try again.",
        ) from e

    return _templates_response(snapshot)


@router.get("/templates/cached", response_model=TemplatesResponse)
async def cached_templates(http_request: Request):
    return _templates_response(_get_store(http_request).templates)


@router.post("/insights", response_model=InsightsResponse)
async def overall_insights(http_request: Request):
    """Business insights across the stored bookings (remote model only)."""
    store = _get_store(http_request)
    request_id = getattr(http_request.state, "request_id", "?")
    bookings = store.bookings.bookings
    if not bookings:
        raise HTTPException(status_code=409, detail="No booking data available.")

    try:
        result = await asyncio.to_thread(RemoteModelAnalyzer().get_overall_insights, bookings)
    except RemoteAnalysisError as e:
        logger.warning("[%s] Remote insights failed: %s", request_id, e)
        raise HTTPException(
            status_code=502,
            detail="The remote analysis service failed. Please try again.",
        ) from e
    except Exception as e:
        logger.exception("[%s] Error generating insights", request_id)
        raise HTTPException(
            status_code=500,
            detail="An internal error occurred. Please try again.",
        ) from e

    return InsightsResponse(
        overall_insights=result.overall_insights,
        recommendations=result.recommendations,
    )


@router.post("/reset", response_model=ResetResponse)
async def reset_store(http_request: Request):
    store = _get_store(http_request)
    store.reset()
    return ResetResponse(version=store.version)


@router.post("/requests")
async def create_request(request: ProposalRequest, http_request: Request) -> dict[str, Any]:
    """Find the matching template and return a submission-ready request body.

    Responds 404 with the available customers and surgeons on a miss.
    """
    store = _get_store(http_request)
    result = propose_booking(
        store.templates.templates,
        customer=request.customer,
        surgeon=request.surgeon,
        customization=request.customization,
    )
    if isinstance(result, TemplateNotFound):
        raise HTTPException(status_code=404, detail=result.to_dict())
    return result.to_dict()
