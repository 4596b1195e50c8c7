"""Booking pattern analysis delegated to an Anthropic model.

Same contract as the deterministic pipeline: records in, ranked
``BookingTemplate`` list out.  The model additionally fills the optional
template fields (``items``, ``reservationType``, ``confidence``,
``insights``, ``suggestedBookingRequest``).

The model answers through ``with_structured_output`` against the pydantic
schemas below, so its output is validated before it is mapped onto
templates.  Counts the model reports are clamped against the real booking
history, so every template still satisfies
``1 <= frequency <= totalBookings``.

Results are cached per input fingerprint in a process-wide
:class:`~booking_patterns.services.cache.LRUCache`; every call is timed and
recorded through :mod:`booking_patterns.services.metrics`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Literal

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import BaseModel, Field

from booking_patterns.analysis.grouping import group_by_customer
from booking_patterns.analysis.templates import rank_templates
from booking_patterns.config import (
    MODEL_MAX_TOKENS,
    MODEL_NAME,
    MODEL_TEMPERATURE,
    REMOTE_CACHE_MAX_BYTES,
    get_anthropic_api_key,
)
from booking_patterns.models import (
    BookingRecord,
    BookingTemplate,
    SuggestedBookingRequest,
    TemplateItem,
)
from booking_patterns.prompts import SYSTEM_PROMPT, get_insights_prompt, get_pattern_prompt
from booking_patterns.services.cache import LRUCache, fingerprint_records
from booking_patterns.services.metrics import metrics

logger = logging.getLogger(__name__)


class RemoteAnalysisError(RuntimeError):
    """The model call failed or returned nothing usable."""


# ── Structured output schemas ───────────────────────────────────────


class PatternItem(BaseModel):
    material_id: str = Field(description="Material ID")
    quantity: int = Field(description="Quantity")
    description: str | None = Field(default=None, description="Description")


class SuggestedRequest(BaseModel):
    customer_id: str
    customer_name: str
    equipment: str
    surgeon: str
    sales_rep_id: str
    sales_rep_name: str
    reservation_type: str
    estimated_date: str
    notes: str
    priority: Literal["high", "medium", "low"]


class CustomerPattern(BaseModel):
    customer: str = Field(description="Customer name")
    customer_id: str = Field(description="Customer ID")
    equipment: str = Field(description="Primary equipment name for display")
    items: list[PatternItem] = Field(default_factory=list)
    surgeon: str = Field(description="Surgeon name")
    sales_rep: str = Field(description="Sales representative name")
    reservation_type: str = Field(description="Reservation type")
    frequency: int = Field(description="How often the combination appears")
    total_bookings: int = Field(description="Total bookings for this customer")
    confidence: float = Field(description="Confidence in this pattern, 0.0 to 1.0")
    insights: str = Field(description="Insights about this customer's preferences")
    suggested_booking_request: SuggestedRequest


class BookingPatternAnalysis(BaseModel):
    """Most common booking pattern per customer."""

    customer_patterns: list[CustomerPattern]
    overall_insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class OverallInsights(BaseModel):
    """Business insights across the whole booking history."""

    overall_insights: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


# ── LLM builder ─────────────────────────────────────────────────────


def _build_llm() -> ChatAnthropic:
    return ChatAnthropic(
        model=MODEL_NAME,
        api_key=get_anthropic_api_key(),
        temperature=MODEL_TEMPERATURE,
        max_tokens=MODEL_MAX_TOKENS,
    )


# Shared across analyzer instances so cached results survive per-request construction
result_cache = LRUCache(max_bytes=REMOTE_CACHE_MAX_BYTES)


# ── Mapping ─────────────────────────────────────────────────────────


def _to_template(
    pattern: CustomerPattern,
    groups: dict[str, tuple[BookingRecord, ...]],
) -> BookingTemplate:
    group = groups.get(pattern.customer)
    total = len(group) if group else max(pattern.total_bookings, 1)
    frequency = min(max(pattern.frequency, 1), total)
    confidence = min(max(pattern.confidence, 0.0), 1.0)
    customer_id = pattern.customer_id or (group[0].customer_id if group else pattern.customer)

    items = tuple(
        TemplateItem(
            material_id=item.material_id or None,
            quantity=max(item.quantity, 1),
            description=item.description,
        )
        for item in pattern.items
    )
    suggested = pattern.suggested_booking_request

    return BookingTemplate(
        customer=pattern.customer,
        customer_id=customer_id,
        equipment=pattern.equipment,
        surgeon=pattern.surgeon,
        sales_rep=pattern.sales_rep,
        frequency=frequency,
        total_bookings=total,
        items=items or None,
        reservation_type=pattern.reservation_type or None,
        confidence=confidence,
        insights=pattern.insights,
        suggested_booking_request=SuggestedBookingRequest(**suggested.model_dump()),
    )


# ── Analyzer ────────────────────────────────────────────────────────


class RemoteModelAnalyzer:
    """Analyzer strategy backed by an Anthropic chat model."""

    strategy = "remote_model"

    def __init__(self, llm: ChatAnthropic | None = None, cache: LRUCache | None = None) -> None:
        self._llm = llm
        self._cache = cache if cache is not None else result_cache

    @property
    def llm(self) -> ChatAnthropic:
        # Built on first use so the API key is only required when a call is made
        if self._llm is None:
            self._llm = _build_llm()
        return self._llm

    def _invoke(self, schema: type[BaseModel], prompt: str, operation: str):
        structured = self.llm.with_structured_output(schema)
        messages = [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)]
        t0 = time.perf_counter()
        try:
            result = structured.invoke(messages)
        except Exception as exc:
            elapsed = (time.perf_counter() - t0) * 1000
            metrics.record_failure(
                "anthropic", operation,
                error_type=type(exc).__name__, latency_ms=elapsed,
            )
            logger.error("Remote %s call failed after %.0fms: %s", operation, elapsed, exc)
            raise RemoteAnalysisError(f"Remote {operation} call failed: {exc}") from exc

        elapsed = (time.perf_counter() - t0) * 1000
        if not isinstance(result, schema):
            metrics.record_failure(
                "anthropic", operation, error_type="InvalidOutput", latency_ms=elapsed,
            )
            logger.warning("Remote %s returned unusable output: %r", operation, result)
            raise RemoteAnalysisError(f"Remote {operation} returned no structured result")

        metrics.record_success("anthropic", operation, latency_ms=elapsed)
        logger.debug("Remote %s completed in %.0fms", operation, elapsed)
        return result

    def analyze(self, records: Sequence[BookingRecord]) -> list[BookingTemplate]:
        """Ranked templates for *records*; ``[]`` when there is nothing to analyse."""
        if not records:
            return []

        key = fingerprint_records(records)
        cached = self._cache.get(key)
        if cached is not None:
            logger.info("Remote analysis cache hit for %d bookings", len(records))
            return list(cached)

        analysis = self._invoke(
            BookingPatternAnalysis, get_pattern_prompt(records), "analyze_patterns",
        )
        groups = group_by_customer(records)
        try:
            templates = rank_templates(
                _to_template(pattern, groups) for pattern in analysis.customer_patterns
            )
        except ValueError as exc:
            metrics.record_failure("anthropic", "analyze_patterns", error_type="InvalidOutput")
            raise RemoteAnalysisError(f"Remote analysis produced an invalid template: {exc}") from exc

        self._cache.put(key, tuple(templates))
        metrics.record_analysis(self.strategy, bookings=len(records), templates=len(templates))
        logger.info(
            "Remote analysis produced %d templates from %d bookings",
            len(templates), len(records),
        )
        return templates

    def get_overall_insights(self, records: Sequence[BookingRecord]) -> OverallInsights:
        """Overall business insights and recommendations for *records*."""
        if not records:
            return OverallInsights()
        return self._invoke(OverallInsights, get_insights_prompt(records), "overall_insights")
