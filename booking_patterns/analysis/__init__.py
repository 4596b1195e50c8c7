"""Booking pattern analysis.

Two interchangeable strategies share one contract, ``analyze(records)``
returning a ranked list of :class:`~booking_patterns.models.BookingTemplate`:

* ``deterministic``: group, count, synthesize, rank.  Pure and repeatable.
* ``remote_model``: an Anthropic model fills the same shape plus the
  optional enrichment fields.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from booking_patterns.analysis.frequency import find_most_common_combination
from booking_patterns.analysis.grouping import group_by_customer
from booking_patterns.analysis.normalizer import normalize_record, normalize_records
from booking_patterns.analysis.remote import RemoteAnalysisError, RemoteModelAnalyzer
from booking_patterns.analysis.templates import (
    analyze_booking_patterns,
    create_booking_template,
    rank_templates,
)
from booking_patterns.config import ANALYZER_STRATEGY
from booking_patterns.models import BookingRecord, BookingTemplate
from booking_patterns.services.metrics import metrics

logger = logging.getLogger(__name__)


class UnknownAnalyzerError(ValueError):
    """No analyzer strategy is registered under the requested name."""


class Analyzer(Protocol):
    strategy: str

    def analyze(self, records: Sequence[BookingRecord]) -> list[BookingTemplate]: ...


class DeterministicAnalyzer:
    """Analyzer strategy wrapping the local counting pipeline."""

    strategy = "deterministic"

    def analyze(self, records: Sequence[BookingRecord]) -> list[BookingTemplate]:
        templates = analyze_booking_patterns(records)
        metrics.record_analysis(self.strategy, bookings=len(records), templates=len(templates))
        logger.info(
            "Deterministic analysis produced %d templates from %d bookings",
            len(templates), len(records),
        )
        return templates


_ANALYZERS: dict[str, type] = {
    DeterministicAnalyzer.strategy: DeterministicAnalyzer,
    RemoteModelAnalyzer.strategy: RemoteModelAnalyzer,
}


def available_strategies() -> list[str]:
    return list(_ANALYZERS)


def get_analyzer(name: str | None = None) -> Analyzer:
    """Return an analyzer for *name*, or the configured default strategy."""
    key = (name or ANALYZER_STRATEGY).strip().lower()
    try:
        return _ANALYZERS[key]()
    except KeyError:
        raise UnknownAnalyzerError(
            f"Unknown analyzer strategy {key!r}; expected one of: "
            + ", ".join(_ANALYZERS)
        ) from None


def analyze(records: Iterable[BookingRecord]) -> list[BookingTemplate]:
    """Deterministic analysis of canonical records.  ``[]`` for empty input."""
    return analyze_booking_patterns(list(records))


__all__ = [
    "Analyzer",
    "DeterministicAnalyzer",
    "RemoteAnalysisError",
    "RemoteModelAnalyzer",
    "UnknownAnalyzerError",
    "analyze",
    "analyze_booking_patterns",
    "available_strategies",
    "create_booking_template",
    "find_most_common_combination",
    "get_analyzer",
    "group_by_customer",
    "normalize_record",
    "normalize_records",
    "rank_templates",
]
