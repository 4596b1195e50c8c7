"""In-memory holder for the current booking history and its templates.

Each write builds a complete new frozen snapshot and swaps a single
reference under a lock, so readers never need to lock and never see a
half-applied update.  Installing new bookings discards the templates derived
from the previous history.

>>> store = TemplateStore()
>>> store.set_bookings(normalize_records(raw_payloads))
>>> store.regenerate(get_analyzer("deterministic")).templates
(BookingTemplate(customer='Acme', ...), ...)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from booking_patterns.models import BookingRecord, BookingsSnapshot, TemplateSnapshot
from booking_patterns.timeutil import to_iso_utc, utc_now

logger = logging.getLogger(__name__)


class NoBookingsError(LookupError):
    """Templates were requested before any bookings were installed."""


class TemplateStore:
    """Versioned, lock-protected snapshot holder."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._version = 0
        self._bookings = BookingsSnapshot()
        self._templates = TemplateSnapshot()

    # ── Reads (lock-free) ────────────────────────────────────────────

    @property
    def bookings(self) -> BookingsSnapshot:
        return self._bookings

    @property
    def templates(self) -> TemplateSnapshot:
        return self._templates

    @property
    def version(self) -> int:
        return self._version

    # ── Writes ───────────────────────────────────────────────────────

    def set_bookings(self, records: Iterable[BookingRecord]) -> BookingsSnapshot:
        """Install a new booking history and drop the stale templates."""
        bookings = tuple(records)
        with self._lock:
            self._version += 1
            snapshot = BookingsSnapshot(
                version=self._version,
                bookings=bookings,
                received_at=to_iso_utc(utc_now()),
            )
            self._bookings = snapshot
            self._templates = TemplateSnapshot(version=self._version)
        logger.info("Stored %d bookings (version %d)", len(bookings), snapshot.version)
        return snapshot

    def install_templates(self, templates, *, source: BookingsSnapshot, strategy: str) -> TemplateSnapshot:
        """Install templates derived from *source*.

        Ignored when *source* is no longer the current bookings snapshot, so
        a slow analysis cannot overwrite templates for newer bookings.
        """
        with self._lock:
            if source is not self._bookings:
                logger.warning(
                    "Discarding templates for bookings version %d (current is %d)",
                    source.version, self._bookings.version,
                )
                return self._templates
            self._version += 1
            snapshot = TemplateSnapshot(
                version=self._version,
                templates=tuple(templates),
                generated_at=to_iso_utc(utc_now()),
                source_bookings=len(source.bookings),
                strategy=strategy,
            )
            self._templates = snapshot
        logger.info(
            "Installed %d templates from %d bookings (strategy=%s, version %d)",
            len(snapshot.templates), snapshot.source_bookings, strategy, snapshot.version,
        )
        return snapshot

    def regenerate(self, analyzer) -> TemplateSnapshot:
        """Run *analyzer* over the current bookings and install the result.

        Raises :class:`NoBookingsError` if no bookings are installed.  The
        analysis itself runs outside the lock.
        """
        source = self._bookings
        if not source.bookings:
            raise NoBookingsError("No booking data available")
        templates = analyzer.analyze(source.bookings)
        return self.install_templates(templates, source=source, strategy=analyzer.strategy)

    def reset(self) -> None:
        with self._lock:
            self._version += 1
            self._bookings = BookingsSnapshot(version=self._version)
            self._templates = TemplateSnapshot(version=self._version)
        logger.info("Store reset (version %d)", self._version)
