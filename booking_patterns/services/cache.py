"""Thread-safe in-memory LRU cache with a byte-size ceiling.

Used by the remote model analyzer so that re-analysing an identical booking
history does not pay for a second model call.  Keys are fingerprints of the
input records (see :func:`fingerprint_records`); values are the resulting
template tuples.

• **OrderedDict** for O(1) LRU eviction and promotion.
• **Size tracking** via the JSON byte length of the value.
• **threading.Lock** because the HTTP adapter runs analyses on worker threads.
• Purely ephemeral: entries are lost on process restart.

>>> cache = LRUCache(max_bytes=1024 * 1024)
>>> cache.put("analysis:3f2a...", (template_a, template_b))
>>> cache.get("analysis:3f2a...")
(template_a, template_b)
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections import OrderedDict
from collections.abc import Iterable
from typing import Any

from booking_patterns.models import BookingRecord

logger = logging.getLogger(__name__)

# Default ceiling: 5 MB
DEFAULT_MAX_BYTES = 5 * 1024 * 1024


def _json_default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return str(value)


def fingerprint_records(records: Iterable[BookingRecord], *, namespace: str = "analysis") -> str:
    """Stable cache key for an ordered booking history."""
    payload = json.dumps(
        [record.to_dict() for record in records], sort_keys=True, separators=(",", ":"),
    )
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return f"{namespace}:{digest}"


class LRUCache:
    """Least-Recently-Used cache bounded by total estimated byte size."""

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES) -> None:
        self._max_bytes = max_bytes
        self._current_bytes = 0
        # key → (value, estimated_size_bytes)
        self._store: OrderedDict[str, tuple[Any, int]] = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def _estimate_bytes(value: Any) -> int:
        try:
            return len(json.dumps(value, default=_json_default).encode("utf-8"))
        except (TypeError, ValueError, OverflowError):
            return len(str(value).encode("utf-8"))

    # ── Core operations ──────────────────────────────────────────────

    def get(self, key: str) -> Any | None:
        """Return the cached value (promoting it to MRU) or ``None``."""
        with self._lock:
            if key not in self._store:
                return None
            self._store.move_to_end(key)
            value, _ = self._store[key]
            return value

    def put(self, key: str, value: Any) -> None:
        """Insert or overwrite *key*, evicting LRU entries to make room."""
        size = self._estimate_bytes(value)
        if size > self._max_bytes:
            logger.debug(
                "Cache: skipping key %s (size %d > max %d)", key, size, self._max_bytes,
            )
            return

        with self._lock:
            if key in self._store:
                _, old_size = self._store.pop(key)
                self._current_bytes -= old_size

            while self._current_bytes + size > self._max_bytes and self._store:
                evicted_key, (_, evicted_size) = self._store.popitem(last=False)
                self._current_bytes -= evicted_size
                logger.debug("Cache: evicted %s (%d bytes)", evicted_key, evicted_size)

            self._store[key] = (value, size)
            self._current_bytes += size

    def invalidate(self, key: str) -> bool:
        """Remove a single key.  Returns ``True`` if the key existed."""
        with self._lock:
            if key in self._store:
                _, size = self._store.pop(key)
                self._current_bytes -= size
                return True
            return False

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._current_bytes = 0

    # ── Introspection ────────────────────────────────────────────────

    @property
    def current_bytes(self) -> int:
        return self._current_bytes

    @property
    def entry_count(self) -> int:
        return len(self._store)

    def has(self, key: str) -> bool:
        """Check if a key is present *without* promoting it."""
        return key in self._store
