"""Pull the list of raw bookings out of whatever a booking source returned.

Booking data arrives either as a bare list, as ``{"bookings": [...]}`` or
``{"data": [...]}``, or wrapped in a tool-call result whose ``content`` is a
list of ``{"type": "text", "text": "<json>"}`` blocks.  JSON strings are
decoded first.  Anything unrecognised yields an empty list.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

_LIST_KEYS = ("bookings", "data")


def _from_mapping(payload: Mapping[str, Any]) -> list[Any] | None:
    for key in _LIST_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            return value
    return None


def _from_content_blocks(blocks: list[Any]) -> list[Any] | None:
    for block in blocks:
        if not isinstance(block, Mapping) or block.get("type") != "text" or not block.get("text"):
            continue
        try:
            parsed = json.loads(block["text"])
        except (TypeError, ValueError) as exc:
            logger.warning("Failed to parse booking content block: %s", exc)
            continue
        if isinstance(parsed, list):
            return parsed
        if isinstance(parsed, Mapping):
            found = _from_mapping(parsed)
            if found is not None:
                return found
    return None


def extract_booking_payloads(result: Any) -> list[Any]:
    """Return the raw booking payloads contained in *result*."""
    if isinstance(result, (str, bytes)):
        try:
            result = json.loads(result)
        except ValueError as exc:
            logger.warning("Booking result is not valid JSON: %s", exc)
            return []

    if isinstance(result, list):
        return result
    if not isinstance(result, Mapping):
        return []

    content = result.get("content")
    if isinstance(content, list):
        found = _from_content_blocks(content)
        if found is not None:
            return found

    found = _from_mapping(result)
    if found is not None:
        return found

    logger.debug("No booking list found in result with keys %s", list(result))
    return []
