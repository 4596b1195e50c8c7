"""Map raw booking payloads of arbitrary shape onto :class:`BookingRecord`.

Each attribute is resolved by trying a list of source keys in priority
order (display names before raw identifiers).  Missing, ``None`` and blank
values fall through to the next key and finally to a fixed placeholder, so
the result is always fully populated and this module never raises.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from typing import Any

from booking_patterns.models import BookingRecord
from booking_patterns.timeutil import to_iso_utc, utc_now

logger = logging.getLogger(__name__)

DEFAULT_EQUIPMENT = "Unknown Equipment"
DEFAULT_SURGEON = "Unknown Surgeon"
DEFAULT_SALES_REP = "Unknown Sales Rep"
DEFAULT_CUSTOMER = "Unknown Customer"
DEFAULT_STATUS = "Unknown Status"
DEFAULT_ID = "unknown"

_ID_KEYS = ("bookingId", "id")
_CUSTOMER_KEYS = ("customerName", "customer")
_CUSTOMER_ID_KEYS = ("customerId", "customer")
_SURGEON_KEYS = ("surgeonName", "surgeon")
_SALES_REP_KEYS = ("salesRepName", "salesRep", "salesrep")
_EQUIPMENT_KEYS = ("equipment", "equipmentDescription")
_ITEM_EQUIPMENT_KEYS = ("materialId", "description")
_DATE_KEYS = ("dayOfUse", "createdOn", "deliveryDate", "date")
_STATUS_KEYS = ("bookingStatus", "status")
_VALUE_KEYS = ("estimatedValue", "value")

_LEADING_NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _as_text(value: Any) -> str | None:
    """Return a stripped string for scalar values, ``None`` for blanks."""
    if value is None or isinstance(value, (Mapping, list, tuple, set)):
        return None
    if isinstance(value, bool):
        return str(value).lower()
    text = str(value).strip()
    return text or None


def _first_text(raw: Mapping[str, Any], keys: Iterable[str]) -> str | None:
    for key in keys:
        text = _as_text(raw.get(key))
        if text is not None:
            return text
    return None


def _first_item(raw: Mapping[str, Any]) -> Mapping[str, Any]:
    items = raw.get("items")
    if isinstance(items, Sequence) and not isinstance(items, (str, bytes)) and items:
        first = items[0]
        if isinstance(first, Mapping):
            return first
    return {}


def _parse_value(raw: Mapping[str, Any]) -> float:
    """Read the leading decimal number: ``"12abc"`` is 12, ``"1_000"`` is 1.

    Text without a leading number, and anything that overflows, is 0.
    """
    text = _first_text(raw, _VALUE_KEYS)
    match = _LEADING_NUMBER_RE.match(text) if text is not None else None
    if match is None:
        return 0.0
    number = float(match.group())
    return number if math.isfinite(number) else 0.0


def normalize_record(raw: Any, *, now: datetime | None = None) -> BookingRecord:
    """Build a canonical record from one raw payload.

    Args:
        raw: The external record.  Anything that is not a mapping is
            treated as an empty record.
        now: Reference instant used when the payload carries no date.
    """
    if not isinstance(raw, Mapping):
        logger.debug("Non-mapping booking payload (%s) normalized to defaults", type(raw).__name__)
        raw = {}

    customer = _first_text(raw, _CUSTOMER_KEYS) or DEFAULT_CUSTOMER
    equipment = (
        _first_text(raw, _EQUIPMENT_KEYS)
        or _first_text(_first_item(raw), _ITEM_EQUIPMENT_KEYS)
        or DEFAULT_EQUIPMENT
    )
    date = _first_text(raw, _DATE_KEYS) or to_iso_utc(now or utc_now())

    return BookingRecord(
        id=_first_text(raw, _ID_KEYS) or DEFAULT_ID,
        customer=customer,
        customer_id=_first_text(raw, _CUSTOMER_ID_KEYS) or DEFAULT_ID,
        surgeon=_first_text(raw, _SURGEON_KEYS) or DEFAULT_SURGEON,
        sales_rep=_first_text(raw, _SALES_REP_KEYS) or DEFAULT_SALES_REP,
        equipment=equipment,
        date=date,
        status=_first_text(raw, _STATUS_KEYS) or DEFAULT_STATUS,
        value=_parse_value(raw),
    )


def normalize_records(
    raws: Iterable[Any], *, now: datetime | None = None,
) -> list[BookingRecord]:
    """Normalize a batch, sharing one reference instant for missing dates."""
    reference = now or utc_now()
    return [normalize_record(raw, now=reference) for raw in raws]
