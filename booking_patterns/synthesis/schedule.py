"""Resolve a requested date and time of use into concrete UTC instants.

Accepted dates are ISO dates/datetimes (``2026-10-20``,
``2026-10-20T14:30:00Z``) and the keywords ``tomorrow``, ``next week``,
``next month`` and ``next year``.  Anything else, including no date at all,
resolves to the day after *now*.  Equipment is never delivered for a
weekend, so the day of use is pushed forward to the next Monday when needed.

Times of day accept ``14``, ``14:30``, ``9.15``, ``2pm``, ``12am`` and
similar.  An unparseable time falls back to the start of the business day.

Around the day of use:

* ``endOfUse``      same day, 23:59:59.999
* ``deliveryDate``  previous day, 10:00
* ``returnDate``    next day, 16:00
"""

from __future__ import annotations

import calendar
import logging
import re
from datetime import UTC, date, datetime, time, timedelta

from booking_patterns.config import BUSINESS_DAY_START_HOUR
from booking_patterns.models import ResolvedSchedule, ScheduleSpec
from booking_patterns.timeutil import ensure_utc, to_iso_utc, utc_now

logger = logging.getLogger(__name__)

DELIVERY_TIME = time(10, 0)
RETURN_TIME = time(16, 0)
END_OF_DAY = time(23, 59, 59, 999_000)

# keyword → (days, months)
_KEYWORD_OFFSETS: dict[str, tuple[int, int]] = {
    "tomorrow": (1, 0),
    "next week": (7, 0),
    "next month": (0, 1),
    "next year": (0, 12),
}

_TIME_RE = re.compile(r"^(\d{1,2})(?:[:.](\d{1,2}))?")
_HAS_TIME_RE = re.compile(r"[T ]\d")

# room for delivery the day before and return after a two-day weekend skip
_EARLIEST_DAY = date.min + timedelta(days=1)
_LATEST_DAY = date.max - timedelta(days=3)


def _add_months(value: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _parse_absolute(text: str) -> datetime | None:
    candidate = text[:-1] + "+00:00" if text[-1:] in ("Z", "z") else text
    try:
        return ensure_utc(datetime.fromisoformat(candidate))
    except (ValueError, OverflowError):
        return None


def _schedulable(day: date) -> bool:
    return _EARLIEST_DAY <= day <= _LATEST_DAY


def _resolve_base(raw_date: str | None, now: datetime) -> tuple[date, time | None]:
    """Return the calendar day and, for absolute datetimes, their explicit time."""
    tomorrow = min(now.date(), _LATEST_DAY) + timedelta(days=1)
    if not raw_date or not raw_date.strip():
        return tomorrow, None

    text = raw_date.strip()
    keyword = " ".join(text.lower().split())
    if keyword in _KEYWORD_OFFSETS:
        days, months = _KEYWORD_OFFSETS[keyword]
        try:
            day = _add_months(now, months).date() + timedelta(days=days)
        except (ValueError, OverflowError):
            day = None
        if day is None or not _schedulable(day):
            logger.debug("Date %r runs off the calendar, using tomorrow", raw_date)
            return tomorrow, None
        return day, None

    parsed = _parse_absolute(text)
    if parsed is None:
        logger.debug("Unparseable date %r, using tomorrow", raw_date)
        return tomorrow, None
    if not _schedulable(parsed.date()):
        logger.debug("Date %r runs off the calendar, using tomorrow", raw_date)
        return tomorrow, None

    explicit = parsed.time() if _HAS_TIME_RE.search(text) else None
    return parsed.date(), explicit


def parse_time_of_day(text: str | None) -> time | None:
    """Parse ``2pm``, ``14:30``, ``9.15am`` ...  Returns ``None`` if invalid."""
    if not text:
        return None
    cleaned = text.strip().lower()
    match = _TIME_RE.match(cleaned)
    if not match:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    if cleaned.endswith("pm") and hour < 12:
        hour += 12
    elif cleaned.endswith("am") and hour == 12:
        hour = 0

    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def next_weekday(day: date) -> date:
    """*day* itself if Monday to Friday, otherwise the following Monday."""
    while day.weekday() >= 5:
        day += timedelta(days=1)
    return day


def resolve_schedule(
    spec: ScheduleSpec | None = None,
    *,
    now: datetime | None = None,
) -> ResolvedSchedule:
    """Resolve *spec* against *now* (current UTC time by default).  Never raises."""
    now = ensure_utc(now) if now is not None else utc_now()
    spec = spec or ScheduleSpec()

    day, explicit_time = _resolve_base(spec.date, now)
    day = next_weekday(day)

    time_of_use = parse_time_of_day(spec.time)
    if time_of_use is None:
        if spec.time:
            logger.debug("Invalid time %r, using business day start", spec.time)
            explicit_time = None
        time_of_use = explicit_time or time(BUSINESS_DAY_START_HOUR, 0)

    return ResolvedSchedule(
        day_of_use=to_iso_utc(datetime.combine(day, time_of_use, tzinfo=UTC)),
        end_of_use=to_iso_utc(datetime.combine(day, END_OF_DAY, tzinfo=UTC)),
        delivery_date=to_iso_utc(
            datetime.combine(day - timedelta(days=1), DELIVERY_TIME, tzinfo=UTC)
        ),
        return_date=to_iso_utc(
            datetime.combine(day + timedelta(days=1), RETURN_TIME, tzinfo=UTC)
        ),
    )
