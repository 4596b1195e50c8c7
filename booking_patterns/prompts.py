"""Prompts for the remote model analyzer."""

import json
from collections.abc import Sequence
from datetime import UTC, datetime

from booking_patterns.models import BookingRecord

SYSTEM_PROMPT = """You are a booking analyst for a **medical equipment rental** company.
Hospitals and clinics (customers) rent surgical equipment sets for specific
surgeries. Each booking names the customer, the surgeon, the sales
representative who handled it and the equipment that was delivered.

You read historical bookings and return structured, factual answers.
Never invent customers, surgeons or sales representatives that do not appear
in the data."""

PATTERN_PROMPT_TEMPLATE = """## Current Date
Today is **{current_date}** ({current_day_of_week}). Suggested booking dates must be
in the future and fall on a weekday.

## Bookings
```json
{bookings_json}
```

## Task
For each customer, identify their MOST COMMON combination of:
- Equipment (including material codes and quantities, when the data has them)
- Surgeon
- Sales representative
- Reservation type

Then, per customer:
1. Report how many times that exact combination appears (`frequency`) and how many
   bookings the customer has in total (`total_bookings`).
2. Give a confidence score between 0.0 and 1.0 based on how consistent the pattern is.
3. Write one or two sentences of practical insight about the customer's preferences.
4. Draft a suggested booking request with a realistic future date, helpful notes,
   and a priority (`high`, `medium` or `low`) based on frequency and customer importance.

## Field Rules
- `equipment` is a human-readable name such as "Spine Surgery Set" or "Cranial Kit".
  Never put JSON or material codes in it.
- `items` holds the material codes and exact quantities from the most common pattern.
- Use the `customerId` values exactly as they appear in the data.
- Notes are plain text, not JSON.

Return only the single most common pattern per customer."""

INSIGHTS_PROMPT_TEMPLATE = """## Bookings
```json
{bookings_json}
```

## Task
Provide:
1. Overall insights about booking patterns, trends and relationships.
2. Business recommendations for improving efficiency and revenue.
3. Strategic suggestions for customer relationship management.

Focus on actionable observations a medical equipment company could act on."""


def _bookings_json(records: Sequence[BookingRecord]) -> str:
    return json.dumps([record.to_dict() for record in records], indent=2)


def get_pattern_prompt(records: Sequence[BookingRecord], now: datetime | None = None) -> str:
    """Return the per-customer pattern prompt with today's date injected."""
    now = now or datetime.now(UTC)
    return PATTERN_PROMPT_TEMPLATE.format(
        current_date=now.strftime("%B %d, %Y"),
        current_day_of_week=now.strftime("%A"),
        bookings_json=_bookings_json(records),
    )


def get_insights_prompt(records: Sequence[BookingRecord]) -> str:
    return INSIGHTS_PROMPT_TEMPLATE.format(bookings_json=_bookings_json(records))
