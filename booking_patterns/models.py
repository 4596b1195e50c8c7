"""Pydantic models shared by the analysis and synthesis layers.

Every model is frozen and uses camelCase aliases on the wire, so
``model.to_dict()`` produces the exact document shape external
collaborators expect (``customerId``, ``salesRep``, ``dayOfUse``, ...).
Sequences are stored as tuples to keep instances immutable.
"""

from __future__ import annotations

from typing import Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class _FrozenModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_dict(self) -> dict:
        """JSON-compatible dict with camelCase keys and unset optionals dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ── Historical data ─────────────────────────────────────────────────


class BookingRecord(_FrozenModel):
    """One canonical historical booking. Every field is populated."""

    id: str
    customer: str
    customer_id: str
    surgeon: str
    sales_rep: str
    equipment: str
    date: str
    status: str
    value: float = 0.0


class Combination(NamedTuple):
    """The (equipment, surgeon, sales rep) triple used as a counting key."""

    equipment: str
    surgeon: str
    sales_rep: str


class CombinationFrequency(NamedTuple):
    equipment: str
    surgeon: str
    sales_rep: str
    count: int


# ── Templates ───────────────────────────────────────────────────────


class TemplateItem(_FrozenModel):
    """A material line carried by a model-generated template."""

    material_id: str | None = None
    quantity: int = Field(default=1, ge=1)
    description: str | None = None


class SuggestedBookingRequest(_FrozenModel):
    customer_id: str
    customer_name: str
    equipment: str
    surgeon: str
    sales_rep_id: str
    sales_rep_name: str
    reservation_type: str | None = None
    estimated_date: str
    notes: str
    priority: Literal["high", "medium", "low"]


class BookingTemplate(_FrozenModel):
    """A customer's most frequent combination, the seed for a new booking.

    The deterministic analyzer fills only the core fields.  ``items``,
    ``reservation_type``, ``confidence``, ``insights`` and
    ``suggested_booking_request`` come from the remote model analyzer.
    """

    customer: str
    customer_id: str
    equipment: str
    surgeon: str
    sales_rep: str
    frequency: int
    total_bookings: int
    items: tuple[TemplateItem, ...] | None = None
    reservation_type: str | None = None
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    insights: str | None = None
    suggested_booking_request: SuggestedBookingRequest | None = None

    @model_validator(mode="after")
    def _check_frequency(self) -> BookingTemplate:
        if not 1 <= self.frequency <= self.total_bookings:
            raise ValueError(
                f"frequency must be between 1 and totalBookings "
                f"({self.total_bookings}), got {self.frequency}"
            )
        return self


class TemplateNotFound(_FrozenModel):
    """Lookup miss, carrying the names a caller can suggest instead."""

    found: Literal[False] = False
    message: str
    customer_filter: str | None = None
    surgeon_filter: str | None = None
    available_customers: tuple[str, ...] = ()
    available_surgeons: tuple[str, ...] = ()


# ── Scheduling ──────────────────────────────────────────────────────


class ScheduleSpec(_FrozenModel):
    """Requested date and time of use.

    ``date`` is an ISO date/datetime or one of ``tomorrow``, ``next week``,
    ``next month`` and ``next year``.  ``time`` is a time of day such as
    ``2pm`` or ``14:00``.
    """

    date: str | None = None
    time: str | None = None


class ResolvedSchedule(_FrozenModel):
    """Concrete UTC instants, all ISO-8601 strings with a ``Z`` suffix."""

    day_of_use: str
    end_of_use: str
    delivery_date: str
    return_date: str


# ── Request document ────────────────────────────────────────────────


class RequestItem(_FrozenModel):
    material_id: str
    quantity: int = Field(default=1, ge=1)


class RequestNote(_FrozenModel):
    language: str
    note_content: str


class Customization(_FrozenModel):
    """Caller overrides for a synthesized booking request."""

    surgeon: str | None = None
    date: ScheduleSpec | None = None
    notes: str | None = None
    is_draft: bool | None = None
    items: tuple[RequestItem, ...] | None = None


class RequestBody(_FrozenModel):
    """Submission-ready booking document."""

    items: tuple[RequestItem, ...]
    notes: tuple[RequestNote, ...]
    is_draft: bool = True
    currency: str
    customer: str
    customer_name: str
    day_of_use: str
    end_of_use: str
    delivery_date: str
    return_date: str
    collection_date: str
    description: str
    equipment_description: str
    surgery_type: str
    is_simulation: bool = True
    reservation_type: str
    surgery_description: str


# ── Store snapshots ─────────────────────────────────────────────────


class BookingsSnapshot(_FrozenModel):
    """The canonical booking history currently installed in a store."""

    version: int = 0
    bookings: tuple[BookingRecord, ...] = ()
    received_at: str | None = None


class TemplateSnapshot(_FrozenModel):
    """The ranked templates derived from one bookings snapshot."""

    version: int = 0
    templates: tuple[BookingTemplate, ...] = ()
    generated_at: str | None = None
    source_bookings: int = 0
    strategy: str | None = None
