"""Build a submission-ready booking request from a template."""

from __future__ import annotations

import logging
from datetime import datetime

from booking_patterns.config import (
    DEFAULT_CURRENCY,
    DEFAULT_NOTE_LANGUAGE,
    DEFAULT_RESERVATION_TYPE,
    DEFAULT_SURGERY_TYPE,
)
from booking_patterns.models import (
    BookingTemplate,
    Customization,
    RequestBody,
    RequestItem,
    RequestNote,
    ResolvedSchedule,
    ScheduleSpec,
)
from booking_patterns.synthesis.material import derive_material_code
from booking_patterns.synthesis.schedule import resolve_schedule

logger = logging.getLogger(__name__)

SHORT_DESCRIPTION_LENGTH = 15


def _items(
    template: BookingTemplate,
    material_code: str,
    overrides: Customization,
) -> tuple[RequestItem, ...]:
    if overrides.items:
        return overrides.items
    if template.items:
        return tuple(
            RequestItem(material_id=item.material_id or material_code, quantity=item.quantity)
            for item in template.items
        )
    return (RequestItem(material_id=material_code, quantity=1),)


def _note(template: BookingTemplate, surgeon: str, overrides: Customization) -> RequestNote:
    if overrides.notes:
        content = overrides.notes
    else:
        content = f"{template.equipment} - {surgeon} - {template.sales_rep}"
    return RequestNote(language=DEFAULT_NOTE_LANGUAGE, note_content=content)


def build_request_body(
    template: BookingTemplate,
    schedule: ResolvedSchedule,
    material_code: str,
    overrides: Customization | None = None,
) -> RequestBody:
    """Assemble the request document.

    Overrides win over template values, template values win over the
    configured defaults.  The document is always a draft simulation unless
    the caller explicitly passes ``is_draft=False``.
    """
    overrides = overrides or Customization()
    surgeon = overrides.surgeon or template.surgeon

    return RequestBody(
        items=_items(template, material_code, overrides),
        notes=(_note(template, surgeon, overrides),),
        is_draft=overrides.is_draft is not False,
        currency=DEFAULT_CURRENCY,
        customer=template.customer_id,
        customer_name=template.customer,
        day_of_use=schedule.day_of_use,
        end_of_use=schedule.end_of_use,
        delivery_date=schedule.delivery_date,
        return_date=schedule.return_date,
        collection_date=schedule.return_date,
        description=template.equipment[:SHORT_DESCRIPTION_LENGTH],
        equipment_description=template.equipment,
        surgery_type=DEFAULT_SURGERY_TYPE,
        is_simulation=True,
        reservation_type=template.reservation_type or DEFAULT_RESERVATION_TYPE,
        surgery_description=surgeon,
    )


def synthesize_request(
    template: BookingTemplate,
    schedule: ScheduleSpec | None = None,
    overrides: Customization | None = None,
    *,
    now: datetime | None = None,
) -> RequestBody:
    """Resolve the schedule, derive the material code and build the body.

    *schedule* takes precedence over ``overrides.date``.
    """
    spec = schedule or (overrides.date if overrides else None)
    resolved = resolve_schedule(spec, now=now)
    material_code = derive_material_code(template.equipment)
    body = build_request_body(template, resolved, material_code, overrides)
    logger.debug(
        "Synthesized request for %s on %s (draft=%s)",
        template.customer, body.day_of_use, body.is_draft,
    )
    return body
