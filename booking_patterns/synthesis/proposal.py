"""Lookup and synthesis in one call: the "book the usual" flow."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime

from booking_patterns.models import BookingTemplate, Customization, RequestBody, TemplateNotFound
from booking_patterns.synthesis.lookup import find_template
from booking_patterns.synthesis.request_body import synthesize_request

logger = logging.getLogger(__name__)


def propose_booking(
    templates: Sequence[BookingTemplate],
    customer: str | None = None,
    surgeon: str | None = None,
    customization: Customization | None = None,
    *,
    now: datetime | None = None,
) -> RequestBody | TemplateNotFound:
    """Find the matching template and turn it into a request document.

    When *surgeon* is not given, ``customization.surgeon`` doubles as the
    lookup's surgeon filter.
    """
    if surgeon is None and customization is not None:
        surgeon = customization.surgeon

    result = find_template(templates, customer=customer, surgeon=surgeon)
    if isinstance(result, TemplateNotFound):
        logger.info("No template for customer=%r surgeon=%r", customer, surgeon)
        return result

    return synthesize_request(result, overrides=customization, now=now)
