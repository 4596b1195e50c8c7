"""Find the template a caller is asking for by customer and/or surgeon."""

from __future__ import annotations

from collections.abc import Sequence

from booking_patterns.models import BookingTemplate, TemplateNotFound


def _matches(value: str, needle: str) -> bool:
    return needle.lower() in value.lower()


def _distinct(values) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def _not_found(
    templates: Sequence[BookingTemplate],
    message: str,
    customer: str | None,
    surgeon: str | None,
) -> TemplateNotFound:
    return TemplateNotFound(
        message=message,
        customer_filter=customer,
        surgeon_filter=surgeon,
        available_customers=_distinct(t.customer for t in templates),
        available_surgeons=_distinct(t.surgeon for t in templates),
    )


def find_template(
    templates: Sequence[BookingTemplate],
    customer: str | None = None,
    surgeon: str | None = None,
) -> BookingTemplate | TemplateNotFound:
    """Case-insensitive substring lookup.

    A customer filter selects the first template whose customer matches; a
    surgeon filter given alongside it must then match that template's
    surgeon.  A surgeon filter on its own selects the first template whose
    surgeon matches.  Misses (and calls with no filter) return
    :class:`TemplateNotFound` listing the names that are available.
    """
    customer = customer.strip() if customer and customer.strip() else None
    surgeon = surgeon.strip() if surgeon and surgeon.strip() else None

    if customer is None and surgeon is None:
        return _not_found(
            templates, "Provide a customer or surgeon to look up a template.", None, None,
        )

    if customer is not None:
        match = next((t for t in templates if _matches(t.customer, customer)), None)
        if match is None:
            return _not_found(
                templates, f"No template found for customer '{customer}'.", customer, surgeon,
            )
        if surgeon is not None and not _matches(match.surgeon, surgeon):
            return _not_found(
                templates,
                f"Template for customer '{match.customer}' does not use surgeon '{surgeon}'.",
                customer,
                surgeon,
            )
        return match

    match = next((t for t in templates if _matches(t.surgeon, surgeon)), None)
    if match is None:
        return _not_found(
            templates, f"No template found for surgeon '{surgeon}'.", None, surgeon,
        )
    return match


lookup = find_template
