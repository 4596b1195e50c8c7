"""Turn grouped records into ranked booking templates."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from booking_patterns.analysis.frequency import find_most_common_combination
from booking_patterns.analysis.grouping import group_by_customer
from booking_patterns.models import BookingRecord, BookingTemplate, CombinationFrequency

logger = logging.getLogger(__name__)


def create_booking_template(
    customer: str,
    records: Sequence[BookingRecord],
    winner: CombinationFrequency,
) -> BookingTemplate:
    """Build the template for one customer from its winning combination."""
    customer_id = records[0].customer_id if records else ""
    return BookingTemplate(
        customer=customer,
        customer_id=customer_id or customer,
        equipment=winner.equipment,
        surgeon=winner.surgeon,
        sales_rep=winner.sales_rep,
        frequency=winner.count,
        total_bookings=len(records),
    )


def generate_customer_templates(
    groups: Mapping[str, Sequence[BookingRecord]],
) -> list[BookingTemplate]:
    templates: list[BookingTemplate] = []
    for customer, records in groups.items():
        winner = find_most_common_combination(records)
        if winner is None:
            continue
        templates.append(create_booking_template(customer, records, winner))
    return templates


def rank_templates(templates: Iterable[BookingTemplate]) -> list[BookingTemplate]:
    """Most frequent first; ``sorted`` is stable so ties keep input order."""
    return sorted(templates, key=lambda template: template.frequency, reverse=True)


def analyze_booking_patterns(records: Sequence[BookingRecord]) -> list[BookingTemplate]:
    """Full deterministic pipeline: group, find winners, synthesize, rank."""
    if not records:
        return []
    groups = group_by_customer(records)
    templates = rank_templates(generate_customer_templates(groups))
    logger.debug(
        "Analyzed %d bookings across %d customers", len(records), len(templates),
    )
    return templates
