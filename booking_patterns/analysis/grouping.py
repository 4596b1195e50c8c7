"""Partition canonical records by customer."""

from __future__ import annotations

from collections.abc import Iterable

from booking_patterns.models import BookingRecord


def group_by_customer(
    records: Iterable[BookingRecord],
) -> dict[str, tuple[BookingRecord, ...]]:
    """Group records by customer display name.

    Keys appear in first-appearance order and each group keeps the input
    order of its records.  Groups are never empty.
    """
    grouped: dict[str, list[BookingRecord]] = {}
    for record in records:
        grouped.setdefault(record.customer, []).append(record)
    return {customer: tuple(group) for customer, group in grouped.items()}
