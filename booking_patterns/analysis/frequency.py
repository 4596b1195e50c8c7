"""Most-frequent (equipment, surgeon, sales rep) combination per customer."""

from __future__ import annotations

from collections.abc import Sequence

from booking_patterns.models import BookingRecord, Combination, CombinationFrequency


def combination_key(record: BookingRecord) -> Combination:
    return Combination(record.equipment, record.surgeon, record.sales_rep)


def count_combinations(records: Sequence[BookingRecord]) -> dict[Combination, int]:
    """Occurrences of each combination, keyed in first-appearance order."""
    counts: dict[Combination, int] = {}
    for record in records:
        key = combination_key(record)
        counts[key] = counts.get(key, 0) + 1
    return counts


def find_most_common_combination(
    records: Sequence[BookingRecord],
) -> CombinationFrequency | None:
    """Return the winning combination, or ``None`` for an empty group.

    Ties are won by the combination seen first: candidates are scanned in
    first-appearance order and the leader only changes on a strictly
    greater count.
    """
    leader: Combination | None = None
    leader_count = 0
    for key, count in count_combinations(records).items():
        if count > leader_count:
            leader, leader_count = key, count

    if leader is None:
        return None
    return CombinationFrequency(
        equipment=leader.equipment,
        surgeon=leader.surgeon,
        sales_rep=leader.sales_rep,
        count=leader_count,
    )
