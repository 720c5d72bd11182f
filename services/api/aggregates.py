"""
Opsboard — Aggregate Calculator

Counts are always taken over the unfiltered base collection. They are
navigation aids for the tabs, not result counts of the current view.
"""
from collections import Counter
from enum import Enum
from typing import Sequence

from kinds import profile_for, field_value


def count_by(records: Sequence, field: str, values: type[Enum]) -> dict[str, int]:
    """Total under "all" plus one entry per enum value, zero-filled."""
    tally = Counter(field_value(r, field) for r in records)
    counts = {"all": len(records)}
    for member in values:
        counts[member.value] = tally.get(member.value, 0)
    return counts


def aggregate(kind, records: Sequence) -> dict[str, int]:
    """Per-tab counts for a kind (incident status, sensor type, camera status)."""
    profile = profile_for(kind)
    return count_by(records, profile.tab_field, profile.tab_values)


def status_counts(kind, records: Sequence) -> dict[str, int]:
    """Per-status counts; differs from aggregate() only for sensors."""
    return count_by(records, "status", profile_for(kind).status_values)
