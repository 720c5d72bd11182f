"""
Opsboard — Filter Engine

Pure functions of (collection, filter state). The source sequence is never
mutated; results keep the original relative order.

Also holds the incident status-transition rule, which is the only place the
engine derives a field value rather than copying it.
"""
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from kinds import profile_for, field_value
from models import Incident, IncidentStatus

ALL = "all"


def matches_text(kind, record, text: str) -> bool:
    """Case-insensitive substring match against any searchable field."""
    if not text:
        return True
    needle = text.lower()
    return any(needle in (value or "").lower() for value in profile_for(kind).search_fields(record))


def matches_tab(kind, record, selector: Optional[str]) -> bool:
    """Exact, case-sensitive match on the kind's discriminating field."""
    if selector is None or selector == ALL:
        return True
    return field_value(record, profile_for(kind).tab_field) == selector


def filter_collection(
    kind,
    records: Sequence,
    text: str = "",
    selector: Optional[str] = ALL,
) -> list:
    """Records passing both the tab selector and the text search."""
    return [
        r for r in records
        if matches_tab(kind, r, selector) and matches_text(kind, r, text)
    ]


def apply_status_transition(
    incident: Incident,
    new_status,
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Build the patch for moving an incident to new_status.

    Moving to resolved stamps resolved_at. Moving anywhere else leaves an
    earlier resolved_at untouched: reopening keeps the resolution history
    and is not cleared pending product clarification.
    """
    status = IncidentStatus(new_status)
    patch: dict[str, Any] = {"status": status}
    if status is IncidentStatus.RESOLVED:
        patch["resolved_at"] = now or datetime.now(timezone.utc)
    return patch
