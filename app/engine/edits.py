"""Edit/recompute lifecycle of a single time entry.

An entry is ACTIVE while it has no clock-out and COMPLETED once it has one.
Any edit passes through EDITED: the changes are merged and the entry is
rebuilt, which re-runs the duration recalculation, and it lands back in
ACTIVE or COMPLETED depending on whether a clock-out is now present.
"""
from enum import Enum
from typing import Any

from app.models.time_entry import TimeEntry, TimeEntryUpdate
from app.utils.logging import get_logger

log = get_logger(__name__)

TIMING_FIELDS = frozenset({"clock_in", "clock_out", "break_minutes"})
EDITABLE_FIELDS = TIMING_FIELDS | {"project_tag", "notes"}

# Fields that may not be cleared by sending null
_REQUIRED_FIELDS = frozenset({"clock_in", "break_minutes"})


class EntryState(str, Enum):
    """Lifecycle states of a time entry."""

    ACTIVE = "active"
    COMPLETED = "completed"
    EDITED = "edited"


def entry_state(entry: TimeEntry) -> EntryState:
    """Resting state of an entry."""
    if entry.clock_out is None:
        return EntryState.ACTIVE
    return EntryState.COMPLETED


def pending_changes(update: TimeEntryUpdate) -> dict[str, Any]:
    """Fields the update explicitly sets, keyed by field name."""
    changes: dict[str, Any] = {}
    for field in update.model_fields_set & EDITABLE_FIELDS:
        value = getattr(update, field)
        if value is None and field in _REQUIRED_FIELDS:
            continue
        changes[field] = value
    return changes


def recompute_required(update: TimeEntryUpdate) -> bool:
    """True when the update touches clock-in, clock-out or break minutes."""
    return bool(pending_changes(update).keys() & TIMING_FIELDS)


def apply_edit(entry: TimeEntry, update: TimeEntryUpdate) -> TimeEntry:
    """
    Apply an update to an entry and recompute its derived total.

    Args:
        entry: Current entry; left untouched
        update: Requested changes

    Returns:
        A new entry with the changes applied and ``total_hours`` derived
        from its (possibly unchanged) clock-in, clock-out and break
    """
    changes = pending_changes(update)
    if not changes:
        return entry

    previous = entry_state(entry)
    data = entry.model_dump()
    data.update(changes)
    edited = TimeEntry.model_validate(data)

    log.debug(
        "entry_edited",
        entry_id=entry.id,
        fields=sorted(changes),
        transition=[previous.value, EntryState.EDITED.value, entry_state(edited).value],
        total_hours=edited.total_hours,
    )
    return edited
