"""Overlapping shift detection.

Active entries are treated as running until "now", so results that involve
an active entry depend on when the check runs. Pass ``now`` (or a ``clock``)
to make a check reproducible.
"""
from collections import defaultdict
from datetime import date, datetime, tzinfo
from typing import Callable, Iterable, Optional

from app.engine.periods import UTC, ensure_utc, local_day, utc_now
from app.models.time_entry import TimeEntry
from app.models.timesheet import Conflict
from app.utils.logging import get_logger

log = get_logger(__name__)

Clock = Callable[[], datetime]


def effective_end(entry: TimeEntry, now: datetime) -> datetime:
    """End of an entry's interval; ``now`` for an entry still clocked in."""
    if entry.clock_out is None:
        return now
    return entry.clock_out


def overlaps(first: TimeEntry, second: TimeEntry, now: datetime) -> bool:
    """
    Half-open interval intersection test.

    Back-to-back entries (one ends exactly when the other starts) do not
    overlap.
    """
    return (
        first.clock_in < effective_end(second, now)
        and second.clock_in < effective_end(first, now)
    )


def find_conflicts(
    entries: Iterable[TimeEntry],
    now: Optional[datetime] = None,
    clock: Clock = utc_now,
    tz: tzinfo = UTC,
) -> list[Conflict]:
    """
    Find every pair of overlapping entries per employee and calendar day.

    Args:
        entries: Entries to check, usually one employee's period
        now: Instant used as the end of active entries (defaults to clock())
        clock: Time source consulted when ``now`` is not given
        tz: Timezone used to assign entries to calendar days

    Returns:
        Conflicts ordered by day, each unordered pair reported once with the
        earlier-starting entry first
    """
    if now is None:
        now = clock()
    now = ensure_utc(now)

    groups: dict[tuple[str, date], list[TimeEntry]] = defaultdict(list)
    for entry in entries:
        groups[(entry.employee_id, local_day(entry.clock_in, tz))].append(entry)

    conflicts: list[Conflict] = []
    for key in sorted(groups):
        day = key[1]
        day_entries = sorted(groups[key], key=lambda e: (e.clock_in, e.id))
        for index, first in enumerate(day_entries):
            for second in day_entries[index + 1:]:
                if overlaps(first, second, now):
                    conflicts.append(
                        Conflict(day=day, entry_a_id=first.id, entry_b_id=second.id)
                    )

    if conflicts:
        log.debug("conflicts_found", count=len(conflicts), evaluated_at=now.isoformat())
    return conflicts


def conflicting_entry_ids(conflicts: Iterable[Conflict]) -> set[str]:
    """Ids of every entry that takes part in at least one conflict."""
    ids: set[str] = set()
    for conflict in conflicts:
        ids.add(conflict.entry_a_id)
        ids.add(conflict.entry_b_id)
    return ids
