"""Daily and period aggregation of time entries."""
from collections import defaultdict
from datetime import date, tzinfo
from typing import Any, Iterable

from app.engine.pay import daily_pay, resolve_hourly_rate
from app.engine.periods import UTC, days_in_period, local_day
from app.models.time_entry import TimeEntry
from app.models.timesheet import DayAggregate, PeriodAggregate
from app.utils.logging import get_logger

log = get_logger(__name__)


def partition_by_day(
    entries: Iterable[TimeEntry],
    period_start: date,
    period_end: date,
    tz: tzinfo = UTC,
) -> dict[date, list[TimeEntry]]:
    """
    Assign each entry to the local calendar day of its clock-in.

    An entry belongs to exactly one day even when it runs past midnight.
    Entries that start outside the period are left out.
    """
    buckets: dict[date, list[TimeEntry]] = defaultdict(list)
    skipped = 0
    for entry in entries:
        day = local_day(entry.clock_in, tz)
        if period_start <= day <= period_end:
            buckets[day].append(entry)
        else:
            skipped += 1

    if skipped:
        log.debug("entries_outside_period", skipped=skipped)

    for day_entries in buckets.values():
        day_entries.sort(key=lambda e: (e.clock_in, e.id))
    return buckets


def aggregate(
    entries: Iterable[TimeEntry],
    period_start: date,
    period_end: date,
    hourly_rate: Any = None,
    tz: tzinfo = UTC,
) -> PeriodAggregate:
    """
    Build day-by-day totals with running hours and pay for a period.

    Args:
        entries: One employee's entries
        period_start: First day of the period (inclusive)
        period_end: Last day of the period (inclusive)
        hourly_rate: Pay rate; the default rate is used when unset
        tz: Timezone used to assign entries to calendar days

    Returns:
        PeriodAggregate with one DayAggregate per calendar day, including
        days without entries

    Raises:
        ValueError: If period_start is after period_end
    """
    if period_start > period_end:
        raise ValueError("period_start must not be after period_end")

    rate = resolve_hourly_rate(hourly_rate)
    buckets = partition_by_day(entries, period_start, period_end, tz)

    days: list[DayAggregate] = []
    running_hours: list[float] = []
    running_pay: list[float] = []
    hours_so_far = 0.0
    pay_so_far = 0.0

    for day in days_in_period(period_start, period_end):
        day_entries = buckets.get(day, [])
        # Active entries have no total yet and count as zero
        hours = sum((e.total_hours or 0.0 for e in day_entries), 0.0)
        pay = daily_pay(hours, rate)

        hours_so_far += hours
        pay_so_far += pay

        days.append(
            DayAggregate(
                date=day,
                entries=day_entries,
                daily_hours=hours,
                daily_pay=pay,
                break_minutes=sum(e.break_minutes for e in day_entries),
                has_active_entry=any(e.is_active for e in day_entries),
            )
        )
        running_hours.append(hours_so_far)
        running_pay.append(pay_so_far)

    return PeriodAggregate(
        period_start=period_start,
        period_end=period_end,
        hourly_rate=rate,
        days=days,
        running_hours=running_hours,
        running_pay=running_pay,
    )
