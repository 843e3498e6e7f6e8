"""Calendar helpers shared by the timesheet engine."""
from datetime import date, datetime, time, timedelta, timezone, tzinfo

UTC = timezone.utc


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a timestamp to an aware UTC datetime.

    Naive values are taken to already be UTC, which is how MongoDB hands
    them back.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def utc_now() -> datetime:
    """Current wall-clock instant as an aware UTC datetime."""
    return datetime.now(UTC)


def local_today(tz: tzinfo = UTC) -> date:
    """Today's date in the given timezone."""
    return utc_now().astimezone(tz).date()


def local_day(instant: datetime, tz: tzinfo = UTC) -> date:
    """Calendar day an instant falls on in the given timezone."""
    return ensure_utc(instant).astimezone(tz).date()


def week_bounds(anchor: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing ``anchor``."""
    start = anchor - timedelta(days=anchor.weekday())
    end = start + timedelta(days=6)
    return start, end


def days_in_period(period_start: date, period_end: date) -> list[date]:
    """Every calendar day from ``period_start`` to ``period_end`` inclusive."""
    span = (period_end - period_start).days
    return [period_start + timedelta(days=offset) for offset in range(span + 1)]


def period_window(
    period_start: date,
    period_end: date,
    tz: tzinfo = UTC,
) -> tuple[datetime, datetime]:
    """
    UTC instants bounding a period of local calendar days.

    Returns:
        Half-open ``[start, end)`` pair: local midnight of ``period_start``
        and local midnight of the day after ``period_end``.
    """
    start = datetime.combine(period_start, time.min, tzinfo=tz)
    end = datetime.combine(period_end + timedelta(days=1), time.min, tzinfo=tz)
    return start.astimezone(UTC), end.astimezone(UTC)
