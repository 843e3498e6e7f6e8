"""Duration recalculation for time entries."""
import math
from datetime import datetime
from typing import Any, Optional

from app.engine.periods import ensure_utc


def clamp_break_minutes(value: Any) -> int:
    """
    Coerce a break value to a non-negative whole number of minutes.

    Args:
        value: Raw break value (int, float, numeric string, None, ...)

    Returns:
        Break minutes; anything non-numeric, negative, NaN or too large
        for a float becomes 0

    Examples:
        >>> clamp_break_minutes(30)
        30
        >>> clamp_break_minutes("45")
        45
        >>> clamp_break_minutes(-10)
        0
        >>> clamp_break_minutes("lunch")
        0
    """
    if value is None or isinstance(value, bool):
        return 0

    try:
        minutes = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0

    if math.isnan(minutes) or math.isinf(minutes) or minutes < 0:
        return 0

    return int(minutes)


def recompute(
    clock_in: datetime,
    clock_out: Optional[datetime],
    break_minutes: Any = 0,
) -> Optional[float]:
    """
    Derive worked hours for a session.

    Args:
        clock_in: Start of the session
        clock_out: End of the session, or None while still clocked in
        break_minutes: Unpaid break to subtract

    Returns:
        Worked hours, never negative, or None for an active session

    Examples:
        >>> from datetime import datetime
        >>> recompute(datetime(2025, 3, 3, 9), datetime(2025, 3, 3, 17), 30)
        7.5
        >>> recompute(datetime(2025, 3, 3, 17), datetime(2025, 3, 3, 9), 0)
        0.0
    """
    if clock_out is None:
        return None

    raw_minutes = (ensure_utc(clock_out) - ensure_utc(clock_in)).total_seconds() / 60
    worked_minutes = max(0.0, raw_minutes - clamp_break_minutes(break_minutes))
    return worked_minutes / 60
