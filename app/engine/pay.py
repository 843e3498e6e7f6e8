"""Pay derivation from aggregated hours."""
import math
from typing import Any, Sequence

DEFAULT_HOURLY_RATE = 25.0


def is_valid_rate(rate: Any) -> bool:
    """True when ``rate`` is a usable non-negative number."""
    if rate is None or isinstance(rate, bool):
        return False
    try:
        value = float(rate)
    except (TypeError, ValueError):
        return False
    return not math.isnan(value) and not math.isinf(value) and value >= 0


def resolve_hourly_rate(rate: Any, default: float = DEFAULT_HOURLY_RATE) -> float:
    """Return ``rate`` as a float, or ``default`` when it is unset or unusable."""
    if is_valid_rate(rate):
        return float(rate)
    return float(default)


def daily_pay(hours: float, rate: float) -> float:
    return hours * rate


def period_pay(running_hours: Sequence[float], rate: float) -> float:
    """Pay for a whole period: the last running total times the rate."""
    if not running_hours:
        return 0.0
    return running_hours[-1] * rate


def format_hours(hours: float) -> str:
    """
    Render decimal hours as ``HH:MM``.

    Examples:
        >>> format_hours(7.5)
        '07:30'
        >>> format_hours(0)
        '00:00'
    """
    whole = int(hours)
    minutes = round((hours - whole) * 60)
    if minutes == 60:
        whole += 1
        minutes = 0
    return f"{whole:02d}:{minutes:02d}"
