"""
Relative Time Formatting

Formats a timestamp as a "time ago" string ("3 hours ago", "Yesterday",
"Just now") from the calendar difference between the timestamp and now.
"""

from datetime import datetime, timezone
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

JUST_NOW = "Just now"

# (unit, singular numeric, singular worded), largest first
_UNITS = [
    ("year", "1 year ago", "Last year"),
    ("month", "1 month ago", "Last month"),
    ("week", "1 week ago", "Last week"),
    ("day", "1 day ago", "Yesterday"),
    ("hour", "1 hour ago", "An hour ago"),
    ("minute", "1 minute ago", "A minute ago"),
]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def calendar_components(earliest: datetime, latest: datetime) -> dict:
    """
    Split the span between two datetimes into calendar components.

    Weeks are carved out of the day count, so ``day`` is the remainder
    after whole weeks.
    """
    delta = relativedelta(latest, earliest)
    return {
        "year": delta.years,
        "month": delta.months,
        "week": delta.weeks,
        "day": delta.days - delta.weeks * 7,
        "hour": delta.hours,
        "minute": delta.minutes,
        "second": delta.seconds,
    }


def time_ago_since_date(date: datetime, numeric_dates: bool,
                        now: Optional[datetime] = None) -> str:
    """
    Format a datetime relative to now.

    Args:
        date: The moment to describe. Naive datetimes are treated as UTC.
        numeric_dates: If True, singular cases read "1 day ago"; otherwise
            they read "Yesterday", "Last week" and so on.
        now: Reference time, defaults to the current UTC time.

    Returns:
        str: The largest non-zero calendar unit, e.g. "5 months ago",
        or "Just now" when less than a minute apart.
    """
    date = _as_utc(date)
    now = _as_utc(now) if now is not None else datetime.now(timezone.utc)

    earliest, latest = (date, now) if date <= now else (now, date)
    components = calendar_components(earliest, latest)

    for unit, numeric, worded in _UNITS:
        count = components[unit]
        if count >= 2:
            return f"{count} {unit}s ago"
        if count >= 1:
            return numeric if numeric_dates else worded

    return JUST_NOW


def time_ago_since_unix(unix: Union[int, float], now: Optional[datetime] = None) -> str:
    """Format seconds since the epoch relative to now, using numeric wording."""
    date = datetime.fromtimestamp(float(unix), tz=timezone.utc)
    return time_ago_since_date(date, numeric_dates=True, now=now)
