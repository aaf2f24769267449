"""Time window calculation - Pure functions.

Converts a symbolic time range ("hour", "day", ...) into the absolute
start/end pair sent to the feed.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


# Window length in days for each time range symbol
TIME_RANGE_DAYS: dict[str, float] = {
    "hour": 1 / 24,
    "day": 1.0,
    "week": 7.0,
    "month": 30.0,
    "year": 365.0,
}

DEFAULT_DAYS = 7.0

# Feed expects second precision, no offset suffix, in UTC
FEED_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"


@dataclass(frozen=True)
class TimeWindow:
    """Absolute query window.

    Attributes:
        start: Window start (inclusive)
        end: Window end, equal to the "now" it was computed from
    """
    start: datetime
    end: datetime


def get_window_days(time_range: str) -> float:
    """Return the window length in days, 7 for unknown symbols."""
    return TIME_RANGE_DAYS.get(time_range, DEFAULT_DAYS)


def compute_time_window(time_range: str, now: datetime) -> TimeWindow:
    """Compute the query window ending at ``now``.

    Pure function.

    Args:
        time_range: One of hour/day/week/month/year
        now: Current wall-clock time

    Returns:
        TimeWindow with end == now
    """
    days = get_window_days(time_range)
    return TimeWindow(start=now - timedelta(days=days), end=now)


def format_feed_time(value: datetime) -> str:
    """Format a datetime as the feed's UTC timestamp string.

    Naive datetimes are assumed to be UTC already.
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime(FEED_TIME_FORMAT)
