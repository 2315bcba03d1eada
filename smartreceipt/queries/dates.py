"""
Calendar helpers shared by the aggregation and history engines.

All comparisons are between calendar days (`datetime.date`), never
timestamps, so "same day" cannot drift across a timezone boundary.
"""

from datetime import date, datetime, timedelta
from typing import Optional, Union

# `date.weekday()` numbering
MONDAY = 0
SUNDAY = 6

DateInput = Union[date, datetime, str, None]


def parse_date_bound(value: DateInput) -> Optional[date]:
    """
    Turn a raw range bound into a date.

    Accepts a date, a datetime (its day is used) or an ISO string
    ("2024-03-01" or "2024-03-01T10:00:00"). Empty or malformed
    input gives None, which callers treat as "bound not set".
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text.split("T", 1)[0])
    except ValueError:
        return None


def start_of_week(day: date, week_start: int = SUNDAY) -> date:
    """First day of the week containing `day`."""
    offset = (day.weekday() - week_start) % 7
    return day - timedelta(days=offset)


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def in_range(day: date, start: date, end: date) -> bool:
    """Inclusive containment; an inverted range contains nothing."""
    return start <= day <= end


def days_ending(today: date, count: int) -> list[date]:
    """The `count` calendar days ending on `today`, oldest first."""
    return [today - timedelta(days=offset) for offset in range(count - 1, -1, -1)]


def describe_range(
    start: Optional[date],
    end: Optional[date],
) -> str:
    """Format a date range for headers and log lines."""
    if start and end:
        if start == end:
            return f"on {start.strftime('%d %b %Y')}"
        elif (
            start.day == 1
            and start.month == end.month
            and start.year == end.year
            and (end + timedelta(days=1)).month != end.month
        ):
            return f"in {start.strftime('%B %Y')}"
        elif start.year == end.year:
            return f"from {start.strftime('%d %b')} to {end.strftime('%d %b %Y')}"
        else:
            return f"from {start.strftime('%d %b %Y')} to {end.strftime('%d %b %Y')}"
    elif start:
        return f"from {start.strftime('%d %b %Y')}"
    elif end:
        return f"until {end.strftime('%d %b %Y')}"
    return ""
