from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Union

from ..core.constants import REFERENCE_HOUR
from ..core.exceptions import ValidationError

DateLike = Union[date, datetime, str]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")


def parse_iso_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid timestamp: {value!r}")


def as_calendar_date(value: DateLike) -> date:
    """Reduce any date-ish input to its calendar date (year/month/day only)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(value)


def to_reference_datetime(value: DateLike) -> datetime:
    """Pin a calendar date to the fixed reference time-of-day used for storage."""
    return datetime.combine(as_calendar_date(value), time(hour=REFERENCE_HOUR))


def last_day_of_month(year: int, month: int) -> date:
    # day 0 of the following month
    if month == 12:
        first_of_next = date(year + 1, 1, 1)
    else:
        first_of_next = date(year, month + 1, 1)
    return first_of_next - timedelta(days=1)


def weekday_index(value: date) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return value.isoweekday() % 7


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now()
