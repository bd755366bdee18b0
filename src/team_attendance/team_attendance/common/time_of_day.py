from __future__ import annotations

import re
from datetime import date, datetime, time

from ..core.exceptions import ValidationError

_TWELVE_HOUR = re.compile(r"^(\d{1,2}):(\d{2})\s*([AaPp][Mm])$")
_TWENTY_FOUR_HOUR = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")


def parse_time_of_day(value: str) -> time:
    """Parse "6:00 PM" or "18:00" into a time."""
    text = (value or "").strip()

    m = _TWELVE_HOUR.match(text)
    if m:
        hour, minute, period = int(m.group(1)), int(m.group(2)), m.group(3).upper()
        if not 1 <= hour <= 12 or minute > 59:
            raise ValidationError(f"Invalid time of day: {value!r}")
        if period == "AM":
            hour = 0 if hour == 12 else hour
        else:
            hour = hour if hour == 12 else hour + 12
        return time(hour=hour, minute=minute)

    m = _TWENTY_FOUR_HOUR.match(text)
    if m:
        hour, minute = int(m.group(1)), int(m.group(2))
        if hour > 23 or minute > 59:
            raise ValidationError(f"Invalid time of day: {value!r}")
        return time(hour=hour, minute=minute)

    raise ValidationError(f"Invalid time of day: {value!r}")


def combine(day: date, value: str) -> datetime:
    return datetime.combine(day, parse_time_of_day(value))


def format_time_of_day(value: time) -> str:
    """Render as "6:00 PM"."""
    hour = value.hour % 12 or 12
    period = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {period}"
