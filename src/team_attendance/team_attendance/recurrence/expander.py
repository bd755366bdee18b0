"""Turn recurrence rules into concrete occurrence dates.

All arithmetic is done on calendar dates (``datetime.date``); anything else is
reduced to its calendar date first, so a caller's timezone rendering can never
move an occurrence onto a neighbouring day.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional

from ..common.datetime_utils import DateLike, as_calendar_date
from ..core.constants import DEFAULT_MAX_OCCURRENCES
from ..core.enums import RecurrenceFrequency
from ..core.exceptions import ValidationError
from .factory import RecurrenceStrategyFactory
from .model import RecurrenceRule


def build_rule(
    start_date: DateLike,
    end_date: DateLike,
    frequency: RecurrenceFrequency | str,
    weekdays: Optional[Iterable[int]] = None,
) -> RecurrenceRule:
    try:
        frequency = RecurrenceFrequency(frequency)
    except ValueError:
        raise ValidationError(f"Unknown frequency: {frequency!r}")

    try:
        days = frozenset(int(d) for d in (weekdays or ()))
    except (TypeError, ValueError):
        raise ValidationError("Weekdays must be integers 0-6")

    return RecurrenceRule(
        start_date=as_calendar_date(start_date),
        end_date=as_calendar_date(end_date),
        frequency=frequency,
        weekdays=days,
    )


def validate_rule(rule: RecurrenceRule) -> None:
    if rule.end_date < rule.start_date:
        raise ValidationError("End date must be on or after start date")
    if rule.frequency.needs_weekdays and not rule.weekdays:
        raise ValidationError("Days of week are required for weekly/biweekly recurrence")
    if any(d < 0 or d > 6 for d in rule.weekdays):
        raise ValidationError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")


@dataclass
class RecurrenceExpander:
    """Pure, stateless expansion with the occurrence cap as configuration."""

    max_occurrences: int = DEFAULT_MAX_OCCURRENCES
    factory: RecurrenceStrategyFactory = field(default_factory=RecurrenceStrategyFactory)

    def expand(self, rule: RecurrenceRule) -> List[date]:
        """Ordered dates for a rule; total for any rule that passes validate_rule."""
        return self.factory.for_frequency(rule.frequency).dates(rule)

    def expand_checked(self, rule: RecurrenceRule) -> List[date]:
        """Validate, expand, and reject results that must never reach persistence."""
        validate_rule(rule)
        dates = self.expand(rule)
        if not dates:
            raise ValidationError("No event occurrences generated for this date range and days of week")
        if len(dates) > self.max_occurrences:
            raise ValidationError(f"Too many occurrences ({len(dates)}, max {self.max_occurrences})")
        return dates


def expand(
    start_date: DateLike,
    end_date: DateLike,
    frequency: RecurrenceFrequency | str,
    weekdays: Optional[Iterable[int]] = None,
) -> List[date]:
    """Module-level shortcut: ``expand(start, end, frequency, weekdays)``."""
    return RecurrenceExpander().expand(build_rule(start_date, end_date, frequency, weekdays))
