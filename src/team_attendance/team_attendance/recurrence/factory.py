from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import RecurrenceFrequency
from .strategies.base import RecurrenceStrategy
from .strategies.biweekly_strategy import BiweeklyStrategy
from .strategies.daily_strategy import DailyStrategy
from .strategies.monthly_strategy import MonthlyStrategy
from .strategies.weekly_strategy import WeeklyStrategy


@dataclass
class RecurrenceStrategyFactory:
    """Factory Pattern: choose the expansion strategy for a frequency."""

    def for_frequency(self, frequency: RecurrenceFrequency) -> RecurrenceStrategy:
        if frequency == RecurrenceFrequency.DAILY:
            return DailyStrategy()
        if frequency == RecurrenceFrequency.WEEKLY:
            return WeeklyStrategy()
        if frequency == RecurrenceFrequency.BIWEEKLY:
            return BiweeklyStrategy()
        if frequency == RecurrenceFrequency.MONTHLY:
            return MonthlyStrategy()
        raise ValueError(f"Unsupported frequency: {frequency!r}")
