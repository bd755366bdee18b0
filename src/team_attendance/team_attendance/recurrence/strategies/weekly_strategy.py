from __future__ import annotations

from datetime import date
from typing import List

from ...common.datetime_utils import weekday_index
from ..model import RecurrenceRule
from .base import RecurrenceStrategy, iter_days


class WeeklyStrategy(RecurrenceStrategy):
    """Dates in range whose weekday is selected."""

    def dates(self, rule: RecurrenceRule) -> List[date]:
        return [d for d in iter_days(rule.start_date, rule.end_date) if weekday_index(d) in rule.weekdays]
