from __future__ import annotations

from datetime import date
from typing import List

from ..model import RecurrenceRule
from .base import RecurrenceStrategy, iter_days


class DailyStrategy(RecurrenceStrategy):
    """Every calendar date from start to end inclusive."""

    def dates(self, rule: RecurrenceRule) -> List[date]:
        return list(iter_days(rule.start_date, rule.end_date))
