from __future__ import annotations

from datetime import date, timedelta
from typing import List

from ...common.datetime_utils import weekday_index
from ..model import RecurrenceRule
from .weekly_strategy import WeeklyStrategy


class BiweeklyStrategy(WeeklyStrategy):
    """Weekly dates that fall in even weeks.

    Week 0 starts on the Sunday on/before the rule's start date, so the cadence
    follows the template rather than a calendar epoch.
    """

    def dates(self, rule: RecurrenceRule) -> List[date]:
        anchor = rule.start_date - timedelta(days=weekday_index(rule.start_date))
        return [d for d in super().dates(rule) if ((d - anchor).days // 7) % 2 == 0]
