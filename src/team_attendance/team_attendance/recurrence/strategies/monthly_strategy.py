from __future__ import annotations

from datetime import date
from typing import List

from ...common.datetime_utils import last_day_of_month
from ..model import RecurrenceRule
from .base import RecurrenceStrategy


class MonthlyStrategy(RecurrenceStrategy):
    """Same day-of-month as the start date; months without that day are skipped."""

    def dates(self, rule: RecurrenceRule) -> List[date]:
        day_of_month = rule.start_date.day
        year, month = rule.start_date.year, rule.start_date.month

        out: list[date] = []
        while (year, month) <= (rule.end_date.year, rule.end_date.month):
            if day_of_month <= last_day_of_month(year, month).day:
                candidate = date(year, month, day_of_month)
                if rule.start_date <= candidate <= rule.end_date:
                    out.append(candidate)

            month += 1
            if month > 12:
                year, month = year + 1, 1
        return out
