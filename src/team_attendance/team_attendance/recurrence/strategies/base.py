from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, timedelta
from typing import Iterator, List

from ..model import RecurrenceRule


def iter_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


class RecurrenceStrategy(ABC):
    """Strategy Pattern: encapsulate how one frequency turns a rule into dates."""

    @abstractmethod
    def dates(self, rule: RecurrenceRule) -> List[date]:
        raise NotImplementedError
