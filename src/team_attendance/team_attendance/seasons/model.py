from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Season:
    """Organization-defined season; months are 1-12 and may wrap the year end."""

    season_id: int
    organization_id: int
    name: str
    start_month: int
    end_month: int

    @property
    def crosses_year(self) -> bool:
        return self.start_month > self.end_month


@dataclass(frozen=True)
class SeasonWindow:
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end
