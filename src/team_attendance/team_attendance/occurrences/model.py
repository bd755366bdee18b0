from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.time_of_day import combine


@dataclass(frozen=True)
class Occurrence:
    """Domain entity: one scheduled instance of an activity on a calendar date."""

    occurrence_id: int
    organization_id: int
    title: str
    occurrence_date: date
    start_time: str
    end_time: str
    team_id: Optional[int] = None
    template_id: Optional[int] = None
    location: Optional[str] = None
    is_ad_hoc: bool = False

    def starts_at(self) -> datetime:
        return combine(self.occurrence_date, self.start_time)

    def ends_at(self) -> datetime:
        return combine(self.occurrence_date, self.end_time)


@dataclass(frozen=True)
class NewOccurrence:
    """Values for an occurrence that is not stored yet."""

    organization_id: int
    title: str
    occurrence_date: date
    start_time: str
    end_time: str
    team_id: Optional[int] = None
    template_id: Optional[int] = None
    location: Optional[str] = None
    is_ad_hoc: bool = False
