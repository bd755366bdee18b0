from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class PendingAdHocCheckIn:
    """Read-model: an ad-hoc attendance waiting for a coach's decision."""

    attendance_id: int
    user_id: int
    full_name: str
    occurrence_id: int
    team_id: int
    team_name: str
    occurrence_date: date
    start_time: str
    end_time: str
    check_in_time: Optional[datetime]
    note: Optional[str] = None
