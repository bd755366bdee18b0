from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the check-in strategy."""

    def for_checkin(self, *, now: datetime, scheduled_start: datetime) -> AttendanceStrategy:
        # exactly at the start counts as on time
        if now <= scheduled_start:
            return OnTimeStrategy()
        return LateStrategy()
