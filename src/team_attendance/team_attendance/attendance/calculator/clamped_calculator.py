from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from ...core.constants import HOURS_PRECISION
from .base import HoursCalculator

_QUANTUM = Decimal(1).scaleb(-HOURS_PRECISION)


class ClampedHoursCalculator(HoursCalculator):
    """Standard rule: (out - max(in, scheduled start)) in hours, not below 0.

    Arriving early earns no credit before the activity starts.
    """

    def effective_start(self, *, check_in: datetime, scheduled_start: datetime) -> datetime:
        return max(check_in, scheduled_start)

    def hours(self, *, check_in: datetime, check_out: datetime, scheduled_start: datetime) -> Decimal:
        start = self.effective_start(check_in=check_in, scheduled_start=scheduled_start)
        seconds = max(0, int((check_out - start).total_seconds()))
        return (Decimal(seconds) / Decimal(3600)).quantize(_QUANTUM, rounding=ROUND_HALF_UP)
