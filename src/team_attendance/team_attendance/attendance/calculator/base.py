from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for credited hours)."""

    @abstractmethod
    def hours(self, *, check_in: datetime, check_out: datetime, scheduled_start: datetime) -> Decimal:
        raise NotImplementedError
