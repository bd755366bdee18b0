from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AttendanceStatus, ScanAction
from ..occurrences.model import Occurrence


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one participant's ledger entry for one occurrence."""

    attendance_id: int
    user_id: int
    occurrence_id: int
    status: AttendanceStatus
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    hours: Decimal = Decimal("0")
    note: Optional[str] = None
    is_ad_hoc: bool = False
    approved: bool = True

    @property
    def is_open(self) -> bool:
        return self.check_in_time is not None and self.check_out_time is None


@dataclass(frozen=True)
class ScanResult:
    record: AttendanceRecord
    action: ScanAction
    occurrence: Occurrence


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for reports (optimized for querying)."""

    user_id: int
    full_name: str
    occurrence_id: int
    title: str
    occurrence_date: date
    status: AttendanceStatus
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    hours: Decimal
    is_ad_hoc: bool = False
    note: Optional[str] = None
