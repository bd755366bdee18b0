from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceReportRow


class AttendanceRepository(Protocol):
    """Attendance records, unique per (user_id, occurrence_id).

    Every write is keyed on that pair, so concurrent duplicates converge on
    one row instead of racing to insert two.
    """

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_user_and_occurrence(self, *, user_id: int, occurrence_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def record_checkin(
        self,
        *,
        user_id: int,
        occurrence_id: int,
        check_in_time: datetime,
        status: AttendanceStatus,
        note: Optional[str] = None,
        is_ad_hoc: bool = False,
        approved: bool = True,
    ) -> AttendanceRecord:
        """Insert if absent; an existing row keeps its check-in. Returns the stored row."""

        raise NotImplementedError

    def record_checkout(self, *, attendance_id: int, check_out_time: datetime, hours: Decimal) -> bool:
        """Close an open record. False when it was already closed."""

        raise NotImplementedError

    def upsert_mark(
        self,
        *,
        user_id: int,
        occurrence_id: int,
        status: AttendanceStatus,
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        hours: Decimal,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        """Administrative overwrite of status, timestamps and hours; keeps the note when none is given."""

        raise NotImplementedError

    def list_open_for_occurrence(self, occurrence_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_checked_out_occurrence_ids(self, *, user_id: int, occurrence_ids: Sequence[int]) -> set[int]:
        raise NotImplementedError

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        team_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        approved_only: bool = True,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError
