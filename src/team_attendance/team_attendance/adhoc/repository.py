from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..attendance.model import AttendanceRecord
from ..occurrences.model import NewOccurrence
from .model import PendingAdHocCheckIn


class AdHocRepository(Protocol):
    def create_adhoc(
        self,
        *,
        occurrence: NewOccurrence,
        user_id: int,
        check_in_time: datetime,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        """Insert the synthetic occurrence and its pending record in one transaction."""

        raise NotImplementedError

    def list_pending(self, *, organization_id: int, team_ids: Optional[Sequence[int]] = None) -> Sequence[PendingAdHocCheckIn]:
        """``team_ids=None`` means every team of the organization."""

        raise NotImplementedError

    def approve(self, *, attendance_id: int) -> bool:
        raise NotImplementedError

    def delete_with_occurrence(self, *, attendance_id: int, occurrence_id: int) -> bool:
        raise NotImplementedError
