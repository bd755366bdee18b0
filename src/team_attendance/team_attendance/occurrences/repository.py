from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import NewOccurrence, Occurrence


class OccurrenceRepository(Protocol):
    def get_by_id(self, occurrence_id: int) -> Optional[Occurrence]:
        raise NotImplementedError

    def create(self, occurrence: NewOccurrence) -> int:
        raise NotImplementedError

    def delete_with_attendance(self, *, occurrence_id: int) -> bool:
        """Delete the occurrence and its attendance records in one transaction."""

        raise NotImplementedError

    def list_for_day(
        self,
        *,
        organization_id: int,
        day: date,
        team_ids: Sequence[int],
    ) -> Sequence[Occurrence]:
        """Scheduled occurrences on ``day`` scoped to one of ``team_ids`` or organization-wide.

        Ad-hoc occurrences belong to the participant who registered them and are
        never scan candidates.
        """

        raise NotImplementedError

    def list_range(
        self,
        *,
        organization_id: int,
        start: date,
        end: date,
        team_id: Optional[int] = None,
    ) -> Sequence[Occurrence]:
        raise NotImplementedError
