from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..common.logging import get_logger
from ..common.time_of_day import parse_time_of_day
from ..common.validators import optional_text, require_non_empty
from ..core.enums import STAFF_ROLES, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import NewOccurrence, Occurrence
from .repository import OccurrenceRepository

log = get_logger(__name__)


def sort_chronologically(occurrences: Sequence[Occurrence]) -> list[Occurrence]:
    """By scheduled start, then id; stored time strings do not sort as text."""
    return sorted(occurrences, key=lambda o: (o.starts_at(), o.occurrence_id))


def validate_time_range(start_time: str, end_time: str) -> None:
    if parse_time_of_day(end_time) <= parse_time_of_day(start_time):
        raise ValidationError("End time must be after start time")


class OccurrenceService:
    def __init__(self, occurrences: OccurrenceRepository):
        self._occurrences = occurrences

    def get(self, occurrence_id: int) -> Occurrence:
        occurrence = self._occurrences.get_by_id(int(occurrence_id))
        if not occurrence:
            raise NotFoundError("Event not found")
        return occurrence

    def schedule(
        self,
        *,
        current_role: Role,
        organization_id: int,
        title: str,
        occurrence_date: date,
        start_time: str,
        end_time: str,
        team_id: Optional[int] = None,
        location: Optional[str] = None,
    ) -> Occurrence:
        """Create a one-off occurrence."""
        if current_role not in STAFF_ROLES:
            raise AuthorizationError("You do not have permission to schedule events")

        title = require_non_empty(title, "Title")
        validate_time_range(start_time, end_time)

        new = NewOccurrence(
            organization_id=int(organization_id),
            title=title,
            occurrence_date=occurrence_date,
            start_time=start_time.strip(),
            end_time=end_time.strip(),
            team_id=int(team_id) if team_id is not None else None,
            location=optional_text(location),
        )
        occurrence_id = self._occurrences.create(new)
        log.info("occurrence_scheduled", occurrence_id=occurrence_id, organization_id=new.organization_id)
        return self.get(occurrence_id)

    def delete(self, *, current_role: Role, occurrence_id: int) -> None:
        if current_role not in STAFF_ROLES:
            raise AuthorizationError("You do not have permission to delete events")

        if not self._occurrences.delete_with_attendance(occurrence_id=int(occurrence_id)):
            raise NotFoundError("Event not found")
        log.info("occurrence_deleted", occurrence_id=int(occurrence_id))

    def list_range(
        self,
        *,
        organization_id: int,
        start: date,
        end: date,
        team_id: Optional[int] = None,
    ) -> list[Occurrence]:
        if end < start:
            raise ValidationError("End date must be on or after start date")
        rows = self._occurrences.list_range(organization_id=int(organization_id), start=start, end=end, team_id=team_id)
        return sorted(rows, key=lambda o: (o.occurrence_date, o.starts_at(), o.occurrence_id))
