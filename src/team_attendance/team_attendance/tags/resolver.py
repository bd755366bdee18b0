"""Scan-triggered check-in: pick today's occurrence for a tag scan and toggle it.

The check-in window of an occurrence is [start - window_minutes, scheduled end].
Candidates are tried in chronological order, so when windows overlap the
earlier-starting occurrence wins.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..attendance.model import ScanResult
from ..attendance.repository import AttendanceRepository
from ..attendance.service import AttendanceService
from ..attendance.transitions import RecordState, state_of
from ..common.datetime_utils import now_local
from ..common.logging import get_logger
from ..common.time_of_day import format_time_of_day
from ..core.constants import DEFAULT_CHECKIN_WINDOW_MINUTES
from ..core.enums import STAFF_ROLES, ScanAction
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, TooEarlyError
from ..occurrences.model import Occurrence
from ..occurrences.repository import OccurrenceRepository
from ..occurrences.service import sort_chronologically
from ..users.repository import MembershipRepository
from .model import Tag
from .repository import TagRepository

log = get_logger(__name__)


def require_active_tag(tags: TagRepository, token: str) -> Tag:
    tag = tags.get_by_token((token or "").strip())
    if not tag:
        raise NotFoundError("Unrecognized tag")
    if not tag.is_active:
        raise ConflictError("Tag deactivated")
    return tag


class ScanResolver:
    def __init__(
        self,
        tags: TagRepository,
        occurrences: OccurrenceRepository,
        attendance: AttendanceRepository,
        memberships: MembershipRepository,
        attendance_service: AttendanceService,
        *,
        window_minutes: int = DEFAULT_CHECKIN_WINDOW_MINUTES,
    ):
        self._tags = tags
        self._occurrences = occurrences
        self._attendance = attendance
        self._memberships = memberships
        self._attendance_service = attendance_service
        self._window = timedelta(minutes=int(window_minutes))

    def in_window(self, occurrence: Occurrence, now: datetime) -> bool:
        return occurrence.starts_at() - self._window <= now <= occurrence.ends_at()

    def _team_scope(self, *, scanner_id: int, target_id: int, organization_id: int, team_id: Optional[int]) -> list[int]:
        if team_id is None:
            return [m.team_id for m in self._memberships.list_team_memberships(user_id=target_id, organization_id=organization_id)]

        team = self._memberships.get_team(int(team_id))
        if not team or team.organization_id != organization_id:
            raise NotFoundError("Team not found")

        if not self._memberships.get_team_membership(user_id=target_id, team_id=team.team_id):
            scanner = self._memberships.get_org_membership(user_id=scanner_id, organization_id=organization_id)
            if not scanner or scanner.role not in STAFF_ROLES:
                raise AuthorizationError("Not a member of this team")
        return [team.team_id]

    def select_occurrence(
        self,
        candidates: Sequence[Occurrence],
        *,
        checked_out: set[int],
        now: datetime,
        bypass_early_check: bool = False,
    ) -> Occurrence:
        """Window selection over today's candidates (already in chronological order)."""
        remaining = [o for o in candidates if o.occurrence_id not in checked_out]

        for occurrence in remaining:
            if self.in_window(occurrence, now):
                return occurrence

        upcoming = next((o for o in remaining if o.starts_at() > now), None)
        if upcoming is not None:
            if bypass_early_check:
                return upcoming
            raise TooEarlyError(
                occurrence_id=upcoming.occurrence_id,
                title=upcoming.title,
                starts_at=upcoming.starts_at(),
                start_time=format_time_of_day(upcoming.starts_at().time()),
            )

        if any(o.occurrence_id in checked_out and self.in_window(o, now) for o in candidates):
            raise ConflictError("Already checked out")
        raise NotFoundError("No events today")

    def resolve_scan(
        self,
        *,
        token: str,
        scanner_id: int,
        on_behalf_of: Optional[int] = None,
        team_id: Optional[int] = None,
        now: datetime | None = None,
        bypass_early_check: bool = False,
    ) -> ScanResult:
        now = now or now_local()
        tag = require_active_tag(self._tags, token)
        org_id = tag.organization_id

        if not self._memberships.get_org_membership(user_id=int(scanner_id), organization_id=org_id):
            raise AuthorizationError("Not a member of this organization")

        target_id = int(on_behalf_of) if on_behalf_of is not None else int(scanner_id)
        if target_id != int(scanner_id):
            self._attendance_service.ensure_can_act_for(actor_id=scanner_id, user_id=target_id, organization_id=org_id)
            if not self._memberships.get_org_membership(user_id=target_id, organization_id=org_id):
                raise AuthorizationError("Athlete is not a member of this organization")

        team_ids = self._team_scope(scanner_id=int(scanner_id), target_id=target_id, organization_id=org_id, team_id=team_id)

        candidates = sort_chronologically(
            self._occurrences.list_for_day(organization_id=org_id, day=now.date(), team_ids=team_ids)
        )
        if not candidates:
            raise NotFoundError("No events today")

        checked_out = self._attendance.list_checked_out_occurrence_ids(
            user_id=target_id,
            occurrence_ids=[o.occurrence_id for o in candidates],
        )
        occurrence = self.select_occurrence(
            candidates,
            checked_out=checked_out,
            now=now,
            bypass_early_check=bypass_early_check,
        )

        existing = self._attendance.get_for_user_and_occurrence(user_id=target_id, occurrence_id=occurrence.occurrence_id)
        if state_of(existing) == RecordState.CHECKED_IN:
            record = self._attendance_service.check_out(
                actor_id=scanner_id, user_id=target_id, occurrence_id=occurrence.occurrence_id, now=now, occurrence=occurrence
            )
            action = ScanAction.CHECKED_OUT
        else:
            # check_in rejects completed, absent and excused records
            record = self._attendance_service.check_in(
                actor_id=scanner_id, user_id=target_id, occurrence_id=occurrence.occurrence_id, now=now, occurrence=occurrence
            )
            action = ScanAction.CHECKED_IN

        log.info(
            "scan_resolved",
            tag_id=tag.tag_id,
            user_id=target_id,
            occurrence_id=occurrence.occurrence_id,
            action=action.value,
        )
        return ScanResult(record=record, action=action, occurrence=occurrence)
