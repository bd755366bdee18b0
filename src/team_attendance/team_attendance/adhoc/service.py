from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceRecord, ScanResult
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.logging import get_logger
from ..common.validators import optional_text
from ..core.constants import ADHOC_OCCURRENCE_TITLE
from ..core.enums import TAG_ADMIN_ROLES, Role, ScanAction, TeamRole
from ..core.exceptions import AuthorizationError, NotFoundError
from ..occurrences.model import NewOccurrence, Occurrence
from ..occurrences.repository import OccurrenceRepository
from ..occurrences.service import validate_time_range
from ..tags.repository import TagRepository
from ..tags.resolver import require_active_tag
from ..users.repository import MembershipRepository
from .model import PendingAdHocCheckIn
from .repository import AdHocRepository

log = get_logger(__name__)

_DECIDING_TEAM_ROLES = frozenset({TeamRole.COACH, TeamRole.ADMIN})


class AdHocService:
    """Impromptu attendance: a synthetic occurrence plus a record pending approval."""

    def __init__(
        self,
        adhoc: AdHocRepository,
        attendance: AttendanceRepository,
        occurrences: OccurrenceRepository,
        tags: TagRepository,
        memberships: MembershipRepository,
    ):
        self._adhoc = adhoc
        self._attendance = attendance
        self._occurrences = occurrences
        self._tags = tags
        self._memberships = memberships

    def register(
        self,
        *,
        token: str,
        user_id: int,
        team_id: int,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        note: Optional[str] = None,
        now: datetime | None = None,
    ) -> ScanResult:
        now = now or now_local()
        tag = require_active_tag(self._tags, token)

        if not self._memberships.get_org_membership(user_id=int(user_id), organization_id=tag.organization_id):
            raise AuthorizationError("Not a member of this organization")

        team = self._memberships.get_team(int(team_id))
        if not team or team.organization_id != tag.organization_id:
            raise NotFoundError("Team not found in this organization")
        if not self._memberships.get_team_membership(user_id=int(user_id), team_id=team.team_id):
            raise AuthorizationError("Not a member of this team")

        start_time = (start_time or "").strip() or now.strftime("%H:%M")
        end_time = (end_time or "").strip() or "23:59"
        validate_time_range(start_time, end_time)

        new = NewOccurrence(
            organization_id=tag.organization_id,
            title=ADHOC_OCCURRENCE_TITLE,
            occurrence_date=now.date(),
            start_time=start_time,
            end_time=end_time,
            team_id=team.team_id,
            is_ad_hoc=True,
        )
        record = self._adhoc.create_adhoc(occurrence=new, user_id=int(user_id), check_in_time=now, note=optional_text(note))
        occurrence = self._occurrences.get_by_id(record.occurrence_id)
        if occurrence is None:
            raise NotFoundError("Event not found")

        log.info("adhoc_registered", user_id=int(user_id), team_id=team.team_id, attendance_id=record.attendance_id)
        return ScanResult(record=record, action=ScanAction.CHECKED_IN, occurrence=occurrence)

    def _pending(self, attendance_id: int) -> tuple[AttendanceRecord, Occurrence]:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record or not record.is_ad_hoc:
            raise NotFoundError("Ad-hoc check-in not found")
        occurrence = self._occurrences.get_by_id(record.occurrence_id)
        if not occurrence:
            raise NotFoundError("Event not found")
        return record, occurrence

    def ensure_can_decide(self, *, actor_id: int, occurrence: Occurrence) -> None:
        """OWNER/ADMIN/MANAGER of the organization, or a COACH who coaches the team."""
        membership = self._memberships.get_org_membership(user_id=int(actor_id), organization_id=occurrence.organization_id)
        if membership and membership.role in TAG_ADMIN_ROLES:
            return
        if membership and membership.role == Role.COACH and occurrence.team_id is not None:
            team_membership = self._memberships.get_team_membership(user_id=int(actor_id), team_id=occurrence.team_id)
            if team_membership and team_membership.role in _DECIDING_TEAM_ROLES:
                return
        raise AuthorizationError("Only coaches or managers of this team can review ad-hoc check-ins")

    def approve(self, *, actor_id: int, attendance_id: int) -> AttendanceRecord:
        record, occurrence = self._pending(attendance_id)
        self.ensure_can_decide(actor_id=actor_id, occurrence=occurrence)

        if not record.approved:
            self._adhoc.approve(attendance_id=record.attendance_id)
            log.info("adhoc_approved", attendance_id=record.attendance_id, by=int(actor_id))

        approved = self._attendance.get_by_id(record.attendance_id)
        if approved is None:
            raise NotFoundError("Ad-hoc check-in not found")
        return approved

    def deny(self, *, actor_id: int, attendance_id: int) -> None:
        record, occurrence = self._pending(attendance_id)
        self.ensure_can_decide(actor_id=actor_id, occurrence=occurrence)

        self._adhoc.delete_with_occurrence(attendance_id=record.attendance_id, occurrence_id=occurrence.occurrence_id)
        log.info("adhoc_denied", attendance_id=record.attendance_id, by=int(actor_id))

    def list_pending(self, *, actor_id: int, organization_id: int) -> list[PendingAdHocCheckIn]:
        membership = self._memberships.get_org_membership(user_id=int(actor_id), organization_id=int(organization_id))
        if not membership or (membership.role not in TAG_ADMIN_ROLES and membership.role != Role.COACH):
            raise AuthorizationError("You do not have permission to review ad-hoc check-ins")

        team_ids = None
        if membership.role == Role.COACH:
            team_ids = [
                m.team_id
                for m in self._memberships.list_team_memberships(user_id=int(actor_id), organization_id=int(organization_id))
                if m.role in _DECIDING_TEAM_ROLES
            ]
        return list(self._adhoc.list_pending(organization_id=int(organization_id), team_ids=team_ids))
