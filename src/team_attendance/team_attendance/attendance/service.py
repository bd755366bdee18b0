from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from ..common.datetime_utils import now_local
from ..common.logging import get_logger
from ..common.validators import optional_text
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import STAFF_ROLES, USE_DEFAULT, AttendanceStatus, Role, UseDefault
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..occurrences.model import Occurrence
from ..occurrences.repository import OccurrenceRepository
from ..users.repository import MembershipRepository
from .calculator.base import HoursCalculator
from .calculator.clamped_calculator import ClampedHoursCalculator
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .transitions import AttendanceEvent, RecordState, state_of, target_of_mark, transition

log = get_logger(__name__)

TimestampOverride = Union[datetime, None, UseDefault]


class AttendanceService:
    """Check-in state machine for one (participant, occurrence) record."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        occurrences: OccurrenceRepository,
        memberships: MembershipRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        calculator: HoursCalculator | None = None,
    ):
        self._attendance = attendance
        self._occurrences = occurrences
        self._memberships = memberships
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._calculator = calculator or ClampedHoursCalculator()

    def _get_occurrence(self, occurrence_id: int) -> Occurrence:
        occurrence = self._occurrences.get_by_id(int(occurrence_id))
        if not occurrence:
            raise NotFoundError("Event not found")
        return occurrence

    def ensure_can_act_for(self, *, actor_id: int, user_id: int, organization_id: int) -> None:
        """The actor is the participant, or their guardian within the organization."""
        if int(actor_id) == int(user_id):
            return
        if not self._memberships.is_guardian(
            guardian_id=int(actor_id),
            athlete_id=int(user_id),
            organization_id=int(organization_id),
        ):
            raise AuthorizationError("Not authorized to check in for this athlete")

    def _ensure_member(self, *, user_id: int, organization_id: int) -> None:
        if not self._memberships.get_org_membership(user_id=int(user_id), organization_id=int(organization_id)):
            raise AuthorizationError("Not a member of this organization")

    def compute_hours(
        self,
        occurrence: Occurrence,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
    ) -> Decimal:
        if check_in is None or check_out is None:
            return Decimal("0")
        return self._calculator.hours(check_in=check_in, check_out=check_out, scheduled_start=occurrence.starts_at())

    def check_in(
        self,
        *,
        actor_id: int,
        user_id: int,
        occurrence_id: int,
        now: datetime | None = None,
        occurrence: Occurrence | None = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        occurrence = occurrence or self._get_occurrence(occurrence_id)

        self.ensure_can_act_for(actor_id=actor_id, user_id=user_id, organization_id=occurrence.organization_id)
        self._ensure_member(user_id=user_id, organization_id=occurrence.organization_id)

        existing = self._attendance.get_for_user_and_occurrence(user_id=int(user_id), occurrence_id=occurrence.occurrence_id)
        state = state_of(existing)
        transition(state, AttendanceEvent.CHECK_IN)
        if existing is not None and state == RecordState.CHECKED_IN:
            return existing

        scheduled_start = occurrence.starts_at()
        strategy = self._factory.for_checkin(now=now, scheduled_start=scheduled_start)
        decision = strategy.decide_checkin(now=now, scheduled_start=scheduled_start)

        record = self._attendance.record_checkin(
            user_id=int(user_id),
            occurrence_id=occurrence.occurrence_id,
            check_in_time=now,
            status=decision.status,
            note=decision.note,
        )
        log.info(
            "checked_in",
            user_id=int(user_id),
            occurrence_id=occurrence.occurrence_id,
            status=record.status.value,
            by=int(actor_id),
        )
        return record

    def check_out(
        self,
        *,
        actor_id: int,
        user_id: int,
        occurrence_id: int,
        now: datetime | None = None,
        occurrence: Occurrence | None = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        occurrence = occurrence or self._get_occurrence(occurrence_id)

        self.ensure_can_act_for(actor_id=actor_id, user_id=user_id, organization_id=occurrence.organization_id)

        existing = self._attendance.get_for_user_and_occurrence(user_id=int(user_id), occurrence_id=occurrence.occurrence_id)
        transition(state_of(existing), AttendanceEvent.CHECK_OUT)
        if existing is None or existing.check_in_time is None:
            raise NotFoundError("Check-in not found")

        hours = self.compute_hours(occurrence, existing.check_in_time, now)
        if not self._attendance.record_checkout(attendance_id=existing.attendance_id, check_out_time=now, hours=hours):
            # closed concurrently between read and write
            raise ConflictError("Already checked out")

        log.info("checked_out", user_id=int(user_id), occurrence_id=occurrence.occurrence_id, hours=str(hours))
        refreshed = self._attendance.get_by_id(existing.attendance_id)
        if refreshed is None:
            raise NotFoundError("Check-in not found")
        return refreshed

    def mark(
        self,
        *,
        current_role: Role,
        user_id: int,
        occurrence_id: int,
        status: AttendanceStatus | str,
        note: Optional[str] = None,
        check_in: TimestampOverride = USE_DEFAULT,
        check_out: TimestampOverride = USE_DEFAULT,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        """Administrative mark or correction.

        ``check_in``/``check_out``: USE_DEFAULT, an explicit datetime, or None to
        clear. A defaulted check-out stays empty. A defaulted check-in becomes now,
        or the scheduled start when an explicit check-out is given. ABSENT and
        EXCUSED always clear both and zero the hours.
        """
        if current_role not in STAFF_ROLES:
            raise AuthorizationError("You do not have permission to edit attendance")
        return self._apply_mark(
            user_id=user_id,
            occurrence_id=occurrence_id,
            status=status,
            note=note,
            check_in=check_in,
            check_out=check_out,
            now=now,
        )

    def mark_excused(self, *, user_id: int, occurrence_id: int, note: Optional[str] = None) -> AttendanceRecord:
        """Entry point for an approved excuse."""
        return self._apply_mark(
            user_id=user_id,
            occurrence_id=occurrence_id,
            status=AttendanceStatus.EXCUSED,
            note=note,
            check_in=None,
            check_out=None,
        )

    def _apply_mark(
        self,
        *,
        user_id: int,
        occurrence_id: int,
        status: AttendanceStatus | str,
        note: Optional[str],
        check_in: TimestampOverride,
        check_out: TimestampOverride,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        try:
            status = AttendanceStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown attendance status: {status!r}")

        occurrence = self._get_occurrence(occurrence_id)

        if status.clears_times:
            check_in_time: Optional[datetime] = None
            check_out_time: Optional[datetime] = None
        else:
            check_out_time = None if check_out is USE_DEFAULT else check_out
            if check_in is not USE_DEFAULT:
                check_in_time = check_in
            elif check_out_time is not None:
                check_in_time = occurrence.starts_at()
            else:
                check_in_time = now or now_local()

        if check_in_time is not None and check_out_time is not None and check_out_time < check_in_time:
            raise ValidationError("Check-out time cannot be earlier than check-in time")

        existing = self._attendance.get_for_user_and_occurrence(user_id=int(user_id), occurrence_id=occurrence.occurrence_id)
        transition(state_of(existing), AttendanceEvent.MARK)
        target = target_of_mark(
            status,
            has_check_in=check_in_time is not None,
            has_check_out=check_out_time is not None,
        )

        record = self._attendance.upsert_mark(
            user_id=int(user_id),
            occurrence_id=occurrence.occurrence_id,
            status=status,
            check_in_time=check_in_time,
            check_out_time=check_out_time,
            hours=self.compute_hours(occurrence, check_in_time, check_out_time),
            note=optional_text(note),
        )
        log.info(
            "attendance_marked",
            user_id=int(user_id),
            occurrence_id=occurrence.occurrence_id,
            status=status.value,
            state=target.value,
        )
        return record

    def auto_check_out(self, *, occurrence_id: int, now: datetime | None = None) -> int:
        """Close every open record of an occurrence that has ended, at its scheduled end.

        A record checked in after the end is closed at its own check-in time.
        """
        now = now or now_local()
        occurrence = self._get_occurrence(occurrence_id)
        ends_at = occurrence.ends_at()
        if now < ends_at:
            return 0

        closed = 0
        for record in self._attendance.list_open_for_occurrence(occurrence.occurrence_id):
            check_out_time = max(ends_at, record.check_in_time)
            hours = self.compute_hours(occurrence, record.check_in_time, check_out_time)
            if self._attendance.record_checkout(attendance_id=record.attendance_id, check_out_time=check_out_time, hours=hours):
                closed += 1

        if closed:
            log.info("auto_checked_out", occurrence_id=occurrence.occurrence_id, closed=closed)
        return closed

    def get_record(self, *, user_id: int, occurrence_id: int) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_user_and_occurrence(user_id=int(user_id), occurrence_id=int(occurrence_id))

    def history(self, user_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[AttendanceRecord]:
        return list(self._attendance.get_recent_for_user(int(user_id), int(limit)))
