from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

import pytest
from werkzeug.security import generate_password_hash

from src.team_attendance.team_attendance.adhoc.model import PendingAdHocCheckIn
from src.team_attendance.team_attendance.adhoc.service import AdHocService
from src.team_attendance.team_attendance.attendance.model import AttendanceRecord, AttendanceReportRow
from src.team_attendance.team_attendance.attendance.service import AttendanceService
from src.team_attendance.team_attendance.core.enums import AttendanceStatus, Role, TeamRole
from src.team_attendance.team_attendance.core.exceptions import ConflictError
from src.team_attendance.team_attendance.occurrences.model import NewOccurrence, Occurrence
from src.team_attendance.team_attendance.occurrences.service import OccurrenceService
from src.team_attendance.team_attendance.recurrence.expander import RecurrenceExpander
from src.team_attendance.team_attendance.recurrence.model import RecurrenceTemplate
from src.team_attendance.team_attendance.recurrence.service import RecurrenceService
from src.team_attendance.team_attendance.reports.service import AttendanceReportService
from src.team_attendance.team_attendance.seasons.model import Season
from src.team_attendance.team_attendance.seasons.service import SeasonService
from src.team_attendance.team_attendance.tags.model import Tag
from src.team_attendance.team_attendance.tags.resolver import ScanResolver
from src.team_attendance.team_attendance.tags.service import TagService
from src.team_attendance.team_attendance.users.model import OrgMembership, Team, TeamMembership, User
from src.team_attendance.team_attendance.users.service import AuthService, MembershipService

ORG = 1
OTHER_ORG = 2
TEAM = 10
OTHER_TEAM = 11

OWNER = 1
COACH = 2
ATHLETE = 3
PARENT = 4
TEAMMATE = 5
OUTSIDER = 6
OTHER_COACH = 7

# Tuesday
DAY = date(2026, 3, 10)


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.username == username), None)


class InMemoryMemberships:
    def __init__(self):
        self.org_members: dict[tuple[int, int], OrgMembership] = {}
        self.teams: dict[int, Team] = {}
        self.team_members: dict[tuple[int, int], TeamMembership] = {}
        self.guardians: set[tuple[int, int, int]] = set()

    def get_org_membership(self, *, user_id: int, organization_id: int) -> Optional[OrgMembership]:
        return self.org_members.get((user_id, organization_id))

    def list_org_memberships(self, user_id: int) -> Sequence[OrgMembership]:
        return [m for (u, _), m in self.org_members.items() if u == user_id]

    def get_team(self, team_id: int) -> Optional[Team]:
        return self.teams.get(team_id)

    def get_team_membership(self, *, user_id: int, team_id: int) -> Optional[TeamMembership]:
        return self.team_members.get((user_id, team_id))

    def list_team_memberships(self, *, user_id: int, organization_id: int) -> Sequence[TeamMembership]:
        return [
            m
            for (u, t), m in self.team_members.items()
            if u == user_id and self.teams[t].organization_id == organization_id
        ]

    def is_guardian(self, *, guardian_id: int, athlete_id: int, organization_id: int) -> bool:
        return (guardian_id, athlete_id, organization_id) in self.guardians


class InMemoryOccurrences:
    def __init__(self):
        self.rows: dict[int, Occurrence] = {}
        self.attendance: Optional[InMemoryAttendance] = None
        self._next_id = 100

    def get_by_id(self, occurrence_id: int) -> Optional[Occurrence]:
        return self.rows.get(occurrence_id)

    def create(self, occurrence: NewOccurrence) -> int:
        occurrence_id = self._next_id
        self._next_id += 1
        self.rows[occurrence_id] = Occurrence(occurrence_id=occurrence_id, **asdict(occurrence))
        return occurrence_id

    def delete_with_attendance(self, *, occurrence_id: int) -> bool:
        if occurrence_id not in self.rows:
            return False
        del self.rows[occurrence_id]
        if self.attendance is not None:
            self.attendance.delete_for_occurrence(occurrence_id)
        return True

    def list_for_day(self, *, organization_id: int, day: date, team_ids: Sequence[int]) -> Sequence[Occurrence]:
        return [
            o
            for o in self.rows.values()
            if o.organization_id == organization_id
            and o.occurrence_date == day
            and not o.is_ad_hoc
            and (o.team_id is None or o.team_id in team_ids)
        ]

    def list_range(self, *, organization_id: int, start: date, end: date, team_id: Optional[int] = None) -> Sequence[Occurrence]:
        return [
            o
            for o in self.rows.values()
            if o.organization_id == organization_id
            and start <= o.occurrence_date <= end
            and (team_id is None or o.team_id in (None, team_id))
        ]


class InMemoryAttendance:
    """Mirrors the keyed upserts of the MySQL repository."""

    def __init__(self, occurrences: InMemoryOccurrences, memberships: InMemoryMemberships, users: InMemoryUsers):
        self.rows: dict[int, AttendanceRecord] = {}
        self._occurrences = occurrences
        self._memberships = memberships
        self._users = users
        self._next_id = 1000

    def _find(self, user_id: int, occurrence_id: int) -> Optional[AttendanceRecord]:
        return next((r for r in self.rows.values() if r.user_id == user_id and r.occurrence_id == occurrence_id), None)

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self.rows.get(attendance_id)

    def get_for_user_and_occurrence(self, *, user_id: int, occurrence_id: int) -> Optional[AttendanceRecord]:
        return self._find(user_id, occurrence_id)

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
        existing = self._find(user_id, occurrence_id)
        if existing is None:
            attendance_id = self._next_id
            self._next_id += 1
            self.rows[attendance_id] = AttendanceRecord(
                attendance_id=attendance_id,
                user_id=user_id,
                occurrence_id=occurrence_id,
                status=status,
                check_in_time=check_in_time,
                check_out_time=None,
                note=note,
                is_ad_hoc=is_ad_hoc,
                approved=approved,
            )
        elif existing.check_in_time is None and existing.status in (AttendanceStatus.ON_TIME, AttendanceStatus.LATE):
            self.rows[existing.attendance_id] = replace(
                existing,
                status=status,
                note=note if note is not None else existing.note,
                check_in_time=check_in_time,
            )
        return self._find(user_id, occurrence_id)

    def record_checkout(self, *, attendance_id: int, check_out_time: datetime, hours: Decimal) -> bool:
        r = self.rows.get(attendance_id)
        if r is None or r.check_in_time is None or r.check_out_time is not None:
            return False
        self.rows[attendance_id] = replace(r, check_out_time=check_out_time, hours=hours)
        return True

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
        existing = self._find(user_id, occurrence_id)
        if existing is None:
            attendance_id = self._next_id
            self._next_id += 1
            self.rows[attendance_id] = AttendanceRecord(
                attendance_id=attendance_id,
                user_id=user_id,
                occurrence_id=occurrence_id,
                status=status,
                check_in_time=check_in_time,
                check_out_time=check_out_time,
                hours=hours,
                note=note,
            )
        else:
            self.rows[existing.attendance_id] = replace(
                existing,
                status=status,
                check_in_time=check_in_time,
                check_out_time=check_out_time,
                hours=hours,
                note=note if note is not None else existing.note,
            )
        return self._find(user_id, occurrence_id)

    def list_open_for_occurrence(self, occurrence_id: int) -> Sequence[AttendanceRecord]:
        return [
            r
            for r in self.rows.values()
            if r.occurrence_id == occurrence_id
            and r.status in (AttendanceStatus.ON_TIME, AttendanceStatus.LATE)
            and r.is_open
        ]

    def list_checked_out_occurrence_ids(self, *, user_id: int, occurrence_ids: Sequence[int]) -> set[int]:
        return {
            r.occurrence_id
            for r in self.rows.values()
            if r.user_id == user_id and r.occurrence_id in occurrence_ids and r.check_out_time is not None
        }

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        rows = [r for r in self.rows.values() if r.user_id == user_id]
        rows.sort(key=lambda r: (self._occurrences.rows[r.occurrence_id].occurrence_date, r.attendance_id), reverse=True)
        return rows[:limit]

    def get_report_rows(
        self,
        *,
        team_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        approved_only: bool = True,
    ) -> Sequence[AttendanceReportRow]:
        team = self._memberships.teams[team_id]
        out = []
        for r in self.rows.values():
            o = self._occurrences.rows[r.occurrence_id]
            if o.team_id not in (None, team_id):
                continue
            if o.organization_id != team.organization_id:
                continue
            if (r.user_id, team_id) not in self._memberships.team_members:
                continue
            if start_date is not None and o.occurrence_date < start_date:
                continue
            if end_date is not None and o.occurrence_date > end_date:
                continue
            if approved_only and not r.approved:
                continue
            out.append(
                AttendanceReportRow(
                    user_id=r.user_id,
                    full_name=self._users.users[r.user_id].full_name,
                    occurrence_id=o.occurrence_id,
                    title=o.title,
                    occurrence_date=o.occurrence_date,
                    status=r.status,
                    check_in_time=r.check_in_time,
                    check_out_time=r.check_out_time,
                    hours=r.hours,
                    is_ad_hoc=r.is_ad_hoc,
                    note=r.note,
                )
            )
        out.sort(key=lambda x: (x.occurrence_date, -x.user_id), reverse=True)
        return out

    def delete_for_occurrence(self, occurrence_id: int) -> None:
        for attendance_id in [a for a, r in self.rows.items() if r.occurrence_id == occurrence_id]:
            del self.rows[attendance_id]


class InMemoryTemplates:
    def __init__(self, occurrences: InMemoryOccurrences):
        self.rows: dict[int, RecurrenceTemplate] = {}
        self._occurrences = occurrences
        self._next_id = 1

    def get_by_id(self, template_id: int) -> Optional[RecurrenceTemplate]:
        return self.rows.get(template_id)

    def list_for_organization(self, organization_id: int) -> Sequence[RecurrenceTemplate]:
        return [t for t in self.rows.values() if t.organization_id == organization_id]

    def create_with_occurrences(self, *, template: RecurrenceTemplate, occurrences: Sequence[NewOccurrence]) -> int:
        template_id = self._next_id
        self._next_id += 1
        self.rows[template_id] = replace(template, template_id=template_id)
        for occurrence in occurrences:
            self._occurrences.create(replace(occurrence, template_id=template_id))
        return template_id

    def delete_template(self, *, template_id: int, keep_before: Optional[date]) -> int:
        deleted = 0
        for o in [o for o in self._occurrences.rows.values() if o.template_id == template_id]:
            if keep_before is not None and o.occurrence_date < keep_before:
                self._occurrences.rows[o.occurrence_id] = replace(o, template_id=None)
            else:
                self._occurrences.delete_with_attendance(occurrence_id=o.occurrence_id)
                deleted += 1
        del self.rows[template_id]
        return deleted


class InMemorySeasons:
    def __init__(self, memberships: InMemoryMemberships):
        self.rows: dict[int, Season] = {}
        self._memberships = memberships
        self._next_id = 1

    def get_by_id(self, season_id: int) -> Optional[Season]:
        return self.rows.get(season_id)

    def list_for_organization(self, organization_id: int) -> Sequence[Season]:
        return [s for s in self.rows.values() if s.organization_id == organization_id]

    def create(self, *, organization_id: int, name: str, start_month: int, end_month: int) -> int:
        season_id = self._next_id
        self._next_id += 1
        self.rows[season_id] = Season(season_id, organization_id, name, start_month, end_month)
        return season_id

    def update(self, *, season_id: int, name: str, start_month: int, end_month: int) -> bool:
        if season_id not in self.rows:
            return False
        self.rows[season_id] = replace(self.rows[season_id], name=name, start_month=start_month, end_month=end_month)
        return True

    def delete(self, *, season_id: int) -> bool:
        return self.rows.pop(season_id, None) is not None

    def count_teams(self, *, season_id: int) -> int:
        return sum(1 for t in self._memberships.teams.values() if t.season_id == season_id)


class InMemoryTags:
    def __init__(self):
        self.rows: dict[int, Tag] = {}
        self._next_id = 1

    def get_by_id(self, tag_id: int) -> Optional[Tag]:
        return self.rows.get(tag_id)

    def get_by_token(self, token: str) -> Optional[Tag]:
        return next((t for t in self.rows.values() if t.token == token), None)

    def create(self, *, token: str, name: str, organization_id: int, created_by: Optional[int]) -> int:
        if self.get_by_token(token):
            raise ConflictError("A tag with this token is already registered")
        tag_id = self._next_id
        self._next_id += 1
        self.rows[tag_id] = Tag(tag_id=tag_id, token=token, name=name, organization_id=organization_id, created_by=created_by)
        return tag_id

    def set_active(self, *, tag_id: int, is_active: bool) -> bool:
        if tag_id not in self.rows:
            return False
        self.rows[tag_id] = replace(self.rows[tag_id], is_active=is_active)
        return True

    def list_for_organization(self, organization_id: int, *, active_only: bool = True) -> Sequence[Tag]:
        return [
            t for t in self.rows.values() if t.organization_id == organization_id and (t.is_active or not active_only)
        ]


class InMemoryAdHoc:
    def __init__(self, occurrences: InMemoryOccurrences, attendance: InMemoryAttendance, memberships: InMemoryMemberships, users: InMemoryUsers):
        self._occurrences = occurrences
        self._attendance = attendance
        self._memberships = memberships
        self._users = users

    def create_adhoc(self, *, occurrence: NewOccurrence, user_id: int, check_in_time: datetime, note: Optional[str] = None) -> AttendanceRecord:
        occurrence_id = self._occurrences.create(occurrence)
        return self._attendance.record_checkin(
            user_id=user_id,
            occurrence_id=occurrence_id,
            check_in_time=check_in_time,
            status=AttendanceStatus.ON_TIME,
            note=note,
            is_ad_hoc=True,
            approved=False,
        )

    def list_pending(self, *, organization_id: int, team_ids: Optional[Sequence[int]] = None) -> Sequence[PendingAdHocCheckIn]:
        out = []
        for r in self._attendance.rows.values():
            o = self._occurrences.rows[r.occurrence_id]
            if o.organization_id != organization_id or not r.is_ad_hoc or r.approved:
                continue
            if team_ids is not None and o.team_id not in team_ids:
                continue
            out.append(
                PendingAdHocCheckIn(
                    attendance_id=r.attendance_id,
                    user_id=r.user_id,
                    full_name=self._users.users[r.user_id].full_name,
                    occurrence_id=o.occurrence_id,
                    team_id=o.team_id,
                    team_name=self._memberships.teams[o.team_id].name,
                    occurrence_date=o.occurrence_date,
                    start_time=o.start_time,
                    end_time=o.end_time,
                    check_in_time=r.check_in_time,
                    note=r.note,
                )
            )
        return out

    def approve(self, *, attendance_id: int) -> bool:
        r = self._attendance.rows.get(attendance_id)
        if r is None or not r.is_ad_hoc:
            return False
        self._attendance.rows[attendance_id] = replace(r, approved=True)
        return True

    def delete_with_occurrence(self, *, attendance_id: int, occurrence_id: int) -> bool:
        deleted = self._attendance.rows.pop(attendance_id, None) is not None
        o = self._occurrences.rows.get(occurrence_id)
        if o is not None and o.is_ad_hoc:
            del self._occurrences.rows[occurrence_id]
        return deleted


@dataclass
class World:
    """One organization with a team, its staff and athletes, backed by in-memory repositories."""

    users: InMemoryUsers = field(default_factory=InMemoryUsers)
    memberships: InMemoryMemberships = field(default_factory=InMemoryMemberships)
    occurrences: InMemoryOccurrences = field(default_factory=InMemoryOccurrences)
    window_minutes: int = 30

    def __post_init__(self):
        self.attendance = InMemoryAttendance(self.occurrences, self.memberships, self.users)
        self.occurrences.attendance = self.attendance
        self.templates = InMemoryTemplates(self.occurrences)
        self.seasons = InMemorySeasons(self.memberships)
        self.tags = InMemoryTags()
        self.adhoc = InMemoryAdHoc(self.occurrences, self.attendance, self.memberships, self.users)

        self.auth_service = AuthService(self.users, self.memberships)
        self.membership_service = MembershipService(self.memberships)
        self.occurrence_service = OccurrenceService(self.occurrences)
        self.recurrence_service = RecurrenceService(self.templates, expander=RecurrenceExpander(max_occurrences=365))
        self.season_service = SeasonService(self.seasons, self.memberships)
        self.attendance_service = AttendanceService(self.attendance, self.occurrences, self.memberships)
        self.tag_service = TagService(self.tags)
        self.scan_resolver = ScanResolver(
            self.tags,
            self.occurrences,
            self.attendance,
            self.memberships,
            self.attendance_service,
            window_minutes=self.window_minutes,
        )
        self.adhoc_service = AdHocService(self.adhoc, self.attendance, self.occurrences, self.tags, self.memberships)
        self.report_service = AttendanceReportService(self.attendance, self.season_service)

    def add_user(
        self,
        user_id: int,
        full_name: str,
        *,
        org: Optional[int] = ORG,
        role: Role = Role.ATHLETE,
        team: Optional[int] = None,
        team_role: TeamRole = TeamRole.MEMBER,
        password: str = "secret",
    ) -> User:
        user = User(
            user_id=user_id,
            full_name=full_name,
            username=full_name.lower().replace(" ", "."),
            password_hash=generate_password_hash(password),
        )
        self.users.users[user_id] = user
        if org is not None:
            self.memberships.org_members[(user_id, org)] = OrgMembership(user_id=user_id, organization_id=org, role=role)
        if team is not None:
            self.memberships.team_members[(user_id, team)] = TeamMembership(user_id=user_id, team_id=team, role=team_role)
        return user

    def add_team(self, team_id: int, name: str, *, org: int = ORG, season_id: Optional[int] = None, season_year: Optional[int] = None) -> Team:
        team = Team(team_id=team_id, organization_id=org, name=name, season_id=season_id, season_year=season_year)
        self.memberships.teams[team_id] = team
        return team

    def add_occurrence(
        self,
        *,
        start: str,
        end: str,
        day: date = DAY,
        team_id: Optional[int] = TEAM,
        title: str = "Practice",
        org: int = ORG,
    ) -> Occurrence:
        occurrence_id = self.occurrences.create(
            NewOccurrence(
                organization_id=org,
                title=title,
                occurrence_date=day,
                start_time=start,
                end_time=end,
                team_id=team_id,
            )
        )
        return self.occurrences.rows[occurrence_id]

    def add_tag(self, token: str = "front-door", *, org: int = ORG, active: bool = True) -> Tag:
        tag_id = self.tags.create(token=token, name=token, organization_id=org, created_by=OWNER)
        if not active:
            self.tags.set_active(tag_id=tag_id, is_active=False)
        return self.tags.rows[tag_id]


@pytest.fixture
def world() -> World:
    w = World()
    w.add_team(TEAM, "U12 Girls")
    w.add_team(OTHER_TEAM, "U14 Boys")
    w.add_user(OWNER, "Olivia Owner", role=Role.OWNER)
    w.add_user(COACH, "Carl Coach", role=Role.COACH, team=TEAM, team_role=TeamRole.COACH)
    w.add_user(ATHLETE, "Ada Athlete", team=TEAM)
    w.add_user(PARENT, "Pat Parent")
    w.add_user(TEAMMATE, "Tom Teammate", team=TEAM)
    w.add_user(OUTSIDER, "Otto Outsider", org=OTHER_ORG)
    w.add_user(OTHER_COACH, "Cora Coach", role=Role.COACH, team=OTHER_TEAM, team_role=TeamRole.COACH)
    w.memberships.guardians.add((PARENT, ATHLETE, ORG))
    return w


@pytest.fixture
def at():
    """``at("17:50")`` is that time of day on the shared test date."""

    def _at(hhmm: str, day: date = DAY) -> datetime:
        hour, minute = hhmm.split(":")
        return datetime(day.year, day.month, day.day, int(hour), int(minute))

    return _at
