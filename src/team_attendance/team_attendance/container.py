from __future__ import annotations

from dataclasses import dataclass

from .adhoc.mysql_adhoc_repository import MySQLAdHocRepository
from .adhoc.service import AdHocService
from .attendance.calculator.clamped_calculator import ClampedHoursCalculator
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_CHECKIN_WINDOW_MINUTES, DEFAULT_MAX_OCCURRENCES
from .database.connection import DBConfig, DatabaseConnection
from .occurrences.mysql_occurrence_repository import MySQLOccurrenceRepository
from .occurrences.service import OccurrenceService
from .recurrence.expander import RecurrenceExpander
from .recurrence.mysql_recurrence_repository import MySQLRecurrenceRepository
from .recurrence.service import RecurrenceService
from .reports.service import AttendanceReportService
from .seasons.mysql_season_repository import MySQLSeasonRepository
from .seasons.service import SeasonService
from .tags.mysql_tag_repository import MySQLTagRepository
from .tags.resolver import ScanResolver
from .tags.service import TagService
from .users.mysql_user_repository import MySQLMembershipRepository, MySQLUserRepository
from .users.service import AuthService, MembershipService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    memberships_repo: MySQLMembershipRepository
    occurrences_repo: MySQLOccurrenceRepository
    templates_repo: MySQLRecurrenceRepository
    seasons_repo: MySQLSeasonRepository
    attendance_repo: MySQLAttendanceRepository
    tags_repo: MySQLTagRepository
    adhoc_repo: MySQLAdHocRepository

    auth_service: AuthService
    membership_service: MembershipService
    occurrence_service: OccurrenceService
    recurrence_service: RecurrenceService
    season_service: SeasonService
    attendance_service: AttendanceService
    tag_service: TagService
    scan_resolver: ScanResolver
    adhoc_service: AdHocService
    report_service: AttendanceReportService


def build_container(
    *,
    db_config: dict,
    checkin_window_minutes: int = DEFAULT_CHECKIN_WINDOW_MINUTES,
    max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    memberships_repo = MySQLMembershipRepository(conn)
    occurrences_repo = MySQLOccurrenceRepository(conn)
    templates_repo = MySQLRecurrenceRepository(conn)
    seasons_repo = MySQLSeasonRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    tags_repo = MySQLTagRepository(conn)
    adhoc_repo = MySQLAdHocRepository(conn)

    auth_service = AuthService(users_repo, memberships_repo)
    membership_service = MembershipService(memberships_repo)
    occurrence_service = OccurrenceService(occurrences_repo)
    recurrence_service = RecurrenceService(
        templates_repo,
        expander=RecurrenceExpander(max_occurrences=int(max_occurrences)),
    )
    season_service = SeasonService(seasons_repo, memberships_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        occurrences_repo,
        memberships_repo,
        strategy_factory=AttendanceStrategyFactory(),
        calculator=ClampedHoursCalculator(),
    )
    tag_service = TagService(tags_repo)
    scan_resolver = ScanResolver(
        tags_repo,
        occurrences_repo,
        attendance_repo,
        memberships_repo,
        attendance_service,
        window_minutes=int(checkin_window_minutes),
    )
    adhoc_service = AdHocService(adhoc_repo, attendance_repo, occurrences_repo, tags_repo, memberships_repo)
    report_service = AttendanceReportService(attendance_repo, season_service)

    return Container(
        conn=conn,
        users_repo=users_repo,
        memberships_repo=memberships_repo,
        occurrences_repo=occurrences_repo,
        templates_repo=templates_repo,
        seasons_repo=seasons_repo,
        attendance_repo=attendance_repo,
        tags_repo=tags_repo,
        adhoc_repo=adhoc_repo,
        auth_service=auth_service,
        membership_service=membership_service,
        occurrence_service=occurrence_service,
        recurrence_service=recurrence_service,
        season_service=season_service,
        attendance_service=attendance_service,
        tag_service=tag_service,
        scan_resolver=scan_resolver,
        adhoc_service=adhoc_service,
        report_service=report_service,
    )
