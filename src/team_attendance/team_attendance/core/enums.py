from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Organization-level role used for authorization."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    COACH = "COACH"
    ATHLETE = "ATHLETE"


# Roles allowed to manage schedules, tags and attendance corrections.
STAFF_ROLES = frozenset({Role.OWNER, Role.ADMIN, Role.MANAGER, Role.COACH})
TAG_ADMIN_ROLES = frozenset({Role.OWNER, Role.ADMIN, Role.MANAGER})


class TeamRole(str, Enum):
    COACH = "COACH"
    ADMIN = "ADMIN"
    CAPTAIN = "CAPTAIN"
    MEMBER = "MEMBER"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    ON_TIME = "ON_TIME"
    LATE = "LATE"
    ABSENT = "ABSENT"
    EXCUSED = "EXCUSED"

    @property
    def clears_times(self) -> bool:
        return self in {AttendanceStatus.ABSENT, AttendanceStatus.EXCUSED}


class RecurrenceFrequency(str, Enum):
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"

    @property
    def needs_weekdays(self) -> bool:
        return self in {RecurrenceFrequency.WEEKLY, RecurrenceFrequency.BIWEEKLY}


class ScanAction(str, Enum):
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"


class UseDefault(Enum):
    """Marker for "no value supplied" in administrative timestamp overrides.

    ``None`` means "clear the field", a datetime means "use exactly this".
    """

    TOKEN = 0


USE_DEFAULT = UseDefault.TOKEN
