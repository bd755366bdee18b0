"""Explicit state table for a (participant, occurrence) attendance record.

    UNRECORDED  --check_in-->  CHECKED_IN (ON_TIME | LATE)
    CHECKED_IN  --check_in-->  CHECKED_IN (re-issue, unchanged)
    CHECKED_IN  --check_out--> CHECKED_OUT (terminal, hours populated)
    any         --mark-->      any (administrative correction)
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, DomainError, NotFoundError
from .model import AttendanceRecord


class RecordState(str, Enum):
    UNRECORDED = "UNRECORDED"
    CHECKED_IN = "CHECKED_IN"
    CHECKED_OUT = "CHECKED_OUT"
    ABSENT = "ABSENT"
    EXCUSED = "EXCUSED"


class AttendanceEvent(str, Enum):
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    MARK = "MARK"


TRANSITIONS: dict[tuple[RecordState, AttendanceEvent], RecordState] = {
    (RecordState.UNRECORDED, AttendanceEvent.CHECK_IN): RecordState.CHECKED_IN,
    (RecordState.CHECKED_IN, AttendanceEvent.CHECK_IN): RecordState.CHECKED_IN,
    (RecordState.CHECKED_IN, AttendanceEvent.CHECK_OUT): RecordState.CHECKED_OUT,
}

_REJECTIONS: dict[tuple[RecordState, AttendanceEvent], tuple[type[DomainError], str]] = {
    (RecordState.UNRECORDED, AttendanceEvent.CHECK_OUT): (NotFoundError, "Check-in not found"),
    (RecordState.CHECKED_OUT, AttendanceEvent.CHECK_IN): (ConflictError, "Already checked out"),
    (RecordState.CHECKED_OUT, AttendanceEvent.CHECK_OUT): (ConflictError, "Already checked out"),
    (RecordState.ABSENT, AttendanceEvent.CHECK_IN): (ConflictError, "Attendance already marked absent"),
    (RecordState.ABSENT, AttendanceEvent.CHECK_OUT): (ConflictError, "No check-in time recorded"),
    (RecordState.EXCUSED, AttendanceEvent.CHECK_IN): (ConflictError, "Attendance already marked excused"),
    (RecordState.EXCUSED, AttendanceEvent.CHECK_OUT): (ConflictError, "No check-in time recorded"),
}


def state_of(record: Optional[AttendanceRecord]) -> RecordState:
    if record is None:
        return RecordState.UNRECORDED
    if record.status == AttendanceStatus.ABSENT:
        return RecordState.ABSENT
    if record.status == AttendanceStatus.EXCUSED:
        return RecordState.EXCUSED
    if record.check_out_time is not None:
        return RecordState.CHECKED_OUT
    if record.check_in_time is not None:
        return RecordState.CHECKED_IN
    # ON_TIME/LATE with both times cleared by a correction
    return RecordState.UNRECORDED


def target_of_mark(status: AttendanceStatus, *, has_check_in: bool, has_check_out: bool) -> RecordState:
    if status == AttendanceStatus.ABSENT:
        return RecordState.ABSENT
    if status == AttendanceStatus.EXCUSED:
        return RecordState.EXCUSED
    if has_check_in and has_check_out:
        return RecordState.CHECKED_OUT
    if has_check_in:
        return RecordState.CHECKED_IN
    return RecordState.UNRECORDED


def transition(state: RecordState, event: AttendanceEvent) -> RecordState:
    """Next state, or the typed error for a transition the table does not allow.

    MARK is accepted from every state; its target depends on the marked status
    (see target_of_mark), so it returns the current state unchanged here.
    """
    if event == AttendanceEvent.MARK:
        return state

    nxt = TRANSITIONS.get((state, event))
    if nxt is not None:
        return nxt

    error_type, message = _REJECTIONS.get((state, event), (ConflictError, "Invalid attendance transition"))
    raise error_type(message)
