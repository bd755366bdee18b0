from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord, AttendanceReportRow
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, occurrence_id, status, check_in_time, check_out_time,
    hours, note, is_ad_hoc, approved
"""


def row_to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        occurrence_id=int(r["occurrence_id"]),
        status=AttendanceStatus(r["status"]),
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        hours=Decimal(str(r.get("hours") or "0")),
        note=r.get("note"),
        is_ad_hoc=bool(r.get("is_ad_hoc")),
        approved=bool(r.get("approved", True)),
    )


def insert_checkin(
    cur,
    *,
    user_id: int,
    occurrence_id: int,
    check_in_time: datetime,
    status: AttendanceStatus,
    note: Optional[str],
    is_ad_hoc: bool,
    approved: bool,
) -> None:
    # Only a record without a check-in (none yet, or cleared by a correction)
    # takes the new values. Assignments run left to right, check_in_time last.
    cur.execute(
        """
        INSERT INTO attendance_records(user_id, occurrence_id, status, check_in_time, note, is_ad_hoc, approved)
        VALUES(%s,%s,%s,%s,%s,%s,%s)
        ON DUPLICATE KEY UPDATE
            status = IF(check_in_time IS NULL AND status IN ('ON_TIME','LATE'), VALUES(status), status),
            note = IF(check_in_time IS NULL AND status IN ('ON_TIME','LATE'), COALESCE(VALUES(note), note), note),
            check_in_time = IF(check_in_time IS NULL AND status IN ('ON_TIME','LATE'), VALUES(check_in_time), check_in_time)
        """,
        (
            int(user_id),
            int(occurrence_id),
            status.value,
            check_in_time,
            note,
            1 if is_ad_hoc else 0,
            1 if approved else 0,
        ),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_pair(self, cur, user_id: int, occurrence_id: int) -> Optional[AttendanceRecord]:
        cur.execute(
            f"SELECT {_COLUMNS} FROM attendance_records WHERE user_id=%s AND occurrence_id=%s",
            (int(user_id), int(occurrence_id)),
        )
        r = fetchone(cur)
        return row_to_record(r) if r else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return row_to_record(r) if r else None

    def get_for_user_and_occurrence(self, *, user_id: int, occurrence_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_pair(cur, user_id, occurrence_id)

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
        with db_cursor(self._conn_factory) as (_, cur):
            insert_checkin(
                cur,
                user_id=user_id,
                occurrence_id=occurrence_id,
                check_in_time=check_in_time,
                status=status,
                note=note,
                is_ad_hoc=is_ad_hoc,
                approved=approved,
            )
            record = self._select_pair(cur, user_id, occurrence_id)
            if record is None:
                raise RuntimeError("attendance row missing after upsert")
            return record

    def record_checkout(self, *, attendance_id: int, check_out_time: datetime, hours: Decimal) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, hours=%s
                WHERE attendance_id=%s AND check_in_time IS NOT NULL AND check_out_time IS NULL
                """,
                (check_out_time, hours, int(attendance_id)),
            )
            return cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(user_id, occurrence_id, status, check_in_time, check_out_time, hours, note)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status),
                    check_in_time=VALUES(check_in_time),
                    check_out_time=VALUES(check_out_time),
                    hours=VALUES(hours),
                    note=COALESCE(VALUES(note), note)
                """,
                (int(user_id), int(occurrence_id), status.value, check_in_time, check_out_time, hours, note),
            )
            record = self._select_pair(cur, user_id, occurrence_id)
            if record is None:
                raise RuntimeError("attendance row missing after upsert")
            return record

    def list_open_for_occurrence(self, occurrence_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE occurrence_id=%s
                  AND status IN ('ON_TIME','LATE')
                  AND check_in_time IS NOT NULL
                  AND check_out_time IS NULL
                ORDER BY attendance_id ASC
                """,
                (int(occurrence_id),),
            )
            return [row_to_record(r) for r in fetchall(cur)]

    def list_checked_out_occurrence_ids(self, *, user_id: int, occurrence_ids: Sequence[int]) -> set[int]:
        if not occurrence_ids:
            return set()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT occurrence_id
                FROM attendance_records
                WHERE user_id=%s AND check_out_time IS NOT NULL AND occurrence_id IN ({in_clause(occurrence_ids)})
                """,
                (int(user_id), *[int(o) for o in occurrence_ids]),
            )
            return {int(r["occurrence_id"]) for r in fetchall(cur)}

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ar.attendance_id, ar.user_id, ar.occurrence_id, ar.status, ar.check_in_time,
                       ar.check_out_time, ar.hours, ar.note, ar.is_ad_hoc, ar.approved
                FROM attendance_records ar
                JOIN occurrences o ON o.occurrence_id = ar.occurrence_id
                WHERE ar.user_id=%s
                ORDER BY o.occurrence_date DESC, ar.attendance_id DESC
                LIMIT %s
                """,
                (int(user_id), int(limit)),
            )
            return [row_to_record(r) for r in fetchall(cur)]

    def get_report_rows(
        self,
        *,
        team_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        approved_only: bool = True,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["(o.team_id=%s OR o.team_id IS NULL)"]
        params: list[object] = [int(team_id), int(team_id)]

        if start_date is not None:
            clauses.append("o.occurrence_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("o.occurrence_date <= %s")
            params.append(end_date)
        if approved_only:
            clauses.append("ar.approved = 1")

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    u.user_id, u.full_name,
                    o.occurrence_id, o.title, o.occurrence_date,
                    ar.status, ar.check_in_time, ar.check_out_time, ar.hours, ar.is_ad_hoc, ar.note
                FROM attendance_records ar
                JOIN occurrences o ON o.occurrence_id = ar.occurrence_id
                JOIN users u ON u.user_id = ar.user_id
                JOIN team_members tm ON tm.user_id = ar.user_id AND tm.team_id = %s
                JOIN teams t ON t.team_id = tm.team_id AND o.organization_id = t.organization_id
                WHERE {where}
                ORDER BY o.occurrence_date DESC, u.user_id ASC
                """,
                tuple(params),
            )
            return [
                AttendanceReportRow(
                    user_id=int(r["user_id"]),
                    full_name=r["full_name"],
                    occurrence_id=int(r["occurrence_id"]),
                    title=r["title"],
                    occurrence_date=r["occurrence_date"],
                    status=AttendanceStatus(r["status"]),
                    check_in_time=r.get("check_in_time"),
                    check_out_time=r.get("check_out_time"),
                    hours=Decimal(str(r.get("hours") or "0")),
                    is_ad_hoc=bool(r.get("is_ad_hoc")),
                    note=r.get("note"),
                )
                for r in fetchall(cur)
            ]
