from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.mysql_attendance_repository import insert_checkin, row_to_record
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from ..occurrences.model import NewOccurrence
from ..occurrences.mysql_occurrence_repository import insert_occurrence
from .model import PendingAdHocCheckIn
from .repository import AdHocRepository


class MySQLAdHocRepository(AdHocRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_adhoc(
        self,
        *,
        occurrence: NewOccurrence,
        user_id: int,
        check_in_time: datetime,
        note: Optional[str] = None,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            occurrence_id = insert_occurrence(cur, occurrence)
            insert_checkin(
                cur,
                user_id=user_id,
                occurrence_id=occurrence_id,
                check_in_time=check_in_time,
                status=AttendanceStatus.ON_TIME,
                note=note,
                is_ad_hoc=True,
                approved=False,
            )
            cur.execute(
                """
                SELECT attendance_id, user_id, occurrence_id, status, check_in_time, check_out_time,
                       hours, note, is_ad_hoc, approved
                FROM attendance_records
                WHERE user_id=%s AND occurrence_id=%s
                """,
                (int(user_id), occurrence_id),
            )
            r = fetchone(cur)
            if not r:
                raise RuntimeError("ad-hoc attendance row missing after insert")
            return row_to_record(r)

    def list_pending(self, *, organization_id: int, team_ids: Optional[Sequence[int]] = None) -> Sequence[PendingAdHocCheckIn]:
        clauses = ["o.organization_id=%s", "ar.is_ad_hoc=1", "ar.approved=0"]
        params: list[object] = [int(organization_id)]
        if team_ids is not None:
            if not team_ids:
                return []
            clauses.append(f"o.team_id IN ({in_clause(team_ids)})")
            params.extend(int(t) for t in team_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.attendance_id, ar.user_id, u.full_name, ar.check_in_time, ar.note,
                    o.occurrence_id, o.team_id, t.name AS team_name,
                    o.occurrence_date, o.start_time, o.end_time
                FROM attendance_records ar
                JOIN occurrences o ON o.occurrence_id = ar.occurrence_id
                JOIN users u ON u.user_id = ar.user_id
                JOIN teams t ON t.team_id = o.team_id
                WHERE {" AND ".join(clauses)}
                ORDER BY ar.check_in_time DESC, ar.attendance_id DESC
                """,
                tuple(params),
            )
            return [
                PendingAdHocCheckIn(
                    attendance_id=int(r["attendance_id"]),
                    user_id=int(r["user_id"]),
                    full_name=r["full_name"],
                    occurrence_id=int(r["occurrence_id"]),
                    team_id=int(r["team_id"]),
                    team_name=r["team_name"],
                    occurrence_date=r["occurrence_date"],
                    start_time=r["start_time"],
                    end_time=r["end_time"],
                    check_in_time=r.get("check_in_time"),
                    note=r.get("note"),
                )
                for r in fetchall(cur)
            ]

    def approve(self, *, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE attendance_records SET approved=1 WHERE attendance_id=%s AND is_ad_hoc=1",
                (int(attendance_id),),
            )
            return cur.rowcount > 0

    def delete_with_occurrence(self, *, attendance_id: int, occurrence_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            deleted = cur.rowcount > 0
            cur.execute("DELETE FROM occurrences WHERE occurrence_id=%s AND is_ad_hoc=1", (int(occurrence_id),))
            return deleted
