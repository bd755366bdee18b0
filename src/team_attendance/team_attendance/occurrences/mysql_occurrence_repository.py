from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import NewOccurrence, Occurrence
from .repository import OccurrenceRepository

_COLUMNS = """
    occurrence_id, organization_id, team_id, template_id, title,
    occurrence_date, start_time, end_time, location, is_ad_hoc
"""


def row_to_occurrence(r: Dict[str, Any]) -> Occurrence:
    return Occurrence(
        occurrence_id=int(r["occurrence_id"]),
        organization_id=int(r["organization_id"]),
        title=r["title"],
        occurrence_date=r["occurrence_date"],
        start_time=r["start_time"],
        end_time=r["end_time"],
        team_id=int(r["team_id"]) if r.get("team_id") is not None else None,
        template_id=int(r["template_id"]) if r.get("template_id") is not None else None,
        location=r.get("location"),
        is_ad_hoc=bool(r.get("is_ad_hoc")),
    )


def insert_occurrence(cur, occurrence: NewOccurrence) -> int:
    """Insert using an open cursor so callers can batch inside their own transaction."""
    cur.execute(
        """
        INSERT INTO occurrences(
            organization_id, team_id, template_id, title,
            occurrence_date, start_time, end_time, location, is_ad_hoc
        )
        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            int(occurrence.organization_id),
            occurrence.team_id,
            occurrence.template_id,
            occurrence.title,
            occurrence.occurrence_date,
            occurrence.start_time,
            occurrence.end_time,
            occurrence.location,
            1 if occurrence.is_ad_hoc else 0,
        ),
    )
    return int(cur.lastrowid)


class MySQLOccurrenceRepository(OccurrenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, occurrence_id: int) -> Optional[Occurrence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM occurrences WHERE occurrence_id=%s", (int(occurrence_id),))
            r = fetchone(cur)
            return row_to_occurrence(r) if r else None

    def create(self, occurrence: NewOccurrence) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_occurrence(cur, occurrence)

    def delete_with_attendance(self, *, occurrence_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE occurrence_id=%s", (int(occurrence_id),))
            cur.execute("DELETE FROM occurrences WHERE occurrence_id=%s", (int(occurrence_id),))
            return cur.rowcount > 0

    def list_for_day(
        self,
        *,
        organization_id: int,
        day: date,
        team_ids: Sequence[int],
    ) -> Sequence[Occurrence]:
        clauses = ["team_id IS NULL"]
        params: list[object] = [int(organization_id), day]
        if team_ids:
            clauses.append(f"team_id IN ({in_clause(team_ids)})")
            params.extend(int(t) for t in team_ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM occurrences
                WHERE organization_id=%s AND occurrence_date=%s AND is_ad_hoc=0 AND ({" OR ".join(clauses)})
                ORDER BY occurrence_id ASC
                """,
                tuple(params),
            )
            return [row_to_occurrence(r) for r in fetchall(cur)]

    def list_range(
        self,
        *,
        organization_id: int,
        start: date,
        end: date,
        team_id: Optional[int] = None,
    ) -> Sequence[Occurrence]:
        clauses = ["organization_id=%s", "occurrence_date BETWEEN %s AND %s"]
        params: list[object] = [int(organization_id), start, end]
        if team_id is not None:
            clauses.append("(team_id=%s OR team_id IS NULL)")
            params.append(int(team_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM occurrences
                WHERE {" AND ".join(clauses)}
                ORDER BY occurrence_date ASC, occurrence_id ASC
                """,
                tuple(params),
            )
            return [row_to_occurrence(r) for r in fetchall(cur)]
