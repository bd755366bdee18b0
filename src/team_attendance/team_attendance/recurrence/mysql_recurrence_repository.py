from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..core.enums import RecurrenceFrequency
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..occurrences.model import NewOccurrence
from ..occurrences.mysql_occurrence_repository import insert_occurrence
from .model import RecurrenceTemplate, decode_weekdays, encode_weekdays
from .repository import RecurrenceRepository

_COLUMNS = """
    template_id, organization_id, team_id, title, frequency, weekdays,
    start_date, end_date, start_time, end_time, location, created_by
"""


def _to_template(r: Dict[str, Any]) -> RecurrenceTemplate:
    return RecurrenceTemplate(
        template_id=int(r["template_id"]),
        organization_id=int(r["organization_id"]),
        title=r["title"],
        frequency=RecurrenceFrequency(r["frequency"]),
        weekdays=decode_weekdays(r.get("weekdays")),
        start_date=r["start_date"],
        end_date=r["end_date"],
        start_time=r["start_time"],
        end_time=r["end_time"],
        team_id=int(r["team_id"]) if r.get("team_id") is not None else None,
        location=r.get("location"),
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
    )


class MySQLRecurrenceRepository(RecurrenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, template_id: int) -> Optional[RecurrenceTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM recurrence_templates WHERE template_id=%s", (int(template_id),))
            r = fetchone(cur)
            return _to_template(r) if r else None

    def list_for_organization(self, organization_id: int) -> Sequence[RecurrenceTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM recurrence_templates
                WHERE organization_id=%s
                ORDER BY start_date DESC, template_id DESC
                """,
                (int(organization_id),),
            )
            return [_to_template(r) for r in fetchall(cur)]

    def create_with_occurrences(
        self,
        *,
        template: RecurrenceTemplate,
        occurrences: Sequence[NewOccurrence],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO recurrence_templates(
                    organization_id, team_id, title, frequency, weekdays,
                    start_date, end_date, start_time, end_time, location, created_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(template.organization_id),
                    template.team_id,
                    template.title,
                    template.frequency.value,
                    encode_weekdays(template.weekdays) or None,
                    template.start_date,
                    template.end_date,
                    template.start_time,
                    template.end_time,
                    template.location,
                    template.created_by,
                ),
            )
            template_id = int(cur.lastrowid)

            for occurrence in occurrences:
                insert_occurrence(cur, replace(occurrence, template_id=template_id))

            return template_id

    def delete_template(self, *, template_id: int, keep_before: Optional[date]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            if keep_before is not None:
                cur.execute(
                    "UPDATE occurrences SET template_id=NULL WHERE template_id=%s AND occurrence_date < %s",
                    (int(template_id), keep_before),
                )

            cur.execute(
                """
                DELETE ar FROM attendance_records ar
                JOIN occurrences o ON o.occurrence_id = ar.occurrence_id
                WHERE o.template_id=%s
                """,
                (int(template_id),),
            )
            cur.execute("DELETE FROM occurrences WHERE template_id=%s", (int(template_id),))
            deleted = int(cur.rowcount)
            cur.execute("DELETE FROM recurrence_templates WHERE template_id=%s", (int(template_id),))
            return deleted
