from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Season
from .repository import SeasonRepository


def _to_season(r: Dict[str, Any]) -> Season:
    return Season(
        season_id=int(r["season_id"]),
        organization_id=int(r["organization_id"]),
        name=r["name"],
        start_month=int(r["start_month"]),
        end_month=int(r["end_month"]),
    )


class MySQLSeasonRepository(SeasonRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, season_id: int) -> Optional[Season]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT season_id, organization_id, name, start_month, end_month FROM seasons WHERE season_id=%s",
                (int(season_id),),
            )
            r = fetchone(cur)
            return _to_season(r) if r else None

    def list_for_organization(self, organization_id: int) -> Sequence[Season]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT season_id, organization_id, name, start_month, end_month
                FROM seasons
                WHERE organization_id=%s
                ORDER BY start_month ASC, season_id ASC
                """,
                (int(organization_id),),
            )
            return [_to_season(r) for r in fetchall(cur)]

    def create(self, *, organization_id: int, name: str, start_month: int, end_month: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO seasons(organization_id, name, start_month, end_month) VALUES(%s,%s,%s,%s)",
                (int(organization_id), name, int(start_month), int(end_month)),
            )
            return int(cur.lastrowid)

    def update(self, *, season_id: int, name: str, start_month: int, end_month: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE seasons SET name=%s, start_month=%s, end_month=%s WHERE season_id=%s",
                (name, int(start_month), int(end_month), int(season_id)),
            )
            return cur.rowcount > 0

    def delete(self, *, season_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM seasons WHERE season_id=%s", (int(season_id),))
            return cur.rowcount > 0

    def count_teams(self, *, season_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM teams WHERE season_id=%s", (int(season_id),))
            r = fetchone(cur)
            return int(r["n"]) if r else 0
