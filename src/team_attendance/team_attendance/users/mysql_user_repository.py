from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role, TeamRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import OrgMembership, Team, TeamMembership, User
from .repository import MembershipRepository, UserRepository


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        username=row["username"],
        password_hash=row["password_hash"],
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, full_name, username, password_hash, is_active FROM users WHERE user_id=%s",
                (int(user_id),),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, full_name, username, password_hash, is_active FROM users WHERE username=%s",
                (username,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None


class MySQLMembershipRepository(MembershipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_org_membership(self, *, user_id: int, organization_id: int) -> Optional[OrgMembership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, organization_id, role
                FROM organization_members
                WHERE user_id=%s AND organization_id=%s
                """,
                (int(user_id), int(organization_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return OrgMembership(user_id=int(r["user_id"]), organization_id=int(r["organization_id"]), role=Role(r["role"]))

    def list_org_memberships(self, user_id: int) -> Sequence[OrgMembership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, organization_id, role FROM organization_members WHERE user_id=%s ORDER BY organization_id",
                (int(user_id),),
            )
            return [
                OrgMembership(user_id=int(r["user_id"]), organization_id=int(r["organization_id"]), role=Role(r["role"]))
                for r in fetchall(cur)
            ]

    def get_team(self, team_id: int) -> Optional[Team]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT team_id, organization_id, name, season_id, season_year FROM teams WHERE team_id=%s",
                (int(team_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Team(
                team_id=int(r["team_id"]),
                organization_id=int(r["organization_id"]),
                name=r["name"],
                season_id=int(r["season_id"]) if r.get("season_id") is not None else None,
                season_year=int(r["season_year"]) if r.get("season_year") is not None else None,
            )

    def get_team_membership(self, *, user_id: int, team_id: int) -> Optional[TeamMembership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, team_id, role FROM team_members WHERE user_id=%s AND team_id=%s",
                (int(user_id), int(team_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return TeamMembership(user_id=int(r["user_id"]), team_id=int(r["team_id"]), role=TeamRole(r["role"]))

    def list_team_memberships(self, *, user_id: int, organization_id: int) -> Sequence[TeamMembership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT tm.user_id, tm.team_id, tm.role
                FROM team_members tm
                JOIN teams t ON t.team_id = tm.team_id
                WHERE tm.user_id=%s AND t.organization_id=%s
                ORDER BY tm.team_id
                """,
                (int(user_id), int(organization_id)),
            )
            return [
                TeamMembership(user_id=int(r["user_id"]), team_id=int(r["team_id"]), role=TeamRole(r["role"]))
                for r in fetchall(cur)
            ]

    def is_guardian(self, *, guardian_id: int, athlete_id: int, organization_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS ok
                FROM guardian_links
                WHERE guardian_id=%s AND athlete_id=%s AND organization_id=%s
                """,
                (int(guardian_id), int(athlete_id), int(organization_id)),
            )
            return fetchone(cur) is not None
