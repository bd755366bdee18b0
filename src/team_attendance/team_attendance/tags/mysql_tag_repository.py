from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Tag
from .repository import TagRepository


def _to_tag(r: Dict[str, Any]) -> Tag:
    return Tag(
        tag_id=int(r["tag_id"]),
        token=r["token"],
        name=r["name"],
        organization_id=int(r["organization_id"]),
        is_active=bool(r.get("is_active", True)),
        created_by=int(r["created_by"]) if r.get("created_by") is not None else None,
    )


class MySQLTagRepository(TagRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, tag_id: int) -> Optional[Tag]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT tag_id, token, name, organization_id, is_active, created_by FROM tags WHERE tag_id=%s",
                (int(tag_id),),
            )
            r = fetchone(cur)
            return _to_tag(r) if r else None

    def get_by_token(self, token: str) -> Optional[Tag]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT tag_id, token, name, organization_id, is_active, created_by FROM tags WHERE token=%s",
                (token,),
            )
            r = fetchone(cur)
            return _to_tag(r) if r else None

    def create(self, *, token: str, name: str, organization_id: int, created_by: Optional[int]) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO tags(token, name, organization_id, created_by) VALUES(%s,%s,%s,%s)",
                    (token, name, int(organization_id), created_by),
                )
                return int(cur.lastrowid)
        except mysql_errors.IntegrityError as e:
            raise ConflictError("A tag with this token is already registered") from e

    def set_active(self, *, tag_id: int, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE tags SET is_active=%s WHERE tag_id=%s", (1 if is_active else 0, int(tag_id)))
            return cur.rowcount > 0

    def list_for_organization(self, organization_id: int, *, active_only: bool = True) -> Sequence[Tag]:
        where = "organization_id=%s AND is_active=1" if active_only else "organization_id=%s"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT tag_id, token, name, organization_id, is_active, created_by
                FROM tags
                WHERE {where}
                ORDER BY name ASC, tag_id ASC
                """,
                (int(organization_id),),
            )
            return [_to_tag(r) for r in fetchall(cur)]
