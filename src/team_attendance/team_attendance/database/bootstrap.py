from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..common.logging import get_logger
from .connection import DatabaseConnection, DBConfig

log = get_logger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql usable regardless of the configured DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal splitter for schema files (handles ';' inside quotes).
    buf: list[str] = []
    quote: str | None = None
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch in {"'", '"'}:
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
            buf.append(ch)
            continue

        if ch == ";" and quote is None:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(target).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)

    sql = Path(schema_path).read_text(encoding="utf-8")
    sql = _strip_comments(_strip_create_db_and_use(sql))

    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        count = 0
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
        log.info("schema_applied", path=str(schema_path), statements=count)
    finally:
        conn.close()


def ensure_demo_data(db_config: dict) -> None:
    """Idempotently create a demo organization with an owner, a coach and an athlete."""
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor(dictionary=True)

        cur.execute("SELECT organization_id FROM organizations WHERE name=%s", ("Demo Club",))
        row = cur.fetchone()
        if row:
            org_id = int(row["organization_id"])
        else:
            cur.execute("INSERT INTO organizations(name) VALUES(%s)", ("Demo Club",))
            org_id = int(cur.lastrowid)

        cur.execute("SELECT team_id FROM teams WHERE organization_id=%s AND name=%s", (org_id, "Varsity"))
        row = cur.fetchone()
        if row:
            team_id = int(row["team_id"])
        else:
            cur.execute("INSERT INTO teams(organization_id, name) VALUES(%s,%s)", (org_id, "Varsity"))
            team_id = int(cur.lastrowid)

        def upsert_user(full_name: str, username: str, password: str, role: str, team_role: str | None) -> None:
            cur.execute(
                """
                INSERT INTO users(full_name, username, password_hash)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE full_name=VALUES(full_name), password_hash=VALUES(password_hash), is_active=1
                """,
                (full_name, username, generate_password_hash(password)),
            )
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            user_id = int(cur.fetchone()["user_id"])

            cur.execute(
                """
                INSERT INTO organization_members(user_id, organization_id, role)
                VALUES(%s,%s,%s)
                ON DUPLICATE KEY UPDATE role=VALUES(role)
                """,
                (user_id, org_id, role),
            )
            if team_role:
                cur.execute(
                    """
                    INSERT INTO team_members(user_id, team_id, role)
                    VALUES(%s,%s,%s)
                    ON DUPLICATE KEY UPDATE role=VALUES(role)
                    """,
                    (user_id, team_id, team_role),
                )

        upsert_user("Demo Owner", "owner", "owner123", "OWNER", None)
        upsert_user("Demo Coach", "coach", "coach123", "COACH", "COACH")
        upsert_user("Demo Athlete", "athlete", "athlete123", "ATHLETE", "MEMBER")

        conn.commit()
        log.info("demo_data_ready", organization_id=org_id, team_id=team_id)
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection(DBConfig.from_dict(db_config)).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
