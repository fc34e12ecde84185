"""
db/repositories/user_repo.py
------------------------------
SQL for the `users` table (schema: db/schema.sql).

Rows include password_hash; db/stores.py strips it before anything
leaves the persistence layer.

All functions accept a psycopg2 connection object.
Commit/rollback is managed by the caller via db.connection.get_conn().
"""

from __future__ import annotations

import json
from typing import Any

_COLUMNS = "id, name, email, password_hash, preferences, created_at, updated_at"


def _fetch_one(cur) -> dict | None:
    row = cur.fetchone()
    if row is None:
        return None
    cols = [d[0] for d in cur.description]
    return dict(zip(cols, row))


def insert_user(conn, row: dict[str, Any]) -> None:
    """Insert one user. Raises psycopg2.errors.UniqueViolation on a taken email."""
    sql = f"""
        INSERT INTO users ({_COLUMNS}) VALUES (
            %(id)s, %(name)s, %(email)s, %(password_hash)s,
            %(preferences)s::jsonb, %(created_at)s, %(updated_at)s
        )
    """
    with conn.cursor() as cur:
        cur.execute(sql, {**row, "preferences": json.dumps(row["preferences"])})


def get_user_by_id(conn, user_id: str) -> dict | None:
    with conn.cursor() as cur:
        cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id = %s", (user_id,))
        return _fetch_one(cur)


def get_user_by_email(conn, email: str) -> dict | None:
    with conn.cursor() as cur:
        cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email = %s", (email,))
        return _fetch_one(cur)


def update_user(conn, user_id: str, fields: dict[str, Any]) -> bool:
    """
    Update the given columns (name, email, password_hash, preferences,
    updated_at). Returns False when the user does not exist.
    """
    allowed = ("name", "email", "password_hash", "preferences", "updated_at")
    params = {k: v for k, v in fields.items() if k in allowed}
    if "preferences" in params:
        params["preferences"] = json.dumps(params["preferences"])
    if not params:
        return get_user_by_id(conn, user_id) is not None

    assignments = ", ".join(
        f"{k} = %({k})s::jsonb" if k == "preferences" else f"{k} = %({k})s"
        for k in params
    )
    with conn.cursor() as cur:
        cur.execute(
            f"UPDATE users SET {assignments} WHERE id = %(user_id)s",
            {**params, "user_id": user_id},
        )
        return cur.rowcount == 1
