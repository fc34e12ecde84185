"""
db/repositories/trip_repo.py
------------------------------
SQL for the `trips` table (schema: db/schema.sql).

Every read, update and delete is keyed by (trip id, owner id): a trip that
belongs to someone else is indistinguishable from a trip that does not
exist.

All functions accept a psycopg2 connection object.
Commit/rollback is managed by the caller via db.connection.get_conn().
"""

from __future__ import annotations

import json
from typing import Any

_COLUMNS = (
    "id, user_id, destination, start_date, end_date, budget, preferences, "
    "itinerary, summary, status, created_at, updated_at"
)


def _encode(row: dict[str, Any]) -> dict[str, Any]:
    """Serialize the JSONB sub-documents."""
    encoded = dict(row)
    for key in ("budget", "preferences", "itinerary", "summary"):
        encoded[key] = json.dumps(row[key])
    return encoded


def _fetch_dicts(cur) -> list[dict]:
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]


def insert_trip(conn, row: dict[str, Any]) -> None:
    """
    Insert one trip.

    Required keys: every column in _COLUMNS. budget / preferences /
    itinerary / summary are plain dicts/lists and are stored as JSONB.
    """
    sql = f"""
        INSERT INTO trips ({_COLUMNS}) VALUES (
            %(id)s, %(user_id)s, %(destination)s, %(start_date)s, %(end_date)s,
            %(budget)s::jsonb, %(preferences)s::jsonb,
            %(itinerary)s::jsonb, %(summary)s::jsonb,
            %(status)s, %(created_at)s, %(updated_at)s
        )
    """
    with conn.cursor() as cur:
        cur.execute(sql, _encode(row))


def get_trip(conn, trip_id: str, user_id: str) -> dict | None:
    """Return a trip row owned by ``user_id``, or None."""
    sql = f"SELECT {_COLUMNS} FROM trips WHERE id = %s AND user_id = %s"
    with conn.cursor() as cur:
        cur.execute(sql, (trip_id, user_id))
        rows = _fetch_dicts(cur)
    return rows[0] if rows else None


def list_trips_by_user(conn, user_id: str) -> list[dict]:
    """Return all trips for a user, newest first."""
    sql = f"SELECT {_COLUMNS} FROM trips WHERE user_id = %s ORDER BY created_at DESC"
    with conn.cursor() as cur:
        cur.execute(sql, (user_id,))
        return _fetch_dicts(cur)


def update_trip(conn, row: dict[str, Any]) -> bool:
    """
    Overwrite every mutable column of the trip (id, user_id) in ``row``.

    Returns False when no such trip exists for that owner.
    """
    sql = """
        UPDATE trips SET
            destination = %(destination)s,
            start_date  = %(start_date)s,
            end_date    = %(end_date)s,
            budget      = %(budget)s::jsonb,
            preferences = %(preferences)s::jsonb,
            itinerary   = %(itinerary)s::jsonb,
            summary     = %(summary)s::jsonb,
            status      = %(status)s,
            updated_at  = %(updated_at)s
        WHERE id = %(id)s AND user_id = %(user_id)s
    """
    with conn.cursor() as cur:
        cur.execute(sql, _encode(row))
        return cur.rowcount == 1


def delete_trip(conn, trip_id: str, user_id: str) -> bool:
    """Delete the trip if ``user_id`` owns it. Returns True if a row went."""
    sql = "DELETE FROM trips WHERE id = %s AND user_id = %s"
    with conn.cursor() as cur:
        cur.execute(sql, (trip_id, user_id))
        return cur.rowcount == 1
