"""
db/connection.py
-----------------
Process-wide psycopg2 ThreadedConnectionPool for the users / trips database.

Usage:
    from db.connection import get_conn

    with get_conn() as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT id FROM trips WHERE user_id = %s", (user_id,))

Commit on clean exit, rollback on exception, connection always handed back.
The pool is built on first use, so importing this module never touches the
network (the in-memory backend never builds it at all).

Environment variables (set in config.py):
    POSTGRES_HOST / POSTGRES_PORT / POSTGRES_DB
    POSTGRES_USER / POSTGRES_PASSWORD
    POSTGRES_MIN_CONN (1) / POSTGRES_MAX_CONN (10)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import psycopg2
import psycopg2.pool

import config

logger = logging.getLogger(__name__)

_pool: psycopg2.pool.ThreadedConnectionPool | None = None


def get_pool() -> psycopg2.pool.ThreadedConnectionPool:
    """Return the shared pool, building it on first call (or after close_pool)."""
    global _pool
    if _pool is None or _pool.closed:
        logger.info(
            "Opening Postgres pool %s@%s:%s/%s",
            config.POSTGRES_USER, config.POSTGRES_HOST, config.POSTGRES_PORT, config.POSTGRES_DB,
        )
        _pool = psycopg2.pool.ThreadedConnectionPool(
            minconn=config.POSTGRES_MIN_CONN,
            maxconn=config.POSTGRES_MAX_CONN,
            host=config.POSTGRES_HOST,
            port=config.POSTGRES_PORT,
            dbname=config.POSTGRES_DB,
            user=config.POSTGRES_USER,
            password=config.POSTGRES_PASSWORD,
        )
    return _pool


@contextmanager
def get_conn() -> Iterator:
    """Borrow a connection for one unit of work."""
    pool = get_pool()
    conn = pool.getconn()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        pool.putconn(conn)


def ping() -> bool:
    """True when a trivial query succeeds (used by /api/health)."""
    try:
        with get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1")
        return True
    except psycopg2.Error as exc:
        logger.warning("Postgres ping failed: %s", exc)
        return False


def close_pool() -> None:
    """Close every pooled connection (application shutdown)."""
    global _pool
    if _pool and not _pool.closed:
        _pool.closeall()
    _pool = None
