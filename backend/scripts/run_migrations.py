#!/usr/bin/env python
"""
scripts/run_migrations.py
--------------------------
Applies db/schema.sql to the configured Postgres database.

Usage:
    python scripts/run_migrations.py [--dry-run]

Exit codes:
    0 — schema applied (or dry-run completed)
    1 — connection failed or SQL error

Environment variables (all have defaults — override as needed):
    POSTGRES_HOST, POSTGRES_PORT, POSTGRES_DB, POSTGRES_USER, POSTGRES_PASSWORD
    (same vars used by db/connection.py)

Every statement is IF NOT EXISTS and the whole file runs in one
transaction, so re-running is safe.
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import re
import sys

# Add the backend directory to sys.path so that config is importable
_BACKEND_DIR = pathlib.Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_BACKEND_DIR))

import psycopg2  # noqa: E402

import config  # noqa: E402

logger = logging.getLogger("migrations")

_SQL_FILE = _BACKEND_DIR / "db" / "schema.sql"


def _read_sql() -> str:
    if not _SQL_FILE.exists():
        raise FileNotFoundError(f"SQL file not found: {_SQL_FILE}")
    return _SQL_FILE.read_text(encoding="utf-8")


def split_statements(sql: str) -> list[str]:
    """Drop /* */ and -- comments, split on semicolons, skip blanks."""
    sql = re.sub(r"/\*.*?\*/", "", sql, flags=re.DOTALL)
    sql = re.sub(r"--[^\n]*", "", sql)
    return [s.strip() for s in sql.split(";") if s.strip()]


def run(dry_run: bool = False) -> int:
    statements = split_statements(_read_sql())

    logger.info("SQL file   : %s", _SQL_FILE)
    logger.info("Statements : %d", len(statements))
    logger.info("Target DB  : %s @ %s:%s", config.POSTGRES_DB, config.POSTGRES_HOST, config.POSTGRES_PORT)

    if dry_run:
        for i, stmt in enumerate(statements, 1):
            logger.info("  [%03d] %s...", i, stmt[:80].replace("\n", " "))
        logger.info("DRY-RUN, no changes applied.")
        return len(statements)

    conn = psycopg2.connect(
        host=config.POSTGRES_HOST,
        port=config.POSTGRES_PORT,
        dbname=config.POSTGRES_DB,
        user=config.POSTGRES_USER,
        password=config.POSTGRES_PASSWORD,
    )
    try:
        with conn.cursor() as cur:
            for i, stmt in enumerate(statements, 1):
                cur.execute(stmt)
                logger.info("  [%03d] %s", i, stmt[:60].replace("\n", " "))
        conn.commit()
    except psycopg2.Error:
        conn.rollback()
        logger.error("Rolled back due to error.")
        raise
    finally:
        conn.close()

    logger.info("Done: %d statements applied.", len(statements))
    return len(statements)


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL, format="[migrations] %(message)s")
    parser = argparse.ArgumentParser(description="Apply the Postgres schema.")
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Print statements without executing them.",
    )
    args = parser.parse_args()
    try:
        run(dry_run=args.dry_run)
    except Exception as exc:
        logger.error("ERROR: %s", exc)
        sys.exit(1)
