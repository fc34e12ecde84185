"""
db/
----
Persistence layer for the trip planner.

Storage architecture:
  PostgreSQL (psycopg2) — users and trips
    schema: db/schema.sql
    apply:  python scripts/run_migrations.py

  Redis (redis-py) — volatile, TTL-bound
    session:{token}   TTL = SESSION_TTL            (30 days)
    prefs:{user_id}   TTL = PREFERENCES_CACHE_TTL  (24 h)

Public exports (import from here for convenience):
    from db import get_conn, get_redis
    from db.stores import get_trip_store, get_user_store
    from db.redis_client import get_key_value_store
"""

from db.connection import get_conn, close_pool
from db.redis_client import get_redis

__all__ = ["get_conn", "close_pool", "get_redis"]
