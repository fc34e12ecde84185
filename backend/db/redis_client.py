"""
db/redis_client.py
-------------------
Volatile key/value storage with expiry: redis-py singleton plus an
in-process stand-in with the same interface.

Key schemas (written by modules/auth/sessions.py):

  1. session:{token}
       Type : String
       TTL  : SESSION_TTL            (default 2,592,000 s = 30 days)
       Value: user id

  2. prefs:{user_id}
       Type : String (JSON)
       TTL  : PREFERENCES_CACHE_TTL  (default 86,400 s = 24 hours)
       Value: the user's travel preferences document

Environment variables (set in config.py):
    REDIS_HOST        default: localhost
    REDIS_PORT        default: 6379
    REDIS_DB          default: 0
    REDIS_PASSWORD    default: ""  (empty = no auth)
    SESSION_BACKEND   default: redis   ("in_memory" for tests / no Redis)
"""

from __future__ import annotations

import threading
import time
from typing import Any, Optional, Protocol

import redis

import config
from errors import PersistenceError

# Module-level singleton; initialised lazily on first call to get_redis()
_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Return the singleton Redis client, creating it on first call."""
    global _client
    if _client is None:
        kwargs: dict[str, Any] = {
            "host":             config.REDIS_HOST,
            "port":             config.REDIS_PORT,
            "db":               config.REDIS_DB,
            "decode_responses": True,   # return str, not bytes
        }
        if config.REDIS_PASSWORD:
            kwargs["password"] = config.REDIS_PASSWORD
        _client = redis.Redis(**kwargs)
    return _client


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str, ttl: int) -> None: ...

    def delete(self, key: str) -> None: ...


# ── Redis ──────────────────────────────────────────────────────────────────────

class RedisKeyValueStore:
    """String keys with TTL on top of redis-py. Connection errors → PersistenceError."""

    def __init__(self, client: Optional[redis.Redis] = None) -> None:
        self._client = client

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = get_redis()
        return self._client

    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except redis.RedisError as exc:
            raise PersistenceError(f"Redis GET failed: {exc}") from exc

    def set(self, key: str, value: str, ttl: int) -> None:
        try:
            self.client.setex(key, ttl, value)
        except redis.RedisError as exc:
            raise PersistenceError(f"Redis SETEX failed: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except redis.RedisError as exc:
            raise PersistenceError(f"Redis DEL failed: {exc}") from exc


# ── In-memory ──────────────────────────────────────────────────────────────────

class InMemoryKeyValueStore:
    """Dict-backed store; an entry past its deadline reads as missing."""

    def __init__(self) -> None:
        self._data: dict[str, tuple[str, float]] = {}  # key -> (value, deadline)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, deadline = entry
            if time.monotonic() >= deadline:
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: str, ttl: int) -> None:
        with self._lock:
            self._data[key] = (value, time.monotonic() + ttl)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


def get_key_value_store() -> KeyValueStore:
    """Store selected by SESSION_BACKEND."""
    if config.SESSION_BACKEND == "in_memory":
        return InMemoryKeyValueStore()
    return RedisKeyValueStore()
