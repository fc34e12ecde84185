"""
modules/auth/sessions.py
------------------------
Opaque bearer tokens and a short-lived preferences cache, both kept in a
KeyValueStore (Redis in production).

Usage:
    sessions = SessionManager(get_key_value_store())
    token = sessions.issue(user.id)
    user_id = sessions.resolve(token)     # None when unknown or expired
"""

from __future__ import annotations

import json
import logging
import secrets
from typing import Any, Optional

import config
from db.redis_client import KeyValueStore

logger = logging.getLogger(__name__)


def _session_key(token: str) -> str:
    return f"session:{token}"


def _prefs_key(user_id: str) -> str:
    return f"prefs:{user_id}"


class SessionManager:
    def __init__(
        self,
        store: KeyValueStore,
        session_ttl: Optional[int] = None,
        preferences_ttl: Optional[int] = None,
    ) -> None:
        self._store = store
        self._session_ttl = session_ttl or config.SESSION_TTL
        self._preferences_ttl = preferences_ttl or config.PREFERENCES_CACHE_TTL

    # ── tokens ────────────────────────────────────────────────────────────

    def issue(self, user_id: str) -> str:
        token = secrets.token_urlsafe(32)
        self._store.set(_session_key(token), user_id, self._session_ttl)
        logger.info("Session issued for user %s", user_id)
        return token

    def resolve(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        return self._store.get(_session_key(token))

    def revoke(self, token: str) -> None:
        self._store.delete(_session_key(token))

    # ── preferences cache ─────────────────────────────────────────────────

    def cache_preferences(self, user_id: str, preferences: dict[str, Any]) -> None:
        self._store.set(_prefs_key(user_id), json.dumps(preferences), self._preferences_ttl)

    def cached_preferences(self, user_id: str) -> Optional[dict[str, Any]]:
        raw = self._store.get(_prefs_key(user_id))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable preferences cache for user %s", user_id)
            self._store.delete(_prefs_key(user_id))
            return None

    def drop_preferences(self, user_id: str) -> None:
        self._store.delete(_prefs_key(user_id))
