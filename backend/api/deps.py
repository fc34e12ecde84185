"""
api/deps.py
-----------
FastAPI dependencies: process-wide collaborators and the authenticated user.

Collaborators are built lazily on first use and cached for the life of the
process; tests swap them through ``app.dependency_overrides``.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from db import stores
from db.redis_client import get_key_value_store
from errors import AuthenticationError
from llm import get_llm_client
from modules.auth.sessions import SessionManager
from modules.generation.pipeline import GenerationPipeline
from modules.observability.logger import get_audit_logger
from schemas.user import User

_bearer = HTTPBearer(auto_error=False)


@lru_cache(maxsize=1)
def get_trip_store() -> stores.TripStore:
    return stores.get_trip_store()


@lru_cache(maxsize=1)
def get_user_store() -> stores.UserStore:
    return stores.get_user_store()


@lru_cache(maxsize=1)
def get_sessions() -> SessionManager:
    return SessionManager(get_key_value_store())


@lru_cache(maxsize=1)
def get_pipeline() -> GenerationPipeline:
    return GenerationPipeline(get_llm_client(), get_audit_logger())


def get_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, no token")
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_token),
    sessions: SessionManager = Depends(get_sessions),
    users: stores.UserStore = Depends(get_user_store),
) -> User:
    """Resolve the bearer token to a user, or 401."""
    user_id = sessions.resolve(token)
    if user_id is None:
        raise AuthenticationError("Not authorized, token failed")
    user = users.get_by_id(user_id)
    if user is None:
        raise AuthenticationError("Not authorized, token failed")
    return user
