"""
api/routes/users.py
-------------------
POST /api/users            register, returns {user, token}
POST /api/users/login      returns {user, token}
POST /api/users/logout     revokes the bearer token
GET  /api/users/profile
PUT  /api/users/profile    name / email / password / preferences

Passwords are hashed before they reach a store and never appear in a
response or a log line.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from api.deps import get_current_user, get_sessions, get_token, get_user_store
from db.stores import UserStore
from errors import AuthenticationError, Conflict
from modules.auth.passwords import hash_password, verify_password
from modules.auth.sessions import SessionManager
from schemas.user import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UpdateProfileRequest,
    User,
    UserPreferences,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _public(user: User) -> dict:
    return user.model_dump(by_alias=True, mode="json")


def _auth_body(user: User, token: str) -> dict:
    return AuthResponse(user=user, token=token).model_dump(by_alias=True, mode="json")


@router.post("", status_code=status.HTTP_201_CREATED, summary="Register a user")
def register(
    req: RegisterRequest,
    users: UserStore = Depends(get_user_store),
    sessions: SessionManager = Depends(get_sessions),
) -> dict:
    if users.get_by_email(req.email) is not None:
        raise Conflict("User already exists")

    user = users.create(
        name=req.name.strip(),
        email=req.email,
        password_hash=hash_password(req.password),
        preferences=req.preferences or UserPreferences(),
    )
    sessions.cache_preferences(user.id, user.preferences.model_dump(by_alias=True))
    logger.info("Registered user %s", user.id)
    return _auth_body(user, sessions.issue(user.id))


@router.post("/login", summary="Log in")
def login(
    req: LoginRequest,
    users: UserStore = Depends(get_user_store),
    sessions: SessionManager = Depends(get_sessions),
) -> dict:
    record = users.get_by_email(req.email)
    if record is None or not verify_password(req.password, record.password_hash):
        raise AuthenticationError("Invalid email or password")
    return _auth_body(record.user, sessions.issue(record.user.id))


@router.post("/logout", summary="Log out")
def logout(
    token: str = Depends(get_token),
    sessions: SessionManager = Depends(get_sessions),
) -> dict:
    sessions.revoke(token)
    return {"message": "Logged out"}


@router.get("/profile", summary="Current user's profile")
def get_profile(
    user: User = Depends(get_current_user),
    sessions: SessionManager = Depends(get_sessions),
) -> dict:
    cached = sessions.cached_preferences(user.id)
    if cached is None:
        sessions.cache_preferences(user.id, user.preferences.model_dump(by_alias=True))
    else:
        user = user.model_copy(update={"preferences": UserPreferences.model_validate(cached)})
    return _public(user)


@router.put("/profile", summary="Update the current user's profile")
def update_profile(
    req: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
    sessions: SessionManager = Depends(get_sessions),
) -> dict:
    if req.email is not None and req.email != user.email:
        existing = users.get_by_email(req.email)
        if existing is not None and existing.user.id != user.id:
            raise Conflict("User already exists")

    updated = users.update(
        user.id,
        name=req.name.strip() if req.name else None,
        email=req.email,
        password_hash=hash_password(req.password) if req.password else None,
        preferences=req.preferences,
    )
    if updated is None:
        raise AuthenticationError("Not authorized, token failed")

    sessions.cache_preferences(updated.id, updated.preferences.model_dump(by_alias=True))
    return _public(updated)
