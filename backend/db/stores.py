"""
db/stores.py
------------
Trip and user stores: the only way the API touches persistent data.

  TripStore  — create, get_by_id, list_by_user, update, delete
               reads/updates/deletes are scoped to the owner: a foreign
               trip and a missing trip both come back as None / False.
  UserStore  — create, get_by_id, get_by_email, update
               the password hash is returned only by get_by_email, inside
               a UserRecord, for login checks.

Implementations:
  Postgres*   — psycopg2 through db.connection.get_conn() and the SQL in
                db/repositories/. Driver errors become PersistenceError.
  InMemory*   — dicts behind a lock, for tests and STORE_BACKEND=in_memory.

Every trip write is re-normalised by the consistency engine, whatever the
caller passed in.
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterator, Optional, Protocol

import psycopg2
import psycopg2.errors

import config
from db.connection import get_conn
from db.repositories import trip_repo, user_repo
from errors import Conflict, PersistenceError
from modules.planning.trips import normalise_trip
from schemas.trip import Trip
from schemas.user import User, UserPreferences

logger = logging.getLogger(__name__)


@dataclass
class UserRecord:
    user: User
    password_hash: str


def _is_uuid(value: Any) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def _normalised(trip: Trip) -> Trip:
    return normalise_trip(trip.model_dump(by_alias=True, mode="json"))


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TripStore(Protocol):
    def create(self, trip: Trip) -> Trip: ...

    def get_by_id(self, trip_id: str, user_id: str) -> Optional[Trip]: ...

    def list_by_user(self, user_id: str) -> list[Trip]: ...

    def update(self, trip: Trip) -> Optional[Trip]: ...

    def delete(self, trip_id: str, user_id: str) -> bool: ...


class UserStore(Protocol):
    def create(
        self, name: str, email: str, password_hash: str, preferences: UserPreferences
    ) -> User: ...

    def get_by_id(self, user_id: str) -> Optional[User]: ...

    def get_by_email(self, email: str) -> Optional[UserRecord]: ...

    def update(
        self,
        user_id: str,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
        preferences: Optional[UserPreferences] = None,
    ) -> Optional[User]: ...


# ── Postgres ───────────────────────────────────────────────────────────────────

@contextmanager
def _guarded(action: str) -> Iterator[Any]:
    """Borrow a connection; translate driver failures."""
    try:
        with get_conn() as conn:
            yield conn
    except psycopg2.errors.UniqueViolation as exc:
        raise Conflict("User already exists") from exc
    except psycopg2.Error as exc:
        logger.error("%s failed: %s", action, exc)
        raise PersistenceError(f"{action} failed: {exc}") from exc


def _trip_to_row(trip: Trip) -> dict[str, Any]:
    doc = trip.model_dump(by_alias=True, mode="json")
    return {
        "id": doc["id"],
        "user_id": doc["userId"],
        "destination": doc["destination"],
        "start_date": doc["startDate"],
        "end_date": doc["endDate"],
        "budget": doc["budget"],
        "preferences": doc["preferences"],
        "itinerary": doc["itinerary"],
        "summary": doc["summary"],
        "status": doc["status"],
        "created_at": doc["createdAt"],
        "updated_at": doc["updatedAt"],
    }


def _row_to_trip(row: dict[str, Any]) -> Trip:
    return Trip.model_validate({**row, "id": str(row["id"]), "user_id": str(row["user_id"])})


def _row_to_user(row: dict[str, Any]) -> User:
    return User.model_validate({
        "id": str(row["id"]),
        "name": row["name"],
        "email": row["email"],
        "preferences": row.get("preferences") or {},
        "created_at": row.get("created_at"),
        "updated_at": row.get("updated_at"),
    })


class PostgresTripStore:
    def create(self, trip: Trip) -> Trip:
        trip = _normalised(trip)
        with _guarded("insert trip") as conn:
            trip_repo.insert_trip(conn, _trip_to_row(trip))
        logger.info("Trip %s created for user %s", trip.id, trip.user_id)
        return trip

    def get_by_id(self, trip_id: str, user_id: str) -> Optional[Trip]:
        if not (_is_uuid(trip_id) and _is_uuid(user_id)):
            return None
        with _guarded("get trip") as conn:
            row = trip_repo.get_trip(conn, trip_id, user_id)
        return _row_to_trip(row) if row else None

    def list_by_user(self, user_id: str) -> list[Trip]:
        if not _is_uuid(user_id):
            return []
        with _guarded("list trips") as conn:
            rows = trip_repo.list_trips_by_user(conn, user_id)
        return [_row_to_trip(row) for row in rows]

    def update(self, trip: Trip) -> Optional[Trip]:
        if not (_is_uuid(trip.id) and _is_uuid(trip.user_id)):
            return None
        trip = _normalised(trip)
        with _guarded("update trip") as conn:
            found = trip_repo.update_trip(conn, _trip_to_row(trip))
        return trip if found else None

    def delete(self, trip_id: str, user_id: str) -> bool:
        if not (_is_uuid(trip_id) and _is_uuid(user_id)):
            return False
        with _guarded("delete trip") as conn:
            return trip_repo.delete_trip(conn, trip_id, user_id)


class PostgresUserStore:
    def create(
        self, name: str, email: str, password_hash: str, preferences: UserPreferences
    ) -> User:
        now = _now()
        row = {
            "id": str(uuid.uuid4()),
            "name": name,
            "email": email,
            "password_hash": password_hash,
            "preferences": preferences.model_dump(by_alias=True),
            "created_at": now,
            "updated_at": now,
        }
        with _guarded("insert user") as conn:
            user_repo.insert_user(conn, row)
        return _row_to_user(row)

    def get_by_id(self, user_id: str) -> Optional[User]:
        if not _is_uuid(user_id):
            return None
        with _guarded("get user") as conn:
            row = user_repo.get_user_by_id(conn, user_id)
        return _row_to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        with _guarded("get user by email") as conn:
            row = user_repo.get_user_by_email(conn, email)
        if row is None:
            return None
        return UserRecord(user=_row_to_user(row), password_hash=row["password_hash"])

    def update(
        self,
        user_id: str,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
        preferences: Optional[UserPreferences] = None,
    ) -> Optional[User]:
        if not _is_uuid(user_id):
            return None
        fields: dict[str, Any] = {"updated_at": _now()}
        if name is not None:
            fields["name"] = name
        if email is not None:
            fields["email"] = email
        if password_hash is not None:
            fields["password_hash"] = password_hash
        if preferences is not None:
            fields["preferences"] = preferences.model_dump(by_alias=True)
        with _guarded("update user") as conn:
            if not user_repo.update_user(conn, user_id, fields):
                return None
            row = user_repo.get_user_by_id(conn, user_id)
        return _row_to_user(row) if row else None


# ── In-memory ──────────────────────────────────────────────────────────────────

class InMemoryTripStore:
    def __init__(self) -> None:
        self._trips: dict[str, Trip] = {}
        self._lock = threading.Lock()

    def create(self, trip: Trip) -> Trip:
        trip = _normalised(trip)
        with self._lock:
            self._trips[trip.id] = trip.model_copy(deep=True)
        return trip

    def get_by_id(self, trip_id: str, user_id: str) -> Optional[Trip]:
        with self._lock:
            trip = self._trips.get(trip_id)
            if trip is None or trip.user_id != user_id:
                return None
            return trip.model_copy(deep=True)

    def list_by_user(self, user_id: str) -> list[Trip]:
        with self._lock:
            owned = [t for t in self._trips.values() if t.user_id == user_id]
        return [t.model_copy(deep=True) for t in reversed(owned)]

    def update(self, trip: Trip) -> Optional[Trip]:
        trip = _normalised(trip)
        with self._lock:
            current = self._trips.get(trip.id)
            if current is None or current.user_id != trip.user_id:
                return None
            self._trips[trip.id] = trip.model_copy(deep=True)
        return trip

    def delete(self, trip_id: str, user_id: str) -> bool:
        with self._lock:
            trip = self._trips.get(trip_id)
            if trip is None or trip.user_id != user_id:
                return False
            del self._trips[trip_id]
            return True


class InMemoryUserStore:
    def __init__(self) -> None:
        self._users: dict[str, UserRecord] = {}
        self._lock = threading.Lock()

    def _email_taken(self, email: str, exclude_id: Optional[str] = None) -> bool:
        return any(
            r.user.email == email and r.user.id != exclude_id for r in self._users.values()
        )

    def create(
        self, name: str, email: str, password_hash: str, preferences: UserPreferences
    ) -> User:
        now = _now()
        user = User(
            id=str(uuid.uuid4()), name=name, email=email,
            preferences=preferences, created_at=now, updated_at=now,
        )
        with self._lock:
            if self._email_taken(email):
                raise Conflict("User already exists")
            self._users[user.id] = UserRecord(user=user, password_hash=password_hash)
        return user.model_copy(deep=True)

    def get_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            record = self._users.get(user_id)
            return record.user.model_copy(deep=True) if record else None

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            for record in self._users.values():
                if record.user.email == email:
                    return UserRecord(record.user.model_copy(deep=True), record.password_hash)
        return None

    def update(
        self,
        user_id: str,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password_hash: Optional[str] = None,
        preferences: Optional[UserPreferences] = None,
    ) -> Optional[User]:
        with self._lock:
            record = self._users.get(user_id)
            if record is None:
                return None
            if email is not None and self._email_taken(email, exclude_id=user_id):
                raise Conflict("User already exists")
            changes: dict[str, Any] = {"updated_at": _now()}
            if name is not None:
                changes["name"] = name
            if email is not None:
                changes["email"] = email
            if preferences is not None:
                changes["preferences"] = preferences
            record.user = record.user.model_copy(update=changes, deep=True)
            if password_hash is not None:
                record.password_hash = password_hash
            return record.user.model_copy(deep=True)


# ── Factories ──────────────────────────────────────────────────────────────────

def get_trip_store() -> TripStore:
    if config.STORE_BACKEND == "in_memory":
        return InMemoryTripStore()
    return PostgresTripStore()


def get_user_store() -> UserStore:
    if config.STORE_BACKEND == "in_memory":
        return InMemoryUserStore()
    return PostgresUserStore()
