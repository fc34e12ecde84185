import time

from db.redis_client import InMemoryKeyValueStore
from modules.auth.passwords import hash_password, verify_password
from modules.auth.sessions import SessionManager


# ── Passwords ─────────────────────────────────────────────────────────────────

def test_hash_is_salted_and_verifiable():
    first = hash_password("secret123")
    second = hash_password("secret123")
    assert first != second
    assert "secret123" not in first
    assert first.startswith("pbkdf2_sha256$1000$")
    assert verify_password("secret123", first)
    assert verify_password("secret123", second)


def test_wrong_password_rejected():
    assert not verify_password("secret124", hash_password("secret123"))


def test_iterations_travel_with_the_hash():
    stored = hash_password("secret123", iterations=1500)
    assert stored.split("$")[1] == "1500"
    assert verify_password("secret123", stored)


def test_garbage_hash_never_verifies():
    assert not verify_password("x", "")
    assert not verify_password("x", "md5$1$00$00")
    assert not verify_password("x", "pbkdf2_sha256$abc$zz$zz")


# ── Key/value store and sessions ──────────────────────────────────────────────

def test_in_memory_store_expires(monkeypatch):
    store = InMemoryKeyValueStore()
    now = [1000.0]
    monkeypatch.setattr(time, "monotonic", lambda: now[0])
    store.set("k", "v", ttl=10)
    assert store.get("k") == "v"
    now[0] += 10
    assert store.get("k") is None


def test_session_issue_resolve_revoke():
    sessions = SessionManager(InMemoryKeyValueStore())
    token = sessions.issue("user-1")
    assert sessions.resolve(token) == "user-1"
    assert sessions.resolve("not-a-token") is None
    assert sessions.resolve(None) is None
    sessions.revoke(token)
    assert sessions.resolve(token) is None


def test_tokens_are_unique():
    sessions = SessionManager(InMemoryKeyValueStore())
    assert sessions.issue("u") != sessions.issue("u")


def test_preferences_cache_round_trip():
    store = InMemoryKeyValueStore()
    sessions = SessionManager(store)
    assert sessions.cached_preferences("u") is None
    sessions.cache_preferences("u", {"travelStyle": "foodie"})
    assert sessions.cached_preferences("u") == {"travelStyle": "foodie"}

    store.set("prefs:u", "{broken", ttl=60)
    assert sessions.cached_preferences("u") is None
    assert store.get("prefs:u") is None
