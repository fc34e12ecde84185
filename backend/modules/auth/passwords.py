"""
modules/auth/passwords.py
-------------------------
Salted, slow password hashing (PBKDF2-HMAC-SHA256).

Stored format:
    pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>

The iteration count travels with the hash, so raising
PASSWORD_HASH_ITERATIONS never invalidates existing accounts.
Only the hash is ever stored; plaintext never leaves this module.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Optional

import config

_ALGORITHM = "pbkdf2_sha256"
_SALT_BYTES = 16


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str, iterations: Optional[int] = None) -> str:
    """Return a new salted hash for ``password``."""
    iterations = iterations or config.PASSWORD_HASH_ITERATIONS
    salt = secrets.token_bytes(_SALT_BYTES)
    digest = _derive(password, salt, iterations)
    return f"{_ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    """Constant-time check of ``password`` against a stored hash."""
    try:
        algorithm, iterations, salt_hex, digest_hex = stored.split("$")
        if algorithm != _ALGORITHM:
            return False
        digest = _derive(password, bytes.fromhex(salt_hex), int(iterations))
        return hmac.compare_digest(digest, bytes.fromhex(digest_hex))
    except (AttributeError, ValueError):
        return False
