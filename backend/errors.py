"""
errors.py
---------
Exception taxonomy shared by the generation pipeline, the stores and the API.

Every error carries a human-readable ``message``; the API layer turns any
TripPlannerError into a JSON body with that message (and, for generation
failures, the raw model text) using ``status_code``.
"""

from __future__ import annotations

from typing import Any, Optional


class TripPlannerError(Exception):
    """Base class. Scoped to one request, never fatal to the process."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_body(self) -> dict[str, Any]:
        return {"message": self.message}


# ── Input ──────────────────────────────────────────────────────────────────────

class InvalidRequest(TripPlannerError):
    """Missing or malformed input, rejected before any generation call."""

    status_code = 400


class Conflict(TripPlannerError):
    status_code = 400


class AuthenticationError(TripPlannerError):
    status_code = 401


class NotFound(TripPlannerError):
    """Missing record, or a record owned by another user (same outcome)."""

    status_code = 404


# ── Generation ─────────────────────────────────────────────────────────────────

class GenerationError(TripPlannerError):
    """A failure somewhere between the prompt and a validated value."""

    status_code = 502

    def __init__(self, message: str, raw_text: Optional[str] = None) -> None:
        super().__init__(message)
        self.raw_text = raw_text

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        if self.raw_text is not None:
            body["rawResponse"] = self.raw_text
        return body


class GenerationTransportError(GenerationError):
    """The generative client call itself failed (network, timeout, empty)."""


class UnparsableResponse(GenerationError):
    """No JSON value could be extracted or repaired from the model text."""


class NoJsonFound(UnparsableResponse):
    """The text has no opening bracket of the expected kind at all."""


class SchemaMismatch(GenerationError):
    """Parsed JSON is missing required keys or has the wrong types."""

    def __init__(
        self,
        message: str,
        errors: Optional[list[str]] = None,
        raw_text: Optional[str] = None,
    ) -> None:
        super().__init__(message, raw_text=raw_text)
        self.errors = list(errors or [])

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        if self.errors:
            body["errors"] = self.errors
        return body


# ── Storage ────────────────────────────────────────────────────────────────────

class PersistenceError(TripPlannerError):
    """A store operation failed. Surfaces as a generic server error."""

    status_code = 500

    def to_body(self) -> dict[str, Any]:
        return {"message": "Server error"}
