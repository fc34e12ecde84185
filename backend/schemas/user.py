"""
schemas/user.py
---------------
User account models. The password hash lives only in the stores; no model
here carries it back out.
"""

import re
from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, field_validator

from schemas.trip import CamelModel

TravelStyle = Literal["adventure", "relaxation", "cultural", "foodie", "budget", "luxury"]

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalise_email(value: str) -> str:
    value = value.strip().lower()
    if not _EMAIL_RE.match(value):
        raise ValueError("invalid email address")
    return value


class BudgetRange(CamelModel):
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)


class UserPreferences(CamelModel):
    budget_range: BudgetRange = Field(default_factory=BudgetRange)
    travel_style: TravelStyle = "adventure"
    preferred_transportation: list[str] = Field(
        default_factory=lambda: ["walking", "public transport"]
    )
    interests: list[str] = Field(default_factory=list)


class User(CamelModel):
    id: str
    name: str
    email: str
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: str
    password: str = Field(..., min_length=6)
    preferences: Optional[UserPreferences] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _normalise_email(value)


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.strip().lower()


class UpdateProfileRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)
    preferences: Optional[UserPreferences] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _normalise_email(value)


class AuthResponse(CamelModel):
    user: User
    token: str
