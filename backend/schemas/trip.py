"""
schemas/trip.py
---------------
Pydantic models for trips and their itineraries.

Python attributes are snake_case; the JSON documents (API bodies, JSONB
columns, model output) use camelCase. ``CamelModel`` maps between the two,
so ``Trip.model_validate(doc)`` accepts a stored document and
``trip.model_dump(by_alias=True)`` produces one.

Costs are numbers in the trip's currency (smallest whole unit used
throughout). Derived figures (``total_day_cost``, ``summary.total_cost``,
``budget.spent``, ``budget.remaining``) are written only by
``modules.planning.consistency``.
"""

from datetime import date, datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

PlaceCategory = Literal["attraction", "restaurant", "accommodation", "activity"]
MealType = Literal["breakfast", "lunch", "dinner", "snack"]
TripStatus = Literal["planning", "confirmed", "in-progress", "completed", "cancelled"]

PLACE_CATEGORIES: tuple[str, ...] = ("attraction", "restaurant", "accommodation", "activity")
MEAL_TYPES: tuple[str, ...] = ("breakfast", "lunch", "dinner", "snack")
TRIP_STATUSES: tuple[str, ...] = ("planning", "confirmed", "in-progress", "completed", "cancelled")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentModel(CamelModel):
    """Itinerary pieces keep any extra keys the model produced (tips, urls...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


# ── Itinerary ──────────────────────────────────────────────────────────────────

class Coordinates(CamelModel):
    latitude: float
    longitude: float


class Location(DocumentModel):
    address: str = ""
    coordinates: Optional[Coordinates] = None


class Place(DocumentModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    category: PlaceCategory
    estimated_cost: float = Field(0.0, ge=0)
    estimated_time_required: str = ""
    location: Optional[Location] = None
    images: list[str] = Field(default_factory=list)
    tips: list[str] = Field(default_factory=list)


class Transportation(DocumentModel):
    mode: str = ""
    estimated_cost: float = Field(0.0, ge=0)


class Meal(DocumentModel):
    type: MealType
    suggestion: str = ""
    estimated_cost: float = Field(0.0, ge=0)


class DayPlan(DocumentModel):
    day: int = Field(..., ge=1)
    places: list[Place] = Field(default_factory=list)
    transportation: Optional[Transportation] = None
    meals: list[Meal] = Field(default_factory=list)
    total_day_cost: float = 0.0


# ── Trip ───────────────────────────────────────────────────────────────────────

class Budget(CamelModel):
    total: float = Field(0.0, ge=0)
    spent: float = 0.0
    remaining: float = 0.0
    currency: str = "INR"


class Preferences(CamelModel):
    travel_style: str = ""
    transportation: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    accommodation_type: str = ""


class Summary(DocumentModel):
    highlights: list[str] = Field(default_factory=list)
    total_cost: float = 0.0
    average_daily_cost: float = 0.0
    must_try_experiences: list[str] = Field(default_factory=list)


class Trip(CamelModel):
    """A persisted trip, exclusively owned by ``user_id``."""

    id: str
    user_id: str
    destination: str
    start_date: date
    end_date: date
    budget: Budget
    preferences: Preferences = Field(default_factory=Preferences)
    itinerary: list[DayPlan] = Field(default_factory=list)
    summary: Summary = Field(default_factory=Summary)
    status: TripStatus = "planning"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_dates(self) -> "Trip":
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self


# ── Trip CRUD bodies ───────────────────────────────────────────────────────────

class BudgetInput(CamelModel):
    """Client-side budget: only the total (and currency) is ever accepted."""

    total: float = Field(..., ge=0)
    currency: Optional[str] = None


class PartialBudgetInput(CamelModel):
    total: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None


class PartialPreferences(CamelModel):
    travel_style: Optional[str] = None
    transportation: Optional[list[str]] = None
    interests: Optional[list[str]] = None
    accommodation_type: Optional[str] = None


class CreateTripRequest(CamelModel):
    destination: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    budget: BudgetInput
    preferences: Preferences = Field(default_factory=Preferences)

    @model_validator(mode="after")
    def check_dates(self) -> "CreateTripRequest":
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self


class UpdateTripRequest(CamelModel):
    """Partial update. spent / remaining / totalCost are never accepted."""

    destination: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[PartialBudgetInput] = None
    preferences: Optional[PartialPreferences] = None
    itinerary: Optional[list[dict[str, Any]]] = None
    summary: Optional[dict[str, Any]] = None
    status: Optional[TripStatus] = None


class UpdateItineraryRequest(CamelModel):
    itinerary: list[dict[str, Any]]
