"""
schemas/generation.py
---------------------
Request bodies for the generation endpoints.

Required fields that the prompt builder checks itself (destination,
duration, place name...) are Optional here on purpose: a missing value is
reported as InvalidRequest by the builder rather than as a framework
validation error, so every generation path rejects input the same way.
"""

from typing import Any, Optional

from pydantic import Field

from schemas.trip import CamelModel


class TripBudgetRequest(CamelModel):
    total: float = Field(0.0, ge=0)
    currency: Optional[str] = None


class TimeAvailability(CamelModel):
    days_available: Optional[int] = Field(None, ge=1)
    preferred_season: Optional[str] = None


class TripRequest(CamelModel):
    """Ephemeral planning input; discarded once the prompt is built."""

    destination: Optional[str] = None
    duration: Optional[int] = None
    budget: TripBudgetRequest = Field(default_factory=TripBudgetRequest)
    travel_style: Optional[str] = None
    transportation: list[str] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    accommodation_type: Optional[str] = None
    has_own_vehicle: bool = False
    time_availability: Optional[TimeAvailability] = None
    # When given, the generated plan is stored on this trip.
    trip_id: Optional[str] = None


class PlaceDetailsRequest(CamelModel):
    place_name: Optional[str] = None
    destination: Optional[str] = None
    interests: list[str] = Field(default_factory=list)


class OptimizeBudgetRequest(CamelModel):
    trip_plan: Optional[dict[str, Any]] = None
    budget_constraint: Optional[float] = None
    currency: Optional[str] = None
    trip_id: Optional[str] = None


# ── Destination discovery ─────────────────────────────────────────────────────

class BudgetBand(CamelModel):
    min: float = Field(0.0, ge=0)
    max: float = Field(0.0, ge=0)


class TransportPreferences(CamelModel):
    has_own_vehicle: bool = False
    preferred_modes: list[str] = Field(default_factory=list)


class DestinationPreferences(CamelModel):
    budget: BudgetBand = Field(default_factory=BudgetBand)
    time_availability: TimeAvailability = Field(default_factory=TimeAvailability)
    interests: list[str] = Field(default_factory=list)
    transportation: TransportPreferences = Field(default_factory=TransportPreferences)
    currency: Optional[str] = None


class DestinationRef(CamelModel):
    name: Optional[str] = None


class DestinationDetailsRequest(CamelModel):
    destination: DestinationRef = Field(default_factory=DestinationRef)
    preferences: DestinationPreferences = Field(default_factory=DestinationPreferences)
