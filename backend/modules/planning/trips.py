"""
modules/planning/trips.py
-------------------------
Trip lifecycle: build, edit and re-plan trip documents.

Every function here returns a ``Trip`` that has been through
``recompute_trip_totals``, so budget.spent / budget.remaining and the
summary totals always agree with the itinerary. Stores persist what these
functions return; they never accept a client-computed total.

  new_trip()         — empty itinerary, spent 0, remaining = total, "planning"
  apply_update()     — partial edit (fields, budget total, itinerary, status)
  attach_plan()      — store a generated plan (itinerary + summary) on a trip
  normalise_trip()   — recompute + validate a raw trip document
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import ValidationError

import config
from errors import InvalidRequest, SchemaMismatch, TripPlannerError
from modules.planning.consistency import recompute_trip_totals
from modules.validation.response_validator import validate_itinerary
from schemas.trip import CreateTripRequest, Trip, UpdateTripRequest


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _describe(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or 'trip'}: {err['msg']}"
        for err in exc.errors()
    ]


def normalise_trip(doc: dict[str, Any], invalid: type[TripPlannerError] = InvalidRequest) -> Trip:
    """Recompute derived figures on ``doc`` and validate it as a Trip."""
    doc = recompute_trip_totals(doc)
    try:
        return Trip.model_validate(doc)
    except ValidationError as exc:
        problems = _describe(exc)
        if invalid is SchemaMismatch:
            raise SchemaMismatch("AI response does not match the expected format", errors=problems) from exc
        raise invalid("; ".join(problems)) from exc


def new_trip(user_id: str, request: CreateTripRequest) -> Trip:
    now = _now()
    doc = {
        "id": str(uuid.uuid4()),
        "userId": user_id,
        "destination": request.destination.strip(),
        "startDate": request.start_date.isoformat(),
        "endDate": request.end_date.isoformat(),
        "budget": {
            "total": request.budget.total,
            "currency": request.budget.currency or config.DEFAULT_CURRENCY,
        },
        "preferences": request.preferences.model_dump(by_alias=True),
        "itinerary": [],
        "summary": {},
        "status": "planning",
        "createdAt": now,
        "updatedAt": now,
    }
    return normalise_trip(doc)


def _checked_itinerary(itinerary: list[dict[str, Any]]) -> list[dict[str, Any]]:
    result = validate_itinerary(itinerary)
    if not result.valid:
        raise InvalidRequest("Invalid itinerary: " + "; ".join(result.errors))
    return itinerary


def apply_update(trip: Trip, request: UpdateTripRequest) -> Trip:
    """Merge a partial edit into ``trip``. Unset fields are left alone."""
    doc = trip.model_dump(by_alias=True, mode="json")

    if request.destination is not None:
        if not request.destination.strip():
            raise InvalidRequest("destination must not be empty")
        doc["destination"] = request.destination.strip()
    if request.start_date is not None:
        doc["startDate"] = request.start_date.isoformat()
    if request.end_date is not None:
        doc["endDate"] = request.end_date.isoformat()
    if request.budget is not None:
        if request.budget.total is not None:
            doc["budget"]["total"] = request.budget.total
        if request.budget.currency:
            doc["budget"]["currency"] = request.budget.currency
    if request.preferences is not None:
        doc["preferences"].update(request.preferences.model_dump(by_alias=True, exclude_none=True))
    if request.itinerary is not None:
        doc["itinerary"] = _checked_itinerary(request.itinerary)
    if request.summary is not None:
        doc["summary"] = dict(request.summary)
    if request.status is not None:
        doc["status"] = request.status

    doc["updatedAt"] = _now()
    return normalise_trip(doc)


def replace_itinerary(trip: Trip, itinerary: list[dict[str, Any]]) -> Trip:
    return apply_update(trip, UpdateTripRequest(itinerary=itinerary))


def attach_plan(trip: Trip, plan: dict[str, Any], budget_total: Optional[float] = None) -> Trip:
    """
    Put a validated generated plan on ``trip``.

    ``budget_total`` replaces the trip's budget total (budget optimisation
    stores the constraint it optimised for).
    """
    doc = trip.model_dump(by_alias=True, mode="json")
    doc["itinerary"] = plan.get("itinerary", [])
    doc["summary"] = plan.get("summary", {})
    if budget_total is not None:
        doc["budget"]["total"] = budget_total
    doc["updatedAt"] = _now()
    return normalise_trip(doc, invalid=SchemaMismatch)
