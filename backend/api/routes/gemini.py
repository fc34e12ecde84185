"""
api/routes/gemini.py
--------------------
Generation endpoints. Each one runs a single chain

    prompt → Gemini → extract / repair → validate (→ recompute totals)

and returns the structured JSON, or an error body
{"message", "rawResponse"?, "errors"?} carrying what the model said.

POST /api/gemini/trip-recommendations       day-by-day plan; stored on tripId if given
POST /api/gemini/place-details
POST /api/gemini/optimize-budget            cheaper plan; stored on tripId if given
POST /api/gemini/destination-recommendations
POST /api/gemini/destination-details
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.deps import get_current_user, get_pipeline, get_trip_store
from api.routes.trips import load_owned_trip
from db.stores import TripStore
from errors import NotFound
from modules.generation.pipeline import GenerationPipeline
from modules.planning.trips import attach_plan
from schemas.generation import (
    DestinationDetailsRequest,
    DestinationPreferences,
    OptimizeBudgetRequest,
    PlaceDetailsRequest,
    TripRequest,
)
from schemas.trip import Trip
from schemas.user import User

logger = logging.getLogger(__name__)

router = APIRouter()


def _store_plan(
    store: TripStore, trip: Trip, plan: dict, budget_total: Optional[float] = None
) -> None:
    if store.update(attach_plan(trip, plan, budget_total)) is None:
        raise NotFound("Trip not found")
    logger.info("Stored generated plan on trip %s", trip.id)


@router.post("/trip-recommendations", summary="Generate a trip plan")
def trip_recommendations(
    req: TripRequest,
    user: User = Depends(get_current_user),
    pipeline: GenerationPipeline = Depends(get_pipeline),
    store: TripStore = Depends(get_trip_store),
) -> dict:
    # Ownership is checked before spending a model call.
    trip = load_owned_trip(store, req.trip_id, user) if req.trip_id else None
    plan = pipeline.generate_trip_plan(req)
    if trip is not None:
        _store_plan(store, trip, plan)
    return plan


@router.post("/place-details", summary="Describe one place")
def place_details(
    req: PlaceDetailsRequest,
    user: User = Depends(get_current_user),
    pipeline: GenerationPipeline = Depends(get_pipeline),
) -> dict:
    return pipeline.generate_place_details(req)


@router.post("/optimize-budget", summary="Fit a trip plan to a budget")
def optimize_budget(
    req: OptimizeBudgetRequest,
    user: User = Depends(get_current_user),
    pipeline: GenerationPipeline = Depends(get_pipeline),
    store: TripStore = Depends(get_trip_store),
) -> dict:
    trip = load_owned_trip(store, req.trip_id, user) if req.trip_id else None
    if trip is not None and req.trip_plan is None:
        # Optimise the plan already stored on the trip.
        current = trip.model_dump(by_alias=True, mode="json")
        req = req.model_copy(update={
            "trip_plan": {
                "destination": current["destination"],
                "currency": current["budget"]["currency"],
                "itinerary": current["itinerary"],
                "summary": current["summary"],
            },
            "currency": req.currency or current["budget"]["currency"],
        })

    plan = pipeline.optimize_budget(req)
    if trip is not None:
        _store_plan(store, trip, plan, budget_total=req.budget_constraint)
    return plan


@router.post("/destination-recommendations", summary="Suggest destinations")
def destination_recommendations(
    prefs: DestinationPreferences,
    user: User = Depends(get_current_user),
    pipeline: GenerationPipeline = Depends(get_pipeline),
) -> list[dict]:
    return pipeline.recommend_destinations(prefs)


@router.post("/destination-details", summary="Full travel guide for a destination")
def destination_details(
    req: DestinationDetailsRequest,
    user: User = Depends(get_current_user),
    pipeline: GenerationPipeline = Depends(get_pipeline),
) -> dict:
    return pipeline.describe_destination(req)
