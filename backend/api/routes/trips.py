"""
api/routes/trips.py
-------------------
Trip CRUD for the authenticated user.

POST   /api/trips                      create (empty itinerary, status planning)
GET    /api/trips                      list, newest first
GET    /api/trips/{trip_id}
PUT    /api/trips/{trip_id}            partial update
DELETE /api/trips/{trip_id}
PUT    /api/trips/{trip_id}/itinerary  replace the itinerary

A trip owned by someone else answers exactly like a missing one (404).
budget.spent / budget.remaining / summary totals in a request body are
ignored; they are recomputed from the itinerary on every write.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, status

from api.deps import get_current_user, get_trip_store
from db.stores import TripStore
from errors import NotFound
from modules.planning.trips import apply_update, new_trip, replace_itinerary
from schemas.trip import (
    CreateTripRequest,
    Trip,
    UpdateItineraryRequest,
    UpdateTripRequest,
)
from schemas.user import User

router = APIRouter()


def _doc(trip: Trip) -> dict:
    return trip.model_dump(by_alias=True, mode="json")


def load_owned_trip(store: TripStore, trip_id: str, user: User) -> Trip:
    trip = store.get_by_id(trip_id, user.id)
    if trip is None:
        raise NotFound("Trip not found")
    return trip


def _save(store: TripStore, trip: Trip) -> Trip:
    saved = store.update(trip)
    if saved is None:
        raise NotFound("Trip not found")
    return saved


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create a trip")
def create_trip(
    req: CreateTripRequest,
    user: User = Depends(get_current_user),
    store: TripStore = Depends(get_trip_store),
) -> dict:
    return _doc(store.create(new_trip(user.id, req)))


@router.get("", summary="List my trips")
def list_trips(
    user: User = Depends(get_current_user),
    store: TripStore = Depends(get_trip_store),
) -> list[dict]:
    return [_doc(t) for t in store.list_by_user(user.id)]


@router.get("/{trip_id}", summary="Get one trip")
def get_trip(
    trip_id: str,
    user: User = Depends(get_current_user),
    store: TripStore = Depends(get_trip_store),
) -> dict:
    return _doc(load_owned_trip(store, trip_id, user))


@router.put("/{trip_id}", summary="Update a trip")
def update_trip(
    trip_id: str,
    req: UpdateTripRequest,
    user: User = Depends(get_current_user),
    store: TripStore = Depends(get_trip_store),
) -> dict:
    trip = load_owned_trip(store, trip_id, user)
    return _doc(_save(store, apply_update(trip, req)))


@router.delete("/{trip_id}", summary="Delete a trip")
def delete_trip(
    trip_id: str,
    user: User = Depends(get_current_user),
    store: TripStore = Depends(get_trip_store),
) -> dict:
    if not store.delete(trip_id, user.id):
        raise NotFound("Trip not found")
    return {"message": "Trip removed"}


@router.put("/{trip_id}/itinerary", summary="Replace a trip's itinerary")
def update_itinerary(
    trip_id: str,
    req: UpdateItineraryRequest,
    user: User = Depends(get_current_user),
    store: TripStore = Depends(get_trip_store),
) -> dict:
    trip = load_owned_trip(store, trip_id, user)
    return _doc(_save(store, replace_itinerary(trip, req.itinerary)))
