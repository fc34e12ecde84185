"""
modules/generation/prompt_builder.py
------------------------------------
Deterministic prompt construction for every generation endpoint.

Each builder states the request in prose, embeds a literal example of the
JSON shape expected back, and pins the currency. Builders have no side
effects; a missing required field raises InvalidRequest before any model
call is attempted.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Optional

import config
from errors import InvalidRequest
from schemas.generation import DestinationPreferences, TripRequest


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidRequest(f"{field} is required")
    return str(value).strip()


def _joined(values: Iterable[str], fallback: str) -> str:
    cleaned = [v.strip() for v in values if v and v.strip()]
    return ", ".join(cleaned) if cleaned else fallback


def _amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"


def _example(shape: Any) -> str:
    return json.dumps(shape, indent=2, ensure_ascii=False)


# ── Trip plan ──────────────────────────────────────────────────────────────────

def _trip_plan_example(destination: str, duration: int, currency: str) -> dict[str, Any]:
    return {
        "destination": destination,
        "duration": duration,
        "currency": currency,
        "itinerary": [
            {
                "day": 1,
                "places": [
                    {
                        "name": "Place name",
                        "description": "Detailed description of the place",
                        "category": "attraction/restaurant/accommodation/activity",
                        "estimatedCost": 500,
                        "estimatedTimeRequired": "2 hours",
                        "bestTimeToVisit": "Morning/Afternoon/Evening",
                        "location": {
                            "address": "Full address if available",
                            "googleMapsUrl": "Google Maps URL if available",
                        },
                        "images": ["URL to an image of this place"],
                        "tips": ["Detailed tip 1", "Detailed tip 2"],
                        "culturalSignificance": "Brief explanation if applicable",
                    }
                ],
                "transportation": {
                    "mode": "walking/bus/taxi/etc",
                    "estimatedCost": 200,
                    "details": "Specific details about the transportation option",
                },
                "meals": [
                    {
                        "type": "breakfast/lunch/dinner/snack",
                        "suggestion": "Restaurant or food recommendation",
                        "cuisine": "Type of cuisine",
                        "specialDish": "Must-try dish at this place",
                        "estimatedCost": 300,
                        "location": "Area or address",
                    }
                ],
                "totalDayCost": 1000,
            }
        ],
        "summary": {
            "highlights": ["Detailed highlight 1", "Detailed highlight 2"],
            "totalCost": 1000,
            "averageDailyCost": 1000,
            "mustTryExperiences": ["Detailed experience 1", "Detailed experience 2"],
            "bestTimeToVisit": "Information about the best season to visit",
            "localCustoms": ["Custom 1", "Custom 2"],
            "packingTips": ["Packing tip 1", "Packing tip 2"],
            "safetyTips": ["Safety tip 1", "Safety tip 2"],
        },
    }


def build_trip_prompt(request: TripRequest) -> str:
    """Prompt for a day-by-day plan of ``request.duration`` days."""
    destination = _require_text(request.destination, "destination")
    if request.duration is None:
        raise InvalidRequest("duration is required")
    if request.duration < 1:
        raise InvalidRequest("duration must be at least 1 day")

    duration = request.duration
    currency = request.budget.currency or config.DEFAULT_CURRENCY
    availability = request.time_availability
    days_available = (availability.days_available if availability else None) or duration
    season = (availability.preferred_season if availability else None) or "Any"

    return f"""
Generate a detailed trip plan for a {duration}-day trip to {destination}.

User preferences:
- Budget: {_amount(request.budget.total)} {currency}
- Travel style: {request.travel_style or "balanced"}
- Transportation preferences: {_joined(request.transportation, "Any")}
- Interests: {_joined(request.interests, "General sightseeing")}
- Accommodation type: {request.accommodation_type or "Mid-range hotel"}
- Has own vehicle: {"Yes" if request.has_own_vehicle else "No"}
- Available time: {days_available} days
- Preferred season: {season}

Please provide a comprehensive travel plan with:
1. A day-by-day itinerary with specific places to visit, one entry per day, days numbered 1 to {duration}
2. A cost for every place, meal and transportation option
3. Recommended restaurants and local cuisine to try
4. Must-see attractions and hidden gems that match the user's interests
5. Practical tips for each place, including the best time to visit
6. Estimated time required for each activity
7. Accommodation as a place with category "accommodation"

Place categories MUST be one of: attraction, restaurant, accommodation, activity.
Meal types MUST be one of: breakfast, lunch, dinner, snack.

Format the response as a JSON object with exactly this structure:
{_example(_trip_plan_example(destination, duration, currency))}

COSTS:
- Every amount is a plain number in {currency} only. Do not use any other currency.
- totalDayCost must equal the sum of that day's place, meal and transportation costs.
- summary.totalCost must equal the sum of all totalDayCost values.
- Keep the total within the budget where realistic.

Return ONLY the JSON object.
""".strip()


# ── Place details ──────────────────────────────────────────────────────────────

def build_place_details_prompt(
    place_name: Optional[str],
    destination: Optional[str],
    interests: Iterable[str] = (),
    currency: Optional[str] = None,
) -> str:
    name = _require_text(place_name, "placeName")
    where = _require_text(destination, "destination")
    currency = currency or config.DEFAULT_CURRENCY

    shape = {
        "name": name,
        "destination": where,
        "description": "Detailed description",
        "history": "Historical background",
        "significance": "Cultural or historical significance",
        "whyVisit": ["Reason 1", "Reason 2"],
        "costs": {
            "entryFee": 0,
            "guidedTour": 0,
            "audioGuide": 0,
            "otherFees": ["Fee description: amount"],
        },
        "timing": {
            "bestTimeOfDay": "Morning/Afternoon/Evening",
            "bestSeason": "Season name",
            "openingHours": "Opening hours information",
            "timeRequired": "Recommended duration",
        },
        "tips": ["Detailed tip 1", "Detailed tip 2"],
        "nearby": {
            "attractions": ["Nearby place 1"],
            "restaurants": ["Restaurant 1: cuisine type"],
            "shopping": ["Shop 1: items available"],
        },
        "culturalNotes": ["Cultural note 1"],
        "photographyTips": ["Photo tip 1"],
        "accessibility": "Information about accessibility",
        "imageUrl": "URL to an image of this place",
        "googleMapsUrl": "Google Maps URL if available",
    }

    return f"""
Provide comprehensive and detailed information about "{name}" in {where}.

User interests: {_joined(interests, "General information")}

Include its history and significance, why it is worth visiting, a cost
breakdown, the best time of day and season to visit, how long to spend there,
insider tips, nearby attractions, restaurants and shops, cultural notes,
photography tips and accessibility information.

Format the response as a JSON object with exactly this structure:
{_example(shape)}

All costs are plain numbers in {currency} only.
Return ONLY the JSON object.
""".strip()


# ── Budget optimisation ────────────────────────────────────────────────────────

def build_budget_optimization_prompt(
    trip_plan: Optional[dict[str, Any]],
    budget_constraint: Optional[float],
    currency: Optional[str] = None,
) -> str:
    """Re-send the whole current plan and ask for a cheaper one, same shape."""
    if not isinstance(trip_plan, dict) or not trip_plan:
        raise InvalidRequest("tripPlan is required")
    if budget_constraint is None:
        raise InvalidRequest("budgetConstraint is required")
    if budget_constraint < 0:
        raise InvalidRequest("budgetConstraint must not be negative")

    currency = currency or trip_plan.get("currency") or config.DEFAULT_CURRENCY
    destination = trip_plan.get("destination") or "the destination"
    summary = trip_plan.get("summary") if isinstance(trip_plan.get("summary"), dict) else {}
    current_total = summary.get("totalCost", "unknown")

    return f"""
I have a trip plan to {destination} with a total estimated cost of {current_total} {currency}.
However, my budget is limited to {_amount(budget_constraint)} {currency}.

Please optimize my trip plan to fit within my budget while keeping the best possible experience:
1. Replace expensive activities with cheaper alternatives
2. Prefer budget-friendly dining options
3. Use cost-saving transportation
4. Remove activities with the least impact on the overall experience
5. Keep one entry per day, days numbered from 1

Current trip plan:
{_example(trip_plan)}

Return the revised plan as a JSON object with exactly the same structure as the
current trip plan ("itinerary" list of days and "summary" object).
Every amount is a plain number in {currency} only.
totalDayCost must equal the sum of that day's place, meal and transportation costs.
Return ONLY the JSON object.
""".strip()


# ── Destination discovery ──────────────────────────────────────────────────────

def _preferences_block(prefs: DestinationPreferences, currency: str) -> str:
    vehicle = "Has own vehicle" if prefs.transportation.has_own_vehicle else "No vehicle"
    return "\n".join([
        f"Budget: {_amount(prefs.budget.min)} to {_amount(prefs.budget.max)} {currency}",
        f"Days Available: {prefs.time_availability.days_available or 'Flexible'}",
        f"Preferred Season: {prefs.time_availability.preferred_season or 'Any'}",
        f"Interests: {_joined(prefs.interests, 'General sightseeing')}",
        f"Transportation: {vehicle}, prefers {_joined(prefs.transportation.preferred_modes, 'any mode')}",
    ])


def build_destination_recommendations_prompt(prefs: DestinationPreferences, count: int = 4) -> str:
    """Prompt for ``count`` destinations as a JSON array."""
    if prefs.budget.max and prefs.budget.max < prefs.budget.min:
        raise InvalidRequest("budget.max must not be below budget.min")
    currency = prefs.currency or config.DEFAULT_CURRENCY

    shape = {
        "name": "Destination Name",
        "description": "Short description",
        "totalCost": 15000,
        "bestTimeToVisit": "October to March",
        "topAttractions": ["Attraction 1", "Attraction 2", "Attraction 3"],
    }

    return f"""
Act as a travel expert and recommend {count} destinations based on the following preferences:

{_preferences_block(prefs, currency)}

For each destination, provide:
1. Name of the destination
2. A short description (50-60 words)
3. Estimated total cost as a plain number in {currency}
4. Best time to visit
5. Three top attractions

Do not include image URLs.

Format the response as a JSON array of objects, each with exactly this structure:
{_example(shape)}

Only return the JSON array, no additional text.
""".strip()


def build_destination_details_prompt(
    destination_name: Optional[str], prefs: DestinationPreferences
) -> str:
    """Prompt for a full travel guide object about one destination."""
    name = _require_text(destination_name, "destination.name")
    currency = prefs.currency or config.DEFAULT_CURRENCY

    shape = {
        "destination": name,
        "overview": "Detailed description (150-200 words)",
        "bestTimeToVisit": "Season information",
        "daysRecommended": 3,
        "budget": {
            "total": 15000,
            "accommodation": {"budget": 2000, "midRange": 4000, "luxury": 8000},
            "food": {"budget": 500, "midRange": 1000, "luxury": 2000},
            "transportation": 2000,
            "activities": 3000,
            "shopping": 2000,
        },
        "accommodation": [
            {
                "name": "Hotel/Hostel Name",
                "type": "Budget/Mid-range/Luxury",
                "pricePerNight": 2000,
                "location": "Area name",
                "description": "Brief description",
                "amenities": ["WiFi", "AC"],
            }
        ],
        "attractions": [
            {
                "name": "Attraction Name",
                "description": "Description",
                "entryFee": 500,
                "timeRequired": "2-3 hours",
                "bestTimeToVisit": "Morning/Evening",
            }
        ],
        "activities": [
            {
                "name": "Activity Name",
                "description": "Description",
                "cost": 1000,
                "duration": "3 hours",
                "difficulty": "Easy/Moderate/Hard",
            }
        ],
        "food": [
            {
                "name": "Restaurant/Dish Name",
                "type": "Local cuisine/International",
                "priceRange": "Budget/Mid-range/Luxury",
                "mustTry": ["Dish 1", "Dish 2"],
                "location": "Area name",
            }
        ],
        "transportation": {
            "localOptions": ["Bus", "Auto", "Taxi"],
            "costs": {"bus": 20, "auto": 100, "taxi": 200},
            "tips": "Transportation tips",
        },
        "itinerary": [
            {
                "day": 1,
                "activities": [
                    {"time": "Morning", "activity": "Visit X", "description": "Brief description"}
                ],
            }
        ],
        "tips": ["Tip 1", "Tip 2", "Tip 3"],
    }

    return f"""
Act as a travel expert and provide detailed information about {name} for a
traveler with the following preferences:

{_preferences_block(prefs, currency)}

Provide a comprehensive travel guide in JSON format with exactly this structure:
{_example(shape)}

All amounts are plain numbers in {currency} only.
Only return the JSON object, no additional text.
""".strip()
