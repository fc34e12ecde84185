import pytest

from errors import InvalidRequest
from modules.generation.prompt_builder import (
    build_budget_optimization_prompt,
    build_destination_details_prompt,
    build_destination_recommendations_prompt,
    build_place_details_prompt,
    build_trip_prompt,
)
from schemas.generation import DestinationPreferences, TripRequest

from conftest import make_plan


def _request(**overrides):
    body = {
        "destination": "Jaipur",
        "duration": 3,
        "budget": {"total": 20000, "currency": "INR"},
        "travelStyle": "cultural",
        "interests": ["history", "food"],
    }
    body.update(overrides)
    return TripRequest.model_validate(body)


def test_trip_prompt_mentions_request():
    prompt = build_trip_prompt(_request())
    assert "3-day trip to Jaipur" in prompt
    assert "20000 INR" in prompt
    assert "history, food" in prompt
    assert '"itinerary"' in prompt
    assert "INR only" in prompt


def test_trip_prompt_is_deterministic():
    assert build_trip_prompt(_request()) == build_trip_prompt(_request())


def test_trip_prompt_uses_default_currency():
    prompt = build_trip_prompt(_request(budget={"total": 500}))
    assert "500 INR" in prompt


@pytest.mark.parametrize("overrides", [
    {"destination": None},
    {"destination": "   "},
    {"duration": None},
    {"duration": 0},
])
def test_trip_prompt_rejects_missing_fields(overrides):
    with pytest.raises(InvalidRequest):
        build_trip_prompt(_request(**overrides))


def test_place_details_prompt():
    prompt = build_place_details_prompt("Amber Fort", "Jaipur", ["architecture"])
    assert '"Amber Fort" in Jaipur' in prompt
    assert "architecture" in prompt
    with pytest.raises(InvalidRequest):
        build_place_details_prompt("", "Jaipur")
    with pytest.raises(InvalidRequest):
        build_place_details_prompt("Amber Fort", None)


def test_budget_prompt_embeds_current_plan():
    plan = make_plan((100, 50, 20))
    prompt = build_budget_optimization_prompt(plan, 5000, "INR")
    assert "limited to 5000 INR" in prompt
    assert '"Place 1"' in prompt
    with pytest.raises(InvalidRequest):
        build_budget_optimization_prompt(None, 5000)
    with pytest.raises(InvalidRequest):
        build_budget_optimization_prompt(plan, None)
    with pytest.raises(InvalidRequest):
        build_budget_optimization_prompt(plan, -1)


def test_destination_prompts():
    prefs = DestinationPreferences.model_validate({
        "budget": {"min": 10000, "max": 30000},
        "timeAvailability": {"daysAvailable": 5},
        "interests": ["beaches"],
    })
    recs = build_destination_recommendations_prompt(prefs)
    assert "JSON array" in recs
    assert "10000 to 30000 INR" in recs
    assert "Days Available: 5" in recs

    guide = build_destination_details_prompt("Goa", prefs)
    assert "information about Goa" in guide
    assert '"overview"' in guide
    with pytest.raises(InvalidRequest):
        build_destination_details_prompt(None, prefs)


def test_inverted_budget_band_rejected():
    prefs = DestinationPreferences.model_validate({"budget": {"min": 500, "max": 100}})
    with pytest.raises(InvalidRequest):
        build_destination_recommendations_prompt(prefs)
