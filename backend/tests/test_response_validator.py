from modules.validation import (
    validate_destination_details,
    validate_itinerary,
    validate_place_details,
    validate_recommendations,
    validate_trip_plan,
)

from conftest import make_plan


def test_valid_plan_passes():
    result = validate_trip_plan(make_plan((100, 50, 20), (10, 10, 10)))
    assert result.valid
    assert result.errors == []


def test_missing_itinerary_is_rejected():
    result = validate_trip_plan({"summary": {"totalCost": 10}})
    assert not result.valid
    assert "missing required key 'itinerary'" in result.errors


def test_plan_must_be_object():
    assert not validate_trip_plan([make_plan((1, 1, 1))])


def test_unknown_place_category():
    plan = make_plan((100, 50, 20))
    plan["itinerary"][0]["places"][0]["category"] = "museum"
    result = validate_trip_plan(plan)
    assert not result.valid
    assert "category='museum'" in result.errors[0]


def test_unknown_meal_type():
    plan = make_plan((100, 50, 20))
    plan["itinerary"][0]["meals"][0]["type"] = "brunch"
    assert not validate_trip_plan(plan).valid


def test_blank_place_name():
    plan = make_plan((100, 50, 20))
    plan["itinerary"][0]["places"][0]["name"] = "  "
    assert not validate_trip_plan(plan).valid


def test_day_numbers_must_be_contiguous():
    plan = make_plan((1, 1, 1), (1, 1, 1))
    plan["itinerary"][1]["day"] = 3
    result = validate_itinerary(plan["itinerary"])
    assert not result.valid
    assert "contiguous" in result.errors[0]


def test_duplicate_day_numbers():
    plan = make_plan((1, 1, 1), (1, 1, 1))
    plan["itinerary"][1]["day"] = 1
    assert "unique" in validate_itinerary(plan["itinerary"]).errors[0]


def test_days_may_arrive_out_of_order():
    plan = make_plan((1, 1, 1), (1, 1, 1))
    plan["itinerary"].reverse()
    assert validate_itinerary(plan["itinerary"]).valid


def test_empty_itinerary_is_valid():
    assert validate_itinerary([]).valid


def test_recommendations():
    good = [{"name": "Goa", "totalCost": 15000, "topAttractions": ["Baga"]}]
    assert validate_recommendations(good).valid
    assert not validate_recommendations([]).valid
    assert not validate_recommendations({"name": "Goa"}).valid
    assert not validate_recommendations([{"name": "Goa", "totalCost": 1, "topAttractions": "Baga"}]).valid


def test_single_object_kinds():
    assert validate_place_details({"name": "Amber Fort", "description": "fort"}).valid
    assert not validate_place_details({"name": "Amber Fort"}).valid
    assert validate_destination_details({"destination": "Goa", "overview": "beaches"}).valid
    assert not validate_destination_details(["Goa"]).valid
