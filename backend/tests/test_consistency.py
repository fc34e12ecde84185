import math

import pytest

from modules.planning.consistency import (
    coerce_cost,
    recompute_day_total,
    recompute_plan_totals,
    recompute_trip_totals,
)

from conftest import make_plan


def _trip(plan, total=10000, spent=12345, remaining=-1):
    return {**plan, "budget": {"total": total, "spent": spent, "remaining": remaining, "currency": "INR"}}


def test_day_total_sums_places_meals_transport():
    day = make_plan((500, 400, 600))["itinerary"][0]
    assert recompute_day_total(day) == 1500
    assert day["totalDayCost"] == 1500


def test_plan_totals_ignore_model_figures():
    plan = recompute_plan_totals(make_plan((100, 50, 20), (200, 0, 30)))
    assert [d["totalDayCost"] for d in plan["itinerary"]] == [170, 230]
    assert plan["summary"]["totalCost"] == 400
    assert plan["summary"]["averageDailyCost"] == 200


def test_plan_recompute_does_not_mutate_input():
    plan = make_plan((100, 50, 20))
    recompute_plan_totals(plan)
    assert plan["summary"]["totalCost"] == 999999
    assert plan["itinerary"][0]["totalDayCost"] == 1


def test_budget_figures_derived_from_itinerary():
    trip = recompute_trip_totals(_trip(make_plan((100, 50, 20), (200, 0, 30))))
    assert trip["budget"]["spent"] == 400
    assert trip["budget"]["remaining"] == 9600
    assert trip["budget"]["total"] == 10000


@pytest.mark.parametrize("total", [0, 1, 10000, 10**12])
def test_budget_invariant(total):
    trip = recompute_trip_totals(_trip(make_plan((100, 50, 20)), total=total))
    assert trip["budget"]["remaining"] == trip["budget"]["total"] - trip["budget"]["spent"]


def test_over_budget_goes_negative():
    trip = recompute_trip_totals(_trip(make_plan((100, 50, 20)), total=100))
    assert trip["budget"]["remaining"] == -70


def test_idempotent():
    once = recompute_trip_totals(_trip(make_plan((100, 50, 20), (7.5, 2.5, 0))))
    assert recompute_trip_totals(once) == once


def test_sum_invariant_holds_after_recompute():
    trip = recompute_trip_totals(_trip(make_plan((1, 2, 3), (4, 5, 6), (7, 8, 9))))
    days = trip["itinerary"]
    assert trip["summary"]["totalCost"] == sum(d["totalDayCost"] for d in days)
    for day in days:
        expected = (
            sum(p["estimatedCost"] for p in day["places"])
            + sum(m["estimatedCost"] for m in day["meals"])
            + day["transportation"]["estimatedCost"]
        )
        assert day["totalDayCost"] == expected


def test_empty_itinerary():
    trip = recompute_trip_totals({"budget": {"total": 500}, "itinerary": [], "summary": {}})
    assert trip["summary"] == {"totalCost": 0, "averageDailyCost": 0}
    assert trip["budget"]["spent"] == 0
    assert trip["budget"]["remaining"] == 500


def test_days_sorted_by_number():
    plan = make_plan((1, 0, 0), (2, 0, 0))
    plan["itinerary"].reverse()
    assert [d["day"] for d in recompute_plan_totals(plan)["itinerary"]] == [1, 2]


def test_missing_costs_count_as_zero():
    plan = make_plan((100, 50, 20))
    del plan["itinerary"][0]["meals"][0]["estimatedCost"]
    del plan["itinerary"][0]["transportation"]
    anomalies = []
    result = recompute_plan_totals(plan, anomalies)
    assert result["summary"]["totalCost"] == 100
    assert anomalies == []


@pytest.mark.parametrize("bad", ["500", -20, float("nan"), math.inf, 10**400, True, {"amount": 3}])
def test_malformed_costs_are_zeroed_and_reported(bad):
    plan = make_plan((100, 50, 20))
    plan["itinerary"][0]["meals"][0]["estimatedCost"] = bad
    anomalies = []
    result = recompute_plan_totals(plan, anomalies)
    assert result["summary"]["totalCost"] == 120
    assert result["itinerary"][0]["meals"][0]["estimatedCost"] == 0
    assert len(anomalies) == 1
    assert "meals[0]" in anomalies[0]


def test_coerce_cost_passes_good_values_through():
    assert coerce_cost(12.5, "x") == 12.5
    assert coerce_cost(0, "x") == 0
    assert coerce_cost(None, "x") == 0


# ── Overflow ──────────────────────────────────────────────────────────────────

def test_cost_overflowing_day_total_is_zeroed():
    anomalies = []
    plan = recompute_plan_totals(make_plan((1e308, 1e308, 5)), anomalies)
    day = plan["itinerary"][0]
    assert day["meals"][0]["estimatedCost"] == 0
    assert math.isfinite(day["totalDayCost"])
    assert day["totalDayCost"] == day["places"][0]["estimatedCost"] + 0 + 5
    assert math.isfinite(plan["summary"]["totalCost"])
    assert len(anomalies) == 1
    assert "meals[0]" in anomalies[0] and "overflows" in anomalies[0]


def test_day_overflowing_trip_total_is_zeroed():
    anomalies = []
    trip = recompute_trip_totals(_trip(make_plan((1e308, 0, 0), (1e308, 0, 0))), anomalies)
    first, second = trip["itinerary"]
    assert first["totalDayCost"] == 1e308
    assert second["totalDayCost"] == 0
    assert second["places"][0]["estimatedCost"] == 0
    assert trip["summary"]["totalCost"] == 1e308
    assert trip["summary"]["averageDailyCost"] == 5e307
    assert trip["budget"]["spent"] == 1e308
    assert trip["budget"]["remaining"] == 10000 - 1e308
    assert len(anomalies) == 1
    assert "day 2" in anomalies[0]


def test_overflow_repair_is_idempotent():
    once = recompute_trip_totals(_trip(make_plan((1e308, 1e308, 0), (1e308, 0, 0))))
    assert recompute_trip_totals(once) == once
    assert all(math.isfinite(d["totalDayCost"]) for d in once["itinerary"])
