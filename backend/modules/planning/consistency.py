"""
modules/planning/consistency.py
-------------------------------
Itinerary consistency engine: the only writer of derived money figures.

Derived fields and their formulas:
  day.totalDayCost        = Σ place.estimatedCost + Σ meal.estimatedCost
                            + transportation.estimatedCost
  summary.totalCost       = Σ day.totalDayCost
  summary.averageDailyCost= summary.totalCost / number of days   (0 with no days)
  budget.spent            = summary.totalCost
  budget.remaining        = budget.total − budget.spent

Whatever the model or the client put in those fields is discarded.

Cost handling:
  missing cost                     → 0, silently
  non-numeric / bool / NaN / ±inf  → 0, anomaly reported
  negative                         → 0, anomaly reported
  finite but overflows a sum       → 0, anomaly reported
Malformed cost fields are overwritten with 0 in the returned document, so
the stored components always add up to the stored totals.

Entry points
------------
  recompute_day_total()   — one day, in place; returns the new total.
  recompute_plan_totals() — a generated plan {"itinerary", "summary"}; pure.
  recompute_trip_totals() — a trip document (plan + budget); pure, idempotent.

Each takes an optional ``anomalies`` list that collects one message per
zeroed field; the same messages are logged at WARNING.
"""

from __future__ import annotations

import copy
import logging
import math
import sys
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

Number = Union[int, float]

_MAX_AMOUNT = sys.float_info.max


def _fits(value: Number) -> bool:
    # False for NaN, ±inf and ints too large to serialise as a float.
    return -_MAX_AMOUNT <= value <= _MAX_AMOUNT


def _note(anomalies: Optional[list[str]], message: str) -> None:
    logger.warning("Cost anomaly: %s", message)
    if anomalies is not None:
        anomalies.append(message)


def coerce_cost(value: Any, where: str, anomalies: Optional[list[str]] = None) -> Number:
    """Return ``value`` as a usable non-negative number, or 0."""
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        _note(anomalies, f"{where}={value!r} is not a number; counted as 0")
        return 0
    if not _fits(value):
        _note(anomalies, f"{where}={value!r} is not finite; counted as 0")
        return 0
    if value < 0:
        _note(anomalies, f"{where}={value!r} is negative; counted as 0")
        return 0
    return value


def _item_cost(item: Any, where: str, anomalies: Optional[list[str]]) -> Number:
    """Read (and sanitise in place) ``item["estimatedCost"]``."""
    if not isinstance(item, dict) or "estimatedCost" not in item:
        return 0
    cost = coerce_cost(item["estimatedCost"], f"{where}.estimatedCost", anomalies)
    if cost is not item["estimatedCost"]:
        item["estimatedCost"] = cost
    return cost


def _add_item(total: Number, item: Any, where: str, anomalies: Optional[list[str]]) -> Number:
    cost = _item_cost(item, where, anomalies)
    if _fits(total + cost):
        return total + cost
    # Each cost is finite but the running sum overflowed.
    _note(anomalies, f"{where}.estimatedCost={cost!r} overflows the day total; counted as 0")
    item["estimatedCost"] = 0
    return total


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _day_items(day: dict[str, Any]) -> list[tuple[str, Any]]:
    where = f"day {day.get('day', '?')}"
    items = [(f"{where}.places[{i}]", p) for i, p in enumerate(_as_list(day.get("places")))]
    items += [(f"{where}.meals[{i}]", m) for i, m in enumerate(_as_list(day.get("meals")))]
    items.append((f"{where}.transportation", day.get("transportation")))
    return items


# ── Day ────────────────────────────────────────────────────────────────────────

def recompute_day_total(day: dict[str, Any], anomalies: Optional[list[str]] = None) -> Number:
    """
    Sum every cost of one day and overwrite ``day["totalDayCost"]``.

    Mutates ``day``. Returns the new total, always finite.
    """
    total: Number = 0
    for where, item in _day_items(day):
        total = _add_item(total, item, where, anomalies)

    day["totalDayCost"] = total
    return total


def _zero_day(day: dict[str, Any]) -> None:
    for _, item in _day_items(day):
        if isinstance(item, dict) and "estimatedCost" in item:
            item["estimatedCost"] = 0
    day["totalDayCost"] = 0


# ── Plan / trip ────────────────────────────────────────────────────────────────

def _day_sort_key(day: Any) -> float:
    number = day.get("day") if isinstance(day, dict) else None
    if isinstance(number, (int, float)) and not isinstance(number, bool):
        return float(number)
    return math.inf


def _apply_plan_totals(doc: dict[str, Any], anomalies: Optional[list[str]]) -> Number:
    days = [d for d in _as_list(doc.get("itinerary")) if isinstance(d, dict)]
    days.sort(key=_day_sort_key)
    doc["itinerary"] = days

    total: Number = 0
    for day in days:
        day_total = recompute_day_total(day, anomalies)
        if not _fits(total + day_total):
            _note(anomalies, f"day {day.get('day', '?')} total={day_total!r} overflows the trip total; counted as 0")
            _zero_day(day)
            continue
        total += day_total

    summary = doc.get("summary")
    if not isinstance(summary, dict):
        summary = {}
        doc["summary"] = summary
    summary["totalCost"] = total
    summary["averageDailyCost"] = total / len(days) if days else 0
    return total


def recompute_plan_totals(
    plan: dict[str, Any], anomalies: Optional[list[str]] = None
) -> dict[str, Any]:
    """
    Return a copy of ``plan`` with days sorted by day number, every
    totalDayCost recomputed, and summary.totalCost / averageDailyCost set.
    """
    doc = copy.deepcopy(plan)
    _apply_plan_totals(doc, anomalies)
    return doc


def recompute_trip_totals(
    trip: dict[str, Any], anomalies: Optional[list[str]] = None
) -> dict[str, Any]:
    """
    Return a copy of ``trip`` with all derived figures recomputed from its
    itinerary and ``budget.total``.

    Pure and idempotent:
        recompute_trip_totals(recompute_trip_totals(t)) == recompute_trip_totals(t)
    """
    doc = copy.deepcopy(trip)
    spent = _apply_plan_totals(doc, anomalies)

    budget = doc.get("budget")
    if not isinstance(budget, dict):
        budget = {}
        doc["budget"] = budget
    total = coerce_cost(budget.get("total"), "budget.total", anomalies)
    budget["total"] = total
    budget["spent"] = spent
    budget["remaining"] = total - spent
    return doc
