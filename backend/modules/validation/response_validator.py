"""
modules/validation/response_validator.py
----------------------------------------
Shape checks applied to parsed model output before any other component
trusts it.

  Trip plan (initial generation AND budget optimisation):
    ✓ top level is an object
    ✓ "itinerary" is a list, "summary" is an object
    ✓ every day is an object with integer day >= 1
    ✓ day numbers unique and contiguous from 1
    ✓ places (if present): list of objects, non-empty name,
      category in attraction | restaurant | accommodation | activity
    ✓ meals (if present): list of objects, type in breakfast | lunch | dinner | snack
    ✓ transportation (if present): object

  Destination recommendations:
    ✓ non-empty list of objects with name, totalCost, topAttractions (list)

  Place details:        ✓ object with name, description
  Destination guide:    ✓ object with destination, overview

  Stored plan models (after the cost recompute):
    ✓ every day validates as schemas.trip.DayPlan, summary as Summary

Costs are NOT checked by validate_trip_plan: malformed numbers are zeroed (and reported) by
modules/planning/consistency.py.

Usage:
    from modules.validation import validate_trip_plan

    result = validate_trip_plan(parsed)
    if not result.valid:
        print(result.errors)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import ValidationError

from schemas.trip import MEAL_TYPES, PLACE_CATEGORIES, DayPlan, Summary


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
        record: The validated value (for logging purposes).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    record: Any = field(default=None, repr=False)

    def __bool__(self) -> bool:
        return self.valid


def _result(errors: list[str], record: Any) -> ValidationResult:
    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


# ── Itinerary ──────────────────────────────────────────────────────────────────

def _validate_place(place: Any, where: str) -> list[str]:
    if not isinstance(place, dict):
        return [f"{where} must be an object"]
    errors: list[str] = []
    if not _non_empty_str(place.get("name")):
        errors.append(f"{where}.name must not be empty")
    category = place.get("category")
    if category not in PLACE_CATEGORIES:
        errors.append(
            f"{where}.category={category!r} is not one of {', '.join(PLACE_CATEGORIES)}"
        )
    return errors


def _validate_meal(meal: Any, where: str) -> list[str]:
    if not isinstance(meal, dict):
        return [f"{where} must be an object"]
    meal_type = meal.get("type")
    if meal_type not in MEAL_TYPES:
        return [f"{where}.type={meal_type!r} is not one of {', '.join(MEAL_TYPES)}"]
    return []


def _validate_day(day: Any, index: int) -> list[str]:
    where = f"itinerary[{index}]"
    if not isinstance(day, dict):
        return [f"{where} must be an object"]

    errors: list[str] = []
    number = day.get("day")
    if not _is_int(number) or number < 1:
        errors.append(f"{where}.day must be an integer >= 1 (got {number!r})")

    places = day.get("places", [])
    if not isinstance(places, list):
        errors.append(f"{where}.places must be a list")
    else:
        for i, place in enumerate(places):
            errors.extend(_validate_place(place, f"{where}.places[{i}]"))

    meals = day.get("meals", [])
    if not isinstance(meals, list):
        errors.append(f"{where}.meals must be a list")
    else:
        for i, meal in enumerate(meals):
            errors.extend(_validate_meal(meal, f"{where}.meals[{i}]"))

    transportation = day.get("transportation")
    if transportation is not None and not isinstance(transportation, dict):
        errors.append(f"{where}.transportation must be an object")

    return errors


def validate_itinerary(itinerary: Any) -> ValidationResult:
    """
    Validate an ordered list of day plans (also used for client-side edits).

    Day numbers must be unique and, once sorted, run 1..N with no gaps.
    """
    if not isinstance(itinerary, list):
        return _result(["itinerary must be a list"], itinerary)

    errors: list[str] = []
    for index, day in enumerate(itinerary):
        errors.extend(_validate_day(day, index))

    numbers = [
        d["day"] for d in itinerary
        if isinstance(d, dict) and _is_int(d.get("day"))
    ]
    if len(numbers) == len(itinerary) and numbers:
        if len(set(numbers)) != len(numbers):
            errors.append(f"itinerary day numbers must be unique (got {numbers})")
        elif sorted(numbers) != list(range(1, len(numbers) + 1)):
            errors.append(
                f"itinerary day numbers must be contiguous starting at 1 (got {sorted(numbers)})"
            )

    return _result(errors, itinerary)


def validate_trip_plan(value: Any) -> ValidationResult:
    """Validate a full trip plan: {"itinerary": [...], "summary": {...}, ...}."""
    if not isinstance(value, dict):
        return _result(["trip plan must be a JSON object"], value)

    errors: list[str] = []
    if "itinerary" not in value:
        errors.append("missing required key 'itinerary'")
    else:
        errors.extend(validate_itinerary(value["itinerary"]).errors)

    if "summary" not in value:
        errors.append("missing required key 'summary'")
    elif not isinstance(value["summary"], dict):
        errors.append("summary must be an object")

    return _result(errors, value)


def _describe(exc: ValidationError, prefix: str) -> list[str]:
    return [
        f"{'.'.join([prefix, *(str(part) for part in err['loc'])])}: {err['msg']}"
        for err in exc.errors()
    ]


def validate_plan_models(plan: dict[str, Any]) -> ValidationResult:
    """
    Check a recomputed plan against the models a stored trip uses, so a plan
    returned to the caller is always one that can be attached to a trip.
    """
    errors: list[str] = []
    for index, day in enumerate(plan.get("itinerary", [])):
        try:
            DayPlan.model_validate(day)
        except ValidationError as exc:
            errors.extend(_describe(exc, f"itinerary.{index}"))
    try:
        Summary.model_validate(plan.get("summary", {}))
    except ValidationError as exc:
        errors.extend(_describe(exc, "summary"))
    return _result(errors, plan)


# ── Destination recommendations ────────────────────────────────────────────────

def validate_recommendations(value: Any) -> ValidationResult:
    if not isinstance(value, list):
        return _result(["recommendations must be a JSON array"], value)
    if not value:
        return _result(["recommendations must not be empty"], value)

    errors: list[str] = []
    for i, item in enumerate(value):
        where = f"recommendations[{i}]"
        if not isinstance(item, dict):
            errors.append(f"{where} must be an object")
            continue
        for key in ("name", "totalCost", "topAttractions"):
            if key not in item:
                errors.append(f"{where} missing required key '{key}'")
        if "topAttractions" in item and not isinstance(item["topAttractions"], list):
            errors.append(f"{where}.topAttractions must be a list")
    return _result(errors, value)


# ── Single objects ─────────────────────────────────────────────────────────────

def _require_keys(value: Any, what: str, keys: tuple[str, ...]) -> ValidationResult:
    if not isinstance(value, dict):
        return _result([f"{what} must be a JSON object"], value)
    errors = [f"missing required key '{k}'" for k in keys if k not in value]
    return _result(errors, value)


def validate_place_details(value: Any) -> ValidationResult:
    return _require_keys(value, "place details", ("name", "description"))


def validate_destination_details(value: Any) -> ValidationResult:
    return _require_keys(value, "destination guide", ("destination", "overview"))


Validator = Callable[[Any], ValidationResult]
