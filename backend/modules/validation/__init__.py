"""
modules/validation package — shape guards for model output and itinerary edits.
"""
from modules.validation.response_validator import (
    ValidationResult,
    Validator,
    validate_destination_details,
    validate_itinerary,
    validate_place_details,
    validate_plan_models,
    validate_recommendations,
    validate_trip_plan,
)

__all__ = [
    "ValidationResult",
    "Validator",
    "validate_destination_details",
    "validate_itinerary",
    "validate_place_details",
    "validate_plan_models",
    "validate_recommendations",
    "validate_trip_plan",
]
