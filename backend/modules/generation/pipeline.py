"""
modules/generation/pipeline.py
------------------------------
One generation request, start to finish:

    prompt → llm.complete() → parse_response() → validator → (normalise)

Each step either hands a value to the next or raises a GenerationError that
carries the raw model text, so the caller can always show what the model
actually said. There are no retries: a failure is reported, not hidden.

Trip plans (initial and budget-optimised) additionally pass through the
consistency engine, which owns every derived cost figure.

Usage:
    pipeline = GenerationPipeline(get_llm_client())
    plan = pipeline.generate_trip_plan(TripRequest(destination="Goa", duration=3))
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Optional

from errors import GenerationError, SchemaMismatch
from llm import LLMClient
from modules.generation.prompt_builder import (
    build_budget_optimization_prompt,
    build_destination_details_prompt,
    build_destination_recommendations_prompt,
    build_place_details_prompt,
    build_trip_prompt,
)
from modules.generation.response_parser import ResponseKind, parse_response
from modules.observability.logger import AuditLogger
from modules.planning.consistency import recompute_plan_totals
from modules.validation.response_validator import (
    Validator,
    validate_destination_details,
    validate_place_details,
    validate_plan_models,
    validate_recommendations,
    validate_trip_plan,
)
from schemas.generation import (
    DestinationDetailsRequest,
    DestinationPreferences,
    OptimizeBudgetRequest,
    PlaceDetailsRequest,
    TripRequest,
)

logger = logging.getLogger(__name__)

Normaliser = Callable[[Any, list[str]], Any]


def _normalise_plan(plan: Any, anomalies: list[str]) -> Any:
    plan = recompute_plan_totals(plan, anomalies)
    check = validate_plan_models(plan)
    if not check.valid:
        raise SchemaMismatch("AI response does not match the expected format", errors=check.errors)
    return plan


class GenerationPipeline:
    def __init__(self, llm: LLMClient, audit_logger: Optional[AuditLogger] = None) -> None:
        self._llm = llm
        self._audit = audit_logger

    # ── core chain ────────────────────────────────────────────────────────

    def run(
        self,
        prompt: str,
        kind: ResponseKind,
        validator: Validator,
        *,
        label: str = "generation",
        normalise: Optional[Normaliser] = None,
    ) -> Any:
        """
        Send ``prompt`` and return the validated (and normalised) value.

        Raises:
            GenerationTransportError: the model call failed.
            UnparsableResponse / NoJsonFound: no JSON could be recovered.
            SchemaMismatch: JSON of the wrong kind, missing required keys, or
                rejected by ``normalise`` (the raw text is attached here).
        """
        request_id = f"{label}_{uuid.uuid4().hex[:12]}"
        self._record(request_id, "prompt", {"kind": label, "prompt": prompt})

        try:
            raw_text = self._llm.complete(prompt)
        except GenerationError as exc:
            self._outcome(request_id, exc)
            raise

        self._record(request_id, "raw_response", {"text": raw_text})

        parsed = parse_response(raw_text, kind)
        if not parsed.ok:
            self._outcome(request_id, parsed.error)
            raise parsed.error

        check = validator(parsed.value)
        if not check.valid:
            error = SchemaMismatch(
                "AI response does not match the expected format",
                errors=check.errors,
                raw_text=raw_text,
            )
            logger.warning("[%s] schema mismatch: %s", label, "; ".join(check.errors[:5]))
            self._outcome(request_id, error)
            raise error

        value = parsed.value
        anomalies: list[str] = []
        if normalise is not None:
            try:
                value = normalise(value, anomalies)
            except SchemaMismatch as exc:
                exc.raw_text = raw_text
                logger.warning("[%s] schema mismatch after normalising: %s", label, "; ".join(exc.errors[:5]))
                self._outcome(request_id, exc)
                raise

        self._outcome(request_id, None, stage=parsed.stage, anomalies=anomalies)
        logger.info("[%s] generated (%s parse, %d anomalies)", label, parsed.stage, len(anomalies))
        return value

    # ── operations ────────────────────────────────────────────────────────

    def generate_trip_plan(self, request: TripRequest) -> dict[str, Any]:
        prompt = build_trip_prompt(request)
        return self.run(
            prompt, ResponseKind.OBJECT, validate_trip_plan,
            label="trip_plan", normalise=_normalise_plan,
        )

    def optimize_budget(self, request: OptimizeBudgetRequest) -> dict[str, Any]:
        prompt = build_budget_optimization_prompt(
            request.trip_plan, request.budget_constraint, request.currency
        )
        return self.run(
            prompt, ResponseKind.OBJECT, validate_trip_plan,
            label="budget_optimization", normalise=_normalise_plan,
        )

    def generate_place_details(self, request: PlaceDetailsRequest) -> dict[str, Any]:
        prompt = build_place_details_prompt(
            request.place_name, request.destination, request.interests
        )
        return self.run(prompt, ResponseKind.OBJECT, validate_place_details, label="place_details")

    def recommend_destinations(self, preferences: DestinationPreferences) -> list[dict[str, Any]]:
        prompt = build_destination_recommendations_prompt(preferences)
        return self.run(
            prompt, ResponseKind.ARRAY, validate_recommendations,
            label="destination_recommendations",
        )

    def describe_destination(self, request: DestinationDetailsRequest) -> dict[str, Any]:
        prompt = build_destination_details_prompt(request.destination.name, request.preferences)
        return self.run(
            prompt, ResponseKind.OBJECT, validate_destination_details,
            label="destination_details",
        )

    # ── audit ─────────────────────────────────────────────────────────────

    def _record(self, request_id: str, event_type: str, payload: dict) -> None:
        if self._audit is not None:
            self._audit.log(request_id, event_type, payload)

    def _outcome(
        self,
        request_id: str,
        error: Optional[GenerationError],
        stage: str = "",
        anomalies: Optional[list[str]] = None,
    ) -> None:
        if self._audit is None:
            return
        if error is None:
            payload: dict[str, Any] = {"ok": True, "stage": stage, "anomalies": anomalies or []}
        else:
            payload = {"ok": False, "error": type(error).__name__, "message": error.message}
            if isinstance(error, SchemaMismatch):
                payload["errors"] = error.errors
        self._audit.log(request_id, "outcome", payload)
        self._audit.close(request_id)
