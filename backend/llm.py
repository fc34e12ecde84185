"""
llm.py
------
Generative client: ``complete(prompt) -> raw text``.

GeminiClient talks to Google Gemini through the google-genai SDK.
StubLLMClient answers offline with small canned responses so the whole
request chain can run without an API key (USE_STUB_LLM=true).

Any failure of the call itself (network, timeout, quota, empty answer) is
raised as GenerationTransportError; what the text contains is the
extractor's problem, not this module's.
"""

from __future__ import annotations

import json
import logging
from typing import Optional, Protocol

from google import genai as genai_sdk
from google.genai import types as genai_types

import config
from errors import GenerationTransportError

logger = logging.getLogger(__name__)


class LLMClient(Protocol):
    def complete(self, prompt: str) -> str: ...


# ── Gemini LLM client ────────────────────────────────────────────────────────────
class GeminiClient:
    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
        temperature: Optional[float] = None,
    ):
        api_key = api_key or config.GEMINI_API_KEY
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY missing")
        timeout_seconds = timeout_seconds or config.LLM_TIMEOUT_SECONDS
        self._client = genai_sdk.Client(
            api_key=api_key,
            # SDK timeout is in milliseconds
            http_options=genai_types.HttpOptions(timeout=timeout_seconds * 1000),
        )
        self._model = model or config.LLM_MODEL_NAME
        self._temperature = config.LLM_TEMPERATURE if temperature is None else temperature

    def complete(self, prompt: str) -> str:
        try:
            response = self._client.models.generate_content(
                model=self._model,
                contents=prompt,
                config=genai_types.GenerateContentConfig(temperature=self._temperature),
            )
        except Exception as exc:
            logger.warning("Gemini call failed: %s", exc)
            raise GenerationTransportError(
                f"Generative model call failed: {exc}"
            ) from exc

        if not response or not response.text:
            raise GenerationTransportError("Empty Gemini response")

        return response.text.strip()


# ── Stub LLM client (no API calls) ───────────────────────────────────────────
_STUB_PLAN = {
    "destination": "Jaipur",
    "duration": 1,
    "currency": "INR",
    "itinerary": [
        {
            "day": 1,
            "places": [
                {
                    "name": "Amber Fort",
                    "description": "Hilltop fort overlooking Maota Lake.",
                    "category": "attraction",
                    "estimatedCost": 500,
                    "estimatedTimeRequired": "3 hours",
                    "location": {"address": "Devisinghpura, Amer"},
                    "tips": ["Arrive before 9 AM"],
                }
            ],
            "transportation": {"mode": "taxi", "estimatedCost": 600},
            "meals": [
                {"type": "lunch", "suggestion": "Dal baati churma at LMB", "estimatedCost": 400}
            ],
            "totalDayCost": 1500,
        }
    ],
    "summary": {
        "highlights": ["Amber Fort at sunrise"],
        "totalCost": 1500,
        "averageDailyCost": 1500,
        "mustTryExperiences": ["Dal baati churma"],
    },
}

_STUB_DESTINATIONS = [
    {
        "name": "Jaipur",
        "description": "The Pink City, with forts, palaces and bazaars.",
        "totalCost": 20000,
        "bestTimeToVisit": "October to March",
        "topAttractions": ["Amber Fort", "Hawa Mahal", "City Palace"],
    }
]


class StubLLMClient:
    """No-op LLM client used when USE_STUB_LLM=true.

    Picks a canned response from the shape the prompt asks for and wraps it
    in a json fence, the way the real model usually answers.
    """

    def complete(self, prompt: str) -> str:
        lowered = prompt.lower()
        if "json array" in lowered:
            payload: object = _STUB_DESTINATIONS
        elif '"overview"' in lowered:
            payload = {"destination": "Jaipur", "overview": "Stub travel guide."}
        elif '"itinerary"' in lowered:
            payload = _STUB_PLAN
        else:
            payload = {"name": "Amber Fort", "description": "Stub place details."}
        return "```json\n" + json.dumps(payload, indent=2) + "\n```"


def get_llm_client() -> LLMClient:
    """Return the configured generative client."""
    if config.USE_STUB_LLM:
        return StubLLMClient()
    return GeminiClient()
