import json
import os
import sys
from pathlib import Path

# In-process backends and a fast hash for the whole suite; set before config loads.
os.environ["STORE_BACKEND"] = "in_memory"
os.environ["SESSION_BACKEND"] = "in_memory"
os.environ["USE_STUB_LLM"] = "true"
os.environ["AUDIT_LOG_DIR"] = ""
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from api import deps  # noqa: E402
from api.server import app  # noqa: E402
from db.redis_client import InMemoryKeyValueStore  # noqa: E402
from db.stores import InMemoryTripStore, InMemoryUserStore  # noqa: E402
from errors import GenerationTransportError  # noqa: E402
from modules.auth.sessions import SessionManager  # noqa: E402
from modules.generation.pipeline import GenerationPipeline  # noqa: E402


class ScriptedLLM:
    """Answers prompts from a queue; an Exception in the queue is raised."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    def push(self, *responses):
        self.responses.extend(responses)

    def complete(self, prompt):
        self.prompts.append(prompt)
        if not self.responses:
            raise GenerationTransportError("no scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def fenced(value):
    return "```json\n" + json.dumps(value, indent=2) + "\n```"


def make_plan(*day_costs, summary_total=999999):
    """A valid generated plan; each entry is (place, meal, transport) costs."""
    itinerary = []
    for i, (place, meal, transport) in enumerate(day_costs, start=1):
        itinerary.append({
            "day": i,
            "places": [{
                "name": f"Place {i}",
                "description": "somewhere",
                "category": "attraction",
                "estimatedCost": place,
            }],
            "meals": [{"type": "lunch", "suggestion": "thali", "estimatedCost": meal}],
            "transportation": {"mode": "bus", "estimatedCost": transport},
            "totalDayCost": 1,
        })
    return {
        "destination": "Jaipur",
        "itinerary": itinerary,
        "summary": {"highlights": ["forts"], "totalCost": summary_total},
    }


@pytest.fixture
def llm():
    return ScriptedLLM()


@pytest.fixture
def trip_store():
    return InMemoryTripStore()


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def sessions():
    return SessionManager(InMemoryKeyValueStore())


@pytest.fixture
def client(llm, trip_store, user_store, sessions):
    app.dependency_overrides[deps.get_trip_store] = lambda: trip_store
    app.dependency_overrides[deps.get_user_store] = lambda: user_store
    app.dependency_overrides[deps.get_sessions] = lambda: sessions
    app.dependency_overrides[deps.get_pipeline] = lambda: GenerationPipeline(llm)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def register(client, email="asha@example.com", password="secret123", name="Asha"):
    resp = client.post("/api/users", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture
def auth(client):
    return register(client)


TRIP_BODY = {
    "destination": "Jaipur",
    "startDate": "2025-11-01",
    "endDate": "2025-11-04",
    "budget": {"total": 20000},
    "preferences": {"travelStyle": "cultural", "interests": ["history"]},
}


def create_trip(client, headers, **overrides):
    resp = client.post("/api/trips", json={**TRIP_BODY, **overrides}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
