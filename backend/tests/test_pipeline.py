import pytest

from errors import SchemaMismatch, UnparsableResponse
from llm import StubLLMClient
from modules.generation.pipeline import GenerationPipeline
from modules.generation.response_parser import ResponseKind
from modules.observability.logger import AuditLogger
from modules.validation import validate_place_details
from schemas.generation import (
    DestinationDetailsRequest,
    DestinationPreferences,
    PlaceDetailsRequest,
    TripRequest,
)

from conftest import ScriptedLLM, fenced, make_plan


def _events(audit, request_prefix):
    files = sorted(audit.logs_dir.glob(f"{request_prefix}_*.jsonl"))
    assert len(files) == 1
    return [r["event_type"] for r in audit.read(files[0].stem)], audit.read(files[0].stem)


def test_audit_trail_for_success(tmp_path):
    audit = AuditLogger(tmp_path)
    plan = make_plan((100, 50, 20))
    plan["itinerary"][0]["meals"][0]["estimatedCost"] = "fifty"
    pipeline = GenerationPipeline(ScriptedLLM(fenced(plan)), audit)

    result = pipeline.generate_trip_plan(TripRequest(destination="Jaipur", duration=1))
    assert result["summary"]["totalCost"] == 120

    events, records = _events(audit, "trip_plan")
    assert events == ["prompt", "raw_response", "outcome"]
    outcome = records[-1]["payload"]
    assert outcome["ok"] is True
    assert outcome["stage"] == "direct"
    assert len(outcome["anomalies"]) == 1


def test_audit_trail_for_failure(tmp_path):
    audit = AuditLogger(tmp_path)
    pipeline = GenerationPipeline(ScriptedLLM('{"name": "x"}'), audit)

    with pytest.raises(SchemaMismatch) as excinfo:
        pipeline.run("prompt", ResponseKind.OBJECT, validate_place_details, label="place_details")
    assert excinfo.value.raw_text == '{"name": "x"}'

    events, records = _events(audit, "place_details")
    assert events == ["prompt", "raw_response", "outcome"]
    assert records[-1]["payload"]["error"] == "SchemaMismatch"
    assert "missing required key 'description'" in records[-1]["payload"]["errors"]


def test_unparsable_carries_raw_text():
    pipeline = GenerationPipeline(ScriptedLLM("the model rambled"))
    with pytest.raises(UnparsableResponse) as excinfo:
        pipeline.generate_place_details(PlaceDetailsRequest(place_name="Amber Fort", destination="Jaipur"))
    assert excinfo.value.raw_text == "the model rambled"


def test_stub_client_answers_every_operation():
    pipeline = GenerationPipeline(StubLLMClient())
    plan = pipeline.generate_trip_plan(TripRequest(destination="Jaipur", duration=1))
    assert plan["summary"]["totalCost"] == 1500

    assert pipeline.recommend_destinations(DestinationPreferences())[0]["name"] == "Jaipur"
    guide = pipeline.describe_destination(
        DestinationDetailsRequest.model_validate({"destination": {"name": "Jaipur"}})
    )
    assert guide["overview"]
    details = pipeline.generate_place_details(
        PlaceDetailsRequest(place_name="Amber Fort", destination="Jaipur")
    )
    assert details["name"] == "Amber Fort"


def test_plan_rejected_by_trip_models_keeps_raw_text(tmp_path):
    audit = AuditLogger(tmp_path)
    plan = make_plan((100, 50, 20))
    plan["itinerary"][0]["places"][0]["description"] = None
    plan["summary"]["highlights"] = "forts"
    raw = fenced(plan)
    pipeline = GenerationPipeline(ScriptedLLM(raw), audit)

    with pytest.raises(SchemaMismatch) as excinfo:
        pipeline.generate_trip_plan(TripRequest(destination="Jaipur", duration=1))
    assert excinfo.value.raw_text == raw
    assert any(e.startswith("itinerary.0.places.0.description") for e in excinfo.value.errors)
    assert any(e.startswith("summary.highlights") for e in excinfo.value.errors)

    events, records = _events(audit, "trip_plan")
    assert events == ["prompt", "raw_response", "outcome"]
    assert records[-1]["payload"]["ok"] is False
