import pytest

from errors import NoJsonFound, SchemaMismatch, UnparsableResponse
from modules.generation.response_parser import (
    ResponseKind,
    extract_json,
    parse_response,
    quote_bare_keys,
    remove_trailing_commas,
    repair,
    slice_boundaries,
    strip_fences,
)

from conftest import fenced


# ── Repairs on model output ───────────────────────────────────────────────────

def test_trailing_comma_inside_json_fence():
    result = parse_response('```json\n{"a": 1,}\n```')
    assert result.ok
    assert result.value == {"a": 1}
    assert result.stage == "repaired"


def test_bare_keys_and_single_quoted_value():
    assert extract_json("{a: 1, b: 'x'}") == {"a": 1, "b": "x"}


def test_no_json_at_all_is_unparsable():
    result = parse_response("no json here at all")
    assert not result.ok
    assert isinstance(result.error, UnparsableResponse)
    assert isinstance(result.error, NoJsonFound)
    assert result.error.raw_text == "no json here at all"


def test_truncated_object_is_not_completed():
    result = parse_response('{"a": 1')
    assert not result.ok
    assert isinstance(result.error, UnparsableResponse)
    assert result.error.message == "Failed to parse AI response"
    assert result.raw_text == '{"a": 1'


def test_extract_json_raises_recorded_error():
    with pytest.raises(UnparsableResponse):
        extract_json('{"a": [1, 2')


# ── Fences and boundaries ─────────────────────────────────────────────────────

@pytest.mark.parametrize("value", [
    {"itinerary": [{"day": 1, "places": []}], "summary": {"totalCost": 0}},
    {"name": "Hawa Mahal", "tips": ["Go early", "Carry water"], "nested": {"x": None}},
    {"quote": 'He said "hi", {not a brace}'},
])
def test_fenced_object_round_trip(value):
    result = parse_response(fenced(value))
    assert result.ok
    assert result.stage == "direct"
    assert result.value == value


def test_untagged_fence():
    assert strip_fences('Sure!\n```\n{"a": 2}\n```\nEnjoy') == '{"a": 2}'


def test_prose_around_object():
    raw = 'Here is your plan: {"a": {"b": 1}} Hope it helps!'
    assert extract_json(raw) == {"a": {"b": 1}}


def test_array_kind_uses_square_brackets():
    raw = 'Top picks:\n[{"name": "Goa"}, {"name": "Leh"},]\nHave fun'
    assert extract_json(raw, ResponseKind.ARRAY) == [{"name": "Goa"}, {"name": "Leh"}]


def test_slice_returns_none_without_closing_bracket():
    assert slice_boundaries('text {"a": 1', ResponseKind.OBJECT) is None


def test_slice_raises_without_opening_bracket():
    with pytest.raises(NoJsonFound):
        slice_boundaries("nothing", ResponseKind.ARRAY)


def test_wrong_top_level_kind_is_schema_mismatch():
    result = parse_response("[1, 2, 3]", ResponseKind.OBJECT)
    assert not result.ok
    assert isinstance(result.error, SchemaMismatch)


def test_nan_is_not_accepted():
    result = parse_response('{"a": NaN}')
    assert not result.ok


# ── Repairs leave string contents alone ────────────────────────────────────────

def test_repairs_do_not_touch_strings():
    text = '{"note": "a, } b", "tip": "x: y, z: w",}'
    assert repair(text) == '{"note": "a, } b", "tip": "x: y, z: w"}'


def test_trailing_comma_before_bracket():
    assert remove_trailing_commas("[1, 2, ]") == "[1, 2 ]"


def test_quote_bare_keys_after_string_value():
    assert quote_bare_keys('{"x": "y", b: 1}') == '{"x": "y", "b": 1}'


def test_quote_bare_keys_keeps_spacing():
    assert quote_bare_keys("{a: 1,\n  b: 2}") == '{"a": 1,\n  "b": 2}'


def test_single_quoted_value_with_key_like_text():
    text = "{a: 'x, note: y'}"
    assert quote_bare_keys(text) == "{\"a\": 'x, note: y'}"
    result = parse_response(text)
    assert result.ok
    assert result.value == {"a": "x, note: y"}
    assert result.stage == "repaired"


def test_single_quoted_value_with_trailing_comma_text():
    result = parse_response("{tip: 'pack light,]', day: 1,}")
    assert result.value == {"tip": "pack light,]", "day": 1}


def test_repair_adds_no_brackets():
    text = '{"a": [1, 2'
    assert repair(text).count("]") == 0
    assert repair(text).count("}") == 0
