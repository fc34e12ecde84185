"""
modules/generation/response_parser.py
-------------------------------------
Turns free text from the generative model into a parsed JSON value.

Stages, applied in order and stopping at the first success:

  1. Fence strip   — interior of a ```json block, else of an untagged ```
                     block, else the whole text.
  2. Direct parse  — json.loads on that candidate.
  3. Boundary cut  — first opening bracket of the expected kind to the LAST
                     closing bracket of the same kind in the raw text.
                     No opening bracket at all → NoJsonFound.
  4. Repairs       — (a) trailing commas before } or ]
                     (b) bare-word object keys get quoted
                     (c) simple single-quoted values become double-quoted
                     Repairs only touch text outside double-quoted strings
                     and never add brackets.
  5. Repaired parse.
  6. Anything else → UnparsableResponse carrying the raw text.

A value of the wrong top-level kind (list where an object was expected, or
the reverse) is a SchemaMismatch, not a parse failure. Key-level checks live
in modules/validation/response_validator.py.

Usage:
    result = parse_response(raw, ResponseKind.OBJECT)
    if not result.ok:
        show_error(result.error.message, result.raw_text)

    plan = extract_json(raw)          # raises instead
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from errors import GenerationError, NoJsonFound, SchemaMismatch, UnparsableResponse

logger = logging.getLogger(__name__)


class ResponseKind(str, Enum):
    OBJECT = "object"
    ARRAY = "array"

    @property
    def brackets(self) -> tuple[str, str]:
        return ("{", "}") if self is ResponseKind.OBJECT else ("[", "]")

    @property
    def python_type(self) -> type:
        return dict if self is ResponseKind.OBJECT else list


# ── Result ─────────────────────────────────────────────────────────────────────

@dataclass
class ParseResult:
    """
    Outcome of one extraction run.

    Attributes:
        ok:       True iff ``value`` holds a parsed value of the expected kind.
        value:    The parsed JSON value (None on failure).
        error:    The failure (UnparsableResponse / NoJsonFound / SchemaMismatch).
        raw_text: The untouched model text, kept for diagnostics.
        stage:    "direct" or "repaired" on success, "" on failure.
    """
    ok: bool
    value: Any = None
    error: Optional[GenerationError] = None
    raw_text: str = ""
    stage: str = ""

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> Any:
        """Return the value, or raise the recorded error."""
        if self.error is not None:
            raise self.error
        return self.value


# ── Stage 1: fences ────────────────────────────────────────────────────────────

_JSON_FENCE = re.compile(r"```json[ \t]*\r?\n?(.*?)```", re.DOTALL | re.IGNORECASE)
_PLAIN_FENCE = re.compile(r"```[ \t]*\r?\n(.*?)```", re.DOTALL)


def strip_fences(raw_text: str) -> str:
    """Return the interior of the first json fence, else of an untagged fence."""
    match = _JSON_FENCE.search(raw_text) or _PLAIN_FENCE.search(raw_text)
    if match:
        return match.group(1).strip()
    return raw_text


# ── Stage 3: boundaries ────────────────────────────────────────────────────────

def slice_boundaries(raw_text: str, kind: ResponseKind) -> Optional[str]:
    """
    Cut from the first opening bracket to the last closing bracket of ``kind``.

    Raises NoJsonFound when there is no opening bracket. Returns None when
    there is no closing bracket after it (truncated output).
    """
    open_char, close_char = kind.brackets
    start = raw_text.find(open_char)
    if start == -1:
        raise NoJsonFound(
            f"No JSON {kind.value} found in the model response", raw_text=raw_text
        )
    end = raw_text.rfind(close_char)
    if end <= start:
        return None
    return raw_text[start:end + 1]


# ── Stage 4: repairs ───────────────────────────────────────────────────────────

_STRING_LITERAL = re.compile(r'"(?:\\.|[^"\\])*"')
# Double-quoted literals plus the simple single-quoted values repair (c) fixes.
_QUOTED_SPAN = re.compile(r'"(?:\\.|[^"\\])*"|\'[^\'"\\]*\'')
_TRAILING_COMMA = re.compile(r",(?=\s*[}\]])")
_BARE_KEY = re.compile(r"([{,])(\s*)([A-Za-z_$][\w$]*)\s*:")
_SINGLE_QUOTED_VALUE = re.compile(r":\s*'([^'\"\\]*)'(?=\s*[,}\]])")


def _outside_strings(
    text: str, transform: Callable[[str], str], literal: re.Pattern = _STRING_LITERAL
) -> str:
    """Apply ``transform`` to every stretch of ``text`` between ``literal`` matches."""
    parts: list[str] = []
    pos = 0
    for match in literal.finditer(text):
        parts.append(transform(text[pos:match.start()]))
        parts.append(match.group())
        pos = match.end()
    parts.append(transform(text[pos:]))
    return "".join(parts)


def remove_trailing_commas(text: str) -> str:
    return _outside_strings(text, lambda seg: _TRAILING_COMMA.sub("", seg), _QUOTED_SPAN)


def quote_bare_keys(text: str) -> str:
    return _outside_strings(text, lambda seg: _BARE_KEY.sub(r'\1\2"\3":', seg), _QUOTED_SPAN)


def double_quote_values(text: str) -> str:
    return _outside_strings(text, lambda seg: _SINGLE_QUOTED_VALUE.sub(r':"\1"', seg))


REPAIRS: tuple[Callable[[str], str], ...] = (
    remove_trailing_commas,
    quote_bare_keys,
    double_quote_values,
)


def repair(text: str) -> str:
    """Run the fixed repair sequence over ``text``."""
    for step in REPAIRS:
        text = step(text)
    return text


# ── Pipeline ───────────────────────────────────────────────────────────────────

def _reject_constant(name: str) -> Any:
    # NaN / Infinity are not JSON and cannot be sent back to a client.
    raise json.JSONDecodeError(f"{name} is not valid JSON", name, 0)


def _loads(text: str) -> Any:
    return json.loads(text, parse_constant=_reject_constant)


def _check_kind(value: Any, kind: ResponseKind, raw_text: str, stage: str) -> ParseResult:
    if isinstance(value, kind.python_type):
        logger.debug("Parsed model response (%s stage)", stage)
        return ParseResult(ok=True, value=value, raw_text=raw_text, stage=stage)
    error = SchemaMismatch(
        f"Expected a JSON {kind.value}, got {type(value).__name__}",
        errors=[f"top-level value must be a JSON {kind.value}"],
        raw_text=raw_text,
    )
    return ParseResult(ok=False, error=error, raw_text=raw_text)


def parse_response(raw_text: Optional[str], kind: ResponseKind | str = ResponseKind.OBJECT) -> ParseResult:
    """Extract one JSON value of ``kind`` from model text. Never raises."""
    kind = ResponseKind(kind)
    raw_text = raw_text if isinstance(raw_text, str) else ""

    candidate = strip_fences(raw_text)
    try:
        return _check_kind(_loads(candidate), kind, raw_text, "direct")
    except json.JSONDecodeError:
        pass

    try:
        sliced = slice_boundaries(raw_text, kind)
    except NoJsonFound as exc:
        logger.warning("Model response contains no JSON %s", kind.value)
        return ParseResult(ok=False, error=exc, raw_text=raw_text)

    if sliced is not None:
        try:
            return _check_kind(_loads(repair(sliced)), kind, raw_text, "repaired")
        except json.JSONDecodeError as exc:
            logger.warning("Repaired model response still unparsable: %s", exc)

    error = UnparsableResponse("Failed to parse AI response", raw_text=raw_text)
    return ParseResult(ok=False, error=error, raw_text=raw_text)


def extract_json(raw_text: Optional[str], kind: ResponseKind | str = ResponseKind.OBJECT) -> Any:
    """Like parse_response, but returns the value or raises the failure."""
    return parse_response(raw_text, kind).unwrap()
