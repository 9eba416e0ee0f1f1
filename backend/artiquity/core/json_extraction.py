"""JSON Extraction — recover JSON payloads from model text output.

Invariants:
    - All functions are PURE
    - parse_model_json never raises: returns None when no JSON value can be recovered
    - Code fences (```json ... ```) are stripped before any parse attempt

Design Decisions:
    - Fallback levels mirror the research agent parser: direct parse, then the
      outermost block opened first, then give up and let the caller choose
      its literal fallback object
"""

import json
import re

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text.strip()).strip()


def parse_model_json(text: str | None):
    """Parse JSON from a model response.

    Fallback levels:
    1. Direct json.loads after fence stripping
    2. Regex: outermost block of whichever bracket opens first, then the other
    3. None
    """
    if not text:
        return None
    cleaned = strip_code_fences(text)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    brace, bracket = cleaned.find("{"), cleaned.find("[")
    array_first = bracket != -1 and (brace == -1 or bracket < brace)
    patterns = (_ARRAY_RE, _OBJECT_RE) if array_first else (_OBJECT_RE, _ARRAY_RE)
    for pattern in patterns:
        match = pattern.search(cleaned)
        if match:
            try:
                return json.loads(match.group())
            except json.JSONDecodeError:
                continue
    return None


def parse_model_object(text: str | None) -> dict | None:
    """parse_model_json restricted to JSON objects."""
    value = parse_model_json(text)
    return value if isinstance(value, dict) else None
