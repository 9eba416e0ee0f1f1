"""JSON Extraction — recovering JSON from model text output."""

from artiquity.core.json_extraction import (
    parse_model_json, parse_model_object, strip_code_fences,
)


def test_strip_code_fences():
    assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_direct_parse():
    assert parse_model_json('[1, 2]') == [1, 2]


def test_fenced_object():
    assert parse_model_object('```json\n{"ok": true}\n```') == {"ok": True}


def test_object_embedded_in_prose():
    text = 'Here is the result: {"name": "x"} hope it helps'
    assert parse_model_object(text) == {"name": "x"}


def test_array_embedded_in_prose():
    assert parse_model_json('Capsules: [{"a": 1}] done') == [{"a": 1}]


def test_object_holding_array_embedded_in_prose():
    assert parse_model_json('Result: {"tags": ["a", "b"]} end') == {"tags": ["a", "b"]}


def test_unrecoverable_returns_none():
    assert parse_model_json("not json at all") is None
    assert parse_model_json("") is None
    assert parse_model_json(None) is None


def test_object_helper_rejects_arrays():
    assert parse_model_object("[1, 2]") is None
