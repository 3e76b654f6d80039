"""Tests for recovering JSON objects from free-form oracle output."""

from __future__ import annotations

import pytest

from estimo.exceptions import JsonExtractionError
from estimo.jsonparse import extract_json, find_balanced_object


class TestExtractJson:
    def test_plain_object(self) -> None:
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_code_fenced(self) -> None:
        text = 'Here you go:\n```json\n{"sheets": []}\n```'
        assert extract_json(text) == {"sheets": []}

    def test_surrounding_prose(self) -> None:
        text = 'Reasoning first. {"total": 12, "note": "a } in a string"} Trailing text.'
        assert extract_json(text) == {"total": 12, "note": "a } in a string"}

    def test_escaped_quote_in_string(self) -> None:
        text = 'x {"label": "6\\" slab {thick}"} y'
        assert extract_json(text) == {"label": '6" slab {thick}'}

    def test_empty_raises(self) -> None:
        with pytest.raises(JsonExtractionError):
            extract_json("   ")

    def test_no_object_raises(self) -> None:
        with pytest.raises(JsonExtractionError, match="No JSON object"):
            extract_json("no json here")

    def test_array_is_not_an_object(self) -> None:
        with pytest.raises(JsonExtractionError):
            extract_json("[1, 2, 3]")

    def test_braced_prose_before_object(self) -> None:
        text = 'Checked {note} the schedule. {"columns": 14}'
        assert extract_json(text) == {"columns": 14}

    def test_unclosed_brace_before_object(self) -> None:
        text = 'Partial { draft, final answer: {"columns": 14}'
        assert extract_json(text) == {"columns": 14}

    def test_only_invalid_candidates_raise(self) -> None:
        with pytest.raises(JsonExtractionError, match="Invalid JSON object"):
            extract_json("see {note} and {other}")


class TestFindBalancedObject:
    def test_finds_object_after_noise(self) -> None:
        assert find_balanced_object('noise {"ok": true} tail') == '{"ok": true}'

    def test_none_without_braces(self) -> None:
        assert find_balanced_object("nothing") is None

    def test_stray_closing_brace_ignored(self) -> None:
        assert find_balanced_object('} {"ok": true}') == '{"ok": true}'
