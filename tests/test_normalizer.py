"""Tests for function-call decoding into annotation records."""

from __future__ import annotations

import pytest

from tests.conftest import make_response
from video_annotator_mcp.errors import MalformedCallError, UnknownFunctionError
from video_annotator_mcp.models.annotation import AnnotationRecord, ResultShape
from video_annotator_mcp.normalizer import first_call, normalize, shape_of


class TestNoCall:
    def test_text_only_response_is_empty(self):
        assert normalize(make_response()) == []
        assert shape_of(make_response()) is None

    def test_response_without_candidates_is_empty(self):
        from google.genai import types

        assert normalize(types.GenerateContentResponse()) == []


class TestTextual:
    def test_escaped_apostrophe_is_unescaped(self):
        response = make_response(
            ("set_timecodes", {"timecodes": [{"time": "00:05", "text": "A car passes by\\'s"}]})
        )

        records = normalize(response)

        assert [r.model_dump(exclude_none=True) for r in records] == [
            {"time": "00:05", "text": "A car passes by's"}
        ]

    def test_text_without_escape_unchanged(self):
        text = 'She says "hello" and it\'s sunny \\ outside'
        response = make_response(("set_timecodes", {"timecodes": [{"time": "01:02", "text": text}]}))
        assert normalize(response)[0].text == text

    def test_order_preserved_not_sorted(self):
        entries = [
            {"time": "00:30", "text": "b"},
            {"time": "00:10", "text": "a"},
            {"time": "00:30", "text": "b"},
        ]
        records = normalize(make_response(("set_timecodes", {"timecodes": entries})))
        assert [(r.time, r.text) for r in records] == [("00:30", "b"), ("00:10", "a"), ("00:30", "b")]

    def test_only_first_call_is_used(self):
        response = make_response(
            ("set_timecodes", {"timecodes": [{"time": "00:01", "text": "first"}]}),
            ("set_timecodes_with_numeric_values", {"timecodes": [{"time": "00:02", "value": 3}]}),
        )
        assert normalize(response) == [AnnotationRecord(time="00:01", text="first")]
        assert shape_of(response) is ResultShape.TEXTUAL

    def test_idempotent(self):
        response = make_response(
            ("set_timecodes", {"timecodes": [{"time": "00:05", "text": "it\\'s"}]})
        )
        assert normalize(response) == normalize(response)


class TestWithObjects:
    def test_objects_pass_through_in_order(self):
        response = make_response((
            "set_timecodes_with_objects",
            {"timecodes": [
                {"time": "00:03", "text": "A dog\\'s toy", "objects": ["🐶 dog", "🧸 toy", "🐶 dog"]},
                {"time": "00:09", "text": "Empty room", "objects": []},
            ]},
        ))

        records = normalize(response)

        assert records[0].text == "A dog's toy"
        assert records[0].objects == ["🐶 dog", "🧸 toy", "🐶 dog"]
        assert records[1].objects == []
        assert shape_of(response) is ResultShape.TEXTUAL_WITH_OBJECTS


class TestNumeric:
    def test_values_pass_through(self):
        response = make_response((
            "set_timecodes_with_numeric_values",
            {"timecodes": [{"time": "00:00", "value": 7}, {"time": "00:15", "value": 2.5}]},
        ))

        records = normalize(response)

        assert [(r.time, r.value) for r in records] == [("00:00", 7.0), ("00:15", 2.5)]
        assert all(r.objects is None for r in records)
        assert shape_of(response) is ResultShape.NUMERIC

    def test_numeric_text_is_not_rewritten(self):
        response = make_response((
            "set_timecodes_with_numeric_values",
            {"timecodes": [{"time": "00:00", "value": 1, "text": "it\\'s"}]},
        ))
        assert normalize(response)[0].text == "it\\'s"


class TestContractViolations:
    def test_unknown_function_raises(self):
        response = make_response(("foo", {"timecodes": []}))
        with pytest.raises(UnknownFunctionError, match="foo") as exc_info:
            normalize(response)
        assert exc_info.value.name == "foo"

    def test_missing_timecodes_raises_malformed(self):
        with pytest.raises(MalformedCallError):
            normalize(make_response(("set_timecodes", {"entries": []})))

    def test_non_numeric_value_raises_malformed(self):
        response = make_response((
            "set_timecodes_with_numeric_values",
            {"timecodes": [{"time": "00:00", "value": "lots"}]},
        ))
        with pytest.raises(MalformedCallError):
            normalize(response)

    def test_first_call_returns_tagged_variant(self):
        call = first_call(make_response(("set_timecodes", {"timecodes": []})))
        assert call.name == "set_timecodes"
        assert call.shape is ResultShape.TEXTUAL
