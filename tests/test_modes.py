"""Tests for the static analysis mode catalog."""

from __future__ import annotations

from video_annotator_mcp.models.annotation import ResultShape
from video_annotator_mcp.modes import ALL_VIEWS, MODES, VIEW_CHART, VIEW_TABLE


class TestCatalog:
    def test_every_mode_has_known_views(self):
        for mode in MODES.values():
            assert mode.views
            assert set(mode.views) <= set(ALL_VIEWS)
            assert mode.default_view == mode.views[0]

    def test_table_view_only_for_object_shape(self):
        for mode in MODES.values():
            if VIEW_TABLE in mode.views:
                assert mode.result_shape is ResultShape.TEXTUAL_WITH_OBJECTS

    def test_chart_view_only_for_numeric_shape(self):
        for mode in MODES.values():
            assert (VIEW_CHART in mode.views) == (mode.result_shape is ResultShape.NUMERIC)

    def test_only_custom_takes_free_text(self):
        assert [k for k, m in MODES.items() if m.accepts_free_text] == ["Custom"]

    def test_describe_is_serialisable(self):
        described = MODES["Table"].describe()
        assert described == {
            "key": "Table",
            "emoji": "🤓",
            "result_shape": "TEXTUAL_WITH_OBJECTS",
            "views": ["table", "list", "timeline"],
            "default_view": "table",
            "sub_modes": [],
            "accepts_free_text": False,
        }
