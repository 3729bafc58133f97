"""Tests for the annotate MCP tools."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

import video_annotator_mcp.tools.annotate as annotate_mod
from tests.conftest import make_response, unwrap_tool
from video_annotator_mcp.config import AnnotatorConfig
from video_annotator_mcp.orchestrator import PipelineOrchestrator

annotate_modes = unwrap_tool(annotate_mod.annotate_modes)
annotate_load_video = unwrap_tool(annotate_mod.annotate_load_video)
annotate_video = unwrap_tool(annotate_mod.annotate_video)
annotate_select_view = unwrap_tool(annotate_mod.annotate_select_view)
annotate_status = unwrap_tool(annotate_mod.annotate_status)
annotate_reset = unwrap_tool(annotate_mod.annotate_reset)


@pytest.fixture(autouse=True)
def session(mock_gemini, monkeypatch):
    """Install an orchestrator backed by the mocked Gemini client."""
    orch = PipelineOrchestrator.from_client(mock_gemini["client"])
    monkeypatch.setattr(annotate_mod, "_client", mock_gemini["client"])
    monkeypatch.setattr(annotate_mod, "_session", orch)
    with patch("video_annotator_mcp.transfer.asyncio.sleep", new_callable=AsyncMock):
        yield orch


@pytest.fixture()
def video(tmp_path):
    f = tmp_path / "clip.mp4"
    f.write_bytes(b"\x00" * 16)
    return f


class TestModesAndStatus:
    async def test_modes_listed(self):
        out = await annotate_modes()
        keys = [m["key"] for m in out["modes"]]
        assert keys == ["A/V captions", "Paragraph", "Key moments", "Table", "Haiku", "Chart", "Custom"]
        chart = out["modes"][keys.index("Chart")]
        assert chart["sub_modes"] == ["Excitement", "Importance", "Number of people", "Custom"]
        assert out["default_mode"] == "A/V captions"

    async def test_status_starts_idle(self):
        out = await annotate_status()
        assert out["state"] == "IDLE"
        assert out["loading"] is False


class TestLoadVideo:
    async def test_missing_file_returns_error(self, tmp_path):
        out = await annotate_load_video(str(tmp_path / "nope.mp4"))
        assert out["category"] == "FILE_NOT_FOUND"

    async def test_unsupported_extension_returns_error(self, tmp_path):
        f = tmp_path / "notes.txt"
        f.write_text("hi")
        out = await annotate_load_video(str(f))
        assert out["category"] == "FILE_UNSUPPORTED"

    async def test_upload_and_ready(self, video, mock_gemini):
        out = await annotate_load_video(str(video))

        assert out["state"] == "MEDIA_READY"
        assert out["media"]["readiness_state"] == "READY"
        assert out["media"]["display_name"] == "clip.mp4"
        kwargs = mock_gemini["sdk"].aio.files.upload.call_args.kwargs
        assert kwargs["file"].read() == b"\x00" * 16

    async def test_oversized_file_rejected_before_read(self, tmp_path, mock_gemini):
        mock_gemini["client"].config = AnnotatorConfig(gemini_api_key="k", max_upload_bytes=8)
        big = tmp_path / "big.mp4"
        big.write_bytes(b"\x00" * 32)

        with patch.object(Path, "read_bytes") as mock_read:
            out = await annotate_load_video(str(big))

        assert out["category"] == "TRANSFER_REJECTED"
        assert "exceeds limit" in out["error"]
        mock_read.assert_not_called()
        mock_gemini["sdk"].aio.files.upload.assert_not_awaited()


class TestAnnotate:
    async def test_before_load_is_invalid_state(self):
        out = await annotate_video(mode="Paragraph")
        assert out["category"] == "INVALID_STATE"

    async def test_full_flow(self, video, mock_gemini):
        mock_gemini["sdk"].aio.models.generate_content = AsyncMock(return_value=make_response((
            "set_timecodes_with_objects",
            {"timecodes": [{"time": "00:02", "text": "A cat\\'s nap", "objects": ["🐱 cat"]}]},
        )))
        await annotate_load_video(str(video))

        out = await annotate_video(mode="Table")

        assert out["state"] == "DONE"
        assert out["result"]["annotations"] == [
            {"time": "00:02", "text": "A cat's nap", "objects": ["🐱 cat"]}
        ]
        assert out["result"]["current_view"] == "table"

        viewed = await annotate_select_view("timeline")
        assert viewed["result"]["current_view"] == "timeline"

        bad = await annotate_select_view("chart")
        assert bad["category"] == "INVALID_ARGUMENT"

    async def test_empty_custom_prompt(self, video, mock_gemini):
        await annotate_load_video(str(video))

        out = await annotate_video(mode="Custom", prompt="  ")

        assert out["category"] == "EMPTY_PROMPT"
        assert out["retryable"] is True
        mock_gemini["sdk"].aio.models.generate_content.assert_not_awaited()

    async def test_reset(self, video):
        await annotate_load_video(str(video))
        out = await annotate_reset()
        assert out["state"] == "IDLE"
        assert out["media"] is None


class TestSessionLifecycle:
    async def test_close_session(self, mock_gemini):
        mock_gemini["sdk"].aio.aclose = AsyncMock()

        assert await annotate_mod.close_session() is True

        mock_gemini["sdk"].aio.aclose.assert_awaited_once()
        mock_gemini["sdk"].close.assert_called_once()
        assert annotate_mod._session is None
        assert await annotate_mod.close_session() is False

    async def test_get_session_composes_from_config(self, monkeypatch, clean_config):
        monkeypatch.setattr(annotate_mod, "_session", None)
        monkeypatch.setattr(annotate_mod, "_client", None)

        session = annotate_mod.get_session()

        assert session is annotate_mod.get_session()
        assert annotate_mod._client.config.gemini_api_key == "test-key-not-real"
