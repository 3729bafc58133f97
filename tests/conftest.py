"""Shared test fixtures for video-annotator-mcp."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.genai import types

from video_annotator_mcp.client import GeminiClient
from video_annotator_mcp.config import AnnotatorConfig
from video_annotator_mcp.models.annotation import MediaHandle, ReadinessState


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped.

    FastMCP 2.x wraps @server.tool functions in FunctionTool (not callable).
    FastMCP 3.x preserves the original function. This helper works with both.
    """
    return getattr(tool, "fn", tool)


def make_file(
    state: str | None = "PROCESSING",
    *,
    name: str = "files/abc123",
    uri: str = "https://generativelanguage.googleapis.com/v1beta/files/abc123",
    mime_type: str = "video/mp4",
) -> types.File:
    """Build a Files API ``File`` as returned by upload/get."""
    return types.File(name=name, uri=uri, mime_type=mime_type, state=state)


def make_response(*calls: tuple[str, dict]) -> types.GenerateContentResponse:
    """Build a model response holding the given ``(name, args)`` function calls."""
    parts = [types.Part(function_call=types.FunctionCall(name=n, args=a)) for n, a in calls]
    if not parts:
        parts = [types.Part(text="I could not find anything to annotate.")]
    return types.GenerateContentResponse(
        candidates=[types.Candidate(content=types.Content(role="model", parts=parts))]
    )


def make_handle(state: ReadinessState = ReadinessState.READY, **overrides: Any) -> MediaHandle:
    fields = {
        "remote_id": "files/abc123",
        "mime_type": "video/mp4",
        "uri": "https://generativelanguage.googleapis.com/v1beta/files/abc123",
        "readiness_state": state,
        "display_name": "clip.mp4",
        "size_bytes": 4,
    }
    fields.update(overrides)
    return MediaHandle(**fields)


@pytest.fixture(autouse=True)
def _set_dummy_api_key(monkeypatch):
    """Ensure tests never hit real Gemini API."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key-not-real")


@pytest.fixture(autouse=True)
def _disable_tracing(monkeypatch):
    """Disable MLflow tracing in all tests to avoid real tracking-server calls."""
    monkeypatch.setenv("GEMINI_TRACING_ENABLED", "false")


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/video-annotator-mcp/.env."""
    monkeypatch.setattr(
        "video_annotator_mcp.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture()
def clean_config():
    """Reset the server config cache between tests."""
    import video_annotator_mcp.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture()
def annotator_config() -> AnnotatorConfig:
    return AnnotatorConfig(gemini_api_key="test-key-not-real")


@pytest.fixture()
def mock_gemini(annotator_config):
    """GeminiClient whose SDK client is a mock with async Files and Models APIs."""
    sdk = MagicMock()
    sdk.aio.files.upload = AsyncMock(return_value=make_file("PROCESSING"))
    sdk.aio.files.get = AsyncMock(return_value=make_file("ACTIVE"))
    sdk.aio.models.generate_content = AsyncMock(return_value=make_response())

    client = GeminiClient(annotator_config)
    client._client = sdk
    return {"client": client, "sdk": sdk}
