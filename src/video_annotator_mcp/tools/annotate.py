"""Annotation tools — the presentation layer's view of one pipeline session.

The server process holds a single orchestrator session; every tool returns
the session status dict (or a ToolError dict on failure).
"""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import Field

from ..client import GeminiClient
from ..config import get_config
from ..errors import make_tool_error
from ..modes import DEFAULT_MODE, MODES
from ..orchestrator import PipelineOrchestrator
from ..tracing import trace
from ..transfer import _validate_video_path
from ..types import ModeKey, PromptText, SubMode, VideoFilePath, ViewName

logger = logging.getLogger(__name__)
annotate_server = FastMCP("annotate")

_client: GeminiClient | None = None
_session: PipelineOrchestrator | None = None


def get_session() -> PipelineOrchestrator:
    """Return (or compose) the server's orchestrator session."""
    global _client, _session
    if _session is None:
        _client = GeminiClient(get_config())
        _session = PipelineOrchestrator.from_client(_client)
    return _session


async def close_session() -> bool:
    """Tear down the session and its Gemini client. Returns True if one existed."""
    global _client, _session
    client, _client, _session = _client, None, None
    if client is None:
        return False
    await client.aclose()
    return True


@annotate_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def annotate_modes() -> dict:
    """List the analysis modes with their sub-modes and views.

    Returns:
        Dict with ``modes`` (one entry per mode) and ``default_mode``.
    """
    return {
        "modes": [mode.describe() for mode in MODES.values()],
        "default_mode": DEFAULT_MODE,
    }


@annotate_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="annotate_load_video", span_type="TOOL")
async def annotate_load_video(file_path: VideoFilePath) -> dict:
    """Upload a local video and wait until Gemini has processed it.

    Replaces any previously loaded video and discards its annotations.

    Args:
        file_path: Path to a local video file.

    Returns:
        Session status dict (state MEDIA_READY on success).
    """
    try:
        path, mime = _validate_video_path(file_path)
        session = get_session()
        session.transfer.check_size(path.stat().st_size, path.name)
        data = await asyncio.to_thread(path.read_bytes)
        status = await session.load_video(data, display_name=path.name, mime_hint=mime)
        return status.to_dict()
    except Exception as exc:
        return make_tool_error(exc)


@annotate_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=False,
        openWorldHint=True,
    )
)
@trace(name="annotate_video", span_type="TOOL")
async def annotate_video(
    mode: ModeKey = "A/V captions",
    sub_mode: SubMode = None,
    prompt: PromptText = "",
) -> dict:
    """Analyze the loaded video in one mode and return timestamped annotations.

    Args:
        mode: Analysis mode (see annotate_modes).
        sub_mode: For Chart — which criterion to plot, or "Custom".
        prompt: Free text for Custom mode or a Custom chart.

    Returns:
        Session status dict; ``result.annotations`` holds the records in
        video order.
    """
    try:
        status = await get_session().analyze(mode, sub_mode=sub_mode, free_text=prompt)
        return status.to_dict()
    except Exception as exc:
        return make_tool_error(exc)


@annotate_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def annotate_select_view(
    view: Annotated[ViewName, Field(description="View to render the current result in")],
) -> dict:
    """Switch the view of the current annotations (timeline, list, table, chart)."""
    try:
        return get_session().select_view(view).to_dict()
    except Exception as exc:
        return make_tool_error(exc)


@annotate_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=True,
        destructiveHint=False,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def annotate_status() -> dict:
    """Return the session's state, loading flag, media, result and last error."""
    return get_session().status.to_dict()


@annotate_server.tool(
    annotations=ToolAnnotations(
        readOnlyHint=False,
        destructiveHint=True,
        idempotentHint=True,
        openWorldHint=False,
    )
)
async def annotate_reset() -> dict:
    """Forget the loaded video and its annotations."""
    try:
        return get_session().reset().to_dict()
    except Exception as exc:
        return make_tool_error(exc)
