"""Shared type aliases for tool parameters."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field

# ── Literal enums ────────────────────────────────────────────────────────────

ModeKey = Literal[
    "A/V captions", "Paragraph", "Key moments", "Table", "Haiku", "Chart", "Custom",
]
ViewName = Literal["timeline", "list", "table", "chart"]

# ── Annotated aliases ────────────────────────────────────────────────────────

VideoFilePath = Annotated[str, Field(
    min_length=1,
    description="Path to a local video file (mp4, webm, mov, avi, mkv, mpeg, wmv, 3gpp)",
)]
SubMode = Annotated[str | None, Field(
    description="Chart criterion — 'Excitement', 'Importance', 'Number of people', "
    "or 'Custom' to chart by the prompt text",
)]
PromptText = Annotated[str, Field(
    max_length=4000,
    description="Free text for the Custom mode or the Custom chart criterion",
)]
