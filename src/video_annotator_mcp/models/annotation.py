"""Pipeline data models — media handles, analysis requests and annotations.

Every model is frozen: a new instance is built wherever the pipeline moves
forward (a re-polled handle, a fresh request, a new annotation list).
"""

from __future__ import annotations

from enum import Enum

from google.genai import types
from pydantic import BaseModel, ConfigDict, Field


class ReadinessState(str, Enum):
    """Remote preprocessing state of an uploaded file."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    READY = "READY"
    FAILED = "FAILED"

    @property
    def is_final(self) -> bool:
        return self in (ReadinessState.READY, ReadinessState.FAILED)


class ResultShape(str, Enum):
    """Which annotation record shape an analysis produces."""

    TEXTUAL = "TEXTUAL"
    TEXTUAL_WITH_OBJECTS = "TEXTUAL_WITH_OBJECTS"
    NUMERIC = "NUMERIC"


class MediaHandle(BaseModel):
    """Reference to a file held by the remote media store."""

    model_config = ConfigDict(frozen=True)

    remote_id: str = Field(description="Files API resource name, e.g. files/abc123")
    mime_type: str
    uri: str = ""
    readiness_state: ReadinessState = ReadinessState.PENDING
    display_name: str = ""
    size_bytes: int = 0


class AnnotationRecord(BaseModel):
    """One timestamped annotation extracted from the video."""

    model_config = ConfigDict(frozen=True)

    time: str = Field(description="Timecode in MM:SS or HH:MM:SS format")
    text: str = ""
    objects: list[str] | None = None
    value: float | None = None


class AnalysisRequest(BaseModel):
    """Everything sent in one analyze call. Built fresh per invocation."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    mode_key: str
    instruction_text: str
    media: MediaHandle
    declarations: tuple[types.FunctionDeclaration, ...]
    temperature: float
    system_instruction: str
    label: str = Field(default="", description="What the values measure, for chart axes")


class AnnotationResult(BaseModel):
    """Outcome of a successful analysis: the records plus their view state."""

    model_config = ConfigDict(frozen=True)

    mode_key: str
    shape: ResultShape | None = None
    annotations: list[AnnotationRecord] = Field(default_factory=list)
    views: tuple[str, ...] = ()
    current_view: str | None = None
    label: str = ""
