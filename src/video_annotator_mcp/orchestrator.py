"""Session state machine driving upload, readiness and analysis.

States::

    IDLE → MEDIA_PENDING → MEDIA_READY → ANALYZING → DONE
                │               │            │
                ▼               ▼            ▼
        TRANSFER_FAILED  PROCESSING_FAILED  ANALYSIS_FAILED → MEDIA_READY

One orchestrator owns one session: a single media handle and a single
annotation result. Operations run strictly in sequence; starting one while
another is in flight raises InvalidStateError.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from . import normalizer, request_builder, tracing
from .analysis import AnalysisClient
from .client import GeminiClient
from .errors import InvalidStateError, make_tool_error
from .models.annotation import AnnotationResult, MediaHandle, ReadinessState
from .modes import get_mode
from .transfer import MediaTransferClient, ReadinessPoller

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 200


class PipelineState(str, Enum):
    IDLE = "IDLE"
    MEDIA_PENDING = "MEDIA_PENDING"
    MEDIA_READY = "MEDIA_READY"
    ANALYZING = "ANALYZING"
    DONE = "DONE"
    TRANSFER_FAILED = "TRANSFER_FAILED"
    PROCESSING_FAILED = "PROCESSING_FAILED"
    ANALYSIS_FAILED = "ANALYSIS_FAILED"


_IN_FLIGHT = {PipelineState.MEDIA_PENDING, PipelineState.ANALYZING}
_NEEDS_READY_MEDIA = {
    PipelineState.MEDIA_READY,
    PipelineState.ANALYZING,
    PipelineState.DONE,
    PipelineState.ANALYSIS_FAILED,
}
_FAILED = {
    PipelineState.TRANSFER_FAILED,
    PipelineState.PROCESSING_FAILED,
    PipelineState.ANALYSIS_FAILED,
}


@dataclass(frozen=True)
class SessionStatus:
    """The session's state plus the payload that state carries.

    ``error`` is the structured tool error of the last failure; MEDIA_READY
    keeps it after a failed analysis so the user sees why the retry is needed.
    """

    state: PipelineState = PipelineState.IDLE
    media: MediaHandle | None = None
    result: AnnotationResult | None = None
    error: dict | None = None

    def __post_init__(self) -> None:
        if self.state in _NEEDS_READY_MEDIA and (
            self.media is None or self.media.readiness_state is not ReadinessState.READY
        ):
            raise ValueError(f"{self.state.value} requires a READY media handle")
        if self.state is PipelineState.MEDIA_PENDING and self.media is not None:
            if self.media.readiness_state.is_final:
                raise ValueError("MEDIA_PENDING cannot hold a final media handle")
        if (self.state is PipelineState.DONE) != (self.result is not None):
            raise ValueError("An annotation result exists exactly in DONE")
        if self.state in _FAILED and self.error is None:
            raise ValueError(f"{self.state.value} requires an error")
        if self.state is PipelineState.IDLE and (self.media is not None or self.error is not None):
            raise ValueError("IDLE carries no payload")

    @property
    def is_loading(self) -> bool:
        return self.state in _IN_FLIGHT

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "loading": self.is_loading,
            "media": self.media.model_dump(mode="json") if self.media is not None else None,
            "result": self.result.model_dump(mode="json", exclude_none=True) if self.result is not None else None,
            "error": self.error,
        }


@dataclass(frozen=True)
class TransitionEvent:
    """Recorded state transition for auditability."""

    from_state: PipelineState
    to_state: PipelineState
    reason: str


@dataclass
class PipelineOrchestrator:
    """Sequences transfer, polling, request building, analysis and normalization."""

    transfer: MediaTransferClient
    poller: ReadinessPoller
    analysis: AnalysisClient
    on_transition: Callable[[SessionStatus], None] | None = None
    history: deque[TransitionEvent] = field(default_factory=lambda: deque(maxlen=HISTORY_LIMIT))
    _status: SessionStatus = field(default_factory=SessionStatus, init=False)

    @classmethod
    def from_client(
        cls,
        client: GeminiClient,
        on_transition: Callable[[SessionStatus], None] | None = None,
    ) -> PipelineOrchestrator:
        """Compose the pipeline components around one shared Gemini client."""
        return cls(
            transfer=MediaTransferClient(client),
            poller=ReadinessPoller(client),
            analysis=AnalysisClient(client),
            on_transition=on_transition,
        )

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def state(self) -> PipelineState:
        return self._status.state

    def _enter(self, status: SessionStatus, reason: str) -> SessionStatus:
        previous = self._status.state
        self._status = status
        self.history.append(TransitionEvent(previous, status.state, reason))
        logger.debug("%s → %s (%s)", previous.value, status.state.value, reason)
        if self.on_transition is not None:
            self.on_transition(status)
        return status

    def _require_not_busy(self, operation: str) -> None:
        if self.state in _IN_FLIGHT:
            raise InvalidStateError(
                f"Cannot {operation} while {self.state.value.lower()} is in progress"
            )

    def reset(self) -> SessionStatus:
        """Drop media and results, back to IDLE."""
        self._require_not_busy("reset")
        return self._enter(SessionStatus(), "reset")

    async def load_video(
        self, data: bytes, *, display_name: str, mime_hint: str | None = None
    ) -> SessionStatus:
        """Upload a new video and wait until it can be analyzed.

        Any previous media and annotations are discarded first. Cancelling
        the caller drops the half-loaded video and leaves the session IDLE.

        Raises:
            TransferError: Upload rejected (state TRANSFER_FAILED).
            ProcessingFailedError | ProcessingTimeoutError: Remote processing
                failed or never finished (state PROCESSING_FAILED).
        """
        self._require_not_busy("load a video")
        self._enter(SessionStatus(), "video dropped")
        self._enter(SessionStatus(state=PipelineState.MEDIA_PENDING), "upload started")

        try:
            with tracing.span("upload", attributes={"display_name": display_name}):
                pending = await self.transfer.upload(data, mime_hint, display_name)
        except asyncio.CancelledError:
            self._enter(SessionStatus(), "upload cancelled")
            raise
        except Exception as exc:
            self._enter(
                SessionStatus(state=PipelineState.TRANSFER_FAILED, error=make_tool_error(exc)),
                "upload failed",
            )
            raise
        self._enter(
            SessionStatus(state=PipelineState.MEDIA_PENDING, media=pending), "upload accepted",
        )

        try:
            with tracing.span("await_ready", attributes={"remote_id": pending.remote_id}):
                ready = await self.poller.await_ready(pending)
        except asyncio.CancelledError:
            self._enter(SessionStatus(), "processing wait cancelled")
            raise
        except Exception as exc:
            self._enter(
                SessionStatus(
                    state=PipelineState.PROCESSING_FAILED,
                    media=pending,
                    error=make_tool_error(exc),
                ),
                "processing failed",
            )
            raise
        return self._enter(SessionStatus(state=PipelineState.MEDIA_READY, media=ready), "media ready")

    async def analyze(
        self, mode_key: str, *, sub_mode: str | None = None, free_text: str = ""
    ) -> SessionStatus:
        """Run one analysis of the loaded video and enter DONE.

        Building the request happens before any transition, so an empty
        prompt leaves the session untouched and sends nothing. A cancelled
        call returns the session to MEDIA_READY without a result.

        Raises:
            InvalidStateError: No READY video, or another operation is running.
            EmptyPromptError: The mode needs text and none was given.
            AnalysisServiceError | ContractViolationError: The call or its
                decoding failed; the session returns to MEDIA_READY.
        """
        if self.state not in (PipelineState.MEDIA_READY, PipelineState.DONE):
            raise InvalidStateError(
                f"Cannot analyze from {self.state.value}; load a video first"
            )
        media = self._status.media
        mode = get_mode(mode_key)
        request = request_builder.build(mode, media, sub_mode=sub_mode, free_text=free_text)

        self._enter(SessionStatus(state=PipelineState.ANALYZING, media=media), f"analyze {mode.key}")
        try:
            with tracing.span("analyze", attributes={"mode": mode.key, "label": request.label or ""}) as span:
                response = await self.analysis.send(request)
                call = normalizer.first_call(response)
                annotations = normalizer.to_records(call) if call is not None else []
                if span is not None:
                    span.set_attribute("annotations", len(annotations))
        except asyncio.CancelledError:
            self._enter(SessionStatus(state=PipelineState.MEDIA_READY, media=media), "analysis cancelled")
            raise
        except Exception as exc:
            error = make_tool_error(exc)
            self._enter(
                SessionStatus(state=PipelineState.ANALYSIS_FAILED, media=media, error=error),
                "analysis failed",
            )
            self._enter(
                SessionStatus(state=PipelineState.MEDIA_READY, media=media, error=error),
                "ready for retry",
            )
            raise

        result = AnnotationResult(
            mode_key=mode.key,
            shape=call.shape if call is not None else None,
            annotations=annotations,
            views=mode.views,
            current_view=mode.default_view if call is not None else None,
            label=request.label,
        )
        logger.info("Mode '%s' produced %d annotation(s)", mode.key, len(annotations))
        return self._enter(
            SessionStatus(state=PipelineState.DONE, media=media, result=result), "analysis done",
        )

    def select_view(self, view: str) -> SessionStatus:
        """Switch the active view of the current result."""
        if self.state is not PipelineState.DONE:
            raise InvalidStateError(f"No result to view in state {self.state.value}")
        result = self._status.result
        if view not in result.views:
            allowed = ", ".join(result.views)
            raise ValueError(f"Invalid view '{view}' for {result.mode_key}. Allowed: {allowed}")
        return self._enter(
            SessionStatus(
                state=PipelineState.DONE,
                media=self._status.media,
                result=result.model_copy(update={"current_view": view}),
            ),
            f"view {view}",
        )
