"""Assemble the analyze request from a mode, the user's input and the media."""

from __future__ import annotations

from .errors import EmptyPromptError
from .functions import declarations_for
from .models.annotation import AnalysisRequest, MediaHandle, ReadinessState
from .modes import CUSTOM_SUB_MODE, AnalysisMode
from .prompts.annotate import SYSTEM_INSTRUCTION

ANALYSIS_TEMPERATURE = 0.5


def _require_text(mode: AnalysisMode, free_text: str) -> str:
    text = free_text.strip()
    if not text:
        raise EmptyPromptError(f"Mode '{mode.key}' needs a prompt, got an empty one")
    return text


def resolve_instruction(
    mode: AnalysisMode, *, sub_mode: str | None = None, free_text: str = ""
) -> tuple[str, str]:
    """Return ``(instruction, label)`` for *mode* under the user's selection.

    Resolution order:
      1. free-text modes use the trimmed text (empty → EmptyPromptError);
      2. a named sub-mode uses its fixed fragment;
      3. the ``Custom`` sub-mode uses the trimmed text (empty → EmptyPromptError);
      4. anything else uses the mode's fixed template.

    The label is what a chart's axis should read: the sub-mode name, or the
    user's text for the custom sub-mode.
    """
    if mode.accepts_free_text:
        return mode.instruction(_require_text(mode, free_text)), ""

    if mode.has_sub_modes:
        selected = sub_mode or next(iter(mode.sub_modes))
        if selected == CUSTOM_SUB_MODE:
            text = _require_text(mode, free_text)
            return mode.instruction(text), text
        fragment = mode.sub_modes.get(selected)
        if fragment is None:
            allowed = ", ".join([*mode.sub_modes, CUSTOM_SUB_MODE])
            raise ValueError(f"Invalid sub-mode '{selected}' for {mode.key}. Allowed: {allowed}")
        return mode.instruction(fragment), selected

    return mode.instruction(), ""


def build(
    mode: AnalysisMode,
    media: MediaHandle,
    *,
    sub_mode: str | None = None,
    free_text: str = "",
) -> AnalysisRequest:
    """Build a fresh AnalysisRequest. Pure; never touches the network.

    Raises:
        EmptyPromptError: The mode needs free text and none was given.
        ValueError: Unknown sub-mode, or *media* is not READY.
    """
    instruction, label = resolve_instruction(mode, sub_mode=sub_mode, free_text=free_text)
    if media.readiness_state is not ReadinessState.READY:
        raise ValueError(
            f"Media {media.remote_id} is {media.readiness_state.value}, expected READY"
        )
    return AnalysisRequest(
        mode_key=mode.key,
        instruction_text=instruction,
        media=media,
        declarations=declarations_for(mode.result_shape),
        temperature=ANALYSIS_TEMPERATURE,
        system_instruction=SYSTEM_INSTRUCTION,
        label=label,
    )
