"""Static catalog of analysis modes offered to the user."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from .models.annotation import ResultShape
from .prompts import annotate as prompts

CUSTOM_SUB_MODE = "Custom"

VIEW_TIMELINE = "timeline"
VIEW_LIST = "list"
VIEW_TABLE = "table"
VIEW_CHART = "chart"
ALL_VIEWS = (VIEW_TIMELINE, VIEW_LIST, VIEW_TABLE, VIEW_CHART)


@dataclass(frozen=True)
class AnalysisMode:
    """One way of analyzing a video.

    ``instruction_template`` is either the complete instruction or a callable
    that receives the sub-mode fragment / user text and returns it.
    """

    key: str
    emoji: str
    instruction_template: str | Callable[[str], str]
    result_shape: ResultShape
    views: tuple[str, ...]
    sub_modes: dict[str, str] = field(default_factory=dict)
    accepts_free_text: bool = False

    @property
    def default_view(self) -> str:
        return self.views[0]

    @property
    def has_sub_modes(self) -> bool:
        return bool(self.sub_modes)

    def instruction(self, fragment: str = "") -> str:
        if callable(self.instruction_template):
            return self.instruction_template(fragment)
        return self.instruction_template

    def describe(self) -> dict:
        """Serialisable summary for the presentation layer."""
        return {
            "key": self.key,
            "emoji": self.emoji,
            "result_shape": self.result_shape.value,
            "views": list(self.views),
            "default_view": self.default_view,
            "sub_modes": [*self.sub_modes, CUSTOM_SUB_MODE] if self.sub_modes else [],
            "accepts_free_text": self.accepts_free_text,
        }


MODES: dict[str, AnalysisMode] = {
    m.key: m
    for m in (
        AnalysisMode(
            key="A/V captions",
            emoji="👀",
            instruction_template=prompts.AV_CAPTIONS,
            result_shape=ResultShape.TEXTUAL,
            views=(VIEW_LIST, VIEW_TIMELINE),
        ),
        AnalysisMode(
            key="Paragraph",
            emoji="📝",
            instruction_template=prompts.PARAGRAPH,
            result_shape=ResultShape.TEXTUAL,
            views=(VIEW_TIMELINE, VIEW_LIST),
        ),
        AnalysisMode(
            key="Key moments",
            emoji="🔑",
            instruction_template=prompts.KEY_MOMENTS,
            result_shape=ResultShape.TEXTUAL,
            views=(VIEW_LIST, VIEW_TIMELINE),
        ),
        AnalysisMode(
            key="Table",
            emoji="🤓",
            instruction_template=prompts.TABLE,
            result_shape=ResultShape.TEXTUAL_WITH_OBJECTS,
            views=(VIEW_TABLE, VIEW_LIST, VIEW_TIMELINE),
        ),
        AnalysisMode(
            key="Haiku",
            emoji="🌸",
            instruction_template=prompts.HAIKU,
            result_shape=ResultShape.TEXTUAL,
            views=(VIEW_TIMELINE, VIEW_LIST),
        ),
        AnalysisMode(
            key="Chart",
            emoji="📈",
            instruction_template=lambda text: prompts.CHART_TEMPLATE.format(input=text),
            result_shape=ResultShape.NUMERIC,
            views=(VIEW_CHART,),
            sub_modes=prompts.CHART_SUB_MODES,
        ),
        AnalysisMode(
            key="Custom",
            emoji="🔧",
            instruction_template=lambda text: prompts.CUSTOM_TEMPLATE.format(input=text),
            result_shape=ResultShape.TEXTUAL,
            views=(VIEW_LIST, VIEW_TIMELINE),
            accepts_free_text=True,
        ),
    )
}

DEFAULT_MODE = next(iter(MODES))


def get_mode(key: str) -> AnalysisMode:
    """Look up a mode by key, or raise ValueError naming the valid keys."""
    mode = MODES.get(key)
    if mode is None:
        allowed = ", ".join(MODES)
        raise ValueError(f"Invalid mode '{key}'. Allowed: {allowed}")
    return mode
