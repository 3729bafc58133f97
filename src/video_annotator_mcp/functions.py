"""Extraction function contract declared to Gemini on every analyze call.

Each result shape has exactly one function; ``set_timecodes`` doubles as the
default textual function and is always declared.
"""

from __future__ import annotations

from google.genai import types

from .models.annotation import ResultShape

SET_TIMECODES = "set_timecodes"
SET_TIMECODES_WITH_OBJECTS = "set_timecodes_with_objects"
SET_TIMECODES_WITH_NUMERIC_VALUES = "set_timecodes_with_numeric_values"

_TIME = types.Schema(type=types.Type.STRING, description="Timecode in MM:SS or HH:MM:SS format")
_TEXT = types.Schema(type=types.Type.STRING)


def _timecodes_schema(properties: dict[str, types.Schema]) -> types.Schema:
    return types.Schema(
        type=types.Type.OBJECT,
        properties={
            "timecodes": types.Schema(
                type=types.Type.ARRAY,
                items=types.Schema(
                    type=types.Type.OBJECT,
                    properties=properties,
                    required=list(properties),
                ),
            ),
        },
        required=["timecodes"],
    )


_DECLARATIONS: dict[str, types.FunctionDeclaration] = {
    SET_TIMECODES: types.FunctionDeclaration(
        name=SET_TIMECODES,
        description="Set the timecodes for the video with associated text",
        parameters=_timecodes_schema({"time": _TIME, "text": _TEXT}),
    ),
    SET_TIMECODES_WITH_OBJECTS: types.FunctionDeclaration(
        name=SET_TIMECODES_WITH_OBJECTS,
        description="Set the timecodes for the video with associated text and object list",
        parameters=_timecodes_schema({
            "time": _TIME,
            "text": _TEXT,
            "objects": types.Schema(
                type=types.Type.ARRAY,
                items=types.Schema(type=types.Type.STRING),
            ),
        }),
    ),
    SET_TIMECODES_WITH_NUMERIC_VALUES: types.FunctionDeclaration(
        name=SET_TIMECODES_WITH_NUMERIC_VALUES,
        description="Set the timecodes for the video with associated numeric values",
        parameters=_timecodes_schema({
            "time": _TIME,
            "value": types.Schema(type=types.Type.NUMBER),
        }),
    ),
}

SHAPE_FUNCTIONS: dict[ResultShape, str] = {
    ResultShape.TEXTUAL: SET_TIMECODES,
    ResultShape.TEXTUAL_WITH_OBJECTS: SET_TIMECODES_WITH_OBJECTS,
    ResultShape.NUMERIC: SET_TIMECODES_WITH_NUMERIC_VALUES,
}

DEFAULT_FUNCTION = SET_TIMECODES
FUNCTION_NAMES = frozenset(_DECLARATIONS)

if len(set(SHAPE_FUNCTIONS.values())) != len(SHAPE_FUNCTIONS):
    raise RuntimeError("Each result shape must map to its own extraction function")


def declaration(name: str) -> types.FunctionDeclaration:
    """Return the declaration registered under *name*. Raises KeyError."""
    return _DECLARATIONS[name]


def declarations_for(shape: ResultShape) -> tuple[types.FunctionDeclaration, ...]:
    """Declarations to send for *shape*: its own function, then the default."""
    names = dict.fromkeys((SHAPE_FUNCTIONS[shape], DEFAULT_FUNCTION))
    return tuple(_DECLARATIONS[n] for n in names)


def shape_for(name: str) -> ResultShape | None:
    """Reverse lookup: which shape a function name produces."""
    for shape, fn_name in SHAPE_FUNCTIONS.items():
        if fn_name == name:
            return shape
    return None
