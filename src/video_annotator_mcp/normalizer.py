"""Decode the model's function call into an ordered annotation list.

The first function call in the response is parsed into a tagged union keyed
on the function name; each variant maps to exactly one record shape.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from .errors import MalformedCallError, UnknownFunctionError
from .functions import FUNCTION_NAMES
from .models.annotation import AnnotationRecord, ResultShape

logger = logging.getLogger(__name__)


class _TextEntry(BaseModel):
    time: str
    text: str


class _ObjectsEntry(BaseModel):
    time: str
    text: str
    objects: list[str] | None = None


class _NumericEntry(BaseModel):
    time: str
    value: float
    text: str = ""


class _TextArgs(BaseModel):
    timecodes: list[_TextEntry]


class _ObjectsArgs(BaseModel):
    timecodes: list[_ObjectsEntry]


class _NumericArgs(BaseModel):
    timecodes: list[_NumericEntry]


class TimecodesCall(BaseModel):
    shape: ClassVar[ResultShape] = ResultShape.TEXTUAL
    name: Literal["set_timecodes"]
    args: _TextArgs


class TimecodesWithObjectsCall(BaseModel):
    shape: ClassVar[ResultShape] = ResultShape.TEXTUAL_WITH_OBJECTS
    name: Literal["set_timecodes_with_objects"]
    args: _ObjectsArgs


class NumericValuesCall(BaseModel):
    shape: ClassVar[ResultShape] = ResultShape.NUMERIC
    name: Literal["set_timecodes_with_numeric_values"]
    args: _NumericArgs


ExtractionCall = Annotated[
    Union[TimecodesCall, TimecodesWithObjectsCall, NumericValuesCall],
    Field(discriminator="name"),
]
_CALL_ADAPTER: TypeAdapter[ExtractionCall] = TypeAdapter(ExtractionCall)


def _unescape(text: str) -> str:
    """Turn the model's escaped apostrophe (backslash + quote) into a plain one."""
    return text.replace("\\'", "'")


def first_call(response: Any) -> ExtractionCall | None:
    """Parse the first function call of *response*, or None when there is none.

    Later calls are ignored; the system instruction asks for a single call.

    Raises:
        UnknownFunctionError: The call names an undeclared function.
        MalformedCallError: The arguments do not fit the declared schema.
    """
    calls = getattr(response, "function_calls", None) or []
    if not calls:
        return None
    if len(calls) > 1:
        logger.warning("Model made %d function calls, using the first", len(calls))
    call = calls[0]
    name = call.name or ""
    if name not in FUNCTION_NAMES:
        logger.warning("Model called undeclared function %r", name)
        raise UnknownFunctionError(name)
    try:
        return _CALL_ADAPTER.validate_python({"name": name, "args": dict(call.args or {})})
    except ValidationError as exc:
        logger.warning("Malformed %s arguments: %s", name, exc)
        raise MalformedCallError(f"Arguments of {name} do not match its declaration: {exc}") from exc


def shape_of(response: Any) -> ResultShape | None:
    """Return the record shape the response's function call selects."""
    call = first_call(response)
    return call.shape if call is not None else None


def to_records(call: ExtractionCall) -> list[AnnotationRecord]:
    """Map a parsed call onto AnnotationRecords, preserving entry order."""
    if isinstance(call, TimecodesCall):
        return [AnnotationRecord(time=e.time, text=_unescape(e.text)) for e in call.args.timecodes]
    if isinstance(call, TimecodesWithObjectsCall):
        return [
            AnnotationRecord(time=e.time, text=_unescape(e.text), objects=e.objects)
            for e in call.args.timecodes
        ]
    if isinstance(call, NumericValuesCall):
        return [AnnotationRecord(time=e.time, text=e.text, value=e.value) for e in call.args.timecodes]
    raise UnknownFunctionError(getattr(call, "name", type(call).__name__))


def normalize(response: Any) -> list[AnnotationRecord]:
    """Return the response's annotations in model order; empty if no call was made."""
    call = first_call(response)
    if call is None:
        return []
    return to_records(call)
