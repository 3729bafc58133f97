"""Pipeline exceptions and the structured tool error model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class AnnotatorError(Exception):
    """Base class for every failure raised by the annotation pipeline."""


class TransferError(AnnotatorError):
    """The media store rejected the upload. Terminal for this file."""


class ProcessingFailedError(AnnotatorError):
    """Remote preprocessing of an uploaded file ended in FAILED."""


class ProcessingTimeoutError(AnnotatorError, TimeoutError):
    """The file did not leave PROCESSING within the configured number of polls."""


class AnalysisServiceError(AnnotatorError):
    """Transport or service failure during the analyze call. Recoverable."""


class EmptyPromptError(AnnotatorError, ValueError):
    """A mode that needs free text was invoked without any."""


class ContractViolationError(AnnotatorError):
    """The model answered outside the declared function contract."""


class UnknownFunctionError(ContractViolationError):
    """The model called a function that was never declared."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Model called undeclared function '{name}'")
        self.name = name


class MalformedCallError(ContractViolationError):
    """A declared function was called with arguments outside its schema."""


class InvalidStateError(AnnotatorError):
    """The orchestrator cannot run the operation from its current state."""


class ErrorCategory(str, Enum):
    """Categories of errors surfaced to the presentation layer."""

    TRANSFER_REJECTED = "TRANSFER_REJECTED"
    PROCESSING_FAILED = "PROCESSING_FAILED"
    PROCESSING_TIMEOUT = "PROCESSING_TIMEOUT"
    ANALYSIS_SERVICE = "ANALYSIS_SERVICE"
    EMPTY_PROMPT = "EMPTY_PROMPT"
    CONTRACT_VIOLATION = "CONTRACT_VIOLATION"
    INVALID_STATE = "INVALID_STATE"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_UNSUPPORTED = "FILE_UNSUPPORTED"
    UNKNOWN = "UNKNOWN"


class ToolError(BaseModel):
    """Structured error returned from any tool."""

    error: str
    category: str
    hint: str
    retryable: bool = False


_RETRYABLE = {
    ErrorCategory.ANALYSIS_SERVICE,
    ErrorCategory.EMPTY_PROMPT,
    ErrorCategory.PROCESSING_TIMEOUT,
}


def categorize_error(error: Exception) -> tuple[ErrorCategory, str]:
    """Map an exception to an ErrorCategory + human-readable hint."""
    if isinstance(error, TransferError):
        return (
            ErrorCategory.TRANSFER_REJECTED,
            "Upload rejected — pick a different file (supported video type, within size limit)",
        )
    if isinstance(error, ProcessingTimeoutError):
        return (
            ErrorCategory.PROCESSING_TIMEOUT,
            "File still processing — load it again or raise ANNOTATOR_POLL_MAX_ATTEMPTS",
        )
    if isinstance(error, ProcessingFailedError):
        return (
            ErrorCategory.PROCESSING_FAILED,
            "Remote processing failed for this file — try another file",
        )
    if isinstance(error, AnalysisServiceError):
        return (
            ErrorCategory.ANALYSIS_SERVICE,
            "Analysis call failed — retry, possibly with a different mode or prompt",
        )
    if isinstance(error, EmptyPromptError):
        return (
            ErrorCategory.EMPTY_PROMPT,
            "This mode needs a prompt — type one before generating",
        )
    if isinstance(error, ContractViolationError):
        return (
            ErrorCategory.CONTRACT_VIOLATION,
            "Model answered outside the extraction contract — run the analysis again",
        )
    if isinstance(error, InvalidStateError):
        return (
            ErrorCategory.INVALID_STATE,
            "Operation not allowed now — load a video first or wait for the current step",
        )
    if isinstance(error, FileNotFoundError):
        return (ErrorCategory.FILE_NOT_FOUND, "File not found — check the path")
    if "unsupported video extension" in str(error).lower():
        return (
            ErrorCategory.FILE_UNSUPPORTED,
            "File extension not supported — use mp4, webm, mov, avi, mkv, mpeg, wmv, or 3gpp",
        )
    if isinstance(error, ValueError):
        return (ErrorCategory.INVALID_ARGUMENT, "Invalid input parameter — check mode, sub-mode and view")
    return (ErrorCategory.UNKNOWN, str(error))


def make_tool_error(error: Exception) -> dict:
    """Create a serialisable ToolError dict from an exception."""
    cat, hint = categorize_error(error)
    return ToolError(
        error=str(error),
        category=cat.value,
        hint=hint,
        retryable=cat in _RETRYABLE,
    ).model_dump(mode="json")
