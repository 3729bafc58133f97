"""Media transfer — MIME resolution, Files API upload and readiness polling."""

from __future__ import annotations

import asyncio
import io
import logging
from pathlib import Path
from typing import Any

import httpx
from google.genai import errors as genai_errors
from google.genai import types

from .client import GeminiClient
from .errors import ProcessingFailedError, ProcessingTimeoutError, TransferError
from .models.annotation import MediaHandle, ReadinessState

logger = logging.getLogger(__name__)

SUPPORTED_VIDEO_EXTENSIONS: dict[str, str] = {
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".mkv": "video/x-matroska",
    ".mpeg": "video/mpeg",
    ".wmv": "video/x-ms-wmv",
    ".3gpp": "video/3gpp",
}

_REMOTE_STATES: dict[str, ReadinessState] = {
    "ACTIVE": ReadinessState.READY,
    "PROCESSING": ReadinessState.PROCESSING,
    "FAILED": ReadinessState.FAILED,
}


def _video_mime_type(path: Path) -> str:
    """Return MIME type for a video file, or raise ValueError if unsupported."""
    ext = path.suffix.lower()
    mime = SUPPORTED_VIDEO_EXTENSIONS.get(ext)
    if not mime:
        allowed = ", ".join(sorted(SUPPORTED_VIDEO_EXTENSIONS))
        raise ValueError(f"Unsupported video extension '{ext}'. Supported: {allowed}")
    return mime


def _validate_video_path(file_path: str) -> tuple[Path, str]:
    """Validate path exists and has supported extension. Returns (path, mime)."""
    p = Path(file_path).expanduser().resolve()
    if not p.exists():
        raise FileNotFoundError(f"Video file not found: {file_path}")
    if not p.is_file():
        raise ValueError(f"Not a file: {file_path}")
    mime = _video_mime_type(p)
    return p, mime


def _resolve_mime(mime_hint: str | None, display_name: str) -> str:
    """Pick the upload MIME type: a video/* hint wins, else the name's extension."""
    if mime_hint and mime_hint.strip().lower().startswith("video/"):
        return mime_hint.strip().lower()
    try:
        return _video_mime_type(Path(display_name))
    except ValueError as exc:
        raise TransferError(
            f"Cannot upload '{display_name}': not a supported video type (hint={mime_hint!r})"
        ) from exc


def _readiness_from_remote(state: Any) -> ReadinessState:
    """Map a Files API state (enum, string or None) onto ReadinessState."""
    raw = getattr(state, "value", state)
    return _REMOTE_STATES.get(str(raw or "").upper(), ReadinessState.PENDING)


class MediaTransferClient:
    """Uploads a video blob to the Gemini Files API."""

    def __init__(self, client: GeminiClient) -> None:
        self._client = client

    def check_size(self, size: int, display_name: str) -> None:
        """Reject an empty or oversized payload before anything is read or sent.

        Raises:
            TransferError: *size* is zero or above ``max_upload_bytes``.
        """
        if size <= 0:
            raise TransferError(f"Cannot upload '{display_name}': file is empty")
        limit = self._client.config.max_upload_bytes
        if size > limit:
            raise TransferError(
                f"Cannot upload '{display_name}': {size} bytes exceeds limit of {limit}"
            )

    async def upload(
        self, data: bytes, mime_hint: str | None, display_name: str
    ) -> MediaHandle:
        """Upload *data* and return a PENDING handle.

        Raises:
            TransferError: The payload is empty, too large or not a video, or
                the store rejected it. Never retried.
        """
        self.check_size(len(data), display_name)
        mime = _resolve_mime(mime_hint, display_name)

        logger.info("Uploading %s (%d bytes, %s)", display_name, len(data), mime)
        try:
            uploaded = await self._client.sdk.aio.files.upload(
                file=io.BytesIO(data),
                config=types.UploadFileConfig(mime_type=mime, display_name=display_name),
            )
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            raise TransferError(f"Upload of '{display_name}' rejected: {exc}") from exc

        if not uploaded.name:
            raise TransferError(f"Upload of '{display_name}' returned no file name")
        logger.info("Uploaded %s → %s", display_name, uploaded.name)
        return MediaHandle(
            remote_id=uploaded.name,
            mime_type=uploaded.mime_type or mime,
            uri=uploaded.uri or "",
            readiness_state=ReadinessState.PENDING,
            display_name=display_name,
            size_bytes=len(data),
        )


class ReadinessPoller:
    """Re-fetches file status until the remote side finishes preprocessing.

    Polls every ``poll_interval_seconds``. With ``poll_max_attempts`` of 0 the
    loop only ends on READY or FAILED; a file stuck in PROCESSING keeps it
    alive indefinitely.
    """

    def __init__(self, client: GeminiClient) -> None:
        self._client = client

    async def _fetch(self, handle: MediaHandle) -> MediaHandle:
        try:
            info = await self._client.sdk.aio.files.get(name=handle.remote_id)
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            raise ProcessingFailedError(
                f"Status check failed for {handle.remote_id}: {exc}"
            ) from exc
        return handle.model_copy(update={
            "readiness_state": _readiness_from_remote(info.state),
            "uri": info.uri or handle.uri,
            "mime_type": info.mime_type or handle.mime_type,
        })

    async def await_ready(self, handle: MediaHandle) -> MediaHandle:
        """Return *handle* once READY.

        Raises:
            ProcessingFailedError: The remote state is (or becomes) FAILED.
            ProcessingTimeoutError: ``poll_max_attempts`` polls passed without
                a final state.
        """
        if handle.readiness_state is ReadinessState.READY:
            return handle
        if handle.readiness_state is ReadinessState.FAILED:
            raise ProcessingFailedError(f"File processing failed: {handle.remote_id}")

        cfg = self._client.config
        loop = asyncio.get_running_loop()
        start = loop.time()
        attempts = 0
        while True:
            handle = await self._fetch(handle)
            attempts += 1
            if handle.readiness_state is ReadinessState.READY:
                logger.info(
                    "File %s ready after %d poll(s), %.1fs",
                    handle.remote_id, attempts, loop.time() - start,
                )
                return handle
            if handle.readiness_state is ReadinessState.FAILED:
                raise ProcessingFailedError(f"File processing failed: {handle.remote_id}")
            if cfg.poll_max_attempts and attempts >= cfg.poll_max_attempts:
                raise ProcessingTimeoutError(
                    f"File {handle.remote_id} not ready after {attempts} poll(s) "
                    f"(state: {handle.readiness_state.value})"
                )
            logger.info(
                "File %s still %s, retrying in %.0fs",
                handle.remote_id, handle.readiness_state.value, cfg.poll_interval_seconds,
            )
            await asyncio.sleep(cfg.poll_interval_seconds)
