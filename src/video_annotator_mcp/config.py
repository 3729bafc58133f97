"""Annotator configuration via environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

DEFAULT_MODEL = "gemini-2.5-flash"
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_MAX_UPLOAD_MB = 2048


def _resolve_tracing_enabled(flag_value: str, tracking_uri: str) -> bool:
    """Derive tracing_enabled from env vars.

    - ``GEMINI_TRACING_ENABLED=false`` → always disabled (explicit opt-out).
    - Otherwise enabled when ``MLFLOW_TRACKING_URI`` is non-empty.
    """
    if flag_value.lower() == "false":
        return False
    return bool(tracking_uri)


class AnnotatorConfig(BaseModel):
    """Credentials, endpoint and pipeline tuning for one annotator process.

    Passed explicitly to :class:`~video_annotator_mcp.client.GeminiClient` and
    the pipeline components. Only the server entry-point reads it from the
    environment.
    """

    gemini_api_key: str = Field(default="")
    gemini_base_url: str = Field(default="")
    model: str = Field(default=DEFAULT_MODEL)
    poll_interval_seconds: float = Field(default=DEFAULT_POLL_INTERVAL)
    poll_max_attempts: int = Field(
        default=0,
        description="Upper bound on readiness polls; 0 polls until READY or FAILED",
    )
    max_upload_bytes: int = Field(default=DEFAULT_MAX_UPLOAD_MB * 1024 * 1024)
    tracing_enabled: bool = Field(default=False)
    mlflow_tracking_uri: str = Field(default="")
    mlflow_experiment_name: str = Field(default="video-annotator-mcp")

    @field_validator("poll_interval_seconds")
    @classmethod
    def validate_poll_interval(cls, value: float) -> float:
        if value < 0:
            raise ValueError("poll_interval_seconds must be >= 0")
        return value

    @field_validator("poll_max_attempts")
    @classmethod
    def validate_poll_max_attempts(cls, value: int) -> int:
        if value < 0:
            raise ValueError("poll_max_attempts must be >= 0 (0 = unbounded)")
        return value

    @field_validator("max_upload_bytes")
    @classmethod
    def validate_max_upload_bytes(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_upload_bytes must be >= 1")
        return value

    @field_validator("gemini_base_url")
    @classmethod
    def strip_base_url(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @classmethod
    def from_env(cls) -> AnnotatorConfig:
        """Build config from environment variables."""
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            gemini_base_url=os.getenv("GEMINI_BASE_URL", ""),
            model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
            poll_interval_seconds=float(
                os.getenv("ANNOTATOR_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL))
            ),
            poll_max_attempts=int(os.getenv("ANNOTATOR_POLL_MAX_ATTEMPTS", "0")),
            max_upload_bytes=int(
                os.getenv("ANNOTATOR_MAX_UPLOAD_MB", str(DEFAULT_MAX_UPLOAD_MB))
            ) * 1024 * 1024,
            tracing_enabled=_resolve_tracing_enabled(
                os.getenv("GEMINI_TRACING_ENABLED", ""),
                os.getenv("MLFLOW_TRACKING_URI", ""),
            ),
            mlflow_tracking_uri=os.getenv("MLFLOW_TRACKING_URI", ""),
            mlflow_experiment_name=os.getenv("MLFLOW_EXPERIMENT_NAME", "video-annotator-mcp"),
        )


# Server-side cache; pipeline components receive their config explicitly.
_config: AnnotatorConfig | None = None


def get_config() -> AnnotatorConfig:
    """Return the server's config, creating it on first access.

    Loads ``~/.config/video-annotator-mcp/.env`` before reading env vars.
    Process environment always takes precedence over the config file.
    """
    global _config
    if _config is None:
        import logging

        from .dotenv import load_dotenv

        injected = load_dotenv()
        if injected:
            logger = logging.getLogger(__name__)
            logger.info(
                "Loaded %d var(s) from config: %s",
                len(injected),
                ", ".join(injected.keys()),
            )
        _config = AnnotatorConfig.from_env()
    return _config


def update_config(**overrides: object) -> AnnotatorConfig:
    """Patch the live server config."""
    global _config
    cfg = get_config()
    data = cfg.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    _config = AnnotatorConfig(**data)
    return _config
