"""Optional MLflow tracing integration.

Three instrumentation layers:

1. **Autolog** — ``mlflow.gemini.autolog()`` patches the google-genai SDK to
   capture the upload, status and ``generate_content`` calls as spans.
2. **Tool spans** — the ``trace()`` decorator wraps the annotate tools,
   producing ``TOOL`` root spans that parent the autolog child spans.
3. **Pipeline spans** — ``span()`` marks the upload, readiness wait and
   analysis steps of the orchestrator, so a slow load shows whether the time
   went into the transfer or into remote processing.

Guarded import — the server runs fine without ``mlflow-tracing`` installed.

Env vars (all optional):
    MLFLOW_TRACKING_URI: Where to store traces. Empty = tracing disabled.
    MLFLOW_EXPERIMENT_NAME: Experiment name (default ``video-annotator-mcp``).
    GEMINI_TRACING_ENABLED: Set to ``"false"`` to force-disable even with a URI.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)

try:
    import mlflow
    import mlflow.gemini

    _HAS_MLFLOW = True
except ImportError:
    _HAS_MLFLOW = False


def is_enabled() -> bool:
    """Return True when mlflow-tracing is installed and not disabled by config."""
    if not _HAS_MLFLOW:
        return False
    from .config import get_config

    return get_config().tracing_enabled


def trace(
    func: Callable | None = None,
    *,
    name: str | None = None,
    span_type: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Callable:
    """Drop-in replacement for ``@mlflow.trace`` — identity when tracing is off.

    Usage::

        @trace(name="annotate_video", span_type="TOOL")
        async def annotate_video(...): ...
    """
    if not is_enabled():
        return func if func is not None else (lambda f: f)
    return mlflow.trace(func, name=name, span_type=span_type, attributes=attributes)


@contextmanager
def span(
    name: str,
    *,
    span_type: str = "CHAIN",
    attributes: dict[str, Any] | None = None,
) -> Iterator[Any]:
    """Open a child span around one pipeline step; yields None when tracing is off.

    Usage::

        with span("upload", attributes={"display_name": name}) as live:
            ...
            if live is not None:
                live.set_attribute("bytes", size)
    """
    if not is_enabled():
        yield None
        return
    with mlflow.start_span(name=name, span_type=span_type, attributes=attributes) as live:
        yield live


def setup() -> None:
    """Configure MLflow tracking and enable Gemini autologging.

    Failures are logged; tracing never prevents the server from starting.
    """
    if not is_enabled():
        return

    from .config import get_config

    cfg = get_config()
    try:
        mlflow.set_tracking_uri(cfg.mlflow_tracking_uri)
        mlflow.set_experiment(cfg.mlflow_experiment_name)
        mlflow.gemini.autolog()
        logger.info(
            "MLflow tracing enabled (uri=%s, experiment=%s)",
            cfg.mlflow_tracking_uri, cfg.mlflow_experiment_name,
        )
    except Exception:
        logger.warning("MLflow tracing setup failed — continuing without tracing", exc_info=True)


def shutdown() -> None:
    """Flush pending async traces."""
    if not is_enabled():
        return

    try:
        mlflow.flush_trace_async_logging()
        logger.info("MLflow traces flushed")
    except Exception:
        logger.warning("MLflow trace flush failed", exc_info=True)
