"""Main FastMCP server — mounts the annotate sub-server."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastmcp import FastMCP

from . import tracing
from .tools.annotate import annotate_server, close_session

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(server: FastMCP):
    """Startup/shutdown hook — tracing setup, then Gemini client teardown."""
    tracing.setup()
    yield {}
    closed = await close_session()
    tracing.shutdown()
    logger.info("Lifespan shutdown: session closed=%s", closed)


app = FastMCP(
    "video-annotator",
    instructions=(
        "Timestamped video annotation — load a local video, then analyze it as "
        "captions, summaries, key moments, object tables, haiku or chart data."
    ),
    lifespan=_lifespan,
)

app.mount(annotate_server)


def main() -> None:
    """Entry-point for ``video-annotator-mcp`` console script."""
    app.run()


if __name__ == "__main__":
    main()
