"""Gemini SDK client owned by whoever composes the pipeline."""

from __future__ import annotations

import logging

from google import genai
from google.genai import types

from .config import AnnotatorConfig

logger = logging.getLogger(__name__)


class GeminiClient:
    """Lazily builds one ``genai.Client`` from an explicit :class:`AnnotatorConfig`.

    The transfer, polling and analysis components share a single instance;
    its lifecycle is that of the session or process that created it.
    """

    def __init__(self, config: AnnotatorConfig) -> None:
        self.config = config
        self._client: genai.Client | None = None

    @property
    def sdk(self) -> genai.Client:
        """Return (or create) the underlying SDK client."""
        if self._client is None:
            key = self.config.gemini_api_key
            if not key:
                raise ValueError("No Gemini API key — set GEMINI_API_KEY or pass it in AnnotatorConfig")
            http_options = None
            if self.config.gemini_base_url:
                http_options = types.HttpOptions(base_url=self.config.gemini_base_url)
            self._client = genai.Client(api_key=key, http_options=http_options)
            logger.info("Created Gemini client (key …%s)", key[-4:])
        return self._client

    async def aclose(self) -> bool:
        """Close the SDK client if one was created. Returns True when closed."""
        if self._client is None:
            return False
        client, self._client = self._client, None
        try:
            await client.aio.aclose()
        except Exception:
            logger.debug("Async Gemini client close failed", exc_info=True)
        try:
            client.close()
        except Exception:
            logger.debug("Gemini client close failed", exc_info=True)
        logger.info("Closed Gemini client")
        return True
