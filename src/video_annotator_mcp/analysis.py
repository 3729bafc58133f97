"""Single-shot analyze call against Gemini with function declarations."""

from __future__ import annotations

import logging

from google.genai import types

from .client import GeminiClient
from .errors import AnalysisServiceError
from .models.annotation import AnalysisRequest

logger = logging.getLogger(__name__)


def _request_contents(request: AnalysisRequest) -> types.Content:
    """Instruction text followed by the uploaded file reference."""
    return types.Content(
        role="user",
        parts=[
            types.Part(text=request.instruction_text),
            types.Part(
                file_data=types.FileData(
                    mime_type=request.media.mime_type,
                    file_uri=request.media.uri,
                )
            ),
        ],
    )


def _request_config(request: AnalysisRequest) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        system_instruction=request.system_instruction,
        temperature=request.temperature,
        tools=[types.Tool(function_declarations=list(request.declarations))],
        automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
    )


class AnalysisClient:
    """Sends one AnalysisRequest and returns the raw model response.

    Stateless between calls: no history is kept, nothing is retried.
    """

    def __init__(self, client: GeminiClient) -> None:
        self._client = client

    async def send(self, request: AnalysisRequest) -> types.GenerateContentResponse:
        """Issue exactly one ``generate_content`` call.

        Raises:
            AnalysisServiceError: Any transport or service failure, chained.
        """
        model = self._client.config.model
        logger.info(
            "Analyzing %s with mode '%s' (%s)", request.media.remote_id, request.mode_key, model,
        )
        try:
            response = await self._client.sdk.aio.models.generate_content(
                model=model,
                contents=_request_contents(request),
                config=_request_config(request),
            )
        except Exception as exc:
            raise AnalysisServiceError(f"Analysis request failed: {exc}") from exc
        logger.info("Analysis of %s returned", request.media.remote_id)
        return response
