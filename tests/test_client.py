"""Tests for the explicitly configured Gemini client holder."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from video_annotator_mcp.client import GeminiClient
from video_annotator_mcp.config import AnnotatorConfig


class TestGeminiClient:
    def test_missing_key_raises(self):
        client = GeminiClient(AnnotatorConfig(gemini_api_key=""))
        with pytest.raises(ValueError, match="No Gemini API key"):
            client.sdk

    @patch("video_annotator_mcp.client.genai.Client")
    def test_sdk_created_once(self, mock_client_cls):
        client = GeminiClient(AnnotatorConfig(gemini_api_key="abcd1234"))

        first = client.sdk
        second = client.sdk

        assert first is second
        mock_client_cls.assert_called_once_with(api_key="abcd1234", http_options=None)

    @patch("video_annotator_mcp.client.genai.Client")
    def test_base_url_forwarded(self, mock_client_cls):
        client = GeminiClient(
            AnnotatorConfig(gemini_api_key="k", gemini_base_url="https://proxy.example")
        )

        client.sdk

        http_options = mock_client_cls.call_args.kwargs["http_options"]
        assert http_options.base_url == "https://proxy.example"

    async def test_aclose_without_client(self):
        assert await GeminiClient(AnnotatorConfig(gemini_api_key="k")).aclose() is False

    async def test_aclose_closes_and_forgets(self):
        client = GeminiClient(AnnotatorConfig(gemini_api_key="k"))
        sdk = MagicMock()
        client._client = sdk

        assert await client.aclose() is True
        sdk.close.assert_called_once()
        assert client._client is None
