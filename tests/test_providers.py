"""Tests for the Gemini and Pollinations provider adapters."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from google.genai import errors as genai_errors

from credibility_analyzer.config import AnalyzerConfig
from credibility_analyzer.errors import ErrorKind, ErrorRecord
from credibility_analyzer.providers import (
    GeminiProvider,
    PollinationsProvider,
    Provider,
    make_provider,
)
from credibility_analyzer.providers.pollinations import build_payload, extract_message_content


def _chat_body(content: str) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _pollinations(handler) -> PollinationsProvider:
    return PollinationsProvider(url="https://text.example/openai", transport=httpx.MockTransport(handler))


class TestMakeProvider:
    def test_pollinations(self):
        provider = make_provider(AnalyzerConfig(provider="pollinations"))
        assert isinstance(provider, PollinationsProvider)
        assert isinstance(provider, Provider)

    def test_gemini(self):
        provider = make_provider(AnalyzerConfig(provider="gemini", gemini_api_key="k", gemini_model="m"))
        assert isinstance(provider, GeminiProvider)
        assert provider.model == "m"


class TestPollinationsPayload:
    def test_build_payload_shape(self):
        payload = build_payload("sys", "user", model="openai-fast", temperature=0.7)
        assert payload["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "user"},
        ]
        assert payload["response_format"] == {"type": "json_object"}
        assert payload["stream"] is False

    @pytest.mark.parametrize("body", [None, {}, {"choices": []}, {"choices": [{}]}, {"choices": [{"message": {}}]}])
    def test_extract_missing_content(self, body):
        assert extract_message_content(body) == ""

    def test_extract_content(self):
        assert extract_message_content(_chat_body("hi")) == "hi"


class TestPollinationsProvider:
    async def test_success_returns_message_content(self):
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_chat_body('{"confidence": 80}'))

        result = await _pollinations(handler).complete("sys", "user")

        assert result == '{"confidence": 80}'
        assert seen["body"]["model"] == "openai-fast"
        assert seen["body"]["messages"][1]["content"] == "user"

    @pytest.mark.parametrize("status,kind,retryable", [
        (429, ErrorKind.RATE_LIMITED, True),
        (503, ErrorKind.API_UNAVAILABLE, True),
        (404, ErrorKind.API_UNAVAILABLE, False),
        (400, ErrorKind.INVALID_CONTENT, False),
    ])
    async def test_error_statuses_classified(self, status: int, kind: ErrorKind, retryable: bool):
        result = await _pollinations(lambda request: httpx.Response(status, text="nope")).complete("s", "u")

        assert isinstance(result, ErrorRecord)
        assert result.kind == kind
        assert result.retryable is retryable
        assert result.status_code == status

    async def test_transport_error_is_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await _pollinations(handler).complete("s", "u")

        assert isinstance(result, ErrorRecord)
        assert result.kind == ErrorKind.NETWORK_ERROR
        assert result.retryable is True

    async def test_timeout_is_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        result = await _pollinations(handler).complete("s", "u")

        assert isinstance(result, ErrorRecord)
        assert result.message == "Request timed out"

    async def test_non_json_body_is_invalid_content(self):
        result = await _pollinations(lambda request: httpx.Response(200, text="<html>")).complete("s", "u")

        assert isinstance(result, ErrorRecord)
        assert result.kind == ErrorKind.INVALID_CONTENT
        assert result.retryable is True

    async def test_empty_choices_returns_empty_text(self):
        result = await _pollinations(lambda request: httpx.Response(200, json={"choices": []})).complete("s", "u")
        assert result == ""


@pytest.fixture()
def mock_genai_client():
    """Patch genai.Client so GeminiProvider never reaches the network."""
    with patch("credibility_analyzer.providers.gemini.genai.Client") as client_cls:
        client = MagicMock()
        client.aio.models.generate_content = AsyncMock()
        client.aio.close = AsyncMock()
        client_cls.return_value = client
        yield {"cls": client_cls, "client": client, "generate": client.aio.models.generate_content}


class TestGeminiProvider:
    async def test_missing_key_is_critical_credential_error(self, mock_genai_client):
        result = await GeminiProvider("").complete("s", "u")

        assert isinstance(result, ErrorRecord)
        assert result.kind == ErrorKind.API_UNAVAILABLE
        assert result.retryable is False
        assert "GEMINI_API_KEY" in result.user_message
        mock_genai_client["cls"].assert_not_called()

    async def test_success_returns_text(self, mock_genai_client):
        mock_genai_client["generate"].return_value = MagicMock(text='{"confidence": 70}')

        result = await GeminiProvider("test-key").complete("system text", "user text")

        assert result == '{"confidence": 70}'
        kwargs = mock_genai_client["generate"].await_args.kwargs
        assert kwargs["contents"] == "user text"
        assert kwargs["config"].system_instruction == "system text"
        assert kwargs["config"].thinking_config.thinking_budget == 0
        assert kwargs["config"].tools[0].google_search is not None

    async def test_none_text_becomes_empty(self, mock_genai_client):
        mock_genai_client["generate"].return_value = MagicMock(text=None)

        assert await GeminiProvider("test-key").complete("s", "u") == ""

    async def test_client_reused_across_calls(self, mock_genai_client):
        mock_genai_client["generate"].return_value = MagicMock(text="{}")
        provider = GeminiProvider("test-key")

        await provider.complete("s", "u")
        await provider.complete("s", "u")

        mock_genai_client["cls"].assert_called_once_with(api_key="test-key")

    async def test_rate_limit_api_error(self, mock_genai_client):
        mock_genai_client["generate"].side_effect = genai_errors.ClientError(
            429, {"error": {"code": 429, "message": "Quota exceeded", "status": "RESOURCE_EXHAUSTED"}},
        )

        result = await GeminiProvider("test-key").complete("s", "u")

        assert isinstance(result, ErrorRecord)
        assert result.kind == ErrorKind.RATE_LIMITED

    async def test_server_api_error(self, mock_genai_client):
        mock_genai_client["generate"].side_effect = genai_errors.ServerError(
            503, {"error": {"code": 503, "message": "Overloaded", "status": "UNAVAILABLE"}},
        )

        result = await GeminiProvider("test-key").complete("s", "u")

        assert isinstance(result, ErrorRecord)
        assert result.kind == ErrorKind.API_UNAVAILABLE
        assert result.retryable is True

    async def test_timeout(self, mock_genai_client):
        mock_genai_client["generate"].side_effect = TimeoutError()

        result = await GeminiProvider("test-key").complete("s", "u")

        assert isinstance(result, ErrorRecord)
        assert result.kind == ErrorKind.NETWORK_ERROR

    async def test_unexpected_exception_never_raises(self, mock_genai_client):
        mock_genai_client["generate"].side_effect = RuntimeError("sdk bug")

        result = await GeminiProvider("test-key").complete("s", "u")

        assert isinstance(result, ErrorRecord)
        assert result.kind == ErrorKind.API_UNAVAILABLE
        assert "sdk bug" in result.message

    async def test_aclose(self, mock_genai_client):
        mock_genai_client["generate"].return_value = MagicMock(text="{}")
        provider = GeminiProvider("test-key")
        await provider.complete("s", "u")

        await provider.aclose()

        mock_genai_client["client"].aio.close.assert_awaited_once()
        await provider.aclose()
