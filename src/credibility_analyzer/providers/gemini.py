"""Gemini provider: key-based, Google Search grounded generation."""

from __future__ import annotations

import asyncio
import logging

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..errors import ErrorKind, ErrorRecord, from_exception, from_http_status, missing_credential

logger = logging.getLogger(__name__)


class GeminiProvider:
    """Single-shot Gemini calls with search grounding and thinking disabled."""

    name = "gemini"

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gemini-2.5-flash",
        temperature: float = 0.5,
        timeout: float = 30.0,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._client: genai.Client | None = None

    def _get_client(self) -> genai.Client:
        """Return (or create) the client for this provider's key."""
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
            logger.info("Created Gemini client (key …%s)", self.api_key[-4:])
        return self._client

    def _build_config(self, system_prompt: str) -> types.GenerateContentConfig:
        config = types.GenerateContentConfig(
            temperature=self.temperature,
            thinking_config=types.ThinkingConfig(thinking_budget=0),
            tools=[types.Tool(google_search=types.GoogleSearch())],
        )
        if system_prompt:
            config.system_instruction = system_prompt
        return config

    async def complete(self, system_prompt: str, user_prompt: str) -> str | ErrorRecord:
        """Generate a response for *user_prompt*.

        Returns:
            The model's text (empty string when the response has none), or
            an ErrorRecord describing the failure.
        """
        if not self.api_key or not self.api_key.strip():
            return missing_credential("Gemini", "GEMINI_API_KEY")

        try:
            client = self._get_client()
        except Exception as exc:
            return ErrorRecord(
                kind=ErrorKind.API_UNAVAILABLE,
                message=f"Failed to initialize Gemini client: {exc}",
                retryable=True,
                user_message="Please try again later",
            )

        logger.debug("[Gemini] Using prompt: %s", user_prompt)
        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=self.model,
                    contents=user_prompt,
                    config=self._build_config(system_prompt),
                ),
                timeout=self.timeout,
            )
        except genai_errors.APIError as exc:
            logger.debug("[Gemini] API error %s: %s", exc.code, exc)
            return from_http_status(exc.code or 0, str(exc))
        except (TimeoutError, asyncio.TimeoutError, httpx.TransportError, OSError) as exc:
            return from_exception(exc)
        except Exception as exc:
            return ErrorRecord(
                kind=ErrorKind.API_UNAVAILABLE,
                message=f"Gemini API request failed: {exc}",
                retryable=True,
                user_message="Please try again later",
            )

        text = (response.text or "") if response is not None else ""
        logger.debug("[Gemini] Received content: %s", text)
        return text

    async def aclose(self) -> None:
        """Close the underlying client, if one was created."""
        if self._client is None:
            return
        try:
            await self._client.aio.close()
        except Exception:
            logger.debug("Gemini client close failed", exc_info=True)
        self._client = None
