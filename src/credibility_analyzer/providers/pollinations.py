"""Pollinations provider: keyless OpenAI-compatible chat endpoint over httpx."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..config import POLLINATIONS_DEFAULT_URL
from ..errors import ErrorRecord, from_exception, from_http_status, invalid_content

logger = logging.getLogger(__name__)


def build_payload(system_prompt: str, user_prompt: str, *, model: str, temperature: float) -> dict[str, Any]:
    """Chat-completion payload asking for a JSON object response."""
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "temperature": temperature,
        "stream": False,
        "private": False,
        "response_format": {"type": "json_object"},
    }


def extract_message_content(body: Any) -> str:
    """Return ``choices[0].message.content`` or an empty string."""
    if not isinstance(body, dict):
        return ""
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    choice = choices[0]
    message = choice.get("message") if isinstance(choice, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else ""


class PollinationsProvider:
    """One POST per call; non-2xx statuses are classified, not interpreted."""

    name = "pollinations"

    def __init__(
        self,
        *,
        url: str = POLLINATIONS_DEFAULT_URL,
        model: str = "openai-fast",
        temperature: float = 0.7,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._transport = transport

    async def complete(self, system_prompt: str, user_prompt: str) -> str | ErrorRecord:
        """POST the chat payload and return the first message's content."""
        payload = build_payload(system_prompt, user_prompt, model=self.model, temperature=self.temperature)
        logger.debug("[Pollinations] Sending payload: %s", json.dumps(payload))

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
        except httpx.HTTPError as exc:
            logger.debug("[Pollinations] Transport failure: %s", exc)
            return from_exception(exc)

        if not response.is_success:
            return from_http_status(
                response.status_code,
                f"POST request failed with status {response.status_code}",
            )

        logger.debug("[Pollinations] Received response body: %s", response.text)
        try:
            body = response.json()
        except ValueError:
            return invalid_content("Provider returned a non-JSON response body")

        content = extract_message_content(body)
        logger.debug("[Pollinations] Extracted content: %s", content)
        return content
