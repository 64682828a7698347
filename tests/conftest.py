"""Shared test fixtures for credibility-analyzer."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest

from credibility_analyzer.config import AnalyzerConfig
from credibility_analyzer.errors import ErrorRecord

ARTICLE_TEXT = (
    "The city council approved the new transit budget on Tuesday after a "
    "three-hour public hearing, allocating funds for two additional bus lines."
)


def unwrap_tool(tool: Any) -> Any:
    """Extract the raw coroutine from a FastMCP FunctionTool, if wrapped.

    FastMCP 2.x wraps @app.tool functions in FunctionTool (not callable).
    FastMCP 3.x preserves the original function. This helper works with both.
    """
    return getattr(tool, "fn", tool)


def analysis_json(**overrides: Any) -> str:
    """A well-formed article / long-text payload as a provider would emit it."""
    payload: dict[str, Any] = {
        "reasoning": {
            "factual": ["Budget figures match the council minutes"],
            "unfactual": [],
            "subjective": [],
            "objective": ["Neutral, report-style wording"],
        },
        "credibilityScore": 82,
        "categories": {"factuality": 85, "objectivity": 78},
        "confidence": 70,
        "sources": ["https://example.org/council-minutes"],
    }
    payload.update(overrides)
    return json.dumps(payload)


def short_json(**analysis: str) -> str:
    return json.dumps({
        "analysis": analysis or {"fact": "Water boils at 100 C at sea level."},
        "confidence": 90,
        "sources": ["https://example.org/physics"],
    })


class ScriptedProvider:
    """Provider double that replays a fixed sequence of outcomes."""

    name = "scripted"

    def __init__(self, outcomes: list[str | ErrorRecord]) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[tuple[str, str]] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str | ErrorRecord:
        self.calls.append((system_prompt, user_prompt))
        if len(self._outcomes) > 1:
            return self._outcomes.pop(0)
        return self._outcomes[0]


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Pin provider selection and keep tests off real services."""
    monkeypatch.setenv("ANALYZER_PROVIDER", "pollinations")
    monkeypatch.setenv("GEMINI_API_KEY", "test-key-not-real")
    monkeypatch.setenv("ANALYZER_TRACING_ENABLED", "false")


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading ./.env or ~/.config/credibility-analyzer/.env."""
    monkeypatch.setattr(
        "credibility_analyzer.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )
    monkeypatch.setattr(
        "credibility_analyzer.dotenv._default_paths",
        lambda: [tmp_path / "nonexistent.env"],
    )


@pytest.fixture()
def clean_config():
    """Reset the config singleton between tests."""
    import credibility_analyzer.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture()
def config() -> AnalyzerConfig:
    return AnalyzerConfig(provider="pollinations")


@pytest.fixture()
def mock_sleep():
    """Patch the retry loop's sleep so backoff is recorded, not waited."""
    with patch("credibility_analyzer.retry.asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep
