"""AI provider adapters and the factory that selects one from config."""

from __future__ import annotations

from ..config import AnalyzerConfig
from .base import Provider
from .gemini import GeminiProvider
from .pollinations import PollinationsProvider

__all__ = ["GeminiProvider", "PollinationsProvider", "Provider", "make_provider"]


def make_provider(config: AnalyzerConfig) -> Provider:
    """Build the provider named by ``config.provider``."""
    if config.provider == "gemini":
        return GeminiProvider(
            config.gemini_api_key,
            model=config.gemini_model,
            temperature=config.gemini_temperature,
            timeout=config.request_timeout,
        )
    if config.provider == "pollinations":
        return PollinationsProvider(
            url=config.pollinations_url,
            model=config.pollinations_model,
            temperature=config.pollinations_temperature,
            timeout=config.request_timeout,
        )
    raise ValueError(f"{config.provider!r} is not a recognized provider")
