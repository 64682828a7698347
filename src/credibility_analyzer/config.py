"""Analyzer configuration via environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

from .errors import MAX_BACKOFF_SECONDS

VALID_PROVIDERS = {"gemini", "pollinations"}
MAX_ATTEMPTS_LIMIT = 3

POLLINATIONS_DEFAULT_URL = "https://text.pollinations.ai/openai"


def _resolve_tracing_enabled(flag_value: str, tracking_uri: str) -> bool:
    """Derive tracing_enabled from env vars.

    - ``ANALYZER_TRACING_ENABLED=false`` → always disabled (explicit opt-out).
    - Otherwise enabled when ``MLFLOW_TRACKING_URI`` is non-empty.
    """
    if flag_value.lower() == "false":
        return False
    return bool(tracking_uri)


class AnalyzerConfig(BaseModel):
    """Runtime configuration resolved once from the environment."""

    provider: str = Field(default="pollinations")
    gemini_api_key: str = Field(default="")
    gemini_model: str = Field(default="gemini-2.5-flash")
    gemini_temperature: float = Field(default=0.5)
    pollinations_url: str = Field(default=POLLINATIONS_DEFAULT_URL)
    pollinations_model: str = Field(default="openai-fast")
    pollinations_temperature: float = Field(default=0.7)
    request_timeout: float = Field(default=30.0)
    retry_max_attempts: int = Field(default=3)
    retry_base_delay: float = Field(default=1.0)
    retry_max_delay: float = Field(default=MAX_BACKOFF_SECONDS)
    min_content_length: int = Field(default=50)
    truncate_threshold: int = Field(default=5000)
    truncate_length: int = Field(default=4000)
    port: int = Field(default=8080)
    log_level: str = Field(default="INFO")
    tracing_enabled: bool = Field(default=False)
    mlflow_tracking_uri: str = Field(default="")
    mlflow_experiment_name: str = Field(default="credibility-analyzer")

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, value: str) -> str:
        name = value.strip().lower()
        if not name:
            raise ValueError("No provider configured; set ANALYZER_PROVIDER to 'gemini' or 'pollinations'")
        if name not in VALID_PROVIDERS:
            allowed = ", ".join(sorted(VALID_PROVIDERS))
            raise ValueError(f"Unknown provider '{value}'. Allowed: {allowed}")
        return name

    @field_validator("retry_max_attempts")
    @classmethod
    def validate_retry_max_attempts(cls, value: int) -> int:
        if not 1 <= value <= MAX_ATTEMPTS_LIMIT:
            raise ValueError(f"retry_max_attempts must be between 1 and {MAX_ATTEMPTS_LIMIT}")
        return value

    @field_validator("retry_base_delay", "retry_max_delay", "request_timeout")
    @classmethod
    def validate_positive_delays(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Delays and timeouts must be > 0")
        return value

    @field_validator("retry_max_delay")
    @classmethod
    def validate_retry_max_delay(cls, value: float) -> float:
        if value > MAX_BACKOFF_SECONDS:
            raise ValueError(f"retry_max_delay must be <= {MAX_BACKOFF_SECONDS:g}s")
        return value

    @field_validator("min_content_length", "truncate_threshold", "truncate_length")
    @classmethod
    def validate_positive_lengths(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Length limits must be >= 1")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @classmethod
    def from_env(cls) -> AnalyzerConfig:
        """Build config from environment variables."""
        return cls(
            provider=os.getenv("ANALYZER_PROVIDER") or os.getenv("MODEL") or "pollinations",
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
            gemini_temperature=float(os.getenv("GEMINI_TEMPERATURE", "0.5")),
            pollinations_url=os.getenv("POLLINATIONS_URL", POLLINATIONS_DEFAULT_URL),
            pollinations_model=os.getenv("POLLINATIONS_MODEL", "openai-fast"),
            pollinations_temperature=float(os.getenv("POLLINATIONS_TEMPERATURE", "0.7")),
            request_timeout=float(os.getenv("ANALYZER_REQUEST_TIMEOUT", "30")),
            retry_max_attempts=int(os.getenv("ANALYZER_RETRY_MAX_ATTEMPTS", "3")),
            retry_base_delay=float(os.getenv("ANALYZER_RETRY_BASE_DELAY", "1.0")),
            retry_max_delay=float(os.getenv("ANALYZER_RETRY_MAX_DELAY", str(MAX_BACKOFF_SECONDS))),
            min_content_length=int(os.getenv("ANALYZER_MIN_CONTENT_LENGTH", "50")),
            truncate_threshold=int(os.getenv("ANALYZER_TRUNCATE_THRESHOLD", "5000")),
            truncate_length=int(os.getenv("ANALYZER_TRUNCATE_LENGTH", "4000")),
            port=int(os.getenv("PORT", "8080")),
            log_level=os.getenv("ANALYZER_LOG_LEVEL", "INFO"),
            tracing_enabled=_resolve_tracing_enabled(
                os.getenv("ANALYZER_TRACING_ENABLED", ""),
                os.getenv("MLFLOW_TRACKING_URI", ""),
            ),
            mlflow_tracking_uri=os.getenv("MLFLOW_TRACKING_URI", ""),
            mlflow_experiment_name=os.getenv("MLFLOW_EXPERIMENT_NAME", "credibility-analyzer"),
        )


# Singleton, resolved once per process, read-only afterwards.
_config: AnalyzerConfig | None = None


def get_config() -> AnalyzerConfig:
    """Return the process config, creating it on first access.

    Loads ``./.env`` and ``~/.config/credibility-analyzer/.env`` before
    reading env vars. Process environment always takes precedence.
    """
    global _config
    if _config is None:
        import logging

        from .dotenv import load_dotenv

        injected = load_dotenv()
        if injected:
            logger = logging.getLogger(__name__)
            logger.info(
                "Loaded %d var(s) from config: %s",
                len(injected),
                ", ".join(injected.keys()),
            )
        _config = AnalyzerConfig.from_env()
    return _config
