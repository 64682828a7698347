"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from credibility_analyzer.config import AnalyzerConfig, get_config


class TestFromEnv:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ANALYZER_PROVIDER", raising=False)
        monkeypatch.delenv("MODEL", raising=False)
        monkeypatch.delenv("MLFLOW_TRACKING_URI", raising=False)
        monkeypatch.delenv("PORT", raising=False)

        cfg = AnalyzerConfig.from_env()

        assert cfg.provider == "pollinations"
        assert cfg.retry_max_attempts == 3
        assert cfg.retry_max_delay == 10.0
        assert cfg.min_content_length == 50
        assert cfg.truncate_threshold == 5000
        assert cfg.truncate_length == 4000
        assert cfg.port == 8080
        assert cfg.tracing_enabled is False

    def test_provider_from_env_is_normalised(self, monkeypatch):
        monkeypatch.setenv("ANALYZER_PROVIDER", " Gemini ")
        assert AnalyzerConfig.from_env().provider == "gemini"

    def test_legacy_model_var(self, monkeypatch):
        monkeypatch.delenv("ANALYZER_PROVIDER", raising=False)
        monkeypatch.setenv("MODEL", "gemini")
        assert AnalyzerConfig.from_env().provider == "gemini"

    def test_numeric_overrides(self, monkeypatch):
        monkeypatch.setenv("ANALYZER_RETRY_BASE_DELAY", "0.5")
        monkeypatch.setenv("ANALYZER_MIN_CONTENT_LENGTH", "20")
        monkeypatch.setenv("PORT", "9000")

        cfg = AnalyzerConfig.from_env()

        assert cfg.retry_base_delay == 0.5
        assert cfg.min_content_length == 20
        assert cfg.port == 9000

    def test_tracing_enabled_by_tracking_uri(self, monkeypatch):
        monkeypatch.delenv("ANALYZER_TRACING_ENABLED", raising=False)
        monkeypatch.setenv("MLFLOW_TRACKING_URI", "http://127.0.0.1:5001")
        assert AnalyzerConfig.from_env().tracing_enabled is True

    def test_tracing_explicit_opt_out(self, monkeypatch):
        monkeypatch.setenv("ANALYZER_TRACING_ENABLED", "false")
        monkeypatch.setenv("MLFLOW_TRACKING_URI", "http://127.0.0.1:5001")
        assert AnalyzerConfig.from_env().tracing_enabled is False


class TestValidation:
    def test_unknown_provider_rejected(self):
        with pytest.raises(ValidationError, match="Unknown provider"):
            AnalyzerConfig(provider="openai")

    def test_blank_provider_rejected(self):
        with pytest.raises(ValidationError, match="No provider configured"):
            AnalyzerConfig(provider="  ")

    @pytest.mark.parametrize("attempts", [0, 4])
    def test_attempts_bounded(self, attempts: int):
        with pytest.raises(ValidationError):
            AnalyzerConfig(retry_max_attempts=attempts)

    def test_max_delay_bounded(self):
        with pytest.raises(ValidationError):
            AnalyzerConfig(retry_max_delay=30.0)

    def test_non_positive_delay_rejected(self):
        with pytest.raises(ValidationError):
            AnalyzerConfig(retry_base_delay=0)

    def test_log_level_uppercased(self):
        assert AnalyzerConfig(log_level="debug").log_level == "DEBUG"


class TestGetConfig:
    def test_singleton(self, clean_config):
        assert get_config() is get_config()

    def test_reads_dotenv(self, clean_config, tmp_path, monkeypatch):
        env = tmp_path / ".env"
        env.write_text("ANALYZER_PROVIDER=gemini\n")
        monkeypatch.setenv("ANALYZER_PROVIDER", "")
        monkeypatch.setattr("credibility_analyzer.dotenv._default_paths", lambda: [env])

        assert get_config().provider == "gemini"
