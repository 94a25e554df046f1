"""Tests for runtime settings."""

import os
from unittest.mock import patch

import pytest

from weekly_report.ai.github_models import DEFAULT_BASE_URL, DEFAULT_MODEL
from weekly_report.config import ResolverConfig, Settings
from weekly_report.errors import ConfigError


class TestSettingsFromEnv:
    """Test Settings.from_env."""

    def test_defaults(self) -> None:
        """Test a token alone gives the default settings."""
        settings = Settings.from_env({"GITHUB_TOKEN": "t"})

        assert settings.github_token == "t"
        assert settings.since_days == 7
        assert settings.concurrency == 4
        assert settings.notes
        assert settings.ai_enabled
        assert settings.sentiment
        assert settings.ai_timeout == 120.0
        assert settings.models_base_url == DEFAULT_BASE_URL
        assert settings.models_model == DEFAULT_MODEL

    def test_missing_token(self) -> None:
        """Test GITHUB_TOKEN is required."""
        with pytest.raises(ConfigError, match="GITHUB_TOKEN"):
            Settings.from_env({})

    @patch.dict(os.environ, {"GITHUB_TOKEN": "from-environ"}, clear=True)
    def test_reads_process_environment(self) -> None:
        """Test os.environ is used when no mapping is passed."""
        assert Settings.from_env().github_token == "from-environ"

    def test_disable_summary(self) -> None:
        """Test DISABLE_SUMMARY turns off AI and sentiment."""
        settings = Settings.from_env({"GITHUB_TOKEN": "t", "DISABLE_SUMMARY": "1"})

        assert not settings.ai_enabled
        assert not settings.sentiment

    def test_no_sentiment(self) -> None:
        """Test --no-sentiment keeps AI summaries but drops the status check."""
        settings = Settings.from_env({"GITHUB_TOKEN": "t"}, no_sentiment=True)

        assert settings.ai_enabled
        assert not settings.sentiment

    @pytest.mark.parametrize(
        ("raw", "expected"), [("30", 30.0), ("0", 120.0), ("-5", 120.0), ("", 120.0)]
    )
    def test_ai_timeout(self, raw: str, expected: float) -> None:
        """Test AI_TIMEOUT is used only when it is a positive integer."""
        settings = Settings.from_env({"GITHUB_TOKEN": "t", "AI_TIMEOUT": raw})
        assert settings.ai_timeout == expected

    def test_ai_timeout_not_integer(self) -> None:
        """Test a non-numeric AI_TIMEOUT is rejected."""
        with pytest.raises(ConfigError, match="AI_TIMEOUT"):
            Settings.from_env({"GITHUB_TOKEN": "t", "AI_TIMEOUT": "soon"})

    def test_quiet_overrides_verbose(self) -> None:
        """Test quiet mode wins over verbose mode."""
        settings = Settings.from_env({"GITHUB_TOKEN": "t"}, verbose=True, quiet=True)

        assert settings.quiet
        assert not settings.verbose

    @pytest.mark.parametrize(
        "kwargs", [{"since_days": 0}, {"concurrency": 0}, {"since_days": -3}]
    )
    def test_invalid_numbers(self, kwargs: dict[str, int]) -> None:
        """Test non-positive windows and concurrency are rejected."""
        with pytest.raises(ConfigError):
            Settings.from_env({"GITHUB_TOKEN": "t"}, **kwargs)

    def test_no_notes(self) -> None:
        """Test --no-notes disables the notes section."""
        assert not Settings.from_env({"GITHUB_TOKEN": "t"}, no_notes=True).notes


class TestResolverConfig:
    """Test ResolverConfig defaults."""

    def test_defaults(self) -> None:
        """Test project defaults."""
        config = ResolverConfig()

        assert config.project_field_name == "Status"
        assert config.project_max_items == 100
        assert config.project_field_values == []
        assert not config.use_stdin
