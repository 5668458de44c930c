"""Unit tests for the settings sections and their validators."""

import pytest
from pydantic import ValidationError

from workspace_assistant.platform.settings import (
    AgentLoopSettings,
    AppHTTPSettings,
    BugsnagSettings,
    LlmSettings,
    OpenTelemetrySettings,
    Settings,
    ToolSettings,
)


class TestAppHTTPSettings:
    """Tests for AppHTTPSettings configuration."""

    def test_default_values(self):
        """Settings should have sensible defaults."""
        settings = AppHTTPSettings()
        assert settings.host == "0.0.0.0"
        assert settings.port == 8000
        assert settings.log_level == "INFO"
        assert settings.log_json is None
        assert settings.drain_seconds == 20.0

    def test_drain_seconds_cannot_be_negative(self):
        with pytest.raises(ValidationError):
            AppHTTPSettings(drain_seconds=-1)

    def test_log_level_validation_valid(self):
        """Valid log levels should be accepted."""
        for level in ["DEBUG", "INFO", "WARNING", "ERROR", "debug", "info"]:
            settings = AppHTTPSettings(log_level=level)
            assert settings.log_level == level.upper()

    def test_log_level_validation_invalid(self):
        """Invalid log levels should raise ValidationError."""
        with pytest.raises(ValidationError):
            AppHTTPSettings(log_level="INVALID")


class TestBugsnagSettings:
    """Tests for BugsnagSettings configuration."""

    def test_valid_release_stages(self):
        """Valid release stages should be accepted."""
        for stage in ["development", "production", "local"]:
            settings = BugsnagSettings(api_key="test-key", release_stage=stage)
            assert settings.release_stage == stage

    def test_invalid_release_stage(self):
        """Invalid release stage should raise ValidationError."""
        with pytest.raises(ValidationError):
            BugsnagSettings(api_key="test-key", release_stage="staging")


class TestOpenTelemetrySettings:
    """Tests for OpenTelemetrySettings configuration."""

    def test_disabled_by_default(self):
        settings = OpenTelemetrySettings()
        assert settings.enabled is False
        assert "health" in settings.excluded_urls


class TestLlmSettings:
    """Tests for LlmSettings configuration."""

    def test_defaults(self):
        settings = LlmSettings()
        assert settings.default_provider == "anthropic"
        assert settings.api_base is None
        assert settings.temperature == 0.2

    def test_openai_provider_accepted(self):
        assert LlmSettings(default_provider="openai").default_provider == "openai"

    def test_unknown_provider_rejected(self):
        with pytest.raises(ValidationError):
            LlmSettings(default_provider="cohere")

    def test_temperature_bounds(self):
        with pytest.raises(ValidationError):
            LlmSettings(temperature=3.0)


class TestAgentLoopSettings:
    """Tests for AgentLoopSettings configuration."""

    def test_defaults(self):
        settings = AgentLoopSettings()
        assert settings.default_recursion_limit == 100
        assert settings.max_recursion_limit == 1000
        assert settings.word_delay_seconds == 0.02

    def test_default_limit_cannot_exceed_max(self):
        with pytest.raises(ValidationError):
            AgentLoopSettings(default_recursion_limit=50, max_recursion_limit=10)

    def test_limits_must_be_positive(self):
        with pytest.raises(ValidationError):
            AgentLoopSettings(default_recursion_limit=0)

    def test_timeouts_must_be_positive(self):
        with pytest.raises(ValidationError):
            AgentLoopSettings(tool_timeout_seconds=0)


class TestToolSettings:
    """Tests for ToolSettings configuration."""

    def test_defaults(self):
        settings = ToolSettings()
        assert settings.tavily_api_key == ""
        assert settings.tavily_url == "https://api.tavily.com/search"
        assert settings.files_api_url == ""


class TestSettings:
    """Tests for the root Settings model."""

    def test_builds_with_defaults(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("LLM__DEFAULT_PROVIDER", raising=False)
        settings = Settings()
        assert settings.app_http.port == 8000
        assert settings.agent.default_recursion_limit == 100

    def test_nested_env_vars(self, monkeypatch: pytest.MonkeyPatch):
        """Nested sections are read with a double-underscore delimiter."""
        monkeypatch.setenv("AGENT__DEFAULT_RECURSION_LIMIT", "7")
        monkeypatch.setenv("TOOLS__TAVILY_API_KEY", "tvly-test")
        monkeypatch.setenv("LLM__DEFAULT_PROVIDER", "openai")

        settings = Settings()

        assert settings.agent.default_recursion_limit == 7
        assert settings.tools.tavily_api_key == "tvly-test"
        assert settings.llm.default_provider == "openai"
