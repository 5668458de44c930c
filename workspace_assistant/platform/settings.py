"""Application settings and configuration.

This module provides Pydantic settings classes for application configuration,
loaded from environment variables with support for nested configuration.
"""

import logging

import pydantic_settings
from pydantic import BaseModel, Field, field_validator, model_validator


class AppHTTPSettings(BaseModel):
    url: str = Field("")
    host: str = Field("0.0.0.0")
    port: int = Field(8000)
    log_level: str = Field("INFO")
    log_json: bool | None = Field(
        None, description="Override log format: True=JSON, False=console, None=auto"
    )
    drain_seconds: float = Field(
        20.0, ge=0, description="Time between failing /health and exiting on SIGTERM"
    )

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v):
        v_upper = v.upper()
        if v_upper not in logging._nameToLevel:
            raise ValueError(f'invalid value "{v}"')
        return v_upper


class OpenTelemetrySettings(BaseModel):
    enabled: bool = Field(False)
    excluded_urls: str = Field("metrics,health,info")


class BugsnagSettings(BaseModel):
    api_key: str = Field("")
    release_stage: str = Field("local")

    @field_validator("release_stage")
    @classmethod
    def _validate_bugsnag_release_stage(cls, v):
        if v not in ["development", "production", "local"]:
            raise ValueError(f'invalid bugsnag release stage "{v}"')
        return v


class LlmSettings(BaseModel):
    """Language model provider configuration.

    Attributes:
        api_base: Optional base URL (e.g. a LiteLLM proxy) used for every provider
        api_key: Optional API key; providers fall back to their own env vars
        default_provider: Provider used when the request does not pick one
        anthropic_model: Default model id for the anthropic provider
        openai_model: Default model id for the openai provider
        temperature: Sampling temperature
    """

    api_base: str | None = None
    api_key: str | None = None
    default_provider: str = Field("anthropic")
    anthropic_model: str = Field("claude-sonnet-4-20250514")
    openai_model: str = Field("gpt-4o")
    temperature: float = Field(0.2, ge=0.0, le=2.0)

    @field_validator("default_provider")
    @classmethod
    def _validate_provider(cls, v):
        if v not in ["anthropic", "openai"]:
            raise ValueError(f'invalid llm provider "{v}"')
        return v


class AgentLoopSettings(BaseModel):
    """Bounds and pacing for the tool-calling loop.

    Attributes:
        default_recursion_limit: Tool rounds allowed when the request sets none
        max_recursion_limit: Upper bound accepted from requests
        model_timeout_seconds: Wall-clock limit for one model call
        tool_timeout_seconds: Wall-clock limit for one tool call
        word_delay_seconds: Pause between streamed text deltas
    """

    default_recursion_limit: int = Field(100, ge=1)
    max_recursion_limit: int = Field(1000, ge=1)
    model_timeout_seconds: float = Field(120.0, gt=0)
    tool_timeout_seconds: float = Field(120.0, gt=0)
    word_delay_seconds: float = Field(0.02, ge=0)

    @model_validator(mode="after")
    def _validate_limits(self):
        if self.default_recursion_limit > self.max_recursion_limit:
            raise ValueError("default_recursion_limit cannot exceed max_recursion_limit")
        return self


class ToolSettings(BaseModel):
    tavily_api_key: str = Field("")
    tavily_url: str = Field("https://api.tavily.com/search")
    files_api_url: str = Field("")
    http_timeout_seconds: float = Field(30.0, gt=0)


class Settings(pydantic_settings.BaseSettings):
    model_config = pydantic_settings.SettingsConfigDict(env_nested_delimiter="__")

    app_http: AppHTTPSettings = AppHTTPSettings()
    opentelemetry: OpenTelemetrySettings = OpenTelemetrySettings()
    bugsnag: BugsnagSettings = BugsnagSettings()

    # Language model configuration
    llm: LlmSettings = LlmSettings()

    # Agent loop bounds
    agent: AgentLoopSettings = AgentLoopSettings()

    # Built-in tool configuration
    tools: ToolSettings = ToolSettings()
