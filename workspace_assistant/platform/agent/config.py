"""Configuration dataclasses for agent components.

This module provides immutable configuration objects for LLM clients
and agent loop behavior.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LlmConfig:
    """Configuration for language model clients.

    Attributes:
        model: LiteLLM model identifier (e.g., "anthropic/claude-sonnet-4-20250514")
        api_key: API key for the LLM provider
        base_url: Base URL for the API (e.g., LiteLLM proxy URL)
        temperature: Sampling temperature
    """

    model: str
    api_key: str | None = None
    base_url: str | None = None
    temperature: float = 0.2


@dataclass(frozen=True)
class AgentConfig:
    """Configuration for agent loop behavior.

    Attributes:
        default_recursion_limit: Tool rounds allowed when a request sets none
        max_recursion_limit: Largest recursion limit a request may ask for
        model_timeout_seconds: Wall-clock bound for one model call
        tool_timeout_seconds: Wall-clock bound for one tool call
        word_delay_seconds: Pause between streamed text deltas (0 disables)
    """

    default_recursion_limit: int = 100
    max_recursion_limit: int = 1000
    model_timeout_seconds: float = 120.0
    tool_timeout_seconds: float = 120.0
    word_delay_seconds: float = 0.0

    def resolve_recursion_limit(self, requested: int | None) -> int:
        """Clamp a caller-supplied limit into ``[1, max_recursion_limit]``."""
        if requested is None:
            return self.default_recursion_limit
        return max(1, min(requested, self.max_recursion_limit))


@dataclass(frozen=True)
class AgentIdentity:
    """Identity information for an agent.

    Attributes:
        name: Human-readable display name for the agent
        description: Brief description of the agent's capabilities
        slug: URL-safe identifier used in routes and metric labels
    """

    name: str
    description: str
    slug: str
