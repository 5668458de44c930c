"""Service plumbing the assistant runs on: settings, the agent runtime, the
HTTP server and observability. Agent-specific behavior lives under
``workspace_assistant.agents``.
"""

from workspace_assistant.platform.agent import Agent, AgentConfig, AgentIdentity, LlmConfig
from workspace_assistant.platform.settings import Settings

__all__ = ["Agent", "AgentConfig", "AgentIdentity", "LlmConfig", "Settings"]
