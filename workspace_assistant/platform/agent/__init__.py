"""Agent runtime: the wire message and event types, the LangGraph driver and
the LiteLLM model adapter shared by every agent."""

from workspace_assistant.platform.agent.config import AgentConfig, AgentIdentity, LlmConfig
from workspace_assistant.platform.agent.langgraph import LangGraphAgent
from workspace_assistant.platform.agent.llm_client import ModelAdapter
from workspace_assistant.platform.agent.messages import Message, StreamEvent
from workspace_assistant.platform.agent.protocol import Agent

__all__ = [
    "Agent",
    "AgentConfig",
    "AgentIdentity",
    "LangGraphAgent",
    "LlmConfig",
    "Message",
    "ModelAdapter",
    "StreamEvent",
]
