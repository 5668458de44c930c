from workspace_assistant.agents.assistant.agent import AssistantAgentBuilder
from workspace_assistant.agents.assistant.routes import assistant_router

__all__ = ["AssistantAgentBuilder", "assistant_router"]
