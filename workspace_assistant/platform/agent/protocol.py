"""Agent protocol definitions.

This module defines the framework-agnostic Agent protocol that streaming
agent implementations satisfy, so routes depend on the protocol only.
"""

from collections.abc import AsyncIterator
from typing import Any, Protocol

from workspace_assistant.platform.agent.config import AgentIdentity
from workspace_assistant.platform.agent.messages import Message, StreamEvent


class Agent(Protocol):
    """Protocol for a streaming agent."""

    @property
    def identity(self) -> AgentIdentity:
        """The identity of the agent."""
        ...

    @property
    def name(self) -> str:
        """The name of the agent."""
        ...

    @property
    def slug(self) -> str:
        """The slug of the agent."""
        ...

    def run_stream(
        self,
        messages: list[Message],
        context: Any,
    ) -> AsyncIterator[StreamEvent]:
        """Run the agent over a normalized history and stream wire events.

        Args:
            messages: Canonical conversation history, system prompt first
            context: Immutable request-scoped context

        Yields:
            StreamEvent objects, always ending with a ``done`` event
        """
        ...
