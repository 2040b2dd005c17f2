"""Completion provider interfaces."""

from typing import Any, AsyncIterator, Protocol

from ..agents.runtime import RuntimeAgent
from ..models import RunStreamEvent
from ..services.base import TextGenerator

HANDOFF_TOOL_PREFIX = "transfer_to"


def handoff_tool_name(agent_name: str) -> str:
    """Get the name of the function that hands control to an agent.

    Args:
        agent_name: Target agent name

    Returns:
        ``transfer_to_<name>`` with the name lowercased and non-alphanumerics replaced by ``_``
    """
    normalized = "".join(ch if ch.isalnum() else "_" for ch in agent_name.lower())
    return f"{HANDOFF_TOOL_PREFIX}_{normalized}"


class AgentRunner(Protocol):
    """Runs an agent over a transcript and streams typed events.

    The stream may switch agents internally on handoff. It ends after the
    running agent produces a message without tool calls.
    """

    def run_streamed(self, agent: RuntimeAgent, inputs: list[dict[str, Any]]) -> AsyncIterator[RunStreamEvent]:
        ...


__all__ = ["AgentRunner", "TextGenerator", "HANDOFF_TOOL_PREFIX", "handoff_tool_name"]
