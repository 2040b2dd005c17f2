"""Transcript helpers for the turn loop.

Pure functions over the ordered message list: system-message repair, call
stack reconstruction, provider input conversion and synthetic transfer
records.
"""

import json
from typing import Any, Optional

from ..models import (
    AssistantMessage,
    AssistantMessageWithToolCalls,
    FunctionCall,
    Message,
    SystemMessage,
    ToolCall,
    ToolMessage,
    UserMessage,
)
from ..providers.base import HANDOFF_TOOL_PREFIX
from ..utils import PrefixLogger, generate_tool_call_id

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."
TRANSFER_TOOL_NAME = "transfer_to_agent"

__all__ = [
    "DEFAULT_SYSTEM_PROMPT",
    "TRANSFER_TOOL_NAME",
    "HANDOFF_TOOL_PREFIX",
    "ensure_system_message",
    "create_agent_call_stack",
    "convert_messages_input",
    "create_transfer_messages",
    "is_handoff_call",
]


def ensure_system_message(messages: list[Message], logger: Optional[PrefixLogger] = None) -> None:
    """Make sure the transcript starts with a non-empty system message.

    Mutates ``messages`` in place. A transcript without a leading system
    message (including an empty one) gets the default prepended; a leading
    system message with empty content gets the default content.

    Args:
        messages: Transcript
        logger: Optional logger
    """
    if not messages or messages[0].role != "system":
        messages.insert(0, SystemMessage(content=DEFAULT_SYSTEM_PROMPT))
        if logger:
            logger.debug(f"added system message: {DEFAULT_SYSTEM_PROMPT}")
        return

    if not messages[0].content:
        messages[0] = SystemMessage(content=DEFAULT_SYSTEM_PROMPT)
        if logger:
            logger.debug(f"updated system message: {DEFAULT_SYSTEM_PROMPT}")


def create_agent_call_stack(messages: list[Message]) -> list[str]:
    """Rebuild the agent call stack from a transcript.

    Every assistant message with an agent name pushes that name, unless it
    equals the current top of the stack.

    Args:
        messages: Transcript

    Returns:
        Agent names, bottom first
    """
    stack: list[str] = []
    for msg in messages:
        if msg.role != "assistant" or not msg.agent_name:
            continue
        if stack and stack[-1] == msg.agent_name:
            continue
        stack.append(msg.agent_name)
    return stack


def convert_messages_input(messages: list[Message]) -> list[dict[str, Any]]:
    """Convert a transcript into provider input items.

    Assistant messages with content become a completed ``output_text`` item
    naming the sender agent; user and system messages pass through. Tool
    calls and tool results are not replayed.

    Args:
        messages: Transcript

    Returns:
        Provider input items
    """
    items: list[dict[str, Any]] = []
    for msg in messages:
        if isinstance(msg, AssistantMessage) and msg.content:
            items.append(
                {
                    "role": "assistant",
                    "content": [
                        {
                            "type": "output_text",
                            "text": f"Sender agent: {msg.agent_name}\nContent: {msg.content}",
                        }
                    ],
                    "status": "completed",
                }
            )
        elif isinstance(msg, (UserMessage, SystemMessage)):
            items.append({"role": msg.role, "content": msg.content})
    return items


def create_transfer_messages(
    from_agent: str,
    to_agent: str,
) -> tuple[AssistantMessageWithToolCalls, ToolMessage]:
    """Create the synthetic record of a transfer between agents.

    Args:
        from_agent: Agent giving up control
        to_agent: Agent receiving control

    Returns:
        Tuple of (tool call message, tool result message) sharing one call id
    """
    tool_call_id = generate_tool_call_id()
    payload = json.dumps({"assistant": to_agent})

    call = AssistantMessageWithToolCalls(
        tool_calls=[
            ToolCall(
                id=tool_call_id,
                function=FunctionCall(name=TRANSFER_TOOL_NAME, arguments=payload),
            )
        ],
        agent_name=from_agent,
    )
    result = ToolMessage(content=payload, tool_call_id=tool_call_id, tool_name=TRANSFER_TOOL_NAME)
    return call, result


def is_handoff_call(name: str) -> bool:
    return name.startswith(HANDOFF_TOOL_PREFIX)
