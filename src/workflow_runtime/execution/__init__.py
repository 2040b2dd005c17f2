"""Turn execution over multi-agent workflows."""

from .transcript import (
    DEFAULT_SYSTEM_PROMPT,
    TRANSFER_TOOL_NAME,
    convert_messages_input,
    create_agent_call_stack,
    create_transfer_messages,
    ensure_system_message,
)
from .turn import (
    TurnOrchestrator,
    TurnResponse,
    emit_greeting_turn,
    get_next_agent_name,
    get_response,
    stream_response,
)

__all__ = [
    # Transcript
    "DEFAULT_SYSTEM_PROMPT",
    "TRANSFER_TOOL_NAME",
    "ensure_system_message",
    "create_agent_call_stack",
    "convert_messages_input",
    "create_transfer_messages",
    # Turn
    "TurnOrchestrator",
    "TurnResponse",
    "emit_greeting_turn",
    "get_next_agent_name",
    "stream_response",
    "get_response",
]
