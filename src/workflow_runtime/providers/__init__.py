"""Completion providers."""

from .base import HANDOFF_TOOL_PREFIX, AgentRunner, TextGenerator, handoff_tool_name
from .openai_provider import OpenAIProvider, inputs_to_chat_messages

__all__ = [
    "AgentRunner",
    "TextGenerator",
    "HANDOFF_TOOL_PREFIX",
    "handoff_tool_name",
    "OpenAIProvider",
    "inputs_to_chat_messages",
]
