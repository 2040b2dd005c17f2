"""Message entities for the workflow runtime.

This module defines the canonical conversation messages exchanged with
callers. Messages serialize with camelCase keys (``agentName``,
``toolCallId``) and accept either spelling on input.
"""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ResponseType = Literal["internal", "external"]


class WireModel(BaseModel):
    """Base model for entities that travel over the wire in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary using wire (camelCase) keys.

        Unset optional fields (None) are left out.

        Returns:
            Dictionary representation
        """
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class FunctionCall(WireModel):
    """Function invoked by a tool call.

    Attributes:
        name: Function (tool) name
        arguments: JSON-encoded arguments
    """

    name: str = Field(..., description="Function name")
    arguments: str = Field(default="{}", description="JSON-encoded arguments")


class ToolCall(WireModel):
    """Represents a tool invocation within an assistant message.

    Attributes:
        id: Unique call ID
        type: Always "function"
        function: Invoked function
    """

    id: str = Field(..., description="Unique call ID")
    type: Literal["function"] = "function"
    function: FunctionCall


class SystemMessage(WireModel):
    """System prompt at the head of a transcript."""

    role: Literal["system"] = "system"
    content: str = ""


class UserMessage(WireModel):
    """Message typed by the end user."""

    role: Literal["user"] = "user"
    content: str


class AssistantMessage(WireModel):
    """Text produced by an agent.

    Attributes:
        content: Message text (None only for tool-call carriers)
        agent_name: Originating agent
        response_type: Visibility of the message to the end user
        tool_calls: Optional tool calls
    """

    role: Literal["assistant"] = "assistant"
    content: Optional[str] = None
    agent_name: Optional[str] = Field(None, description="Originating agent")
    response_type: ResponseType = Field(default="external", description="internal or external")
    tool_calls: Optional[list[ToolCall]] = None


class AssistantMessageWithToolCalls(WireModel):
    """Assistant message that carries one or more tool calls and no text."""

    role: Literal["assistant"] = "assistant"
    content: None = None
    tool_calls: list[ToolCall] = Field(..., min_length=1, description="Tool invocations")
    agent_name: Optional[str] = Field(None, description="Originating agent")

    def to_dict(self) -> dict[str, Any]:
        # Tool-call carriers always state their null content
        return {**super().to_dict(), "content": None}


class ToolMessage(WireModel):
    """Result of a tool call.

    Attributes:
        content: JSON-encoded tool result
        tool_call_id: ID of the call this answers
        tool_name: Name of the invoked tool
    """

    role: Literal["tool"] = "tool"
    content: str
    tool_call_id: str
    tool_name: str


Message = Union[SystemMessage, UserMessage, AssistantMessage, AssistantMessageWithToolCalls, ToolMessage]
OutMessage = Union[AssistantMessage, AssistantMessageWithToolCalls, ToolMessage]


def parse_message(data: dict[str, Any] | Message) -> Message:
    """Parse a raw message dictionary into its message variant.

    Assistant messages with tool calls and no content become
    ``AssistantMessageWithToolCalls``; every other assistant message becomes
    ``AssistantMessage``.

    Args:
        data: Raw message (camelCase or snake_case keys) or a parsed message

    Returns:
        Parsed message

    Raises:
        ValueError: If the role is unknown
    """
    if isinstance(data, BaseModel):
        return data

    role = data.get("role")
    if role == "system":
        return SystemMessage.model_validate(data)
    if role == "user":
        return UserMessage.model_validate(data)
    if role == "tool":
        return ToolMessage.model_validate(data)
    if role == "assistant":
        tool_calls = data.get("toolCalls", data.get("tool_calls"))
        if tool_calls and data.get("content") is None:
            return AssistantMessageWithToolCalls.model_validate(data)
        return AssistantMessage.model_validate(data)
    raise ValueError(f"Unknown message role: {role!r}")


def parse_messages(data: list[dict[str, Any] | Message]) -> list[Message]:
    """Parse a list of raw messages.

    Args:
        data: Raw messages

    Returns:
        Parsed messages, in order
    """
    return [parse_message(item) for item in data]
