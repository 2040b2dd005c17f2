"""Event entities for the workflow runtime.

Two families of events live here: the events a completion provider streams
while running an agent (consumed by the turn loop), and the usage snapshot
the turn loop emits to its caller next to the output messages.
"""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from .message import OutMessage, WireModel


class TokenCounts(WireModel):
    """Running token totals.

    Attributes:
        total: Total tokens
        prompt: Prompt (input) tokens
        completion: Completion (output) tokens
    """

    total: int = Field(default=0, ge=0)
    prompt: int = Field(default=0, ge=0)
    completion: int = Field(default=0, ge=0)


class UsageEvent(WireModel):
    """Usage snapshot emitted by the turn loop."""

    tokens: TokenCounts = Field(default_factory=TokenCounts)


OutputEvent = Union[OutMessage, UsageEvent]


# Provider stream events


class ResponseUsage(BaseModel):
    """Token usage reported for one model response."""

    total_tokens: int = 0
    input_tokens: int = 0
    output_tokens: int = 0


class FunctionCallItem(BaseModel):
    """Function call requested by a completed model response."""

    type: Literal["function_call"] = "function_call"
    call_id: str
    name: str
    arguments: str = "{}"


class MessageItem(BaseModel):
    """Text produced by a completed model response."""

    type: Literal["message"] = "message"
    text: str


ResponseOutputItem = Annotated[Union[FunctionCallItem, MessageItem], Field(discriminator="type")]


class ResponseCompletedEvent(BaseModel):
    """A model call finished; carries its outputs and token usage."""

    type: Literal["response_completed"] = "response_completed"
    output: list[ResponseOutputItem] = Field(default_factory=list)
    usage: ResponseUsage = Field(default_factory=ResponseUsage)


class HandoffOccurredEvent(BaseModel):
    """Control moved from one agent to another inside a provider run."""

    type: Literal["handoff_occurred"] = "handoff_occurred"
    source_agent: str
    target_agent: str


class ToolOutput(BaseModel):
    """Output of an executed tool."""

    type: Literal["text", "image"] = "text"
    text: str = ""


class ToolCallOutputEvent(BaseModel):
    """A tool call was executed by the provider run."""

    type: Literal["tool_call_output"] = "tool_call_output"
    call_id: str
    tool_name: str
    status: Literal["completed", "incomplete", "in_progress"] = "completed"
    output: ToolOutput = Field(default_factory=ToolOutput)


class OutputContent(BaseModel):
    """One content segment of a message output."""

    type: Literal["output_text", "refusal"] = "output_text"
    text: str = ""


class MessageOutputEvent(BaseModel):
    """An agent produced a message."""

    type: Literal["message_output"] = "message_output"
    agent_name: str
    status: Literal["completed", "incomplete", "in_progress"] = "completed"
    content: list[OutputContent] = Field(default_factory=list)


RunStreamEvent = Annotated[
    Union[ResponseCompletedEvent, HandoffOccurredEvent, ToolCallOutputEvent, MessageOutputEvent],
    Field(discriminator="type"),
]
