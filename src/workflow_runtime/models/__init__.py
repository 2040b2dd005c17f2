"""Data models for the workflow runtime."""

from .datasource import DataSource, DataSourceDoc, EmbeddingRecord
from .events import (
    FunctionCallItem,
    HandoffOccurredEvent,
    MessageItem,
    MessageOutputEvent,
    OutputContent,
    OutputEvent,
    ResponseCompletedEvent,
    ResponseUsage,
    RunStreamEvent,
    TokenCounts,
    ToolCallOutputEvent,
    ToolOutput,
    UsageEvent,
)
from .message import (
    AssistantMessage,
    AssistantMessageWithToolCalls,
    FunctionCall,
    Message,
    OutMessage,
    ResponseType,
    SystemMessage,
    ToolCall,
    ToolMessage,
    UserMessage,
    parse_message,
    parse_messages,
)
from .project import ConnectedAccount, ConnectedAccountStatus, ProjectConfig
from .workflow import (
    ComposioToolData,
    ConnectedEntity,
    ToolParameters,
    Workflow,
    WorkflowAgent,
    WorkflowPrompt,
    WorkflowTool,
)

__all__ = [
    # Messages
    "Message",
    "OutMessage",
    "SystemMessage",
    "UserMessage",
    "AssistantMessage",
    "AssistantMessageWithToolCalls",
    "ToolMessage",
    "ToolCall",
    "FunctionCall",
    "ResponseType",
    "parse_message",
    "parse_messages",
    # Output events
    "OutputEvent",
    "UsageEvent",
    "TokenCounts",
    # Provider stream events
    "RunStreamEvent",
    "ResponseCompletedEvent",
    "ResponseUsage",
    "FunctionCallItem",
    "MessageItem",
    "HandoffOccurredEvent",
    "ToolCallOutputEvent",
    "ToolOutput",
    "MessageOutputEvent",
    "OutputContent",
    # Workflows
    "Workflow",
    "WorkflowAgent",
    "WorkflowTool",
    "WorkflowPrompt",
    "ToolParameters",
    "ComposioToolData",
    "ConnectedEntity",
    # Projects
    "ProjectConfig",
    "ConnectedAccount",
    "ConnectedAccountStatus",
    # Data sources
    "DataSource",
    "DataSourceDoc",
    "EmbeddingRecord",
]
