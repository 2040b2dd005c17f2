"""Workflow Runtime.

A turn-taking runtime for multi-agent conversational workflows: agents
compiled from declarative configuration, handoffs between them, and tools
backed by vector search, MCP servers, Composio toolkits or model-synthesized
mocks.
"""

from .agents import RuntimeAgent, create_agents, map_config, validate_workflow
from .config import LLMConfig, RuntimeConfig, load_project_tools, load_runtime_config, load_workflow_config
from .errors import (
    AgentNotFoundError,
    ConfigurationError,
    ToolExecutionError,
    TurnLimitExceededError,
    WorkflowRuntimeError,
)
from .execution import TurnOrchestrator, TurnResponse, get_response, stream_response
from .models import (
    AssistantMessage,
    AssistantMessageWithToolCalls,
    Message,
    SystemMessage,
    ToolMessage,
    UsageEvent,
    UserMessage,
    Workflow,
    WorkflowAgent,
    WorkflowTool,
)
from .providers import AgentRunner, OpenAIProvider
from .services import ToolServices

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Messages
    "Message",
    "SystemMessage",
    "UserMessage",
    "AssistantMessage",
    "AssistantMessageWithToolCalls",
    "ToolMessage",
    "UsageEvent",
    # Workflows
    "Workflow",
    "WorkflowAgent",
    "WorkflowTool",
    # Configuration
    "LLMConfig",
    "RuntimeConfig",
    "load_runtime_config",
    "load_workflow_config",
    "load_project_tools",
    # Agents
    "RuntimeAgent",
    "map_config",
    "create_agents",
    "validate_workflow",
    # Execution
    "TurnOrchestrator",
    "TurnResponse",
    "stream_response",
    "get_response",
    # Providers
    "AgentRunner",
    "OpenAIProvider",
    "ToolServices",
    # Errors
    "WorkflowRuntimeError",
    "ConfigurationError",
    "AgentNotFoundError",
    "ToolExecutionError",
    "TurnLimitExceededError",
]
