"""Exception types for the workflow runtime.

Configuration errors abort an invocation before or during the turn loop.
Tool execution errors never reach the loop: tool handlers turn them into
``{"error": ...}`` payloads. Provider errors propagate unchanged.
"""


class WorkflowRuntimeError(Exception):
    """Base class for all workflow runtime errors."""

    pass


class ConfigurationError(WorkflowRuntimeError):
    """Raised when a workflow, agent or tool definition cannot be compiled."""

    pass


class AgentNotFoundError(ConfigurationError):
    """Raised when the active agent name is missing from the compiled agent graph."""

    def __init__(self, agent_name: str) -> None:
        super().__init__(f"Agent not found in agent config: {agent_name}")
        self.agent_name = agent_name


class TurnLimitExceededError(WorkflowRuntimeError):
    """Raised when a turn exceeds its loop iteration or transfer budget."""

    def __init__(self, limit_name: str, limit: int) -> None:
        super().__init__(f"Turn exceeded {limit_name}={limit} without a user-facing reply")
        self.limit_name = limit_name
        self.limit = limit


class MaxTurnsExceededError(WorkflowRuntimeError):
    """Raised by a provider run when the model keeps calling tools past its turn budget."""

    pass


class ToolExecutionError(WorkflowRuntimeError):
    """Raised inside tool handlers; converted to an error payload at the handler boundary."""

    pass


class ConnectedAccountNotFoundError(ToolExecutionError):
    """Raised when a project has no connected account for a toolkit."""

    def __init__(self, project_id: str, toolkit_slug: str) -> None:
        super().__init__(
            f"connected account id not found for project {project_id} and toolkit {toolkit_slug}"
        )
        self.project_id = project_id
        self.toolkit_slug = toolkit_slug


class ComposioAPIError(ToolExecutionError):
    """Raised when the Composio API returns an error envelope."""

    def __init__(self, message: str, error_code: int | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code


class MCPError(ToolExecutionError):
    """Raised when an MCP server returns a JSON-RPC error or cannot be reached."""

    pass
