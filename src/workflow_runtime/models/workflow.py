"""Workflow entities for the workflow runtime.

A workflow is the per-invocation configuration of an agent graph: agents,
the tools they may mention, reusable prompts and the start agent.
"""

from typing import Any, Literal, Optional

from pydantic import Field, model_validator

from .message import WireModel


class ToolParameters(WireModel):
    """JSON-schema-like parameter spec of a tool.

    Attributes:
        type: Always "object"
        properties: Property schemas by name
        required: Required property names
    """

    type: Literal["object"] = "object"
    properties: dict[str, Any] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)


class ComposioToolData(WireModel):
    """Third-party toolkit metadata of a Composio tool.

    Attributes:
        slug: Tool slug (e.g. GITHUB_CREATE_ISSUE)
        toolkit_slug: Toolkit slug (e.g. github)
        no_auth: Whether the tool runs without a connected account
    """

    slug: str
    toolkit_slug: str
    no_auth: bool = False


class WorkflowTool(WireModel):
    """Declarative tool definition.

    Exactly one kind marker is expected: ``is_rag``, ``mock_tool``,
    ``is_mcp`` or ``is_composio``. A tool without a marker is skipped when the
    tool registry is built.
    """

    name: str = Field(..., description="Unique tool name")
    description: str = Field(default="", description="Tool description shown to the model")
    parameters: ToolParameters = Field(default_factory=ToolParameters)

    is_rag: bool = Field(default=False, description="Vector search over project data sources")
    rag_data_sources: list[str] = Field(default_factory=list)
    rag_return_type: Literal["chunks", "content"] = "chunks"
    rag_k: int = Field(default=3, ge=1)

    mock_tool: bool = Field(default=False, description="Responses synthesized by a model")
    mock_instructions: str = ""

    is_mcp: bool = Field(default=False, description="Forwarded to an external MCP server")
    mcp_server_url: Optional[str] = Field(None, alias="mcpServerURL")
    mcp_server_name: Optional[str] = None

    is_composio: bool = Field(default=False, description="Executed through a Composio toolkit")
    composio_data: Optional[ComposioToolData] = None

    @model_validator(mode="after")
    def validate_single_kind(self) -> "WorkflowTool":
        """Reject tools that declare more than one kind marker."""
        markers = [self.is_rag, self.mock_tool, self.is_mcp, self.is_composio]
        if sum(markers) > 1:
            raise ValueError(f"tool {self.name} declares more than one tool kind")
        return self

    @property
    def kind(self) -> Optional[str]:
        """Get the tool kind.

        Returns:
            "rag", "mock", "mcp", "composio" or None
        """
        if self.is_rag:
            return "rag"
        if self.mock_tool:
            return "mock"
        if self.is_mcp:
            return "mcp"
        if self.is_composio:
            return "composio"
        return None


class WorkflowAgent(WireModel):
    """Agent configuration.

    Attributes:
        name: Unique agent name
        description: Short description (also used for the RAG tool)
        instructions: Instruction template, may contain mentions
        examples: Optional few-shot examples
        model: Model identifier
        output_visibility: "user_facing" agents may end a turn, "internal" agents hand back
        control_type: Hand-back policy; the turn loop always pops the call stack
        rag_data_sources: Data source ids for the agent's RAG tool
        rag_return_type: "chunks" or "content"
        rag_k: Number of search results
    """

    name: str = Field(..., description="Unique agent name")
    description: str = ""
    instructions: str = ""
    examples: Optional[str] = None
    model: str = "gpt-4o"
    output_visibility: Literal["user_facing", "internal"] = "user_facing"
    control_type: Literal["retain", "relinquish_to_parent", "relinquish_to_start"] = "retain"
    rag_data_sources: Optional[list[str]] = None
    rag_return_type: Literal["chunks", "content"] = "chunks"
    rag_k: int = Field(default=3, ge=1)

    @property
    def is_internal(self) -> bool:
        """Check if the agent's output is hidden from the end user.

        Returns:
            True if output_visibility is "internal"
        """
        return self.output_visibility == "internal"


class WorkflowPrompt(WireModel):
    """Reusable prompt referenced by mentions or used as the greeting."""

    name: str
    type: Literal["base_prompt", "greeting"] = "base_prompt"
    prompt: str = ""


class ConnectedEntity(WireModel):
    """Resolved mention of an agent, tool or prompt."""

    kind: Literal["agent", "tool", "prompt"]
    name: str


class Workflow(WireModel):
    """Per-invocation workflow configuration.

    Attributes:
        project_id: Owning project
        name: Workflow name
        start_agent: Agent that starts a conversation
        agents: Agent configs in declaration order
        tools: Workflow-level tool configs
        prompts: Prompt configs
    """

    project_id: str
    name: str = ""
    start_agent: str
    agents: list[WorkflowAgent] = Field(default_factory=list)
    tools: list[WorkflowTool] = Field(default_factory=list)
    prompts: list[WorkflowPrompt] = Field(default_factory=list)

    def get_agent(self, name: str) -> Optional[WorkflowAgent]:
        """Get an agent config by name.

        Args:
            name: Agent name

        Returns:
            Agent config or None if not found
        """
        return next((agent for agent in self.agents if agent.name == name), None)

    def has_agent(self, name: str) -> bool:
        return self.get_agent(name) is not None

    def has_tool(self, name: str) -> bool:
        return any(tool.name == name for tool in self.tools)

    def has_prompt(self, name: str) -> bool:
        return any(prompt.name == name for prompt in self.prompts)

    def greeting_prompt(self) -> Optional[str]:
        """Get the configured greeting text.

        Returns:
            Text of the first non-empty greeting prompt, or None
        """
        for prompt in self.prompts:
            if prompt.type == "greeting" and prompt.prompt:
                return prompt.prompt
        return None
