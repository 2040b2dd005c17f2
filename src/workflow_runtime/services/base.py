"""Collaborator interfaces consumed by tool handlers.

The runtime does not own retrieval, document storage, project persistence,
MCP servers or toolkit execution. It talks to them through the narrow
protocols below, bundled per invocation in ``ToolServices``.
"""

from typing import Any, Awaitable, Callable, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from ..models import ConnectedAccount, DataSource, DataSourceDoc, EmbeddingRecord, ProjectConfig


@runtime_checkable
class Embedder(Protocol):
    """Turns a query into an embedding vector."""

    async def embed(self, text: str) -> list[float]:
        ...


@runtime_checkable
class VectorSearch(Protocol):
    """Similarity search over embedded chunks."""

    async def search(
        self,
        collection: str,
        vector: list[float],
        project_id: str,
        source_ids: list[str],
        limit: int,
    ) -> list[EmbeddingRecord]:
        ...


@runtime_checkable
class DataSourceStore(Protocol):
    """Lookup of a project's data sources."""

    async def find_active_sources(self, project_id: str) -> list[DataSource]:
        ...


@runtime_checkable
class DocumentStore(Protocol):
    """Lookup of parent documents by id."""

    async def find_docs_by_ids(self, ids: list[str]) -> list[DataSourceDoc]:
        ...


@runtime_checkable
class ProjectStore(Protocol):
    """Read/write access to the per-project connected-account records."""

    async def get_project(self, project_id: str) -> Optional[ProjectConfig]:
        ...

    async def set_connected_account(self, project_id: str, toolkit_slug: str, account: ConnectedAccount) -> None:
        ...


@runtime_checkable
class TextGenerator(Protocol):
    """One-shot text generation."""

    async def generate_text(self, messages: list[dict[str, str]]) -> str:
        ...


@runtime_checkable
class ToolkitExecutor(Protocol):
    """Executes third-party toolkit tools by slug."""

    async def execute_tool(
        self,
        tool_slug: str,
        user_id: str,
        arguments: dict[str, Any],
        connected_account_id: Optional[str] = None,
    ) -> Any:
        ...


@runtime_checkable
class MCPToolClient(Protocol):
    """Connected MCP client."""

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        ...

    async def close(self) -> None:
        ...


MCPClientFactory = Callable[[str, str], Awaitable[MCPToolClient]]


class ToolServices(BaseModel):
    """Collaborators available to tool handlers for one invocation.

    Attributes:
        embedder: Query embedding
        vector_search: Chunk similarity search
        data_sources: Data source lookup
        documents: Parent document lookup
        projects: Project records
        text_generator: Mock tool response generation
        mcp_client_factory: Opens an MCP client for (url, server name)
        toolkit: Composio tool execution
        embeddings_collection: Vector collection holding chunks
        tool_timeout_seconds: Timeout for external tool calls
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    embedder: Optional[Embedder] = None
    vector_search: Optional[VectorSearch] = None
    data_sources: Optional[DataSourceStore] = None
    documents: Optional[DocumentStore] = None
    projects: Optional[ProjectStore] = None
    text_generator: Optional[TextGenerator] = None
    mcp_client_factory: Optional[MCPClientFactory] = None
    toolkit: Optional[ToolkitExecutor] = None
    embeddings_collection: str = "embeddings"
    tool_timeout_seconds: int = 300

    def require(self, name: str) -> Any:
        """Get a collaborator, failing if it was not provided.

        Args:
            name: Attribute name

        Returns:
            The collaborator

        Raises:
            RuntimeError: If the collaborator is not configured
        """
        service = getattr(self, name)
        if service is None:
            raise RuntimeError(f"{name} is not configured")
        return service
