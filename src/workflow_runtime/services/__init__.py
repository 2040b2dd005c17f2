"""External collaborators used by tool handlers."""

from .accounts import remote_status_to_local, resolve_connected_account_id, sync_connected_account
from .base import (
    DataSourceStore,
    DocumentStore,
    Embedder,
    MCPClientFactory,
    MCPToolClient,
    ProjectStore,
    TextGenerator,
    ToolkitExecutor,
    ToolServices,
    VectorSearch,
)
from .embedding import OpenAIEmbedder
from .memory import InMemoryDataSourceStore, InMemoryDocumentStore, InMemoryProjectStore
from .vectorstore import QdrantVectorSearch

__all__ = [
    # Protocols
    "Embedder",
    "VectorSearch",
    "DataSourceStore",
    "DocumentStore",
    "ProjectStore",
    "TextGenerator",
    "ToolkitExecutor",
    "MCPToolClient",
    "MCPClientFactory",
    "ToolServices",
    # Implementations
    "OpenAIEmbedder",
    "QdrantVectorSearch",
    "InMemoryDataSourceStore",
    "InMemoryDocumentStore",
    "InMemoryProjectStore",
    # Accounts
    "resolve_connected_account_id",
    "sync_connected_account",
    "remote_status_to_local",
]
