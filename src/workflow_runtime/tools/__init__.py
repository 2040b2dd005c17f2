"""Tool handlers and the tool registry builder."""

from .base import FunctionTool, error_payload, result_payload
from .composio import ComposioClient, RemoteConnectedAccount
from .mcp_client import MCPClient, MCPMessage, get_mcp_client
from .mock import create_mock_tool
from .rag import RAG_TOOL_NAME, create_rag_tool, invoke_rag_tool
from .registry import create_composio_tool, create_mcp_tool, create_tools

__all__ = [
    "FunctionTool",
    "result_payload",
    "error_payload",
    # Registry
    "create_tools",
    "create_rag_tool",
    "create_mock_tool",
    "create_mcp_tool",
    "create_composio_tool",
    "invoke_rag_tool",
    "RAG_TOOL_NAME",
    # Clients
    "MCPClient",
    "MCPMessage",
    "get_mcp_client",
    "ComposioClient",
    "RemoteConnectedAccount",
]
