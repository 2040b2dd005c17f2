"""Tool registry builder.

Turns declarative tool definitions into ``FunctionTool`` handlers bound to a
project. One registry is built per invocation; nothing is cached.
"""

import asyncio
import json
from typing import Any

from ..errors import ConfigurationError
from ..models import Workflow, WorkflowTool
from ..services.accounts import resolve_connected_account_id
from ..services.base import ToolServices
from ..utils import PrefixLogger
from .base import FunctionTool, error_payload, open_parameters_schema, result_payload
from .mcp_client import get_mcp_client
from .mock import create_mock_tool
from .rag import create_rag_tool


async def invoke_mcp_tool(
    logger: PrefixLogger,
    services: ToolServices,
    project_id: str,
    name: str,
    arguments: dict[str, Any],
    mcp_server_url: str,
    mcp_server_name: str,
) -> Any:
    """Forward a tool call to an MCP server.

    A client is opened for the call and closed afterwards, whatever the outcome.
    """
    logger = logger.child("invoke_mcp_tool")
    logger.debug(f"project_id: {project_id}, name: {name}, server: {mcp_server_name} ({mcp_server_url})")

    factory = services.mcp_client_factory or (
        lambda url, server_name: get_mcp_client(url, server_name, timeout=services.tool_timeout_seconds)
    )
    client = await factory(mcp_server_url, mcp_server_name)
    try:
        result = await asyncio.wait_for(client.call_tool(name, arguments), timeout=services.tool_timeout_seconds)
    finally:
        await client.close()

    logger.debug(f"mcp tool result: {json.dumps(result, default=str)[:500]}")
    return result


async def invoke_composio_tool(
    logger: PrefixLogger,
    services: ToolServices,
    project_id: str,
    config: WorkflowTool,
    arguments: dict[str, Any],
) -> Any:
    """Execute a Composio tool on behalf of a project.

    Unless the tool is marked no-auth, the project's connected account for
    the toolkit supplies the credential.
    """
    logger = logger.child("invoke_composio_tool")
    data = config.composio_data
    logger.debug(f"project_id: {project_id}, name: {config.name}, slug: {data.slug}")

    connected_account_id = None
    if not data.no_auth:
        connected_account_id = await resolve_connected_account_id(
            services.require("projects"), project_id, data.toolkit_slug
        )

    result = await services.require("toolkit").execute_tool(
        data.slug,
        user_id=project_id,
        arguments=arguments,
        connected_account_id=connected_account_id,
    )
    logger.debug(f"composio tool result: {json.dumps(result, default=str)[:500]}")
    return result


def create_mcp_tool(logger: PrefixLogger, config: WorkflowTool, project_id: str, services: ToolServices) -> FunctionTool:
    """Create a tool that forwards calls to an MCP server."""

    async def handler(arguments: dict[str, Any]) -> str:
        try:
            result = await invoke_mcp_tool(
                logger,
                services,
                project_id,
                config.name,
                arguments,
                config.mcp_server_url or "",
                config.mcp_server_name or "",
            )
            return result_payload(result)
        except Exception as e:
            logger.warning(f"Error executing mcp tool {config.name}: {e}")
            return error_payload(f"Tool execution failed: {e}")

    return FunctionTool(
        name=config.name,
        description=config.description,
        parameters=open_parameters_schema(config.parameters.properties, config.parameters.required),
        handler=handler,
        strict=False,
    )


def create_composio_tool(
    logger: PrefixLogger, config: WorkflowTool, project_id: str, services: ToolServices
) -> FunctionTool:
    """Create a tool executed through a Composio toolkit.

    Raises:
        ConfigurationError: If the tool has no toolkit metadata
    """
    if config.composio_data is None:
        raise ConfigurationError(f"composio data not found for tool {config.name}")

    async def handler(arguments: dict[str, Any]) -> str:
        try:
            result = await invoke_composio_tool(logger, services, project_id, config, arguments)
            return result_payload(result)
        except Exception as e:
            logger.warning(f"Error executing composio tool {config.name}: {e}")
            return error_payload(f"Tool execution failed: {e}")

    return FunctionTool(
        name=config.name,
        description=config.description,
        parameters=open_parameters_schema(config.parameters.properties, config.parameters.required),
        handler=handler,
        strict=False,
    )


def create_tools(
    logger: PrefixLogger,
    workflow: Workflow,
    tool_config: dict[str, WorkflowTool],
    services: ToolServices,
) -> dict[str, FunctionTool]:
    """Build the tool registry for one invocation.

    Args:
        logger: Parent logger
        workflow: Workflow being run (supplies the project id)
        tool_config: Tool definitions keyed by name
        services: Collaborators for the tool handlers

    Returns:
        Tools keyed by name; definitions without a kind marker are skipped

    Raises:
        ConfigurationError: If a RAG tool has no data sources or a Composio
            tool has no toolkit metadata
    """
    tools: dict[str, FunctionTool] = {}
    for tool_name, config in tool_config.items():
        kind = config.kind
        if kind == "rag":
            if not config.rag_data_sources:
                raise ConfigurationError(f"data sources not found for tool {tool_name}")
            tools[tool_name] = create_rag_tool(
                logger,
                services,
                workflow.project_id,
                tool_name,
                config.description,
                config.rag_data_sources,
                config.rag_return_type,
                config.rag_k,
            )
        elif kind == "mcp":
            tools[tool_name] = create_mcp_tool(logger, config, workflow.project_id, services)
        elif kind == "composio":
            tools[tool_name] = create_composio_tool(logger, config, workflow.project_id, services)
        elif kind == "mock":
            tools[tool_name] = create_mock_tool(logger, config, services.text_generator)
        else:
            logger.warning(f"unsupported tool type: {tool_name}")
            continue
        logger.debug(f"created {kind} tool: {tool_name}")
    return tools
