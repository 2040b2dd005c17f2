"""MCP (Model Context Protocol) client for external tool servers.

This module provides a minimal MCP client over the Streamable HTTP transport:
JSON-RPC 2.0 requests POSTed to the server URL, answered either with a plain
JSON body or with a Server-Sent Events stream. Each tool call opens its own
client and closes it afterwards; there is no connection pooling.
"""

import asyncio
import json
from typing import Any, Optional

import aiohttp
from pydantic import BaseModel

from ..errors import MCPError
from ..utils import get_logger

logger = get_logger(__name__)

PROTOCOL_VERSION = "2025-03-26"
SESSION_HEADER = "Mcp-Session-Id"


class MCPMessage(BaseModel):
    """MCP protocol message.

    Attributes:
        jsonrpc: JSON-RPC version (always "2.0")
        id: Request ID (None for notifications)
        method: Method name
        params: Method parameters
        result: Result (for responses)
        error: Error (for error responses)
    """

    jsonrpc: str = "2.0"
    id: str | int | None = None
    method: str | None = None
    params: dict[str, Any] | None = None
    result: Any | None = None
    error: dict[str, Any] | None = None


def parse_sse_body(text: str) -> list[dict[str, Any]]:
    """Parse an SSE body into the JSON payloads of its message events.

    Args:
        text: Raw ``text/event-stream`` body

    Returns:
        Decoded ``data`` payloads of ``message`` events, in order

    Raises:
        MCPError: If the stream carries an ``error`` event
    """
    payloads: list[dict[str, Any]] = []
    event_type = "message"
    data_lines: list[str] = []

    def flush() -> None:
        nonlocal event_type, data_lines
        if data_lines:
            raw = "\n".join(data_lines)
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                data = {"raw": raw}
            if event_type == "error":
                raise MCPError(f"SSE error event: {data.get('message', raw) if isinstance(data, dict) else raw}")
            if event_type == "message":
                payloads.append(data)
        event_type = "message"
        data_lines = []

    for line in text.splitlines():
        line = line.rstrip("\r")
        if not line:
            # Empty line marks end of current event
            flush()
            continue
        if line.startswith(":"):
            continue
        if line.startswith("event:"):
            event_type = line[6:].strip()
        elif line.startswith("data:"):
            data_lines.append(line[5:].strip())

    flush()
    return payloads


class MCPClient:
    """MCP client speaking JSON-RPC over Streamable HTTP.

    Usage:
        client = MCPClient(url, "weather")
        await client.connect()
        try:
            result = await client.call_tool("get_forecast", {"city": "Paris"})
        finally:
            await client.close()
    """

    def __init__(
        self,
        url: str,
        server_name: str = "",
        headers: Optional[dict[str, str]] = None,
        timeout: int = 300,
    ) -> None:
        """Initialize the client.

        Args:
            url: MCP endpoint URL
            server_name: Server name for logging
            headers: Extra HTTP headers
            timeout: Request timeout in seconds
        """
        self.url = url
        self.server_name = server_name
        self.headers = headers or {}
        self.timeout = timeout
        self.session: aiohttp.ClientSession | None = None
        self.session_id: str | None = None
        self._request_id = 0

    async def connect(self) -> None:
        """Open the HTTP session and perform the MCP initialize handshake.

        Raises:
            MCPError: If the server rejects initialization
        """
        logger.info(f"Connecting to MCP server '{self.server_name}' at {self.url}")
        self.session = aiohttp.ClientSession()

        try:
            await self.request(
                "initialize",
                {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {},
                    "clientInfo": {"name": "workflow-runtime", "version": "0.1.0"},
                },
            )
            await self.notify("notifications/initialized")
        except Exception:
            await self.close()
            raise

    async def close(self) -> None:
        """Close the HTTP session."""
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None
        logger.debug(f"Disconnected from MCP server '{self.server_name}'")

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        """Call a tool on the server.

        Args:
            name: Tool name
            arguments: Tool arguments

        Returns:
            The ``result`` member of the JSON-RPC response

        Raises:
            MCPError: If the server returns a JSON-RPC error
        """
        return await self.request("tools/call", {"name": name, "arguments": arguments})

    async def list_tools(self) -> list[dict[str, Any]]:
        """List tools exposed by the server.

        Returns:
            Tool descriptors
        """
        result = await self.request("tools/list", {})
        return (result or {}).get("tools", [])

    async def request(self, method: str, params: dict[str, Any]) -> Any:
        """Send a JSON-RPC request and wait for its response.

        Args:
            method: Method name
            params: Method parameters

        Returns:
            Response result

        Raises:
            MCPError: On transport failure or a JSON-RPC error
        """
        self._request_id += 1
        message = MCPMessage(id=self._request_id, method=method, params=params)
        payloads = await self._post(message)

        response = next((p for p in payloads if p.get("id") == message.id), None)
        if response is None:
            raise MCPError(f"No response to '{method}' from MCP server '{self.server_name}'")

        reply = MCPMessage(**response)
        if reply.error:
            raise MCPError(
                f"MCP server '{self.server_name}' returned error for '{method}': "
                f"{reply.error.get('message', reply.error)}"
            )
        return reply.result

    async def notify(self, method: str, params: Optional[dict[str, Any]] = None) -> None:
        """Send a JSON-RPC notification (no response expected).

        Args:
            method: Notification method
            params: Optional parameters
        """
        await self._post(MCPMessage(method=method, params=params))

    async def _post(self, message: MCPMessage) -> list[dict[str, Any]]:
        if not self.session:
            raise MCPError(f"Not connected to MCP server '{self.server_name}'")

        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
        }
        headers.update(self.headers)
        if self.session_id:
            headers[SESSION_HEADER] = self.session_id

        data = message.model_dump_json(exclude_none=True)
        logger.debug(f"Sending to {self.url}: {data[:200]}")

        try:
            async with self.session.post(
                self.url,
                data=data,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
            ) as response:
                session_id = response.headers.get(SESSION_HEADER)
                if session_id:
                    self.session_id = session_id

                if response.status >= 400:
                    body = await response.text()
                    raise MCPError(f"HTTP error {response.status} from MCP server '{self.server_name}': {body[:200]}")

                text = await response.text()
                if not text.strip():
                    return []

                content_type = response.headers.get("Content-Type", "")
                if "text/event-stream" in content_type:
                    return parse_sse_body(text)

                try:
                    body = json.loads(text)
                except json.JSONDecodeError as e:
                    raise MCPError(f"Invalid JSON from MCP server '{self.server_name}': {text[:200]}") from e
                return body if isinstance(body, list) else [body]

        except asyncio.TimeoutError as e:
            raise MCPError(f"Request to '{self.server_name}' timed out after {self.timeout} seconds") from e
        except aiohttp.ClientError as e:
            raise MCPError(f"Error sending to '{self.server_name}': {e}") from e


async def get_mcp_client(url: str, server_name: str, timeout: int = 300) -> MCPClient:
    """Create and connect an MCP client.

    Args:
        url: MCP endpoint URL
        server_name: Server name
        timeout: Request timeout in seconds

    Returns:
        Connected client; the caller closes it
    """
    client = MCPClient(url, server_name, timeout=timeout)
    await client.connect()
    return client
