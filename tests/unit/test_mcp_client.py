"""Tests for the Streamable HTTP MCP client."""

from unittest.mock import AsyncMock, patch

import pytest

from workflow_runtime.errors import MCPError
from workflow_runtime.tools import MCPClient, MCPMessage
from workflow_runtime.tools.mcp_client import parse_sse_body


class TestParseSSEBody:
    """Test suite for SSE body parsing."""

    def test_single_message(self):
        body = 'event: message\ndata: {"jsonrpc": "2.0", "id": 1, "result": {"ok": true}}\n\n'
        assert parse_sse_body(body) == [{"jsonrpc": "2.0", "id": 1, "result": {"ok": True}}]

    def test_default_event_type_and_comments(self):
        body = ': keep-alive\n\ndata: {"id": 1}\n\ndata: {"id": 2}\n'
        assert parse_sse_body(body) == [{"id": 1}, {"id": 2}]

    def test_multiline_data(self):
        body = 'data: {"id": 1,\ndata:  "result": 3}\n\n'
        assert parse_sse_body(body) == [{"id": 1, "result": 3}]

    def test_crlf_line_endings(self):
        body = 'data: {"id": 5}\r\n\r\n'
        assert parse_sse_body(body) == [{"id": 5}]

    def test_other_events_are_ignored(self):
        body = 'event: ping\ndata: {"t": 1}\n\ndata: {"id": 1}\n\n'
        assert parse_sse_body(body) == [{"id": 1}]

    def test_error_event(self):
        body = 'event: error\ndata: {"message": "overloaded"}\n\n'
        with pytest.raises(MCPError, match="overloaded"):
            parse_sse_body(body)


class TestMCPClient:
    """Test suite for request/response matching."""

    @pytest.mark.asyncio
    async def test_call_tool_matches_response_id(self):
        client = MCPClient("http://mcp.local/mcp", "weather")
        responses = [
            {"jsonrpc": "2.0", "method": "notifications/progress", "params": {}},
            {"jsonrpc": "2.0", "id": 1, "result": {"content": [{"type": "text", "text": "rain"}]}},
        ]

        with patch.object(client, "_post", AsyncMock(return_value=responses)) as post:
            result = await client.call_tool("forecast", {"city": "Oslo"})

        assert result == {"content": [{"type": "text", "text": "rain"}]}
        sent: MCPMessage = post.await_args.args[0]
        assert sent.method == "tools/call"
        assert sent.params == {"name": "forecast", "arguments": {"city": "Oslo"}}

    @pytest.mark.asyncio
    async def test_error_response(self):
        client = MCPClient("http://mcp.local/mcp", "weather")
        responses = [{"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "unknown tool"}}]

        with patch.object(client, "_post", AsyncMock(return_value=responses)):
            with pytest.raises(MCPError, match="unknown tool"):
                await client.call_tool("nope", {})

    @pytest.mark.asyncio
    async def test_missing_response(self):
        client = MCPClient("http://mcp.local/mcp", "weather")

        with patch.object(client, "_post", AsyncMock(return_value=[])):
            with pytest.raises(MCPError, match="No response to 'tools/list'"):
                await client.list_tools()

    @pytest.mark.asyncio
    async def test_list_tools(self):
        client = MCPClient("http://mcp.local/mcp", "weather")
        responses = [{"jsonrpc": "2.0", "id": 1, "result": {"tools": [{"name": "forecast"}]}}]

        with patch.object(client, "_post", AsyncMock(return_value=responses)):
            assert await client.list_tools() == [{"name": "forecast"}]

    @pytest.mark.asyncio
    async def test_post_requires_connection(self):
        client = MCPClient("http://mcp.local/mcp", "weather")
        with pytest.raises(MCPError, match="Not connected"):
            await client.notify("notifications/initialized")

    @pytest.mark.asyncio
    async def test_connect_closes_on_failed_handshake(self):
        client = MCPClient("http://mcp.local/mcp", "weather")

        with patch.object(client, "request", AsyncMock(side_effect=MCPError("refused"))):
            with pytest.raises(MCPError, match="refused"):
                await client.connect()

        assert client.session is None
