"""Unit tests for tool handlers and the tool registry."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from workflow_runtime.errors import ConfigurationError
from workflow_runtime.models import (
    ComposioToolData,
    ConnectedAccount,
    DataSource,
    DataSourceDoc,
    EmbeddingRecord,
    ProjectConfig,
    ToolParameters,
    WorkflowTool,
)
from workflow_runtime.services import (
    InMemoryDataSourceStore,
    InMemoryDocumentStore,
    InMemoryProjectStore,
    ToolServices,
)
from workflow_runtime.tools import (
    FunctionTool,
    create_composio_tool,
    create_mcp_tool,
    create_mock_tool,
    create_rag_tool,
    create_tools,
    error_payload,
    invoke_rag_tool,
    result_payload,
)
from workflow_runtime.tools.mock import build_mock_prompt


def _records():
    return [
        EmbeddingRecord(title="Refunds", name="refunds.md", content="chunk 1", doc_id="d1", source_id="s1"),
        EmbeddingRecord(title="Missing", name="gone.md", content="chunk 2", doc_id="d9", source_id="s1"),
    ]


@pytest.fixture
def rag_services():
    """Services backed by in-memory stores and a mocked vector search."""
    embedder = MagicMock()
    embedder.embed = AsyncMock(return_value=[0.1, 0.2])
    vector_search = MagicMock()
    vector_search.search = AsyncMock(return_value=_records())
    return ToolServices(
        embedder=embedder,
        vector_search=vector_search,
        data_sources=InMemoryDataSourceStore(
            [
                DataSource(id="s1", project_id="proj-1"),
                DataSource(id="s2", project_id="proj-1", active=False),
                DataSource(id="s3", project_id="other"),
            ]
        ),
        documents=InMemoryDocumentStore([DataSourceDoc(id="d1", source_id="s1", content="full refund policy")]),
        embeddings_collection="chunks",
    )


class TestFunctionTool:
    """Tests for FunctionTool."""

    @pytest.mark.asyncio
    async def test_invoke_parses_arguments(self):
        handler = AsyncMock(return_value="ok")
        tool = FunctionTool("t", "d", {"type": "object"}, handler)

        assert await tool.invoke('{"a": 1}') == "ok"
        handler.assert_awaited_once_with({"a": 1})

    @pytest.mark.asyncio
    async def test_empty_arguments(self):
        handler = AsyncMock(return_value="ok")
        await FunctionTool("t", "d", {}, handler).invoke("")
        handler.assert_awaited_once_with({})

    @pytest.mark.asyncio
    async def test_invalid_arguments(self):
        tool = FunctionTool("t", "d", {}, AsyncMock())
        with pytest.raises(ValueError, match="Invalid arguments"):
            await tool.invoke("{not json")
        with pytest.raises(ValueError, match="must be a JSON object"):
            await tool.invoke("[1, 2]")

    def test_openai_schema(self):
        strict = FunctionTool("t", "desc", {"type": "object"}, AsyncMock()).to_openai_schema()
        loose = FunctionTool("t", "desc", {"type": "object"}, AsyncMock(), strict=False).to_openai_schema()

        assert strict == {
            "type": "function",
            "function": {"name": "t", "description": "desc", "parameters": {"type": "object"}, "strict": True},
        }
        assert "strict" not in loose["function"]

    def test_payloads(self):
        assert json.loads(result_payload({"x": 1})) == {"result": {"x": 1}}
        assert json.loads(error_payload("boom")) == {"error": "boom"}


class TestRagTool:
    """Tests for the retrieval tool."""

    @pytest.mark.asyncio
    async def test_chunks(self, test_logger, rag_services):
        results = await invoke_rag_tool(test_logger, rag_services, "proj-1", "refunds", ["s1", "s2", "s3"], "chunks", 2)

        assert [r.content for r in results] == ["chunk 1", "chunk 2"]
        rag_services.vector_search.search.assert_awaited_once_with("chunks", [0.1, 0.2], "proj-1", ["s1"], 2)

    @pytest.mark.asyncio
    async def test_content_mode_replaces_with_documents(self, test_logger, rag_services):
        results = await invoke_rag_tool(test_logger, rag_services, "proj-1", "refunds", ["s1"], "content")

        assert results[0].content == "full refund policy"
        assert results[1].content == ""

    @pytest.mark.asyncio
    async def test_no_active_sources(self, test_logger, rag_services):
        results = await invoke_rag_tool(test_logger, rag_services, "proj-1", "refunds", ["s2", "s3"])

        assert results == []
        rag_services.vector_search.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_tool_output_shape(self, test_logger, rag_services):
        tool = create_rag_tool(test_logger, rag_services, "proj-1", "rag_search", "docs", ["s1"])
        output = json.loads(await tool.invoke('{"query": "refunds"}'))

        assert output["results"][0] == {
            "title": "Refunds",
            "name": "refunds.md",
            "content": "chunk 1",
            "docId": "d1",
            "sourceId": "s1",
        }
        assert tool.strict
        assert tool.parameters["additionalProperties"] is False


class TestMockTool:
    """Tests for model-synthesized tools."""

    def _config(self):
        return WorkflowTool(
            name="get_weather",
            description="Weather by city",
            mock_tool=True,
            mock_instructions="Always sunny",
            parameters=ToolParameters(properties={"city": {"type": "string"}}, required=["city"]),
        )

    def test_prompt(self):
        messages = build_mock_prompt("get_weather", "Weather by city", "Always sunny", '{"city": "Oslo"}')

        assert messages[0]["role"] == "system"
        assert "simulating the execution of a tool called 'get_weather'" in messages[0]["content"]
        assert "Always sunny" in messages[0]["content"]
        assert '{"city": "Oslo"}' in messages[1]["content"]

    @pytest.mark.asyncio
    async def test_generates_result(self, test_logger):
        generator = MagicMock()
        generator.generate_text = AsyncMock(return_value="Sunny, 21C")
        tool = create_mock_tool(test_logger, self._config(), generator)

        output = await tool.invoke('{"city": "Oslo"}')

        assert json.loads(output) == {"result": "Sunny, 21C"}
        assert not tool.strict
        assert tool.parameters["required"] == ["city"]
        assert tool.parameters["additionalProperties"] is True

    @pytest.mark.asyncio
    async def test_generator_failure(self, test_logger):
        generator = MagicMock()
        generator.generate_text = AsyncMock(side_effect=RuntimeError("rate limited"))
        tool = create_mock_tool(test_logger, self._config(), generator)

        output = json.loads(await tool.invoke("{}"))
        assert output == {"error": "Mock tool execution failed: rate limited"}

    @pytest.mark.asyncio
    async def test_missing_generator(self, test_logger):
        tool = create_mock_tool(test_logger, self._config(), None)
        output = json.loads(await tool.invoke("{}"))
        assert output["error"].startswith("Mock tool execution failed:")


class TestMCPTool:
    """Tests for MCP-forwarded tools."""

    def _config(self):
        return WorkflowTool(name="forecast", is_mcp=True, mcp_server_url="http://mcp.local/mcp", mcp_server_name="weather")

    @pytest.mark.asyncio
    async def test_forwards_and_closes(self, test_logger):
        client = MagicMock()
        client.call_tool = AsyncMock(return_value={"content": [{"type": "text", "text": "rain"}]})
        client.close = AsyncMock()
        factory = AsyncMock(return_value=client)
        services = ToolServices(mcp_client_factory=factory)

        tool = create_mcp_tool(test_logger, self._config(), "proj-1", services)
        output = json.loads(await tool.invoke('{"city": "Oslo"}'))

        assert output == {"result": {"content": [{"type": "text", "text": "rain"}]}}
        factory.assert_awaited_once_with("http://mcp.local/mcp", "weather")
        client.call_tool.assert_awaited_once_with("forecast", {"city": "Oslo"})
        client.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_is_reported_and_client_closed(self, test_logger):
        client = MagicMock()
        client.call_tool = AsyncMock(side_effect=RuntimeError("server down"))
        client.close = AsyncMock()
        services = ToolServices(mcp_client_factory=AsyncMock(return_value=client))

        tool = create_mcp_tool(test_logger, self._config(), "proj-1", services)
        output = json.loads(await tool.invoke("{}"))

        assert output == {"error": "Tool execution failed: server down"}
        client.close.assert_awaited_once()


class TestComposioTool:
    """Tests for toolkit tools."""

    def _config(self, no_auth=False):
        return WorkflowTool(
            name="create_issue",
            is_composio=True,
            composio_data=ComposioToolData(slug="GITHUB_CREATE_ISSUE", toolkit_slug="github", no_auth=no_auth),
        )

    def _projects(self, **accounts):
        return InMemoryProjectStore([ProjectConfig(id="proj-1", composio_connected_accounts=accounts)])

    @pytest.mark.asyncio
    async def test_executes_with_connected_account(self, test_logger):
        toolkit = MagicMock()
        toolkit.execute_tool = AsyncMock(return_value={"number": 7})
        services = ToolServices(
            toolkit=toolkit,
            projects=self._projects(github=ConnectedAccount(id="ca-1", status="ACTIVE")),
        )

        tool = create_composio_tool(test_logger, self._config(), "proj-1", services)
        output = json.loads(await tool.invoke('{"title": "bug"}'))

        assert output == {"result": {"number": 7}}
        toolkit.execute_tool.assert_awaited_once_with(
            "GITHUB_CREATE_ISSUE",
            user_id="proj-1",
            arguments={"title": "bug"},
            connected_account_id="ca-1",
        )

    @pytest.mark.asyncio
    async def test_no_auth_skips_account_lookup(self, test_logger):
        toolkit = MagicMock()
        toolkit.execute_tool = AsyncMock(return_value="done")
        services = ToolServices(toolkit=toolkit)

        tool = create_composio_tool(test_logger, self._config(no_auth=True), "proj-1", services)
        await tool.invoke("{}")

        assert toolkit.execute_tool.await_args.kwargs["connected_account_id"] is None

    @pytest.mark.asyncio
    async def test_missing_account(self, test_logger):
        services = ToolServices(toolkit=MagicMock(), projects=self._projects())
        tool = create_composio_tool(test_logger, self._config(), "proj-1", services)

        output = json.loads(await tool.invoke("{}"))
        assert output == {
            "error": "Tool execution failed: connected account id not found for project proj-1 and toolkit github"
        }

    def test_missing_composio_data(self, test_logger):
        config = WorkflowTool(name="broken", is_composio=True)
        with pytest.raises(ConfigurationError, match="composio data not found for tool broken"):
            create_composio_tool(test_logger, config, "proj-1", ToolServices())


class TestRegistry:
    """Tests for create_tools dispatch."""

    def test_dispatch(self, test_logger, triage_workflow):
        config = {
            "docs": WorkflowTool(name="docs", is_rag=True, rag_data_sources=["s1"]),
            "remote": WorkflowTool(name="remote", is_mcp=True, mcp_server_url="http://x"),
            "kit": WorkflowTool(
                name="kit", is_composio=True, composio_data=ComposioToolData(slug="S", toolkit_slug="k")
            ),
            "fake": WorkflowTool(name="fake", mock_tool=True),
            "plain": WorkflowTool(name="plain"),
        }
        tools = create_tools(test_logger, triage_workflow, config, ToolServices())

        assert sorted(tools) == ["docs", "fake", "kit", "remote"]
        assert tools["docs"].strict
        assert not tools["fake"].strict
