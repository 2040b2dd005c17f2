"""Unit tests for mention resolution and agent graph construction."""

import pytest

from conftest import mention
from workflow_runtime.agents import (
    RECOMMENDED_PROMPT_PREFIX,
    ModelSettings,
    build_handoff_graph,
    compose_instructions,
    create_agent,
    create_agents,
    find_handoff_cycles,
    map_config,
    sanitize_text_with_mentions,
    to_mermaid,
    validate_workflow,
)
from workflow_runtime.errors import ConfigurationError
from workflow_runtime.models import Workflow, WorkflowAgent, WorkflowTool
from workflow_runtime.services import ToolServices
from workflow_runtime.tools import RAG_TOOL_NAME, create_tools


class TestMentions:
    """Tests for mention sanitization."""

    def test_known_mentions_are_compacted(self, triage_workflow):
        text = f"Ask {mention('agent', 'Billing')} or use {mention('tool', 'get_invoice')}."
        sanitized, entities = sanitize_text_with_mentions(text, triage_workflow)

        assert sanitized == "Ask [@agent:Billing] or use [@tool:get_invoice]."
        assert [(e.kind, e.name) for e in entities] == [("agent", "Billing"), ("tool", "get_invoice")]

    def test_duplicates_resolve_once(self, triage_workflow):
        text = f"{mention('agent', 'Billing')} then {mention('agent', 'Billing')}"
        sanitized, entities = sanitize_text_with_mentions(text, triage_workflow)

        assert sanitized == "[@agent:Billing] then [@agent:Billing]"
        assert len(entities) == 1

    def test_unknown_mentions_stay(self, triage_workflow):
        text = f"Ask {mention('agent', 'Ghost')}"
        sanitized, entities = sanitize_text_with_mentions(text, triage_workflow)

        assert sanitized == text
        assert entities == []

    def test_project_tools_are_resolved(self, triage_workflow):
        project_tool = WorkflowTool(name="search_web", mock_tool=True)
        _, entities = sanitize_text_with_mentions(mention("tool", "search_web"), triage_workflow, [project_tool])
        assert entities[0].name == "search_web"

    def test_prompt_mentions(self, triage_workflow):
        _, entities = sanitize_text_with_mentions(mention("prompt", "hello"), triage_workflow)
        assert entities[0].kind == "prompt"


class TestInstructions:
    """Tests for instruction composition."""

    def test_sections(self):
        text = compose_instructions("Triage", "Routes", "Do things", "Q: a\nA: b")

        assert text.startswith(RECOMMENDED_PROMPT_PREFIX)
        assert "## Your Name\nTriage" in text
        assert "## Description\nRoutes" in text
        assert "## Instructions\nDo things" in text
        assert "# Examples\nQ: a\nA: b" in text

    def test_no_examples_block(self):
        assert "# Examples" not in compose_instructions("a", "b", "c")


class TestBuilder:
    """Tests for agent compilation."""

    def test_map_config_project_tools_win(self, triage_workflow):
        override = WorkflowTool(name="get_invoice", description="project version", mock_tool=True)
        maps = map_config(triage_workflow, [override])

        assert list(maps.agents) == ["Triage", "Billing", "Lookup"]
        assert maps.tools["get_invoice"].description == "project version"
        assert "hello" in maps.prompts

    def test_create_agents_wires_handoffs(self, test_logger, triage_workflow):
        maps = map_config(triage_workflow)
        services = ToolServices()
        tools = create_tools(test_logger, triage_workflow, maps.tools, services)

        agents, mentions = create_agents(test_logger, triage_workflow, maps.agents, tools, [], services)

        triage = agents["Triage"]
        assert [h.name for h in triage.handoffs] == ["Billing", "Lookup"]
        assert triage.handoffs[0] is agents["Billing"]
        assert [t.name for t in agents["Billing"].tools] == ["get_invoice"]
        assert agents["Lookup"].handoffs == []
        assert "[@agent:Billing]" in triage.instructions
        assert [e.name for e in mentions["Billing"]] == ["get_invoice"]

    def test_cyclic_handoffs(self, test_logger):
        workflow = Workflow(
            project_id="p",
            start_agent="A",
            agents=[
                WorkflowAgent(name="A", instructions=mention("agent", "B")),
                WorkflowAgent(name="B", instructions=mention("agent", "A")),
            ],
        )
        maps = map_config(workflow)
        agents, _ = create_agents(test_logger, workflow, maps.agents, {}, [], ToolServices())

        assert agents["A"].handoffs[0] is agents["B"]
        assert agents["B"].handoffs[0] is agents["A"]
        assert "handoffs=['B']" in repr(agents["A"])

    def test_mentioned_tool_missing_from_registry_is_skipped(self, test_logger, triage_workflow):
        config = triage_workflow.get_agent("Billing")
        agent, entities = create_agent(test_logger, config, {}, [], triage_workflow, ToolServices())

        assert agent.tools == []
        assert entities[0].name == "get_invoice"

    def test_rag_tool_is_attached(self, test_logger, triage_workflow):
        config = WorkflowAgent(name="Docs", description="Product docs", rag_data_sources=["src-1"], rag_k=5)
        agent, _ = create_agent(test_logger, config, {}, [], triage_workflow, ToolServices())

        rag = agent.get_tool(RAG_TOOL_NAME)
        assert rag is not None
        assert rag.description == "Product docs"
        assert rag.parameters["required"] == ["query"]
        assert f"`{RAG_TOOL_NAME}`" in agent.instructions

    def test_empty_rag_sources_attach_nothing(self, test_logger, triage_workflow):
        config = WorkflowAgent(name="Docs", rag_data_sources=[])
        agent, _ = create_agent(test_logger, config, {}, [], triage_workflow, ToolServices())
        assert agent.tools == []

    def test_model_settings_are_copied(self, test_logger, triage_workflow):
        settings = ModelSettings(temperature=0.5, max_tokens=100)
        agent, _ = create_agent(
            test_logger, triage_workflow.get_agent("Lookup"), {}, [], triage_workflow, ToolServices(), settings
        )

        assert agent.model_settings.temperature == 0.5
        assert agent.model_settings is not settings

    def test_rag_tool_without_sources_fails(self, test_logger, triage_workflow):
        maps = {"docs": WorkflowTool(name="docs", is_rag=True)}
        with pytest.raises(ConfigurationError, match="data sources not found for tool docs"):
            create_tools(test_logger, triage_workflow, maps, ToolServices())


class TestGraph:
    """Tests for static handoff graph analysis."""

    def test_graph_edges(self, triage_workflow):
        graph = build_handoff_graph(triage_workflow)

        assert set(graph.edges()) == {("Triage", "Billing"), ("Triage", "Lookup")}
        assert graph.nodes["Lookup"]["output_visibility"] == "internal"

    def test_valid_workflow(self, triage_workflow):
        assert validate_workflow(triage_workflow) == []

    def test_problems_are_reported(self):
        workflow = Workflow(
            project_id="p",
            start_agent="Missing",
            agents=[
                WorkflowAgent(name="A", instructions=mention("tool", "nope"), rag_data_sources=[]),
            ],
            tools=[
                WorkflowTool(name="plain"),
                WorkflowTool(name="remote", is_mcp=True),
                WorkflowTool(name="kit", is_composio=True),
            ],
        )
        problems = validate_workflow(workflow)

        assert "start agent 'Missing' is not defined" in problems
        assert "agent 'A' mentions unknown tool 'nope'" in problems
        assert "agent 'A' enables retrieval without data sources" in problems
        assert "tool 'plain' has no supported type and will be skipped" in problems
        assert "tool 'remote' is missing an MCP server URL" in problems
        assert "tool 'kit' is missing composio data" in problems

    def test_unreachable_agents(self, triage_workflow):
        triage_workflow.agents.append(WorkflowAgent(name="Orphan"))
        problems = validate_workflow(triage_workflow)
        assert problems == ["agent 'Orphan' is unreachable from start agent 'Triage'"]

    def test_internal_cycles(self):
        workflow = Workflow(
            project_id="p",
            start_agent="A",
            agents=[
                WorkflowAgent(name="A", instructions=mention("agent", "B"), output_visibility="internal"),
                WorkflowAgent(name="B", instructions=mention("agent", "A"), output_visibility="internal"),
                WorkflowAgent(name="C", instructions=mention("agent", "A")),
            ],
        )
        cycles = find_handoff_cycles(build_handoff_graph(workflow))
        assert len(cycles) == 1
        assert sorted(cycles[0]) == ["A", "B"]

    def test_mermaid(self, triage_workflow):
        diagram = to_mermaid(build_handoff_graph(triage_workflow), "Triage")

        assert diagram.startswith("graph TD")
        assert "  Lookup([Lookup])" in diagram
        assert "  Triage --> Billing" in diagram
        assert "  START --> Triage" in diagram
