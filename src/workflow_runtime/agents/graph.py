"""Static analysis of a workflow's handoff graph.

Uses networkx to check a workflow before it is run: the start agent must
exist, mentions must resolve, and every agent should be reachable from the
start agent through handoff edges.
"""

from typing import Iterable

import networkx as nx

from ..models import Workflow, WorkflowTool
from .instructions import compose_instructions
from .mentions import MENTION_PATTERN, sanitize_text_with_mentions


def build_handoff_graph(workflow: Workflow, project_tools: Iterable[WorkflowTool] = ()) -> nx.DiGraph:
    """Build the directed graph of agent handoffs.

    Nodes are agent names (with their ``output_visibility`` as an attribute);
    an edge A -> B exists when A's instructions mention agent B.

    Args:
        workflow: Workflow
        project_tools: Project-level tools

    Returns:
        Handoff graph
    """
    project_tools = list(project_tools)
    graph: nx.DiGraph = nx.DiGraph()

    for agent in workflow.agents:
        graph.add_node(agent.name, output_visibility=agent.output_visibility)

    for agent in workflow.agents:
        text = compose_instructions(agent.name, agent.description, agent.instructions, agent.examples)
        _, entities = sanitize_text_with_mentions(text, workflow, project_tools)
        for entity in entities:
            if entity.kind == "agent" and entity.name != agent.name:
                graph.add_edge(agent.name, entity.name)

    return graph


def validate_workflow(workflow: Workflow, project_tools: Iterable[WorkflowTool] = ()) -> list[str]:
    """Check a workflow for problems that would surface at run time.

    Args:
        workflow: Workflow
        project_tools: Project-level tools

    Returns:
        Human-readable problems (empty if none)
    """
    project_tools = list(project_tools)
    problems: list[str] = []

    if not workflow.has_agent(workflow.start_agent):
        problems.append(f"start agent '{workflow.start_agent}' is not defined")

    tool_names = {tool.name for tool in workflow.tools} | {tool.name for tool in project_tools}
    known = {
        "agent": {agent.name for agent in workflow.agents},
        "tool": tool_names,
        "prompt": {prompt.name for prompt in workflow.prompts},
    }
    for agent in workflow.agents:
        for kind, name in MENTION_PATTERN.findall(agent.instructions):
            if name not in known[kind]:
                problems.append(f"agent '{agent.name}' mentions unknown {kind} '{name}'")
        if agent.rag_data_sources is not None and not agent.rag_data_sources:
            problems.append(f"agent '{agent.name}' enables retrieval without data sources")

    for tool in [*workflow.tools, *project_tools]:
        if tool.kind is None:
            problems.append(f"tool '{tool.name}' has no supported type and will be skipped")
        elif tool.kind == "rag" and not tool.rag_data_sources:
            problems.append(f"tool '{tool.name}' enables retrieval without data sources")
        elif tool.kind == "composio" and tool.composio_data is None:
            problems.append(f"tool '{tool.name}' is missing composio data")
        elif tool.kind == "mcp" and not tool.mcp_server_url:
            problems.append(f"tool '{tool.name}' is missing an MCP server URL")

    graph = build_handoff_graph(workflow, project_tools)
    if workflow.start_agent in graph:
        reachable = nx.descendants(graph, workflow.start_agent) | {workflow.start_agent}
        for agent in workflow.agents:
            if agent.name not in reachable:
                problems.append(f"agent '{agent.name}' is unreachable from start agent '{workflow.start_agent}'")

    # Dedupe while keeping order
    return list(dict.fromkeys(problems))


def find_handoff_cycles(graph: nx.DiGraph) -> list[list[str]]:
    """List handoff cycles between internal agents only.

    Such cycles can never end a turn and are bounded only by the turn limits.

    Args:
        graph: Handoff graph

    Returns:
        Cycles as lists of agent names
    """
    internal = [n for n, data in graph.nodes(data=True) if data.get("output_visibility") == "internal"]
    return [cycle for cycle in nx.simple_cycles(graph.subgraph(internal))]


def to_mermaid(graph: nx.DiGraph, start_agent: str) -> str:
    """Render a handoff graph as a Mermaid diagram.

    Args:
        graph: Handoff graph
        start_agent: Start agent name

    Returns:
        Mermaid diagram string
    """
    lines = ["graph TD"]
    for node, data in graph.nodes(data=True):
        shape = f"[{node}]" if data.get("output_visibility") != "internal" else f"([{node}])"
        lines.append(f"  {_node_id(node)}{shape}")
    for from_node, to_node in graph.edges():
        lines.append(f"  {_node_id(from_node)} --> {_node_id(to_node)}")
    if start_agent in graph:
        lines.append("  START((start))")
        lines.append(f"  START --> {_node_id(start_agent)}")
    return "\n".join(lines)


def _node_id(name: str) -> str:
    return "".join(ch if ch.isalnum() else "_" for ch in name)
