"""Agent graph builder.

Compiles agent configs and the tool registry into runtime agents. Agents are
built in declaration order; handoff edges are wired in a second pass once
every agent exists, since an agent may hand off to one declared after it.
"""

from typing import Iterable, Optional

from pydantic import BaseModel

from ..errors import ConfigurationError
from ..models import ConnectedEntity, Workflow, WorkflowAgent, WorkflowPrompt, WorkflowTool
from ..services.base import ToolServices
from ..tools import FunctionTool, create_rag_tool
from ..tools.rag import RAG_TOOL_NAME
from ..utils import PrefixLogger
from .instructions import SEPARATOR, compose_instructions, rag_instructions
from .mentions import sanitize_text_with_mentions
from .runtime import ModelSettings, RuntimeAgent


class ConfigMaps(BaseModel):
    """Workflow entities keyed by name."""

    agents: dict[str, WorkflowAgent]
    tools: dict[str, WorkflowTool]
    prompts: dict[str, WorkflowPrompt]


def map_config(workflow: Workflow, project_tools: Iterable[WorkflowTool] = ()) -> ConfigMaps:
    """Index agents, tools and prompts by name.

    Workflow tools are indexed before project tools; on a name clash the
    later definition wins.

    Args:
        workflow: Workflow
        project_tools: Project-level tools

    Returns:
        Name-keyed configs
    """
    tools: dict[str, WorkflowTool] = {}
    for tool in [*workflow.tools, *project_tools]:
        tools[tool.name] = tool

    return ConfigMaps(
        agents={agent.name: agent for agent in workflow.agents},
        tools=tools,
        prompts={prompt.name: prompt for prompt in workflow.prompts},
    )


def create_agent_rag_tool(
    logger: PrefixLogger,
    config: WorkflowAgent,
    project_id: str,
    services: ToolServices,
) -> FunctionTool:
    """Create the retrieval tool of an agent.

    Raises:
        ConfigurationError: If the agent declares no data sources
    """
    if not config.rag_data_sources:
        raise ConfigurationError(f"data sources not found for agent {config.name}")

    return create_rag_tool(
        logger,
        services,
        project_id,
        RAG_TOOL_NAME,
        config.description,
        config.rag_data_sources,
        config.rag_return_type,
        config.rag_k,
    )


def create_agent(
    logger: PrefixLogger,
    config: WorkflowAgent,
    tools: dict[str, FunctionTool],
    project_tools: Iterable[WorkflowTool],
    workflow: Workflow,
    services: ToolServices,
    model_settings: Optional[ModelSettings] = None,
) -> tuple[RuntimeAgent, list[ConnectedEntity]]:
    """Compile one agent.

    Args:
        logger: Parent logger
        config: Agent config
        tools: Tool registry
        project_tools: Project-level tools (mention namespace)
        workflow: Workflow
        services: Collaborators for the agent's retrieval tool
        model_settings: Sampling settings (temperature 0 by default)

    Returns:
        Tuple of (agent without handoffs, resolved mentions)
    """
    agent_logger = logger.child(f"create_agent: {config.name}")

    instructions = compose_instructions(config.name, config.description, config.instructions, config.examples)
    sanitized, entities = sanitize_text_with_mentions(instructions, workflow, project_tools)
    agent_logger.debug(f"mentions: {[e.to_dict() for e in entities]}")

    agent_tools = [tools[e.name] for e in entities if e.kind == "tool" and e.name in tools]

    if config.rag_data_sources:
        rag_tool = create_agent_rag_tool(logger, config, workflow.project_id, services)
        agent_tools.append(rag_tool)
        sanitized = f"{sanitized}\n\n{SEPARATOR}\n\n{rag_instructions(rag_tool.name)}"
        agent_logger.debug("added rag instructions")

    agent = RuntimeAgent(
        name=config.name,
        description=config.description,
        instructions=sanitized,
        model=config.model,
        tools=agent_tools,
        model_settings=model_settings.model_copy() if model_settings else ModelSettings(),
    )
    agent_logger.debug(f"created agent with tools {[t.name for t in agent_tools]}")
    return agent, entities


def create_agents(
    logger: PrefixLogger,
    workflow: Workflow,
    agent_config: dict[str, WorkflowAgent],
    tools: dict[str, FunctionTool],
    project_tools: Iterable[WorkflowTool],
    services: ToolServices,
    model_settings: Optional[ModelSettings] = None,
) -> tuple[dict[str, RuntimeAgent], dict[str, list[ConnectedEntity]]]:
    """Compile every agent and wire handoff edges.

    Returns:
        Tuple of (agents by name, mentions by agent name)
    """
    project_tools = list(project_tools)
    agents: dict[str, RuntimeAgent] = {}
    mentions: dict[str, list[ConnectedEntity]] = {}

    for agent_name, config in agent_config.items():
        agent, entities = create_agent(logger, config, tools, project_tools, workflow, services, model_settings)
        agents[agent_name] = agent
        mentions[agent_name] = entities
        logger.debug(f"created agent: {agent_name}")

    for agent_name, agent in agents.items():
        connected = [e.name for e in mentions[agent_name] if e.kind == "agent"]
        agent.handoffs = [agents[name] for name in connected if name in agents]
        logger.debug(f"set handoffs for {agent_name}: {','.join(connected)}")

    return agents, mentions
