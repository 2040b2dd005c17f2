"""Main CLI entry point for the workflow runtime.

This module provides the command-line interface for running and inspecting
workflows.
"""

import asyncio
import json
import os
import sys
from pathlib import Path
from typing import Any, Optional

import click
from dotenv import load_dotenv
from tabulate import tabulate

from .. import __version__
from ..agents import build_handoff_graph, find_handoff_cycles, map_config, sanitize_text_with_mentions, to_mermaid, validate_workflow
from ..agents.instructions import compose_instructions
from ..config import (
    RuntimeConfig,
    load_messages,
    load_project_data,
    load_project_tools,
    load_runtime_config,
    load_workflow_config,
    save_project_config,
)
from ..errors import WorkflowRuntimeError
from ..execution import TurnOrchestrator
from ..models import Message, UsageEvent, UserMessage, WorkflowTool
from ..providers import OpenAIProvider
from ..services import (
    InMemoryDataSourceStore,
    InMemoryDocumentStore,
    InMemoryProjectStore,
    OpenAIEmbedder,
    QdrantVectorSearch,
    ToolServices,
    sync_connected_account,
)
from ..tools import ComposioClient
from ..utils import setup_logging


def _load_tools(project_tools: Optional[str]) -> list[WorkflowTool]:
    return load_project_tools(project_tools) if project_tools else []


def build_services(
    config: RuntimeConfig,
    provider: OpenAIProvider,
    project_file: Optional[str] = None,
) -> ToolServices:
    """Wire the collaborators used by tool handlers.

    Retrieval is only enabled when a Qdrant URL is configured. Project
    records, data sources and documents come from an optional project file.

    Args:
        config: Runtime configuration
        provider: Completion provider (also used for mock tools and embeddings)
        project_file: Optional project file

    Returns:
        Tool services
    """
    projects = InMemoryProjectStore()
    data_sources = InMemoryDataSourceStore()
    documents = InMemoryDocumentStore()
    if project_file:
        project, sources, docs = load_project_data(project_file)
        projects.add(project)
        for source in sources:
            data_sources.add(source)
        for doc in docs:
            documents.add(doc)

    vector_search = None
    if config.qdrant_url:
        vector_search = QdrantVectorSearch.from_url(config.qdrant_url, os.environ.get(config.qdrant_api_key_env))

    return ToolServices(
        embedder=OpenAIEmbedder(provider.client, config.embedding_model),
        vector_search=vector_search,
        data_sources=data_sources,
        documents=documents,
        projects=projects,
        text_generator=provider,
        toolkit=ComposioClient(
            api_key=os.environ.get(config.composio_api_key_env, ""),
            base_url=config.composio_base_url,
            timeout=config.tool_timeout_seconds,
        ),
        embeddings_collection=config.embeddings_collection,
        tool_timeout_seconds=config.tool_timeout_seconds,
    )


def _format_event(event: Any) -> list[str]:
    if isinstance(event, UsageEvent):
        return []
    if event.role == "tool":
        return [f"  [tool:{event.tool_name}] {event.content}"]
    if event.content is None:
        return [
            f"  [{event.agent_name}] -> {call.function.name}({call.function.arguments})"
            for call in event.tool_calls
        ]
    tag = "" if event.response_type == "external" else " (internal)"
    return [f"{event.agent_name}{tag}: {event.content}"]


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "config_file", type=click.Path(exists=True), help="Runtime configuration file")
@click.option("--env-file", type=click.Path(exists=True), help="Environment file to load")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--log-format", type=click.Choice(["text", "json"]), default="text", help="Log format")
@click.pass_context
def main(ctx: click.Context, config_file: Optional[str], env_file: Optional[str], verbose: bool, log_format: str) -> None:
    """Workflow Runtime CLI.

    Run conversational turns over multi-agent workflows and inspect their
    agent graphs.
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()
    setup_logging(level="DEBUG" if verbose else "WARNING", format_type=log_format)

    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    ctx.obj["verbose"] = verbose


@main.command()
@click.argument("workflow_file", type=click.Path(exists=True))
@click.option("--message", "-m", help="User message to append to the transcript")
@click.option("--history", type=click.Path(exists=True), help="Transcript file (YAML or JSON)")
@click.option("--project-tools", type=click.Path(exists=True), help="Project-level tools file")
@click.option("--project", "project_file", type=click.Path(exists=True), help="Project file with accounts and data sources")
@click.option("--json", "as_json", is_flag=True, help="Print events as JSON lines")
@click.pass_context
def run(
    ctx: click.Context,
    workflow_file: str,
    message: Optional[str],
    history: Optional[str],
    project_tools: Optional[str],
    project_file: Optional[str],
    as_json: bool,
) -> None:
    """Run one conversational turn of a workflow.

    Without --message or --history the workflow's greeting is produced.
    """
    try:
        config = load_runtime_config(ctx.obj.get("config_file"))
        workflow = load_workflow_config(workflow_file)
        tools = _load_tools(project_tools)
        messages: list[Message] = load_messages(history) if history else []
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    if message:
        messages.append(UserMessage(content=message))

    provider = OpenAIProvider(config.llm, max_turns=config.runner_max_turns)
    orchestrator = TurnOrchestrator(provider, build_services(config, provider, project_file), config)

    async def _run() -> Optional[UsageEvent]:
        usage = None
        async for event in orchestrator.stream_response(workflow, tools, messages):
            if as_json:
                click.echo(json.dumps(event.to_dict()))
            elif isinstance(event, UsageEvent):
                usage = event
            else:
                for line in _format_event(event):
                    click.echo(line)
        return usage

    try:
        usage = asyncio.run(_run())
    except WorkflowRuntimeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if usage and not as_json:
        tokens = usage.tokens
        click.echo("")
        click.echo(
            tabulate(
                [[tokens.total, tokens.prompt, tokens.completion]],
                headers=["Total tokens", "Prompt", "Completion"],
                tablefmt="grid",
            )
        )


@main.command()
@click.argument("workflow_file", type=click.Path(exists=True))
@click.option("--project-tools", type=click.Path(exists=True), help="Project-level tools file")
@click.option("--format", "output_format", type=click.Choice(["table", "json"]), default="table", help="Output format")
def agents(workflow_file: str, project_tools: Optional[str], output_format: str) -> None:
    """List the agents of a workflow with their tools and handoffs."""
    try:
        workflow = load_workflow_config(workflow_file)
        tools = _load_tools(project_tools)
    except Exception as e:
        click.echo(f"Error loading workflow: {e}", err=True)
        sys.exit(1)

    rows = []
    for agent in map_config(workflow, tools).agents.values():
        text = compose_instructions(agent.name, agent.description, agent.instructions, agent.examples)
        _, entities = sanitize_text_with_mentions(text, workflow, tools)
        rows.append({
            "name": agent.name,
            "visibility": agent.output_visibility,
            "model": agent.model,
            "tools": [e.name for e in entities if e.kind == "tool"],
            "handoffs": [e.name for e in entities if e.kind == "agent"],
            "rag": bool(agent.rag_data_sources),
            "start": agent.name == workflow.start_agent,
        })

    if output_format == "json":
        click.echo(json.dumps(rows, indent=2))
    elif rows:
        table = [
            [
                f"{r['name']} *" if r["start"] else r["name"],
                r["visibility"],
                r["model"],
                ", ".join(r["tools"]) or "-",
                ", ".join(r["handoffs"]) or "-",
                "yes" if r["rag"] else "no",
            ]
            for r in rows
        ]
        click.echo(tabulate(table, headers=["Name", "Visibility", "Model", "Tools", "Handoffs", "RAG"], tablefmt="grid"))
    else:
        click.echo("No agents found.")


@main.command()
@click.argument("workflow_file", type=click.Path(exists=True))
@click.option("--project-tools", type=click.Path(exists=True), help="Project-level tools file")
@click.option("--graph", "show_graph", is_flag=True, help="Print the handoff graph as a Mermaid diagram")
def validate(workflow_file: str, project_tools: Optional[str], show_graph: bool) -> None:
    """Validate a workflow definition."""
    try:
        workflow = load_workflow_config(workflow_file)
        tools = _load_tools(project_tools)
    except Exception as e:
        click.echo(f"Error loading workflow: {e}", err=True)
        sys.exit(1)

    problems = validate_workflow(workflow, tools)
    graph = build_handoff_graph(workflow, tools)

    click.echo(f"Workflow: {workflow.name or Path(workflow_file).stem}")
    click.echo(f"Start agent: {workflow.start_agent}")
    click.echo(f"Agents: {len(workflow.agents)}, handoffs: {graph.number_of_edges()}")

    for cycle in find_handoff_cycles(graph):
        click.echo(f"Warning: internal agents hand off in a cycle: {' -> '.join(cycle)}")

    if show_graph:
        click.echo("")
        click.echo(to_mermaid(graph, workflow.start_agent))

    if problems:
        click.echo(f"\nValidation Errors ({len(problems)}):")
        for problem in problems:
            click.echo(f"  - {problem}")
        sys.exit(1)

    click.echo("\n✓ Workflow is valid")


@main.command("sync-account")
@click.argument("project_file", type=click.Path(exists=True))
@click.argument("toolkit_slug")
@click.pass_context
def sync_account(ctx: click.Context, project_file: str, toolkit_slug: str) -> None:
    """Refresh the status of a project's connected account for a toolkit.

    The updated status is written back to PROJECT_FILE.
    """
    try:
        config = load_runtime_config(ctx.obj.get("config_file"))
        project, _, _ = load_project_data(project_file)
    except Exception as e:
        click.echo(f"Error loading project: {e}", err=True)
        sys.exit(1)

    account = project.get_connected_account(toolkit_slug)
    if account is None:
        click.echo(f"No connected account for toolkit {toolkit_slug} in project {project.id}", err=True)
        sys.exit(1)

    store = InMemoryProjectStore([project])
    client = ComposioClient(
        api_key=os.environ.get(config.composio_api_key_env, ""),
        base_url=config.composio_base_url,
        timeout=config.tool_timeout_seconds,
    )

    try:
        synced = asyncio.run(sync_connected_account(store, client, project.id, toolkit_slug, account.id))
    except WorkflowRuntimeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    updated = asyncio.run(store.get_project(project.id))
    save_project_config(project_file, updated)
    click.echo(f"{toolkit_slug}: {account.status} -> {synced.status}")


if __name__ == "__main__":
    main()
