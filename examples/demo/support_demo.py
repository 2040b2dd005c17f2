#!/usr/bin/env python3
"""
Support Workflow Demo

Runs a short conversation against the example support workflow: the greeting
turn, then two user messages. Each turn prints the messages emitted by the
agents, including handoffs and tool calls, and the token usage.

Run this demo:
    python examples/demo/support_demo.py

Or with custom settings:
    PROVIDER_BASE_URL=https://api.siliconflow.cn/v1 \
    PROVIDER_API_KEY=your-key \
    PROVIDER_DEFAULT_MODEL=Qwen/Qwen3-8B \
    python examples/demo/support_demo.py
"""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from workflow_runtime.cli import build_services
from workflow_runtime.config import load_project_tools, load_runtime_config, load_workflow_config
from workflow_runtime.execution import TurnOrchestrator
from workflow_runtime.models import Message, UsageEvent, UserMessage
from workflow_runtime.providers import OpenAIProvider

EXAMPLE_DIR = Path(__file__).parent.parent / "support"

USER_TURNS = [
    "Where is my order 1042?",
    "Thanks. Can you also check invoice INV-77?",
]


async def run_turn(orchestrator: TurnOrchestrator, workflow, tools, messages: list[Message]) -> None:
    """Run one turn and append its messages to the transcript."""
    async for event in orchestrator.stream_response(workflow, tools, messages):
        if isinstance(event, UsageEvent):
            print(f"   (tokens: {event.tokens.total})")
            continue

        messages.append(event)
        if event.role == "tool":
            print(f"   [tool {event.tool_name}] {event.content[:120]}")
        elif event.content is None:
            for call in event.tool_calls:
                print(f"   [{event.agent_name} -> {call.function.name}] {call.function.arguments}")
        elif event.response_type == "internal":
            print(f"   ({event.agent_name}, internal) {event.content}")
        else:
            print(f"🤖 {event.agent_name}: {event.content}")


async def run_demo() -> None:
    """Run the support workflow demo."""
    print("=" * 70)
    print("Workflow Runtime - Support Workflow Demo")
    print("=" * 70)
    print()

    config = load_runtime_config(EXAMPLE_DIR / "runtime.yaml")
    if not config.llm.resolve_api_key():
        print("⚠️  WARNING: PROVIDER_API_KEY (or OPENAI_API_KEY) is not set.")
        print("Please set it in your .env file or environment.")
        return

    workflow = load_workflow_config(EXAMPLE_DIR / "workflow.yaml")
    tools = load_project_tools(EXAMPLE_DIR / "tools.yaml")

    provider = OpenAIProvider(config.llm, max_turns=config.runner_max_turns)
    services = build_services(config, provider, str(EXAMPLE_DIR / "project.yaml"))
    orchestrator = TurnOrchestrator(provider, services, config)

    print(f"✓ Workflow: {workflow.name} (start agent: {workflow.start_agent})")
    print(f"✓ Model: {config.llm.model}")
    print()

    messages: list[Message] = []
    await run_turn(orchestrator, workflow, tools, messages)

    for text in USER_TURNS:
        print()
        print(f"👤 User: {text}")
        messages.append(UserMessage(content=text))
        await run_turn(orchestrator, workflow, tools, messages)

    print()
    print("=" * 70)
    print(f"Transcript length: {len(messages)} messages")


if __name__ == "__main__":
    try:
        asyncio.run(run_demo())
    except KeyboardInterrupt:
        sys.exit(130)
