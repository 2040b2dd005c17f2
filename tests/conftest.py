"""Test configuration and fixtures for workflow runtime tests.

This module provides shared fixtures and configuration for all tests.
"""

from typing import Any, AsyncIterator

import pytest
from dotenv import load_dotenv

from workflow_runtime.agents import RuntimeAgent
from workflow_runtime.models import (
    FunctionCallItem,
    HandoffOccurredEvent,
    MessageItem,
    MessageOutputEvent,
    OutputContent,
    ResponseCompletedEvent,
    ResponseUsage,
    Workflow,
)
from workflow_runtime.utils import PrefixLogger, get_logger

# Load environment variables
load_dotenv()


class ScriptedRunner:
    """Agent runner that replays one scripted event list per invocation.

    Records the agent and inputs of every call, and how many streams
    were closed before being exhausted.
    """

    def __init__(self, scripts: list[list[Any]]):
        self.scripts = list(scripts)
        self.calls: list[tuple[str, list[dict[str, Any]]]] = []
        self.agents: list[RuntimeAgent] = []
        self.closed_early = 0

    @property
    def agent_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def run_streamed(self, agent: RuntimeAgent, inputs: list[dict[str, Any]]) -> AsyncIterator[Any]:
        self.calls.append((agent.name, inputs))
        self.agents.append(agent)
        if not self.scripts:
            raise AssertionError(f"unexpected run for agent {agent.name}")
        script = self.scripts.pop(0)
        finished = False
        try:
            for event in script:
                yield event
            finished = True
        finally:
            if not finished:
                self.closed_early += 1


class LoopingRunner:
    """Agent runner whose every invocation ends with the agent speaking."""

    def __init__(self, text: str = "still working"):
        self.text = text
        self.calls = 0

    async def run_streamed(self, agent: RuntimeAgent, inputs: list[dict[str, Any]]) -> AsyncIterator[Any]:
        self.calls += 1
        yield completed(message=self.text)
        yield say(agent.name, self.text)


def completed(
    calls: list[tuple[str, str, str]] | None = None,
    message: str | None = None,
    total: int = 10,
    prompt: int = 7,
    completion: int = 3,
) -> ResponseCompletedEvent:
    """Build a completed-response event with (call_id, name, arguments) calls."""
    output: list[Any] = [FunctionCallItem(call_id=c, name=n, arguments=a) for c, n, a in calls or []]
    if message is not None:
        output.append(MessageItem(text=message))
    return ResponseCompletedEvent(
        output=output,
        usage=ResponseUsage(total_tokens=total, input_tokens=prompt, output_tokens=completion),
    )


def say(agent_name: str, text: str) -> MessageOutputEvent:
    return MessageOutputEvent(agent_name=agent_name, content=[OutputContent(text=text)])


def handoff(source: str, target: str) -> HandoffOccurredEvent:
    return HandoffOccurredEvent(source_agent=source, target_agent=target)


def mention(kind: str, name: str) -> str:
    return f"[@{kind}:{name}](#mention)"


@pytest.fixture(scope="function")
def test_logger():
    """Prefix logger for helpers that require one."""
    return PrefixLogger(get_logger("workflow_runtime.tests"), "test")


@pytest.fixture(scope="function")
def triage_workflow():
    """Workflow with a user-facing triage agent, a user-facing billing agent and an internal lookup agent."""
    return Workflow.model_validate(
        {
            "projectId": "proj-1",
            "name": "support",
            "startAgent": "Triage",
            "agents": [
                {
                    "name": "Triage",
                    "description": "Routes requests",
                    "instructions": (
                        f"Send billing questions to {mention('agent', 'Billing')} "
                        f"and lookups to {mention('agent', 'Lookup')}."
                    ),
                    "outputVisibility": "user_facing",
                },
                {
                    "name": "Billing",
                    "description": "Answers billing questions",
                    "instructions": f"Use {mention('tool', 'get_invoice')} to find invoices.",
                    "outputVisibility": "user_facing",
                },
                {
                    "name": "Lookup",
                    "description": "Looks things up",
                    "instructions": "Reply with the answer only.",
                    "outputVisibility": "internal",
                },
            ],
            "tools": [
                {
                    "name": "get_invoice",
                    "description": "Fetch an invoice",
                    "mockTool": True,
                    "mockInstructions": "Return a plausible invoice",
                    "parameters": {
                        "type": "object",
                        "properties": {"invoice_id": {"type": "string"}},
                        "required": ["invoice_id"],
                    },
                }
            ],
            "prompts": [{"name": "hello", "type": "greeting", "prompt": "Hi! How can I help?"}],
        }
    )


@pytest.fixture(scope="function")
def internal_start_workflow():
    """Workflow whose start agent is internal, so a turn can never end."""
    return Workflow.model_validate(
        {
            "projectId": "proj-1",
            "startAgent": "Worker",
            "agents": [{"name": "Worker", "instructions": "Work.", "outputVisibility": "internal"}],
        }
    )


@pytest.fixture(scope="function")
def delegation_workflow():
    """Workflow where a user-facing front desk delegates through a chain of internal agents."""
    return Workflow.model_validate(
        {
            "projectId": "proj-1",
            "name": "delegation",
            "startAgent": "Front",
            "agents": [
                {
                    "name": "Front",
                    "instructions": f"Delegate research to {mention('agent', 'Research')}.",
                    "outputVisibility": "user_facing",
                },
                {
                    "name": "Research",
                    "instructions": (
                        f"Ask {mention('agent', 'Search')} for sources, "
                        f"or pass escalations to {mention('agent', 'Escalation')}."
                    ),
                    "outputVisibility": "internal",
                },
                {
                    "name": "Search",
                    "instructions": "Return sources only.",
                    "outputVisibility": "internal",
                },
                {
                    "name": "Escalation",
                    "instructions": "Talk to the user about escalations.",
                    "outputVisibility": "user_facing",
                },
            ],
        }
    )
