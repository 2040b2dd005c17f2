"""Turn-taking state machine.

Runs one conversational turn over a multi-agent workflow. The active agent
is driven through the completion provider; its streamed events are turned
into transcript messages and emitted in order. Handoffs move control between
agents, internal agents hand control back up the call stack after speaking,
and the turn ends when a user-facing agent has the last word.
"""

from contextlib import aclosing
from typing import AsyncIterator, Iterable, Optional

from pydantic import BaseModel, Field

from ..agents import ModelSettings, create_agents, map_config
from ..config.schemas import RuntimeConfig
from ..errors import AgentNotFoundError, TurnLimitExceededError
from ..models import (
    AssistantMessage,
    AssistantMessageWithToolCalls,
    FunctionCall,
    HandoffOccurredEvent,
    Message,
    MessageOutputEvent,
    OutputEvent,
    ResponseCompletedEvent,
    ToolCall,
    ToolCallOutputEvent,
    ToolMessage,
    UsageEvent,
    Workflow,
    WorkflowAgent,
    WorkflowTool,
    parse_messages,
)
from ..providers.base import AgentRunner
from ..services.base import ToolServices
from ..tools import create_tools
from ..tracing import AgentTransferCounter, UsageTracker
from ..utils import PrefixLogger, get_logger
from .transcript import (
    convert_messages_input,
    create_agent_call_stack,
    create_transfer_messages,
    ensure_system_message,
    is_handoff_call,
)

logger = get_logger(__name__)


class TurnResponse(BaseModel):
    """Collected result of one turn.

    Attributes:
        messages: Assistant messages emitted during the turn
        usage: Final usage snapshot
    """

    messages: list[AssistantMessage | AssistantMessageWithToolCalls] = Field(default_factory=list)
    usage: UsageEvent = Field(default_factory=UsageEvent)


def get_next_agent_name(
    stack: list[str],
    agent_config: dict[str, WorkflowAgent],
    workflow: Workflow,
    logger: Optional[PrefixLogger] = None,
) -> str:
    """Pick the agent that takes control when the current one hands back.

    Pops the call stack, falling back to the start agent when it is empty.
    Agent control types are not consulted.

    Args:
        stack: Call stack, mutated by the pop
        agent_config: Agent configs by name
        workflow: Workflow

    Returns:
        Next agent name
    """
    if logger:
        logger.child("get_next_agent_name").debug(f"stack: {', '.join(stack)}")
    return stack.pop() if stack else workflow.start_agent


def _emit(logger: PrefixLogger, event: OutputEvent) -> OutputEvent:
    logger.debug(f"-> emitting event: {event.model_dump_json(by_alias=True)}")
    return event


async def emit_greeting_turn(
    logger: PrefixLogger,
    workflow: Workflow,
    default_greeting: str = "How can I help you today?",
) -> AsyncIterator[OutputEvent]:
    """Emit the opening message of a conversation and a zeroed usage event.

    Args:
        logger: Loop logger
        workflow: Workflow (supplies the greeting prompt and start agent)
        default_greeting: Used when the workflow has no greeting prompt
    """
    prompt = workflow.greeting_prompt() or default_greeting
    logger.debug(f"greeting turn: {prompt}")

    yield _emit(
        logger,
        AssistantMessage(
            content=prompt,
            agent_name=workflow.start_agent,
            response_type="external",
        ),
    )
    yield _emit(logger, UsageTracker().as_event())


class TurnOrchestrator:
    """Runs conversational turns against an injected completion provider.

    Usage:
        orchestrator = TurnOrchestrator(provider, services, config)
        async for event in orchestrator.stream_response(workflow, project_tools, messages):
            ...
    """

    def __init__(
        self,
        runner: AgentRunner,
        services: Optional[ToolServices] = None,
        config: Optional[RuntimeConfig] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            runner: Completion provider that runs agents
            services: Collaborators for tool handlers
            config: Runtime configuration (turn limits, greeting)
        """
        self.runner = runner
        self.config = config or RuntimeConfig()
        self.services = services or ToolServices(
            text_generator=runner if hasattr(runner, "generate_text") else None,
            embeddings_collection=self.config.embeddings_collection,
            tool_timeout_seconds=self.config.tool_timeout_seconds,
        )
        # Agents always sample at temperature 0; llm.temperature only applies to generate_text
        self.model_settings = ModelSettings(temperature=0.0, max_tokens=self.config.llm.max_tokens)

    async def stream_response(
        self,
        workflow: Workflow,
        project_tools: Iterable[WorkflowTool],
        messages: list[Message],
    ) -> AsyncIterator[OutputEvent]:
        """Run one turn and stream its events.

        Emits transcript messages in the order they are appended, then a
        final usage event. ``messages`` is repaired in place by
        ``ensure_system_message``; the turn itself works on a copy.

        Args:
            workflow: Workflow to run
            project_tools: Project-level tools
            messages: Transcript so far

        Raises:
            ConfigurationError: If the workflow cannot be compiled
            AgentNotFoundError: If control moves to an agent that does not exist
            TurnLimitExceededError: If the turn exceeds its iteration or transfer budget
        """
        loop_logger = PrefixLogger(logger, "agent-loop")
        loop_logger.info(f"project_id: {workflow.project_id}, workflow: {workflow.name}")

        ensure_system_message(messages, loop_logger)

        if len(messages) == 1 and messages[0].role == "system":
            async for event in emit_greeting_turn(loop_logger, workflow, self.config.default_greeting):
                yield event
            return

        project_tools = list(project_tools)
        config_maps = map_config(workflow, project_tools)
        stack = create_agent_call_stack(messages)
        tools = create_tools(loop_logger, workflow, config_maps.tools, self.services)
        agents, _ = create_agents(
            loop_logger,
            workflow,
            config_maps.agents,
            tools,
            project_tools,
            self.services,
            self.model_settings,
        )

        transfer_counter = AgentTransferCounter()
        usage_tracker = UsageTracker()

        agent_name = get_next_agent_name(stack, config_maps.agents, workflow, loop_logger)
        turn_messages: list[Message] = list(messages)

        def is_internal(name: str) -> bool:
            config = config_maps.agents.get(name)
            return config is not None and config.is_internal

        def record_transfer(from_agent: str, to_agent: str, push: bool = True) -> tuple[Message, Message]:
            transfer_counter.increment(from_agent, to_agent)
            if transfer_counter.total() > self.config.max_transfers:
                raise TurnLimitExceededError("max_transfers", self.config.max_transfers)
            call, result = create_transfer_messages(from_agent, to_agent)
            turn_messages.append(call)
            turn_messages.append(result)
            if push:
                stack.append(from_agent)
            return call, result

        loop_logger.debug("@@ starting agent turn @@")
        iteration = 0

        while True:
            iteration += 1
            if iteration > self.config.max_loop_iterations:
                raise TurnLimitExceededError("max_loop_iterations", self.config.max_loop_iterations)

            iter_logger = loop_logger.child(f"iter-{iteration}")
            iter_logger.debug(f"agent name: {agent_name}, stack: {', '.join(stack)}")

            agent = agents.get(agent_name)
            if agent is None:
                raise AgentNotFoundError(agent_name)

            inputs = convert_messages_input(turn_messages)
            reentered = False

            async with aclosing(self.runner.run_streamed(agent, inputs)) as stream:
                async for event in stream:
                    event_logger = iter_logger.child(event.type)

                    if isinstance(event, ResponseCompletedEvent):
                        for output in event.output:
                            if output.type != "function_call" or is_handoff_call(output.name):
                                continue
                            message = AssistantMessageWithToolCalls(
                                tool_calls=[
                                    ToolCall(
                                        id=output.call_id,
                                        function=FunctionCall(name=output.name, arguments=output.arguments),
                                    )
                                ],
                                agent_name=agent_name,
                            )
                            turn_messages.append(message)
                            yield _emit(event_logger, message)

                        usage_tracker.increment(
                            event.usage.total_tokens,
                            event.usage.input_tokens,
                            event.usage.output_tokens,
                        )
                        event_logger.debug(f"updated usage information: {usage_tracker.get().to_dict()}")

                    elif isinstance(event, HandoffOccurredEvent):
                        if event.target_agent == agent_name:
                            event_logger.debug(f"skipping handoff to same agent: {agent_name}")
                            continue

                        for message in record_transfer(agent_name, event.target_agent):
                            yield _emit(event_logger, message)
                        agent_name = event.target_agent
                        iter_logger.debug(f"switched to agent: {agent_name}")

                    elif isinstance(event, ToolCallOutputEvent):
                        if event.status != "completed" or event.output.type != "text":
                            continue
                        if is_handoff_call(event.tool_name):
                            event_logger.debug(f"skipping output of handoff call: {event.tool_name}")
                            continue
                        message = ToolMessage(
                            content=event.output.text,
                            tool_call_id=event.call_id,
                            tool_name=event.tool_name,
                        )
                        turn_messages.append(message)
                        yield _emit(event_logger, message)

                    elif isinstance(event, MessageOutputEvent):
                        if event.status != "completed":
                            continue

                        internal = is_internal(agent_name)
                        for content in event.content:
                            if content.type != "output_text":
                                continue
                            message = AssistantMessage(
                                content=content.text,
                                agent_name=agent_name,
                                response_type="internal" if internal else "external",
                            )
                            turn_messages.append(message)
                            yield _emit(event_logger, message)

                        if internal:
                            current = agent_name
                            agent_name = get_next_agent_name(stack, config_maps.agents, workflow, iter_logger)
                            # A hand-back returns to the caller; the finished agent is not a caller
                            for message in record_transfer(current, agent_name, push=False):
                                yield _emit(event_logger, message)
                            iter_logger.debug(
                                f"switched to agent (reason: internal agent put out a message): {agent_name}"
                            )
                            reentered = True
                            break

            if reentered:
                continue

            last = turn_messages[-1]
            if (
                not is_internal(agent_name)
                and agent_name in config_maps.agents
                and last.role == "assistant"
                and last.content is not None
                and last.agent_name == agent_name
            ):
                iter_logger.debug("last message was by a user_facing agent, breaking out of parent loop")
                break

        loop_logger.info(f"turn complete after {iteration} iterations, transfers: {transfer_counter.as_dict()}")
        yield _emit(loop_logger, usage_tracker.as_event())

    async def get_response(
        self,
        workflow: Workflow,
        project_tools: Iterable[WorkflowTool],
        messages: list[Message],
    ) -> TurnResponse:
        """Run one turn and collect its assistant messages and final usage.

        Args:
            workflow: Workflow to run
            project_tools: Project-level tools
            messages: Transcript so far

        Returns:
            Collected turn response
        """
        response = TurnResponse()
        async for event in self.stream_response(workflow, project_tools, messages):
            if isinstance(event, UsageEvent):
                response.usage = event
            elif event.role == "assistant":
                response.messages.append(event)
        return response


async def stream_response(
    runner: AgentRunner,
    workflow: Workflow,
    project_tools: Iterable[WorkflowTool],
    messages: list[Message] | list[dict],
    services: Optional[ToolServices] = None,
    config: Optional[RuntimeConfig] = None,
) -> AsyncIterator[OutputEvent]:
    """Stream one turn with a one-off orchestrator.

    Raw message dictionaries are parsed first; the parsed list is what gets
    repaired in place.
    """
    parsed = parse_messages(messages)
    orchestrator = TurnOrchestrator(runner, services, config)
    async for event in orchestrator.stream_response(workflow, project_tools, parsed):
        yield event


async def get_response(
    runner: AgentRunner,
    workflow: Workflow,
    project_tools: Iterable[WorkflowTool],
    messages: list[Message] | list[dict],
    services: Optional[ToolServices] = None,
    config: Optional[RuntimeConfig] = None,
) -> TurnResponse:
    """Run one turn with a one-off orchestrator and collect the result."""
    orchestrator = TurnOrchestrator(runner, services, config)
    return await orchestrator.get_response(workflow, project_tools, parse_messages(messages))


__all__ = [
    "TurnOrchestrator",
    "TurnResponse",
    "emit_greeting_turn",
    "get_next_agent_name",
    "stream_response",
    "get_response",
]
