"""OpenAI-compatible completion provider.

Drives agents with the chat completions API: tools and handoffs are exposed
as functions, tool calls are executed locally, and the run is reported as a
stream of typed events.
"""

import json
from typing import Any, AsyncIterator, Optional

from openai import AsyncOpenAI

from ..agents.runtime import RuntimeAgent
from ..config.schemas import LLMConfig
from ..errors import MaxTurnsExceededError
from ..models import (
    FunctionCallItem,
    HandoffOccurredEvent,
    MessageItem,
    MessageOutputEvent,
    OutputContent,
    ResponseCompletedEvent,
    ResponseUsage,
    RunStreamEvent,
    ToolCallOutputEvent,
    ToolOutput,
)
from ..tools import error_payload
from ..utils import get_logger
from .base import HANDOFF_TOOL_PREFIX, handoff_tool_name

logger = get_logger(__name__)

MULTIPLE_HANDOFFS_OUTPUT = "Multiple handoffs detected, ignoring this one."


def inputs_to_chat_messages(inputs: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Convert run input items into chat completion messages.

    Assistant items carry a list of ``output_text`` segments which are joined
    into one text; other items pass through.

    Args:
        inputs: Run input items

    Returns:
        Chat messages
    """
    messages: list[dict[str, Any]] = []
    for item in inputs:
        content = item.get("content")
        if isinstance(content, list):
            content = "\n".join(part.get("text", "") for part in content if isinstance(part, dict))
        messages.append({"role": item["role"], "content": content})
    return messages


def handoff_tool_schema(target: RuntimeAgent) -> dict[str, Any]:
    description = f"Handoff to the {target.name} agent to handle the request."
    if target.description:
        description = f"{description} {target.description}"
    return {
        "type": "function",
        "function": {
            "name": handoff_tool_name(target.name),
            "description": description,
            "parameters": {"type": "object", "properties": {}, "required": [], "additionalProperties": False},
        },
    }


class OpenAIProvider:
    """Completion provider for OpenAI-compatible APIs.

    Implements both the streamed agent run and one-shot text generation.
    """

    def __init__(
        self,
        config: Optional[LLMConfig] = None,
        client: Optional[AsyncOpenAI] = None,
        max_turns: int = 10,
    ) -> None:
        """Initialize the provider.

        Args:
            config: Endpoint configuration
            client: Preconfigured client (built from config when omitted)
            max_turns: Model calls allowed per run
        """
        self.config = config or LLMConfig()
        self.max_turns = max_turns

        if client is None:
            api_key = self.config.resolve_api_key()
            if not api_key:
                logger.warning(f"API key not found for {self.config.api_key_env}")
            client = AsyncOpenAI(base_url=self.config.endpoint, api_key=api_key or "not-needed")
        self.client = client

    async def generate_text(self, messages: list[dict[str, str]]) -> str:
        """Generate a single completion.

        Args:
            messages: Chat messages

        Returns:
            Completion text
        """
        params: dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature,
        }
        if self.config.max_tokens:
            params["max_tokens"] = self.config.max_tokens

        response = await self.client.chat.completions.create(**params)
        return response.choices[0].message.content or ""

    async def run_streamed(self, agent: RuntimeAgent, inputs: list[dict[str, Any]]) -> AsyncIterator[RunStreamEvent]:
        """Run an agent and stream the resulting events.

        Each model call yields a ``ResponseCompletedEvent``. Tool calls are
        executed and reported as ``ToolCallOutputEvent``; a handoff call
        yields ``HandoffOccurredEvent`` and later model calls use the target
        agent. Reply text yields ``MessageOutputEvent``, before any tool
        calls of the same response run. A response without tool calls ends
        the run, even when it carries no text.

        Args:
            agent: Agent to start with
            inputs: Run input items (see ``convert_messages_input``)

        Raises:
            MaxTurnsExceededError: If the run needs more than ``max_turns`` model calls
        """
        current = agent
        history = inputs_to_chat_messages(inputs)

        for turn in range(1, self.max_turns + 1):
            logger.debug(f"Run turn {turn}/{self.max_turns} with agent {current.name}")
            response = await self.client.chat.completions.create(**self._build_params(current, history))

            message = response.choices[0].message
            tool_calls = message.tool_calls or []
            usage = response.usage

            output: list[FunctionCallItem | MessageItem] = [
                FunctionCallItem(call_id=tc.id, name=tc.function.name, arguments=tc.function.arguments or "{}")
                for tc in tool_calls
            ]
            if message.content:
                output.append(MessageItem(text=message.content))

            yield ResponseCompletedEvent(
                output=output,
                usage=ResponseUsage(
                    total_tokens=usage.total_tokens if usage else 0,
                    input_tokens=usage.prompt_tokens if usage else 0,
                    output_tokens=usage.completion_tokens if usage else 0,
                ),
            )

            if message.content:
                yield MessageOutputEvent(agent_name=current.name, content=[OutputContent(text=message.content)])
            if not tool_calls:
                return

            history.append(
                {
                    "role": "assistant",
                    "content": message.content,
                    "tool_calls": [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {"name": tc.function.name, "arguments": tc.function.arguments or "{}"},
                        }
                        for tc in tool_calls
                    ],
                }
            )

            speaker = current
            handoffs = {handoff_tool_name(target.name): target for target in speaker.handoffs}
            handed_off = False

            for tc in tool_calls:
                name = tc.function.name
                target = handoffs.get(name)

                if target is not None:
                    if handed_off:
                        history.append({"role": "tool", "tool_call_id": tc.id, "content": MULTIPLE_HANDOFFS_OUTPUT})
                        continue
                    handed_off = True
                    history.append(
                        {"role": "tool", "tool_call_id": tc.id, "content": json.dumps({"assistant": target.name})}
                    )
                    logger.debug(f"Handoff {speaker.name} -> {target.name}")
                    yield HandoffOccurredEvent(source_agent=speaker.name, target_agent=target.name)
                    current = target
                    continue

                if name.startswith(HANDOFF_TOOL_PREFIX):
                    # Handoff calls never reach the transcript, so neither does their answer
                    logger.warning(f"Handoff not available to {speaker.name}: {name}")
                    unavailable = error_payload(f"Handoff {name} not available")
                    history.append({"role": "tool", "tool_call_id": tc.id, "content": unavailable})
                    continue

                result = await self._invoke_tool(speaker, name, tc.function.arguments)
                history.append({"role": "tool", "tool_call_id": tc.id, "content": result})
                yield ToolCallOutputEvent(call_id=tc.id, tool_name=name, output=ToolOutput(text=result))

        raise MaxTurnsExceededError(f"Max turns ({self.max_turns}) exceeded")

    async def _invoke_tool(self, agent: RuntimeAgent, name: str, arguments: Optional[str]) -> str:
        tool = agent.get_tool(name)
        if tool is None:
            logger.warning(f"Tool not found: {name}")
            return error_payload(f"Tool {name} not found")
        try:
            return await tool.invoke(arguments)
        except Exception as e:
            logger.error(f"Tool execution error: {name} - {e}")
            return error_payload(str(e))

    def _build_params(self, agent: RuntimeAgent, history: list[dict[str, Any]]) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": agent.model,
            "messages": [{"role": "system", "content": agent.instructions}, *history],
            "temperature": agent.model_settings.temperature,
        }
        max_tokens = agent.model_settings.max_tokens or self.config.max_tokens
        if max_tokens:
            params["max_tokens"] = max_tokens

        tools = [tool.to_openai_schema() for tool in agent.tools]
        tools.extend(handoff_tool_schema(target) for target in agent.handoffs)
        if tools:
            params["tools"] = tools
            params["tool_choice"] = "auto"
        return params
