"""Mock tools whose responses are synthesized by a model."""

import json
from typing import Any

from ..models import WorkflowTool
from ..services.base import TextGenerator
from ..utils import PrefixLogger
from .base import FunctionTool, error_payload, open_parameters_schema, result_payload


def build_mock_prompt(tool_name: str, description: str, mock_instructions: str, args: str) -> list[dict[str, str]]:
    """Build the generation prompt that simulates a tool call.

    Args:
        tool_name: Tool name
        description: Tool description
        mock_instructions: Extra instructions for the simulation
        args: JSON-encoded call arguments

    Returns:
        Chat messages
    """
    return [
        {
            "role": "system",
            "content": (
                f"You are simulating the execution of a tool called '{tool_name}'. "
                f"Here is the description of the tool: {description}. "
                f"Here are the instructions for the mock tool: {mock_instructions}. "
                "Generate a realistic response as if the tool was actually executed with the given parameters."
            ),
        },
        {
            "role": "user",
            "content": (
                f"Generate a realistic response for the tool '{tool_name}' with these parameters: {args}. "
                "The response should be concise and focused on what the tool would actually return."
            ),
        },
    ]


async def invoke_mock_tool(
    logger: PrefixLogger,
    generator: TextGenerator,
    tool_name: str,
    args: str,
    description: str,
    mock_instructions: str,
) -> str:
    logger = logger.child("invoke_mock_tool")
    logger.debug(f"tool_name: {tool_name}, args: {args}")

    text = await generator.generate_text(build_mock_prompt(tool_name, description, mock_instructions, args))
    logger.debug(f"generated text: {text}")
    return text


def create_mock_tool(logger: PrefixLogger, config: WorkflowTool, generator: TextGenerator | None) -> FunctionTool:
    """Create a mock tool.

    Failures (including a missing text generator) are returned as
    ``{"error": "Mock tool execution failed: ..."}``.

    Args:
        logger: Parent logger
        config: Tool definition
        generator: Text generator used to synthesize responses

    Returns:
        Function tool
    """

    async def handler(arguments: dict[str, Any]) -> str:
        try:
            if generator is None:
                raise RuntimeError("text_generator is not configured")
            result = await invoke_mock_tool(
                logger,
                generator,
                config.name,
                json.dumps(arguments),
                config.description,
                config.mock_instructions,
            )
            return result_payload(result)
        except Exception as e:
            logger.warning(f"Error executing mock tool {config.name}: {e}")
            return error_payload(f"Mock tool execution failed: {e}")

    return FunctionTool(
        name=config.name,
        description=config.description,
        parameters=open_parameters_schema(config.parameters.properties, config.parameters.required),
        handler=handler,
        strict=False,
    )
