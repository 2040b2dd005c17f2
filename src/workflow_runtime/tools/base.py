"""Callable tool definitions exposed to agents.

A ``FunctionTool`` pairs the JSON schema the model sees with an async handler
that receives the parsed arguments and returns the tool's textual result.
"""

import json
from typing import Any, Awaitable, Callable, Optional

from ..utils import get_logger

logger = get_logger(__name__)

ToolHandler = Callable[[dict[str, Any]], Awaitable[str]]


def result_payload(result: Any) -> str:
    """Serialize a successful tool result as ``{"result": ...}``.

    Args:
        result: Any JSON-serializable value

    Returns:
        JSON string
    """
    return json.dumps({"result": result}, default=str)


def error_payload(message: str) -> str:
    """Serialize a tool failure as ``{"error": ...}``.

    Args:
        message: Error message

    Returns:
        JSON string
    """
    return json.dumps({"error": message})


class FunctionTool:
    """Function tool bound to a handler.

    Attributes:
        name: Tool name the model calls
        description: Description shown to the model
        parameters: JSON schema of the arguments
        strict: Whether the schema is enforced strictly by the provider
        handler: Coroutine invoked with the parsed arguments
    """

    def __init__(
        self,
        name: str,
        description: str,
        parameters: dict[str, Any],
        handler: ToolHandler,
        strict: bool = True,
    ) -> None:
        self.name = name
        self.description = description
        self.parameters = parameters
        self.handler = handler
        self.strict = strict

    async def invoke(self, arguments: Optional[str]) -> str:
        """Invoke the tool with JSON-encoded arguments.

        Args:
            arguments: JSON object string from the model (empty means no arguments)

        Returns:
            Tool result text

        Raises:
            ValueError: If the arguments are not a JSON object
        """
        try:
            parsed = json.loads(arguments) if arguments else {}
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid arguments for tool {self.name}: {e}") from e
        if not isinstance(parsed, dict):
            raise ValueError(f"Arguments for tool {self.name} must be a JSON object")

        logger.debug(f"Invoking tool {self.name} with {arguments}")
        return await self.handler(parsed)

    def to_openai_schema(self) -> dict[str, Any]:
        """Get the chat-completions tool definition.

        Returns:
            Tool definition dictionary
        """
        function: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }
        if self.strict:
            function["strict"] = True
        return {"type": "function", "function": function}

    def __repr__(self) -> str:
        return f"FunctionTool(name={self.name!r})"


def open_parameters_schema(properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    """Build a non-strict object schema that tolerates extra properties.

    Args:
        properties: Property schemas
        required: Required property names

    Returns:
        JSON schema
    """
    return {
        "type": "object",
        "properties": properties,
        "required": required or [],
        "additionalProperties": True,
    }


QUERY_PARAMETERS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {"type": "string", "description": "The query to search for"},
    },
    "required": ["query"],
    "additionalProperties": False,
}
