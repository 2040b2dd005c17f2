"""Runtime agent definitions consumed by completion providers."""

from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, Field

from ..tools import FunctionTool


class ModelSettings(BaseModel):
    """Sampling settings of an agent's model binding."""

    temperature: float = Field(default=0.0, ge=0, le=2)
    max_tokens: Optional[int] = Field(default=None, ge=1)


@dataclass(eq=False)
class RuntimeAgent:
    """Compiled agent ready to be run by a provider.

    Handoff edges may form cycles, so agents compare by identity.

    Attributes:
        name: Agent name
        description: Agent description (shown on handoff tools)
        instructions: Sanitized instructions
        model: Model identifier
        tools: Callable tools
        handoffs: Agents this agent may transfer control to
        model_settings: Sampling settings
    """

    name: str
    description: str = ""
    instructions: str = ""
    model: str = "gpt-4o"
    tools: list[FunctionTool] = field(default_factory=list)
    handoffs: list["RuntimeAgent"] = field(default_factory=list)
    model_settings: ModelSettings = field(default_factory=ModelSettings)

    def get_tool(self, name: str) -> Optional[FunctionTool]:
        return next((tool for tool in self.tools if tool.name == name), None)

    def __repr__(self) -> str:
        return (
            f"RuntimeAgent(name={self.name!r}, tools={[t.name for t in self.tools]}, "
            f"handoffs={[h.name for h in self.handoffs]})"
        )
