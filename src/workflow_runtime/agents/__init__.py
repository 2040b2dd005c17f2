"""Agent graph construction."""

from .builder import ConfigMaps, create_agent, create_agent_rag_tool, create_agents, map_config
from .graph import build_handoff_graph, find_handoff_cycles, to_mermaid, validate_workflow
from .instructions import CHILD_TRANSFER_RELATED_INSTRUCTIONS, RECOMMENDED_PROMPT_PREFIX, compose_instructions, rag_instructions
from .mentions import MENTION_PATTERN, sanitize_text_with_mentions
from .runtime import ModelSettings, RuntimeAgent

__all__ = [
    # Builder
    "ConfigMaps",
    "map_config",
    "create_agent",
    "create_agent_rag_tool",
    "create_agents",
    # Graph
    "build_handoff_graph",
    "find_handoff_cycles",
    "validate_workflow",
    "to_mermaid",
    # Instructions
    "RECOMMENDED_PROMPT_PREFIX",
    "CHILD_TRANSFER_RELATED_INSTRUCTIONS",
    "compose_instructions",
    "rag_instructions",
    # Mentions
    "MENTION_PATTERN",
    "sanitize_text_with_mentions",
    # Runtime
    "ModelSettings",
    "RuntimeAgent",
]
