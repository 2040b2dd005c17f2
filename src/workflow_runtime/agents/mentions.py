"""Mention resolution in agent instructions.

Instructions reference other workflow entities with markdown-style mentions
such as ``[@agent:Billing](#mention)``. Sanitizing rewrites every known
mention to the compact ``[@agent:Billing]`` form and collects the entities
it refers to.
"""

import re
from typing import Iterable

from ..models import ConnectedEntity, Workflow, WorkflowTool

MENTION_PATTERN = re.compile(r"\[@(tool|prompt|agent):([^\]]+)\]\(#mention\)")


def sanitize_text_with_mentions(
    text: str,
    workflow: Workflow,
    project_tools: Iterable[WorkflowTool] = (),
) -> tuple[str, list[ConnectedEntity]]:
    """Resolve mentions in a text.

    Each distinct mention is resolved once, in order of first appearance.
    Mentions of unknown entities stay in the text unchanged and yield no entity.

    Args:
        text: Text containing mentions
        workflow: Workflow providing agents, tools and prompts
        project_tools: Project-level tools, resolved alongside workflow tools

    Returns:
        Tuple of (sanitized text, resolved entities)
    """
    tool_names = {tool.name for tool in workflow.tools} | {tool.name for tool in project_tools}
    known = {
        "agent": {agent.name for agent in workflow.agents},
        "tool": tool_names,
        "prompt": {prompt.name for prompt in workflow.prompts},
    }

    entities: list[ConnectedEntity] = []
    seen: set[tuple[str, str]] = set()

    for match in MENTION_PATTERN.finditer(text):
        kind, name = match.group(1), match.group(2)
        if (kind, name) in seen:
            continue
        seen.add((kind, name))

        if name not in known[kind]:
            continue

        entities.append(ConnectedEntity(kind=kind, name=name))
        text = text.replace(match.group(0), f"[@{kind}:{name}]")

    return text, entities
