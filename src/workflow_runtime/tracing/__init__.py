"""Usage and transfer accounting."""

from .usage import AgentTransferCounter, UsageTracker

__all__ = [
    "UsageTracker",
    "AgentTransferCounter",
]
