"""Per-invocation usage and transfer accounting."""

from collections import defaultdict

from ..models import TokenCounts, UsageEvent


class UsageTracker:
    """Accumulates token usage over one invocation.

    Counters only ever grow; negative deltas are rejected.
    """

    def __init__(self) -> None:
        self._total = 0
        self._prompt = 0
        self._completion = 0

    def increment(self, total: int, prompt: int, completion: int) -> None:
        """Add the usage of one completed model response.

        Args:
            total: Total tokens
            prompt: Prompt tokens
            completion: Completion tokens

        Raises:
            ValueError: If any delta is negative
        """
        if total < 0 or prompt < 0 or completion < 0:
            raise ValueError(f"usage deltas must be non-negative: {total}/{prompt}/{completion}")
        self._total += total
        self._prompt += prompt
        self._completion += completion

    def get(self) -> TokenCounts:
        return TokenCounts(total=self._total, prompt=self._prompt, completion=self._completion)

    def as_event(self) -> UsageEvent:
        """Snapshot the counters as a usage event.

        Returns:
            UsageEvent with the current totals
        """
        return UsageEvent(tokens=self.get())


class AgentTransferCounter:
    """Counts agent-to-agent transfers keyed by ``"from:to"``."""

    def __init__(self) -> None:
        self._calls: defaultdict[str, int] = defaultdict(int)

    @staticmethod
    def key(from_agent: str, to_agent: str) -> str:
        return f"{from_agent}:{to_agent}"

    def increment(self, from_agent: str, to_agent: str) -> None:
        self._calls[self.key(from_agent, to_agent)] += 1

    def get(self, from_agent: str, to_agent: str) -> int:
        return self._calls.get(self.key(from_agent, to_agent), 0)

    def total(self) -> int:
        return sum(self._calls.values())

    def as_dict(self) -> dict[str, int]:
        return dict(self._calls)
