"""Metrics port definition (interface and DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

__all__ = ["PollAttemptDto", "MetricsPort", "PollOutcome"]

PollOutcome = Literal["ok", "transient", "failed"]


@dataclass(slots=True, frozen=True)
class PollAttemptDto:
    """Immutable snapshot of a single fetch attempt.

    Attributes:
        due_at_ms: Epoch millis when the poll became due.
        fired_at_ms: Epoch millis when the request was started.
        duration_ms: Round trip duration in milliseconds.
        outcome: "ok", "transient" (retryable) or "failed" (fatal).
    """

    due_at_ms: int
    fired_at_ms: int
    duration_ms: float
    outcome: PollOutcome = "ok"


class MetricsPort(Protocol):
    """Interface for recording fetch attempt metrics.

    Core calls update() after each attempt; presentation layers call
    __str__() to render summaries.
    """

    def update(self, attempt: PollAttemptDto, /) -> None:
        """Record a finished fetch attempt.

        Args:
            attempt: The attempt to record.
        """
        ...

    def __str__(self) -> str:
        """Return concise textual summary for humans.

        Returns:
            Formatted metrics string.
        """
        ...
