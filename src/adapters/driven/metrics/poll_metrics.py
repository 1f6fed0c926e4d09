"""In-memory sliding-window metrics for fetch attempts."""

from __future__ import annotations

import statistics
from collections import deque
from dataclasses import dataclass

from src.ports.metrics import MetricsPort, PollAttemptDto, PollOutcome

__all__ = ["Metrics"]


@dataclass(slots=True, frozen=True)
class _Sample:
    """Internal record for one fetch attempt."""

    lag_ms: float
    duration_ms: float
    outcome: PollOutcome


class Metrics(MetricsPort):
    """Lock-free metrics for one poll worker.

    Tracks:
    - Average lag (how late a fetch fired after becoming due).
    - Average request latency.
    - Failure rate (transient and fatal).
    - Last outcome.
    - Total attempts seen.

    Not thread-safe; create one instance per worker.
    """

    def __init__(self, *, window_size: int = 100) -> None:
        """Initialize metrics collector.

        Args:
            window_size: Number of recent attempts to keep for statistics.
        """
        self._window: deque[_Sample] = deque(maxlen=window_size)
        self._total_seen: int = 0

    def update(self, attempt: PollAttemptDto) -> None:
        """Record a finished fetch attempt.

        Args:
            attempt: Fetch attempt with timing and outcome.
        """
        self._window.append(
            _Sample(
                lag_ms=float(max(0, attempt.fired_at_ms - attempt.due_at_ms)),
                duration_ms=attempt.duration_ms,
                outcome=attempt.outcome,
            )
        )
        self._total_seen += 1

    def __str__(self) -> str:
        """Return human-readable one-line summary for logging.

        Returns:
            Formatted metrics string.
        """
        if not self._window:
            return "Metrics: waiting for data …"

        n_window = len(self._window)
        failures = sum(1 for s in self._window if s.outcome != "ok")
        fail_pct = (failures / n_window) * 100
        avg_lag = statistics.fmean(s.lag_ms for s in self._window)
        avg_latency = statistics.fmean(s.duration_ms for s in self._window)
        last = self._window[-1]

        return (
            f"lag={avg_lag:7.1f} ms | "
            f"latency={avg_latency:7.1f} ms | "
            f"last={last.outcome} | "
            f"fail={fail_pct:5.1f}% | "
            f"win={n_window}/{self._window.maxlen} | "
            f"total={self._total_seen}"
        )
