"""Poll scheduler: cadence, checkpointing and error classification."""

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from types import TracebackType

from src.core.errors import ConnectorError, TransientIOError
from src.core.request_builder import RequestBuilder
from src.ports.http import HttpExecutorPort
from src.ports.metrics import MetricsPort, PollAttemptDto, PollOutcome
from src.ports.records import LAST_POLLED_TIMESTAMP, OffsetStorePort, OutputRecord
from src.ports.settings import SettingsPort

__all__ = ["PollScheduler", "PollState", "epoch_millis", "iso_instant"]

logger = logging.getLogger(__name__)


class PollState(str, Enum):
    """Scheduler state for the current cycle."""

    IDLE = "idle"
    FETCHING = "fetching"
    EMITTED = "emitted"


def epoch_millis() -> int:
    """Get current wall-clock time in epoch milliseconds.

    Wall-clock (not monotonic) because the value is persisted as an offset
    and compared again after a restart.
    """
    return time.time_ns() // 1_000_000


def iso_instant(millis: int) -> str:
    """Format epoch millis as an ISO-8601 UTC instant, e.g. 2024-01-01T00:00:00.123Z."""
    instant = datetime.fromtimestamp(millis // 1000, tz=timezone.utc)
    instant = instant.replace(microsecond=(millis % 1000) * 1000)
    return instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PollScheduler:
    """Task-level state machine polling one HTTP endpoint.

    Lifecycle: start() once, poll_once() repeatedly (never concurrently),
    stop() once. The only mutable state is last_poll_time, seeded from the
    offset store and advanced after each successful fetch.
    """

    def __init__(
        self,
        settings: SettingsPort,
        client: HttpExecutorPort,
        offset_store: OffsetStorePort,
        *,
        builder: RequestBuilder | None = None,
        metrics: MetricsPort | None = None,
        clock: Callable[[], int] = epoch_millis,
    ) -> None:
        """Initialize scheduler.

        Args:
            settings: Runtime settings (client config, interval, topic).
            client: HTTP executor, opened in start() and closed in stop().
            offset_store: Store queried once at start() for the last checkpoint.
            builder: Request builder; defaults to one built from settings.client.
            metrics: Optional collector updated after each fetch attempt.
            clock: Source of epoch milliseconds.
        """
        self.settings = settings
        self.client = client
        self.offset_store = offset_store
        self.builder = builder or RequestBuilder(settings.client)
        self.metrics = metrics
        self.clock = clock

        self.source_partition: dict[str, str] = {"url": settings.client.url}
        self.last_poll_time: int = 0
        self.state = PollState.IDLE

    @property
    def poll_interval_ms(self) -> int:
        return self.settings.poll_interval_ms

    async def start(self) -> None:
        """Seed last_poll_time from the stored offset and open the HTTP client."""
        logger.info(
            f"Starting poll scheduler: url={self.settings.client.url}, "
            f"method={self.settings.client.method.value}, "
            f"interval={self.poll_interval_ms}ms, topic={self.settings.topic}"
        )
        self.last_poll_time = self._stored_poll_time()
        self.state = PollState.IDLE
        await self.client.open()

    async def stop(self) -> None:
        """Close the HTTP client. Close failures are logged, never raised."""
        logger.info("Stopping poll scheduler")
        try:
            await self.client.close()
        except Exception as e:  # noqa: BLE001
            logger.error(f"Failed to close HTTP client: {e}", exc_info=True)

    async def __aenter__(self) -> "PollScheduler":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.stop()

    async def poll_once(self) -> list[OutputRecord]:
        """Run one scheduling cycle.

        If the interval has not elapsed since the last successful fetch, waits
        for the remainder and returns no records. Otherwise performs exactly
        one request and returns one record.

        Returns:
            Empty list when not due, else a single record.

        Raises:
            TransientIOError: Retryable transport failure; checkpoint unchanged.
            ConnectorError: Non-retryable failure (remote, configuration or
                unexpected); checkpoint unchanged.
            asyncio.CancelledError: If cancelled while waiting or fetching.
        """
        self.state = PollState.IDLE
        now = self.clock()
        elapsed = now - self.last_poll_time
        if elapsed < self.poll_interval_ms:
            wait_ms = self.poll_interval_ms - elapsed
            logger.info(f"Waiting for {wait_ms} ms before next poll.")
            await asyncio.sleep(wait_ms / 1000)
            return []

        self.state = PollState.FETCHING
        started = time.perf_counter()
        outcome: PollOutcome | None = None
        try:
            request = self.builder.build(self.settings.client.url, self.settings.client.method)
            payload = await self.client.execute(request)
            outcome = "ok"
        except TransientIOError as e:
            outcome = "transient"
            logger.warning(f"An I/O error occurred during the HTTP request, likely temporary: {e}")
            raise
        except ConnectorError as e:
            outcome = "failed"
            logger.error(f"API client reported an unrecoverable error: {e}")
            raise
        except Exception as e:
            outcome = "failed"
            logger.error(f"An unexpected error occurred during the HTTP request: {e}", exc_info=True)
            raise ConnectorError("Unexpected error during HTTP request.") from e
        finally:
            if outcome is not None:
                self._record_attempt(now, started, outcome)
            if outcome != "ok":
                self.state = PollState.IDLE

        record = self._to_record(payload, now)
        self.last_poll_time = now
        self.state = PollState.EMITTED
        logger.debug(f"Publishing fetched data: {record}")
        return [record]

    def _to_record(self, payload: str, fetched_at: int) -> OutputRecord:
        logger.info(f"Successfully fetched data. Payload size: {len(payload)}")
        return OutputRecord(
            source_partition=dict(self.source_partition),
            source_offset={LAST_POLLED_TIMESTAMP: fetched_at},
            topic=self.settings.topic,
            key=iso_instant(fetched_at),
            value=payload,
        )

    def _stored_poll_time(self) -> int:
        """Read last_polled_timestamp for this partition, 0 if none."""
        offset = self.offset_store.offset(self.source_partition)
        if offset is None:
            logger.info("No previous offset found. Starting from scratch.")
            return 0

        logger.info(f"Found persisted offset: {dict(offset)}")
        value = offset.get(LAST_POLLED_TIMESTAMP)
        if value is None:
            return 0
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring unreadable {LAST_POLLED_TIMESTAMP}={value!r}")
            return 0

    def _record_attempt(self, fired_at: int, started: float, outcome: PollOutcome) -> None:
        if self.metrics is None:
            return
        # First poll ever is due the moment it fires
        due_at = self.last_poll_time + self.poll_interval_ms if self.last_poll_time else fired_at
        self.metrics.update(
            PollAttemptDto(
                due_at_ms=due_at,
                fired_at_ms=fired_at,
                duration_ms=(time.perf_counter() - started) * 1_000.0,
                outcome=outcome,
            )
        )
        logger.info(f"Poll metrics: {self.metrics}")
