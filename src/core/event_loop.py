"""Driver loop that repeatedly runs poll cycles and delivers records."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from src.core.errors import RemoteError, TransientIOError
from src.ports.records import OffsetStorePort, OutputRecord, RecordSinkPort
from src.ports.settings import SettingsPort

__all__ = ["start_main_loop", "run_until_stopped"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def run_until_stopped(aw: Awaitable[T], stop_event: asyncio.Event) -> tuple[bool, T | None]:
    """Await aw unless stop_event is set first.

    When the stop event wins, aw is cancelled and awaited before returning,
    so the cancellation reaches whatever it was blocked on.

    Args:
        aw: Awaitable to run.
        stop_event: Event signalling shutdown.

    Returns:
        (True, result) if aw completed, (False, None) if stopped first.

    Raises:
        Whatever aw raises, if it completes first.
    """
    work = asyncio.ensure_future(aw)
    stopper = asyncio.ensure_future(stop_event.wait())
    try:
        await asyncio.wait({work, stopper}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        # Also runs if this coroutine itself is cancelled
        for task in (work, stopper):
            if not task.done():
                task.cancel()
        await asyncio.gather(work, stopper, return_exceptions=True)

    if work.cancelled():
        return False, None
    return True, work.result()


async def start_main_loop(
    settings: SettingsPort,
    stop_event: asyncio.Event,
    poll_fn: Callable[[], Awaitable[list[OutputRecord]]],
    sink: RecordSinkPort,
    offset_store: OffsetStorePort,
) -> None:
    """Run poll cycles until stop_event is set.

    Each cycle:
    1. Await poll_fn() (interval wait or one fetch), cancelled on shutdown.
    2. Send every returned record to the sink, then commit its offset.
    3. On TransientIOError or RemoteError, log and wait one poll interval
       before the next cycle; the failed cycle is not retried here.

    Args:
        settings: Runtime configuration (interval).
        stop_event: Set when the loop should exit.
        poll_fn: Runs one poll cycle; usually PollScheduler.poll_once wrapped
            with the retry policy.
        sink: Receives produced records.
        offset_store: Receives the offset of each delivered record.

    Raises:
        ConfigurationError: Or any other non-cycle error; the loop stops.
    """
    while not stop_event.is_set():
        try:
            completed, records = await run_until_stopped(poll_fn(), stop_event)
        except (TransientIOError, RemoteError) as e:
            logger.warning(
                f"Poll cycle failed ({type(e).__name__}: {e}); "
                f"next attempt in {settings.poll_interval_ms} ms"
            )
            await run_until_stopped(asyncio.sleep(settings.poll_interval_ms / 1000), stop_event)
            continue

        if not completed:
            logger.info("Shutdown requested, in-flight poll cancelled.")
            break

        for record in records or []:
            sink.send(record)
            offset_store.commit(record.source_partition, record.source_offset)
