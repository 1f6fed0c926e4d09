"""Application entrypoint."""

import asyncio
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TextIO

from src.adapters.driven.config.settings import load_settings
from src.adapters.driven.http.client import HttpClient
from src.adapters.driven.http.retry import retry
from src.adapters.driven.logging.logging_config import configure_logs
from src.adapters.driven.metrics.poll_metrics import Metrics
from src.adapters.driven.offsets.file_store import FileOffsetStore
from src.adapters.driven.sink.jsonl_sink import JsonLinesSink
from src.adapters.driving.signals import make_stop_on_sigterm
from src.core.errors import TransientIOError
from src.core.event_loop import start_main_loop
from src.core.poll_scheduler import PollScheduler

__all__ = ["main"]

logger = logging.getLogger(__name__)


async def main() -> None:
    """Start the HTTP source service.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration.
    3. Seed the poll checkpoint from the offset file and open the HTTP client.
    4. Run the poll loop, writing records as JSON lines.
    5. Gracefully shutdown on SIGTERM/SIGINT, closing the HTTP client.
    """
    configure_logs()
    logger.info("Starting HTTP source service...")

    try:
        config = load_settings()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check TOPIC, HTTP_URL, HTTP_METHOD, HTTP_POLL_INTERVAL_MS (>= 5000) "
            "and the timeout options (>= 1000).",
            exc,
        )
        return

    # Wrap config into port so core depends on interface (hexagonal)
    settings_port = config.to_port()
    offset_store = FileOffsetStore(config.offset_file_path)
    scheduler = PollScheduler(
        settings=settings_port,
        client=HttpClient(settings_port.client),
        offset_store=offset_store,
        metrics=Metrics(),
    )
    poll_fn = retry(times=settings_port.retry_attempts, retry_on=(TransientIOError,))(
        scheduler.poll_once
    )

    with open_output(config.output_file_path) as stream:
        try:
            async with scheduler:
                await start_main_loop(
                    settings=settings_port,
                    stop_event=make_stop_on_sigterm(),
                    poll_fn=poll_fn,
                    sink=JsonLinesSink(stream),
                    offset_store=offset_store,
                )
        except Exception as e:
            logger.error(f"Unhandled exception in main loop: {e}", exc_info=True)

    logger.info("HTTP source stopped.")


@contextmanager
def open_output(path: str | None) -> Iterator[TextIO]:
    """Yield the record output stream: the file at path (appending), else stdout."""
    if path is None:
        yield sys.stdout
        return
    with open(path, "a", encoding="utf-8") as f:
        yield f


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")
