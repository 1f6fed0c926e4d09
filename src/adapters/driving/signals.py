"""Signal handling for graceful shutdown."""

import asyncio
import logging
import signal

__all__ = ["make_stop_on_sigterm"]

logger = logging.getLogger(__name__)


def make_stop_on_sigterm() -> asyncio.Event:
    """Create a stop event set on SIGTERM or SIGINT.

    The driver loop races every poll cycle against this event, so an
    interval wait or an in-flight request is cancelled as soon as the
    signal arrives instead of running to completion.

    On Docker/Kubernetes, SIGTERM is sent 30s before SIGKILL,
    allowing graceful shutdown.

    Returns:
        Event that becomes set when a termination signal is received.
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def handle_signal(sig: signal.Signals) -> None:
        logger.info(f"{sig.name} received, initiating graceful shutdown...")
        stop.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, handle_signal, sig)

    return stop
