"""Transient error classification and retry policy."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import TypeVar

import aiohttp

__all__ = ["retry", "TRANSIENT_ERRORS"]

logger = logging.getLogger(__name__)

# Transport-level exceptions considered transient
TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    aiohttp.ClientConnectorError,  # Connection refused, DNS failed
    aiohttp.ClientConnectionError,  # Connection error, server disconnected
    aiohttp.ClientOSError,  # OS-level network error
    aiohttp.ServerTimeoutError,  # Connect or read timeout
    aiohttp.ClientPayloadError,  # Truncated or broken body
    aiohttp.ClientResponseError,  # Malformed response framing
    asyncio.TimeoutError,
)

T = TypeVar("T")
AsyncFn = Callable[..., Awaitable[T]]


def retry(
    times: int = 3,
    delay_sec: tuple[float, ...] = (0.2, 0.5, 1.0),
    retry_on: tuple[type[BaseException], ...] = TRANSIENT_ERRORS,
) -> Callable[[AsyncFn[T]], AsyncFn[T]]:
    """Decorate an async function with backoff retry on transient errors.

    Errors outside retry_on propagate immediately. Cancellation is never
    retried.

    Args:
        times: Number of attempts (1 = no retry).
        delay_sec: Delays between attempts in seconds; the last one repeats.
        retry_on: Exception types eligible for retry.

    Returns:
        Decorator function.

    Example:
        @retry(times=3, retry_on=(TransientIOError,))
        async def poll():
            return await scheduler.poll_once()
    """
    if times < 1:
        raise ValueError("times must be >= 1")

    def decorator(func: AsyncFn[T]) -> AsyncFn[T]:
        @wraps(func)
        async def wrapper(*args: object, **kwargs: object) -> T:
            for attempt in range(times):
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    if attempt == times - 1:
                        logger.debug(f"Retry exhausted after {times} attempts: {e}")
                        raise
                    delay = delay_sec[min(attempt, len(delay_sec) - 1)]
                    logger.debug(f"Attempt {attempt + 1}/{times} failed ({e}), retrying in {delay}s")
                    await asyncio.sleep(delay)

            raise RuntimeError("Retry wrapper exhausted")

        return wrapper

    return decorator
