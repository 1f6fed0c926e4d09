"""HTTP executor adapter: pooled aiohttp session with outcome classification."""

import logging
from types import TracebackType

import aiohttp
from aiohttp import ClientTimeout
from yarl import URL

from src.adapters.driven.http.retry import TRANSIENT_ERRORS
from src.core.errors import MalformedUriError, RemoteError, TransientIOError
from src.ports.http import RequestDescriptor
from src.ports.settings import ClientConfig

__all__ = ["HttpClient"]

logger = logging.getLogger(__name__)

FIRST_SUCCESS_HTTP_CODE = 200
FIRST_REDIRECT_HTTP_CODE = 300


class HttpClient:
    """Execute request descriptors over a single pooled session.

    Features:
    - Connect and read timeouts applied to every request.
    - Optional HTTP proxy applied to every request.
    - Outcome classification: body text, RemoteError or TransientIOError.
    - Context manager for proper resource cleanup.

    The session is created once and shared by all polls; the client keeps
    no per-request state.
    """

    def __init__(self, config: ClientConfig) -> None:
        """Initialize HTTP client.

        Args:
            config: Client configuration providing timeouts and proxy.
        """
        self.config = config
        self.session: aiohttp.ClientSession | None = None
        self.timeout = ClientTimeout(
            total=None,
            sock_connect=config.connect_timeout_ms / 1000,
            sock_read=config.read_timeout_ms / 1000,
        )
        self.proxy: str | None = None
        if config.proxy_host and config.proxy_port > 0:
            self.proxy = f"http://{config.proxy_host}:{config.proxy_port}"

    async def open(self) -> None:
        """Create the pooled session (no-op if already open)."""
        if self.session is None:
            self.session = aiohttp.ClientSession(timeout=self.timeout)
            logger.debug(
                f"HTTP session opened (connect={self.config.connect_timeout_ms}ms, "
                f"read={self.config.read_timeout_ms}ms, proxy={self.proxy or '<none>'})"
            )

    async def close(self) -> None:
        """Close the session and every pooled connection (idempotent)."""
        session, self.session = self.session, None
        if session is not None:
            await session.close()
            logger.debug("HTTP session closed")

    async def __aenter__(self) -> "HttpClient":
        """Enter async context manager (open session).

        Returns:
            Self for use in async with statement.
        """
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session)."""
        await self.close()

    async def execute(self, request: RequestDescriptor) -> str:
        """Send one request and return the response body as text.

        Args:
            request: Fully built request.

        Returns:
            Decoded response body for statuses in [200, 300).

        Raises:
            RuntimeError: If the session is not open.
            RemoteError: On non-2xx status or undecodable body.
            TransientIOError: On connection, timeout or framing errors.
            MalformedUriError: If aiohttp rejects the URI.
        """
        if self.session is None:
            raise RuntimeError("Session not initialized; call open() or use 'async with'")

        logger.info(f"Polling API at {request.uri}")
        try:
            async with self.session.request(
                request.method.value,
                URL(request.uri, encoded=True),
                headers=request.headers,
                data=request.body,
                proxy=self.proxy,
            ) as resp:
                if not FIRST_SUCCESS_HTTP_CODE <= resp.status < FIRST_REDIRECT_HTTP_CODE:
                    raise RemoteError(
                        f"HTTP request failed with status code: {resp.status}",
                        status_code=resp.status,
                    )
                try:
                    return await resp.text()
                except (UnicodeDecodeError, LookupError) as e:
                    raise RemoteError(
                        "Failed to decode HTTP response.", status_code=resp.status
                    ) from e
        except aiohttp.InvalidURL as e:
            raise MalformedUriError(f"Invalid URI: {request.uri}") from e
        except TRANSIENT_ERRORS as e:
            raise TransientIOError(f"I/O error during HTTP request: {e!r}") from e
