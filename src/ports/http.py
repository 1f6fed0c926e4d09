"""HTTP port definitions (DTOs)."""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from multidict import CIMultiDictProxy

__all__ = [
    "HttpMethod",
    "HttpExecutorPort",
    "RequestDescriptor",
    "BODY_METHODS",
    "valid_methods",
]


class HttpMethod(str, Enum):
    """HTTP methods accepted for polling."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


# Methods that carry a request body
BODY_METHODS = frozenset({HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH})


def valid_methods() -> list[str]:
    """Return the allowed values for the method option, in display order."""
    return [m.value for m in HttpMethod]


@dataclass(slots=True, frozen=True)
class RequestDescriptor:
    """Fully formed HTTP request, ready to be executed.

    Decouples request construction (pure) from the HTTP transport.

    Attributes:
        method: HTTP method.
        uri: Base URI with the configured query string appended.
        headers: Case-insensitive header mapping; one value per key.
        body: Request body, only set for POST, PUT and PATCH.
    """

    method: HttpMethod
    uri: str
    headers: CIMultiDictProxy[str]
    body: str | None = None


class HttpExecutorPort(Protocol):
    """Executes request descriptors over a long-lived connection pool."""

    async def open(self) -> None:
        """Acquire the connection pool."""
        ...

    async def close(self) -> None:
        """Release every pooled connection."""
        ...

    async def execute(self, request: RequestDescriptor, /) -> str:
        """Send the request and return the response body text.

        Raises:
            RemoteError: Non-2xx status or undecodable body.
            TransientIOError: Transport failure.
        """
        ...
