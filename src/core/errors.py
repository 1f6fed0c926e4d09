"""Error taxonomy shared by the request layer and the poll scheduler."""

__all__ = [
    "ConnectorError",
    "ConfigurationError",
    "MalformedUriError",
    "UnsupportedMethodError",
    "RemoteError",
    "TransientIOError",
]


class ConnectorError(Exception):
    """Non-retryable failure. Base class of every classified error."""


class ConfigurationError(ConnectorError):
    """The configuration cannot produce a valid request."""


class MalformedUriError(ConfigurationError):
    """Base URI plus query string is not a valid absolute URI."""


class UnsupportedMethodError(ConfigurationError):
    """HTTP method outside GET, POST, PUT, PATCH and DELETE."""


class RemoteError(ConnectorError):
    """The remote answered, but not with a usable 2xx text response.

    Attributes:
        status_code: HTTP status of the response, if one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientIOError(ConnectorError):
    """Transport failure (timeout, refused connection, broken framing).

    The only retryable error class.
    """
