"""Settings port definitions (DTOs)."""

from dataclasses import dataclass, field

from src.ports.http import HttpMethod

__all__ = ["ClientConfig", "SettingsPort"]


@dataclass(frozen=True)
class ClientConfig:
    """Immutable HTTP client configuration, built once at startup.

    Attributes:
        url: Base URL of the polled endpoint.
        method: HTTP method used for every poll.
        query_params: Raw query string appended to the URL (e.g. "a=1&b=2").
        headers: Comma-separated "key=value" header pairs.
        request_body: Body sent with POST, PUT and PATCH requests.
        auth_username: Basic auth user name.
        auth_password: Basic auth password.
        auth_bearer: Bearer token; wins over basic auth when both are set.
        proxy_host: HTTP proxy host; empty disables the proxy.
        proxy_port: HTTP proxy port; 0 disables the proxy.
        connect_timeout_ms: Timeout for establishing a connection.
        read_timeout_ms: Timeout for reading the response.
    """

    url: str
    method: HttpMethod = HttpMethod.GET
    query_params: str = ""
    headers: str = ""
    request_body: str = ""
    auth_username: str = ""
    auth_password: str = field(default="", repr=False)
    auth_bearer: str = field(default="", repr=False)
    proxy_host: str = ""
    proxy_port: int = 0
    connect_timeout_ms: int = 5000
    read_timeout_ms: int = 10000


@dataclass
class SettingsPort:
    """Runtime settings for the poll scheduler and the driver loop.

    Decouples core from concrete configuration sources, enabling
    easy testing and implementation swapping.

    Attributes:
        client: HTTP client configuration.
        poll_interval_ms: Minimum milliseconds between successful fetches.
        topic: Destination name stamped on every produced record.
        retry_attempts: Attempts per cycle on transient failures (1 = no retry).
    """

    client: ClientConfig
    poll_interval_ms: int
    topic: str
    retry_attempts: int = 3
