"""Configuration loading from environment variables or a property mapping."""

import logging
import os
from collections.abc import Mapping
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, SecretStr, TypeAdapter, field_validator

from src.ports.http import HttpMethod, valid_methods
from src.ports.settings import ClientConfig, SettingsPort

__all__ = ["Settings", "load_settings", "env_var_name", "VERSION"]

load_dotenv()

logger = logging.getLogger(__name__)
_http_url_adapter = TypeAdapter(HttpUrl)

VERSION = "1.0"
DEFAULT_URL = "https://httpbin.org/get"


def env_var_name(option: str) -> str:
    """Map a dotted option name to its environment variable (http.url -> HTTP_URL)."""
    return option.upper().replace(".", "_")


class Settings(BaseModel):
    """Validated connector options.

    Each field is one option: the alias is the dotted option name, and the
    environment variable is derived from it with env_var_name().
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    url: str = Field(
        default=DEFAULT_URL,
        alias="http.url",
        min_length=1,
        description="The base HTTP URL to fetch data from.",
    )
    method: HttpMethod = Field(
        default=HttpMethod.GET,
        alias="http.method",
        description=f"The HTTP method to use for requests. One of: {', '.join(valid_methods())}.",
    )
    query_params: str = Field(
        default="",
        alias="http.query.params",
        description=(
            "Optional query parameters appended to the URL, 'key=value' pairs separated "
            "by '&'. Example: 'updatedSince=2023-01-01&limit=100'."
        ),
    )
    headers: str = Field(
        default="",
        alias="http.headers",
        description=(
            "Optional request headers, 'key=value' pairs separated by commas. "
            "Example: 'Accept=application/json'."
        ),
    )
    request_body: str = Field(
        default="",
        alias="http.request.body",
        description="Request body, only sent with POST, PUT and PATCH.",
    )
    poll_interval_ms: int = Field(
        default=60000,
        ge=5000,
        alias="http.poll.interval.ms",
        description="Milliseconds between consecutive successful requests (min 5000).",
    )
    auth_username: str = Field(
        default="",
        alias="http.auth.username",
        description="Username for HTTP Basic Authentication.",
    )
    auth_password: SecretStr = Field(
        default=SecretStr(""),
        alias="http.auth.password",
        description="Password for HTTP Basic Authentication.",
    )
    auth_bearer: SecretStr = Field(
        default=SecretStr(""),
        alias="http.auth.bearer",
        description="Bearer token for the Authorization header; wins over Basic auth.",
    )
    connect_timeout_ms: int = Field(
        default=5000,
        ge=1000,
        alias="http.connect.timeout.ms",
        description="Timeout in milliseconds for establishing the connection.",
    )
    read_timeout_ms: int = Field(
        default=10000,
        ge=1000,
        alias="http.read.timeout.ms",
        description="Timeout in milliseconds for reading the response.",
    )
    proxy_host: str = Field(default="", alias="http.proxy.host", description="HTTP proxy host.")
    proxy_port: int = Field(
        default=0, ge=0, le=65535, alias="http.proxy.port", description="HTTP proxy port."
    )
    topic: str = Field(
        ..., min_length=1, alias="topic", description="Destination name for fetched records."
    )
    offset_file_path: str = Field(
        default="offsets.json",
        alias="offset.file.path",
        description="JSON file where poll offsets are persisted.",
    )
    output_file_path: str | None = Field(
        default=None,
        alias="output.file.path",
        description="File receiving JSON-lines records; stdout when unset.",
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        alias="retry.attempts",
        description="Attempts per cycle on transient I/O errors (1 = no retry).",
    )

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        """Accept method names in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate that the URL is an http(s) URL.

        Raises:
            ValueError: If URL is invalid or uses another scheme.
        """
        try:
            url = _http_url_adapter.validate_python(v)
        except Exception as e:
            raise ValueError(f"Invalid HTTP URL: {e}") from e
        if url.scheme not in ("http", "https"):
            raise ValueError("Only http:// and https:// URLs allowed")
        return v

    @field_validator("output_file_path")
    @classmethod
    def empty_output_means_stdout(cls, v: str | None) -> str | None:
        return v or None

    def to_client_config(self) -> ClientConfig:
        """Return the immutable HTTP client configuration."""
        return ClientConfig(
            url=self.url,
            method=self.method,
            query_params=self.query_params,
            headers=self.headers,
            request_body=self.request_body,
            auth_username=self.auth_username,
            auth_password=self.auth_password.get_secret_value(),
            auth_bearer=self.auth_bearer.get_secret_value(),
            proxy_host=self.proxy_host,
            proxy_port=self.proxy_port,
            connect_timeout_ms=self.connect_timeout_ms,
            read_timeout_ms=self.read_timeout_ms,
        )

    def to_port(self) -> SettingsPort:
        """Return runtime settings for the core."""
        return SettingsPort(
            client=self.to_client_config(),
            poll_interval_ms=self.poll_interval_ms,
            topic=self.topic,
            retry_attempts=self.retry_attempts,
        )


def load_settings(props: Mapping[str, str] | None = None) -> Settings:
    """Load and validate settings.

    Args:
        props: Options keyed by dotted name (e.g. "http.url"). When omitted,
            each option is read from its environment variable (HTTP_URL, ...).

    Returns:
        Validated Settings object.

    Raises:
        RuntimeError: If the required topic option is missing.
        ValueError: If any option is invalid.
    """
    raw: dict[str, str] = dict(props) if props is not None else {}
    if props is None:
        for name, field in Settings.model_fields.items():
            option = field.alias or name
            env = env_var_name(option)
            if env in os.environ:
                raw[option] = os.environ[env]

    if not raw.get("topic"):
        raise RuntimeError(f"Missing required configuration: topic (env {env_var_name('topic')})")

    settings = Settings.model_validate(raw)

    if settings.auth_bearer.get_secret_value():
        auth = "bearer"
    elif settings.auth_username and settings.auth_password.get_secret_value():
        auth = "basic"
    else:
        auth = "none"

    logger.info(
        f"HTTP source v{VERSION} configured: url={settings.url}, "
        f"method={settings.method.value}, interval={settings.poll_interval_ms}ms, "
        f"topic={settings.topic}, auth={auth}, "
        f"proxy={settings.proxy_host or '<disabled>'}"
    )

    return settings
