"""Tests for configuration loading and validation."""

import pytest
from pydantic import ValidationError

from src.adapters.driven.config.settings import Settings, env_var_name, load_settings
from src.ports.http import HttpMethod

__all__ = []

ENV_VARS = [
    "HTTP_URL",
    "HTTP_METHOD",
    "HTTP_QUERY_PARAMS",
    "HTTP_HEADERS",
    "HTTP_REQUEST_BODY",
    "HTTP_POLL_INTERVAL_MS",
    "HTTP_AUTH_USERNAME",
    "HTTP_AUTH_PASSWORD",
    "HTTP_AUTH_BEARER",
    "HTTP_CONNECT_TIMEOUT_MS",
    "HTTP_READ_TIMEOUT_MS",
    "HTTP_PROXY_HOST",
    "HTTP_PROXY_PORT",
    "TOPIC",
    "OFFSET_FILE_PATH",
    "OUTPUT_FILE_PATH",
    "RETRY_ATTEMPTS",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every option variable from the environment."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_env_var_name_maps_dotted_options() -> None:
    """Dotted option names map to upper-case underscore variables."""
    assert env_var_name("http.poll.interval.ms") == "HTTP_POLL_INTERVAL_MS"
    assert env_var_name("topic") == "TOPIC"


def test_settings_defaults() -> None:
    """Only the topic is required; everything else has a default."""
    settings = load_settings({"topic": "events"})

    assert settings.url == "https://httpbin.org/get"
    assert settings.method is HttpMethod.GET
    assert settings.poll_interval_ms == 60000
    assert settings.connect_timeout_ms == 5000
    assert settings.read_timeout_ms == 10000
    assert settings.query_params == ""
    assert settings.headers == ""
    assert settings.proxy_port == 0
    assert settings.output_file_path is None
    assert settings.retry_attempts == 3


def test_settings_from_dotted_properties() -> None:
    """Options are accepted by dotted name, with string values coerced."""
    settings = load_settings(
        {
            "http.url": "http://example.com/api",
            "http.method": "post",
            "http.poll.interval.ms": "5000",
            "http.auth.bearer": "tok",
            "topic": "events",
        }
    )

    assert settings.url == "http://example.com/api"
    assert settings.method is HttpMethod.POST
    assert settings.poll_interval_ms == 5000
    assert settings.auth_bearer.get_secret_value() == "tok"


def test_settings_load_from_environment(clean_env: pytest.MonkeyPatch) -> None:
    """Without a mapping, options come from environment variables."""
    clean_env.setenv("TOPIC", "events")
    clean_env.setenv("HTTP_URL", "http://example.com")
    clean_env.setenv("HTTP_HEADERS", "Accept=application/json")
    clean_env.setenv("HTTP_READ_TIMEOUT_MS", "2000")

    settings = load_settings()

    assert isinstance(settings, Settings)
    assert settings.topic == "events"
    assert settings.headers == "Accept=application/json"
    assert settings.read_timeout_ms == 2000


def test_settings_missing_topic(clean_env: pytest.MonkeyPatch) -> None:
    """The topic option is required."""
    with pytest.raises(RuntimeError, match="topic"):
        load_settings()


@pytest.mark.parametrize(
    ("option", "value"),
    [
        ("http.poll.interval.ms", "4999"),
        ("http.connect.timeout.ms", "999"),
        ("http.read.timeout.ms", "500"),
        ("http.method", "TRACE"),
        ("http.url", "ftp://example.com"),
        ("http.url", "not a url"),
        ("http.proxy.port", "70000"),
        ("retry.attempts", "0"),
    ],
)
def test_settings_rejects_invalid_values(option: str, value: str) -> None:
    """Out-of-range and unknown values are rejected."""
    with pytest.raises(ValueError):
        load_settings({"topic": "events", option: value})


def test_validation_error_is_value_error() -> None:
    """Callers can catch ValueError for any invalid option."""
    with pytest.raises(ValidationError):
        Settings.model_validate({"topic": "events", "http.poll.interval.ms": "1"})
    assert issubclass(ValidationError, ValueError)


def test_secrets_are_masked_in_repr() -> None:
    """Passwords and tokens do not leak through repr."""
    settings = load_settings(
        {"topic": "events", "http.auth.password": "hunter2", "http.auth.bearer": "tok"}
    )

    assert "hunter2" not in repr(settings)
    assert "hunter2" not in repr(settings.to_client_config())
    assert "auth_bearer" not in repr(settings.to_client_config())


def test_settings_to_port() -> None:
    """Settings convert into the core's runtime settings."""
    settings = load_settings(
        {
            "topic": "events",
            "http.url": "http://example.com/api",
            "http.query.params": "a=1",
            "http.auth.username": "user",
            "http.auth.password": "secret",
            "http.proxy.host": "proxy.local",
            "http.proxy.port": "3128",
            "http.poll.interval.ms": "10000",
        }
    )

    port = settings.to_port()

    assert port.topic == "events"
    assert port.poll_interval_ms == 10000
    assert port.client.url == "http://example.com/api"
    assert port.client.query_params == "a=1"
    assert port.client.auth_password == "secret"
    assert port.client.proxy_host == "proxy.local"
    assert port.client.proxy_port == 3128


def test_empty_output_path_means_stdout() -> None:
    """An empty output path falls back to stdout."""
    settings = load_settings({"topic": "events", "output.file.path": ""})

    assert settings.output_file_path is None
