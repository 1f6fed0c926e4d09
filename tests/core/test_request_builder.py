"""Tests for request construction."""

import base64
import logging

import pytest

from src.core.errors import ConfigurationError, MalformedUriError, UnsupportedMethodError
from src.core.request_builder import AUTHORIZATION, RequestBuilder
from src.ports.http import HttpMethod
from src.ports.settings import ClientConfig

__all__ = []

BASE_URL = "http://api.example.com/items"


def make_builder(**overrides: object) -> RequestBuilder:
    """Create builder from a ClientConfig with the given overrides."""
    return RequestBuilder(ClientConfig(url=BASE_URL, **overrides))


def test_query_params_appended_with_question_mark() -> None:
    """Base URI without a query should get '?' before the params."""
    request = make_builder(query_params="a=1").build(BASE_URL, "GET")

    assert request.uri == f"{BASE_URL}?a=1"


def test_query_params_appended_with_ampersand() -> None:
    """Base URI that already has a query should get '&' before the params."""
    request = make_builder(query_params="a=1").build(f"{BASE_URL}?x=2", "GET")

    assert request.uri == f"{BASE_URL}?x=2&a=1"


def test_query_params_are_not_reencoded() -> None:
    """Params are appended verbatim."""
    request = make_builder(query_params="limit=100&since=2023-01-01%2000:00").build(BASE_URL, "GET")

    assert request.uri.endswith("?limit=100&since=2023-01-01%2000:00")


def test_no_query_params_keeps_uri() -> None:
    """Empty params should leave the base URI untouched."""
    request = make_builder().build(BASE_URL, "GET")

    assert request.uri == BASE_URL


@pytest.mark.parametrize(
    "uri",
    [
        "http://exa mple.com/",
        "example.com/path",
        "http://[::1/broken",
        "http://host:notaport/",
        "http://host/<path>",
    ],
)
def test_malformed_uri_raises(uri: str) -> None:
    """Invalid URIs should raise MalformedUriError, a configuration error."""
    with pytest.raises(MalformedUriError) as exc_info:
        make_builder().build(uri, "GET")

    assert isinstance(exc_info.value, ConfigurationError)


def test_query_params_making_uri_invalid_raises() -> None:
    """The check applies to the URI after the params are appended."""
    with pytest.raises(MalformedUriError):
        make_builder(query_params="q=hello world").build(BASE_URL, "GET")


def test_headers_parsed_and_trimmed() -> None:
    """Comma-separated key=value pairs should yield trimmed headers."""
    request = make_builder(headers="Accept=application/json, X-Foo=bar").build(BASE_URL, "GET")

    assert len(request.headers) == 2
    assert request.headers["Accept"] == "application/json"
    assert request.headers["X-Foo"] == "bar"


def test_header_value_split_on_first_equals() -> None:
    """Only the first '=' separates key from value."""
    request = make_builder(headers="X-Filter=a=b").build(BASE_URL, "GET")

    assert request.headers["X-Filter"] == "a=b"


def test_invalid_header_skipped_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    """Pairs without '=' are skipped; valid ones are still applied."""
    with caplog.at_level(logging.WARNING, logger="src.core.request_builder"):
        request = make_builder(headers="badheader, Accept=text/plain").build(BASE_URL, "GET")

    assert list(request.headers.items()) == [("Accept", "text/plain")]
    assert "badheader" in caplog.text


def test_duplicate_header_last_write_wins() -> None:
    """Repeated keys keep only the last value, case-insensitively."""
    request = make_builder(headers="X-Foo=1,x-foo=2").build(BASE_URL, "GET")

    assert request.headers.getall("X-Foo") == ["2"]


def test_bearer_auth_header() -> None:
    """A bearer token should produce a Bearer Authorization header."""
    request = make_builder(auth_bearer="tok123").build(BASE_URL, "GET")

    assert request.headers[AUTHORIZATION] == "Bearer tok123"


def test_basic_auth_header() -> None:
    """Username and password should produce a Basic Authorization header."""
    request = make_builder(auth_username="user", auth_password="pa:ss").build(BASE_URL, "GET")

    expected = base64.b64encode(b"user:pa:ss").decode("ascii")
    assert request.headers[AUTHORIZATION] == f"Basic {expected}"


def test_bearer_wins_over_basic() -> None:
    """With both configured, only the Bearer header is emitted."""
    request = make_builder(
        auth_bearer="tok123", auth_username="user", auth_password="secret"
    ).build(BASE_URL, "GET")

    assert request.headers.getall(AUTHORIZATION) == ["Bearer tok123"]


def test_basic_auth_requires_both_parts() -> None:
    """Username without password adds no Authorization header."""
    request = make_builder(auth_username="user").build(BASE_URL, "GET")

    assert AUTHORIZATION not in request.headers


def test_auth_replaces_configured_authorization_header() -> None:
    """Configured auth overrides an Authorization entry in the header string."""
    request = make_builder(headers="authorization=Token abc", auth_bearer="tok").build(
        BASE_URL, "GET"
    )

    assert request.headers.getall(AUTHORIZATION) == ["Bearer tok"]


@pytest.mark.parametrize("method", ["POST", "PUT", "PATCH"])
def test_body_attached_for_body_methods(method: str) -> None:
    """POST, PUT and PATCH carry the configured body."""
    request = make_builder(request_body='{"q": 1}').build(BASE_URL, method)

    assert request.body == '{"q": 1}'
    assert request.method == HttpMethod(method)


@pytest.mark.parametrize("method", ["GET", "DELETE"])
def test_body_ignored_for_get_and_delete(method: str) -> None:
    """GET and DELETE never carry a body, even if one is configured."""
    request = make_builder(request_body='{"q": 1}').build(BASE_URL, method)

    assert request.body is None


def test_empty_body_not_attached() -> None:
    """An empty body is not attached to a POST."""
    request = make_builder().build(BASE_URL, HttpMethod.POST)

    assert request.body is None


def test_method_is_case_insensitive() -> None:
    """Lower-case method names are accepted."""
    request = make_builder().build(BASE_URL, "patch")

    assert request.method is HttpMethod.PATCH


def test_unsupported_method_is_configuration_error() -> None:
    """Unknown methods fail as a configuration error, never transient."""
    with pytest.raises(UnsupportedMethodError, match="TRACE"):
        make_builder().build(BASE_URL, "TRACE")
