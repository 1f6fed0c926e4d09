"""Pure construction of HTTP requests from client configuration."""

import base64
import logging
import re
from urllib.parse import urlsplit

from multidict import CIMultiDict, CIMultiDictProxy

from src.core.errors import MalformedUriError, UnsupportedMethodError
from src.ports.http import BODY_METHODS, HttpMethod, RequestDescriptor
from src.ports.settings import ClientConfig

__all__ = ["RequestBuilder", "AUTHORIZATION"]

logger = logging.getLogger(__name__)

AUTHORIZATION = "Authorization"

# RFC 3986 unreserved, reserved and percent characters
_URI_CHARS = re.compile(r"^[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]+$")


class RequestBuilder:
    """Turn a ClientConfig into RequestDescriptor objects.

    Performs no I/O. The same builder can be reused for every poll.
    """

    def __init__(self, config: ClientConfig) -> None:
        """Initialize builder.

        Args:
            config: Client configuration providing params, headers, body and auth.
        """
        self.config = config
        self._auth_header = self._authorization(config)

    def build(self, base_uri: str, method: HttpMethod | str) -> RequestDescriptor:
        """Build the request for one poll.

        Args:
            base_uri: Endpoint URI, possibly already holding a query component.
            method: HTTP method name or enum member.

        Returns:
            Request with query string, headers, auth and body applied.

        Raises:
            MalformedUriError: If the resulting URI is not a valid absolute URI.
            UnsupportedMethodError: If the method is not supported.
        """
        http_method = self._method(method)
        uri = self.build_uri(base_uri)

        headers: CIMultiDict[str] = CIMultiDict()
        for key, value in self.parse_headers(self.config.headers):
            headers[key] = value
        if self._auth_header is not None:
            headers[AUTHORIZATION] = self._auth_header

        body = None
        if http_method in BODY_METHODS and self.config.request_body:
            body = self.config.request_body

        request = RequestDescriptor(
            method=http_method,
            uri=uri,
            headers=CIMultiDictProxy(headers),
            body=body,
        )
        logger.debug(
            f"Computed HTTP request: {request.method.value} {request.uri} "
            f"headers={sorted(request.headers.keys())} body={'yes' if body else 'no'}"
        )
        return request

    def build_uri(self, base_uri: str) -> str:
        """Append the configured query string to the base URI.

        Uses "&" when the base URI already has a query component, "?" otherwise.
        The query string is appended verbatim, without extra encoding.

        Raises:
            MalformedUriError: If the result is not a valid absolute URI.
        """
        uri = base_uri
        params = self.config.query_params
        if params:
            uri = f"{base_uri}{'&' if '?' in base_uri else '?'}{params}"
        _validate_uri(uri)
        return uri

    @staticmethod
    def parse_headers(raw: str) -> list[tuple[str, str]]:
        """Parse "key=value" pairs separated by commas.

        Each pair is split on the first "="; key and value are trimmed.
        Pairs without "=" or with an empty key are skipped with a warning.

        Args:
            raw: Header configuration string.

        Returns:
            Parsed (key, value) pairs in configuration order.
        """
        pairs: list[tuple[str, str]] = []
        if not raw:
            return pairs
        for entry in raw.split(","):
            if not entry.strip():
                continue
            key, sep, value = entry.partition("=")
            key = key.strip()
            if not sep or not key:
                logger.warning(f"Skipping invalid header format: {entry!r}")
                continue
            pairs.append((key, value.strip()))
        return pairs

    @staticmethod
    def _authorization(config: ClientConfig) -> str | None:
        """Return the Authorization header value, bearer first."""
        if config.auth_bearer:
            return f"Bearer {config.auth_bearer}"
        if config.auth_username and config.auth_password:
            credentials = f"{config.auth_username}:{config.auth_password}".encode()
            return f"Basic {base64.b64encode(credentials).decode('ascii')}"
        return None

    @staticmethod
    def _method(method: HttpMethod | str) -> HttpMethod:
        try:
            return HttpMethod(method.upper() if isinstance(method, str) else method)
        except ValueError as e:
            raise UnsupportedMethodError(f"Unsupported HTTP method: {method}") from e


def _validate_uri(uri: str) -> None:
    """Raise MalformedUriError unless uri is a syntactically valid absolute URI."""
    if not _URI_CHARS.match(uri):
        raise MalformedUriError(f"Invalid URI (illegal characters): {uri!r}")
    try:
        parts = urlsplit(uri)
        # Accessing port validates it
        _ = parts.port
    except ValueError as e:
        raise MalformedUriError(f"Invalid URI: {uri!r} ({e})") from e
    if not parts.scheme or not parts.hostname:
        raise MalformedUriError(f"Invalid URI (scheme and host required): {uri!r}")
