"""Request and Response dataclasses, and the exception hierarchy."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping
from urllib.parse import urlencode

import httpx

CONTENT_TYPE = "Content-Type"
AUTHORIZATION = "Authorization"
JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass
class Request:
    """HTTP request representation.

    The header and parameter collections are always present. ``None`` or a
    plain mapping given at construction is normalized, so the setters never
    have to check for a missing collection.

    Attributes:
        method: HTTP method (GET, POST, PUT, DELETE, etc.).
        url: The base URL, without the encoded parameters.
        body: Raw request body.
        headers: Request headers, case-insensitive and multi-valued.
        params: URL query parameters, each key mapping to a list of values.
    """

    method: str
    url: str
    body: bytes | None = None
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    params: dict[str, list[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Normalize method to uppercase and fill in the collections."""
        self.method = self.method.upper()
        self.headers = httpx.Headers(self.headers)
        self.params = _normalize_params(self.params)

    def set_content_type(self, value: str) -> None:
        """Set the Content-Type header, replacing any previous value."""
        self.headers[CONTENT_TYPE] = value

    def set_content_type_json(self) -> None:
        """Set the Content-Type header to "application/json"."""
        self.set_content_type(JSON_CONTENT_TYPE)

    def set_authorization(self, value: str) -> None:
        """Set the Authorization header, replacing any previous value."""
        self.headers[AUTHORIZATION] = value

    def add_param(self, key: str, value: str) -> None:
        """Append a value to a query parameter."""
        self.params.setdefault(key, []).append(value)

    def set_param(self, key: str, value: str) -> None:
        """Replace all values of a query parameter with one value."""
        self.params[key] = [value]

    def encoded_params(self) -> str:
        """Encode params as a query string, sorted by key."""
        return encode_values(self.params)

    def full_url(self) -> str:
        """Return the URL the request is sent to.

        The encoded parameters are appended after a "?". A query string
        already present in ``url`` is not merged.
        """
        if not self.params:
            return self.url
        return f"{self.url}?{self.encoded_params()}"


def new_request(method: str, url: str, body: bytes | None = None) -> Request:
    """Return a Request with empty headers and params, ready for use."""
    return Request(method=method, url=url, body=body)


def encode_values(values: Mapping[str, str | Iterable[str]] | None) -> str:
    """URL-encode a multi-valued mapping in key order ("a=1&a=2&b=3")."""
    params = _normalize_params(values)
    return urlencode(
        [(key, value) for key in sorted(params) for value in params[key]]
    )


def _normalize_params(
    params: Mapping[str, str | Iterable[str]] | None,
) -> dict[str, list[str]]:
    if not params:
        return {}
    return {
        key: [value] if isinstance(value, str) else list(value)
        for key, value in params.items()
    }


@dataclass
class Response:
    """HTTP response with a fully read body.

    The network stream it came from has already been drained and closed.

    Attributes:
        status_code: HTTP status code.
        status: Status text, e.g. "200 OK".
        body: Raw response body.
        headers: Response headers.
        url: Final URL after redirects.
    """

    status_code: int
    status: str
    body: bytes
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    url: str = ""

    @property
    def reason(self) -> str:
        """Reason phrase without the status code."""
        _, _, reason = self.status.partition(" ")
        return reason

    @property
    def text(self) -> str:
        """Decode body as UTF-8 text."""
        return self.body.decode("utf-8", errors="replace")

    @property
    def ok(self) -> bool:
        """Check if status code indicates success (2xx)."""
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Parse body as JSON."""
        import json as json_module
        return json_module.loads(self.body)

    def raise_for_status(self) -> None:
        """Raise HTTPError if status code indicates an error."""
        if not self.ok:
            raise HTTPError(f"HTTP {self.status} for {self.url}", response=self)


class HTTPClientError(Exception):
    """Base exception for HTTP client errors."""
    pass


class RequestBuildError(HTTPClientError):
    """Invalid method or URL; the request was never sent."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class TransportError(HTTPClientError):
    """Error during HTTP transport (connection, timeout, etc.)."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class BodyReadError(TransportError):
    """Error while reading the response body."""


class HTTPError(HTTPClientError):
    """HTTP error response (unexpected status code)."""

    def __init__(self, message: str, response: Response | None = None):
        super().__init__(message)
        self.response = response
