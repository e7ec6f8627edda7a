"""Client with timeouts, connection pooling and verb shortcuts."""

from __future__ import annotations

import os
import time
from datetime import datetime
from typing import Any, Iterable, Mapping

import httpx

from ._backends import HttpxBackend
from ._debug import DebugInfo, DebugOutput
from .config import ClientConfig, default_config
from .models import (
    FORM_CONTENT_TYPE,
    HTTPClientError,
    HTTPError,
    Request,
    Response,
    TransportError,
    encode_values,
    new_request,
)

# rw-r--r--, before umask.
DOWNLOAD_FILE_MODE = 0o644


class Client:
    """Reusable HTTP client wrapping one httpx connection pool.

    Timeouts, pool limits and TLS verification are fixed at construction
    from a ClientConfig. A Client is safe to share between threads.

    Examples:
        client = Client()
        response = client.get("https://api.example.com/data")
        print(response.status_code, response.body)

        # Custom configuration
        config = ClientConfig(timeout=5.0, skip_tls_verify=True)
        with Client(config) as client:
            client.post("https://example.com/items", "application/json", b"{}")

        # Build a request by hand
        req = new_request("GET", "https://example.com/search")
        req.set_param("q", "books")
        req.set_authorization("Bearer token")
        response = client.send(req)
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        debug: DebugOutput | None = None,
    ):
        """Initialize Client.

        Args:
            config: Client configuration. Defaults to default_config().
            debug: Debug output handler. Defaults to one enabled by
                config.verbose.
        """
        self._config = config or default_config()
        self._backend = HttpxBackend(self._config)
        self._debug = debug or DebugOutput(enabled=self._config.verbose)
        self._closed = False

    @property
    def config(self) -> ClientConfig:
        """Configuration the client was built from."""
        return self._config

    @property
    def timeout(self) -> httpx.Timeout:
        """Timeout applied to every request."""
        return self._backend.timeout

    @property
    def is_closed(self) -> bool:
        """Check if client has been closed."""
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise TransportError("Client is closed")

    # ========== Sync HTTP Methods ==========

    def get(self, url: str) -> Response:
        """Make a GET request."""
        return self.send(new_request("GET", url))

    def head(self, url: str) -> Response:
        """Make a HEAD request."""
        return self.send(new_request("HEAD", url))

    def post(self, url: str, content_type: str, body: bytes | None) -> Response:
        """Make a POST request with a raw body."""
        req = new_request("POST", url, body)
        req.set_content_type(content_type)
        return self.send(req)

    def post_form(
        self,
        url: str,
        data: Mapping[str, str | Iterable[str]],
    ) -> Response:
        """Make a POST request with a form-urlencoded body."""
        return self.post(url, FORM_CONTENT_TYPE, encode_values(data).encode("ascii"))

    def send(self, request: Request) -> Response:
        """Send a Request and return the fully read Response.

        Any status code yields a Response; only failures to build, send or
        read raise.

        Args:
            request: Request to send.

        Returns:
            Response with the body read and the connection released.

        Raises:
            RequestBuildError: Invalid method or URL.
            TransportError: Connection, TLS, timeout or protocol failure.
            BodyReadError: Failure while reading the body.
        """
        self._check_open()
        http_request = self._backend.build_request(request)

        info = self._new_debug_info(http_request) if self._debug.active else None
        start = time.perf_counter()
        deadline = self._deadline()
        try:
            http_response = self._backend.dispatch(http_request)
            response = self._backend.read_response(http_response, deadline)
        except HTTPClientError as e:
            if info:
                info.error = str(e)
                info.elapsed = time.perf_counter() - start
                self._debug.log_request(info)
            raise

        if info:
            self._record_response(info, response, time.perf_counter() - start)
            self._debug.log_request(info)
        return response

    def _deadline(self) -> float | None:
        # A non-positive timeout means no overall limit.
        if self._config.timeout <= 0:
            return None
        return time.monotonic() + self._config.timeout

    def raw_send(self, request: httpx.Request) -> httpx.Response:
        """Send an httpx.Request as-is and return the unread httpx.Response.

        The body is not read. The caller owns the response and must call
        ``close()`` on it, after ``read()`` if the body is wanted, to release
        the pooled connection.

        Raises:
            TransportError: Connection, TLS, timeout or protocol failure.
        """
        self._check_open()
        return self._backend.dispatch(request)

    def download_file(self, url: str, path: str | os.PathLike[str]) -> None:
        """Download the resource at url and store it at path.

        The file is created or truncated only after a 200 response; any
        other status raises HTTPError and leaves path untouched.

        Raises:
            HTTPError: Status code other than 200.
            OSError: The file could not be written.
        """
        resp = self.get(url)
        if resp.status_code != 200:
            raise HTTPError(f"download failed: {resp.status}", response=resp)

        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, DOWNLOAD_FILE_MODE)
        with open(fd, "wb") as f:
            f.write(resp.body)

    # ========== Connection Management ==========

    def close_idle_connections(self) -> None:
        """Close pooled connections that are currently idle."""
        self._backend.close_idle_connections()

    def close(self) -> None:
        """Close the client and release all connections."""
        if not self._closed:
            self._backend.close()
            self._closed = True

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # ========== Debug ==========

    def _new_debug_info(self, http_request: httpx.Request) -> DebugInfo:
        return DebugInfo(
            timestamp=datetime.now(),
            method=http_request.method,
            url=str(http_request.url),
            request_headers=http_request.headers.multi_items(),
            request_body_length=len(http_request.content),
            proxy_used=self._config.proxy,
            verify_tls=self._backend.verify_tls,
        )

    @staticmethod
    def _record_response(info: DebugInfo, response: Response, elapsed: float) -> None:
        info.final_url = response.url
        info.status_code = response.status_code
        info.status = response.status
        info.response_headers = response.headers.multi_items()
        info.content_length = len(response.body)
        info.content_preview = response.text[:500] if response.body else None
        info.elapsed = elapsed


def new_client() -> Client:
    """Return a Client with the default settings."""
    return Client(default_config())


def new_client_with_config(config: ClientConfig) -> Client:
    """Return a Client built from config."""
    return Client(config)
