"""Shared test fixtures and configuration."""

import threading
import time
from dataclasses import dataclass, field
from email.message import Message
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Generator
from unittest.mock import MagicMock

import httpx
import pytest

from xhttp import Client, ClientConfig, Request, Response, api


# ============== Local Test Server ==============

@dataclass
class Reply:
    """Canned reply served by LocalServer."""

    status: int = 200
    body: bytes = b"success"
    headers: dict[str, str] = field(default_factory=dict)
    delay: float = 0.0
    chunk_delay: float = 0.0


@dataclass
class RecordedRequest:
    """A request as received by LocalServer."""

    method: str
    path: str
    headers: Message
    body: bytes


class _Handler(BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def _respond(self) -> None:
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""
        self.server.received.append(
            RecordedRequest(self.command, self.path, self.headers, body)
        )

        reply = self.server.reply
        if reply.delay:
            time.sleep(reply.delay)

        self.send_response(reply.status)
        for name, value in reply.headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(reply.body)))
        self.end_headers()
        if self.command == "HEAD":
            return
        if not reply.chunk_delay:
            self.wfile.write(reply.body)
            return
        for i in range(len(reply.body)):
            self.wfile.write(reply.body[i:i + 1])
            self.wfile.flush()
            time.sleep(reply.chunk_delay)

    do_GET = do_POST = do_PUT = do_DELETE = do_HEAD = _respond

    def log_message(self, format, *args) -> None:
        pass


class _Server(ThreadingHTTPServer):
    daemon_threads = True

    def handle_error(self, request, client_address) -> None:
        # Clients that time out close the socket before the reply is written.
        pass


class LocalServer:
    """Threaded HTTP server on 127.0.0.1 answering with a settable Reply."""

    def __init__(self):
        self._server = _Server(("127.0.0.1", 0), _Handler)
        self._server.reply = Reply()
        self._server.received = []
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}"

    @property
    def received(self) -> list[RecordedRequest]:
        return self._server.received

    def reply_with(
        self,
        status: int = 200,
        body: bytes = b"success",
        headers: dict[str, str] | None = None,
        delay: float = 0.0,
        chunk_delay: float = 0.0,
    ) -> None:
        self._server.reply = Reply(status, body, headers or {}, delay, chunk_delay)

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()


@pytest.fixture
def server() -> Generator[LocalServer, None, None]:
    """Running local HTTP server."""
    srv = LocalServer()
    srv.start()
    yield srv
    srv.stop()


PROXY_ENV_VARS = (
    "http_proxy", "https_proxy", "all_proxy", "no_proxy",
    "HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "NO_PROXY",
)


@pytest.fixture(autouse=True)
def no_proxy_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep proxy variables from the outer environment out of tests."""
    for name in PROXY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ============== Configuration Fixtures ==============

@pytest.fixture
def default_config() -> ClientConfig:
    """Default client configuration."""
    return ClientConfig()


@pytest.fixture
def short_timeout_config() -> ClientConfig:
    """Configuration with a very short overall timeout."""
    return ClientConfig(timeout=0.2)


# ============== Client Fixtures ==============

@pytest.fixture
def client() -> Generator[Client, None, None]:
    """Client with default settings."""
    client = Client()
    yield client
    client.close()


@pytest.fixture
def fresh_default_client(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Reset the process-wide default client for the duration of a test."""
    monkeypatch.setattr(api, "_default_client", None)
    yield
    if api._default_client is not None:
        api._default_client.close()


# ============== Request/Response Fixtures ==============

@pytest.fixture
def sample_request() -> Request:
    """Sample GET request."""
    return Request(
        method="GET",
        url="https://example.com/api/test",
        headers={"Accept": "application/json"},
    )


@pytest.fixture
def sample_response() -> Response:
    """Sample successful response."""
    return Response(
        status_code=200,
        status="200 OK",
        body=b'{"success": true}',
        headers=httpx.Headers({"Content-Type": "application/json"}),
        url="https://example.com/api/test",
    )


@pytest.fixture
def error_response() -> Response:
    """Sample error response."""
    return Response(
        status_code=500,
        status="500 Internal Server Error",
        body=b"Internal Server Error",
        headers=httpx.Headers({"Content-Type": "text/plain"}),
        url="https://example.com/api/test",
    )


# ============== Mock Fixtures ==============

@pytest.fixture
def mock_httpx_response() -> MagicMock:
    """Streaming httpx.Response stand-in with a readable body."""
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = 200
    resp.reason_phrase = "OK"
    resp.headers = httpx.Headers({"Content-Type": "text/html"})
    resp.url = httpx.URL("https://example.com")
    resp.iter_bytes.return_value = [b"<html>", b"OK</html>"]
    return resp
