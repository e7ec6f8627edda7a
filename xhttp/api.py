"""Module-level shortcuts bound to a shared default Client.

The default client is created on first use with default_config() and lives
for the rest of the process. Callers that need other settings should build
their own Client and pass it around instead.

Basic usage:

    import xhttp

    resp = xhttp.get("https://example.com")
    print(resp.status, len(resp.body))

    xhttp.download_file("https://example.com/logo.png", "logo.png")
"""

from __future__ import annotations

import os
import threading
from typing import Iterable, Mapping

import httpx

from .client import Client
from .models import Request, Response

_default_client: Client | None = None
_default_lock = threading.Lock()


def default_client() -> Client:
    """Return the process-wide Client, creating it on first call."""
    global _default_client
    if _default_client is None:
        with _default_lock:
            if _default_client is None:
                _default_client = Client()
    return _default_client


def get(url: str) -> Response:
    """Make a GET request using the default client."""
    return default_client().get(url)


def head(url: str) -> Response:
    """Make a HEAD request using the default client."""
    return default_client().head(url)


def post(url: str, content_type: str, body: bytes | None) -> Response:
    """Make a POST request using the default client."""
    return default_client().post(url, content_type, body)


def post_form(url: str, data: Mapping[str, str | Iterable[str]]) -> Response:
    """Make a form POST request using the default client."""
    return default_client().post_form(url, data)


def send(request: Request) -> Response:
    """Send a Request using the default client."""
    return default_client().send(request)


def raw_send(request: httpx.Request) -> httpx.Response:
    """Send an httpx.Request using the default client.

    The caller must read and close the returned response.
    """
    return default_client().raw_send(request)


def download_file(url: str, path: str | os.PathLike[str]) -> None:
    """Download url to path using the default client."""
    default_client().download_file(url, path)


def close_idle_connections() -> None:
    """Close idle connections held by the default client."""
    default_client().close_idle_connections()
