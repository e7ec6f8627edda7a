"""Thin wrapper around httpx with pooled clients and simple responses.

This package provides:

- A Client built once from a ClientConfig (timeouts, keep-alive, pool
  limits, TLS verification toggle)
- A Request builder with header and query-parameter helpers
- Responses whose body is already read and whose connection is released
- Module-level shortcuts backed by a shared default client

Basic usage:

    import xhttp

    resp = xhttp.get("https://example.com")
    print(resp.status_code, resp.text)

    # Custom client
    config = xhttp.ClientConfig(timeout=5.0, max_idle_conns=20)
    client = xhttp.new_client_with_config(config)

    req = xhttp.new_request("POST", "https://example.com/api", b'{"a": 1}')
    req.set_content_type_json()
    req.set_authorization("Bearer token")
    resp = client.send(req)

    # Save a file
    xhttp.download_file("https://example.com/report.pdf", "report.pdf")
"""

from .api import (
    close_idle_connections,
    default_client,
    download_file,
    get,
    head,
    post,
    post_form,
    raw_send,
    send,
)
from .client import Client, new_client, new_client_with_config
from .config import ClientConfig, default_config
from .models import (
    Request,
    Response,
    new_request,
    HTTPClientError,
    RequestBuildError,
    TransportError,
    BodyReadError,
    HTTPError,
)
from ._debug import DebugInfo, DebugOutput

__version__ = "0.1.0"

__all__ = [
    # Client
    "Client",
    "new_client",
    "new_client_with_config",
    # Configuration
    "ClientConfig",
    "default_config",
    # Models
    "Request",
    "Response",
    "new_request",
    # Default client shortcuts
    "default_client",
    "get",
    "head",
    "post",
    "post_form",
    "send",
    "raw_send",
    "download_file",
    "close_idle_connections",
    # Exceptions
    "HTTPClientError",
    "RequestBuildError",
    "TransportError",
    "BodyReadError",
    "HTTPError",
    # Debugging
    "DebugInfo",
    "DebugOutput",
    # Version
    "__version__",
]
