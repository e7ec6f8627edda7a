"""httpx-based HTTP backend."""

from __future__ import annotations

import ipaddress
import re
import socket
import time
from urllib.request import getproxies

import httpx

from ..config import ClientConfig
from ..models import (
    BodyReadError,
    Request,
    RequestBuildError,
    Response,
    TransportError,
)

# RFC 9110 token characters.
_METHOD_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def keepalive_socket_options(keep_alive: float) -> list[tuple[int, int, int]]:
    """Build TCP keep-alive socket options for a keep-alive period.

    A period <= 0 leaves keep-alive to the operating system. Idle and
    interval options are only set where the platform defines them.
    """
    if keep_alive <= 0:
        return []

    period = max(1, int(keep_alive))
    options = [(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)]
    if hasattr(socket, "TCP_KEEPIDLE"):
        options.append((socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, period))
    if hasattr(socket, "TCP_KEEPINTVL"):
        options.append((socket.IPPROTO_TCP, socket.TCP_KEEPINTVL, period))
    return options


def environment_proxies() -> dict[str, str | None]:
    """Map httpx mount patterns to proxies from *_PROXY and NO_PROXY.

    Hosts listed in NO_PROXY map to None, meaning a direct connection.
    NO_PROXY="*" disables proxying altogether.
    """
    proxies = getproxies()
    mounts: dict[str, str | None] = {}
    for scheme in ("http", "https", "all"):
        url = proxies.get(scheme)
        if url:
            mounts[f"{scheme}://"] = url if "://" in url else f"http://{url}"

    for host in proxies.get("no", "").split(","):
        host = host.strip()
        if not host:
            continue
        if host == "*":
            return {}
        if "://" in host:
            mounts[host] = None
        elif host.lower() == "localhost" or _is_ip(host):
            mounts[f"all://{_bracket_ipv6(host)}"] = None
        else:
            mounts[f"all://*{host}"] = None
    return mounts


def _is_ip(host: str) -> bool:
    try:
        ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    return True


def _bracket_ipv6(host: str) -> str:
    if ":" in host and not host.startswith("["):
        return f"[{host}]"
    return host


def build_timeout(config: ClientConfig) -> httpx.Timeout:
    """Map config timeouts onto httpx.Timeout.

    httpcore dials and performs the TLS handshake in a single connect
    phase, so both budgets are added together.
    """
    return httpx.Timeout(
        config.timeout,
        connect=config.dial_timeout + config.tls_handshake_timeout,
    )


def build_limits(config: ClientConfig) -> httpx.Limits:
    """Map config pool settings onto httpx.Limits."""
    return httpx.Limits(
        max_keepalive_connections=config.max_idle_conns,
        keepalive_expiry=config.idle_conn_timeout,
    )


def status_text(resp: httpx.Response) -> str:
    """Format the status line the way servers send it, e.g. "404 Not Found"."""
    return f"{resp.status_code} {resp.reason_phrase}".strip()


class HttpxBackend:
    """Pooled httpx client built once from a ClientConfig.

    The underlying httpx.Client is thread-safe and owns the only shared
    state, its connection pool.
    """

    def __init__(self, config: ClientConfig):
        """Initialize httpx backend.

        No network I/O happens here; connections are opened on first use.
        Without an explicit config.proxy, the *_PROXY and NO_PROXY
        environment variables are honored.

        Args:
            config: Client configuration.
        """
        self._config = config
        self._transport = self._new_transport(config.proxy)

        mounts: dict[str, httpx.HTTPTransport | None] = {}
        if config.proxy is None:
            for pattern, proxy_url in environment_proxies().items():
                mounts[pattern] = self._new_transport(proxy_url) if proxy_url else None
        self._proxy_transports = [t for t in mounts.values() if t is not None]

        self._timeout = build_timeout(config)
        self._client = httpx.Client(
            transport=self._transport,
            mounts=mounts or None,
            timeout=self._timeout,
            follow_redirects=config.follow_redirects,
            max_redirects=config.max_redirects,
        )

    def _new_transport(self, proxy: str | None) -> httpx.HTTPTransport:
        return httpx.HTTPTransport(
            verify=not self._config.skip_tls_verify,
            limits=build_limits(self._config),
            proxy=proxy,
            socket_options=keepalive_socket_options(self._config.keep_alive),
        )

    @property
    def timeout(self) -> httpx.Timeout:
        """Timeout applied to every request."""
        return self._timeout

    @property
    def verify_tls(self) -> bool:
        """Whether certificates are verified."""
        return not self._config.skip_tls_verify

    def build_request(self, request: Request) -> httpx.Request:
        """Convert our Request to an httpx.Request.

        Args:
            request: Request to convert.

        Returns:
            httpx.Request ready for dispatch.

        Raises:
            RequestBuildError: If the method is not a valid token or the URL
                cannot be parsed.
        """
        if not _METHOD_RE.match(request.method):
            raise RequestBuildError(f"invalid method {request.method!r}")

        try:
            return self._client.build_request(
                method=request.method,
                url=request.full_url(),
                content=request.body,
                headers=request.headers,
            )
        except httpx.InvalidURL as e:
            raise RequestBuildError(str(e), original_error=e) from e

    def dispatch(self, request: httpx.Request) -> httpx.Response:
        """Send an httpx.Request without reading the body.

        The returned response is streaming; the caller must read or close it.

        Raises:
            TransportError: On connection/transport errors.
        """
        try:
            return self._client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise TransportError(str(e), original_error=e) from e

    def read_response(
        self,
        httpx_resp: httpx.Response,
        deadline: float | None = None,
    ) -> Response:
        """Drain a streaming httpx.Response into our Response model.

        The stream is closed whether or not reading succeeds.

        Args:
            httpx_resp: Streaming response returned by dispatch().
            deadline: time.monotonic() value after which reading stops.

        Raises:
            TransportError: If the deadline passes before the body is read.
            BodyReadError: If reading the body fails.
        """
        chunks = []
        try:
            for chunk in httpx_resp.iter_bytes():
                chunks.append(chunk)
                if deadline is not None and time.monotonic() > deadline:
                    expired = httpx.ReadTimeout("overall request timeout exceeded")
                    raise TransportError(str(expired), original_error=expired) from expired
        except httpx.HTTPError as e:
            raise BodyReadError(str(e), original_error=e) from e
        finally:
            httpx_resp.close()

        return Response(
            status_code=httpx_resp.status_code,
            status=status_text(httpx_resp),
            body=b"".join(chunks),
            headers=httpx_resp.headers,
            url=str(httpx_resp.url),
        )

    def close_idle_connections(self) -> None:
        """Close pooled connections that are not serving a request."""
        for transport in [self._transport, *self._proxy_transports]:
            _close_idle(transport)

    def close(self) -> None:
        """Close the client and every pooled connection."""
        self._client.close()


def _close_idle(transport: httpx.HTTPTransport) -> None:
    # Relies on httpcore internals: httpx exposes neither the pool nor an
    # idle-close call. The pool lock is not taken; closed connections are
    # dropped by the pool on its next request.
    pool = getattr(transport, "_pool", None)
    if pool is None:
        return
    for connection in list(pool.connections):
        if connection.is_idle():
            connection.close()
