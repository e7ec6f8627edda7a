"""Client configuration and its default values."""

from dataclasses import dataclass

# Defaults, in seconds unless noted.
DEFAULT_CLIENT_TIMEOUT = 30.0
DEFAULT_DIAL_TIMEOUT = 10.0
DEFAULT_KEEP_ALIVE = 30.0
DEFAULT_IDLE_CONN_TIMEOUT = 90.0
DEFAULT_TLS_HANDSHAKE_TIMEOUT = 10.0
DEFAULT_EXPECT_CONTINUE_TIMEOUT = 1.0
DEFAULT_MAX_IDLE_CONNS = 100  # connections
DEFAULT_MAX_REDIRECTS = 10


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for a Client.

    Values are passed to httpx as given; nothing is validated here.

    Attributes:
        timeout: Overall request timeout. Bounds read, write and pool waits.
        dial_timeout: TCP connection establishment timeout.
        keep_alive: TCP keep-alive period for pooled connections.
        idle_conn_timeout: How long an idle pooled connection is kept.
        tls_handshake_timeout: TLS handshake timeout, added to dial_timeout
            for the connect phase.
        expect_continue_timeout: Accepted for compatibility; httpx does not
            send "Expect: 100-continue".
        max_idle_conns: Maximum number of idle (keep-alive) connections.
        skip_tls_verify: Disable certificate verification for every request.
        include_root_ca: Reserved, currently unused.
        follow_redirects: Whether to follow HTTP redirects.
        max_redirects: Maximum number of redirects to follow.
        proxy: Proxy URL applied to all requests (e.g. "http://host:3128").
        verbose: Print a debug block for every request to stderr.
    """

    # Timeouts
    timeout: float = DEFAULT_CLIENT_TIMEOUT
    dial_timeout: float = DEFAULT_DIAL_TIMEOUT
    keep_alive: float = DEFAULT_KEEP_ALIVE
    idle_conn_timeout: float = DEFAULT_IDLE_CONN_TIMEOUT
    tls_handshake_timeout: float = DEFAULT_TLS_HANDSHAKE_TIMEOUT
    expect_continue_timeout: float = DEFAULT_EXPECT_CONTINUE_TIMEOUT

    # Connection pool
    max_idle_conns: int = DEFAULT_MAX_IDLE_CONNS

    # TLS
    skip_tls_verify: bool = False
    include_root_ca: bool = False

    # Redirects and proxy
    follow_redirects: bool = True
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    proxy: str | None = None

    # Diagnostics
    verbose: bool = False


def default_config() -> ClientConfig:
    """Return a ClientConfig holding the default settings."""
    return ClientConfig()
