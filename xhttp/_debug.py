"""Debug/verbose mode for Client."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, TextIO

_MASKED_HEADERS = {"authorization", "proxy-authorization"}


@dataclass
class DebugInfo:
    """Debug information for a request/response cycle."""

    # Request info
    timestamp: datetime
    method: str
    url: str

    # Request details
    request_headers: list[tuple[str, str]] = field(default_factory=list)
    request_body_length: int = 0
    proxy_used: str | None = None
    verify_tls: bool = True

    # Response details (populated after request)
    final_url: str | None = None
    status_code: int | None = None
    status: str | None = None
    response_headers: list[tuple[str, str]] = field(default_factory=list)
    content_length: int = 0
    content_preview: str | None = None
    elapsed: float = 0.0

    # Error info
    error: str | None = None


class DebugOutput:
    """Handles verbose output formatting and dispatch."""

    def __init__(
        self,
        enabled: bool = False,
        output: TextIO | None = None,
        callback: Callable[[DebugInfo], None] | None = None,
    ):
        """Initialize debug output handler.

        Args:
            enabled: Whether verbose output is enabled.
            output: Output stream (defaults to stderr).
            callback: Optional callback for programmatic capture.
        """
        self.enabled = enabled
        self.output = output or sys.stderr
        self.callback = callback

    @property
    def active(self) -> bool:
        """Whether anything consumes debug info."""
        return self.enabled or self.callback is not None

    def log_request(self, info: DebugInfo) -> None:
        """Dispatch debug info for a request/response cycle.

        The callback fires even when printing is disabled.
        """
        if self.callback:
            self.callback(info)

        if self.enabled:
            self._print_formatted(info)

    def _print_formatted(self, info: DebugInfo) -> None:
        out = self.output
        sep = "=" * 80

        # Header
        out.write(f"\n{sep}\n")
        out.write(f"[{info.timestamp.strftime('%Y-%m-%d %H:%M:%S')}] ")
        out.write(f"{info.method} {info.url}\n")
        out.write(f"{sep}\n")
        out.write(f"TLS verify: {'ON' if info.verify_tls else 'OFF'}\n")

        if info.request_headers:
            out.write("\n> Request Headers:\n")
            for header, value in info.request_headers:
                out.write(f"  {header}: {_display_header(header, value)}\n")

        if info.request_body_length:
            out.write(f"> Body Length: {info.request_body_length:,} bytes\n")

        if info.proxy_used:
            out.write(f"> Proxy: {mask_proxy_password(info.proxy_used)}\n")

        # Response section
        out.write("\n" + "-" * 80 + "\n")

        if info.error:
            out.write(f"< ERROR: {info.error}\n")
        elif info.status is not None:
            out.write(f"< HTTP {info.status}")
            if info.elapsed:
                out.write(f"  [{info.elapsed:.3f}s]")
            out.write("\n")

            if info.final_url and info.final_url != info.url:
                out.write(f"< Redirected to: {info.final_url}\n")

            if info.response_headers:
                out.write("\n< Response Headers:\n")
                for header, value in info.response_headers:
                    out.write(f"  {header}: {_display_header(header, value)}\n")

            if info.content_length:
                out.write(f"\n< Content Length: {info.content_length:,} bytes\n")

            if info.content_preview:
                preview = info.content_preview
                if len(preview) > 200:
                    preview = preview[:197] + "..."
                preview = preview.replace("\n", "\\n").replace("\r", "\\r")
                out.write(f"< Body Preview: {preview}\n")

        out.write(f"{sep}\n")
        out.flush()


def _display_header(name: str, value: str) -> str:
    if name.lower() in _MASKED_HEADERS:
        scheme, _, _ = value.partition(" ")
        return f"{scheme} ****" if scheme != value else "****"
    if len(value) > 80:
        return value[:77] + "..."
    return value


def mask_proxy_password(proxy_url: str) -> str:
    """Mask password in proxy URL for display.

    Args:
        proxy_url: Proxy URL that may contain credentials.

    Returns:
        URL with password masked.
    """
    if "@" not in proxy_url:
        return proxy_url

    if "://" in proxy_url:
        protocol, rest = proxy_url.split("://", 1)
    else:
        protocol, rest = "", proxy_url

    creds, host = rest.rsplit("@", 1)
    if ":" in creds:
        user, _ = creds.split(":", 1)
        creds = f"{user}:****"
    rest = f"{creds}@{host}"

    if protocol:
        return f"{protocol}://{rest}"
    return rest
