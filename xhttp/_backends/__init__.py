"""Internal backend implementations for Client."""

from .httpx_backend import HttpxBackend

__all__ = ["HttpxBackend"]
