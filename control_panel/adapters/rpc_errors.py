"""Project-native typed exceptions for backend RPC failures."""

from __future__ import annotations


class BackendRpcError(Exception):
    """Base exception for backend RPC failures.

    Attributes:
        method: Optional RPC method name that failed.
    """

    def __init__(self, message: str, method: str | None = None):
        super().__init__(message)
        self.method = method


class BackendRpcConnectionError(BackendRpcError, ConnectionError):
    """Transport-level connectivity failure while calling the backend."""


class BackendRpcTimeoutError(BackendRpcError, TimeoutError):
    """Backend call did not complete within the configured timeout."""


class BackendCommandError(BackendRpcError, RuntimeError):
    """Backend command ran and reported a failure message."""


class BackendProtocolError(BackendRpcError, ValueError):
    """Backend response violated the expected JSON contract."""
