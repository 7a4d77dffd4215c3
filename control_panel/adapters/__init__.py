"""Adapter layer package for backend RPC integration boundaries."""

from .http_backend import HttpBackendRpcClient, adapter_parse_sse_lines
from .interfaces import BackendRpcPort, EventHandler, Unlisten
from .rpc_errors import (
	BackendCommandError,
	BackendProtocolError,
	BackendRpcConnectionError,
	BackendRpcError,
	BackendRpcTimeoutError,
)

__all__ = [
	"BackendCommandError",
	"BackendProtocolError",
	"BackendRpcConnectionError",
	"BackendRpcError",
	"BackendRpcPort",
	"BackendRpcTimeoutError",
	"EventHandler",
	"HttpBackendRpcClient",
	"Unlisten",
	"adapter_parse_sse_lines",
]
