"""HTTP implementation of the backend RPC port.

The backend exposes each command as `POST {base_url}/rpc/{method}` returning
the command's JSON value, or `{"error": "<message>"}` with a non-2xx status
when the command itself failed. Events are streamed as server-sent events
from `GET {base_url}/events/{event_name}`.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Iterable
from typing import Any, Final

import httpx

from .interfaces import BackendRpcPort, EventHandler, Unlisten
from .rpc_errors import (
    BackendCommandError,
    BackendProtocolError,
    BackendRpcConnectionError,
    BackendRpcTimeoutError,
)


logger = logging.getLogger(__name__)

_UNDECODABLE: Final[object] = object()


def adapter_parse_sse_lines(lines: Iterable[str]) -> list[Any]:
    """Parse server-sent-event lines into decoded JSON event payloads.

    Multiple `data:` lines of one event are joined with newlines; events are
    terminated by a blank line. Comment lines and events whose data is not
    valid JSON are skipped.

    Args:
        lines: Raw text lines without line terminators.

    Returns:
        list[Any]: Decoded payloads in arrival order.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    payloads: list[Any] = []
    data_lines: list[str] = []
    for line in [*lines, ""]:
        if not line:
            if data_lines:
                decoded = _adapter_try_decode_json("\n".join(data_lines))
                if decoded is not _UNDECODABLE:
                    payloads.append(decoded)
                data_lines = []
            continue
        if line.startswith(":"):
            continue
        if line.startswith("data:"):
            data_lines.append(line[len("data:"):].lstrip(" "))
    return payloads


def _adapter_try_decode_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Discarding backend event with non-JSON data")
        return _UNDECODABLE


class HttpBackendRpcClient(BackendRpcPort):
    """Backend RPC client over HTTP JSON commands and an SSE event stream."""

    _USER_AGENT: Final[str] = "control-panel-core/1.0 (Python/httpx)"

    def __init__(
        self,
        base_url: str,
        request_timeout_seconds: float = 10.0,
        event_reconnect_seconds: float = 1.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize backend RPC client.

        Args:
            base_url: Backend base URL.
            request_timeout_seconds: Transport timeout for each HTTP request.
            event_reconnect_seconds: Delay before reopening a dropped event stream.
            http_client: Optional preconfigured client, used by tests.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when configuration values are invalid.
        """

        normalized_base_url = base_url.strip().rstrip("/")
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")
        if event_reconnect_seconds < 0:
            raise ValueError("event_reconnect_seconds must be >= 0")

        self._base_url = normalized_base_url
        self._event_reconnect_seconds = event_reconnect_seconds
        self._client = http_client or httpx.AsyncClient(
            base_url=normalized_base_url,
            timeout=request_timeout_seconds,
            headers={"User-Agent": self._USER_AGENT},
        )
        self._listener_tasks: set[asyncio.Task[None]] = set()

    def rpc_source_name(self) -> str:
        return f"http_backend:{self._base_url}"

    async def rpc_get_system_info(self) -> Any:
        return await self._adapter_invoke("get_system_info")

    async def rpc_get_docker_status(self) -> Any:
        return await self._adapter_invoke("get_docker_status")

    async def rpc_get_docker_version(self) -> Any:
        return await self._adapter_invoke("get_docker_version")

    async def rpc_subscribe_to_docker_events(self) -> None:
        await self._adapter_invoke("subscribe_to_docker_events")

    async def rpc_listen(self, event_name: str, handler: EventHandler) -> Unlisten:
        """Start streaming one backend event to a handler.

        Args:
            event_name: Backend event name.
            handler: Callback invoked with each decoded event payload.

        Returns:
            Unlisten: Release handle that stops the stream task.

        Raises:
            ValueError: Raised when event name is blank.
        """

        normalized_event_name = event_name.strip()
        if not normalized_event_name:
            raise ValueError("event_name must not be blank")

        task = asyncio.create_task(
            self._adapter_stream_events(event_name=normalized_event_name, handler=handler),
            name=f"backend-events:{normalized_event_name}",
        )
        self._listener_tasks.add(task)
        task.add_done_callback(self._listener_tasks.discard)

        async def _unlisten() -> None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        return _unlisten

    async def aclose(self) -> None:
        """Stop all event streams and close the HTTP client."""

        for task in list(self._listener_tasks):
            task.cancel()
        for task in list(self._listener_tasks):
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self._client.aclose()

    async def __aenter__(self) -> "HttpBackendRpcClient":
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.aclose()

    async def _adapter_invoke(self, method: str) -> Any:
        """Execute one backend command and return its decoded JSON value.

        Args:
            method: Backend command name.

        Returns:
            Any: Decoded JSON response body; None for an empty body.

        Raises:
            BackendRpcTimeoutError: Raised when the transport times out.
            BackendRpcConnectionError: Raised for request failures and non-command HTTP errors.
            BackendCommandError: Raised when the backend reports a command failure.
            BackendProtocolError: Raised when the response body is not JSON.
        """

        try:
            response = await self._client.post(f"/rpc/{method}", json={})
        except httpx.TimeoutException as error:
            raise BackendRpcTimeoutError(f"Backend call timed out: {method}", method=method) from error
        except httpx.RequestError as error:
            raise BackendRpcConnectionError(f"Backend call failed: {method}", method=method) from error

        body = self._adapter_decode_body(response=response, method=method)
        if response.status_code >= 400:
            if isinstance(body, dict) and isinstance(body.get("error"), str):
                raise BackendCommandError(body["error"], method=method)
            raise BackendRpcConnectionError(f"Backend returned HTTP {response.status_code}: {method}", method=method)
        return body

    def _adapter_decode_body(self, response: httpx.Response, method: str) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except json.JSONDecodeError as error:
            if response.status_code >= 400:
                raise BackendRpcConnectionError(
                    f"Backend returned HTTP {response.status_code}: {method}", method=method
                ) from error
            raise BackendProtocolError(f"Backend returned non-JSON body: {method}", method=method) from error

    async def _adapter_stream_events(self, event_name: str, handler: EventHandler) -> None:
        """Stream one event channel forever, reopening it after transport failures.

        Args:
            event_name: Backend event name.
            handler: Callback invoked with each decoded payload.

        Returns:
            None: Runs until cancelled.

        Raises:
            asyncio.CancelledError: Raised when the listener is released.
        """

        while True:
            try:
                async with self._client.stream("GET", f"/events/{event_name}", timeout=None) as response:
                    if response.status_code >= 400:
                        logger.warning("Backend event stream %s returned HTTP %s", event_name, response.status_code)
                    else:
                        await self._adapter_dispatch_stream(response=response, handler=handler)
            except httpx.RequestError as error:
                logger.warning("Backend event stream %s dropped: %s", event_name, error)
            await asyncio.sleep(self._event_reconnect_seconds)

    async def _adapter_dispatch_stream(self, response: httpx.Response, handler: EventHandler) -> None:
        pending_lines: list[str] = []
        async for line in response.aiter_lines():
            pending_lines.append(line)
            if line:
                continue
            for payload in adapter_parse_sse_lines(pending_lines):
                handler(payload)
            pending_lines = []
        for payload in adapter_parse_sse_lines(pending_lines):
            handler(payload)
