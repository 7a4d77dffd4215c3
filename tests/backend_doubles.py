"""Shared backend test doubles for reconciler and API tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from control_panel.domain import DOCKER_STATUS_EVENT_NAME


class FakeBackend:
    """Scriptable in-memory backend RPC port.

    Each `*_results` list is consumed front to back; the last entry repeats.
    Entries that are exceptions are raised instead of returned.
    """

    def __init__(
        self,
        status_results: list[Any] | None = None,
        version_results: list[Any] | None = None,
        system_info: Any = None,
    ):
        self.status_results = list(status_results or [{"is_running": True, "is_paused": False}])
        self.version_results = list(version_results or [{"version": "27.3.1", "api_version": "1.47"}])
        self.system_info = system_info
        self.listen_error: BaseException | None = None
        self.subscribe_error: BaseException | None = None
        self.status_gate: asyncio.Event | None = None
        self.status_calls = 0
        self.version_calls = 0
        self.unlisten_calls = 0
        self.handlers: dict[str, Callable[[Any], None]] = {}

    def rpc_source_name(self) -> str:
        return "fake_backend"

    async def rpc_get_system_info(self) -> Any:
        if isinstance(self.system_info, BaseException):
            raise self.system_info
        return self.system_info

    async def rpc_get_docker_status(self) -> Any:
        self.status_calls += 1
        if self.status_gate is not None:
            await self.status_gate.wait()
        return _next_result(self.status_results)

    async def rpc_get_docker_version(self) -> Any:
        self.version_calls += 1
        return _next_result(self.version_results)

    async def rpc_subscribe_to_docker_events(self) -> None:
        if self.subscribe_error is not None:
            raise self.subscribe_error

    async def rpc_listen(self, event_name: str, handler: Callable[[Any], None]):
        if self.listen_error is not None:
            raise self.listen_error
        self.handlers[event_name] = handler

        async def _unlisten() -> None:
            self.unlisten_calls += 1

        return _unlisten

    def push(self, payload: Any) -> None:
        self.handlers[DOCKER_STATUS_EVENT_NAME](payload)


def _next_result(results: list[Any]) -> Any:
    result = results.pop(0) if len(results) > 1 else results[0]
    if isinstance(result, BaseException):
        raise result
    return result


async def wait_until(predicate: Callable[[], bool], attempts: int = 500) -> None:
    """Yield to the event loop until predicate holds."""

    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition was not reached")
