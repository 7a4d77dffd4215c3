"""Single-writer reconciler for the container-engine status record.

Two producers feed one `asyncio.Queue`:

* the push channel, a backend event subscription established at start, and
* the poll channel, a fixed-interval status-then-version query pair.

One writer task drains the queue and is the only code that replaces the
current `ServiceStatus`. Every queued message carries the generation of the
session that produced it; messages from a torn-down session are dropped, so
an RPC that resolves after `sync_stop` can never mutate the record.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from contextlib import AsyncExitStack
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, TypeVar

from pydantic import ValidationError

from control_panel.adapters import BackendRpcPort, BackendRpcTimeoutError, Unlisten
from control_panel.domain import (
    DOCKER_CONNECTION_FAILED_MESSAGE,
    DOCKER_STATUS_EVENT_NAME,
    DockerStatusPayload,
    DockerVersionPayload,
    ServiceStatus,
    StatusUpdate,
    UpdateSource,
    docker_status_accept_update,
    docker_status_initial,
    docker_status_should_accept,
)


logger = logging.getLogger(__name__)

_ResultT = TypeVar("_ResultT")

StatusListener = Callable[[ServiceStatus], None]

# Failures a backend call may surface; anything else is a programming error.
_RPC_FAILURES = (ConnectionError, TimeoutError, RuntimeError, ValueError)


@dataclass(frozen=True)
class _QueuedUpdate:
    generation: int
    update: StatusUpdate


class DockerStatusReconciler:
    """Own and reconcile the container-engine `ServiceStatus`."""

    def __init__(
        self,
        backend: BackendRpcPort,
        poll_interval_seconds: float = 5.0,
        rpc_timeout_seconds: float = 4.0,
        clock: Callable[[], datetime] | None = None,
    ):
        """Initialize reconciler dependencies.

        Args:
            backend: Backend RPC port supplying status, version and events.
            poll_interval_seconds: Delay between poll ticks.
            rpc_timeout_seconds: Upper bound for every backend call.
            clock: Optional acceptance-time provider returning aware datetimes.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or timing values are invalid.
        """

        if backend is None:
            raise ValueError("backend must not be None")
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be > 0")
        if rpc_timeout_seconds <= 0:
            raise ValueError("rpc_timeout_seconds must be > 0")
        if rpc_timeout_seconds >= poll_interval_seconds:
            raise ValueError("rpc_timeout_seconds must be < poll_interval_seconds")

        self._backend = backend
        self._poll_interval_seconds = poll_interval_seconds
        self._rpc_timeout_seconds = rpc_timeout_seconds
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._status = docker_status_initial()
        self._generation = 0
        self._active_generation: int | None = None
        self._queue: asyncio.Queue[_QueuedUpdate] | None = None
        self._exit_stack: AsyncExitStack | None = None
        self._push_connected = False
        self._listeners: list[StatusListener] = []

    @property
    def sync_is_running(self) -> bool:
        return self._active_generation is not None

    @property
    def sync_push_connected(self) -> bool:
        return self._push_connected

    def sync_snapshot(self) -> ServiceStatus:
        """Return the current status as an immutable snapshot."""

        return self._status

    def sync_add_listener(self, listener: StatusListener) -> Callable[[], None]:
        """Register a callback invoked with each newly accepted snapshot.

        Args:
            listener: Callback receiving the new immutable snapshot.

        Returns:
            Callable[[], None]: Handle that removes the listener.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    async def sync_start(self) -> None:
        """Start a monitoring session.

        The record is reset to `Initializing` (revision numbering continues),
        the writer task and push subscription are set up, a bootstrap poll is
        performed and applied, and the interval poll loop begins. The snapshot
        read right after this returns already reflects the bootstrap fetch.
        Anything acquired before a setup error is released before the error
        propagates.

        Returns:
            None: Session runs until `sync_stop`.

        Raises:
            RuntimeError: Raised when a session is already running.
        """

        if self._exit_stack is not None:
            raise RuntimeError("reconciler is already running")

        self._generation += 1
        generation = self._generation
        self._status = docker_status_initial(revision=self._status.revision)
        queue: asyncio.Queue[_QueuedUpdate] = asyncio.Queue()
        self._queue = queue
        self._active_generation = generation

        stack = AsyncExitStack()
        try:
            stack.callback(self._sync_deactivate, generation)
            writer_task = asyncio.create_task(self._sync_writer_loop(queue), name="docker-status-writer")
            stack.push_async_callback(_sync_cancel_task, writer_task)

            unlisten = await self._sync_subscribe_push(generation)
            if unlisten is not None:
                stack.push_async_callback(self._sync_release_push, unlisten)

            await self._sync_poll_tick(generation=generation, source=UpdateSource.BOOTSTRAP)
            poll_task = asyncio.create_task(self._sync_poll_loop(generation), name="docker-status-poll")
            stack.push_async_callback(_sync_cancel_task, poll_task)
        except BaseException:
            await stack.aclose()
            raise
        self._exit_stack = stack
        await queue.join()
        logger.info("Docker status monitoring started (push=%s)", self._push_connected)

    async def sync_stop(self) -> None:
        """Tear down the monitoring session.

        Stops accepting messages first, then cancels the poll loop, releases
        the push subscription and stops the writer. Safe to call repeatedly.

        Returns:
            None: Teardown has no return value.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        stack, self._exit_stack = self._exit_stack, None
        if stack is None:
            return
        self._active_generation = None
        await stack.aclose()
        logger.info("Docker status monitoring stopped")

    async def sync_refresh(self) -> ServiceStatus:
        """Run one poll tick on demand and wait until its updates are applied.

        Returns:
            ServiceStatus: Snapshot after the refresh.

        Raises:
            RuntimeError: Raised when no session is running.
        """

        generation = self._active_generation
        if generation is None:
            raise RuntimeError("reconciler is not running")
        await self._sync_poll_tick(generation=generation, source=UpdateSource.REFRESH)
        await self.sync_wait_idle()
        return self._status

    async def sync_wait_idle(self) -> None:
        """Wait until every message queued so far has been applied or dropped."""

        if self._queue is not None and self.sync_is_running:
            await self._queue.join()

    async def __aenter__(self) -> "DockerStatusReconciler":
        await self.sync_start()
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.sync_stop()

    def _sync_enqueue(self, generation: int, update: StatusUpdate) -> None:
        if generation != self._active_generation or self._queue is None:
            logger.debug("Dropping %s update from inactive session %s", update.source.value, generation)
            return
        self._queue.put_nowait(_QueuedUpdate(generation=generation, update=update))

    async def _sync_writer_loop(self, queue: asyncio.Queue[_QueuedUpdate]) -> None:
        while True:
            queued = await queue.get()
            try:
                self._sync_apply(queued)
            finally:
                queue.task_done()

    def _sync_apply(self, queued: _QueuedUpdate) -> None:
        if queued.generation != self._active_generation:
            logger.debug("Discarding %s update queued before teardown", queued.update.source.value)
            return
        if not docker_status_should_accept(self._status, queued.update):
            logger.debug("Ignoring %s update for phase %s", queued.update.source.value, self._status.phase.value)
            return

        self._status = docker_status_accept_update(self._status, queued.update, accepted_at=self._clock())
        logger.debug(
            "Accepted %s update: phase=%s revision=%s",
            queued.update.source.value,
            self._status.phase.value,
            self._status.revision,
        )
        for listener in list(self._listeners):
            try:
                listener(self._status)
            except Exception:  # pylint: disable=broad-exception-caught
                logger.exception("Docker status listener failed")

    async def _sync_subscribe_push(self, generation: int) -> Unlisten | None:
        """Attach the push handler and enroll for backend events.

        Args:
            generation: Session generation stamped on pushed updates.

        Returns:
            Unlisten | None: Release handle, or None when the subscription failed.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        def _on_event(raw_payload: Any) -> None:
            try:
                payload = DockerStatusPayload.model_validate(raw_payload)
            except ValidationError as error:
                logger.warning("Discarding malformed Docker status event: %s", error)
                return
            self._sync_enqueue(generation, StatusUpdate(source=UpdateSource.PUSH, payload=payload))

        unlisten: Unlisten | None = None
        try:
            unlisten = await self._sync_call(self._backend.rpc_listen(DOCKER_STATUS_EVENT_NAME, _on_event))
            await self._sync_call(self._backend.rpc_subscribe_to_docker_events())
        except _RPC_FAILURES as error:
            logger.error("Docker event subscription failed, continuing with polling only: %s", error)
            if unlisten is not None:
                await unlisten()
            return None
        self._push_connected = True
        return unlisten

    async def _sync_release_push(self, unlisten: Unlisten) -> None:
        self._push_connected = False
        await unlisten()

    async def _sync_poll_loop(self, generation: int) -> None:
        while True:
            await asyncio.sleep(self._poll_interval_seconds)
            await self._sync_poll_tick(generation=generation, source=UpdateSource.POLL)

    async def _sync_poll_tick(self, generation: int, source: UpdateSource) -> None:
        """Fetch status, then version detail, and enqueue the results.

        A failed bootstrap status fetch enqueues a connection failure; other
        status failures are logged and leave the record untouched. A failed
        version fetch never clears previously known version detail.

        Args:
            generation: Session generation stamped on the updates.
            source: Producer label for the tick.

        Returns:
            None: Results are enqueued for the writer.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        try:
            raw_status = await self._sync_call(self._backend.rpc_get_docker_status())
            payload = DockerStatusPayload.model_validate(raw_status)
        except (*_RPC_FAILURES, ValidationError) as error:
            if source is UpdateSource.BOOTSTRAP:
                logger.error("Initial Docker status fetch failed: %s", error)
                self._sync_enqueue(
                    generation,
                    StatusUpdate(source=source, failure_message=DOCKER_CONNECTION_FAILED_MESSAGE),
                )
            else:
                logger.warning("Docker status poll failed, keeping last known state: %s", error)
            return
        self._sync_enqueue(generation, StatusUpdate(source=source, payload=payload))

        try:
            raw_version = await self._sync_call(self._backend.rpc_get_docker_version())
            version = DockerVersionPayload.model_validate(raw_version).to_domain()
        except (*_RPC_FAILURES, ValidationError) as error:
            logger.info("Docker version fetch failed, keeping previous version detail: %s", error)
            return
        self._sync_enqueue(generation, StatusUpdate(source=source, version=version))

    async def _sync_call(self, operation: Awaitable[_ResultT]) -> _ResultT:
        try:
            return await asyncio.wait_for(operation, timeout=self._rpc_timeout_seconds)
        except asyncio.TimeoutError as error:
            raise BackendRpcTimeoutError(
                f"Backend call exceeded {self._rpc_timeout_seconds:.1f}s timeout"
            ) from error

    def _sync_deactivate(self, generation: int) -> None:
        if self._active_generation == generation:
            self._active_generation = None
        self._queue = None


async def _sync_cancel_task(task: asyncio.Task[Any]) -> None:
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
