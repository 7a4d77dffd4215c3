"""Typed interfaces for adapter-layer responsibilities."""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol


EventHandler = Callable[[Any], None]
Unlisten = Callable[[], Awaitable[None]]


class BackendRpcPort(Protocol):
    """Port definition for the out-of-process telemetry backend."""

    def rpc_source_name(self) -> str:
        """Return backend source identifier for diagnostics.

        Returns:
            str: Human-readable backend identifier.

        Raises:
            RuntimeError: Raised when source metadata is unavailable.
        """

    async def rpc_get_system_info(self) -> Any:
        """Fetch the full system-info response.

        Returns:
            Any: JSON-shaped system-info payload, sections possibly enveloped.

        Raises:
            ConnectionError: Raised when the backend cannot be reached.
            TimeoutError: Raised when the call exceeds the transport timeout.
        """

    async def rpc_get_docker_status(self) -> Any:
        """Fetch one full container-engine status report.

        Returns:
            Any: JSON-shaped status payload.

        Raises:
            ConnectionError: Raised when the backend cannot be reached.
            RuntimeError: Raised when the backend reports a command failure.
        """

    async def rpc_get_docker_version(self) -> Any:
        """Fetch the container-engine version descriptor.

        Returns:
            Any: JSON-shaped version payload.

        Raises:
            ConnectionError: Raised when the backend cannot be reached.
            RuntimeError: Raised when the backend reports a command failure.
        """

    async def rpc_subscribe_to_docker_events(self) -> None:
        """Enroll this client for container-engine status events.

        Raises:
            ConnectionError: Raised when the backend cannot be reached.
            RuntimeError: Raised when the backend rejects the enrollment.
        """

    async def rpc_listen(self, event_name: str, handler: EventHandler) -> Unlisten:
        """Attach a handler to one named backend event.

        Args:
            event_name: Backend event name.
            handler: Callback invoked on the event loop with each event payload.

        Returns:
            Unlisten: Awaitable release handle that detaches the handler.

        Raises:
            ConnectionError: Raised when the event channel cannot be opened.
        """
