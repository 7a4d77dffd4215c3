"""FastAPI application factory for the control-panel status surface.

The application owns the Docker status reconciler lifecycle: monitoring
starts with the application lifespan and is torn down on shutdown.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI

from control_panel.adapters import BackendRpcPort
from control_panel.config import AppSettings
from control_panel.domain import CriticalFieldSet
from control_panel.sync import DockerStatusReconciler

from .routers import api_create_docker_router, api_create_health_router, api_create_system_router


def create_api_application(
    settings: AppSettings,
    backend: BackendRpcPort,
    reconciler: DockerStatusReconciler,
    critical_fields: CriticalFieldSet,
    on_shutdown: Callable[[], Awaitable[None]] | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        backend: Backend RPC port used by system-info endpoints.
        reconciler: Docker status reconciler started with the application.
        critical_fields: Injected critical-field registry.
        on_shutdown: Optional coroutine run after monitoring stops, such as closing the backend client.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if reconciler is None:
        raise ValueError("reconciler must not be None")

    @asynccontextmanager
    async def _application_lifespan(_application: FastAPI) -> AsyncIterator[None]:
        await reconciler.sync_start()
        try:
            yield
        finally:
            await reconciler.sync_stop()
            if on_shutdown is not None:
                await on_shutdown()

    application = FastAPI(title="Control Panel Status Core", lifespan=_application_lifespan)

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        """Return a minimal foundation response for bootstrap verification."""

        return {
            "service": "control-panel-core",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(reconciler=reconciler))
    application.include_router(api_create_docker_router(reconciler=reconciler))
    application.include_router(
        api_create_system_router(
            backend=backend,
            critical_fields=critical_fields,
            request_timeout_seconds=settings.docker_rpc_timeout_seconds,
        )
    )

    return application
