"""Health endpoint router composition for app and monitoring checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from control_panel.sync import DockerStatusReconciler


def api_create_health_router(reconciler: DockerStatusReconciler) -> APIRouter:
    """Create health-check router reporting status monitoring state.

    Args:
        reconciler: Docker status reconciler owned by the application.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when reconciler is invalid.
    """

    if reconciler is None:
        raise ValueError("reconciler must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application and monitoring health state.

        Returns:
            JSONResponse: `200` while monitoring runs, `503` otherwise.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        snapshot = reconciler.sync_snapshot()
        payload = {
            "status": "ok" if reconciler.sync_is_running else "degraded",
            "app": "up",
            "monitoring": "running" if reconciler.sync_is_running else "stopped",
            "push_channel": "connected" if reconciler.sync_push_connected else "polling-only",
            "docker_phase": snapshot.phase.value,
        }
        status_code = status.HTTP_200_OK if reconciler.sync_is_running else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=payload, status_code=status_code)

    return router
