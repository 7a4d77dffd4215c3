"""Docker status router exposing reconciled snapshots to display surfaces."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from control_panel.domain import ServiceStatus, docker_status_tooltip
from control_panel.sync import DockerStatusReconciler


def api_create_docker_router(reconciler: DockerStatusReconciler) -> APIRouter:
    """Create router exposing the reconciled Docker status.

    Args:
        reconciler: Docker status reconciler owned by the application.

    Returns:
        APIRouter: Router exposing `/docker` endpoints.

    Raises:
        ValueError: Raised when reconciler is invalid.
    """

    if reconciler is None:
        raise ValueError("reconciler must not be None")

    router = APIRouter(prefix="/docker", tags=["docker"])

    @router.get("/status")
    def api_docker_status() -> JSONResponse:
        """Return current status snapshot with its tooltip projection."""

        return JSONResponse(content=_api_docker_payload(reconciler.sync_snapshot()), status_code=status.HTTP_200_OK)

    @router.post("/refresh")
    async def api_docker_refresh() -> JSONResponse:
        """Run one status poll immediately and return the resulting snapshot.

        Returns:
            JSONResponse: Refreshed snapshot, or `409` when monitoring is stopped.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        if not reconciler.sync_is_running:
            payload = {"status": "error", "code": "MONITORING_STOPPED", "message": "Docker monitoring is not running"}
            return JSONResponse(content=payload, status_code=status.HTTP_409_CONFLICT)
        snapshot = await reconciler.sync_refresh()
        return JSONResponse(content=_api_docker_payload(snapshot), status_code=status.HTTP_200_OK)

    return router


def _api_docker_payload(snapshot: ServiceStatus) -> dict[str, object]:
    return {"status": snapshot.to_payload(), "tooltip": docker_status_tooltip(snapshot)}
