"""System overview router serving classified telemetry sections."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from control_panel.adapters import BackendRpcPort
from control_panel.domain import CriticalFieldSet, system_info_build_overview


logger = logging.getLogger(__name__)


def api_create_system_router(
    backend: BackendRpcPort,
    critical_fields: CriticalFieldSet,
    request_timeout_seconds: float,
) -> APIRouter:
    """Create router exposing the normalized system overview.

    Args:
        backend: Backend RPC port supplying system info.
        critical_fields: Injected critical-field registry.
        request_timeout_seconds: Upper bound for the backend call.

    Returns:
        APIRouter: Router exposing `/system` endpoints.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if backend is None:
        raise ValueError("backend must not be None")
    if critical_fields is None:
        raise ValueError("critical_fields must not be None")
    if request_timeout_seconds <= 0:
        raise ValueError("request_timeout_seconds must be > 0")

    router = APIRouter(prefix="/system", tags=["system"])

    @router.get("/overview")
    async def api_system_overview() -> JSONResponse:
        """Return every system-info section resolved into display rows.

        Returns:
            JSONResponse: Overview payload, or `503` when the backend is unreachable.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        try:
            raw_system_info = await asyncio.wait_for(backend.rpc_get_system_info(), timeout=request_timeout_seconds)
        except (ConnectionError, TimeoutError, RuntimeError, ValueError) as error:
            logger.warning("System info fetch failed: %s", error)
            payload = {
                "status": "error",
                "code": "SYSTEM_INFO_UNAVAILABLE",
                "message": "System information is unavailable",
            }
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        overview = system_info_build_overview(raw_system_info, critical_fields)
        return JSONResponse(content=overview.to_payload(), status_code=status.HTTP_200_OK)

    return router
