"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from control_panel.adapters import HttpBackendRpcClient
from control_panel.api import create_api_application
from control_panel.config import AppSettings, config_load_settings
from control_panel.domain import CriticalFieldSet
from control_panel.sync import DockerStatusReconciler


def bootstrap_create_backend(settings: AppSettings) -> HttpBackendRpcClient:
    """Build the backend RPC client from validated settings."""

    return HttpBackendRpcClient(
        base_url=settings.backend_base_url,
        request_timeout_seconds=settings.backend_request_timeout_seconds,
        event_reconnect_seconds=settings.backend_event_reconnect_seconds,
    )


def bootstrap_create_reconciler(settings: AppSettings, backend: HttpBackendRpcClient) -> DockerStatusReconciler:
    """Build the Docker status reconciler from validated settings."""

    return DockerStatusReconciler(
        backend=backend,
        poll_interval_seconds=settings.docker_poll_interval_seconds,
        rpc_timeout_seconds=settings.docker_rpc_timeout_seconds,
    )


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional preloaded settings; loaded from environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    backend = bootstrap_create_backend(resolved_settings)
    reconciler = bootstrap_create_reconciler(resolved_settings, backend)
    return create_api_application(
        settings=resolved_settings,
        backend=backend,
        reconciler=reconciler,
        critical_fields=CriticalFieldSet.from_identifiers(resolved_settings.config_critical_field_ids()),
        on_shutdown=backend.aclose,
    )
