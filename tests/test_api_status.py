"""Tests for the HTTP status surface.

These tests validate health, Docker status and system overview responses
against a scripted backend, with monitoring started by the application
lifespan.
"""

from fastapi.testclient import TestClient

from backend_doubles import FakeBackend
from control_panel.api.application import create_api_application
from control_panel.config import AppSettings
from control_panel.domain import DEFAULT_CRITICAL_FIELDS
from control_panel.sync import DockerStatusReconciler


def _build_settings() -> AppSettings:
    """Create test settings object.

    Returns:
        AppSettings: Deterministic test settings for API creation.

    Raises:
        ValueError: Raised by AppSettings when values are invalid.
    """

    return AppSettings(
        environment_name="test",
        docker_poll_interval_seconds=60.0,
        docker_rpc_timeout_seconds=1.0,
    )


def _build_application(backend: FakeBackend, shutdown_calls: list[str] | None = None):
    settings = _build_settings()
    reconciler = DockerStatusReconciler(
        backend=backend,
        poll_interval_seconds=settings.docker_poll_interval_seconds,
        rpc_timeout_seconds=settings.docker_rpc_timeout_seconds,
    )

    async def _on_shutdown() -> None:
        if shutdown_calls is not None:
            shutdown_calls.append("closed")

    return create_api_application(
        settings=settings,
        backend=backend,
        reconciler=reconciler,
        critical_fields=DEFAULT_CRITICAL_FIELDS,
        on_shutdown=_on_shutdown,
    )


def test_api_health_reports_running_monitoring_with_push_channel() -> None:
    """Return HTTP 200 while the lifespan-owned reconciler runs.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    with TestClient(_build_application(FakeBackend())) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["monitoring"] == "running"
    assert response.json()["push_channel"] == "connected"


def test_api_health_returns_service_unavailable_without_lifespan() -> None:
    """Return HTTP 503 and degraded payload when monitoring never started.

    Returns:
        None: Assertions validate response behavior.

    Raises:
        AssertionError: Raised when response does not match expected payload.
    """

    client = TestClient(_build_application(FakeBackend()))

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["app"] == "up"
    assert response.json()["docker_phase"] == "Initializing"


def test_api_docker_refresh_returns_reconciled_snapshot_and_tooltip() -> None:
    """Run an on-demand poll and expose the resulting snapshot.

    Returns:
        None: Assertions validate refresh and status payloads.

    Raises:
        AssertionError: Raised when payloads are incorrect.
    """

    backend = FakeBackend(
        status_results=[{"is_running": True, "desktop_version": "4.42.0", "desktop_update_available": True}],
        version_results=[{"version": "27.3.1", "api_version": "1.47", "os": "linux", "arch": "amd64"}],
    )
    shutdown_calls: list[str] = []

    with TestClient(_build_application(backend, shutdown_calls)) as client:
        refresh_response = client.post("/docker/refresh")
        status_response = client.get("/docker/status")

    assert refresh_response.status_code == 200
    assert status_response.status_code == 200
    payload = status_response.json()
    assert payload["status"]["phase"] == "Running"
    assert payload["status"]["engine_version"]["api_version"] == "1.47"
    assert payload["status"]["revision"] == refresh_response.json()["status"]["revision"]
    assert payload["tooltip"] == "Docker is running\nEngine: 27.3.1\nDesktop: 4.42.0 (Update Available)"
    assert backend.unlisten_calls == 1
    assert shutdown_calls == ["closed"]


def test_api_docker_refresh_conflicts_when_monitoring_stopped() -> None:
    client = TestClient(_build_application(FakeBackend()))

    response = client.post("/docker/refresh")

    assert response.status_code == 409
    assert response.json()["code"] == "MONITORING_STOPPED"


def test_api_system_overview_returns_classified_sections() -> None:
    """Return overview sections with critical gaps flagged as warnings.

    Returns:
        None: Assertions validate overview payload.

    Raises:
        AssertionError: Raised when overview payload is incorrect.
    """

    backend = FakeBackend(
        system_info={
            "os": {"Ok": {"general": {"os_name": "Windows 11 Pro", "kernel_version": "10.0.22631"}}},
            "cpu": {"Ok": {"brand": "", "vendor_id": "GenuineIntel"}},
            "gpu": {"Ok": []},
            "memory": {"Ok": {"total_memory_gb": 16.0}},
            "storage": {"Ok": {"devices": []}},
        }
    )
    client = TestClient(_build_application(backend))

    response = client.get("/system/overview")

    assert response.status_code == 200
    sections = {section["title"]: section for section in response.json()["sections"]}
    cpu_rows = {row["field_id"]: row for row in sections["CPU"]["rows"]}
    assert cpu_rows["brand"]["text"] == "Unavailable"
    assert cpu_rows["brand"]["severity"] == "warning"
    assert cpu_rows["vendor_id"] == {
        "label": cpu_rows["vendor_id"]["label"],
        "field_id": "vendor_id",
        "text": "GenuineIntel",
        "severity": "info",
    }
    assert sections["Storage"]["error"] == "No storage devices reported."


def test_api_system_overview_returns_service_unavailable_when_backend_is_down() -> None:
    backend = FakeBackend(system_info=ConnectionError("backend unreachable"))
    client = TestClient(_build_application(backend))

    response = client.get("/system/overview")

    assert response.status_code == 503
    assert response.json()["code"] == "SYSTEM_INFO_UNAVAILABLE"
