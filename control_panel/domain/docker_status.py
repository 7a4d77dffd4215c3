"""Container-engine status payloads and the pure status state machine.

Everything in this module is side-effect free. The reconciler in
`control_panel.sync` owns the current `ServiceStatus` and feeds it through
these functions; display surfaces only ever use `docker_status_tooltip`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, model_validator

from .models import DockerVersion, ServicePhase, ServiceStatus


DOCKER_STATUS_EVENT_NAME: Final[str] = "docker-status-updated"
DOCKER_CONNECTION_FAILED_MESSAGE: Final[str] = "Failed to connect to Docker"

DOCKER_RESTART_SENTINELS: Final[frozenset[str]] = frozenset({"Docker is restarting"})
DOCKER_CHECKING_SENTINELS: Final[frozenset[str]] = frozenset({"Initializing...", "Docker is starting up"})

UPDATE_AVAILABLE_SUFFIX: Final[str] = " (Update Available)"


class DockerVersionPayload(BaseModel):
    """Wire shape of the engine version descriptor."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    version: str
    api_version: str = ""
    os: str = ""
    arch: str = ""

    def to_domain(self) -> DockerVersion:
        return DockerVersion(version=self.version, api_version=self.api_version, os=self.os, arch=self.arch)


class DockerStatusPayload(BaseModel):
    """Wire shape of one full engine status report.

    The earliest backend generation reported the engine version under
    `version`; it is migrated to `engine_version` before validation.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    is_running: bool = False
    is_paused: bool = False
    engine_version: DockerVersionPayload | None = None
    desktop_version: str | None = None
    engine_update_available: bool | None = None
    desktop_update_available: bool | None = None
    error: str | None = None
    container_count: int | None = None
    last_checked: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _migrate_legacy_version_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and "version" in data and "engine_version" not in data:
            migrated = dict(data)
            migrated["engine_version"] = migrated.pop("version")
            return migrated
        return data


class UpdateSource(str, Enum):
    """Producer that supplied a status update."""

    PUSH = "push"
    POLL = "poll"
    BOOTSTRAP = "bootstrap"
    REFRESH = "refresh"


@dataclass(frozen=True)
class StatusUpdate:
    """One candidate update for the reconciled status.

    Exactly one of `payload`, `version`, `failure_message` is set.

    Attributes:
        source: Producer channel.
        payload: Full status report replacing the current record.
        version: Engine version detail merged into the current record.
        failure_message: Connection failure description.
    """

    source: UpdateSource
    payload: DockerStatusPayload | None = None
    version: DockerVersion | None = None
    failure_message: str | None = None

    def __post_init__(self) -> None:
        populated = [item for item in (self.payload, self.version, self.failure_message) if item is not None]
        if len(populated) != 1:
            raise ValueError("StatusUpdate requires exactly one of payload, version, failure_message")


def docker_status_derive_phase(payload: DockerStatusPayload) -> ServicePhase:
    """Map one status report to a lifecycle phase.

    Args:
        payload: Validated status report.

    Returns:
        ServicePhase: Derived lifecycle phase.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    error = (payload.error or "").strip()
    if error in DOCKER_RESTART_SENTINELS:
        return ServicePhase.RESTARTING
    if error in DOCKER_CHECKING_SENTINELS:
        return ServicePhase.CHECKING
    if payload.is_running:
        return ServicePhase.PAUSED if payload.is_paused else ServicePhase.RUNNING
    if error:
        return ServicePhase.ERRORED
    return ServicePhase.NOT_RUNNING


def docker_status_should_accept(current: ServiceStatus, update: StatusUpdate) -> bool:
    """Return whether an update may be applied to the current record.

    Updates are accepted in arrival order regardless of channel. The single
    exception is a bootstrap connection failure, which only fills an empty
    record and never overrides data another channel already delivered.

    Args:
        current: Current reconciled status.
        update: Candidate update.

    Returns:
        bool: True when the update must be applied.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if update.failure_message is not None and update.source is UpdateSource.BOOTSTRAP:
        return current.phase is ServicePhase.INITIALIZING
    return True


def docker_status_accept_update(current: ServiceStatus, update: StatusUpdate, accepted_at: datetime) -> ServiceStatus:
    """Apply one accepted update with last-write-wins semantics.

    A full status report replaces every field of the record, except that
    version descriptors omitted by the report keep their previous values.

    Args:
        current: Current reconciled status.
        update: Accepted update.
        accepted_at: Acceptance timestamp.

    Returns:
        ServiceStatus: New status with revision incremented by one.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    revision = current.revision + 1
    if update.payload is not None:
        payload = update.payload
        phase = docker_status_derive_phase(payload)
        return ServiceStatus(
            phase=phase,
            engine_version=payload.engine_version.to_domain() if payload.engine_version else current.engine_version,
            desktop_version=payload.desktop_version or current.desktop_version,
            engine_update_available=payload.engine_update_available,
            desktop_update_available=payload.desktop_update_available,
            error_message=(payload.error or "").strip() if phase is ServicePhase.ERRORED else None,
            container_count=payload.container_count,
            last_checked=payload.last_checked,
            last_updated_at=accepted_at,
            revision=revision,
        )
    if update.version is not None:
        return replace(current, engine_version=update.version, last_updated_at=accepted_at, revision=revision)
    return replace(
        current,
        phase=ServicePhase.ERRORED,
        error_message=update.failure_message,
        last_updated_at=accepted_at,
        revision=revision,
    )


def docker_status_initial(revision: int = 0) -> ServiceStatus:
    """Return the empty record used at the start of a monitoring session."""

    return ServiceStatus(phase=ServicePhase.INITIALIZING, revision=revision)


def docker_status_tooltip(status: ServiceStatus) -> str:
    """Project a status snapshot onto the status-bar tooltip text.

    Args:
        status: Status snapshot.

    Returns:
        str: Tooltip text, one line per detail.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if status.phase in (ServicePhase.INITIALIZING, ServicePhase.CHECKING):
        return "Checking Docker status..."
    if status.phase is ServicePhase.RESTARTING:
        return "Docker is restarting..."
    if status.phase in (ServicePhase.ERRORED, ServicePhase.NOT_RUNNING):
        return "Docker is not running"
    if status.phase is ServicePhase.PAUSED:
        return "Paused"

    lines = ["Docker is running"]
    if status.engine_version is not None and status.engine_version.version:
        lines.append(
            _docker_status_version_line("Engine", status.engine_version.version, status.engine_update_available)
        )
    if status.desktop_version:
        lines.append(_docker_status_version_line("Desktop", status.desktop_version, status.desktop_update_available))
    return "\n".join(lines)


def _docker_status_version_line(label: str, version: str, update_available: bool | None) -> str:
    line = f"{label}: {version}"
    if update_available is True:
        line += UPDATE_AVAILABLE_SUFFIX
    return line
