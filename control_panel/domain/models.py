"""Typed domain models shared across runtime layers.

This module provides the display and status contracts handed from the core to
display surfaces. All models are frozen so a value given to a consumer can
never be mutated behind the owner's back.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Severity(str, Enum):
    """Display severity tag attached to every rendered field."""

    INFO = "info"
    WARNING = "warning"


@dataclass(frozen=True)
class FieldDisplay:
    """Resolved display value for one telemetry field.

    Attributes:
        text: Human-readable text, never empty.
        severity: Severity tag used by display surfaces.
    """

    text: str
    severity: Severity

    def to_payload(self) -> dict[str, str]:
        return {"text": self.text, "severity": self.severity.value}


class ServicePhase(str, Enum):
    """Lifecycle phase of the monitored container engine."""

    INITIALIZING = "Initializing"
    CHECKING = "Checking"
    RUNNING = "Running"
    PAUSED = "Paused"
    RESTARTING = "Restarting"
    NOT_RUNNING = "NotRunning"
    ERRORED = "Errored"


@dataclass(frozen=True)
class DockerVersion:
    """Engine version descriptor reported by the backend.

    Attributes:
        version: Engine release string.
        api_version: Engine API version string.
        os: Engine operating system label.
        arch: Engine CPU architecture label.
    """

    version: str
    api_version: str = ""
    os: str = ""
    arch: str = ""


@dataclass(frozen=True)
class ServiceStatus:
    """Last-known state of the monitored container engine.

    Instances are immutable; the reconciler replaces its current value on every
    accepted update, so any instance handed to a consumer is already a
    read-only snapshot.

    Attributes:
        phase: Current lifecycle phase.
        engine_version: Optional engine version descriptor.
        desktop_version: Optional desktop application version string.
        engine_update_available: Engine update flag, None while unknown.
        desktop_update_available: Desktop update flag, None while unknown.
        error_message: Failure description, set only in `Errored` phase.
        container_count: Optional number of containers reported upstream.
        last_checked: Optional upstream timestamp of the last update check.
        last_updated_at: Acceptance time of the most recent update.
        revision: Count of accepted updates.
    """

    phase: ServicePhase = ServicePhase.INITIALIZING
    engine_version: DockerVersion | None = None
    desktop_version: str | None = None
    engine_update_available: bool | None = None
    desktop_update_available: bool | None = None
    error_message: str | None = None
    container_count: int | None = None
    last_checked: str | None = None
    last_updated_at: datetime | None = None
    revision: int = 0

    def to_payload(self) -> dict[str, object]:
        """Return JSON-compatible representation for display surfaces.

        Returns:
            dict[str, object]: Serialized status snapshot.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        engine_version = None
        if self.engine_version is not None:
            engine_version = {
                "version": self.engine_version.version,
                "api_version": self.engine_version.api_version,
                "os": self.engine_version.os,
                "arch": self.engine_version.arch,
            }
        return {
            "phase": self.phase.value,
            "engine_version": engine_version,
            "desktop_version": self.desktop_version,
            "engine_update_available": self.engine_update_available,
            "desktop_update_available": self.desktop_update_available,
            "error_message": self.error_message,
            "container_count": self.container_count,
            "last_checked": self.last_checked,
            "last_updated_at": self.last_updated_at.isoformat() if self.last_updated_at else None,
            "revision": self.revision,
        }
