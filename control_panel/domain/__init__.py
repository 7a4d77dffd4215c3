"""Domain models and pure normalization logic used across layer boundaries."""

from .docker_status import (
    DOCKER_CONNECTION_FAILED_MESSAGE,
    DOCKER_STATUS_EVENT_NAME,
    DockerStatusPayload,
    DockerVersionPayload,
    StatusUpdate,
    UpdateSource,
    docker_status_accept_update,
    docker_status_derive_phase,
    docker_status_initial,
    docker_status_should_accept,
    docker_status_tooltip,
)
from .envelope import (
    ErrorKind,
    ErrorValue,
    UnwrapFailure,
    UnwrapResult,
    UnwrapSuccess,
    envelope_is_error_value,
    envelope_parse_error_value,
    envelope_unwrap,
)
from .models import DockerVersion, FieldDisplay, ServicePhase, ServiceStatus, Severity
from .severity import (
    DEFAULT_CRITICAL_FIELD_IDS,
    DEFAULT_CRITICAL_FIELDS,
    UNAVAILABLE_TEXT,
    CriticalFieldSet,
    severity_classify,
)
from .system_info import OverviewRow, OverviewSection, SystemOverview, system_info_build_overview

__all__ = [
    "CriticalFieldSet",
    "DEFAULT_CRITICAL_FIELD_IDS",
    "DEFAULT_CRITICAL_FIELDS",
    "DOCKER_CONNECTION_FAILED_MESSAGE",
    "DOCKER_STATUS_EVENT_NAME",
    "DockerStatusPayload",
    "DockerVersion",
    "DockerVersionPayload",
    "ErrorKind",
    "ErrorValue",
    "FieldDisplay",
    "OverviewRow",
    "OverviewSection",
    "ServicePhase",
    "ServiceStatus",
    "Severity",
    "StatusUpdate",
    "SystemOverview",
    "UNAVAILABLE_TEXT",
    "UnwrapFailure",
    "UnwrapResult",
    "UnwrapSuccess",
    "UpdateSource",
    "docker_status_accept_update",
    "docker_status_derive_phase",
    "docker_status_initial",
    "docker_status_should_accept",
    "docker_status_tooltip",
    "envelope_is_error_value",
    "envelope_parse_error_value",
    "envelope_unwrap",
    "severity_classify",
    "system_info_build_overview",
]
