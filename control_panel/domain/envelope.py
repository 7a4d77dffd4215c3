"""Backend result-envelope unwrapping and canonical error-kind semantics."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final


ENVELOPE_SUCCESS_TAG: Final[str] = "Ok"
ENVELOPE_ERROR_TAG: Final[str] = "Err"


class ErrorKind(str, Enum):
    """Closed set of backend error kinds understood by display surfaces."""

    SYSTEM_DATA_ERROR = "system-data-error"
    MISSING_HARDWARE = "missing-hardware"
    REGISTRY_ERROR = "registry-error"
    STORAGE_ERROR = "storage-error"
    UNKNOWN = "unknown"


# Wire tags emitted by every known backend generation.
ERROR_KIND_WIRE_TAGS: Final[dict[str, ErrorKind]] = {
    "System": ErrorKind.SYSTEM_DATA_ERROR,
    "SystemDataError": ErrorKind.SYSTEM_DATA_ERROR,
    "Nvml": ErrorKind.MISSING_HARDWARE,
    "MissingHardware": ErrorKind.MISSING_HARDWARE,
    "RegistryError": ErrorKind.REGISTRY_ERROR,
    "StorageError": ErrorKind.STORAGE_ERROR,
}

ERROR_KIND_DEFAULT_MESSAGES: Final[dict[ErrorKind, str]] = {
    ErrorKind.SYSTEM_DATA_ERROR: "System information could not be read.",
    ErrorKind.MISSING_HARDWARE: "Required hardware was not detected.",
    ErrorKind.REGISTRY_ERROR: "System registry could not be queried.",
    ErrorKind.STORAGE_ERROR: "Storage devices could not be read.",
    ErrorKind.UNKNOWN: "Unknown error",
}


@dataclass(frozen=True)
class ErrorValue:
    """Typed backend error value.

    Attributes:
        kind: Canonical error kind.
        message: Human-readable message suitable for display.
    """

    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class UnwrapSuccess:
    """Success branch of an unwrapped envelope.

    Attributes:
        value: Success payload, or the raw input when it was not an envelope.
    """

    value: Any

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class UnwrapFailure:
    """Failure branch of an unwrapped envelope.

    Attributes:
        error: Typed backend error value.
    """

    error: ErrorValue

    @property
    def ok(self) -> bool:
        return False


UnwrapResult = UnwrapSuccess | UnwrapFailure


def envelope_unwrap(envelope: Any) -> UnwrapResult:
    """Convert a backend success/error envelope into a typed result.

    Input that is not a mapping or carries neither tag is passed through
    unchanged as a best-effort success payload. When both tags are present
    the `Ok` payload wins.

    Args:
        envelope: Any value purporting to be a result envelope.

    Returns:
        UnwrapResult: `UnwrapSuccess` or `UnwrapFailure`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if not isinstance(envelope, Mapping):
        return UnwrapSuccess(value=envelope)

    has_success_tag = ENVELOPE_SUCCESS_TAG in envelope
    has_error_tag = ENVELOPE_ERROR_TAG in envelope
    if not (has_success_tag or has_error_tag):
        return UnwrapSuccess(value=envelope)
    if has_success_tag:
        return UnwrapSuccess(value=envelope[ENVELOPE_SUCCESS_TAG])
    return UnwrapFailure(error=envelope_parse_error_value(envelope[ENVELOPE_ERROR_TAG]))


def envelope_parse_error_value(payload: Any) -> ErrorValue:
    """Build a typed error value from one backend error payload.

    Args:
        payload: Error payload, either a single-tag mapping or a plain string.

    Returns:
        ErrorValue: Canonical error value; unknown shapes map to `ErrorKind.UNKNOWN`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(payload, str):
        message = payload.strip() or ERROR_KIND_DEFAULT_MESSAGES[ErrorKind.UNKNOWN]
        return ErrorValue(kind=ErrorKind.UNKNOWN, message=message)

    if isinstance(payload, Mapping) and len(payload) == 1:
        wire_tag, raw_message = next(iter(payload.items()))
        kind = ERROR_KIND_WIRE_TAGS.get(str(wire_tag))
        if kind is not None:
            return ErrorValue(kind=kind, message=envelope_error_default_message(kind, raw_message))

    return ErrorValue(kind=ErrorKind.UNKNOWN, message=ERROR_KIND_DEFAULT_MESSAGES[ErrorKind.UNKNOWN])


def envelope_is_error_value(value: Any) -> bool:
    """Return whether a value is a bare backend error payload.

    Older backends placed error payloads directly in a field instead of
    wrapping them in an `Err` envelope.

    Args:
        value: Candidate field value.

    Returns:
        bool: True when value is a single-tag mapping with a known error wire tag.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return (
        isinstance(value, Mapping)
        and len(value) == 1
        and str(next(iter(value.keys()))) in ERROR_KIND_WIRE_TAGS
    )


def envelope_error_default_message(kind: ErrorKind, raw_message: Any) -> str:
    """Return the upstream message, or the kind's default when it is blank.

    Args:
        kind: Canonical error kind.
        raw_message: Upstream message value of any type.

    Returns:
        str: Non-empty human-readable message.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(raw_message, str) and raw_message.strip():
        return raw_message.strip()
    return ERROR_KIND_DEFAULT_MESSAGES[kind]


def envelope_resolve_section(value: Any) -> UnwrapResult:
    """Resolve one system-info section that may be enveloped or a bare error.

    Args:
        value: Raw section value from the backend.

    Returns:
        UnwrapResult: Unwrapped section result.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if envelope_is_error_value(value):
        return UnwrapFailure(error=envelope_parse_error_value(value))
    return envelope_unwrap(value)
