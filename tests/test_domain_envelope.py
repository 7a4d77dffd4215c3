"""Regression tests for result-envelope unwrapping and error-kind mapping."""

from __future__ import annotations

import pytest

from control_panel.domain import (
    ErrorKind,
    UnwrapFailure,
    UnwrapSuccess,
    envelope_is_error_value,
    envelope_parse_error_value,
    envelope_unwrap,
)
from control_panel.domain.envelope import envelope_resolve_section


def test_domain_envelope_unwraps_success_payload() -> None:
    """Return the `Ok` payload as a success result.

    Returns:
        None: Assertions validate success unwrapping.

    Raises:
        AssertionError: Raised when the payload is not extracted.
    """

    result = envelope_unwrap({"Ok": {"brand": "AMD Ryzen 9"}})

    assert isinstance(result, UnwrapSuccess)
    assert result.ok is True
    assert result.value == {"brand": "AMD Ryzen 9"}


def test_domain_envelope_unwraps_error_payload_into_typed_error() -> None:
    """Map an `Err` payload with a known wire tag to its canonical kind.

    Returns:
        None: Assertions validate error unwrapping.

    Raises:
        AssertionError: Raised when error kind or message is wrong.
    """

    result = envelope_unwrap({"Err": {"Nvml": "NVML library not found"}})

    assert isinstance(result, UnwrapFailure)
    assert result.ok is False
    assert result.error.kind is ErrorKind.MISSING_HARDWARE
    assert result.error.message == "NVML library not found"


@pytest.mark.parametrize(
    "malformed",
    [None, 42, "plain text", ["Ok"], {}, {"brand": "x"}],
)
def test_domain_envelope_passes_malformed_input_through(malformed: object) -> None:
    """Pass malformed envelopes through unchanged without raising.

    Args:
        malformed: Value that is not a well-formed envelope.

    Returns:
        None: Assertions validate pass-through behavior.

    Raises:
        AssertionError: Raised when input is altered or rejected.
    """

    result = envelope_unwrap(malformed)

    assert isinstance(result, UnwrapSuccess)
    assert result.value is malformed


def test_domain_envelope_ok_tag_wins_when_both_tags_present() -> None:
    result = envelope_unwrap({"Ok": {"brand": "x"}, "Err": {"System": "boom"}})

    assert isinstance(result, UnwrapSuccess)
    assert result.value == {"brand": "x"}


def test_domain_envelope_ok_tag_with_null_payload_is_success() -> None:
    result = envelope_unwrap({"Ok": None})

    assert isinstance(result, UnwrapSuccess)
    assert result.value is None


def test_domain_envelope_error_kinds_cover_every_backend_generation() -> None:
    """Map wire tags from old and new backends into the closed kind set."""

    assert envelope_parse_error_value({"System": "x"}).kind is ErrorKind.SYSTEM_DATA_ERROR
    assert envelope_parse_error_value({"SystemDataError": "x"}).kind is ErrorKind.SYSTEM_DATA_ERROR
    assert envelope_parse_error_value({"MissingHardware": "x"}).kind is ErrorKind.MISSING_HARDWARE
    assert envelope_parse_error_value({"RegistryError": "x"}).kind is ErrorKind.REGISTRY_ERROR
    assert envelope_parse_error_value({"StorageError": "x"}).kind is ErrorKind.STORAGE_ERROR


def test_domain_envelope_unknown_error_shapes_resolve_to_human_message() -> None:
    """Never surface raw JSON for unrecognized error payloads."""

    unknown_tag = envelope_parse_error_value({"Exotic": "detail"})
    multi_tag = envelope_parse_error_value({"System": "a", "Nvml": "b"})
    blank_message = envelope_parse_error_value({"StorageError": "   "})
    plain_string = envelope_parse_error_value("backend exploded")

    assert unknown_tag.kind is ErrorKind.UNKNOWN
    assert unknown_tag.message == "Unknown error"
    assert multi_tag.kind is ErrorKind.UNKNOWN
    assert blank_message.kind is ErrorKind.STORAGE_ERROR
    assert blank_message.message == "Storage devices could not be read."
    assert plain_string.message == "backend exploded"


def test_domain_envelope_detects_bare_legacy_error_values() -> None:
    assert envelope_is_error_value({"System": "No CPUs found"})
    assert not envelope_is_error_value({"brand": "Intel"})
    assert not envelope_is_error_value("System")

    resolved = envelope_resolve_section({"System": "No CPUs found"})

    assert isinstance(resolved, UnwrapFailure)
    assert resolved.error.message == "No CPUs found"
