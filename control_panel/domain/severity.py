"""Field presence classification with a critical-field registry."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Final

from .models import FieldDisplay, Severity


UNAVAILABLE_TEXT: Final[str] = "Unavailable"

DEFAULT_CRITICAL_FIELD_IDS: Final[tuple[str, ...]] = (
    "os_name",
    "kernel_version",
    "brand",
    "vendor_id",
    "gpu_name",
    "gpu_vendor_id",
    "total_memory_gb",
)


@dataclass(frozen=True)
class CriticalFieldSet:
    """Immutable registry of field identifiers whose absence must be flagged.

    Attributes:
        field_ids: Critical field identifiers.
    """

    field_ids: frozenset[str]

    @classmethod
    def from_identifiers(cls, identifiers: Iterable[str]) -> "CriticalFieldSet":
        """Build registry from raw identifiers, ignoring blanks and surrounding whitespace.

        Args:
            identifiers: Raw field identifiers.

        Returns:
            CriticalFieldSet: Normalized immutable registry.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        normalized = (identifier.strip() for identifier in identifiers)
        return cls(field_ids=frozenset(identifier for identifier in normalized if identifier))

    def __contains__(self, field_id: object) -> bool:
        return field_id in self.field_ids


DEFAULT_CRITICAL_FIELDS: Final[CriticalFieldSet] = CriticalFieldSet.from_identifiers(DEFAULT_CRITICAL_FIELD_IDS)


def severity_value_is_present(value: Any) -> bool:
    """Return whether a field value counts as present for display."""

    return not (value is None or value == "")


def severity_classify(value: Any, field_id: str, critical_fields: CriticalFieldSet) -> FieldDisplay:
    """Resolve display text and severity for one field.

    Args:
        value: Resolved field value, possibly missing.
        field_id: Field identifier used for critical-field lookup.
        critical_fields: Injected critical-field registry.

    Returns:
        FieldDisplay: Display value; missing critical fields carry `warning`.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if severity_value_is_present(value):
        return FieldDisplay(text=str(value), severity=Severity.INFO)
    if field_id in critical_fields:
        return FieldDisplay(text=UNAVAILABLE_TEXT, severity=Severity.WARNING)
    return FieldDisplay(text=UNAVAILABLE_TEXT, severity=Severity.INFO)
