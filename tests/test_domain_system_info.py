"""Regression tests for system-info schema migration and overview projection."""

from __future__ import annotations

import pytest

from control_panel.domain import DEFAULT_CRITICAL_FIELDS, Severity, SystemOverview, system_info_build_overview
from control_panel.domain.system_info import (
    system_info_format_frequency,
    system_info_format_gigabytes,
    system_info_format_uptime,
    system_info_migrate_memory,
    system_info_migrate_os,
    system_info_migrate_storage_device,
)


def _section(overview: SystemOverview, title: str):
    matches = [section for section in overview.sections if section.title == title]
    assert matches, f"missing section {title}"
    return matches[0]


def _row_text(overview: SystemOverview, title: str, field_id: str) -> tuple[str, Severity]:
    rows = [row for row in _section(overview, title).rows if row.field_id == field_id]
    assert rows, f"missing row {field_id} in {title}"
    return rows[0].display.text, rows[0].display.severity


CANONICAL_SYSTEM_INFO = {
    "os": {
        "Ok": {
            "general": {
                "os_name": "Windows 11 Pro",
                "os_version": "23H2",
                "kernel_version": "10.0.22631",
                "architecture": "x86_64",
                "hostname": "workstation",
                "uptime": 93784,
            }
        }
    },
    "cpu": {
        "Ok": {
            "brand": "",
            "vendor_id": "GenuineIntel",
            "frequency": 3600,
            "physical_core_count": 8,
            "logical_core_count": 16,
        }
    },
    "gpu": {
        "Ok": [
            {"name": "NVIDIA GeForce RTX 4070", "vendor_id": "0x10de", "device_type": "DiscreteGpu", "backend": "Vulkan, Dx12"},
        ]
    },
    "memory": {
        "Ok": {
            "total_memory_gb": 32.0,
            "used_memory_gb": 12.5,
            "available_memory_gb": 19.5,
            "used_memory_percentage": 39.0625,
        }
    },
    "storage": {"Err": {"StorageError": "Access denied while enumerating volumes"}},
}


def test_domain_system_info_overview_classifies_canonical_payload() -> None:
    """Build display rows from the canonical nested payload.

    Returns:
        None: Assertions validate row text and severities.

    Raises:
        AssertionError: Raised when the projection is incorrect.
    """

    overview = system_info_build_overview(CANONICAL_SYSTEM_INFO, DEFAULT_CRITICAL_FIELDS)

    assert _row_text(overview, "Operating System", "os_name") == ("Windows 11 Pro", Severity.INFO)
    assert _row_text(overview, "Operating System", "uptime") == ("1d 2h 3m", Severity.INFO)
    assert _row_text(overview, "CPU", "brand") == ("Unavailable", Severity.WARNING)
    assert _row_text(overview, "CPU", "frequency") == ("3.60 GHz", Severity.INFO)
    assert _row_text(overview, "CPU", "logical_core_count") == ("16", Severity.INFO)
    assert _row_text(overview, "Primary Graphics Card", "backend") == ("Vulkan, DirectX 12", Severity.INFO)
    assert _row_text(overview, "Primary Graphics Card", "driver_info") == ("Unavailable", Severity.INFO)
    assert _row_text(overview, "Memory", "used_memory_percentage") == ("39.1%", Severity.INFO)
    assert _section(overview, "Storage").error == "Access denied while enumerating volumes"
    assert _section(overview, "Storage").rows == ()


def test_domain_system_info_overview_accepts_legacy_flat_mb_payload() -> None:
    """Migrate the flat-OS, MB-unit generation without display code branching.

    Returns:
        None: Assertions validate legacy migration results.

    Raises:
        AssertionError: Raised when legacy values are not migrated.
    """

    legacy_payload = {
        "os": {"Ok": {"name": "Ubuntu", "version": "24.04", "kernel_version": "6.8.0", "hostname": "Unknown", "uptime": 120}},
        "cpu": {"Ok": {"brand": "AMD Ryzen 7", "frequency": 4200, "physical_cores": 8, "logical_cores": 16}},
        "gpu": {"Err": {"Nvml": "NVML library not found"}},
        "memory": {"Ok": {"total_mb": 16384, "used_mb": 4096, "free_mb": 12288}},
        "storage": {"Ok": {"devices": [{"name": "C:", "total_gb": 512.0, "used_gb": 256.0, "available_gb": 256.0}]}},
    }

    overview = system_info_build_overview(legacy_payload, DEFAULT_CRITICAL_FIELDS)

    assert _row_text(overview, "Operating System", "os_name") == ("Ubuntu", Severity.INFO)
    assert _row_text(overview, "Operating System", "uptime") == ("2m", Severity.INFO)
    assert _row_text(overview, "CPU", "physical_core_count") == ("8", Severity.INFO)
    assert _row_text(overview, "CPU", "vendor_id") == ("Unavailable", Severity.WARNING)
    assert _section(overview, "GPU").error == "NVML library not found"
    assert _row_text(overview, "Memory", "total_memory_gb") == ("16.0 GB", Severity.INFO)
    assert _row_text(overview, "Memory", "used_memory_percentage") == ("25.0%", Severity.INFO)
    assert _row_text(overview, "Storage: C:", "storage_used_percentage") == ("50.0%", Severity.INFO)


def test_domain_system_info_overview_accepts_bare_error_sections() -> None:
    overview = system_info_build_overview(
        {"os": {"System": "os probe failed"}, "cpu": {"System": "No CPUs found"}},
        DEFAULT_CRITICAL_FIELDS,
    )

    assert _section(overview, "Operating System").error == "os probe failed"
    assert _section(overview, "CPU").error == "No CPUs found"


@pytest.mark.parametrize("malformed", [None, "oops", [], {"unexpected": True}])
def test_domain_system_info_overview_never_raises_on_malformed_response(malformed: object) -> None:
    """Resolve malformed responses into `Unavailable` rows instead of failing.

    Args:
        malformed: Malformed top-level response.

    Returns:
        None: Assertions validate defensive projection.

    Raises:
        AssertionError: Raised when rows are missing or blank.
    """

    overview = system_info_build_overview(malformed, DEFAULT_CRITICAL_FIELDS)

    os_name_text, os_name_severity = _row_text(overview, "Operating System", "os_name")
    assert os_name_text == "Unavailable"
    assert os_name_severity is Severity.WARNING
    assert _row_text(overview, "GPU", "gpu_vendor_id") == ("Unavailable", Severity.WARNING)
    for section in overview.sections:
        assert section.error or section.rows
        for row in section.rows:
            assert row.display.text


def test_domain_system_info_migrations_are_shape_driven() -> None:
    assert system_info_migrate_os({"general": {"os_name": "macOS"}}) == {"general": {"os_name": "macOS"}}
    assert system_info_migrate_os({"name": "Ubuntu"})["general"]["os_name"] == "Ubuntu"
    assert system_info_migrate_memory({"total_gb": 8.0, "used_gb": 2.0, "free_gb": 6.0})["used_memory_percentage"] == 25.0

    terabyte_device = system_info_migrate_storage_device(
        {"name": "D:", "total_size": 2.0, "used_size": 1.0, "available_size": 1.0, "unit": "TB"}
    )

    assert terabyte_device["total_space_gb"] == 2048.0
    assert terabyte_device["used_percentage"] == 50.0


def test_domain_system_info_formatters_return_none_for_missing_values() -> None:
    assert system_info_format_gigabytes(None) is None
    assert system_info_format_gigabytes("12") is None
    assert system_info_format_gigabytes(2048.0) == "2.00 TB"
    assert system_info_format_frequency(0) is None
    assert system_info_format_uptime(-5) is None
    assert system_info_format_uptime(7260) == "2h 1m"
