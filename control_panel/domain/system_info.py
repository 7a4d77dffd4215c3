"""System-info schema migration and overview projection.

The backend has shipped several incompatible shapes for the same telemetry.
Each section is detected by key presence and migrated to one canonical shape
(the nested, GB-based generation) before any display value is derived:

* OS: flat `{name, version, kernel_version, hostname, uptime}` becomes
  `{general: {os_name, os_version, kernel_version, hostname, uptime}}`.
* CPU: `physical_cores`/`logical_cores` become `*_core_count`.
* GPU: `memory_total_mb`/`memory_used_mb` become GB values.
* Memory: `{total_mb, used_mb, free_mb}` and `{total_gb, used_gb, free_gb}`
  become `{total_memory_gb, used_memory_gb, available_memory_gb, used_memory_percentage}`.
* Storage: `{total_gb, ...}` and `{total_size, ..., unit}` devices become
  `{total_space_gb, used_space_gb, available_space_gb, used_percentage}`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Final

from .envelope import UnwrapFailure, envelope_resolve_section
from .models import FieldDisplay
from .severity import CriticalFieldSet, severity_classify


MB_PER_GB: Final[float] = 1024.0
GB_PER_TB: Final[float] = 1024.0

GPU_DEVICE_TYPE_LABELS: Final[dict[str, str]] = {
    "DiscreteGpu": "Primary Graphics Card",
    "IntegratedGpu": "Integrated Graphics",
    "VirtualGpu": "Virtual Graphics",
    "Cpu": "CPU Graphics",
}

GPU_BACKEND_LABELS: Final[dict[str, str]] = {
    "Vulkan": "Vulkan",
    "Dx12": "DirectX 12",
    "Dx11": "DirectX 11",
    "Metal": "Metal",
    "Gl": "OpenGL",
    "BrowserWebGpu": "WebGPU",
}


@dataclass(frozen=True)
class OverviewRow:
    """One labelled display row.

    Attributes:
        label: Row label.
        field_id: Field identifier used for severity classification.
        display: Resolved display value.
    """

    label: str
    field_id: str
    display: FieldDisplay

    def to_payload(self) -> dict[str, object]:
        return {"label": self.label, "field_id": self.field_id, **self.display.to_payload()}


@dataclass(frozen=True)
class OverviewSection:
    """One titled group of rows, or a section-level error.

    Attributes:
        title: Section title.
        rows: Display rows; empty when the section failed.
        error: Human-readable backend error message, when the section failed.
    """

    title: str
    rows: tuple[OverviewRow, ...] = field(default_factory=tuple)
    error: str | None = None

    def to_payload(self) -> dict[str, object]:
        return {"title": self.title, "rows": [row.to_payload() for row in self.rows], "error": self.error}


@dataclass(frozen=True)
class SystemOverview:
    """Full display model for the system overview page."""

    sections: tuple[OverviewSection, ...]

    def to_payload(self) -> dict[str, object]:
        return {"sections": [section.to_payload() for section in self.sections]}


def system_info_migrate_os(section: Mapping[str, Any]) -> dict[str, Any]:
    """Return OS section in canonical nested shape."""

    general = section.get("general")
    if isinstance(general, Mapping):
        return {"general": dict(general)}
    return {
        "general": {
            "os_name": section.get("name"),
            "os_version": section.get("version"),
            "kernel_version": section.get("kernel_version"),
            "architecture": section.get("architecture"),
            "hostname": section.get("hostname"),
            "uptime": section.get("uptime"),
        }
    }


def system_info_migrate_cpu(section: Mapping[str, Any]) -> dict[str, Any]:
    """Return CPU section in canonical shape."""

    return {
        "brand": section.get("brand"),
        "vendor_id": section.get("vendor_id"),
        "frequency": section.get("frequency"),
        "physical_core_count": _first_present(section, "physical_core_count", "physical_cores"),
        "logical_core_count": _first_present(section, "logical_core_count", "logical_cores"),
    }


def system_info_migrate_gpu(device: Mapping[str, Any]) -> dict[str, Any]:
    """Return one GPU device in canonical shape."""

    memory_total_gb = device.get("memory_total_gb")
    if memory_total_gb is None and device.get("memory_total_mb") is not None:
        memory_total_gb = _to_float(device.get("memory_total_mb"), divisor=MB_PER_GB)
    return {
        "name": device.get("name"),
        "vendor_id": device.get("vendor_id"),
        "device_type": device.get("device_type"),
        "backend": device.get("backend"),
        "driver_info": device.get("driver_info"),
        "memory_total_gb": memory_total_gb,
    }


def system_info_migrate_memory(section: Mapping[str, Any]) -> dict[str, Any]:
    """Return memory section in canonical GB shape.

    Args:
        section: Memory section in any known shape.

    Returns:
        dict[str, Any]: Canonical memory section; percentage derived when absent.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if "total_memory_gb" in section:
        migrated = {
            "total_memory_gb": section.get("total_memory_gb"),
            "used_memory_gb": section.get("used_memory_gb"),
            "available_memory_gb": section.get("available_memory_gb"),
            "used_memory_percentage": section.get("used_memory_percentage"),
        }
    elif "total_mb" in section:
        migrated = {
            "total_memory_gb": _to_float(section.get("total_mb"), divisor=MB_PER_GB),
            "used_memory_gb": _to_float(section.get("used_mb"), divisor=MB_PER_GB),
            "available_memory_gb": _to_float(section.get("free_mb"), divisor=MB_PER_GB),
            "used_memory_percentage": None,
        }
    else:
        migrated = {
            "total_memory_gb": section.get("total_gb"),
            "used_memory_gb": section.get("used_gb"),
            "available_memory_gb": section.get("free_gb"),
            "used_memory_percentage": None,
        }

    if migrated["used_memory_percentage"] is None:
        migrated["used_memory_percentage"] = _percentage(migrated["used_memory_gb"], migrated["total_memory_gb"])
    return migrated


def system_info_migrate_storage_device(device: Mapping[str, Any]) -> dict[str, Any]:
    """Return one storage device in canonical GB shape."""

    if "total_space_gb" in device:
        total, used, available = (
            device.get("total_space_gb"),
            device.get("used_space_gb"),
            device.get("available_space_gb"),
        )
    elif "total_size" in device:
        multiplier = GB_PER_TB if str(device.get("unit", "GB")).upper() == "TB" else 1.0
        total, used, available = (
            _to_float(device.get(key), multiplier=multiplier)
            for key in ("total_size", "used_size", "available_size")
        )
    else:
        total, used, available = device.get("total_gb"), device.get("used_gb"), device.get("available_gb")

    used_percentage = device.get("used_percentage")
    if used_percentage is None:
        used_percentage = _percentage(used, total)
    return {
        "name": device.get("name"),
        "mount_point": device.get("mount_point"),
        "file_system": device.get("file_system"),
        "total_space_gb": total,
        "used_space_gb": used,
        "available_space_gb": available,
        "used_percentage": used_percentage,
    }


def system_info_format_gigabytes(value: Any) -> str | None:
    number = _to_float(value)
    if number is None:
        return None
    if number >= GB_PER_TB:
        return f"{number / GB_PER_TB:.2f} TB"
    return f"{number:.1f} GB"


def system_info_format_percentage(value: Any) -> str | None:
    number = _to_float(value)
    return None if number is None else f"{number:.1f}%"


def system_info_format_frequency(value: Any) -> str | None:
    """Format a MHz frequency as GHz text."""

    number = _to_float(value)
    if number is None or number <= 0:
        return None
    return f"{number / 1000:.2f} GHz"


def system_info_format_uptime(value: Any) -> str | None:
    """Format uptime seconds as `Xd Yh Zm`.

    Args:
        value: Uptime in seconds.

    Returns:
        str | None: Formatted uptime, or None when value is missing or invalid.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    number = _to_float(value)
    if number is None or number < 0:
        return None
    total_minutes = int(number) // 60
    days, remainder_minutes = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(remainder_minutes, 60)
    if days:
        return f"{days}d {hours}h {minutes}m"
    if hours:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def system_info_format_gpu_backend(value: Any) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return ", ".join(GPU_BACKEND_LABELS.get(part, part) for part in value.split(", "))


_RowSpec = tuple[str, str, str, Callable[[Any], Any] | None]

_OS_ROWS: Final[tuple[_RowSpec, ...]] = (
    ("Operating System", "os_name", "os_name", None),
    ("Version", "os_version", "os_version", None),
    ("Kernel", "kernel_version", "kernel_version", None),
    ("Architecture", "architecture", "architecture", None),
    ("Hostname", "hostname", "hostname", None),
    ("Uptime", "uptime", "uptime", system_info_format_uptime),
)
_CPU_ROWS: Final[tuple[_RowSpec, ...]] = (
    ("Brand", "brand", "brand", None),
    ("Vendor ID", "vendor_id", "vendor_id", None),
    ("Frequency", "frequency", "frequency", system_info_format_frequency),
    ("Physical Cores", "physical_core_count", "physical_core_count", None),
    ("Logical Cores", "logical_core_count", "logical_core_count", None),
)
_GPU_ROWS: Final[tuple[_RowSpec, ...]] = (
    ("Name", "gpu_name", "name", None),
    ("Vendor ID", "gpu_vendor_id", "vendor_id", None),
    ("Backend", "backend", "backend", system_info_format_gpu_backend),
    ("Driver", "driver_info", "driver_info", None),
    ("Memory", "gpu_memory_total_gb", "memory_total_gb", system_info_format_gigabytes),
)
_MEMORY_ROWS: Final[tuple[_RowSpec, ...]] = (
    ("Total", "total_memory_gb", "total_memory_gb", system_info_format_gigabytes),
    ("Used", "used_memory_gb", "used_memory_gb", system_info_format_gigabytes),
    ("Available", "available_memory_gb", "available_memory_gb", system_info_format_gigabytes),
    ("Usage", "used_memory_percentage", "used_memory_percentage", system_info_format_percentage),
)
_STORAGE_ROWS: Final[tuple[_RowSpec, ...]] = (
    ("Mount Point", "mount_point", "mount_point", None),
    ("File System", "file_system", "file_system", None),
    ("Total", "total_space_gb", "total_space_gb", system_info_format_gigabytes),
    ("Used", "used_space_gb", "used_space_gb", system_info_format_gigabytes),
    ("Available", "available_space_gb", "available_space_gb", system_info_format_gigabytes),
    ("Usage", "storage_used_percentage", "used_percentage", system_info_format_percentage),
)


def system_info_build_overview(system_info: Any, critical_fields: CriticalFieldSet) -> SystemOverview:
    """Build the display model for one `get_system_info` response.

    Every section is unwrapped, migrated to the canonical shape and run
    through the severity classifier. A failed section becomes a
    section-level error message; a malformed top-level response yields
    sections whose rows are all `Unavailable`.

    Args:
        system_info: Raw `get_system_info` response.
        critical_fields: Injected critical-field registry.

    Returns:
        SystemOverview: Display model with one section per OS, CPU, memory,
        each GPU, and each storage device.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    root = system_info if isinstance(system_info, Mapping) else {}
    sections: list[OverviewSection] = []

    os_section = _section_resolve(root.get("os"), "Operating System")
    if isinstance(os_section, OverviewSection):
        sections.append(os_section)
    else:
        general = system_info_migrate_os(os_section)["general"]
        sections.append(_section_build("Operating System", general, _OS_ROWS, critical_fields))

    cpu_section = _section_resolve(root.get("cpu"), "CPU")
    if isinstance(cpu_section, OverviewSection):
        sections.append(cpu_section)
    else:
        sections.append(_section_build("CPU", system_info_migrate_cpu(cpu_section), _CPU_ROWS, critical_fields))

    sections.extend(_section_build_gpus(root.get("gpu"), critical_fields))

    memory_section = _section_resolve(root.get("memory"), "Memory")
    if isinstance(memory_section, OverviewSection):
        sections.append(memory_section)
    else:
        sections.append(
            _section_build("Memory", system_info_migrate_memory(memory_section), _MEMORY_ROWS, critical_fields)
        )

    sections.extend(_section_build_storage(root.get("storage"), critical_fields))
    return SystemOverview(sections=tuple(sections))


def _section_build_gpus(raw_value: Any, critical_fields: CriticalFieldSet) -> list[OverviewSection]:
    resolved = _section_resolve_any(raw_value, "GPU")
    if isinstance(resolved, OverviewSection):
        return [resolved]
    devices = [device for device in resolved if isinstance(device, Mapping)] if isinstance(resolved, list) else []
    if not devices:
        return [_section_build("GPU", {}, _GPU_ROWS, critical_fields)]

    sections = []
    for index, device in enumerate(devices):
        canonical = system_info_migrate_gpu(device)
        title = GPU_DEVICE_TYPE_LABELS.get(str(canonical.get("device_type")), f"GPU {index + 1}")
        sections.append(_section_build(title, canonical, _GPU_ROWS, critical_fields))
    return sections


def _section_build_storage(raw_value: Any, critical_fields: CriticalFieldSet) -> list[OverviewSection]:
    resolved = _section_resolve(raw_value, "Storage")
    if isinstance(resolved, OverviewSection):
        return [resolved]
    raw_devices = resolved.get("devices")
    devices = [device for device in raw_devices if isinstance(device, Mapping)] if isinstance(raw_devices, list) else []
    if not devices:
        return [OverviewSection(title="Storage", error="No storage devices reported.")]

    sections = []
    for index, device in enumerate(devices):
        canonical = system_info_migrate_storage_device(device)
        name = canonical.get("name")
        title = f"Storage: {name}" if isinstance(name, str) and name.strip() else f"Storage {index + 1}"
        sections.append(_section_build(title, canonical, _STORAGE_ROWS, critical_fields))
    return sections


def _section_resolve_any(raw_value: Any, title: str) -> Any:
    resolved = envelope_resolve_section(raw_value)
    if isinstance(resolved, UnwrapFailure):
        return OverviewSection(title=title, error=resolved.error.message)
    return resolved.value


def _section_resolve(raw_value: Any, title: str) -> Mapping[str, Any] | OverviewSection:
    resolved = _section_resolve_any(raw_value, title)
    if isinstance(resolved, OverviewSection):
        return resolved
    return resolved if isinstance(resolved, Mapping) else {}


def _section_build(
    title: str,
    values: Mapping[str, Any],
    row_specs: tuple[_RowSpec, ...],
    critical_fields: CriticalFieldSet,
) -> OverviewSection:
    rows = []
    for label, field_id, key, formatter in row_specs:
        value = values.get(key)
        if formatter is not None:
            value = formatter(value)
        rows.append(OverviewRow(label=label, field_id=field_id, display=severity_classify(value, field_id, critical_fields)))
    return OverviewSection(title=title, rows=tuple(rows))


def _first_present(section: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if section.get(key) is not None:
            return section[key]
    return None


def _to_float(value: Any, divisor: float = 1.0, multiplier: float = 1.0) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) * multiplier / divisor


def _percentage(part: Any, whole: Any) -> float | None:
    part_number = _to_float(part)
    whole_number = _to_float(whole)
    if part_number is None or whole_number is None or whole_number <= 0:
        return None
    return part_number / whole_number * 100.0
