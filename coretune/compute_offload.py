"""Detection of GPU, NPU and OpenVINO runtime availability."""

from __future__ import annotations

import enum
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

GPU_DEVICE_PATH = "/sys/bus/pci/devices/0000:00:02.0/device"
NPU_DEVICE_PATH = "/sys/bus/pci/devices/0000:00:0b.0"
_LEGACY_RUNTIME_PREFIX = "libinference_engine_c_api"


class OpenVinoStatus(enum.Enum):
    """State of the OpenVINO runtime on this machine."""

    LOADED = "loaded"
    API_MISMATCH = "api_mismatch"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class DeviceReport:
    """Which compute engines and runtimes were found."""

    gpu_detected: bool
    npu_detected: bool
    openvino: OpenVinoStatus


def _under_root(root: str | Path | None, path: str) -> Path:
    if root is None:
        return Path(path)
    return Path(root) / path.lstrip("/")


def _gpu_present(path: Path) -> bool:
    try:
        return bool(path.read_bytes().decode())
    except (OSError, UnicodeDecodeError):
        return False


def _legacy_runtime_present(library_dirs: list[str]) -> bool:
    for directory in library_dirs:
        try:
            entries = list(Path(directory).iterdir())
        except OSError:
            continue
        if any(entry.name.startswith(_LEGACY_RUNTIME_PREFIX) for entry in entries):
            return True
    return False


def _openvino_status(environ: Mapping[str, str]) -> OpenVinoStatus:
    library_path = environ.get("LD_LIBRARY_PATH", "")
    dirs = [d for d in library_path.split(os.pathsep) if d]
    if _legacy_runtime_present(dirs):
        return OpenVinoStatus.LOADED
    if "openvino" in library_path:
        return OpenVinoStatus.API_MISMATCH
    return OpenVinoStatus.UNAVAILABLE


def detect_devices(
    root: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> DeviceReport:
    """Probe sysfs (under `root`) and the library path in `environ`."""
    env = os.environ if environ is None else environ
    return DeviceReport(
        gpu_detected=_gpu_present(_under_root(root, GPU_DEVICE_PATH)),
        npu_detected=_under_root(root, NPU_DEVICE_PATH).exists(),
        openvino=_openvino_status(env),
    )


def _install_help() -> list[str]:
    return [
        "    Install: download the OpenVINO runtime archive for your platform",
        "    Then:  export LD_LIBRARY_PATH=/path/to/openvino/runtime/lib/intel64",
    ]


def format_device_report(report: DeviceReport) -> str:
    """Render the device report as printable text."""
    lines = ["[Compute] Available compute hardware:"]
    if report.gpu_detected:
        lines.append("  ✓ Intel Arc Graphics (Meteor Lake-P) detected")
    else:
        lines.append("  ✗ Intel Arc GPU not detected")
    if report.npu_detected:
        lines.append("  ✓ Intel AI Boost NPU detected")
    else:
        lines.append("  ✗ Intel NPU not detected")

    if report.openvino is OpenVinoStatus.LOADED:
        lines.append("  ✓ OpenVINO runtime loaded successfully")
    elif report.openvino is OpenVinoStatus.API_MISMATCH:
        lines += [
            "  ⚠ OpenVINO library found but API version mismatch",
            "    The runtime on the library path exports only the 2.0 API,",
            "    not the legacy Inference Engine C API.",
            "    → Fix: install a runtime with the legacy C API,",
            "      or use OpenVINO via its Python/C++ bindings directly.",
        ]
    else:
        lines.append("  ✗ OpenVINO runtime not available")
        lines += _install_help()

    lines += [
        "",
        "[Compute] Direct GPU compute via wgpu (Layer 3) is available without OpenVINO.",
        "[Compute] For AI inference, use OpenVINO Python or C++ bindings.",
    ]
    return "\n".join(lines)


def list_available_devices(
    root: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> DeviceReport:
    """Detect, print and return the available compute devices."""
    report = detect_devices(root, environ)
    print(format_device_report(report))
    return report