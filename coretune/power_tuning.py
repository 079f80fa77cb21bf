"""Reading of RAPL power limits (PL1/PL2) from the powercap interface."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

RAPL_PATH = "/sys/class/powercap/intel-rapl:0"
_MICROWATTS_PER_WATT = 1_000_000.0


@dataclass(frozen=True)
class PowerLimits:
    """Sustained (PL1) and boost (PL2) power limits in watts."""

    pl1_watts: float
    pl2_watts: float


def _read_microwatts(path: Path) -> float | None:
    try:
        return float(path.read_text().strip())
    except (OSError, UnicodeDecodeError, ValueError):
        return None


def read_power_limits(base_path: str | Path = RAPL_PATH) -> PowerLimits | None:
    """Return the RAPL limits, or None when the interface is missing or unreadable."""
    base = Path(base_path)
    if not base.exists():
        return None
    pl1 = _read_microwatts(base / "constraint_0_power_limit_uw")
    if pl1 is None:
        return None
    pl2 = _read_microwatts(base / "constraint_1_power_limit_uw")
    if pl2 is None:
        return None
    return PowerLimits(
        pl1_watts=pl1 / _MICROWATTS_PER_WATT,
        pl2_watts=pl2 / _MICROWATTS_PER_WATT,
    )


def format_power_limits(limits: PowerLimits | None) -> str:
    """Render the limits (or their absence) as a boxed table."""
    lines = [
        "┌─────────────────────────────────────────────────┐",
        "│          HARDWARE POWER LIMITS (RAPL)           │",
        "├─────────────────────────────────────────────────┤",
    ]
    if limits is None:
        lines.append("│  ✗ RAPL interface not accessible or missing.    │")
    else:
        lines += [
            f"│  PL1 (Sustained Power): {limits.pl1_watts:>6.1f} W              │",
            f"│  PL2 (Boost Power):     {limits.pl2_watts:>6.1f} W              │",
            "│                                                 │",
            "│  * If PL1 is much lower than PL2, the chip      │",
            "│    will throttle heavily during long workloads. │",
        ]
    lines.append("└─────────────────────────────────────────────────┘")
    return "\n".join(lines)


def print_power_limits(base_path: str | Path = RAPL_PATH) -> PowerLimits | None:
    """Read, print and return the power limits."""
    limits = read_power_limits(base_path)
    print(format_power_limits(limits))
    return limits