"""Element-wise and dot-product kernels, benchmarks and ISA feature listing."""

from __future__ import annotations

import time
from collections.abc import Sequence
from pathlib import Path

import numpy as np

CPUINFO_PATH = "/proc/cpuinfo"
LANES = 8
_REPEATS = 5
_OFFSET = np.float32(1.5)

INTERESTING_FLAGS = (
    "avx2", "avx_vnni", "fma", "aes", "sha_ni", "sse4_2", "vaes",
    "vpclmulqdq", "gfni", "bmi2", "popcnt", "f16c",
)


def _as_f32(values: Sequence[float] | np.ndarray) -> np.ndarray:
    return np.asarray(values, dtype=np.float32)


def scalar_math(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> np.ndarray:
    """Element by element `a * b + 1.5`, one value at a time."""
    values = [x * y + 1.5 for x, y in zip(_as_f32(a).tolist(), _as_f32(b).tolist(), strict=True)]
    return np.array(values, dtype=np.float32)


def simd_math(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> np.ndarray:
    """Vectorised `a * b + 1.5` in single precision."""
    va, vb = _as_f32(a), _as_f32(b)
    if va.shape != vb.shape:
        raise ValueError("Input slices must be the same length")
    return va * vb + _OFFSET


def simd_dot_product(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    """Dot product accumulated in eight single-precision lanes plus a scalar tail."""
    va, vb = _as_f32(a), _as_f32(b)
    if len(vb) < len(va):
        raise ValueError("second vector is shorter than the first")
    vb = vb[: len(va)]
    body = (len(va) // LANES) * LANES
    lanes = (va[:body].reshape(-1, LANES) * vb[:body].reshape(-1, LANES)).sum(
        axis=0, dtype=np.float32
    )
    total = np.float32(lanes.sum(dtype=np.float32))
    for x, y in zip(va[body:], vb[body:]):
        total = np.float32(total + x * y)
    return float(total)


def _exp(value: float, precision: int) -> str:
    mantissa, exponent = f"{value:.{precision}e}".split("e")
    return f"{mantissa}e{int(exponent)}"


def _time_us(func, *args):
    result = None
    start = time.perf_counter()
    for _ in range(_REPEATS):
        result = func(*args)
    elapsed_us = int((time.perf_counter() - start) * 1_000_000) // _REPEATS
    return elapsed_us, result


def _scalar_dot(a: np.ndarray, b: np.ndarray) -> float:
    return sum(x * y for x, y in zip(a.tolist(), b.tolist()))


def benchmark_simd(size: int = 10_000_000) -> dict[str, float]:
    """Compare scalar and vectorised kernels, print a table and return the figures."""
    index = np.arange(size, dtype=np.float64)
    a = (index * 0.001).astype(np.float32)
    b = ((size - index) * 0.001).astype(np.float32)

    scalar_us, result_scalar = _time_us(scalar_math, a, b)
    simd_us, result_simd = _time_us(simd_math, a, b)
    dot_us, dot = _time_us(simd_dot_product, a, b)
    dot_scalar_us, dot_scalar = _time_us(_scalar_dot, a, b)

    diffs = np.abs(result_scalar - result_simd)
    max_diff = float(diffs.max()) if size else 0.0

    lines = [
        "┌─────────────────────────────────────────────────┐",
        "│       SIMD BENCHMARK (10M f32 elements)         │",
        "├─────────────────────────────────────────────────┤",
        "│ FMA (a*b + 1.5):                                │",
        f"│   Scalar:         {scalar_us:>8} µs                    │",
        f"│   AVX2 f32x8:     {simd_us:>8} µs                    │",
    ]
    if simd_us > 0:
        lines.append(f"│   Speedup:        {scalar_us / simd_us:>7.2f}x                     │")
    lines += [
        "│ Dot Product:                                    │",
        f"│   Scalar:         {dot_scalar_us:>8} µs                    │",
        f"│   AVX2 f32x8:     {dot_us:>8} µs                    │",
    ]
    if dot_us > 0:
        lines.append(f"│   Speedup:        {dot_scalar_us / dot_us:>7.2f}x                     │")
    lines += [
        "│ Correctness:                                    │",
        f"│   Max error:      {_exp(max_diff, 2)}                      │",
        f"│   Dot (SIMD):     {_exp(dot, 4)}                 │",
        f"│   Dot (scalar):   {_exp(dot_scalar, 4)}                 │",
        "└─────────────────────────────────────────────────┘",
    ]
    print("\n".join(lines))
    return {
        "scalar_us": scalar_us,
        "simd_us": simd_us,
        "dot_us": dot_us,
        "dot_scalar_us": dot_scalar_us,
        "max_error": max_diff,
        "dot_simd": dot,
        "dot_scalar": dot_scalar,
    }


def detect_cpu_features(cpuinfo: str) -> dict[str, bool]:
    """Map each interesting ISA flag to whether it occurs in the cpuinfo text."""
    return {flag: flag in cpuinfo for flag in INTERESTING_FLAGS}


def print_cpu_features(cpuinfo_path: str | Path = CPUINFO_PATH) -> dict[str, bool]:
    """Print and return the ISA extensions listed in cpuinfo."""
    try:
        cpuinfo = Path(cpuinfo_path).read_text()
    except (OSError, UnicodeDecodeError):
        cpuinfo = ""
    features = detect_cpu_features(cpuinfo)
    lines = [
        "┌─────────────────────────────────────────────────┐",
        "│      DETECTED INSTRUCTION SET EXTENSIONS        │",
        "├─────────────────────────────────────────────────┤",
    ]
    for flag, found in features.items():
        status = "✓" if found else "✗"
        lines.append(f"│  {status} {flag:<18}                           │")
    lines.append("└─────────────────────────────────────────────────┘")
    print("\n".join(lines))
    return features