"""Command that audits the machine, runs the benchmarks and writes a tuning script."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from coretune import (
    compute_offload,
    memory,
    power_tuning,
    simd_vectorization,
    system_tuner,
    thread_pinning,
)

_TOP = "╔══════════════════════════════════════════════════════════════╗"
_BOTTOM = "╚══════════════════════════════════════════════════════════════╝"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coretune",
        description="Audit, benchmark and tune a hybrid-core Intel laptop.",
    )
    parser.add_argument(
        "-o",
        "--output",
        default="optimize.sh",
        help="where to write the optimization script (default: optimize.sh)",
    )
    parser.add_argument(
        "--no-benchmarks",
        action="store_true",
        help="skip the timing benchmarks and only report the configuration",
    )
    return parser


def main(argv=None) -> int:
    """Run the full report; return the process exit status."""
    args = _build_parser().parse_args(argv)
    benchmarks = not args.no_benchmarks

    print()
    print(_TOP)
    print("║  Intel Core Ultra 5 125H — Live Performance Optimization   ║")
    print(_BOTTOM)
    print()

    print("━━━ System Audit ━━━")
    system_tuner.print_audit()
    print()

    power_tuning.print_power_limits()
    print()

    print("━━━ Layer 1: Core Topology & Thread Pinning ━━━")
    try:
        cores = thread_pinning.detect_core_topology()
    except OSError as exc:
        print(f"  ✗ Core topology unavailable: {exc}", file=sys.stderr)
        cores = []
    thread_pinning.print_topology(cores)
    print()
    if benchmarks and cores:
        thread_pinning.benchmark_pinning()
        print()

    print("━━━ Layer 2: ISA Detection & SIMD Vectorization ━━━")
    simd_vectorization.print_cpu_features()
    if benchmarks:
        simd_vectorization.benchmark_simd()
    print()

    print("━━━ Layer 3: Memory Architecture ━━━")
    memory.print_memory_config()
    if benchmarks:
        memory.benchmark_memory()
    print()

    print("━━━ Layer 4: Compute & AI Offloading ━━━")
    compute_offload.list_available_devices()
    print()

    print("━━━ Generating Optimization Script ━━━")
    script_path = Path(args.output)
    try:
        script_path.write_text(system_tuner.generate_optimization_script(), encoding="utf-8")
    except OSError as exc:
        print(f"  ✗ Failed to write {script_path}: {exc}", file=sys.stderr)
        return 1
    print(f"  ✓ Written to: {script_path}")
    print(f"  → Run with: sudo bash {script_path}")
    print("  → Then re-run this command to see the improvement.")
    print()

    print(_TOP)
    print("║  Done. Apply optimizations, then re-run to verify.         ║")
    print(_BOTTOM)
    return 0


if __name__ == "__main__":
    sys.exit(main())