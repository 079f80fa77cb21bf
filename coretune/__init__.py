"""Audit, probe and benchmark hybrid-core Linux machines, and generate a tuning script."""

__version__ = "0.1.0"
__all__ = [
    "cli",
    "compute_offload",
    "memory",
    "power_tuning",
    "simd_vectorization",
    "system_tuner",
    "thread_pinning",
]