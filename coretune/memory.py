"""Page-locked and hugepage-backed float buffers, plus memory benchmarks."""

from __future__ import annotations

import errno
import mmap
import platform
import sys
import time
from pathlib import Path

import numpy as np

MEMINFO_PATH = "/proc/meminfo"
SWAPPINESS_PATH = "/proc/sys/vm/swappiness"
HUGEPAGE_SIZE = 2 * 1024 * 1024

_FLOAT_BYTES = np.dtype(np.float32).itemsize
_MB = 1024 * 1024
_MEMINFO_KEYS = (
    "MemTotal",
    "MemAvailable",
    "SwapTotal",
    "HugePages_Total",
    "Hugepagesize",
    "AnonHugePages",
)
_NONSTANDARD_MAP_ARCHES = ("mips", "ppc", "powerpc", "sparc", "alpha", "parisc")


def _map_locked_flag() -> int:
    if not sys.platform.startswith("linux"):
        return 0
    flag = getattr(mmap, "MAP_LOCKED", None)
    if flag is not None:
        return flag
    if platform.machine().lower().startswith(_NONSTANDARD_MAP_ARCHES):
        return 0
    return 0x2000


_MAP_LOCKED = _map_locked_flag()


def _anonymous_map(size: int, *, lock: bool) -> mmap.mmap:
    """Map `size` bytes of private anonymous memory, optionally locked into RAM."""
    if not hasattr(mmap, "MAP_ANONYMOUS"):
        if lock:
            raise OSError(errno.ENOTSUP, "memory locking is not supported here")
        return mmap.mmap(-1, size)
    flags = mmap.MAP_PRIVATE | mmap.MAP_ANONYMOUS
    if lock:
        if not _MAP_LOCKED:
            raise OSError(errno.ENOTSUP, "memory locking is not supported here")
        flags |= _MAP_LOCKED
    return mmap.mmap(-1, size, flags=flags, prot=mmap.PROT_READ | mmap.PROT_WRITE)


def _advise_hugepages(mapping: mmap.mmap) -> bool:
    advice = getattr(mmap, "MADV_HUGEPAGE", None)
    if advice is None:
        return False
    try:
        mapping.madvise(advice)
    except OSError:
        return False
    return True


class _Storage:
    """A float32 array living in an anonymous memory mapping (or plain memory)."""

    def __init__(self, mapping: mmap.mmap | None, length: int) -> None:
        self._mapping = mapping
        self.closed = False
        if mapping is None:
            self._data = np.zeros(length, dtype=np.float32)
        else:
            self._data = np.frombuffer(mapping, dtype=np.float32, count=length)

    @property
    def data(self) -> np.ndarray:
        if self.closed:
            raise ValueError("buffer is closed")
        return self._data

    def release(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._data = np.zeros(0, dtype=np.float32)
        mapping, self._mapping = self._mapping, None
        if mapping is None:
            return
        try:
            mapping.close()
        except BufferError:
            # Views are still exported; the mapping goes away with the last one.
            pass


class PinnedBuffer:
    """Zero-initialised float32 buffer locked into physical RAM when possible."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("buffer size must not be negative")
        byte_size = size * _FLOAT_BYTES
        mapping = None
        locked = True
        if byte_size:
            try:
                mapping = _anonymous_map(byte_size, lock=True)
            except OSError as exc:
                locked = False
                print(
                    f"  ✗ mlock failed (errno {exc.errno}). "
                    "Current ulimit -l: check with `ulimit -l`",
                    file=sys.stderr,
                )
                mapping = _anonymous_map(byte_size, lock=False)
        if locked:
            print(f"  ✓ Pinned {byte_size // _MB} MB into physical RAM")
        self._storage = _Storage(mapping, size)
        self._length = size
        self._locked = locked

    @property
    def data(self) -> np.ndarray:
        """Writable float32 view of the buffer."""
        return self._storage.data

    @property
    def is_locked(self) -> bool:
        """True when the memory is locked into physical RAM."""
        return self._locked

    def close(self) -> None:
        """Release the memory; the buffer cannot be used afterwards."""
        self._storage.release()

    def __len__(self) -> int:
        return self._length

    def __enter__(self) -> PinnedBuffer:
        return self

    def __exit__(self, *args) -> None:
        self.close()


class HugePageBuffer:
    """Zero-initialised float32 buffer backed by transparent hugepages.

    The mapping is rounded up to a whole number of 2 MB pages.
    """

    def __init__(self, num_floats: int) -> None:
        if num_floats < 0:
            raise ValueError("buffer size must not be negative")
        byte_size = num_floats * _FLOAT_BYTES
        aligned_size = -(-byte_size // HUGEPAGE_SIZE) * HUGEPAGE_SIZE
        if aligned_size == 0:
            raise ValueError("mmap failed for hugepage buffer: empty size")
        try:
            mapping = _anonymous_map(aligned_size, lock=True)
            locked = True
        except OSError:
            mapping = _anonymous_map(aligned_size, lock=False)
            locked = False

        if _advise_hugepages(mapping):
            print(f"  ✓ Hugepage hint accepted for {aligned_size // _MB} MB")
        else:
            print("  ⚠ Hugepage hint failed, using standard pages")
        if locked:
            print("  ✓ Hugepage buffer locked into RAM")

        self.mapped_bytes = aligned_size
        self._storage = _Storage(mapping, num_floats)
        self._length = num_floats
        self._locked = locked

    @property
    def data(self) -> np.ndarray:
        """Writable float32 view of the buffer."""
        return self._storage.data

    @property
    def is_locked(self) -> bool:
        """True when the memory is locked into physical RAM."""
        return self._locked

    def close(self) -> None:
        """Release the mapping; the buffer cannot be used afterwards."""
        self._storage.release()

    def __len__(self) -> int:
        return self._length

    def __enter__(self) -> HugePageBuffer:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def _fill_timed_ms(target: np.ndarray, index: np.ndarray, iterations: int) -> int:
    start = time.perf_counter()
    for iteration in range(iterations):
        np.sqrt(index + np.float32(iteration), out=target)
    return int((time.perf_counter() - start) * 1000)


def benchmark_memory(size: int = 4 * 1024 * 1024, iterations: int = 20) -> dict[str, object]:
    """Time repeated writes to plain, pinned and hugepage buffers and print a table."""
    index = np.arange(size, dtype=np.float32)

    unpinned = np.zeros(size, dtype=np.float32)
    unpinned_ms = _fill_timed_ms(unpinned, index, iterations)

    with PinnedBuffer(size) as pinned:
        pinned_ms = _fill_timed_ms(pinned.data, index, iterations)
        locked = pinned.is_locked

    with HugePageBuffer(size) as huge:
        huge_ms = _fill_timed_ms(huge.data, index, iterations)

    megabytes = size * _FLOAT_BYTES // _MB
    lines = [
        "",
        "┌─────────────────────────────────────────────────┐",
        f"│    MEMORY BENCHMARK ({megabytes} MB, {iterations} iterations)      │",
        "├─────────────────────────────────────────────────┤",
        f"│ Unpinned (Vec):     {unpinned_ms:>6} ms                   │",
        f"│ Pinned (mlock):     {pinned_ms:>6} ms  locked={str(locked).lower()}       │",
        f"│ Hugepage (2MB THP): {huge_ms:>6} ms                   │",
        "└─────────────────────────────────────────────────┘",
    ]
    print("\n".join(lines))
    return {
        "unpinned_ms": unpinned_ms,
        "pinned_ms": pinned_ms,
        "hugepage_ms": huge_ms,
        "locked": locked,
    }


def _read_text(path: str | Path) -> str | None:
    try:
        return Path(path).read_text()
    except (OSError, UnicodeDecodeError):
        return None


def read_memory_config(
    meminfo_path: str | Path = MEMINFO_PATH,
    swappiness_path: str | Path = SWAPPINESS_PATH,
) -> tuple[list[str], str | None]:
    """Return the relevant meminfo lines and the swappiness value (None if unreadable)."""
    meminfo = _read_text(meminfo_path)
    lines = []
    if meminfo is not None:
        lines = [line.strip() for line in meminfo.splitlines() if line.startswith(_MEMINFO_KEYS)]
    swappiness = _read_text(swappiness_path)
    return lines, None if swappiness is None else swappiness.strip()


def print_memory_config(
    meminfo_path: str | Path = MEMINFO_PATH,
    swappiness_path: str | Path = SWAPPINESS_PATH,
) -> tuple[list[str], str | None]:
    """Print the memory configuration table and return what was read."""
    lines, swappiness = read_memory_config(meminfo_path, swappiness_path)
    out = [
        "┌─────────────────────────────────────────────────┐",
        "│          SYSTEM MEMORY CONFIGURATION            │",
        "├─────────────────────────────────────────────────┤",
    ]
    out += [f"│  {line:<46} │" for line in lines]
    if swappiness is not None:
        out.append(f"│  Swappiness: {swappiness:<34} │")
    out.append("└─────────────────────────────────────────────────┘")
    print("\n".join(out))
    return lines, swappiness