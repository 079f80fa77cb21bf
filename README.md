# coretune

`coretune` inspects a Linux machine with a hybrid CPU, one that has performance (P), efficient (E) and low-power (LP) cores. It reports the machine's configuration and times a few performance techniques. It also writes a shell script that applies the recommended kernel settings.

## What it reports

- **System audit** (`coretune.system_tuner`): reads these settings from `/sys` and `/proc`:
  - CPU governor
  - Intel P-state minimum performance
  - swappiness
  - transparent hugepages
  - dirty and dirty-background ratios
  - NUMA balancing
  - energy-aware scheduling

  Each value is compared with a recommended one. A file that cannot be read shows as `N/A`. The table ends with a score such as `Score: 3/8 optimized`.
- **Power limits** (`coretune.power_tuning`): reads the RAPL PL1 (sustained) and PL2 (boost) limits from `/sys/class/powercap/intel-rapl:0` and converts them from microwatts to watts.
- **Core topology** (`coretune.thread_pinning`): sorts CPUs by `cpuinfo_max_freq` into three types:
  - P-cores at 4 GHz or more
  - E-cores at 3 GHz or more
  - LP-cores below 3 GHz

  It builds thread pools whose workers are pinned to P-cores or to E-cores. A benchmark times the same NumPy workload on an unpinned pool, a P-core pool and an E-core pool.
- **Vector math** (`coretune.simd_vectorization`): computes element-wise `a * b + 1.5` and a dot product, once as a plain Python loop and once vectorised with NumPy in single precision, and compares the timings. It also lists which of a fixed set of instruction-set flags appear in `/proc/cpuinfo`, such as `avx2`, `avx_vnni`, `fma` and `sha_ni`.
- **Memory** (`coretune.memory`): has two buffer types. Both are zero-initialised float32 buffers and are context managers:
  - `PinnedBuffer` is locked into RAM when the system allows it.
  - `HugePageBuffer` is rounded up to whole 2 MB pages and advised for transparent hugepages.

  This module also times writes to a plain buffer, a pinned buffer and a hugepage buffer, and prints the relevant lines of `/proc/meminfo` and the swappiness.
- **Compute devices** (`coretune.compute_offload`): checks for the integrated GPU (PCI `0000:00:02.0`) and the NPU (PCI `0000:00:0b.0`). It inspects `LD_LIBRARY_PATH` to report whether an OpenVINO runtime seems to be loaded, has a mismatched API, or is unavailable.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Usage

```
coretune
```

The command prints every report, runs the benchmarks and writes `optimize.sh` to the current directory. It takes these options:

- `-o PATH`, `--output PATH`: write the script somewhere other than `optimize.sh`.
- `--no-benchmarks`: only report the configuration and skip the timings.

The thread-pinning benchmark runs only when a core topology was found. The command exits with status 1 if the script cannot be written.

Read the generated script before you run it. It needs root, because it changes kernel parameters:

```
sudo bash optimize.sh
```

Then run `coretune` again to see how the audit score and the timings changed.

## Library use

```python
from coretune import system_tuner, power_tuning, thread_pinning, simd_vectorization

for tunable in system_tuner.audit_system("/"):
    print(tunable.name, tunable.current, tunable.is_optimized())

limits = power_tuning.read_power_limits("/sys/class/powercap/intel-rapl:0")
print(power_tuning.format_power_limits(limits))

cores = thread_pinning.detect_core_topology("/sys/devices/system/cpu")
print(thread_pinning.format_topology(cores))

print(simd_vectorization.simd_dot_product([1.0] * 16, [2.0] * 16))  # 32.0
```

Other entry points:

- `system_tuner.generate_optimization_script()` returns the tuning script as a string.
- `memory.read_memory_config()` returns the meminfo lines and the swappiness.
- `compute_offload.detect_devices(root, environ)` returns a `DeviceReport`.

Most readers and detectors take a root path or a file path, so you can point them at a copy of `/sys` or `/proc`.

## What it does not do

- `coretune` does not run AI inference, and it does not load an inference runtime. The compute-device report only looks at sysfs and the library path.
- It does not create GPU compute buffers and it does not dispatch work to the GPU.
- It never applies the tuning itself. It only writes the script, and you run that script yourself.