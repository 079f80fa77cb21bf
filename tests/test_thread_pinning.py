import os

import pytest

from coretune.thread_pinning import (
    CoreType,
    DetectedCore,
    build_p_core_pool,
    build_pinned_pool,
    classify_frequency,
    detect_core_topology,
    format_topology,
    get_cpu_ids_for,
)


def _add_cpu(root, name, freq=None):
    cpu_dir = root / name
    cpu_dir.mkdir()
    if freq is not None:
        (cpu_dir / "cpufreq").mkdir()
        (cpu_dir / "cpufreq" / "cpuinfo_max_freq").write_text(f"{freq}\n")


@pytest.fixture
def cpu_root(tmp_path):
    _add_cpu(tmp_path, "cpu0", 4_500_000)
    _add_cpu(tmp_path, "cpu1", 4_500_000)
    _add_cpu(tmp_path, "cpu10", 2_500_000)
    _add_cpu(tmp_path, "cpu2", 3_600_000)
    _add_cpu(tmp_path, "cpu3", 3_600_000)
    _add_cpu(tmp_path, "cpu4")  # no cpufreq: skipped
    _add_cpu(tmp_path, "cpu5", "garbage")
    _add_cpu(tmp_path, "cpufreq")
    _add_cpu(tmp_path, "cpuidle")
    (tmp_path / "online").write_text("0-10\n")
    return tmp_path


@pytest.mark.parametrize(
    "freq, expected",
    [
        (4_000_000, CoreType.P_CORES),
        (4_500_000, CoreType.P_CORES),
        (3_999_999, CoreType.E_CORES),
        (3_000_000, CoreType.E_CORES),
        (2_999_999, CoreType.LP_CORES),
        (0, CoreType.LP_CORES),
    ],
)
def test_classify_frequency(freq, expected):
    assert classify_frequency(freq) is expected


def test_detect_sorted_numerically(cpu_root):
    cores = detect_core_topology(cpu_root)
    assert [c.cpu_id for c in cores] == [0, 1, 2, 3, 5, 10]


def test_detect_classifies_and_parses(cpu_root):
    cores = {c.cpu_id: c for c in detect_core_topology(cpu_root)}
    assert cores[0] == DetectedCore(0, 4_500_000, CoreType.P_CORES)
    assert cores[2].core_type is CoreType.E_CORES
    assert cores[10].core_type is CoreType.LP_CORES
    assert cores[5].max_freq_khz == 0
    assert cores[5].core_type is CoreType.LP_CORES


def test_detect_missing_root_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        detect_core_topology(tmp_path / "absent")


def test_get_cpu_ids_for(cpu_root):
    cores = detect_core_topology(cpu_root)
    assert get_cpu_ids_for(cores, CoreType.P_CORES) == [0, 1]
    assert get_cpu_ids_for(cores, CoreType.E_CORES) == [2, 3]
    assert get_cpu_ids_for(cores, CoreType.LP_CORES) == [5, 10]


def test_ids_partition_all_cores(cpu_root):
    cores = detect_core_topology(cpu_root)
    ids = sorted(cpu for kind in CoreType for cpu in get_cpu_ids_for(cores, kind))
    assert ids == [c.cpu_id for c in cores]


def test_format_topology(cpu_root):
    text = format_topology(detect_core_topology(cpu_root))
    assert "│ P-Cores  (High-Perf): [0, 1]" in text
    assert "│ E-Cores  (Efficient): [2, 3]" in text
    assert "│ LP-Cores (Low-Power): [5, 10]" in text
    assert "│ Total threads: 6" in text


def test_pinned_pool_runs_tasks():
    with build_pinned_pool([], "Test") as pool:
        assert list(pool.map(lambda x: x * 3, range(4))) == [0, 3, 6, 9]


def test_pinned_pool_pins_worker(capsys):
    cpu = min(os.sched_getaffinity(0))
    with build_pinned_pool([cpu], "Test") as pool:
        mask = pool.submit(os.sched_getaffinity, 0).result()
    assert mask == {cpu}
    out = capsys.readouterr().out
    assert "Building Test pool with 1 threads" in out
    assert f"Worker 0 → Test CPU {cpu}" in out


def test_pinned_pool_does_not_pin_caller():
    before = os.sched_getaffinity(0)
    cpu = min(before)
    with build_pinned_pool([cpu], "Test") as pool:
        worker_mask = pool.submit(os.sched_getaffinity, 0).result()
    assert worker_mask == {cpu}
    assert os.sched_getaffinity(0) == before


def test_p_core_pool_size_message(cpu_root, capsys):
    with build_p_core_pool(cpu_root) as pool:
        assert sum(pool.map(abs, [-1, -2, -3])) == 6
    assert "Building P-Core pool with 2 threads" in capsys.readouterr().out