import pytest

from coretune.cli import main
from coretune.system_tuner import generate_optimization_script


def test_writes_optimization_script(tmp_path, capsys):
    target = tmp_path / "optimize.sh"
    status = main(["--no-benchmarks", "--output", str(target)])
    assert status == 0
    assert target.read_text(encoding="utf-8") == generate_optimization_script()
    out = capsys.readouterr().out
    assert f"Written to: {target}" in out


def test_report_sections_in_order(tmp_path, capsys):
    main(["--no-benchmarks", "-o", str(tmp_path / "script.sh")])
    out = capsys.readouterr().out
    sections = [
        "━━━ System Audit ━━━",
        "HARDWARE POWER LIMITS (RAPL)",
        "━━━ Layer 1: Core Topology & Thread Pinning ━━━",
        "━━━ Layer 2: ISA Detection & SIMD Vectorization ━━━",
        "━━━ Layer 3: Memory Architecture ━━━",
        "━━━ Layer 4: Compute & AI Offloading ━━━",
        "━━━ Generating Optimization Script ━━━",
        "Done. Apply optimizations, then re-run to verify.",
    ]
    positions = [out.index(section) for section in sections]
    assert positions == sorted(positions)


def test_unwritable_output_fails(tmp_path, capsys):
    target = tmp_path / "missing" / "optimize.sh"
    status = main(["--no-benchmarks", "--output", str(target)])
    assert status == 1
    assert not target.exists()
    assert "Done." not in capsys.readouterr().out


def test_unknown_option_rejected():
    with pytest.raises(SystemExit) as excinfo:
        main(["--bogus"])
    assert excinfo.value.code == 2