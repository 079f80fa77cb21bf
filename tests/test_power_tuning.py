from coretune.power_tuning import (
    PowerLimits,
    format_power_limits,
    print_power_limits,
    read_power_limits,
)


def _rapl(tmp_path, pl1, pl2):
    base = tmp_path / "intel-rapl:0"
    base.mkdir()
    if pl1 is not None:
        (base / "constraint_0_power_limit_uw").write_text(pl1)
    if pl2 is not None:
        (base / "constraint_1_power_limit_uw").write_text(pl2)
    return base


def test_missing_interface_returns_none(tmp_path):
    assert read_power_limits(tmp_path / "absent") is None


def test_reads_limits_in_watts(tmp_path):
    base = _rapl(tmp_path, "28000000\n", "64000000\n")
    limits = read_power_limits(base)
    assert limits.pl1_watts * 1_000_000 == 28000000
    assert limits.pl2_watts * 1_000_000 == 64000000
    assert limits.pl1_watts < limits.pl2_watts


def test_unparseable_value_returns_none(tmp_path):
    base = _rapl(tmp_path, "garbage\n", "64000000\n")
    assert read_power_limits(base) is None


def test_missing_pl2_returns_none(tmp_path):
    base = _rapl(tmp_path, "28000000\n", None)
    assert read_power_limits(base) is None


def test_format_without_limits():
    text = format_power_limits(None)
    assert "RAPL interface not accessible or missing." in text
    assert "PL1" not in text


def test_format_with_limits():
    text = format_power_limits(PowerLimits(pl1_watts=28.0, pl2_watts=64.0))
    assert "PL1 (Sustained Power):   28.0 W" in text
    assert "PL2 (Boost Power):       64.0 W" in text
    assert "will throttle heavily during long workloads." in text


def test_print_power_limits(tmp_path, capsys):
    base = _rapl(tmp_path, "28000000", "64000000")
    limits = print_power_limits(base)
    out = capsys.readouterr().out
    assert out.strip() == format_power_limits(limits)
    assert "HARDWARE POWER LIMITS (RAPL)" in out