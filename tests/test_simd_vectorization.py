import numpy as np
import pytest

from coretune.simd_vectorization import (
    INTERESTING_FLAGS,
    benchmark_simd,
    detect_cpu_features,
    print_cpu_features,
    scalar_math,
    simd_dot_product,
    simd_math,
)


def test_simd_correctness():
    a = [2.0] * 24
    b = [3.0] * 24
    scalar_r = scalar_math(a, b)
    simd_r = simd_math(a, b)
    assert len(scalar_r) == 24
    assert np.all(np.abs(scalar_r - simd_r) < 1e-6)


def test_dot_product():
    a = [1.0] * 16
    b = [2.0] * 16
    assert abs(simd_dot_product(a, b) - 32.0) < 1e-4


@pytest.mark.parametrize("length", [0, 1, 7, 8, 11, 100])
def test_simd_matches_scalar_with_tail(length):
    rng = np.random.default_rng(length)
    a = rng.random(length, dtype=np.float32)
    b = rng.random(length, dtype=np.float32)
    assert np.allclose(simd_math(a, b), scalar_math(a, b), atol=1e-6)


@pytest.mark.parametrize("length", [0, 3, 8, 19, 257])
def test_dot_matches_numpy(length):
    rng = np.random.default_rng(length)
    a = rng.random(length, dtype=np.float32)
    b = rng.random(length, dtype=np.float32)
    expected = float(np.dot(a.astype(np.float64), b.astype(np.float64)))
    assert simd_dot_product(a, b) == pytest.approx(expected, rel=1e-5, abs=1e-6)


def test_simd_math_length_mismatch():
    with pytest.raises(ValueError):
        simd_math([1.0, 2.0], [1.0])


def test_scalar_math_length_mismatch():
    with pytest.raises(ValueError):
        scalar_math([1.0, 2.0], [1.0])


def test_dot_second_shorter():
    with pytest.raises(ValueError):
        simd_dot_product([1.0, 2.0, 3.0], [1.0])


def test_simd_math_dtype():
    assert simd_math([1.0], [1.0]).dtype == np.float32


def test_detect_cpu_features():
    features = detect_cpu_features("flags\t: fpu sse4_2 avx2 fma popcnt\n")
    assert list(features) == list(INTERESTING_FLAGS)
    assert features["avx2"] and features["fma"] and features["sse4_2"]
    assert not features["sha_ni"]
    assert not features["gfni"]


def test_print_cpu_features_missing_file(tmp_path, capsys):
    features = print_cpu_features(tmp_path / "cpuinfo")
    assert not any(features.values())
    assert "✗ avx2" in capsys.readouterr().out


def test_print_cpu_features_reads_file(tmp_path, capsys):
    path = tmp_path / "cpuinfo"
    path.write_text("flags : aes vaes f16c\n")
    features = print_cpu_features(path)
    assert features["aes"] and features["vaes"] and features["f16c"]
    assert "✓ vaes" in capsys.readouterr().out


def test_benchmark_simd_small(capsys):
    result = benchmark_simd(200)
    assert result["max_error"] < 1e-3
    assert result["dot_simd"] == pytest.approx(result["dot_scalar"], rel=1e-4)
    assert "SIMD BENCHMARK" in capsys.readouterr().out