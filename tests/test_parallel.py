import os
import sys

import numpy as np
import pytest

from parasimp import check_multicore_status, print_multicore_info, simpson, simpson_weights
from parasimp.constants import DEFAULT_MAX_WORKERS
from parasimp.multicore_init import setup_multicore
from parasimp.parallel import (
    chunk_weighted_sum,
    chunk_weights,
    combine,
    partition,
    resolve_workers,
    weighted_sum,
    weighted_sum_jax,
)


def _samples(n: int = 100_001, seed: int = 1):
    rng = np.random.default_rng(seed)
    x = np.linspace(0.0, 5.0, n)
    y = rng.normal(size=n)
    return x, y


def test_partition_covers_range():
    assert partition(10, 4) == [(0, 4), (4, 8), (8, 10)]
    assert partition(3, 10) == [(0, 3)]
    assert partition(0, 4) == []


def test_partition_rejects_bad_chunk_size():
    with pytest.raises(ValueError):
        partition(10, 0)


@pytest.mark.parametrize("n,chunk_size", [(1, 1), (9, 2), (9, 3), (101, 7), (11, 64)])
def test_chunk_weights_concatenate_to_full_weights(n, chunk_size):
    pieces = [chunk_weights(start, stop, n) for start, stop in partition(n, chunk_size)]
    np.testing.assert_array_equal(np.concatenate(pieces), simpson_weights(n))


def test_chunk_weighted_sum_uses_global_indices():
    y = np.ones(5)
    # indices 2..4 of a 5-point grid: weights 2, 4, 1
    assert chunk_weighted_sum(y, 2, 5, 5) == 7.0


def test_combine_in_order():
    assert combine([1.0, 2.0, 3.5]) == 6.5
    assert combine([]) == 0.0


def test_resolve_workers_auto():
    expected = min(os.cpu_count() or 1, DEFAULT_MAX_WORKERS)
    assert resolve_workers(None) == expected


def test_resolve_workers_invalid_falls_back():
    with pytest.warns(UserWarning, match="Invalid worker count"):
        assert resolve_workers(0) == 1


def test_resolve_workers_oversubscribed_warns():
    too_many = (os.cpu_count() or 1) + 1
    with pytest.warns(UserWarning, match="Performance may be suboptimal"):
        assert resolve_workers(too_many) == too_many


def test_weighted_sum_matches_dot_product():
    x, y = _samples(10_001)
    expected = float(np.dot(simpson_weights(y.size), y))
    actual = weighted_sum(y, workers=2, chunk_size=1000)
    assert actual == pytest.approx(expected, rel=1e-12, abs=1e-9)


def test_worker_count_does_not_change_result():
    """Fixed chunking makes the reduction bitwise independent of thread count."""
    x, y = _samples()
    results = {simpson(y, x, workers=w, chunk_size=4096) for w in (1, 2, 3)}
    assert len(results) == 1


def test_chunking_agrees_with_single_chunk():
    x, y = _samples()
    single = simpson(y, x, chunk_size=y.size)
    chunked = simpson(y, x, workers=2, chunk_size=1024)
    assert chunked == pytest.approx(single, rel=1e-10, abs=1e-10)


def test_large_sine_parallel():
    x = np.arange(1_000_001, dtype=np.float64)
    y = np.sin(x)
    serial = simpson(y, x, workers=1)
    parallel = simpson(y, x, workers=2, chunk_size=10_000)
    assert parallel == pytest.approx(serial, abs=1e-9)
    assert np.floor(parallel) == 0.0


class TestJaxBackend:
    """Device-sharded reduction."""

    def test_identity_basic(self):
        y = [0.0, 1.0, 2.0, 3.0, 4.0]
        assert simpson(y, y, backend="jax") == 8.0

    def test_matches_numpy_backend(self):
        x = np.linspace(0.0, 1.0, 1001)
        y = np.cos(3.0 * x)
        expected = simpson(y, x)
        assert simpson(y, x, backend="jax") == pytest.approx(expected, rel=1e-4)

    def test_constant_function(self):
        x = np.linspace(1.0, 3.0, 101)
        y = np.full_like(x, 2.0)
        assert simpson(y, x, backend="jax") == pytest.approx(4.0, rel=1e-6)

    def test_weighted_sum_jax(self):
        y = np.ones(9)
        # 1 + 4*4 + 2*3 + 1
        assert weighted_sum_jax(y) == pytest.approx(24.0)

    def test_float32_warning_without_x64(self):
        import jax

        if jax.config.read("jax_enable_x64"):
            pytest.skip("x64 already enabled in this session")
        with pytest.warns(UserWarning, match="float32"):
            simpson([0.0, 1.0, 2.0], [0.0, 1.0, 2.0], backend="jax")

    def test_x64_enabled_is_silent_and_exact(self):
        import warnings

        import jax

        x = np.linspace(0.0, 1.0, 1001)
        y = np.cos(3.0 * x)
        previous = jax.config.read("jax_enable_x64")
        jax.config.update("jax_enable_x64", True)
        try:
            with warnings.catch_warnings():
                warnings.filterwarnings("error", message=".*float32")
                value = simpson(y, x, backend="jax")
        finally:
            jax.config.update("jax_enable_x64", previous)
        assert value == pytest.approx(simpson(y, x), rel=1e-12)

    def test_validation_still_applies(self):
        with pytest.raises(ValueError):
            simpson([0.0, 1.0], [0.0, 1.0], backend="jax")


def test_check_multicore_status():
    status = check_multicore_status()
    assert status['system_cores'] == os.cpu_count()
    assert status['default_workers'] >= 1
    assert status['jax_available']
    assert status['num_devices'] >= 1
    assert len(status['devices']) == status['num_devices']


def test_print_multicore_info(capsys):
    print_multicore_info()
    out = capsys.readouterr().out
    assert "Parallel Configuration Status" in out
    assert "System CPU cores" in out


@pytest.fixture
def fresh_xla_env(monkeypatch):
    """Unset XLA_FLAGS and hide JAX from sys.modules, restoring both afterwards."""
    monkeypatch.setenv("XLA_FLAGS", "")
    monkeypatch.delenv("XLA_FLAGS")
    monkeypatch.delitem(sys.modules, "jax", raising=False)
    return monkeypatch


class TestSetupMulticore:
    """XLA host device configuration."""

    def test_sets_xla_flags_before_jax_import(self, fresh_xla_env):
        assert setup_multicore(3, verbose=False)
        assert os.environ["XLA_FLAGS"] == "--xla_force_host_platform_device_count=3"

    def test_single_core_leaves_flags(self, fresh_xla_env):
        assert setup_multicore(1, verbose=False)
        assert "XLA_FLAGS" not in os.environ

    def test_verbose_output(self, fresh_xla_env, capsys):
        setup_multicore(2)
        assert "2 CPU devices" in capsys.readouterr().out

    def test_warns_after_jax_import(self, monkeypatch):
        import jax  # noqa: F401

        monkeypatch.setenv("XLA_FLAGS", "")
        monkeypatch.delenv("XLA_FLAGS")
        with pytest.warns(UserWarning, match="already imported"):
            assert not setup_multicore(4, verbose=False)
        assert "XLA_FLAGS" not in os.environ
