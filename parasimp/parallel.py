#!/usr/bin/env python3
"""
Parallel Reduction Utilities for parasimp

Fork-join evaluation of the Simpson-weighted sum. The index range is cut
into contiguous chunks, each chunk's weighted partial sum is computed
independently, and the partials are combined in index order.

Two backends are provided:

- ``numpy``: a thread pool over chunks (NumPy releases the GIL inside its
  array kernels, so threads overlap on large inputs).
- ``jax``: the samples are sharded across the JAX host devices and reduced
  with ``jax.pmap`` (``jax.jit`` when only one device is present).
"""

import os
import warnings
from concurrent.futures import ThreadPoolExecutor
from functools import lru_cache
from typing import List, Optional, Tuple

import numpy as np

from .constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_WORKERS,
    ENDPOINT_WEIGHT,
    EVEN_WEIGHT,
    ODD_WEIGHT,
)


# =============================================================================
# Partitioning
# =============================================================================

def partition(n: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> List[Tuple[int, int]]:
    """
    Split ``[0, n)`` into contiguous half-open ranges of at most ``chunk_size``.

    The boundaries depend only on ``n`` and ``chunk_size``, never on the
    number of workers, which keeps the reduction order fixed.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    return [(start, min(start + chunk_size, n)) for start in range(0, n, chunk_size)]


def chunk_weights(start: int, stop: int, n: int) -> np.ndarray:
    """Simpson coefficients for the global indices ``start..stop-1`` of an ``n``-point grid."""
    idx = np.arange(start, stop)
    weights = np.where(idx % 2 == 1, ODD_WEIGHT, EVEN_WEIGHT)
    if stop > start:
        if start == 0:
            weights[0] = ENDPOINT_WEIGHT
        if stop == n:
            weights[-1] = ENDPOINT_WEIGHT
    return weights


def chunk_weighted_sum(y: np.ndarray, start: int, stop: int, n: int) -> float:
    """Weighted partial sum of ``y[start:stop]``."""
    return float(np.sum(chunk_weights(start, stop, n) * y[start:stop]))


def combine(partials) -> float:
    """Reduce partial sums in the order given."""
    total = 0.0
    for value in partials:
        total += value
    return total


# =============================================================================
# Worker configuration
# =============================================================================

def resolve_workers(workers: Optional[int] = None) -> int:
    """
    Number of worker threads to use.

    Parameters
    ----------
    workers : int, optional
        Requested thread count. ``None`` auto-detects
        ``min(os.cpu_count(), DEFAULT_MAX_WORKERS)``.

    Returns
    -------
    int
        A thread count of at least 1.
    """
    system_cores = os.cpu_count()
    if workers is None:
        return min(system_cores, DEFAULT_MAX_WORKERS) if system_cores else 1

    workers = int(workers)
    if workers < 1:
        warnings.warn(f"Invalid worker count {workers}, using 1", UserWarning)
        return 1

    if system_cores and workers > system_cores:
        warnings.warn(
            f"Requested {workers} workers but system only has {system_cores} cores. "
            f"Performance may be suboptimal.",
            UserWarning
        )
    return workers


# =============================================================================
# NumPy backend
# =============================================================================

def weighted_sum(
    y: np.ndarray,
    *,
    workers: Optional[int] = None,
    chunk_size: Optional[int] = None
) -> float:
    """
    Simpson-weighted sum of ``y`` computed as a thread-pool map-reduce.

    Repeated calls return bit-identical results regardless of ``workers``
    because chunking and reduction order are fixed by ``chunk_size``.
    """
    n = y.size
    bounds = partition(n, DEFAULT_CHUNK_SIZE if chunk_size is None else chunk_size)
    num_workers = min(resolve_workers(workers), max(len(bounds), 1))

    if num_workers == 1:
        partials = [chunk_weighted_sum(y, start, stop, n) for start, stop in bounds]
    else:
        with ThreadPoolExecutor(max_workers=num_workers) as pool:
            partials = list(pool.map(lambda b: chunk_weighted_sum(y, b[0], b[1], n), bounds))

    return combine(partials)


# =============================================================================
# JAX backend
# =============================================================================

@lru_cache(maxsize=None)
def _jax_reducer(sharded: bool):
    """Compiled per-shard reducer, built once JAX is first needed."""
    import jax
    import jax.numpy as jnp

    def shard_sum(weights, values):
        return jnp.sum(weights * values)

    if sharded:
        return jax.pmap(shard_sum)
    return jax.jit(jax.vmap(shard_sum))


def _jax_dtype():
    import jax.numpy as jnp
    from jax import config as jax_config

    if bool(jax_config.read("jax_enable_x64")):
        return jnp.float64
    warnings.warn(
        "jax_enable_x64 is off; the JAX backend sums in float32. "
        "Set jax.config.update(\"jax_enable_x64\", True) for float64 results.",
        UserWarning
    )
    return jnp.float32


def weighted_sum_jax(y: np.ndarray) -> float:
    """
    Simpson-weighted sum of ``y`` sharded across the local JAX devices.

    Computation precision follows ``jax_enable_x64``; with x64 disabled the
    per-device sums are float32 and a ``UserWarning`` is issued.
    """
    import jax
    import jax.numpy as jnp

    n = y.size
    num_devices = jax.local_device_count()
    per_device = -(-n // num_devices)
    pad = per_device * num_devices - n

    # zero-weighted padding leaves the sum unchanged
    weights = np.pad(chunk_weights(0, n, n), (0, pad)).reshape(num_devices, per_device)
    values = np.pad(y, (0, pad)).reshape(num_devices, per_device)

    dtype = _jax_dtype()
    reducer = _jax_reducer(num_devices > 1)
    partials = reducer(jnp.asarray(weights, dtype=dtype), jnp.asarray(values, dtype=dtype))

    return combine(float(p) for p in np.asarray(partials))


# =============================================================================
# Status reporting
# =============================================================================

def check_multicore_status() -> dict:
    """
    Check current parallel configuration status.

    Returns
    -------
    dict
        CPU count, default thread workers and JAX device information.
    """
    status = {
        'system_cores': os.cpu_count(),
        'default_workers': resolve_workers(None),
        'chunk_size': DEFAULT_CHUNK_SIZE,
        'jax_available': False,
        'num_devices': 1,
        'devices': [],
        'x64_enabled': False,
        'multicore_enabled': False
    }

    try:
        import jax
        from jax import config as jax_config
    except ImportError:
        return status

    status['jax_available'] = True
    status['num_devices'] = jax.local_device_count()
    status['devices'] = [str(d) for d in jax.devices()]
    status['x64_enabled'] = bool(jax_config.read("jax_enable_x64"))
    status['multicore_enabled'] = status['num_devices'] > 1
    return status


def print_multicore_info():
    """Print detailed parallel configuration information."""
    status = check_multicore_status()

    print("🖥️  Parallel Configuration Status")
    print("=" * 50)
    print(f"System CPU cores: {status['system_cores']}")
    print(f"Default thread workers: {status['default_workers']}")
    print(f"Chunk size: {status['chunk_size']}")
    print(f"JAX available: {status['jax_available']}")

    if status['jax_available']:
        print(f"JAX devices: {status['num_devices']}")
        print(f"Device list: {status['devices']}")
        print(f"64-bit precision: {status['x64_enabled']}")

        if status['multicore_enabled']:
            print("✅ JAX backend shards across multiple devices")
        else:
            print("⚠️  JAX backend running on a single device")
            print("💡 To enable multi-device, call setup_multicore() before importing JAX")
    else:
        print("❌ JAX not available")

    print("=" * 50)
