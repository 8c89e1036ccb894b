#!/usr/bin/env python3
"""
Basic parasimp Example
======================

Demonstrates the integration workflow on tabulated samples:
1. Integrating measured samples and handling validation failures
2. Comparing thread-pool and JAX reductions on a large grid
3. Integrating a callable on linear and logarithmic grids
"""

import time

import numpy as np

from parasimp import integrate, integrate_function, integrate_logspace, simpson
from parasimp import print_multicore_info


def mock_velocity_samples(n_points: int = 2001, seed: int = 42) -> tuple:
    """Noisy velocity readings v(t) = 3 t^2 on t ∈ [0, 2]."""
    rng = np.random.default_rng(seed)
    t = np.linspace(0.0, 2.0, n_points)
    v = 3.0 * t**2 + rng.normal(scale=0.05, size=n_points)
    return t, v


def main():
    print_multicore_info()

    # Distance travelled from velocity samples (exact answer 8.0)
    t, v = mock_velocity_samples()
    result = integrate(v, t)
    if result.ok:
        print(f"Distance travelled: {result.value:.4f} (exact 8.0)")

    # An even sample count cannot be paired into parabolic segments
    result = integrate(v[:-1], t[:-1])
    if not result.ok:
        print(f"Rejected ({result.kind}): {result.error}")

    # Large oscillatory grid
    x = np.arange(1_000_001, dtype=np.float64)
    y = np.sin(x)
    for backend in ("numpy", "jax"):
        start = time.time()
        value = simpson(y, x, backend=backend)
        print(f"∫ sin(x) dx over [0, 1e6] [{backend}]: {value:.6f} "
              f"({time.time() - start:.3f}s, exact {1.0 - np.cos(1e6):.6f})")

    # Callables
    print(f"∫ sin(x) dx over [0, π]: {integrate_function(np.sin, 0.0, np.pi):.10f}")
    print(f"∫ k^-2 dk over [0.01, 100]: {integrate_logspace(lambda k: k**-2, 1e-2, 1e2):.6f}")


if __name__ == "__main__":
    main()
