#!/usr/bin/env python3
"""
Configuration Constants for parasimp

Centralizes all configuration constants to eliminate hardcoding.
"""

# ========== Reduction Defaults ==========

# Samples per partial sum. Chunk boundaries depend only on this value,
# so results do not change with the number of workers.
DEFAULT_CHUNK_SIZE = 65_536

# Upper bound for auto-detected worker threads
DEFAULT_MAX_WORKERS = 8

# ========== Backends ==========

DEFAULT_BACKEND = "numpy"
SUPPORTED_BACKENDS = ("numpy", "jax")

# ========== Simpson Coefficients ==========

ENDPOINT_WEIGHT = 1.0
EVEN_WEIGHT = 2.0
ODD_WEIGHT = 4.0

# ========== Numerical Tolerances ==========

# Strict spacing check:
#   |dx - h| <= SPACING_ATOL + SPACING_RTOL * |h| + SPACING_ULPS * ulp(max |x|)
# The ulp term absorbs rounding of the abscissae themselves on offset grids.
SPACING_RTOL = 1e-9
SPACING_ATOL = 1e-12
SPACING_ULPS = 8

# ========== Function Integration ==========

# Default number of sub-intervals when sampling a callable
DEFAULT_NUM_INTERVALS = 512

# ========== Multi-core Setup ==========

# JAX host devices to request when the CPU count cannot be detected
DEFAULT_NUM_CPU_DEVICES = 4
