#!/usr/bin/env python3
"""
parasimp multi-core initialisation for the JAX backend.

Must be called before JAX is imported anywhere in the process: XLA reads
the host device count only once. The NumPy backend does not need it.
"""

import os
import sys
import warnings
from typing import Union

from .constants import DEFAULT_MAX_WORKERS, DEFAULT_NUM_CPU_DEVICES


def setup_multicore(cpu_cores: Union[int, str] = 'auto', verbose: bool = True) -> bool:
    """
    Expose ``cpu_cores`` host devices to JAX so ``backend='jax'`` shards across them.

    Parameters
    ----------
    cpu_cores : int or 'auto'
        Number of CPU devices, ``'auto'`` to detect (capped at
        ``DEFAULT_MAX_WORKERS``).
    verbose : bool
        Print the resulting configuration.

    Returns
    -------
    bool
        Whether the environment was configured.

    Examples
    --------
    >>> from parasimp.multicore_init import setup_multicore
    >>> setup_multicore(4)  # before any JAX import
    >>> from parasimp import simpson
    >>> simpson(y, x, backend="jax")
    """
    if 'jax' in sys.modules:
        warnings.warn(
            "JAX is already imported; setup_multicore() has no effect on the "
            "device count of this process.",
            UserWarning
        )
        return False

    if cpu_cores == 'auto':
        system_cores = os.cpu_count()
        num_cores = min(system_cores, DEFAULT_MAX_WORKERS) if system_cores else DEFAULT_NUM_CPU_DEVICES
    else:
        try:
            num_cores = int(cpu_cores)
        except (TypeError, ValueError):
            warnings.warn(f"Invalid cpu_cores {cpu_cores!r}, using 1", UserWarning)
            num_cores = 1

    if num_cores < 1:
        num_cores = 1

    if num_cores > 1:
        os.environ['XLA_FLAGS'] = f'--xla_force_host_platform_device_count={num_cores}'
        if verbose:
            print(f"🚀 parasimp multi-core: {num_cores} CPU devices")
            print(f"✅ XLA_FLAGS = {os.environ['XLA_FLAGS']}")
    elif verbose:
        print("🔧 parasimp single-device mode")

    return True


# Convenience alias
enable_multicore = setup_multicore
