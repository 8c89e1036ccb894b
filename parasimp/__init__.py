"""
parasimp: parallel composite Simpson integration of sampled data.

Integrates tabulated ``(x, y)`` samples with the composite Simpson 1/3
rule, reducing the weighted sum over contiguous index chunks on a thread
pool (NumPy) or across JAX host devices.
"""

__version__ = "0.1.0"

from .errors import (
    DimensionError,
    EvenLengthError,
    IntegrationResult,
    LengthMismatchError,
    NonUniformSpacingError,
    SimpsonError,
)
from .integration import (
    integrate,
    integrate_function,
    integrate_logspace,
    simpson,
    simpson_weights,
)
from .parallel import check_multicore_status, print_multicore_info

__all__ = [
    "integrate",
    "simpson",
    "simpson_weights",
    "integrate_function",
    "integrate_logspace",
    "IntegrationResult",
    "SimpsonError",
    "LengthMismatchError",
    "EvenLengthError",
    "DimensionError",
    "NonUniformSpacingError",
    "check_multicore_status",
    "print_multicore_info",
]
