"""Error taxonomy and result container for Simpson integration.

Validation failures are ordinary ``ValueError`` subclasses so that the
raising API (:func:`parasimp.simpson`) composes with existing numerical
code, while :func:`parasimp.integrate` hands them back inside an
:class:`IntegrationResult` instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class SimpsonError(ValueError):
    """Base class for sample-set validation failures."""

    kind = "simpson"


class LengthMismatchError(SimpsonError):
    """``x`` and ``y`` do not have the same number of samples."""

    kind = "length_mismatch"

    def __init__(self, len_x: int, len_y: int):
        super().__init__(
            f"x and y must be of equal length (got len(x)={len_x}, len(y)={len_y})"
        )
        self.len_x = len_x
        self.len_y = len_y


class EvenLengthError(SimpsonError):
    """Sample count is even, so the sub-intervals cannot be paired."""

    kind = "even_length"

    def __init__(self, n: int):
        super().__init__(
            f"The length of x and y must be an odd number (got {n}); "
            "Simpson's rule needs an even number of sub-intervals"
        )
        self.n = n


class DimensionError(SimpsonError):
    """Samples are not one-dimensional."""

    kind = "dimension"

    def __init__(self, name: str, ndim: int):
        super().__init__(f"{name} must be one-dimensional (got ndim={ndim})")
        self.name = name
        self.ndim = ndim


class NonUniformSpacingError(SimpsonError):
    """Raised by the strict spacing check when ``x`` is not a uniform ascending grid."""

    kind = "non_uniform_spacing"

    def __init__(self, index: int, step: float, expected: float):
        super().__init__(
            f"x is not uniformly spaced: x[{index + 1}] - x[{index}] = {float(step)!r}, "
            f"expected {float(expected)!r}"
        )
        self.index = index
        self.step = float(step)
        self.expected = float(expected)


@dataclass(frozen=True)
class IntegrationResult:
    """
    Outcome of :func:`parasimp.integrate`.

    Exactly one of ``value`` and ``error`` is set.

    Examples
    --------
    >>> from parasimp import integrate
    >>> result = integrate([0.0, 1.0, 2.0], [0.0, 1.0, 2.0])
    >>> result.ok
    True
    >>> result.unwrap()
    2.0
    """

    value: Optional[float] = None
    error: Optional[SimpsonError] = None

    def __post_init__(self):
        if (self.value is None) == (self.error is None):
            raise ValueError("IntegrationResult needs exactly one of value or error")

    @classmethod
    def success(cls, value: float) -> "IntegrationResult":
        return cls(value=float(value))

    @classmethod
    def failure(cls, error: SimpsonError) -> "IntegrationResult":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[str]:
        """Error kind, or ``None`` on success."""
        return None if self.error is None else self.error.kind

    def unwrap(self) -> float:
        """Return the integral or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.value

    def unwrap_or(self, default: float) -> float:
        return default if self.error is not None else self.value

    def __bool__(self) -> bool:
        return self.ok
