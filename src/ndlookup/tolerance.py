"""Approximate-equality policy for floating-point comparisons on table axes.

Two reals ``a`` and ``b`` are considered approximately equal when

    |a - b| <= max(|a|, |b|) * eps * APPROX_EQUAL_FACTOR

where ``eps`` is the float64 machine epsilon. The binary search used to
resolve query coordinates and the inverse linear interpolation both rely on
this exact rule.
"""

from typing import Final, TypedDict

import numpy as np
from numpy import typing as npt

APPROX_EQUAL_FACTOR: Final[float] = 5.0

_TABLE_DTYPE: Final = np.float64


def get_machine_epsilon() -> float:
    """Machine epsilon of float64, the precision table axes and values are stored in."""
    return float(np.finfo(_TABLE_DTYPE).eps)


def get_approx_equal_tolerance(a: float, b: float) -> float:
    """Get the absolute tolerance under which ``a`` and ``b`` compare equal.

    The tolerance is relative: it scales with the larger of the two magnitudes.
    Two zeros therefore only match exactly.

    Args:
        a (float): First value.
        b (float): Second value.

    Returns:
        float: Absolute tolerance ``max(|a|, |b|) * eps * APPROX_EQUAL_FACTOR``.
    """
    return max(abs(a), abs(b)) * get_machine_epsilon() * APPROX_EQUAL_FACTOR


def is_approx_equal(a: float, b: float) -> bool:
    """Check whether two values are approximately equal.

    Args:
        a (float): First value.
        b (float): Second value.

    Returns:
        bool: True if ``|a - b|`` does not exceed the tolerance returned by
        ``get_approx_equal_tolerance(a, b)``.

    Example:
        >>> is_approx_equal(1.0, 1.0 + 2.0**-52)
        True
        >>> is_approx_equal(1.0, 1.0 + 1e-12)
        False
    """
    return abs(a - b) <= get_approx_equal_tolerance(a, b)


class ToleranceInfo(TypedDict):
    """A TypedDict holding the numeric policy applied to table axes."""

    dtype: npt.DTypeLike
    machine_epsilon: float
    approx_equal_factor: float
    relative_tolerance: float
    precision_decimals: int
    resolution: float


def get_tolerance_info() -> ToleranceInfo:
    """Get the approximate-equality policy applied to table axes.

    Returns:
        ToleranceInfo: Dictionary containing the float64 machine epsilon, the
            approximate equality factor, the resulting relative tolerance and
            precision data.
    """
    finfo = np.finfo(_TABLE_DTYPE)
    eps = float(finfo.eps)

    return {
        "dtype": _TABLE_DTYPE,
        "machine_epsilon": eps,
        "approx_equal_factor": APPROX_EQUAL_FACTOR,
        "relative_tolerance": eps * APPROX_EQUAL_FACTOR,
        "precision_decimals": finfo.precision,
        "resolution": float(finfo.resolution),
    }
