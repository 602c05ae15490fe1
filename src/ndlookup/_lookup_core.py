"""Core Numba-compiled kernels for rectilinear lookup tables.

Tables are passed to the kernels in a flat, Numba-friendly layout:

- ``axis_data``: all axes concatenated into one float64 array.
- ``axis_offsets``: int64 array of length ``dim + 1``; axis ``i`` is
  ``axis_data[axis_offsets[i]:axis_offsets[i + 1]]``.
- ``axis_lengths``: int64 array with the length of every axis.
- ``values``: dependent data, axis 0 varying fastest.

Kernels never raise. They return an integer status (one of the ``_STATUS_*``
constants) together with the failing axis (or point) and the result, and
leave the translation into errors to ``_lookup_impl``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Final, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

from .tolerance import APPROX_EQUAL_FACTOR

F = TypeVar("F", bound=Callable[..., Any])

if TYPE_CHECKING:
    # During type-checking, make the decorator a no-op that preserves types.
    def nb_jit(*args: object, **kwargs: object) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            return func

        return decorator
else:
    # At runtime, use the real Numba decorator.
    nb_jit = nb.jit  # type: ignore[attr-defined]


_STATUS_OK: Final[int] = 0
_STATUS_OUT_OF_DOMAIN: Final[int] = 1
_STATUS_OUT_OF_BOUNDS: Final[int] = 2
_STATUS_INCONSISTENT: Final[int] = 3

_MACHINE_EPSILON: Final[float] = float(np.finfo(np.float64).eps)
_APPROX_EQUAL_SCALE: Final[float] = _MACHINE_EPSILON * APPROX_EQUAL_FACTOR


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _is_approx_equal_core(a: float, b: float) -> bool:
    """Check approximate equality with a tolerance relative to the larger magnitude.

    Args:
        a (float): First value.
        b (float): Second value.

    Returns:
        bool: True if ``|a - b| <= max(|a|, |b|) * eps * APPROX_EQUAL_FACTOR``.
    """
    return abs(a - b) <= max(abs(a), abs(b)) * _APPROX_EQUAL_SCALE


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _lerp_core(a: float, b: float, t: float) -> float:
    """Linear interpolation ``a + t * (b - a)``, without clamping ``t``."""
    return a + t * (b - a)


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _ilerp_core(a: float, b: float, value: float) -> float:
    """Inverse linear interpolation: fraction of the way ``value`` is from ``a`` to ``b``.

    Returns 0.0 when ``a`` and ``b`` are approximately equal.
    """
    if _is_approx_equal_core(a, b):
        return 0.0
    return (value - a) / (b - a)


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _flatten_indices_core(
    indices: npt.NDArray[np.int64],
    axis_lengths: npt.NDArray[np.int64],
    num_values: int,
) -> tuple[int, int, int]:
    """Map per-axis integer indices to an offset into the dependent data.

    The offset follows ``i0 + i1*n0 + i2*n0*n1 + ...``, i.e., axis 0 varies fastest.

    Args:
        indices (npt.NDArray[np.int64]): One index per axis.
        axis_lengths (npt.NDArray[np.int64]): Length of every axis.
        num_values (int): Size of the dependent data.

    Returns:
        tuple[int, int, int]: ``(status, axis, offset)``. On
        ``_STATUS_OUT_OF_BOUNDS``, ``axis`` is the first offending axis.
        ``_STATUS_INCONSISTENT`` flags an offset past the dependent data.

    Note:
        Inputs are assumed to have one entry per axis (no validation performed).
    """
    offset = 0
    stride = 1
    for i in range(axis_lengths.shape[0]):
        idx = indices[i]
        if idx < 0 or idx >= axis_lengths[i]:
            return _STATUS_OUT_OF_BOUNDS, i, -1
        offset += idx * stride
        stride *= axis_lengths[i]
    if offset >= num_values:
        return _STATUS_INCONSISTENT, -1, -1
    return _STATUS_OK, -1, offset


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _resolve_position_core(
    axis: npt.NDArray[np.float64],
    value: float,
) -> tuple[int, int, float]:
    """Find the grid interval containing ``value`` and the fraction across it.

    A binary search narrows the bracket ``[left, right)`` until it collapses or
    hits a grid point that is approximately equal to ``value``. For instance,
    with ``axis = [1.2, 3.4, 5.6, 7.8]`` and ``value = 4.3`` the result is
    ``low = 1`` and ``fraction = 0.40909...``.

    A value found at the last grid point is reported as ``low = n - 2`` with
    ``fraction = 1.0``, so that ``low + 1`` is always addressable (unless the
    axis has a single point).

    Args:
        axis (npt.NDArray[np.float64]): Strictly increasing axis.
        value (float): Query coordinate.

    Returns:
        tuple[int, int, float]: ``(status, low, fraction)``. ``status`` is
        ``_STATUS_OUT_OF_DOMAIN`` when ``value`` lies outside
        ``[axis[0], axis[-1]]`` (NaN included) or the axis is empty.
    """
    n = axis.shape[0]
    if n == 0 or not (axis[0] <= value and value <= axis[n - 1]):
        return _STATUS_OUT_OF_DOMAIN, 0, np.nan

    left = 0
    right = n
    mid = (left + right) // 2
    while left < mid and mid < right:
        if _is_approx_equal_core(value, axis[mid]):
            left = mid
            right = mid
            break
        if value < axis[mid]:
            right = mid
        else:
            left = mid
        mid = (left + right) // 2

    low = left
    if left == right or right == n:
        # Exact match. right == n only happens for single-point axes.
        fraction = 0.0
    else:
        fraction = _ilerp_core(axis[left], axis[right], value)

    if low > 0 and low == n - 1:
        low -= 1
        fraction += 1.0
    return _STATUS_OK, low, fraction


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _interpolate_core(
    axis_data: npt.NDArray[np.float64],
    axis_offsets: npt.NDArray[np.int64],
    axis_lengths: npt.NDArray[np.int64],
    values: npt.NDArray[np.float64],
    query: npt.NDArray[np.float64],
) -> tuple[int, int, float]:
    """Multilinear interpolation for any number of axes.

    The ``2**dim`` surrounding corners are enumerated as a binary counter in
    which bit ``dim - 1 - i`` selects ``low[i]`` or ``low[i] + 1`` (the last
    axis flips fastest). Adjacent pairs are then blended with the fraction of
    the last axis, halving the sequence, then with the fraction of the axis
    before it, and so on until one value remains.

    Args:
        axis_data (npt.NDArray[np.float64]): Concatenated axes.
        axis_offsets (npt.NDArray[np.int64]): Start offset of every axis in
            ``axis_data`` plus the final end offset.
        axis_lengths (npt.NDArray[np.int64]): Length of every axis.
        values (npt.NDArray[np.float64]): Dependent data.
        query (npt.NDArray[np.float64]): One coordinate per axis.

    Returns:
        tuple[int, int, float]: ``(status, axis, value)``, where ``axis`` is
        the failing axis when ``status`` is not ``_STATUS_OK``.
    """
    dim = axis_lengths.shape[0]
    lows = np.empty(dim, dtype=np.int64)
    fractions = np.empty(dim, dtype=np.float64)
    for i in range(dim):
        status, low, fraction = _resolve_position_core(
            axis_data[axis_offsets[i] : axis_offsets[i + 1]], query[i]
        )
        if status != _STATUS_OK:
            return status, i, np.nan
        lows[i] = low
        fractions[i] = fraction

    num_corners = 1 << dim
    corners = np.empty(num_corners, dtype=np.float64)
    corner = np.empty(dim, dtype=np.int64)
    for c in range(num_corners):
        for i in range(dim):
            corner[i] = lows[i] + ((c >> (dim - 1 - i)) & 1)
        status, axis, offset = _flatten_indices_core(corner, axis_lengths, values.shape[0])
        if status != _STATUS_OK:
            return status, axis, np.nan
        corners[c] = values[offset]

    count = num_corners
    for k in range(dim):
        fraction = fractions[dim - 1 - k]
        half = count // 2
        for j in range(half):
            corners[j] = _lerp_core(corners[2 * j], corners[2 * j + 1], fraction)
        count = half
    return _STATUS_OK, -1, corners[0]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _interpolate_2D_core(
    axis_data: npt.NDArray[np.float64],
    axis_offsets: npt.NDArray[np.int64],
    axis_lengths: npt.NDArray[np.int64],
    values: npt.NDArray[np.float64],
    query: npt.NDArray[np.float64],
) -> tuple[int, int, float]:
    """Bilinear interpolation, unrolled version of ``_interpolate_core`` for 2 axes.

    Corners are named by the low (L) or high (H) index on axis 0 and 1, e.g.,
    ``LH`` is ``(low0, low1 + 1)``. Results and reported failures are identical
    to those of ``_interpolate_core``.
    """
    status, low0, prc0 = _resolve_position_core(
        axis_data[axis_offsets[0] : axis_offsets[1]], query[0]
    )
    if status != _STATUS_OK:
        return status, 0, np.nan
    status, low1, prc1 = _resolve_position_core(
        axis_data[axis_offsets[1] : axis_offsets[2]], query[1]
    )
    if status != _STATUS_OK:
        return status, 1, np.nan

    n0 = axis_lengths[0]
    if low1 + 1 >= axis_lengths[1]:
        return _STATUS_OUT_OF_BOUNDS, 1, np.nan
    if low0 + 1 >= n0:
        return _STATUS_OUT_OF_BOUNDS, 0, np.nan

    base = low0 + low1 * n0
    if base + 1 + n0 >= values.shape[0]:
        return _STATUS_INCONSISTENT, -1, np.nan

    LL = values[base]
    LH = values[base + n0]
    HL = values[base + 1]
    HH = values[base + 1 + n0]

    L = _lerp_core(LL, LH, prc1)
    H = _lerp_core(HL, HH, prc1)
    return _STATUS_OK, -1, _lerp_core(L, H, prc0)


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _interpolate_3D_core(
    axis_data: npt.NDArray[np.float64],
    axis_offsets: npt.NDArray[np.int64],
    axis_lengths: npt.NDArray[np.int64],
    values: npt.NDArray[np.float64],
    query: npt.NDArray[np.float64],
) -> tuple[int, int, float]:
    """Trilinear interpolation, unrolled version of ``_interpolate_core`` for 3 axes.

    E.g., for a query at (1.2, 2.7, 0.3) on unit-spaced axes, the corners
    (1,2,0), (1,2,1), (1,3,0), (1,3,1), (2,2,0), (2,2,1), (2,3,0) and (2,3,1)
    are blended along axis 2, then axis 1, then axis 0.
    """
    status, low0, prc0 = _resolve_position_core(
        axis_data[axis_offsets[0] : axis_offsets[1]], query[0]
    )
    if status != _STATUS_OK:
        return status, 0, np.nan
    status, low1, prc1 = _resolve_position_core(
        axis_data[axis_offsets[1] : axis_offsets[2]], query[1]
    )
    if status != _STATUS_OK:
        return status, 1, np.nan
    status, low2, prc2 = _resolve_position_core(
        axis_data[axis_offsets[2] : axis_offsets[3]], query[2]
    )
    if status != _STATUS_OK:
        return status, 2, np.nan

    n0 = axis_lengths[0]
    n01 = n0 * axis_lengths[1]
    if low2 + 1 >= axis_lengths[2]:
        return _STATUS_OUT_OF_BOUNDS, 2, np.nan
    if low1 + 1 >= axis_lengths[1]:
        return _STATUS_OUT_OF_BOUNDS, 1, np.nan
    if low0 + 1 >= n0:
        return _STATUS_OUT_OF_BOUNDS, 0, np.nan

    base = low0 + low1 * n0 + low2 * n01
    if base + 1 + n0 + n01 >= values.shape[0]:
        return _STATUS_INCONSISTENT, -1, np.nan

    LLL = values[base]
    LLH = values[base + n01]
    LHL = values[base + n0]
    LHH = values[base + n0 + n01]
    HLL = values[base + 1]
    HLH = values[base + 1 + n01]
    HHL = values[base + 1 + n0]
    HHH = values[base + 1 + n0 + n01]

    LL = _lerp_core(LLL, LLH, prc2)
    LH = _lerp_core(LHL, LHH, prc2)
    HL = _lerp_core(HLL, HLH, prc2)
    HH = _lerp_core(HHL, HHH, prc2)
    L = _lerp_core(LL, LH, prc1)
    H = _lerp_core(HL, HH, prc1)
    return _STATUS_OK, -1, _lerp_core(L, H, prc0)


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _interpolate_dispatch_core(
    axis_data: npt.NDArray[np.float64],
    axis_offsets: npt.NDArray[np.int64],
    axis_lengths: npt.NDArray[np.int64],
    values: npt.NDArray[np.float64],
    query: npt.NDArray[np.float64],
) -> tuple[int, int, float]:
    """Interpolate with the unrolled kernel for 2 or 3 axes, or the generic one otherwise."""
    dim = axis_lengths.shape[0]
    if dim == 2:  # noqa: PLR2004
        return _interpolate_2D_core(axis_data, axis_offsets, axis_lengths, values, query)
    elif dim == 3:  # noqa: PLR2004
        return _interpolate_3D_core(axis_data, axis_offsets, axis_lengths, values, query)
    return _interpolate_core(axis_data, axis_offsets, axis_lengths, values, query)


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _interpolate_many_core(
    axis_data: npt.NDArray[np.float64],
    axis_offsets: npt.NDArray[np.int64],
    axis_lengths: npt.NDArray[np.int64],
    values: npt.NDArray[np.float64],
    points: npt.NDArray[np.float64],
    out: npt.NDArray[np.float64],
) -> tuple[int, int, int]:
    """Interpolate every row of ``points``, writing to ``out``.

    Args:
        axis_data (npt.NDArray[np.float64]): Concatenated axes.
        axis_offsets (npt.NDArray[np.int64]): Axis offsets into ``axis_data``.
        axis_lengths (npt.NDArray[np.int64]): Length of every axis.
        values (npt.NDArray[np.float64]): Dependent data.
        points (npt.NDArray[np.float64]): C-contiguous array of shape (num_pts, dim).
        out (npt.NDArray[np.float64]): Output array of shape (num_pts,).
            Must have the correct shape (no validation performed inside this
            numba-compiled function).

    Returns:
        tuple[int, int, int]: ``(status, point, axis)``. Processing stops at the
        first failing point, whose row and failing axis are reported.
    """
    for p in range(points.shape[0]):
        status, axis, value = _interpolate_dispatch_core(
            axis_data, axis_offsets, axis_lengths, values, points[p]
        )
        if status != _STATUS_OK:
            return status, p, axis
        out[p] = value
    return _STATUS_OK, -1, -1
