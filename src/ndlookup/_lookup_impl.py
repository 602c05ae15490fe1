"""Table lookups on top of the Numba kernels.

Every function here validates its input, calls the matching kernel in
``_lookup_core`` and maps the kernel status onto a :class:`Result`. A ``None``
table stands for a table that is not valid.
"""

from __future__ import annotations

import operator
from collections.abc import Iterable
from typing import Any

import numpy as np
import numpy.typing as npt

from ._lookup_core import (
    _STATUS_INCONSISTENT,
    _STATUS_OK,
    _STATUS_OUT_OF_BOUNDS,
    _STATUS_OUT_OF_DOMAIN,
    _flatten_indices_core,
    _interpolate_dispatch_core,
    _interpolate_many_core,
    _resolve_position_core,
)
from ._table_data import _TableData
from .errors import (
    ArityMismatchError,
    InvalidTableError,
    LookupTableError,
    OutOfBoundsError,
    OutOfDomainError,
)
from .result import Result


def _invalid_table_error() -> InvalidTableError:
    return InvalidTableError("Unable to operate on invalid table.")


def _inconsistent_table_error() -> RuntimeError:
    return RuntimeError(
        "Computed index exceeds the dependent data size; the table data is inconsistent."
    )


def _out_of_domain_error(data: _TableData, axis_id: int, value: float) -> OutOfDomainError:
    axis = data.axis(axis_id)
    if axis.size == 0:
        return OutOfDomainError(f"Value {value} is outside of axis {axis_id}, which is empty.")
    return OutOfDomainError(
        f"Value {value} is outside of the bounds [{axis[0]}, {axis[-1]}] of axis {axis_id}."
    )


def _index_out_of_bounds_error(index: int, axis_id: int, length: int) -> OutOfBoundsError:
    return OutOfBoundsError(
        f"Index {index} is out of bounds for axis {axis_id} with length {length}."
    )


def _interpolation_error(
    data: _TableData, status: int, axis_id: int, point: npt.NDArray[np.float64]
) -> LookupTableError:
    """Translate a failed interpolation kernel status into an error.

    Args:
        data (_TableData): Queried table.
        status (int): Kernel status, other than ``_STATUS_OK``.
        axis_id (int): Failing axis reported by the kernel.
        point (npt.NDArray[np.float64]): Queried coordinates.

    Returns:
        LookupTableError: The error matching ``status``.

    Raises:
        RuntimeError: If the kernel detected an index past the dependent data.
    """
    if status == _STATUS_OUT_OF_DOMAIN:
        return _out_of_domain_error(data, axis_id, float(point[axis_id]))
    if status == _STATUS_OUT_OF_BOUNDS:
        length = int(data.axis_lengths[axis_id])
        return OutOfBoundsError(
            f"Interpolation requires a grid point past index {length - 1} "
            f"on axis {axis_id}, which has length {length}."
        )
    raise _inconsistent_table_error()


def _normalize_indices(
    indices: Iterable[Any], axis_lengths: npt.NDArray[np.int64]
) -> Result[npt.NDArray[np.int64]]:
    """Convert integer indices into an int64 array with one in-range entry per axis.

    Bounds are checked on the Python integers, so indices too large for int64
    are reported as out of bounds.

    Raises:
        TypeError: If ``indices`` is not iterable or an entry is not an integer.
    """
    try:
        items = [operator.index(idx) for idx in indices]
    except TypeError as exc:
        raise TypeError(f"indices must be a sequence of integers: {exc}") from exc
    dim = axis_lengths.shape[0]
    if len(items) != dim:
        return Result.failure(ArityMismatchError(f"Expected {dim} indices, got {len(items)}."))
    for axis_id, (idx, length) in enumerate(zip(items, axis_lengths.tolist(), strict=True)):
        if not 0 <= idx < length:
            return Result.failure(_index_out_of_bounds_error(idx, axis_id, length))
    return Result.success(np.array(items, dtype=np.int64))


def _normalize_query(query: Any, dim: int) -> Result[npt.NDArray[np.float64]]:
    """Convert query coordinates into a contiguous float64 array with one entry per axis.

    Raises:
        TypeError: If the coordinates are not real numbers.
    """
    try:
        arr = np.asarray(query, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"coordinates must be real numbers: {exc}") from exc
    if arr.ndim != 1 or arr.shape[0] != dim:
        return Result.failure(
            ArityMismatchError(f"Expected {dim} coordinates, got an array of shape {arr.shape}.")
        )
    return Result.success(np.ascontiguousarray(arr))


def _index_at_impl(data: _TableData | None, indices: Iterable[Any]) -> Result[int]:
    """Offset into the dependent data of the grid point at ``indices``.

    Args:
        data (_TableData | None): Queried table.
        indices (Iterable[Any]): One non-negative integer index per axis.

    Returns:
        Result[int]: The offset, or an InvalidTableError, ArityMismatchError
        or OutOfBoundsError.
    """
    if data is None:
        return Result.failure(_invalid_table_error())
    res = _normalize_indices(indices, data.axis_lengths)
    if res.error is not None:
        return Result.failure(res.error)
    idx = res.unwrap()

    status, axis_id, offset = _flatten_indices_core(idx, data.axis_lengths, data.values.shape[0])
    if status == _STATUS_OUT_OF_BOUNDS:
        return Result.failure(
            _index_out_of_bounds_error(
                int(idx[axis_id]), axis_id, int(data.axis_lengths[axis_id])
            )
        )
    if status == _STATUS_INCONSISTENT:
        raise _inconsistent_table_error()
    return Result.success(int(offset))


def _lookup_by_indices_impl(data: _TableData | None, indices: Iterable[Any]) -> Result[float]:
    """Stored value at the grid point ``indices``, without interpolation."""
    if data is None:
        return Result.failure(_invalid_table_error())
    res = _index_at_impl(data, indices)
    if res.error is not None:
        return Result.failure(res.error)
    return Result.success(float(data.values[res.unwrap()]))


def _position_impl(
    data: _TableData | None, axis_id: int, value: float
) -> Result[tuple[int, float]]:
    """Low grid index and fraction toward the next one for ``value`` on an axis.

    Args:
        data (_TableData | None): Queried table.
        axis_id (int): Axis to search.
        value (float): Query coordinate.

    Returns:
        Result[tuple[int, float]]: ``(low, fraction)``, or an InvalidTableError,
        OutOfBoundsError (for a non-existing axis) or OutOfDomainError.
    """
    if data is None:
        return Result.failure(_invalid_table_error())
    axis_id = operator.index(axis_id)
    if not 0 <= axis_id < data.dim:
        return Result.failure(
            OutOfBoundsError(f"Axis {axis_id} is out of range for a table with {data.dim} axes.")
        )
    value = float(value)
    status, low, fraction = _resolve_position_core(data.axis(axis_id), value)
    if status == _STATUS_OUT_OF_DOMAIN:
        return Result.failure(_out_of_domain_error(data, axis_id, value))
    return Result.success((int(low), float(fraction)))


def _lookup_by_values_impl(data: _TableData | None, query: Any) -> Result[float]:
    """Multilinear interpolation of the table at the coordinates ``query``.

    Args:
        data (_TableData | None): Queried table.
        query (Any): One real coordinate per axis.

    Returns:
        Result[float]: The interpolated value, or an InvalidTableError,
        ArityMismatchError, OutOfDomainError or OutOfBoundsError.
    """
    if data is None:
        return Result.failure(_invalid_table_error())
    res = _normalize_query(query, data.dim)
    if res.error is not None:
        return Result.failure(res.error)
    point = res.unwrap()

    status, axis_id, value = _interpolate_dispatch_core(
        data.axis_data, data.axis_offsets, data.axis_lengths, data.values, point
    )
    if status != _STATUS_OK:
        return Result.failure(_interpolation_error(data, status, axis_id, point))
    return Result.success(float(value))


def _lookup_by_values_many_impl(
    data: _TableData | None, points: Any
) -> Result[npt.NDArray[np.float64]]:
    """Multilinear interpolation of the table at every row of ``points``.

    Args:
        data (_TableData | None): Queried table.
        points (Any): Array-like of shape (num_pts, dim).

    Returns:
        Result[npt.NDArray[np.float64]]: Array of shape (num_pts,) with the
        interpolated values, or the error of the first failing point.

    Raises:
        TypeError: If the coordinates are not real numbers.
    """
    if data is None:
        return Result.failure(_invalid_table_error())
    try:
        arr = np.asarray(points, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"coordinates must be real numbers: {exc}") from exc
    if arr.ndim == 1 and arr.size == 0:
        arr = arr.reshape(0, data.dim)
    if arr.ndim != 2 or arr.shape[1] != data.dim:  # noqa: PLR2004
        return Result.failure(
            ArityMismatchError(
                f"Expected points of shape (num_pts, {data.dim}), got shape {arr.shape}."
            )
        )
    arr = np.ascontiguousarray(arr)

    out = np.empty(arr.shape[0], dtype=np.float64)
    status, point_id, axis_id = _interpolate_many_core(
        data.axis_data, data.axis_offsets, data.axis_lengths, data.values, arr, out
    )
    if status != _STATUS_OK:
        error = _interpolation_error(data, status, axis_id, arr[point_id])
        return Result.failure(type(error)(f"Point {point_id}: {error}"))
    return Result.success(out)
