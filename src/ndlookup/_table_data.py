"""Validation and normalization of lookup table source data.

Source data is accepted either as one "full" data set (axes followed by the
dependent data) or as axes and dependent data supplied separately. A valid
data set is normalized into the flat layout consumed by ``_lookup_core``.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any, NamedTuple

import numpy as np
import numpy.typing as npt

from .errors import ShapeMismatchError
from .result import Result

_MIN_DIMENSIONS = 2
_NUMERIC_KINDS = ("i", "u", "f")


class _TableData(NamedTuple):
    """Validated table in the flat layout used by the kernels.

    Attributes:
        axis_data (npt.NDArray[np.float64]): All axes concatenated.
        axis_offsets (npt.NDArray[np.int64]): Start of every axis in ``axis_data``,
            followed by the total length (``dim + 1`` entries).
        axis_lengths (npt.NDArray[np.int64]): Length of every axis.
        values (npt.NDArray[np.float64]): Dependent data, axis 0 varying fastest.
    """

    axis_data: npt.NDArray[np.float64]
    axis_offsets: npt.NDArray[np.int64]
    axis_lengths: npt.NDArray[np.int64]
    values: npt.NDArray[np.float64]

    @property
    def dim(self) -> int:
        """Number of axes."""
        return int(self.axis_lengths.shape[0])

    def axis(self, axis_id: int) -> npt.NDArray[np.float64]:
        """View of axis ``axis_id`` (no bounds check)."""
        return self.axis_data[self.axis_offsets[axis_id] : self.axis_offsets[axis_id + 1]]


def _split_source_data(data: Sequence[Any], values: Any | None) -> tuple[list[Any], Any]:
    """Split source data into axes and dependent data.

    Args:
        data (Sequence[Any]): Either the full data set (axes followed by the
            dependent data) when ``values`` is None, or only the axes.
        values (Any | None): Dependent data, or None if it is the last entry of ``data``.

    Returns:
        tuple[list[Any], Any]: The axes and the dependent data. The dependent data
        is None when a full data set is empty.
    """
    items = list(data)
    if values is not None:
        return items, values
    if not items:
        return [], None
    return items[:-1], items[-1]


def _as_numeric_array(raw: Any, name: str) -> Result[npt.NDArray[Any]]:
    """Convert ``raw`` into a numeric NumPy array without copying when possible.

    Args:
        raw (Any): Array-like to convert.
        name (str): Name used in error messages.

    Returns:
        Result[npt.NDArray[Any]]: The array, or a ShapeMismatchError if the
        input is ragged or its entries are not real numbers.
    """
    try:
        arr = np.asarray(raw)
    except (TypeError, ValueError) as exc:
        return Result.failure(ShapeMismatchError(f"{name} is not a regular array: {exc}"))
    if arr.dtype.kind not in _NUMERIC_KINDS:
        return Result.failure(
            ShapeMismatchError(f"{name} must contain real numbers, got dtype {arr.dtype}")
        )
    return Result.success(arr)


def _normalize_axis(raw: Any, axis_id: int) -> Result[npt.NDArray[np.float64]]:
    """Normalize one axis to a 1D float64 array.

    Returns:
        Result[npt.NDArray[np.float64]]: The axis, or a ShapeMismatchError if it
        is not numeric or not one-dimensional.
    """
    res = _as_numeric_array(raw, f"axis {axis_id}")
    if res.error is not None:
        return Result.failure(res.error)
    arr = res.unwrap()
    if arr.ndim != 1:
        return Result.failure(
            ShapeMismatchError(f"axis {axis_id} must be one-dimensional, got shape {arr.shape}")
        )
    return Result.success(arr.astype(np.float64))


def _normalize_values(
    raw: Any, axis_lengths: tuple[int, ...]
) -> Result[npt.NDArray[np.float64]]:
    """Normalize the dependent data to a flat float64 array with axis 0 fastest.

    The dependent data may be flat, with exactly ``prod(axis_lengths)`` entries,
    or have shape ``axis_lengths``, in which case ``raw[i0, i1, ...]`` is the value
    at the grid point ``(i0, i1, ...)``.

    Args:
        raw (Any): Dependent data.
        axis_lengths (tuple[int, ...]): Length of every axis.

    Returns:
        Result[npt.NDArray[np.float64]]: Flattened data, or a ShapeMismatchError
        if its size or shape does not match the axes.
    """
    res = _as_numeric_array(raw, "dependent data")
    if res.error is not None:
        return Result.failure(res.error)
    arr = res.unwrap()

    required = math.prod(axis_lengths)
    if arr.ndim == 1:
        if arr.size != required:
            return Result.failure(
                ShapeMismatchError(
                    f"dependent data has {arr.size} values, but the axes "
                    f"{axis_lengths} require {required}"
                )
            )
        return Result.success(arr.astype(np.float64))

    if arr.shape != axis_lengths:
        return Result.failure(
            ShapeMismatchError(
                f"dependent data has shape {arr.shape}, expected {required} values "
                f"or shape {axis_lengths}"
            )
        )
    # Column-major flattening keeps axis 0 varying fastest.
    return Result.success(arr.ravel(order="F").astype(np.float64))


def _check_strictly_increasing(axes: list[npt.NDArray[np.float64]]) -> ShapeMismatchError | None:
    """Return an error for the first axis that is not strictly increasing, if any."""
    for axis_id, axis in enumerate(axes):
        steps = np.diff(axis)
        if not np.all(steps > 0.0):
            position = int(np.argmin(steps > 0.0))
            return ShapeMismatchError(
                f"axis {axis_id} must be strictly increasing, but entries {position} and "
                f"{position + 1} are {axis[position]!r} and {axis[position + 1]!r}"
            )
    return None


def _validate_source_data(data: Sequence[Any], values: Any | None = None) -> Result[_TableData]:
    """Validate source data and normalize it into a ``_TableData``.

    The data is valid iff it has at least two axes, every axis is a strictly
    increasing sequence of real numbers, and the dependent data has exactly as
    many entries as the product of the axis lengths.

    Args:
        data (Sequence[Any]): Full data set, or axes only if ``values`` is given.
        values (Any | None): Dependent data supplied separately. Defaults to None.

    Returns:
        Result[_TableData]: Normalized table data, or the ShapeMismatchError
        describing the first violation found.
    """
    raw_axes, raw_values = _split_source_data(data, values)
    if len(raw_axes) < _MIN_DIMENSIONS or raw_values is None:
        return Result.failure(
            ShapeMismatchError(
                f"at least {_MIN_DIMENSIONS} axes and one dependent data array are required, "
                f"got {len(raw_axes)} axes"
            )
        )

    axes: list[npt.NDArray[np.float64]] = []
    for axis_id, raw_axis in enumerate(raw_axes):
        res = _normalize_axis(raw_axis, axis_id)
        if res.error is not None:
            return Result.failure(res.error)
        axes.append(res.unwrap())

    axis_lengths = tuple(int(axis.size) for axis in axes)
    values_res = _normalize_values(raw_values, axis_lengths)
    if values_res.error is not None:
        return Result.failure(values_res.error)

    error = _check_strictly_increasing(axes)
    if error is not None:
        return Result.failure(error)

    lengths = np.array(axis_lengths, dtype=np.int64)
    offsets = np.zeros(len(axes) + 1, dtype=np.int64)
    np.cumsum(lengths, out=offsets[1:])

    table = _TableData(
        axis_data=np.ascontiguousarray(np.concatenate(axes)),
        axis_offsets=offsets,
        axis_lengths=lengths,
        values=np.ascontiguousarray(values_res.unwrap()),
    )
    return Result.success(table)
