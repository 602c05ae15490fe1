"""LookupTable class for rectilinear N-dimensional tables."""

from __future__ import annotations

import logging
import operator
from collections.abc import Iterable, Sequence
from typing import Any

import numpy as np
from numpy import typing as npt

from ._lookup_impl import (
    _index_at_impl,
    _lookup_by_indices_impl,
    _lookup_by_values_impl,
    _lookup_by_values_many_impl,
    _position_impl,
)
from ._table_data import _TableData, _validate_source_data
from .errors import OutOfBoundsError
from .result import Result

logger = logging.getLogger(__name__)


class LookupTable:
    """A lookup table over a rectilinear grid with two or more axes.

    The table holds D strictly increasing axes and one dependent data array of
    length ``prod(len(axis_i))``, laid out with axis 0 varying fastest. Values
    between grid points are obtained by multilinear interpolation; queries
    outside the axes bounds are refused (no extrapolation).

    Every fallible operation comes in two forms: ``query_*`` returns a
    :class:`~ndlookup.result.Result`, and the matching raising form returns the
    value directly or raises the carried
    :class:`~ndlookup.errors.LookupTableError`.

    The table is not internally synchronized: concurrent queries are safe as
    long as no call to :meth:`populate` or :meth:`reset` is in flight.

    Attributes:
        _data (_TableData | None): Validated table data, or None if the table is
            not valid.

    Example:
        >>> table = LookupTable([[1, 2, 3], [10, 20], [100, 200, 300, 400, 500, 600]])
        >>> table.lookup_by_values([1.5, 10.0])
        150.0
        >>> table.lookup_by_values([2.0, 15.0])
        350.0
    """

    _data: _TableData | None

    def __init__(self, data: Sequence[Any] | None = None, values: Any | None = None) -> None:
        """Initialize a lookup table, populating it if data is given.

        Args:
            data (Sequence[Any] | None): Full data set (axes followed by the dependent
                data) if ``values`` is None, or only the axes otherwise. If None, the
                table is created empty and invalid.
            values (Any | None): Dependent data supplied separately from the axes.
                Either flat, with axis 0 varying fastest, or with shape
                ``(len(axis_0), ..., len(axis_{D-1}))``. Defaults to None.
        """
        self._data = None
        if data is not None:
            self.populate(data, values)

    def __repr__(self) -> str:
        if self._data is None:
            return "LookupTable(valid=False)"
        return f"LookupTable(axis_lengths={self.axis_lengths})"

    # Data population

    @staticmethod
    def validate_source_data(data: Sequence[Any], values: Any | None = None) -> Result[None]:
        """Check whether the given data can populate a table.

        Data is valid iff it has at least two axes, every axis is strictly
        increasing, and the dependent data size equals the product of the axes
        lengths.

        Args:
            data (Sequence[Any]): Full data set, or only the axes if ``values`` is given.
            values (Any | None): Dependent data supplied separately. Defaults to None.

        Returns:
            Result[None]: Success, or a ShapeMismatchError describing the
            first violation.
        """
        res = _validate_source_data(data, values)
        if res.error is not None:
            return Result.failure(res.error)
        return Result.success(None)

    @staticmethod
    def is_valid_source_data(data: Sequence[Any], values: Any | None = None) -> bool:
        """Check whether the given data can populate a table.

        Args:
            data (Sequence[Any]): Full data set, or only the axes if ``values`` is given.
            values (Any | None): Dependent data supplied separately. Defaults to None.

        Returns:
            bool: True if the data is valid.
        """
        return LookupTable.validate_source_data(data, values).ok

    def populate(self, data: Sequence[Any], values: Any | None = None) -> bool:
        """Replace the table contents with the given data.

        Population is atomic: on success the previous contents are fully
        replaced, on failure the table is reset to the empty, invalid state.

        Args:
            data (Sequence[Any]): Full data set, or only the axes if ``values`` is given.
            values (Any | None): Dependent data supplied separately. Defaults to None.

        Returns:
            bool: True if the table was populated and is now valid.
        """
        res = _validate_source_data(data, values)
        if res.error is not None:
            logger.debug("Rejected table data: %s", res.error)
            self.reset()
            return False
        self._data = res.unwrap()
        logger.debug(
            "Populated table with axis lengths %s (%d values), %s interpolation kernel",
            self.axis_lengths,
            self.value_count,
            f"{self.dimensions}D" if self.dimensions in (2, 3) else "generic",
        )
        return True

    def reset(self) -> None:
        """Empty the table, leaving it invalid."""
        self._data = None
        logger.debug("Table reset")

    # Metadata

    @property
    def valid(self) -> bool:
        """Whether the table holds valid data."""
        return self._data is not None

    @property
    def dimensions(self) -> int:
        """Number of axes (0 for an invalid table)."""
        return 0 if self._data is None else self._data.dim

    @property
    def value_count(self) -> int:
        """Length of the dependent data (0 for an invalid table)."""
        return 0 if self._data is None else int(self._data.values.shape[0])

    @property
    def axis_lengths(self) -> tuple[int, ...]:
        """Length of every axis (empty for an invalid table)."""
        if self._data is None:
            return ()
        return tuple(int(n) for n in self._data.axis_lengths)

    @property
    def axes(self) -> tuple[npt.NDArray[np.float64], ...]:
        """Copies of the axes (empty for an invalid table)."""
        if self._data is None:
            return ()
        return tuple(self._data.axis(i).copy() for i in range(self._data.dim))

    @property
    def values(self) -> npt.NDArray[np.float64]:
        """Copy of the flat dependent data, axis 0 varying fastest."""
        if self._data is None:
            return np.empty(0, dtype=np.float64)
        return self._data.values.copy()

    @property
    def domain(self) -> npt.NDArray[np.float64]:
        """Bounds of the table.

        Returns:
            npt.NDArray[np.float64]: Array of shape (dimensions, 2) holding the first
            and last value of every axis. Empty axes have NaN bounds.
        """
        domain = np.full((self.dimensions, 2), np.nan, dtype=np.float64)
        for i, axis in enumerate(self.axes):
            if axis.size > 0:
                domain[i, :] = axis[0], axis[-1]
        return domain

    def query_axis_length(self, axis_id: int) -> Result[int]:
        """Length of axis ``axis_id``.

        Returns:
            Result[int]: The length, or an OutOfBoundsError if ``axis_id`` is not
            smaller than the number of axes.

        Raises:
            TypeError: If ``axis_id`` is not an integer.
        """
        axis_id = operator.index(axis_id)
        lengths = self.axis_lengths
        if not 0 <= axis_id < len(lengths):
            return Result.failure(
                OutOfBoundsError(
                    f"Axis {axis_id} is out of range for a table with {len(lengths)} axes."
                )
            )
        return Result.success(lengths[axis_id])

    def axis_length(self, axis_id: int) -> int:
        """Length of axis ``axis_id``, raising OutOfBoundsError if it does not exist."""
        return self.query_axis_length(axis_id).unwrap()

    # Lookups

    def query_index_at(self, indices: Iterable[int]) -> Result[int]:
        """Offset into the dependent data of the grid point at ``indices``.

        The offset is ``i0 + i1*n0 + i2*n0*n1 + ...``, where ``n_k`` is the length
        of axis k.

        Args:
            indices (Iterable[int]): One non-negative index per axis.

        Returns:
            Result[int]: The offset, or an InvalidTableError, ArityMismatchError or
            OutOfBoundsError.

        Raises:
            TypeError: If an index is not an integer.
        """
        return _index_at_impl(self._data, indices)

    def index_at(self, indices: Iterable[int]) -> int:
        """Raising form of :meth:`query_index_at`."""
        return self.query_index_at(indices).unwrap()

    def query_by_indices(self, indices: Iterable[int]) -> Result[float]:
        """Exact value stored at the grid point ``indices``.

        Args:
            indices (Iterable[int]): One non-negative index per axis.

        Returns:
            Result[float]: The stored value, or an InvalidTableError,
            ArityMismatchError or OutOfBoundsError.

        Raises:
            TypeError: If an index is not an integer.
        """
        return _lookup_by_indices_impl(self._data, indices)

    def lookup_by_indices(self, indices: Iterable[int]) -> float:
        """Raising form of :meth:`query_by_indices`."""
        return self.query_by_indices(indices).unwrap()

    def query_position(self, axis_id: int, value: float) -> Result[tuple[int, float]]:
        """Locate ``value`` along one axis.

        For example, on the axis ``[1.2, 3.4, 5.6, 7.8]`` the value 4.3 resolves to
        ``(1, 0.40909...)``: about 41% of the way from index 1 to index 2. A value
        at the last grid point resolves to the previous index with fraction 1.0.

        Args:
            axis_id (int): Axis to search.
            value (float): Coordinate along that axis.

        Returns:
            Result[tuple[int, float]]: ``(low_index, fraction)``, or an
            InvalidTableError, OutOfBoundsError or OutOfDomainError.
        """
        return _position_impl(self._data, axis_id, value)

    def position(self, axis_id: int, value: float) -> tuple[int, float]:
        """Raising form of :meth:`query_position`."""
        return self.query_position(axis_id, value).unwrap()

    def query_by_values(self, values: Sequence[float] | npt.ArrayLike) -> Result[float]:
        """Value of the table at the given coordinates.

        Exact grid coordinates return the stored value; anything in between is
        obtained by multilinear interpolation of the surrounding grid points.

        Args:
            values (Sequence[float] | npt.ArrayLike): One coordinate per axis.

        Returns:
            Result[float]: The (interpolated) value, or an InvalidTableError,
            ArityMismatchError, OutOfDomainError or OutOfBoundsError. The latter
            is only reported for axes with a single grid point.

        Raises:
            TypeError: If the coordinates are not real numbers.
        """
        return _lookup_by_values_impl(self._data, values)

    def lookup_by_values(self, values: Sequence[float] | npt.ArrayLike) -> float:
        """Raising form of :meth:`query_by_values`."""
        return self.query_by_values(values).unwrap()

    def query_by_values_many(self, points: npt.ArrayLike) -> Result[npt.NDArray[np.float64]]:
        """Value of the table at many points.

        Args:
            points (npt.ArrayLike): Array-like of shape (num_pts, dimensions).

        Returns:
            Result[npt.NDArray[np.float64]]: Array of shape (num_pts,), or the
            error of the first failing point.

        Raises:
            TypeError: If the coordinates are not real numbers.
        """
        return _lookup_by_values_many_impl(self._data, points)

    def lookup_by_values_many(self, points: npt.ArrayLike) -> npt.NDArray[np.float64]:
        """Raising form of :meth:`query_by_values_many`."""
        return self.query_by_values_many(points).unwrap()
