"""Tests for multilinear interpolation by values."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import numpy.testing as nptest
import numpy.typing as npt
import pytest
from scipy.interpolate import RegularGridInterpolator

from ndlookup import LookupTable
from ndlookup._lookup_core import (
    _STATUS_OK,
    _interpolate_2D_core,
    _interpolate_3D_core,
    _interpolate_core,
)
from ndlookup.errors import (
    ArityMismatchError,
    InvalidTableError,
    OutOfBoundsError,
    OutOfDomainError,
)

KernelT = Callable[..., tuple[int, int, float]]


def _random_axes(
    rng: np.random.Generator, lengths: tuple[int, ...]
) -> list[npt.NDArray[np.float64]]:
    """Strictly increasing, irregularly spaced axes."""
    return [np.cumsum(rng.uniform(0.1, 2.0, size=n)) - 1.0 for n in lengths]


def _random_points(
    rng: np.random.Generator, axes: list[npt.NDArray[np.float64]], num_pts: int
) -> npt.NDArray[np.float64]:
    """Random points inside the table domain, shape (num_pts, dim)."""
    return np.stack([rng.uniform(axis[0], axis[-1], size=num_pts) for axis in axes], axis=1)


class TestScenarios:
    """Worked examples on small tables."""

    @pytest.mark.parametrize(
        ("query", "expected"),
        [
            ([2.0, 10.0], 200.0),
            ([1.5, 10.0], 150.0),
            ([2.0, 15.0], 350.0),
            ([1.0, 10.0], 100.0),
            ([3.0, 20.0], 600.0),
            ([2.5, 17.5], 475.0),
        ],
    )
    def test_2D(self, table_2D: LookupTable, query: list[float], expected: float) -> None:
        assert table_2D.lookup_by_values(query) == pytest.approx(expected, rel=1e-15)

    def test_2D_below_domain(self, table_2D: LookupTable) -> None:
        res = table_2D.query_by_values([0.5, 10.0])
        assert isinstance(res.error, OutOfDomainError)
        ok, value, message = res.as_tuple()
        assert not ok
        assert value is None
        assert message == "Value 0.5 is outside of the bounds [1.0, 3.0] of axis 0."

    def test_3D_center_is_mean_of_corners(self, table_3D: LookupTable) -> None:
        assert table_3D.lookup_by_values([0.5, 0.5, 0.5]) == 3.5

    def test_3D_corners(self, table_3D: LookupTable) -> None:
        for k in range(8):
            point = [float(k & 1), float((k >> 1) & 1), float((k >> 2) & 1)]
            assert table_3D.lookup_by_values(point) == float(k)

    @pytest.mark.parametrize("dim", [2, 4, 5, 6])
    def test_hypercube_center_is_mean_of_corners(
        self, rng: np.random.Generator, dim: int
    ) -> None:
        values = rng.uniform(-10.0, 10.0, size=2**dim)
        table = LookupTable([[0.0, 1.0]] * dim, values)
        assert table.lookup_by_values([0.5] * dim) == pytest.approx(values.mean(), rel=1e-13)

    def test_shaped_values(self) -> None:
        shaped = np.array([[100.0, 400.0], [200.0, 500.0], [300.0, 600.0]])
        table = LookupTable([[1.0, 2.0, 3.0], [10.0, 20.0]], shaped)
        assert table.lookup_by_values([2.0, 15.0]) == 350.0


class TestErrors:
    def test_invalid_table(self) -> None:
        res = LookupTable().query_by_values([1.0, 1.0])
        assert isinstance(res.error, InvalidTableError)
        with pytest.raises(InvalidTableError, match="invalid table"):
            LookupTable().lookup_by_values([1.0, 1.0])

    @pytest.mark.parametrize("query", [[], [1.0], [1.0, 10.0, 0.0], [[1.0, 10.0]], 1.0])
    def test_arity_mismatch(self, table_2D: LookupTable, query: object) -> None:
        with pytest.raises(ArityMismatchError, match="Expected 2 coordinates"):
            table_2D.lookup_by_values(query)  # type: ignore[arg-type]

    def test_non_numeric_coordinates(self, table_2D: LookupTable) -> None:
        with pytest.raises(TypeError, match="coordinates must be real numbers"):
            table_2D.lookup_by_values(["a", "b"])

    @pytest.mark.parametrize(
        ("query", "axis_id"),
        [
            ([0.5, 10.0], 0),
            ([3.5, 10.0], 0),
            ([2.0, 9.0], 1),
            ([2.0, 21.0], 1),
            ([np.nan, 10.0], 0),
            ([2.0, np.inf], 1),
            ([0.0, 0.0], 0),
        ],
    )
    def test_out_of_domain(self, table_2D: LookupTable, query: list[float], axis_id: int) -> None:
        with pytest.raises(OutOfDomainError, match=f"of axis {axis_id}"):
            table_2D.lookup_by_values(query)

    @pytest.mark.parametrize("axis_id", [0, 1])
    def test_one_ulp_beyond_bounds(self, table_2D: LookupTable, axis_id: int) -> None:
        axis = table_2D.axes[axis_id]
        inside = [2.0, 15.0]
        for bound, direction in ((axis[0], -np.inf), (axis[-1], np.inf)):
            query = list(inside)
            query[axis_id] = bound
            assert table_2D.query_by_values(query).ok
            query[axis_id] = np.nextafter(bound, direction)
            assert isinstance(table_2D.query_by_values(query).error, OutOfDomainError)

    def test_single_point_axis_cannot_be_interpolated(self) -> None:
        table = LookupTable([[5.0], [0.0, 1.0]], [1.0, 2.0])
        res = table.query_by_values([5.0, 0.5])
        assert isinstance(res.error, OutOfBoundsError)
        assert "axis 0, which has length 1" in res.error_message

    def test_empty_axis(self) -> None:
        table = LookupTable([[], [0.0, 1.0]], [])
        with pytest.raises(OutOfDomainError, match="axis 0, which is empty"):
            table.lookup_by_values([0.0, 0.0])


class TestProperties:
    """Continuity, linearity and agreement with an independent implementation."""

    @pytest.mark.parametrize("lengths", [(4, 3), (3, 4, 5), (3, 2, 4, 3), (2, 3, 2, 2, 3)])
    def test_matches_scipy(self, rng: np.random.Generator, lengths: tuple[int, ...]) -> None:
        axes = _random_axes(rng, lengths)
        shaped = rng.uniform(-5.0, 5.0, size=lengths)
        table = LookupTable(axes, shaped)
        reference = RegularGridInterpolator(tuple(axes), shaped, method="linear")

        points = _random_points(rng, axes, 64)
        expected = reference(points)
        nptest.assert_allclose(
            table.lookup_by_values_many(points), expected, rtol=1e-12, atol=1e-12
        )
        for point, value in zip(points, expected, strict=True):
            assert table.lookup_by_values(point) == pytest.approx(value, rel=1e-12, abs=1e-12)

    @pytest.mark.parametrize("lengths", [(5, 4), (3, 4, 2), (2, 3, 3, 2)])
    def test_affine_data_is_reproduced(
        self, rng: np.random.Generator, lengths: tuple[int, ...]
    ) -> None:
        axes = _random_axes(rng, lengths)
        coeffs = rng.uniform(-3.0, 3.0, size=len(lengths))
        grids = np.meshgrid(*axes, indexing="ij")
        shaped = 1.5 + sum(c * g for c, g in zip(coeffs, grids, strict=True))
        table = LookupTable(axes, shaped)

        points = _random_points(rng, axes, 50)
        nptest.assert_allclose(
            table.lookup_by_values_many(points), 1.5 + points @ coeffs, rtol=1e-11, atol=1e-11
        )

    def test_sweep_between_grid_points_is_monotonic(self, table_2D: LookupTable) -> None:
        results = [table_2D.lookup_by_values([x, 10.0]) for x in np.linspace(1.0, 2.0, 21)]
        assert results[0] == 100.0
        assert results[-1] == 200.0
        assert all(a <= b for a, b in zip(results[:-1], results[1:], strict=True))

    def test_linear_along_single_axis(self, rng: np.random.Generator) -> None:
        axes = _random_axes(rng, (4, 3, 3))
        table = LookupTable(axes, rng.uniform(size=(4, 3, 3)))
        x0, x1 = axes[1][1], axes[1][2]
        fixed = [float(rng.uniform(axes[0][0], axes[0][-1])), float(axes[2][1])]
        start = table.lookup_by_values([fixed[0], x0, fixed[1]])
        end = table.lookup_by_values([fixed[0], x1, fixed[1]])
        for t in np.linspace(0.0, 1.0, 11):
            y = x0 + t * (x1 - x0)
            value = table.lookup_by_values([fixed[0], y, fixed[1]])
            assert value == pytest.approx(start + t * (end - start), rel=1e-12, abs=1e-12)


class TestFixedArityKernels:
    """The unrolled 2- and 3-axis kernels are bit-identical to the generic one."""

    @pytest.mark.parametrize(
        ("lengths", "kernel"),
        [
            ((4, 3), _interpolate_2D_core),
            ((2, 5), _interpolate_2D_core),
            ((3, 4, 2), _interpolate_3D_core),
            ((2, 2, 5), _interpolate_3D_core),
        ],
    )
    def test_same_results(
        self, rng: np.random.Generator, lengths: tuple[int, ...], kernel: KernelT
    ) -> None:
        axes = _random_axes(rng, lengths)
        table = LookupTable(axes, rng.uniform(-1.0, 1.0, size=lengths))
        data = table._data
        assert data is not None

        points = list(_random_points(rng, axes, 40))
        points += [np.array([axis[-1] for axis in axes]), np.array([axis[0] for axis in axes])]
        for point in points:
            args = (data.axis_data, data.axis_offsets, data.axis_lengths, data.values, point)
            fast = kernel(*args)
            generic = _interpolate_core(*args)
            assert fast[0] == generic[0] == _STATUS_OK
            assert fast == generic

    @pytest.mark.parametrize(
        ("axes", "query", "kernel"),
        [
            ([[0.0, 1.0], [7.0]], [0.5, 7.0], _interpolate_2D_core),
            ([[7.0], [0.0, 1.0]], [7.0, 0.5], _interpolate_2D_core),
            ([[7.0], [7.0]], [7.0, 7.0], _interpolate_2D_core),
            ([[7.0], [0.0, 1.0], [7.0]], [7.0, 0.5, 7.0], _interpolate_3D_core),
            ([[0.0, 1.0], [7.0], [0.0, 1.0]], [0.5, 7.0, 0.5], _interpolate_3D_core),
            ([[0.0, 1.0], [0.0, 1.0]], [0.5, 2.0], _interpolate_2D_core),
            ([[0.0, 1.0], [0.0, 1.0], [0.0, 1.0]], [0.5, 0.5, -1.0], _interpolate_3D_core),
        ],
    )
    def test_same_failures(
        self, axes: list[list[float]], query: list[float], kernel: KernelT
    ) -> None:
        lengths = [len(axis) for axis in axes]
        table = LookupTable(axes, np.arange(float(np.prod(lengths))))
        data = table._data
        assert data is not None

        args = (
            data.axis_data,
            data.axis_offsets,
            data.axis_lengths,
            data.values,
            np.array(query, dtype=np.float64),
        )
        fast = kernel(*args)
        generic = _interpolate_core(*args)
        assert fast[0] != _STATUS_OK
        assert fast[:2] == generic[:2]


class TestLookupByValuesMany:
    def test_scenario(self, table_2D: LookupTable) -> None:
        out = table_2D.lookup_by_values_many([[1.5, 10.0], [2.0, 15.0], [3.0, 20.0]])
        nptest.assert_allclose(out, [150.0, 350.0, 600.0], rtol=1e-15)
        assert out.dtype == np.float64

    def test_empty(self, table_2D: LookupTable) -> None:
        assert table_2D.lookup_by_values_many([]).shape == (0,)
        assert table_2D.lookup_by_values_many(np.empty((0, 2))).shape == (0,)

    def test_reports_first_failing_point(self, table_2D: LookupTable) -> None:
        res = table_2D.query_by_values_many([[1.5, 10.0], [2.0, 25.0], [0.0, 10.0]])
        assert isinstance(res.error, OutOfDomainError)
        assert res.error_message.startswith("Point 1: Value 25.0 is outside")

    @pytest.mark.parametrize("points", [[1.0, 10.0], [[1.0, 10.0, 0.0]], [[[1.0, 10.0]]]])
    def test_arity_mismatch(self, table_2D: LookupTable, points: object) -> None:
        with pytest.raises(ArityMismatchError, match="num_pts, 2"):
            table_2D.lookup_by_values_many(points)  # type: ignore[arg-type]

    def test_invalid_table(self) -> None:
        with pytest.raises(InvalidTableError):
            LookupTable().lookup_by_values_many([[0.0, 0.0]])

    def test_matches_single_lookups(self, rng: np.random.Generator) -> None:
        axes = _random_axes(rng, (3, 3, 3, 3))
        table = LookupTable(axes, rng.uniform(size=81))
        points = _random_points(rng, axes, 20)
        many = table.lookup_by_values_many(points)
        single = [table.lookup_by_values(point) for point in points]
        nptest.assert_array_equal(many, single)
