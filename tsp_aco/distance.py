"""
tsp_aco/distance.py
───────────────────
The distance matrix: computed once per run, shared read-only by every ant.

Matrix layout
─────────────
  Shape : (n_cities, n_cities)
  d[i][j]: Euclidean distance from city i to city j.

  Symmetric (d[i][j] == d[j][i]), zero on the diagonal, non-negative.
  The backing array's WRITEABLE flag is cleared after construction, so an
  accidental write anywhere in the engine raises instead of corrupting
  every later iteration.

Heuristic η
───────────
  η[i][j] = 1 / d[i][j] for i ≠ j, 0.0 on the diagonal.
  Coincident cities (d == 0 off the diagonal) get η = +inf: moving to a
  city at the same spot is free, and the ant treats such candidates as
  dominant (see Ant.select_next_city).
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from tsp_aco.validation import CityLike, InputError, validate_cities


class DistanceMatrix:
    """
    Pairwise Euclidean distances between all cities.

    Build with DistanceMatrix.build(cities); the constructor takes an
    already-validated (n, 2) coordinate array.
    """

    def __init__(self, coords: NDArray[np.float64]) -> None:
        # d[i][j] = hypot(x_i − x_j, y_i − y_j), via broadcasting:
        # coords[:, None, :] is (n, 1, 2), coords[None, :, :] is (1, n, 2).
        # Overflow yields +inf; build() rejects it.
        with np.errstate(over="ignore"):
            delta = coords[:, None, :] - coords[None, :, :]
            matrix = np.hypot(delta[..., 0], delta[..., 1])
        np.fill_diagonal(matrix, 0.0)
        matrix.setflags(write=False)

        self._coords = coords
        self._matrix: NDArray[np.float64] = matrix
        self._n_cities = coords.shape[0]

    @classmethod
    def build(cls, cities: Sequence[CityLike]) -> "DistanceMatrix":
        """
        Validate the cities and compute every pairwise distance.

        Raises:
            InputError: fewer than 2 cities, a non-finite coordinate, or
                        coordinates so far apart that a distance or a full
                        tour length overflows to +inf.
        """
        matrix = cls(validate_cities(cities))
        # A tour has at most n edges, each no longer than the maximum
        # distance, so n × max bounds every tour length.
        longest = float(matrix._matrix.max())
        if not np.isfinite(matrix._matrix).all() or not np.isfinite(
            longest * matrix.n_cities
        ):
            raise InputError(
                f"Coordinates are too far apart: distances or tour lengths "
                f"overflow (largest distance {longest})."
            )
        return matrix

    # ── Queries ───────────────────────────────────────────────────────────────

    def distance(self, i: int, j: int) -> float:
        return float(self._matrix[i, j])

    def row(self, i: int) -> NDArray[np.float64]:
        """Distances from city i to every city. Read-only view."""
        return self._matrix[i]

    def path_length(self, tour: Sequence[int], closed: bool = True) -> float:
        """
        Length of a route visiting `tour` in order.

        closed=True adds the return edge tour[-1] → tour[0].
        """
        idx = np.asarray(tour, dtype=np.int64)
        if idx.size < 2:
            return 0.0
        total = float(self._matrix[idx[:-1], idx[1:]].sum())
        if closed:
            total += float(self._matrix[idx[-1], idx[0]])
        return total

    def heuristic(self) -> NDArray[np.float64]:
        """
        Return the η matrix (1 / distance), a new writable array.

        Diagonal is 0.0 (no self-loops). Off-diagonal zero distances map
        to +inf.
        """
        with np.errstate(divide="ignore"):
            eta = 1.0 / self._matrix
        np.fill_diagonal(eta, 0.0)
        return eta

    def snapshot(self) -> NDArray[np.float64]:
        """Writable deep copy of the matrix, for tests and inspection."""
        return self._matrix.copy()

    # ── Properties ────────────────────────────────────────────────────────────

    @property
    def n_cities(self) -> int:
        return self._n_cities

    @property
    def coords(self) -> NDArray[np.float64]:
        return self._coords

    @property
    def shape(self) -> tuple[int, int]:
        return (self._n_cities, self._n_cities)

    def __repr__(self) -> str:
        return (
            f"DistanceMatrix(n_cities={self._n_cities}, "
            f"max={self._matrix.max():.4f})"
        )
