"""
tsp_aco/pheromone.py
────────────────────
The pheromone matrix: the colony's shared, persistent memory.

What is pheromone?
──────────────────
In nature, ants deposit chemical pheromone on paths they walk.
Shorter paths get reinforced more, and over time the colony converges on
a short route without any ant having a global view of the map.

In this solver:
  • "Path"   = moving from city i directly to city j.
  • "Better" = a shorter complete route.
  • τ[i][j]  = pheromone on the directed edge i → j.

Two forces balance each other:
  1. Evaporation  — global forgetting. Every edge decays by a factor
                    (1 − ρ) per update. Keeps early, mediocre routes from
                    locking the colony in forever.
  2. Deposit      — positive reinforcement. Edges of the reinforced tour
                    gain Q / tour_length. Shorter tours deposit more.

Update order
────────────
  DEPOSIT_THEN_EVAPORATE (default):  τ = (τ + Δτ) × (1 − ρ)
  EVAPORATE_THEN_DEPOSIT:            τ = τ × (1 − ρ) + Δτ

Both are followed by the floor clamp below. Only off-diagonal entries are
touched; the diagonal stays 0.0 and is never read (no self-loops).

Matrix layout
─────────────
  Shape : (n_cities, n_cities), float64.
  Directed: τ[i][j] and τ[j][i] evolve independently, because a deposit
  only reinforces the direction the ant actually travelled.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from route_planner.shared.models import UpdateOrder

# ── Pheromone constants ────────────────────────────────────────────────────────
# Module-level so tests can import and assert against them directly.

TAU_FLOOR: float = float(np.finfo(np.float64).tiny)
"""Minimum allowed off-diagonal pheromone (≈ 2.2e-308).

Evaporation multiplies by (1 − ρ) < 1 every iteration. On an edge that is
never reinforced the value decays geometrically; with enough iterations it
would underflow to exactly 0.0 and the edge could never be chosen again by
the probability rule. The floor keeps every edge strictly positive while
being far too small to change the dynamics of any realistic run.
"""

Q: float = 1.0
"""Deposit numerator: each traversed edge gains Q / tour_length."""


class PheromoneMatrix:
    """
    A 2D numpy array τ[n_cities][n_cities] storing pheromone levels.

    Used by:
        Ant.select_next_city()  → reads get_row() to score candidates.
        ColonySolver.run()      → calls update() once per iteration.
        Tests                   → calls snapshot() to inspect state.

    Thread safety:
        Not thread-safe. The colony constructs tours sequentially and
        updates on the same thread after every ant has finished, so
        readers never observe a half-applied update.
    """

    def __init__(self, n_cities: int, tau0: float) -> None:
        """
        Initialise a uniform pheromone matrix (every edge equally attractive).

        Raises:
            ValueError: if n_cities < 2 or tau0 is not > 0. The solver
                        validates both earlier; this guards direct use.
        """
        if n_cities < 2:
            raise ValueError(
                f"PheromoneMatrix requires n_cities≥2, got n_cities={n_cities}"
            )
        if not tau0 > 0.0:
            raise ValueError(f"PheromoneMatrix requires tau0>0, got tau0={tau0}")

        self._n_cities = n_cities
        self._matrix: NDArray[np.float64] = np.full(
            (n_cities, n_cities), tau0, dtype=np.float64
        )
        np.fill_diagonal(self._matrix, 0.0)
        self._off_diagonal: NDArray[np.bool_] = ~np.eye(n_cities, dtype=bool)

    # ── Core operations ────────────────────────────────────────────────────────

    def update(
        self,
        deposit: NDArray[np.float64],
        evaporation_rate: float,
        order: UpdateOrder = UpdateOrder.DEPOSIT_THEN_EVAPORATE,
    ) -> None:
        """
        Apply one reinforcement + evaporation cycle in place.

        Args:
            deposit:          TrailDeposit (or a sum of several), same shape
                              as the matrix, all entries ≥ 0.
            evaporation_rate: ρ in (0, 1).
            order:            which half is applied first (module docstring).

        Raises:
            ValueError: shape mismatch or a negative deposit entry. Either
                        would break the strictly-positive invariant.
        """
        deposit = np.asarray(deposit, dtype=np.float64)
        if deposit.shape != self._matrix.shape:
            raise ValueError(
                f"Deposit shape {deposit.shape} does not match pheromone "
                f"shape {self._matrix.shape}"
            )
        if (deposit < 0.0).any():
            raise ValueError("Pheromone deposits must be non-negative")

        keep = 1.0 - evaporation_rate
        mask = self._off_diagonal
        if order is UpdateOrder.DEPOSIT_THEN_EVAPORATE:
            self._matrix[mask] = (self._matrix[mask] + deposit[mask]) * keep
        else:
            self._matrix[mask] = self._matrix[mask] * keep + deposit[mask]

        self._matrix[mask] = np.maximum(self._matrix[mask], TAU_FLOOR)

    def get_row(self, i: int) -> NDArray[np.float64]:
        """
        Return the pheromone row for edges leaving city i.

        ⚠️ This is a VIEW, not a copy. The ant MUST NOT modify it; its
        score computation allocates its own arrays.
        """
        return self._matrix[i]

    # ── Inspection & testing ───────────────────────────────────────────────────

    def snapshot(self) -> NDArray[np.float64]:
        """Deep copy of the current state. Mutating it does not affect τ."""
        return self._matrix.copy()

    def off_diagonal(self) -> NDArray[np.float64]:
        """Flat copy of every off-diagonal entry (the ones that matter)."""
        return self._matrix[self._off_diagonal]

    # ── Properties ────────────────────────────────────────────────────────────

    @property
    def shape(self) -> tuple[int, int]:
        return (self._n_cities, self._n_cities)

    @property
    def n_cities(self) -> int:
        return self._n_cities

    def __repr__(self) -> str:
        values = self.off_diagonal()
        return (
            f"PheromoneMatrix(n_cities={self._n_cities}, "
            f"min={values.min():.4g}, max={values.max():.4g}, "
            f"mean={values.mean():.4g})"
        )


def trail_deposit(
    tour: Sequence[int], tour_length: float, n_cities: int, closed: bool = True
) -> NDArray[np.float64]:
    """
    Build one ant's TrailDeposit matrix.

    Every directed edge (tour[k], tour[k+1]) gets Q / tour_length; with
    closed=True the return edge (tour[-1], tour[0]) does too. All other
    entries are zero.

    A tour of length 0 (every city at the same point) deposits nothing:
    Q / 0 has no meaningful value and would put +inf into τ.
    """
    deposit = np.zeros((n_cities, n_cities), dtype=np.float64)
    if tour_length <= 0.0 or len(tour) < 2:
        return deposit

    idx = np.asarray(tour, dtype=np.int64)
    src, dst = idx[:-1], idx[1:]
    if closed:
        src = np.append(src, idx[-1])
        dst = np.append(dst, idx[0])

    # Unbuffered add: an edge listed twice is credited twice.
    np.add.at(deposit, (src, dst), Q / tour_length)
    return deposit
