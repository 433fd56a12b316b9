"""
tsp_aco/ant.py
──────────────
One ant: constructs one complete route through every city.

What does an ant do?
─────────────────────
An ant is one independent exploration of the search space. Starting from
its start city it repeatedly picks an unvisited city to move to, not
always the nearest one, but more likely the nearer and more travelled
ones. Several ants per iteration produce several different routes; the
colony learns from the best.

The two inputs to every decision
──────────────────────────────────
1. Pheromone trail (τ)  — what did previous iterations learn?
   Read from the session's shared PheromoneMatrix.

2. Heuristic desirability (η) — how close is the candidate?
   η[i][j] = 1 / d[i][j]. η^β is precomputed once per session.

The selection formula
──────────────────────
score(c)  = τ[current][c]^α × η[current][c]^β      for every remaining c
P(c)      = score(c) / Σ score

One uniform draw u ∈ [0, Σ score) is mapped through the cumulative sum:
the chosen city is the first whose running total exceeds u.

State
─────
  visited   → preallocated int64 array + cursor. visited[:k] is the route.
  remaining → boolean mask of length n. remaining[c] is True while city c
              is still to be visited. O(1) membership, no list scans.

Terminal state: remaining is all False, visited holds n cities.

Degenerate scores
──────────────────
  • One city left → chosen directly, no random draw consumed.
  • Some candidates score +inf (a coincident city, or η^β overflow)
    → uniform choice among those candidates only.
  • Σ score is 0 or NaN (τ^α or η^β underflowed for every candidate)
    → uniform choice among all remaining cities. This is the defined
      fallback for numerical degeneracy: the ant always makes progress.
  • Σ score overflows to +inf while each score is finite
    → scores are rescaled by their maximum before normalising.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional

import numpy as np
from numpy.typing import NDArray

from tsp_aco.pheromone import trail_deposit
from tsp_aco.session import SolverSession

logger = logging.getLogger(__name__)


class Ant:
    """
    Builds one permutation of all cities using pheromone + heuristic.

    Lifecycle:
        1. __init__(session, start)  → visited = [start].
        2. construct()               → n − 1 calls to select_next_city().
        3. Read results:             → tour, calculate_tour_length(),
                                       trail_deposit().

    The ant is single-use: the colony creates fresh ants every iteration.
    It reads the session's matrices and never writes to them.
    """

    def __init__(self, session: SolverSession, start: int) -> None:
        n = session.n_cities
        if not 0 <= start < n:
            raise ValueError(f"Start city {start} outside [0, {n})")

        self._session = session
        self._n_cities = n

        self._visited: NDArray[np.int64] = np.empty(n, dtype=np.int64)
        self._visited[0] = start
        self._n_visited = 1

        self._remaining: NDArray[np.bool_] = np.ones(n, dtype=bool)
        self._remaining[start] = False

        self._current = start

    # ── Transition ────────────────────────────────────────────────────────────

    def select_next_city(self) -> int:
        """
        Choose the next city, move there, and return its index.

        Raises:
            RuntimeError: if the ant has already visited every city.
        """
        if self.is_complete:
            raise RuntimeError("Ant has already visited every city")

        candidates = np.flatnonzero(self._remaining)
        if candidates.size == 1:
            chosen = int(candidates[0])
        else:
            chosen = self._draw(candidates)

        self._visited[self._n_visited] = chosen
        self._n_visited += 1
        self._remaining[chosen] = False
        self._current = chosen
        return chosen

    def _draw(self, candidates: NDArray[np.int64]) -> int:
        """Roulette-wheel draw over `candidates` (see module docstring)."""
        session = self._session
        tau = session.pheromones.get_row(self._current)[candidates]
        weights = session.weights[self._current, candidates]

        with np.errstate(over="ignore", under="ignore", invalid="ignore"):
            scores = (tau ** session.config.alpha) * weights

        dominant = np.isposinf(scores)
        if dominant.any():
            return self._uniform(candidates[dominant])

        total = float(scores.sum())
        if math.isinf(total):
            scores = scores / scores.max()
            total = float(scores.sum())

        if not (math.isfinite(total) and total > 0.0):
            logger.debug(
                "Degenerate scores at city %d (total=%r); uniform choice "
                "among %d candidates",
                self._current, total, candidates.size,
            )
            return self._uniform(candidates)

        cumsum = np.cumsum(scores)
        u = session.rng.random() * cumsum[-1]
        # side="right": first running total strictly above u, so a
        # zero-score candidate is skipped.
        pos = int(np.searchsorted(cumsum, u, side="right"))
        # Rounding can leave u == cumsum[-1]; clamp to the last candidate
        # with a positive score. total > 0 guarantees one exists.
        pos = min(pos, int(np.flatnonzero(scores > 0.0)[-1]))
        return int(candidates[pos])

    def _uniform(self, candidates: NDArray[np.int64]) -> int:
        return int(candidates[self._session.rng.integers(candidates.size)])

    # ── Construction ──────────────────────────────────────────────────────────

    def construct(self) -> List[int]:
        """Walk until every city is visited; return the tour."""
        while not self.is_complete:
            self.select_next_city()
        return self.tour

    def calculate_tour_length(self, closed: Optional[bool] = None) -> float:
        """
        Length of the route walked so far.

        closed=None follows the session's closed_tour setting. The return
        edge is only added once the tour is complete.
        """
        if closed is None:
            closed = self._session.config.closed_tour
        return self._session.distances.path_length(
            self._visited[: self._n_visited], closed=closed and self.is_complete
        )

    def trail_deposit(
        self, tour_length: Optional[float] = None, closed: Optional[bool] = None
    ) -> NDArray[np.float64]:
        """
        This ant's TrailDeposit: Q / tour_length on every edge it walked.

        Pass tour_length when it is already known to avoid recomputing it.
        """
        if closed is None:
            closed = self._session.config.closed_tour
        closed = closed and self.is_complete
        if tour_length is None:
            tour_length = self.calculate_tour_length(closed)
        return trail_deposit(self.tour, tour_length, self._n_cities, closed=closed)

    # ── State ─────────────────────────────────────────────────────────────────

    @property
    def tour(self) -> List[int]:
        return self._visited[: self._n_visited].tolist()

    @property
    def remaining(self) -> List[int]:
        return np.flatnonzero(self._remaining).tolist()

    @property
    def current_city(self) -> int:
        return self._current

    @property
    def is_complete(self) -> bool:
        return self._n_visited == self._n_cities

    def is_visited(self, city: int) -> bool:
        return not self._remaining[city]

    def __repr__(self) -> str:
        return (
            f"Ant(visited={self._n_visited}/{self._n_cities}, "
            f"current={self._current})"
        )
