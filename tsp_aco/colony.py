"""
tsp_aco/colony.py
─────────────────
The ColonySolver: orchestrates all ants across all iterations.

How the colony works
─────────────────────
The colony is the outer loop of the ACO algorithm. It:

  1. Creates a SolverSession (distance matrix, pheromone matrix, η^β,
     random source), validating cities and configuration first.
  2. For each iteration:
       a. Spawns population_size ants, each at a uniformly random start.
       b. Drives every ant to a complete tour and measures its length.
       c. Replaces the run-wide best whenever a tour is strictly shorter.
       d. Builds each ant's TrailDeposit (its slot in the iteration's list
          identifies it, never a search by content).
       e. Applies exactly one PheromoneMatrix update.
  3. After the last iteration: returns the best tour found across ALL
     iterations (not just the last one), as a SolveResult.

Which trail reinforces?
────────────────────────
  GLOBAL_BEST (default): the deposit of the best-so-far tour. It is stored
    when that tour is found and reused on every later iteration until a
    better tour replaces it, so it always belongs to the tour it claims to.
  ITERATION_BEST: the deposit of this iteration's best ant.

Early stopping
───────────────
Off by default: the loop runs the configured number of iterations. With
stagnation_limit=k it stops after k consecutive iterations without a
strictly shorter tour.
"""

from __future__ import annotations

import logging
import math
import time
from typing import List, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from route_planner.shared.models import (
    ReinforcementPolicy,
    SolveResult,
    SolverConfig,
)
from tsp_aco.ant import Ant
from tsp_aco.session import SolverSession
from tsp_aco.validation import CityLike

logger = logging.getLogger(__name__)


class ColonySolver:
    """
    Runs the full ACO colony and returns the best route.

    Usage:
        solver = ColonySolver(cities, SolverConfig(seed=42))
        result = solver.run()     # SolveResult(tour=[...], length=...)

    After run():
        solver.last_run_ms  → wall-clock time of the last run() call.

    run() can be called again; each call continues from the current
    pheromone state and the current position of the random source.
    """

    def __init__(
        self,
        cities: Sequence[CityLike],
        config: Optional[SolverConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """
        Validate eagerly and build the session.

        Args:
            cities: (x, y) pairs or City models, at least 2, all finite.
            config: SolverConfig; defaults to SolverConfig().
            rng:    injected random source; overrides config.seed.

        Raises:
            ConfigurationError: config out of range.
            InputError:         cities unusable.
        """
        self._config = config if config is not None else SolverConfig()
        self._session = SolverSession.create(cities, self._config, rng)
        self.last_run_ms: float = 0.0

    # ── Iteration pieces ──────────────────────────────────────────────────────

    def _spawn_ants(self) -> List[Ant]:
        n = self._session.n_cities
        rng = self._session.rng
        return [
            Ant(self._session, int(rng.integers(n)))
            for _ in range(self._config.population_size)
        ]

    # ── Main colony loop ───────────────────────────────────────────────────────

    def run(self) -> SolveResult:
        """
        Execute every iteration and return the best solution found.

        Returns:
            SolveResult with the best tour, its length, and the best-so-far
            length after each iteration in `history`.
        """
        config = self._config
        session = self._session
        closed = config.closed_tour

        logger.info(
            "Solving %d cities: %d ants × %d iterations "
            "(alpha=%s, beta=%s, rho=%s, tau0=%s, %s, %s)",
            session.n_cities, config.population_size, config.iterations,
            config.alpha, config.beta, config.evaporation_rate,
            config.initial_pheromone,
            "closed" if closed else "open", config.reinforcement.value,
        )

        start = time.perf_counter()

        # Track the globally best solution across all iterations
        best_tour: Optional[List[int]] = None
        best_length: float = math.inf
        best_deposit: Optional[NDArray[np.float64]] = None
        history: List[float] = []
        stagnation = 0
        iterations_run = 0

        for iteration in range(config.iterations):
            ants = self._spawn_ants()

            lengths: List[float] = []
            for ant in ants:
                ant.construct()
                lengths.append(ant.calculate_tour_length(closed))

            deposits = [
                ant.trail_deposit(length, closed)
                for ant, length in zip(ants, lengths)
            ]

            # Slot of this iteration's best ant; ties keep the earliest.
            slot = int(np.argmin(lengths))

            improved = lengths[slot] < best_length
            if improved:
                best_length = lengths[slot]
                best_tour = ants[slot].tour
                best_deposit = deposits[slot]
                stagnation = 0
            else:
                stagnation += 1

            # best_deposit stays None until some tour beats +inf.
            if (
                config.reinforcement is ReinforcementPolicy.GLOBAL_BEST
                and best_deposit is not None
            ):
                reinforcing = best_deposit
            else:
                reinforcing = deposits[slot]

            session.pheromones.update(
                reinforcing, config.evaporation_rate, config.update_order
            )

            history.append(best_length)
            iterations_run = iteration + 1
            logger.debug(
                "Iteration %d: iteration best %.6f, best so far %.6f%s",
                iterations_run, lengths[slot], best_length,
                " (improved)" if improved else "",
            )

            if (
                config.stagnation_limit is not None
                and stagnation >= config.stagnation_limit
            ):
                logger.info(
                    "Early stop after %d iterations: no improvement in %d",
                    iterations_run, stagnation,
                )
                break

        self.last_run_ms = (time.perf_counter() - start) * 1000.0

        logger.info(
            "Best %s tour length %.6f after %d iterations (%.2f ms)",
            "closed" if closed else "open",
            best_length, iterations_run, self.last_run_ms,
        )

        return SolveResult(
            tour=best_tour,
            length=best_length,
            closed=closed,
            iterations_run=iterations_run,
            history=history,
            elapsed_ms=self.last_run_ms,
        )

    # ── Properties ────────────────────────────────────────────────────────────

    @property
    def config(self) -> SolverConfig:
        return self._config

    @property
    def session(self) -> SolverSession:
        return self._session

    def __repr__(self) -> str:
        return (
            f"ColonySolver(cities={self._session.n_cities}, "
            f"ants={self._config.population_size}, "
            f"iterations={self._config.iterations}, "
            f"last_run_ms={self.last_run_ms:.2f})"
        )
