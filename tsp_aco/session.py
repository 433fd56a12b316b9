"""
tsp_aco/session.py
──────────────────
SolverSession: everything one colony run shares, in one explicit object.

A run needs a distance matrix, a pheromone matrix, the configuration and a
random source. None of them live in module globals: the ColonySolver
creates one SolverSession and hands the same reference to every Ant it
spawns. Two solvers in one process never see each other's state.

Ownership
─────────
  distances   → read-only for the whole run.
  weights     → η^β, precomputed once (β is fixed for the run). Read-only.
  pheromones  → read by ants during an iteration, mutated by the solver
                once at the end of it.
  rng         → the single random source of the run. Every start city and
                every transition draw comes from it, in a fixed order, so
                a fixed seed reproduces the whole run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from route_planner.shared.models import SolverConfig
from tsp_aco.distance import DistanceMatrix
from tsp_aco.pheromone import PheromoneMatrix
from tsp_aco.validation import CityLike, validate_config


@dataclass
class SolverSession:
    config: SolverConfig
    distances: DistanceMatrix
    pheromones: PheromoneMatrix
    weights: NDArray[np.float64]
    rng: np.random.Generator

    @classmethod
    def create(
        cls,
        cities: Sequence[CityLike],
        config: SolverConfig,
        rng: Optional[np.random.Generator] = None,
    ) -> "SolverSession":
        """
        Validate inputs and build every shared structure for one run.

        Args:
            cities: (x, y) pairs or City models, at least 2.
            config: validated here, before anything is allocated.
            rng:    injected random source. Defaults to
                    np.random.default_rng(config.seed).

        Raises:
            ConfigurationError: config out of range.
            InputError:         cities unusable.
        """
        validate_config(config)
        distances = DistanceMatrix.build(cities)

        # inf ** β stays inf for β > 0 and becomes 1.0 for β == 0, which is
        # exactly "distance is ignored".
        with np.errstate(over="ignore"):
            weights = distances.heuristic() ** config.beta
        weights.setflags(write=False)

        return cls(
            config=config,
            distances=distances,
            pheromones=PheromoneMatrix(distances.n_cities, config.initial_pheromone),
            weights=weights,
            rng=rng if rng is not None else np.random.default_rng(config.seed),
        )

    @property
    def n_cities(self) -> int:
        return self.distances.n_cities
