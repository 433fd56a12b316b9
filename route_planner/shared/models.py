"""
route_planner/shared/models.py
──────────────────────────────
The single source of truth for every data structure the route planner
passes between its layers.

Design philosophy
-----------------
Every model answers one question: "What does the solver *need to know*
(or hand back) to plan one route?"

  City          → one point to visit. Immutable, identified by position.
  SolverConfig  → every tunable knob of the ACO engine, with defaults.
  SolveResult   → the best route found and how the run got there.

Pydantic handles schema correctness (types, coercion). Semantic rules
(evaporation rate inside (0, 1), at least two cities, finite coordinates)
are checked afterwards by tsp_aco/validation.py, which raises the
domain errors InputError / ConfigurationError.

Reading guide
-------------
Read top-to-bottom. Each model builds on the ones above it.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 1: ENUMERATIONS
# ─────────────────────────────────────────────────────────────────────────────

class UpdateOrder(str, Enum):
    """
    Order of the two halves of the pheromone update.

    DEPOSIT_THEN_EVAPORATE → τ = (τ + Δτ) × (1 − ρ)
                             The fresh deposit decays together with the
                             old trail. Default.
    EVAPORATE_THEN_DEPOSIT → τ = τ × (1 − ρ) + Δτ
                             Textbook Ant System form. Reinforcement is
                             applied at full strength; converges faster.
    """
    DEPOSIT_THEN_EVAPORATE = "deposit-then-evaporate"
    EVAPORATE_THEN_DEPOSIT = "evaporate-then-deposit"


class ReinforcementPolicy(str, Enum):
    """
    Which trail feeds the single pheromone update of an iteration.

    GLOBAL_BEST    → the TrailDeposit of the best tour seen in the whole
                     run. Persisted across iterations, so it is valid even
                     when the current iteration did not improve.
    ITERATION_BEST → the TrailDeposit of the best ant of this iteration
                     only (standard elitist ACO).
    """
    GLOBAL_BEST = "global-best"
    ITERATION_BEST = "iteration-best"


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 2: INPUT MODELS
# ─────────────────────────────────────────────────────────────────────────────

class City(BaseModel):
    """
    A 2D point to visit.

    Identity is positional: city k is whatever sits at index k of the
    sequence handed to the solver. Two cities may share coordinates; the
    solver treats the edge between them as free.
    """
    model_config = ConfigDict(frozen=True)

    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


class SolverConfig(BaseModel):
    """
    Configuration of one colony run.

    Fields:
        population_size   → ants constructing a tour per iteration.
        iterations        → number of construct-then-update cycles.
        initial_pheromone → τ₀, starting desirability on every edge.
        alpha             → exponent on pheromone in the transition rule.
        beta              → exponent on 1/distance in the transition rule.
        evaporation_rate  → ρ, fraction of pheromone removed per update.
        seed              → seed for the run's random source. None means
                            fresh OS entropy (non-reproducible).
        closed_tour       → True: the route returns to its start and the
                            return edge counts towards length and deposit.
                            False: open Hamiltonian path.
        update_order      → see UpdateOrder.
        reinforcement     → see ReinforcementPolicy.
        stagnation_limit  → stop early after this many consecutive
                            iterations without improvement. None disables
                            early stopping.
    """
    model_config = ConfigDict(frozen=True)

    population_size: int = Field(5, description="Ants per iteration")
    iterations: int = Field(100, description="Construct-then-update cycles")
    initial_pheromone: float = Field(0.1, description="τ₀ on every edge")
    alpha: float = Field(1.0, description="Pheromone influence exponent")
    beta: float = Field(5.0, description="Inverse-distance influence exponent")
    evaporation_rate: float = Field(0.1, description="ρ, in (0, 1)")
    seed: Optional[int] = Field(None, description="Random source seed")
    closed_tour: bool = Field(True, description="Count the return edge")
    update_order: UpdateOrder = UpdateOrder.DEPOSIT_THEN_EVAPORATE
    reinforcement: ReinforcementPolicy = ReinforcementPolicy.GLOBAL_BEST
    stagnation_limit: Optional[int] = Field(
        None, description="Early-stop after N iterations without improvement"
    )


# ─────────────────────────────────────────────────────────────────────────────
# SECTION 3: OUTPUT MODELS
# ─────────────────────────────────────────────────────────────────────────────

class SolveResult(BaseModel):
    """
    The best solution of one run.

    Fields:
        tour           → best route as city indices (a permutation).
        length         → its length under the run's open/closed policy.
        closed         → whether length includes the return edge.
        iterations_run → iterations actually executed (< configured when
                         early stopping fired).
        history        → best-so-far length after each iteration.
                         Monotonically non-increasing.
        elapsed_ms     → wall-clock duration of the iteration loop.
    """
    tour: List[int]
    length: float = Field(..., ge=0)
    closed: bool = True
    iterations_run: int = Field(..., ge=0)
    history: List[float] = Field(default_factory=list)
    elapsed_ms: float = Field(0.0, ge=0)

    def coordinates(
        self, cities: Sequence[Union[City, Tuple[float, float]]]
    ) -> List[Tuple[float, float]]:
        """Map the tour back onto the coordinates it was solved for."""
        points = [c.as_tuple() if isinstance(c, City) else (float(c[0]), float(c[1]))
                  for c in cities]
        return [points[i] for i in self.tour]
