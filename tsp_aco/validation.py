"""
tsp_aco/validation.py
─────────────────────
Eager validation: the gate every input passes before the colony runs.

The ACO loop has no partial-failure surface once it starts: no I/O, no
retries, a fixed iteration budget. Anything that could go wrong must
therefore be caught here, before the first distance is computed.

What it checks
───────────────
  Cities (→ InputError):
    1. At least 2 cities. With one city there is no edge, so no tour.
    2. Every city is an (x, y) pair of real numbers.
    3. Every coordinate is finite. A NaN would silently poison every
       distance it touches, and through them every transition score.

  Configuration (→ ConfigurationError):
    1. population_size ≥ 1, iterations ≥ 1.
    2. initial_pheromone finite and > 0.
    3. evaporation_rate strictly inside (0, 1).
    4. alpha, beta finite and ≥ 0.
    5. stagnation_limit, when set, ≥ 1.

What it does NOT treat as an error
───────────────────────────────────
  All transition scores collapsing to zero during construction. That is
  numerical degeneracy, handled by the ant's uniform fallback.

Pydantic runs first (schema: types and coercion). These checks are the
semantic layer on top, same split as SolverConfig ↔ validate_config().
"""

from __future__ import annotations

import math
from typing import Any, Sequence, Union

import numpy as np
from numpy.typing import NDArray
from pydantic import ValidationError

from route_planner.shared.models import City, SolverConfig

CityLike = Union[City, Sequence[float]]

MIN_CITIES: int = 2
"""Smallest instance with at least one edge to walk."""


class InputError(Exception):
    """
    Raised when the city sequence cannot be solved.

    Attributes:
        reason: Human-readable explanation of what is wrong with the input.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class ConfigurationError(Exception):
    """
    Raised when a SolverConfig is out of its valid range.

    Attributes:
        reason: Human-readable explanation naming the offending option.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


# ── Cities ────────────────────────────────────────────────────────────────────

def validate_cities(cities: Sequence[CityLike]) -> NDArray[np.float64]:
    """
    Check a city sequence and return it as an (n, 2) float64 array.

    Accepts City models or plain (x, y) pairs, mixed freely.

    Raises:
        InputError: fewer than MIN_CITIES cities, a malformed pair, or a
                    non-finite coordinate.
    """
    if cities is None or len(cities) < MIN_CITIES:
        count = 0 if cities is None else len(cities)
        raise InputError(
            f"At least {MIN_CITIES} cities are required to form a tour, "
            f"got {count}."
        )

    rows = []
    for idx, city in enumerate(cities):
        if isinstance(city, City):
            rows.append(city.as_tuple())
            continue
        try:
            x, y = city
            rows.append((float(x), float(y)))
        except (TypeError, ValueError) as exc:
            raise InputError(
                f"City {idx} is not an (x, y) pair of numbers: {city!r}"
            ) from exc

    coords = np.array(rows, dtype=np.float64)

    bad = ~np.isfinite(coords).all(axis=1)
    if bad.any():
        first = int(np.flatnonzero(bad)[0])
        raise InputError(
            f"City {first} has a non-finite coordinate "
            f"({coords[first, 0]}, {coords[first, 1]})."
        )

    return coords


# ── Configuration ─────────────────────────────────────────────────────────────

def build_config(**options: Any) -> SolverConfig:
    """
    Construct a SolverConfig and validate it in one step.

    Pydantic schema errors (e.g. population_size="many") are re-raised as
    ConfigurationError so callers handle a single error type.
    """
    try:
        config = SolverConfig(**options)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid solver configuration: {exc}") from exc
    validate_config(config)
    return config


def validate_config(config: SolverConfig) -> None:
    """
    Run all semantic checks on a SolverConfig.

    Returns None on success.

    Raises:
        ConfigurationError: naming the first offending option.
    """
    _check_counts(config)
    _check_pheromone(config)
    _check_exponents(config)
    _check_stagnation_limit(config)
    _check_seed(config)


def _check_counts(config: SolverConfig) -> None:
    if config.population_size < 1:
        raise ConfigurationError(
            f"population_size must be ≥ 1, got {config.population_size}."
        )
    if config.iterations < 1:
        raise ConfigurationError(
            f"iterations must be ≥ 1, got {config.iterations}."
        )


def _check_pheromone(config: SolverConfig) -> None:
    tau0 = config.initial_pheromone
    if not math.isfinite(tau0) or tau0 <= 0.0:
        raise ConfigurationError(
            f"initial_pheromone must be a finite value > 0, got {tau0}."
        )
    rho = config.evaporation_rate
    # Also rejects NaN: every comparison with NaN is False.
    if not 0.0 < rho < 1.0:
        raise ConfigurationError(
            f"evaporation_rate must lie strictly inside (0, 1), got {rho}."
        )


def _check_exponents(config: SolverConfig) -> None:
    for name in ("alpha", "beta"):
        value = getattr(config, name)
        if not math.isfinite(value) or value < 0.0:
            raise ConfigurationError(
                f"{name} must be a finite value ≥ 0, got {value}."
            )


def _check_stagnation_limit(config: SolverConfig) -> None:
    limit = config.stagnation_limit
    if limit is not None and limit < 1:
        raise ConfigurationError(
            f"stagnation_limit must be ≥ 1 when set, got {limit}."
        )


def _check_seed(config: SolverConfig) -> None:
    # numpy seed sequences only accept non-negative integers.
    if config.seed is not None and config.seed < 0:
        raise ConfigurationError(
            f"seed must be ≥ 0 when set, got {config.seed}."
        )
