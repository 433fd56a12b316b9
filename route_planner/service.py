"""
route_planner/service.py
────────────────────────
The solve pipeline the CLI (and any other caller) goes through:

    coordinates ──► ColonySolver ──► SolveResult ──► format_result()
         ▲
    load_cities(path)   (solve_file only)

All validation happens inside ColonySolver's constructor, before the
first iteration. Errors propagate unchanged (InputError,
ConfigurationError); this layer only adds logging around them.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from route_planner.loader import load_cities
from route_planner.shared.models import SolveResult, SolverConfig
from tsp_aco import ColonySolver, ConfigurationError, InputError
from tsp_aco.validation import CityLike

logger = logging.getLogger(__name__)


def solve_route(
    cities: Sequence[CityLike], config: Optional[SolverConfig] = None
) -> SolveResult:
    """Solve one instance. Raises InputError / ConfigurationError."""
    try:
        solver = ColonySolver(cities, config)
    except (InputError, ConfigurationError) as exc:
        logger.warning("Rejected before solving: %s", exc.reason)
        raise
    return solver.run()


def solve_file(
    path: Union[str, Path], config: Optional[SolverConfig] = None
) -> SolveResult:
    """Load coordinates from `path` and solve them."""
    return solve_route(load_cities(path), config)


def format_result(result: SolveResult) -> str:
    """
    Render a result as two lines:

        Best tour length: 4.0
        Best tour: 0,1,2,3
    """
    return (
        f"Best tour length: {result.length}\n"
        f"Best tour: {','.join(map(str, result.tour))}"
    )
