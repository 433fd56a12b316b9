"""
tsp_aco — Ant Colony Optimisation engine for the Traveling Salesman Problem.

Public API:
    ColonySolver        — run the colony, returns SolveResult
    InputError          — raised for unusable city input
    ConfigurationError  — raised for out-of-range solver options

Usage:
    from tsp_aco import ColonySolver, InputError
    from route_planner.shared.models import SolverConfig

    try:
        result = ColonySolver(cities, SolverConfig(seed=7)).run()
    except InputError as exc:
        ...                              # caller's responsibility
    print(result.tour, result.length)
"""

from tsp_aco.colony import ColonySolver
from tsp_aco.validation import ConfigurationError, InputError

__all__ = ["ColonySolver", "ConfigurationError", "InputError"]
