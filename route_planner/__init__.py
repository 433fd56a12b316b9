"""
route_planner — everything around the ACO engine.

    route_planner.shared.models  — pydantic models (City, SolverConfig, SolveResult)
    route_planner.loader         — read city coordinates from text files
    route_planner.service        — validate, solve, log, format
    route_planner.cli            — `aco-tsp` command line entry point

Nothing is imported here: tsp_aco depends on route_planner.shared, and
route_planner.service depends on tsp_aco.
"""
