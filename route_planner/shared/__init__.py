"""Shared models used by both the engine (tsp_aco) and the route planner."""
