from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from route_planner.service import format_result, solve_file
from route_planner.shared.models import ReinforcementPolicy, UpdateOrder
from tsp_aco.validation import ConfigurationError, InputError, build_config

EXIT_OK = 0
EXIT_INVALID = 2


def build_argparser() -> argparse.ArgumentParser:
    """Command line parser for `aco-tsp`."""
    p = argparse.ArgumentParser(
        prog="aco-tsp",
        description="Ant Colony Optimisation for the Traveling Salesman Problem.",
    )
    p.add_argument("cities", help="Text file with one 'x,y' pair per line")

    aco = p.add_argument_group("ACO parameters")
    aco.add_argument("--ants", type=int, default=5, help="Ants per iteration")
    aco.add_argument("--iterations", type=int, default=100, help="Number of iterations")
    aco.add_argument("--tau0", type=float, default=0.1, help="Initial pheromone on every edge")
    aco.add_argument("--alpha", type=float, default=1.0, help="Pheromone influence")
    aco.add_argument("--beta", type=float, default=5.0, help="Inverse-distance influence")
    aco.add_argument("--rho", type=float, default=0.1, help="Evaporation rate in (0, 1)")
    aco.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs")
    aco.add_argument("--open", action="store_true",
                     help="Open path: do not count the return to the start city")
    aco.add_argument("--update-order", choices=[o.value for o in UpdateOrder],
                     default=UpdateOrder.DEPOSIT_THEN_EVAPORATE.value,
                     help="Order of deposit and evaporation in each update")
    aco.add_argument("--reinforcement", choices=[r.value for r in ReinforcementPolicy],
                     default=ReinforcementPolicy.GLOBAL_BEST.value,
                     help="Which tour reinforces the pheromone each iteration")
    aco.add_argument("--early-stop", type=int, default=None,
                     help="Stop after N iterations without improvement")

    out = p.add_argument_group("Output")
    out.add_argument("--log-level", default="WARNING",
                     choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                     help="Logging verbosity (stderr)")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for aco-tsp."""
    args = build_argparser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(
            population_size=args.ants,
            iterations=args.iterations,
            initial_pheromone=args.tau0,
            alpha=args.alpha,
            beta=args.beta,
            evaporation_rate=args.rho,
            seed=args.seed,
            closed_tour=not args.open,
            update_order=UpdateOrder(args.update_order),
            reinforcement=ReinforcementPolicy(args.reinforcement),
            stagnation_limit=args.early_stop,
        )
        result = solve_file(args.cities, config)
    except (InputError, ConfigurationError) as exc:
        print(f"error: {exc.reason}", file=sys.stderr)
        return EXIT_INVALID

    print(format_result(result))
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
