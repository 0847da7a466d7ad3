"""Command-line runner for DDMRP buffer-placement optimisation.

Usage:
    # Optimise the line described in line.json with package defaults
    ddmrp-optimize line.json

    # Reproducible run with a custom config file, saved under ./output/
    ddmrp-optimize line.json --config solver.yml --seed 7 --save

    # Four worker processes, progress bar, generation cap
    ddmrp-optimize line.yml --workers 4 --progress --max-generations 200
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from ddmrpengine.config import load_config, load_model_inputs
from ddmrpengine.errors import ConfigurationError
from ddmrpengine.io import create_run_dir, save_result
from ddmrpengine.logging import getLogger
from ddmrpengine.solver import GeneticSolver

log = getLogger(__name__)


def _cli(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="ddmrp-optimize",
        description="Optimise DDMRP buffer placement for a production line.",
    )
    p.add_argument("inputs", type=Path, help="Model inputs (JSON or YAML)")
    p.add_argument("--config", type=Path, default=None, help="Solver config (YAML)")
    p.add_argument("--seed", type=int, default=None, help="RNG seed")
    p.add_argument("--population", type=int, default=None, help="Population size")
    p.add_argument(
        "--max-generations", type=int, default=None, help="Hard generation cap"
    )
    p.add_argument(
        "--stagnation", type=int, default=None, help="Generations without improvement"
    )
    p.add_argument("--workers", type=int, default=None, help="Worker processes")
    p.add_argument("--progress", action="store_true", help="Show a progress bar")
    p.add_argument(
        "--log-level",
        default=None,
        choices=["DEEP_DEBUG", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level of the ddmrpengine loggers",
    )
    p.add_argument("--save", action="store_true", help="Save the result as JSON")
    p.add_argument(
        "--output-dir", type=Path, default=None, help="Parent of the run directory"
    )
    return p.parse_args(argv)


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for key, value in (
        ("seed", args.seed),
        ("population_size", args.population),
        ("max_generations", args.max_generations),
        ("stagnation_generations", args.stagnation),
        ("n_workers", args.workers),
    ):
        if value is not None:
            overrides[key] = value
    if args.progress:
        overrides["show_progress"] = True
    if args.log_level is not None:
        overrides["logging"] = {"default_level": args.log_level, "modules": {}}
    return overrides


def main(argv: list[str] | None = None) -> int:
    args = _cli(argv)

    try:
        config = load_config(args.config, **_overrides(args))
        inputs = load_model_inputs(args.inputs)
        result = GeneticSolver(config).resolve(inputs)
    except ConfigurationError as exc:
        log.error("Invalid inputs: %s", exc)
        return 2
    except ValueError as exc:
        log.error("Invalid configuration: %s", exc)
        return 2

    for key, value in result.summary.items():
        print(f"{key:>28}: {value}")

    if args.save:
        run_dir = create_run_dir(args.inputs.stem, args.output_dir)
        path = run_dir / "result.json"
        save_result(result, path)
        log.info("Result saved to %s", path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
