"""
DDMRP Engine - Buffer Placement Optimisation for Production Lines
=================================================================

DDMRP Engine decides at which stations of a multi-stage production line
a Demand Driven MRP (DDMRP) stock buffer should be placed. Each candidate
placement is simulated over a planning horizon and scored by a weighted
cost of inventory held and demand left unsatisfied; a genetic search
looks for the cheapest placement.

Quick Start
-----------
Optimise a line described in a JSON file with the default configuration:

>>> import ddmrpengine as dd
>>> result = dd.optimize("line.json", seed=42)  # doctest: +SKIP
>>> result.buffers_activation  # doctest: +SKIP
array([0, 1, 1], dtype=int8)

Custom configuration via kwargs:

>>> result = dd.optimize(
...     "line.json",
...     population_size=30,
...     stagnation_generations=20,
...     seed=42,
... )  # doctest: +SKIP

Simulate one placement by hand:

>>> model = dd.ModelBuilder.create_from_file("line.json")  # doctest: +SKIP
>>> model.plan([0, 1, 1])  # doctest: +SKIP
>>> model.objective_value  # doctest: +SKIP

Key Concepts
------------
**Buffer Zones**
  A buffered station replenishes whenever its net flow (buffer plus
  on-order minus qualified demand) drops to the top of yellow (TOY), up to
  the top of green (TOG).

**Decoupling**
  A buffer absorbs the lead time of everything upstream: stations
  downstream of it only see lead time accumulated after it.

**Deterministic RNG**
  A fixed seed gives a reproducible search.

Public API
----------
optimize
    Load inputs and configuration, run the genetic search.
ModelBuilder, ProductionControlModel
    Build and simulate a production line.
GeneticSolver
    Genetic search over buffer placements.
OptimizationResult
    Best placement, re-simulated model and search history.
load_config, load_model_inputs
    Configuration and input loading.
ConfigurationError, ModelStateError
    Error types.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ddmrpengine import logging
from ddmrpengine.config import (
    Config,
    ModelInputs,
    StationDeclaration,
    StationInputLink,
    load_config,
    load_model_inputs,
)
from ddmrpengine.errors import ConfigurationError, DdmrpError, ModelStateError
from ddmrpengine.model import ModelBuilder, ModelStatus, ProductionControlModel
from ddmrpengine.results import OptimizationResult
from ddmrpengine.solver import GeneticSolver, ProductionControlSolver

__version__ = "0.1.0"


def optimize(
    inputs: ModelInputs | str | Path | Mapping[str, Any],
    config: str | Path | Mapping[str, Any] | None = None,
    **overrides: Any,
) -> OptimizationResult:
    """
    Find a buffer placement for a production line.

    Parameters
    ----------
    inputs : ModelInputs, str, Path or Mapping
        Line description, or a JSON/YAML file or mapping holding one.
    config : str, Path, Mapping or None
        Solver configuration (YAML file or mapping).
    **overrides
        Individual configuration parameters, applied last.

    Returns
    -------
    OptimizationResult

    Raises
    ------
    ConfigurationError
        If the inputs are invalid.
    ValueError
        If the configuration is invalid.
    """
    if not isinstance(inputs, ModelInputs):
        inputs = load_model_inputs(inputs)
    return GeneticSolver(config, **overrides).resolve(inputs)


__all__ = [
    "Config",
    "ConfigurationError",
    "DdmrpError",
    "GeneticSolver",
    "ModelBuilder",
    "ModelInputs",
    "ModelStateError",
    "ModelStatus",
    "OptimizationResult",
    "ProductionControlModel",
    "ProductionControlSolver",
    "StationDeclaration",
    "StationInputLink",
    "load_config",
    "load_model_inputs",
    "logging",
    "optimize",
    "__version__",
]
