"""
Optimization results container for DDMRP Engine.

This module provides the OptimizationResult class returned by
:meth:`ddmrpengine.solver.GeneticSolver.resolve`, holding the re-simulated
best model together with the search history.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

import numpy as np

from ddmrpengine.config import Config
from ddmrpengine.model import ProductionControlModel
from ddmrpengine.typing import Genes

if TYPE_CHECKING:  # pragma: no cover
    from pandas import DataFrame


def _import_pandas() -> Any:
    """
    Lazily import pandas with helpful error message if not installed.

    Returns
    -------
    module
        The pandas module.

    Raises
    ------
    ImportError
        If pandas is not installed.
    """
    try:
        import pandas as pd

        return pd
    except ImportError:  # pragma: no cover
        raise ImportError(
            "pandas is required for DataFrame export methods. "
            "Install it with: pip install pandas"
        ) from None


_STATE_FIELDS = (
    "buffer",
    "demand",
    "qualified_demand",
    "on_order_inventory",
    "order_amount",
    "replenishment_flag",
    "incoming_supply",
    "net_flow",
)


@dataclass(frozen=True, slots=True)
class OptimizationResult:
    """
    Outcome of one buffer-placement search.

    Attributes
    ----------
    final_model : ProductionControlModel
        Model planned with the best placement, status ``OPTIMUM_FOUND``.
    fitness_history : tuple of float
        Every fitness value computed during the search, in evaluation order.
    generation_best_fitness : tuple of float
        Best fitness seen so far, one value per generation.
    n_generations : int
        Generations evaluated before termination.
    n_evaluations : int
        Fitness evaluations performed (equals ``len(fitness_history)``).
    best_fitness : float
        Fitness of the returned placement.
    config : Config, optional
        Configuration the search ran with.

    Examples
    --------
    >>> import ddmrpengine as dd
    >>> result = dd.optimize("line.json", seed=1)  # doctest: +SKIP
    >>> result.buffers_activation  # doctest: +SKIP
    array([0, 1, 1], dtype=int8)
    >>> df = result.to_dataframe()  # doctest: +SKIP
    """

    final_model: ProductionControlModel
    fitness_history: tuple[float, ...] = ()
    generation_best_fitness: tuple[float, ...] = ()
    n_generations: int = 0
    n_evaluations: int = 0
    best_fitness: float = 0.0
    config: Config | None = None

    @property
    def buffers_activation(self) -> Genes:
        return self.final_model.buffers_activation

    @property
    def n_buffers(self) -> int:
        return int(self.buffers_activation.sum())

    @property
    def objective_value(self) -> float:
        return self.final_model.objective_value

    @property
    def average_buffer_level(self) -> float:
        return self.final_model.average_buffer_level

    @property
    def average_unsatisfied_demand(self) -> float:
        return self.final_model.average_unsatisfied_demand

    @property
    def summary(self) -> dict[str, Any]:
        """Scalar figures of the search, JSON-friendly."""
        return {
            "buffers_activation": self.buffers_activation.tolist(),
            "n_buffers": self.n_buffers,
            "objective_value": self.objective_value,
            "average_buffer_level": self.average_buffer_level,
            "average_unsatisfied_demand": self.average_unsatisfied_demand,
            "best_fitness": self.best_fitness,
            "n_generations": self.n_generations,
            "n_evaluations": self.n_evaluations,
        }

    def state_arrays(self) -> dict[str, np.ndarray]:
        """``(n_stations, planning_horizon)`` array per state attribute."""
        return {name: self.final_model.timeline_array(name) for name in _STATE_FIELDS}

    def to_dataframe(self) -> DataFrame:
        """
        Final model timelines in long format.

        Returns
        -------
        pd.DataFrame
            One row per (station, instant) with every state attribute and
            the station's buffer flag.

        Raises
        ------
        ImportError
            If pandas is not installed.
        """
        pd = _import_pandas()
        rows = []
        for station in self.final_model.stations:
            for state in station.state_timeline:
                row = state.as_dict()
                row["station"] = station.index
                row["has_buffer"] = station.has_buffer
                rows.append(row)
        df = pd.DataFrame(rows).set_index(["station", "instant"])
        return cast("DataFrame", df)

    def stations_dataframe(self) -> DataFrame:
        """Derived per-station quantities and buffer zones."""
        pd = _import_pandas()
        df = pd.DataFrame(
            [
                {
                    "station": s.index,
                    "has_buffer": s.has_buffer,
                    "average_demand": s.average_demand,
                    "demand_variability": s.demand_variability,
                    "decoupled_lead_time": s.decoupled_lead_time,
                    "lead_time_factor": s.lead_time_factor,
                    "TOR": s.TOR,
                    "TOY": s.TOY,
                    "TOG": s.TOG,
                }
                for s in self.final_model.stations
            ]
        ).set_index("station")
        return cast("DataFrame", df)

    def __repr__(self) -> str:
        return (
            f"OptimizationResult(buffers={self.buffers_activation.tolist()}, "
            f"objective={self.objective_value:.4f}, "
            f"generations={self.n_generations}, evaluations={self.n_evaluations})"
        )
