# src/ddmrpengine/model/builder.py
"""
Construction of production control models from validated inputs.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import numpy as np

from ddmrpengine.config import (
    Config,
    ConfigValidator,
    ModelInputs,
    StationDeclaration,
    load_config,
    load_model_inputs,
)
from ddmrpengine.logging import getLogger
from ddmrpengine.model.graph import PrecedenceGraph
from ddmrpengine.model.production_control import ModelStatus, ProductionControlModel
from ddmrpengine.model.station import PastState, Station, TimeIndexedState

__all__ = ["ModelBuilder"]

log = getLogger(__name__)


def _past_states(decl: StationDeclaration, past_horizon: int) -> list[PastState]:
    """Past series at instants ``-past_horizon+1 .. 0``; [] when none declared."""
    if past_horizon == 0 or (decl.past_buffer is None and decl.past_order_amount is None):
        return []
    buffers = decl.past_buffer or (0,) * past_horizon
    orders = decl.past_order_amount or (0,) * past_horizon
    first = -past_horizon + 1
    return [
        PastState(instant=first + k, buffer=int(b), order_amount=int(o))
        for k, (b, o) in enumerate(zip(buffers, orders))
    ]


class ModelBuilder:
    """
    Validate model inputs and assemble a :class:`ProductionControlModel`.

    Every rule of ``ConfigValidator.validate_inputs`` is checked before any
    station is created, so a failing input never yields a partial model.

    Examples
    --------
    >>> from ddmrpengine.model import ModelBuilder
    >>> model = ModelBuilder.create_from_file("line.json")  # doctest: +SKIP
    >>> model.plan([0, 1, 1])  # doctest: +SKIP
    """

    @staticmethod
    def get_inputs_from_file(path: str | Path) -> ModelInputs:
        """Read model inputs (JSON or YAML) without building a model."""
        return load_model_inputs(path)

    @classmethod
    def create_from_file(
        cls,
        path: str | Path,
        config: Config | str | Path | Mapping[str, Any] | None = None,
    ) -> ProductionControlModel:
        """Shortcut for ``create_from_inputs(get_inputs_from_file(path))``."""
        return cls.create_from_inputs(cls.get_inputs_from_file(path), config)

    @classmethod
    def create_from_inputs(
        cls,
        inputs: ModelInputs,
        config: Config | str | Path | Mapping[str, Any] | None = None,
        *,
        validate: bool = True,
    ) -> ProductionControlModel:
        """
        Build a model with empty timelines, ready to be planned.

        Parameters
        ----------
        inputs : ModelInputs
            Production line description.
        config : Config, str, Path, Mapping or None
            Solver configuration, or anything :func:`load_config` accepts.
            Only the objective weights and simulation policies are used.
        validate : bool, default True
            Skip input validation when False. Reserved for callers that
            already validated the same inputs, such as the fitness function.

        Returns
        -------
        ProductionControlModel
            Model in status ``INPUTS_IMPORTED``.

        Raises
        ------
        ConfigurationError
            If the inputs break any validation rule.
        """
        if validate:
            ConfigValidator.validate_inputs(inputs)
        cfg = config if isinstance(config, Config) else load_config(config)

        declarations = sorted(inputs.stations, key=lambda d: d.index)
        n = len(declarations)
        graph = PrecedenceGraph.from_links(
            n,
            (
                (d.index, link.next_station_index, link.input_amount)
                for d in declarations
                for link in d.next_stations
            ),
        )

        stations = []
        for d in declarations:
            is_output = graph.is_output(d.index)
            # forecasts of non-output stations are derived, never declared
            forecast = (
                np.asarray(d.demand_forecast, dtype=np.int64)
                if is_output and d.demand_forecast is not None
                else None
            )
            station = Station(
                index=d.index,
                processing_time=float(d.processing_time),
                is_input_station=graph.is_input(d.index),
                is_output_station=is_output,
                lead_time=d.lead_time,
                initial_buffer=d.initial_buffer or 0,
                declared_variability=d.demand_variability,
                declared_forecast=forecast,
                state_timeline=[
                    TimeIndexedState(instant=t) for t in range(inputs.planning_horizon)
                ],
                past_states=_past_states(d, inputs.past_horizon),
            )
            station.reset_derived()
            stations.append(station)

        model = ProductionControlModel(
            stations,
            graph,
            planning_horizon=inputs.planning_horizon,
            past_horizon=inputs.past_horizon,
            peak_horizon=inputs.peak_horizon,
            peak_threshold=float(inputs.peak_threshold),
            buffer_weight=cfg.buffer_weight,
            demand_weight=cfg.demand_weight,
            activation_cost=cfg.activation_cost,
            big_m=cfg.big_m,
            replenish_unbuffered_outputs=cfg.replenish_unbuffered_outputs,
        )
        model.status = ModelStatus.INPUTS_IMPORTED
        log.debug(
            "Built model: %d stations, %d links, planning horizon %d",
            n,
            int(graph.adjacency.sum()),
            inputs.planning_horizon,
        )
        return model
