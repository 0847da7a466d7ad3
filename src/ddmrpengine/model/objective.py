# src/ddmrpengine/model/objective.py
"""
Cost objective of a simulated production control model.

    cost = w_b · mean_{buffered s}( mean_t buffer[s, t] )
         + w_d · mean_{output s}( mean_t max(0, demand[s, t] − buffer[s, t]) )
         + c_a · #buffers

Both main terms are non-negative; the search minimises ``cost`` by
maximising ``1 / cost``.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from ddmrpengine.errors import ModelStateError
from ddmrpengine.model.station import Station


class MinBuffersAndMaxDemandsObjective:
    """Weighted buffer-inventory and unsatisfied-demand cost."""

    def __init__(
        self,
        stations: Sequence[Station],
        *,
        buffer_weight: float = 0.5,
        demand_weight: float = 0.5,
        activation_cost: float = 0.0,
    ) -> None:
        self._stations = stations
        self.buffer_weight = buffer_weight
        self.demand_weight = demand_weight
        self.activation_cost = activation_cost

    def average_buffers_level(self) -> float:
        """Mean over buffered stations of the time-averaged buffer level."""
        buffered = [s for s in self._stations if s.has_buffer]
        if not buffered:
            return 0.0
        levels = [np.mean(self._series(s, "buffer")) for s in buffered]
        return float(np.mean(levels))

    def average_unsatisfied_demand(self) -> float:
        """Mean over output stations of the time-averaged demand shortfall."""
        outputs = [s for s in self._stations if s.is_output_station]
        if not outputs:
            return 0.0
        shortfalls = [
            np.mean(
                np.maximum(self._series(s, "demand") - self._series(s, "buffer"), 0.0)
            )
            for s in outputs
        ]
        return float(np.mean(shortfalls))

    def number_of_activated_buffers(self) -> int:
        return sum(1 for s in self._stations if s.has_buffer)

    def evaluate(self) -> float:
        return (
            self.buffer_weight * self.average_buffers_level()
            + self.demand_weight * self.average_unsatisfied_demand()
            + self.activation_cost * self.number_of_activated_buffers()
        )

    @staticmethod
    def _series(station: Station, name: str) -> np.ndarray:
        values = station.series(name)
        if np.isnan(values).any():
            raise ModelStateError(
                f"Station {station.index} has undefined '{name}' values; "
                "plan the model before evaluating the objective"
            )
        return values
