# src/ddmrpengine/model/production_control.py
"""
Production control model: DDMRP simulation of one buffer placement.

``plan(buffers_activation)`` runs, in order:

1. average demand and forecast propagation (downstream first)
2. buffer flags from the activation vector
3. demand variability propagation (downstream first)
4. decoupled lead time propagation (upstream first)
5. lead-time factors
6. instant 0 seeding from the past series
7. forward simulation over instants 1 .. planning_horizon-1

Each instant of step 7 is resolved in two phases. Phase A moves stock
(incoming supply, buffer, on-order inventory) and only reads instants
``< t``. Phase B walks the line downstream first so that a station's
demand, built from its successors' orders at ``t``, is known before the
station decides its own replenishment.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from enum import IntEnum

import numpy as np

from ddmrpengine.errors import ModelStateError
from ddmrpengine.logging import DEBUG, DEEP_DEBUG, getLogger
from ddmrpengine.model.constraints import ReplenishmentsConstraint
from ddmrpengine.model.graph import PrecedenceGraph
from ddmrpengine.model.objective import MinBuffersAndMaxDemandsObjective
from ddmrpengine.model.station import Station
from ddmrpengine.typing import Float2D, Genes

__all__ = ["ModelStatus", "ProductionControlModel"]

log = getLogger(__name__)


class ModelStatus(IntEnum):
    CREATED = 0
    INPUTS_IMPORTED = 1
    PLANNED = 2
    OPTIMUM_FOUND = 3


class ProductionControlModel:
    """
    Stations, precedence graph, horizons, objective and constraints of one
    production line, plus the DDMRP simulation of a buffer placement.

    Instances are created by :class:`ddmrpengine.model.ModelBuilder`; a
    model constructed directly stays in status ``CREATED`` and refuses to
    plan.

    Parameters
    ----------
    stations : sequence of Station
        One station per index, in index order.
    graph : PrecedenceGraph
        Adjacency and input-ratio matrices.
    planning_horizon, past_horizon, peak_horizon : int
        Horizons, see :class:`ddmrpengine.config.ModelInputs`.
    peak_threshold : float
        Multiplier on TOR in the demand-spike test.
    buffer_weight, demand_weight, activation_cost : float
        Objective weights.
    big_m : float
        Tolerance bound of the replenishment constraint.
    replenish_unbuffered_outputs : bool
        Whether unbuffered output stations still hold stock and replenish.
    """

    def __init__(
        self,
        stations: Sequence[Station],
        graph: PrecedenceGraph,
        *,
        planning_horizon: int,
        past_horizon: int,
        peak_horizon: int,
        peak_threshold: float = 1.0,
        buffer_weight: float = 0.5,
        demand_weight: float = 0.5,
        activation_cost: float = 0.0,
        big_m: float = 1000.0,
        replenish_unbuffered_outputs: bool = False,
    ) -> None:
        self.stations = list(stations)
        self.graph = graph
        self.planning_horizon = planning_horizon
        self.past_horizon = past_horizon
        self.peak_horizon = peak_horizon
        self.peak_threshold = peak_threshold
        self.replenish_unbuffered_outputs = replenish_unbuffered_outputs
        self.status = ModelStatus.CREATED

        self.objective = MinBuffersAndMaxDemandsObjective(
            self.stations,
            buffer_weight=buffer_weight,
            demand_weight=demand_weight,
            activation_cost=activation_cost,
        )
        self.constraints = [ReplenishmentsConstraint(self.stations, big_m=big_m)]

        # upstream-first traversal, computed once per topology
        self._order = graph.topological_order()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def decision_variables_count(self) -> int:
        return len(self.stations)

    @property
    def buffers_activation(self) -> Genes:
        return np.array([s.has_buffer_int for s in self.stations], dtype=np.int8)

    def to_genes(self) -> Genes:
        """Current placement as a chromosome gene vector."""
        return self.buffers_activation

    def _require_planned(self) -> None:
        if self.status < ModelStatus.PLANNED:
            raise ModelStateError(
                f"Model status is {self.status.name}; call plan() first"
            )

    @property
    def objective_value(self) -> float:
        self._require_planned()
        return self.objective.evaluate()

    @property
    def average_buffer_level(self) -> float:
        self._require_planned()
        return self.objective.average_buffers_level()

    @property
    def average_unsatisfied_demand(self) -> float:
        self._require_planned()
        return self.objective.average_unsatisfied_demand()

    def constraints_verified(self) -> bool:
        self._require_planned()
        return all(c.is_verified() for c in self.constraints)

    def timeline_array(self, name: str) -> Float2D:
        """``(n_stations, planning_horizon)`` array of one state attribute."""
        return np.vstack([s.series(name) for s in self.stations])

    def holds_stock(self, station: Station) -> bool:
        """Buffered, or an output station under the unbuffered-output policy."""
        return station.has_buffer or (
            self.replenish_unbuffered_outputs and station.is_output_station
        )

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------
    def plan(self, buffers_activation: Sequence[int] | Genes) -> None:
        """
        Simulate the line for one buffer placement, in place.

        Parameters
        ----------
        buffers_activation : sequence of {0, 1}
            Bit ``i`` activates the buffer of station ``i``.

        Raises
        ------
        ModelStateError
            If the model was not imported through the builder, the vector
            is malformed, or buffer zones stay undefined after lead-time
            propagation (cyclic precedence graph).
        """
        if self.status < ModelStatus.INPUTS_IMPORTED:
            raise ModelStateError(
                "Model inputs were not imported and validated by ModelBuilder"
            )

        genes = np.asarray(buffers_activation).ravel()
        if genes.shape[0] != len(self.stations):
            raise ModelStateError(
                f"buffers_activation must have length {len(self.stations)}, "
                f"got {genes.shape[0]}"
            )
        if not np.isin(genes, (0, 1)).all():
            raise ModelStateError("buffers_activation must only contain 0 and 1")

        for station in self.stations:
            station.reset_derived()

        upstream_first = self._order
        downstream_first = self._order[::-1]

        self._propagate_average_demand(downstream_first)
        for station in self.stations:
            station.has_buffer = bool(genes[station.index])
        self._propagate_demand_variability(downstream_first)
        self._propagate_lead_time(upstream_first)
        self._set_lead_time_factors()

        undefined = [s.index for s in self.stations if s.TOR is None]
        if undefined:
            raise ModelStateError(
                f"Buffer zones undefined for stations {undefined} after lead-time "
                "propagation; the precedence graph probably contains a cycle"
            )

        if log.isEnabledFor(DEBUG):
            for s in self.stations:
                log.debug(
                    "  station %d: buffer=%s ADU=%.3f VF=%.3f DLT=%.3f LTF=%.3f "
                    "TOR=%.2f TOY=%.2f TOG=%.2f",
                    s.index,
                    s.has_buffer,
                    s.average_demand,
                    s.demand_variability,
                    s.decoupled_lead_time,
                    s.lead_time_factor,
                    s.TOR,
                    s.TOY,
                    s.TOG,
                )

        self._initialize_first_instant(downstream_first)
        for t in range(1, self.planning_horizon):
            self._simulate_instant(t, downstream_first)

        self.status = ModelStatus.PLANNED

    # ── step 1 ────────────────────────────────────────────────────────────
    def _propagate_average_demand(self, downstream_first: list[int]) -> None:
        ratio = self.graph.input_ratio
        for idx in downstream_first:
            station = self.stations[idx]
            if station.is_output_station:
                station.average_demand = float(np.mean(station.demand_forecast))
                continue

            successors = [self.stations[j] for j in self.graph.successors(idx)]
            if any(s.average_demand is None for s in successors):
                continue
            station.average_demand = float(
                sum(ratio[idx, s.index] * s.average_demand for s in successors)
            )
            station.demand_forecast = sum(
                ratio[idx, s.index] * s.demand_forecast for s in successors
            )

    # ── step 3 ────────────────────────────────────────────────────────────
    def _propagate_demand_variability(self, downstream_first: list[int]) -> None:
        ratio = self.graph.input_ratio
        for idx in downstream_first:
            station = self.stations[idx]
            if station.is_output_station:
                continue

            successors = [self.stations[j] for j in self.graph.successors(idx)]
            if any(s.demand_variability is None for s in successors):
                continue
            station.demand_variability = float(
                sum(ratio[idx, s.index] * s.demand_variability for s in successors)
            )

    # ── step 4 ────────────────────────────────────────────────────────────
    def _upstream_lead_time(self, station: Station) -> float:
        """Lead time a station passes downstream when it is not buffered."""
        if station.is_input_station:
            return station.processing_time + (station.lead_time or 0.0)
        return station.decoupled_lead_time

    def _propagate_lead_time(self, upstream_first: list[int]) -> None:
        adjacency = self.graph.adjacency
        for idx in upstream_first:
            station = self.stations[idx]
            if station.is_input_station:
                station.decoupled_lead_time = (
                    0.0 if station.has_buffer else float(station.processing_time)
                )
                continue

            predecessors = [self.stations[p] for p in self.graph.predecessors(idx)]
            if any(p.decoupled_lead_time is None for p in predecessors):
                continue
            station.decoupled_lead_time = float(station.processing_time) + sum(
                adjacency[p.index, idx]
                * (1 - p.has_buffer_int)
                * self._upstream_lead_time(p)
                for p in predecessors
            )

    # ── step 5 ────────────────────────────────────────────────────────────
    def _set_lead_time_factors(self) -> None:
        non_zero = [
            s.decoupled_lead_time
            for s in self.stations
            if s.decoupled_lead_time is not None and s.decoupled_lead_time != 0
        ]
        min_lead_time = min(non_zero) if non_zero else 0.0

        for station in self.stations:
            if station.decoupled_lead_time is None:
                continue
            if station.decoupled_lead_time == 0:
                station.lead_time_factor = 0.0
            else:
                station.lead_time_factor = min_lead_time / station.decoupled_lead_time

    # ── steps 6-7 ─────────────────────────────────────────────────────────
    def _ordering_lag(self, station: Station) -> int:
        return int(math.ceil(station.decoupled_lead_time))

    def _order_placed_at(self, station: Station, instant: int) -> int:
        if instant >= 0:
            order = station.state_timeline[instant].order_amount
            if order is None:
                raise ModelStateError(
                    f"Order of station {station.index} at {instant} was not "
                    "computed before it was needed"
                )
            return order
        past = station.past_state_at(instant)
        return 0 if past is None else past.order_amount

    def _initialize_first_instant(self, downstream_first: list[int]) -> None:
        for station in self.stations:
            state = station.state_timeline[0]
            if not self.holds_stock(station):
                state.buffer = 0
                state.on_order_inventory = 0
                state.order_amount = 0
                state.incoming_supply = 0
                continue

            lag = self._ordering_lag(station)
            past = station.past_state_at(0)
            state.buffer = station.initial_buffer if past is None else past.buffer
            state.order_amount = 0 if past is None else past.order_amount
            state.incoming_supply = self._order_placed_at(station, -1 - lag)
            # orders placed before 0 and arriving after 0
            state.on_order_inventory = sum(
                self._order_placed_at(station, k) for k in range(-lag, 0)
            )

        for idx in downstream_first:
            station = self.stations[idx]
            state = station.state_timeline[0]
            self._set_demand(station, 0)
            if self.holds_stock(station):
                state.replenishment_flag = bool(state.net_flow <= station.TOY)
            else:
                state.replenishment_flag = False

    def _simulate_instant(self, t: int, downstream_first: list[int]) -> None:
        # phase A: stock movements, reads instants < t only
        for station in self.stations:
            state = station.state_timeline[t]
            if not self.holds_stock(station):
                state.buffer = 0
                state.on_order_inventory = 0
                state.incoming_supply = 0
                continue

            previous = station.state_timeline[t - 1]
            supply = self._order_placed_at(station, t - 1 - self._ordering_lag(station))
            state.incoming_supply = supply
            state.buffer = max(previous.buffer + supply - previous.demand, 0)
            state.on_order_inventory = (
                previous.on_order_inventory + previous.order_amount - supply
            )

        # phase B: demand and replenishment, successors before predecessors
        for idx in downstream_first:
            station = self.stations[idx]
            state = station.state_timeline[t]
            self._set_demand(station, t)

            if not self.holds_stock(station):
                state.replenishment_flag = False
                state.order_amount = 0
                continue

            net_flow = state.net_flow
            replenish = net_flow <= station.TOY
            state.replenishment_flag = bool(replenish)
            if replenish:
                wanted = int(math.ceil(station.TOG - net_flow))
                available = self._available_upstream(station, t)
                state.order_amount = int(min(wanted, available))
            else:
                state.order_amount = 0

            if log.isEnabledFor(DEEP_DEBUG):
                log.deep(
                    "  t=%d station=%d demand=%d qd=%d buffer=%d on_order=%d "
                    "net_flow=%d replenish=%s order=%d",
                    t,
                    station.index,
                    state.demand,
                    state.qualified_demand,
                    state.buffer,
                    state.on_order_inventory,
                    net_flow,
                    state.replenishment_flag,
                    state.order_amount,
                )

    def _set_demand(self, station: Station, t: int) -> None:
        state = station.state_timeline[t]
        if station.is_output_station:
            state.demand = int(station.demand_forecast[t])
        else:
            ratio = self.graph.input_ratio
            demand = 0
            for j in self.graph.successors(station.index):
                successor = self.stations[j]
                succ_state = successor.state_timeline[t]
                # make-to-order successors pass their demand through
                pulled = (
                    succ_state.order_amount
                    if self.holds_stock(successor)
                    else succ_state.demand
                )
                demand += int(ratio[station.index, j]) * pulled
            state.demand = demand
        peak = self._peak_demand(station, t) if self.holds_stock(station) else 0
        state.qualified_demand = state.demand + peak

    def _peak_demand(self, station: Station, t: int) -> int:
        """Largest forecast spike within the peak horizon, 0 if none."""
        threshold = self.peak_threshold * station.TOR
        forecast = station.demand_forecast
        peak = 0
        for i in range(t, min(t + self.peak_horizon, self.planning_horizon)):
            if forecast[i] > (i - t + 1) * threshold:
                peak = max(peak, int(forecast[i]))
        return peak

    def _available_upstream(self, station: Station, t: int) -> float:
        """
        Quantity upstream stock can supply at ``t``.

        Walks through make-to-order predecessors; an input station is fed
        by external suppliers and is never capped.
        """
        if station.is_input_station:
            return math.inf

        ratio = self.graph.input_ratio
        available = 0.0
        for p in self.graph.predecessors(station.index):
            predecessor = self.stations[p]
            if self.holds_stock(predecessor):
                supply = float(predecessor.state_timeline[t].buffer)
            else:
                supply = self._available_upstream(predecessor, t)
            available += ratio[p, station.index] * supply
        return available

    def __repr__(self) -> str:
        return (
            f"ProductionControlModel(stations={len(self.stations)}, "
            f"planning_horizon={self.planning_horizon}, status={self.status.name})"
        )
