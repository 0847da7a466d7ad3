# src/ddmrpengine/model/station.py
"""
Station and time-indexed state containers.

A :class:`Station` carries the static attributes declared for one
production position, the quantities derived from the line topology when a
buffer placement is planned (average demand, variability, decoupled lead
time, lead-time factor) and its state timeline.

Buffer zones
------------
Once decoupled lead time (DLT), lead-time factor (LTF), average demand
(ADU) and demand variability (VF) are known:

    TOR = DLT · ADU · LTF · (1 + VF)
    TOY = TOR + DLT · ADU
    TOG = TOY + DLT · ADU · LTF

Before that, the three thresholds are None.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

import numpy as np

from ddmrpengine.typing import Int1D


@dataclass(slots=True, frozen=True)
class PastState:
    """Buffer level and order placed at a past instant (instant <= 0)."""

    instant: int
    buffer: int
    order_amount: int


@dataclass(slots=True)
class TimeIndexedState:
    """
    One instant of a station's simulated state.

    ``net_flow`` is derived on every read, never stored.
    """

    instant: int
    buffer: int | None = None
    demand: int | None = None
    qualified_demand: int | None = None
    on_order_inventory: int | None = None
    order_amount: int | None = None
    replenishment_flag: bool | None = None
    incoming_supply: int | None = None

    @property
    def net_flow(self) -> int | None:
        """buffer + on-order inventory − qualified demand."""
        if (
            self.buffer is None
            or self.on_order_inventory is None
            or self.qualified_demand is None
        ):
            return None
        return self.buffer + self.on_order_inventory - self.qualified_demand

    def reset(self) -> None:
        """Clear everything but the instant."""
        self.buffer = None
        self.demand = None
        self.qualified_demand = None
        self.on_order_inventory = None
        self.order_amount = None
        self.replenishment_flag = None
        self.incoming_supply = None

    def as_dict(self) -> dict[str, Any]:
        """Plain-dict snapshot, including the derived net flow."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["net_flow"] = self.net_flow
        return data


@dataclass(slots=True)
class Station:
    """
    One production position of the line.

    Static attributes come from the station declaration; the ``derived``
    group is (re)computed by ``ProductionControlModel.plan``.
    """

    # static
    index: int
    processing_time: float
    is_input_station: bool
    is_output_station: bool
    lead_time: float | None = None
    initial_buffer: int = 0
    declared_variability: float | None = None
    declared_forecast: Int1D | None = None

    # decision variable
    has_buffer: bool = False

    # derived
    demand_forecast: Int1D | None = None
    average_demand: float | None = None
    demand_variability: float | None = None
    decoupled_lead_time: float | None = None
    lead_time_factor: float | None = None

    # time series
    state_timeline: list[TimeIndexedState] = field(default_factory=list)
    past_states: list[PastState] = field(default_factory=list)

    @property
    def has_buffer_int(self) -> int:
        return 1 if self.has_buffer else 0

    # ── buffer zones ──────────────────────────────────────────────────────
    def _zone_inputs_ready(self) -> bool:
        return (
            self.decoupled_lead_time is not None
            and self.lead_time_factor is not None
            and self.average_demand is not None
            and self.demand_variability is not None
        )

    @property
    def TOR(self) -> float | None:  # noqa: N802 - DDMRP naming
        """Top of red."""
        if not self._zone_inputs_ready():
            return None
        return (
            self.decoupled_lead_time
            * self.average_demand
            * self.lead_time_factor
            * (1.0 + self.demand_variability)
        )

    @property
    def TOY(self) -> float | None:  # noqa: N802
        """Top of yellow."""
        tor = self.TOR
        if tor is None:
            return None
        return tor + self.decoupled_lead_time * self.average_demand

    @property
    def TOG(self) -> float | None:  # noqa: N802
        """Top of green."""
        toy = self.TOY
        if toy is None:
            return None
        return toy + self.decoupled_lead_time * self.average_demand * self.lead_time_factor

    # ── past series ───────────────────────────────────────────────────────
    def past_state_at(self, instant: int) -> PastState | None:
        """Past state at ``instant`` (<= 0) or None when not declared."""
        if not self.past_states:
            return None
        pos = instant - self.past_states[0].instant
        if 0 <= pos < len(self.past_states):
            return self.past_states[pos]
        return None

    # ── lifecycle ─────────────────────────────────────────────────────────
    def reset_derived(self) -> None:
        """Forget everything a previous plan computed."""
        self.has_buffer = False
        self.demand_forecast = (
            None if self.declared_forecast is None else self.declared_forecast.copy()
        )
        self.average_demand = None
        self.demand_variability = (
            self.declared_variability if self.is_output_station else None
        )
        self.decoupled_lead_time = None
        self.lead_time_factor = None
        for state in self.state_timeline:
            state.reset()

    def series(self, name: str) -> np.ndarray:
        """One state attribute over the timeline (None → nan)."""
        values = [getattr(s, name) for s in self.state_timeline]
        return np.array([np.nan if v is None else v for v in values], dtype=np.float64)
