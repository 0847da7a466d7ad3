# src/ddmrpengine/model/constraints.py
"""
Feasibility checks over a simulated model.

The replenishment flag of a buffered station must agree with the sign of
``TOY − net_flow``. Written as the big-M linearisation of the
mixed-integer formulation:

    M·(r − 1) ≤ has_buffer · (TOY − net_flow) ≤ M·r

The check runs after simulation; a violation points at the buffer update
logic, not at the inputs.
"""

from __future__ import annotations

from collections.abc import Sequence

from ddmrpengine.errors import ModelStateError
from ddmrpengine.logging import getLogger
from ddmrpengine.model.station import Station

log = getLogger(__name__)


class ReplenishmentsConstraint:
    """Replenishment flags consistent with net flow versus TOY."""

    def __init__(self, stations: Sequence[Station], big_m: float = 1000.0) -> None:
        self._stations = stations
        self.big_m = big_m

    def violations(self) -> list[tuple[int, int]]:
        """``(station, instant)`` pairs breaking the constraint."""
        undefined = [s.index for s in self._stations if s.TOY is None]
        if undefined:
            raise ModelStateError(
                f"TOY is not defined for stations {undefined}. "
                "The model must be planned before verifying constraints"
            )

        found = []
        m = self.big_m
        for s in self._stations:
            toy = s.TOY
            for state in s.state_timeline:
                net_flow = state.net_flow
                if net_flow is None or state.replenishment_flag is None:
                    raise ModelStateError(
                        f"Station {s.index} has no net flow or replenishment "
                        f"decision at instant {state.instant}"
                    )
                r = int(state.replenishment_flag)
                slack = s.has_buffer_int * (toy - net_flow)
                if not (m * (r - 1) <= slack <= m * r):
                    found.append((s.index, state.instant))
        return found

    def is_verified(self) -> bool:
        found = self.violations()
        if found:
            log.debug("Replenishment constraint violated at %s", found[:10])
        return not found
