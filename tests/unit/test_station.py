"""Tests for Station buffer zones and TimeIndexedState."""

import numpy as np
import pytest

from ddmrpengine.model import PastState, Station, TimeIndexedState


def _station(**overrides):
    fields = dict(
        index=0,
        processing_time=1.0,
        is_input_station=False,
        is_output_station=True,
        declared_variability=0.5,
        declared_forecast=np.array([4, 6], dtype=np.int64),
        state_timeline=[TimeIndexedState(0), TimeIndexedState(1)],
    )
    fields.update(overrides)
    return Station(**fields)


class TestBufferZones:
    def test_thresholds_undefined_before_propagation(self):
        s = _station()
        assert s.TOR is None
        assert s.TOY is None
        assert s.TOG is None

    def test_zone_formulas(self):
        s = _station(
            average_demand=10.0,
            demand_variability=0.5,
            decoupled_lead_time=4.0,
            lead_time_factor=0.5,
        )
        # TOR = DLT·ADU·LTF·(1+VF)
        assert s.TOR == pytest.approx(4 * 10 * 0.5 * 1.5)
        # TOY = TOR + DLT·ADU
        assert s.TOY == pytest.approx(30.0 + 40.0)
        # TOG = TOY + DLT·ADU·LTF
        assert s.TOG == pytest.approx(70.0 + 20.0)

    def test_zones_are_ordered(self):
        s = _station(
            average_demand=7.0,
            demand_variability=0.0,
            decoupled_lead_time=3.0,
            lead_time_factor=1.0,
        )
        assert s.TOR <= s.TOY <= s.TOG

    def test_zero_lead_time_collapses_zones(self):
        s = _station(
            average_demand=7.0,
            demand_variability=0.3,
            decoupled_lead_time=0.0,
            lead_time_factor=0.0,
        )
        assert s.TOR == s.TOY == s.TOG == 0.0


class TestTimeIndexedState:
    def test_net_flow(self):
        state = TimeIndexedState(3, buffer=12, on_order_inventory=5, qualified_demand=20)
        assert state.net_flow == -3

    def test_net_flow_undefined_while_incomplete(self):
        assert TimeIndexedState(0, buffer=1).net_flow is None

    def test_reset_keeps_instant(self):
        state = TimeIndexedState(
            2, buffer=1, demand=2, order_amount=3, replenishment_flag=True
        )
        state.reset()
        assert state.instant == 2
        assert state.buffer is None
        assert state.replenishment_flag is None

    def test_as_dict_includes_net_flow(self):
        state = TimeIndexedState(0, buffer=4, on_order_inventory=0, qualified_demand=1)
        data = state.as_dict()
        assert data["instant"] == 0
        assert data["net_flow"] == 3


class TestStationLifecycle:
    def test_reset_derived_restores_declared_values(self):
        s = _station(
            has_buffer=True,
            average_demand=5.0,
            demand_variability=9.0,
            decoupled_lead_time=2.0,
            lead_time_factor=1.0,
        )
        s.state_timeline[0].buffer = 3
        s.reset_derived()

        assert s.has_buffer is False
        assert s.average_demand is None
        assert s.demand_variability == 0.5
        assert s.decoupled_lead_time is None
        assert s.state_timeline[0].buffer is None
        np.testing.assert_array_equal(s.demand_forecast, [4, 6])

    def test_reset_copies_forecast(self):
        s = _station()
        s.reset_derived()
        s.demand_forecast[0] = 99
        assert s.declared_forecast[0] == 4

    def test_internal_station_variability_is_derived(self):
        s = _station(is_output_station=False, declared_forecast=None)
        s.reset_derived()
        assert s.demand_variability is None
        assert s.demand_forecast is None

    def test_past_state_lookup(self):
        s = _station(
            past_states=[
                PastState(instant=-1, buffer=3, order_amount=1),
                PastState(instant=0, buffer=4, order_amount=2),
            ]
        )
        assert s.past_state_at(0).buffer == 4
        assert s.past_state_at(-1).order_amount == 1
        assert s.past_state_at(-2) is None
        assert s.past_state_at(1) is None

    def test_past_state_lookup_without_history(self):
        assert _station().past_state_at(0) is None

    def test_series_maps_missing_values_to_nan(self):
        s = _station()
        s.state_timeline[0].buffer = 5
        values = s.series("buffer")
        assert values[0] == 5.0
        assert np.isnan(values[1])
