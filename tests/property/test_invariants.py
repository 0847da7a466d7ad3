"""Property-based tests for planning invariants using Hypothesis.

Random serial and assembly lines are planned with random buffer
placements; the stock recurrences, replenishment rule and lead-time
decoupling must hold for every one of them.
"""

import math

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from ddmrpengine.solver import fitness_from_objective
from tests.helpers.factories import (
    assembly_inputs,
    build_model,
    planned,
    serial_line_inputs,
)

processing_time_strategy = st.integers(min_value=0, max_value=6).map(float)
forecast_value_strategy = st.integers(min_value=0, max_value=40)


@st.composite
def serial_lines(draw, min_stations=2, max_stations=5):
    n = draw(st.integers(min_value=min_stations, max_value=max_stations))
    horizon = draw(st.integers(min_value=2, max_value=14))
    processing_times = draw(
        st.lists(processing_time_strategy, min_size=n, max_size=n)
    )
    forecast = draw(
        st.lists(forecast_value_strategy, min_size=horizon, max_size=horizon)
    )
    ratios = draw(
        st.lists(st.integers(min_value=1, max_value=3), min_size=n - 1, max_size=n - 1)
    )
    peak_horizon = draw(st.integers(min_value=0, max_value=horizon))
    genes = draw(st.lists(st.integers(0, 1), min_size=n, max_size=n))
    inputs = serial_line_inputs(
        processing_times,
        forecast,
        ratios=ratios,
        peak_horizon=peak_horizon,
        variability=draw(st.sampled_from([0.0, 0.25, 0.5])),
    )
    return inputs, genes


genes_strategy = st.lists(st.integers(0, 1), min_size=4, max_size=4)


class TestStockInvariants:
    @given(line=serial_lines())
    @settings(max_examples=80, deadline=None)
    def test_stock_recurrences(self, line):
        inputs, genes = line
        model = planned(inputs, genes)

        for s in model.stations:
            buffer = s.series("buffer")
            demand = s.series("demand")
            on_order = s.series("on_order_inventory")
            orders = s.series("order_amount")
            incoming = s.series("incoming_supply")

            assert (buffer >= 0).all()
            assert (orders >= 0).all()
            if not model.holds_stock(s):
                assert not buffer.any() and not orders.any()
                continue

            for t in range(1, model.planning_horizon):
                assert buffer[t] == max(buffer[t - 1] + incoming[t] - demand[t - 1], 0)
                assert on_order[t] == on_order[t - 1] + orders[t - 1] - incoming[t]

    @given(line=serial_lines())
    @settings(max_examples=80, deadline=None)
    def test_replenishment_rule(self, line):
        inputs, genes = line
        model = planned(inputs, genes)

        for s in model.stations:
            if not model.holds_stock(s):
                continue
            for state in s.state_timeline:
                assert state.replenishment_flag == (state.net_flow <= s.TOY)
                if not state.replenishment_flag:
                    assert state.order_amount == 0
                elif state.instant > 0:
                    assert state.order_amount <= math.ceil(s.TOG - state.net_flow)

    @given(line=serial_lines())
    @settings(max_examples=50, deadline=None)
    def test_qualified_demand_covers_demand(self, line):
        inputs, genes = line
        model = planned(inputs, genes)
        for s in model.stations:
            qd = s.series("qualified_demand")
            demand = s.series("demand")
            assert (qd >= demand).all()
            if inputs.peak_horizon == 0:
                np.testing.assert_array_equal(qd, demand)

    @given(line=serial_lines())
    @settings(max_examples=50, deadline=None)
    def test_replenishment_constraint_holds(self, line):
        inputs, genes = line
        model = planned(inputs, genes, big_m=1e9)
        assert model.constraints_verified()


class TestPropagationInvariants:
    @given(line=serial_lines())
    @settings(max_examples=80, deadline=None)
    def test_average_demand_conserved(self, line):
        inputs, genes = line
        model = planned(inputs, genes)
        ratios = [d.next_stations[0].input_amount for d in inputs.stations[:-1]]
        mean = float(np.mean(inputs.stations[-1].demand_forecast))
        for i, s in enumerate(model.stations):
            assert s.average_demand == pytest.approx(math.prod(ratios[i:]) * mean)

    @given(line=serial_lines(min_stations=3), data=st.data())
    @settings(max_examples=80, deadline=None)
    def test_buffer_decouples_upstream(self, line, data):
        inputs, genes = line
        n = inputs.n_stations
        k = data.draw(st.integers(min_value=0, max_value=n - 2))
        genes = list(genes)
        genes[k] = 1

        processing_times = [d.processing_time for d in inputs.stations]
        slower = list(processing_times)
        for i in range(k + 1):
            slower[i] += data.draw(st.integers(min_value=1, max_value=5))

        forecast = inputs.stations[-1].demand_forecast
        ratios = [d.next_stations[0].input_amount for d in inputs.stations[:-1]]
        base = planned(serial_line_inputs(processing_times, forecast, ratios=ratios), genes)
        other = planned(serial_line_inputs(slower, forecast, ratios=ratios), genes)

        for i in range(k + 1, n):
            assert (
                base.stations[i].decoupled_lead_time
                == other.stations[i].decoupled_lead_time
            )

    @given(line=serial_lines())
    @settings(max_examples=50, deadline=None)
    def test_lead_time_factor_bounds(self, line):
        inputs, genes = line
        model = planned(inputs, genes)
        for s in model.stations:
            assert 0.0 <= s.lead_time_factor <= 1.0
            assert s.TOR <= s.TOY <= s.TOG


class TestPlanContract:
    @given(first=genes_strategy, second=genes_strategy)
    @settings(max_examples=40, deadline=None)
    def test_replanning_is_idempotent(self, first, second):
        model = build_model(assembly_inputs())
        model.plan(first)
        expected = model.timeline_array("buffer"), model.objective_value
        model.plan(second)
        model.plan(first)
        np.testing.assert_array_equal(model.timeline_array("buffer"), expected[0])
        assert model.objective_value == expected[1]

    @given(genes=genes_strategy)
    @settings(max_examples=40, deadline=None)
    def test_objective_non_negative(self, genes):
        model = planned(assembly_inputs(), genes)
        assert model.objective_value >= 0
        assert model.average_buffer_level >= 0
        assert model.average_unsatisfied_demand >= 0


@given(
    low=st.floats(min_value=1e-6, max_value=1e6),
    gap=st.floats(min_value=1e-9, max_value=1e6),
)
def test_fitness_strictly_decreases_with_objective(low, gap):
    high = low * (1 + gap)
    assert fitness_from_objective(low) > fitness_from_objective(high)
    assert fitness_from_objective(0.0) > fitness_from_objective(low)
