"""Tests for the fitness function."""

import sys
from concurrent.futures import ThreadPoolExecutor

import pytest

from ddmrpengine.solver import Chromosome, Fitness, fitness_from_objective
from tests.helpers.factories import cyclic_inputs, make_config, two_station_inputs


class TestFitnessFromObjective:
    def test_zero_objective_is_max_fitness(self):
        assert fitness_from_objective(0.0) == sys.float_info.max

    def test_inverse(self):
        assert fitness_from_objective(4.0) == 0.25

    @pytest.mark.parametrize(("low", "high"), [(0.5, 1.0), (1.0, 3.0), (2.0, 100.0)])
    def test_lower_cost_is_fitter(self, low, high):
        assert fitness_from_objective(low) > fitness_from_objective(high)


class TestFitness:
    def test_evaluate(self):
        fitness = Fitness(two_station_inputs(8), make_config())
        chromosome = Chromosome([0, 1])
        value = fitness.evaluate(chromosome)
        assert value == pytest.approx(1 / 14.375)
        assert chromosome.fitness == value
        assert fitness.history == [value]

    def test_evaluation_does_not_share_state(self):
        fitness = Fitness(two_station_inputs(8), make_config())
        first = fitness.evaluate(Chromosome([0, 1]))
        fitness.evaluate(Chromosome([1, 1]))
        again = fitness.evaluate(Chromosome([0, 1]))
        assert first == again
        assert len(fitness.history) == 3

    def test_failed_plan_scores_worst(self):
        fitness = Fitness(cyclic_inputs(), make_config())
        assert fitness.evaluate(Chromosome([1, 1, 1, 1])) == 0.0
        assert fitness.history == [0.0]

    def test_evaluate_many_in_process(self):
        fitness = Fitness(two_station_inputs(8), make_config())
        batch = [Chromosome([0, 1]), Chromosome([1, 0]), Chromosome([0, 0])]
        values = fitness.evaluate_many(batch)
        assert values == [c.fitness for c in batch]
        assert fitness.history == values

    def test_evaluate_many_keeps_submission_order(self):
        inputs = two_station_inputs(8)
        sequential = Fitness(inputs, make_config())
        expected = sequential.evaluate_many(
            [Chromosome(g) for g in ([0, 1], [1, 1], [0, 0], [1, 0])]
        )

        pooled = Fitness(inputs, make_config())
        batch = [Chromosome(g) for g in ([0, 1], [1, 1], [0, 0], [1, 0])]
        with ThreadPoolExecutor(max_workers=4) as executor:
            values = pooled.evaluate_many(batch, executor)
        assert values == expected
        assert pooled.history == expected
        assert [c.fitness for c in batch] == expected
