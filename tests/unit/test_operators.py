"""Tests for Chromosome and the genetic operators."""

import numpy as np
import pytest
from numpy.random import default_rng

from ddmrpengine.solver import Chromosome
from ddmrpengine.solver.operators import (
    bit_flip_mutation,
    elite_indices,
    tournament_select,
    uniform_crossover,
)


class TestChromosome:
    def test_random_genes_are_binary(self):
        c = Chromosome.random(50, default_rng(1))
        assert len(c) == 50
        assert c.genes.dtype == np.int8
        assert set(np.unique(c.genes)) <= {0, 1}
        assert not c.evaluated

    def test_genes_coerced_to_int8(self):
        c = Chromosome([1, 0, 1])
        assert c.genes.dtype == np.int8
        assert c.key() == "101"

    def test_copy_is_independent(self):
        c = Chromosome([1, 0], fitness=2.0)
        d = c.copy()
        d.genes[0] = 0
        assert c.genes[0] == 1
        assert d.fitness == 2.0


class TestTournament:
    def test_full_tournament_picks_best(self):
        fitness = np.array([0.1, 0.9, 0.5, 0.3])
        assert tournament_select(fitness, 4, default_rng(0)) == 1

    def test_size_one_is_uniform_pick(self):
        fitness = np.array([0.1, 0.9, 0.5])
        picks = {tournament_select(fitness, 1, default_rng(s)) for s in range(50)}
        assert picks == {0, 1, 2}

    def test_size_capped_by_population(self):
        fitness = np.array([3.0, 1.0])
        assert tournament_select(fitness, 10, default_rng(0)) == 0

    def test_never_picks_worst_of_large_tournament(self):
        fitness = np.arange(5, dtype=np.float64)
        rng = default_rng(3)
        # three distinct contestants out of five always include one better than 0
        assert all(tournament_select(fitness, 3, rng) != 0 for _ in range(100))


class TestCrossover:
    def test_probability_zero_copies_parents(self):
        a = np.zeros(8, dtype=np.int8)
        b = np.ones(8, dtype=np.int8)
        child_a, child_b = uniform_crossover(a, b, 0.0, default_rng(0))
        np.testing.assert_array_equal(child_a, a)
        np.testing.assert_array_equal(child_b, b)
        assert child_a is not a

    def test_children_are_complementary(self):
        a = np.zeros(64, dtype=np.int8)
        b = np.ones(64, dtype=np.int8)
        child_a, child_b = uniform_crossover(a, b, 1.0, default_rng(5))
        np.testing.assert_array_equal(child_a + child_b, np.ones(64))
        assert 0 < child_a.sum() < 64

    def test_identical_parents(self):
        a = np.array([1, 0, 1, 1], dtype=np.int8)
        child_a, child_b = uniform_crossover(a, a.copy(), 1.0, default_rng(2))
        np.testing.assert_array_equal(child_a, a)
        np.testing.assert_array_equal(child_b, a)


class TestMutation:
    def test_rate_zero(self):
        genes = np.array([1, 0, 1], dtype=np.int8)
        np.testing.assert_array_equal(bit_flip_mutation(genes, 0.0, default_rng(0)), genes)

    def test_rate_one_flips_all(self):
        genes = np.array([1, 0, 1], dtype=np.int8)
        np.testing.assert_array_equal(
            bit_flip_mutation(genes, 1.0, default_rng(0)), [0, 1, 0]
        )

    def test_input_untouched(self):
        genes = np.zeros(16, dtype=np.int8)
        mutated = bit_flip_mutation(genes, 0.5, default_rng(9))
        assert genes.sum() == 0
        assert set(np.unique(mutated)) <= {0, 1}


class TestElites:
    def test_best_first(self):
        fitness = np.array([0.2, 0.8, 0.5, 0.8])
        np.testing.assert_array_equal(elite_indices(fitness, 3), [1, 3, 2])

    @pytest.mark.parametrize("k", [0, -1])
    def test_no_elites(self, k):
        assert elite_indices(np.array([1.0, 2.0]), k).size == 0
