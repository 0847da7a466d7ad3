# src/ddmrpengine/solver/operators.py
"""
Genetic operators over binary gene vectors.

All operators take the caller's ``numpy.random.Generator`` so a seeded
search is reproducible end to end. None of them mutates its inputs.
"""

from __future__ import annotations

import numpy as np
from numpy.random import Generator

from ddmrpengine.typing import Float1D, Genes, Int1D


def tournament_select(fitness: Float1D, tournament_size: int, rng: Generator) -> int:
    """
    Index of the fittest among ``tournament_size`` distinct random picks.

    Parameters
    ----------
    fitness : 1-D array
        Fitness of every candidate of the population.
    tournament_size : int
        Contestants per tournament, capped at the population size.
    rng : Generator
        Random source.

    Returns
    -------
    int
        Position of the winner in ``fitness``.
    """
    k = min(tournament_size, fitness.shape[0])
    contestants = rng.choice(fitness.shape[0], size=k, replace=False)
    return int(contestants[np.argmax(fitness[contestants])])


def uniform_crossover(
    parent_a: Genes, parent_b: Genes, probability: float, rng: Generator
) -> tuple[Genes, Genes]:
    """
    Swap each gene between the parents with probability 1/2.

    With probability ``1 - probability`` the children are plain copies.
    """
    child_a, child_b = parent_a.copy(), parent_b.copy()
    if rng.random() >= probability:
        return child_a, child_b
    swap = rng.random(parent_a.shape[0]) < 0.5
    child_a[swap] = parent_b[swap]
    child_b[swap] = parent_a[swap]
    return child_a, child_b


def bit_flip_mutation(genes: Genes, rate: float, rng: Generator) -> Genes:
    """Flip each gene independently with probability ``rate``."""
    flip = rng.random(genes.shape[0]) < rate
    mutated = genes.copy()
    mutated[flip] = 1 - mutated[flip]
    return mutated


def elite_indices(fitness: Float1D, k: int) -> Int1D:
    """Positions of the ``k`` fittest candidates, best first (stable on ties)."""
    if k <= 0:
        return np.empty(0, dtype=np.int64)
    order = np.argsort(-fitness, kind="stable")
    return order[:k].astype(np.int64)
