# src/ddmrpengine/solver/fitness.py
"""
Fitness of buffer placements.

Every evaluation builds its own model from the shared, immutable inputs
and configuration, so evaluations are independent and can run in worker
processes.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from concurrent.futures import Executor

from ddmrpengine.config import Config, ModelInputs
from ddmrpengine.errors import ModelStateError
from ddmrpengine.logging import getLogger
from ddmrpengine.model import ModelBuilder
from ddmrpengine.solver.chromosome import Chromosome
from ddmrpengine.typing import Genes

__all__ = ["Fitness", "fitness_from_objective", "WORST_FITNESS"]

log = getLogger(__name__)

WORST_FITNESS = 0.0


def fitness_from_objective(objective: float) -> float:
    """``1 / objective``; the largest float when the objective is 0."""
    if objective == 0:
        return sys.float_info.max
    return 1.0 / objective


def _score(inputs: ModelInputs, config: Config, genes: Genes) -> float:
    """Plan one placement on a fresh model. Module level so it pickles."""
    model = ModelBuilder.create_from_inputs(inputs, config, validate=False)
    try:
        model.plan(genes)
        objective = model.objective_value
    except ModelStateError as exc:
        log.warning("Candidate %s could not be planned: %s", genes.tolist(), exc)
        return WORST_FITNESS
    return fitness_from_objective(objective)


class Fitness:
    """
    Evaluate chromosomes against one production line.

    Parameters
    ----------
    inputs : ModelInputs
        Validated line description.
    config : Config
        Objective weights and simulation policies.

    Attributes
    ----------
    history : list of float
        Every fitness value computed, in evaluation order.
    """

    def __init__(self, inputs: ModelInputs, config: Config) -> None:
        self.inputs = inputs
        self.config = config
        self.history: list[float] = []

    def evaluate(self, chromosome: Chromosome) -> float:
        value = _score(self.inputs, self.config, chromosome.genes)
        chromosome.fitness = value
        self.history.append(value)
        return value

    def evaluate_many(
        self,
        chromosomes: Sequence[Chromosome],
        executor: Executor | None = None,
    ) -> list[float]:
        """
        Evaluate a batch, in process or through ``executor``.

        Results are stored on the chromosomes and appended to ``history``
        in submission order, whatever order the workers finish in.
        """
        if executor is None:
            return [self.evaluate(c) for c in chromosomes]

        futures = [
            executor.submit(_score, self.inputs, self.config, c.genes)
            for c in chromosomes
        ]
        values = [future.result() for future in futures]
        for chromosome, value in zip(chromosomes, values):
            chromosome.fitness = value
        self.history.extend(values)
        return values
