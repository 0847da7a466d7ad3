# src/ddmrpengine/solver/genetic.py
"""
Genetic search over buffer placements.

State machine
-------------
::

    UNINITIALIZED --initialize--> POPULATION_READY --evaluate--> EVALUATED
    EVALUATED --stagnation or max_generations--> TERMINATED
    EVALUATED --breed--> NEXT_GENERATION --evaluate--> EVALUATED

Breeding keeps the ``elite_count`` best candidates unchanged and fills the
rest of the population with tournament-selected, uniformly crossed and
bit-flip mutated children. The search stops once the best fitness has not
improved for ``stagnation_generations`` generations, or at
``max_generations`` when set.
"""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import Executor, ProcessPoolExecutor
from contextlib import nullcontext
from enum import Enum, auto
from pathlib import Path
from typing import Any

import numpy as np
from numpy.random import Generator, default_rng
from tqdm import tqdm

from ddmrpengine.config import Config, ModelInputs, load_config
from ddmrpengine.errors import ConfigurationError
from ddmrpengine.logging import getLogger
from ddmrpengine.model import ModelBuilder, ModelStatus, ProductionControlModel
from ddmrpengine.results import OptimizationResult
from ddmrpengine.solver.base import ProductionControlSolver
from ddmrpengine.solver.chromosome import Chromosome
from ddmrpengine.solver.fitness import Fitness
from ddmrpengine.solver.operators import (
    bit_flip_mutation,
    elite_indices,
    tournament_select,
    uniform_crossover,
)

__all__ = ["GeneticSolver", "SolverState"]

log = getLogger(__name__)


class SolverState(Enum):
    UNINITIALIZED = auto()
    POPULATION_READY = auto()
    EVALUATED = auto()
    NEXT_GENERATION = auto()
    TERMINATED = auto()


class GeneticSolver(ProductionControlSolver):
    """
    Genetic algorithm implementation of :class:`ProductionControlSolver`.

    Parameters
    ----------
    config : Config, str, Path, Mapping or None
        Solver configuration, or anything :func:`load_config` accepts.
    **overrides
        Individual configuration parameters, applied last.

    Attributes
    ----------
    state : SolverState
        Current lifecycle state.
    generation : int
        Generations evaluated so far in the current search.
    population : list of Chromosome
        Current generation.
    best : Chromosome or None
        Fittest candidate seen so far.

    Examples
    --------
    >>> from ddmrpengine.solver import GeneticSolver
    >>> solver = GeneticSolver(population_size=20, seed=3)
    >>> result = solver.resolve(inputs)  # doctest: +SKIP
    >>> result.buffers_activation  # doctest: +SKIP
    array([0, 1, 1], dtype=int8)
    """

    def __init__(
        self,
        config: Config | str | Path | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> None:
        if isinstance(config, Config):
            if overrides:
                raise TypeError("Keyword overrides cannot be combined with a Config")
            self.config = config
        else:
            self.config = load_config(config, **overrides)

        self.state = SolverState.UNINITIALIZED
        self.rng: Generator = default_rng(self.config.seed)
        self.generation = 0
        self.population: list[Chromosome] = []
        self.best: Chromosome | None = None
        self.generation_best_fitness: list[float] = []
        self._stagnant = 0
        self._fitness: Fitness | None = None
        self._n_genes = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def initialize(self, inputs: ModelInputs) -> None:
        """
        Validate the line and draw the initial population.

        The model is built once and planned with every buffer active, so
        configuration problems surface here rather than as worst-fitness
        candidates.

        Raises
        ------
        ConfigurationError
            If the inputs are invalid or the precedence graph has a cycle.
        """
        probe = ModelBuilder.create_from_inputs(inputs, self.config)
        if probe.graph.has_cycle():
            ordered = set(probe.graph.topological_order())
            cyclic = [i for i in range(probe.graph.n_stations) if i not in ordered]
            raise ConfigurationError(
                f"Precedence graph contains a cycle through stations {cyclic}",
                station_indices=cyclic,
            )
        probe.plan(np.ones(probe.decision_variables_count, dtype=np.int8))

        self._n_genes = probe.decision_variables_count
        self._fitness = Fitness(inputs, self.config)
        self.rng = default_rng(self.config.seed)
        self.generation = 0
        self.best = None
        self.generation_best_fitness = []
        self._stagnant = 0
        self.population = [
            Chromosome.random(self._n_genes, self.rng)
            for _ in range(self.config.population_size)
        ]
        self.state = SolverState.POPULATION_READY
        log.info(
            "Genetic search initialised: %d stations, population %d",
            self._n_genes,
            self.config.population_size,
        )

    def evaluate(self, executor: Executor | None = None) -> None:
        """Score the unevaluated candidates and update the stagnation count."""
        if self.state not in (SolverState.POPULATION_READY, SolverState.NEXT_GENERATION):
            raise RuntimeError(f"Cannot evaluate in state {self.state.name}")
        assert self._fitness is not None

        pending = [c for c in self.population if not c.evaluated]
        self._fitness.evaluate_many(pending, executor)
        self.generation += 1

        fitness = self._population_fitness()
        leader = self.population[int(np.argmax(fitness))]
        if self.best is None or leader.fitness > self.best.fitness:
            self.best = leader.copy()
            self._stagnant = 0
        else:
            self._stagnant += 1
        self.generation_best_fitness.append(float(self.best.fitness))

        log.debug(
            "Generation %d: best=%.6g mean=%.6g buffers=%s stagnant=%d",
            self.generation,
            self.best.fitness,
            float(np.mean(fitness)),
            self.best.key(),
            self._stagnant,
        )
        self.state = SolverState.EVALUATED

    def should_terminate(self) -> bool:
        if self.state is not SolverState.EVALUATED:
            return False
        if self._stagnant >= self.config.stagnation_generations:
            return True
        max_generations = self.config.max_generations
        return max_generations is not None and self.generation >= max_generations

    def next_generation(self) -> None:
        """Replace the population with elites plus bred children."""
        if self.state is not SolverState.EVALUATED:
            raise RuntimeError(f"Cannot breed in state {self.state.name}")
        cfg = self.config
        fitness = self._population_fitness()

        offspring = [
            self.population[i].copy() for i in elite_indices(fitness, cfg.elite_count)
        ]
        while len(offspring) < cfg.population_size:
            a = tournament_select(fitness, cfg.tournament_size, self.rng)
            b = tournament_select(fitness, cfg.tournament_size, self.rng)
            children = uniform_crossover(
                self.population[a].genes,
                self.population[b].genes,
                cfg.crossover_probability,
                self.rng,
            )
            for genes in children:
                if len(offspring) < cfg.population_size:
                    offspring.append(
                        Chromosome(bit_flip_mutation(genes, cfg.mutation_rate, self.rng))
                    )

        self.population = offspring
        self.state = SolverState.NEXT_GENERATION

    def _population_fitness(self) -> np.ndarray:
        return np.array([c.fitness for c in self.population], dtype=np.float64)

    # ------------------------------------------------------------------
    # Driver
    # ------------------------------------------------------------------
    def resolve(self, inputs: ModelInputs) -> OptimizationResult:
        cfg = self.config
        self.initialize(inputs)
        assert self._fitness is not None

        pool = (
            ProcessPoolExecutor(max_workers=cfg.n_workers)
            if cfg.n_workers > 1
            else nullcontext()
        )
        progress = tqdm(
            total=cfg.max_generations,
            desc="Genetic search",
            unit="gen",
            disable=not cfg.show_progress,
        )
        try:
            with pool as executor:
                while True:
                    self.evaluate(executor)
                    progress.update(1)
                    progress.set_postfix_str(f"best={self.best.fitness:.4g}")
                    if self.should_terminate():
                        self.state = SolverState.TERMINATED
                        break
                    self.next_generation()
        finally:
            progress.close()

        final_model = self._final_model(inputs)
        log.info(
            "Genetic search finished after %d generations (%d evaluations): "
            "buffers=%s objective=%.6g",
            self.generation,
            len(self._fitness.history),
            self.best.key(),
            final_model.objective_value,
        )
        return OptimizationResult(
            final_model=final_model,
            fitness_history=tuple(self._fitness.history),
            generation_best_fitness=tuple(self.generation_best_fitness),
            n_generations=self.generation,
            n_evaluations=len(self._fitness.history),
            best_fitness=float(self.best.fitness),
            config=cfg,
        )

    def _final_model(self, inputs: ModelInputs) -> ProductionControlModel:
        assert self.best is not None
        model = ModelBuilder.create_from_inputs(inputs, self.config, validate=False)
        model.plan(self.best.genes)
        model.status = ModelStatus.OPTIMUM_FOUND
        return model
