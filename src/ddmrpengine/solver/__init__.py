"""Buffer-placement solvers."""

from ddmrpengine.solver.base import ProductionControlSolver
from ddmrpengine.solver.chromosome import Chromosome
from ddmrpengine.solver.fitness import Fitness, fitness_from_objective
from ddmrpengine.solver.genetic import GeneticSolver, SolverState

__all__ = [
    "Chromosome",
    "Fitness",
    "GeneticSolver",
    "ProductionControlSolver",
    "SolverState",
    "fitness_from_objective",
]
