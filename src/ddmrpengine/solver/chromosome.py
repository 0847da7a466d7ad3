# src/ddmrpengine/solver/chromosome.py
"""Binary buffer-placement candidate."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.random import Generator

from ddmrpengine.typing import Genes


@dataclass(slots=True)
class Chromosome:
    """
    One candidate placement: gene ``i`` activates the buffer of station ``i``.

    ``fitness`` is None until the candidate has been evaluated.
    """

    genes: Genes
    fitness: float | None = None

    def __post_init__(self) -> None:
        self.genes = np.asarray(self.genes, dtype=np.int8)

    @classmethod
    def random(cls, n_genes: int, rng: Generator) -> Chromosome:
        return cls(rng.integers(0, 2, size=n_genes, dtype=np.int8))

    @property
    def evaluated(self) -> bool:
        return self.fitness is not None

    def copy(self) -> Chromosome:
        return Chromosome(self.genes.copy(), self.fitness)

    def key(self) -> str:
        """Genes as a ``"0110"`` string."""
        return "".join(str(int(g)) for g in self.genes)

    def __len__(self) -> int:
        return int(self.genes.shape[0])
