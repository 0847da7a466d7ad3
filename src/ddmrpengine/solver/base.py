# src/ddmrpengine/solver/base.py
"""Strategy interface for buffer-placement solvers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ddmrpengine.config import ModelInputs

if TYPE_CHECKING:  # pragma: no cover
    from ddmrpengine.results import OptimizationResult


class ProductionControlSolver(ABC):
    """Search for the buffer placement that minimises the model objective."""

    @abstractmethod
    def resolve(self, inputs: ModelInputs) -> OptimizationResult:
        """
        Optimise buffer placement for one production line.

        Parameters
        ----------
        inputs : ModelInputs
            Line description.

        Returns
        -------
        OptimizationResult
            Best placement found, re-simulated on a final model.

        Raises
        ------
        ConfigurationError
            If the inputs are invalid.
        """
