# src/ddmrpengine/model/graph.py
"""
Precedence graph of a production line.

Two square matrices over station indices:

- ``adjacency[i, j] = 1`` if station i directly feeds station j
- ``input_ratio[i, j]`` units of station i's output needed per unit
  produced by station j (``> 0`` implies ``adjacency[i, j] = 1``)

Both arrays are read-only once the graph exists, so a single graph can be
shared by every model built from the same inputs.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from ddmrpengine.typing import Int2D


@dataclass(slots=True, frozen=True)
class PrecedenceGraph:
    """Immutable adjacency and input-ratio matrices."""

    adjacency: Int2D
    input_ratio: Int2D

    def __post_init__(self) -> None:
        if self.adjacency.shape != self.input_ratio.shape:
            raise ValueError(
                f"adjacency {self.adjacency.shape} and input_ratio "
                f"{self.input_ratio.shape} must have the same shape"
            )
        if self.adjacency.ndim != 2 or self.adjacency.shape[0] != self.adjacency.shape[1]:
            raise ValueError(f"matrices must be square, got {self.adjacency.shape}")
        if np.any((self.input_ratio > 0) & (self.adjacency == 0)):
            raise ValueError("input_ratio > 0 requires adjacency = 1")
        self.adjacency.setflags(write=False)
        self.input_ratio.setflags(write=False)

    @classmethod
    def from_links(
        cls, n_stations: int, links: Iterable[tuple[int, int, int]]
    ) -> PrecedenceGraph:
        """
        Assemble both matrices from ``(source, target, input_amount)`` links.
        """
        adjacency = np.zeros((n_stations, n_stations), dtype=np.int64)
        input_ratio = np.zeros((n_stations, n_stations), dtype=np.int64)
        for source, target, amount in links:
            adjacency[source, target] = 1
            input_ratio[source, target] = amount
        return cls(adjacency=adjacency, input_ratio=input_ratio)

    @property
    def n_stations(self) -> int:
        return int(self.adjacency.shape[0])

    def successors(self, index: int) -> list[int]:
        return [int(j) for j in np.flatnonzero(self.adjacency[index])]

    def predecessors(self, index: int) -> list[int]:
        return [int(i) for i in np.flatnonzero(self.adjacency[:, index])]

    def is_input(self, index: int) -> bool:
        """No station feeds ``index``."""
        return not self.adjacency[:, index].any()

    def is_output(self, index: int) -> bool:
        """``index`` feeds no station."""
        return not self.adjacency[index].any()

    def topological_order(self) -> list[int]:
        """
        Upstream-first station order (Kahn's algorithm).

        Ties are broken by ascending index, so a line whose links all go
        from lower to higher indices is visited in index order. Stations on
        a cycle, or downstream of one, are left out.
        """
        in_degree = self.adjacency.sum(axis=0).astype(np.int64)
        ready = sorted(int(i) for i in np.flatnonzero(in_degree == 0))
        order: list[int] = []
        while ready:
            node = ready.pop(0)
            order.append(node)
            for succ in self.successors(node):
                in_degree[succ] -= 1
                if in_degree[succ] == 0:
                    ready.append(succ)
            ready.sort()
        return order

    def has_cycle(self) -> bool:
        return len(self.topological_order()) != self.n_stations
