"""
model.py: Value types for a quadratic placement problem.

Global node indices: [0, num_static) are static cells,
[num_static, num_static + num_floating) are floating cells.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple
import math
import numbers

import numpy as np

from qplacer.placement.errors import MalformedProblemError


@dataclass(frozen=True)
class Coordinate:
    x: int
    y: int

    def __repr__(self) -> str:
        return f"[{self.x}, {self.y}]"


@dataclass(frozen=True)
class Edge:
    node_a: int
    node_b: int

    @property
    def is_self_loop(self) -> bool:
        return self.node_a == self.node_b


@dataclass(frozen=True)
class ConnectivityGraph:
    """Static cells, floating cell count and the edge list of one run.

    All structural checks happen here so the solver never sees a bad index.
    """
    convergence_tolerance: float
    num_floating: int
    static_cells: Tuple[Coordinate, ...] = field(default_factory=tuple)
    edges: Tuple[Edge, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples
        object.__setattr__(self, "static_cells", tuple(self.static_cells))
        object.__setattr__(self, "edges", tuple(self.edges))

        tol = self.convergence_tolerance
        if not isinstance(tol, (int, float)) or isinstance(tol, bool):
            raise MalformedProblemError(f"tolerance must be a number, got {tol!r}")
        if math.isnan(tol) or math.isinf(tol) or tol <= 0:
            raise MalformedProblemError(f"tolerance must be > 0, got {tol}")
        n = self.num_floating
        if not isinstance(n, numbers.Integral) or isinstance(n, bool):
            raise MalformedProblemError(f"floating cell count must be an integer, got {n!r}")
        object.__setattr__(self, "num_floating", int(n))
        if self.num_floating < 0:
            raise MalformedProblemError(f"floating cell count must be >= 0, got {self.num_floating!r}")

        for i, c in enumerate(self.static_cells):
            if not isinstance(c, Coordinate):
                raise MalformedProblemError(f"static cell {i} is not a Coordinate: {c!r}")

        total = self.num_cells
        for i, e in enumerate(self.edges):
            for node in (e.node_a, e.node_b):
                if node < 0 or node >= total:
                    raise MalformedProblemError(
                        f"edge {i} ({e.node_a}, {e.node_b}) references node {node}, "
                        f"only {total} cells exist"
                    )

    @property
    def num_static(self) -> int:
        return len(self.static_cells)

    @property
    def num_cells(self) -> int:
        return self.num_static + self.num_floating

    def is_static(self, node: int) -> bool:
        return node < self.num_static

    def floating_index(self, node: int) -> int:
        return node - self.num_static

    def degrees(self) -> np.ndarray:
        """Incident edge count per floating cell (self-loops excluded)."""
        deg = np.zeros(self.num_floating, dtype=np.int64)
        for e in self.edges:
            if e.is_self_loop:
                continue
            for node in (e.node_a, e.node_b):
                if not self.is_static(node):
                    deg[self.floating_index(node)] += 1
        return deg

    def isolated_floating(self) -> List[int]:
        return [int(i) for i in np.flatnonzero(self.degrees() == 0)]


def make_graph(
    tolerance: float,
    num_floating: int,
    static_cells: Sequence[Tuple[int, int]],
    edges: Sequence[Tuple[int, int]],
) -> ConnectivityGraph:
    """Build a ConnectivityGraph from plain tuples."""
    return ConnectivityGraph(
        convergence_tolerance=tolerance,
        num_floating=num_floating,
        static_cells=tuple(Coordinate(int(x), int(y)) for x, y in static_cells),
        edges=tuple(Edge(int(a), int(b)) for a, b in edges),
    )
