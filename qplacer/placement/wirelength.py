"""
wirelength.py: Manhattan (L1) wirelength of a solved placement.
"""
from __future__ import annotations

from typing import Sequence

import numpy as np

from qplacer.placement.model import Coordinate, Edge


def _coordinate_table(static_cells: Sequence[Coordinate], floating_cells: Sequence[Coordinate]) -> np.ndarray:
    # Row i holds the coordinate of global node i
    cells = list(static_cells) + list(floating_cells)
    table = np.zeros((len(cells), 2), dtype=np.int64)
    for i, c in enumerate(cells):
        table[i, 0] = c.x
        table[i, 1] = c.y
    return table


def edge_lengths(
    edges: Sequence[Edge],
    static_cells: Sequence[Coordinate],
    floating_cells: Sequence[Coordinate],
) -> np.ndarray:
    """Per-edge |dx| + |dy|, in edge order."""
    if not edges:
        return np.zeros(0, dtype=np.int64)
    table = _coordinate_table(static_cells, floating_cells)
    a = np.fromiter((e.node_a for e in edges), dtype=np.int64, count=len(edges))
    b = np.fromiter((e.node_b for e in edges), dtype=np.int64, count=len(edges))
    return np.abs(table[a] - table[b]).sum(axis=1)


def manhattan_wirelength(
    edges: Sequence[Edge],
    static_cells: Sequence[Coordinate],
    floating_cells: Sequence[Coordinate],
) -> int:
    return int(edge_lengths(edges, static_cells, floating_cells).sum())
