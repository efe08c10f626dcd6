"""
system_matrix.py: Build the normal equations of the quadratic placement objective.

For every edge the squared-length term contributes to a weighted graph
Laplacian over the floating cells; static neighbours are folded into the
right-hand side vectors (one per axis).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Union

import numpy as np
import scipy.sparse as sp

from qplacer.placement.model import ConnectivityGraph

REPRESENTATIONS = ("dense", "sparse")

Matrix = Union[np.ndarray, sp.csr_matrix]


@dataclass
class LinearSystem:
    matrix: Matrix
    xb: np.ndarray
    yb: np.ndarray

    @property
    def size(self) -> int:
        return int(self.matrix.shape[0])

    @property
    def is_sparse(self) -> bool:
        return sp.issparse(self.matrix)


def build_system(graph: ConnectivityGraph, representation: str = "dense") -> LinearSystem:
    """Return (A, xb, yb) for the graph.

    A[f][f] gains 2 per incident edge, A[fa][fb] loses 2 per floating-floating
    edge. Static-static edges carry no unknown and are skipped.
    """
    if representation not in REPRESENTATIONS:
        raise ValueError(f"Unknown matrix representation '{representation}', expected one of {REPRESENTATIONS}")

    n = graph.num_floating
    num_statics = graph.num_static
    xb = np.zeros(n, dtype=np.int64)
    yb = np.zeros(n, dtype=np.int64)

    rows: List[int] = []
    cols: List[int] = []
    vals: List[int] = []

    for edge in graph.edges:
        a, b = edge.node_a, edge.node_b
        a_static = a < num_statics
        b_static = b < num_statics
        if a_static and b_static:
            continue
        if a_static or b_static:
            static_node = a if a_static else b
            floating_node = (b if a_static else a) - num_statics
            anchor = graph.static_cells[static_node]
            xb[floating_node] += 2 * anchor.x
            yb[floating_node] += 2 * anchor.y
            rows.append(floating_node)
            cols.append(floating_node)
            vals.append(2)
        else:
            fa = a - num_statics
            fb = b - num_statics
            rows += [fa, fb, fa, fb]
            cols += [fa, fb, fb, fa]
            vals += [2, 2, -2, -2]

    if representation == "sparse":
        A = sp.coo_matrix(
            (np.array(vals, dtype=np.int64), (np.array(rows, dtype=np.int64), np.array(cols, dtype=np.int64))),
            shape=(n, n),
        ).tocsr()  # duplicates are summed
        A.eliminate_zeros()
    else:
        A = np.zeros((n, n), dtype=np.int64)
        if vals:
            np.add.at(A, (np.array(rows), np.array(cols)), np.array(vals, dtype=np.int64))

    return LinearSystem(matrix=A, xb=xb, yb=yb)


def as_dense(A: Matrix) -> np.ndarray:
    if sp.issparse(A):
        return A.toarray()
    return np.asarray(A)


def is_symmetric(A: Matrix) -> bool:
    if sp.issparse(A):
        return (A != A.T).nnz == 0
    dense = np.asarray(A)
    return bool(np.array_equal(dense, dense.T))


def is_diagonally_dominant(A: Matrix) -> bool:
    """|A[i][i]| >= sum_{j != i} |A[i][j]| for every row."""
    dense = as_dense(A)
    if dense.size == 0:
        return True
    diag = np.abs(np.diag(dense))
    off = np.abs(dense).sum(axis=1) - diag
    return bool(np.all(off <= diag))
