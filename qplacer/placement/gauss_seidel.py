"""
gauss_seidel.py: In-place Gauss-Seidel relaxation for the placement system.

Each sweep updates the unknowns in increasing row order and reuses every value
already advanced in the same sweep. The loop stops once the largest change of
a sweep drops below the tolerance.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np
import scipy.sparse as sp

from qplacer.placement.errors import NonConvergenceError, SingularSystemError
from qplacer.placement.system_matrix import Matrix

DEFAULT_MAX_SWEEPS: int = 5000


@dataclass
class AxisSolution:
    values: np.ndarray               # rounded, int64
    raw: np.ndarray                  # converged float values
    sweeps: int
    history: List[float] = field(default_factory=list)  # max |delta| per sweep


def round_half_away(values: np.ndarray) -> np.ndarray:
    """Round to nearest integer, ties away from zero (np.rint rounds ties to even)."""
    v = np.asarray(values, dtype=float)
    return (np.sign(v) * np.floor(np.abs(v) + 0.5)).astype(np.int64)


def _split_diagonal(A: Matrix):
    """Return (diag, off_diagonal) with float entries."""
    if sp.issparse(A):
        csr = sp.csr_matrix(A, dtype=float)
        diag = csr.diagonal()
        off = (csr - sp.diags(diag)).tocsr()
        off.eliminate_zeros()
        return diag, off
    dense = np.asarray(A, dtype=float)
    diag = np.diag(dense).copy()
    off = dense.copy()
    np.fill_diagonal(off, 0.0)
    return diag, off


def gauss_seidel(
    A: Matrix,
    b: np.ndarray,
    tolerance: float,
    max_sweeps: Optional[int] = DEFAULT_MAX_SWEEPS,
) -> AxisSolution:
    """Solve A x = b by Gauss-Seidel relaxation.

    Args:
        A: square coefficient matrix (numpy array or scipy sparse), nonzero diagonal
        b: right-hand side of matching length
        tolerance: stop once a full sweep changes no unknown by ``tolerance`` or more
        max_sweeps: sweep cap; ``None`` relaxes without bound

    Raises:
        SingularSystemError: a diagonal entry is zero
        NonConvergenceError: ``max_sweeps`` reached without meeting ``tolerance``
    """
    if tolerance <= 0:
        raise ValueError(f"tolerance must be > 0, got {tolerance}")
    if max_sweeps is not None and max_sweeps <= 0:
        raise ValueError(f"max_sweeps must be > 0 or None, got {max_sweeps}")

    n = int(A.shape[0])
    rhs = np.asarray(b, dtype=float)
    if A.shape != (n, n) or rhs.shape != (n,):
        raise ValueError(f"shape mismatch: A is {A.shape}, b is {rhs.shape}")

    if n == 0:
        empty = np.zeros(0, dtype=float)
        return AxisSolution(values=round_half_away(empty), raw=empty, sweeps=0)

    diag, off = _split_diagonal(A)
    zero_rows = [int(r) for r in np.flatnonzero(diag == 0)]
    if zero_rows:
        raise SingularSystemError(zero_rows)

    solution = np.zeros(n, dtype=float)
    history: List[float] = []
    sparse = sp.issparse(off)
    if sparse:
        indptr, indices, data = off.indptr, off.indices, off.data

    sweeps = 0
    while True:
        iter_diff = 0.0
        for row in range(n):
            if sparse:
                start, end = indptr[row], indptr[row + 1]
                coupled = data[start:end] @ solution[indices[start:end]]
            else:
                coupled = off[row] @ solution
            new_value = (rhs[row] - coupled) / diag[row]
            diff = abs(solution[row] - new_value)
            if diff > iter_diff:
                iter_diff = diff
            solution[row] = new_value
        sweeps += 1
        history.append(float(iter_diff))

        if iter_diff < tolerance:
            break
        if max_sweeps is not None and sweeps >= max_sweeps:
            raise NonConvergenceError(sweeps, float(iter_diff), tolerance)

    return AxisSolution(values=round_half_away(solution), raw=solution, sweeps=sweeps, history=history)
