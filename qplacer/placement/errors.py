"""
errors.py: Failure categories raised by the quadratic placer.

Every error is fatal to the run that raises it. Only the CLI / flow layer
turns them into messages and exit codes.
"""
from __future__ import annotations

from typing import List, Optional


class PlacerError(Exception):
    """Base class for every placer failure."""

    def __init__(self, why: str):
        super().__init__(why)
        self.why = why

    def __str__(self) -> str:
        return f"Placer Error: {self.why}"


class MalformedProblemError(PlacerError, ValueError):
    """Structural violation in a problem description (bad index, count, tolerance...)."""

    def __init__(self, why: str, line_no: Optional[int] = None):
        if line_no is not None:
            why = f"line {line_no}: {why}"
        super().__init__(why)
        self.line_no = line_no


class SingularSystemError(PlacerError, ArithmeticError):
    """A zero diagonal entry: some floating cell has no incident edge."""

    def __init__(self, rows: List[int]):
        shown = ", ".join(f"F{r}" for r in rows[:10])
        if len(rows) > 10:
            shown += f", ... ({len(rows)} total)"
        super().__init__(f"Singular system: floating cells without edges: {shown}")
        self.rows = list(rows)


class NonConvergenceError(PlacerError, RuntimeError):
    """Relaxation hit the sweep cap before meeting the tolerance."""

    def __init__(self, sweeps: int, last_delta: float, tolerance: float):
        super().__init__(
            f"No convergence after {sweeps} sweeps "
            f"(last delta {last_delta:.6g}, tolerance {tolerance:.6g})"
        )
        self.sweeps = sweeps
        self.last_delta = last_delta
        self.tolerance = tolerance
