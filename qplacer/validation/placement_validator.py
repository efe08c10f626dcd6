"""
placement_validator.py: Validation of a solved quadratic placement.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List

import numpy as np
import scipy.sparse as sp
from scipy.sparse.linalg import spsolve

from qplacer.placement.model import ConnectivityGraph
from qplacer.placement.system_matrix import LinearSystem, as_dense, is_diagonally_dominant, is_symmetric
from qplacer.placement.wirelength import edge_lengths

if TYPE_CHECKING:
    from qplacer.placement.placer import PlacementResult


class PlacementValidationResult:
    """Result of placement validation."""
    def __init__(self):
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.stats: Dict[str, Any] = {}
        self.passed: bool = True

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)
        self.passed = False

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_stat(self, key: str, value: Any) -> None:
        self.stats[key] = value


def _direct_solution(system: LinearSystem, b: np.ndarray) -> np.ndarray:
    A = sp.csc_matrix(system.matrix, dtype=float)
    return np.atleast_1d(np.asarray(spsolve(A, np.asarray(b, dtype=float)), dtype=float))


def validate_placement(
    graph: ConnectivityGraph,
    system: LinearSystem,
    result: "PlacementResult",
    verbose: bool = True,
) -> PlacementValidationResult:
    """
    Check a solved placement against its problem and linear system.

    Args:
        graph: the problem that was solved
        system: the (A, xb, yb) system built from ``graph``
        result: output of ``solve_placement``
        verbose: print phase banners and check marks

    Returns:
        PlacementValidationResult with validation status
    """
    log = print if verbose else (lambda *a, **k: None)
    res = PlacementValidationResult()
    n = graph.num_floating

    # ===== PHASE 1: BASIC CORRECTNESS CHECKS =====
    log("\n[VALIDATION] === PHASE 1: BASIC CORRECTNESS CHECKS ===")
    placed = len(result.floating_cells)
    if placed != n:
        res.add_error(f"{n - placed} floating cells have no coordinate")
    else:
        log(f"✓ All {n} floating cells placed")
    non_int = [j for j, c in enumerate(result.floating_cells)
               if not isinstance(c.x, (int, np.integer)) or not isinstance(c.y, (int, np.integer))]
    if non_int:
        res.add_error(f"{len(non_int)} floating cells have non-integer coordinates (first: F{non_int[0]})")
    res.add_stat("static_cells", graph.num_static)
    res.add_stat("floating_cells", n)
    res.add_stat("edges", len(graph.edges))

    # ===== PHASE 2: MATRIX STRUCTURE =====
    log("\n[VALIDATION] === PHASE 2: MATRIX STRUCTURE ===")
    if not is_symmetric(system.matrix):
        res.add_error("Coefficient matrix is not symmetric")
    else:
        log("✓ Coefficient matrix is symmetric")
    deg = graph.degrees()
    diag_mismatch = np.flatnonzero(np.diag(as_dense(system.matrix)) != 2 * deg)
    if diag_mismatch.size:
        res.add_error(f"{diag_mismatch.size} diagonal entries differ from 2 x degree (first: F{int(diag_mismatch[0])})")
    else:
        log("✓ Diagonal equals 2 x degree for every floating cell")
    if not is_diagonally_dominant(system.matrix):
        res.add_error("Coefficient matrix is not diagonally dominant")
    else:
        log("✓ Coefficient matrix is diagonally dominant")

    # ===== PHASE 3: DIRECT SOLVE CROSS-CHECK =====
    log("\n[VALIDATION] === PHASE 3: DIRECT SOLVE CROSS-CHECK ===")
    if n > 0 and placed == n:
        try:
            xs = np.array([c.x for c in result.floating_cells], dtype=float)
            ys = np.array([c.y for c in result.floating_cells], dtype=float)
            dx = np.abs(_direct_solution(system, system.xb) - xs)
            dy = np.abs(_direct_solution(system, system.yb) - ys)
            max_dev = float(max(dx.max(), dy.max()))
            res.add_stat("max_direct_deviation", max_dev)
            if not np.isfinite(max_dev) or max_dev > 1.0:
                res.add_warning(f"Relaxed solution deviates from direct solve by {max_dev:.3f}")
            else:
                log(f"✓ Within {max_dev:.3f} of the direct solution")
        except (RuntimeError, ValueError, ArithmeticError) as e:
            res.add_warning(f"Direct solve failed: {e}")
    else:
        res.add_warning("Direct solve skipped (no floating cells)")

    # ===== PHASE 4: QUALITY METRICS =====
    log("\n[VALIDATION] === PHASE 4: QUALITY METRICS ===")
    if placed == n:
        lengths = edge_lengths(graph.edges, graph.static_cells, result.floating_cells)
        total = int(lengths.sum())
        res.add_stat("total_wirelength", total)
        if total != result.wirelength:
            res.add_error(f"Reported wirelength {result.wirelength} != recomputed {total}")
        else:
            log(f"✓ Total wirelength: {total}")
        if lengths.size:
            res.add_stat("mean_edge_length", float(lengths.mean()))
            res.add_stat("max_edge_length", int(lengths.max()))
    if result.floating_cells:
        xs_i = [c.x for c in result.floating_cells]
        ys_i = [c.y for c in result.floating_cells]
        res.add_stat("placement_bounds", {
            "x_min": min(xs_i), "x_max": max(xs_i),
            "y_min": min(ys_i), "y_max": max(ys_i),
        })
    res.add_stat("sweeps_x", result.x.sweeps)
    res.add_stat("sweeps_y", result.y.sweeps)

    return res


def print_validation_report(result: PlacementValidationResult) -> None:
    """Print a formatted validation report."""
    print("\n" + "=" * 80)
    print("PLACEMENT VALIDATION REPORT")
    print("=" * 80)

    if result.passed:
        print("✅ VALIDATION PASSED")
    else:
        print("❌ VALIDATION FAILED")

    if result.errors:
        print(f"\n❌ ERRORS ({len(result.errors)}):")
        for i, error in enumerate(result.errors, 1):
            print(f"  {i}. {error}")

    if result.warnings:
        print(f"\n⚠️  WARNINGS ({len(result.warnings)}):")
        for i, warning in enumerate(result.warnings, 1):
            print(f"  {i}. {warning}")

    if result.stats:
        print(f"\n📊 STATISTICS:")
        for key, value in result.stats.items():
            if isinstance(value, float):
                print(f"  {key}: {value:.3f}")
            else:
                print(f"  {key}: {value}")

    print("=" * 80)
