"""
tolerance_sweep.py: Measure how the convergence tolerance trades sweeps and runtime
against the final Manhattan wirelength for a single problem.

Usage example:
        python -m qplacer.experiments.tolerance_sweep tests/fixtures/grid_chain.txt `
                --tolerances 1 0.1 0.01 0.001 0.0001 `
                --max-sweeps 20000 `
                --out-prefix build/grid_chain_tolerance

This will generate:
    - CSV: build/grid_chain_tolerance.results.csv
    - Plot: build/grid_chain_tolerance.sweeps.png

Columns in CSV:
    tolerance, sweeps_x, sweeps_y, runtime_sec, wirelength
"""
from __future__ import annotations

import argparse
import time
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd
import matplotlib.pyplot as plt

from qplacer.parsers.problem_parser import parse_problem_file
from qplacer.placement.gauss_seidel import DEFAULT_MAX_SWEEPS
from qplacer.placement.model import ConnectivityGraph
from qplacer.placement.placer import solve_placement

RESULT_COLUMNS = ["tolerance", "sweeps_x", "sweeps_y", "runtime_sec", "wirelength"]


def run_tolerance_sweep(
    graph: ConnectivityGraph,
    tolerances: Sequence[float],
    max_sweeps: Optional[int] = DEFAULT_MAX_SWEEPS,
    representation: str = "dense",
) -> pd.DataFrame:
    """Solve ``graph`` once per tolerance, largest tolerance first."""
    rows: List[Dict[str, Any]] = []
    for tol in sorted(tolerances, reverse=True):
        g = replace(graph, convergence_tolerance=float(tol))
        t0 = time.perf_counter()
        result = solve_placement(g, max_sweeps=max_sweeps, representation=representation)
        runtime = time.perf_counter() - t0
        rows.append(dict(
            tolerance=float(tol),
            sweeps_x=result.x.sweeps,
            sweeps_y=result.y.sweeps,
            runtime_sec=runtime,
            wirelength=result.wirelength,
        ))
        print(f"[PROGRESS] tol={tol:g} sweeps=({result.x.sweeps}, {result.y.sweeps}) "
              f"wirelength={result.wirelength} runtime={runtime:.3f}s", flush=True)
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def plot_tolerance_sweep(df: pd.DataFrame, output_path: Path, design_name: str) -> None:
    fig, ax1 = plt.subplots(figsize=(9, 5))
    ax1.plot(df["tolerance"], df["sweeps_x"] + df["sweeps_y"], marker="o", color="tab:blue", label="sweeps (x + y)")
    ax1.set_xscale("log")
    ax1.invert_xaxis()
    ax1.set_xlabel("Convergence tolerance")
    ax1.set_ylabel("Sweeps", color="tab:blue")

    ax2 = ax1.twinx()
    ax2.plot(df["tolerance"], df["wirelength"], marker="s", color="tab:orange", label="wirelength")
    ax2.set_ylabel("Manhattan wirelength", color="tab:orange")

    ax1.set_title(f"Tolerance vs Sweeps / Wirelength - {design_name}")
    fig.tight_layout()
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(description="Tolerance sweep for the quadratic placer")
    ap.add_argument("problem", help="Problem file")
    ap.add_argument("--tolerances", type=float, nargs="+", default=[1.0, 0.1, 0.01, 0.001, 0.0001])
    ap.add_argument("--max-sweeps", type=int, default=DEFAULT_MAX_SWEEPS)
    ap.add_argument("--sparse", action="store_true")
    ap.add_argument("--out-prefix", default=None, help="Output prefix (default: build/<stem>_tolerance)")
    args = ap.parse_args(argv)

    design_name = Path(args.problem).stem
    out_prefix = Path(args.out_prefix or f"build/{design_name}_tolerance")
    graph = parse_problem_file(args.problem)

    df = run_tolerance_sweep(
        graph,
        args.tolerances,
        max_sweeps=args.max_sweeps,
        representation="sparse" if args.sparse else "dense",
    )
    csv_path = out_prefix.with_name(out_prefix.name + ".results.csv")
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(csv_path, index=False)
    print(f"[DEBUG] Results written to: {csv_path}")

    png_path = out_prefix.with_name(out_prefix.name + ".sweeps.png")
    plot_tolerance_sweep(df, png_path, design_name)
    print(f"[DEBUG] Plot written to: {png_path}")


if __name__ == "__main__":
    main()
