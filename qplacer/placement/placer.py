"""
placer.py: Quadratic placement pipeline, flow runner and command line entry point.
    python -m qplacer.placement.placer <problem_file>
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import argparse
import sys
import time

from qplacer.parsers.config_parser import PlacerConfig, load_config
from qplacer.parsers.problem_parser import parse_problem_file
from qplacer.placement.errors import MalformedProblemError, NonConvergenceError, SingularSystemError
from qplacer.placement.gauss_seidel import DEFAULT_MAX_SWEEPS, AxisSolution, gauss_seidel
from qplacer.placement.model import ConnectivityGraph, Coordinate
from qplacer.placement.placement_writer import generate_map_file, placement_to_dataframe, write_placement_csv
from qplacer.placement.system_matrix import LinearSystem, build_system
from qplacer.placement.wirelength import edge_lengths, manhattan_wirelength
from qplacer.validation.placement_validator import (
    PlacementValidationResult,
    print_validation_report,
    validate_placement,
)
from qplacer.Visualization.placement_plot import plot_edge_length_histogram, plot_placement

EXIT_OK = 0
EXIT_MALFORMED = 1
EXIT_SINGULAR = 3
EXIT_NON_CONVERGENCE = 4


@dataclass
class PlacementResult:
    floating_cells: List[Coordinate]
    wirelength: int
    x: AxisSolution
    y: AxisSolution
    system: LinearSystem
    timings: Dict[str, float] = field(default_factory=dict)


def solve_placement(
    graph: ConnectivityGraph,
    max_sweeps: Optional[int] = DEFAULT_MAX_SWEEPS,
    representation: str = "dense",
    parallel_axes: bool = False,
) -> PlacementResult:
    """Build the system, relax both axes and measure the Manhattan wirelength.

    The two axis solves share only the read-only matrix, so ``parallel_axes``
    runs them on two threads without changing the result.
    """
    timings: Dict[str, float] = {}

    t0 = time.perf_counter()
    system = build_system(graph, representation=representation)
    timings["build_system"] = time.perf_counter() - t0

    tol = graph.convergence_tolerance
    t0 = time.perf_counter()
    if parallel_axes:
        with ThreadPoolExecutor(max_workers=2) as pool:
            fx = pool.submit(gauss_seidel, system.matrix, system.xb, tol, max_sweeps)
            fy = pool.submit(gauss_seidel, system.matrix, system.yb, tol, max_sweeps)
            x_sol, y_sol = fx.result(), fy.result()
    else:
        x_sol = gauss_seidel(system.matrix, system.xb, tol, max_sweeps)
        y_sol = gauss_seidel(system.matrix, system.yb, tol, max_sweeps)
    timings["solve"] = time.perf_counter() - t0

    floating = [Coordinate(int(x), int(y)) for x, y in zip(x_sol.values, y_sol.values)]

    t0 = time.perf_counter()
    wirelength = manhattan_wirelength(graph.edges, graph.static_cells, floating)
    timings["wirelength"] = time.perf_counter() - t0

    return PlacementResult(
        floating_cells=floating,
        wirelength=wirelength,
        x=x_sol,
        y=y_sol,
        system=system,
        timings=timings,
    )


def run_placement(
    problem_path: str,
    config: Optional[PlacerConfig] = None,
    design_name: Optional[str] = None,
    verbose: bool = True,
) -> Tuple[PlacementResult, PlacementValidationResult]:
    """Parse, solve, validate and write outputs for one problem file."""
    config = config or PlacerConfig()
    design_name = design_name or Path(problem_path).stem
    log = print if verbose else (lambda *a, **k: None)
    t_total_start = time.perf_counter()

    # ---- Phase 1: Parse ----
    log("[DEBUG] === PHASE 1: PARSING PROBLEM ===")
    t_parse_start = time.perf_counter()
    graph = parse_problem_file(problem_path)
    if config.tolerance is not None:
        graph = replace(graph, convergence_tolerance=config.tolerance)
    parse_dur = time.perf_counter() - t_parse_start
    log(f"[DEBUG] {graph.num_static} static cells, {graph.num_floating} floating cells, {len(graph.edges)} edges")
    log(f"[DEBUG] Tolerance: {graph.convergence_tolerance:g}, max sweeps: {config.max_sweeps}, matrix: {config.representation}")
    log(f"[DEBUG] Parsing completed in {parse_dur:.3f}s")
    log()

    # ---- Phase 2: Solve ----
    log("[DEBUG] === PHASE 2: BUILDING AND SOLVING SYSTEM ===")
    result = solve_placement(
        graph,
        max_sweeps=config.max_sweeps,
        representation=config.representation,
        parallel_axes=config.parallel_axes,
    )
    log(f"[DEBUG] System built in {result.timings['build_system']:.3f}s")
    log(f"[DEBUG] x-axis converged in {result.x.sweeps} sweeps, y-axis in {result.y.sweeps} sweeps")
    log(f"[DEBUG] Solve completed in {result.timings['solve']:.3f}s")
    log(f"[DEBUG] Total Manhattan wirelength: {result.wirelength}")
    log()

    # ---- Phase 3: Validate ----
    log("[DEBUG] === PHASE 3: VALIDATING PLACEMENT ===")
    t_validate_start = time.perf_counter()
    validation = validate_placement(graph, result.system, result, verbose=verbose)
    validate_dur = time.perf_counter() - t_validate_start
    if verbose:
        print_validation_report(validation)
    log(f"[DEBUG] Validation completed in {validate_dur:.3f}s")
    log()

    # ---- Phase 4: Outputs ----
    out = config.outputs
    t_out_start = time.perf_counter()
    if out.write_csv or out.write_map or out.plot:
        log("[DEBUG] === PHASE 4: WRITING OUTPUTS ===")
        build_dir = Path(out.build_dir) / design_name
        placement_df = placement_to_dataframe(graph, result.floating_cells)
        if out.write_csv:
            csv_path = write_placement_csv(placement_df, build_dir / f"{design_name}_placement.csv")
            log(f"[DEBUG] Placement CSV written to: {csv_path}")
        if out.write_map:
            map_path = generate_map_file(placement_df, build_dir / f"{design_name}.map", design_name, result.wirelength)
            log(f"[DEBUG] Map file written to: {map_path}")
        if out.plot:
            png = plot_placement(graph, result.floating_cells, build_dir / f"{design_name}_placement.png",
                                 title=f"Quadratic Placement - {design_name} (wirelength {result.wirelength})")
            if png is not None:
                log(f"[DEBUG] Placement plot written to: {png}")
            hist = plot_edge_length_histogram(
                edge_lengths(graph.edges, graph.static_cells, result.floating_cells),
                design_name,
                build_dir / f"{design_name}_edge_length.png",
                bins=out.histogram_bins,
            )
            if hist is not None:
                log(f"[DEBUG] Edge length histogram written to: {hist}")
        log()
    out_dur = time.perf_counter() - t_out_start

    total_dur = time.perf_counter() - t_total_start
    log("[DEBUG] ========================================")
    log("[DEBUG] FINAL TIMING SUMMARY")
    log("[DEBUG] ========================================")
    log(f"[DEBUG] Phase 1 - Parse:              {parse_dur:.3f}s")
    log(f"[DEBUG] Phase 2 - Build & Solve:      {result.timings['build_system'] + result.timings['solve']:.3f}s")
    log(f"[DEBUG] Phase 3 - Validate:           {validate_dur:.3f}s")
    log(f"[DEBUG] Phase 4 - Outputs:            {out_dur:.3f}s")
    log(f"[DEBUG] TOTAL TIME:                   {total_dur:.3f}s")
    log("[DEBUG] ========================================")

    return result, validation


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qplacer",
        description="Quadratic (Gauss-Seidel) placement of floating cells; prints total Manhattan wirelength.",
    )
    parser.add_argument("problem", help="Problem file (tolerance, counts, static cells, edges)")
    parser.add_argument("--config", default=None, help="YAML run configuration")
    parser.add_argument("--design", default=None, help="Design name for outputs (default: file stem)")
    parser.add_argument("--max-sweeps", type=int, default=None, help="Sweep cap per axis")
    parser.add_argument("--tolerance", type=float, default=None, help="Override the file's convergence tolerance")
    parser.add_argument("--sparse", action="store_true", help="Use a sparse (CSR) coefficient matrix")
    parser.add_argument("--parallel-axes", action="store_true", help="Solve x and y on two threads")
    parser.add_argument("--build-dir", default=None, help="Output directory root")
    parser.add_argument("--plot", action="store_true", help="Write placement and edge length plots")
    parser.add_argument("--no-outputs", action="store_true", help="Do not write CSV/map files")
    parser.add_argument("--quiet", action="store_true", help="Only print the wirelength")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        config = config.with_overrides(
            max_sweeps=args.max_sweeps,
            tolerance=args.tolerance,
            representation="sparse" if args.sparse else None,
            parallel_axes=True if args.parallel_axes else None,
            build_dir=args.build_dir,
            plot=True if args.plot else None,
            write_csv=False if args.no_outputs else None,
            write_map=False if args.no_outputs else None,
        )
    except (OSError, ValueError) as e:
        print(f"[ERROR] Unable to load configuration: {e}")
        return EXIT_MALFORMED

    try:
        result, _ = run_placement(args.problem, config, design_name=args.design, verbose=not args.quiet)
    except OSError as e:
        if e.filename is not None and Path(e.filename) == Path(args.problem):
            print(f"[ERROR] Unable to read problem file: {e}")
        else:
            print(f"[ERROR] Unable to write outputs: {e}")
        return EXIT_MALFORMED
    except MalformedProblemError as e:
        print(f"[ERROR] Failed to parse problem: {e}")
        return EXIT_MALFORMED
    except SingularSystemError as e:
        print(f"[ERROR] Failed to solve placements: {e}")
        return EXIT_SINGULAR
    except NonConvergenceError as e:
        print(f"[ERROR] Failed to solve placements: {e}")
        return EXIT_NON_CONVERGENCE

    print(result.wirelength)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
