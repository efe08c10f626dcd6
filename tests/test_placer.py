import numpy as np
import pytest

from qplacer.parsers.problem_parser import parse_problem_file
from qplacer.placement.errors import NonConvergenceError, SingularSystemError
from qplacer.placement.model import Coordinate, Edge, make_graph
from qplacer.placement.placer import solve_placement
from qplacer.placement.wirelength import edge_lengths, manhattan_wirelength


@pytest.mark.parametrize(
    "name, expected",
    [
        ("two_anchor.txt", 4),
        ("chain.txt", 6),
        ("four_corner.txt", 40),
        ("triangle_anchor.txt", 0),
        ("mixed_edges.txt", 12),
        ("diagonal_chain.txt", 12),
        ("two_stage.txt", 11),
        ("grid_chain.txt", 150),
    ],
)
def test_golden_wirelengths(fixture_path, name, expected):
    graph = parse_problem_file(fixture_path(name))
    assert solve_placement(graph).wirelength == expected
    assert solve_placement(graph, representation="sparse").wirelength == expected


def test_scenario_two_anchors_midpoint():
    g = make_graph(0.001, 1, [(0, 0), (4, 0)], [(0, 2), (1, 2)])
    result = solve_placement(g)
    assert result.floating_cells == [Coordinate(2, 0)]
    assert result.wirelength == 4


def test_scenario_triangle_collapses_to_anchor():
    g = make_graph(0.001, 3, [(0, 0)], [(1, 2), (2, 3), (1, 3), (0, 1)])
    result = solve_placement(g)
    assert result.floating_cells == [Coordinate(0, 0)] * 3
    unconnected = [Coordinate(5, 5), Coordinate(10, 0), Coordinate(0, 10)]
    assert result.wirelength < manhattan_wirelength(g.edges, g.static_cells, unconnected)


def test_diagonal_chain_coordinates(fixture_path):
    result = solve_placement(parse_problem_file(fixture_path("diagonal_chain.txt")))
    assert result.floating_cells == [Coordinate(3, 1), Coordinate(5, 3)]


def test_two_stage_coordinates(fixture_path):
    result = solve_placement(parse_problem_file(fixture_path("two_stage.txt")))
    assert result.floating_cells == [Coordinate(2, 1), Coordinate(2, 4)]
    assert np.allclose(result.y.raw, [1.2, 3.6], atol=0.01)


def test_isolated_floating_cell_is_singular(fixture_path):
    graph = parse_problem_file(fixture_path("isolated_node.txt"))
    with pytest.raises(SingularSystemError) as exc:
        solve_placement(graph)
    assert exc.value.rows == [1]


def test_sweep_cap_surfaces_non_convergence(fixture_path):
    graph = parse_problem_file(fixture_path("grid_chain.txt"))
    with pytest.raises(NonConvergenceError):
        solve_placement(graph, max_sweeps=3)


def test_parallel_axes_match_sequential(fixture_path):
    graph = parse_problem_file(fixture_path("grid_chain.txt"))
    seq = solve_placement(graph)
    par = solve_placement(graph, parallel_axes=True)
    assert par.floating_cells == seq.floating_cells
    assert par.wirelength == seq.wirelength
    assert (par.x.sweeps, par.y.sweeps) == (seq.x.sweeps, seq.y.sweeps)


def test_result_carries_timings_and_history(fixture_path):
    result = solve_placement(parse_problem_file(fixture_path("chain.txt")))
    assert set(result.timings) == {"build_system", "solve", "wirelength"}
    assert result.x.sweeps == len(result.x.history)
    assert result.y.sweeps == 1  # yb is all zeros


def test_no_floating_cells():
    g = make_graph(0.1, 0, [(0, 0), (3, 4)], [(0, 1)])
    result = solve_placement(g)
    assert result.floating_cells == []
    assert result.wirelength == 7


def test_wirelength_is_idempotent():
    statics = [Coordinate(0, 0), Coordinate(4, 0)]
    floating = [Coordinate(2, 3)]
    edges = [Edge(0, 2), Edge(2, 1), Edge(0, 1), Edge(2, 2)]
    first = manhattan_wirelength(edges, statics, floating)
    second = manhattan_wirelength(edges, statics, floating)
    assert first == second == 5 + 5 + 4 + 0
    assert edge_lengths(edges, statics, floating).tolist() == [5, 5, 4, 0]


def test_wirelength_of_no_edges():
    assert manhattan_wirelength([], [Coordinate(1, 1)], []) == 0
