import numpy as np
import pytest

from qplacer.placement.model import make_graph
from qplacer.placement.system_matrix import (
    as_dense,
    build_system,
    is_diagonally_dominant,
    is_symmetric,
)


def _random_graph(seed: int):
    rng = np.random.default_rng(seed)
    num_static = int(rng.integers(1, 6))
    num_floating = int(rng.integers(1, 16))
    total = num_static + num_floating
    statics = [tuple(int(v) for v in rng.integers(-50, 50, size=2)) for _ in range(num_static)]
    edges = []
    # every floating cell gets at least one edge to another node
    for f in range(num_static, total):
        other = int(rng.integers(0, total - 1))
        if other >= f:
            other += 1
        edges.append((f, other))
    for _ in range(int(rng.integers(0, 3 * total))):
        a, b = (int(v) for v in rng.integers(0, total, size=2))
        edges.append((a, b))
    return make_graph(0.001, num_floating, statics, edges)


def test_static_floating_edge_folds_anchor_into_rhs():
    g = make_graph(0.001, 1, [(3, -7)], [(0, 1)])
    system = build_system(g)
    assert system.matrix.tolist() == [[2]]
    assert system.xb.tolist() == [6]
    assert system.yb.tolist() == [-14]


def test_edge_orientation_does_not_matter():
    a = build_system(make_graph(0.001, 1, [(3, 4)], [(0, 1)]))
    b = build_system(make_graph(0.001, 1, [(3, 4)], [(1, 0)]))
    assert np.array_equal(a.matrix, b.matrix)
    assert np.array_equal(a.xb, b.xb)
    assert np.array_equal(a.yb, b.yb)


def test_floating_floating_edge_couples_cells():
    g = make_graph(0.001, 2, [(0, 0), (6, 0)], [(0, 2), (2, 3), (3, 1)])
    system = build_system(g)
    assert system.matrix.tolist() == [[4, -2], [-2, 4]]
    assert system.xb.tolist() == [0, 12]
    assert system.yb.tolist() == [0, 0]


def test_parallel_edges_accumulate():
    g = make_graph(0.001, 2, [(0, 0)], [(0, 1), (1, 2), (1, 2), (2, 1)])
    A = build_system(g).matrix
    assert A[0, 1] == -6
    assert A[1, 0] == -6
    assert A[0, 0] == 8
    assert A[1, 1] == 6


def test_static_static_edge_and_self_loop_contribute_nothing():
    g = make_graph(0.001, 1, [(0, 0), (5, 5)], [(0, 1), (2, 2), (0, 2)])
    system = build_system(g)
    assert system.matrix.tolist() == [[2]]
    assert system.xb.tolist() == [0]


def test_empty_problem_gives_empty_system():
    system = build_system(make_graph(0.5, 0, [(1, 1)], [(0, 0)]))
    assert system.size == 0
    assert system.xb.shape == (0,)


def test_unknown_representation_rejected():
    g = make_graph(0.001, 1, [(0, 0)], [(0, 1)])
    with pytest.raises(ValueError):
        build_system(g, representation="banded")


@pytest.mark.parametrize("seed", range(25))
def test_symmetry_and_dominance_on_random_graphs(seed):
    g = _random_graph(seed)
    for representation in ("dense", "sparse"):
        system = build_system(g, representation=representation)
        A = as_dense(system.matrix)
        assert is_symmetric(system.matrix)
        assert np.array_equal(A, A.T)
        assert np.array_equal(np.diag(A), 2 * g.degrees())
        off = np.abs(A).sum(axis=1) - np.abs(np.diag(A))
        assert np.all(off <= np.diag(A))
        assert is_diagonally_dominant(system.matrix)


@pytest.mark.parametrize("seed", range(10))
def test_sparse_matches_dense(seed):
    g = _random_graph(seed)
    dense = build_system(g, representation="dense")
    sparse = build_system(g, representation="sparse")
    assert sparse.is_sparse and not dense.is_sparse
    assert np.array_equal(as_dense(sparse.matrix), dense.matrix)
    assert np.array_equal(sparse.xb, dense.xb)
    assert np.array_equal(sparse.yb, dense.yb)


def test_dominance_helper_detects_violation():
    assert not is_diagonally_dominant(np.array([[1, -2], [-2, 1]]))
    assert not is_symmetric(np.array([[1, 0], [3, 1]]))
