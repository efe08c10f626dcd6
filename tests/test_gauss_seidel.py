import numpy as np
import pytest

from qplacer.placement.errors import NonConvergenceError, PlacerError, SingularSystemError
from qplacer.placement.gauss_seidel import gauss_seidel, round_half_away
from qplacer.placement.model import make_graph
from qplacer.placement.system_matrix import build_system

CHAIN = np.array([[4, -2], [-2, 4]])


def test_chain_converges_to_exact_solution():
    sol = gauss_seidel(CHAIN, np.array([0, 12]), 0.001)
    assert sol.values.tolist() == [2, 4]
    assert np.allclose(sol.raw, [2.0, 4.0], atol=0.01)
    assert sol.sweeps == len(sol.history)
    assert sol.history[-1] < 0.001


def test_relaxation_is_in_place():
    # x1 sees the x0 already updated in the same sweep
    sol = gauss_seidel(CHAIN, np.array([0, 12]), 10.0)
    assert sol.sweeps == 1
    assert sol.raw.tolist() == [0.0, 3.0]
    sol = gauss_seidel(CHAIN, np.array([0, 12]), 2.0)
    assert sol.raw.tolist() == [1.5, 3.75]


def test_sweep_deltas_are_non_increasing():
    sol = gauss_seidel(CHAIN, np.array([0, 12]), 1e-9)
    assert sol.history[:3] == [3.0, 1.5, 0.375]
    assert all(b <= a for a, b in zip(sol.history, sol.history[1:]))


def test_sparse_and_dense_give_same_relaxation():
    g = make_graph(0.0001, 9, [(0, 0), (100, 50)],
                   [(0, 2)] + [(i, i + 1) for i in range(2, 10)] + [(10, 1)])
    dense = build_system(g, "dense")
    sparse = build_system(g, "sparse")
    a = gauss_seidel(dense.matrix, dense.xb, 0.0001)
    b = gauss_seidel(sparse.matrix, sparse.xb, 0.0001)
    assert a.sweeps == b.sweeps
    assert np.allclose(a.raw, b.raw)
    assert a.values.tolist() == [10 * i for i in range(1, 10)]


def test_round_half_away_from_zero():
    assert round_half_away(np.array([0.5, -0.5, 1.5, 2.5, -2.5, 2.4999, -0.2])).tolist() == [1, -1, 2, 3, -3, 2, 0]


def test_half_solution_rounds_away_from_zero():
    assert gauss_seidel(np.array([[4]]), np.array([2]), 0.001).values.tolist() == [1]
    assert gauss_seidel(np.array([[4]]), np.array([-2]), 0.001).values.tolist() == [-1]


def test_zero_diagonal_raises_singular_system():
    A = np.array([[2, 0], [0, 0]])
    with pytest.raises(SingularSystemError) as exc:
        gauss_seidel(A, np.array([2, 0]), 0.001)
    assert exc.value.rows == [1]
    assert "F1" in str(exc.value)
    assert str(exc.value).startswith("Placer Error:")
    assert isinstance(exc.value, PlacerError)


def test_sweep_cap_raises_non_convergence():
    with pytest.raises(NonConvergenceError) as exc:
        gauss_seidel(CHAIN, np.array([0, 12]), 0.001, max_sweeps=1)
    assert exc.value.sweeps == 1
    assert exc.value.last_delta == 3.0


def test_unbounded_sweeps_still_converge():
    sol = gauss_seidel(CHAIN, np.array([0, 12]), 0.001, max_sweeps=None)
    assert sol.values.tolist() == [2, 4]


def test_empty_system():
    sol = gauss_seidel(np.zeros((0, 0), dtype=np.int64), np.zeros(0), 0.1)
    assert sol.sweeps == 0
    assert sol.values.shape == (0,)


@pytest.mark.parametrize("tol", [0.0, -1.0])
def test_non_positive_tolerance_rejected(tol):
    with pytest.raises(ValueError):
        gauss_seidel(CHAIN, np.array([0, 12]), tol)


def test_shape_mismatch_rejected():
    with pytest.raises(ValueError):
        gauss_seidel(CHAIN, np.array([1, 2, 3]), 0.1)


@pytest.mark.parametrize("seed", range(15))
def test_matches_direct_solve_when_every_cell_is_anchored(seed):
    rng = np.random.default_rng(seed)
    num_static = 3
    n = int(rng.integers(2, 12))
    statics = [tuple(int(v) for v in rng.integers(0, 100, size=2)) for _ in range(num_static)]
    edges = [(int(rng.integers(0, num_static)), num_static + f) for f in range(n)]
    for _ in range(2 * n):
        a, b = (int(v) for v in rng.integers(num_static, num_static + n, size=2))
        edges.append((a, b))
    g = make_graph(1e-6, n, statics, edges)
    system = build_system(g)
    exact = np.linalg.solve(system.matrix.astype(float), system.xb.astype(float))
    sol = gauss_seidel(system.matrix, system.xb, 1e-6, max_sweeps=20000)
    assert np.allclose(sol.raw, exact, atol=1e-3)
