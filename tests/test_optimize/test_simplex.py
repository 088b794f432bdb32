import numpy as np
import pytest

from probopt.optimize import (
    NelderMeadOptions,
    NumericalDegeneracyError,
    Problem,
    Simplex,
    Status,
    Vertex,
    centroid,
    gen_initial,
    iterate_simplex,
    nelder_mead,
    nm_step,
)
from probopt.optimize.problems import bowl, rosenbrock
from probopt.optimize.simplex import evaluate


def paraboloid(x: np.ndarray) -> float:
    return float(x[0] ** 2 + x[1] ** 2)


def make_simplex(fun, points) -> Simplex:
    return Simplex(tuple(evaluate(fun, np.array(p, dtype=float)) for p in points)).sorted()


def test_centroid_is_coordinatewise_mean(rng):
    points = [rng.normal(size=4) for _ in range(7)]
    assert np.allclose(centroid(points), np.mean(points, axis=0))
    assert np.allclose(centroid([points[0]]), points[0])


def test_centroid_of_nothing_raises():
    with pytest.raises(ValueError):
        centroid([])


def test_gen_initial_uses_relative_steps():
    sim = gen_initial(bowl, 0.1, np.array([3.0, 0.5]))
    assert len(sim) == 3
    assert np.allclose(sim.points, [[3.0, 0.5], [3.3, 0.5], [3.0, 0.55]])
    assert np.allclose(sim.values, [bowl(p) for p in sim.points])


def test_gen_initial_rejects_empty_point():
    with pytest.raises(ValueError):
        gen_initial(bowl, 0.1, np.array([]))


def test_simplex_validates_shape():
    with pytest.raises(ValueError):
        Simplex((Vertex(np.zeros(1), 0.0),))
    with pytest.raises(ValueError):
        Simplex((Vertex(np.zeros(2), 0.0), Vertex(np.zeros(2), 1.0)))


def test_reflection_accepted():
    f = lambda x: float(x[0] ** 2 + (x[1] - 1) ** 2)
    sim = make_simplex(f, [[0.0, 0.9], [1.0, 0.0], [1.0, -1.0]])
    nxt = nm_step(f, sim)
    assert np.allclose(nxt.points, [[0.0, 0.9], [0.0, 1.9], [1.0, 0.0]])
    assert np.allclose(nxt.values, [0.01, 0.81, 2.0])


def test_expansion_accepted():
    f = lambda x: float(x[0] + 2 * x[1])
    sim = make_simplex(f, [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    nxt = nm_step(f, sim)
    assert np.allclose(nxt.best.point, [1.5, -2.0])
    assert nxt.best.value == pytest.approx(-2.5)


def test_contraction_accepted():
    sim = make_simplex(paraboloid, [[0.1, 0.0], [-0.2, 0.0], [0.0, 1.0]])
    nxt = nm_step(paraboloid, sim)
    assert np.allclose(nxt.worst.point, [-0.025, 0.5])
    assert nxt.worst.value == pytest.approx(0.250625)


def _plateau(x: np.ndarray) -> float:
    table = {(0.0, 0.0): 0.0, (1.0, 0.0): 1.0, (0.0, 1.0): 2.0}
    return table.get(tuple(float(v) for v in x), 5.0)


def test_shrink_reuses_contraction_coefficient():
    sim = make_simplex(_plateau, [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    nxt = nm_step(_plateau, sim)
    assert np.allclose(nxt.points, [[0.0, 0.0], [0.5, 0.0], [0.0, 0.5]])
    assert nxt.best.value == 0.0


def test_shrink_with_separate_coefficient():
    sim = make_simplex(_plateau, [[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]])
    nxt = nm_step(_plateau, sim, NelderMeadOptions(sigma=0.25))
    assert np.allclose(nxt.points, [[0.0, 0.0], [0.25, 0.0], [0.0, 0.25]])


def test_simplex_size_and_order_invariant():
    sim = gen_initial(rosenbrock, 0.1, np.array([-1.2, 1.0]))
    for k, current in enumerate(iterate_simplex(rosenbrock, sim)):
        assert len(current) == 3
        assert all(v.point.shape == (2,) for v in current)
        assert np.all(np.diff(current.values) >= 0)
        if k == 60:
            break


def test_nelder_mead_quadratic_bowl():
    res = nelder_mead(bowl, np.array([3.0, 0.5]), NelderMeadOptions(tol=1e-10))
    assert res.success
    assert res.status is Status.CONVERGED
    assert res.fun < 1e-8
    assert np.allclose(res.x, [3.0, 4.0], atol=1e-3)
    assert len(res.simplex) == 3
    assert res.simplex.values.max() < 1e-8


def test_nelder_mead_steps_once_past_tolerance():
    # The seed simplex already has spread 0.4375 < 1; one reflection follows.
    res = nelder_mead(bowl, np.array([3.0, 0.5]), NelderMeadOptions(tol=1.0))
    assert res.success
    assert res.nit == 1
    assert res.nfev == 4
    assert np.allclose(res.simplex.points, [[3.0, 0.55], [2.7, 0.55], [3.0, 0.5]])
    assert np.allclose(res.x, [3.0, 0.55])


def test_nelder_mead_iteration_limit():
    res = nelder_mead(
        rosenbrock, np.array([-1.2, 1.0]), NelderMeadOptions(tol=1e-12, max_iters=3)
    )
    assert not res.success
    assert res.status is Status.MAX_ITER
    assert res.message == "maximum iterations exceeded in nelder_mead"
    assert res.nit == 3
    assert len(res.simplex) == 3


def test_nelder_mead_accepts_problem():
    problem = Problem(fun=bowl, dim=2)
    res = nelder_mead(problem, np.array([1.0, 1.0]), NelderMeadOptions(tol=1e-10))
    assert res.success
    assert res.nfev > res.nit
    with pytest.raises(ValueError):
        nelder_mead(problem, np.array([1.0, 1.0, 1.0]))


def test_options_validated():
    with pytest.raises(ValueError):
        NelderMeadOptions(rho=1.5)
    with pytest.raises(ValueError):
        NelderMeadOptions(gamma=0.5)
    with pytest.raises(ValueError):
        NelderMeadOptions(sigma=0.0)
    assert NelderMeadOptions().shrink == 0.5
    assert NelderMeadOptions(sigma=0.3).shrink == 0.3


def test_nan_objective_value_rejected():
    def holey(x: np.ndarray) -> float:
        return float("nan") if x[0] > 3.2 else bowl(x)

    with pytest.raises(NumericalDegeneracyError):
        nelder_mead(holey, np.array([3.0, 0.5]))


def test_infinite_objective_value_sorts_last():
    def wall(x: np.ndarray) -> float:
        return float("inf") if x[1] > 0.52 else bowl(x)

    sim = gen_initial(wall, 0.1, np.array([3.0, 0.5])).sorted()
    assert sim.worst.value == float("inf")
    assert np.allclose(sim.worst.point, [3.0, 0.55])
