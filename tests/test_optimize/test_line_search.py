import math

import numpy as np
import pytest

from probopt.optimize import (
    LineSearchOptions,
    LineSearchRoundoffError,
    NotDescentDirectionError,
    cubic_line_search,
    max_step,
)
from probopt.optimize.line_search import _bound_step, _cubic_step
from probopt.optimize.problems import bowl, bowl_grad


def quadratic_fun(x: np.ndarray) -> float:
    return float(x.T @ x)


def quadratic_grad(x: np.ndarray) -> np.ndarray:
    return 2 * x


def test_full_step_accepted():
    x = np.array([1.0, -2.0])
    res = cubic_line_search(
        quadratic_fun, x, quadratic_fun(x), quadratic_grad(x), -x, stpmax=100.0
    )
    assert res.step == 1.0
    assert res.nfev == 1
    assert not res.stalled
    assert np.allclose(res.x, np.zeros(2))


def test_quadratic_backtrack_lands_on_bowl_minimum():
    x = np.array([-10.0, -10.0])
    grad = bowl_grad(x)
    res = cubic_line_search(bowl, x, bowl(x), grad, -grad, stpmax=max_step(x))
    assert res.step == 0.5
    assert res.nfev == 2
    assert np.allclose(res.x, [3.0, 4.0])
    assert res.fx == pytest.approx(0.0)


def test_direction_clamped_to_max_step():
    def linear(x: np.ndarray) -> float:
        return float(np.sum(x))

    x = np.zeros(2)
    res = cubic_line_search(
        linear, x, 0.0, np.ones(2), np.array([-1000.0, 0.0]), stpmax=1.0
    )
    assert np.allclose(res.x, [-1.0, 0.0])
    assert res.fx == pytest.approx(-1.0)


def test_sufficient_decrease_holds(rng, spd_matrix):
    options = LineSearchOptions()
    for _ in range(20):
        x = rng.normal(size=3)

        def fun(z: np.ndarray) -> float:
            return float(z @ spd_matrix @ z)

        grad = 2 * spd_matrix @ x
        direction = -10.0 * grad
        res = cubic_line_search(fun, x, fun(x), grad, direction, stpmax=1e6)
        assert not res.stalled
        slope = float(grad @ direction)
        assert res.fx <= fun(x) + options.alpha * res.step * slope
        assert res.fx < fun(x)


def test_non_descent_direction_raises():
    x = np.array([1.0, 1.0])
    grad = quadratic_grad(x)
    with pytest.raises(NotDescentDirectionError):
        cubic_line_search(quadratic_fun, x, quadratic_fun(x), grad, grad, 10.0)
    with pytest.raises(ValueError):
        cubic_line_search(quadratic_fun, x, quadratic_fun(x), grad, np.zeros(2), 10.0)


def test_dimension_mismatch_raises():
    x = np.array([1.0, 1.0])
    with pytest.raises(ValueError):
        cubic_line_search(
            quadratic_fun, x, 2.0, quadratic_grad(x), np.array([-1.0]), 10.0
        )


def test_stall_returns_starting_point():
    # The supplied gradient claims descent along (1, 1); f only increases.
    x = np.array([1.0, 1.0])
    res = cubic_line_search(
        quadratic_fun, x, 2.0, -np.ones(2), np.ones(2), stpmax=100.0
    )
    assert res.stalled
    assert res.step == 0.0
    assert res.fx == 2.0
    assert np.array_equal(res.x, x)
    assert res.nfev > 2


def test_cubic_negative_discriminant_raises():
    with pytest.raises(LineSearchRoundoffError):
        _cubic_step(-1.0, 0.0, 0.5, -0.2875, 1.0, -0.8)


def test_cubic_with_vanishing_cubic_term_uses_quadratic_minimum():
    # a == 0: the model is quadratic, minimum at -slope / (2b) with b = 2
    assert _cubic_step(-1.0, 0.0, 0.5, 0.0, 1.0, 1.0) == pytest.approx(0.25)
    # a == b == 0: linear model, unbounded step (clamped later)
    assert _cubic_step(-1.0, 0.0, 0.5, -0.5, 1.0, -1.0) == math.inf
    assert _bound_step(0.5, math.inf) == 0.25


def test_step_bounds():
    assert _bound_step(1.0, 0.3) == 0.3
    assert _bound_step(1.0, 0.9) == 0.5
    assert _bound_step(1.0, 0.01) == 0.1
    assert _bound_step(1.0, -2.0) == 0.1
    assert _bound_step(1.0, float("nan")) == 0.5


def test_max_step_scales_with_point_and_dimension():
    assert max_step(np.array([3.0, 4.0])) == pytest.approx(500.0)
    assert max_step(np.array([0.1, 0.1, 0.1])) == pytest.approx(300.0)


def test_options_validated():
    with pytest.raises(ValueError):
        LineSearchOptions(alpha=1.5)
    with pytest.raises(ValueError):
        LineSearchOptions(xtol=0.0)
