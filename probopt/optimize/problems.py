"""Reference objectives with analytic gradients and known minima."""

from __future__ import annotations

import numpy as np

from .core import Array, Problem


def bowl(x: Array) -> float:
    """Quadratic bowl with minimum 0 at ``(3, 4)``."""
    return float((x[0] - 3) ** 2 + (x[1] - 4) ** 2)


def bowl_grad(x: Array) -> Array:
    return np.array([2 * (x[0] - 3), 2 * (x[1] - 4)])


def rosenbrock(x: Array) -> float:
    """Rosenbrock's banana function with minimum 0 at ``(1, 1)``."""
    return float((1 - x[0]) ** 2 + 100 * (x[1] - x[0] ** 2) ** 2)


def rosenbrock_grad(x: Array) -> Array:
    return np.array(
        [
            2 * (x[0] - 1) - 400 * x[0] * (x[1] - x[0] ** 2),
            200 * (x[1] - x[0] ** 2),
        ]
    )


def nr_function(x: Array) -> float:
    """Test function of Numerical Recipes 10.7, minimum at ``(-2, 0.89442719)``."""
    u = x[1] ** 2 * (3 - x[0]) - x[0] ** 2 * (3 + x[0])
    q = (2 + x[0]) ** 2
    return float(10 * u**2 + q / (1 + q))


def nr_function_grad(x: Array) -> Array:
    u = x[1] ** 2 * (3 - x[0]) - x[0] ** 2 * (3 + x[0])
    x2p = 2 + x[0]
    q = x2p**2
    return np.array(
        [
            20 * u * (-x[1] ** 2 - 6 * x[0] - 3 * x[0] ** 2) + 2 * x2p / (1 + q) ** 2,
            40 * u * x[1] * (3 - x[0]),
        ]
    )


NR_START = np.array([0.1, 4.2])
NR_MINIMUM = np.array([-2.0, 0.89442719])


def quadratic_form(a: Array) -> Problem:
    """Problem for ``f(x) = x^T A x`` with gradient ``(A + A^T) x``."""
    a = np.array(a, dtype=float)
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError(f"A must be square, got shape {a.shape}")

    def fun(x: Array) -> float:
        return float(x @ a @ x)

    def grad(x: Array) -> Array:
        return (a + a.T) @ x

    return Problem(fun=fun, grad=grad, dim=a.shape[0])


BOWL = Problem(fun=bowl, grad=bowl_grad, dim=2)
ROSENBROCK = Problem(fun=rosenbrock, grad=rosenbrock_grad, dim=2)
NR = Problem(fun=nr_function, grad=nr_function_grad, dim=2)

__all__ = [
    "BOWL",
    "NR",
    "NR_MINIMUM",
    "NR_START",
    "ROSENBROCK",
    "bowl",
    "bowl_grad",
    "nr_function",
    "nr_function_grad",
    "quadratic_form",
    "rosenbrock",
    "rosenbrock_grad",
]
