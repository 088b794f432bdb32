"""Curvature estimates from a converged simplex.

After a Nelder-Mead run the vertices cluster around the optimum; their
per-dimension spread sets the finite-difference step for each coordinate.
The inverse of the resulting curvature matrix is the covariance of the
Laplace (local Gaussian) approximation when the objective is a negative log
density.

Reference:
    SAS/OR User's Guide, "Finite-Difference Approximations of Derivatives".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from ..logging import format_vector, get_logger
from .core import (
    Array,
    NelderMeadOptions,
    Objective,
    OptimizeResult,
    Problem,
    SingularHessianError,
)
from .simplex import Simplex, nelder_mead
from .utils import frozen_array, invert_curvature, is_pos_def

logger = get_logger(__name__)


@dataclass(frozen=True)
class HessianEstimate:
    """Finite-difference curvature at the centre of a simplex.

    Attributes:
        center: Per-dimension mean of the simplex vertices.
        swings: Per-dimension finite-difference step.
        hessian: Curvature matrix.
        inverse: Inverse of ``hessian``; a covariance estimate under the
            Laplace approximation.
    """

    center: Array
    swings: Array
    hessian: Array
    inverse: Array

    @property
    def standard_errors(self) -> Array:
        """Square roots of the diagonal of :attr:`inverse`."""
        return np.sqrt(np.diag(self.inverse))


def simplex_swings(simplex: Simplex) -> tuple[Array, Array]:
    """Per-dimension mean and swing ``max(max - mean, mean - min)``."""
    points = simplex.points
    mean = points.mean(axis=0)
    swing = np.maximum(points.max(axis=0) - mean, mean - points.min(axis=0))
    return mean, swing


def hessian_from_simplex(fun: Objective, simplex: Simplex) -> HessianEstimate:
    """Estimate the curvature of ``fun`` around a converged simplex.

    Entry ``(i, j)`` uses the four-point central difference

        (f(x+u_i+u_j) - f(x+u_i-u_j) - f(x-u_i+u_j) + f(x-u_i-u_j))
        / (4 s_i s_j)

    with ``x`` the vertex mean, ``s`` the swings and ``u_i = s_i e_i``.

    Raises:
        SingularHessianError: if some coordinate has zero swing or the
            curvature matrix cannot be inverted or is not positive definite
            (a saddle or maximum has no Laplace covariance).
    """
    center, swings = simplex_swings(simplex)
    flat = np.flatnonzero(swings == 0.0)
    if flat.size:
        raise SingularHessianError(
            f"simplex has zero swing in dimensions {flat.tolist()}"
        )

    n = center.size
    units = np.diag(swings)
    hess = np.empty((n, n), dtype=float)
    for i in range(n):
        for j in range(i, n):
            ui, uj = units[i], units[j]
            value = (
                fun(center + ui + uj)
                - fun(center + ui - uj)
                - fun(center - ui + uj)
                + fun(center - ui - uj)
            ) / (4.0 * swings[i] * swings[j])
            hess[i, j] = value
            hess[j, i] = value

    inverse = invert_curvature(hess)
    if not is_pos_def(hess):
        raise SingularHessianError(
            f"curvature matrix is not positive definite at {center}: {hess.tolist()}"
        )
    logger.debug("curvature at %s: %s", format_vector(center), hess.tolist())
    return HessianEstimate(
        center=frozen_array(center),
        swings=frozen_array(swings),
        hessian=frozen_array(hess),
        inverse=frozen_array(inverse),
    )


def laplace_approximation(
    problem: Union[Problem, Objective],
    x0: Array,
    options: Optional[NelderMeadOptions] = None,
) -> tuple[OptimizeResult, Optional[HessianEstimate]]:
    """Minimize with Nelder-Mead, then estimate the curvature at the optimum.

    Returns:
        The simplex result and the curvature estimate, or ``None`` in place
        of the estimate when the simplex run did not converge.
    """
    fun = problem.fun if isinstance(problem, Problem) else problem
    result = nelder_mead(problem, x0, options)
    if not result.success:
        return result, None
    return result, hessian_from_simplex(fun, result.simplex)


__all__ = [
    "HessianEstimate",
    "hessian_from_simplex",
    "laplace_approximation",
    "simplex_swings",
]
