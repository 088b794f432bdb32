"""Utility helpers for finite differences and guarded linear algebra.

Everything here is pure NumPy and deterministic.
"""

from __future__ import annotations

from typing import Callable

import numpy as np

from .core import SingularHessianError

Array = np.ndarray
Objective = Callable[[Array], float]


def frozen_array(values) -> Array:
    """Return a read-only float copy of ``values``."""
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


def max_abs_ratio(num: Array, den: Array) -> float:
    """Largest ``|num_i| / max(|den_i|, 1)`` over all coordinates."""
    return float(np.max(np.abs(num) / np.maximum(np.abs(den), 1.0)))


def approx_grad(
    fun: Objective, x: Array, eps: float = 1e-6, return_evals: bool = False
) -> Array | tuple[Array, int]:
    """Compute a central-difference gradient approximation.

    Parameters
    ----------
    fun:
        Objective function returning a scalar given x.
    x:
        Point where the gradient is approximated.
    eps:
        Perturbation size for finite differences.
    """
    if eps <= 0:
        raise ValueError("eps must be positive")
    x = np.asarray(x, dtype=float).copy()
    grad = np.zeros_like(x, dtype=float)
    evals = 0
    for i in range(x.size):
        ei = np.zeros_like(x)
        ei[i] = eps
        fx_plus = fun(x + ei)
        fx_minus = fun(x - ei)
        evals += 2
        grad[i] = (fx_plus - fx_minus) / (2.0 * eps)
    if return_evals:
        return grad, evals
    return grad


def is_pos_def(mat: Array, tol: float = 1e-12) -> bool:
    """Check if a matrix is positive definite via eigenvalues."""
    sym = 0.5 * (mat + mat.T)
    eigvals = np.linalg.eigvalsh(sym)
    return bool(np.all(eigvals > tol))


def invert_curvature(mat: Array) -> Array:
    """Invert a curvature matrix, refusing singular or ill-conditioned input.

    Raises:
        SingularHessianError: if ``mat`` has non-finite entries, is singular,
            or its condition number exceeds ``1 / eps``.
    """
    if not np.all(np.isfinite(mat)):
        raise SingularHessianError("curvature matrix has non-finite entries")
    cond = np.linalg.cond(mat)
    if not np.isfinite(cond) or cond > 1.0 / np.finfo(float).eps:
        raise SingularHessianError(
            f"curvature matrix is singular to working precision (cond={cond:.3g})"
        )
    try:
        inverse = np.linalg.inv(mat)
    except np.linalg.LinAlgError as exc:
        raise SingularHessianError(str(exc)) from exc
    if not np.all(np.isfinite(inverse)):
        raise SingularHessianError("inverse curvature matrix is not finite")
    return inverse


__all__ = [
    "Array",
    "Objective",
    "approx_grad",
    "frozen_array",
    "invert_curvature",
    "is_pos_def",
    "max_abs_ratio",
]
