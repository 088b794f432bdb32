"""Backtracking line search with quadratic and cubic step models.

The search follows the ``lnsrch`` routine of Numerical Recipes (2nd ed.,
section 9.7): try the full step, then backtrack along the direction using a
quadratic model of ``f`` for the first reduction and a cubic through the two
latest trials afterwards, until the Armijo condition holds.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from ..logging import get_logger
from .core import (
    Array,
    LineSearchOptions,
    LineSearchRoundoffError,
    NotDescentDirectionError,
    Objective,
)
from .utils import frozen_array, max_abs_ratio

logger = get_logger(__name__)

# stpmax = MAX_STEP_SCALE * max(|x0|, n)
MAX_STEP_SCALE = 100.0


@dataclass(frozen=True)
class LineSearchResult:
    """Outcome of one line search.

    Attributes:
        x: Accepted point (the starting point when ``stalled``).
        fx: Objective value at ``x``.
        step: Accepted step length ``lam``; ``0.0`` when stalled.
        nfev: Objective evaluations spent.
        stalled: ``True`` when no acceptable step above the minimum step
            length was found.
    """

    x: Array
    fx: float
    step: float
    nfev: int
    stalled: bool = False


def max_step(x0: Array) -> float:
    """Largest step the line search may take from ``x0``."""
    x0 = np.asarray(x0, dtype=float)
    return MAX_STEP_SCALE * max(float(np.linalg.norm(x0)), float(x0.size))


def _bound_step(lam: float, proposal: float) -> float:
    """Keep a proposed step within ``[0.1 lam, 0.5 lam]``.

    A NaN proposal compares false everywhere and ends up at ``0.5 lam``.
    """
    upper = proposal if proposal <= 0.5 * lam else 0.5 * lam
    return upper if 0.1 * lam <= upper else 0.1 * lam


def _quadratic_step(slope: float, fold: float, fnew: float) -> float:
    return -slope / (2.0 * (fnew - fold - slope))


def _cubic_step(
    slope: float,
    fold: float,
    lam: float,
    fnew: float,
    lam2: float,
    f2: float,
) -> float:
    rhs1 = fnew - fold - lam * slope
    rhs2 = f2 - fold - lam2 * slope
    a = (rhs1 / lam**2 - rhs2 / lam2**2) / (lam - lam2)
    b = (-lam2 * rhs1 / lam**2 + lam * rhs2 / lam2**2) / (lam - lam2)
    if a == 0.0:
        if b == 0.0:
            return math.inf
        return -slope / (2.0 * b)
    disc = b * b - 3.0 * a * slope
    if disc < 0.0:
        raise LineSearchRoundoffError(
            f"roundoff problem in line search: cubic discriminant {disc:.3g} < 0 "
            f"at step {lam:.3g}"
        )
    return (-b + math.sqrt(disc)) / (3.0 * a)


def cubic_line_search(
    fun: Objective,
    x: Array,
    fx: float,
    grad: Array,
    direction: Array,
    stpmax: float,
    options: Optional[LineSearchOptions] = None,
) -> LineSearchResult:
    """Find a step along ``direction`` satisfying sufficient decrease.

    Args:
        fun: Objective function.
        x: Current point.
        fx: ``fun(x)``.
        grad: Gradient at ``x``.
        direction: Proposed step; rescaled to length ``stpmax`` if longer.
        stpmax: Maximum step length.
        options: Tolerance and Armijo coefficient.

    Returns:
        The accepted point, or the starting point flagged ``stalled`` when
        the step shrinks below ``xtol`` relative to ``x``.

    Raises:
        NotDescentDirectionError: if ``grad . direction >= 0``.
        LineSearchRoundoffError: if the cubic model breaks down.
    """
    options = options or LineSearchOptions()
    x = np.asarray(x, dtype=float)
    grad = np.asarray(grad, dtype=float)
    p = np.asarray(direction, dtype=float)
    if p.shape != x.shape or grad.shape != x.shape:
        raise ValueError(
            f"dimension mismatch: x {x.shape}, grad {grad.shape}, direction {p.shape}"
        )

    pnorm = float(np.linalg.norm(p))
    if pnorm > stpmax:
        p = (stpmax / pnorm) * p

    slope = float(np.dot(grad, p))
    if not slope < 0.0:
        raise NotDescentDirectionError(
            f"search direction is not a descent direction (slope={slope:.3g})"
        )

    lammin = options.xtol / max_abs_ratio(p, x)
    lam = 1.0
    previous: Optional[Tuple[float, float]] = None
    nfev = 0

    while True:
        if lam < lammin:
            logger.warning(
                "line search stalled: step %.3g below minimum %.3g", lam, lammin
            )
            return LineSearchResult(
                x=frozen_array(x), fx=fx, step=0.0, nfev=nfev, stalled=True
            )
        xnew = x + lam * p
        fnew = float(fun(xnew))
        nfev += 1
        if fnew <= fx + options.alpha * lam * slope:
            return LineSearchResult(
                x=frozen_array(xnew), fx=fnew, step=lam, nfev=nfev
            )
        if previous is None:
            proposal = _quadratic_step(slope, fx, fnew)
        else:
            proposal = _cubic_step(slope, fx, lam, fnew, *previous)
        logger.debug("line search: f(%.3g) = %.6g rejected", lam, fnew)
        previous = (lam, fnew)
        lam = _bound_step(lam, proposal)


__all__ = ["LineSearchResult", "MAX_STEP_SCALE", "cubic_line_search", "max_step"]
