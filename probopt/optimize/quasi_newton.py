"""BFGS quasi-Newton minimization.

The iteration follows section 10.7 of Numerical Recipes in C (2nd ed.): a
backtracking line search along ``-H g`` followed by the BFGS rank-2 update of
the inverse-Hessian approximation ``H``. The step is exposed on its own
(:func:`bfgs_step`, :func:`iterate_bfgs`) so intermediate inverse-Hessian
estimates can be inspected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterator, Optional

import numpy as np

from ..logging import format_vector, get_logger
from .core import (
    Array,
    BFGSOptions,
    DegenerateUpdateError,
    LineSearchOptions,
    OptimizeResult,
    Problem,
    Status,
    as_point,
)
from .line_search import cubic_line_search, max_step
from .utils import approx_grad, frozen_array, max_abs_ratio

logger = get_logger(__name__)


@dataclass(frozen=True)
class BFGSState:
    """Solver data carried between BFGS steps.

    Attributes:
        x: Current point.
        fx: Objective value at ``x``.
        grad: Gradient at ``x``.
        direction: Search direction for the next step.
        inv_hessian: Current inverse-Hessian approximation.
        stpmax: Maximum line-search step length.
        nfev: Objective evaluations so far.
        njev: Gradient evaluations so far.
    """

    x: Array
    fx: float
    grad: Array
    direction: Array
    inv_hessian: Array
    stpmax: float
    nfev: int = 0
    njev: int = 0


def _compute_gradient(problem: Problem, x: np.ndarray) -> tuple[np.ndarray, int, int]:
    if problem.grad is not None:
        grad = np.asarray(problem.grad(x), dtype=float)
        if grad.shape != x.shape:
            raise ValueError(
                f"gradient has shape {grad.shape}, expected {x.shape}"
            )
        return grad, 0, 1
    grad, evals = approx_grad(problem.fun, x, return_evals=True)
    return grad, int(evals), 0


def _vanishes(denom: float, a: Array, b: Array) -> bool:
    # |a . b| is negligible relative to |a| |b|
    scale = float(np.linalg.norm(a) * np.linalg.norm(b))
    return not np.isfinite(denom) or abs(denom) <= np.finfo(float).eps * scale


def _update_inverse_hessian(
    h: Array, dx: Array, dg: Array, converged: bool
) -> Array:
    hdg = h @ dg
    dxdg = float(np.dot(dx, dg))
    dghdg = float(np.dot(dg, hdg))
    if _vanishes(dxdg, dx, dg) or _vanishes(dghdg, dg, hdg):
        if converged:
            return h
        raise DegenerateUpdateError(
            f"degenerate BFGS update: dx.dg={dxdg:.3g}, dg.H.dg={dghdg:.3g}"
        )
    if dxdg < 0.0:
        logger.warning(
            "curvature condition violated (dx.dg=%.3g); keeping previous "
            "inverse Hessian",
            dxdg,
        )
        return h
    u = (1.0 / dxdg) * dx - (1.0 / dghdg) * hdg
    return (
        h
        + (1.0 / dxdg) * np.outer(dx, dx)
        - (1.0 / dghdg) * np.outer(hdg, hdg)
        + dghdg * np.outer(u, u)
    )


def bfgs_init(problem: Problem, x0: np.ndarray) -> BFGSState:
    """Set up the initial BFGS state at ``x0``."""
    x = as_point(x0, problem.dim)
    fx = float(problem.fun(x))
    grad, grad_fev, grad_jev = _compute_gradient(problem, x)
    return BFGSState(
        x=frozen_array(x),
        fx=fx,
        grad=frozen_array(grad),
        direction=frozen_array(-grad),
        inv_hessian=frozen_array(np.eye(x.size)),
        stpmax=max_step(x),
        nfev=1 + grad_fev,
        njev=grad_jev,
    )


def bfgs_step(
    problem: Problem,
    state: BFGSState,
    options: Optional[BFGSOptions] = None,
    line_search_options: Optional[LineSearchOptions] = None,
) -> tuple[bool, BFGSState]:
    """Perform one BFGS step.

    Returns:
        ``(converged, new_state)``. Convergence is judged on the direction
        that was just searched relative to the point it started from, or on
        the new gradient relative to the new function value.

    Raises:
        DegenerateUpdateError: if the rank-2 update has a vanishing
            denominator and the step did not converge.
        NotDescentDirectionError: if the state's direction points uphill.
        LineSearchRoundoffError: if the line search breaks down.
    """
    options = options or BFGSOptions()
    search = cubic_line_search(
        problem.fun,
        state.x,
        state.fx,
        state.grad,
        state.direction,
        state.stpmax,
        line_search_options,
    )
    grad_new, grad_fev, grad_jev = _compute_gradient(problem, search.x)
    dx = search.x - state.x
    dg = grad_new - state.grad

    converged = (
        max_abs_ratio(state.direction, state.x) < options.ptol
        or max_abs_ratio(grad_new, state.x) / max(abs(search.fx), 1.0)
        < options.gtol
    )
    inv_hessian = _update_inverse_hessian(state.inv_hessian, dx, dg, converged)
    direction = -(inv_hessian @ grad_new)

    return converged, replace(
        state,
        x=search.x,
        fx=search.fx,
        grad=frozen_array(grad_new),
        direction=frozen_array(direction),
        inv_hessian=frozen_array(inv_hessian),
        nfev=state.nfev + search.nfev + grad_fev,
        njev=state.njev + grad_jev,
    )


def iterate_bfgs(
    problem: Problem,
    x0: np.ndarray,
    options: Optional[BFGSOptions] = None,
    line_search_options: Optional[LineSearchOptions] = None,
) -> Iterator[tuple[bool, BFGSState]]:
    """Yield ``(converged, state)`` after every step, stopping once converged.

    The stream has no iteration limit; combine it with
    :func:`itertools.islice` to inspect the first few inverse-Hessian
    estimates.
    """
    state = bfgs_init(problem, x0)
    while True:
        converged, state = bfgs_step(problem, state, options, line_search_options)
        yield converged, state
        if converged:
            return


def bfgs(
    problem: Problem,
    x0: np.ndarray,
    options: Optional[BFGSOptions] = None,
    line_search_options: Optional[LineSearchOptions] = None,
    history: bool = False,
) -> OptimizeResult:
    """Minimize ``problem.fun`` with BFGS and a cubic backtracking line search.

    On success the result carries the final point and inverse-Hessian
    approximation. When more than ``options.maxiters`` steps would be needed
    the result reports failure and carries no point.
    """
    options = options or BFGSOptions()
    state = bfgs_init(problem, x0)
    hist: list[np.ndarray] = [state.x] if history else []
    nit = 0

    while nit <= options.maxiters:
        converged, state = bfgs_step(problem, state, options, line_search_options)
        nit += 1
        if history:
            hist.append(state.x)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "bfgs iteration %d: f=%.10g x=%s", nit, state.fx, format_vector(state.x)
            )
        if converged:
            logger.info("bfgs converged after %d iterations (f=%.10g)", nit, state.fx)
            return OptimizeResult(
                x=state.x,
                fun=state.fx,
                status=Status.CONVERGED,
                success=True,
                message="Converged.",
                nit=nit,
                nfev=state.nfev,
                njev=state.njev,
                grad=state.grad,
                inv_hessian=state.inv_hessian,
                history=hist,
            )

    message = "maximum iterations exceeded in bfgs"
    logger.warning("%s (maxiters=%d)", message, options.maxiters)
    return OptimizeResult(
        x=None,
        fun=None,
        status=Status.MAX_ITER,
        success=False,
        message=message,
        nit=nit,
        nfev=state.nfev,
        njev=state.njev,
        history=hist,
    )


__all__ = ["BFGSState", "bfgs", "bfgs_init", "bfgs_step", "iterate_bfgs"]
