"""Unconstrained minimization: Nelder-Mead, BFGS and simplex curvature.

Example
-------
>>> import numpy as np
>>> from probopt.optimize import Problem, bfgs
>>> def bowl(x):
...     return (x[0] - 3) ** 2 + (x[1] - 4) ** 2
>>> def bowl_grad(x):
...     return np.array([2 * (x[0] - 3), 2 * (x[1] - 4)])
>>> res = bfgs(Problem(fun=bowl, grad=bowl_grad, dim=2), np.array([-10.0, -10.0]))
>>> res.success, [round(float(v), 6) for v in res.x]
(True, [3.0, 4.0])
"""

from .core import (
    BFGSOptions,
    DegenerateUpdateError,
    LineSearchOptions,
    LineSearchRoundoffError,
    NelderMeadOptions,
    NotDescentDirectionError,
    NumericalDegeneracyError,
    OptimizeResult,
    Problem,
    SingularHessianError,
    Status,
)
from .hessian import (
    HessianEstimate,
    hessian_from_simplex,
    laplace_approximation,
    simplex_swings,
)
from .line_search import LineSearchResult, cubic_line_search, max_step
from .quasi_newton import BFGSState, bfgs, bfgs_init, bfgs_step, iterate_bfgs
from .simplex import (
    Simplex,
    Vertex,
    centroid,
    gen_initial,
    iterate_simplex,
    nelder_mead,
    nm_step,
)
from .utils import approx_grad, invert_curvature, is_pos_def, max_abs_ratio

__all__ = [
    "BFGSOptions",
    "BFGSState",
    "DegenerateUpdateError",
    "HessianEstimate",
    "LineSearchOptions",
    "LineSearchResult",
    "LineSearchRoundoffError",
    "NelderMeadOptions",
    "NotDescentDirectionError",
    "NumericalDegeneracyError",
    "OptimizeResult",
    "Problem",
    "Simplex",
    "SingularHessianError",
    "Status",
    "Vertex",
    "approx_grad",
    "bfgs",
    "bfgs_init",
    "bfgs_step",
    "centroid",
    "cubic_line_search",
    "gen_initial",
    "hessian_from_simplex",
    "invert_curvature",
    "is_pos_def",
    "iterate_bfgs",
    "iterate_simplex",
    "laplace_approximation",
    "max_abs_ratio",
    "max_step",
    "nelder_mead",
    "nm_step",
    "simplex_swings",
]
