"""probopt - small unconstrained optimization toolkit.

Nelder-Mead simplex search with finite-difference curvature estimates for
Laplace approximations, and BFGS with a cubic backtracking line search.
"""

__version__ = "0.1.0"

from .logging import configure_logging, get_logger, log_level, set_log_level
from .optimize import (
    BFGSOptions,
    DegenerateUpdateError,
    HessianEstimate,
    LineSearchOptions,
    LineSearchRoundoffError,
    NelderMeadOptions,
    NotDescentDirectionError,
    NumericalDegeneracyError,
    OptimizeResult,
    Problem,
    Simplex,
    SingularHessianError,
    Status,
    bfgs,
    hessian_from_simplex,
    laplace_approximation,
    nelder_mead,
)

__all__ = [
    "BFGSOptions",
    "DegenerateUpdateError",
    "HessianEstimate",
    "LineSearchOptions",
    "LineSearchRoundoffError",
    "NelderMeadOptions",
    "NotDescentDirectionError",
    "NumericalDegeneracyError",
    "OptimizeResult",
    "Problem",
    "Simplex",
    "SingularHessianError",
    "Status",
    "__version__",
    "bfgs",
    "configure_logging",
    "get_logger",
    "hessian_from_simplex",
    "laplace_approximation",
    "log_level",
    "nelder_mead",
    "set_log_level",
]
