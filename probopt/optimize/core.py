"""Core interfaces shared across the optimization algorithms."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional

import numpy as np

if TYPE_CHECKING:
    from .simplex import Simplex

Array = np.ndarray
Objective = Callable[[Array], float]
Gradient = Callable[[Array], Array]


class Status(Enum):
    """Exit status of an optimizer run."""

    CONVERGED = "converged"
    MAX_ITER = "max_iter"


class NumericalDegeneracyError(ArithmeticError):
    """A numerical quantity the current step depends on is degenerate."""


class LineSearchRoundoffError(NumericalDegeneracyError):
    """The cubic step model produced a negative discriminant."""


class DegenerateUpdateError(NumericalDegeneracyError):
    """A denominator of the BFGS rank-2 update vanished."""


class SingularHessianError(NumericalDegeneracyError):
    """A finite-difference curvature matrix could not be inverted."""


class NotDescentDirectionError(ValueError):
    """The search direction does not point downhill."""


@dataclass(frozen=True)
class Problem:
    """Container describing an unconstrained minimization problem."""

    fun: Objective
    grad: Optional[Gradient] = None
    dim: Optional[int] = None


@dataclass(frozen=True)
class BFGSOptions:
    """Stopping rules for :func:`probopt.optimize.bfgs`.

    Attributes:
        ptol: Tolerance on the largest relative coordinate of the search
            direction.
        gtol: Tolerance on the largest relative gradient component.
        maxiters: Number of steps after which the run is reported as failed.
    """

    ptol: float = 1.0e-7
    gtol: float = 1.0e-7
    maxiters: int = 200

    def __post_init__(self) -> None:
        if self.ptol <= 0:
            raise ValueError(f"ptol must be positive, got {self.ptol}.")
        if self.gtol <= 0:
            raise ValueError(f"gtol must be positive, got {self.gtol}.")
        if self.maxiters < 0:
            raise ValueError(f"maxiters must be >= 0, got {self.maxiters}.")


@dataclass(frozen=True)
class LineSearchOptions:
    """Parameters of the backtracking line search.

    Attributes:
        xtol: Relative step below which the search gives up and returns the
            starting point.
        alpha: Sufficient-decrease (Armijo) coefficient.
    """

    xtol: float = 1.0e-7
    alpha: float = 1.0e-4

    def __post_init__(self) -> None:
        if self.xtol <= 0:
            raise ValueError(f"xtol must be positive, got {self.xtol}.")
        if not (0 < self.alpha < 1):
            raise ValueError(f"alpha must lie in (0, 1), got {self.alpha}.")


@dataclass(frozen=True)
class NelderMeadOptions:
    """Parameters of the Nelder-Mead simplex search.

    Attributes:
        step: Relative perturbation used to build the initial simplex.
        tol: The run converges once ``worst - best`` value drops below this.
        max_iters: Number of steps after which the run is reported as failed.
        alpha: Reflection coefficient.
        gamma: Expansion coefficient.
        rho: Contraction coefficient.
        sigma: Shrink coefficient. ``None`` shrinks with ``rho``.
    """

    step: float = 0.1
    tol: float = 1.0e-8
    max_iters: int = 5000
    alpha: float = 1.0
    gamma: float = 2.0
    rho: float = 0.5
    sigma: Optional[float] = None

    def __post_init__(self) -> None:
        if self.step == 0:
            raise ValueError("step must be non-zero.")
        if self.tol <= 0:
            raise ValueError(f"tol must be positive, got {self.tol}.")
        if self.max_iters < 0:
            raise ValueError(f"max_iters must be >= 0, got {self.max_iters}.")
        if self.alpha <= 0:
            raise ValueError(f"alpha must be positive, got {self.alpha}.")
        if self.gamma <= self.alpha:
            raise ValueError(
                f"gamma ({self.gamma}) must exceed alpha ({self.alpha})."
            )
        if not (0 < self.rho < 1):
            raise ValueError(f"rho must lie in (0, 1), got {self.rho}.")
        if self.sigma is not None and not (0 < self.sigma < 1):
            raise ValueError(f"sigma must lie in (0, 1), got {self.sigma}.")

    @property
    def shrink(self) -> float:
        """Coefficient actually used by the shrink transformation."""
        return self.rho if self.sigma is None else self.sigma


@dataclass
class OptimizeResult:
    """
    Result object returned by all optimizers in this module.

    Attributes:
        x: Optimized point, or ``None`` when BFGS failed.
        fun: Objective value at ``x``.
        status: Enumeration describing the solver exit.
        success: ``True`` iff ``status`` is :attr:`Status.CONVERGED`.
        message: Human-readable explanation of the status.
        nit: Number of steps performed.
        nfev: Number of objective evaluations.
        njev: Number of gradient evaluations.
        grad: Gradient at ``x`` (BFGS only).
        inv_hessian: Final inverse-Hessian approximation (BFGS only).
        simplex: Final simplex (Nelder-Mead only, also on failure).
        history: Visited points when requested.
    """

    x: Optional[Array]
    fun: Optional[float]
    status: Status
    success: bool
    message: str
    nit: int
    nfev: int = 0
    njev: int = 0
    grad: Optional[Array] = None
    inv_hessian: Optional[Array] = None
    simplex: Optional["Simplex"] = None
    history: List[Array] = field(default_factory=list)


def as_point(x0: Array, dim: Optional[int] = None) -> Array:
    """Validate a start point and return it as a fresh float vector."""
    x = np.array(x0, dtype=float)
    if x.ndim != 1:
        raise ValueError(f"start point must be a 1-D vector, got shape {x.shape}.")
    if x.size == 0:
        raise ValueError("start point must have at least one coordinate.")
    if dim is not None and x.size != dim:
        raise ValueError(
            f"start point has dimension {x.size}, problem expects {dim}."
        )
    return x


__all__ = [
    "Array",
    "BFGSOptions",
    "DegenerateUpdateError",
    "Gradient",
    "LineSearchOptions",
    "LineSearchRoundoffError",
    "NelderMeadOptions",
    "NotDescentDirectionError",
    "NumericalDegeneracyError",
    "Objective",
    "OptimizeResult",
    "Problem",
    "SingularHessianError",
    "Status",
    "as_point",
]
