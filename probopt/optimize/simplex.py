"""Nelder-Mead downhill simplex minimization.

A simplex of ``n + 1`` vertices is kept sorted by objective value, best
first. Each step replaces the worst vertex by its reflection, expansion or
contraction through the centroid of the others, or shrinks the whole simplex
towards the best vertex.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, NamedTuple, Optional, Sequence, Union

import numpy as np

from ..logging import get_logger
from .core import (
    Array,
    NelderMeadOptions,
    NumericalDegeneracyError,
    Objective,
    OptimizeResult,
    Problem,
    Status,
    as_point,
)
from .utils import frozen_array

logger = get_logger(__name__)


class Vertex(NamedTuple):
    """A simplex vertex and its objective value."""

    point: Array
    value: float


def evaluate(fun: Objective, point: Array) -> Vertex:
    """Pair ``point`` with ``fun(point)``.

    Infinite values are kept, they still order the simplex. A NaN value
    would not, so it is rejected.
    """
    point = frozen_array(point)
    value = float(fun(point))
    if np.isnan(value):
        raise NumericalDegeneracyError(f"objective returned NaN at {point}")
    return Vertex(point, value)


@dataclass(frozen=True)
class Simplex:
    """An immutable set of ``n + 1`` vertices in ``n`` dimensions."""

    vertices: tuple[Vertex, ...]

    def __post_init__(self) -> None:
        if len(self.vertices) < 2:
            raise ValueError(
                f"a simplex needs at least 2 vertices, got {len(self.vertices)}"
            )
        n = len(self.vertices) - 1
        for vertex in self.vertices:
            if vertex.point.shape != (n,):
                raise ValueError(
                    f"{len(self.vertices)} vertices need points of dimension {n}, "
                    f"got shape {vertex.point.shape}"
                )

    def __len__(self) -> int:
        return len(self.vertices)

    def __iter__(self) -> Iterator[Vertex]:
        return iter(self.vertices)

    @property
    def dim(self) -> int:
        return len(self.vertices) - 1

    @property
    def points(self) -> Array:
        """Vertex coordinates as an ``(n + 1, n)`` array."""
        return np.array([v.point for v in self.vertices])

    @property
    def values(self) -> Array:
        return np.array([v.value for v in self.vertices])

    @property
    def best(self) -> Vertex:
        return self.vertices[0]

    @property
    def worst(self) -> Vertex:
        return self.vertices[-1]

    @property
    def second_worst(self) -> Vertex:
        return self.vertices[-2]

    @property
    def spread(self) -> float:
        """``worst - best`` objective value (meaningful once sorted)."""
        return self.worst.value - self.best.value

    def sorted(self) -> "Simplex":
        """Return the simplex ordered by ascending value (stable)."""
        return Simplex(tuple(sorted(self.vertices, key=lambda v: v.value)))

    def replace_worst(self, vertex: Vertex) -> "Simplex":
        return Simplex(self.vertices[:-1] + (vertex,))


def centroid(points: Sequence[Array]) -> Array:
    """Coordinate-wise mean of ``points``."""
    if len(points) == 0:
        raise ValueError("centroid of an empty set of points")
    return np.mean(np.asarray(points, dtype=float), axis=0)


def gen_initial(fun: Objective, step: float, x0: Array) -> Simplex:
    """Build the initial simplex around ``x0``.

    Vertex ``d + 1`` moves coordinate ``d`` of ``x0`` by ``step * x0[d]``, so
    the perturbation is relative to the coordinate's own magnitude. A zero
    coordinate yields a vertex equal to ``x0`` and a degenerate simplex.
    """
    x0 = as_point(x0)
    zero = np.flatnonzero(x0 == 0.0)
    if zero.size:
        logger.warning(
            "zero coordinates %s give a degenerate initial simplex", zero.tolist()
        )
    vertices = [evaluate(fun, x0)]
    for d in range(x0.size):
        unit = np.zeros_like(x0)
        unit[d] = step * x0[d]
        vertices.append(evaluate(fun, x0 + unit))
    return Simplex(tuple(vertices))


def nm_step(
    fun: Objective, simplex: Simplex, options: Optional[NelderMeadOptions] = None
) -> Simplex:
    """Apply one reflect/expand/contract/shrink transformation.

    ``simplex`` must be sorted ascending by value; the returned simplex is
    sorted as well.
    """
    options = options or NelderMeadOptions()
    x0 = centroid([v.point for v in simplex.vertices[:-1]])
    worst = simplex.worst
    f_best = simplex.best.value

    reflected = evaluate(fun, x0 + options.alpha * (x0 - worst.point))
    if f_best <= reflected.value <= simplex.second_worst.value:
        return simplex.replace_worst(reflected).sorted()

    if not reflected.value > f_best:
        expanded = evaluate(fun, x0 + options.gamma * (x0 - worst.point))
        if expanded.value < reflected.value:
            return simplex.replace_worst(expanded).sorted()
        return simplex.replace_worst(reflected).sorted()

    contracted = evaluate(fun, worst.point + options.rho * (x0 - worst.point))
    if contracted.value < worst.value:
        return simplex.replace_worst(contracted).sorted()

    best = simplex.best
    shrunk = [best] + [
        evaluate(fun, best.point + options.shrink * (v.point - best.point))
        for v in simplex.vertices[1:]
    ]
    return Simplex(tuple(shrunk)).sorted()


def iterate_simplex(
    fun: Objective, simplex: Simplex, options: Optional[NelderMeadOptions] = None
) -> Iterator[Simplex]:
    """Yield the sorted simplex, then the result of every further step."""
    simplex = simplex.sorted()
    while True:
        yield simplex
        simplex = nm_step(fun, simplex, options)


def nelder_mead(
    problem: Union[Problem, Objective],
    x0: Array,
    options: Optional[NelderMeadOptions] = None,
) -> OptimizeResult:
    """Minimize an objective with the Nelder-Mead simplex method.

    Args:
        problem: A :class:`Problem` (its gradient is ignored) or a bare
            objective function.
        x0: Seed point of the initial simplex; avoid zero coordinates.
        options: Initial step, spread tolerance, iteration ceiling and
            transformation coefficients.

    Returns:
        The best vertex and the final simplex. Once the spread of the sorted
        simplex drops below ``options.tol`` one further step is taken and its
        result returned, so the final spread is not bounded by ``tol``. When
        the spread stays above ``options.tol`` for ``options.max_iters``
        steps the result reports failure but still carries the last simplex.
    """
    options = options or NelderMeadOptions()
    if isinstance(problem, Problem):
        fun, dim = problem.fun, problem.dim
    else:
        fun, dim = problem, None

    nfev = 0

    def counted(x: Array) -> float:
        nonlocal nfev
        nfev += 1
        return fun(x)

    initial = gen_initial(counted, options.step, as_point(x0, dim))
    nit = 0
    for simplex in iterate_simplex(counted, initial, options):
        if simplex.spread < options.tol:
            # one more step past the simplex that met the tolerance
            final = nm_step(counted, simplex, options)
            nit += 1
            logger.info(
                "nelder_mead converged after %d iterations (f=%.10g)",
                nit,
                final.best.value,
            )
            return _result(final, Status.CONVERGED, "Converged.", nit, nfev)
        if nit >= options.max_iters:
            break
        logger.debug(
            "nelder_mead iteration %d: best f=%.10g spread=%.3g",
            nit,
            simplex.best.value,
            simplex.spread,
        )
        nit += 1

    message = "maximum iterations exceeded in nelder_mead"
    logger.warning("%s (max_iters=%d)", message, options.max_iters)
    return _result(simplex, Status.MAX_ITER, message, nit, nfev)


def _result(
    simplex: Simplex, status: Status, message: str, nit: int, nfev: int
) -> OptimizeResult:
    return OptimizeResult(
        x=simplex.best.point,
        fun=simplex.best.value,
        status=status,
        success=status is Status.CONVERGED,
        message=message,
        nit=nit,
        nfev=nfev,
        simplex=simplex,
    )


__all__ = [
    "Simplex",
    "Vertex",
    "centroid",
    "evaluate",
    "gen_initial",
    "iterate_simplex",
    "nelder_mead",
    "nm_step",
]
