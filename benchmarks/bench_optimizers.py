"""Benchmark BFGS and Nelder-Mead on the reference problems."""

import time
from typing import Dict

import numpy as np

from probopt.optimize import NelderMeadOptions, bfgs, nelder_mead
from probopt.optimize.problems import BOWL, NR, NR_START, ROSENBROCK


def benchmark_problem(problem, x0: np.ndarray, n_runs: int = 20) -> Dict[str, float]:
    """Time both optimizers on one problem.

    Args:
        problem: Problem with analytic gradient.
        x0: Start point.
        n_runs: Number of repetitions.

    Returns:
        Dictionary with mean timings and evaluation counts.
    """
    start = time.perf_counter()
    for _ in range(n_runs):
        res_bfgs = bfgs(problem, x0)
    bfgs_time = (time.perf_counter() - start) / n_runs

    start = time.perf_counter()
    for _ in range(n_runs):
        res_nm = nelder_mead(problem, x0, NelderMeadOptions(tol=1e-12))
    nm_time = (time.perf_counter() - start) / n_runs

    return {
        "bfgs_ms": bfgs_time * 1e3,
        "bfgs_nfev": float(res_bfgs.nfev),
        "nelder_mead_ms": nm_time * 1e3,
        "nelder_mead_nfev": float(res_nm.nfev),
    }


def main() -> None:
    problems = {
        "bowl": (BOWL, np.array([-10.0, -10.0])),
        "rosenbrock": (ROSENBROCK, np.array([-1.2, 1.0])),
        "numerical recipes": (NR, NR_START),
    }
    print(f"{'problem':<20} {'bfgs ms':>10} {'nfev':>6} {'nm ms':>10} {'nfev':>6}")
    for name, (problem, x0) in problems.items():
        r = benchmark_problem(problem, x0)
        print(
            f"{name:<20} {r['bfgs_ms']:>10.3f} {r['bfgs_nfev']:>6.0f} "
            f"{r['nelder_mead_ms']:>10.3f} {r['nelder_mead_nfev']:>6.0f}"
        )


if __name__ == "__main__":
    main()
