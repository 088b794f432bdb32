"""
Example: Optimization and Laplace approximation with probopt

Minimizes the negative log density of a bivariate normal with Nelder-Mead and
recovers its covariance from the curvature of the converged simplex, then
runs BFGS on the reference problems.
"""

import numpy as np

from probopt import NelderMeadOptions, bfgs, laplace_approximation
from probopt.optimize.problems import BOWL, NR, NR_START, ROSENBROCK


def example_laplace_approximation():
    """Example: Covariance of a Gaussian from the simplex curvature."""
    print("=" * 60)
    print("Example 1: Nelder-Mead + simplex Hessian")
    print("=" * 60)

    mean = np.array([45.1, 10.3])
    cov = np.array([[5.0, 1.0], [1.0, 1.5]])
    prec = np.linalg.inv(cov)
    lndet = np.log(np.linalg.det(cov))

    def neg_log_pdf(x):
        d = x - mean
        return 0.5 * (d @ prec @ d + lndet + 2 * np.log(2 * np.pi))

    result, estimate = laplace_approximation(
        neg_log_pdf, np.array([3.0, 0.5]), NelderMeadOptions(tol=1e-10)
    )
    print(f"Status: {result.status}")
    print(f"Mode: {result.x} (true {mean})")
    print(f"Iterations: {result.nit}, evaluations: {result.nfev}")
    if estimate is not None:
        print(f"Estimated covariance:\n{estimate.inverse}")
        print(f"Standard errors: {estimate.standard_errors}")
    print()


def example_bfgs():
    """Example: BFGS on the reference problems."""
    print("=" * 60)
    print("Example 2: BFGS")
    print("=" * 60)

    starts = {
        "bowl": (BOWL, np.array([-10.0, -10.0])),
        "rosenbrock": (ROSENBROCK, np.array([-10.0, -10.0])),
        "numerical recipes": (NR, NR_START),
    }
    for name, (problem, x0) in starts.items():
        res = bfgs(problem, x0)
        print(f"{name}: {res.message} x = {res.x} after {res.nit} iterations")
    print()


if __name__ == "__main__":
    example_laplace_approximation()
    example_bfgs()
