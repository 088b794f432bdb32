"""Pytest configuration and shared fixtures for probopt tests."""

import os

import numpy as np
import pytest


@pytest.fixture(scope="function")
def rng() -> np.random.Generator:
    """Provide a deterministic numpy RNG for tests.

    Uses seed from TEST_RNG_SEED environment variable (default: 0).
    """
    seed = int(os.environ.get("TEST_RNG_SEED", "0"))
    return np.random.default_rng(seed)


@pytest.fixture(scope="function")
def spd_matrix(rng: np.random.Generator) -> np.ndarray:
    """A well-conditioned symmetric positive-definite 3x3 matrix."""
    m = rng.normal(size=(3, 3))
    return m @ m.T + 3.0 * np.eye(3)
