"""Pytest configuration and shared fixtures."""

import jax
import pytest

# Ensure float64 is enabled for all tests
jax.config.update("jax_enable_x64", True)

from stable_epw.herglotz import LogWeight
from stable_epw.kernel import build_kernel
from stable_epw.sampling import build_sampler


@pytest.fixture(scope="session")
def kernel():
    """Truncated kernel with modes -2..2 for k=1."""
    return build_kernel(2, LogWeight(k=1.0))


@pytest.fixture(scope="session")
def sampler(kernel):
    """Sampler built on the shared kernel."""
    return build_sampler(kernel)
