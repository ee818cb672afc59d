"""End-to-end tests for Dirichlet sampling reconstructions."""

import math

import jax.numpy as jnp
import numpy as np
import pytest

from stable_epw.dirichlet import (
    boundary_sampling_nodes,
    dirichlet_sampling,
    number_of_boundary_sampling_nodes,
    samples_from_nodes,
)
from stable_epw.plane_waves import propagative_approximation_set
from stable_epw.regularized_svd import PseudoInverse
from stable_epw.types import DirichletResult

U = [0, 0, 0, 0, 1]


class TestBoundarySampling:
    """Test boundary nodes and sample evaluation."""

    def test_nodes(self):
        r, theta = boundary_sampling_nodes(4)
        assert np.array_equal(r, np.ones(4))
        assert np.allclose(theta, [0.0, math.pi / 2, math.pi, 3 * math.pi / 2])

    def test_number_of_nodes(self):
        assert number_of_boundary_sampling_nodes(20) == 40
        assert number_of_boundary_sampling_nodes(20, eta=3) == 60
        assert number_of_boundary_sampling_nodes(5, P=25) == 51

    def test_samples_from_function(self):
        r, theta = boundary_sampling_nodes(6)
        b = samples_from_nodes(lambda r, t: r * np.cos(t), r, theta)
        assert b.shape == (6,)
        assert jnp.allclose(b, np.cos(theta))

    def test_samples_from_set(self):
        r, theta = boundary_sampling_nodes(10)
        A = samples_from_nodes(propagative_approximation_set(4), r, theta)
        assert A.shape == (10, 4)


class TestPropagative:
    """Reconstruction with propagative plane waves."""

    def test_reconstruction(self):
        result = dirichlet_sampling(2.0, U, 20)

        assert isinstance(result, DirichletResult)
        assert isinstance(result.pseudo_inverse, PseudoInverse)
        assert result.coefficients.shape == (20,)
        assert result.residual == pytest.approx(0.0, abs=1e-12)
        assert float(abs(result.error(0.5, math.pi / 4))) < 1e-12


class TestEvanescent:
    """Reconstruction with evanescent plane waves."""

    def test_uniform(self):
        result = dirichlet_sampling(1.0, U, 40, strategy="uniform")

        assert result.coefficients.shape == (49,)
        assert result.residual == pytest.approx(0.0, abs=1e-8)
        assert float(abs(result.error(0.5, math.pi / 4))) < 1e-12

    def test_sobol(self):
        result = dirichlet_sampling(1.0, U, 40, strategy="sobol")

        assert result.coefficients.shape == (40,)
        assert result.residual == pytest.approx(0.0, abs=1e-8)
        assert float(abs(result.error(0.5, math.pi / 4))) < 1e-12

    def test_random(self):
        result = dirichlet_sampling(1.0, U, 40, strategy="random", rng=2024)

        assert result.residual == pytest.approx(0.0, abs=1e-7)
        assert float(abs(result.error(0.5, math.pi / 4))) < 1e-11

    def test_stability_measure(self):
        result = dirichlet_sampling(1.0, U, 40, strategy="sobol")
        expected = float(jnp.linalg.norm(result.coefficients))
        assert result.stability == pytest.approx(expected, rel=1e-14)
        assert math.isfinite(result.stability)
