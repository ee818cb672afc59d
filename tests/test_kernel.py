"""Tests for the truncated kernel and its densities."""

import math

import numpy as np
import pytest

from stable_epw.errors import AccuracyWarning
from stable_epw.herglotz import LogWeight
from stable_epw.kernel import (
    ChunkedCDF,
    build_kernel,
    cumulative_distribution,
    kernel_diagonal,
    probability_density,
    weighted_probability_density,
)
from stable_epw.sampling import build_sampler, weight


@pytest.fixture(scope="module")
def cdf(kernel):
    """CDF of the shared kernel."""
    return cumulative_distribution(kernel)


@pytest.fixture(scope="module")
def degenerate_kernel():
    """Kernel whose mode 400 has an overflowing normalization integral."""
    with np.errstate(over="ignore"):
        with pytest.warns(AccuracyWarning):
            return build_kernel((0, 400), LogWeight(k=1.0))


class TestBuildKernel:
    """Test kernel construction."""

    def test_integer_modes(self, kernel):
        assert kernel.modes == (-2, -1, 0, 1, 2)
        assert len(kernel.basis) == 5
        assert [a.mode for a in kernel.basis] == list(kernel.modes)

    def test_explicit_modes(self):
        kernel = build_kernel((0, 3, -1), LogWeight(k=1.0))
        assert kernel.modes == (0, 3, -1)

    def test_symmetric_constants(self, kernel):
        alphas = [a.alpha for a in kernel.basis]
        assert alphas[0] == pytest.approx(alphas[-1], abs=1e-14)
        assert alphas[1] == pytest.approx(alphas[-2], abs=1e-14)

    def test_duplicate_modes(self):
        with pytest.raises(ValueError):
            build_kernel((1, 2, 1), LogWeight())

    def test_empty_modes(self):
        with pytest.raises(ValueError):
            build_kernel((), LogWeight())


class TestKernelEvaluation:
    """Test kernel values, diagonal and densities."""

    def test_hermitian(self, kernel):
        x, y = (0.3, 1.2), (-0.7, 4.0)
        assert kernel(x, y) == pytest.approx(np.conj(kernel(y, x)), abs=1e-14)

    def test_diagonal_matches_kernel(self, kernel):
        y = (0.4, 2.5)
        diag = kernel_diagonal(kernel, *y)
        assert np.isrealobj(diag)
        assert diag > 0
        assert diag == pytest.approx(kernel(y, y).real, rel=1e-14)
        assert abs(kernel(y, y).imag) < 1e-14

    def test_diagonal_angle_independent(self, kernel):
        phis = np.linspace(0.0, 2 * math.pi, 7)
        values = kernel_diagonal(kernel, -0.8, phis)
        assert np.allclose(values, values[0], rtol=1e-13)

    def test_probability_density(self, kernel):
        zeta = np.linspace(-2.0, 2.0, 9)
        assert np.allclose(
            probability_density(kernel, zeta, 0.0), kernel_diagonal(kernel, zeta, 0.0) / 5
        )

    def test_weighted_density(self, kernel):
        """Log-domain evaluation should match the direct product."""
        zeta = np.linspace(-3.0, 3.0, 13)
        direct = probability_density(kernel, zeta, 0.0) * np.exp(2 * kernel.log_weight(zeta))
        assert np.allclose(weighted_probability_density(kernel, zeta), direct, rtol=1e-12)

    def test_weighted_density_far_tail(self, kernel):
        """Far tails should underflow to zero instead of overflowing."""
        with np.errstate(over="raise"):
            assert weighted_probability_density(kernel, 400.0) == 0.0


class TestCumulativeDistribution:
    """Test the chunked CDF."""

    def test_type(self, cdf):
        assert isinstance(cdf, ChunkedCDF)
        assert len(cdf.rules) == len(cdf.breakpoints) - 1
        assert list(cdf.breakpoints) == sorted(cdf.breakpoints)
        assert 0.0 in cdf.breakpoints

    def test_total_mass(self, cdf):
        assert cdf.total_mass == pytest.approx(1.0, abs=1e-8)

    def test_limits(self, cdf):
        assert cdf(cdf.breakpoints[0] - 1.0) == 0.0
        assert cdf(cdf.breakpoints[-1] + 1.0) == pytest.approx(1.0, abs=1e-8)

    def test_half_mass_at_origin(self, cdf):
        """Symmetric modes give an even density."""
        assert cdf(0.0) == pytest.approx(0.5, abs=1e-10)

    def test_monotone(self, cdf):
        zeta = np.linspace(cdf.breakpoints[0], cdf.breakpoints[-1], 101)
        values = np.array([cdf(z) for z in zeta])
        assert np.all(np.diff(values) >= -1e-15)

    def test_derivative_is_density(self, cdf, kernel):
        h = 1e-5
        for zeta in (-1.0, 0.3, 1.7):
            slope = (cdf(zeta + h) - cdf(zeta - h)) / (2 * h)
            expected = 2 * math.pi * weighted_probability_density(kernel, zeta)
            assert slope == pytest.approx(expected, rel=1e-6)

    def test_asymmetric_support_warns(self):
        kernel = build_kernel((0, 3, -1), LogWeight())
        with pytest.warns(AccuracyWarning, match="not symmetric"):
            cdf = cumulative_distribution(kernel)
        assert -cdf.breakpoints[0] != pytest.approx(cdf.breakpoints[-1], abs=1e-3)


class TestVanishingMode:
    """Test kernels holding a mode whose normalization overflowed."""

    def test_zero_constant(self, degenerate_kernel):
        assert degenerate_kernel.basis[1].alpha == 0.0

    def test_mass_warns(self, degenerate_kernel):
        """Only mode 0 carries mass, so the CDF holds half of it."""
        with pytest.warns(AccuracyWarning, match="not normalized"):
            sampler = build_sampler(degenerate_kernel)
        assert sampler.cdf.total_mass == pytest.approx(0.5, abs=1e-8)

        zeta = np.linspace(-3.0, 3.0, 7)
        assert np.all(np.isfinite(weighted_probability_density(degenerate_kernel, zeta)))
        assert math.isfinite(weight(sampler, (3.0, 1.0)))
