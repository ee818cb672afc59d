"""
Generalized plane waves and approximation sets built from them.

A generalized plane wave in polar coordinates is

    phi(r, theta) = exp(i k d . x),
    d = (cos(phi + i zeta), sin(phi + i zeta)),  x = (r cos theta, r sin theta).

zeta = 0 gives a propagative plane wave, zeta != 0 an evanescent one.
Matrices are assembled with JAX.
"""

import math
from typing import NamedTuple, Sequence

import jax.numpy as jnp
import numpy as np
from jax import Array

from .herglotz import LogWeight
from .kernel import build_kernel
from .sampling import build_sampler, get_strategy
from .types import KernelConfig, SampleSet, SamplerConfig


def _plane_wave(zeta, phi, k, r, theta) -> Array:
    angle = phi + 1j * zeta
    return jnp.exp(1j * k * (r * jnp.cos(theta) * jnp.cos(angle) + r * jnp.sin(theta) * jnp.sin(angle)))


class PlaneWave(NamedTuple):
    """Generalized plane wave with complex angle phi + i zeta, times a weight."""

    zeta: float
    phi: float
    k: float = 1.0
    weight: float = 1.0

    def __call__(self, r, theta):
        r = jnp.asarray(r, dtype=jnp.float64)
        theta = jnp.asarray(theta, dtype=jnp.float64)
        return self.weight * _plane_wave(self.zeta, self.phi, self.k, r, theta)


class ApproximationSet(NamedTuple):
    """Ordered set of weighted plane waves, stored as parameter arrays."""

    zeta: Array  # (N,)
    phi: Array  # (N,)
    weights: Array  # (N,)
    k: float = 1.0

    @property
    def size(self) -> int:
        return int(self.weights.shape[0])

    def waves(self) -> list[PlaneWave]:
        return [
            PlaneWave(float(z), float(p), self.k, float(w))
            for z, p, w in zip(self.zeta, self.phi, self.weights)
        ]

    def __call__(self, r, theta) -> Array:
        """Evaluate every wave at the points (r, theta), shape (n_points, N)."""
        return build_collocation_matrix(self, r, theta)


def build_collocation_matrix(phis: ApproximationSet, r, theta) -> Array:
    """
    Matrix of the approximation set evaluated at points.

    Parameters
    ----------
    phis : ApproximationSet
        Plane waves, N of them.
    r, theta : Array
        Polar coordinates of the points, shape (n_points,).

    Returns
    -------
    Array
        Complex matrix, shape (n_points, N).
    """
    r = jnp.atleast_1d(jnp.asarray(r, dtype=jnp.float64))[:, None]
    theta = jnp.atleast_1d(jnp.asarray(theta, dtype=jnp.float64))[:, None]
    values = _plane_wave(phis.zeta[None, :], phis.phi[None, :], phis.k, r, theta)
    return values * phis.weights[None, :]


class PlaneWaveExpansion(NamedTuple):
    """Approximation (r, theta) -> sum_j xi_j w_j phi_j(r, theta)."""

    phis: ApproximationSet
    coefficients: Array

    def __call__(self, r, theta):
        r, theta = jnp.broadcast_arrays(
            jnp.asarray(r, dtype=jnp.float64), jnp.asarray(theta, dtype=jnp.float64)
        )
        values = build_collocation_matrix(self.phis, r.ravel(), theta.ravel()) @ self.coefficients
        return values.reshape(r.shape)


def approximation_set(zetas, phis, weights, k: float = 1.0) -> ApproximationSet:
    """Approximation set from complex angles (zeta_j, phi_j) and weights w_j."""
    zetas = jnp.asarray(zetas, dtype=jnp.float64)
    phis = jnp.asarray(phis, dtype=jnp.float64)
    weights = jnp.asarray(weights, dtype=jnp.float64)
    if not (zetas.shape == phis.shape == weights.shape) or zetas.ndim != 1:
        raise ValueError(
            f"zetas, phis and weights must be 1D of equal length; got "
            f"{zetas.shape}, {phis.shape}, {weights.shape}"
        )
    return ApproximationSet(zetas, phis, weights, k)


def propagative_approximation_set(N: int, k: float = 1.0) -> ApproximationSet:
    """N propagative plane waves with equispaced angles 2 pi n / N."""
    phis = 2.0 * math.pi * np.arange(N) / N
    return approximation_set(np.zeros(N), phis, np.full(N, 1.0 / math.sqrt(N)), k)


def evanescent_approximation_set(
    N: int,
    modes: int | Sequence[int],
    strategy="sobol",
    k: float = 1.0,
    rng: np.random.Generator | int | None = None,
    kernel_config: KernelConfig = KernelConfig(),
    sampler_config: SamplerConfig = SamplerConfig(),
    verbose: bool = False,
) -> ApproximationSet:
    """
    Evanescent plane waves sampled from a truncated kernel.

    Parameters
    ----------
    N : int
        Requested number of waves. The uniform strategy rounds it up to a
        perfect square.
    modes : int or Sequence[int]
        Kernel truncation Q (modes -Q..Q) or explicit mode numbers.
    strategy : str or Callable
        'random', 'uniform', 'sobol', or a callable with the signature of
        ``sampling.sobol_sampling``.
    k : float
        Wavenumber, also used in the weight function.
    rng : Generator, int or None
        Random generator or seed, used by the random strategy.
    kernel_config, sampler_config
        Numerical settings of the kernel and the sampler.
    verbose : bool
        Show progress bar while inverting the CDF.

    Returns
    -------
    ApproximationSet
        Weights are the sampling weights divided by sqrt(N).
    """
    kernel = build_kernel(modes, LogWeight(k=k), kernel_config)
    sampler = build_sampler(kernel, sampler_config)
    samples: SampleSet = get_strategy(strategy)(sampler, N, rng=rng, verbose=verbose)
    return approximation_set(
        samples.zeta, samples.phi, samples.weights / math.sqrt(N), k
    )
