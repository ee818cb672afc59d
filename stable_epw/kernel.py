"""
Truncated reproducing kernel of the Herglotz densities and the probability
distribution it induces on the evanescence parameter.

For a finite set of modes P, the kernel is

    K(x, y) = sum_{p in P} conj(a_p(x)) a_p(y),

with a_p the normalized Herglotz polynomials. Its diagonal divided by |P| is
a probability density on the complex strip since the a_p are orthonormal.
All the quantities below are independent of the angle phi.
"""

import logging
import math
import warnings
from typing import Callable, NamedTuple, Sequence

import numpy as np
from scipy.special import logsumexp

from .errors import AccuracyWarning
from .herglotz import HerglotzPolynomial, normalized_herglotz
from .quadrature import (
    apply_rule,
    find_support_with_config,
    gauss_legendre,
    integrate_with_config,
)
from .types import KernelConfig, SamplerConfig

logger = logging.getLogger(__name__)


class TruncatedKernel(NamedTuple):
    """Truncated kernel with precomputed normalized Herglotz polynomials."""

    modes: tuple[int, ...]
    log_weight: Callable
    basis: tuple[HerglotzPolynomial, ...]  # a_p for p in modes

    def __call__(self, x, y):
        """Evaluate K(x, y) for x = (zeta_x, phi_x) and y = (zeta_y, phi_y)."""
        return sum(np.conj(a(*x)) * a(*y) for a in self.basis)


def build_kernel(
    modes: int | Sequence[int],
    log_weight: Callable,
    config: KernelConfig = KernelConfig(),
) -> TruncatedKernel:
    """
    Build a truncated kernel, computing each normalization constant once.

    Parameters
    ----------
    modes : int or Sequence[int]
        Either an integer P, meaning the modes -P..P, or an explicit ordered
        set of distinct mode numbers.
    log_weight : Callable
        Logarithm of the weight function, see ``herglotz.LogWeight``.
    config : KernelConfig
        Normalization settings.

    Returns
    -------
    TruncatedKernel
    """
    if isinstance(modes, (int, np.integer)):
        modes = range(-int(modes), int(modes) + 1)
    modes = tuple(int(p) for p in modes)

    if not modes:
        raise ValueError("A truncated kernel needs at least one mode")
    if len(set(modes)) != len(modes):
        raise ValueError(f"Duplicate modes in {modes}")

    basis = tuple(normalized_herglotz(p, log_weight, config) for p in modes)
    return TruncatedKernel(modes, log_weight, basis)


def kernel_diagonal(kernel: TruncatedKernel, zeta, phi):
    """K(y, y) = sum_p |a_p(y)|^2 for y = (zeta, phi), real and non-negative."""
    return sum(np.abs(a(zeta, phi)) ** 2 for a in kernel.basis)


def probability_density(kernel: TruncatedKernel, zeta, phi):
    """Density K(y, y) / |P| with respect to the weighted measure."""
    return kernel_diagonal(kernel, zeta, phi) / len(kernel.modes)


def weighted_probability_density(kernel: TruncatedKernel, zeta, phi=0.0):
    """
    Density K(y, y) w(zeta)^2 / |P| with respect to the Lebesgue measure.

    Evaluated in the log domain. The angle is accepted for symmetry with
    ``probability_density`` but does not enter the value.
    """
    zeta = np.asarray(zeta, dtype=float)
    log_terms = np.stack([a.log_abs2(zeta) for a in kernel.basis])
    log_density = (
        logsumexp(log_terms, axis=0)
        - math.log(len(kernel.modes))
        + 2.0 * kernel.log_weight(zeta)
    )
    return np.exp(log_density)


class KernelDensity(NamedTuple):
    """Weighted density as a function of the evanescence parameter alone."""

    kernel: TruncatedKernel

    def __call__(self, zeta):
        return weighted_probability_density(self.kernel, zeta)


class ChunkedCDF(NamedTuple):
    """
    Cumulative distribution function with per-chunk quadrature rules.

    The real line is split at ``breakpoints``; each chunk keeps the Gauss
    rule that reached the quadrature tolerance at construction time.
    """

    breakpoints: tuple[float, ...]
    rules: tuple[tuple[np.ndarray, np.ndarray], ...]
    density: Callable
    total_mass: float

    def __call__(self, zeta) -> float:
        value = 0.0
        for a, b, (x, w) in zip(self.breakpoints[:-1], self.breakpoints[1:], self.rules):
            if a < zeta:
                # CDF constant w.r.t. phi in [0, 2pi]
                value += 2.0 * math.pi * apply_rule(self.density, a, min(b, zeta), x, w)
        return float(value)


def cdf_breakpoints(
    density: Callable, config: SamplerConfig = SamplerConfig()
) -> tuple[float, ...]:
    """Sorted chunk ends: the origin and the supports at shrinking thresholds."""
    scale = density(0.0)
    points = [0.0]
    for threshold in config.cdf_thresholds:
        points.extend(find_support_with_config(density, scale * threshold, config.quadrature))
    return tuple(sorted(points))


def cumulative_distribution(
    kernel: TruncatedKernel, config: SamplerConfig = SamplerConfig()
) -> ChunkedCDF:
    """
    Cumulative distribution of the evanescence parameter.

    cdf(zeta) = 2 pi int_{-inf}^{zeta} K(t, t) w(t)^2 / |P| dt

    The support is chunked at several thresholds for some h-adaptivity. Each
    chunk is integrated once, and its final quadrature rule is cached for
    later evaluations. Emits an ``AccuracyWarning`` if the support is not
    symmetric or the total mass is not 1.

    Parameters
    ----------
    kernel : TruncatedKernel
        Kernel inducing the density.
    config : SamplerConfig
        Chunk thresholds, sanity check tolerances and quadrature schedule.

    Returns
    -------
    ChunkedCDF
    """
    density = KernelDensity(kernel)
    breakpoints = cdf_breakpoints(density, config)

    total_mass = 0.0
    rules = []
    for a, b in zip(breakpoints[:-1], breakpoints[1:]):
        result = integrate_with_config(density, a, b, config.quadrature)
        total_mass += 2.0 * math.pi * result.value
        rules.append(gauss_legendre(result.n_nodes))

    if abs(breakpoints[0] + breakpoints[-1]) > config.symmetry_tol:
        warnings.warn(
            f"PDF epsilon-support = [{breakpoints[0]}, {breakpoints[-1]}] not symmetric.",
            AccuracyWarning,
            stacklevel=2,
        )
    if abs(total_mass - 1.0) > config.mass_tol:
        warnings.warn(
            f"PDF not normalized: integral of pdf = {total_mass}.",
            AccuracyWarning,
            stacklevel=2,
        )
    logger.debug(
        "CDF on [%g, %g] in %d chunks, total mass %.16f",
        breakpoints[0],
        breakpoints[-1],
        len(rules),
        total_mass,
    )
    return ChunkedCDF(breakpoints, tuple(rules), density, float(total_mass))
