"""
Sampling of evanescent plane wave parameters.

The nodes (zeta, phi) are drawn according to the density induced by a
truncated kernel, using inversion transform sampling for zeta. The angle
phi is uniformly distributed since the density does not depend on it.
"""

import logging
import math
import warnings
from enum import Enum
from typing import Callable, NamedTuple

import numpy as np
from scipy.optimize import root_scalar
from scipy.stats import qmc
from tqdm import tqdm

from .kernel import (
    ChunkedCDF,
    KernelDensity,
    TruncatedKernel,
    cumulative_distribution,
    probability_density,
)
from .quadrature import find_support_with_config
from .types import Node, SampleSet, SamplerConfig, Support

logger = logging.getLogger(__name__)


class Sampler(NamedTuple):
    """Distribution induced by a truncated kernel, ready to be sampled."""

    kernel: TruncatedKernel
    density: KernelDensity  # Weighted density of zeta
    cdf: ChunkedCDF
    support: Support
    config: SamplerConfig = SamplerConfig()


class InversionResult(NamedTuple):
    """Tagged outcome of a root-finding attempt on the CDF."""

    root: float
    converged: bool
    reason: str = ""


class SamplingStrategy(str, Enum):
    """Node placement strategies."""

    RANDOM = "random"
    UNIFORM = "uniform"
    SOBOL = "sobol"


def build_sampler(kernel: TruncatedKernel, config: SamplerConfig = SamplerConfig()) -> Sampler:
    """
    Precompute the density, CDF and support needed to sample from a kernel.

    Parameters
    ----------
    kernel : TruncatedKernel
        Kernel inducing the sampling density.
    config : SamplerConfig
        CDF construction and inversion settings.

    Returns
    -------
    Sampler
    """
    density = KernelDensity(kernel)
    cdf = cumulative_distribution(kernel, config)
    support = find_support_with_config(
        density, density(0.0) * config.support_eps, config.quadrature
    )
    return Sampler(kernel, density, cdf, support, config)


def secant_inversion(sampler: Sampler, u: float) -> InversionResult:
    """
    Solve cdf(zeta) = u with the secant method started at zero.

    The second starting point is a Newton step from zero, using that the
    derivative of the CDF is the density. The result is flagged as not
    converged unless the secant iteration converged to a finite root whose
    residual is below ``residual_tol``.
    """
    config = sampler.config

    def objective(zeta):
        return sampler.cdf(zeta) - u

    x0 = 0.0
    f0 = objective(x0)
    if f0 == 0.0:
        return InversionResult(x0, True, "exact")

    slope = 2.0 * math.pi * float(sampler.density(x0))
    x1 = x0 - f0 / slope
    if not math.isfinite(x1) or x1 == x0:
        return InversionResult(x0, False, "degenerate starting points")

    # Flat CDF tails trigger scipy's "tolerance reached" warning; the
    # residual check below covers that case.
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        sol = root_scalar(
            objective,
            x0=x0,
            x1=x1,
            method="secant",
            xtol=config.secant_xtol,
            maxiter=config.secant_maxiter,
        )

    root = float(sol.root)
    if not sol.converged:
        return InversionResult(root, False, str(sol.flag))
    if not math.isfinite(root):
        return InversionResult(root, False, "non-finite root")
    residual = abs(objective(root))
    if residual > config.residual_tol:
        return InversionResult(root, False, f"residual {residual:.3e}")
    return InversionResult(root, True, str(sol.flag))


def bracketed_inversion(sampler: Sampler, u: float) -> float:
    """Solve cdf(zeta) = u with Brent's method on the stored support."""
    sol = root_scalar(
        lambda zeta: sampler.cdf(zeta) - u,
        bracket=(sampler.support.left, sampler.support.right),
        method="brentq",
    )
    return float(sol.root)


def inversion(sampler: Sampler, u: float) -> float:
    """
    Pre-image of ``u`` under the CDF, for inversion transform sampling.

    Tries the secant method first and falls back to the slower but robust
    bracketing method when it does not converge.
    """
    if not 0.0 < u < 1.0:
        raise ValueError(f"u = {u} must lie in (0, 1)")

    result = secant_inversion(sampler, u)
    if result.converged:
        return result.root

    logger.debug("secant failed for u = %r (%s); using brentq", u, result.reason)
    return bracketed_inversion(sampler, u)


def weight(sampler: Sampler, node) -> float:
    """
    Importance weight of a node y = (zeta, phi).

    w(y) = sqrt(|P| / sum_p |a_p(y)|^2)
    """
    zeta, phi = node
    return 1.0 / np.sqrt(probability_density(sampler.kernel, zeta, phi))


def _invert_all(sampler: Sampler, us, verbose: bool) -> np.ndarray:
    iterator = tqdm(us, desc="Inverting CDF") if verbose else us
    return np.array([inversion(sampler, float(u)) for u in iterator])


def _sample_set(sampler: Sampler, zetas, phis) -> SampleSet:
    zetas = np.asarray(zetas, dtype=float)
    phis = np.asarray(phis, dtype=float)
    weights = weight(sampler, (zetas, phis))
    return SampleSet(zetas, phis, np.asarray(weights, dtype=float))


def random_sampling(
    sampler: Sampler,
    M: int,
    rng: np.random.Generator | int | None = None,
    verbose: bool = False,
) -> SampleSet:
    """
    Draw ``M`` random samples according to the distribution of the sampler.

    Parameters
    ----------
    sampler : Sampler
        Distribution to sample from.
    M : int
        Number of nodes.
    rng : Generator, int or None
        Random generator or seed.
    verbose : bool
        Show progress bar.

    Returns
    -------
    SampleSet
    """
    rng = np.random.default_rng(rng)
    us = rng.random(M)
    phis = 2.0 * math.pi * rng.random(M)
    return _sample_set(sampler, _invert_all(sampler, us, verbose), phis)


def random_node(sampler: Sampler, rng: np.random.Generator | int | None = None) -> tuple[Node, float]:
    """Draw a single random node and its weight."""
    samples = random_sampling(sampler, 1, rng=rng)
    return samples.nodes[0], float(samples.weights[0])


def uniform_sampling(sampler: Sampler, M: int, verbose: bool = False, **_) -> SampleSet:
    """
    Deterministic samples on a tensor grid.

    Uses ceil(sqrt(M)) equispaced angles in [0, 2pi) and as many CDF levels
    at the midpoints of a uniform partition of (0, 1), hence returns
    ceil(sqrt(M))^2 >= M nodes. The CDF levels vary fastest.
    """
    Ms = math.ceil(math.sqrt(M))
    phis = 2.0 * math.pi * np.arange(Ms) / Ms
    us = (np.arange(Ms) + 0.5) / Ms
    zetas = _invert_all(sampler, us, verbose)
    return _sample_set(sampler, np.tile(zetas, Ms), np.repeat(phis, Ms))


def sobol_sampling(sampler: Sampler, M: int, verbose: bool = False, **_) -> SampleSet:
    """
    Quasi-random samples from a 2D Sobol sequence on [0, 1] x [0, 2pi].

    The first coordinate is mapped through the inverse CDF, the second is
    the angle. The sequence is unscrambled and skips its first point (the
    origin) so every CDF level lies in (0, 1).
    """
    engine = qmc.Sobol(d=2, scramble=False)
    engine.fast_forward(1)
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message=".*balance properties.*")
        points = engine.random(M)
    points = qmc.scale(points, [0.0, 0.0], [1.0, 2.0 * math.pi])
    zetas = _invert_all(sampler, points[:, 0], verbose)
    return _sample_set(sampler, zetas, points[:, 1])


STRATEGIES: dict[SamplingStrategy, Callable[..., SampleSet]] = {
    SamplingStrategy.RANDOM: random_sampling,
    SamplingStrategy.UNIFORM: uniform_sampling,
    SamplingStrategy.SOBOL: sobol_sampling,
}


def get_strategy(strategy: str | Callable[..., SampleSet]) -> Callable[..., SampleSet]:
    """
    Resolve a strategy name to its sampling function.

    Callables are returned unchanged. Raises ValueError for unknown names.
    """
    if callable(strategy):
        return strategy
    return STRATEGIES[SamplingStrategy(strategy)]
