"""
Data structures for stable_epw.

All types are NamedTuples: immutable records built once and read afterwards.
"""

from typing import Any, Callable, NamedTuple

from jax import Array


class QuadratureResult(NamedTuple):
    """Result of an adaptive quadrature call."""

    value: float | complex
    error: float  # Relative change between the last two estimates
    n_nodes: int


class Support(NamedTuple):
    """Interval outside of which a function is below a threshold."""

    left: float
    right: float


class Node(NamedTuple):
    """Evanescent plane wave parameters."""

    zeta: float  # Evanescence parameter
    phi: float  # Propagation angle in [0, 2pi)


class QuadratureConfig(NamedTuple):
    """Immutable adaptive quadrature configuration."""

    tol: float = 1e-12
    nodes_min: int = 10
    nodes_step: int = 1
    nodes_max: int = 1000
    support_step: float = 1e-3
    support_max_steps: int = 1_000_000


class KernelConfig(NamedTuple):
    """Immutable configuration for the Herglotz normalization constants."""

    support_eps: float = 1e-14
    accuracy_tol: float = 1e-8
    quadrature: QuadratureConfig = QuadratureConfig()


class SamplerConfig(NamedTuple):
    """Immutable configuration for the CDF construction and its inversion."""

    # Chunk thresholds, relative to the density at zero
    cdf_thresholds: tuple[float, ...] = (1e-12, 1e-9, 1e-6, 1e-3, 1.0)
    symmetry_tol: float = 1e-12
    mass_tol: float = 1e-8
    support_eps: float = 1e-12
    secant_xtol: float = 1e-12
    secant_maxiter: int = 50
    residual_tol: float = 1e-10
    quadrature: QuadratureConfig = QuadratureConfig()


class DirichletResult(NamedTuple):
    """Result from a Dirichlet sampling reconstruction, includes diagnostics."""

    target: Callable[[Any, Any], Any]
    coefficients: Array
    approximation: Callable[[Any, Any], Any]
    residual: float  # ||A xi - b|| / ||b||
    stability: float  # ||xi|| / ||U||
    pseudo_inverse: Any

    def error(self, r, theta):
        """Pointwise error of the reconstruction."""
        return self.approximation(r, theta) - self.target(r, theta)


class SampleSet(NamedTuple):
    """Sampling nodes and their importance weights, stored column-wise."""

    zeta: Any  # (M,) evanescence parameters
    phi: Any  # (M,) angles
    weights: Any  # (M,) non-negative weights

    @property
    def nodes(self) -> list[Node]:
        return [Node(float(z), float(p)) for z, p in zip(self.zeta, self.phi)]

    @property
    def size(self) -> int:
        return len(self.weights)
