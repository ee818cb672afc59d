"""
stable_epw: stable approximation of Helmholtz solutions by evanescent plane waves.

Plane wave approximations in the unit disk are reconstructed from boundary
samples through a regularized SVD. Evanescent plane waves are sampled from
the density induced by a truncated reproducing kernel, which keeps the
coefficients bounded.

Usage
-----
>>> import stable_epw
>>>
>>> # Reconstruct b_2 (k=1) with 40 evanescent plane waves
>>> result = stable_epw.dirichlet_sampling(1.0, [0, 0, 0, 0, 1], 40, strategy="sobol")
>>> result.residual, result.stability
>>> result.error(0.5, 0.785)
>>>
>>> # Sampling nodes and weights from a truncated kernel
>>> kernel = stable_epw.build_kernel(2, stable_epw.LogWeight(k=1.0))
>>> sampler = stable_epw.build_sampler(kernel)
>>> samples = stable_epw.sobol_sampling(sampler, 64)
"""

import jax

# Enable float64 for numerical stability (SVD, condition numbers)
jax.config.update("jax_enable_x64", True)

from .circular_waves import (
    CircularWave,
    circular_wave_normalization,
    normalized_circular_wave,
    solution_surrogate,
)
from .dirichlet import (
    boundary_sampling_nodes,
    dirichlet_sampling,
    number_of_boundary_sampling_nodes,
    samples_from_nodes,
)
from .errors import AccuracyWarning, NormalizationError, SupportNotFoundError
from .herglotz import (
    HerglotzPolynomial,
    LogWeight,
    Weight,
    normalization_constant,
    normalized_herglotz,
)
from .kernel import (
    TruncatedKernel,
    build_kernel,
    cumulative_distribution,
    kernel_diagonal,
    probability_density,
    weighted_probability_density,
)
from .plane_waves import (
    ApproximationSet,
    PlaneWave,
    approximation_set,
    evanescent_approximation_set,
    propagative_approximation_set,
)
from .quadrature import find_support, integrate
from .regularized_svd import (
    PseudoInverse,
    condition_number,
    regularized_pseudo_inverse,
    solve,
)
from .sampling import (
    Sampler,
    build_sampler,
    inversion,
    random_sampling,
    sobol_sampling,
    uniform_sampling,
    weight,
)
from .types import (
    DirichletResult,
    KernelConfig,
    Node,
    QuadratureConfig,
    QuadratureResult,
    SampleSet,
    SamplerConfig,
    Support,
)

try:
    from importlib.metadata import version

    __version__ = version("stable_epw")
except Exception:
    __version__ = "unknown"

__all__ = [
    # Quadrature
    "find_support",
    "integrate",
    # Herglotz densities
    "HerglotzPolynomial",
    "LogWeight",
    "Weight",
    "normalization_constant",
    "normalized_herglotz",
    # Kernel and densities
    "TruncatedKernel",
    "build_kernel",
    "kernel_diagonal",
    "probability_density",
    "weighted_probability_density",
    "cumulative_distribution",
    # Sampling
    "Sampler",
    "build_sampler",
    "inversion",
    "weight",
    "random_sampling",
    "uniform_sampling",
    "sobol_sampling",
    # Regularized SVD
    "PseudoInverse",
    "regularized_pseudo_inverse",
    "condition_number",
    "solve",
    # Waves
    "CircularWave",
    "circular_wave_normalization",
    "normalized_circular_wave",
    "solution_surrogate",
    "PlaneWave",
    "ApproximationSet",
    "approximation_set",
    "propagative_approximation_set",
    "evanescent_approximation_set",
    # Dirichlet sampling
    "boundary_sampling_nodes",
    "number_of_boundary_sampling_nodes",
    "samples_from_nodes",
    "dirichlet_sampling",
    # Types
    "DirichletResult",
    "KernelConfig",
    "Node",
    "QuadratureConfig",
    "QuadratureResult",
    "SampleSet",
    "SamplerConfig",
    "Support",
    # Diagnostics
    "AccuracyWarning",
    "NormalizationError",
    "SupportNotFoundError",
]
