"""
Reconstruction of Helmholtz solutions in the unit disk from boundary samples.

A target u is sampled at equispaced points of the unit circle, and the
coefficients of a plane wave approximation are found by a regularized
least-squares solve.
"""

import logging
import math

import jax.numpy as jnp
import numpy as np
from jax import Array

from .circular_waves import solution_surrogate
from .plane_waves import (
    ApproximationSet,
    PlaneWaveExpansion,
    evanescent_approximation_set,
    propagative_approximation_set,
)
from .regularized_svd import regularized_pseudo_inverse, solve
from .types import DirichletResult

logger = logging.getLogger(__name__)


def boundary_sampling_nodes(S: int) -> tuple[np.ndarray, np.ndarray]:
    """Sampling nodes (1, 2 pi s / S), s = 0..S-1, as (r, theta) arrays."""
    return np.ones(S), 2.0 * math.pi * np.arange(S) / S


def number_of_boundary_sampling_nodes(M: int, eta: float = 2, P: int = 0) -> int:
    """
    Number of boundary nodes S = max(eta M, 2P+1) for an approximation set
    of dimension M, oversampling ratio eta and maximal target mode P.
    """
    return int(max(eta * M, 2 * P + 1))


def samples_from_nodes(f, r, theta) -> Array:
    """
    Evaluate ``f`` at the nodes (r, theta).

    A function gives a vector, an ``ApproximationSet`` gives the matrix of
    shape (n_nodes, N).
    """
    if isinstance(f, ApproximationSet):
        return f(r, theta)
    return jnp.asarray(f(r, theta))


def dirichlet_sampling(
    k: float,
    U,
    N: int,
    strategy=None,
    eta: float = 2,
    eps: float = 1e-8,
    Q: int | None = None,
    rng: np.random.Generator | int | None = None,
    verbose: bool = False,
) -> DirichletResult:
    """
    Reconstruct a solution surrogate via Dirichlet sampling.

    Parameters
    ----------
    k : float
        Wavenumber.
    U : Array
        Coefficients u_p of the target for p = -P..P, length 2P+1.
    N : int
        Dimension of the approximation set.
    strategy : str, Callable or None
        None for propagative plane waves, otherwise the sampling strategy of
        the evanescent plane waves ('random', 'uniform', 'sobol').
    eta : float
        Oversampling ratio of the boundary nodes.
    eps : float
        Regularization threshold of the SVD.
    Q : int or None
        Kernel truncation for evanescent waves. Defaults to P.
    rng : Generator, int or None
        Random generator or seed for the random strategy.
    verbose : bool
        Show progress bar while sampling.

    Returns
    -------
    DirichletResult
        Target, coefficients, approximation, relative residual, stability
        measure ||xi|| / ||U|| and the pseudo-inverse.
    """
    U = np.asarray(U, dtype=complex)
    target = solution_surrogate(U, k=k)
    P = target.max_mode

    if strategy is None:
        phis = propagative_approximation_set(N, k=k)
    else:
        phis = evanescent_approximation_set(
            N, P if Q is None else Q, strategy, k=k, rng=rng, verbose=verbose
        )

    S = number_of_boundary_sampling_nodes(N, eta=eta, P=P)
    r, theta = boundary_sampling_nodes(S)
    A = samples_from_nodes(phis, r, theta)
    pinv = regularized_pseudo_inverse(A, eps=eps)

    b = samples_from_nodes(target, r, theta)
    xi = solve(pinv, b)

    residual = float(jnp.linalg.norm(A @ xi - b) / jnp.linalg.norm(b))
    stability = float(jnp.linalg.norm(xi) / np.linalg.norm(U))
    logger.debug(
        "Dirichlet sampling k=%g N=%d S=%d: residual %.3e, stability %.3e",
        k,
        phis.size,
        S,
        residual,
        stability,
    )
    return DirichletResult(
        target, xi, PlaneWaveExpansion(phis, xi), residual, stability, pinv
    )
