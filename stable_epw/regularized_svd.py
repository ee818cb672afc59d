"""
Least-squares solves through a regularized (truncated) SVD.

Singular values below a threshold relative to the largest one are treated
as zero, which stabilizes severely ill-conditioned collocation systems.
"""

import logging
from typing import NamedTuple

import jax.numpy as jnp
import numpy as np
from jax import Array

logger = logging.getLogger(__name__)


class PseudoInverse(NamedTuple):
    """Regularized SVD pseudo-inverse of a matrix, read-only once built."""

    matrix: Array  # Original matrix (n_samples, n_functions)
    eps: float  # Relative regularization threshold
    U: Array  # Left singular vectors (n_samples, k)
    singular_values: Array  # All singular values, descending (k,)
    Vh: Array  # Conjugate-transposed right singular vectors (k, n_functions)
    rank: int  # Retained rank
    U_eps: Array  # Retained left singular vectors (n_samples, rank)
    inv_sigma: Array  # Reciprocals of the retained singular values (rank,)
    V_eps: Array  # Retained right singular vectors (n_functions, rank)


def retained_rank(singular_values: Array, eps: float) -> int:
    """
    Number of leading singular values with sigma_i > eps * sigma_1.

    When no singular value falls to or below the threshold the full count is
    retained. A search that stops on the very first value (eps >= 1 or a
    zero matrix) also yields the full count.
    """
    singular_values = np.asarray(singular_values)
    above = singular_values > eps * singular_values[0]
    if above.all():
        return len(singular_values)
    rank = int(np.argmin(above))
    return rank if rank > 0 else len(singular_values)


def regularized_pseudo_inverse(A: Array, eps: float = 1e-8) -> PseudoInverse:
    """
    Factorize a matrix for regularized least-squares solves.

    Parameters
    ----------
    A : Array
        Matrix, shape (n_samples, n_functions). Real or complex.
    eps : float
        A singular value sigma <= eps * sigma_max is approximated by zero.

    Returns
    -------
    PseudoInverse
        Truncated factorization; see ``solve`` and ``condition_number``.
    """
    A = jnp.asarray(A)
    if A.ndim != 2:
        raise ValueError(f"A must be 2D; got ndim={A.ndim}")

    U, S, Vh = jnp.linalg.svd(A, full_matrices=False)
    rank = retained_rank(S, eps)

    U_eps = U[:, :rank]
    inv_sigma = 1.0 / S[:rank]
    V_eps = Vh[:rank, :].conj().T

    logger.debug(
        "pseudo-inverse of %s matrix: rank %d of %d, cond %.3e",
        A.shape,
        rank,
        S.shape[0],
        float(S[0] / S[-1]),
    )
    return PseudoInverse(A, eps, U, S, Vh, rank, U_eps, inv_sigma, V_eps)


def condition_number(pinv: PseudoInverse) -> float:
    """
    Condition number sigma_max / sigma_min of the original matrix.

    Independent of the regularization.
    """
    return float(pinv.singular_values[0] / pinv.singular_values[-1])


def solve(pinv: PseudoInverse, b: Array) -> Array:
    """
    Solve A x = b in the least-squares sense through the regularized SVD.

    x = V_eps (Sigma_eps^-1 (U_eps^H b))

    Parameters
    ----------
    pinv : PseudoInverse
        Factorization from ``regularized_pseudo_inverse``.
    b : Array
        Right-hand side, shape (n_samples,) or (n_samples, n_rhs).

    Returns
    -------
    Array
        Coefficients, shape (n_functions,) or (n_functions, n_rhs).
    """
    b = jnp.asarray(b)
    n_samples = pinv.matrix.shape[0]
    if b.ndim not in (1, 2) or b.shape[0] != n_samples:
        raise ValueError(f"b has shape {b.shape}, expected ({n_samples},) or ({n_samples}, n_rhs)")

    projected = pinv.U_eps.conj().T @ b
    inv_sigma = pinv.inv_sigma if b.ndim == 1 else pinv.inv_sigma[:, None]
    return pinv.V_eps @ (inv_sigma * projected)
