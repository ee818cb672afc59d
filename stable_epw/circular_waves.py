"""
Circular waves in polar coordinates, the target basis of the approximation.

    b~_p(r, theta) = J_p(k r) exp(i p theta),   p in Z.
"""

import math
from typing import NamedTuple

import numpy as np
from scipy.special import jv


class CircularWave(NamedTuple):
    """Circular wave of mode p and wavenumber k, scaled by beta."""

    mode: int
    k: float = 1.0
    beta: float = 1.0

    def __call__(self, r, theta):
        r = np.asarray(r, dtype=float)
        theta = np.asarray(theta, dtype=float)
        return self.beta * jv(self.mode, self.k * r) * np.exp(1j * self.mode * theta)


def circular_wave_normalization(p: int, k: float = 1.0) -> float:
    """
    Normalization constant of the circular wave of mode p in the k-weighted
    H1 norm, ||b||^2 = ||b||_L2^2 + k^-2 ||grad b||_L2^2.

    With J = J_p(k), Jm = J_{p-1}(k), Jp = J_{p+1}(k):

        ||b~_p||_L2^2 = pi (J^2 - Jm Jp)
        ||b~_p||_H1^2 = 2 ||b~_p||_L2^2 + (pi / k) (Jm - Jp) J
    """
    j = jv(p, k)
    j_minus = jv(p - 1, k)
    j_plus = jv(p + 1, k)
    l2_norm2 = math.pi * (j**2 - j_minus * j_plus)
    h1_norm2 = 2.0 * l2_norm2 + (math.pi / k) * (j_minus - j_plus) * j
    return 1.0 / math.sqrt(h1_norm2)


def normalized_circular_wave(p: int, k: float = 1.0) -> CircularWave:
    """Circular wave b_p = beta_p b~_p with its precomputed normalization."""
    return CircularWave(p, k, circular_wave_normalization(p, k))


class SolutionSurrogate(NamedTuple):
    """Finite expansion sum_{|p| <= P} u_p b_p in normalized circular waves."""

    coefficients: np.ndarray  # (2P+1,) coefficients for p = -P..P
    waves: tuple[CircularWave, ...]

    @property
    def max_mode(self) -> int:
        return (len(self.waves) - 1) // 2

    def __call__(self, r, theta):
        return sum(u * b(r, theta) for u, b in zip(self.coefficients, self.waves))


def solution_surrogate(U, k: float = 1.0) -> SolutionSurrogate:
    """
    Solution surrogate defined by its coefficients ``U`` for p = -P..P.

    Raises ValueError if ``U`` does not have odd length.
    """
    U = np.asarray(U, dtype=complex)
    if U.ndim != 1 or len(U) % 2 != 1:
        raise ValueError(f"U must be a vector of odd length 2P+1; got shape {U.shape}")
    P = (len(U) - 1) // 2
    waves = tuple(normalized_circular_wave(p, k) for p in range(-P, P + 1))
    return SolutionSurrogate(U, waves)
