"""
Herglotz polynomials and their weighted normalization.

The Herglotz polynomials are the exponentials

    a~_p(zeta, phi) = exp(p (zeta + i phi)),   p in Z,

defined on the complex strip, zeta being the evanescence parameter and phi
the direction of propagation. They are normalized in L2 of the strip with
respect to the weight

    w(zeta) = exp(z |zeta| - k sinh|zeta|).
"""

import logging
import math
import warnings
from typing import Callable, NamedTuple

import numpy as np

from .errors import AccuracyWarning, NormalizationError
from .quadrature import find_support_with_config, integrate_with_config
from .types import KernelConfig

logger = logging.getLogger(__name__)


class LogWeight(NamedTuple):
    """Logarithm of the weight function, zeta -> z|zeta| - k sinh|zeta|."""

    k: float = 1.0
    z: float = 0.25

    def __call__(self, zeta):
        zeta = np.abs(zeta)
        return self.z * zeta - self.k * np.sinh(zeta)


class Weight(NamedTuple):
    """Weight function, zeta -> exp(z|zeta| - k sinh|zeta|)."""

    k: float = 1.0
    z: float = 0.25

    def __call__(self, zeta):
        return np.exp(LogWeight(self.k, self.z)(zeta))


class HerglotzPolynomial(NamedTuple):
    """Herglotz polynomial of mode p scaled by a normalization constant."""

    mode: int
    alpha: float = 1.0

    def _log_alpha(self):
        # alpha = 0 maps to -inf so the mode drops out instead of giving 0 * inf
        with np.errstate(divide="ignore"):
            return np.log(self.alpha)

    def __call__(self, zeta, phi):
        return np.exp(self._log_alpha() + self.mode * (np.asarray(zeta) + 1j * np.asarray(phi)))

    def log_abs2(self, zeta):
        """log |a_p|^2, independent of the angle. -inf for a vanishing constant."""
        return 2.0 * self._log_alpha() + 2.0 * self.mode * np.asarray(zeta)


def normalization_constant(
    p: int,
    log_weight: Callable,
    config: KernelConfig = KernelConfig(),
) -> float:
    """
    Normalization constant of the Herglotz polynomial of mode p.

    alpha_p^-2 = 2 pi int_R |a~_p|^2 w^2 dzeta, using that the integrand does
    not depend on the angle.

    Parameters
    ----------
    p : int
        Mode number.
    log_weight : Callable
        Logarithm of the weight function. The integrand is assembled in the
        log domain and exponentiated once.
    config : KernelConfig
        Support threshold, accuracy check and quadrature schedule.

    Returns
    -------
    float
        The constant alpha_p.

    Raises
    ------
    NormalizationError
        If both half-line integrals are infinite (p too large).

    A single infinite half-line integral gives alpha = 0 together with an
    ``AccuracyWarning``; the mode then vanishes from any kernel built on it.
    """

    def integrand(zeta):
        return np.abs(np.exp(2.0 * p * zeta + 2.0 * log_weight(zeta)))

    quad = config.quadrature
    support = find_support_with_config(integrand, config.support_eps, quad)
    left = integrate_with_config(integrand, support.left, 0.0, quad)
    right = integrate_with_config(integrand, 0.0, support.right, quad)

    details = (
        f"\n{support.left}<x<0 (val, err, q) = {tuple(left)}"
        f"\n0<x<{support.right} (val, err, q) = {tuple(right)}"
    )
    if not (left.value < math.inf or right.value < math.inf):
        raise NormalizationError(f"p = {p} too large: a_p not integrable:" + details)
    if not left.error + right.error <= config.accuracy_tol:
        warnings.warn(
            f"p = {p}: normalization constant may be inaccurate:" + details,
            AccuracyWarning,
            stacklevel=2,
        )

    alpha = 1.0 / math.sqrt(2.0 * math.pi * (left.value + right.value))
    logger.debug("alpha_%d = %.16e on [%g, %g]", p, alpha, *support)
    return alpha


def normalized_herglotz(
    p: int, log_weight: Callable, config: KernelConfig = KernelConfig()
) -> HerglotzPolynomial:
    """Herglotz polynomial of mode p with its precomputed normalization."""
    return HerglotzPolynomial(p, normalization_constant(p, log_weight, config))
