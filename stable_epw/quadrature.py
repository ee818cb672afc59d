"""
Adaptive Gauss quadrature on finite intervals and epsilon-support detection.

Adaptivity is understood with respect to the number of nodes only: the
interval is never subdivided. Integrands are evaluated with NumPy and must
accept arrays of nodes.
"""

import logging
import math
import warnings
from functools import lru_cache
from typing import Callable

import numpy as np
from numpy.polynomial.legendre import leggauss

from .errors import AccuracyWarning, SupportNotFoundError
from .types import QuadratureConfig, QuadratureResult, Support

logger = logging.getLogger(__name__)

QuadratureRule = Callable[[int], tuple[np.ndarray, np.ndarray]]


@lru_cache(maxsize=256)
def gauss_legendre(n: int) -> tuple[np.ndarray, np.ndarray]:
    """Gauss-Legendre nodes and weights on [-1, 1], cached per node count."""
    nodes, weights = leggauss(n)
    nodes.setflags(write=False)
    weights.setflags(write=False)
    return nodes, weights


def map_to_interval(nodes: np.ndarray, a: float, b: float) -> tuple[np.ndarray, float]:
    """Map reference nodes from [-1, 1] to [a, b]. Returns (mapped_nodes, scale)."""
    scale = (b - a) / 2.0
    shift = (a + b) / 2.0
    return scale * nodes + shift, scale


def apply_rule(
    f: Callable, a: float, b: float, nodes: np.ndarray, weights: np.ndarray
):
    """Contract the integrand at the mapped nodes with the reference weights."""
    x, scale = map_to_interval(nodes, a, b)
    return scale * np.dot(weights, f(x))


def relative_error(value, reference) -> float:
    """
    Relative change |value - reference| / |reference|.

    Identical estimates (both zero included) have zero error, a zero
    reference with a non-zero estimate has infinite error.
    """
    diff = abs(value - reference)
    if diff == 0:
        return 0.0
    if reference == 0:
        return math.inf
    return float(diff / abs(reference))


def _walk(f: Callable, eps: float, step: float, max_steps: int) -> float:
    cursor = 0.0
    for _ in range(max_steps):
        value = abs(f(cursor))
        cursor += step
        # NaN stops the search, same as a value below threshold
        if not value > eps:
            return cursor
    raise SupportNotFoundError(
        f"|f| > {eps} after {max_steps} steps of {step} "
        f"(stopped at {cursor})"
    )


def find_support(
    f: Callable,
    eps: float,
    step: float = 1e-3,
    max_steps: int = 1_000_000,
) -> Support:
    """
    Compute the epsilon-support of a function decaying at both ends of R.

    Walks from the origin outwards in steps of ``step`` until ``|f| <= eps``
    in each direction. Useful to integrate functions on unbounded domains.

    Parameters
    ----------
    f : Callable
        Scalar function of one real variable.
    eps : float
        Threshold below which ``f`` is considered zero.
    step : float
        Step of the outward search.
    max_steps : int
        Maximum number of steps in each direction.

    Returns
    -------
    Support
        (left, right) with left <= 0 <= right. Each bound lies one step past
        the first point where ``|f| <= eps``.

    Raises
    ------
    SupportNotFoundError
        If ``|f|`` stays above ``eps`` for ``max_steps`` steps in a direction.
    """
    left = _walk(f, eps, -step, max_steps)
    right = _walk(f, eps, step, max_steps)
    return Support(left, right)


def integrate(
    f: Callable,
    a: float = -1.0,
    b: float = 1.0,
    rule: QuadratureRule = gauss_legendre,
    tol: float = 1e-12,
    nodes_min: int = 10,
    nodes_step: int = 1,
    nodes_max: int = 1000,
) -> QuadratureResult:
    """
    Integrate ``f`` on [a, b] with a node-adaptive quadrature rule.

    The node count grows from ``nodes_min`` by ``nodes_step`` until two
    successive estimates agree to ``tol`` or ``nodes_max`` is reached.

    Parameters
    ----------
    f : Callable
        Integrand, evaluated on arrays of nodes.
    a, b : float
        Integration bounds.
    rule : Callable
        Maps a node count to reference nodes and weights on [-1, 1].
    tol : float
        Relative tolerance between successive estimates.
    nodes_min, nodes_step, nodes_max : int
        Node count schedule.

    Returns
    -------
    QuadratureResult
        Last estimate, its relative error and the node count used. An
        ``AccuracyWarning`` is emitted if the tolerance was not reached (NaN
        errors included) or the node cap was hit. The loop stops early once
        an estimate overflows.
    """
    n = nodes_min
    value = apply_rule(f, a, b, *rule(n))
    error = math.inf
    while not error <= tol and n < nodes_max:
        n += nodes_step
        reference = apply_rule(f, a, b, *rule(n))
        error = relative_error(value, reference)
        value = reference
        # Overflowed estimates do not recover with more nodes
        if not np.isfinite(value):
            break

    if not error <= tol:
        warnings.warn(
            f"Tolerance not reached on [{a}, {b}]: error = {error}.",
            AccuracyWarning,
            stacklevel=2,
        )
    if n >= nodes_max:
        warnings.warn(
            f"Maximum number {nodes_max} of nodes reached on [{a}, {b}].",
            AccuracyWarning,
            stacklevel=2,
        )
    logger.debug("integrate [%g, %g]: %d nodes, error %.3e", a, b, n, error)
    return QuadratureResult(value, error, n)


def integrate_with_config(
    f: Callable, a: float, b: float, config: QuadratureConfig, tol: float | None = None
) -> QuadratureResult:
    """Run ``integrate`` with the node schedule of a ``QuadratureConfig``."""
    return integrate(
        f,
        a,
        b,
        tol=config.tol if tol is None else tol,
        nodes_min=config.nodes_min,
        nodes_step=config.nodes_step,
        nodes_max=config.nodes_max,
    )


def find_support_with_config(f: Callable, eps: float, config: QuadratureConfig) -> Support:
    """Run ``find_support`` with the step settings of a ``QuadratureConfig``."""
    return find_support(
        f, eps, step=config.support_step, max_steps=config.support_max_steps
    )
