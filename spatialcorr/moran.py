"""
Global Moran's I.

    I = (n / S0) * sum_i sum_j w(i, j) z_i z_j / sum_i z_i ** 2

with ``z = x - mean(x)``. The double sum only visits the stored (non-zero)
weights, so the cost is proportional to the number of neighbor pairs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

import numba
import numpy as np
import scipy.stats

from spatialcorr.errors import DegenerateAttributeError
from spatialcorr.logging import logger
from spatialcorr.regions import align_values, require_regions
from spatialcorr.weights import SpatialWeights


class Alternative(Enum):
    """Direction of the significance test."""

    GREATER = "greater"
    """Positive spatial autocorrelation: similar values cluster."""
    LESS = "less"
    """Negative spatial autocorrelation: dissimilar values are neighbors."""
    TWO_SIDED = "two-sided"
    """Either direction."""


@numba.njit(nogil=True)
def _cross_product(indptr, indices, data, z):
    """sum_i sum_j w(i, j) z_i z_j over the CSR arrays of w."""
    total = 0.0
    for i in range(z.size):
        lag = 0.0
        for k in range(indptr[i], indptr[i + 1]):
            lag += data[k] * z[indices[k]]
        total += z[i] * lag
    return total


@numba.njit(nogil=True)
def _permuted_cross_product(indptr, indices, data, z, order):
    """
    Cross product of the permuted deviations: region ``k`` takes the value
    ``z[order[k]]``. No permuted copy of ``z`` is made.
    """
    total = 0.0
    for i in range(z.size):
        lag = 0.0
        for k in range(indptr[i], indptr[i + 1]):
            lag += data[k] * z[order[indices[k]]]
        total += z[order[i]] * lag
    return total


def _deviations(values, weights: SpatialWeights) -> np.ndarray:
    """
    Validate the attribute against the weights and return its deviations from
    the mean.

    Moran's I does not depend on the scale of the attribute. The values are
    scaled by a power of two so that the largest magnitude lies in [0.5, 1);
    this is exact, and keeps the sum of squares away from overflow and
    underflow.
    """
    x = align_values(values, weights.n)
    require_regions(x.size)
    # Compare values rather than the sum of squares: rounding in the mean
    # leaves tiny non-zero deviations for a constant attribute.
    if (x == x[0]).all():
        raise DegenerateAttributeError(
            f"attribute is constant (all values equal {x[0]}): Moran's I is undefined"
        )
    if weights.s0 == 0.0:
        raise DegenerateAttributeError(
            "weights contain no neighbor pairs (S0 = 0): Moran's I is undefined"
        )
    _, exponent = np.frexp(np.abs(x).max())
    x = np.ldexp(x, -exponent)
    z = x - x.mean()
    sum_of_squares = np.sum(z * z)
    if not np.isfinite(sum_of_squares) or sum_of_squares == 0.0:
        raise DegenerateAttributeError(
            f"attribute variance is not representable (sum of squares = {sum_of_squares}): "
            "Moran's I is undefined"
        )
    return z


def moran_i(values, weights: SpatialWeights) -> float:
    """
    Compute global Moran's I of ``values`` under ``weights``.

    The result is not clamped; with some weight configurations values
    slightly outside [-1, 1] are valid. Neither input is modified.

    Parameters
    ----------
    values: array-like of float, length n
        Attribute per region, in the region order of the weights.
    weights: SpatialWeights

    Returns
    -------
    float

    Raises
    ------
    MisalignedInputError
        If the number of values differs from the number of regions.
    InsufficientRegionsError
        If there are fewer than two regions.
    DegenerateAttributeError
        If the attribute is constant, or the weights are all zero.

    Examples
    --------
    >>> graph = spatialcorr.lattice_graph(3, 3, "rook")
    >>> weights = spatialcorr.SpatialWeights.from_graph(graph)
    >>> spatialcorr.moran_i([1, 1, 1, 1, 9, 1, 1, 1, 1], weights)
    -0.25
    """
    z = _deviations(values, weights)
    indptr, indices, data = weights.csr_arrays
    statistic = (z.size / weights.s0) * _cross_product(indptr, indices, data, z) / np.sum(z * z)
    logger.debug(f"Moran's I = {statistic}")
    return float(statistic)


def expected_i(n: int) -> float:
    """Expectation of Moran's I under the null hypothesis: -1 / (n - 1)."""
    require_regions(n)
    return -1.0 / (n - 1)


def p_value_from_z(z: float, alternative: Union[Alternative, str]) -> float:
    """Normal approximation p-value of a z-score."""
    alternative = Alternative(alternative)
    if alternative is Alternative.GREATER:
        return float(scipy.stats.norm.sf(z))
    elif alternative is Alternative.LESS:
        return float(scipy.stats.norm.cdf(z))
    else:
        return float(2.0 * scipy.stats.norm.sf(abs(z)))


@dataclass(frozen=True)
class AnalyticalInference:
    """
    Moments of Moran's I under the normality and the randomization
    assumptions, with the resulting z-scores and p-values.

    The randomization variance requires at least four regions; for fewer
    regions ``var_rand``, ``z_rand`` and ``p_rand`` are NaN.
    """

    expected: float
    var_norm: float
    z_norm: float
    p_norm: float
    var_rand: float
    z_rand: float
    p_rand: float


def analytical_inference(
    values,
    weights: SpatialWeights,
    alternative: Union[Alternative, str] = Alternative.GREATER,
) -> AnalyticalInference:
    """
    Analytical significance of Moran's I (Cliff and Ord).

    Parameters
    ----------
    values: array-like of float
    weights: SpatialWeights
    alternative: Alternative or {"greater", "less", "two-sided"}

    Returns
    -------
    AnalyticalInference
    """
    alternative = Alternative(alternative)
    z = _deviations(values, weights)
    statistic = moran_i(values, weights)

    n = z.size
    s0 = weights.s0
    s1 = weights.s1
    s2 = weights.s2
    expected = expected_i(n)

    var_norm = (n * n * s1 - n * s2 + 3.0 * s0 * s0) / ((n * n - 1.0) * s0 * s0)
    var_norm -= expected * expected
    z_norm = (statistic - expected) / np.sqrt(var_norm)

    if n > 3:
        m2 = np.sum(z**2) / n
        m4 = np.sum(z**4) / n
        kurtosis = m4 / (m2 * m2)
        a = n * ((n * n - 3.0 * n + 3.0) * s1 - n * s2 + 3.0 * s0 * s0)
        b = kurtosis * ((n * n - n) * s1 - 2.0 * n * s2 + 6.0 * s0 * s0)
        var_rand = (a - b) / ((n - 1.0) * (n - 2.0) * (n - 3.0) * s0 * s0)
        var_rand -= expected * expected
        z_rand = (statistic - expected) / np.sqrt(var_rand)
        p_rand = p_value_from_z(z_rand, alternative)
    else:
        var_rand = z_rand = p_rand = np.nan

    return AnalyticalInference(
        expected=expected,
        var_norm=float(var_norm),
        z_norm=float(z_norm),
        p_norm=p_value_from_z(z_norm, alternative),
        var_rand=float(var_rand),
        z_rand=float(z_rand),
        p_rand=float(p_rand),
    )
