"""
Monte Carlo permutation test for Moran's I.

The attribute values are shuffled over the fixed regions many times; the
statistics of the shuffled data form the null distribution against which the
observed statistic is ranked.

Reproducibility
---------------
The seed is turned into a :class:`numpy.random.SeedSequence`. The
permutations are cut into chunks of ``chunk_size``; chunk ``k`` draws from a
generator seeded with the ``k``-th child of that sequence and writes to its
own slice of the output. The chunking depends only on ``permutations`` and
``chunk_size``, so for a given seed the null distribution is identical for
any number of jobs and any completion order.

p-values
--------
Ties count as at least as extreme as the observed value:

* greater: ``(1 + #{I_sim >= I_obs}) / (S + 1)``
* less: ``(1 + #{I_sim <= I_obs}) / (S + 1)``
* two-sided: ``min(1, 2 * min(p_greater, p_less))``

Simulated values within a relative distance of ``1e-12`` of the observed
value are treated as ties, since permutations that are equivalent up to
symmetry sum in a different order.
"""

from dataclasses import dataclass
from typing import List, Tuple, Union

import joblib
import numpy as np

from spatialcorr.errors import RandomSourceError
from spatialcorr.logging import logger
from spatialcorr.logging.logging_decorators import standard_log_decorator
from spatialcorr.moran import Alternative, _deviations, _permuted_cross_product, moran_i
from spatialcorr.weights import SpatialWeights

SeedLike = Union[None, int, np.random.SeedSequence, np.random.Generator]

TIE_TOLERANCE = 1.0e-12


@dataclass(frozen=True)
class PermutationResult:
    """
    Outcome of a permutation test.

    Attributes
    ----------
    observed: float
        Moran's I of the data as given.
    simulations: np.ndarray of float
        Read-only null distribution; entry ``k`` belongs to permutation ``k``.
    p_value: float
        Empirical p-value, see the module documentation.
    alternative: Alternative
    expected: float
        Mean of the null distribution.
    std: float
        Standard deviation of the null distribution.
    z: float
        Pseudo z-score ``(observed - expected) / std``, NaN if ``std`` is 0.
    """

    observed: float
    simulations: np.ndarray
    p_value: float
    alternative: Alternative
    expected: float
    std: float
    z: float

    @property
    def permutations(self) -> int:
        return self.simulations.size


def _child_seeds(seed: SeedLike, n: int) -> list:
    try:
        if isinstance(seed, np.random.Generator):
            return seed.spawn(n)
        if isinstance(seed, np.random.SeedSequence):
            # Spawning advances the counter of a SeedSequence; work on a copy so
            # the same object gives the same children every time.
            seed = np.random.SeedSequence(
                entropy=seed.entropy, spawn_key=seed.spawn_key, pool_size=seed.pool_size
            )
        else:
            seed = np.random.SeedSequence(seed)
        return seed.spawn(n)
    except (TypeError, ValueError, OSError) as e:
        raise RandomSourceError(f"cannot create random source from seed {seed!r}: {e}") from e


def _chunk_bounds(permutations: int, chunk_size: int) -> List[Tuple[int, int]]:
    return [
        (start, min(start + chunk_size, permutations))
        for start in range(0, permutations, chunk_size)
    ]


def _simulate_chunk(z, csr_arrays, scale, seed, size) -> np.ndarray:
    # One permutation at a time, reshuffling a single index buffer: memory
    # stays proportional to the number of regions, whatever the chunk size.
    rng = np.random.default_rng(seed)
    order = np.arange(z.size)
    sum_of_squares = np.sum(z * z)
    out = np.empty(size)
    indptr, indices, data = csr_arrays
    for s in range(size):
        rng.shuffle(order)
        out[s] = scale * _permuted_cross_product(indptr, indices, data, z, order)
    return out / sum_of_squares


def empirical_p_value(
    observed: float,
    simulations: np.ndarray,
    alternative: Union[Alternative, str] = Alternative.GREATER,
) -> float:
    """
    Rank ``observed`` among ``simulations``; see the module documentation for
    the conventions.
    """
    alternative = Alternative(alternative)
    simulations = np.asarray(simulations)
    if simulations.size == 0:
        raise ValueError("simulations must not be empty")
    tolerance = TIE_TOLERANCE * max(1.0, abs(observed))
    denominator = simulations.size + 1.0
    p_greater = (1.0 + np.sum(simulations >= observed - tolerance)) / denominator
    p_less = (1.0 + np.sum(simulations <= observed + tolerance)) / denominator
    if alternative is Alternative.GREATER:
        return float(p_greater)
    elif alternative is Alternative.LESS:
        return float(p_less)
    else:
        return float(min(1.0, 2.0 * min(p_greater, p_less)))


@standard_log_decorator()
def permutation_test(
    values,
    weights: SpatialWeights,
    permutations: int = 9999,
    seed: SeedLike = None,
    alternative: Union[Alternative, str] = Alternative.GREATER,
    n_jobs: int = 1,
    chunk_size: int = 1000,
) -> PermutationResult:
    """
    Monte Carlo significance test of Moran's I.

    Parameters
    ----------
    values: array-like of float
        Attribute per region, in the region order of the weights.
    weights: SpatialWeights
    permutations: int
        Number of random permutations S. 9999 by default.
    seed: int, numpy.random.SeedSequence, numpy.random.Generator or None
        Random source. An int or SeedSequence gives reproducible results; a
        Generator is advanced; None draws fresh entropy from the OS.
    alternative: Alternative or {"greater", "less", "two-sided"}
        Direction of the test, "greater" (positive autocorrelation) by
        default.
    n_jobs: int
        Number of joblib workers (threads). -1 uses all cores. Does not
        affect the result.
    chunk_size: int
        Permutations per independently seeded chunk.

    Returns
    -------
    PermutationResult

    Raises
    ------
    DegenerateAttributeError, InsufficientRegionsError, MisalignedInputError
        As :func:`spatialcorr.moran_i`.
    RandomSourceError
        If the random source cannot be created.

    Examples
    --------
    >>> result = spatialcorr.permutation_test(values, weights, permutations=999, seed=123)
    >>> result.p_value
    """
    alternative = Alternative(alternative)
    if int(permutations) != permutations or permutations < 1:
        raise ValueError(f"permutations must be a positive integer, got {permutations}")
    if int(chunk_size) != chunk_size or chunk_size < 1:
        raise ValueError(f"chunk_size must be a positive integer, got {chunk_size}")
    permutations = int(permutations)
    chunk_size = int(chunk_size)

    observed = moran_i(values, weights)
    z = _deviations(values, weights)
    scale = z.size / weights.s0
    csr_arrays = weights.csr_arrays

    bounds = _chunk_bounds(permutations, chunk_size)
    seeds = _child_seeds(seed, len(bounds))
    logger.info(
        f"Running {permutations} permutations in {len(bounds)} chunks, n_jobs={n_jobs}"
    )

    # The numba kernel releases the GIL, so threads run the chunks in parallel.
    chunks = joblib.Parallel(n_jobs=n_jobs, prefer="threads")(
        joblib.delayed(_simulate_chunk)(z, csr_arrays, scale, child, stop - start)
        for (start, stop), child in zip(bounds, seeds)
    )
    simulations = np.empty(permutations)
    for (start, stop), chunk in zip(bounds, chunks):
        simulations[start:stop] = chunk
    simulations.flags.writeable = False

    expected = float(simulations.mean())
    std = float(simulations.std())
    z_sim = (observed - expected) / std if std > 0.0 else np.nan
    p_value = empirical_p_value(observed, simulations, alternative)
    logger.info(
        f"Moran's I = {observed:.6f}, pseudo p-value ({alternative.value}) = {p_value:.6f}"
    )
    return PermutationResult(
        observed=observed,
        simulations=simulations,
        p_value=p_value,
        alternative=alternative,
        expected=expected,
        std=std,
        z=float(z_sim),
    )
