"""
Spatial weights derived from a neighbor graph.

Two weighting styles are supported:

* binary (default): ``w(i, j) = 1`` if ``j`` is a neighbor of ``i``, else 0.
  ``S0`` equals twice the number of neighbor pairs.
* row-standardized: ``w(i, j) = 1 / n_neighbors(i)``, so every row with
  neighbors sums to one. Rows of isolates stay zero. ``S0`` equals the number
  of regions that have neighbors.

The style changes the scale of Moran's I. Binary weights give every
neighbor pair the same influence; row standardization gives every region the
same influence.
"""

from enum import Enum
from typing import Tuple, Union

import numpy as np
import scipy.sparse

from spatialcorr.contiguity import NeighborGraph
from spatialcorr.logging import logger
from spatialcorr.regions import align_values, require_regions


class WeightStyle(Enum):
    BINARY = "binary"
    """Every neighbor gets weight one."""
    ROW = "row"
    """Neighbor weights of a region sum to one."""


class SpatialWeights:
    """
    Sparse, non-negative spatial weights of ``n`` regions.

    Use :meth:`from_graph` to create weights from a :class:`NeighborGraph`.
    The matrix is held privately; :attr:`sparse` returns a copy.

    Parameters
    ----------
    matrix: scipy.sparse matrix of shape (n, n)
    style: WeightStyle
    """

    def __init__(self, matrix, style: Union[WeightStyle, str]) -> None:
        matrix = scipy.sparse.csr_matrix(matrix, dtype=np.float64)
        nrow, ncol = matrix.shape
        if nrow != ncol:
            raise ValueError(f"weights must be square, got shape {matrix.shape}")
        require_regions(nrow)
        matrix.eliminate_zeros()
        if (matrix.data < 0.0).any():
            raise ValueError("weights must be non-negative")
        if matrix.diagonal().any():
            raise ValueError("weights must not contain self-loops")
        matrix.sort_indices()

        self._matrix = matrix
        self._style = WeightStyle(style)

    @classmethod
    def from_graph(
        cls, graph: NeighborGraph, style: Union[WeightStyle, str] = WeightStyle.BINARY
    ) -> "SpatialWeights":
        """
        Create weights from a neighbor graph.

        Parameters
        ----------
        graph: NeighborGraph
        style: WeightStyle or {"binary", "row"}
            Binary by default.
        """
        style = WeightStyle(style)
        require_regions(graph.n)
        cardinalities = graph.cardinalities

        rows = np.repeat(np.arange(graph.n), cardinalities)
        cols = np.fromiter(
            (j for nb in graph for j in sorted(nb)), dtype=np.int64, count=rows.size
        )
        if style is WeightStyle.BINARY:
            data = np.ones(rows.size)
        else:
            data = 1.0 / cardinalities[rows]

        matrix = scipy.sparse.csr_matrix((data, (rows, cols)), shape=(graph.n, graph.n))
        weights = cls(matrix, style)
        logger.info(f"Created {style.value} spatial weights, S0 = {weights.s0}")
        return weights

    def __repr__(self) -> str:
        return f"SpatialWeights(n={self.n}, style={self.style.value}, s0={self.s0})"

    @property
    def style(self) -> WeightStyle:
        return self._style

    @property
    def n(self) -> int:
        return self._matrix.shape[0]

    @property
    def sparse(self) -> scipy.sparse.csr_matrix:
        """Copy of the weights as a scipy CSR matrix."""
        return self._matrix.copy()

    @property
    def csr_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """``(indptr, indices, data)`` of the CSR matrix, for numba kernels."""
        m = self._matrix
        return m.indptr, m.indices, m.data

    def weight(self, i: int, j: int) -> float:
        return float(self._matrix[i, j])

    def neighbors(self, i: int) -> np.ndarray:
        m = self._matrix
        return m.indices[m.indptr[i] : m.indptr[i + 1]].copy()

    @property
    def cardinalities(self) -> np.ndarray:
        return np.diff(self._matrix.indptr)

    @property
    def isolates(self) -> Tuple[int, ...]:
        return tuple(np.flatnonzero(self.cardinalities == 0).tolist())

    @property
    def s0(self) -> float:
        """Sum of all weights."""
        return float(self._matrix.sum())

    @property
    def s1(self) -> float:
        """Half the sum of the squared symmetrized weights."""
        symmetric = self._matrix + self._matrix.T
        return float(0.5 * symmetric.multiply(symmetric).sum())

    @property
    def s2(self) -> float:
        """Sum over regions of the squared row plus column sums."""
        rowsum = np.asarray(self._matrix.sum(axis=1)).ravel()
        colsum = np.asarray(self._matrix.sum(axis=0)).ravel()
        return float(((rowsum + colsum) ** 2).sum())


def spatial_lag(weights: SpatialWeights, values) -> np.ndarray:
    """
    Weighted sum of the neighbor values of every region: ``W @ x``.

    With row-standardized weights this is the average of the neighbors.
    """
    x = align_values(values, weights.n)
    return weights._matrix @ x
