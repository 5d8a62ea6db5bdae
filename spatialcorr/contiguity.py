"""
Neighbor graphs from polygon contiguity.

Two regions are neighbors under queen contiguity when their boundaries share
at least one point, and under rook contiguity when their boundaries share a
segment of positive length. Queen contiguity is the default.
"""

from enum import Enum
from typing import Dict, Iterable, Iterator, Mapping, Sequence, Tuple, Union

import numpy as np
import shapely

from spatialcorr.logging import logger
from spatialcorr.logging.logging_decorators import standard_log_decorator
from spatialcorr.regions import RegionCollection, as_regions, require_regions


class Contiguity(Enum):
    QUEEN = "queen"
    """Regions sharing at least one boundary point are neighbors."""
    ROOK = "rook"
    """Regions sharing a boundary segment are neighbors."""


class NeighborGraph:
    """
    Symmetric neighbor relation between regions ``0 .. n - 1``.

    Every region has an entry, possibly empty; regions without neighbors are
    isolates and are listed by :attr:`isolates`. Instances are read-only.

    Parameters
    ----------
    neighbors: sequence of iterables of int
        Entry ``i`` holds the neighbor indices of region ``i``.

    Raises
    ------
    ValueError
        If the relation contains a self-loop, an index out of range, or is not
        symmetric.
    """

    def __init__(self, neighbors: Sequence[Iterable[int]]) -> None:
        self._neighbors = tuple(frozenset(int(j) for j in nb) for nb in neighbors)
        self._validate()

    def _validate(self) -> None:
        n = self.n
        for i, nb in enumerate(self._neighbors):
            if i in nb:
                raise ValueError(f"region {i} lists itself as neighbor")
            for j in nb:
                if not 0 <= j < n:
                    raise ValueError(
                        f"region {i} has neighbor {j}, outside of range 0 .. {n - 1}"
                    )
                if i not in self._neighbors[j]:
                    raise ValueError(
                        f"neighbor relation is not symmetric: {j} is a neighbor of "
                        f"{i}, but not the other way around"
                    )

    @classmethod
    def from_mapping(
        cls, mapping: Mapping[int, Iterable[int]], n: Union[int, None] = None
    ) -> "NeighborGraph":
        """
        Create a graph from a mapping of region index to neighbor indices.
        Regions missing from the mapping become isolates.
        """
        if n is None:
            n = max(mapping) + 1 if mapping else 0
        return cls([mapping.get(i, ()) for i in range(n)])

    @property
    def n(self) -> int:
        return len(self._neighbors)

    def __len__(self) -> int:
        return self.n

    def __getitem__(self, i: int) -> frozenset:
        return self._neighbors[i]

    def __iter__(self) -> Iterator[frozenset]:
        return iter(self._neighbors)

    def __eq__(self, other) -> bool:
        if not isinstance(other, NeighborGraph):
            return NotImplemented
        return self._neighbors == other._neighbors

    def __repr__(self) -> str:
        return (
            f"NeighborGraph(n={self.n}, n_edges={self.n_edges}, "
            f"n_isolates={len(self.isolates)})"
        )

    @property
    def cardinalities(self) -> np.ndarray:
        """Number of neighbors per region."""
        return np.array([len(nb) for nb in self._neighbors], dtype=np.int64)

    @property
    def n_edges(self) -> int:
        """Number of undirected neighbor pairs."""
        return int(self.cardinalities.sum()) // 2

    @property
    def isolates(self) -> Tuple[int, ...]:
        return tuple(i for i, nb in enumerate(self._neighbors) if len(nb) == 0)

    def to_dict(self) -> Dict[int, frozenset]:
        return dict(enumerate(self._neighbors))

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Yield every undirected pair once, as ``(i, j)`` with ``i < j``."""
        for i, nb in enumerate(self._neighbors):
            for j in sorted(nb):
                if i < j:
                    yield (i, j)

    def relabel(self, order: Sequence[int]) -> "NeighborGraph":
        """
        Return the graph for the regions taken in ``order``: new region ``k``
        is old region ``order[k]``.
        """
        order = np.asarray(order)
        if sorted(order.tolist()) != list(range(self.n)):
            raise ValueError("order must be a permutation of the region indices")
        new_index = np.empty(self.n, dtype=np.int64)
        new_index[order] = np.arange(self.n)
        return NeighborGraph(
            [[new_index[j] for j in self._neighbors[old]] for old in order]
        )


def _touching_pairs(
    geometries: np.ndarray, contiguity: Contiguity
) -> Tuple[np.ndarray, np.ndarray]:
    tree = shapely.STRtree(geometries)
    left, right = tree.query(geometries, predicate="intersects")
    keep = left < right
    left = left[keep]
    right = right[keep]

    boundaries = shapely.boundary(geometries)
    if contiguity is Contiguity.QUEEN:
        touching = shapely.intersects(boundaries[left], boundaries[right])
    else:
        shared = shapely.intersection(boundaries[left], boundaries[right])
        touching = shapely.length(shared) > 0.0
    return left[touching], right[touching]


@standard_log_decorator()
def build_neighbor_graph(
    regions, contiguity: Union[Contiguity, str] = Contiguity.QUEEN
) -> NeighborGraph:
    """
    Derive the neighbor graph of a set of polygons from shared boundaries.

    Candidate pairs are found with a shapely STRtree; each candidate is then
    tested on the polygon boundaries.

    Parameters
    ----------
    regions: RegionCollection, geopandas.GeoDataFrame, geopandas.GeoSeries or
        sequence of shapely polygons.
    contiguity: Contiguity or {"queen", "rook"}
        Queen (shared point, default) or rook (shared segment).

    Returns
    -------
    NeighborGraph
        Symmetric, indexed in the order of ``regions``.

    Raises
    ------
    InsufficientRegionsError
        If fewer than two regions are given.
    InvalidGeometryError
        If a geometry is not a valid polygon.

    Examples
    --------
    >>> graph = spatialcorr.build_neighbor_graph(gdf, contiguity="rook")
    >>> graph.isolates
    ()
    """
    contiguity = Contiguity(contiguity)
    regions: RegionCollection = as_regions(regions)
    require_regions(regions.n)

    left, right = _touching_pairs(regions.geometries, contiguity)
    neighbors = [set() for _ in range(regions.n)]
    for i, j in zip(left.tolist(), right.tolist()):
        neighbors[i].add(j)
        neighbors[j].add(i)

    graph = NeighborGraph(neighbors)
    logger.info(
        f"Built {contiguity.value} contiguity graph: {graph.n} regions, "
        f"{graph.n_edges} neighbor pairs, {len(graph.isolates)} isolates"
    )
    if graph.isolates:
        logger.warning(f"Regions without neighbors: {list(graph.isolates)}")
    return graph


def lattice_graph(
    nrow: int, ncol: int, contiguity: Union[Contiguity, str] = Contiguity.ROOK
) -> NeighborGraph:
    """
    Neighbor graph of a regular ``nrow`` by ``ncol`` grid of cells, numbered
    row by row. No geometries are involved.
    """
    contiguity = Contiguity(contiguity)
    require_regions(nrow * ncol)
    offsets = [(-1, 0), (1, 0), (0, -1), (0, 1)]
    if contiguity is Contiguity.QUEEN:
        offsets += [(-1, -1), (-1, 1), (1, -1), (1, 1)]

    neighbors = []
    for row in range(nrow):
        for col in range(ncol):
            cell_neighbors = []
            for dr, dc in offsets:
                r = row + dr
                c = col + dc
                if 0 <= r < nrow and 0 <= c < ncol:
                    cell_neighbors.append(r * ncol + c)
            neighbors.append(cell_neighbors)
    return NeighborGraph(neighbors)
