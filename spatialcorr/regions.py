"""
Input boundary of the analysis.

Geometries arrive as shapely objects or as a ``geopandas.GeoDataFrame``; they
are validated and stored in a :class:`RegionCollection`, which defines the
index order shared by the neighbor graph, the weights and the attribute
values. Nothing past this module depends on geopandas.
"""

from typing import Hashable, Iterable, Optional, Sequence

import geopandas as gpd
import numpy as np
import pandas as pd

from spatialcorr.errors import (
    InsufficientRegionsError,
    InvalidGeometryError,
    MisalignedInputError,
)
from spatialcorr.schemata import (
    DTypeSchema,
    FiniteSchema,
    GeometryTypeSchema,
    LengthSchema,
    ValidationError,
    ValidGeometrySchema,
)

POLYGON_TYPES = ("Polygon", "MultiPolygon")

_GEOMETRY_SCHEMATA = (
    GeometryTypeSchema(*POLYGON_TYPES, error=InvalidGeometryError),
    ValidGeometrySchema(error=InvalidGeometryError),
)
_VALUES_SCHEMATA = (
    DTypeSchema(np.integer) | DTypeSchema(np.floating) | DTypeSchema(np.bool_),
    FiniteSchema(),
)


class RegionCollection:
    """
    Ordered, read-only collection of polygon regions.

    Parameters
    ----------
    geometries: iterable of shapely Polygon or MultiPolygon
    ids: sequence of hashable, optional
        Unique region identifiers. Defaults to ``0 .. n - 1``.

    Raises
    ------
    InvalidGeometryError
        If a geometry is missing, empty, not polygonal, or invalid.
    MisalignedInputError
        If the number of ids differs from the number of geometries.
    """

    def __init__(
        self,
        geometries: Iterable,
        ids: Optional[Sequence[Hashable]] = None,
    ) -> None:
        geometries = np.array(list(geometries), dtype=object)
        for schema in _GEOMETRY_SCHEMATA:
            schema.validate(geometries)

        if ids is None:
            ids = pd.RangeIndex(len(geometries))
        else:
            ids = pd.Index(ids)
            if len(ids) != len(geometries):
                raise MisalignedInputError(
                    f"got {len(ids)} ids for {len(geometries)} geometries"
                )
            if not ids.is_unique:
                duplicated = ids[ids.duplicated()].unique().tolist()
                raise ValueError(f"region ids must be unique, duplicated: {duplicated}")

        geometries.flags.writeable = False
        self._geometries = geometries
        self._ids = ids

    @property
    def geometries(self) -> np.ndarray:
        return self._geometries

    @property
    def ids(self) -> pd.Index:
        return self._ids

    @property
    def n(self) -> int:
        return len(self._geometries)

    def __len__(self) -> int:
        return self.n

    def __repr__(self) -> str:
        return f"RegionCollection(n={self.n})"

    def take(self, order: Sequence[int]) -> "RegionCollection":
        """Return the regions in a different order, ids travelling along."""
        order = np.asarray(order)
        return RegionCollection(self._geometries[order], self._ids[order])


def from_geodataframe(gdf, id_column: Optional[str] = None) -> RegionCollection:
    """
    Convert the active geometry column of a GeoDataFrame into a
    :class:`RegionCollection`.

    Parameters
    ----------
    gdf: geopandas.GeoDataFrame
    id_column: str, optional
        Column holding the region identifiers. If None, the index of the
        GeoDataFrame is used.

    Returns
    -------
    RegionCollection
    """
    if not isinstance(gdf, gpd.GeoDataFrame):
        raise TypeError(f"expected a GeoDataFrame, got {type(gdf).__name__}")
    ids = gdf.index if id_column is None else gdf[id_column]
    return RegionCollection(gdf.geometry.array, ids=ids.to_numpy())


def as_regions(obj) -> RegionCollection:
    """Accept a RegionCollection, a GeoDataFrame, a GeoSeries, or geometries."""
    if isinstance(obj, RegionCollection):
        return obj
    if isinstance(obj, gpd.GeoDataFrame):
        return from_geodataframe(obj)
    if isinstance(obj, gpd.GeoSeries):
        return RegionCollection(obj.array, ids=obj.index.to_numpy())
    return RegionCollection(obj)


_REGION_COUNT_SCHEMA = LengthSchema(
    ">=", 2, error=InsufficientRegionsError, name="number of regions"
)


def require_regions(n: int) -> None:
    """Raise InsufficientRegionsError if there are fewer than two regions."""
    _REGION_COUNT_SCHEMA.validate(range(n))


def _check_labels(labels: pd.Index, ids: pd.Index, shown: int = 5) -> None:
    if not labels.is_unique:
        duplicated = labels[labels.duplicated()].unique().tolist()
        raise MisalignedInputError(f"value labels must be unique, duplicated: {duplicated}")
    missing = ids[~ids.isin(labels)].tolist()
    extra = labels[~labels.isin(ids)].tolist()
    if missing or extra:
        raise MisalignedInputError(
            "value labels do not match the region ids: "
            f"{len(missing)} missing {missing[:shown]}, "
            f"{len(extra)} unknown {extra[:shown]}"
        )


def align_values(values, n: int, ids: Optional[pd.Index] = None) -> np.ndarray:
    """
    Convert attribute values into a read-only float64 array aligned with the
    region order.

    A pandas Series whose index shares labels with the region ids is
    reordered on those ids, and must then hold exactly the region ids. A
    Series sharing no labels with the ids, and any other input, is taken in
    the given order.

    Raises
    ------
    MisalignedInputError
        If the number of values differs from ``n``, or if the index of a
        Series partially matches the region ids.
    ValidationError
        If the values are not numeric or not finite.
    """
    if isinstance(values, pd.Series):
        if ids is not None and values.index.isin(ids).any():
            _check_labels(values.index, ids)
            values = values.reindex(ids)
        values = values.to_numpy()

    array = np.asarray(values)
    if array.ndim != 1:
        raise MisalignedInputError(
            f"values must be one-dimensional, got shape {array.shape}"
        )
    if array.size != n:
        raise MisalignedInputError(f"got {array.size} values for {n} regions")
    for schema in _VALUES_SCHEMATA:
        try:
            schema.validate(array)
        except ValidationError as e:
            raise ValidationError(f"attribute values: {e}") from e

    array = array.astype(np.float64)
    array.flags.writeable = False
    return array
