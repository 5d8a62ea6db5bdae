from dataclasses import dataclass, field, fields
from typing import Optional, Tuple, Union

import geopandas as gpd
import numpy as np
import pandas as pd

from spatialcorr.contiguity import Contiguity, NeighborGraph, build_neighbor_graph
from spatialcorr.errors import MisalignedInputError
from spatialcorr.logging import logger
from spatialcorr.logging.logging_decorators import standard_log_decorator
from spatialcorr.moran import Alternative, analytical_inference
from spatialcorr.montecarlo import SeedLike, permutation_test
from spatialcorr.regions import RegionCollection, align_values, as_regions
from spatialcorr.weights import SpatialWeights, WeightStyle


@dataclass(frozen=True)
class AnalysisSettings:
    """
    Settings of a Moran's I analysis.

    Parameters
    ----------
    contiguity: Contiguity or {"queen", "rook"}
        Queen by default.
    style: WeightStyle or {"binary", "row"}
        Binary by default.
    permutations: int
        Number of Monte Carlo permutations, 9999 by default.
    seed: int, numpy.random.SeedSequence, numpy.random.Generator or None
        Random source of the permutation test.
    alternative: Alternative or {"greater", "less", "two-sided"}
        Greater (positive autocorrelation) by default.
    n_jobs: int
        Number of joblib workers for the permutation test.
    chunk_size: int
        Permutations per independently seeded chunk.
    """

    contiguity: Contiguity = Contiguity.QUEEN
    style: WeightStyle = WeightStyle.BINARY
    permutations: int = 9999
    seed: SeedLike = field(default=None, compare=False)
    alternative: Alternative = Alternative.GREATER
    n_jobs: int = 1
    chunk_size: int = 1000

    def __post_init__(self):
        # Frozen: bypass __setattr__ to normalize strings into enum members.
        object.__setattr__(self, "contiguity", Contiguity(self.contiguity))
        object.__setattr__(self, "style", WeightStyle(self.style))
        object.__setattr__(self, "alternative", Alternative(self.alternative))
        if self.permutations < 1:
            raise ValueError(
                f"permutations must be a positive integer, got {self.permutations}"
            )
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be a positive integer, got {self.chunk_size}")


@dataclass(frozen=True)
class MoranResult:
    """
    Moran's I with its Monte Carlo and analytical inference.

    ``p_sim`` is the empirical p-value of the permutation test, ``z_sim`` the
    pseudo z-score against the null distribution. ``*_norm`` and ``*_rand``
    hold the analytical inference under the normality and randomization
    assumptions.
    """

    I: float
    expected_I: float
    n: int
    s0: float
    permutations: int
    alternative: Alternative
    simulations: np.ndarray = field(repr=False)
    p_sim: float
    expected_I_sim: float
    std_I_sim: float
    z_sim: float
    var_I_norm: float
    z_norm: float
    p_norm: float
    var_I_rand: float
    z_rand: float
    p_rand: float
    isolates: Tuple[int, ...] = ()

    def to_series(self) -> pd.Series:
        """Scalar fields of the result as a pandas Series."""
        summary = {
            f.name: getattr(self, f.name) for f in fields(self) if f.name != "simulations"
        }
        summary["alternative"] = self.alternative.value
        summary["isolates"] = len(self.isolates)
        return pd.Series(summary, name="moran")


class MoranAnalysis:
    """
    Global Moran's I of an attribute over polygon regions, with a Monte Carlo
    significance test.

    The neighbor graph and the weights are built once, on construction.

    Parameters
    ----------
    regions: RegionCollection, geopandas.GeoDataFrame, geopandas.GeoSeries or
        sequence of shapely polygons
    values: array-like of float
        One value per region, in region order. A pandas Series indexed by the
        region ids is aligned on those ids.
    settings: AnalysisSettings, optional
    graph: NeighborGraph, optional
        Precomputed neighbor graph of the regions. Built from the regions with
        the contiguity of the settings if None. Required when ``regions`` is
        None, see :meth:`from_graph`.

    Examples
    --------
    >>> analysis = MoranAnalysis(gdf, gdf["permits"], AnalysisSettings(seed=123))
    >>> result = analysis.run()
    >>> result.I, result.p_sim
    """

    def __init__(
        self,
        regions,
        values,
        settings: Optional[AnalysisSettings] = None,
        graph: Optional[NeighborGraph] = None,
    ) -> None:
        self.settings = settings if settings is not None else AnalysisSettings()
        self.regions: Optional[RegionCollection]
        if regions is None:
            if graph is None:
                raise TypeError("either regions or a neighbor graph is required")
            self.regions = None
            self.values = align_values(values, graph.n)
        else:
            self.regions = as_regions(regions)
            self.values = align_values(values, self.regions.n, self.regions.ids)
            if graph is None:
                graph = build_neighbor_graph(self.regions, self.settings.contiguity)
            elif graph.n != self.regions.n:
                raise MisalignedInputError(
                    f"neighbor graph has {graph.n} regions, got {self.regions.n} regions"
                )
        self.graph: NeighborGraph = graph
        self.weights = SpatialWeights.from_graph(graph, self.settings.style)

    @classmethod
    def from_graph(
        cls,
        graph: NeighborGraph,
        values,
        settings: Optional[AnalysisSettings] = None,
    ) -> "MoranAnalysis":
        """Analysis on a given neighbor graph, without geometries."""
        return cls(None, values, settings, graph=graph)

    @standard_log_decorator()
    def run(self) -> MoranResult:
        settings = self.settings
        if self.graph.isolates:
            logger.warning(
                f"{len(self.graph.isolates)} regions without neighbors take part "
                "in the analysis with zero weight"
            )

        permutation = permutation_test(
            self.values,
            self.weights,
            permutations=settings.permutations,
            seed=settings.seed,
            alternative=settings.alternative,
            n_jobs=settings.n_jobs,
            chunk_size=settings.chunk_size,
        )
        analytical = analytical_inference(
            self.values, self.weights, settings.alternative
        )
        return MoranResult(
            I=permutation.observed,
            expected_I=analytical.expected,
            n=self.weights.n,
            s0=self.weights.s0,
            permutations=permutation.permutations,
            alternative=settings.alternative,
            simulations=permutation.simulations,
            p_sim=permutation.p_value,
            expected_I_sim=permutation.expected,
            std_I_sim=permutation.std,
            z_sim=permutation.z,
            var_I_norm=analytical.var_norm,
            z_norm=analytical.z_norm,
            p_norm=analytical.p_norm,
            var_I_rand=analytical.var_rand,
            z_rand=analytical.z_rand,
            p_rand=analytical.p_rand,
            isolates=self.graph.isolates,
        )


def moran_analysis(
    regions,
    values: Union[str, np.ndarray, pd.Series, list],
    **settings,
) -> MoranResult:
    """
    Run a Moran's I analysis in one call.

    Parameters
    ----------
    regions: geopandas.GeoDataFrame, geopandas.GeoSeries, RegionCollection or
        sequence of shapely polygons
    values: str or array-like of float
        Attribute values, or the name of a column of ``regions`` when it is a
        GeoDataFrame.
    **settings
        Keyword arguments of :class:`AnalysisSettings`.

    Returns
    -------
    MoranResult

    Examples
    --------
    >>> gdf = geopandas.read_file("permits_by_tract.shp")
    >>> result = spatialcorr.moran_analysis(gdf, "permits", permutations=999, seed=123)
    >>> result.to_series()
    """
    if isinstance(values, str):
        if not isinstance(regions, gpd.GeoDataFrame):
            raise TypeError(
                "values can only be given as a column name if regions is a GeoDataFrame"
            )
        values = regions[values]
    return MoranAnalysis(regions, values, AnalysisSettings(**settings)).run()
