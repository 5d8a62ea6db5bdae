# exports
from spatialcorr import logging, visualize
from spatialcorr.analysis import (
    AnalysisSettings,
    MoranAnalysis,
    MoranResult,
    moran_analysis,
)
from spatialcorr.contiguity import (
    Contiguity,
    NeighborGraph,
    build_neighbor_graph,
    lattice_graph,
)
from spatialcorr.errors import (
    DegenerateAttributeError,
    InsufficientRegionsError,
    InvalidGeometryError,
    MisalignedInputError,
    RandomSourceError,
    SpatialCorrError,
)
from spatialcorr.moran import (
    Alternative,
    AnalyticalInference,
    analytical_inference,
    expected_i,
    moran_i,
)
from spatialcorr.montecarlo import (
    PermutationResult,
    empirical_p_value,
    permutation_test,
)
from spatialcorr.regions import RegionCollection, from_geodataframe
from spatialcorr.schemata import ValidationError
from spatialcorr.weights import SpatialWeights, WeightStyle, spatial_lag

__version__ = "0.1.0"
