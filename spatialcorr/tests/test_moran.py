import numpy as np
import pytest

from spatialcorr.contiguity import NeighborGraph, build_neighbor_graph, lattice_graph
from spatialcorr.errors import (
    DegenerateAttributeError,
    InsufficientRegionsError,
    MisalignedInputError,
)
from spatialcorr.moran import (
    Alternative,
    analytical_inference,
    expected_i,
    moran_i,
    p_value_from_z,
)
from spatialcorr.regions import RegionCollection
from spatialcorr.weights import SpatialWeights

from .fixtures.grid_fixture import make_grid_gdf


def dense_moran(values, weights):
    """Straightforward dense evaluation of the Moran's I formula."""
    x = np.asarray(values, dtype=float)
    w = weights.sparse.toarray()
    z = x - x.mean()
    return (x.size / w.sum()) * (z @ w @ z) / (z @ z)


@pytest.fixture(scope="function")
def rook_3x3():
    return SpatialWeights.from_graph(lattice_graph(3, 3, "rook"))


def test_center_outlier(rook_3x3, center_outlier):
    assert moran_i(center_outlier, rook_3x3) == pytest.approx(-0.25)


def test_checkerboard_strongly_negative(rook_3x3, checkerboard):
    assert moran_i(checkerboard, rook_3x3) == pytest.approx(-1.0)


def test_clustered_strongly_positive():
    weights = SpatialWeights.from_graph(lattice_graph(4, 4, "rook"))
    values = np.tile([0.0, 0.0, 1.0, 1.0], 4)
    assert moran_i(values, weights) == pytest.approx(2.0 / 3.0)


def test_constant_attribute_is_degenerate(rook_3x3):
    with pytest.raises(DegenerateAttributeError, match="constant"):
        moran_i([1.0] * 9, rook_3x3)
    with pytest.raises(DegenerateAttributeError):
        moran_i([0.1] * 9, rook_3x3)


def test_no_neighbor_pairs_is_degenerate():
    graph = NeighborGraph.from_mapping({}, n=3)
    weights = SpatialWeights.from_graph(graph)
    with pytest.raises(DegenerateAttributeError, match="S0 = 0"):
        moran_i([1.0, 2.0, 3.0], weights)


def test_misaligned(rook_3x3):
    with pytest.raises(MisalignedInputError):
        moran_i([1.0, 2.0, 3.0], rook_3x3)


def test_insufficient_regions():
    with pytest.raises(InsufficientRegionsError):
        expected_i(1)


@pytest.mark.parametrize("style", ["binary", "row"])
@pytest.mark.parametrize("contiguity", ["queen", "rook"])
def test_matches_dense_formula(style, contiguity):
    graph = lattice_graph(5, 6, contiguity)
    weights = SpatialWeights.from_graph(graph, style)
    values = np.random.default_rng(42).gamma(2.0, 3.0, size=30)
    assert moran_i(values, weights) == pytest.approx(dense_moran(values, weights))


def test_isolates_counted(grid_with_isolate):
    weights = SpatialWeights.from_graph(build_neighbor_graph(grid_with_isolate), "row")
    values = grid_with_isolate["permits"].to_numpy()
    actual = moran_i(values, weights)
    assert np.isfinite(actual)
    assert actual == pytest.approx(dense_moran(values, weights))


def test_pure(rook_3x3, center_outlier):
    values = np.array(center_outlier)
    before = rook_3x3.sparse
    moran_i(values, rook_3x3)
    assert np.array_equal(values, center_outlier)
    assert (rook_3x3.sparse != before).nnz == 0


def test_invariant_under_relabeling():
    gdf = make_grid_gdf(4, 5)
    values = np.random.default_rng(3).normal(size=20)
    weights = SpatialWeights.from_graph(build_neighbor_graph(gdf))
    expected = moran_i(values, weights)

    order = np.random.default_rng(4).permutation(20)
    regions = RegionCollection(gdf.geometry.iloc[order])
    relabeled = SpatialWeights.from_graph(build_neighbor_graph(regions))
    assert moran_i(values[order], relabeled) == pytest.approx(expected)


def test_not_clamped():
    # One neighbor pair and three isolates: S0 is small compared to n.
    graph = NeighborGraph.from_mapping({0: [1], 1: [0]}, n=5)
    weights = SpatialWeights.from_graph(graph)
    values = [3.0, 3.0, 0.0, 0.0, 0.0]
    actual = moran_i(values, weights)
    assert actual == pytest.approx(dense_moran(values, weights))
    assert actual == pytest.approx(1.5)


def test_expected_i():
    assert expected_i(9) == -0.125


def test_p_value_from_z():
    assert p_value_from_z(0.0, "greater") == pytest.approx(0.5)
    assert p_value_from_z(1.959963984540054, Alternative.GREATER) == pytest.approx(0.025)
    assert p_value_from_z(-1.959963984540054, Alternative.LESS) == pytest.approx(0.025)
    assert p_value_from_z(1.959963984540054, "two-sided") == pytest.approx(0.05)


def test_analytical_inference(rook_3x3, checkerboard):
    actual = analytical_inference(checkerboard, rook_3x3, "less")
    assert actual.expected == pytest.approx(-0.125)
    assert actual.var_norm > 0.0
    assert actual.var_rand > 0.0
    assert actual.z_norm < 0.0
    assert actual.z_rand < 0.0
    assert 0.0 <= actual.p_norm < 0.05
    assert 0.0 <= actual.p_rand < 0.05


def test_analytical_inference_normality_variance(rook_3x3, checkerboard):
    n = 9
    s0, s1, s2 = 24.0, 48.0, 272.0
    expected_var = (n * n * s1 - n * s2 + 3.0 * s0 * s0) / ((n * n - 1.0) * s0 * s0)
    expected_var -= (1.0 / (n - 1)) ** 2
    actual = analytical_inference(checkerboard, rook_3x3)
    assert actual.var_norm == pytest.approx(expected_var)


def test_analytical_inference_few_regions():
    weights = SpatialWeights.from_graph(lattice_graph(1, 3, "rook"))
    actual = analytical_inference([1.0, 2.0, 4.0], weights)
    assert np.isfinite(actual.var_norm)
    assert np.isnan(actual.var_rand)
    assert np.isnan(actual.p_rand)


@pytest.mark.parametrize("scale", [1.0e-200, 1.0e200, 1.0e-310])
def test_scale_invariant_at_extreme_magnitudes(rook_3x3, checkerboard, scale):
    values = np.asarray(checkerboard) * scale
    assert moran_i(values, rook_3x3) == pytest.approx(-1.0)
    actual = analytical_inference(values, rook_3x3, "less")
    expected = analytical_inference(checkerboard, rook_3x3, "less")
    assert actual.z_rand == pytest.approx(expected.z_rand)
