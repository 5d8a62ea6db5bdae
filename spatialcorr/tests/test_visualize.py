import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402

import spatialcorr  # noqa: E402
from spatialcorr.contiguity import lattice_graph  # noqa: E402
from spatialcorr.errors import DegenerateAttributeError  # noqa: E402
from spatialcorr.moran import moran_i  # noqa: E402
from spatialcorr.weights import SpatialWeights  # noqa: E402


@pytest.fixture(scope="function")
def permit_result(permit_grid):
    return spatialcorr.moran_analysis(permit_grid, "permits", permutations=199, seed=5)


def test_plot_null_distribution(permit_result):
    fig, ax = spatialcorr.visualize.plot_null_distribution(permit_result)
    assert isinstance(fig, matplotlib.figure.Figure)
    assert len(ax.patches) == 50
    observed_line = ax.lines[0]
    assert observed_line.get_xdata()[0] == permit_result.I
    plt.close(fig)


def test_plot_null_distribution_permutation_result(permit_grid):
    weights = SpatialWeights.from_graph(spatialcorr.build_neighbor_graph(permit_grid))
    result = spatialcorr.permutation_test(
        permit_grid["permits"], weights, permutations=99, seed=5
    )
    fig, ax = plt.subplots()
    out_fig, out_ax = spatialcorr.visualize.plot_null_distribution(result, ax=ax, bins=10)
    assert out_ax is ax
    assert out_fig is fig
    assert len(ax.patches) == 10
    plt.close(fig)


def test_moran_scatterplot_slope_is_moran_i():
    weights = SpatialWeights.from_graph(lattice_graph(4, 4, "queen"), "row")
    values = np.random.default_rng(0).normal(size=16)
    fig, ax = spatialcorr.visualize.moran_scatterplot(values, weights)
    fitted = ax.lines[0]
    x = fitted.get_xdata()
    y = fitted.get_ydata()
    slope = (y[1] - y[0]) / (x[1] - x[0])
    assert slope == pytest.approx(moran_i(values, weights))
    plt.close(fig)


def test_moran_scatterplot_constant():
    weights = SpatialWeights.from_graph(lattice_graph(2, 2, "rook"))
    with pytest.raises(DegenerateAttributeError, match="constant"):
        spatialcorr.visualize.moran_scatterplot([1.0] * 4, weights)


def test_moran_scatterplot_tiny_values():
    weights = SpatialWeights.from_graph(lattice_graph(3, 3, "rook"), "row")
    values = np.array([1.0, 0.0, 1.0, 0.0, 1.0, 0.0, 1.0, 0.0, 1.0]) * 1.0e-200
    fig, ax = spatialcorr.visualize.moran_scatterplot(values, weights)
    z = ax.collections[0].get_offsets()[:, 0]
    assert np.isfinite(z).all()
    assert z.std() == pytest.approx(1.0)
    plt.close(fig)
