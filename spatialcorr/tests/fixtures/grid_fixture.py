import geopandas as gpd
import numpy as np
import pytest
import shapely.geometry as sg


def make_grid_gdf(nrow: int, ncol: int, values=None) -> gpd.GeoDataFrame:
    """
    Unit square cells, numbered row by row, the same numbering as
    ``spatialcorr.lattice_graph``.
    """
    geometry = [
        sg.box(col, row, col + 1.0, row + 1.0)
        for row in range(nrow)
        for col in range(ncol)
    ]
    gdf = gpd.GeoDataFrame(
        {"tract": [f"T{i:03d}" for i in range(nrow * ncol)]}, geometry=geometry
    )
    if values is not None:
        gdf["permits"] = values
    return gdf


@pytest.fixture(scope="function")
def grid_3x3():
    return make_grid_gdf(3, 3)


@pytest.fixture(scope="function")
def center_outlier():
    return [1.0, 1.0, 1.0, 1.0, 9.0, 1.0, 1.0, 1.0, 1.0]


@pytest.fixture(scope="function")
def checkerboard():
    return [1.0, 0.0, 1.0, 0.0, 1.0, 0.0, 1.0, 0.0, 1.0]


@pytest.fixture(scope="function")
def permit_grid():
    """
    5 by 5 grid of building permit counts, with more permits in the north
    east.
    """
    permits = np.array(
        [
            [2, 0, 3, 1, 4],
            [1, 3, 2, 5, 6],
            [0, 2, 6, 7, 9],
            [3, 4, 8, 12, 11],
            [2, 5, 9, 14, 17],
        ],
        dtype=float,
    )
    return make_grid_gdf(5, 5, permits.ravel())


@pytest.fixture(scope="function")
def grid_with_isolate():
    geometry = [
        sg.box(0.0, 0.0, 1.0, 1.0),
        sg.box(1.0, 0.0, 2.0, 1.0),
        sg.box(1.0, 1.0, 2.0, 2.0),
        sg.box(10.0, 10.0, 11.0, 11.0),
    ]
    return gpd.GeoDataFrame({"permits": [1.0, 4.0, 2.0, 7.0]}, geometry=geometry)
