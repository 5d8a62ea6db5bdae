import pytest

import spatialcorr
from spatialcorr.logging.backends import NullLogger

from .fixtures.grid_fixture import (
    center_outlier,
    checkerboard,
    grid_3x3,
    grid_with_isolate,
    permit_grid,
)


@pytest.fixture(scope="function")
def reset_logger():
    yield
    spatialcorr.logging.logger.instance = NullLogger()
