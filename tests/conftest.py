"""Shared fixtures: small classified rasters and their frames."""

import numpy as np
import pytest

from isomill.core.frame import PixelFrame
from isomill.core.raster import ArrayRaster

BACKGROUND = 2
COPPER = 1


def square_codes(
    width: int = 25,
    height: int = 25,
    squares: tuple = ((5, 5, 10),),
) -> np.ndarray:
    """Background raster with filled squares given as (x, y, side)."""
    codes = np.full((height, width), BACKGROUND, dtype=np.int64)
    for x, y, side in squares:
        codes[y:y + side, x:x + side] = COPPER
    return codes


@pytest.fixture
def square_raster() -> ArrayRaster:
    """A single 10x10 copper square at pixel (5, 5) in a 25x25 raster."""
    return ArrayRaster(square_codes())


@pytest.fixture
def two_square_raster() -> ArrayRaster:
    return ArrayRaster(square_codes(width=40, squares=((5, 5, 10), (25, 5, 10))))


@pytest.fixture
def frame() -> PixelFrame:
    """100 dpi frame for the 25-pixel-high test rasters."""
    return PixelFrame(resolution=100.0, raster_height=25)
