"""Raster classification input.

The upstream classifier renders the copper layer so that every pixel
carries an integer colour code.  Anything exposing ``width``, ``height``
and ``color(x, y)`` satisfies :class:`RasterClassifier`; :class:`ArrayRaster`
adapts a numpy array.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

import numpy as np

COLOR_MASK = 0xFFFFFF


@runtime_checkable
class RasterClassifier(Protocol):
    width: int
    height: int

    def color(self, x: int, y: int) -> int:
        """Colour code at pixel (x, y); 0 outside the raster."""
        ...


def pack_rgb(rgb: np.ndarray) -> np.ndarray:
    """Pack an (H, W, 3|4) uint8 array into 24-bit integer colour codes."""
    rgb = np.asarray(rgb)
    r = rgb[..., 0].astype(np.int64)
    g = rgb[..., 1].astype(np.int64)
    b = rgb[..., 2].astype(np.int64)
    return ((r << 16) | (g << 8) | b) & COLOR_MASK


class ArrayRaster:
    """A :class:`RasterClassifier` backed by a numpy array.

    *codes* is either a 2-D integer array indexed ``[row, column]`` or an
    RGB(A) image array, which is packed to 24-bit codes.
    """

    def __init__(self, codes: np.ndarray) -> None:
        codes = np.asarray(codes)
        if codes.ndim == 3 and codes.shape[2] in (3, 4):
            codes = pack_rgb(codes)
        elif codes.ndim == 2:
            codes = codes.astype(np.int64) & COLOR_MASK
        else:
            raise ValueError(
                f"Expected a 2-D code array or RGB image, got shape {codes.shape}"
            )
        self._codes = codes
        self.height, self.width = codes.shape

    @property
    def codes(self) -> np.ndarray:
        return self._codes

    def color(self, x: int, y: int) -> int:
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return 0
        return int(self._codes[y, x])


def load_raster(path: Path) -> ArrayRaster:
    """Load a classified raster from ``.npy`` or any image Pillow reads."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Raster file not found: {path}")
    if path.suffix.lower() == ".npy":
        return ArrayRaster(np.load(path))

    from PIL import Image

    with Image.open(path) as img:
        return ArrayRaster(np.asarray(img.convert("RGB")))
