"""Pixel ↔ model coordinate frame.

Raster row 0 is the top of the board while model Y grows upward, so the
transform flips Y about the raster height.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ConfigurationError


@dataclass(frozen=True)
class PixelFrame:
    """Placement of a raster in model space.

    Parameters
    ----------
    resolution:
        Pixels per model unit (dpi, model units are inches).
    raster_height:
        Height of the raster in pixels.
    origin_x, origin_y:
        Model coordinates of the raster's lower-left corner.
    """

    resolution: float
    raster_height: int
    origin_x: float = 0.0
    origin_y: float = 0.0

    def __post_init__(self) -> None:
        if self.resolution <= 0:
            raise ConfigurationError(
                f"resolution must be positive, got {self.resolution}"
            )

    @property
    def straight_tolerance(self) -> float:
        """Half a pixel in model units; default simplification tolerance."""
        return 0.5 / self.resolution

    def to_model_x(self, x: float) -> float:
        return self.origin_x + x / self.resolution

    def to_model_y(self, y: float) -> float:
        return self.origin_y + (self.raster_height - y) / self.resolution

    def to_model(self, x: float, y: float) -> tuple[float, float]:
        return (self.to_model_x(x), self.to_model_y(y))

    def to_pixel(self, model_x: float, model_y: float) -> tuple[float, float]:
        """Inverse of :meth:`to_model`."""
        return (
            (model_x - self.origin_x) * self.resolution,
            self.raster_height - (model_y - self.origin_y) * self.resolution,
        )
