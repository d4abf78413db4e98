"""Greedy single-pass contour simplification.

Raster contours advance one pixel per vertex, so straight runs carry many
collinear points.  The simplifier walks the closed loop once, holding an
anchor vertex and stretching a segment from it to each following vertex.
As long as every vertex skipped since the anchor stays within the
tolerance of that segment the skipped vertices are dropped; the first
vertex that breaks the tolerance pins its predecessor as the next anchor.

This is not Douglas-Peucker: output matches the greedy
scan vertex for vertex.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Optional

import numpy as np
from shapely.geometry import LinearRing

from .cancel import CancellationToken, ProgressCallback, is_cancelled, report
from .contour import PathContour
from .errors import ConfigurationError, DegenerateGeometryError
from .frame import PixelFrame
from .geometry import Point2, ring, segment_distances

logger = logging.getLogger(__name__)

MIN_VERTICES = 3


@dataclass(frozen=True)
class SimplifiedPath:
    """A closed loop of model-space vertices ready for cutting.

    ``source_indices[i]`` is the index into the originating contour of
    ``points[i]``.  The loop closes from the last point back to the first.
    """

    points: tuple[Point2, ...]
    source_indices: tuple[int, ...] = ()

    @property
    def start(self) -> Point2:
        return self.points[0]

    def as_ring(self) -> LinearRing:
        return ring(self.points)

    @property
    def length(self) -> float:
        return self.as_ring().length

    def __len__(self) -> int:
        return len(self.points)


def simplify_contour(
    contour: PathContour,
    frame: PixelFrame,
    tolerance: Optional[float] = None,
) -> SimplifiedPath:
    """Reduce *contour* to the vertices the greedy scan keeps.

    Parameters
    ----------
    contour:
        Loop in pixel space.
    frame:
        Pixel to model transform.
    tolerance:
        Maximum distance, in model units, a dropped vertex may lie from
        the segment that replaces it.  Defaults to half a pixel.

    Raises
    ------
    DegenerateGeometryError:
        Fewer than three vertices survive.
    """
    if tolerance is None:
        tolerance = frame.straight_tolerance
    if tolerance <= 0:
        raise ConfigurationError(f"tolerance must be positive, got {tolerance}")

    pts = np.array([frame.to_model(x, y) for x, y in contour.nodes], dtype=float)
    n = len(pts)

    kept = [0]
    anchor = 0
    # j == n stands for the start vertex closing the loop
    for j in range(2, n + 1):
        end = pts[j % n]
        skipped = pts[anchor + 1:j]
        if np.all(segment_distances(skipped, pts[anchor], end) <= tolerance):
            continue
        kept.append(j - 1)
        anchor = j - 1

    if len(kept) < MIN_VERTICES:
        raise DegenerateGeometryError(
            f"contour at {contour.start} reduced to {len(kept)} vertices"
        )

    points = tuple((float(pts[i, 0]), float(pts[i, 1])) for i in kept)
    return SimplifiedPath(points=points, source_indices=tuple(kept))


def simplify_contours(
    contours: list[PathContour],
    frame: PixelFrame,
    tolerance: Optional[float] = None,
    cancel: Optional[CancellationToken] = None,
    progress: Optional[ProgressCallback] = None,
) -> list[SimplifiedPath]:
    """Simplify every contour, skipping degenerate ones with a warning."""
    paths: list[SimplifiedPath] = []
    total = len(contours)

    for i, contour in enumerate(contours):
        try:
            paths.append(simplify_contour(contour, frame, tolerance))
        except DegenerateGeometryError as exc:
            warnings.warn(f"Skipping degenerate contour: {exc}", stacklevel=2)
        else:
            if not contour.closed:
                # the cut back to the start crosses pixels the walk never traced
                warnings.warn(
                    f"Open contour at {contour.start} ({len(contour)} nodes) "
                    f"will be closed with a straight cut",
                    stacklevel=2,
                )

        report(progress, (i + 1) / total)
        if is_cancelled(cancel):
            logger.info("Simplification cancelled after %d of %d contours", i + 1, total)
            return paths

    before = sum(len(c) for c in contours)
    after = sum(len(p) for p in paths)
    logger.info("simplified %d vertices to %d across %d paths", before, after, len(paths))
    logger.info(
        "total length: %.4f in, total segments: %d",
        sum(p.length for p in paths), after,
    )
    return paths
