"""Geometry helpers shared by the simplifier and the path ordering."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np
from shapely.geometry import LinearRing

Point2 = tuple[float, float]


def segment_distances(points: np.ndarray, a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Distance from each row of *points* (N, 2) to the segment a→b.

    Projections are clamped to the segment, so a point beyond either end
    measures to that endpoint.
    """
    ab = b - a
    denom = float(ab @ ab)
    if denom == 0.0:
        return np.hypot(*(points - a).T)
    t = np.clip(((points - a) @ ab) / denom, 0.0, 1.0)
    closest = a + t[:, None] * ab
    return np.hypot(*(points - closest).T)


def distance(p: Sequence[float], q: Sequence[float]) -> float:
    return math.hypot(q[0] - p[0], q[1] - p[1])


def ring(points: Sequence[Point2]) -> LinearRing:
    """Closed shapely ring through *points*."""
    return LinearRing(points)
