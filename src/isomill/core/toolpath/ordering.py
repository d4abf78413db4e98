"""Greedy nearest-neighbour path ordering.

Not a TSP solver: from the current position, always take the remaining
path whose start vertex is closest.  Each closed loop ends where it
started, so the next search runs from the previous path's start vertex.
"""

from __future__ import annotations

from typing import Sequence

from ..geometry import Point2, distance


def greedy_order(starts: Sequence[Point2], position: Point2) -> list[int]:
    """Return indices into *starts* in visiting order.

    Ties go to the earliest index.
    """
    remaining = list(range(len(starts)))
    order: list[int] = []

    while remaining:
        best = remaining[0]
        best_dist = distance(position, starts[best])
        for idx in remaining[1:]:
            d = distance(position, starts[idx])
            if d < best_dist:
                best, best_dist = idx, d
        remaining.remove(best)
        order.append(best)
        position = starts[best]

    return order
