"""Contour extraction: drain a boundary graph into closed loops."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .cancel import CancellationToken, ProgressCallback, is_cancelled, report
from .graph import BoundaryGraph, Key

logger = logging.getLogger(__name__)

PROGRESS_TICKS = 100


@dataclass(frozen=True)
class PathContour:
    """An ordered loop of boundary corners in pixel space.

    The edge from the last node back to the first is implicit.
    """

    nodes: tuple[Key, ...]
    closed: bool = True

    @property
    def start(self) -> Key:
        return self.nodes[0]

    def edges(self) -> list[frozenset[Key]]:
        """Edges walked, including the closing edge when the loop is closed."""
        pairs = [
            frozenset((a, b)) for a, b in zip(self.nodes, self.nodes[1:])
        ]
        if self.closed and len(self.nodes) > 2:
            pairs.append(frozenset((self.nodes[-1], self.nodes[0])))
        return pairs

    @property
    def length(self) -> float:
        """Loop length in pixels."""
        points = list(self.nodes)
        if self.closed:
            points.append(self.nodes[0])
        return sum(
            math.hypot(bx - ax, by - ay)
            for (ax, ay), (bx, by) in zip(points, points[1:])
        )

    def __len__(self) -> int:
        return len(self.nodes)


def _walk(graph: BoundaryGraph, seed: Key, unvisited: dict[Key, None]) -> PathContour:
    """Follow unvisited links from *seed* until none remain."""
    nodes = [seed]
    del unvisited[seed]
    current = graph.get(seed)

    while True:
        nxt = next((k for k in current.neighbors() if k in unvisited), None)
        if nxt is None:
            break
        nodes.append(nxt)
        del unvisited[nxt]
        current = graph.get(nxt)

    closed = len(nodes) > 2 and seed in set(current.neighbors())
    return PathContour(nodes=tuple(nodes), closed=closed)


def extract_contours(
    graph: BoundaryGraph,
    cancel: Optional[CancellationToken] = None,
    progress: Optional[ProgressCallback] = None,
) -> list[PathContour]:
    """Drain every node of *graph* into contours.

    Seeds are taken in graph order and each walk prefers north, south,
    east, then west at branch points, so the result is reproducible.  Every
    node lands in exactly one contour.  Cancellation is honoured between
    contours only.
    """
    # dict as an insertion-ordered set
    unvisited: dict[Key, None] = dict.fromkeys(graph.keys())
    total = len(unvisited)
    contours: list[PathContour] = []
    tick = 0

    while unvisited:
        seed = next(iter(unvisited))
        contours.append(_walk(graph, seed, unvisited))

        drained = total - len(unvisited)
        if drained * PROGRESS_TICKS // total > tick:
            tick = drained * PROGRESS_TICKS // total
            report(progress, tick / PROGRESS_TICKS)

        if is_cancelled(cancel):
            logger.info(
                "Contour extraction cancelled with %d nodes left", len(unvisited)
            )
            return contours

    logger.info("%d contours", len(contours))
    log_contour_stats(contours)
    return contours


def log_contour_stats(contours: list[PathContour]) -> None:
    length = sum(c.length for c in contours)
    segments = sum(len(c) for c in contours)
    logger.info("total length: %.1f px, total segments: %d", length, segments)
