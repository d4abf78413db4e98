"""Boundary graph extraction from a classified raster.

Every pixel corner where two differently coloured pixels meet becomes a
:class:`BoundaryNode`.  Nodes live in an arena keyed by their ``(x, y)``
corner coordinate; neighbour links store keys, not objects, so the whole
arena can be dropped at once after contours have been drained from it.

Corner ``(x, y)`` is the top-left corner of pixel ``(x, y)``.  A colour
change between pixel ``(x-1, y)`` and ``(x, y)`` produces a vertical edge
from corner ``(x, y)`` down to ``(x, y+1)``; a change between ``(x, y-1)``
and ``(x, y)`` produces a horizontal edge from ``(x, y)`` to ``(x+1, y)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

import numpy as np

from .cancel import CancellationToken, ProgressCallback, is_cancelled, report
from .raster import RasterClassifier

logger = logging.getLogger(__name__)

Key = tuple[int, int]

# Fixed walk preference at branch points.
DIRECTIONS = ("north", "south", "east", "west")


@dataclass(eq=False)
class BoundaryNode:
    """A pixel corner on a colour boundary."""

    x: int
    y: int
    north: Optional[Key] = None
    south: Optional[Key] = None
    east: Optional[Key] = None
    west: Optional[Key] = None

    @property
    def key(self) -> Key:
        return (self.x, self.y)

    def neighbors(self) -> Iterator[Key]:
        """Linked neighbour keys in walk preference order."""
        for direction in DIRECTIONS:
            other = getattr(self, direction)
            if other is not None:
                yield other

    @property
    def degree(self) -> int:
        return sum(1 for _ in self.neighbors())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundaryNode):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


@dataclass
class BoundaryGraph:
    """Arena of boundary nodes over a ``width`` x ``height`` pixel grid.

    Iteration follows first-reference order, which for a row-major scan is
    deterministic for a given raster.
    """

    width: int
    height: int
    _nodes: dict[Key, BoundaryNode] = field(default_factory=dict, repr=False)

    def in_range(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def node_at(self, x: int, y: int) -> Optional[BoundaryNode]:
        """Fetch the node at (x, y), creating it on first reference.

        Returns ``None`` outside the grid.
        """
        if not self.in_range(x, y):
            return None
        key = (x, y)
        node = self._nodes.get(key)
        if node is None:
            node = BoundaryNode(x, y)
            self._nodes[key] = node
        return node

    def get(self, key: Key) -> Optional[BoundaryNode]:
        return self._nodes.get(key)

    def keys(self) -> list[Key]:
        return list(self._nodes)

    def link_south(self, x: int, y: int) -> None:
        """Link (x, y) to (x, y+1) if both corners lie on the grid."""
        if not (self.in_range(x, y) and self.in_range(x, y + 1)):
            return
        upper = self.node_at(x, y)
        lower = self.node_at(x, y + 1)
        upper.south = lower.key
        lower.north = upper.key

    def link_east(self, x: int, y: int) -> None:
        """Link (x, y) to (x+1, y) if both corners lie on the grid."""
        if not (self.in_range(x, y) and self.in_range(x + 1, y)):
            return
        left = self.node_at(x, y)
        right = self.node_at(x + 1, y)
        left.east = right.key
        right.west = left.key

    def edges(self) -> set[frozenset[Key]]:
        """All boundary edges as unordered key pairs."""
        result: set[frozenset[Key]] = set()
        for node in self._nodes.values():
            for other in node.neighbors():
                result.add(frozenset((node.key, other)))
        return result

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[BoundaryNode]:
        return iter(self._nodes.values())

    def __contains__(self, key: object) -> bool:
        return key in self._nodes


def _mismatch_masks(raster: RasterClassifier) -> tuple[np.ndarray, np.ndarray]:
    """Boolean ``(H, W)`` masks of west and north colour changes.

    Column 0 of the west mask and row 0 of the north mask are always
    ``False``.  Rasters without a ``codes`` array are sampled through
    ``color()``.
    """
    codes = getattr(raster, "codes", None)
    if codes is None:
        codes = np.array(
            [[raster.color(x, y) for x in range(raster.width)] for y in range(raster.height)],
            dtype=np.int64,
        ).reshape(raster.height, raster.width)
    west = np.zeros(codes.shape, dtype=bool)
    north = np.zeros(codes.shape, dtype=bool)
    west[:, 1:] = codes[:, 1:] != codes[:, :-1]
    north[1:, :] = codes[1:, :] != codes[:-1, :]
    return west, north


def build_boundary_graph(
    raster: RasterClassifier,
    cancel: Optional[CancellationToken] = None,
    progress: Optional[ProgressCallback] = None,
) -> BoundaryGraph:
    """Scan *raster* row-major and link every colour-changing pixel corner.

    Column 0 and row 0 are never compared against the outside of the
    raster, so the raster border itself is not a boundary.  Cancellation is
    checked after every row; the graph built so far is returned.
    """
    width, height = raster.width, raster.height
    graph = BoundaryGraph(width=width, height=height)
    west, north = _mismatch_masks(raster)

    for y in range(height):
        # west before north at each pixel keeps first-reference order
        for x in np.flatnonzero(west[y] | north[y]).tolist():
            if west[y, x]:
                graph.link_south(x, y)
            if north[y, x]:
                graph.link_east(x, y)

        report(progress, (y + 1) / height)
        if is_cancelled(cancel):
            logger.info("Boundary scan cancelled after row %d of %d", y + 1, height)
            return graph

    logger.info("%d boundary nodes", len(graph))
    return graph
