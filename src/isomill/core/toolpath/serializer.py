"""Toolpath serialization: simplified loops → ordered motion records.

The serializer keeps a full-precision model-space cursor.  Its z is
measured from the cutting surface: 0 is cutting height and
``z_clearance`` is travel height.  Emitted words are derived from the
cursor per move:

* absolute: ``X = x + absolute_x_start``, ``Y = y + absolute_y_start``,
  ``Z = z + z_cutting_height``
* relative: the change in cursor since the previous move

and then scaled to millimetres in metric mode.  Because relative words are
computed from the exact cursor rather than from rounded output, they sum
back to the true position.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ...config.settings import ToolpathConfig
from ..cancel import CancellationToken, ProgressCallback, is_cancelled, report
from ..geometry import Point2
from ..simplify import SimplifiedPath
from ..units import Units
from .base import (
    STROKE_Z_BASELINE,
    MotionRecord,
    MoveType,
    Point3,
    SerializerContext,
    Stroke,
    ToolpathProgram,
)
from .ordering import greedy_order

logger = logging.getLogger(__name__)


class ToolpathSerializer:
    """Turn simplified paths into a :class:`ToolpathProgram`.

    Parameters
    ----------
    config:
        Coordinate and feed settings; validated on construction.
    start:
        Model-space XY of the tool when the program starts (machine origin
        for relative output).
    """

    def __init__(self, config: ToolpathConfig, start: Point2 = (0.0, 0.0)):
        config.validate()
        self.config = config
        self.start = start
        self.units = Units.for_metric(config.output_metric_coordinates)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def serialize(
        self,
        paths: Sequence[SimplifiedPath],
        cancel: Optional[CancellationToken] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ToolpathProgram:
        """Emit every path once, nearest start vertex first.

        Cancellation is checked after each path; the partial program is
        returned with ``cancelled`` set.
        """
        start: Point3 = (self.start[0], self.start[1], 0.0)
        ctx = SerializerContext(cursor=start)
        order = greedy_order([p.start for p in paths], self.start)

        # lift off the surface before the first traverse
        self._move(ctx, MoveType.RAPID, z=self.config.z_clearance)

        visited: list[int] = []
        cancelled = False
        for n, idx in enumerate(order):
            self._emit_path(ctx, paths[idx])
            visited.append(idx)
            report(progress, (n + 1) / len(order))
            if is_cancelled(cancel):
                logger.info("Serialization cancelled after %d of %d paths", n + 1, len(order))
                cancelled = True
                break

        logger.debug("%d motion records for %d paths", len(ctx.records), len(visited))
        return ToolpathProgram(
            config=self.config,
            records=tuple(ctx.records),
            strokes=tuple(ctx.strokes),
            visit_order=tuple(visited),
            start_position=start,
            end_position=ctx.cursor,
            cancelled=cancelled,
        )

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------

    def _emit_path(self, ctx: SerializerContext, path: SimplifiedPath) -> None:
        cfg = self.config
        x0, y0 = path.start

        self._move(ctx, MoveType.RAPID, x=x0, y=y0)
        self._move(ctx, MoveType.PLUNGE, z=0.0, feed=cfg.plunge_feedrate)

        for x, y in path.points[1:]:
            self._move(ctx, MoveType.CUT, x=x, y=y, feed=cfg.milling_feedrate)
        # close the loop
        self._move(ctx, MoveType.CUT, x=x0, y=y0, feed=cfg.milling_feedrate)

        self._move(ctx, MoveType.RETRACT, z=cfg.z_clearance)

    def _move(
        self,
        ctx: SerializerContext,
        move_type: MoveType,
        x: Optional[float] = None,
        y: Optional[float] = None,
        z: Optional[float] = None,
        feed: Optional[float] = None,
    ) -> None:
        """Append one record and its stroke, then advance the cursor."""
        prev = ctx.cursor
        target: Point3 = (
            prev[0] if x is None else x,
            prev[1] if y is None else y,
            prev[2] if z is None else z,
        )

        words = self._words(prev, target, (x is not None, y is not None, z is not None))

        feed_word = None
        if feed is not None and feed != ctx.current_feedrate:
            feed_word = feed
            ctx.current_feedrate = feed

        ctx.records.append(MotionRecord(move_type, *words, feed_rate=feed_word, target=target))
        ctx.strokes.append(Stroke(move_type, _stroke_point(prev), _stroke_point(target)))
        ctx.cursor = target

    def _words(
        self,
        prev: Point3,
        target: Point3,
        commanded: tuple[bool, bool, bool],
    ) -> list[Optional[float]]:
        cfg = self.config
        if cfg.output_absolute_coordinates:
            offsets = (cfg.absolute_x_start, cfg.absolute_y_start, cfg.z_cutting_height)
            values = [t + o for t, o in zip(target, offsets)]
        else:
            values = [t - p for t, p in zip(target, prev)]
        return [
            self.units.from_inch(v) if on else None
            for v, on in zip(values, commanded)
        ]


def _stroke_point(p: Point3) -> Point3:
    # strokes are drawn flat; heights live in the motion records
    return (p[0], p[1], STROKE_Z_BASELINE)
