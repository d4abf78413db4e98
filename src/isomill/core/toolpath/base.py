"""Core toolpath data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ...config.settings import ToolpathConfig
from ..units import Units

Point3 = tuple[float, float, float]

# Z of the visualisation plane every stroke is drawn on.
STROKE_Z_BASELINE = 0.0


class MoveType(Enum):
    """Type of CNC motion."""
    RAPID = "rapid"          # G0, travel at clearance height
    PLUNGE = "plunge"        # G1 at plunge feed, straight down into material
    CUT = "cut"              # G1 at milling feed
    RETRACT = "retract"      # G0, back up to clearance

    @property
    def gcode_word(self) -> str:
        return "G0" if self in (MoveType.RAPID, MoveType.RETRACT) else "G1"


STROKE_COLORS: dict[MoveType, tuple[float, float, float]] = {
    MoveType.RAPID: (0.0, 0.0, 1.0),
    MoveType.PLUNGE: (1.0, 0.0, 0.0),
    MoveType.CUT: (0.0, 1.0, 0.0),
    MoveType.RETRACT: (1.0, 1.0, 0.0),
}


@dataclass(frozen=True)
class MotionRecord:
    """One emitted motion.

    ``x``, ``y`` and ``z`` are the words written to the program, already in
    output units and either absolute or relative; ``None`` means the axis
    is not commanded.  ``target`` is the full-precision model-space tool
    position after the move.
    """
    move_type: MoveType
    x: Optional[float] = None
    y: Optional[float] = None
    z: Optional[float] = None
    feed_rate: Optional[float] = None  # only set when the modal feed changes
    target: Point3 = (0.0, 0.0, 0.0)

    def words(self) -> tuple[Optional[float], Optional[float], Optional[float]]:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class Stroke:
    """A renderable line segment for an external toolpath viewer."""
    move_type: MoveType
    start: Point3
    end: Point3

    @property
    def color(self) -> tuple[float, float, float]:
        return STROKE_COLORS[self.move_type]


@dataclass(frozen=True)
class ToolpathProgram:
    """The serialized machine program for one board."""
    config: ToolpathConfig
    records: tuple[MotionRecord, ...] = ()
    strokes: tuple[Stroke, ...] = ()
    visit_order: tuple[int, ...] = ()
    start_position: Point3 = (0.0, 0.0, 0.0)
    end_position: Point3 = (0.0, 0.0, 0.0)
    cancelled: bool = False

    @property
    def units(self) -> Units:
        return Units.for_metric(self.config.output_metric_coordinates)

    @property
    def absolute(self) -> bool:
        return self.config.output_absolute_coordinates

    @property
    def is_empty(self) -> bool:
        return not any(r.move_type is MoveType.CUT for r in self.records)

    def count(self, move_type: MoveType) -> int:
        return sum(1 for r in self.records if r.move_type is move_type)


@dataclass
class SerializerContext:
    """Mutable emission state threaded through one serialization run."""
    cursor: Point3
    current_feedrate: Optional[float] = None
    records: list[MotionRecord] = field(default_factory=list)
    strokes: list[Stroke] = field(default_factory=list)
