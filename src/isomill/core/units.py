"""Output unit system.

Model space is always inches; the serializer scales emitted coordinates
into the selected output unit.
"""

from enum import Enum

MM_PER_INCH = 25.4


class Units(Enum):
    INCH = "inch"
    MM = "mm"

    @classmethod
    def for_metric(cls, metric: bool) -> "Units":
        return cls.MM if metric else cls.INCH

    @property
    def scale(self) -> float:
        """Multiplier from model inches to this unit."""
        return MM_PER_INCH if self is Units.MM else 1.0

    def from_inch(self, value: float) -> float:
        return value * self.scale

    def label(self) -> str:
        return "in" if self is Units.INCH else "mm"

    @property
    def gcode_modal(self) -> str:
        """G-code modal group 6 word."""
        return "G20" if self is Units.INCH else "G21"
