"""G-code post-processor for isolation-milling programs.

Output layout::

    %
    (title)
    G17 G20|G21 G40 G49 G80 G90|G91 G94 G64   one word per line
    S<rpm> M3                                 if a spindle speed is set
    ... motion body ...
    M5
    G90                                       restores absolute after G91
    M30
    %
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TextIO

from ..core.toolpath.base import ToolpathProgram
from .gcode_writer import comment, fmt, motion


@dataclass
class PostProcessorConfig:
    """Settings for the program wrapper around the motion body."""

    title: str = "isomill isolation toolpath"
    spindle_rpm: Optional[int] = None
    path_blend_tolerance: Optional[float] = None  # G64 P value


class GCodePostProcessor:
    """Render a :class:`ToolpathProgram` as G-code text."""

    def __init__(self, config: Optional[PostProcessorConfig] = None):
        self.config = config or PostProcessorConfig()

    def preamble(self, program: ToolpathProgram) -> list[str]:
        cfg = self.config
        units = program.units
        lines = [
            "%",
            comment(cfg.title),
            comment(
                f"units: {units.label()}, "
                f"{'absolute' if program.absolute else 'relative'} coordinates"
            ),
            "G17",
            units.gcode_modal,
            "G40",
            "G49",
            "G80",
            "G90" if program.absolute else "G91",
            "G94",
        ]
        if cfg.path_blend_tolerance is not None:
            lines.append(f"G64 P{fmt(cfg.path_blend_tolerance)}")
        else:
            lines.append("G64")
        if cfg.spindle_rpm:
            lines.append(f"S{cfg.spindle_rpm} M3")
        return lines

    def body(self, program: ToolpathProgram) -> list[str]:
        return [motion(r) for r in program.records]

    def postamble(self, program: ToolpathProgram) -> list[str]:
        lines = []
        if program.cancelled:
            lines.append(comment("program incomplete: generation was cancelled"))
        lines.append("M5")
        if not program.absolute:
            lines.append("G90")
        lines += ["M30", "%"]
        return lines

    def get_lines(self, program: ToolpathProgram) -> list[str]:
        return self.preamble(program) + self.body(program) + self.postamble(program)

    def write(self, program: ToolpathProgram, stream: TextIO) -> None:
        """Write the program to *stream*; I/O errors propagate."""
        for line in self.get_lines(program):
            stream.write(line + "\n")
