"""G-code validation and sanity checks.

Replays a serialized program in its emitted frame and checks every
commanded position against the machine travel limits before cutting.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.toolpath.base import MotionRecord, ToolpathProgram


@dataclass
class MachineEnvelope:
    """Axis travel limits of a desktop PCB mill, in inches."""

    x_min: float = 0.0
    x_max: float = 12.0
    y_min: float = 0.0
    y_max: float = 8.0
    z_min: float = -1.0
    z_max: float = 2.0
    max_feed: float = 60.0  # output units per minute


@dataclass
class ValidationIssue:
    """A single validation problem found in the program."""

    severity: str  # "error" or "warning"
    message: str
    record: Optional[MotionRecord] = None


@dataclass
class ValidationResult:
    """Result of validating a program."""

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(i.severity == "error" for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.severity == "warning" for i in self.issues)

    @property
    def is_ok(self) -> bool:
        return len(self.issues) == 0


def commanded_positions(program: ToolpathProgram) -> list[tuple[float, float, float]]:
    """Machine position after each record, in the program's output frame.

    Relative programs start from the machine origin.  Absolute programs
    start from the configured offsets at cutting height until an axis is
    first commanded.
    """
    cfg = program.config
    scale = program.units.scale
    if program.absolute:
        pos = [
            scale * (program.start_position[0] + cfg.absolute_x_start),
            scale * (program.start_position[1] + cfg.absolute_y_start),
            scale * (program.start_position[2] + cfg.z_cutting_height),
        ]
    else:
        pos = [0.0, 0.0, 0.0]

    positions = []
    for record in program.records:
        for axis, word in enumerate(record.words()):
            if word is None:
                continue
            pos[axis] = word if program.absolute else pos[axis] + word
        positions.append((pos[0], pos[1], pos[2]))
    return positions


def validate_program(
    program: ToolpathProgram,
    envelope: MachineEnvelope,
) -> ValidationResult:
    """Check *program* against *envelope* limits.

    Checks performed:
    - All XYZ positions within machine travel
    - Feed rates within machine maximum
    - Program cuts something
    """
    result = ValidationResult()
    to_units = program.units.from_inch
    limits = [
        ("X", to_units(envelope.x_min), to_units(envelope.x_max)),
        ("Y", to_units(envelope.y_min), to_units(envelope.y_max)),
        ("Z", to_units(envelope.z_min), to_units(envelope.z_max)),
    ]

    for record, pos in zip(program.records, commanded_positions(program)):
        for (axis, lo, hi), value in zip(limits, pos):
            if value < lo or value > hi:
                result.issues.append(ValidationIssue(
                    "error",
                    f"{axis}={value:.4f} outside travel [{lo:.4f}, {hi:.4f}]",
                    record,
                ))

        if record.feed_rate is not None and record.feed_rate > envelope.max_feed:
            result.issues.append(ValidationIssue(
                "warning",
                f"Feed {record.feed_rate:.1f} exceeds machine max "
                f"({envelope.max_feed:.1f})",
                record,
            ))

    if program.is_empty:
        result.issues.append(ValidationIssue(
            "warning",
            "Program contains no cutting moves",
        ))

    return result
