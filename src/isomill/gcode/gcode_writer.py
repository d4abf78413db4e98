"""Low-level G-code line formatting helpers."""

from __future__ import annotations

from typing import Optional

from ..core.toolpath.base import MotionRecord, MoveType


def fmt(value: float, decimals: int = 4) -> str:
    """Format a float for G-code, stripping trailing zeros."""
    text = f"{value:.{decimals}f}".rstrip("0").rstrip(".")
    # avoid "-0" after rounding
    return "0" if text == "-0" else text


def _axis_words(
    x: Optional[float],
    y: Optional[float],
    z: Optional[float],
) -> list[str]:
    parts = []
    if x is not None:
        parts.append(f"X{fmt(x)}")
    if y is not None:
        parts.append(f"Y{fmt(y)}")
    if z is not None:
        parts.append(f"Z{fmt(z)}")
    return parts


def rapid(
    x: Optional[float] = None,
    y: Optional[float] = None,
    z: Optional[float] = None,
) -> str:
    """G0 rapid traverse."""
    return " ".join(["G0"] + _axis_words(x, y, z))


def linear(
    x: Optional[float] = None,
    y: Optional[float] = None,
    z: Optional[float] = None,
    f: Optional[float] = None,
) -> str:
    """G1 linear interpolation."""
    parts = ["G1"] + _axis_words(x, y, z)
    if f is not None:
        parts.append(f"F{fmt(f, 1)}")
    return " ".join(parts)


def motion(record: MotionRecord) -> str:
    """Render one motion record."""
    if record.move_type in (MoveType.RAPID, MoveType.RETRACT):
        return rapid(record.x, record.y, record.z)
    return linear(record.x, record.y, record.z, record.feed_rate)


def comment(text: str) -> str:
    """Wrap *text* in a parenthetical comment."""
    # nested parens end the comment early
    cleaned = text.replace("(", "").replace(")", "")
    return f"({cleaned})"
