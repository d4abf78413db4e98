"""Toolpath ordering and serialization package."""

from .base import MotionRecord, MoveType, Stroke, ToolpathProgram
from .ordering import greedy_order
from .serializer import ToolpathSerializer

__all__ = [
    "MotionRecord",
    "MoveType",
    "Stroke",
    "ToolpathProgram",
    "ToolpathSerializer",
    "greedy_order",
]
