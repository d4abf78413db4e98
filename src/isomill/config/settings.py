"""Toolpath configuration and application preferences (persisted to disk)."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path

from ..core.errors import ConfigurationError
from . import defaults


class Mode(Enum):
    """Which upstream geometry feeds the classified raster."""
    VORONOI = "voronoi"
    OUTLINE = "outline"

    @property
    def geometry_layers(self) -> frozenset[str]:
        """Model layers the raster renderer should enable for this mode."""
        if self is Mode.VORONOI:
            return frozenset({"border", "voronoi", "flat"})
        return frozenset({"flat"})


@dataclass(frozen=True)
class ToolpathConfig:
    """Coordinate and feed-rate settings for program emission."""

    mode: Mode = Mode(defaults.MODE)
    output_absolute_coordinates: bool = defaults.OUTPUT_ABSOLUTE
    output_metric_coordinates: bool = defaults.OUTPUT_METRIC
    z_clearance: float = defaults.Z_CLEARANCE
    z_cutting_height: float = defaults.Z_CUTTING_HEIGHT
    absolute_x_start: float = defaults.ABSOLUTE_X_START
    absolute_y_start: float = defaults.ABSOLUTE_Y_START
    plunge_feedrate: float = defaults.PLUNGE_FEEDRATE
    milling_feedrate: float = defaults.MILLING_FEEDRATE

    def validate(self) -> None:
        """Raise :class:`ConfigurationError` for unusable settings."""
        if not isinstance(self.mode, Mode):
            raise ConfigurationError(f"Unknown mode {self.mode!r}")
        if self.z_clearance <= 0:
            raise ConfigurationError(
                f"z_clearance must be positive, got {self.z_clearance}"
            )
        if self.plunge_feedrate <= 0:
            raise ConfigurationError(
                f"plunge_feedrate must be positive, got {self.plunge_feedrate}"
            )
        if self.milling_feedrate <= 0:
            raise ConfigurationError(
                f"milling_feedrate must be positive, got {self.milling_feedrate}"
            )

    def to_dict(self) -> dict:
        d = asdict(self)
        d["mode"] = self.mode.value
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "ToolpathConfig":
        d = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        if "mode" in d:
            try:
                d["mode"] = Mode(d["mode"])
            except ValueError as exc:
                raise ConfigurationError(f"Unknown mode {d['mode']!r}") from exc
        return cls(**d)


@dataclass
class AppSettings:
    """User preferences, serialized to ~/.isomill/settings.json."""

    toolpath: ToolpathConfig = field(default_factory=ToolpathConfig)

    @staticmethod
    def _path() -> Path:
        return Path.home() / ".isomill" / "settings.json"

    def save(self) -> None:
        p = self._path()
        p.parent.mkdir(parents=True, exist_ok=True)
        data = {"toolpath": self.toolpath.to_dict()}
        p.write_text(json.dumps(data, indent=2))

    @classmethod
    def load(cls) -> "AppSettings":
        p = cls._path()
        if not p.exists():
            return cls()
        data = json.loads(p.read_text())
        if "toolpath" not in data:
            return cls()
        return cls(toolpath=ToolpathConfig.from_dict(data["toolpath"]))
