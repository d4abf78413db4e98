"""Job orchestrator: raster → graph → contours → paths → program.

The IsolationJob class is the top-level entry point for the CLI.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..config.settings import ToolpathConfig
from .cancel import CancellationToken, is_cancelled
from .contour import PathContour, extract_contours
from .frame import PixelFrame
from .geometry import Point2
from .graph import build_boundary_graph
from .raster import RasterClassifier
from .simplify import SimplifiedPath, simplify_contours
from .toolpath.base import ToolpathProgram
from .toolpath.serializer import ToolpathSerializer

logger = logging.getLogger(__name__)

StageProgress = Callable[[str, float], None]

STAGES = ("boundaries", "contours", "simplify", "toolpath")


@dataclass
class JobResult:
    """Everything the pipeline produced, possibly cut short."""

    graph_size: int = 0
    contours: list[PathContour] = field(default_factory=list)
    paths: list[SimplifiedPath] = field(default_factory=list)
    program: Optional[ToolpathProgram] = None
    cancelled: bool = False
    # upstream render layers the raster is expected to contain
    layers: frozenset[str] = frozenset()


@dataclass
class IsolationJob:
    """A complete isolation-milling job for one classified raster."""

    raster: RasterClassifier
    frame: PixelFrame
    config: ToolpathConfig = field(default_factory=ToolpathConfig)
    start: Point2 = (0.0, 0.0)
    tolerance: Optional[float] = None

    def run(
        self,
        cancel: Optional[CancellationToken] = None,
        progress: Optional[StageProgress] = None,
    ) -> JobResult:
        """Run all four stages in order.

        Raises
        ------
        ConfigurationError:
            If the configuration is unusable; nothing has been computed.
        """
        self.config.validate()
        serializer = ToolpathSerializer(self.config, start=self.start)
        layers = self.config.mode.geometry_layers
        logger.info(
            "generating %s toolpaths from layers: %s",
            self.config.mode.value, ", ".join(sorted(layers)),
        )

        def stage(name: str):
            if progress is None:
                return None
            return lambda fraction: progress(name, fraction)

        result = JobResult(layers=layers)

        graph = build_boundary_graph(self.raster, cancel, stage("boundaries"))
        result.graph_size = len(graph)
        if is_cancelled(cancel):
            result.cancelled = True
            return result

        result.contours = extract_contours(graph, cancel, stage("contours"))
        del graph
        if is_cancelled(cancel):
            result.cancelled = True
            return result

        result.paths = simplify_contours(
            result.contours, self.frame, self.tolerance, cancel, stage("simplify")
        )
        if is_cancelled(cancel):
            result.cancelled = True
            return result

        result.program = serializer.serialize(result.paths, cancel, stage("toolpath"))
        result.cancelled = result.program.cancelled
        return result
