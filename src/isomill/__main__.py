"""CLI entry point: ``python -m isomill board.png --dpi 1000 -o board.ngc``"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .config.settings import AppSettings, Mode, ToolpathConfig
from .core.errors import ConfigurationError
from .core.frame import PixelFrame
from .core.job import IsolationJob
from .core.raster import load_raster
from .gcode.postprocessor import GCodePostProcessor, PostProcessorConfig
from .gcode.validate import MachineEnvelope, validate_program


def _build_parser(defaults: ToolpathConfig) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="isomill",
        description="Generate isolation-milling G-code from a classified PCB raster.",
    )
    p.add_argument("input", type=Path,
                   help="Classified raster (.npy colour codes or an image)")
    p.add_argument("-o", "--output", type=Path, default=None,
                   help="Output G-code file (default: <input>.ngc)")
    p.add_argument("--dpi", type=float, required=True,
                   help="Raster resolution in pixels per inch")
    p.add_argument("--origin", type=float, nargs=2, default=(0.0, 0.0),
                   metavar=("X", "Y"),
                   help="Model position of the raster's lower-left corner (inches)")
    p.add_argument("--mode", choices=[m.value for m in Mode],
                   default=defaults.mode.value,
                   help=f"Raster geometry mode (default: {defaults.mode.value})")

    # Coordinate output
    p.add_argument("--absolute", action=argparse.BooleanOptionalAction,
                   default=defaults.output_absolute_coordinates,
                   help="Emit absolute (G90) instead of relative (G91) coordinates")
    p.add_argument("--metric", action=argparse.BooleanOptionalAction,
                   default=defaults.output_metric_coordinates,
                   help="Emit millimetres (G21) instead of inches (G20)")
    p.add_argument("--x-start", type=float, default=defaults.absolute_x_start,
                   help="Absolute X of the model origin (inches)")
    p.add_argument("--y-start", type=float, default=defaults.absolute_y_start,
                   help="Absolute Y of the model origin (inches)")

    # Heights and feeds
    p.add_argument("--z-clearance", type=float, default=defaults.z_clearance,
                   help=f"Lift above cutting height for travel (default: {defaults.z_clearance})")
    p.add_argument("--z-cutting-height", type=float, default=defaults.z_cutting_height,
                   help="Absolute Z of the cutting height (inches)")
    p.add_argument("--plunge-feed", type=float, default=defaults.plunge_feedrate,
                   help=f"Plunge feed rate (default: {defaults.plunge_feedrate})")
    p.add_argument("--milling-feed", type=float, default=defaults.milling_feedrate,
                   help=f"Milling feed rate (default: {defaults.milling_feedrate})")
    p.add_argument("--rpm", type=int, default=None,
                   help="Spindle speed; omit to leave the spindle to the operator")

    # Validation
    p.add_argument("--travel", type=float, nargs=3, default=None,
                   metavar=("X", "Y", "Z"),
                   help="Check the program against this machine travel (inches)")

    p.add_argument("--save-settings", action="store_true",
                   help="Remember these toolpath settings as future defaults")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Log pipeline statistics")
    return p


def main(argv: list[str] | None = None) -> int:
    try:
        settings = AppSettings.load()
    except ValueError as exc:
        print(f"Error: unreadable settings file: {exc}", file=sys.stderr)
        return 1
    args = _build_parser(settings.toolpath).parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    output: Path = args.output or args.input.with_suffix(".ngc")

    config = replace(
        settings.toolpath,
        mode=Mode(args.mode),
        output_absolute_coordinates=args.absolute,
        output_metric_coordinates=args.metric,
        z_clearance=args.z_clearance,
        z_cutting_height=args.z_cutting_height,
        absolute_x_start=args.x_start,
        absolute_y_start=args.y_start,
        plunge_feedrate=args.plunge_feed,
        milling_feedrate=args.milling_feed,
    )

    try:
        config.validate()
        print(f"Loading {args.input} ...")
        raster = load_raster(args.input)
        frame = PixelFrame(
            resolution=args.dpi,
            raster_height=raster.height,
            origin_x=args.origin[0],
            origin_y=args.origin[1],
        )
    except (ConfigurationError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(f"  Raster: {raster.width} x {raster.height} px at {args.dpi:g} dpi")

    if args.save_settings:
        settings.toolpath = config
        settings.save()

    last_stage = [None]

    def progress(stage: str, fraction: float) -> None:
        if stage != last_stage[0]:
            last_stage[0] = stage
            print(f"  {stage} ...")

    print("Computing toolpaths ...")
    result = IsolationJob(raster=raster, frame=frame, config=config).run(progress=progress)
    program = result.program
    print(f"  {result.graph_size} nodes, {len(result.contours)} contours, "
          f"{len(result.paths)} paths, {len(program.records)} moves")

    if args.travel is not None:
        envelope = MachineEnvelope(
            x_min=0.0, x_max=args.travel[0],
            y_min=0.0, y_max=args.travel[1],
            z_min=-args.travel[2], z_max=args.travel[2],
        )
        check = validate_program(program, envelope)
        if check.has_errors:
            print("VALIDATION ERRORS:", file=sys.stderr)
            for issue in check.issues:
                if issue.severity == "error":
                    print(f"  ERROR: {issue.message}", file=sys.stderr)
            return 1
        for issue in check.issues:
            print(f"  Warning: {issue.message}")

    post = GCodePostProcessor(PostProcessorConfig(
        title=f"isomill {config.mode.value} toolpath for {args.input.name}",
        spindle_rpm=args.rpm,
    ))
    with output.open("w") as stream:
        post.write(program, stream)
    print(f"Wrote {output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
