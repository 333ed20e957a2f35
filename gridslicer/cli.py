"""
Command line entry point.

    gridslicer analyze SHEET.png -o out/
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from gridslicer.analysis import AnalysisResult, create_analyzer
from gridslicer.config import settings
from gridslicer.export import write_bundle

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gridslicer",
        description="Slice a pixel-art UI sprite sheet into nine-slice components.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log stage details")
    commands = parser.add_subparsers(dest="command", required=True)

    analyze = commands.add_parser("analyze", help="analyze a sheet and write the export bundle")
    analyze.add_argument("image", type=Path, help="sprite sheet image")
    analyze.add_argument("-o", "--output", type=Path, default=Path("gridslicer-output"),
                         help="directory for images/, components.json and components.css")
    analyze.add_argument("--tolerance", type=int, default=settings.detection.tolerance,
                         help="per-channel difference allowed in a divider (default: %(default)s)")
    analyze.add_argument("--min-gap-x", type=int, default=settings.detection.min_gap_x,
                         help="minimum distance between vertical slices (default: %(default)s)")
    analyze.add_argument("--min-gap-y", type=int, default=settings.detection.min_gap_y,
                         help="minimum distance between horizontal slices (default: %(default)s)")
    analyze.add_argument("--aggressiveness", type=int, default=settings.cleanup.aggressiveness,
                         help="background removal aggressiveness, 0-100 (default: %(default)s)")
    analyze.add_argument("--workers", type=int, default=settings.max_workers,
                         help="cell worker threads (default: CPU count)")
    analyze.add_argument("--no-archive", action="store_true", help="skip components.tar")
    analyze.add_argument("--trace", action="store_true",
                         help="print analysis events as JSON lines on stderr")
    return parser


def trace_event(event: str, payload: dict) -> None:
    """Observer that writes each event as one JSON line."""
    print(json.dumps({"event": event, **payload}, default=str), file=sys.stderr, flush=True)


def print_summary(result: AnalysisResult, written: dict) -> None:
    grid = result.grid
    print(f"grid: {grid.rows} rows x {grid.columns} columns "
          f"(slices y={grid.horizontal_slices} x={grid.vertical_slices})")
    for component in result.components:
        shapes = ", ".join(s.type.value for s in component.shapes) or "empty"
        nine = component.nine_slice.to_css_slice() if component.nine_slice else "-"
        print(f"  {component.name:<16} {component.source.width}x{component.source.height:<6} "
              f"nine-slice {nine:<12} {shapes}")
    print(f"{len(result.line_components)} grid line segments, {result.total_shapes} shapes, "
          f"{len(written)} files written")


def run_analyze(args: argparse.Namespace) -> int:
    if not args.image.exists():
        logger.error(f"Image not found: {args.image}")
        return 1

    analyzer = create_analyzer(
        observer=trace_event if args.trace else None,
        tolerance=args.tolerance,
        min_gap_x=args.min_gap_x,
        min_gap_y=args.min_gap_y,
        aggressiveness=args.aggressiveness,
        max_workers=args.workers,
    )

    try:
        result = analyzer.analyze(args.image)
    except (OSError, ValueError) as e:
        logger.error(f"Could not analyze {args.image}: {e}")
        return 1

    written = write_bundle(result, args.output, archive_name=None if args.no_archive else "components.tar")
    print_summary(result, written)
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if (args.verbose or settings.debug) else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "analyze":
        return run_analyze(args)
    return 2


if __name__ == "__main__":
    sys.exit(main())
