"""
Command line front-end for the raster toolbox.

    raster-toolbox convert  in.png out.bmp
    raster-toolbox resample in.png out.png --width 512 --method cubic
    raster-toolbox info     in.png
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..bootstrap import configure_logging
from ..models.enums import RasterFormat, ResampleMethod
from ..models.errors import RasterError
from ..models.processing_result import ProcessingResult
from ..pipeline.conversion_pipeline import convert_format, resample_raster
from ..pipeline.progress import TqdmProgress
from ..services.raster_service import RasterService

logger = logging.getLogger(__name__)

METHOD_CHOICES = ["nearest", "bilinear", "cubic"]


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="raster-toolbox",
                                description="Raster format conversion and resampling")
    p.add_argument("--log-level", default=None, help="Logging level (default: $LOG_LEVEL or INFO)")
    p.add_argument("--quiet", action="store_true", help="Hide the progress bar")
    sub = p.add_subparsers(dest="command", required=True)

    conv = sub.add_parser("convert", help="Convert a raster to another container format")
    conv.add_argument("input", help="Input raster path")
    conv.add_argument("output", help="Output raster path")
    conv.add_argument("--from", dest="input_format",
                      help="Input format (default: from the input suffix)")
    conv.add_argument("--to", dest="output_format",
                      help="Output format (default: from the output suffix)")

    res = sub.add_parser("resample", help="Change raster dimensions")
    res.add_argument("input", help="Input raster path")
    res.add_argument("output", help="Output raster path (written in the input format)")
    res.add_argument("--width", type=int, required=True, help="Target width in pixels")
    res.add_argument("--height", type=int, default=None,
                     help="Target height in pixels (default: keep aspect ratio)")
    res.add_argument("--method", choices=METHOD_CHOICES, default="bilinear",
                     help="Interpolation kernel (default: bilinear)")
    res.add_argument("--format", dest="input_format",
                     help="Input format (default: from the input suffix)")

    info = sub.add_parser("info", help="Print raster dimensions")
    info.add_argument("input", help="Input raster path")
    return p


def _resolve_format(parser: argparse.ArgumentParser, explicit: Optional[str], path: str) -> RasterFormat:
    try:
        return RasterFormat.parse(explicit) if explicit else RasterFormat.from_path(path)
    except RasterError as err:
        parser.error(str(err))


def log_result(result: ProcessingResult) -> None:
    print(f"{'=' * 60}")
    if result.success:
        print(f"✅ {result.message}")
        print(f"   📁 Output: {result.output_file_path}")
    else:
        print(f"❌ {result.message}")
        print(f"   Error: {result.error_message}")
    print(f"   ⏱  {result.elapsed_milliseconds} ms")
    print(f"{'=' * 60}")


def _run_convert(parser, args, progress, raster_service: RasterService) -> ProcessingResult:
    input_format = _resolve_format(parser, args.input_format, args.input)
    output_format = _resolve_format(parser, args.output_format, args.output)
    if input_format is output_format:
        parser.error(f"Input and output formats are both {input_format.value}; nothing to convert")
    return convert_format(args.input, input_format, args.output, output_format, progress,
                          raster_service=raster_service)


def _run_resample(parser, args, progress, raster_service: RasterService) -> ProcessingResult:
    input_format = _resolve_format(parser, args.input_format, args.input)
    width, height = args.width, args.height
    if width <= 0 or (height is not None and height <= 0):
        parser.error("--width and --height must be positive")
    if height is None:
        try:
            width, height = raster_service.fit_to_width(args.input, width)
        except RasterError as err:
            logger.error(f"Cannot keep aspect ratio: {err}")
            return ProcessingResult.create_error(str(err))
    return resample_raster(args.input, input_format, args.output, width, height,
                           ResampleMethod.parse(args.method), progress,
                           raster_service=raster_service)


def _run_info(args, raster_service: RasterService) -> int:
    try:
        width, height = raster_service.get_dimensions(args.input)
    except RasterError as err:
        print(f"❌ {err}")
        return 1
    print(f"{Path(args.input).name}: {width}x{height}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)

    raster_service = RasterService()
    if args.command == "info":
        return _run_info(args, raster_service)

    progress = TqdmProgress(desc=args.command, disable=args.quiet)
    try:
        if args.command == "convert":
            result = _run_convert(parser, args, progress, raster_service)
        else:
            result = _run_resample(parser, args, progress, raster_service)
    finally:
        progress.close()

    log_result(result)
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
