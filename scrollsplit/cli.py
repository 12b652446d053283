"""
Command line entry point.

    scrollsplit split -i long.png -o output -H 2000 -t 80
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from PIL import Image

from scrollsplit.config import settings
from scrollsplit.services.export_service import ExportError, export_segments, preview
from scrollsplit.splitting import BlankLineSplitter, SplitError
from scrollsplit.utils.file_validation import ValidationError, validate_input_file

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="scrollsplit",
        description="Split long images at blank rows",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    split = subparsers.add_parser("split", help="Split an image into shorter segments")
    split.add_argument("-i", "--input", required=True, type=Path, help="Input image file")
    split.add_argument("-o", "--output", type=Path, default=None, help="Output directory")
    split.add_argument(
        "-H", "--height", type=int, default=None,
        help=f"Preferred segment height in px (default: {settings.splitting.desired_height})",
    )
    split.add_argument(
        "-t", "--tolerance", type=int, default=None,
        help=f"Blank row luminance threshold, 0-255 (default: {settings.splitting.tolerance})",
    )
    split.add_argument(
        "-b", "--blank-rows", type=int, default=None,
        help=f"Consecutive blank rows required at a cut (default: {settings.splitting.blank_run_length})",
    )
    split.add_argument(
        "--format", choices=["png", "jpeg", "webp"], default=None,
        help=f"Output image format (default: {settings.output.image_format})",
    )
    split.add_argument(
        "--max-pixels", type=int, default=None,
        help=f"Largest image Pillow will decode, in pixels (default: {settings.output.max_image_pixels})",
    )
    split.add_argument("--open", action="store_true", help="Open the segments after splitting")
    split.add_argument("--dry-run", action="store_true", help="Print the planned cuts without writing files")
    split.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return parser


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging."""
    level = logging.DEBUG if (verbose or settings.debug) else getattr(logging, settings.log_level)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def configure_pillow(max_image_pixels: Optional[int]) -> None:
    """Set Pillow's decompression bomb limit; None disables the check."""
    Image.MAX_IMAGE_PIXELS = max_image_pixels


def run_split(args: argparse.Namespace) -> int:
    """Execute the ``split`` command."""
    overrides = {
        "desired_height": args.height,
        "tolerance": args.tolerance,
        "blank_run_length": args.blank_rows,
    }
    splitting = settings.splitting.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )
    output_dir = args.output or settings.output.output_dir
    image_format = args.format or settings.output.image_format

    configure_pillow(args.max_pixels or settings.output.max_image_pixels)

    validate_input_file(args.input, max_size_mb=settings.output.max_input_size_mb)

    splitter = BlankLineSplitter(splitting.to_split_config())

    if args.dry_run:
        plan = splitter.plan(args.input)
        for segment, cut_kind in zip(plan.segments, plan.cut_kinds):
            print(f"{segment.index + 1}\t{segment.start_row}\t{segment.end_row}\t{segment.height}\t{cut_kind}")
        return 0

    result = splitter.split(args.input)
    paths = export_segments(result, output_dir, args.input.stem, image_format)

    for path in paths:
        print(path)

    if args.open or settings.output.open_after_split:
        preview(paths)

    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Run the command line interface."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        if args.command == "split":
            return run_split(args)
    except (SplitError, ValidationError, ExportError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    parser.error(f"Unknown command: {args.command}")


if __name__ == "__main__":
    sys.exit(main())
