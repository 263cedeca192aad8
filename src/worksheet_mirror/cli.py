"""
Command line entry point.

Usage:
    worksheet-mirror mirror analysis.txt --source-image scan.png --answer-key
    worksheet-mirror topic problems.txt --count 12 --word-percent 40 --png
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from worksheet_mirror import __version__
from worksheet_mirror.config import BuildConfig, BuildMode, OutputFormat
from worksheet_mirror.controller import BuildError, build_worksheet

logger = logging.getLogger(__name__)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    # Required
    parser.add_argument("input", type=Path, help="Producer output file (JSON or delimited text)")

    # Output
    parser.add_argument("--output-dir", "-o", type=Path, default=Path("output"),
                        help="Base output directory (default: output)")
    parser.add_argument("--title", help="Override the worksheet title")
    parser.add_argument("--png", action="store_true", help="Also write one PNG per page")
    parser.add_argument("--no-pdf", action="store_true", help="Skip the PDF")
    parser.add_argument("--scale", type=int, default=2, help="Integer render scale (default: 2)")

    # Pages
    parser.add_argument("--answer-key", action="store_true",
                        help="Add answer pages: solutions in place and a numbered answer key")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worksheet-mirror",
        description="Rebuild worksheets from layout analysis and render them to PDF/PNG.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="mode", required=True)

    mirror = subparsers.add_parser("mirror", help="Render an analysed page and its mirrored twin")
    _add_common_arguments(mirror)
    mirror.add_argument("--source-image", type=Path, help="Original page (PNG/JPEG/PDF) for diagram crops")
    mirror.add_argument("--no-original", action="store_true", help="Skip the original view")
    mirror.add_argument("--no-mirrored", action="store_true", help="Skip the mirrored view")

    topic = subparsers.add_parser("topic", help="Lay out generated problems on a two-column grid")
    _add_common_arguments(topic)
    topic.add_argument("--count", type=int, default=10, help="Number of problems (default: 10)")
    topic.add_argument("--word-percent", type=int, default=50,
                       help="Percentage of word problems, 0-100 (default: 50)")

    return parser


def _config_from_args(args: argparse.Namespace) -> BuildConfig:
    formats = []
    if not args.no_pdf:
        formats.append(OutputFormat.PDF)
    if args.png:
        formats.append(OutputFormat.PNG)

    mode = BuildMode(args.mode)
    if mode is BuildMode.MIRROR:
        return BuildConfig(
            input_path=args.input,
            mode=mode,
            source_image=args.source_image,
            title=args.title,
            include_original=not args.no_original,
            include_mirrored=not args.no_mirrored,
            include_answer_key=args.answer_key,
            output_dir=args.output_dir,
            formats=tuple(formats),
            scale=args.scale,
        )

    if not 0 <= args.word_percent <= 100:
        raise ValueError(f"--word-percent must be between 0 and 100: {args.word_percent}")
    return BuildConfig(
        input_path=args.input,
        mode=mode,
        title=args.title,
        problem_count=args.count,
        word_problem_ratio=args.word_percent / 100,
        include_answer_key=args.answer_key,
        output_dir=args.output_dir,
        formats=tuple(formats),
        scale=args.scale,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = _config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        result = build_worksheet(config)
    except BuildError as e:
        logger.error(f"Build failed: {e}")
        return 1

    print(f"Wrote {result.page_count} page(s) to {result.output_dir}")
    if result.pdf_path:
        print(f"  PDF: {result.pdf_path}")
    for png in result.png_paths:
        print(f"  PNG: {png}")
    if result.warnings:
        print(f"  {len(result.warnings)} warning(s):")
        for warning in result.warnings:
            print(f"    - {warning}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
