"""Command line interface for pixelcompare."""
from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import Iterable, Optional

from .compare import compare_images
from .config import batch_size_from_env, load_env, load_settings, log_level_from_env
from .errors import ComparisonCancelled, InputImageError, InvalidRegionError, InvalidSettingsError
from .metadata import compare_metadata, describe_file
from .presets import ColorScheme, ComparisonSettings, Region, SizingPolicy, get_preset, parse_color
from .progress import CancelToken, log_progress
from .report import write_json_report
from .utils.image_io import load_image, save_diff_map

logger = logging.getLogger("pixelcompare")

EXIT_INPUT_ERROR = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixelcompare",
        description="Pixel level similarity of two images within a percentage region.",
    )
    parser.add_argument("image1", nargs="?", help="Path to the first image")
    parser.add_argument("image2", nargs="?", help="Path to the second image")
    parser.add_argument("--settings", help="JSON settings file (defaults to $PIXELCOMPARE_SETTINGS)")
    parser.add_argument("--preset", help="Tolerance preset (exact|strict|balanced|loose)")
    parser.add_argument("--threshold", type=int, help="Allowed summed RGB delta in percent of 765 (0-100)")
    parser.add_argument("--diff-color", help="Diff map color for differing pixels (#RRGGBB)")
    parser.add_argument("--match-color", help="Diff map color for matching pixels (#RRGGBB)")
    parser.add_argument(
        "--fit-scale",
        action="store_true",
        default=None,
        help="Scale smaller images up to the comparison canvas",
    )
    parser.add_argument("--region", help="Comparison region as x1,y1,x2,y2 percentages")
    parser.add_argument("--batch-size", type=int, help="Pixels processed between progress updates")
    parser.add_argument("--diff-map", help="Write the diff map PNG to this path")
    parser.add_argument("--json", help="Write a JSON report to this path")
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    return parser


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from . import __version__

        print(__version__)
        return 0
    if not args.image1 or not args.image2:
        parser.error("two image paths are required")

    load_env()
    logging.basicConfig(level=log_level_from_env(), format="%(levelname)s %(name)s: %(message)s")

    try:
        settings = _resolve_settings(args)
        batch_size = args.batch_size if args.batch_size is not None else batch_size_from_env()
    except (InvalidSettingsError, KeyError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    logger.debug("Resolved settings: %s", settings.to_dict())

    try:
        image1 = load_image(args.image1)
        image2 = load_image(args.image2)
    except InputImageError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    token = CancelToken()
    previous_handler = signal.signal(signal.SIGINT, lambda *_: token.cancel())
    try:
        comparison = compare_images(
            image1,
            image2,
            settings,
            log_progress,
            token,
            batch_size=batch_size,
        )
    except ComparisonCancelled:
        print("Comparison cancelled.", file=sys.stderr)
        return EXIT_CANCELLED
    except (InvalidRegionError, InvalidSettingsError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    metadata = compare_metadata(describe_file(args.image1, image1), describe_file(args.image2, image2))
    result = comparison.result
    print(f"Similarity:       {result.similarity:.2f}%")
    print(f"Total pixels:     {result.total_pixels:,}")
    print(f"Matching pixels:  {result.matching_pixels:,}")
    print(f"Different pixels: {result.different_pixels:,}")
    print(f"Dimensions:       {comparison.dimensions_label}")
    print(f"Processing time:  {comparison.elapsed_ms}ms")
    for row in metadata:
        status = "same" if row.same else "differs"
        delta = f" (Δ {row.delta})" if row.delta else ""
        print(f"{row.label + ':':<17} {row.first} | {row.second} [{status}]{delta}")

    if args.diff_map:
        save_diff_map(comparison.diff_map, args.diff_map)
    if args.json:
        write_json_report(comparison, args.json, settings=settings, metadata=metadata)
    return 0


def _resolve_settings(args: argparse.Namespace) -> ComparisonSettings:
    settings = load_settings(args.settings)
    overrides = {}
    colors = ColorScheme(diff=settings.diff_color, match=settings.match_color)
    if args.preset:
        preset = get_preset(args.preset)
        overrides["threshold"] = preset.threshold
        colors = preset.colors
    colors = colors.with_overrides(
        diff=parse_color(args.diff_color),
        match=parse_color(args.match_color),
    )
    overrides.update(diff_color=colors.diff, match_color=colors.match)
    if args.threshold is not None:
        overrides["threshold"] = args.threshold
    if args.fit_scale:
        overrides["sizing"] = SizingPolicy.FIT_SCALE
    if args.region:
        overrides["region"] = Region.parse(args.region)
    return settings.copy(**overrides)


if __name__ == "__main__":
    sys.exit(main())
