"""Command line entry point: analyze an image and write one reconstruction.

Usage::

    python main.py photo.jpg --style mosaic --block-size 12 --output mosaic.png
    python main.py photo.jpg --style circles --circles 20000 --seed 7
    python main.py photo.jpg --style palette
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from control import ReconstructionController, load_defaults
from reconstruct import (
    AnalysisResult,
    ArraySurface,
    DecodeError,
    HostLoop,
    ReconstructionStyle,
    analyze,
    load_image,
)

logger = logging.getLogger("reconstruct.cli")


def _setup_logging(debug: bool = False) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Analyze an image and render a progressive reconstruction.")
    parser.add_argument("image", type=Path, help="Input image file")
    parser.add_argument(
        "--style",
        choices=["mosaic", "circles", "palette"],
        help="Reconstruction style (default from settings, else mosaic)",
    )
    parser.add_argument("--block-size", type=int, help="Mosaic cell size in pixels")
    parser.add_argument("--circles", type=int, dest="num_circles", help="Number of circles to draw")
    parser.add_argument("--min-radius", type=float, help="Radius for the darkest samples")
    parser.add_argument("--max-radius", type=float, help="Radius for the brightest samples")
    parser.add_argument("--seed", type=int, help="Random seed for circle placement")
    parser.add_argument("--settings", type=Path, help="JSON file with default parameters")
    parser.add_argument("--output", "-o", type=Path, help="Output PNG (default: <image>_<style>.png)")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser


def _print_analysis(analysis: AnalysisResult) -> None:
    props = analysis.properties
    print(f"Size: {props.width}x{props.height} ({props.pixel_count} pixels)")
    if not analysis.palette:
        print("Palette: (empty)")
        return
    print("Palette:")
    for item in analysis.palette:
        print(f"  {item.hex}  {item.count}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.debug)

    defaults = load_defaults(args.settings)
    overrides = {
        key: value
        for key, value in {
            "style": args.style,
            "block_size": args.block_size,
            "num_circles": args.num_circles,
            "min_radius": args.min_radius,
            "max_radius": args.max_radius,
            "seed": args.seed,
        }.items()
        if value is not None
    }
    try:
        defaults = replace(defaults, **overrides)
        style = ReconstructionStyle.parse(defaults.style)
        for each in ReconstructionStyle:
            defaults.parameters_for(each)
    except ValueError as exc:
        logger.error("Invalid parameters: %s", exc)
        return 2

    try:
        buffer = load_image(args.image)
    except (DecodeError, FileNotFoundError) as exc:
        logger.error("Could not load %s: %s", args.image, exc)
        return 1

    analysis = analyze(buffer)
    _print_analysis(analysis)

    host = HostLoop()
    controller = ReconstructionController(
        host,
        acquire_surface=ArraySurface,
        defaults=defaults,
        on_progress=lambda value: logger.debug("progress %.0f%%", value * 100),
    )
    controller.load(buffer, analysis)
    handle = controller.set_style(style)
    ticks = host.run_until_idle()
    logger.info("%s finished in %d steps", style.value, ticks)

    if handle is None or not handle.finished:
        logger.error("Reconstruction did not complete")
        return 1
    output = args.output or args.image.with_name(f"{args.image.stem}_{style.value}.png")
    controller.surface.to_image().save(output)
    print(f"Wrote {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
