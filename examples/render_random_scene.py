#!/usr/bin/env python3
"""Render the random showcase scene.

Builds the random sphere field, renders it on a pool of parallel workers and
writes the result as a plain-text PPM (or, for other extensions, with Pillow).

Usage:
    python -m examples.render_random_scene [options]

Options:
    --width WIDTH       Image width in pixels (default: 800)
    --height HEIGHT     Image height in pixels (default: 300)
    --samples SAMPLES   Number of samples per pixel (default: 100)
    --workers WORKERS   Number of parallel workers (default: 10)
    --seed SEED         Seed for scene layout and sampling (default: random)
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --output OUTPUT     Output file path (default: img.ppm)
    --quiet             Only log warnings and errors

Example:
    python -m examples.render_random_scene --width 400 --height 150 --samples 20 --seed 1
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from src.spheretrace.config import RenderSettings, init_backend
from src.spheretrace.errors import SpheretraceError

logger = logging.getLogger("render_random_scene")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    defaults = RenderSettings()
    parser = argparse.ArgumentParser(
        description="Render the random showcase scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=defaults.width,
        help=f"Image width in pixels (default: {defaults.width})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=defaults.height,
        help=f"Image height in pixels (default: {defaults.height})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=defaults.samples_per_pixel,
        help=f"Number of samples per pixel (default: {defaults.samples_per_pixel})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=defaults.workers,
        help=f"Number of parallel workers (default: {defaults.workers})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for scene layout and sampling (default: random)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="img.ppm",
        help="Output file path (default: img.ppm)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    return parser.parse_args()


def render_random_scene(settings: RenderSettings, output_path: str = "img.ppm") -> Path:
    """Render the random scene and save it to file.

    Args:
        settings: Validated render settings.
        output_path: Output file path; ``.ppm`` writes P3, anything else PNG.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.spheretrace.core.renderer import render
    from src.spheretrace.preview.export import save_png, write_ppm
    from src.spheretrace.scene.showcase import create_random_scene

    world, camera = create_random_scene(seed=settings.seed, aspect_ratio=settings.aspect_ratio)
    buffer = render(
        settings.width,
        settings.height,
        settings.workers,
        settings.samples_per_pixel,
        world,
        camera,
        seed=settings.seed,
    )

    output_file = Path(output_path)
    if output_file.suffix.lower() == ".ppm":
        write_ppm(output_file, buffer, settings.width, settings.height)
    else:
        save_png(output_file, buffer, settings.width, settings.height)

    logger.info("Saved to: %s", output_file.absolute())
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = RenderSettings(
        width=args.width,
        height=args.height,
        workers=args.workers,
        samples_per_pixel=args.samples,
        seed=args.seed,
    )

    try:
        settings.validate()
        init_backend(args.arch)
        render_random_scene(settings, args.output)
        return 0
    except SpheretraceError as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
