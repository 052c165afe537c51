#!/usr/bin/env python3
"""Render one of the preset sphere scenes.

This script builds a preset scene, renders it with the thin-lens camera and
writes the result as PNG or PPM.

Usage:
    python -m examples.render_random_scene [options]

Options:
    --scene {random,showcase}   Scene preset (default: random)
    --width WIDTH               Image width in pixels (default: preset's)
    --samples SAMPLES           Samples per pixel (default: preset's)
    --depth DEPTH               Maximum bounces per path (default: preset's)
    --seed SEED                 Seed for scene layout and sampling
    --output OUTPUT             Output file path (default: render.png)
    --rows-per-batch ROWS       Rows per kernel launch / progress update (default: 16)
    --arch {cpu,gpu}            Taichi backend (default: cpu)
    --threads N                 CPU worker threads (default: all cores)
    --show                      Display the result with Matplotlib
    --verbose                   Enable debug logging

Example:
    python -m examples.render_random_scene --width 300 --samples 20 --seed 7
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path

import taichi as ti
from tqdm import tqdm

logger = logging.getLogger("render_random_scene")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=("random", "showcase"),
        default="random",
        help="Scene preset (default: random)",
    )
    parser.add_argument("--width", type=int, default=None, help="Image width in pixels")
    parser.add_argument("--samples", type=int, default=None, help="Samples per pixel")
    parser.add_argument("--depth", type=int, default=None, help="Maximum bounces per path")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for scene layout and sampling (default: random)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="render.png",
        help="Output file path, .png or .ppm (default: render.png)",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=16,
        help="Rows per kernel launch and progress update (default: 16)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="CPU worker threads (default: all cores)",
    )
    parser.add_argument("--show", action="store_true", help="Display the result")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def render_scene(
    scene_name: str = "random",
    width: int | None = None,
    samples: int | None = None,
    depth: int | None = None,
    seed: int | None = None,
    output_path: str = "render.png",
    rows_per_batch: int = 16,
    show: bool = False,
) -> Path:
    """Render a preset scene and save it to file.

    Args:
        scene_name: "random" or "showcase".
        width: Image width override.
        samples: Samples per pixel override.
        depth: Maximum depth override.
        seed: Seed for the scene layout and the sample streams.
        output_path: Output file path (.png or .ppm).
        rows_per_batch: Rows rendered per kernel launch.
        show: If True, display the result after saving.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from raytracer.camera import Camera
    from raytracer.preview import save_image, show_image
    from raytracer.scene import create_material_showcase_scene, create_random_scene

    if scene_name == "random":
        scene, config = create_random_scene(seed=seed)
    else:
        scene, config = create_material_showcase_scene()

    overrides = {}
    if width is not None:
        overrides["image_width"] = width
    if samples is not None:
        overrides["samples_per_pixel"] = samples
    if depth is not None:
        overrides["max_depth"] = depth
    config = dataclasses.replace(config, **overrides)

    camera = Camera(config)
    logger.info("Scene %r: %d spheres, %r", scene_name, len(scene), camera)

    with tqdm(total=camera.image_height, desc="Rendering", unit="row") as progress:

        def progress_callback(rows_done: int, total_rows: int) -> None:
            progress.update(rows_done - progress.n)

        pixels = camera.render(
            scene,
            seed=seed,
            rows_per_batch=rows_per_batch,
            callback=progress_callback,
        )

    output_file = Path(output_path)
    save_image(pixels, output_file)
    logger.info("Saved to: %s", output_file.absolute())

    if show:
        show_image(pixels, title=f"{scene_name} scene")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    init_kwargs = {"arch": ti.gpu if args.arch == "gpu" else ti.cpu}
    if args.threads is not None:
        init_kwargs["cpu_max_num_threads"] = args.threads
    ti.init(**init_kwargs)

    try:
        render_scene(
            scene_name=args.scene,
            width=args.width,
            samples=args.samples,
            depth=args.depth,
            seed=args.seed,
            output_path=args.output,
            rows_per_batch=args.rows_per_batch,
            show=args.show,
        )
        return 0
    except (ValueError, TypeError, RuntimeError) as e:
        logger.error("Render failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
