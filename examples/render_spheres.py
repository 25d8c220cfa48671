#!/usr/bin/env python3
"""Render a sphere scene to a plain-text PPM image.

The default scene is a diffuse sphere on a large ground sphere between two
mirror spheres. A JSON scene description can be given instead.

Usage:
    python -m examples.render_spheres [options] > spheres.ppm

Options:
    --width WIDTH       Image width in pixels (default: 200)
    --height HEIGHT     Image height in pixels (default: 100)
    --samples SAMPLES   Number of samples per pixel (default: 100)
    --scene FILE        JSON scene description (default: built-in scene)
    --output FILE       PPM output path (default: stdout)
    --png FILE          Also save a PNG copy
    --seed SEED         Random seed (default: 0)
    --batch-size SIZE   Samples per progress update (default: 10)
    --preview           Show the result in a Matplotlib window
    --quiet             Suppress progress output

Example:
    python -m examples.render_spheres --samples 50 --output spheres.ppm
"""

from __future__ import annotations

import argparse
import contextlib
import os
import sys
import time
from pathlib import Path

# stdout carries the PPM stream; keep Taichi's import banner off it
os.environ.setdefault("ENABLE_TAICHI_HEADER_PRINT", "0")

import taichi as ti  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene to a plain-text PPM image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=200,
        help="Image width in pixels (default: 200)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=100,
        help="Image height in pixels (default: 100)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene description (default: built-in scene)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="PPM output path (default: stdout)",
    )
    parser.add_argument(
        "--png",
        type=str,
        default=None,
        help="Also save a PNG copy to this path",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed (default: 0)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the result in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def log(message: str, *, quiet: bool, end: str = "\n") -> None:
    """Print a status line to stderr; stdout may carry the image."""
    if not quiet:
        print(message, end=end, file=sys.stderr, flush=True)


def render_spheres(
    width: int = 200,
    height: int = 100,
    num_samples: int = 100,
    scene_path: str | None = None,
    output_path: str | None = None,
    png_path: str | None = None,
    batch_size: int = 10,
    preview: bool = False,
    quiet: bool = False,
) -> None:
    """Build the scene, render it and write the outputs.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_samples: Number of samples per pixel.
        scene_path: Optional JSON scene description.
        output_path: PPM output path; None writes to stdout.
        png_path: Optional PNG output path.
        batch_size: Number of samples to render between progress updates.
        preview: Show a Matplotlib preview after rendering.
        quiet: If True, suppress progress output.
    """
    # Lazy imports so Taichi is initialized before any fields are created
    from src.pathtracer.camera.pinhole import Camera, setup_camera
    from src.pathtracer.core.progressive import ProgressiveRenderer
    from src.pathtracer.preview.export import write_ppm
    from src.pathtracer.scene.default_scene import create_default_scene
    from src.pathtracer.scene.manager import load_scene_file

    if scene_path is None:
        scene, camera = create_default_scene()
        log("Using built-in sphere scene", quiet=quiet)
    else:
        scene = load_scene_file(scene_path)
        camera = Camera()
        log(f"Loaded scene from {scene_path}", quiet=quiet)

    log(
        f"{scene.get_sphere_count()} spheres, {scene.get_material_count()} materials, "
        f"{width}x{height}",
        quiet=quiet,
    )
    setup_camera(camera)

    renderer = ProgressiveRenderer(width, height)

    log(f"Rendering {num_samples} samples per pixel...", quiet=quiet)
    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        elapsed = time.time() - start_time
        progress_pct = (current / target) * 100 if target > 0 else 0
        samples_per_sec = current / elapsed if elapsed > 0 else 0
        log(
            f"\r  Progress: {current}/{target} samples "
            f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
            quiet=quiet,
            end="",
        )

    renderer.render(
        num_samples=num_samples,
        batch_size=batch_size,
        callback=progress_callback,
    )
    log("", quiet=quiet)

    pixels = renderer.get_image_uint8()
    if output_path is None:
        write_ppm(pixels, sys.stdout)
        sys.stdout.flush()
    else:
        renderer.save_ppm(output_path)
        log(f"Saved to: {Path(output_path).absolute()}", quiet=quiet)

    if png_path is not None:
        renderer.save_png(png_path)
        log(f"Saved PNG to: {Path(png_path).absolute()}", quiet=quiet)

    log(f"Total time: {time.time() - start_time:.2f}s", quiet=quiet)

    if preview:
        from src.pathtracer.preview.display import show_preview

        show_preview(renderer)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # One CPU thread keeps a single sequential random stream per run.
    # ti.init announces the backend on stdout, which may carry the image.
    with contextlib.redirect_stdout(sys.stderr):
        ti.init(arch=ti.cpu, cpu_max_num_threads=1, random_seed=args.seed)

    try:
        render_spheres(
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            scene_path=args.scene,
            output_path=args.output,
            png_path=args.png,
            batch_size=args.batch_size,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
