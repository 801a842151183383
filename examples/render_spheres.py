#!/usr/bin/env python3
"""Render the default sphere scene.

Builds the ground-plus-three-spheres scene (or loads a scene from a JSON
file), renders it scanline by scanline and writes the result as plain-text
PPM to stdout, or to a file whose extension selects PPM or PNG.

Progress goes to stderr so the image stream on stdout stays clean.

Usage:
    python -m examples.render_spheres [options] > image.ppm

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --aspect-ratio RATIO    Width / height (default: 16/9)
    --samples SAMPLES       Samples per pixel (default: 100)
    --max-depth DEPTH       Maximum bounces per path (default: 50)
    --output OUTPUT         "-" for stdout, or a .ppm/.png path (default: -)
    --scene SCENE           JSON scene file instead of the default scene
    --seed SEED             Random seed for reproducible renders
    --arch {cpu,gpu}        Taichi backend (default: cpu)
    --quiet                 Suppress progress output

Example:
    python -m examples.render_spheres --width 200 --samples 20 --output spheres.png
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import TextIO

import taichi as ti

from src.spheretrace.core.config import RenderSettings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene of spheres with a path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=16.0 / 9.0,
        help="Image aspect ratio, width / height (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum number of bounces per path (default: 50)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help='Output path, or "-" for PPM on stdout (default: -)',
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file to render instead of the default scene",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (default: Taichi's default)",
    )
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> RenderSettings:
    """Build validated RenderSettings from parsed arguments.

    Raises:
        ValueError: If an argument is out of range.
    """
    settings = RenderSettings(
        image_width=args.width,
        aspect_ratio=args.aspect_ratio,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        seed=args.seed,
        arch=args.arch,
    )
    settings.validate()
    return settings


def init_taichi(settings: RenderSettings, quiet: bool = False) -> None:
    """Initialize Taichi with the requested backend, falling back to CPU."""
    init_kwargs = {}
    if settings.seed is not None:
        init_kwargs["random_seed"] = settings.seed

    if settings.arch == "gpu":
        try:
            ti.init(arch=ti.gpu, **init_kwargs)
            if not quiet:
                print("Using GPU backend", file=sys.stderr)
            return
        except Exception:
            if not quiet:
                print("GPU backend unavailable, falling back to CPU", file=sys.stderr)

    ti.init(arch=ti.cpu, **init_kwargs)
    if not quiet:
        print("Using CPU backend", file=sys.stderr)


def render_spheres(
    settings: RenderSettings,
    output_path: str = "-",
    scene_path: str | None = None,
    quiet: bool = False,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> None:
    """Render a scene and write the image.

    Taichi must already be initialized.

    Args:
        settings: Image size and sampling settings.
        output_path: "-" to write PPM to stdout, otherwise a file path whose
            extension selects PPM or PNG.
        scene_path: Optional JSON scene file. The default scene is used when
            None.
        quiet: If True, suppress progress output.
        stdout: Stream for PPM output (default: sys.stdout).
        stderr: Stream for progress output (default: sys.stderr).
    """
    # Lazy imports to allow Taichi initialization first
    from src.spheretrace.camera.pinhole import PinholeCamera, setup_camera
    from src.spheretrace.core.renderer import Renderer
    from src.spheretrace.scene.default_scene import create_default_scene
    from src.spheretrace.scene.world import World

    stdout = sys.stdout if stdout is None else stdout
    stderr = sys.stderr if stderr is None else stderr

    if scene_path is None:
        world, camera = create_default_scene(aspect_ratio=settings.aspect_ratio)
    else:
        world = World()
        world.load_json(scene_path)
        camera = PinholeCamera(aspect_ratio=settings.aspect_ratio)

    setup_camera(camera)
    renderer = Renderer.from_settings(settings)

    if not quiet:
        print(
            f"Rendering {world.get_sphere_count()} spheres at "
            f"{renderer.width}x{renderer.height}, {renderer.samples_per_pixel} spp",
            file=stderr,
        )

    start_time = time.time()

    def progress_callback(remaining: int, height: int) -> None:
        print(f"\rScanlines remaining: {remaining} ", end="", file=stderr, flush=True)

    renderer.render(callback=None if quiet else progress_callback)

    if output_path == "-":
        renderer.write_ppm(stdout)
        stdout.flush()
    else:
        renderer.save_image(output_path)

    if not quiet:
        print(f"\nDone. ({time.time() - start_time:.2f}s)", file=stderr)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        settings = settings_from_args(args)
        init_taichi(settings, quiet=args.quiet)
        render_spheres(
            settings,
            output_path=args.output,
            scene_path=args.scene,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
