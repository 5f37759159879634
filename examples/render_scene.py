#!/usr/bin/env python3
"""Render one of the reference scenes to a PNG file.

Usage:
    python -m examples.render_scene [options]

Options:
    --scene NAME          spheres | triangles (default: spheres)
    --obj PATH            Load an OBJ mesh into the scene as well
    --width WIDTH         Image width in pixels (default: 640)
    --height HEIGHT       Image height in pixels (default: 480)
    --bounces N           Maximum specular bounces (default: 1)
    --mode MODE           observed_area | radiance | brdf | combined
    --no-shadows          Disable shadow rays
    --no-reflections      Disable mirror bounces
    --all-modes           Write one image per lighting mode
    --threads N           CPU worker threads (default: all cores)
    --debug               Taichi debug mode (bounds-checked field access)
    --show                Show the result in a Matplotlib window
    --output OUTPUT       Output file path (default: render.png)
    --verbose             Log scene construction details

Example:
    python -m examples.render_scene --scene triangles --bounces 2 --output tri.png
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

logger = logging.getLogger("render_scene")

MODE_NAMES = ("observed_area", "radiance", "brdf", "combined")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a reference scene with the Whitted ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scene", choices=("spheres", "triangles"), default="spheres")
    parser.add_argument("--obj", type=Path, default=None, help="Extra OBJ mesh to load")
    parser.add_argument("--width", type=int, default=640, help="Image width (default: 640)")
    parser.add_argument("--height", type=int, default=480, help="Image height (default: 480)")
    parser.add_argument("--bounces", type=int, default=1, help="Max specular bounces (default: 1)")
    parser.add_argument("--mode", choices=MODE_NAMES, default="combined")
    parser.add_argument("--no-shadows", action="store_true", help="Disable shadow rays")
    parser.add_argument("--no-reflections", action="store_true", help="Disable mirror bounces")
    parser.add_argument("--all-modes", action="store_true", help="Write one image per mode")
    parser.add_argument("--threads", type=int, default=None, help="CPU worker threads")
    parser.add_argument("--debug", action="store_true", help="Enable Taichi debug mode")
    parser.add_argument("--show", action="store_true", help="Show the result with Matplotlib")
    parser.add_argument("--output", type=Path, default=Path("render.png"))
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    return parser.parse_args(argv)


def render_scene(args: argparse.Namespace) -> list[Path]:
    """Build the scene, render it and save the image(s).

    Returns:
        Paths of the images written.
    """
    # Lazy imports so Taichi is initialized before fields are declared
    from src.whitted.core.renderer import Renderer
    from src.whitted.core.settings import LightingMode, RenderSettings
    from src.whitted.scene.demo_scenes import SCENES
    from src.whitted.scene.mesh_loader import load_obj

    scene = SCENES[args.scene]()
    if args.obj is not None:
        material = scene.add_lambert_material((0.8, 0.8, 0.8))
        scene.add_triangle_mesh(load_obj(args.obj, material))

    settings = RenderSettings(
        bounce_count=args.bounces,
        shadows_enabled=not args.no_shadows,
        reflections_enabled=not args.no_reflections,
        lighting_mode=LightingMode[args.mode.upper()],
    )
    renderer = Renderer(scene, args.width, args.height, settings)

    written: list[Path] = []
    if args.all_modes:
        for mode in LightingMode:
            renderer.settings = settings.with_lighting_mode(mode)
            renderer.render()
            path = args.output.with_name(f"{args.output.stem}_{mode.name.lower()}.png")
            written.append(renderer.save_image(path))
    else:
        renderer.render()
        written.append(renderer.save_image(args.output))

    if args.show:
        from src.whitted.preview.display import show_preview

        show_preview(renderer)

    return written


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from src.whitted.core.settings import init_runtime

    init_runtime(num_threads=args.threads, debug=args.debug)

    try:
        for path in render_scene(args):
            logger.info("Saved to: %s", path.absolute())
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
