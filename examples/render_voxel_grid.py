#!/usr/bin/env python3
"""Render the voxel grid scene to a PNG file.

This script renders a single frame of the default grass platform scene
without opening a window. Optional camera orbit arguments allow rendering
the scene from other viewpoints.

Usage:
    python -m examples.render_voxel_grid [options]

Options:
    --width WIDTH           Image width in pixels (default: 800)
    --height HEIGHT         Image height in pixels (default: 600)
    --output OUTPUT         Output file path (default: voxel_grid.png)
    --top-texture PATH      Image for the top faces (default: solid green)
    --side-texture PATH     Image for the side faces (default: solid dark green)
    --yaw RADIANS           Orbit the camera by this yaw before rendering
    --pitch RADIANS         Orbit the camera by this pitch before rendering
    --legacy-pixel-mapping  Trace through pixel corners instead of centers
    --quiet                 Suppress progress output

Example:
    python -m examples.render_voxel_grid --width 400 --height 300 --pitch 0.4
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import taichi as ti  # noqa: E402


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the voxel grid scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=800,
        help="Image width in pixels (default: 800)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=600,
        help="Image height in pixels (default: 600)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="voxel_grid.png",
        help="Output file path (default: voxel_grid.png)",
    )
    parser.add_argument(
        "--top-texture",
        type=str,
        default=None,
        help="Image for the top faces (default: solid green)",
    )
    parser.add_argument(
        "--side-texture",
        type=str,
        default=None,
        help="Image for the side faces (default: solid dark green)",
    )
    parser.add_argument(
        "--yaw",
        type=float,
        default=0.0,
        help="Orbit the camera by this yaw in radians (default: 0)",
    )
    parser.add_argument(
        "--pitch",
        type=float,
        default=0.0,
        help="Orbit the camera by this pitch in radians (default: 0)",
    )
    parser.add_argument(
        "--legacy-pixel-mapping",
        action="store_true",
        help="Trace through pixel corners instead of pixel centers",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_voxel_grid(
    width: int = 800,
    height: int = 600,
    output_path: str = "voxel_grid.png",
    top_texture: str | None = None,
    side_texture: str | None = None,
    yaw: float = 0.0,
    pitch: float = 0.0,
    legacy_pixel_mapping: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the voxel grid scene and save to file.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.voxeltracer.camera.orbit import setup_camera
    from src.voxeltracer.core.renderer import Renderer
    from src.voxeltracer.preview.export import save_png
    from src.voxeltracer.preview.framebuffer import Framebuffer
    from src.voxeltracer.scene.light import setup_light
    from src.voxeltracer.scene.voxel_grid import VoxelGridParams, create_voxel_grid_scene

    if not quiet:
        print(f"Creating voxel grid scene ({width}x{height})...")

    params = VoxelGridParams(top_texture_path=top_texture, side_texture_path=side_texture)
    scene, camera, light = create_voxel_grid_scene(params)
    if yaw or pitch:
        camera.orbit(yaw, pitch)
    setup_camera(camera)
    setup_light(light)

    if not quiet:
        print(f"Scene: {scene.get_box_count()} boxes, {scene.get_texture_count()} textures")

    renderer = Renderer(width, height, legacy_pixel_mapping=legacy_pixel_mapping)
    framebuffer = Framebuffer(width, height)

    start_time = time.time()
    renderer.render_into(framebuffer)
    render_time = time.time() - start_time

    output_file = Path(output_path)
    save_png(framebuffer, output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Render time (including kernel compilation): {render_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_voxel_grid(
            width=args.width,
            height=args.height,
            output_path=args.output,
            top_texture=args.top_texture,
            side_texture=args.side_texture,
            yaw=args.yaw,
            pitch=args.pitch,
            legacy_pixel_mapping=args.legacy_pixel_mapping,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
