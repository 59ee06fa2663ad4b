#!/usr/bin/env python3
"""Interactive voxel grid viewer with orbit and zoom controls.

This script opens a window showing the grass platform scene, re-rendered
every frame from the current camera position.

Usage:
    python -m examples.interactive_voxel_grid [--top-texture PATH] [--side-texture PATH]

Controls:
    - W / S: Zoom in / out
    - Left / Right arrows: Orbit around the platform
    - Up / Down arrows: Orbit toward the top / bottom
    - Escape: Quit
"""

from __future__ import annotations

import argparse
import platform
import sys
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import taichi as ti  # noqa: E402


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    system = platform.system()

    if system == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except Exception:
            pass

    # Try generic GPU (CUDA on Linux/Windows, Vulkan as fallback)
    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        pass

    ti.init(arch=ti.cpu)
    return "CPU"


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Interactive voxel grid viewer.")
    parser.add_argument("--width", type=int, default=800, help="Window width (default: 800)")
    parser.add_argument("--height", type=int, default=600, help="Window height (default: 600)")
    parser.add_argument("--top-texture", type=str, default=None, help="Image for top faces")
    parser.add_argument("--side-texture", type=str, default=None, help="Image for side faces")
    return parser.parse_args()


def main() -> int:
    """Main entry point for the interactive viewer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args()

    # Initialize Taichi first (before importing modules that declare fields)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from src.voxeltracer.core.renderer import Renderer
    from src.voxeltracer.preview.framebuffer import Framebuffer
    from src.voxeltracer.preview.interactive import (
        CameraController,
        InteractivePreview,
        run_viewer,
    )
    from src.voxeltracer.scene.light import setup_light
    from src.voxeltracer.scene.voxel_grid import VoxelGridParams, create_voxel_grid_scene

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive viewer.")
        print("Use examples/render_voxel_grid.py to render to a file instead.")
        return 1

    try:
        params = VoxelGridParams(
            top_texture_path=args.top_texture,
            side_texture_path=args.side_texture,
        )
        scene, camera, light = create_voxel_grid_scene(params)
        setup_light(light)
        renderer = Renderer(args.width, args.height)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Scene: {scene.get_box_count()} boxes")
    print("Controls: W/S zoom, arrow keys orbit, Escape quits")

    window = InteractivePreview(args.width, args.height)
    framebuffer = Framebuffer(args.width, args.height)
    try:
        frames = run_viewer(window, framebuffer, renderer, CameraController(camera))
        print(f"Rendered {frames} frames.")
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        window.close()
        print("Viewer window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
