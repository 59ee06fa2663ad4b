"""Preview module for output and visualization.

Components:
    framebuffer: CPU-side buffer of packed 0x00RRGGBB pixels
    export: PNG export via Pillow
    interactive: Taichi GGUI viewer window, camera controls and frame loop

Example:
    >>> from src.voxeltracer.preview import Framebuffer, save_png
    >>> fb = Framebuffer(800, 600)
    >>> renderer.render_into(fb)
    >>> save_png(fb, "voxels.png")
"""

from src.voxeltracer.preview.export import (
    framebuffer_to_uint8,
    packed_to_uint8,
    save_png,
    timestamped_filename,
)
from src.voxeltracer.preview.framebuffer import Framebuffer
from src.voxeltracer.preview.interactive import (
    CameraController,
    InteractivePreview,
    Key,
    ViewerControls,
    run_viewer,
)

__all__ = [
    "Framebuffer",
    "save_png",
    "framebuffer_to_uint8",
    "packed_to_uint8",
    "timestamped_filename",
    "InteractivePreview",
    "Key",
    "ViewerControls",
    "CameraController",
    "run_viewer",
]
