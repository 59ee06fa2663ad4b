"""Camera module for view and ray generation.

Components:
    orbit: Look-at camera that orbits its center and zooms along Z

Camera responsibilities:
    - Build the (right, up', forward) basis from eye, center and up
    - Map camera-space directions to world space
    - Generate one primary ray per pixel, pixel (0, 0) at the top-left
"""

from .orbit import (
    FOV,
    MAX_ZOOM,
    MIN_ZOOM,
    OrbitCamera,
    basis_change_field,
    get_camera_eye,
    get_camera_info,
    get_primary_ray,
    setup_camera,
)

__all__ = [
    "OrbitCamera",
    "FOV",
    "MAX_ZOOM",
    "MIN_ZOOM",
    "setup_camera",
    "get_primary_ray",
    "get_camera_eye",
    "basis_change_field",
    "get_camera_info",
]
