"""Orbit camera for interactive viewing and primary ray generation.

The camera looks from `eye` toward `center` with an approximate `up` vector.
It can orbit on the sphere around `center` (yaw around the world Y axis,
pitch toward the poles) and zoom along the Z axis.

The camera builds an orthonormal basis from the view parameters:
- forward: points from eye toward center
- right: forward x up
- up': right x forward

Camera-space directions are mapped to world space with

    basis_change(v) = v.x * right + v.y * up' - v.z * forward

so the camera looks down its local -Z axis.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> import math
    >>> from src.voxeltracer.camera.orbit import OrbitCamera, setup_camera, get_primary_ray
    >>>
    >>> camera = OrbitCamera(eye=(0.0, 0.0, 6.5))
    >>> camera.orbit(math.pi / 50, 0.0)
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_primary_ray(0, 0, 800, 600, 0.5)
"""


import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from src.voxeltracer.core.ray import Ray, make_ray, vec3

# Vertical field of view in radians
FOV = math.pi / 3.0
SCREEN_SCALE = math.tan(FOV / 2.0)

# Allowed range of eye.z when zooming
MAX_ZOOM = 1.0
MIN_ZOOM = 10.0

# Pitch stays this far away from the poles to keep the basis well defined
PITCH_MARGIN = 0.1


def _normalize(v: np.ndarray) -> np.ndarray:
    length = np.linalg.norm(v)
    if length == 0.0:
        raise ValueError("Cannot normalize a zero-length vector")
    return v / length


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class OrbitCamera:
    """An orbiting look-at camera.

    Attributes:
        eye: Camera position in world space (x, y, z).
        center: Point the camera looks at and orbits around (x, y, z).
        up: Approximate up direction (typically (0, 1, 0)).
    """

    eye: tuple[float, float, float]
    center: tuple[float, float, float] = (0.0, 0.0, 0.0)
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)

    def basis(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Compute the camera basis.

        Returns:
            A tuple (right, up', forward) of unit float32 vectors.

        Raises:
            ValueError: If eye equals center or the view is parallel to up.
        """
        eye = np.array(self.eye, dtype=np.float32)
        center = np.array(self.center, dtype=np.float32)
        up = np.array(self.up, dtype=np.float32)

        forward = _normalize(center - eye)
        right = _normalize(np.cross(forward, up))
        true_up = np.cross(right, forward)
        return right, true_up, forward

    def basis_change(self, v: Sequence[float]) -> tuple[float, float, float]:
        """Map a camera-space direction into world space."""
        right, true_up, forward = self.basis()
        world = v[0] * right + v[1] * true_up - v[2] * forward
        return (float(world[0]), float(world[1]), float(world[2]))

    def orbit(self, delta_yaw: float, delta_pitch: float) -> None:
        """Rotate the eye around the center.

        Yaw turns around the world Y axis and wraps modulo 2*pi. Pitch is
        clamped to (-pi/2 + 0.1, pi/2 - 0.1). The distance to the center is
        preserved.

        Args:
            delta_yaw: Yaw change in radians.
            delta_pitch: Pitch change in radians. Positive pitch moves the
                eye downward.
        """
        eye = np.array(self.eye, dtype=np.float64)
        center = np.array(self.center, dtype=np.float64)
        radius_vector = eye - center
        radius = float(np.linalg.norm(radius_vector))

        current_yaw = math.atan2(radius_vector[2], radius_vector[0])
        radius_xz = math.hypot(radius_vector[0], radius_vector[2])
        current_pitch = math.atan2(-radius_vector[1], radius_xz)

        new_yaw = (current_yaw + delta_yaw) % (2.0 * math.pi)
        pitch_limit = math.pi / 2.0 - PITCH_MARGIN
        new_pitch = min(max(current_pitch + delta_pitch, -pitch_limit), pitch_limit)

        new_eye = center + radius * np.array(
            [
                math.cos(new_yaw) * math.cos(new_pitch),
                -math.sin(new_pitch),
                math.sin(new_yaw) * math.cos(new_pitch),
            ]
        )
        self.eye = (float(new_eye[0]), float(new_eye[1]), float(new_eye[2]))

    def zoom(self, delta: float) -> None:
        """Move the eye along Z, keeping eye.z within [MAX_ZOOM, MIN_ZOOM].

        Negative deltas move closer (zoom in) and stop at MAX_ZOOM, positive
        deltas move away and stop at MIN_ZOOM.
        """
        x, y, z = self.eye
        z += delta
        if delta < 0.0:
            z = max(z, MAX_ZOOM)
        else:
            z = min(z, MIN_ZOOM)
        self.eye = (x, y, z)


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: OrbitCamera) -> None:
    """Upload the camera position and basis.

    Must be called before rendering and again whenever the camera moves.

    Args:
        camera: The camera to upload.
    """
    right, true_up, forward = camera.basis()
    _camera_eye[None] = list(camera.eye)
    _camera_right[None] = right.tolist()
    _camera_up[None] = true_up.tolist()
    _camera_forward[None] = forward.tolist()


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def basis_change_field(v: vec3) -> vec3:
    """Map a camera-space direction into world space using the uploaded basis."""
    return v.x * _camera_right[None] + v.y * _camera_up[None] - v.z * _camera_forward[None]


@ti.func
def get_camera_eye() -> vec3:
    """Get the camera position in world space."""
    return _camera_eye[None]


@ti.func
def get_primary_ray(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    pixel_offset: ti.f32,
) -> Ray:
    """Generate the primary ray through pixel (x, y).

    Pixel (0, 0) is the top-left corner of the image. The pixel position
    is mapped to screen space with

        sx = (2 * (x + offset) / width - 1) * aspect * tan(FOV / 2)
        sy = (1 - 2 * (y + offset) / height) * tan(FOV / 2)

    An offset of 0.5 samples pixel centers; 0.0 samples the top-left
    pixel corner.

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        pixel_offset: Sub-pixel offset added to both coordinates.

    Returns:
        A Ray from the camera eye with a normalized world-space direction.
    """
    w = ti.cast(width, ti.f32)
    h = ti.cast(height, ti.f32)
    aspect = w / h
    scale = SCREEN_SCALE

    screen_x = (2.0 * (ti.cast(x, ti.f32) + pixel_offset) / w - 1.0) * aspect * scale
    screen_y = (1.0 - 2.0 * (ti.cast(y, ti.f32) + pixel_offset) / h) * scale

    camera_dir = tm.normalize(vec3(screen_x, screen_y, -1.0))
    return make_ray(get_camera_eye(), basis_change_field(camera_dir))


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with eye, right, up and forward.
    """
    info = {}
    for name, value in (
        ("eye", _camera_eye),
        ("right", _camera_right),
        ("up", _camera_up),
        ("forward", _camera_forward),
    ):
        vec = value[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
