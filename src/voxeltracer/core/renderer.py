"""Frame renderer dispatching one primary ray per pixel.

This module owns the packed pixel buffer and the rendering kernel. Each
kernel launch traces every pixel of the active render target once in a
data-parallel loop; Taichi partitions the pixels over its CPU threads or GPU
threads and every pixel slot is written exactly once.

Pixels are stored as packed 0x00RRGGBB words in row-major (y, x) order with
the top-left pixel first, the layout the preview window and exporter expect.

Pixel mapping:
    By default rays pass through pixel centers (offset 0.5). Passing
    legacy_pixel_mapping=True traces through the top-left pixel corners
    instead (offset 0.0), which reproduces the integer-coordinate mapping.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.voxeltracer.core.renderer import (
    ...     setup_render_target, render_frame, get_pixel_buffer
    ... )
    >>> from src.voxeltracer.camera.orbit import setup_camera
    >>> from src.voxeltracer.scene.light import setup_light
    >>> from src.voxeltracer.scene.voxel_grid import create_voxel_grid_scene
    >>>
    >>> scene, camera, light = create_voxel_grid_scene()
    >>> setup_camera(camera)
    >>> setup_light(light)
    >>> setup_render_target(800, 600)
    >>> render_frame()
    >>> pixels = get_pixel_buffer()  # uint32 array of length 800 * 600
"""


from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti
import taichi.math as tm

from src.voxeltracer.camera.orbit import get_primary_ray
from src.voxeltracer.core.color import Color, color_pack
from src.voxeltracer.core.ray import vec3
from src.voxeltracer.core.shader import cast_ray

if TYPE_CHECKING:
    import numpy.typing as npt

    from src.voxeltracer.preview.framebuffer import Framebuffer

# Sub-pixel offsets for the two pixel mappings
PIXEL_CENTER_OFFSET = 0.5
LEGACY_PIXEL_OFFSET = 0.0

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Packed 0x00RRGGBB pixels indexed [row, column]
_pixel_buffer = ti.field(dtype=ti.u32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target.

    Sets the active image dimensions and clears the pixel buffer. The buffer
    is preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT so that changing
    the size does not recompile the kernel.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the pixel buffer to black."""
    _pixel_buffer.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32, pixel_offset: ti.f32):
    """Trace one primary ray through every pixel.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        pixel_offset: Sub-pixel offset of the sample point.
    """
    for x, y in ti.ndrange(width, height):
        ray = get_primary_ray(x, y, width, height, pixel_offset)
        color = cast_ray(ray.origin, ray.direction, 0)
        _pixel_buffer[y, x] = ti.cast(color_pack(color), ti.u32)


_single_ray_result = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3):
    """Shade a single ray, used for testing and debugging."""
    for _ in range(1):
        color = cast_ray(origin, tm.normalize(direction), 0)
        _single_ray_result[None] = color_pack(color)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_frame(legacy_pixel_mapping: bool = False) -> None:
    """Render the active render target once.

    Args:
        legacy_pixel_mapping: Trace through pixel corners instead of centers.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    offset = LEGACY_PIXEL_OFFSET if legacy_pixel_mapping else PIXEL_CENTER_OFFSET
    _render_frame(width, height, offset)


def get_pixel_buffer() -> "npt.NDArray[np.uint32]":
    """Get the rendered pixels.

    Returns:
        A flat uint32 array of length width * height holding packed
        0x00RRGGBB words in row-major order, top-left pixel first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full = _pixel_buffer.to_numpy()
    return np.ascontiguousarray(full[:height, :width], dtype=np.uint32).reshape(-1)


def render_to_framebuffer(framebuffer: "Framebuffer", legacy_pixel_mapping: bool = False) -> None:
    """Render a frame and commit it to a framebuffer.

    Args:
        framebuffer: Destination; its size must match the render target.
        legacy_pixel_mapping: Trace through pixel corners instead of centers.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the framebuffer size differs from the render target.
    """
    render_frame(legacy_pixel_mapping)
    framebuffer.set_buffer(get_pixel_buffer())


def trace_ray(origin: Sequence[float], direction: Sequence[float]) -> Color:
    """Shade a single ray against the current scene.

    This is a Python-callable function for testing. For production rendering,
    use render_frame() which processes all pixels in parallel.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z); normalized before tracing.

    Returns:
        The color seen along the ray.
    """
    _trace_single_ray(vec3(*origin), vec3(*direction))
    return Color.from_packed(int(_single_ray_result[None]))


class Renderer:
    """Renderer bound to a fixed image size.

    Wraps the module-level render target so callers can hold a renderer
    object instead of tracking dimensions themselves.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        legacy_pixel_mapping: Trace through pixel corners instead of centers.

    Example:
        >>> renderer = Renderer(800, 600)
        >>> pixels = renderer.render()
    """

    def __init__(self, width: int, height: int, legacy_pixel_mapping: bool = False) -> None:
        """Initialize the renderer and its render target.

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum.
        """
        setup_render_target(width, height)
        self.width = width
        self.height = height
        self.legacy_pixel_mapping = legacy_pixel_mapping

    def _activate(self) -> None:
        if get_image_dimensions() != (self.width, self.height):
            setup_render_target(self.width, self.height)

    def render(self) -> "npt.NDArray[np.uint32]":
        """Render a frame and return the packed pixel buffer."""
        self._activate()
        render_frame(self.legacy_pixel_mapping)
        return get_pixel_buffer()

    def render_into(self, framebuffer: "Framebuffer") -> None:
        """Render a frame into a framebuffer of the same size."""
        self._activate()
        render_to_framebuffer(framebuffer, self.legacy_pixel_mapping)
