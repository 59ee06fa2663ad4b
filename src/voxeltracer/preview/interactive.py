"""Interactive viewer window using Taichi GGUI.

This module provides the real-time viewer for voxel scenes:
    - InteractivePreview: a ti.ui.Window showing packed pixel buffers
    - CameraController: maps held keys to orbit and zoom camera moves
    - run_viewer: the frame loop (input, camera upload, render, present)

Key bindings:
    Escape      quit
    W / S       zoom in / out along Z
    Left/Right  orbit around the center (yaw)
    Up/Down     orbit toward the top / bottom (pitch)

Example:
    >>> from src.voxeltracer.camera.orbit import setup_camera
    >>> from src.voxeltracer.core.renderer import Renderer
    >>> from src.voxeltracer.preview.framebuffer import Framebuffer
    >>> from src.voxeltracer.preview.interactive import (
    ...     CameraController, InteractivePreview, run_viewer
    ... )
    >>> from src.voxeltracer.scene.light import setup_light
    >>> from src.voxeltracer.scene.voxel_grid import create_voxel_grid_scene
    >>>
    >>> scene, camera, light = create_voxel_grid_scene()
    >>> setup_light(light)
    >>> window = InteractivePreview(800, 600)
    >>> run_viewer(window, Framebuffer(800, 600), Renderer(800, 600), CameraController(camera))
"""

from __future__ import annotations

import math
import os
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from src.voxeltracer.camera.orbit import OrbitCamera, setup_camera
from src.voxeltracer.preview.export import packed_to_uint8

if TYPE_CHECKING:
    import numpy.typing as npt

    from src.voxeltracer.core.renderer import Renderer
    from src.voxeltracer.preview.framebuffer import Framebuffer


class Key(Enum):
    """Keys the viewer reacts to."""

    ESCAPE = "escape"
    W = "w"
    S = "s"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"


def _ggui_key(key: Key) -> str:
    """Translate a Key into the identifier ti.ui.Window.is_pressed expects."""
    return {
        Key.ESCAPE: ti.ui.ESCAPE,
        Key.W: "w",
        Key.S: "s",
        Key.LEFT: ti.ui.LEFT,
        Key.RIGHT: ti.ui.RIGHT,
        Key.UP: ti.ui.UP,
        Key.DOWN: ti.ui.DOWN,
    }[key]


class InteractivePreview:
    """Interactive preview window using Taichi GGUI.

    This class wraps ti.ui.Window to provide a simple interface for
    displaying rendered frames in real-time and polling held keys.

    Attributes:
        width: Window width in pixels.
        height: Window height in pixels.
        display_image: Taichi field storing the display image (RGB float).

    Example:
        >>> preview = InteractivePreview(800, 600)
        >>> while preview.is_open():
        ...     preview.update_with_buffer(pixels, 800, 600)
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        title: str = "Voxel Raytracer",
    ) -> None:
        """Initialize the interactive preview window.

        Args:
            width: Window width in pixels.
            height: Window height in pixels.
            title: Window title.

        Note:
            The window itself is created lazily on first use.
        """
        self.width = width
        self.height = height
        self._title = title
        self._is_initialized = False

        # Defer window creation to support headless checks
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(width, height)
        )

    def _initialize_window(self) -> None:
        """Initialize the Taichi GGUI window and canvas."""
        if self._is_initialized:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()
        self._is_initialized = True
        print(f"Window created: {self.width}x{self.height}")

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        if self._canvas is None:
            self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def is_open(self) -> bool:
        """Check if the window is still open."""
        return self.window.running

    def is_key_down(self, key: Key) -> bool:
        """Check whether a key is currently held."""
        return bool(self.window.is_pressed(_ggui_key(key)))

    def update_with_buffer(
        self,
        buffer: npt.NDArray[np.uint32],
        width: int,
        height: int,
    ) -> None:
        """Present a frame of packed pixels.

        Args:
            buffer: Flat array of width * height 0x00RRGGBB words, row-major,
                top-left pixel first.
            width: Frame width in pixels (must match the window).
            height: Frame height in pixels (must match the window).

        Raises:
            ValueError: If the frame size doesn't match the window.
        """
        if (width, height) != (self.width, self.height):
            raise ValueError(
                f"Frame size {width}x{height} doesn't match window {self.width}x{self.height}"
            )
        image = packed_to_uint8(buffer, width, height).astype(np.float32) / 255.0

        # Taichi fields use (x, y) indexing which corresponds to (width, height)
        # and have their origin at the bottom-left
        image_transposed = np.ascontiguousarray(np.transpose(np.flipud(image), (1, 0, 2)))
        self.display_image.from_numpy(image_transposed)

        self.canvas.set_image(self.display_image)
        self.window.show()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        # On macOS, display is always available if not in SSH
        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            if ssh_connection and not display:
                return False
            return True

        if display or wayland:
            return True

        if os.name == "nt":
            return True

        return False


# =============================================================================
# Camera Controls
# =============================================================================


@dataclass
class ViewerControls:
    """Tunable viewer settings.

    Attributes:
        zoom_speed: Distance eye.z moves per frame while W or S is held.
        rotation_speed: Orbit angle in radians per frame while an arrow is held.
        frame_delay: Seconds to sleep after presenting each frame.
    """

    zoom_speed: float = 0.5
    rotation_speed: float = math.pi / 50.0
    frame_delay: float = 0.016


@dataclass
class CameraController:
    """Applies key bindings to an orbit camera.

    Attributes:
        camera: The camera being controlled.
        controls: Speeds and frame delay.
    """

    camera: OrbitCamera
    controls: ViewerControls = field(default_factory=ViewerControls)

    def handle_input(self, window) -> bool:
        """Apply all held keys for one frame.

        Args:
            window: Any object with an is_key_down(Key) method.

        Returns:
            False if Escape is held and the viewer should exit, True otherwise.
        """
        if window.is_key_down(Key.ESCAPE):
            return False

        zoom = self.controls.zoom_speed
        rotation = self.controls.rotation_speed

        if window.is_key_down(Key.W):
            self.camera.zoom(-zoom)
        if window.is_key_down(Key.S):
            self.camera.zoom(zoom)

        if window.is_key_down(Key.LEFT):
            self.camera.orbit(rotation, 0.0)
        if window.is_key_down(Key.RIGHT):
            self.camera.orbit(-rotation, 0.0)
        if window.is_key_down(Key.UP):
            self.camera.orbit(0.0, -rotation)
        if window.is_key_down(Key.DOWN):
            self.camera.orbit(0.0, rotation)

        return True


def run_viewer(
    window,
    framebuffer: Framebuffer,
    renderer: Renderer,
    controller: CameraController,
    *,
    max_frames: int | None = None,
) -> int:
    """Run the interactive frame loop.

    Each frame applies held keys to the camera, uploads the camera, renders
    a frame into the framebuffer and presents it, then sleeps for the
    controller's frame delay. The loop ends when the window closes, Escape
    is pressed or max_frames frames have been presented.

    Args:
        window: An InteractivePreview, or any object with is_open(),
            is_key_down(Key) and update_with_buffer(buffer, width, height).
        framebuffer: Framebuffer the frames are rendered into.
        renderer: Renderer of the same size as the framebuffer.
        controller: Camera controller handling input.
        max_frames: Optional frame limit.

    Returns:
        The number of frames presented.
    """
    frames = 0
    while window.is_open():
        if not controller.handle_input(window):
            break

        setup_camera(controller.camera)
        renderer.render_into(framebuffer)
        window.update_with_buffer(framebuffer.buffer, framebuffer.width, framebuffer.height)
        frames += 1

        if max_frames is not None and frames >= max_frames:
            break
        time.sleep(controller.controls.frame_delay)
    return frames
