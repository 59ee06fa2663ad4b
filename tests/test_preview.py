"""Tests for the preview module.

This module tests the preview/framebuffer, preview/export and
preview/interactive functionality including:
- Framebuffer drawing and frame commits
- Unpacking packed pixels and PNG export
- Key handling for the orbit camera
- The viewer frame loop

Note: Tests avoid opening actual windows. The frame loop is driven with a
fake window object that records presented frames.
"""

import math
import os
import re
import tempfile

import numpy as np
import pytest
from PIL import Image as PILImage


class FakeWindow:
    """Window stand-in recording presented frames."""

    def __init__(self, held=(), open_frames=None):
        self.held = set(held)
        self.open_frames = open_frames
        self.frames = []

    def is_open(self):
        return self.open_frames is None or len(self.frames) < self.open_frames

    def is_key_down(self, key):
        return key in self.held

    def update_with_buffer(self, buffer, width, height):
        self.frames.append((np.array(buffer, copy=True), width, height))


class TestFramebuffer:
    """Test the packed-pixel framebuffer."""

    def test_new_framebuffer_is_black(self):
        """Test a new framebuffer is zero-filled."""
        from src.voxeltracer.preview.framebuffer import Framebuffer

        fb = Framebuffer(4, 3)

        assert fb.buffer.shape == (12,)
        assert fb.buffer.dtype == np.uint32
        assert np.all(fb.buffer == 0)

    def test_invalid_size_raises(self):
        """Test non-positive dimensions are rejected."""
        from src.voxeltracer.preview.framebuffer import Framebuffer

        with pytest.raises(ValueError):
            Framebuffer(0, 3)

    def test_clear_uses_background_color(self):
        """Test clear fills with the background color."""
        from src.voxeltracer.preview.framebuffer import Framebuffer

        fb = Framebuffer(4, 3)
        fb.set_background_color(0x448EE4)
        fb.clear()

        assert np.all(fb.buffer == 0x448EE4)

    def test_point_uses_current_color(self):
        """Test point writes the current color at row-major position."""
        from src.voxeltracer.preview.framebuffer import Framebuffer

        fb = Framebuffer(4, 3)
        fb.set_current_color(0xFF123456)
        fb.point(1, 2)

        assert fb.get_pixel(1, 2) == 0x123456
        assert fb.buffer[2 * 4 + 1] == 0x123456

    def test_point_out_of_range_ignored(self):
        """Test points outside the buffer are ignored."""
        from src.voxeltracer.preview.framebuffer import Framebuffer

        fb = Framebuffer(4, 3)
        fb.point(4, 0)
        fb.point(0, -1)

        assert np.all(fb.buffer == 0)

    def test_set_buffer_accepts_2d(self):
        """Test frames shaped (height, width) are flattened row-major."""
        from src.voxeltracer.preview.framebuffer import Framebuffer

        fb = Framebuffer(3, 2)
        fb.set_buffer(np.arange(6, dtype=np.uint32).reshape(2, 3))

        assert fb.get_pixel(2, 0) == 2
        assert fb.get_pixel(0, 1) == 3

    def test_set_buffer_size_mismatch_raises(self):
        """Test frames of the wrong size are rejected."""
        from src.voxeltracer.preview.framebuffer import Framebuffer

        fb = Framebuffer(3, 2)
        with pytest.raises(ValueError, match="expected"):
            fb.set_buffer(np.zeros(5, dtype=np.uint32))

    def test_to_rgb_image(self):
        """Test unpacking into a float image in [0, 1]."""
        from src.voxeltracer.preview.framebuffer import Framebuffer

        fb = Framebuffer(2, 1)
        fb.set_buffer([0xFF0000, 0x0000FF])
        image = fb.to_rgb_image()

        assert image.shape == (1, 2, 3)
        assert image.dtype == np.float32
        assert np.allclose(image[0, 0], (1.0, 0.0, 0.0))
        assert np.allclose(image[0, 1], (0.0, 0.0, 1.0))


class TestExport:
    """Test image export."""

    def test_packed_to_uint8(self):
        """Test channels are extracted from 0x00RRGGBB words."""
        from src.voxeltracer.preview.export import packed_to_uint8

        image = packed_to_uint8(np.array([0x448EE4, 0x102030], dtype=np.uint32), 2, 1)

        assert image.dtype == np.uint8
        assert tuple(image[0, 0]) == (0x44, 0x8E, 0xE4)
        assert tuple(image[0, 1]) == (0x10, 0x20, 0x30)

    def test_packed_to_uint8_size_mismatch(self):
        """Test a pixel count mismatch raises ValueError."""
        from src.voxeltracer.preview.export import packed_to_uint8

        with pytest.raises(ValueError):
            packed_to_uint8(np.zeros(3, dtype=np.uint32), 2, 2)

    def test_framebuffer_to_uint8(self):
        """Test a framebuffer converts to a (height, width, 3) image."""
        from src.voxeltracer.preview.export import framebuffer_to_uint8
        from src.voxeltracer.preview.framebuffer import Framebuffer

        fb = Framebuffer(3, 2)
        fb.set_current_color(0x00FF00)
        fb.point(0, 1)
        image = framebuffer_to_uint8(fb)

        assert image.shape == (2, 3, 3)
        assert tuple(image[1, 0]) == (0, 255, 0)
        assert tuple(image[0, 0]) == (0, 0, 0)

    def test_save_png_creates_file(self):
        """Test save_png writes an RGB PNG with the framebuffer's pixels."""
        from src.voxeltracer.preview.export import save_png
        from src.voxeltracer.preview.framebuffer import Framebuffer

        fb = Framebuffer(3, 2)
        fb.set_background_color(0x448EE4)
        fb.clear()
        fb.set_current_color(0xFF0000)
        fb.point(2, 1)

        with tempfile.TemporaryDirectory() as tmpdir:
            filepath = os.path.join(tmpdir, "frame.png")
            save_png(fb, filepath)

            assert os.path.exists(filepath)
            with PILImage.open(filepath) as img:
                assert img.size == (3, 2)
                assert img.mode == "RGB"
                assert img.getpixel((0, 0)) == (0x44, 0x8E, 0xE4)
                assert img.getpixel((2, 1)) == (255, 0, 0)

    def test_timestamped_filename(self):
        """Test generated filenames carry the prefix and a timestamp."""
        from src.voxeltracer.preview.export import timestamped_filename

        name = timestamped_filename("grid")
        assert re.fullmatch(r"grid_\d{8}_\d{6}\.png", name)


class TestCameraController:
    """Test key handling."""

    def _controller(self):
        from src.voxeltracer.camera.orbit import OrbitCamera
        from src.voxeltracer.preview.interactive import CameraController

        return CameraController(OrbitCamera(eye=(0.0, 0.0, 6.5)))

    def test_escape_requests_exit(self):
        """Test Escape makes handle_input return False."""
        from src.voxeltracer.preview.interactive import Key

        controller = self._controller()
        assert controller.handle_input(FakeWindow({Key.ESCAPE})) is False

    def test_no_keys_leaves_camera(self):
        """Test the camera does not move without input."""
        controller = self._controller()

        assert controller.handle_input(FakeWindow()) is True
        assert controller.camera.eye == (0.0, 0.0, 6.5)

    def test_w_and_s_zoom(self):
        """Test W moves closer and S moves away by the zoom speed."""
        from src.voxeltracer.preview.interactive import Key

        controller = self._controller()
        controller.handle_input(FakeWindow({Key.W}))
        assert controller.camera.eye[2] == pytest.approx(6.0)

        controller.handle_input(FakeWindow({Key.S}))
        controller.handle_input(FakeWindow({Key.S}))
        assert controller.camera.eye[2] == pytest.approx(7.0)

    def test_left_and_right_orbit(self):
        """Test Left and Right yaw in opposite directions."""
        from src.voxeltracer.preview.interactive import Key

        left = self._controller()
        left.handle_input(FakeWindow({Key.LEFT}))
        right = self._controller()
        right.handle_input(FakeWindow({Key.RIGHT}))

        assert left.camera.eye[0] == pytest.approx(-right.camera.eye[0])
        assert left.camera.eye[0] != pytest.approx(0.0)
        assert math.dist(left.camera.eye, (0.0, 0.0, 0.0)) == pytest.approx(6.5)

    def test_up_raises_eye(self):
        """Test Up orbits toward the top and Down toward the bottom."""
        from src.voxeltracer.preview.interactive import Key

        up = self._controller()
        up.handle_input(FakeWindow({Key.UP}))
        down = self._controller()
        down.handle_input(FakeWindow({Key.DOWN}))

        assert up.camera.eye[1] > 0.0
        assert down.camera.eye[1] < 0.0

    def test_custom_speeds(self):
        """Test the controls dataclass sets the step sizes."""
        from src.voxeltracer.camera.orbit import OrbitCamera
        from src.voxeltracer.preview.interactive import CameraController, Key, ViewerControls

        controller = CameraController(
            OrbitCamera(eye=(0.0, 0.0, 6.5)), ViewerControls(zoom_speed=2.0)
        )
        controller.handle_input(FakeWindow({Key.W}))

        assert controller.camera.eye[2] == pytest.approx(4.5)


class TestRunViewer:
    """Test the viewer frame loop with a fake window."""

    def _setup(self, width=4, height=3):
        from src.voxeltracer.camera.orbit import OrbitCamera
        from src.voxeltracer.core.renderer import Renderer
        from src.voxeltracer.preview.framebuffer import Framebuffer
        from src.voxeltracer.preview.interactive import CameraController, ViewerControls
        from src.voxeltracer.scene.manager import VoxelScene

        VoxelScene()
        controller = CameraController(
            OrbitCamera(eye=(0.0, 0.0, 6.5)), ViewerControls(frame_delay=0.0)
        )
        return Framebuffer(width, height), Renderer(width, height), controller

    def test_presents_frames_until_limit(self):
        """Test each frame is rendered and presented."""
        from src.voxeltracer.preview.interactive import run_viewer

        framebuffer, renderer, controller = self._setup()
        window = FakeWindow()

        frames = run_viewer(window, framebuffer, renderer, controller, max_frames=3)

        assert frames == 3
        assert len(window.frames) == 3
        buffer, width, height = window.frames[0]
        assert (width, height) == (4, 3)
        assert np.all(buffer == 0x448EE4)

    def test_stops_when_window_closes(self):
        """Test the loop ends once the window reports closed."""
        from src.voxeltracer.preview.interactive import run_viewer

        framebuffer, renderer, controller = self._setup()
        window = FakeWindow(open_frames=2)

        assert run_viewer(window, framebuffer, renderer, controller) == 2

    def test_escape_exits_before_rendering(self):
        """Test Escape ends the loop without presenting a frame."""
        from src.voxeltracer.preview.interactive import Key, run_viewer

        framebuffer, renderer, controller = self._setup()
        window = FakeWindow({Key.ESCAPE})

        assert run_viewer(window, framebuffer, renderer, controller) == 0
        assert window.frames == []

    def test_camera_moves_between_frames(self):
        """Test held keys move the camera once per frame."""
        from src.voxeltracer.preview.interactive import Key, run_viewer

        framebuffer, renderer, controller = self._setup()
        window = FakeWindow({Key.W})

        run_viewer(window, framebuffer, renderer, controller, max_frames=2)

        assert controller.camera.eye[2] == pytest.approx(5.5)


class TestInteractivePreview:
    """Test the window wrapper without opening a window."""

    def test_frame_size_mismatch_raises(self):
        """Test update_with_buffer rejects frames of the wrong size."""
        from src.voxeltracer.preview.interactive import InteractivePreview

        preview = InteractivePreview(4, 3)
        with pytest.raises(ValueError, match="doesn't match"):
            preview.update_with_buffer(np.zeros(20, dtype=np.uint32), 5, 4)

    def test_headless_linux_has_no_display(self, monkeypatch):
        """Test display detection without DISPLAY or WAYLAND_DISPLAY."""
        from src.voxeltracer.preview.interactive import InteractivePreview

        if os.uname().sysname != "Linux":
            pytest.skip("display detection differs on this platform")

        monkeypatch.delenv("DISPLAY", raising=False)
        monkeypatch.delenv("WAYLAND_DISPLAY", raising=False)
        assert InteractivePreview.is_display_available() is False

        monkeypatch.setenv("DISPLAY", ":0")
        assert InteractivePreview.is_display_available() is True
