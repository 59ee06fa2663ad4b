"""CPU-side framebuffer of packed RGB pixels.

The framebuffer holds width * height 0x00RRGGBB words in row-major order
(top-left first). The renderer commits whole frames with set_buffer; point
drawing with a current color is available for overlays and tests.

Example:
    >>> from src.voxeltracer.preview.framebuffer import Framebuffer
    >>> fb = Framebuffer(4, 3)
    >>> fb.set_current_color(0xFF0000)
    >>> fb.point(1, 2)
    >>> hex(fb.get_pixel(1, 2))
    '0xff0000'
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from src.voxeltracer.preview.export import framebuffer_to_uint8

if TYPE_CHECKING:
    import numpy.typing as npt


class Framebuffer:
    """A width x height buffer of packed 0x00RRGGBB pixels.

    Attributes:
        width: Width in pixels.
        height: Height in pixels.
        buffer: Flat uint32 array of length width * height.
        background_color: Color written by clear().
        current_color: Color written by point().
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Framebuffer dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.buffer: npt.NDArray[np.uint32] = np.zeros(width * height, dtype=np.uint32)
        self.background_color = 0x000000
        self.current_color = 0xFFFFFF

    def set_background_color(self, color: int) -> None:
        self.background_color = color & 0xFFFFFF

    def set_current_color(self, color: int) -> None:
        self.current_color = color & 0xFFFFFF

    def clear(self) -> None:
        """Fill the whole buffer with the background color."""
        self.buffer.fill(self.background_color)

    def point(self, x: int, y: int) -> None:
        """Set pixel (x, y) to the current color. Out-of-range points are ignored."""
        if 0 <= x < self.width and 0 <= y < self.height:
            self.buffer[y * self.width + x] = self.current_color

    def get_pixel(self, x: int, y: int) -> int:
        return int(self.buffer[y * self.width + x])

    def set_buffer(self, pixels: npt.ArrayLike) -> None:
        """Replace the buffer contents with a rendered frame.

        Args:
            pixels: Packed pixels, either flat of length width * height or
                shaped (height, width).

        Raises:
            ValueError: If the number of pixels does not match.
        """
        pixels = np.asarray(pixels, dtype=np.uint32).reshape(-1)
        if pixels.size != self.buffer.size:
            raise ValueError(
                f"Pixel buffer has {pixels.size} entries, expected "
                f"{self.width}x{self.height} = {self.buffer.size}"
            )
        np.copyto(self.buffer, pixels)

    def to_rgb_image(self) -> npt.NDArray[np.float32]:
        """Unpack into a float RGB image in [0, 1] of shape (height, width, 3)."""
        return framebuffer_to_uint8(self).astype(np.float32) / 255.0
