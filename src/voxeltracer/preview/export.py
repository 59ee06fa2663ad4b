"""Image export utilities for rendered frames.

Frames are stored as packed 0x00RRGGBB words, so exporting is an unpack to
8-bit RGB followed by a Pillow save. No tone mapping or gamma correction is
applied: the shader already produces display-ready 8-bit colors.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from src.voxeltracer.preview.export import save_png
    >>> from src.voxeltracer.preview.framebuffer import Framebuffer
    >>>
    >>> fb = Framebuffer(800, 600)
    >>> renderer.render_into(fb)
    >>> save_png(fb, "voxels.png")
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image as PILImage

if TYPE_CHECKING:
    import numpy.typing as npt

    from src.voxeltracer.preview.framebuffer import Framebuffer


def packed_to_uint8(
    pixels: npt.ArrayLike,
    width: int,
    height: int,
) -> npt.NDArray[np.uint8]:
    """Unpack 0x00RRGGBB words into an RGB image.

    Args:
        pixels: Flat array of width * height packed pixels, row-major.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Array of shape (height, width, 3) with dtype uint8.

    Raises:
        ValueError: If the pixel count does not match width * height.
    """
    packed = np.asarray(pixels, dtype=np.uint32).reshape(-1)
    if packed.size != width * height:
        raise ValueError(
            f"Pixel buffer has {packed.size} entries, expected {width}x{height} = {width * height}"
        )
    packed = packed.reshape(height, width)
    image = np.empty((height, width, 3), dtype=np.uint8)
    image[..., 0] = (packed >> 16) & 0xFF
    image[..., 1] = (packed >> 8) & 0xFF
    image[..., 2] = packed & 0xFF
    return image


def framebuffer_to_uint8(framebuffer: Framebuffer) -> npt.NDArray[np.uint8]:
    """Convert a framebuffer to an RGB image of shape (height, width, 3)."""
    return packed_to_uint8(framebuffer.buffer, framebuffer.width, framebuffer.height)


def save_png(framebuffer: Framebuffer, filepath: str | Path) -> None:
    """Save a framebuffer as a PNG file.

    Args:
        framebuffer: The framebuffer to save.
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(framebuffer_to_uint8(framebuffer))
    pil_image.save(filepath)


def timestamped_filename(prefix: str = "voxels") -> str:
    """Build a filename of the form <prefix>_YYYYMMDD_HHMMSS.png."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}.png"
