"""Image textures with wrapped nearest-neighbour sampling.

A texture is an immutable RGBA image with a top-left origin. Sampling folds
the texture coordinates into [0, 1) (so textures repeat), picks the nearest
texel and discards alpha:

    x = floor(wrap(u) * width) mod width
    y = floor(wrap(v) * height) mod height

where wrap(a) = a - floor(a). v = 0 is the top row of the image.

Textures are uploaded once into a shared texel atlas so that kernels can
sample any registered texture by its integer id.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.voxeltracer.core.color import Color
    >>> from src.voxeltracer.materials.texture import Texture, add_texture
    >>> grass = Texture.solid(Color(0, 255, 0))
    >>> texture_id = add_texture(grass)
    >>> # Use sample_texture(texture_id, u, v) within a Taichi kernel
"""


import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti
import taichi.math as tm
from PIL import Image as PILImage

from src.voxeltracer.core.color import Color, color_unpack, ivec3

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True, eq=False)
class Texture:
    """An immutable RGBA image.

    Attributes:
        data: Texel array of shape (height, width, 4) and dtype uint8,
            row-major with the top-left texel at [0, 0]. The array is
            marked read-only.
        name: Optional label used in diagnostics (usually the file path).
    """

    data: "npt.NDArray[np.uint8]"
    name: str = field(default="")

    def __post_init__(self) -> None:
        data = self.data
        if data.ndim != 3 or data.shape[2] != 4:
            raise ValueError(f"Texture data must have shape (height, width, 4), got {data.shape}")
        if data.shape[0] == 0 or data.shape[1] == 0:
            raise ValueError("Texture must be at least 1x1")
        if data.dtype != np.uint8:
            raise ValueError(f"Texture data must be uint8, got {data.dtype}")
        data = np.array(data, dtype=np.uint8, copy=True)
        data.setflags(write=False)
        object.__setattr__(self, "data", data)

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @classmethod
    def from_array(cls, array: "npt.ArrayLike", name: str = "") -> "Texture":
        """Build a texture from an RGB or RGBA uint8 array.

        Args:
            array: Array of shape (height, width, 3) or (height, width, 4).
            name: Optional label.

        Returns:
            The texture. RGB input gets an opaque alpha channel.
        """
        rgb = np.asarray(array, dtype=np.uint8)
        if rgb.ndim == 3 and rgb.shape[2] == 3:
            alpha = np.full(rgb.shape[:2] + (1,), 255, dtype=np.uint8)
            rgb = np.concatenate([rgb, alpha], axis=2)
        return cls(rgb, name)

    @classmethod
    def solid(cls, color: Color, width: int = 1, height: int = 1) -> "Texture":
        """Build a texture filled with a single color."""
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[..., 0] = color.r
        data[..., 1] = color.g
        data[..., 2] = color.b
        data[..., 3] = 255
        return cls(data, f"solid{color.as_tuple()}")

    def pixel(self, x: int, y: int) -> Color:
        """Get the RGB color of the texel at column x, row y."""
        r, g, b = (int(c) for c in self.data[y, x, :3])
        return Color(r, g, b)

    def sample(self, u: float, v: float) -> Color:
        """Sample the texture at (u, v) with wrapping, nearest neighbour.

        Args:
            u: Horizontal coordinate. Any real value; wraps with period 1.
            v: Vertical coordinate, 0 at the top row. Wraps with period 1.

        Returns:
            The RGB color of the selected texel.
        """
        u = u - math.floor(u)
        v = v - math.floor(v)
        x = int(math.floor(u * self.width)) % self.width
        y = int(math.floor(v * self.height)) % self.height
        return self.pixel(x, y)


def load_texture(path: str | Path) -> Texture:
    """Load a texture from an image file.

    Any format Pillow can decode is accepted; the image is converted to RGBA.

    Args:
        path: Path to the image file.

    Returns:
        The loaded texture, named after the path.

    Raises:
        RuntimeError: If the file cannot be opened or decoded.
    """
    try:
        with PILImage.open(path) as image:
            data = np.asarray(image.convert("RGBA"), dtype=np.uint8)
    except (OSError, ValueError) as e:
        raise RuntimeError(f"Failed to load texture '{path}': {e}") from e
    return Texture(data, str(path))


# =============================================================================
# Texture Atlas Storage (for kernel-side sampling)
# =============================================================================

# Maximum number of textures and total texels across all textures
MAX_TEXTURES = 64
MAX_TEXELS = 2048 * 2048

# Texels of every texture packed back to back as 0x00RRGGBB words
texture_texels = ti.field(dtype=ti.i32, shape=MAX_TEXELS)
texture_offsets = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_widths = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
texture_heights = ti.field(dtype=ti.i32, shape=MAX_TEXTURES)
num_textures = ti.field(dtype=ti.i32, shape=())
num_texels = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _upload_texels(src: ti.types.ndarray(), offset: ti.i32):
    for i in range(src.shape[0]):
        r = ti.cast(src[i, 0], ti.i32)
        g = ti.cast(src[i, 1], ti.i32)
        b = ti.cast(src[i, 2], ti.i32)
        texture_texels[offset + i] = (r << 16) | (g << 8) | b


def clear_textures() -> None:
    """Clear all textures from the atlas.

    Resets the texture and texel counts to zero. Existing texel data will be
    overwritten when new textures are added.
    """
    num_textures[None] = 0
    num_texels[None] = 0


def add_texture(texture: Texture) -> int:
    """Upload a texture into the atlas.

    Args:
        texture: The texture to upload.

    Returns:
        The texture id to pass to sample_texture.

    Raises:
        RuntimeError: If the maximum number of textures or texels is exceeded.
    """
    idx = num_textures[None]
    if idx >= MAX_TEXTURES:
        raise RuntimeError(f"Maximum number of textures ({MAX_TEXTURES}) exceeded")

    offset = num_texels[None]
    count = texture.width * texture.height
    if offset + count > MAX_TEXELS:
        raise RuntimeError(
            f"Texture '{texture.name}' ({texture.width}x{texture.height}) does not fit in the "
            f"texture atlas ({MAX_TEXELS - offset} texels left)"
        )

    # Writable copy; the texture data itself is read-only
    flat = np.array(texture.data.reshape(count, 4), dtype=np.uint8)
    _upload_texels(flat, offset)

    texture_offsets[idx] = offset
    texture_widths[idx] = texture.width
    texture_heights[idx] = texture.height
    num_texels[None] = offset + count
    num_textures[None] = idx + 1
    return idx


def get_texture_count() -> int:
    """Get the number of textures in the atlas."""
    return int(num_textures[None])


@ti.func
def sample_texture(texture_id: ti.i32, u: ti.f32, v: ti.f32) -> ivec3:
    """Sample a registered texture with wrapping, nearest neighbour.

    Args:
        texture_id: The id returned by add_texture.
        u: Horizontal coordinate, wraps with period 1.
        v: Vertical coordinate (0 = top row), wraps with period 1.

    Returns:
        The RGB color of the selected texel.
    """
    width = texture_widths[texture_id]
    height = texture_heights[texture_id]

    wrapped_u = u - tm.floor(u)
    wrapped_v = v - tm.floor(v)
    x = ti.cast(tm.floor(wrapped_u * width), ti.i32) % width
    y = ti.cast(tm.floor(wrapped_v * height), ti.i32) % height

    texel = texture_texels[texture_offsets[texture_id] + y * width + x]
    return color_unpack(texel)
