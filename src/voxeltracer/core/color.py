"""Saturating 8-bit RGB color arithmetic.

Colors are stored as three unsigned 8-bit channels. Every arithmetic result
(addition, subtraction, scalar multiplication) is clamped back into [0, 255]
immediately, so intermediate overflow is lost:

    (a * 0.5) + (b * 0.5)  may differ from  (a + b) * 0.5

Scalar products are evaluated in 32-bit float and truncated toward zero,
which matches what the Taichi kernels compute on the GPU.

The module provides two views of the same arithmetic:
- ``Color``: an immutable Python value used for scene authoring and tests
- ``color_add`` / ``color_sub`` / ``color_scale`` / ``color_pack``: Taichi
  functions operating on ``ivec3`` values inside kernels

Example:
    >>> from src.voxeltracer.core.color import Color
    >>> red = Color(200, 50, 50)
    >>> (red * 2.0).as_tuple()
    (255, 100, 100)
    >>> hex(red.to_packed_u32())
    '0xc83232'
"""


from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

# Type alias for integer RGB triplets inside kernels
ivec3 = tm.ivec3

CHANNEL_MAX = 255


def _scale_channel(channel: int, scalar: float) -> int:
    """Multiply one channel by a scalar in f32, clamp and truncate."""
    product = float(np.float32(channel) * np.float32(scalar))
    if not product > 0.0:
        # Negative products and NaN both collapse to zero
        return 0
    return int(min(product, float(CHANNEL_MAX)))


@dataclass(frozen=True)
class Color:
    """An 8-bit RGB color with saturating arithmetic.

    Attributes:
        r: Red channel in [0, 255].
        g: Green channel in [0, 255].
        b: Blue channel in [0, 255].
    """

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not 0 <= value <= CHANNEL_MAX:
                raise ValueError(f"Color channel {name} = {value} is outside [0, 255]")
            object.__setattr__(self, name, int(value))

    def __add__(self, other: "Color") -> "Color":
        return Color(
            min(self.r + other.r, CHANNEL_MAX),
            min(self.g + other.g, CHANNEL_MAX),
            min(self.b + other.b, CHANNEL_MAX),
        )

    def __sub__(self, other: "Color") -> "Color":
        return Color(
            max(self.r - other.r, 0),
            max(self.g - other.g, 0),
            max(self.b - other.b, 0),
        )

    def __mul__(self, scalar: float) -> "Color":
        return Color(
            _scale_channel(self.r, scalar),
            _scale_channel(self.g, scalar),
            _scale_channel(self.b, scalar),
        )

    __rmul__ = __mul__

    def to_packed_u32(self) -> int:
        """Pack the color into a 0x00RRGGBB word."""
        return (self.r << 16) | (self.g << 8) | self.b

    @classmethod
    def from_packed(cls, word: int) -> "Color":
        """Unpack a 0x00RRGGBB word. The top byte is ignored."""
        word = int(word)
        return cls((word >> 16) & 0xFF, (word >> 8) & 0xFF, word & 0xFF)

    @classmethod
    def black(cls) -> "Color":
        return cls(0, 0, 0)

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)


BLACK = Color(0, 0, 0)


# =============================================================================
# Kernel-side Color Arithmetic
# =============================================================================


@ti.func
def color_add(a: ivec3, b: ivec3) -> ivec3:
    """Saturating per-channel addition."""
    return tm.clamp(a + b, 0, CHANNEL_MAX)


@ti.func
def color_sub(a: ivec3, b: ivec3) -> ivec3:
    """Saturating per-channel subtraction."""
    return tm.clamp(a - b, 0, CHANNEL_MAX)


@ti.func
def color_scale(color: ivec3, scalar: ti.f32) -> ivec3:
    """Multiply a color by a scalar, clamp to [0, 255] and truncate.

    Args:
        color: The color to scale.
        scalar: The multiplier. Negative values produce black.

    Returns:
        The scaled color.
    """
    scaled = tm.clamp(ti.cast(color, ti.f32) * scalar, 0.0, float(CHANNEL_MAX))
    return ti.cast(scaled, ti.i32)


@ti.func
def color_pack(color: ivec3) -> ti.i32:
    """Pack a color into a 0x00RRGGBB word."""
    return (color.x << 16) | (color.y << 8) | color.z


@ti.func
def color_unpack(word: ti.i32) -> ivec3:
    """Unpack a 0x00RRGGBB word into a color."""
    return ivec3((word >> 16) & 0xFF, (word >> 8) & 0xFF, word & 0xFF)
