"""Point light for Whitted shading.

The scene has a single point light. Its state is uploaded into Taichi fields
once per scene so the shader can read it inside kernels.

Example:
    >>> from src.voxeltracer.core.color import Color
    >>> from src.voxeltracer.scene.light import Light, setup_light
    >>> setup_light(Light(position=(1.0, 1.0, 5.0), color=Color(255, 255, 255)))
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.voxeltracer.core.color import Color, ivec3

vec3 = tm.vec3


@dataclass
class Light:
    """A point light.

    Attributes:
        position: Light position in world space (x, y, z).
        color: Light color, which tints the specular highlight.
        intensity: Scale applied to the diffuse and specular terms (>= 0).
    """

    position: tuple[float, float, float]
    color: Color
    intensity: float = 1.0

    def __post_init__(self) -> None:
        if self.intensity < 0.0:
            raise ValueError(f"Light intensity must be non-negative, got {self.intensity}")


# =============================================================================
# Taichi Fields for Light State (GPU-accessible)
# =============================================================================

_light_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_light_color = ti.Vector.field(3, dtype=ti.i32, shape=())
_light_intensity = ti.field(dtype=ti.f32, shape=())


def setup_light(light: Light) -> None:
    """Upload the light into the fields read by the shader."""
    _light_position[None] = vec3(*light.position)
    _light_color[None] = ivec3(light.color.r, light.color.g, light.color.b)
    _light_intensity[None] = light.intensity


def clear_light() -> None:
    """Reset the light to a black, zero-intensity light at the origin."""
    _light_position[None] = vec3(0.0, 0.0, 0.0)
    _light_color[None] = ivec3(0, 0, 0)
    _light_intensity[None] = 0.0


def get_light_info() -> dict:
    """Get current light state for debugging.

    Returns:
        Dictionary with position, color and intensity.
    """
    position = _light_position[None]
    color = _light_color[None]
    return {
        "position": (float(position[0]), float(position[1]), float(position[2])),
        "color": (int(color[0]), int(color[1]), int(color[2])),
        "intensity": float(_light_intensity[None]),
    }


@ti.func
def get_light_position() -> vec3:
    return _light_position[None]


@ti.func
def get_light_color() -> ivec3:
    return _light_color[None]


@ti.func
def get_light_intensity() -> ti.f32:
    return _light_intensity[None]
