"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    color: Saturating 8-bit RGB arithmetic, in Python and in kernels
    ray: Ray data structure, reflection, refraction and origin bias
    shader: Whitted-style recursive shading (cast_ray)
    renderer: Per-frame data-parallel pixel dispatch and the pixel buffer

The shader and renderer are imported from their modules directly, since
they pull in the scene, material and camera field stores.
"""

from .color import BLACK, Color, color_add, color_pack, color_scale, color_sub, color_unpack
from .ray import ORIGIN_BIAS, Ray, make_ray, offset_origin, ray_at, reflect, refract

__all__ = [
    "Color",
    "BLACK",
    "color_add",
    "color_sub",
    "color_scale",
    "color_pack",
    "color_unpack",
    "Ray",
    "ORIGIN_BIAS",
    "make_ray",
    "ray_at",
    "reflect",
    "refract",
    "offset_origin",
]
