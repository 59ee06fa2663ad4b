"""Material module for surface appearance.

Components:
    texture: Immutable RGBA textures, image loading and the texel atlas
    material: Whitted material weights, face texture mapping and the
        material registry
"""

from .material import Material, add_material, clear_materials, get_material_count, surface_color
from .texture import (
    Texture,
    add_texture,
    clear_textures,
    get_texture_count,
    load_texture,
    sample_texture,
)

__all__ = [
    "Material",
    "add_material",
    "clear_materials",
    "get_material_count",
    "surface_color",
    "Texture",
    "load_texture",
    "add_texture",
    "clear_textures",
    "get_texture_count",
    "sample_texture",
]
