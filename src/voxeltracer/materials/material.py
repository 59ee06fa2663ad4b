"""Whitted material description and kernel-side material registry.

A material combines a base color with four weights controlling how the
shader mixes its lobes:

    properties = (k_diffuse, k_specular, k_reflect, k_transparent)

    local = (diffuse + specular) * (1 - k_reflect - k_transparent)
    color = local + reflected * k_reflect + refracted * k_transparent

Keeping k_reflect + k_transparent <= 1 is left to the caller.

Materials may carry textures that replace the base color per face:
- no textures: every face uses base_color
- one texture: every face uses it
- two or more: textures[0] on the top (+Y) face, textures[1] on the rest

Example:
    >>> from src.voxeltracer.core.color import Color
    >>> from src.voxeltracer.materials.material import Material
    >>> mirror = Material(Color(255, 255, 255), properties=(0.0, 0.0, 1.0, 0.0))
    >>> mirror.is_reflective
    True
"""


import dataclasses
from collections.abc import Sequence
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.voxeltracer.core.color import Color, ivec3
from src.voxeltracer.geometry.box import NUM_FACES, FaceClass
from src.voxeltracer.materials.texture import Texture, sample_texture

vec2 = tm.vec2
vec4 = tm.vec4


@dataclass(frozen=True, eq=False)
class Material:
    """Surface appearance of a box.

    Attributes:
        base_color: Color used when no texture applies to a face.
        shininess: Phong exponent of the specular highlight (>= 0).
        properties: Weights (k_diffuse, k_specular, k_reflect, k_transparent),
            each >= 0.
        refractive_index: Index of refraction for transparent materials (>= 1).
        textures: Ordered textures, see module docstring for the face mapping.
    """

    base_color: Color
    shininess: float = 0.0
    properties: tuple[float, float, float, float] = (1.0, 0.0, 0.0, 0.0)
    refractive_index: float = 1.0
    textures: tuple[Texture, ...] = ()

    def __post_init__(self) -> None:
        if self.shininess < 0.0:
            raise ValueError(f"Shininess must be non-negative, got {self.shininess}")
        if len(self.properties) != 4:
            raise ValueError(
                f"Material properties must have 4 components, got {len(self.properties)}"
            )
        names = ("k_diffuse", "k_specular", "k_reflect", "k_transparent")
        for name, value in zip(names, self.properties):
            if value < 0.0:
                raise ValueError(f"Material property {name} = {value} must be non-negative")
        if self.refractive_index < 1.0:
            raise ValueError(f"Refractive index must be >= 1.0, got {self.refractive_index}")

        object.__setattr__(self, "properties", tuple(float(p) for p in self.properties))
        object.__setattr__(self, "textures", tuple(self.textures))

    @classmethod
    def black(cls) -> "Material":
        """A non-reflective, non-transparent black diffuse material."""
        return cls(Color(0, 0, 0))

    def with_textures(self, textures: Sequence[Texture]) -> "Material":
        """Return a copy of this material with the given textures."""
        return dataclasses.replace(self, textures=tuple(textures))

    @property
    def k_diffuse(self) -> float:
        return self.properties[0]

    @property
    def k_specular(self) -> float:
        return self.properties[1]

    @property
    def k_reflect(self) -> float:
        return self.properties[2]

    @property
    def k_transparent(self) -> float:
        return self.properties[3]

    @property
    def is_diffuse(self) -> bool:
        return self.k_specular == 0.0 and self.k_reflect == 0.0

    @property
    def is_reflective(self) -> bool:
        return self.k_reflect > 0.0

    @property
    def is_transparent(self) -> bool:
        return self.k_transparent > 0.0

    def texture_for_face(self, face: FaceClass) -> Texture | None:
        """Select the texture shown on a face.

        Args:
            face: The face being shaded.

        Returns:
            The texture for that face, or None when base_color applies.
        """
        if not self.textures:
            return None
        if len(self.textures) == 1:
            return self.textures[0]
        if face == FaceClass.TOP:
            return self.textures[0]
        return self.textures[1]


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of materials in the scene
MAX_MATERIALS = 256

# Storage for material properties
material_base_colors = ti.Vector.field(3, dtype=ti.i32, shape=MAX_MATERIALS)
material_shininess = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_properties = ti.Vector.field(4, dtype=ti.f32, shape=MAX_MATERIALS)
material_refractive_indices = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
# Texture id per (material, face); -1 means use the base color
material_face_textures = ti.field(dtype=ti.i32, shape=(MAX_MATERIALS, NUM_FACES))
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(material: Material, face_texture_ids: Sequence[int]) -> int:
    """Add a material to the material registry.

    Args:
        material: The material to upload.
        face_texture_ids: Texture id for each FaceClass value, -1 for none.
            Texture ids come from add_texture.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If face_texture_ids does not have one entry per face.
    """
    if len(face_texture_ids) != NUM_FACES:
        raise ValueError(
            f"Expected {NUM_FACES} face texture ids, got {len(face_texture_ids)}"
        )

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    color = material.base_color
    material_base_colors[idx] = ivec3(color.r, color.g, color.b)
    material_shininess[idx] = material.shininess
    material_properties[idx] = vec4(*material.properties)
    material_refractive_indices[idx] = material.refractive_index
    for face, texture_id in enumerate(face_texture_ids):
        material_face_textures[idx, face] = texture_id

    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_material_properties(material_id: ti.i32) -> vec4:
    """Get (k_diffuse, k_specular, k_reflect, k_transparent) for a material."""
    return material_properties[material_id]


@ti.func
def get_material_shininess(material_id: ti.i32) -> ti.f32:
    return material_shininess[material_id]


@ti.func
def get_material_refractive_index(material_id: ti.i32) -> ti.f32:
    return material_refractive_indices[material_id]


@ti.func
def surface_color(material_id: ti.i32, face: ti.i32, uv: vec2) -> ivec3:
    """Get the surface color of a material at a point on a box face.

    Args:
        material_id: The index of the material in the registry.
        face: The FaceClass value of the face hit.
        uv: Texture coordinates of the hit point.

    Returns:
        The sampled texture color, or the base color if the face is untextured.
    """
    color = material_base_colors[material_id]
    texture_id = material_face_textures[material_id, face]
    if texture_id >= 0:
        color = sample_texture(texture_id, uv.x, uv.y)
    return color
