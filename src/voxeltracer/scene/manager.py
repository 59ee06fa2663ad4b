"""Voxel scene manager coordinating boxes, materials and textures.

This module provides a high-level scene building API on top of the field
registries in scene.intersection, materials.material and materials.texture.

The VoxelScene maintains:
- A material_id space matching the kernel-side material registry
- Texture upload deduplication: a texture shared by several materials is
  uploaded to the atlas once
- The per-material face texture table derived from each material's textures
- Python-side records of every box for inspection

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.voxeltracer.core.color import Color
    >>> from src.voxeltracer.materials.material import Material
    >>> from src.voxeltracer.scene.manager import VoxelScene
    >>> scene = VoxelScene()
    >>> red = scene.add_material(Material(Color(200, 50, 50)))
    >>> scene.add_cube((0.0, 0.0, -2.0), 0.5, red)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from src.voxeltracer.geometry.box import FaceClass
from src.voxeltracer.materials.material import (
    MAX_MATERIALS,
    Material,
    add_material,
    clear_materials,
    get_material_count,
)
from src.voxeltracer.materials.texture import (
    MAX_TEXTURES,
    Texture,
    add_texture,
    clear_textures,
    get_texture_count,
)
from src.voxeltracer.scene.intersection import (
    MAX_BOXES,
    add_box,
    clear_scene,
    get_box_count,
)


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The material ID used by boxes.
        material: The material as provided during creation.
        face_texture_ids: Atlas texture id per FaceClass value, -1 for none.
    """

    material_id: int
    material: Material
    face_texture_ids: tuple[int, ...]


@dataclass
class BoxInfo:
    """Information about a box in the scene.

    Attributes:
        box_index: The index in the box storage arrays.
        box_min: The minimum corner of the box.
        box_max: The maximum corner of the box.
        material_id: The material ID assigned to the box.
    """

    box_index: int
    box_min: tuple[float, float, float]
    box_max: tuple[float, float, float]
    material_id: int


class VoxelScene:
    """Scene builder for voxel (axis-aligned box) scenes.

    Creating a VoxelScene clears the global box, material and texture
    registries, so only one scene is live at a time.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        boxes: List of BoxInfo for all boxes in the scene.

    Example:
        >>> scene = VoxelScene()
        >>> mirror = scene.add_material(
        ...     Material(Color(255, 255, 255), properties=(0.0, 0.0, 1.0, 0.0))
        ... )
        >>> scene.add_box((-1, -1, -5), (1, 1, -4), mirror)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.boxes: list[BoxInfo] = []
        # id(texture) -> (texture, atlas id); the texture is kept alive so ids stay unique
        self._texture_ids: dict[int, tuple[Texture, int]] = {}
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_materials()
        clear_textures()
        self.materials.clear()
        self.boxes.clear()
        self._texture_ids.clear()

    def clear(self) -> None:
        """Clear the entire scene (boxes, materials and textures)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _texture_id(self, texture: Texture | None) -> int:
        if texture is None:
            return -1
        cached = self._texture_ids.get(id(texture))
        if cached is not None:
            return cached[1]
        texture_id = add_texture(texture)
        self._texture_ids[id(texture)] = (texture, texture_id)
        return texture_id

    def add_material(self, material: Material) -> int:
        """Register a material and upload its textures.

        Args:
            material: The material to register.

        Returns:
            The material ID to pass to add_box.

        Raises:
            RuntimeError: If the material or texture capacity is exceeded.
        """
        # Upload in bank order so atlas ids follow the material's texture list
        for texture in material.textures:
            self._texture_id(texture)
        face_texture_ids = tuple(
            self._texture_id(material.texture_for_face(face)) for face in _FACES_IN_ORDER
        )
        material_id = add_material(material, face_texture_ids)
        self.materials.append(MaterialInfo(material_id, material, face_texture_ids))
        return material_id

    def get_material_count(self) -> int:
        """Get the number of materials in the scene."""
        return get_material_count()

    def get_texture_count(self) -> int:
        """Get the number of distinct textures uploaded."""
        return get_texture_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material.

        Args:
            material_id: The material ID to look up.

        Returns:
            MaterialInfo if the material exists, None otherwise.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Box Management
    # =========================================================================

    def add_box(
        self,
        box_min: Sequence[float],
        box_max: Sequence[float],
        material_id: int,
    ) -> int:
        """Add an axis-aligned box to the scene.

        Args:
            box_min: The minimum corner as (x, y, z).
            box_max: The maximum corner as (x, y, z).
            material_id: The material ID returned by add_material.

        Returns:
            The index of the added box.

        Raises:
            ValueError: If material_id is invalid or the bounds are not
                strictly increasing on every axis.
            RuntimeError: If the maximum number of boxes is exceeded.
        """
        if material_id < 0 or material_id >= get_material_count():
            raise ValueError(f"Invalid material_id: {material_id}")

        box_index = add_box(box_min, box_max, material_id)
        self.boxes.append(
            BoxInfo(
                box_index=box_index,
                box_min=tuple(float(c) for c in box_min),
                box_max=tuple(float(c) for c in box_max),
                material_id=material_id,
            )
        )
        return box_index

    def add_cube(
        self,
        corner: Sequence[float],
        size: float,
        material_id: int,
    ) -> int:
        """Add a cube with its minimum corner at `corner`.

        Args:
            corner: The minimum corner as (x, y, z).
            size: Edge length of the cube (must be positive).
            material_id: The material ID returned by add_material.

        Returns:
            The index of the added box.
        """
        box_max = (corner[0] + size, corner[1] + size, corner[2] + size)
        return self.add_box(corner, box_max, material_id)

    def get_box_count(self) -> int:
        """Get the number of boxes in the scene."""
        return get_box_count()

    def get_box_info(self, box_index: int) -> BoxInfo | None:
        """Get information about a box, or None if the index is out of range."""
        if 0 <= box_index < len(self.boxes):
            return self.boxes[box_index]
        return None

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_boxes() -> int:
        """Get the maximum number of boxes supported."""
        return MAX_BOXES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS

    @staticmethod
    def get_max_textures() -> int:
        """Get the maximum number of textures supported."""
        return MAX_TEXTURES


# Aliases are skipped by iteration, leaving one member per face in value order
_FACES_IN_ORDER = list(FaceClass)
