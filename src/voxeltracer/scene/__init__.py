"""Scene module for box storage and scene construction.

Components:
    intersection: Box field storage, nearest-hit and shadow queries
    light: The point light and its field storage
    manager: VoxelScene builder coordinating boxes, materials and textures
    voxel_grid: Factory for the default grass platform scene
"""

from .intersection import (
    HitInfo,
    SceneHitRecord,
    add_box,
    clear_scene,
    get_box_count,
    intersect_scene,
    query_nearest_hit,
    query_shadow,
    shadow_attenuation,
)
from .light import Light, clear_light, get_light_info, setup_light
from .manager import BoxInfo, MaterialInfo, VoxelScene
from .voxel_grid import VoxelGridParams, create_voxel_grid_scene, get_voxel_grid_bounds

__all__ = [
    "SceneHitRecord",
    "HitInfo",
    "add_box",
    "clear_scene",
    "get_box_count",
    "intersect_scene",
    "shadow_attenuation",
    "query_nearest_hit",
    "query_shadow",
    "Light",
    "setup_light",
    "clear_light",
    "get_light_info",
    "VoxelScene",
    "MaterialInfo",
    "BoxInfo",
    "VoxelGridParams",
    "create_voxel_grid_scene",
    "get_voxel_grid_bounds",
]
