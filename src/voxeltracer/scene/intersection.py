"""Scene-level box intersection testing.

This module stores the scene's boxes in Taichi fields and provides the two
queries the shader needs:
- intersect_scene: the nearest box hit along a ray, with material information
- shadow_attenuation: how strongly the first occluder darkens a light

Boxes refer to materials by index into the material registry. Boxes are
tested in insertion order; on equal distances the earlier box wins.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.voxeltracer.scene.intersection import add_box, clear_scene, query_nearest_hit
    >>> clear_scene()
    >>> add_box((-1, -1, -3), (1, 1, -1), material_id=0)
    >>> hit = query_nearest_hit((0, 0, 0), (0, 0, -1))
    >>> hit.t
    1.0
"""


from collections.abc import Sequence
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.voxeltracer.geometry.box import FaceClass, hit_box

# Type aliases for vectors using Taichi's math module
vec2 = tm.vec2
vec3 = tm.vec3

# Upper bound for ray distances
T_MAX = 1e30


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any box (1 if hit, 0 if miss).
        t: Distance along the ray to the hit. Only valid if hit == 1.
        point: The 3D point where the ray entered the box.
            Only valid if hit == 1.
        normal: The outward unit normal of the face hit.
            Only valid if hit == 1.
        face: The FaceClass value of the face hit. Only valid if hit == 1.
        uv: Texture coordinates on the face, in [0, 1].
            Only valid if hit == 1.
        material_id: The material ID of the hit box.
            Only valid if hit == 1. -1 indicates no hit.
        box_index: Index of the hit box in insertion order, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    face: ti.i32
    uv: vec2
    material_id: ti.i32
    box_index: ti.i32


# Maximum number of boxes supported in the scene
MAX_BOXES = 1024

# Box storage: Structure of Arrays layout for GPU efficiency
box_mins = ti.Vector.field(3, dtype=ti.f32, shape=MAX_BOXES)
box_maxs = ti.Vector.field(3, dtype=ti.f32, shape=MAX_BOXES)
box_material_ids = ti.field(dtype=ti.i32, shape=MAX_BOXES)
num_boxes = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all boxes from the scene.

    Resets the box count to zero. The actual field data is not cleared but
    will be overwritten when new boxes are added.
    """
    num_boxes[None] = 0


def add_box(
    box_min: Sequence[float],
    box_max: Sequence[float],
    material_id: int = 0,
) -> int:
    """Add an axis-aligned box to the scene.

    Args:
        box_min: The minimum corner (x, y, z).
        box_max: The maximum corner (x, y, z).
        material_id: The material ID to associate with this box.

    Returns:
        The index of the added box.

    Raises:
        ValueError: If box_min is not strictly less than box_max on every axis.
        RuntimeError: If the maximum number of boxes is exceeded.
    """
    for axis in range(3):
        if not box_min[axis] < box_max[axis]:
            raise ValueError(
                f"Box min {tuple(box_min)} must be strictly less than max {tuple(box_max)} "
                f"on every axis"
            )

    idx = num_boxes[None]
    if idx >= MAX_BOXES:
        raise RuntimeError(f"Maximum number of boxes ({MAX_BOXES}) exceeded")
    box_mins[idx] = vec3(box_min[0], box_min[1], box_min[2])
    box_maxs[idx] = vec3(box_max[0], box_max[1], box_max[2])
    box_material_ids[idx] = material_id
    num_boxes[None] = idx + 1
    return idx


def get_box_count() -> int:
    """Get the number of boxes in the scene."""
    return int(num_boxes[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        face=0,
        uv=vec2(0.0, 0.0),
        material_id=-1,
        box_index=-1,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest box hit along a ray.

    Iterates through all boxes in insertion order and keeps the hit with
    the smallest distance. The comparison is strict, so of two boxes at
    exactly the same distance the first one added wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (normalized).

    Returns:
        A SceneHitRecord containing the closest intersection, or a miss
        record if no intersection was found.
    """
    closest_t = T_MAX
    result = _make_miss_record()

    n_boxes = num_boxes[None]
    for i in range(n_boxes):
        rec = hit_box(ray_origin, ray_direction, box_mins[i], box_maxs[i])
        if rec.hit == 1 and rec.t < closest_t:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                face=rec.face,
                uv=rec.uv,
                material_id=box_material_ids[i],
                box_index=i,
            )

    return result


@ti.func
def shadow_attenuation(ray_origin: vec3, ray_direction: vec3, light_distance: ti.f32) -> ti.f32:
    """Compute how strongly the first occluder darkens a light.

    Boxes are tested in insertion order and the first one hit closer than
    the light decides the result; later boxes are not examined. Occluders
    close to the surface cast darker shadows than occluders close to the
    light:

        shadow = 1 - min((t / light_distance)^2, 1)

    Args:
        ray_origin: Biased surface point the shadow ray starts from.
        ray_direction: Normalized direction toward the light.
        light_distance: Distance from the surface point to the light.

    Returns:
        Shadow intensity in [0, 1]; 0 when nothing blocks the light.
    """
    shadow = 0.0
    blocked = 0

    n_boxes = num_boxes[None]
    for i in range(n_boxes):
        if blocked == 0:
            rec = hit_box(ray_origin, ray_direction, box_mins[i], box_maxs[i])
            if rec.hit == 1 and rec.t < light_distance:
                ratio = rec.t / light_distance
                shadow = 1.0 - ti.min(ratio * ratio, 1.0)
                blocked = 1

    return shadow


# =============================================================================
# Python-side Queries (for picking and debugging)
# =============================================================================


@dataclass
class HitInfo:
    """Python-side copy of a nearest-hit query result."""

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    face: FaceClass
    uv: tuple[float, float]
    material_id: int
    box_index: int


_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_face = ti.field(dtype=ti.i32, shape=())
_query_uv = ti.Vector.field(2, dtype=ti.f32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())
_query_box_index = ti.field(dtype=ti.i32, shape=())
_query_shadow = ti.field(dtype=ti.f32, shape=())


@ti.kernel
def _query_nearest_hit_kernel(origin: vec3, direction: vec3):
    for _ in range(1):
        rec = intersect_scene(origin, direction)
        _query_hit[None] = rec.hit
        _query_t[None] = rec.t
        _query_point[None] = rec.point
        _query_normal[None] = rec.normal
        _query_face[None] = rec.face
        _query_uv[None] = rec.uv
        _query_material_id[None] = rec.material_id
        _query_box_index[None] = rec.box_index


@ti.kernel
def _query_shadow_kernel(origin: vec3, direction: vec3, light_distance: ti.f32):
    for _ in range(1):
        _query_shadow[None] = shadow_attenuation(origin, direction, light_distance)


def _vec_tuple(value, size: int = 3) -> tuple:
    return tuple(float(value[i]) for i in range(size))


def query_nearest_hit(
    origin: Sequence[float],
    direction: Sequence[float],
) -> HitInfo | None:
    """Run intersect_scene for a single ray from Python.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z). Used as given, not normalized.

    Returns:
        The nearest hit, or None if the ray misses every box.
    """
    _query_nearest_hit_kernel(vec3(*origin), vec3(*direction))
    if _query_hit[None] == 0:
        return None
    return HitInfo(
        t=float(_query_t[None]),
        point=_vec_tuple(_query_point[None]),
        normal=_vec_tuple(_query_normal[None]),
        face=FaceClass(int(_query_face[None])),
        uv=_vec_tuple(_query_uv[None], 2),
        material_id=int(_query_material_id[None]),
        box_index=int(_query_box_index[None]),
    )


def query_shadow(
    origin: Sequence[float],
    direction: Sequence[float],
    light_distance: float,
) -> float:
    """Run shadow_attenuation for a single ray from Python."""
    _query_shadow_kernel(vec3(*origin), vec3(*direction), light_distance)
    return float(_query_shadow[None])
