"""Axis-aligned box primitive with slab-method intersection.

This module provides the FaceClass enumeration, the BoxHitRecord dataclass and
the hit_box function used to render voxel scenes.

A box is defined by its two corners:
- box_min: The corner with the smallest coordinate on every axis
- box_max: The corner with the largest coordinate on every axis

Ray-box intersection uses the slab method:
1. Intersect the ray with the pair of planes bounding each axis
2. The ray is inside the box between the largest entry and smallest exit
3. The face hit is the slab plane whose parameter equals the entry distance

A ray parallel to a slab misses when its origin lies outside that slab and is
unconstrained by it otherwise. Rays starting inside a box produce a negative
entry distance and miss it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.voxeltracer.geometry.box import hit_box
    >>> # Unit cube at the origin; use hit_box within a Taichi kernel
    >>> box_min = ti.math.vec3(0, 0, 0)
    >>> box_max = ti.math.vec3(1, 1, 1)
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

# Type aliases for vectors using Taichi's math module
vec2 = tm.vec2
vec3 = tm.vec3


class FaceClass(IntEnum):
    """Which of the six faces of a box a ray struck.

    The value doubles as the column index into the per-material face texture
    table, so it must stay in [0, 6).
    """

    POS_X = 0
    NEG_X = 1
    POS_Y = 2
    NEG_Y = 3
    POS_Z = 4
    NEG_Z = 5

    # Aliases used by the texture mapping
    TOP = 2
    BOTTOM = 3

    @property
    def normal(self) -> tuple[float, float, float]:
        """The outward unit normal of this face."""
        return _FACE_NORMALS[self.value]

    @property
    def axis(self) -> int:
        """The axis (0=X, 1=Y, 2=Z) this face is perpendicular to."""
        return self.value // 2


_FACE_NORMALS = (
    (1.0, 0.0, 0.0),
    (-1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, -1.0, 0.0),
    (0.0, 0.0, 1.0),
    (0.0, 0.0, -1.0),
)

NUM_FACES = len(_FACE_NORMALS)

# Stand-in for an infinite slab distance on axes the ray runs parallel to
_UNBOUNDED = 1e30

# Plain integer copies for use inside Taichi functions
FACE_POS_X = int(FaceClass.POS_X)
FACE_NEG_X = int(FaceClass.NEG_X)
FACE_POS_Y = int(FaceClass.POS_Y)
FACE_NEG_Y = int(FaceClass.NEG_Y)
FACE_POS_Z = int(FaceClass.POS_Z)
FACE_NEG_Z = int(FaceClass.NEG_Z)


@ti.dataclass
class BoxHitRecord:
    """Record of a ray-box intersection.

    Attributes:
        hit: Whether the ray intersected the box (1 if hit, 0 if miss).
        t: Distance along the ray to the entry point. Only valid if hit == 1.
        point: The entry point on the box surface. Only valid if hit == 1.
        normal: The outward unit normal of the face hit. Only valid if hit == 1.
        face: The FaceClass value of the face hit. Only valid if hit == 1.
        uv: Texture coordinates of the hit point on the face, in [0, 1].
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    face: ti.i32
    uv: vec2


@ti.func
def face_uv(face: ti.i32, point: vec3, box_min: vec3, box_max: vec3) -> vec2:
    """Compute texture coordinates of a point on a box face.

    The point is first normalized into the box, then projected onto the two
    axes spanning the face. Side faces flip V so that v = 0 is the top edge.

    Args:
        face: The FaceClass value of the face.
        point: A point on the face.
        box_min: The minimum corner of the box.
        box_max: The maximum corner of the box.

    Returns:
        The (u, v) coordinates clamped to [0, 1].
    """
    local = tm.clamp((point - box_min) / (box_max - box_min), 0.0, 1.0)

    # Z faces by default
    uv = vec2(local.x, 1.0 - local.y)
    if face == FACE_POS_Y or face == FACE_NEG_Y:
        uv = vec2(local.x, local.z)
    elif face == FACE_POS_X or face == FACE_NEG_X:
        uv = vec2(local.z, 1.0 - local.y)
    return uv


@ti.func
def hit_box(
    ray_origin: vec3,
    ray_direction: vec3,
    box_min: vec3,
    box_max: vec3,
) -> BoxHitRecord:
    """Test for ray-box intersection using the slab method.

    For each axis the ray crosses the min plane at t1 and the max plane at
    t2. The entry distance is the largest of the per-axis minima and the exit
    distance is the smallest of the per-axis maxima:

        t_enter = max(min(t1.x, t2.x), min(t1.y, t2.y), min(t1.z, t2.z))
        t_exit = min(max(t1.x, t2.x), max(t1.y, t2.y), max(t1.z, t2.z))

    The ray misses when t_exit < t_enter or when t_enter < 0. When several
    slab planes tie with t_enter, X wins over Y over Z, and the min plane
    wins over the max plane.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (normalized for t to be a
            distance). Zero components are allowed and mark
            the ray as parallel to that slab.
        box_min: The minimum corner of the box.
        box_max: The maximum corner of the box.

    Returns:
        A BoxHitRecord. Check the hit field to determine if intersection
        occurred.
    """
    # Slab distances per axis. Axes the ray runs parallel to stay unbounded.
    t1 = vec3(-_UNBOUNDED, -_UNBOUNDED, -_UNBOUNDED)
    t2 = vec3(_UNBOUNDED, _UNBOUNDED, _UNBOUNDED)
    outside_parallel_slab = 0
    for axis in ti.static(range(3)):
        if ray_direction[axis] != 0.0:
            inv_d = 1.0 / ray_direction[axis]
            t1[axis] = (box_min[axis] - ray_origin[axis]) * inv_d
            t2[axis] = (box_max[axis] - ray_origin[axis]) * inv_d
        elif ray_origin[axis] < box_min[axis] or ray_origin[axis] > box_max[axis]:
            outside_parallel_slab = 1

    t_enter = ti.max(ti.max(ti.min(t1.x, t2.x), ti.min(t1.y, t2.y)), ti.min(t1.z, t2.z))
    t_exit = ti.min(ti.min(ti.max(t1.x, t2.x), ti.max(t1.y, t2.y)), ti.max(t1.z, t2.z))

    # Initialize result
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    hit_face = FACE_POS_Z
    hit_uv = vec2(0.0, 0.0)

    if outside_parallel_slab == 0 and t_exit >= t_enter and t_enter >= 0.0:
        did_hit = 1
        hit_t = t_enter
        hit_point = ray_origin + t_enter * ray_direction

        hit_normal = vec3(0.0, 0.0, 1.0)
        if t_enter == t1.x:
            hit_face = FACE_NEG_X
            hit_normal = vec3(-1.0, 0.0, 0.0)
        elif t_enter == t2.x:
            hit_face = FACE_POS_X
            hit_normal = vec3(1.0, 0.0, 0.0)
        elif t_enter == t1.y:
            hit_face = FACE_NEG_Y
            hit_normal = vec3(0.0, -1.0, 0.0)
        elif t_enter == t2.y:
            hit_face = FACE_POS_Y
            hit_normal = vec3(0.0, 1.0, 0.0)
        elif t_enter == t1.z:
            hit_face = FACE_NEG_Z
            hit_normal = vec3(0.0, 0.0, -1.0)

        hit_uv = face_uv(hit_face, hit_point, box_min, box_max)

    return BoxHitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        face=hit_face,
        uv=hit_uv,
    )
