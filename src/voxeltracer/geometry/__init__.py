"""Geometry module for the box primitive.

Components:
    box: Axis-aligned box with slab-method intersection, face
        classification and per-face texture coordinates

All intersection routines are implemented as Taichi functions (@ti.func)
for GPU-accelerated parallel intersection testing.
"""

from .box import BoxHitRecord, FaceClass, face_uv, hit_box

__all__ = [
    "FaceClass",
    "BoxHitRecord",
    "hit_box",
    "face_uv",
]
