"""Whitted-style recursive shading.

This module implements the per-ray shading function used by the renderer.
For the nearest box hit along a ray it combines:
    - Diffuse: surface color * k_diffuse * max(0, N . L)
    - Specular: light color * k_specular * max(0, V . R)^shininess
    - Reflection: a recursive ray mirrored about the normal, weighted by k_reflect
    - Refraction: a recursive ray bent by Snell's law, weighted by k_transparent
and darkens the direct terms by the shadow cast by the first occluder
between the surface and the point light.

All color arithmetic saturates after every operation (see core.color).

Recursion is unrolled at compile time: the depth is a template argument, so
each pixel compiles to a fixed tree of at most 15 shading nodes (one primary
hit and two children per node down to MAX_DEPTH). Rays deeper than
MAX_DEPTH return the sky color without touching the scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.voxeltracer.core.shader import cast_ray
    >>>
    >>> @ti.kernel
    ... def shade_one() -> ti.i32:
    ...     color = cast_ray(ti.math.vec3(0, 0, 0), ti.math.vec3(0, 0, -1), 0)
    ...     return color.x
"""

import taichi as ti
import taichi.math as tm

from src.voxeltracer.core.color import Color, color_add, color_scale, ivec3
from src.voxeltracer.core.ray import offset_origin, reflect, refract, vec3
from src.voxeltracer.materials.material import (
    get_material_properties,
    get_material_refractive_index,
    get_material_shininess,
    surface_color,
)
from src.voxeltracer.scene.intersection import SceneHitRecord, intersect_scene, shadow_attenuation
from src.voxeltracer.scene.light import get_light_color, get_light_intensity, get_light_position

# =============================================================================
# Shading Constants
# =============================================================================

# Maximum recursion depth for reflection and refraction rays
MAX_DEPTH = 3

# Color returned for rays that escape the scene or exceed MAX_DEPTH
SKYBOX_COLOR = Color(68, 142, 228)
_SKY_R, _SKY_G, _SKY_B = SKYBOX_COLOR.as_tuple()


@ti.func
def cast_shadow(point: vec3, normal: vec3, light_position: vec3) -> ti.f32:
    """Compute the shadow intensity at a surface point.

    Args:
        point: The surface point being shaded.
        normal: The outward surface normal at the point.
        light_position: Position of the point light.

    Returns:
        Shadow intensity in [0, 1]; 0 means fully lit.
    """
    to_light = light_position - point
    light_distance = tm.length(to_light)
    light_dir = tm.normalize(to_light)
    origin = offset_origin(point, normal, light_dir)
    return shadow_attenuation(origin, light_dir, light_distance)


@ti.func
def _shade_hit(
    ray_origin: vec3,
    ray_direction: vec3,
    rec: SceneHitRecord,
    depth: ti.template(),
) -> ivec3:
    """Shade a hit point, recursing for reflection and refraction.

    Args:
        ray_origin: Origin of the ray that produced the hit.
        ray_direction: Direction of the ray that produced the hit.
        rec: The nearest hit along the ray.
        depth: Compile-time recursion depth of the incoming ray.

    Returns:
        The shaded color.
    """
    material_id = rec.material_id
    point = rec.point
    normal = rec.normal

    props = get_material_properties(material_id)
    k_diffuse = props[0]
    k_specular = props[1]
    k_reflect = props[2]
    k_transparent = props[3]
    shininess = get_material_shininess(material_id)
    surface = surface_color(material_id, rec.face, rec.uv)

    light_position = get_light_position()
    light_dir = tm.normalize(light_position - point)
    view_dir = tm.normalize(ray_origin - point)
    reflect_dir = tm.normalize(reflect(-light_dir, normal))

    shadow = cast_shadow(point, normal, light_position)
    effective_intensity = get_light_intensity() * (1.0 - shadow)

    diffuse_intensity = ti.max(0.0, tm.dot(normal, light_dir))
    diffuse = color_scale(
        color_scale(color_scale(surface, k_diffuse), diffuse_intensity),
        effective_intensity,
    )

    specular_intensity = ti.max(0.0, tm.dot(view_dir, reflect_dir)) ** shininess
    specular = color_scale(
        color_scale(color_scale(get_light_color(), k_specular), specular_intensity),
        effective_intensity,
    )

    reflect_color = ivec3(0, 0, 0)
    if k_reflect > 0.0:
        mirror_dir = tm.normalize(reflect(ray_direction, normal))
        mirror_origin = offset_origin(point, normal, mirror_dir)
        reflect_color = cast_ray(mirror_origin, mirror_dir, depth + 1)

    refract_color = ivec3(0, 0, 0)
    if k_transparent > 0.0:
        refract_dir = refract(ray_direction, normal, get_material_refractive_index(material_id))
        refract_origin = offset_origin(point, normal, refract_dir)
        refract_color = cast_ray(refract_origin, refract_dir, depth + 1)

    local = color_scale(color_add(diffuse, specular), 1.0 - k_reflect - k_transparent)
    return color_add(
        color_add(local, color_scale(reflect_color, k_reflect)),
        color_scale(refract_color, k_transparent),
    )


@ti.func
def cast_ray(ray_origin: vec3, ray_direction: vec3, depth: ti.template()) -> ivec3:
    """Compute the color seen along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The normalized direction of the ray.
        depth: Compile-time recursion depth; 0 for primary rays.

    Returns:
        The shaded color of the nearest hit, or SKYBOX_COLOR when the ray
        misses every box or depth exceeds MAX_DEPTH.
    """
    color = ivec3(_SKY_R, _SKY_G, _SKY_B)
    if ti.static(depth <= MAX_DEPTH):
        rec = intersect_scene(ray_origin, ray_direction)
        if rec.hit == 1:
            color = _shade_hit(ray_origin, ray_direction, rec, depth)
    return color
