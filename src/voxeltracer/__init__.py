"""Taichi-based Whitted raytracer for voxel scenes.

This package renders scenes made of axis-aligned boxes with recursive
Whitted shading, with support for:
- Diffuse, specular, mirror and transparent materials
- Per-face textures with wrapped nearest-neighbour sampling
- Point light with distance-attenuated shadows
- Real-time viewing with orbit and zoom camera controls

Subpackages:
    core: Saturating colors, ray utilities, shading and the frame renderer
    geometry: Axis-aligned box primitive and slab intersection
    materials: Textures and Whitted materials
    scene: Box storage, scene building, the point light and the default scene
    camera: Orbit camera with primary ray generation
    preview: Framebuffer, interactive window and PNG export
"""

__version__ = "0.1.0"
