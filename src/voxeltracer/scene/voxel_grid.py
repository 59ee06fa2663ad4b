"""Voxel grid scene configuration.

This module provides a factory function to create the default viewer scene:
a flat platform of grass blocks seen from the front.

The scene consists of:
- A grid_size x grid_size layer of cubes, centered on X and Z
- One grass material: top texture on the +Y face, side texture elsewhere
- A white point light in front of and above the platform
- An orbit camera on the +Z axis looking at the origin

Textures are loaded from image files when paths are given; otherwise solid
grass-colored textures are used so the scene works without assets.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.voxeltracer.scene.voxel_grid import create_voxel_grid_scene
    >>> from src.voxeltracer.camera.orbit import setup_camera
    >>> from src.voxeltracer.scene.light import setup_light
    >>>
    >>> scene, camera, light = create_voxel_grid_scene()
    >>> setup_camera(camera)
    >>> setup_light(light)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.voxeltracer.camera.orbit import OrbitCamera
from src.voxeltracer.core.color import Color
from src.voxeltracer.materials.material import Material
from src.voxeltracer.materials.texture import Texture, load_texture
from src.voxeltracer.scene.light import Light
from src.voxeltracer.scene.manager import VoxelScene

# Colors used for the grass material and its fallback textures
GRASS_TOP_COLOR = Color(0, 255, 0)
GRASS_SIDE_COLOR = Color(0, 150, 0)

# Default window size of the viewer
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600


# =============================================================================
# Voxel Grid Parameters
# =============================================================================


@dataclass
class VoxelGridParams:
    """Parameters for configuring the voxel grid scene.

    Attributes:
        grid_size: Number of cubes along X and along Z.
        cube_size: Edge length of each cube.
        y_offset: Y coordinate of the bottom of the platform.
        top_texture_path: Image for the top faces, or None for solid green.
        side_texture_path: Image for the side faces, or None for solid dark green.
        light_position: Position of the point light.
        light_color: RGB color of the light (0-255 per channel).
        light_intensity: Light intensity.
        camera_eye: Initial camera position.
        camera_center: Point the camera looks at and orbits around.

    Example:
        >>> params = VoxelGridParams()
        >>> params.grid_size
        5
        >>> custom = VoxelGridParams(grid_size=8, top_texture_path="assets/grass_top.png")
    """

    grid_size: int = 5
    cube_size: float = 0.5
    y_offset: float = -2.0
    top_texture_path: str | None = None
    side_texture_path: str | None = None
    light_position: tuple[float, float, float] = (1.0, 1.0, 5.0)
    light_color: tuple[int, int, int] = (255, 255, 255)
    light_intensity: float = 1.0
    camera_eye: tuple[float, float, float] = (0.0, 0.0, 6.5)
    camera_center: tuple[float, float, float] = (0.0, 0.0, 0.0)


def create_grass_material(
    top_texture_path: str | None = None,
    side_texture_path: str | None = None,
) -> Material:
    """Create the diffuse grass material.

    Args:
        top_texture_path: Image for the top faces, or None for a solid texture.
        side_texture_path: Image for the side faces, or None for a solid texture.

    Returns:
        A diffuse material with [top, side] textures.

    Raises:
        RuntimeError: If a texture file cannot be loaded.
    """
    if top_texture_path is not None:
        top = load_texture(top_texture_path)
    else:
        top = Texture.solid(GRASS_TOP_COLOR)

    if side_texture_path is not None:
        side = load_texture(side_texture_path)
    else:
        side = Texture.solid(GRASS_SIDE_COLOR)

    return Material(GRASS_TOP_COLOR, properties=(1.0, 0.0, 0.0, 0.0)).with_textures([top, side])


def create_voxel_grid_scene(
    params: VoxelGridParams | None = None,
) -> tuple[VoxelScene, OrbitCamera, Light]:
    """Create the voxel grid scene.

    Args:
        params: Scene parameters. Defaults to VoxelGridParams().

    Returns:
        A tuple (scene, camera, light). The camera and light still need to
        be uploaded with setup_camera and setup_light.

    Raises:
        RuntimeError: If a texture file cannot be loaded.
    """
    if params is None:
        params = VoxelGridParams()

    scene = VoxelScene()
    grass = scene.add_material(
        create_grass_material(params.top_texture_path, params.side_texture_path)
    )

    size = params.cube_size
    offset = params.grid_size * size / 2.0
    for x in range(params.grid_size):
        for z in range(params.grid_size):
            corner = (x * size - offset, params.y_offset, z * size - offset)
            scene.add_cube(corner, size, grass)

    camera = OrbitCamera(eye=params.camera_eye, center=params.camera_center)
    light = Light(
        position=params.light_position,
        color=Color(*params.light_color),
        intensity=params.light_intensity,
    )
    return scene, camera, light


def get_voxel_grid_bounds(
    params: VoxelGridParams | None = None,
) -> dict[str, tuple[float, float, float]]:
    """Get the bounding box of the voxel grid platform.

    Args:
        params: Scene parameters. Defaults to VoxelGridParams().

    Returns:
        Dictionary with 'min' and 'max' corners.
    """
    if params is None:
        params = VoxelGridParams()
    offset = params.grid_size * params.cube_size / 2.0
    return {
        "min": (-offset, params.y_offset, -offset),
        "max": (offset, params.y_offset + params.cube_size, offset),
    }
