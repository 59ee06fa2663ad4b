"""Pytest configuration for voxeltracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear boxes, materials, textures and the light around each test.

    This ensures tests are isolated from each other.
    """
    # Import here to avoid circular imports and ensure Taichi is initialized
    from src.voxeltracer.materials.material import clear_materials
    from src.voxeltracer.materials.texture import clear_textures
    from src.voxeltracer.scene.intersection import clear_scene
    from src.voxeltracer.scene.light import clear_light

    def _clear_all():
        clear_scene()
        clear_materials()
        clear_textures()
        clear_light()

    # Clear everything before test
    _clear_all()

    yield

    # Clear everything after test
    _clear_all()
