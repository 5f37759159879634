"""Pytest configuration for raytracer tests.

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


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear primitives, materials and lights before and after each test."""
    # Import here so the session fixture has initialized Taichi first
    from src.whitted.materials.cook_torrance import clear_cook_torrance_materials
    from src.whitted.materials.lambert import clear_lambert_materials
    from src.whitted.materials.lambert_phong import clear_lambert_phong_materials
    from src.whitted.materials.solid_color import clear_solid_color_materials
    from src.whitted.scene.intersection import clear_scene
    from src.whitted.scene.lights import clear_lights
    from src.whitted.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lights()
        clear_solid_color_materials()
        clear_lambert_materials()
        clear_lambert_phong_materials()
        clear_cook_torrance_materials()
        _clear_material_tracking()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def fresh_scene():
    """Create a fresh SceneManager for each test."""
    from src.whitted.scene.manager import SceneManager

    scene = SceneManager()
    yield scene
    scene.clear()
