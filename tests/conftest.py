"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate the fields declared by already imported modules.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear world, material and render target state around each test."""
    # Import here so Taichi is initialized before fields are declared
    from pathtracer.core.integrator import clear_render_target
    from pathtracer.materials.dielectric import clear_dielectric_materials
    from pathtracer.materials.lambertian import clear_lambertian_materials
    from pathtracer.materials.metal import clear_metal_materials
    from pathtracer.scene.intersection import clear_world
    from pathtracer.scene.world import clear_material_tracking

    def _clear_all():
        clear_world()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_material_tracking()
        clear_render_target()

    _clear_all()

    yield

    _clear_all()
