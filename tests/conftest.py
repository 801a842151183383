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
    invalidate the module-level fields.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene and material registries before and after each test."""
    # Import here so Taichi is initialized first
    from src.spheretrace.core.integrator import clear_render_target
    from src.spheretrace.materials.dielectric import clear_dielectric_materials
    from src.spheretrace.materials.lambertian import clear_lambertian_materials
    from src.spheretrace.materials.material import clear_material_tracking
    from src.spheretrace.materials.metal import clear_metal_materials
    from src.spheretrace.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_material_tracking()
        clear_render_target()

    _clear_all()

    yield

    _clear_all()
