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
    destroy the module-level fields. A single CPU thread keeps the random
    stream sequential so seeded runs are repeatable.
    """
    ti.init(arch=ti.cpu, random_seed=42, cpu_max_num_threads=1)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test."""
    # Import here so Taichi is initialized before the fields are created
    from src.pathtracer.core.integrator import clear_render_target
    from src.pathtracer.materials.lambertian import clear_lambertian_materials
    from src.pathtracer.materials.metal import clear_metal_materials
    from src.pathtracer.scene.intersection import clear_scene
    from src.pathtracer.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        _clear_material_tracking()
        clear_render_target()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def default_camera():
    """Upload the default camera (origin at 0, view plane at z = -1)."""
    from src.pathtracer.camera.pinhole import Camera, setup_camera

    camera = Camera()
    setup_camera(camera)
    return camera
