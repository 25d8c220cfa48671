"""Scene module for sphere storage, closest-hit queries and management.

Components:
    intersection: Sphere fields and the linear closest-hit scan
    manager: Unified material ids, scene building and serialization
    default_scene: Ground plus diffuse and metal spheres

Scene data is kept in Taichi fields in Structure-of-Arrays layout. Spheres
reference materials by unified id, so materials are shared, never copied.
"""

from .default_scene import create_default_scene, create_diffuse_scene
from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    load_scene_file,
    save_scene_file,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "load_scene_file",
    "save_scene_file",
    # Default scene
    "create_default_scene",
    "create_diffuse_scene",
]
