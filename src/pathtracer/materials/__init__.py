"""Materials module for light scattering models.

Components:
    lambertian: Ideal diffuse reflection, always scatters
    metal: Mirror reflection, absorbs rays that would reflect into the surface

Each material provides a Taichi scatter function with the shared contract
    scatter_<kind>(albedo, ray, hit_record) -> ScatterRecord

plus a fixed-capacity albedo registry addressed by a kind-local index.
"""

from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_albedo",
    "get_lambertian_material_count",
    # Metal
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_albedo",
    "get_metal_material_count",
]
