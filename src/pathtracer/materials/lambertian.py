"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters every incoming ray. The outgoing direction
points from the hit point to a random point inside the unit sphere that sits
on top of the surface (centered at point + normal), which approximates a
cosine-weighted diffuse lobe. The attenuation is the albedo.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # scatter = scatter_lambertian(albedo, ray, hit_record)
"""

import math

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, ScatterRecord, random_in_unit_sphere
from src.pathtracer.geometry.sphere import HitRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(albedo: vec3, ray: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter a ray off a Lambertian surface.

    The incoming ray does not influence the outgoing direction; it is part
    of the signature so every material shares the same scatter contract.

    Args:
        albedo: The diffuse reflectance color (RGB).
        ray: The incoming ray.
        rec: The hit record at the scatter point.

    Returns:
        A ScatterRecord with did_scatter == 1, origin at the hit point,
        direction (p + n + random_in_unit_sphere()) - p and attenuation
        equal to the albedo.
    """
    target = rec.point + rec.normal + random_in_unit_sphere()
    return ScatterRecord(
        did_scatter=1,
        origin=rec.point,
        direction=target - rec.point,
        attenuation=albedo,
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Reset the Lambertian registry to empty."""
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component must be in [0, 1]. NaN and infinities are rejected.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if not math.isfinite(component) or component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "A surface cannot reflect more light than it receives."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by registry index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, ray: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter off a registered Lambertian material looked up by index."""
    return scatter_lambertian(get_lambertian_albedo(material_idx), ray, rec)
