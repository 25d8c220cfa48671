"""Metal (specular reflective) material implementation.

A metal surface mirrors the incoming ray about the surface normal:
    R = I - 2(I . N)N

where I is the normalized incident direction and N is the outward normal.
The ray is only scattered when R points away from the surface
(dot(R, N) > 0); otherwise it is absorbed, which covers rays arriving from
inside the sphere and other degenerate configurations.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # scatter = scatter_metal(albedo, ray, hit_record)
"""

import math

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, ScatterRecord, reflect, unit_vector
from src.pathtracer.geometry.sphere import HitRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(albedo: vec3, ray: Ray, rec: HitRecord) -> ScatterRecord:
    """Reflect a ray off a metal surface.

    Args:
        albedo: The reflective color (RGB).
        ray: The incoming ray. Its direction need not be normalized.
        rec: The hit record at the scatter point.

    Returns:
        A ScatterRecord. did_scatter is 1 when the reflected direction has
        a positive dot product with the normal and 0 otherwise. The
        attenuation is the albedo in both cases but only meaningful when
        the ray scattered.
    """
    reflected = reflect(unit_vector(ray.direction), rec.normal)

    did_scatter = 0
    if tm.dot(reflected, rec.normal) > 0.0:
        did_scatter = 1

    return ScatterRecord(
        did_scatter=did_scatter,
        origin=rec.point,
        direction=reflected,
        attenuation=albedo,
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Reset the metal registry to empty."""
    num_metal_materials[None] = 0


def add_metal_material(albedo: tuple[float, float, float]) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
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

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by registry index."""
    return metal_albedos[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, ray: Ray, rec: HitRecord) -> ScatterRecord:
    """Reflect off a registered metal material looked up by index."""
    return scatter_metal(get_metal_albedo(material_idx), ray, rec)
