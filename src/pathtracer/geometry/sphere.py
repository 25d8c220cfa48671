"""Sphere primitive with analytic ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the quadratic
intersection routine used for every primitive in the scene.

The ray-sphere intersection is found by solving:
    |origin + t * direction - center|^2 = radius^2

which is a quadratic a*t^2 + 2*b*t + c = 0 with
    a = dot(direction, direction)
    b = dot(oc, direction)
    c = dot(oc, oc) - radius^2
    oc = origin - center

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material reference.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Expected positive, not validated.
        material_id: Unified id of the (shared) material on the surface.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The outward surface normal at the intersection point. It is
            not flipped toward the incoming ray; materials decide sidedness.
            Only valid if hit == 1.
        material_id: Unified material id of the hit surface, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def hit_sphere(
    ray: Ray,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection inside the open interval (t_min, t_max).

    A non-positive discriminant is a miss, so a ray that only grazes the
    sphere is not reported. The near root is tried first and the far root
    only if the near one falls outside the interval. Both bounds are strict.

    A ray leaving a surface has a root at t = 0 in exact arithmetic, but in
    f32 that root usually lands on a tiny positive value, so the strict
    lower bound alone does not exclude self-hits. Callers pass a margin such
    as T_MIN = 1e-3 for that.

    No guard is applied to a near-zero direction; a degenerate ray produces
    NaN/inf parameters that simply fail the interval test or propagate.

    Args:
        ray: The ray to test.
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound on t.
        t_max: Exclusive upper bound on t.

    Returns:
        A HitRecord for the nearest valid root. Check the hit field to
        determine if an intersection occurred.
    """
    oc = ray.origin - sphere.center

    a = tm.dot(ray.direction, ray.direction)
    b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - a * c

    result = make_miss_record()

    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-b - sqrt_d) / a
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = (-b + sqrt_d) / a
            valid = (t > t_min) and (t < t_max)

        if valid:
            point = ray_at(ray, t)
            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=(point - sphere.center) / sphere.radius,
                material_id=sphere.material_id,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> Sphere:
    """Create a sphere from center, radius and material id."""
    return Sphere(center=center, radius=radius, material_id=material_id)
