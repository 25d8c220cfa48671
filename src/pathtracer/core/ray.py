"""Ray data structures and vector utilities for the path tracer.

This module provides the Ray and ScatterRecord dataclasses together with the
vector helpers used by intersection and scattering code. Everything here runs
inside Taichi kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length; camera and scattered rays are left unnormalized.
    """

    origin: vec3
    direction: vec3


@ti.dataclass
class ScatterRecord:
    """Outcome of a material's scatter decision.

    Attributes:
        did_scatter: 1 if the material produced an outgoing ray, 0 if the
            incoming ray was absorbed. The other fields are only meaningful
            when did_scatter == 1.
        origin: Origin of the scattered ray (the hit point).
        direction: Direction of the scattered ray.
        attenuation: Per-channel color multiplier for the bounced light.
    """

    did_scatter: ti.i32
    origin: vec3
    direction: vec3
    attenuation: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


@ti.func
def make_absorbed_record() -> ScatterRecord:
    """Create a ScatterRecord for a ray that was absorbed."""
    return ScatterRecord(
        did_scatter=0,
        origin=vec3(0.0, 0.0, 0.0),
        direction=vec3(0.0, 0.0, 0.0),
        attenuation=vec3(0.0, 0.0, 0.0),
    )


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Args:
        v: The input vector.

    Returns:
        The squared Euclidean length of the vector.
    """
    return tm.dot(v, v)


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    A zero-length input is not guarded and yields NaN components.
    """
    return v / tm.length(v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes incident - 2 * dot(incident, normal) * normal. The normal should
    be unit length for the result to be a mirror reflection.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal.

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


# =============================================================================
# Random Sampling
# =============================================================================


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point strictly inside the unit sphere.

    Rejection sampling: draw a point uniformly in the cube [-1, 1)^3 from
    three independent ti.random() draws and retry until its squared length
    is below 1. About pi/6 of the draws are accepted; the loop has no
    iteration cap.

    Returns:
        A random point p with dot(p, p) < 1.
    """
    p = vec3(1.0, 1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = (
            2.0 * vec3(ti.random(ti.f32), ti.random(ti.f32), ti.random(ti.f32))
            - vec3(1.0, 1.0, 1.0)
        )
    return p
