"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    ray: Ray and scatter records, vector helpers, rejection sampling
    integrator: Radiance estimator, background gradient and render target
    progressive: Sample accumulation wrapper with progress reporting

The estimator follows each camera ray through the scene as an explicit
bounce loop, multiplying material attenuations until the ray escapes to the
sky, is absorbed, or exceeds the maximum depth.
"""

from .ray import (
    Ray,
    ScatterRecord,
    length_squared,
    make_absorbed_record,
    make_ray,
    random_in_unit_sphere,
    ray_at,
    reflect,
    unit_vector,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from src.pathtracer.core.integrator or
# src.pathtracer.core.progressive when needed.

__all__ = [
    "Ray",
    "ScatterRecord",
    "ray_at",
    "make_ray",
    "make_absorbed_record",
    "vec3",
    "length_squared",
    "unit_vector",
    "reflect",
    "random_in_unit_sphere",
]
