"""Taichi path tracer for scenes of analytic spheres.

This package estimates pixel colors by recursive light-path simulation:
- Closest-hit ray/sphere intersection over a linearly scanned scene
- Lambertian (diffuse) and metal (specular) scattering
- Depth-bounded path estimation with a white-to-sky-blue background
- Stochastic per-pixel antialiasing and plain-text PPM output

Subpackages:
    core: Ray structures, vector helpers, the radiance estimator and sampler
    geometry: Sphere primitive and hit records
    materials: Lambertian and metal scattering
    scene: Sphere storage, closest-hit resolution and scene management
    camera: Corner/basis camera with jittered ray generation
    preview: Gamma correction, PPM/PNG export and Matplotlib preview
"""

__version__ = "0.1.0"
