"""Path tracing integrator: radiance estimation and the render target.

The estimator follows one ray through the scene. At every surface hit the
material either scatters the ray, multiplying the running attenuation by its
albedo, or absorbs it. A ray that escapes picks up the sky gradient. Bounces
are counted and a ray that is still hitting geometry after MAX_DEPTH bounces
contributes black.

The recursion color(ray, depth) = attenuation * color(scattered, depth + 1)
is unrolled into a loop that carries the attenuation product and the depth
counter, so stack usage does not grow with the bounce count.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, cpu_max_num_threads=1, random_seed=7)
    >>> from src.pathtracer.core.integrator import render_image, setup_render_target
    >>> from src.pathtracer.scene.default_scene import create_default_scene
    >>> from src.pathtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(200, 100)
    >>> render_image(num_samples=100)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.pinhole import get_ray_jittered
from src.pathtracer.core.ray import Ray, ScatterRecord, make_absorbed_record, unit_vector
from src.pathtracer.geometry.sphere import HitRecord
from src.pathtracer.materials.lambertian import get_lambertian_albedo, scatter_lambertian
from src.pathtracer.materials.metal import get_metal_albedo, scatter_metal
from src.pathtracer.scene.intersection import intersect_scene
from src.pathtracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Bounces allowed before a ray that keeps hitting geometry is cut to black
MAX_DEPTH = 50

# Lower bound of every scene query; keeps a scattered ray from hitting the
# surface it leaves
T_MIN = 1e-3
T_MAX = tm.inf

# Background gradient endpoints (bottom and top of the sky)
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Running average of the samples for each pixel
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the buffers.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(ray: Ray, rec: HitRecord) -> ScatterRecord:
    """Dispatch to the scatter function of the hit material.

    A material id that is not registered absorbs the ray.
    """
    mat_type = get_material_type(rec.material_id)
    type_index = get_material_type_index(rec.material_id)

    result = make_absorbed_record()

    if mat_type == int(MaterialType.LAMBERTIAN):
        result = scatter_lambertian(get_lambertian_albedo(type_index), ray, rec)

    elif mat_type == int(MaterialType.METAL):
        result = scatter_metal(get_metal_albedo(type_index), ray, rec)

    return result


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky gradient for a ray that leaves the scene.

    Blends from white at the bottom to sky blue at the top using the
    vertical component of the normalized direction, mapped from [-1, 1]
    to [0, 1].
    """
    t = 0.5 * (unit_vector(direction).y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


@ti.func
def estimate_radiance(ray: Ray, depth: ti.i32) -> vec3:
    """Estimate the color carried back along a single ray.

    Each pass of the loop resolves the closest hit in (T_MIN, T_MAX):
    - miss: the attenuation product times the background color is returned
    - hit with depth > MAX_DEPTH: black
    - hit: the material scatters (attenuation multiplied in, depth + 1)
      or absorbs (black)

    Args:
        ray: The ray to follow.
        depth: Number of bounces already taken by this path.

    Returns:
        The estimated color (RGB).
    """
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = Ray(origin=ray.origin, direction=ray.direction)
    bounce = depth

    # Taichi doesn't parallelize while loops, so the path stays sequential
    active = 1
    while active == 1:
        rec = intersect_scene(current, T_MIN, T_MAX)

        if rec.hit == 0:
            radiance = throughput * background_color(current.direction)
            active = 0
        elif bounce > MAX_DEPTH:
            active = 0
        else:
            scatter = _scatter_material(current, rec)
            if scatter.did_scatter == 0:
                active = 0
            else:
                throughput *= scatter.attenuation
                current = Ray(origin=scatter.origin, direction=scatter.direction)
                bounce += 1

    return radiance


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_one_spp(width: ti.i32, height: ti.i32):
    """Trace one jittered camera ray per pixel and fold it into the average."""
    for i, j in ti.ndrange(width, height):
        color = estimate_radiance(get_ray_jittered(i, j, width, height), 0)

        _sample_count[i, j] += 1
        n = _sample_count[i, j]

        # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        _color_buffer[i, j] += (color - _color_buffer[i, j]) / ti.cast(n, ti.f32)


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, depth: ti.i32) -> vec3:
    return estimate_radiance(Ray(origin=origin, direction=direction), depth)


@ti.kernel
def _background_single(direction: vec3) -> vec3:
    return background_color(direction)


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 0,
) -> tuple[float, float, float]:
    """Estimate the color for one ray against the current scene.

    Python-callable entry point, mostly useful for tests and debugging.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z), not necessarily normalized.
        depth: Bounce count to start from.

    Returns:
        Tuple of (R, G, B) values.
    """
    color = _trace_single_ray(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        depth,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def sky_color(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Evaluate the background gradient for a direction from Python scope."""
    color = _background_single(vec3(direction[0], direction[1], direction[2]))
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(num_samples: int = 1) -> None:
    """Render the image with the specified number of samples per pixel.

    Samples accumulate into the color buffer, so the function can be called
    repeatedly to refine the estimate.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    for _ in range(num_samples):
        _render_one_spp(width, height)


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    return int(_sample_count[0, 0])


def get_normalized_image_numpy() -> npt.NDArray[np.float32]:
    """Get the averaged linear image as a NumPy array.

    Returns:
        Array of shape (height, width, 3), rows ordered top to bottom. Values
        are the raw per-pixel means; no clamping is applied.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    image = _color_buffer.to_numpy()[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    # Row j = 0 is the bottom of the view plane; images start at the top
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)
