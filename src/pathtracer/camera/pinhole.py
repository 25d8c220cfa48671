"""Pinhole camera mapping normalized image coordinates to rays.

The camera is described by an origin and a view plane given as a lower-left
corner plus two basis vectors spanning its width and height. A coordinate
(u, v) in [0, 1]^2 maps to the ray

    origin -> lower_left_corner + u * horizontal + v * vertical

with u running left to right and v bottom to top. Ray directions are not
normalized.

Camera.look_at() derives the view plane from look-from/look-at positioning
and a vertical field of view.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.camera.pinhole import Camera, setup_camera
    >>>
    >>> camera = Camera()  # origin at 0, view plane at z = -1
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Configuration for a corner/basis pinhole camera.

    Attributes:
        origin: Camera position in world space (x, y, z).
        lower_left_corner: Lower-left corner of the view plane.
        horizontal: Vector spanning the full width of the view plane.
        vertical: Vector spanning the full height of the view plane.
    """

    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lower_left_corner: tuple[float, float, float] = (-2.0, -1.0, -1.0)
    horizontal: tuple[float, float, float] = (4.0, 0.0, 0.0)
    vertical: tuple[float, float, float] = (0.0, 2.0, 0.0)

    @classmethod
    def look_at(
        cls,
        lookfrom: tuple[float, float, float],
        lookat: tuple[float, float, float],
        vup: tuple[float, float, float],
        vfov: float,
        aspect_ratio: float,
    ) -> "Camera":
        """Build a camera from look-at positioning.

        The view plane sits at unit distance in front of lookfrom.

        Args:
            lookfrom: Camera position in world space.
            lookat: Point the camera is looking at.
            vup: Up direction for camera orientation (typically (0, 1, 0)).
            vfov: Vertical field of view in degrees.
            aspect_ratio: Width divided by height of the output image.

        Returns:
            A Camera with origin, corner and basis vectors filled in.
        """
        theta = math.radians(vfov)
        viewport_height = 2.0 * math.tan(theta / 2.0)
        viewport_width = aspect_ratio * viewport_height

        origin = np.array(lookfrom, dtype=np.float64)
        target = np.array(lookat, dtype=np.float64)
        up = np.array(vup, dtype=np.float64)

        # w points from lookat toward lookfrom (backward)
        w = origin - target
        w = w / np.linalg.norm(w)
        u = np.cross(up, w)
        u = u / np.linalg.norm(u)
        v = np.cross(w, u)

        horizontal = viewport_width * u
        vertical = viewport_height * v
        lower_left = origin - horizontal / 2.0 - vertical / 2.0 - w

        return cls(
            origin=_to_triple(origin),
            lower_left_corner=_to_triple(lower_left),
            horizontal=_to_triple(horizontal),
            vertical=_to_triple(vertical),
        )


def _to_triple(array: np.ndarray) -> tuple[float, float, float]:
    return (float(array[0]), float(array[1]), float(array[2]))


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload a camera configuration for use by the render kernels.

    Must be called from Python scope before rendering.
    """
    _camera_origin[None] = list(camera.origin)
    _lower_left_corner[None] = list(camera.lower_left_corner)
    _viewport_horizontal[None] = list(camera.horizontal)
    _viewport_vertical[None] = list(camera.vertical)


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the camera origin toward the view-plane point. The
        direction is left unnormalized.
    """
    origin = _camera_origin[None]
    point_on_viewport = (
        _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    return make_ray(origin, point_on_viewport - origin)


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a ray through a random point inside a pixel.

    Averaging many such rays per pixel antialiases edges.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray for u = (i + xi) / width, v = (j + xi) / height with
        independent xi in [0, 1).
    """
    u = (ti.cast(pixel_i, ti.f32) + ti.random(ti.f32)) / ti.cast(width, ti.f32)
    v = (ti.cast(pixel_j, ti.f32) + ti.random(ti.f32)) / ti.cast(height, ti.f32)
    return get_ray(u, v)


@ti.kernel
def _get_ray_direction(u: ti.f32, v: ti.f32) -> vec3:
    return get_ray(u, v).direction


def camera_ray_direction(u: float, v: float) -> tuple[float, float, float]:
    """Get the direction of the camera ray through (u, v) from Python scope."""
    direction = _get_ray_direction(u, v)
    return (float(direction[0]), float(direction[1]), float(direction[2]))


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the uploaded camera state for debugging."""
    return {
        "origin": _to_triple(_camera_origin[None]),
        "lower_left_corner": _to_triple(_lower_left_corner[None]),
        "horizontal": _to_triple(_viewport_horizontal[None]),
        "vertical": _to_triple(_viewport_vertical[None]),
    }
