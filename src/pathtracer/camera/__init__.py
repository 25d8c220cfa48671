"""Camera module for primary ray generation.

Components:
    pinhole: Corner/basis pinhole camera with jittered sampling

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .pinhole import (
    Camera,
    camera_ray_direction,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "Camera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "camera_ray_direction",
    "get_camera_info",
]
