"""Default sphere scene.

A small diffuse sphere resting on a very large ground sphere, flanked by two
mirror spheres, viewed by the default camera:
- Ground: radius 100 at (0, -100.5, -1), Lambertian (0.8, 0.8, 0.0)
- Center: radius 0.5 at (0, 0, -1), Lambertian (0.8, 0.3, 0.3)
- Right: radius 0.5 at (1, 0, -1), metal (0.8, 0.6, 0.2)
- Left: radius 0.5 at (-1, 0, -1), metal (0.8, 0.8, 0.8)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.scene.default_scene import create_default_scene
    >>> from src.pathtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
"""

from src.pathtracer.camera.pinhole import Camera
from src.pathtracer.scene.manager import SceneManager

GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0
GROUND_ALBEDO = (0.8, 0.8, 0.0)

CENTER_SPHERE_CENTER = (0.0, 0.0, -1.0)
CENTER_SPHERE_ALBEDO = (0.8, 0.3, 0.3)

SPHERE_RADIUS = 0.5


def create_diffuse_scene() -> SceneManager:
    """Create the ground plus a single red diffuse sphere.

    Returns:
        The populated SceneManager.
    """
    scene = SceneManager()
    scene.add_lambertian_sphere(CENTER_SPHERE_CENTER, SPHERE_RADIUS, CENTER_SPHERE_ALBEDO)
    scene.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, GROUND_ALBEDO)
    return scene


def create_default_scene() -> tuple[SceneManager, Camera]:
    """Create the default four-sphere scene and its camera.

    Returns:
        Tuple of (scene, camera). The camera still has to be uploaded with
        setup_camera() before rendering.
    """
    scene = create_diffuse_scene()
    scene.add_metal_sphere((1.0, 0.0, -1.0), SPHERE_RADIUS, (0.8, 0.6, 0.2))
    scene.add_metal_sphere((-1.0, 0.0, -1.0), SPHERE_RADIUS, (0.8, 0.8, 0.8))
    return scene, Camera()
