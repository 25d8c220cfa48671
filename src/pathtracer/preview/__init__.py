"""Preview module for output and visualization.

Components:
    display: Gamma correction and Matplotlib-based preview
    export: PPM (plain text) and PNG export with 8-bit quantization

Example:
    >>> from src.pathtracer.preview import image_to_uint8, save_ppm
    >>> save_ppm(image_to_uint8(renderer.get_image_numpy()), "spheres.ppm")
"""

from src.pathtracer.preview.display import (
    DEFAULT_GAMMA,
    apply_gamma,
    show_preview,
)
from src.pathtracer.preview.export import (
    format_ppm,
    image_to_uint8,
    save_png_from_array,
    save_ppm,
    write_ppm,
)

__all__ = [
    # Display functions
    "show_preview",
    "apply_gamma",
    "DEFAULT_GAMMA",
    # Export functions
    "image_to_uint8",
    "format_ppm",
    "write_ppm",
    "save_ppm",
    "save_png_from_array",
]
