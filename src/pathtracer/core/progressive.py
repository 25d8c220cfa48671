"""Progressive renderer for iterative sample accumulation.

This module wraps the integrator's render target in a small class that
supports:
- Progressive rendering that refines over time
- Batch rendering (multiple SPP in one call)
- Progress callbacks and a generator interface for status output
- Gamma-corrected 8-bit output and PPM/PNG export

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, cpu_max_num_threads=1)
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
    >>> from src.pathtracer.scene.default_scene import create_default_scene
    >>> from src.pathtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(200, 100)
    >>> renderer.render(100)  # Render 100 SPP
    >>> renderer.save_ppm("spheres.ppm")
"""

from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from src.pathtracer.core.integrator import (
    clear_render_target,
    get_normalized_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from src.pathtracer.preview.display import DEFAULT_GAMMA, apply_gamma
from src.pathtracer.preview.export import image_to_uint8, save_png_from_array, save_ppm

# Callback receives (current_samples, total_target_samples)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """A progressive renderer that accumulates samples over time.

    The renderer keeps its own width/height and delegates to the global
    integrator buffers (Taichi fields).

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, width: int, height: int) -> None:
        """Initialize the progressive renderer.

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum
                supported size.
        """
        self._width = width
        self._height = height
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def sample_count(self) -> int:
        """Get the current number of accumulated samples per pixel."""
        return get_total_samples()

    def reset(self) -> None:
        """Clear the accumulated samples without changing the image size."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Resize the render target and reset the accumulator."""
        self._width = width
        self._height = height
        setup_render_target(width, height)

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render samples progressively with optional progress callback.

        Args:
            num_samples: Total number of samples per pixel to add.
            batch_size: Number of samples to render before each callback.
            callback: Optional callback called after each batch with
                (current_total_samples, target_total_samples).
        """
        for current, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render samples progressively, yielding progress after each batch.

        Yields:
            Tuple of (current_total_samples, target_total_samples).
        """
        if num_samples <= 0:
            return

        batch_size = max(1, batch_size)
        target_samples = self.sample_count + num_samples

        remaining = num_samples
        while remaining > 0:
            batch = min(batch_size, remaining)
            render_image(batch)
            remaining -= batch
            yield (self.sample_count, target_samples)

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the averaged image as a float array of shape (height, width, 3).

        Args:
            gamma: Gamma correction value. Default 1.0 (linear). Use 2.0 for
                the square-root encoding written to PPM files.
        """
        image = get_normalized_image_numpy()
        return apply_gamma(image, gamma)

    def get_image_uint8(self, gamma: float = DEFAULT_GAMMA) -> npt.NDArray[np.uint8]:
        """Get the gamma-corrected image quantized to 8 bits per channel."""
        return image_to_uint8(get_normalized_image_numpy(), gamma=gamma)

    def save_ppm(self, filepath: str, gamma: float = DEFAULT_GAMMA) -> None:
        """Save the rendered image as a plain-text PPM (P3) file."""
        save_ppm(self.get_image_uint8(gamma=gamma), filepath)

    def save_png(self, filepath: str, gamma: float = DEFAULT_GAMMA) -> None:
        """Save the rendered image as an 8-bit PNG file."""
        save_png_from_array(get_normalized_image_numpy(), filepath, gamma=gamma)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"samples={self.sample_count})"
        )
