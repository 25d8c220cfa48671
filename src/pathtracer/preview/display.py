"""Gamma correction and Matplotlib-based preview of rendered images.

Rendered colors are linear. For output they are gamma corrected with
out = in^(1/gamma); the default gamma of 2.0 is a per-channel square root.

Example:
    >>> from src.pathtracer.preview.display import show_preview
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(200, 100)
    >>> renderer.render(100)
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from src.pathtracer.core.progressive import ProgressiveRenderer

# Square-root encoding
DEFAULT_GAMMA = 2.0


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction for display.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value (default 2.0, i.e. square root).

    Returns:
        Gamma corrected image. A gamma of 1.0 returns the input unchanged.
    """
    if gamma == 1.0:
        return image

    # Negative values would turn into NaN under a fractional power
    image = np.maximum(image, 0.0)

    result = np.power(image, 1.0 / gamma)

    return result.astype(np.float32)


def show_preview(
    renderer: ProgressiveRenderer,
    *,
    gamma: float = DEFAULT_GAMMA,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4),
    block: bool = True,
) -> None:
    """Display the current render as a Matplotlib figure.

    Args:
        renderer: The ProgressiveRenderer instance to display.
        gamma: Gamma correction value (default 2.0).
        title: Custom title (default shows sample count).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = np.clip(renderer.get_image_numpy(gamma=gamma), 0.0, 1.0)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")
    ax.set_title(title if title is not None else f"Render Preview - {renderer.sample_count} SPP")

    plt.tight_layout()
    plt.show(block=block)
