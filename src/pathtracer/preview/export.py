"""Image export utilities for rendered images.

Supported formats:
    - PPM P3 (plain text): header "P3", "<width> <height>", "255", then one
      "r g b" line per pixel, rows top to bottom
    - PNG (8-bit via Pillow)

Quantization follows floor(255.99 * c) on gamma-corrected channels.

Example:
    >>> import sys
    >>> from src.pathtracer.preview.export import image_to_uint8, write_ppm
    >>> pixels = image_to_uint8(linear_image)  # (H, W, 3) float32
    >>> write_ppm(pixels, sys.stdout)
"""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.pathtracer.preview.display import DEFAULT_GAMMA, apply_gamma

PPM_MAGIC = "P3"
PPM_MAX_VALUE = 255


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8-bit channels.

    Applies gamma correction, then floor(255.99 * c). NaN channels become 0
    and values are clipped to [0, 1] first so every output lands in
    [0, 255].

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma correction value (default 2.0).

    Returns:
        8-bit image array of shape (H, W, 3).
    """
    image = np.nan_to_num(np.asarray(image, dtype=np.float32), nan=0.0)
    corrected = np.clip(apply_gamma(image, gamma), 0.0, 1.0)
    return np.floor(255.99 * corrected).astype(np.uint8)


def format_ppm(pixels: npt.NDArray[np.uint8]) -> str:
    """Encode an 8-bit (H, W, 3) image as plain-text PPM.

    Raises:
        ValueError: If the array is not of shape (H, W, 3).
    """
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {pixels.shape}")

    height, width, _ = pixels.shape
    lines = [PPM_MAGIC, f"{width} {height}", str(PPM_MAX_VALUE)]
    lines.extend(f"{r} {g} {b}" for r, g, b in pixels.reshape(-1, 3).tolist())
    return "\n".join(lines) + "\n"


def write_ppm(pixels: npt.NDArray[np.uint8], stream: TextIO) -> None:
    """Write an 8-bit image as plain-text PPM to an open text stream."""
    stream.write(format_ppm(pixels))


def save_ppm(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit image as a plain-text PPM file."""
    with open(filepath, "w", encoding="ascii", newline="\n") as f:
        write_ppm(pixels, f)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Save a linear float image as an 8-bit PNG file.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value (default 2.0).
    """
    pil_image = PILImage.fromarray(image_to_uint8(image, gamma=gamma))
    pil_image.save(filepath)
