"""Image encoding utilities for rendered images.

This module converts the renderer's float buffer into 8-bit pixels and
writes/reads them through Pillow.

Supported formats:
    - PNG (8-bit RGB)
    - PPM (binary P6, 8-bit RGB)

Example:
    >>> from raytracer.preview.export import save_image
    >>> pixels = camera.render(scene, seed=1)
    >>> save_image(pixels, "output.png")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# File extension -> Pillow format name
SUPPORTED_FORMATS = {
    ".png": "PNG",
    ".ppm": "PPM",
}


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Quantize a gamma-corrected float image to 8 bits per channel.

    Each value is scaled by 256, saturated to [0, 255] and truncated, so
    1.0 maps to 255 and 0.999 to 255 as well. NaN maps to 0.

    Args:
        image: Image array of shape (H, W, 3) with values nominally in [0, 1].

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    scaled = np.asarray(image, dtype=np.float64) * 256.0
    scaled = np.nan_to_num(scaled, nan=0.0, posinf=255.0, neginf=0.0)
    return np.clip(scaled, 0.0, 255.0).astype(np.uint8)


def _validate_pixels(pixels: npt.NDArray[np.uint8]) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {pixels.shape}")
    if pixels.dtype != np.uint8:
        raise ValueError(f"Expected dtype uint8, got {pixels.dtype}")


def save_image(pixels: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit RGB image, choosing the format from the file extension.

    Args:
        pixels: Image array of shape (H, W, 3) with dtype uint8, top row first.
        filepath: Output path ending in .png or .ppm.

    Raises:
        ValueError: If the array shape or dtype is wrong, or the extension is
            not supported.
    """
    _validate_pixels(pixels)

    path = Path(filepath)
    image_format = SUPPORTED_FORMATS.get(path.suffix.lower())
    if image_format is None:
        raise ValueError(
            f"Unsupported image format {path.suffix!r}; "
            f"expected one of {sorted(SUPPORTED_FORMATS)}"
        )

    pil_image = PILImage.fromarray(np.ascontiguousarray(pixels), mode="RGB")
    pil_image.save(path, format=image_format)


def load_image(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Load an image as an 8-bit RGB array of shape (H, W, 3)."""
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.uint8).copy()


def compute_rmse(
    image_a: npt.NDArray[np.number],
    image_b: npt.NDArray[np.number],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
