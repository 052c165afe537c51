"""Preview module for output and visualization.

Components:
    display: Matplotlib-based display of a finished render
    export: 8-bit quantization and PNG/PPM encoding via Pillow

Example:
    >>> from raytracer.preview import save_image, show_image
    >>> pixels = camera.render(scene, seed=1)
    >>> save_image(pixels, "output.png")
    >>> show_image(pixels)
"""

from raytracer.preview.display import show_image
from raytracer.preview.export import (
    SUPPORTED_FORMATS,
    compute_rmse,
    image_to_uint8,
    load_image,
    save_image,
)

__all__ = [
    # Display functions
    "show_image",
    # Export functions
    "SUPPORTED_FORMATS",
    "image_to_uint8",
    "save_image",
    "load_image",
    "compute_rmse",
]
