"""Camera module for view setup and ray generation.

Components:
    camera: CameraConfig, the thin-lens Camera and its ray generator

Camera responsibilities:
    - Derive the viewport and pixel grid from look-at parameters
    - Jitter each sample uniformly within its pixel square
    - Start rays on the defocus disk for depth of field
    - Drive the render kernel and return the 8-bit image
"""

from .camera import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    Camera,
    CameraConfig,
    ProgressCallback,
    defocus_disk_sample,
    get_ray,
    pixel_sample_square,
    setup_camera,
)

__all__ = [
    "Camera",
    "CameraConfig",
    "ProgressCallback",
    "setup_camera",
    "get_ray",
    "pixel_sample_square",
    "defocus_disk_sample",
    "MAX_IMAGE_WIDTH",
    "MAX_IMAGE_HEIGHT",
]
