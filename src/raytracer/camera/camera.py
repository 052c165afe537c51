"""Thin-lens camera: configuration, ray generation and the render entry point.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward look_from (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits on the plane of perfect focus, ``focus_dist`` in front of
the camera. Pixel (0, 0) is the top-left pixel; rows grow downward.

Each camera ray starts on the defocus disk (or at the camera center when the
defocus angle is not positive) and passes through a point jittered uniformly
within the pixel's square.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.camera.camera import Camera, CameraConfig
    >>> from raytracer.scene.presets import create_random_scene
    >>> scene, config = create_random_scene(seed=1)
    >>> camera = Camera(config)
    >>> pixels = camera.render(scene, seed=42)  # (height, width, 3) uint8
"""

import logging
import math
import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti

from raytracer.core.rng import random_f32, random_in_unit_disk
from raytracer.core.ray import vec3

if TYPE_CHECKING:
    from raytracer.scene.world import Scene

logger = logging.getLogger(__name__)

# Type alias for progress callback
# Callback receives (rows_completed, total_rows)
ProgressCallback = Callable[[int, int], None]

# Render target limit, shared with the integrator's preallocated buffer
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048


# =============================================================================
# Camera Configuration
# =============================================================================


@dataclass(frozen=True)
class CameraConfig:
    """Configuration for the camera and the render loop.

    Instances are immutable; use dataclasses.replace to derive a variant.

    Attributes:
        look_from: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation.
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
        image_width: Image width in pixels; the height is derived.
        samples_per_pixel: Number of random samples averaged per pixel.
        max_depth: Maximum number of ray bounces.
        defocus_angle: Variation angle of rays through each pixel, in degrees.
            Zero or negative disables depth of field.
        focus_dist: Distance from look_from to the plane of perfect focus.
    """

    look_from: tuple[float, float, float] = (13.0, 2.0, 3.0)
    look_at: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 20.0
    aspect_ratio: float = 16.0 / 9.0
    image_width: int = 600
    samples_per_pixel: int = 200
    max_depth: int = 20
    defocus_angle: float = 0.1
    focus_dist: float = 10.2

    def __post_init__(self) -> None:
        if self.image_width < 1:
            raise ValueError(f"image_width must be at least 1, got {self.image_width}")
        if self.samples_per_pixel < 1:
            raise ValueError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if not self.focus_dist > 0.0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")
        if self.image_width > MAX_IMAGE_WIDTH or self.image_height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({self.image_width}x{self.image_height}) exceed maximum "
                f"supported ({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )

    @property
    def image_height(self) -> int:
        """Image height in pixels, at least 1."""
        return max(1, int(self.image_width / self.aspect_ratio))


# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel00_loc = ti.Vector.field(3, dtype=ti.f32, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Offset to pixel to the right
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Offset to pixel below
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_defocus_enabled = ti.field(dtype=ti.i32, shape=())


def _frozen(values: npt.ArrayLike) -> npt.NDArray[np.float64]:
    array = np.array(values, dtype=np.float64)
    array.setflags(write=False)
    return array


class Camera:
    """A camera with geometry derived once from a CameraConfig.

    All derived quantities are read-only NumPy arrays.
    """

    def __init__(self, config: CameraConfig) -> None:
        self._config = config
        self._image_width = config.image_width
        self._image_height = config.image_height
        self._samples_per_pixel = config.samples_per_pixel
        self._max_depth = config.max_depth
        self._defocus_enabled = config.defocus_angle > 0.0

        look_from = np.array(config.look_from, dtype=np.float64)
        look_at = np.array(config.look_at, dtype=np.float64)
        vup = np.array(config.vup, dtype=np.float64)

        theta = math.radians(config.vfov)
        h = math.tan(theta / 2.0)
        viewport_height = 2.0 * h * config.focus_dist
        viewport_width = viewport_height * config.aspect_ratio

        # u, v, w unit basis vectors for the camera coordinate frame
        w = look_from - look_at
        w = w / np.linalg.norm(w)
        u = np.cross(vup, w)
        u = u / np.linalg.norm(u)
        v = np.cross(w, u)

        # Vectors across the horizontal and down the vertical viewport edges
        viewport_u = viewport_width * u
        viewport_v = viewport_height * -v

        pixel_delta_u = viewport_u / self._image_width
        pixel_delta_v = viewport_v / self._image_height

        viewport_upper_left = (
            look_from - config.focus_dist * w - viewport_u / 2.0 - viewport_v / 2.0
        )
        pixel00_loc = viewport_upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

        defocus_radius = config.focus_dist * math.tan(math.radians(config.defocus_angle / 2.0))

        self._center = _frozen(look_from)
        self._u = _frozen(u)
        self._v = _frozen(v)
        self._w = _frozen(w)
        self._pixel00_loc = _frozen(pixel00_loc)
        self._pixel_delta_u = _frozen(pixel_delta_u)
        self._pixel_delta_v = _frozen(pixel_delta_v)
        self._defocus_radius = defocus_radius
        self._defocus_disk_u = _frozen(defocus_radius * u)
        self._defocus_disk_v = _frozen(defocus_radius * v)

    @property
    def config(self) -> CameraConfig:
        """The configuration this camera was built from."""
        return self._config

    @property
    def image_width(self) -> int:
        return self._image_width

    @property
    def image_height(self) -> int:
        return self._image_height

    @property
    def samples_per_pixel(self) -> int:
        return self._samples_per_pixel

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def defocus_enabled(self) -> bool:
        """Whether rays originate on the defocus disk."""
        return self._defocus_enabled

    @property
    def center(self) -> npt.NDArray[np.float64]:
        return self._center

    @property
    def basis(self) -> tuple[npt.NDArray[np.float64], ...]:
        """The (u, v, w) orthonormal basis: right, up, backward."""
        return self._u, self._v, self._w

    @property
    def pixel00_loc(self) -> npt.NDArray[np.float64]:
        """World-space center of the top-left pixel."""
        return self._pixel00_loc

    @property
    def pixel_delta_u(self) -> npt.NDArray[np.float64]:
        return self._pixel_delta_u

    @property
    def pixel_delta_v(self) -> npt.NDArray[np.float64]:
        return self._pixel_delta_v

    @property
    def defocus_radius(self) -> float:
        return self._defocus_radius

    @property
    def defocus_disk_u(self) -> npt.NDArray[np.float64]:
        return self._defocus_disk_u

    @property
    def defocus_disk_v(self) -> npt.NDArray[np.float64]:
        return self._defocus_disk_v

    def render(
        self,
        scene: "Scene",
        *,
        seed: int | None = None,
        rows_per_batch: int | None = None,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.uint8]:
        """Render the scene to an 8-bit pixel buffer.

        Every pixel is independent and Taichi spreads them over its worker
        threads. With a fixed seed the result is bit-identical regardless of
        the batch size or thread count.

        Args:
            scene: The scene to render. It is uploaded to the GPU fields first.
            seed: Seed for the per-sample random streams. None draws a fresh
                seed, making the render nondeterministic.
            rows_per_batch: Number of image rows per kernel launch. None
                renders the whole image in one launch.
            callback: Optional function called after each batch with
                (rows_completed, total_rows).

        Returns:
            Array of shape (image_height, image_width, 3) with dtype uint8,
            row-major, top row first.

        Raises:
            ValueError: If rows_per_batch is less than 1.
        """
        from raytracer.core.integrator import get_image_numpy, render_image
        from raytracer.preview.export import image_to_uint8

        if seed is None:
            seed = secrets.randbits(32)
        seed &= 0xFFFFFFFF

        logger.info(
            "Rendering %dx%d image, %d spp, max depth %d, seed %d",
            self._image_width,
            self._image_height,
            self.samples_per_pixel,
            self.max_depth,
            seed,
        )
        start = time.perf_counter()

        scene.load()
        setup_camera(self)
        render_image(
            self._image_width,
            self._image_height,
            samples_per_pixel=self.samples_per_pixel,
            max_depth=self.max_depth,
            seed=seed,
            rows_per_batch=rows_per_batch,
            callback=callback,
        )
        pixels = image_to_uint8(get_image_numpy())

        logger.info("Render finished in %.2fs", time.perf_counter() - start)
        return pixels

    def __repr__(self) -> str:
        return (
            f"Camera(width={self._image_width}, height={self._image_height}, "
            f"spp={self.samples_per_pixel}, max_depth={self.max_depth})"
        )


# =============================================================================
# Camera Setup (Python-side, called once per render)
# =============================================================================


def setup_camera(camera: Camera) -> None:
    """Write the camera's derived geometry into the Taichi fields.

    Must be called before any kernel that generates camera rays.

    Args:
        camera: The camera to activate.
    """
    _camera_center[None] = camera.center.tolist()
    _pixel00_loc[None] = camera.pixel00_loc.tolist()
    _pixel_delta_u[None] = camera.pixel_delta_u.tolist()
    _pixel_delta_v[None] = camera.pixel_delta_v.tolist()
    _defocus_disk_u[None] = camera.defocus_disk_u.tolist()
    _defocus_disk_v[None] = camera.defocus_disk_v.tolist()
    _defocus_enabled[None] = int(camera.defocus_enabled)


# =============================================================================
# Ray Generation (Taichi-compatible, GPU-callable)
# =============================================================================


@ti.func
def pixel_sample_square(rng_state: ti.u32):
    """Random offset within the square surrounding a pixel at the origin.

    Returns:
        A tuple (offset, new_state) where offset = px * delta_u + py * delta_v
        with px, py uniform in [-0.5, 0.5).
    """
    px, s = random_f32(rng_state)
    py, s = random_f32(s)
    offset = (px - 0.5) * _pixel_delta_u[None] + (py - 0.5) * _pixel_delta_v[None]
    return offset, s


@ti.func
def defocus_disk_sample(rng_state: ti.u32):
    """Random point on the camera defocus disk.

    Returns:
        A tuple (point, new_state).
    """
    p, s = random_in_unit_disk(rng_state)
    point = _camera_center[None] + p.x * _defocus_disk_u[None] + p.y * _defocus_disk_v[None]
    return point, s


@ti.func
def get_ray(pixel_x: ti.i32, pixel_y: ti.i32, rng_state: ti.u32):
    """Generate a randomly sampled camera ray for a pixel.

    Args:
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        rng_state: The current random stream state.

    Returns:
        A tuple (origin, direction, new_state). The direction points from
        the ray origin to the jittered pixel sample and is not normalized.
    """
    pixel_center = (
        _pixel00_loc[None]
        + ti.cast(pixel_x, ti.f32) * _pixel_delta_u[None]
        + ti.cast(pixel_y, ti.f32) * _pixel_delta_v[None]
    )
    offset, s = pixel_sample_square(rng_state)
    pixel_sample = pixel_center + offset

    ray_origin = vec3(0.0, 0.0, 0.0)
    if _defocus_enabled[None] == 1:
        ray_origin, s = defocus_disk_sample(s)
    else:
        ray_origin = _camera_center[None]

    return ray_origin, pixel_sample - ray_origin, s
