"""Path tracing integrator.

This module estimates the radiance arriving along camera rays and assembles
the image. A ray bounces through the scene, picking up each material's
attenuation, until it escapes to the sky, is absorbed, or runs out of depth.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Sky gradient background for escaped rays
    - Bounded path depth; running out of depth contributes black
    - Deterministic per-sample random streams, so the image does not depend
      on how rows are split across kernel launches or threads

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.camera import Camera, setup_camera
    >>> from raytracer.core.integrator import get_image_numpy, render_image
    >>> from raytracer.scene.presets import create_random_scene
    >>>
    >>> scene, config = create_random_scene(seed=3)
    >>> camera = Camera(config)
    >>> scene.load()
    >>> setup_camera(camera)
    >>> render_image(camera.image_width, camera.image_height, 10, 20, seed=5)
    >>> image = get_image_numpy()
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raytracer.camera.camera import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    ProgressCallback,
    get_ray,
)
from raytracer.core.ray import make_ray
from raytracer.core.rng import seed_stream
from raytracer.materials.registry import scatter_material
from raytracer.scene.intersection import intersect_scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Accepted hit range; T_MIN keeps scattered rays off their own surface
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient: a = SKY_BLEND * unit_y + 1, color = (1 - a) * white + a * SKY_COLOR
SKY_BLEND = 0.8
SKY_COLOR = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Radiance Estimation
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky gradient seen by a ray that hits nothing.

    Args:
        direction: The ray direction (any non-zero length).

    Returns:
        The blend of white and sky blue driven by the vertical component of
        the normalized direction.
    """
    unit_direction = tm.normalize(direction)
    a = SKY_BLEND * unit_direction.y + 1.0
    return (1.0 - a) * vec3(1.0, 1.0, 1.0) + a * SKY_COLOR


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32, rng_state: ti.u32):
    """Estimate the radiance carried back along a ray.

    Follows the path iteratively, multiplying the attenuation of every
    scattering event into a running throughput.

    Args:
        origin: The ray origin.
        direction: The ray direction.
        max_depth: Maximum number of surface interactions. Zero yields black.
        rng_state: The current random stream state.

    Returns:
        A tuple (color, new_state). Absorbed paths and paths that exhaust
        max_depth return black.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray = make_ray(origin, direction)
    s = rng_state

    # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(ray.origin, ray.direction, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background_color(ray.direction)
                active = 0
            else:
                scattered = scatter_material(rec.material_id, ray.direction, rec, s)
                s = scattered.rng_state
                if scattered.did_scatter == 0:
                    active = 0
                else:
                    throughput *= scattered.attenuation
                    ray = make_ray(scattered.origin, scattered.direction)

    return color, s


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Gamma-corrected pixel colors, indexed [row, column] with row 0 at the top
# (preallocated to max size to avoid kernel recompilation)
_pixel_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image dimensions and clear the pixel buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the pixel buffer to zero."""
    _pixel_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    seed: ti.u32,
):
    """Render image rows [row_start, row_end) into the pixel buffer.

    Every sample seeds its own random stream from (seed, pixel, sample), so
    a pixel's value does not depend on which launch or thread computes it.
    """
    for y, x in ti.ndrange((row_start, row_end), width):
        pixel_index = y * width + x
        total = vec3(0.0, 0.0, 0.0)

        for sample in range(samples_per_pixel):
            state = seed_stream(seed, pixel_index, sample)
            origin, direction, state = get_ray(x, y, state)
            color, state = ray_color(origin, direction, max_depth, state)
            total += color

        average = total / ti.cast(samples_per_pixel, ti.f32)

        # Gamma 2 approximation
        _pixel_buffer[y, x] = tm.sqrt(average)


@ti.kernel
def _ray_color_kernel(
    origin: vec3, direction: vec3, max_depth: ti.i32, seed: ti.u32
) -> vec3:
    color, _ = ray_color(origin, direction, max_depth, seed_stream(seed, 0, 0))
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Estimate the radiance along a single ray against the loaded scene.

    This is a Python-callable function for testing and debugging. For
    production rendering, use render_image() which processes all pixels in
    parallel.

    Args:
        origin: The ray origin.
        direction: The ray direction.
        max_depth: Maximum number of surface interactions.
        seed: Seed for the ray's random stream.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _ray_color_kernel(vec3(*origin), vec3(*direction), max_depth, seed & 0xFFFFFFFF)
    return (float(color[0]), float(color[1]), float(color[2]))


def render_image(
    width: int,
    height: int,
    samples_per_pixel: int,
    max_depth: int,
    seed: int,
    rows_per_batch: int | None = None,
    callback: ProgressCallback | None = None,
) -> None:
    """Render the loaded scene through the active camera.

    The scene and camera must already be uploaded (Scene.load() and
    setup_camera()). Rows are rendered in batches of ``rows_per_batch``;
    the result is identical for any batch size.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Camera samples averaged per pixel.
        max_depth: Maximum number of bounces per path.
        seed: Seed for the per-sample random streams.
        rows_per_batch: Rows per kernel launch. None renders all rows at once.
        callback: Optional function called after each batch with
            (rows_completed, total_rows).

    Raises:
        ValueError: If rows_per_batch is less than 1, or the dimensions are
            invalid.
    """
    if rows_per_batch is None:
        rows_per_batch = height
    if rows_per_batch < 1:
        raise ValueError(f"rows_per_batch must be at least 1, got {rows_per_batch}")

    setup_render_target(width, height)

    for row_start in range(0, height, rows_per_batch):
        row_end = min(row_start + rows_per_batch, height)
        _render_rows(row_start, row_end, width, samples_per_pixel, max_depth, seed & 0xFFFFFFFF)
        logger.debug("Rendered rows %d-%d of %d", row_start, row_end - 1, height)
        if callback is not None:
            ti.sync()
            callback(row_end, height)

    # Barrier: every pixel is written before the buffer is read back
    ti.sync()


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the last rendered image as a NumPy array.

    Values are gamma corrected but not clamped; NaN or Inf produced by
    degenerate geometry are passed through unchanged.

    Returns:
        NumPy array of shape (height, width, 3) with dtype float32, top row
        first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _pixel_buffer.to_numpy()
    return np.ascontiguousarray(full_image[:height, :width, :], dtype=np.float32)
