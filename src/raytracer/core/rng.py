"""Per-sample random number streams for Monte Carlo sampling.

Taichi's built-in ``ti.random`` draws from a per-thread generator, so the
values a pixel receives depend on which thread happens to render it. To make
renders reproducible regardless of how the work is partitioned, every camera
sample owns a small xorshift32 stream whose initial state is derived by
hashing the render seed, the pixel index and the sample index.

All functions are pure: they take the current stream state and return the
drawn value together with the advanced state.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.core.rng import random_f32, seed_stream
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     state = seed_stream(ti.u32(7), 0, 0)
    ...     value, state = random_f32(state)
    ...     return value
"""

import taichi as ti

from raytracer.core.ray import length_squared, vec3

# Upper bound on rejection-sampling iterations. The chance of 64 consecutive
# rejections is below 1e-20 for the unit sphere and far smaller for the disk.
MAX_REJECTION_ATTEMPTS = 64

# Odd constant mixed into the sample index so sample 0 and pixel 0 differ
_SAMPLE_SALT = 0x6A09E667

# 2^-24: maps the top 24 bits of a state to [0, 1)
_INV_2_24 = 1.0 / 16777216.0


@ti.func
def hash_u32(value: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer (Thomas Wang's integer hash)."""
    x = value
    x = (x ^ ti.u32(61)) ^ (x >> ti.u32(16))
    x = x * ti.u32(9)
    x = x ^ (x >> ti.u32(4))
    x = x * ti.u32(0x27D4EB2D)
    x = x ^ (x >> ti.u32(15))
    return x


@ti.func
def seed_stream(seed: ti.u32, pixel_index: ti.i32, sample_index: ti.i32) -> ti.u32:
    """Derive the initial stream state for one camera sample.

    Args:
        seed: The render-wide seed.
        pixel_index: Row-major pixel index (y * width + x).
        sample_index: Index of the sample within the pixel.

    Returns:
        A non-zero xorshift state.
    """
    h = hash_u32(seed ^ hash_u32(ti.cast(pixel_index, ti.u32)))
    h = hash_u32(h ^ hash_u32(ti.cast(sample_index, ti.u32) + ti.u32(_SAMPLE_SALT)))
    # xorshift has a fixed point at zero
    return ti.select(h == ti.u32(0), ti.u32(1), h)


@ti.func
def next_state(state: ti.u32) -> ti.u32:
    """Advance an xorshift32 state by one step."""
    x = state
    x = x ^ (x << ti.u32(13))
    x = x ^ (x >> ti.u32(17))
    x = x ^ (x << ti.u32(5))
    return x


@ti.func
def random_f32(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Returns:
        A tuple (value, new_state).
    """
    s = next_state(state)
    value = ti.cast(s >> ti.u32(8), ti.f32) * _INV_2_24
    return value, s


@ti.func
def random_range(low: ti.f32, high: ti.f32, state: ti.u32):
    """Draw a uniform float in [low, high).

    Returns:
        A tuple (value, new_state).
    """
    u, s = random_f32(state)
    return low + (high - low) * u, s


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Generate a random point strictly inside the unit sphere.

    Draws uniformly from the cube [-1, 1)^3 until the point has squared
    length below 1.

    Returns:
        A tuple (point, new_state).
    """
    s = state
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, s = random_range(-1.0, 1.0, s)
            y, s = random_range(-1.0, 1.0, s)
            z, s = random_range(-1.0, 1.0, s)
            p = vec3(x, y, z)
            if length_squared(p) < 1.0:
                found = True
    if not found:
        p = vec3(0.0, 0.0, 0.0)
    return p, s


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Generate a random point inside the unit disk in the xy-plane.

    Used for sampling the camera's defocus disk.

    Returns:
        A tuple (point, new_state) with point = (x, y, 0), x^2 + y^2 < 1.
    """
    s = state
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if not found:
            x, s = random_range(-1.0, 1.0, s)
            y, s = random_range(-1.0, 1.0, s)
            p = vec3(x, y, 0.0)
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    if not found:
        p = vec3(0.0, 0.0, 0.0)
    return p, s

