"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure and vector utilities
    rng: Hash-seeded random streams, one per camera sample
    integrator: Radiance estimation, background gradient and render kernel

All per-ray operations are Taichi functions so they run inside the render
kernel, which Taichi parallelises over pixels.
"""

from .ray import (
    FLOAT_EPSILON,
    Ray,
    length_squared,
    make_ray,
    near_zero,
    ray_at,
    reflect,
    refract,
    schlick_fresnel,
    vec3,
)
from .rng import (
    hash_u32,
    next_state,
    random_f32,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_range,
    seed_stream,
)

# Note: integrator is NOT imported here to avoid circular imports with the
# camera package. Import it directly from raytracer.core.integrator.

__all__ = [
    "FLOAT_EPSILON",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "reflect",
    "refract",
    "schlick_fresnel",
    "near_zero",
    "hash_u32",
    "seed_stream",
    "next_state",
    "random_f32",
    "random_range",
    "random_in_unit_sphere",
    "random_in_unit_disk",
]
