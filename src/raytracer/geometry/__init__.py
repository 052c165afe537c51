"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, hit record and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so they can be called
from the render kernel. They follow the pattern:
    record = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)
"""

from .sphere import HitRecord, Sphere, SphereShape, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "Sphere",
    "SphereShape",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
]
