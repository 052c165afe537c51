"""Sphere primitive with ray-sphere intersection.

Two representations live here:

- ``Sphere`` is the immutable, Python-side primitive used to build scenes. It
  holds a shared reference to a Material handle.
- ``SphereShape`` is the Taichi-side record that the scene uploads into fields.
  The material is referenced by its registry ID.

The radius is signed. A negative radius leaves the surface unchanged but flips
the outward normal, which models the inner wall of a hollow shell.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.geometry.sphere import SphereShape, hit_sphere, vec3
    >>> # Use hit_sphere within a Taichi kernel
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from raytracer.core.ray import Ray, ray_at

if TYPE_CHECKING:
    from raytracer.materials.base import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@dataclass(frozen=True)
class Sphere:
    """A sphere primitive for scene construction.

    Zero radius is a caller error and yields NaN normals at render time.

    Attributes:
        center: The center point of the sphere (x, y, z).
        radius: The signed radius. Negative values invert the outward normal.
        material: The material shared by this sphere. Many spheres may hold the
            same material instance.
    """

    center: tuple[float, float, float]
    radius: float
    material: "Material"

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", tuple(float(c) for c in self.center))
        object.__setattr__(self, "radius", float(self.radius))


@ti.dataclass
class SphereShape:
    """A sphere as stored in the scene fields.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The signed radius of the sphere.
        material_id: The registry ID of the sphere's material.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The parameter value along the ray where intersection occurred.
        point: The 3D point where the ray intersected the surface.
        normal: The surface normal at the intersection point. Unit length and
            always facing against the incoming ray.
        front_face: 1 if the ray approached from the outward-normal side,
            0 otherwise.
        material_id: The registry ID of the material at the hit point.

    All fields except ``hit`` are only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: SphereShape,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    The intersection is found by solving:
        |ray_origin + t * ray_direction - center|^2 = radius^2

    which expands to the quadratic
        a*t^2 + 2*h*t + c = 0

    where:
        a = dot(direction, direction)
        h = dot(oc, direction)  (half of traditional b)
        c = dot(oc, oc) - radius^2
        oc = origin - center

    The nearer root is tried first; if it falls outside [t_min, t_max) the far
    root is tried.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Smallest accepted t (inclusive).
        t_max: Largest accepted t (exclusive).

    Returns:
        A HitRecord containing intersection information. Check hit field
        to determine if intersection occurred.
    """
    ray = Ray(origin=ray_origin, direction=ray_direction)
    oc = ray.origin - sphere.center

    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = half_b * half_b - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    record = make_miss_record()

    if discriminant >= 0.0:
        sqrtd = tm.sqrt(discriminant)

        # Find the nearest root that lies in the acceptable range
        root = (-half_b - sqrtd) / a
        valid = t_min <= root and root < t_max

        if not valid:
            root = (-half_b + sqrtd) / a
            valid = t_min <= root and root < t_max

        if valid:
            hit_point = ray_at(ray, root)

            # Dividing by the signed radius flips the normal for hollow shells
            outward_normal = (hit_point - sphere.center) / sphere.radius

            front_face = 0
            normal = -outward_normal
            if tm.dot(ray_direction, outward_normal) < 0.0:
                front_face = 1
                normal = outward_normal

            record = HitRecord(
                hit=1,
                t=root,
                point=hit_point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return record


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> SphereShape:
    """Create a sphere record within a Taichi kernel."""
    return SphereShape(center=center, radius=radius, material_id=material_id)
