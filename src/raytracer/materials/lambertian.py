"""Lambertian (ideal diffuse) material implementation.

A diffuse surface scatters the incoming ray toward ``normal + p`` where ``p``
is a uniformly distributed point inside the unit sphere. The resulting
directions favour the normal, approximating a cosine-weighted lobe. Diffuse
surfaces never absorb a ray outright; the albedo tints every bounce.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.materials.lambertian import Lambertian
    >>> red = Lambertian(albedo=(0.8, 0.1, 0.1))
    >>> # Use scatter_lambertian within a Taichi kernel:
    >>> # record = scatter_lambertian(albedo, hit_record, rng_state)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from raytracer.core.ray import near_zero
from raytracer.core.rng import random_in_unit_sphere
from raytracer.geometry.sphere import HitRecord
from raytracer.materials.base import Material, MaterialType, ScatterRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Lambertian(Material):
    """Diffuse material handle.

    Attributes:
        albedo: The diffuse reflectance color (RGB). Components are expected
            to lie in [0, 1] but this is not enforced.
    """

    albedo: tuple[float, float, float]

    material_type = MaterialType.LAMBERTIAN

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))


@ti.func
def scatter_lambertian(albedo: vec3, rec: HitRecord, rng_state: ti.u32) -> ScatterRecord:
    """Scatter a ray off a diffuse surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        rec: The hit record of the intersection being shaded.
        rng_state: The current random stream state.

    Returns:
        A ScatterRecord whose origin is the hit point, whose direction is the
        normal perturbed by a random point in the unit sphere, and whose
        attenuation is the albedo. Always scatters.
    """
    offset, s = random_in_unit_sphere(rng_state)
    scatter_direction = rec.normal + offset

    # Catch degenerate scatter direction
    if near_zero(scatter_direction):
        scatter_direction = rec.normal

    return ScatterRecord(
        did_scatter=1,
        attenuation=albedo,
        origin=rec.point,
        direction=scatter_direction,
        rng_state=s,
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 1024

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(material: Lambertian) -> int:
    """Add a Lambertian material to the type registry.

    Args:
        material: The diffuse material handle.

    Returns:
        The type-local index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = material.albedo
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def scatter_lambertian_by_id(
    material_idx: ti.i32,
    rec: HitRecord,
    rng_state: ti.u32,
) -> ScatterRecord:
    """Scatter off a registered Lambertian material.

    Args:
        material_idx: The type-local index of the material.
        rec: The hit record of the intersection being shaded.
        rng_state: The current random stream state.

    Returns:
        The ScatterRecord from scatter_lambertian.
    """
    return scatter_lambertian(lambertian_albedos[material_idx], rec, rng_state)
