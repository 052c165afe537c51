"""Metal (specular reflective) material implementation.

This module implements mirror-like reflection with optional fuzz. The
normalized incoming direction is reflected about the surface normal:

    R = D - 2(D . N)N

and then perturbed by ``fuzz`` times a random point in the unit sphere. A
perturbed ray that ends up pointing into the surface is absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.materials.metal import Metal
    >>> gold = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
    >>> # Use scatter_metal within a Taichi kernel:
    >>> # record = scatter_metal(albedo, fuzz, incident_dir, hit_record, rng_state)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from raytracer.core.ray import reflect
from raytracer.core.rng import random_in_unit_sphere
from raytracer.geometry.sphere import HitRecord
from raytracer.materials.base import Material, MaterialType, ScatterRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Metal(Material):
    """Metal material handle.

    Attributes:
        albedo: The reflective color (RGB), tinting reflected light.
        fuzz: Reflection roughness. 0 is a perfect mirror. Values outside
            [0, 1] are clamped at construction.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    material_type = MaterialType.METAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))
        object.__setattr__(self, "fuzz", min(max(float(self.fuzz), 0.0), 1.0))


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    rec: HitRecord,
    rng_state: ti.u32,
) -> ScatterRecord:
    """Scatter a ray off a metal surface.

    For metals, no energy is absorbed on a successful reflection beyond the
    albedo tint.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any length).
        rec: The hit record of the intersection being shaded.
        rng_state: The current random stream state.

    Returns:
        A ScatterRecord with did_scatter = 1 if the scattered direction points
        away from the surface (positive dot with the normal), 0 otherwise.
    """
    unit_direction = tm.normalize(incident_direction)
    reflected = reflect(unit_direction, rec.normal)

    offset, s = random_in_unit_sphere(rng_state)
    scattered_direction = reflected + fuzz * offset

    did_scatter = 0
    if tm.dot(scattered_direction, rec.normal) > 0.0:
        did_scatter = 1

    return ScatterRecord(
        did_scatter=did_scatter,
        attenuation=albedo,
        origin=rec.point,
        direction=scattered_direction,
        rng_state=s,
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 1024

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(material: Metal) -> int:
    """Add a metal material to the type registry.

    Args:
        material: The metal material handle (fuzz already clamped).

    Returns:
        The type-local index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = material.albedo
    metal_fuzzes[idx] = material.fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    rec: HitRecord,
    rng_state: ti.u32,
) -> ScatterRecord:
    """Scatter off a registered metal material.

    Args:
        material_idx: The type-local index of the material.
        incident_direction: The incoming ray direction.
        rec: The hit record of the intersection being shaded.
        rng_state: The current random stream state.

    Returns:
        The ScatterRecord from scatter_metal.
    """
    return scatter_metal(
        metal_albedos[material_idx],
        metal_fuzzes[material_idx],
        incident_direction,
        rec,
        rng_state,
    )
