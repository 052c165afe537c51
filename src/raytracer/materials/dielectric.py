"""Dielectric (glass/water) material implementation.

This module implements transparent materials that refract light according to
Snell's law and reflect it under total internal reflection.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when (n1 / n2) * sin(theta1) > 1

By default the material refracts whenever refraction is geometrically
possible. Real glass also reflects a fraction of light below the critical
angle; enabling ``fresnel`` adds that partial reflection using Schlick's
approximation.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.materials.dielectric import Dielectric
    >>> glass = Dielectric(ior=1.5)
    >>> # Use scatter_dielectric within a Taichi kernel:
    >>> # record = scatter_dielectric(ior, 0, incident_dir, hit_record, rng_state)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from raytracer.core.ray import reflect, refract, schlick_fresnel
from raytracer.core.rng import random_f32
from raytracer.geometry.sphere import HitRecord
from raytracer.materials.base import Material, MaterialType, ScatterRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Dielectric(Material):
    """Dielectric material handle.

    Attributes:
        ior: Index of refraction, must be positive. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
        fresnel: If True, reflect with Schlick probability below the critical
            angle instead of always refracting.
    """

    ior: float
    fresnel: bool = False

    material_type = MaterialType.DIELECTRIC

    def __post_init__(self) -> None:
        if not self.ior > 0.0:
            raise ValueError(f"Index of refraction must be positive, got {self.ior}")
        object.__setattr__(self, "ior", float(self.ior))
        object.__setattr__(self, "fresnel", bool(self.fresnel))


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    use_fresnel: ti.i32,
    incident_direction: vec3,
    rec: HitRecord,
    rng_state: ti.u32,
) -> ScatterRecord:
    """Scatter a ray through a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        use_fresnel: 1 to add Schlick partial reflection, 0 to always refract
            when possible.
        incident_direction: The incoming ray direction (any length).
        rec: The hit record of the intersection being shaded. Its front_face
            flag selects between entering (1/ior) and leaving (ior).
        rng_state: The current random stream state.

    Returns:
        A ScatterRecord with white attenuation. Always scatters.
    """
    s = rng_state

    # Dielectrics don't absorb light - attenuation is white
    attenuation = vec3(1.0, 1.0, 1.0)

    refraction_ratio = ior
    if rec.front_face == 1:
        refraction_ratio = 1.0 / ior

    unit_direction = tm.normalize(incident_direction)
    cos_theta = tm.min(tm.dot(-unit_direction, rec.normal), 1.0)
    sin_theta = tm.sqrt(1.0 - cos_theta * cos_theta)

    cannot_refract = refraction_ratio * sin_theta > 1.0

    should_reflect = cannot_refract
    if use_fresnel == 1 and not cannot_refract:
        u, s = random_f32(s)
        should_reflect = u < schlick_fresnel(cos_theta, refraction_ratio)

    direction = vec3(0.0, 0.0, 0.0)
    if should_reflect:
        direction = reflect(unit_direction, rec.normal)
    else:
        direction = refract(unit_direction, rec.normal, refraction_ratio)

    return ScatterRecord(
        did_scatter=1,
        attenuation=attenuation,
        origin=rec.point,
        direction=direction,
        rng_state=s,
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 1024

# Storage for dielectric material properties
dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
dielectric_fresnel = ti.field(dtype=ti.i32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(material: Dielectric) -> int:
    """Add a dielectric material to the type registry.

    Args:
        material: The dielectric material handle.

    Returns:
        The type-local index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = material.ior
    dielectric_fresnel[idx] = int(material.fresnel)
    num_dielectric_materials[None] = idx + 1
    return idx


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    rec: HitRecord,
    rng_state: ti.u32,
) -> ScatterRecord:
    """Scatter off a registered dielectric material.

    Args:
        material_idx: The type-local index of the material.
        incident_direction: The incoming ray direction.
        rec: The hit record of the intersection being shaded.
        rng_state: The current random stream state.

    Returns:
        The ScatterRecord from scatter_dielectric.
    """
    return scatter_dielectric(
        dielectric_iors[material_idx],
        dielectric_fresnel[material_idx],
        incident_direction,
        rec,
        rng_state,
    )
