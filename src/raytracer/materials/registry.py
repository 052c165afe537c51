"""Unified material registry and scatter dispatch.

Spheres refer to materials by a single ``material_id``. The registry maps each
ID to its MaterialType and to the index inside that type's field storage, so
the integrator can dispatch to the right scattering function on the GPU.

Material handles are registered by identity: the same instance shared by many
spheres is uploaded once and gets one ID.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.materials import Lambertian
    >>> from raytracer.materials.registry import MaterialRegistry
    >>> registry = MaterialRegistry()
    >>> material_id = registry.register(Lambertian(albedo=(0.5, 0.5, 0.5)))
"""

import taichi as ti
import taichi.math as tm

from raytracer.geometry.sphere import HitRecord
from raytracer.materials.base import Material, MaterialType, ScatterRecord
from raytracer.materials.dielectric import (
    Dielectric,
    add_dielectric_material,
    clear_dielectric_materials,
    scatter_dielectric_by_id,
)
from raytracer.materials.lambertian import (
    Lambertian,
    add_lambertian_material,
    clear_lambertian_materials,
    scatter_lambertian_by_id,
)
from raytracer.materials.metal import (
    Metal,
    add_metal_material,
    clear_metal_materials,
    scatter_metal_by_id,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum number of materials across all types
MAX_MATERIALS = 1024

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear the unified registry and every type-specific registry."""
    clear_lambertian_materials()
    clear_metal_materials()
    clear_dielectric_materials()
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Upload a material and assign it the next unified ID.

    Args:
        material: A Lambertian, Metal or Dielectric handle.

    Returns:
        The unified material ID.

    Raises:
        TypeError: If the material type is not supported.
        RuntimeError: If a registry capacity is exceeded.
    """
    material_id = num_materials[None]
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    if isinstance(material, Lambertian):
        type_index = add_lambertian_material(material)
    elif isinstance(material, Metal):
        type_index = add_metal_material(material)
    elif isinstance(material, Dielectric):
        type_index = add_dielectric_material(material)
    else:
        raise TypeError(f"Unsupported material type: {type(material).__name__}")

    material_types[material_id] = int(material.material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


def get_material_count() -> int:
    """Get the number of registered materials."""
    return int(num_materials[None])


class MaterialRegistry:
    """Registers shared material handles once each.

    Keeps the handles alive so identity-based lookups stay valid for the
    registry's lifetime.
    """

    def __init__(self) -> None:
        clear_materials()
        self._ids: dict[int, int] = {}
        self._materials: list[Material] = []

    def register(self, material: Material) -> int:
        """Return the ID of ``material``, uploading it on first use."""
        key = id(material)
        if key not in self._ids:
            self._ids[key] = add_material(material)
            self._materials.append(material)
        return self._ids[key]

    @property
    def materials(self) -> tuple[Material, ...]:
        """The registered handles, in ID order."""
        return tuple(self._materials)

    def __len__(self) -> int:
        return len(self._materials)


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    Returns:
        The index into the type-specific material fields, or -1 for invalid
        material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    rec: HitRecord,
    rng_state: ti.u32,
) -> ScatterRecord:
    """Dispatch to the scattering function of the hit material.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        rec: The hit record of the intersection being shaded.
        rng_state: The current random stream state.

    Returns:
        The ScatterRecord of the material. Unknown IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    result = ScatterRecord(
        did_scatter=0,
        attenuation=vec3(0.0, 0.0, 0.0),
        origin=rec.point,
        direction=vec3(0.0, 0.0, 0.0),
        rng_state=rng_state,
    )

    if mat_type == int(MaterialType.LAMBERTIAN):
        result = scatter_lambertian_by_id(type_index, rec, rng_state)
    elif mat_type == int(MaterialType.METAL):
        result = scatter_metal_by_id(type_index, incident_direction, rec, rng_state)
    elif mat_type == int(MaterialType.DIELECTRIC):
        result = scatter_dielectric_by_id(type_index, incident_direction, rec, rng_state)

    return result
