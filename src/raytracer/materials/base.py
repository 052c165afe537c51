"""Shared material types.

Materials are immutable handles built on the Python side and shared between
any number of spheres. At render time each distinct handle is registered once
and referenced by an integer ID; its parameters live in type-specific Taichi
fields and scattering dispatches on the registered MaterialType.

Every scatter routine returns a ScatterRecord. When ``did_scatter`` is 0 the
ray was absorbed and the remaining fields carry no meaning.
"""

from enum import IntEnum
from typing import ClassVar

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


class Material:
    """Base class for material handles.

    Subclasses are frozen dataclasses and set ``material_type``.
    """

    material_type: ClassVar[MaterialType]


@ti.dataclass
class ScatterRecord:
    """Result of scattering a ray off a surface.

    Attributes:
        did_scatter: 1 if the ray scattered, 0 if it was absorbed.
        attenuation: The color multiplier applied to light along the new ray.
        origin: Origin of the scattered ray (the hit point).
        direction: Direction of the scattered ray (not necessarily unit length).
        rng_state: The random stream state after scattering.
    """

    did_scatter: ti.i32
    attenuation: vec3
    origin: vec3
    direction: vec3
    rng_state: ti.u32
