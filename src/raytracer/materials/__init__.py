"""Materials module for light scattering models.

This module implements the surface responses supported by the renderer:

Components:
    base: MaterialType enum, Material base class and ScatterRecord
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Refraction with total internal reflection (optional Schlick)
    registry: Unified material IDs and scatter dispatch

Each material exposes a Python-side frozen handle (shared between spheres)
and a Taichi scatter function returning a ScatterRecord.
"""

from .base import Material, MaterialType, ScatterRecord
from .dielectric import (
    Dielectric,
    add_dielectric_material,
    clear_dielectric_materials,
    scatter_dielectric,
    scatter_dielectric_by_id,
)
from .lambertian import (
    Lambertian,
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    Metal,
    add_metal_material,
    clear_metal_materials,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)
from .registry import (
    MaterialRegistry,
    add_material,
    clear_materials,
    get_material_count,
    scatter_material,
)

__all__ = [
    "Material",
    "MaterialType",
    "ScatterRecord",
    # Lambertian
    "Lambertian",
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    # Metal
    "Metal",
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    # Dielectric
    "Dielectric",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    # Registry
    "MaterialRegistry",
    "add_material",
    "clear_materials",
    "get_material_count",
    "scatter_material",
]
