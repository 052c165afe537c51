"""Scene module for scene assembly and ray-scene queries.

Components:
    world: Scene container and upload into the render fields
    intersection: Sphere storage fields and nearest-hit search
    presets: Ready-made scenes with matching camera configurations

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for sphere data
    - One registered ID per distinct material handle
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .presets import create_material_showcase_scene, create_random_scene
from .world import Scene

__all__ = [
    "Scene",
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Presets
    "create_random_scene",
    "create_material_showcase_scene",
]
