"""Scene aggregation and upload.

A Scene is an insertion-only collection of primitives built on the Python
side. Before rendering it is uploaded into the Taichi fields used by the
integrator: each distinct material handle is registered once, then every
sphere is stored with the ID of its material.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.geometry import Sphere
    >>> from raytracer.materials import Lambertian
    >>> from raytracer.scene.world import Scene
    >>> ground = Lambertian(albedo=(0.5, 0.5, 0.5))
    >>> scene = Scene()
    >>> scene.add(Sphere(center=(0.0, -1000.0, 0.0), radius=1000.0, material=ground))
    >>> scene.load()
"""

import logging
from collections.abc import Iterator

from raytracer.geometry.sphere import Sphere
from raytracer.materials.base import Material
from raytracer.materials.registry import MaterialRegistry
from raytracer.scene.intersection import MAX_SPHERES, add_sphere, clear_scene

logger = logging.getLogger(__name__)


class Scene:
    """An unordered, insertion-only collection of primitives.

    Primitives and their materials are immutable, so a Scene may be uploaded
    and rendered any number of times.
    """

    def __init__(self) -> None:
        self._objects: list[Sphere] = []

    def add(self, primitive: Sphere) -> None:
        """Add a primitive to the scene.

        Args:
            primitive: The sphere to add. Its material may be shared with
                other primitives.

        Raises:
            TypeError: If the primitive is not a Sphere or its material is not
                a Material.
        """
        if not isinstance(primitive, Sphere):
            raise TypeError(f"Unsupported primitive type: {type(primitive).__name__}")
        if not isinstance(primitive.material, Material):
            raise TypeError(
                f"Sphere material must be a Material, got {type(primitive.material).__name__}"
            )
        self._objects.append(primitive)

    @property
    def objects(self) -> tuple[Sphere, ...]:
        """The primitives in insertion order."""
        return tuple(self._objects)

    def materials(self) -> list[Material]:
        """The distinct material handles, in order of first use."""
        seen: set[int] = set()
        result = []
        for obj in self._objects:
            if id(obj.material) not in seen:
                seen.add(id(obj.material))
                result.append(obj.material)
        return result

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[Sphere]:
        return iter(self._objects)

    def load(self) -> MaterialRegistry:
        """Upload the scene into the Taichi fields used for rendering.

        Replaces whatever scene was previously loaded. A scene that does not
        fit leaves the previously loaded scene untouched.

        Returns:
            The registry mapping this scene's materials to their IDs.

        Raises:
            RuntimeError: If the scene exceeds a field capacity.
        """
        if len(self._objects) > MAX_SPHERES:
            raise RuntimeError(
                f"Scene has {len(self._objects)} spheres, maximum supported is {MAX_SPHERES}"
            )

        clear_scene()
        registry = MaterialRegistry()
        for obj in self._objects:
            material_id = registry.register(obj.material)
            add_sphere(obj.center, obj.radius, material_id)
        logger.debug(
            "Loaded scene with %d spheres and %d materials", len(self._objects), len(registry)
        )
        return registry

    def __repr__(self) -> str:
        return f"Scene(objects={len(self._objects)})"
