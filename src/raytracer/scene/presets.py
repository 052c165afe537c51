"""Ready-made scenes.

This module provides factory functions that build complete scenes together
with a matching camera configuration.

Available scenes:
- Random scene: a large ground sphere, a grid of small randomly coloured
  spheres and three large feature spheres (glass, diffuse, metal)
- Material showcase: three spheres side by side on a ground sphere, one of
  them a hollow glass shell built from a negative-radius inner sphere

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raytracer.camera import Camera
    >>> from raytracer.scene.presets import create_random_scene
    >>>
    >>> scene, config = create_random_scene(seed=7)
    >>> pixels = Camera(config).render(scene, seed=7)
"""

import numpy as np

from raytracer.camera.camera import CameraConfig
from raytracer.geometry.sphere import Sphere
from raytracer.materials.dielectric import Dielectric
from raytracer.materials.lambertian import Lambertian
from raytracer.materials.metal import Metal
from raytracer.scene.world import Scene

# =============================================================================
# Random Scene Constants
# =============================================================================

GROUND_ALBEDO = (0.5, 0.5, 0.5)
GLASS_IOR = 1.5

# Grid of small spheres spans a, b in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11
SMALL_RADIUS = 0.2

# Small spheres closer than this to KEEP_CLEAR_POINT are skipped
KEEP_CLEAR_POINT = (4.0, 0.2, 0.0)
KEEP_CLEAR_DISTANCE = 0.9

# Cumulative material choice thresholds: 80% diffuse, 15% metal, 5% glass
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95


def create_random_scene(seed: int | None = None) -> tuple[Scene, CameraConfig]:
    """Create the random-spheres scene.

    Args:
        seed: Seed for the sphere layout and colours. None draws fresh
            entropy, so every call yields a different scene.

    Returns:
        A tuple of (Scene, CameraConfig) with the default camera looking at
        the origin from (13, 2, 3).

    Example:
        >>> scene, config = create_random_scene(seed=1)
        >>> len(scene) > 4
        True
    """
    rng = np.random.default_rng(seed)
    scene = Scene()

    scene.add(
        Sphere(center=(0.0, -1000.0, -1.0), radius=1000.0, material=Lambertian(GROUND_ALBEDO))
    )

    keep_clear = np.array(KEEP_CLEAR_POINT)
    for a in range(-GRID_EXTENT, GRID_EXTENT):
        for b in range(-GRID_EXTENT, GRID_EXTENT):
            choose_mat = rng.random()
            center = np.array(
                [a + 0.9 * rng.random(), SMALL_RADIUS, b + 0.9 * rng.random()]
            )
            if np.linalg.norm(center - keep_clear) <= KEEP_CLEAR_DISTANCE:
                continue

            if choose_mat < DIFFUSE_PROBABILITY:
                material = Lambertian(albedo=tuple(rng.random(3)))
            elif choose_mat < METAL_PROBABILITY:
                material = Metal(albedo=tuple(0.5 * rng.random(3)), fuzz=0.5 * rng.random())
            else:
                material = Dielectric(ior=GLASS_IOR)

            scene.add(Sphere(center=tuple(center), radius=SMALL_RADIUS, material=material))

    scene.add(Sphere(center=(0.0, 1.0, 0.0), radius=1.0, material=Dielectric(ior=GLASS_IOR)))
    scene.add(
        Sphere(center=(-4.0, 1.0, 0.0), radius=1.0, material=Lambertian(albedo=(0.4, 0.2, 0.1)))
    )
    scene.add(
        Sphere(
            center=(4.0, 1.0, 0.0), radius=1.0, material=Metal(albedo=(0.7, 0.6, 0.5), fuzz=0.0)
        )
    )

    return scene, CameraConfig()


def create_material_showcase_scene() -> tuple[Scene, CameraConfig]:
    """Create a small scene showing each material once.

    Layout, left to right along x: hollow glass, diffuse, fuzzy metal. The
    glass shell is an outer sphere of radius 0.5 with an inner sphere of
    radius -0.4 sharing its material, so its normals point inward.

    Returns:
        A tuple of (Scene, CameraConfig) with a pinhole camera looking down -z.
    """
    scene = Scene()

    ground = Lambertian(albedo=(0.8, 0.8, 0.0))
    center = Lambertian(albedo=(0.1, 0.2, 0.5))
    glass = Dielectric(ior=GLASS_IOR)
    metal = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3)

    scene.add(Sphere(center=(0.0, -100.5, -1.0), radius=100.0, material=ground))
    scene.add(Sphere(center=(0.0, 0.0, -1.0), radius=0.5, material=center))
    scene.add(Sphere(center=(-1.0, 0.0, -1.0), radius=0.5, material=glass))
    scene.add(Sphere(center=(-1.0, 0.0, -1.0), radius=-0.4, material=glass))
    scene.add(Sphere(center=(1.0, 0.0, -1.0), radius=0.5, material=metal))

    config = CameraConfig(
        look_from=(-2.0, 2.0, 1.0),
        look_at=(0.0, 0.0, -1.0),
        vfov=20.0,
        image_width=400,
        samples_per_pixel=100,
        max_depth=50,
        defocus_angle=0.0,
        focus_dist=3.4,
    )
    return scene, config
