"""Unit tests for the Scene container and its upload."""

import pytest


class TestScene:
    """Tests for Scene.add and Scene.load."""

    def test_empty_scene(self):
        from raytracer.scene import Scene

        scene = Scene()
        assert len(scene) == 0
        assert scene.materials() == []

    def test_add_preserves_order(self):
        from raytracer.geometry import Sphere
        from raytracer.materials import Lambertian
        from raytracer.scene import Scene

        mat = Lambertian(albedo=(0.5, 0.5, 0.5))
        a = Sphere(center=(0.0, 0.0, 0.0), radius=1.0, material=mat)
        b = Sphere(center=(2.0, 0.0, 0.0), radius=1.0, material=mat)
        scene = Scene()
        scene.add(a)
        scene.add(b)
        assert scene.objects == (a, b)
        assert list(scene) == [a, b]

    def test_add_rejects_non_sphere(self):
        from raytracer.scene import Scene

        with pytest.raises(TypeError, match="Unsupported primitive"):
            Scene().add("not a sphere")

    def test_add_rejects_bad_material(self):
        from raytracer.geometry import Sphere
        from raytracer.scene import Scene

        sphere = Sphere(center=(0.0, 0.0, 0.0), radius=1.0, material=(0.5, 0.5, 0.5))
        with pytest.raises(TypeError, match="Material"):
            Scene().add(sphere)

    def test_shared_material_registered_once(self):
        """Spheres sharing a material handle share one material ID."""
        from raytracer.geometry import Sphere
        from raytracer.materials import Lambertian, Metal, get_material_count
        from raytracer.scene import Scene
        from raytracer.scene.intersection import get_sphere_count, sphere_material_ids

        shared = Lambertian(albedo=(0.5, 0.5, 0.5))
        metal = Metal(albedo=(0.8, 0.8, 0.8), fuzz=0.1)
        scene = Scene()
        scene.add(Sphere(center=(0.0, 0.0, 0.0), radius=1.0, material=shared))
        scene.add(Sphere(center=(2.0, 0.0, 0.0), radius=1.0, material=metal))
        scene.add(Sphere(center=(4.0, 0.0, 0.0), radius=1.0, material=shared))

        registry = scene.load()
        assert get_sphere_count() == 3
        assert get_material_count() == 2
        assert len(registry) == 2
        assert registry.materials == (shared, metal)
        assert sphere_material_ids[0] == sphere_material_ids[2]
        assert sphere_material_ids[0] != sphere_material_ids[1]

    def test_equal_but_distinct_materials_registered_separately(self):
        from raytracer.geometry import Sphere
        from raytracer.materials import Lambertian, get_material_count
        from raytracer.scene import Scene

        scene = Scene()
        scene.add(Sphere((0.0, 0.0, 0.0), 1.0, Lambertian(albedo=(0.5, 0.5, 0.5))))
        scene.add(Sphere((2.0, 0.0, 0.0), 1.0, Lambertian(albedo=(0.5, 0.5, 0.5))))
        scene.load()
        assert get_material_count() == 2

    def test_reload_replaces_previous_scene(self):
        from raytracer.geometry import Sphere
        from raytracer.materials import Lambertian, get_material_count
        from raytracer.scene import Scene
        from raytracer.scene.intersection import get_sphere_count

        mat = Lambertian(albedo=(0.5, 0.5, 0.5))
        big = Scene()
        for i in range(5):
            big.add(Sphere((float(i), 0.0, 0.0), 0.5, mat))
        big.load()

        small = Scene()
        small.add(Sphere((0.0, 0.0, 0.0), 0.5, mat))
        small.load()
        assert get_sphere_count() == 1
        assert get_material_count() == 1

    def test_oversized_scene_keeps_previous_scene(self):
        from raytracer.geometry import Sphere
        from raytracer.materials import Lambertian, get_material_count
        from raytracer.scene import Scene
        from raytracer.scene.intersection import MAX_SPHERES, get_sphere_count

        mat = Lambertian(albedo=(0.5, 0.5, 0.5))
        small = Scene()
        small.add(Sphere((0.0, 0.0, 0.0), 0.5, mat))
        small.add(Sphere((1.0, 0.0, 0.0), 0.5, Lambertian(albedo=(0.1, 0.2, 0.3))))
        small.load()

        too_big = Scene()
        for i in range(MAX_SPHERES + 1):
            too_big.add(Sphere((float(i), 0.0, 0.0), 0.25, mat))

        with pytest.raises(RuntimeError, match="maximum supported"):
            too_big.load()
        assert get_sphere_count() == 2
        assert get_material_count() == 2
