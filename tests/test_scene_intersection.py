"""Unit tests for scene-level nearest-hit search.

Tests cover:
- Empty scene misses
- Closest of several spheres wins regardless of insertion order
- t range is respected
- Capacity limit
"""

import pytest
import taichi as ti


def _intersect(origin, direction, t_min=0.001, t_max=1e10):
    from raytracer.scene.intersection import intersect_scene, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32):
        record = intersect_scene(origin, direction, t_min, t_max)
        hit[None] = record.hit
        t_val[None] = record.t
        material_id[None] = record.material_id

    test_kernel(vec3(*origin), vec3(*direction), t_min, t_max)
    return hit[None], t_val[None], material_id[None]


class TestSceneStorage:
    """Tests for add_sphere / clear_scene."""

    def test_add_sphere_returns_index(self):
        from raytracer.scene.intersection import add_sphere, get_sphere_count

        assert add_sphere((0.0, 0.0, 0.0), 1.0, 0) == 0
        assert add_sphere((1.0, 0.0, 0.0), 1.0, 0) == 1
        assert get_sphere_count() == 2

    def test_clear_scene(self):
        from raytracer.scene.intersection import add_sphere, clear_scene, get_sphere_count

        add_sphere((0.0, 0.0, 0.0), 1.0, 0)
        clear_scene()
        assert get_sphere_count() == 0

    def test_capacity_exceeded(self, monkeypatch):
        from raytracer.scene import intersection

        monkeypatch.setattr(intersection, "MAX_SPHERES", 2)
        intersection.add_sphere((0.0, 0.0, 0.0), 1.0, 0)
        intersection.add_sphere((0.0, 0.0, 0.0), 1.0, 0)
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            intersection.add_sphere((0.0, 0.0, 0.0), 1.0, 0)


class TestIntersectScene:
    """Tests for intersect_scene."""

    def test_empty_scene_misses(self):
        hit, _, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0

    @pytest.mark.parametrize("near_first", [True, False])
    def test_nearest_sphere_wins(self, near_first):
        """The closest hit is returned whatever the insertion order."""
        from raytracer.scene.intersection import add_sphere

        near = ((0.0, 0.0, -3.0), 1.0, 1)
        far = ((0.0, 0.0, -10.0), 1.0, 2)
        for center, radius, mat in (near, far) if near_first else (far, near):
            add_sphere(center, radius, mat)

        hit, t, material_id = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 1
        assert t == pytest.approx(2.0, abs=1e-5)
        assert material_id == 1

    def test_hit_outside_range_is_ignored(self):
        from raytracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -3.0), 1.0, 1)
        add_sphere((0.0, 0.0, -10.0), 1.0, 2)

        # Near sphere spans t in [2, 4]; start searching after it
        hit, t, material_id = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_min=5.0)
        assert hit == 1
        assert t == pytest.approx(9.0, abs=1e-5)
        assert material_id == 2

    def test_miss_when_ray_points_away(self):
        from raytracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -3.0), 1.0, 1)
        hit, _, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit == 0
