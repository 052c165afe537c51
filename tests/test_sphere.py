"""Unit tests for sphere intersection.

Tests cover:
- Sphere handle construction
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Ray tangent to sphere
- Negative radius (hollow shell) normals
"""

import math

import pytest
import taichi as ti


class TestSphereHandle:
    """Tests for the Python-side Sphere dataclass."""

    def test_values_converted_to_float(self):
        from raytracer.geometry.sphere import Sphere
        from raytracer.materials import Lambertian

        material = Lambertian(albedo=(0.5, 0.5, 0.5))
        sphere = Sphere(center=(1, 2, 3), radius=2, material=material)
        assert sphere.center == (1.0, 2.0, 3.0)
        assert isinstance(sphere.radius, float)
        assert sphere.material is material

    def test_make_sphere(self):
        """Test make_sphere convenience function."""
        from raytracer.geometry.sphere import make_sphere, vec3

        center_result = ti.field(dtype=ti.math.vec3, shape=())
        radius_result = ti.field(dtype=ti.f32, shape=())
        id_result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5, 7)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius
            id_result[None] = sphere.material_id

        test_kernel()
        c = center_result[None]
        assert abs(c[0] - 1.0) < 1e-6
        assert abs(c[1] - 2.0) < 1e-6
        assert abs(c[2] - 3.0) < 1e-6
        assert abs(radius_result[None] - 0.5) < 1e-6
        assert id_result[None] == 7


def _run_hit(origin, direction, center, radius, t_min=0.001, t_max=1000.0):
    """Intersect one ray with one sphere and return the record as a dict."""
    from raytracer.geometry.sphere import hit_sphere, make_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        origin: vec3, direction: vec3, center: vec3, radius: ti.f32, t_min: ti.f32, t_max: ti.f32
    ):
        sphere = make_sphere(center, radius, 0)
        record = hit_sphere(origin, direction, sphere, t_min, t_max)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": point[None].to_numpy().tolist(),
        "normal": normal[None].to_numpy().tolist(),
        "front_face": front_face[None],
    }


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    @pytest.mark.parametrize("distance", [0.5, 2.0, 10.0])
    @pytest.mark.parametrize("radius", [0.5, 1.0, 3.0])
    def test_hit_through_center(self, distance, radius):
        """A ray aimed at the center, distance d outside, hits at t = d."""
        record = _run_hit((0.0, 0.0, radius + distance), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), radius)
        assert record["hit"] == 1
        assert record["t"] == pytest.approx(distance, abs=1e-4)
        assert record["front_face"] == 1
        assert record["normal"] == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)

    def test_hit_sphere_direct_hit(self):
        """Test ray hitting sphere head-on from outside."""
        record = _run_hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert record["hit"] == 1
        # Should hit at z=1 (front of sphere), so t=4
        assert record["t"] == pytest.approx(4.0, abs=1e-5)
        assert record["point"] == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)

    def test_hit_sphere_miss(self):
        """Test ray missing sphere entirely."""
        record = _run_hit((5.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert record["hit"] == 0

    def test_hit_sphere_behind_ray(self):
        """A sphere behind the origin is not hit."""
        record = _run_hit((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert record["hit"] == 0

    def test_hit_sphere_inside(self):
        """Test ray starting inside sphere (back face hit)."""
        record = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert record["hit"] == 1
        assert record["t"] == pytest.approx(1.0, abs=1e-5)
        assert record["front_face"] == 0
        # Normal is flipped to face against the ray
        assert record["normal"] == pytest.approx([0.0, 0.0, -1.0], abs=1e-5)

    def test_hit_sphere_tangent(self):
        """A tangent ray touches the sphere at exactly one point."""
        record = _run_hit((1.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert record["hit"] == 1
        assert record["t"] == pytest.approx(5.0, abs=1e-4)
        assert record["point"] == pytest.approx([1.0, 0.0, 0.0], abs=1e-4)

    def test_far_root_used_when_near_root_out_of_range(self):
        """With t_min past the near root, the far root is reported."""
        record = _run_hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_min=4.5)
        assert record["hit"] == 1
        assert record["t"] == pytest.approx(6.0, abs=1e-5)
        assert record["front_face"] == 0

    def test_t_max_is_exclusive(self):
        record = _run_hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_max=4.0)
        # Near root rejected, far root at t=6 beyond t_max too
        assert record["hit"] == 0

    def test_unnormalized_direction(self):
        """t scales inversely with the direction length."""
        record = _run_hit((0.0, 0.0, 5.0), (0.0, 0.0, -2.0), (0.0, 0.0, 0.0), 1.0)
        assert record["t"] == pytest.approx(2.0, abs=1e-5)

    def test_negative_radius_flips_outward_normal(self):
        """A negative radius turns the outward normal inward."""
        record = _run_hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), -1.0)
        assert record["hit"] == 1
        assert record["t"] == pytest.approx(4.0, abs=1e-5)
        # Outward normal points to -z, so the ray hits the back face
        assert record["front_face"] == 0
        assert record["normal"] == pytest.approx([0.0, 0.0, 1.0], abs=1e-5)

    @pytest.mark.parametrize("angle", [0.0, 0.3, 0.7, 1.2])
    def test_normal_is_unit_and_faces_ray(self, angle):
        """Stored normals have unit length and oppose the ray direction."""
        direction = (math.sin(angle) * 0.1, 0.05, -1.0)
        record = _run_hit((0.0, 0.0, 4.0), direction, (0.0, 0.0, 0.0), 1.5)
        assert record["hit"] == 1
        n = record["normal"]
        assert sum(c * c for c in n) == pytest.approx(1.0, abs=1e-5)
        assert sum(a * b for a, b in zip(n, direction)) <= 0.0
