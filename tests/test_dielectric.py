"""Unit tests for the Dielectric material.

Tests cover:
- Index of refraction validation
- ior = 1 never bends a ray
- Refraction obeys Snell's law when entering and leaving
- Total internal reflection
- Optional Schlick reflection
"""

import math

import numpy as np
import pytest
import taichi as ti


def _scatter(incident, normal, front_face, ior, fresnel=0, count=1, seed=0):
    from raytracer.core.rng import seed_stream
    from raytracer.geometry.sphere import HitRecord
    from raytracer.materials.dielectric import scatter_dielectric, vec3

    did_scatter = ti.field(dtype=ti.i32, shape=count)
    attenuation = ti.Vector.field(3, dtype=ti.f32, shape=count)
    direction = ti.Vector.field(3, dtype=ti.f32, shape=count)

    @ti.kernel
    def test_kernel(
        incident: vec3, normal: vec3, front_face: ti.i32, ior: ti.f32, fresnel: ti.i32, seed: ti.u32
    ):
        for i in range(count):
            rec = HitRecord(
                hit=1,
                t=1.0,
                point=vec3(0.0, 0.0, 0.0),
                normal=normal,
                front_face=front_face,
                material_id=0,
            )
            result = scatter_dielectric(ior, fresnel, incident, rec, seed_stream(seed, i, 0))
            did_scatter[i] = result.did_scatter
            attenuation[i] = result.attenuation
            direction[i] = result.direction

    test_kernel(vec3(*incident), vec3(*normal), front_face, ior, fresnel, seed)
    return did_scatter.to_numpy(), attenuation.to_numpy(), direction.to_numpy()


def _unit(v):
    n = math.sqrt(sum(c * c for c in v))
    return [c / n for c in v]


class TestDielectricHandle:
    @pytest.mark.parametrize("ior", [0.0, -1.5, float("nan")])
    def test_invalid_ior(self, ior):
        from raytracer.materials import Dielectric

        with pytest.raises(ValueError, match="Index of refraction"):
            Dielectric(ior=ior)

    def test_defaults(self):
        from raytracer.materials import Dielectric, MaterialType

        glass = Dielectric(ior=1.5)
        assert glass.fresnel is False
        assert glass.material_type == MaterialType.DIELECTRIC


class TestScatterDielectric:
    @pytest.mark.parametrize("front_face", [1, 0])
    @pytest.mark.parametrize("incident", [(0.0, -1.0, 0.0), (0.5, -1.0, 0.2), (1.0, -0.3, 0.0)])
    def test_ior_one_does_not_bend(self, incident, front_face):
        """An index of refraction of 1 passes the ray straight through."""
        did, att, direction = _scatter(incident, (0.0, 1.0, 0.0), front_face, 1.0)
        assert did[0] == 1
        assert att[0].tolist() == pytest.approx([1.0, 1.0, 1.0])
        assert direction[0].tolist() == pytest.approx(_unit(incident), abs=1e-5)

    def test_entering_glass_bends_toward_normal(self):
        theta = math.radians(45.0)
        incident = (math.sin(theta), -math.cos(theta), 0.0)
        _, _, direction = _scatter(incident, (0.0, 1.0, 0.0), 1, 1.5)
        # sin(theta_t) = sin(theta_i) / 1.5
        assert direction[0][0] == pytest.approx(math.sin(theta) / 1.5, abs=1e-5)
        assert direction[0][1] < 0.0

    def test_total_internal_reflection(self):
        """Leaving glass beyond the critical angle reflects."""
        theta = math.radians(60.0)  # critical angle for 1.5 is ~41.8 degrees
        incident = (math.sin(theta), -math.cos(theta), 0.0)
        did, _, direction = _scatter(incident, (0.0, 1.0, 0.0), 0, 1.5, count=16)
        assert np.all(did == 1)
        expected = [math.sin(theta), math.cos(theta), 0.0]
        for d in direction:
            assert d.tolist() == pytest.approx(expected, abs=1e-5)

    def test_without_fresnel_always_refracts(self):
        theta = math.radians(70.0)
        incident = (math.sin(theta), -math.cos(theta), 0.0)
        _, _, direction = _scatter(incident, (0.0, 1.0, 0.0), 1, 1.5, count=256)
        assert np.all(direction[:, 1] < 0.0)

    def test_fresnel_reflects_some_rays(self):
        """With Schlick enabled a grazing ray sometimes reflects."""
        theta = math.radians(80.0)
        incident = (math.sin(theta), -math.cos(theta), 0.0)
        _, _, direction = _scatter(incident, (0.0, 1.0, 0.0), 1, 1.5, fresnel=1, count=1024)
        reflected = direction[:, 1] > 0.0
        assert np.any(reflected)
        assert np.any(~reflected)
