"""Unit tests for the dielectric material.

Tests cover:
- Index ratio selection from front_face
- Snell refraction entering and leaving glass
- Total internal reflection
- ir = 1 pass-through
- Registry storage and validation
"""

import math

import numpy as np
import pytest
import taichi as ti


def _scatter_dielectric(direction, normal, front_face, ir):
    """Scatter one ray through a dielectric surface at the origin."""
    from src.spheretrace.core.ray import Ray, vec3
    from src.spheretrace.geometry.sphere import HitRecord
    from src.spheretrace.materials.dielectric import scatter_dielectric

    did_scatter = ti.field(dtype=ti.i32, shape=())
    out_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
    attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())
    origin = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        nx: ti.f32, ny: ti.f32, nz: ti.f32,
        ff: ti.i32, eta: ti.f32,
    ):
        ray = Ray(origin=vec3(-dx, -dy, -dz), direction=vec3(dx, dy, dz))
        rec = HitRecord(
            hit=1,
            t=1.0,
            point=vec3(0.0, 0.0, 0.0),
            normal=vec3(nx, ny, nz),
            front_face=ff,
            material_id=0,
        )
        result = scatter_dielectric(eta, ray, rec)
        did_scatter[None] = result.did_scatter
        out_direction[None] = result.direction
        attenuation[None] = result.attenuation
        origin[None] = result.origin

    test_kernel(*direction, *normal, front_face, ir)
    return (
        did_scatter[None],
        out_direction[None].to_numpy(),
        attenuation[None].to_numpy(),
        origin[None].to_numpy(),
    )


class TestRefractionRatio:
    """Tests for refraction_ratio_for and cannot_refract."""

    def test_ratio_from_front_face(self):
        from src.spheretrace.materials.dielectric import refraction_ratio_for

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            result[0] = refraction_ratio_for(1.5, 1)
            result[1] = refraction_ratio_for(1.5, 0)

        test_kernel()
        assert abs(result[0] - 1.0 / 1.5) < 1e-6
        assert abs(result[1] - 1.5) < 1e-6

    def test_cannot_refract_threshold(self):
        from src.spheretrace.core.ray import vec3
        from src.spheretrace.materials.dielectric import cannot_refract

        result = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel(s30: ti.f32, c30: ti.f32, s60: ti.f32, c60: ti.f32):
            n = vec3(0.0, 1.0, 0.0)
            # Inside glass at 30 degrees: 1.5 * 0.5 < 1
            result[0] = cannot_refract(vec3(s30, -c30, 0.0), n, 1.5)
            # Inside glass at 60 degrees: 1.5 * 0.866 > 1
            result[1] = cannot_refract(vec3(s60, -c60, 0.0), n, 1.5)
            # Entering glass never reflects totally
            result[2] = cannot_refract(vec3(s60, -c60, 0.0), n, 1.0 / 1.5)

        r30 = math.radians(30.0)
        r60 = math.radians(60.0)
        test_kernel(math.sin(r30), math.cos(r30), math.sin(r60), math.cos(r60))
        assert result[0] == 0
        assert result[1] == 1
        assert result[2] == 0


class TestScatterDielectric:
    """Tests for scatter_dielectric."""

    def test_index_one_passes_straight_through(self):
        """Test ir = 1 leaves the direction unchanged."""
        did_scatter, direction, attenuation, origin = _scatter_dielectric(
            (0.6, -0.8, 0.0), (0.0, 1.0, 0.0), 1, 1.0
        )

        assert did_scatter == 1
        assert np.allclose(direction, [0.6, -0.8, 0.0], atol=1e-5)
        assert np.allclose(attenuation, [1.0, 1.0, 1.0], atol=1e-6)
        assert np.allclose(origin, [0.0, 0.0, 0.0], atol=1e-6)

    def test_index_one_from_inside(self):
        did_scatter, direction, _, _ = _scatter_dielectric(
            (0.6, 0.8, 0.0), (0.0, -1.0, 0.0), 0, 1.0
        )

        assert did_scatter == 1
        assert np.allclose(direction, [0.6, 0.8, 0.0], atol=1e-5)

    def test_unnormalized_input_direction(self):
        """Test the incoming direction is normalized before refraction."""
        _, direction, _, _ = _scatter_dielectric((1.2, -1.6, 0.0), (0.0, 1.0, 0.0), 1, 1.0)
        assert np.allclose(direction, [0.6, -0.8, 0.0], atol=1e-5)

    def test_entering_glass_obeys_snell(self):
        """Test sin(theta_t) = sin(theta_i) / ir when entering from outside."""
        theta_i = math.radians(40.0)
        did_scatter, direction, _, _ = _scatter_dielectric(
            (math.sin(theta_i), -math.cos(theta_i), 0.0), (0.0, 1.0, 0.0), 1, 1.5
        )

        assert did_scatter == 1
        assert abs(np.linalg.norm(direction) - 1.0) < 1e-5
        assert direction[1] < 0.0
        assert abs(direction[0] - math.sin(theta_i) / 1.5) < 1e-5

    def test_leaving_glass_obeys_snell(self):
        """Test sin(theta_t) = ir * sin(theta_i) when leaving from inside."""
        theta_i = math.radians(20.0)
        _, direction, _, _ = _scatter_dielectric(
            (math.sin(theta_i), math.cos(theta_i), 0.0), (0.0, -1.0, 0.0), 0, 1.5
        )

        assert direction[1] > 0.0
        assert abs(direction[0] - 1.5 * math.sin(theta_i)) < 1e-5

    def test_total_internal_reflection(self):
        """Test a steep ray inside glass reflects back inside."""
        theta_i = math.radians(60.0)
        did_scatter, direction, attenuation, _ = _scatter_dielectric(
            (math.sin(theta_i), math.cos(theta_i), 0.0), (0.0, -1.0, 0.0), 0, 1.5
        )

        assert did_scatter == 1
        assert np.allclose(
            direction, [math.sin(theta_i), -math.cos(theta_i), 0.0], atol=1e-5
        )
        assert np.allclose(attenuation, [1.0, 1.0, 1.0], atol=1e-6)


class TestDielectricRegistry:
    """Tests for dielectric material storage."""

    def test_add_and_read_back(self):
        from src.spheretrace.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_ir,
            get_dielectric_material_count,
        )

        add_dielectric_material()
        idx = add_dielectric_material(2.4)
        assert get_dielectric_material_count() == 2

        result = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel(i: ti.i32):
            result[0] = get_dielectric_ir(0)
            result[1] = get_dielectric_ir(i)

        test_kernel(idx)
        assert abs(result[0] - 1.5) < 1e-6
        assert abs(result[1] - 2.4) < 1e-6

    @pytest.mark.parametrize("ir", [0.0, -1.0, math.inf, math.nan])
    def test_invalid_ir(self, ir):
        from src.spheretrace.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError):
            add_dielectric_material(ir)
