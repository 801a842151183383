"""Unit tests for scene intersection.

Tests cover:
- Adding and clearing spheres
- Closest-hit selection across multiple spheres
- Empty scene misses
- The Python-side hit_scene query
"""

import pytest
import taichi as ti


class TestSceneStorage:
    """Tests for sphere storage in the scene fields."""

    def test_empty_scene_count(self):
        from src.spheretrace.scene.intersection import get_sphere_count

        assert get_sphere_count() == 0

    def test_add_sphere_returns_indices(self):
        from src.spheretrace.scene.intersection import add_sphere, get_sphere_count, vec3

        assert add_sphere(vec3(0.0, 0.0, -1.0), 0.5, material_id=0) == 0
        assert add_sphere(vec3(1.0, 0.0, -1.0), 0.5, material_id=1) == 1
        assert get_sphere_count() == 2

    def test_clear_scene(self):
        from src.spheretrace.scene.intersection import (
            add_sphere,
            clear_scene,
            get_sphere_count,
            vec3,
        )

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5)
        clear_scene()
        assert get_sphere_count() == 0

    def test_capacity_exceeded(self):
        from src.spheretrace.scene.intersection import MAX_SPHERES, add_sphere, num_spheres, vec3

        num_spheres[None] = MAX_SPHERES
        with pytest.raises(RuntimeError, match="Maximum number of spheres"):
            add_sphere(vec3(0.0, 0.0, 0.0), 1.0)


class TestIntersectScene:
    """Tests for intersect_scene inside kernels."""

    def test_hit_single_sphere(self):
        from src.spheretrace.core.ray import Ray
        from src.spheretrace.scene.intersection import add_sphere, intersect_scene, vec3

        add_sphere(vec3(0.0, 0.0, -3.0), 1.0, material_id=5)

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f32, shape=())
        material_id = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
                rec = intersect_scene(ray, 0.001, 1000.0)
                hit[None] = rec.hit
                t_val[None] = rec.t
                material_id[None] = rec.material_id

        test_kernel()
        assert hit[None] == 1
        assert abs(t_val[None] - 2.0) < 1e-5
        assert material_id[None] == 5

    def test_empty_scene_misses(self):
        from src.spheretrace.core.ray import Ray
        from src.spheretrace.scene.intersection import intersect_scene, vec3

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
                hit[None] = intersect_scene(ray, 0.001, 1000.0).hit

        test_kernel()
        assert hit[None] == 0


class TestHitScene:
    """Tests for the Python-side hit_scene query."""

    def test_miss_returns_none(self):
        from src.spheretrace.scene.intersection import add_sphere, hit_scene, vec3

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5)
        assert hit_scene((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) is None

    def test_hit_info_fields(self):
        from src.spheretrace.scene.intersection import add_sphere, hit_scene, vec3

        add_sphere(vec3(0.0, 0.0, -1.0), 0.5, material_id=2)
        info = hit_scene((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert info is not None
        assert info.t == pytest.approx(0.5, abs=1e-5)
        assert info.point == pytest.approx((0.0, 0.0, -0.5), abs=1e-5)
        assert info.normal == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)
        assert info.front_face is True
        assert info.material_id == 2

    def test_closest_hit_wins_regardless_of_order(self):
        """Test the nearest sphere is reported even when added last."""
        from src.spheretrace.scene.intersection import add_sphere, hit_scene, vec3

        add_sphere(vec3(0.0, 0.0, -10.0), 1.0, material_id=0)
        add_sphere(vec3(0.0, 0.0, -5.0), 1.0, material_id=1)
        add_sphere(vec3(0.0, 0.0, -2.0), 0.5, material_id=2)

        info = hit_scene((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert info is not None
        assert info.material_id == 2
        assert info.t == pytest.approx(1.5, abs=1e-5)

    def test_closest_hit_is_minimum_over_spheres(self):
        """Test the reported t matches the smallest single-sphere hit."""
        from src.spheretrace.scene.intersection import (
            add_sphere,
            clear_scene,
            hit_scene,
            vec3,
        )

        spheres = [
            ((0.2, 0.1, -4.0), 1.0),
            ((-0.3, 0.0, -3.0), 0.6),
            ((0.0, -0.2, -6.0), 2.0),
        ]
        ray = ((0.0, 0.0, 0.0), (0.05, 0.0, -1.0))

        single_hits = []
        for center, radius in spheres:
            clear_scene()
            add_sphere(vec3(*center), radius)
            info = hit_scene(*ray)
            if info is not None:
                single_hits.append(info.t)

        clear_scene()
        for center, radius in spheres:
            add_sphere(vec3(*center), radius)
        combined = hit_scene(*ray)

        assert combined is not None
        assert combined.t == pytest.approx(min(single_hits), abs=1e-5)

    def test_t_range_respected(self):
        from src.spheretrace.scene.intersection import add_sphere, hit_scene, vec3

        add_sphere(vec3(0.0, 0.0, -2.0), 0.5, material_id=0)
        add_sphere(vec3(0.0, 0.0, -6.0), 0.5, material_id=1)

        info = hit_scene((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_min=3.0)
        assert info is not None
        assert info.material_id == 1

        assert hit_scene((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=1.0) is None
