"""Unit tests for the path tracing integrator.

Tests cover:
- Background gradient
- Depth budget (depth 0 is black)
- Miss, absorption and single-bounce paths through ray_color
- Render target setup and scanline rendering
- NaN-free accumulation
"""

import numpy as np
import pytest


class TestBackground:
    """Tests for the sky gradient."""

    def test_straight_up_is_sky_blue(self):
        from src.spheretrace.core.integrator import sky_color

        assert sky_color((0.0, 1.0, 0.0)) == pytest.approx((0.5, 0.7, 1.0), abs=1e-6)

    def test_straight_down_is_white(self):
        from src.spheretrace.core.integrator import sky_color

        assert sky_color((0.0, -1.0, 0.0)) == pytest.approx((1.0, 1.0, 1.0), abs=1e-6)

    def test_horizon_is_midpoint(self):
        from src.spheretrace.core.integrator import sky_color

        assert sky_color((0.0, 0.0, -5.0)) == pytest.approx((0.75, 0.85, 1.0), abs=1e-6)

    def test_uses_unit_direction(self):
        """Test the gradient depends only on the direction, not its length."""
        from src.spheretrace.core.integrator import sky_color

        assert sky_color((0.0, 10.0, 0.0)) == pytest.approx(sky_color((0.0, 0.1, 0.0)), abs=1e-6)


class TestRayColor:
    """Tests for ray_color via trace_ray."""

    def test_empty_scene_returns_background(self):
        from src.spheretrace.core.integrator import sky_color, trace_ray

        direction = (0.3, 0.4, -1.0)
        assert trace_ray((0.0, 0.0, 0.0), direction, depth=50) == pytest.approx(
            sky_color(direction), abs=1e-6
        )

    def test_depth_zero_is_black(self):
        from src.spheretrace.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=0) == (0.0, 0.0, 0.0)

    def test_negative_depth_is_black(self):
        from src.spheretrace.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=-3) == (0.0, 0.0, 0.0)

    def test_depth_exhausted_on_hit_is_black(self):
        """Test a path that hits a surface with only one bounce left is black."""
        from src.spheretrace.core.integrator import trace_ray
        from src.spheretrace.scene.world import World

        world = World()
        world.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=1) == (0.0, 0.0, 0.0)

    def test_mirror_bounce_to_sky(self):
        """Test one mirror bounce returns albedo times the reflected sky color."""
        from src.spheretrace.core.integrator import sky_color, trace_ray
        from src.spheretrace.scene.world import World

        world = World()
        world.add_metal_sphere((0.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), fuzz=0.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=2)
        sky = sky_color((0.0, 0.0, 1.0))
        expected = (0.8 * sky[0], 0.6 * sky[1], 0.2 * sky[2])
        assert color == pytest.approx(expected, abs=1e-5)

    def test_glass_index_one_is_invisible(self):
        """Test a sphere with ir = 1 does not change the color of a ray."""
        from src.spheretrace.core.integrator import sky_color, trace_ray
        from src.spheretrace.scene.world import World

        world = World()
        world.add_dielectric_sphere((0.0, 0.0, -1.0), 0.5, ir=1.0)

        direction = (0.1, 0.2, -1.0)
        color = trace_ray((0.0, 0.0, 0.0), direction, depth=10)
        assert color == pytest.approx(sky_color(direction), abs=1e-4)

    def test_ray_trapped_inside_mirror_sphere_is_black(self):
        """Test a ray inside a mirror sphere never escapes."""
        from src.spheretrace.core.integrator import trace_ray
        from src.spheretrace.scene.world import World

        world = World()
        world.add_metal_sphere((0.0, 0.0, 0.0), 2.0, (0.9, 0.9, 0.9), fuzz=0.0)

        # Bounces inside until the depth budget runs out
        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=5) == (0.0, 0.0, 0.0)

    def test_diffuse_color_bounded_by_albedo(self):
        """Test a diffuse bounce never brightens beyond albedo times white."""
        from src.spheretrace.core.integrator import trace_ray
        from src.spheretrace.scene.world import World

        world = World()
        world.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))

        for _ in range(20):
            color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=50)
            assert all(0.0 <= c <= 0.5 + 1e-6 for c in color)


class TestRenderTarget:
    """Tests for render target management."""

    def test_invalid_dimensions(self):
        from src.spheretrace.core.integrator import MAX_IMAGE_WIDTH, setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(0, 10)
        with pytest.raises(ValueError):
            setup_render_target(MAX_IMAGE_WIDTH + 1, 10)

    def test_setup_sets_dimensions(self):
        from src.spheretrace.core.integrator import get_image_dimensions, setup_render_target

        setup_render_target(16, 9)
        assert get_image_dimensions() == (16, 9)

    def test_scanline_out_of_range(self):
        from src.spheretrace.core.integrator import render_scanline, setup_render_target

        setup_render_target(4, 3)
        with pytest.raises(ValueError):
            render_scanline(3, samples_per_pixel=1, max_depth=1)

    def test_render_scanline_fills_one_row(self):
        from src.spheretrace.camera.pinhole import PinholeCamera, setup_camera
        from src.spheretrace.core.integrator import (
            get_sample_count_numpy,
            render_scanline,
            setup_render_target,
        )

        setup_camera(PinholeCamera(aspect_ratio=2.0))
        setup_render_target(8, 4)
        render_scanline(3, samples_per_pixel=2, max_depth=5)

        counts = get_sample_count_numpy()
        # Row 3 counted from the bottom is the top row of the image
        assert np.all(counts[0] == 2)
        assert np.all(counts[1:] == 0)

    def test_render_image_empty_scene_gradient(self):
        """Test an empty scene renders the sky gradient, bluer toward the top."""
        from src.spheretrace.camera.pinhole import PinholeCamera, setup_camera
        from src.spheretrace.core.integrator import (
            get_accumulated_image_numpy,
            get_total_samples,
            render_image,
            setup_render_target,
        )

        setup_camera(PinholeCamera(aspect_ratio=2.0))
        setup_render_target(8, 4)
        render_image(samples_per_pixel=4, max_depth=5)

        assert get_total_samples() == 4
        image = get_accumulated_image_numpy() / 4.0
        assert image.shape == (4, 8, 3)
        assert np.all(np.isfinite(image))
        # Blue channel is always 1
        assert np.allclose(image[..., 2], 1.0, atol=1e-5)
        # Red channel decreases toward the top row
        red = image[..., 0].mean(axis=1)
        assert red[0] < red[-1]
        assert np.all((image >= 0.5 - 1e-5) & (image <= 1.0 + 1e-5))
