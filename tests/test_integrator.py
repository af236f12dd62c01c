"""Unit tests for the path tracing integrator.

Tests cover:
- Sky gradient
- Depth limit and absorption
- Material dispatch through ray_color
- Scanline rendering into the render target
- Render target validation
"""

import numpy as np
import pytest


def _pinhole(vfov=90.0, aspect_ratio=4.0 / 3.0):
    from pathtracer.camera.thin_lens import ThinLensCamera

    return ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=vfov,
        aspect_ratio=aspect_ratio,
    )


class TestSkyColor:
    """Tests for the background gradient."""

    def test_straight_up_is_blue(self):
        from pathtracer.core.integrator import background_color

        color = background_color((0.0, 1.0, 0.0))
        assert np.allclose(color, (0.5, 0.7, 1.0), atol=1e-6)

    def test_straight_down_is_white(self):
        from pathtracer.core.integrator import background_color

        color = background_color((0.0, -1.0, 0.0))
        assert np.allclose(color, (1.0, 1.0, 1.0), atol=1e-6)

    def test_horizon_is_halfway(self):
        """Test a horizontal ray blends white and blue equally."""
        from pathtracer.core.integrator import background_color

        color = background_color((0.0, 0.0, -5.0))
        assert np.allclose(color, (0.75, 0.85, 1.0), atol=1e-6)

    def test_redness_decreases_with_height(self):
        from pathtracer.core.integrator import background_color

        reds = [background_color((1.0, y, 0.0))[0] for y in (-2.0, -0.5, 0.0, 0.5, 2.0)]
        assert all(a > b for a, b in zip(reds, reds[1:]))
        assert all(0.5 <= r <= 1.0 for r in reds)


class TestRayColor:
    """Tests for ray_color through the Python helper."""

    def test_zero_depth_is_black(self):
        from pathtracer.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), max_depth=0) == (0.0, 0.0, 0.0)

    def test_empty_world_returns_sky(self):
        from pathtracer.core.integrator import background_color, trace_ray

        direction = (0.3, 0.4, -1.0)
        assert np.allclose(trace_ray((0.0, 0.0, 0.0), direction), background_color(direction))

    def test_black_diffuse_absorbs(self):
        """Test a zero albedo surface returns black."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.scene.world import World

        world = World()
        world.add_lambertian_sphere((0.0, 0.0, -2.0), 0.5, (0.0, 0.0, 0.0))

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) == (0.0, 0.0, 0.0)

    def test_trapped_in_mirror_sphere_is_black(self):
        """Test a path that never escapes runs out of bounces and is black."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.scene.world import World

        world = World()
        world.add_metal_sphere((0.0, 0.0, 0.0), 5.0, (1.0, 1.0, 1.0), fuzz=0.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.2, 0.3, -1.0), max_depth=10)
        assert color == (0.0, 0.0, 0.0)

    def test_grey_diffuse_halves_sky(self):
        """Test one diffuse bounce attenuates the sky by the albedo."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.scene.world import World

        world = World()
        world.add_lambertian_sphere((0.0, 0.0, -2.0), 0.5, (0.5, 0.5, 0.5))

        for _ in range(20):
            r, g, b = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
            # The sky has r <= g <= b = 1
            assert 0.0 < r <= g + 1e-6
            assert g <= b + 1e-6
            assert b <= 0.5 + 1e-5

    def test_mirror_reflects_sky(self):
        """Test a perfect mirror facing up shows the sky above it."""
        from pathtracer.core.integrator import background_color, trace_ray
        from pathtracer.scene.world import World

        world = World()
        world.add_metal_sphere((0.0, -100.0, 0.0), 99.0, (1.0, 1.0, 1.0), fuzz=0.0)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, -1.0, 0.0))
        assert np.allclose(color, background_color((0.0, 1.0, 0.0)), atol=1e-5)

    def test_index_matched_glass_is_invisible_head_on(self):
        """Test glass with ior 1 passes a central ray straight through."""
        from pathtracer.core.integrator import background_color, trace_ray
        from pathtracer.scene.world import World

        world = World()
        world.add_dielectric_sphere((0.0, 0.0, -3.0), 1.0, ior=1.0)

        for _ in range(10):
            color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
            assert np.allclose(color, background_color((0.0, 0.0, -1.0)), atol=1e-5)


class TestScanlineRendering:
    """Tests for rendering into the render target."""

    def test_sky_image(self):
        """Test an empty world renders the sky gradient, bluer at the top."""
        from pathtracer.camera.thin_lens import setup_camera
        from pathtracer.core.integrator import (
            get_color_sums_numpy,
            render_scanline,
            setup_render_target,
        )

        setup_camera(_pinhole())
        setup_render_target(8, 6)
        for j in range(6):
            render_scanline(j, samples_per_pixel=4)

        sums = get_color_sums_numpy()
        assert sums.shape == (6, 8, 3)
        assert sums.dtype == np.float32
        # Sums of 4 samples; the sky's blue channel is always 1
        assert abs(sums[..., 2] - 4.0).max() < 1e-4
        # Top row first: less red than the bottom row
        assert sums[0, :, 0].mean() < sums[-1, :, 0].mean()
        assert (sums[..., 0] >= 2.0 - 1e-4).all()

    def test_unrendered_rows_stay_zero(self):
        from pathtracer.camera.thin_lens import setup_camera
        from pathtracer.core.integrator import (
            get_color_sums_numpy,
            render_scanline,
            setup_render_target,
        )

        setup_camera(_pinhole())
        setup_render_target(4, 3)
        render_scanline(2, samples_per_pixel=1)

        sums = get_color_sums_numpy()
        # Row j = 2 is the top row
        assert (sums[0] > 0.0).all()
        assert (sums[1:] == 0.0).all()

    def test_scanline_out_of_range(self):
        from pathtracer.camera.thin_lens import setup_camera
        from pathtracer.core.integrator import render_scanline, setup_render_target

        setup_camera(_pinhole())
        setup_render_target(4, 3)
        with pytest.raises(ValueError):
            render_scanline(3, samples_per_pixel=1)
        with pytest.raises(ValueError):
            render_scanline(-1, samples_per_pixel=1)

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (3000, 10), (10, 3000)])
    def test_render_target_dimensions(self, width, height):
        from pathtracer.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(width, height)

    def test_setup_records_dimensions(self):
        from pathtracer.core.integrator import get_image_dimensions, setup_render_target

        setup_render_target(320, 180)
        assert get_image_dimensions() == (320, 180)
