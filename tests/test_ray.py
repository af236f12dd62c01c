"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Vector utility functions (dot, cross, normalize, length, reflect, refract)
- Schlick reflectance and near_zero
- Random sampling functions for Monte Carlo
"""

import math

import pytest
import taichi as ti

N_SAMPLES = 1000


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from pathtracer.core.ray import Ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 2.0) < 1e-6
        assert abs(r[2] - 3.0) < 1e-6

    def test_ray_at_scales_unnormalized_direction(self):
        """Test ray_at uses the direction as given, without normalizing it."""
        from pathtracer.core.ray import make_ray, ray_at, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 1.0, 1.0), vec3(0.0, 0.0, 2.0))
            result[None] = ray_at(ray, 1.5)

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2] - 4.0) < 1e-6


class TestVectorUtilities:
    """Tests for vector utility functions."""

    def test_length_and_length_squared(self):
        """Test vector length computations."""
        from pathtracer.core.ray import length, length_squared, vec3

        len_result = ti.field(dtype=ti.f32, shape=())
        len_sq_result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            v = vec3(3.0, 4.0, 0.0)
            len_result[None] = length(v)
            len_sq_result[None] = length_squared(v)

        test_kernel()
        assert abs(len_result[None] - 5.0) < 1e-6
        assert abs(len_sq_result[None] - 25.0) < 1e-6

    def test_normalize(self):
        """Test vector normalization."""
        from pathtracer.core.ray import normalize, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(3.0, 4.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 0.6) < 1e-6
        assert abs(r[1] - 0.8) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_dot_and_cross(self):
        """Test dot and cross products of the basis vectors."""
        from pathtracer.core.ray import cross, dot, vec3

        dot_result = ti.field(dtype=ti.f32, shape=())
        cross_result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            dot_result[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))
            cross_result[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert abs(dot_result[None] - 12.0) < 1e-6
        c = cross_result[None]
        assert abs(c[0]) < 1e-6
        assert abs(c[1]) < 1e-6
        assert abs(c[2] - 1.0) < 1e-6

    def test_reflect(self):
        """Test reflection flips the normal component only."""
        from pathtracer.core.ray import reflect, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert abs(r[0] - 1.0) < 1e-6
        assert abs(r[1] - 1.0) < 1e-6
        assert abs(r[2]) < 1e-6

    def test_refract_ratio_one_is_identity(self):
        """Test refraction with equal indices leaves the direction unchanged."""
        from pathtracer.core.ray import normalize, refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            uv = normalize(vec3(1.0, -2.0, 0.5))
            result[None] = refract(uv, vec3(0.0, 1.0, 0.0), 1.0)

        test_kernel()
        r = result[None]
        expected = [1.0, -2.0, 0.5]
        norm = math.sqrt(sum(e * e for e in expected))
        for k in range(3):
            assert abs(r[k] - expected[k] / norm) < 1e-5

    def test_refract_obeys_snell(self):
        """Test refracted direction satisfies sin(out) = ratio * sin(in)."""
        from pathtracer.core.ray import refract, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())
        ratio = 1.0 / 1.5
        theta_in = math.radians(30.0)
        sin_in = math.sin(theta_in)
        cos_in = math.cos(theta_in)

        @ti.kernel
        def test_kernel():
            uv = vec3(sin_in, -cos_in, 0.0)
            result[None] = refract(uv, vec3(0.0, 1.0, 0.0), ratio)

        test_kernel()
        r = result[None]
        # Unit length, continues downward, tangential part scaled by the ratio
        assert abs(math.sqrt(r[0] ** 2 + r[1] ** 2 + r[2] ** 2) - 1.0) < 1e-5
        assert r[1] < 0.0
        assert abs(r[0] - ratio * math.sin(theta_in)) < 1e-5

    def test_schlick_normal_incidence(self):
        """Test Schlick reflectance at normal incidence equals R0."""
        from pathtracer.core.ray import schlick_fresnel

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = schlick_fresnel(1.0, 1.5)

        test_kernel()
        assert abs(result[None] - 0.04) < 1e-5

    def test_schlick_grazing_incidence(self):
        """Test Schlick reflectance approaches 1 at grazing angles."""
        from pathtracer.core.ray import schlick_fresnel

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = schlick_fresnel(0.0, 1.5)

        test_kernel()
        assert abs(result[None] - 1.0) < 1e-6

    @pytest.mark.parametrize(
        "v, expected",
        [
            ((0.0, 0.0, 0.0), 1),
            ((1e-9, -1e-9, 0.0), 1),
            ((1e-3, 0.0, 0.0), 0),
            ((0.0, 0.0, -1.0), 0),
        ],
    )
    def test_near_zero(self, v, expected):
        """Test near_zero requires every component to be tiny."""
        from pathtracer.core.ray import near_zero, vec3

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(x: ti.f32, y: ti.f32, z: ti.f32):
            result[None] = near_zero(vec3(x, y, z))

        test_kernel(*v)
        assert result[None] == expected


class TestRandomSampling:
    """Tests for the Monte Carlo sampling helpers."""

    def test_random_in_unit_sphere(self):
        """Test samples lie strictly inside the unit ball."""
        from pathtracer.core.ray import length_squared, random_in_unit_sphere

        results = ti.field(dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                results[i] = length_squared(random_in_unit_sphere())

        test_kernel()
        values = results.to_numpy()
        assert (values < 1.0).all()
        # Uniform in the ball: mean of |p|^2 is 3/5
        assert abs(values.mean() - 0.6) < 0.05

    def test_random_unit_vector(self):
        """Test samples have unit length and no preferred direction."""
        from pathtracer.core.ray import random_unit_vector

        results = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                results[i] = random_unit_vector()

        test_kernel()
        values = results.to_numpy()
        lengths = (values**2).sum(axis=1) ** 0.5
        assert abs(lengths - 1.0).max() < 1e-5
        assert abs(values.mean(axis=0)).max() < 0.1

    def test_random_in_unit_disk(self):
        """Test samples lie inside the unit disk in the z=0 plane."""
        from pathtracer.core.ray import random_in_unit_disk

        results = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)

        @ti.kernel
        def test_kernel():
            for i in range(N_SAMPLES):
                results[i] = random_in_unit_disk()

        test_kernel()
        values = results.to_numpy()
        assert (values[:, 2] == 0.0).all()
        assert (values[:, 0] ** 2 + values[:, 1] ** 2 < 1.0).all()
