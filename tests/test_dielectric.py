"""Unit tests for the Dielectric material module.

Tests cover:
- Refraction entering and leaving glass (Snell's law)
- Total internal reflection
- Index of refraction 1 passes rays straight through
- Fresnel (Schlick) reflection probability
- White attenuation and no absorption
- Material registry operations and validation
"""

import math

import numpy as np
import pytest
import taichi as ti

N_SAMPLES = 2000


def _scatter_many(ior, incident, normal, front_face):
    """Run scatter_dielectric N_SAMPLES times and return the results."""
    from pathtracer.materials.dielectric import scatter_dielectric

    directions = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)
    attenuations = ti.Vector.field(3, dtype=ti.f32, shape=N_SAMPLES)
    scattered = ti.field(dtype=ti.i32, shape=N_SAMPLES)

    @ti.kernel
    def test_kernel(eta: ti.f32, d: ti.math.vec3, n: ti.math.vec3, ff: ti.i32):
        for i in range(N_SAMPLES):
            direction, attenuation, did_scatter = scatter_dielectric(eta, d, n, ff)
            directions[i] = direction
            attenuations[i] = attenuation
            scattered[i] = did_scatter

    test_kernel(ior, ti.math.vec3(*incident), ti.math.vec3(*normal), front_face)
    return directions.to_numpy(), attenuations.to_numpy(), scattered.to_numpy()


class TestDielectricScatter:
    """Tests for dielectric scattering."""

    def test_always_scatters_with_white_attenuation(self):
        """Test glass never absorbs and never tints."""
        _, att, scattered = _scatter_many(1.5, (0.3, -1.0, 0.0), (0.0, 1.0, 0.0), 1)

        assert (scattered == 1).all()
        assert abs(att - 1.0).max() < 1e-6

    def test_ior_one_normal_incidence_is_identity(self):
        """Test ior 1 at normal incidence always continues straight on."""
        directions, _, _ = _scatter_many(1.0, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0), 1)

        assert abs(directions - [0.0, -1.0, 0.0]).max() < 1e-5

    def test_ior_one_grazing_rays_sometimes_reflect(self):
        """Test ior 1 still reflects oblique rays with Schlick probability."""
        theta = math.radians(80.0)
        incident = (math.sin(theta), -math.cos(theta), 0.0)
        directions, _, _ = _scatter_many(1.0, incident, (0.0, 1.0, 0.0), 1)

        straight = abs(directions - incident).max(axis=1) < 1e-4
        mirror = abs(directions - [math.sin(theta), math.cos(theta), 0.0]).max(axis=1) < 1e-4
        assert (straight | mirror).all()

        # (1 - cos(80 degrees))^5 is about 0.385
        assert 0.3 < mirror.mean() < 0.47

    def test_refraction_or_reflection_entering_glass(self):
        """Test every outcome is either the mirror or the Snell direction."""
        theta = math.radians(45.0)
        incident = (math.sin(theta), -math.cos(theta), 0.0)
        directions, _, _ = _scatter_many(1.5, incident, (0.0, 1.0, 0.0), 1)

        mirror = np.array([math.sin(theta), math.cos(theta), 0.0])
        sin_out = math.sin(theta) / 1.5
        refracted = np.array([sin_out, -math.sqrt(1.0 - sin_out * sin_out), 0.0])

        is_mirror = abs(directions - mirror).max(axis=1) < 1e-4
        is_refracted = abs(directions - refracted).max(axis=1) < 1e-4
        assert (is_mirror | is_refracted).all()

        # Schlick at 45 degrees into glass is about 4%
        reflect_fraction = is_mirror.mean()
        assert 0.01 < reflect_fraction < 0.12

    def test_total_internal_reflection(self):
        """Test steep rays leaving glass are always reflected."""
        theta = math.radians(60.0)
        # Inside glass heading out; sin(60) * 1.5 > 1
        incident = (math.sin(theta), -math.cos(theta), 0.0)
        directions, _, _ = _scatter_many(1.5, incident, (0.0, 1.0, 0.0), 0)

        mirror = [math.sin(theta), math.cos(theta), 0.0]
        assert abs(directions - mirror).max() < 1e-5

    def test_leaving_glass_below_critical_angle_refracts(self):
        """Test rays leaving glass bend away from the normal."""
        theta = math.radians(20.0)
        incident = (math.sin(theta), -math.cos(theta), 0.0)
        directions, _, _ = _scatter_many(1.5, incident, (0.0, 1.0, 0.0), 0)

        refracted = directions[directions[:, 1] < 0.0]
        assert len(refracted) > 0
        assert abs(refracted[:, 0] - 1.5 * math.sin(theta)).max() < 1e-4

    def test_incident_length_irrelevant(self):
        """Test the incident direction is normalized before refracting."""
        directions, _, _ = _scatter_many(1.0, (0.0, -7.0, 0.0), (0.0, 1.0, 0.0), 1)
        assert abs(directions - [0.0, -1.0, 0.0]).max() < 1e-5


class TestFresnelHelpers:
    """Tests for the reflection helpers."""

    def test_will_reflect_and_fresnel_reflectance(self):
        """Test total internal reflection detection and Schlick reflectance."""
        from pathtracer.materials.dielectric import fresnel_reflectance, will_reflect

        tir = ti.field(dtype=ti.i32, shape=2)
        reflectance = ti.field(dtype=ti.f32, shape=())
        steep_x = math.sin(math.radians(60.0))
        steep_y = -math.cos(math.radians(60.0))

        @ti.kernel
        def test_kernel():
            n = ti.math.vec3(0.0, 1.0, 0.0)
            d = ti.math.vec3(steep_x, steep_y, 0.0)
            tir[0] = will_reflect(1.5, d, n, 0)
            tir[1] = will_reflect(1.5, d, n, 1)
            reflectance[None] = fresnel_reflectance(1.5, ti.math.vec3(0.0, -1.0, 0.0), n, 1)

        test_kernel()
        assert tir[0] == 1
        assert tir[1] == 0
        assert abs(reflectance[None] - 0.04) < 1e-5


class TestDielectricRegistry:
    """Tests for the dielectric material registry."""

    def test_add_and_get_material(self):
        """Test adding a material and reading its IOR in a kernel."""
        from pathtracer.materials.dielectric import add_dielectric_material, get_dielectric_ior

        add_dielectric_material(1.5)
        idx = add_dielectric_material(2.4)
        assert idx == 1

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            result[None] = get_dielectric_ior(mat_idx)

        test_kernel(idx)
        assert abs(result[None] - 2.4) < 1e-6

    def test_default_ior_is_glass(self):
        """Test the default IOR is 1.5."""
        from pathtracer.materials.dielectric import add_dielectric_material, get_dielectric_ior

        idx = add_dielectric_material()
        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            result[None] = get_dielectric_ior(mat_idx)

        test_kernel(idx)
        assert abs(result[None] - 1.5) < 1e-6

    def test_ior_below_one_accepted(self):
        """Test indices below 1 (e.g. an air bubble model) are accepted."""
        from pathtracer.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_material_count,
        )

        add_dielectric_material(1.0 / 1.33)
        assert get_dielectric_material_count() == 1

    @pytest.mark.parametrize("ior", [0.0, -1.5])
    def test_ior_validation(self, ior):
        """Test a non-positive IOR raises ValueError."""
        from pathtracer.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError):
            add_dielectric_material(ior)

    def test_scatter_by_id(self):
        """Test scattering through the registry uses the stored IOR."""
        from pathtracer.materials.dielectric import add_dielectric_material, scatter_dielectric_by_id

        idx = add_dielectric_material(1.0)
        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            for _ in range(1):
                direction, _attenuation, _flag = scatter_dielectric_by_id(
                    mat_idx, ti.math.vec3(0.0, -1.0, 0.0), ti.math.vec3(0.0, 1.0, 0.0), 1
                )
                result[None] = direction

        test_kernel(idx)
        assert abs(result.to_numpy() - [0.0, -1.0, 0.0]).max() < 1e-5
