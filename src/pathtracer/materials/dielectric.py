"""Dielectric (glass/water) material implementation.

Dielectrics are clear materials that split light into a reflected and a
refracted part. Each scatter event picks one of the two at random:

    - Snell's law: eta_i * sin(theta_i) = eta_t * sin(theta_t)
    - Total internal reflection when (eta_i / eta_t) * sin(theta_i) > 1
    - Otherwise reflect with probability given by Schlick's approximation
      of the Fresnel reflectance, refract with the remaining probability

Clear glass absorbs nothing, so the attenuation is always white.

An index of refraction of 1 never bends a refracted ray, but Schlick's
approximation still reflects oblique rays with probability (1 - cos)^5.
Such a surface is only fully transparent at normal incidence.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     ior, incident_dir, normal, front_face
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import reflect, refract, schlick_fresnel

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def _refraction_ratio(ior: ti.f32, front_face: ti.i32) -> ti.f32:
    """Ratio eta_i / eta_t: entering the material from outside or leaving it."""
    return ti.select(front_face == 1, 1.0 / ior, ior)


@ti.func
def _cos_sin_theta(unit_direction: vec3, normal: vec3):
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = ti.sqrt(tm.max(0.0, 1.0 - cos_theta * cos_theta))
    return cos_theta, sin_theta


@ti.func
def scatter_dielectric(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Compute the scattered direction for a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray enters the material from outside,
            0 if it travels inside the material toward the boundary.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The reflected or refracted direction.
        - attenuation: White; clear glass absorbs nothing.
        - did_scatter: Always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    refraction_ratio = _refraction_ratio(ior, front_face)

    unit_direction = tm.normalize(incident_direction)
    cos_theta, sin_theta = _cos_sin_theta(unit_direction, normal)

    cannot_refract = refraction_ratio * sin_theta > 1.0

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or schlick_fresnel(cos_theta, refraction_ratio) > ti.random(ti.f32):
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, refraction_ratio)

    did_scatter = 1
    return scattered_direction, attenuation, did_scatter


@ti.func
def will_reflect(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Return 1 if total internal reflection rules out refraction."""
    refraction_ratio = _refraction_ratio(ior, front_face)
    _cos_theta, sin_theta = _cos_sin_theta(tm.normalize(incident_direction), normal)
    return refraction_ratio * sin_theta > 1.0


@ti.func
def fresnel_reflectance(
    ior: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.f32:
    """Probability of reflection given by Schlick's approximation."""
    refraction_ratio = _refraction_ratio(ior, front_face)
    cos_theta, _sin_theta = _cos_sin_theta(tm.normalize(incident_direction), normal)
    return schlick_fresnel(cos_theta, refraction_ratio)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 1024

dielectric_iors = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(ior: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        ior: Index of refraction relative to the surrounding medium.
            Default is 1.5 (typical glass). Values below 1.0 are allowed and
            model e.g. an air bubble inside water.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If IOR is not positive.
    """
    if ior <= 0.0:
        raise ValueError(f"Index of refraction = {ior} must be positive.")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_iors[idx] = ior
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ior(material_idx: ti.i32) -> ti.f32:
    return dielectric_iors[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Look up a registered dielectric material and scatter off it.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    ior = get_dielectric_ior(material_idx)
    return scatter_dielectric(ior, incident_direction, normal, front_face)
