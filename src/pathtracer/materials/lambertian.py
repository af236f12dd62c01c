"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters incoming light in a cosine-weighted
distribution around the surface normal. The scattered direction is the normal
plus a random unit vector; the endpoint lies on a unit sphere tangent to the
surface at the hit point, which yields the cos(theta) distribution without
building a local frame.

The attenuation of every bounce is the albedo, so each bounce off a surface
with albedo 0.5 halves the carried light.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_lambertian(albedo, normal)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import near_zero, random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def diffuse_direction(normal: vec3, offset: vec3) -> vec3:
    """Offset the normal by a unit vector, falling back to the normal.

    A unit vector almost exactly opposite the normal would give a zero-length
    direction, and normalizing it later would produce NaN.
    """
    direction = normal + offset
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3):
    """Sample a scattered direction for a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The unit surface normal at the hit point, facing the incoming
            ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: ``normal + random_unit_vector()``, or the
          normal itself when the sum nearly cancels to zero.
        - attenuation: The albedo.
        - did_scatter: Always 1; diffuse surfaces never absorb the ray.
    """
    scattered_direction = diffuse_direction(normal, random_unit_vector())
    did_scatter = 1
    return scattered_direction, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 1024

lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component must be in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "A surface cannot reflect more light than it receives."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, normal: vec3):
    """Look up a registered Lambertian material and scatter off it.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    return scatter_lambertian(get_lambertian_albedo(material_idx), normal)
