"""Metal (specular reflective) material implementation.

Metals mirror the incoming ray about the surface normal:

    R = I - 2(I . N)N

where I is the unit incident direction. A fuzz parameter in [0, 1] perturbs
the mirror direction by a random offset inside a sphere of radius ``fuzz``,
which blurs reflections the way microscopic surface roughness does. With
``fuzz == 0`` no randomness is involved at all.

When the perturbation pushes the reflected direction below the surface the
ray is absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import random_in_unit_sphere, reflect

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Compute the scattered direction for a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The perturbation radius in [0, 1].
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: ``reflect(unit(incident), normal)`` plus the
          fuzz offset. Not renormalized.
        - attenuation: The albedo.
        - did_scatter: 1 if the direction leaves the surface, 0 if absorbed.
    """
    reflected = reflect(tm.normalize(incident_direction), normal)

    scattered_direction = reflected
    if fuzz > 0.0:
        scattered_direction = reflected + fuzz * random_in_unit_sphere()

    did_scatter = 1
    if tm.dot(scattered_direction, normal) <= 0.0:
        did_scatter = 0

    return scattered_direction, albedo, did_scatter


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 1024

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials."""
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
            Each component must be in [0, 1].
        fuzz: The reflection perturbation in [0, 1]. Default is 0 (mirror).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
        ValueError: If fuzz is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "A surface cannot reflect more light than it receives."
            )

    if fuzz < 0.0 or fuzz > 1.0:
        raise ValueError(
            f"Fuzz = {fuzz} is outside [0, 1]. "
            "Fuzz must be between 0 (perfect mirror) and 1 (maximum fuzz)."
        )

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(
            f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded"
        )

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzzes[idx] = fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    incident_direction: vec3,
    normal: vec3,
):
    """Look up a registered metal material and scatter off it.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter).
    """
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, incident_direction, normal)
