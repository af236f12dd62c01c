"""Materials module for light scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like refraction and Fresnel reflection

Each material module provides:
    - scatter_*(): a Taichi function returning
      (scattered_direction, attenuation, did_scatter)
    - scatter_*_by_id(): the same, reading parameters from the registry
    - a registry of parameters in Taichi fields (add_*/clear_*/get_*)

The three variants form a closed set. The integrator dispatches on
``pathtracer.scene.world.MaterialType``; scattered rays always originate at
the hit point.
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    fresnel_reflectance,
    get_dielectric_ior,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
    will_reflect,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    diffuse_direction,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "diffuse_direction",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_albedo",
    "get_lambertian_material_count",
    # Metal
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_albedo",
    "get_metal_fuzz",
    "get_metal_material_count",
    # Dielectric
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "will_reflect",
    "fresnel_reflectance",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_ior",
    "get_dielectric_material_count",
]
