"""Core rendering module.

Components:
    ray: Ray data structure, vector algebra and random sampling
    integrator: Light transport (ray_color), render target and per-scanline
        sampling kernel
    renderer: Scanline-ordered render loop with progress reporting

All compute-intensive operations run in Taichi kernels on the CPU backend.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    schlick_fresnel,
    vec3,
)

# Note: integrator and renderer are NOT imported here; they declare Taichi
# fields and pull in the scene and material modules. Import them directly from
# pathtracer.core.integrator or pathtracer.core.renderer when needed.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_fresnel",
    "near_zero",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
]
