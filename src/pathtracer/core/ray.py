"""Ray data structure, vector algebra and random sampling.

This module provides the Ray dataclass and the small vector toolkit shared by
the geometry, material and camera code. Everything here is a Taichi function
so it can be called from inside render kernels.

Random sampling uses ``ti.random``, which draws from the calling thread's own
generator state. Kernels running on many CPU threads therefore never contend
for a shared generator.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def point() -> vec3:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors (points, directions and RGB colors alike)
vec3 = tm.vec3

# Attempts made by the rejection samplers before returning the last candidate
MAX_REJECTION_TRIES = 100

# Component magnitude below which a vector counts as zero
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Not required to be unit
            length; code that needs a unit direction normalizes it locally.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point ``origin + t * direction`` along the ray."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi scope."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Mirror ``v`` about the unit normal ``n``: ``v - 2 (v . n) n``."""
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f32) -> vec3:
    """Bend a unit direction through a surface using Snell's law.

    The refracted ray is split into the components perpendicular and parallel
    to the normal. The caller is responsible for detecting total internal
    reflection beforehand; the absolute value under the square root only
    protects against rounding just past the critical angle.

    Args:
        uv: The incoming direction (unit length).
        n: The unit surface normal, facing against ``uv``.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction. With a ratio of 1.0 this is ``uv`` itself.
    """
    cos_theta = tm.min(tm.dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - tm.dot(r_out_perp, r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def schlick_fresnel(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Schlick's approximation of the Fresnel reflectance.

    ``R0 = ((1 - ref_idx) / (1 + ref_idx))^2`` and
    ``R(cos) = R0 + (1 - R0) (1 - cos)^5``.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component of ``v`` is within NEAR_ZERO_EPSILON of 0."""
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_cube() -> vec3:
    """Uniform random point in the cube [-1, 1)^3."""
    return vec3(
        ti.random(ti.f32) * 2.0 - 1.0,
        ti.random(ti.f32) * 2.0 - 1.0,
        ti.random(ti.f32) * 2.0 - 1.0,
    )


@ti.func
def random_in_unit_sphere() -> vec3:
    """Uniform random point strictly inside the unit sphere (rejection sampled)."""
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            p = random_in_cube()
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Random unit vector, uniformly distributed over the sphere.

    Normalizes a rejection-sampled point of the unit ball. Candidates too close
    to the origin are rejected as well so the normalization stays finite.
    """
    p = vec3(0.0, 0.0, 1.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            candidate = random_in_cube()
            len_sq = length_squared(candidate)
            if 1e-20 < len_sq < 1.0:
                p = candidate / ti.sqrt(len_sq)
                found = True
    return p


@ti.func
def random_in_unit_disk() -> vec3:
    """Random point (x, y, 0) inside the unit disk, used for lens sampling."""
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            p = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                0.0,
            )
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    return p
