"""Sphere primitive with robust ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the intersection
routine used by the world query. Roots are computed with the numerically
stable quadratic formulation from Ray Tracing Gems, which avoids catastrophic
cancellation when the ray passes far from the sphere center.

A sphere may carry a negative radius. The intersection math only ever sees
``radius * radius``, so the sign changes nothing but the direction of the
outward normal ``(point - center) / radius``, which then points inward. Two
concentric spheres with radii ``r`` and ``-r + eps`` sharing a glass material
model a thin hollow glass shell.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, signed radius and material handle.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The signed radius. ``abs(radius)`` is the geometric radius; a
            negative value inverts the outward normal (hollow sphere).
        material_id: Unified material ID of the surface material.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The unit surface normal at the intersection, always facing
            against the incoming ray. Only valid if hit == 1.
        front_face: 1 if the ray hit the surface from outside (against the
            outward normal), 0 if it hit from inside.
        material_id: The material ID of the surface, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord describing no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve ``a t^2 + 2 h t + c = 0`` given ``sqrt(h^2 - a c)``.

    Returns:
        Tuple of (t0, t1) with t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant)) never subtracts nearly equal values
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0
    if ti.abs(q) < 1e-10:
        # Ray origin on the sphere and direction tangent to it
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test a ray against one sphere.

    Solves ``|O + tD - C|^2 = r^2`` in the half-b form

        a = D . D,  h = D . (O - C),  c = |O - C|^2 - r^2

    and reports the nearest root in the open interval ``(t_min, t_max)``.
    The near root is tried first; when it lies outside the interval the far
    root is tried (this is how a ray starting inside the sphere finds the exit
    point).

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test against.
        t_min: Exclusive lower bound on accepted t values.
        t_max: Exclusive upper bound on accepted t values.

    Returns:
        A HitRecord; check ``hit`` to see whether an intersection occurred.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(ray.direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = t_min < t < t_max
        if not valid:
            t = t1
            valid = t_min < t < t_max

        if valid:
            point = ray_at(ray, t)
            outward_normal = (point - sphere.center) / sphere.radius

            front_face = 0
            normal = -outward_normal
            if tm.dot(ray.direction, outward_normal) < 0.0:
                front_face = 1
                normal = outward_normal

            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> Sphere:
    """Create a sphere inside a Taichi scope."""
    return Sphere(center=center, radius=radius, material_id=material_id)
