"""World-level sphere storage and nearest-hit queries.

The world stores its spheres in Taichi fields using a structure-of-arrays
layout and answers ray queries with a linear scan. Each sphere records the
unified material ID of its surface; many spheres may share the same ID.

The scan keeps a shrinking upper bound ``closest_so_far``: every sphere is
tested only against the interval up to the best hit found so far, so the
reported hit is the globally nearest one whatever order the spheres were
added in.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.intersection import add_sphere, clear_world, hit_world
    >>> clear_world()
    >>> add_sphere(ti.math.vec3(0, 0, -1), 0.5, material_id=0)
    >>> # Use hit_world within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray
from pathtracer.geometry.sphere import Sphere, hit_sphere, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of spheres supported in the world
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_world() -> None:
    """Remove all spheres from the world.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int) -> int:
    """Append a sphere to the world storage.

    Args:
        center: The center point of the sphere.
        radius: The signed radius (negative for a hollow sphere). Must not be 0.
        material_id: The unified material ID of the sphere's surface.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is zero.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if radius == 0.0:
        raise ValueError("Sphere radius must be non-zero")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the world."""
    return int(num_spheres[None])


@ti.func
def get_sphere(i: ti.i32) -> Sphere:
    return Sphere(
        center=sphere_centers[i],
        radius=sphere_radii[i],
        material_id=sphere_material_ids[i],
    )


@ti.func
def hit_world(ray: Ray, t_min: ti.f32, t_max: ti.f32):
    """Find the nearest intersection of a ray with any sphere in the world.

    Args:
        ray: The ray to test.
        t_min: Exclusive lower bound on accepted t values.
        t_max: Exclusive upper bound on accepted t values.

    Returns:
        A HitRecord for the closest hit, or a miss record (hit == 0,
        material_id == -1) if no sphere is hit inside the interval.
    """
    closest_so_far = t_max
    result = make_miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), t_min, closest_so_far)
        if rec.hit == 1:
            closest_so_far = rec.t
            result = rec

    return result
