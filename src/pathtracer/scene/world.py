"""World builder coordinating spheres and their materials.

This module provides the Python-side API for describing a scene. It keeps a
unified material ID space across the three material types and records, for
every ID, which type it is and where its parameters live in that type's
registry. Kernels use the two lookup fields to dispatch scattering.

Material IDs are handles: a material is registered once and any number of
spheres may refer to it. Materials are never modified after registration.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.world import World
    >>> world = World()
    >>> glass = world.add_dielectric_material(ior=1.5)
    >>> world.add_sphere(center=(-1, 0, -1), radius=0.5, material_id=glass)
    >>> world.add_sphere(center=(-1, 0, -1), radius=-0.45, material_id=glass)
    >>> record = world.hit((0, 0, 0), (-1, 0, -1))
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray
from pathtracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from pathtracer.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from pathtracer.materials.metal import (
    add_metal_material,
    clear_metal_materials,
)
from pathtracer.scene.intersection import (
    add_sphere,
    clear_world,
    get_sphere_count,
    hit_world,
)

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 3072  # 1024 per type * 3 types

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_material_tracking() -> None:
    """Forget all unified material IDs."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the MaterialType of a unified material ID, or -1 if it is invalid."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the index of a material inside its type-specific registry, or -1."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


# =============================================================================
# Python-side world queries
# =============================================================================

# One-shot query results, read back after _query_world runs
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_front_face = ti.field(dtype=ti.i32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _query_world(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32):
    # Single-iteration outer loop keeps the sphere scan serial
    for _ in range(1):
        rec = hit_world(Ray(origin=origin, direction=direction), t_min, t_max)
        _query_hit[None] = rec.hit
        _query_t[None] = rec.t
        _query_point[None] = rec.point
        _query_normal[None] = rec.normal
        _query_front_face[None] = rec.front_face
        _query_material_id[None] = rec.material_id


@dataclass
class HitResult:
    """Python-side copy of a world intersection.

    Attributes:
        t: The ray parameter of the hit.
        point: The intersection point.
        normal: The unit normal, facing against the ray.
        front_face: True if the ray hit the sphere from outside.
        material_id: The unified material ID of the hit sphere.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    front_face: bool
    material_id: int


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material (Lambertian, Metal, Dielectric).
        type_index: The index within the type-specific material array.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the world.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The signed radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


class World:
    """A scene made of spheres sharing registered materials.

    Creating a World clears every sphere and material previously stored in
    the Taichi fields, since kernels render whatever those fields hold.

    Attributes:
        materials: MaterialInfo for all registered materials, by material ID.
        spheres: SphereInfo for all spheres, in insertion order.

    Example:
        >>> world = World()
        >>> ground = world.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
        >>> gold = world.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> world.add_sphere((0, -1000, 0), 1000, ground)
        >>> world.add_sphere((0, 1, 0), 1.0, gold)
    """

    def __init__(self) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        clear_world()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Remove every sphere and material from the world."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Register a Lambertian (diffuse) material.

        Args:
            albedo: The diffuse reflectance color as (R, G, B), each in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_lambertian_material(albedo)
        return self._register_material(
            MaterialType.LAMBERTIAN, type_index, {"albedo": tuple(albedo)}
        )

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Register a metal (specular reflective) material.

        Args:
            albedo: The reflective color as (R, G, B), each in [0, 1].
            fuzz: The reflection perturbation in [0, 1]. Default 0 (mirror).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component or fuzz is outside [0, 1].
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._register_material(
            MaterialType.METAL, type_index, {"albedo": tuple(albedo), "fuzz": fuzz}
        )

    def add_dielectric_material(self, ior: float = 1.5) -> int:
        """Register a dielectric (glass/water) material.

        Args:
            ior: Index of refraction. Default is 1.5 (typical glass).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If IOR is not positive.
        """
        type_index = add_dielectric_material(ior)
        return self._register_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def get_material_count(self) -> int:
        """Get the total number of materials in the world."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere referring to an already registered material.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The signed radius. Negative values invert the normal and
                model the inner wall of a hollow sphere.
            material_id: The unified material ID from add_*_material().

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or the radius is zero.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        center_vec = vec3(center[0], center[1], center[2])
        sphere_index = add_sphere(center_vec, radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=tuple(center),
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        return self.add_sphere(center, radius, material_id), material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        return self.add_sphere(center, radius, material_id), material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(ior)
        return self.add_sphere(center, radius, material_id), material_id

    # =========================================================================
    # World Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the world."""
        return get_sphere_count()

    def hit(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        t_min: float = 0.001,
        t_max: float = float("inf"),
    ) -> HitResult | None:
        """Intersect a single ray with the world from Python.

        Runs the same nearest-hit scan the renderer uses.

        Args:
            origin: The ray origin.
            direction: The ray direction (any non-zero length).
            t_min: Exclusive lower bound on accepted t values.
            t_max: Exclusive upper bound on accepted t values.

        Returns:
            A HitResult for the nearest hit, or None if nothing is hit.
        """
        _query_world(
            vec3(origin[0], origin[1], origin[2]),
            vec3(direction[0], direction[1], direction[2]),
            t_min,
            t_max,
        )
        if _query_hit[None] == 0:
            return None

        point = _query_point[None]
        normal = _query_normal[None]
        return HitResult(
            t=float(_query_t[None]),
            point=(float(point[0]), float(point[1]), float(point[2])),
            normal=(float(normal[0]), float(normal[1]), float(normal[2])),
            front_face=bool(_query_front_face[None]),
            material_id=int(_query_material_id[None]),
        )
