"""Scene module for world storage, world building and preset scenes.

Components:
    intersection: Sphere storage in Taichi fields and the nearest-hit scan
    world: World builder coordinating spheres and shared materials
    presets: Ready-made scenes paired with a framed camera

Scene data is organized for kernel access:
    - Structure-of-Arrays layout for sphere data
    - Unified material IDs resolved to (type, type index) by lookup fields
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_world,
    get_sphere_count,
    hit_world,
)
from .presets import (
    SCENES,
    create_material_showcase_scene,
    create_random_scene,
    create_scene,
    create_two_sphere_scene,
)
from .world import (
    MAX_MATERIALS,
    HitResult,
    MaterialInfo,
    MaterialType,
    SphereInfo,
    World,
    clear_material_tracking,
    get_material_type,
    get_material_type_index,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_world",
    "get_sphere_count",
    "hit_world",
    "MAX_SPHERES",
    # World module
    "World",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "HitResult",
    "MAX_MATERIALS",
    "clear_material_tracking",
    "get_material_type",
    "get_material_type_index",
    # Presets module
    "create_random_scene",
    "create_two_sphere_scene",
    "create_material_showcase_scene",
    "create_scene",
    "SCENES",
]
