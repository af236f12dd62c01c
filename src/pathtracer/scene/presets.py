"""Ready-made scenes.

Each factory fills a fresh World (which clears any previous scene data) and
returns it with a camera framed for that scene:

- create_random_scene: a ground plane scattered with hundreds of small
  random spheres around three large ones (diffuse, metal and glass)
- create_two_sphere_scene: one diffuse sphere resting on a large ground
  sphere, seen through a pinhole camera
- create_material_showcase_scene: a diffuse, a hollow glass and a metal
  sphere side by side, seen through a lens with shallow depth of field

Random scenes draw from an explicit numpy Generator, so a seed reproduces
the same layout.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.presets import create_random_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> world, camera = create_random_scene(seed=7)
    >>> setup_camera(camera)
"""

import math
from collections.abc import Callable

import numpy as np

from pathtracer.camera.thin_lens import ThinLensCamera
from pathtracer.scene.world import World

DEFAULT_ASPECT_RATIO = 16.0 / 9.0

# =============================================================================
# Random Scene Constants
# =============================================================================

GROUND_ALBEDO = (0.5, 0.5, 0.5)
GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0

# Small spheres sit on a grid of cells from -GRID_EXTENT to GRID_EXTENT
GRID_EXTENT = 11
SMALL_SPHERE_RADIUS = 0.2
CELL_JITTER = 0.9

# Material choice thresholds: below DIFFUSE_CHANCE diffuse, below
# METAL_CHANCE metal, otherwise glass
DIFFUSE_CHANCE = 0.8
METAL_CHANCE = 0.95

METAL_ALBEDO_MIN = 0.4
METAL_FUZZ_MAX = 0.5
GLASS_IOR = 1.5

BROWN_ALBEDO = (0.4, 0.2, 0.1)
POLISHED_METAL_ALBEDO = (0.7, 0.6, 0.5)


def _random_scene_camera(aspect_ratio: float) -> ThinLensCamera:
    return ThinLensCamera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0,
    )


def create_random_scene(
    seed: int | None = None,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[World, ThinLensCamera]:
    """Create the scattered-spheres scene.

    The scene contains:
    - A huge grey diffuse sphere acting as the ground
    - One small sphere (radius 0.2) per cell of a 23x23 grid, jittered
      inside its cell: 80% diffuse with albedo random * random, 15% metal
      with albedo in [0.4, 1) and fuzz in [0, 0.5), 5% glass
    - Three unit spheres in a row: glass, brown diffuse and polished metal

    Small spheres are placed without overlap checks, so they may touch or
    intersect the large ones.

    Args:
        seed: Seed for the layout. None draws fresh entropy.
        aspect_ratio: Aspect ratio of the returned camera.

    Returns:
        A tuple of (World, ThinLensCamera).
    """
    rng = np.random.default_rng(seed)
    world = World()

    ground = world.add_lambertian_material(GROUND_ALBEDO)
    world.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground)

    for a in range(-GRID_EXTENT, GRID_EXTENT + 1):
        for b in range(-GRID_EXTENT, GRID_EXTENT + 1):
            choose_mat = rng.random()
            center = (
                a + CELL_JITTER * rng.random(),
                SMALL_SPHERE_RADIUS,
                b + CELL_JITTER * rng.random(),
            )

            if choose_mat < DIFFUSE_CHANCE:
                albedo = rng.random(3) * rng.random(3)
                material = world.add_lambertian_material(tuple(albedo.tolist()))
            elif choose_mat < METAL_CHANCE:
                albedo = rng.uniform(METAL_ALBEDO_MIN, 1.0, size=3)
                fuzz = rng.uniform(0.0, METAL_FUZZ_MAX)
                material = world.add_metal_material(tuple(albedo.tolist()), float(fuzz))
            else:
                material = world.add_dielectric_material(GLASS_IOR)

            world.add_sphere(center, SMALL_SPHERE_RADIUS, material)

    world.add_metal_sphere((0.0, 1.0, 0.0), 1.0, POLISHED_METAL_ALBEDO, fuzz=0.0)
    world.add_lambertian_sphere((-4.0, 1.0, 0.0), 1.0, BROWN_ALBEDO)
    world.add_dielectric_sphere((4.0, 1.0, 0.0), 1.0, ior=GLASS_IOR)

    return world, _random_scene_camera(aspect_ratio)


def create_two_sphere_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[World, ThinLensCamera]:
    """Create a diffuse sphere on a ground sphere, seen by a pinhole camera.

    Args:
        aspect_ratio: Aspect ratio of the returned camera.

    Returns:
        A tuple of (World, ThinLensCamera).
    """
    world = World()
    world.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.8, 0.8, 0.0))
    world.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.7, 0.3, 0.3))

    camera = ThinLensCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
    )
    return world, camera


def create_material_showcase_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[World, ThinLensCamera]:
    """Create a row of diffuse, hollow glass and metal spheres.

    The hollow glass sphere is two concentric spheres sharing one dielectric
    material: the outer one with radius 0.5 and the inner one with radius
    -0.45, whose inverted normals make it the inside wall of a glass shell.

    Args:
        aspect_ratio: Aspect ratio of the returned camera.

    Returns:
        A tuple of (World, ThinLensCamera).
    """
    world = World()
    world.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, (0.8, 0.8, 0.0))
    world.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.1, 0.2, 0.5))

    glass = world.add_dielectric_material(GLASS_IOR)
    world.add_sphere((-1.0, 0.0, -1.0), 0.5, glass)
    world.add_sphere((-1.0, 0.0, -1.0), -0.45, glass)

    world.add_metal_sphere((1.0, 0.0, -1.0), 0.5, (0.8, 0.6, 0.2), fuzz=0.0)

    lookfrom = (3.0, 3.0, 2.0)
    lookat = (0.0, 0.0, -1.0)
    camera = ThinLensCamera(
        lookfrom=lookfrom,
        lookat=lookat,
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=aspect_ratio,
        aperture=2.0,
        focus_dist=math.dist(lookfrom, lookat),
    )
    return world, camera


# CLI scene names to factories taking (seed, aspect_ratio)
SCENES: dict[str, Callable[[int | None, float], tuple[World, ThinLensCamera]]] = {
    "random": lambda seed, aspect_ratio: create_random_scene(seed, aspect_ratio),
    "two-spheres": lambda seed, aspect_ratio: create_two_sphere_scene(aspect_ratio),
    "showcase": lambda seed, aspect_ratio: create_material_showcase_scene(aspect_ratio),
}


def create_scene(
    name: str,
    seed: int | None = None,
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[World, ThinLensCamera]:
    """Create a preset scene by name.

    Raises:
        ValueError: If the name is not one of SCENES.
    """
    if name not in SCENES:
        raise ValueError(f"Unknown scene {name!r}; choose from {', '.join(SCENES)}")
    return SCENES[name](seed, aspect_ratio)
