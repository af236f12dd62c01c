"""Taichi-based Monte Carlo path tracer for scenes made of spheres.

This package renders spheres with diffuse, metal and glass surfaces under a
sky gradient, with support for:
- Stochastic antialiasing (many jittered samples per pixel)
- Depth of field through a thin-lens camera
- Hollow spheres through negative radii
- PPM and PNG output

Subpackages:
    core: Ray algebra, light transport integrator and scanline renderer
    geometry: Sphere primitive and intersection
    materials: Lambertian, metal and dielectric scattering
    scene: World storage, world builder and preset scenes
    camera: Thin-lens camera with ray generation
    output: Color conversion and image export

Taichi must be initialized (see pathtracer.config.init_taichi) before any
subpackage is imported, since they declare Taichi fields at import time.
"""

__version__ = "0.1.0"
