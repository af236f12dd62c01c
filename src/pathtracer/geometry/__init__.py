"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection and the HitRecord
        struct shared by all intersection queries

Intersection routines are Taichi functions (@ti.func) called from render
kernels. There is no acceleration structure; the world query in
``pathtracer.scene.intersection`` scans every sphere.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_miss_record",
    "make_sphere",
]
