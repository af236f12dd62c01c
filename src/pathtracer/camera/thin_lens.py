"""Thin-lens camera model with defocus blur.

This module implements a positionable camera that generates primary rays
for rendering. The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view in degrees
- Arbitrary aspect ratios
- Depth of field through a circular lens aperture and a focus distance

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport sits on the plane of perfect focus, ``focus_dist`` along -w.
Rays start from a random point on the lens disk of radius ``aperture / 2``
and pass through the requested viewport point, so only geometry at the focus
distance is sharp. An aperture of 0 gives a pinhole camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.thin_lens import ThinLensCamera, setup_camera
    >>>
    >>> camera = ThinLensCamera(
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=0.1,
    ...     focus_dist=10.0,
    ... )
    >>> setup_camera(camera)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, make_ray, random_in_unit_disk, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables defocus blur.
        focus_dist: Distance from lookfrom to the plane of perfect focus.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_dist: float = 1.0


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Viewport on the focus plane
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())

_camera_initialized = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def _validate_camera(camera: ThinLensCamera) -> None:
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"Vertical field of view {camera.vfov} must be in (0, 180) degrees")
    if camera.aspect_ratio <= 0.0:
        raise ValueError(f"Aspect ratio {camera.aspect_ratio} must be positive")
    if camera.aperture < 0.0:
        raise ValueError(f"Aperture {camera.aperture} must be non-negative")
    if camera.focus_dist <= 0.0:
        raise ValueError(f"Focus distance {camera.focus_dist} must be positive")


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the orthonormal basis, the viewport on the focus plane and the
    lens radius, and stores them in Taichi fields read by get_ray(). Must be
    called before rendering.

    Args:
        camera: Camera configuration with position, orientation, FOV and lens.

    Raises:
        ValueError: If the parameters are out of range, lookfrom equals
            lookat, or vup is parallel to the view direction.
    """
    _validate_camera(camera)

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    w = lookfrom - lookat
    w_norm = np.linalg.norm(w)
    if w_norm == 0.0:
        raise ValueError("Camera lookfrom and lookat must be different points")
    w = w / w_norm

    u = np.cross(vup, w)
    u_norm = np.linalg.norm(u)
    if u_norm < 1e-12:
        raise ValueError("Camera vup must not be parallel to the view direction")
    u = u / u_norm

    v = np.cross(w, u)

    horizontal = camera.focus_dist * viewport_width * u
    vertical = camera.focus_dist * viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - camera.focus_dist * w

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.aperture / 2.0
    _camera_initialized[None] = 1


def is_camera_initialized() -> bool:
    """Check whether setup_camera() has been called."""
    return bool(_camera_initialized[None])


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    - s = 0: left edge of image, s = 1: right edge
    - t = 0: bottom edge of image, t = 1: top edge

    The origin is jittered across the lens disk; the direction is not
    normalized.

    Args:
        s: Horizontal coordinate in [0, 1] (left to right).
        t: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from a lens sample toward the viewport point (s, t).
    """
    origin = _camera_origin[None]
    offset = vec3(0.0, 0.0, 0.0)
    if _lens_radius[None] > 0.0:
        rd = _lens_radius[None] * random_in_unit_disk()
        offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    target = _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]
    return make_ray(origin + offset, target - origin - offset)


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a ray through a random point of pixel (i, j).

    Pixel coordinates are mapped with ``(i + jitter) / (width - 1)`` and
    ``(j + jitter) / (height - 1)`` so pixel centers of the first and last
    column and row land on the viewport edges.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray with random sub-pixel offset and lens sample.
    """
    s = (ti.cast(pixel_i, ti.f32) + ti.random(ti.f32)) / ti.cast(ti.max(width - 1, 1), ti.f32)
    t = (ti.cast(pixel_j, ti.f32) + ti.random(ti.f32)) / ti.cast(ti.max(height - 1, 1), ti.f32)
    return get_ray(s, t)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left and
        lens_radius.
    """

    def _to_tuple(field: "ti.MatrixField") -> tuple[float, float, float]:
        value = field[None]
        return (float(value[0]), float(value[1]), float(value[2]))

    return {
        "origin": _to_tuple(_camera_origin),
        "u": _to_tuple(_camera_u),
        "v": _to_tuple(_camera_v),
        "w": _to_tuple(_camera_w),
        "horizontal": _to_tuple(_viewport_horizontal),
        "vertical": _to_tuple(_viewport_vertical),
        "lower_left": _to_tuple(_lower_left_corner),
        "lens_radius": float(_lens_radius[None]),
    }
