"""Path tracing integrator for Monte Carlo light transport.

This module implements light transport for a world of spheres lit by a sky
gradient, plus the kernel that samples every pixel of a scanline.

``ray_color`` follows a ray through the world. At every hit the surface's
material either absorbs the ray (the path contributes black) or scatters it,
multiplying the carried color by the material's attenuation. A ray that
escapes picks up the sky color, a vertical blend from white to light blue.
After ``max_depth`` bounces without escaping the path contributes black.

The recursive definition

    color(ray, depth) = attenuation * color(scattered, depth - 1)

is evaluated as a loop carrying the running product of attenuations
(the throughput), since Taichi functions cannot recurse.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Shadow-acne guard: hits closer than T_MIN are ignored
    - Per-pixel sample accumulation inside one kernel thread
    - Scanline kernels parallelized over the pixels of the row

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.integrator import render_scanline, setup_render_target
    >>> from pathtracer.scene.presets import create_two_sphere_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> world, camera = create_two_sphere_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(100, 56)
    >>> render_scanline(55, samples_per_pixel=10, max_depth=50)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.thin_lens import get_ray_jittered, is_camera_initialized
from pathtracer.core.ray import Ray
from pathtracer.materials.dielectric import scatter_dielectric_by_id
from pathtracer.materials.lambertian import scatter_lambertian_by_id
from pathtracer.materials.metal import scatter_metal_by_id
from pathtracer.scene.intersection import hit_world
from pathtracer.scene.world import MaterialType, get_material_type, get_material_type_index

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum number of bounces per path
MAX_DEPTH = 50

# Hits closer than this to the ray origin are self-intersections (shadow acne)
T_MIN = 0.001
T_MAX = tm.inf

# Sky gradient endpoints: straight down is white, straight up is sky blue
SKY_WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Per-pixel sum of sample colors, indexed [i, j] with j = 0 the bottom row
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to zero."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_color_sums_numpy() -> npt.NDArray[np.float32]:
    """Get the per-pixel sums of sample colors as a NumPy array.

    Returns:
        Array of shape (height, width, 3), top row first.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()

    # (width, height, 3) -> (height, width, 3), then put the top row first
    image = np.transpose(full_image[:width, :height, :], (1, 0, 2))
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)


# =============================================================================
# Light Transport
# =============================================================================


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Sky color seen along a direction: white below, blue above."""
    unit_direction = tm.normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_WHITE + t * SKY_BLUE


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the scattering function of the hit material.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray hit the surface from outside.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material IDs absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32) -> vec3:
    """Estimate the color carried back along a ray.

    Args:
        ray: The ray to follow.
        max_depth: Maximum number of surface interactions. 0 yields black.

    Returns:
        The estimated color (RGB).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray

    # Active flag for path continuation (Taichi doesn't support break in ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = hit_world(current, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * sky_color(current.direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = scatter_material(
                    rec.material_id, current.direction, rec.normal, rec.front_face
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    current = Ray(origin=rec.point, direction=scattered_direction)

    # A path still active here ran out of bounces and contributes black
    return color


@ti.func
def sample_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Sum the colors of independently jittered samples through one pixel.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of samples to take.
        max_depth: Maximum number of bounces per path.

    Returns:
        The sum (not the average) of the sample colors.
    """
    total = vec3(0.0, 0.0, 0.0)
    for _ in range(samples_per_pixel):
        ray = get_ray_jittered(pixel_i, pixel_j, width, height)
        color = ray_color(ray, max_depth)

        # Replace NaN/Inf and negative rounding noise with zero
        for c in ti.static(range(3)):
            if tm.isnan(color[c]) or tm.isinf(color[c]) or color[c] < 0.0:
                color[c] = 0.0

        total += color
    return total


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_scanline(
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    # Outermost loop: Taichi spreads the pixels of the row over CPU threads
    for i in range(width):
        _color_buffer[i, pixel_j] = sample_pixel(
            i, pixel_j, width, height, samples_per_pixel, max_depth
        )


# One-shot results of the Python-callable helpers below
_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_ray(origin: vec3, direction: vec3, max_depth: ti.i32):
    # Single-iteration outer loop keeps the bounce loop serial
    for _ in range(1):
        _trace_result[None] = ray_color(Ray(origin=origin, direction=direction), max_depth)


@ti.kernel
def _background_color(direction: vec3):
    _trace_result[None] = sky_color(direction)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_scanline(pixel_j: int, samples_per_pixel: int, max_depth: int = MAX_DEPTH) -> None:
    """Render every pixel of one scanline into the render target.

    Args:
        pixel_j: Row index (0 = bottom row).
        samples_per_pixel: Number of samples per pixel.
        max_depth: Maximum number of bounces per path.

    Raises:
        RuntimeError: If the render target or camera has not been set up.
        ValueError: If the row index is out of range.
    """
    _check_render_target_initialized()
    if not is_camera_initialized():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")

    width, height = get_image_dimensions()
    if not 0 <= pixel_j < height:
        raise ValueError(f"Scanline {pixel_j} is outside [0, {height})")

    _render_scanline(pixel_j, width, height, samples_per_pixel, max_depth)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Evaluate ray_color for one ray from Python.

    Useful for testing and for probing a scene without rendering an image.

    Args:
        origin: The ray origin.
        direction: The ray direction (any non-zero length).
        max_depth: Maximum number of bounces.

    Returns:
        Tuple of (R, G, B) color values.
    """
    _trace_ray(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_depth,
    )
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def background_color(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Evaluate the sky gradient for a direction from Python."""
    _background_color(vec3(direction[0], direction[1], direction[2]))
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))
