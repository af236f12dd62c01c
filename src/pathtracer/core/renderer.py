"""Scanline renderer with progress reporting.

This module wraps the per-scanline integrator kernel in a small Python class:
- Renders scanlines top-down, one kernel launch per row
- Reports the number of scanlines remaining through a callback or a generator
- Returns the finished image as 8-bit RGB or as the raw per-pixel sums

Every pixel gets all of its samples in a single pass, so a render is not
refined incrementally; calling render() again starts over.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.renderer import Renderer
    >>> from pathtracer.scene.presets import create_two_sphere_scene
    >>> from pathtracer.camera.thin_lens import setup_camera
    >>>
    >>> world, camera = create_two_sphere_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(400, 225, samples_per_pixel=100)
    >>> renderer.render()
    >>> image = renderer.get_image_uint8()
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from pathtracer.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_color_sums_numpy,
    render_scanline,
    setup_render_target,
)
from pathtracer.output.export import image_to_uint8

if TYPE_CHECKING:
    from pathtracer.config import RenderSettings

# Callback receives the number of scanlines still to render
ProgressCallback = Callable[[int], None]


class Renderer:
    """Renders the current world through the current camera, row by row.

    The renderer owns the image dimensions and sampling parameters and
    delegates storage to the integrator's render target (Taichi fields).
    The world and the camera must be set up before render() is called.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of samples averaged per pixel.
        max_depth: Maximum number of bounces per path.
    """

    def __init__(
        self,
        width: int,
        height: int,
        samples_per_pixel: int = 100,
        max_depth: int = MAX_DEPTH,
    ) -> None:
        """Initialize the renderer and its render target.

        Args:
            width: Image width in pixels (max 2048).
            height: Image height in pixels (max 2048).
            samples_per_pixel: Samples per pixel, at least 1.
            max_depth: Maximum bounce count, at least 0.

        Raises:
            ValueError: If a parameter is out of range or the image exceeds
                the maximum supported size.
        """
        if samples_per_pixel <= 0:
            raise ValueError(f"Samples per pixel ({samples_per_pixel}) must be positive")
        if max_depth < 0:
            raise ValueError(f"Max depth ({max_depth}) must be non-negative")

        setup_render_target(width, height)
        self._width = width
        self._height = height
        self._samples_per_pixel = samples_per_pixel
        self._max_depth = max_depth
        self._completed = False

    @classmethod
    def from_settings(cls, settings: RenderSettings) -> Renderer:
        """Create a renderer from validated render settings."""
        return cls(
            settings.image_width,
            settings.image_height,
            samples_per_pixel=settings.samples_per_pixel,
            max_depth=settings.max_depth,
        )

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def samples_per_pixel(self) -> int:
        return self._samples_per_pixel

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def completed(self) -> bool:
        """Whether every scanline of the last render has been written."""
        return self._completed

    def render(self, callback: ProgressCallback | None = None) -> None:
        """Render the whole image.

        Args:
            callback: Optional function called before each scanline with the
                number of scanlines below it (height - 1 down to 0).

        Example:
            >>> def progress(remaining):
            ...     print(f"Scanlines remaining: {remaining}")
            >>> renderer.render(callback=progress)
        """
        for remaining in self.render_progressive():
            if callback is not None:
                callback(remaining)

    def render_progressive(self) -> Generator[int, None, None]:
        """Render the image, yielding before each scanline.

        This is a generator-based alternative to render() with callbacks.
        Scanlines are rendered from the top row (j = height - 1) down to the
        bottom row (j = 0).

        Yields:
            The number of scanlines still to render after the one about to be
            rendered, which is also that scanline's row index.
        """
        clear_render_target()
        self._completed = False

        for j in range(self._height - 1, -1, -1):
            yield j
            render_scanline(j, self._samples_per_pixel, self._max_depth)

        self._completed = True

    def get_summed_image(self) -> npt.NDArray[np.float32]:
        """Get the per-pixel sums of sample colors.

        Returns:
            Array of shape (height, width, 3), top row first, dtype float32.
        """
        return get_color_sums_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the rendered image averaged, gamma corrected and quantized.

        Returns:
            Array of shape (height, width, 3), top row first, dtype uint8.
        """
        return image_to_uint8(self.get_summed_image(), self._samples_per_pixel)

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples_per_pixel={self.samples_per_pixel}, max_depth={self.max_depth})"
        )
