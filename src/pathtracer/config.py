"""Render and runtime configuration.

RenderSettings holds the image and sampling parameters of a render, with
defaults producing the full-quality 1200x675 random scene. TaichiSettings
holds the runtime options passed to ti.init().

Taichi must be initialized before any module that declares Taichi fields is
imported, so init_taichi() is the first thing an entry point calls.

Example:
    >>> from pathtracer.config import RenderSettings, TaichiSettings, init_taichi
    >>> init_taichi(TaichiSettings(random_seed=7))
    >>> settings = RenderSettings(image_width=400, samples_per_pixel=50)
    >>> settings.image_height
    225
"""

import contextlib
import sys
from dataclasses import dataclass


@dataclass(frozen=True)
class RenderSettings:
    """Image and sampling parameters.

    Attributes:
        image_width: Output width in pixels.
        aspect_ratio: Width divided by height; the height is derived.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of bounces per path.
    """

    image_width: int = 1200
    aspect_ratio: float = 16.0 / 9.0
    samples_per_pixel: int = 500
    max_depth: int = 50

    def __post_init__(self) -> None:
        if self.image_width <= 0:
            raise ValueError(f"Image width ({self.image_width}) must be positive")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"Aspect ratio ({self.aspect_ratio}) must be positive")
        if self.image_height <= 0:
            raise ValueError(
                f"Image width {self.image_width} with aspect ratio {self.aspect_ratio} "
                "gives an empty image"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(f"Samples per pixel ({self.samples_per_pixel}) must be positive")
        if self.max_depth < 0:
            raise ValueError(f"Max depth ({self.max_depth}) must be non-negative")

    @property
    def image_height(self) -> int:
        """Image height in pixels, truncated from width / aspect ratio."""
        return int(self.image_width / self.aspect_ratio)


@dataclass(frozen=True)
class TaichiSettings:
    """Taichi runtime options.

    Attributes:
        random_seed: Seed of the per-thread random generators.
        num_threads: Number of CPU threads; None uses every core.
    """

    random_seed: int = 0
    num_threads: int | None = None

    def __post_init__(self) -> None:
        if self.num_threads is not None and self.num_threads <= 0:
            raise ValueError(f"Thread count ({self.num_threads}) must be positive")


def init_taichi(settings: TaichiSettings | None = None) -> None:
    """Initialize the Taichi runtime on the CPU backend.

    Taichi prints a version banner when it is imported and an arch line when
    it starts. Both go to stderr so standard output carries only image data.
    """
    if settings is None:
        settings = TaichiSettings()

    with contextlib.redirect_stdout(sys.stderr):
        import taichi as ti

        kwargs = {"arch": ti.cpu, "random_seed": settings.random_seed}
        if settings.num_threads is not None:
            kwargs["cpu_max_num_threads"] = settings.num_threads
        ti.init(**kwargs)
