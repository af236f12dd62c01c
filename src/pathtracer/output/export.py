"""Image export utilities for rendered images.

This module turns the renderer's per-pixel sample sums into displayable
8-bit color and writes it out.

Color conversion (image_to_uint8):
    1. Divide the sum by the number of samples
    2. Gamma correct with gamma 2 (square root)
    3. Clamp to [0, 0.999] and quantize with int(256 * c)

Supported formats:
    - PPM P3 text (plain ASCII, one "R G B" line per pixel)
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from pathtracer.output.export import save_ppm
    >>> from pathtracer.core.renderer import Renderer
    >>>
    >>> renderer = Renderer(400, 225, samples_per_pixel=100)
    >>> renderer.render()
    >>> save_ppm(renderer.get_image_uint8(), "output.ppm")
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Largest value kept before quantization, so that 256 * c stays below 256
_MAX_INTENSITY = 0.999


def image_to_uint8(
    summed: npt.NDArray[np.floating],
    samples_per_pixel: int,
) -> npt.NDArray[np.uint8]:
    """Convert per-pixel sample sums to 8-bit color.

    Args:
        summed: Sum of sample colors, shape (H, W, 3).
        samples_per_pixel: Number of samples in each sum.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.

    Raises:
        ValueError: If samples_per_pixel is not positive.
    """
    if samples_per_pixel <= 0:
        raise ValueError(f"Samples per pixel ({samples_per_pixel}) must be positive")

    average = np.asarray(summed, dtype=np.float64) / samples_per_pixel
    average = np.nan_to_num(average, nan=0.0, posinf=0.0, neginf=0.0)

    corrected = np.sqrt(np.maximum(average, 0.0))
    clamped = np.clip(corrected, 0.0, _MAX_INTENSITY)

    return (256.0 * clamped).astype(np.uint8)


def _check_rgb_image(image: npt.NDArray[np.uint8]) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {image.shape}")


def format_ppm(image: npt.NDArray[np.uint8]) -> str:
    """Encode an 8-bit RGB image as PPM P3 text.

    The header is ``P3``, ``width height`` and ``255`` on separate lines,
    followed by one ``R G B`` line per pixel, top row first.

    Args:
        image: Image array of shape (H, W, 3).

    Returns:
        The complete PPM document, ending with a newline.
    """
    _check_rgb_image(image)
    height, width = image.shape[0], image.shape[1]

    lines = ["P3", f"{width} {height}", "255"]
    for r, g, b in image.reshape(-1, 3).tolist():
        lines.append(f"{r} {g} {b}")

    return "\n".join(lines) + "\n"


def write_ppm(image: npt.NDArray[np.uint8], stream: TextIO) -> None:
    """Write an 8-bit RGB image as PPM P3 text to an open text stream."""
    stream.write(format_ppm(image))
    stream.flush()


def save_ppm(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit RGB image as a PPM P3 file."""
    with open(filepath, "w", encoding="ascii", newline="\n") as f:
        write_ppm(image, f)


def save_png(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit RGB image as a PNG file.

    Args:
        image: Image array of shape (H, W, 3), top row first.
        filepath: Output file path (should end in .png).
    """
    _check_rgb_image(image)
    pil_image = PILImage.fromarray(np.ascontiguousarray(image, dtype=np.uint8))
    pil_image.save(filepath)


def save_image(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit RGB image, picking the format from the file extension.

    ``.png`` files are written with Pillow; anything else is written as PPM.
    A path of ``-`` writes PPM text to standard output.
    """
    if str(filepath) == "-":
        write_ppm(image, sys.stdout)
    elif Path(filepath).suffix.lower() == ".png":
        save_png(image, filepath)
    else:
        save_ppm(image, filepath)
