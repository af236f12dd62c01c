"""Image output encoding.

Components:
    export: Conversion of summed sample colors to 8-bit RGB, PPM (P3) text
        output and PNG files
"""

from .export import format_ppm, image_to_uint8, save_image, save_png, save_ppm, write_ppm

__all__ = [
    "image_to_uint8",
    "format_ppm",
    "write_ppm",
    "save_ppm",
    "save_png",
    "save_image",
]
