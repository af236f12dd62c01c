"""Camera module for view and ray generation.

Components:
    thin_lens: Positionable camera with vertical FOV, aspect ratio and
        depth of field (defocus blur through a lens aperture)

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    ThinLensCamera,
    get_camera_info,
    get_ray,
    get_ray_jittered,
    is_camera_initialized,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "is_camera_initialized",
    "get_ray",
    "get_ray_jittered",
    "get_camera_info",
]
