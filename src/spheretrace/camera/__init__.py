"""Camera module for primary ray generation.

Components:
    thin_lens: Thin-lens camera with look-at positioning and depth of field

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across the image
    t in [0, 1]: bottom to top across the image
"""

from .thin_lens import (
    CameraFrame,
    ThinLensCamera,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "CameraFrame",
    "ThinLensCamera",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
