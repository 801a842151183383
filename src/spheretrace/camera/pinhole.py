"""Pinhole camera model for perspective ray generation.

The camera maps normalized image-plane coordinates (u, v) to world-space
rays from a fixed eye position. Setup runs once per render on the Python
side and stores the viewport geometry in Taichi fields:
- origin: the eye position
- horizontal, vertical: the full width and height vectors of the viewport
- lower_left_corner: the viewport corner at (u, v) = (0, 0)

The viewport sits at unit distance in front of the eye. The default
configuration is the classic fixed camera: eye at the origin looking down
-z, a 90 degree vertical field of view (viewport height 2) and a 16:9
aspect ratio.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.camera.pinhole import PinholeCamera, setup_camera, camera_ray
    >>>
    >>> setup_camera(PinholeCamera(aspect_ratio=16.0 / 9.0))
    >>> camera_ray(0.5, 0.5)  # Ray through the image center
    ((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from src.spheretrace.core.ray import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation.
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
    """

    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, -1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0

    def validate(self) -> None:
        """Check that the configuration describes a usable camera.

        Raises:
            ValueError: If the field of view or aspect ratio is out of range,
                lookfrom equals lookat, or vup is parallel to the view
                direction.
        """
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if not math.isfinite(self.aspect_ratio) or self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")

        view = np.subtract(self.lookfrom, self.lookat)
        if np.linalg.norm(view) == 0.0:
            raise ValueError("lookfrom and lookat must be different points")
        if np.linalg.norm(np.cross(self.vup, view)) == 0.0:
            raise ValueError("vup must not be parallel to the view direction")


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Computes the camera's orthonormal basis (u, v, w) and viewport geometry
    from the provided camera parameters. This must be called before rendering.

    Args:
        camera: Camera configuration with position, orientation, and FOV.

    Raises:
        ValueError: If the camera configuration is invalid.
    """
    camera.validate()

    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float64)
    lookat = np.array(camera.lookat, dtype=np.float64)
    vup = np.array(camera.vup, dtype=np.float64)

    # w points from lookat toward lookfrom (backward)
    w = lookfrom - lookat
    w = w / np.linalg.norm(w)

    # u points right, v points up in the camera's frame
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)
    v = np.cross(w, u)

    horizontal = viewport_width * u
    vertical = viewport_height * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - w

    _camera_origin[None] = lookfrom.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (u, v).

    u runs left to right and v bottom to top, both over [0, 1]. The
    direction is lower_left_corner + u*horizontal + v*vertical - origin
    and is not normalized.

    Args:
        u: Horizontal coordinate in [0, 1].
        v: Vertical coordinate in [0, 1].

    Returns:
        A Ray from the camera origin through the viewport point.
    """
    origin = _camera_origin[None]
    direction = (
        _lower_left_corner[None]
        + u * _viewport_horizontal[None]
        + v * _viewport_vertical[None]
        - origin
    )
    return make_ray(origin, direction)


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a randomly jittered ray through a pixel for anti-aliasing.

    The pixel coordinates are offset by a uniform random amount in [0, 1)
    and divided by (width - 1, height - 1), so pixel (0, 0) samples the
    lower-left corner of the viewport and the last pixel its far edge.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray with random sub-pixel offset.
    """
    u = (ti.cast(pixel_i, ti.f32) + ti.random(ti.f32)) / ti.cast(tm.max(width - 1, 1), ti.f32)
    v = (ti.cast(pixel_j, ti.f32) + ti.random(ti.f32)) / ti.cast(tm.max(height - 1, 1), ti.f32)
    return get_ray(u, v)


# =============================================================================
# Utility Functions
# =============================================================================

_query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _camera_ray_kernel(u: ti.f32, v: ti.f32):
    ray = get_ray(u, v)
    _query_origin[None] = ray.origin
    _query_direction[None] = ray.direction


def camera_ray(
    u: float, v: float
) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
    """Generate the camera ray for (u, v) from Python.

    Returns:
        Tuple of (origin, direction), each as (x, y, z).
    """
    _camera_ray_kernel(u, v)
    o = _query_origin[None]
    d = _query_direction[None]
    return (
        (float(o[0]), float(o[1]), float(o[2])),
        (float(d[0]), float(d[1]), float(d[2])),
    )


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, horizontal, vertical and lower_left.
    """
    origin_vec = _camera_origin[None]
    h_vec = _viewport_horizontal[None]
    vert_vec = _viewport_vertical[None]
    ll_vec = _lower_left_corner[None]

    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "horizontal": (float(h_vec[0]), float(h_vec[1]), float(h_vec[2])),
        "vertical": (float(vert_vec[0]), float(vert_vec[1]), float(vert_vec[2])),
        "lower_left": (float(ll_vec[0]), float(ll_vec[1]), float(ll_vec[2])),
    }
