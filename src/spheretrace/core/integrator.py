"""Path tracing integrator: radiance estimation and the sampling kernels.

This module implements the recursive light-transport estimator

    ray_color(ray, depth) = attenuation * ray_color(scattered, depth - 1)

as a loop with a running attenuation product. A path ends when it is
absorbed (black), when it escapes the scene (background gradient times the
accumulated attenuation), or when the depth budget runs out (black).

Pixels are rendered by firing samples_per_pixel jittered camera rays each
and summing their radiance into a preallocated accumulation buffer. The
sums are resolved into output colors by src.spheretrace.output.export.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.core.integrator import render_image, setup_render_target
    >>> from src.spheretrace.scene.default_scene import create_default_scene
    >>> from src.spheretrace.camera.pinhole import setup_camera
    >>>
    >>> world, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> render_image(samples_per_pixel=100, max_depth=50)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.spheretrace.camera.pinhole import get_ray_jittered
from src.spheretrace.core.ray import Ray
from src.spheretrace.geometry.sphere import HitRecord
from src.spheretrace.materials.dielectric import scatter_dielectric_by_id
from src.spheretrace.materials.lambertian import scatter_lambertian_by_id
from src.spheretrace.materials.material import (
    MaterialType,
    ScatterRecord,
    get_material_type,
    get_material_type_index,
    make_absorbed_record,
)
from src.spheretrace.materials.metal import scatter_metal_by_id
from src.spheretrace.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Default maximum ray bounces (path length)
MAX_DEPTH = 50

# Default samples per pixel
SAMPLES_PER_PIXEL = 100

# Lower bound on hit distance; avoids re-hitting the surface a ray leaves from
T_MIN = 0.001
T_MAX = float("inf")

# Background gradient endpoints (horizon and zenith)
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)

# =============================================================================
# Render Target (Accumulation Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Sum of sample radiance per pixel; index (i, j) with j = 0 the bottom row
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Number of samples summed into each pixel
_sample_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers
    are preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
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
    """Clear the render target buffers to zero."""
    _color_buffer.fill(0.0)
    _sample_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter_material(ray: Ray, rec: HitRecord) -> ScatterRecord:
    """Dispatch to the scatter function of the hit surface's material.

    Args:
        ray: The incoming ray.
        rec: The hit record; its material_id selects the material.

    Returns:
        The material's ScatterRecord. Unknown material ids absorb.
    """
    mat_type = get_material_type(rec.material_id)
    type_index = get_material_type_index(rec.material_id)

    result = make_absorbed_record(rec.point)

    if mat_type == int(MaterialType.LAMBERTIAN):
        result = scatter_lambertian_by_id(type_index, ray, rec)
    elif mat_type == int(MaterialType.METAL):
        result = scatter_metal_by_id(type_index, ray, rec)
    elif mat_type == int(MaterialType.DIELECTRIC):
        result = scatter_dielectric_by_id(type_index, ray, rec)

    return result


# =============================================================================
# Radiance Estimation
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky gradient for rays that escape the scene.

    Blends from white when the direction points straight down to sky blue
    when it points straight up.
    """
    unit_direction = tm.normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


@ti.func
def ray_color(ray: Ray, depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace.
        depth: Maximum number of scene intersections along the path.
            Non-positive values return black.

    Returns:
        The estimated radiance (RGB).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray.origin
    direction = ray.direction

    # Taichi doesn't support break in ti.func loops; use an active flag
    active = 1

    for _ in range(depth):
        if active == 1:
            current = Ray(origin=origin, direction=direction)
            rec = intersect_scene(current, T_MIN, T_MAX)

            if rec.hit == 0:
                color = throughput * background_color(direction)
                active = 0
            else:
                scatter = scatter_material(current, rec)
                if scatter.did_scatter == 0:
                    active = 0
                else:
                    throughput *= scatter.attenuation
                    origin = scatter.origin
                    direction = scatter.direction

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
    """Sum the radiance of samples_per_pixel jittered rays through a pixel.

    Non-finite sample components are dropped (treated as zero).
    """
    pixel_color = vec3(0.0, 0.0, 0.0)
    for _ in range(samples_per_pixel):
        ray = get_ray_jittered(pixel_i, pixel_j, width, height)
        color = ray_color(ray, max_depth)

        for c in ti.static(range(3)):
            if tm.isnan(color[c]) or tm.isinf(color[c]):
                color[c] = 0.0

        pixel_color += color
    return pixel_color


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
    """Render one row of pixels; pixels within the row run in parallel."""
    for i in range(width):
        _color_buffer[i, pixel_j] += sample_pixel(
            i, pixel_j, width, height, samples_per_pixel, max_depth
        )
        _sample_count[i, pixel_j] += samples_per_pixel


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32, samples_per_pixel: ti.i32, max_depth: ti.i32):
    """Render every pixel of the frame in parallel."""
    for i, j in ti.ndrange(width, height):
        _color_buffer[i, j] += sample_pixel(i, j, width, height, samples_per_pixel, max_depth)
        _sample_count[i, j] += samples_per_pixel


_query_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_single_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    depth: ti.i32,
):
    """Trace one ray through the scene into _query_color."""
    # Single-iteration outer loop keeps the bounce loop serial
    for _ in range(1):
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        _query_color[None] = ray_color(ray, depth)


@ti.kernel
def _background_single(dx: ti.f32, dy: ti.f32, dz: ti.f32):
    _query_color[None] = background_color(vec3(dx, dy, dz))


# =============================================================================
# Public Rendering API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Estimate the radiance along a single ray from Python.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z).
        depth: Maximum number of scene intersections.

    Returns:
        Tuple of (R, G, B) radiance.
    """
    _trace_single_ray(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], depth
    )
    color = _query_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def sky_color(direction: tuple[float, float, float]) -> tuple[float, float, float]:
    """Evaluate the background gradient for a direction from Python."""
    _background_single(direction[0], direction[1], direction[2])
    color = _query_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def render_scanline(
    pixel_j: int,
    samples_per_pixel: int = SAMPLES_PER_PIXEL,
    max_depth: int = MAX_DEPTH,
) -> None:
    """Render one row of the image into the accumulation buffer.

    Args:
        pixel_j: Row index (0 = bottom row).
        samples_per_pixel: Number of jittered samples per pixel.
        max_depth: Maximum path length.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If pixel_j is outside the image.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= pixel_j < height:
        raise ValueError(f"Scanline {pixel_j} is outside the image (height {height})")
    _render_scanline(pixel_j, width, height, samples_per_pixel, max_depth)


def render_image(samples_per_pixel: int = SAMPLES_PER_PIXEL, max_depth: int = MAX_DEPTH) -> None:
    """Render the whole image into the accumulation buffer.

    Can be called repeatedly; each call adds samples_per_pixel samples to
    every pixel.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _render_frame(width, height, samples_per_pixel, max_depth)


def get_total_samples() -> int:
    """Get the number of samples accumulated per pixel.

    Returns the largest per-pixel count, so rows already rendered are
    reported while a scanline render is still in progress.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    return int(_sample_count.to_numpy()[:width, :height].max())


def get_accumulated_image_numpy() -> npt.NDArray[np.float32]:
    """Get the per-pixel radiance sums as a NumPy array.

    The array shape is (height, width, 3) with row 0 the top of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    full_image = _color_buffer.to_numpy()

    # Extract active region, transpose from (width, height, 3) to (height, width, 3)
    image = np.transpose(full_image[:width, :height, :], (1, 0, 2))

    # Flip vertically (buffer rows start at the bottom, images at the top)
    return np.ascontiguousarray(np.flipud(image), dtype=np.float32)


def get_sample_count_numpy() -> npt.NDArray[np.int32]:
    """Get the per-pixel sample counts as a (height, width) array, top row first."""
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    counts = _sample_count.to_numpy()[:width, :height]
    return np.ascontiguousarray(np.flipud(counts.T), dtype=np.int32)
