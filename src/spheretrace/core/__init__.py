"""Core rendering module.

Components:
    ray: Ray data structure, vector helpers and random sampling
    integrator: Radiance estimation and the rendering kernels
    renderer: Scanline renderer with progress reporting
    config: Render settings

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_hemisphere,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.spheretrace.core.integrator or src.spheretrace.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "near_zero",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_hemisphere",
]
