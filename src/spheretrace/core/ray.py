"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass together with the vector helpers
shared by the sphere intersection and the material scattering code:
reflection, Snell refraction and the rejection-sampled random directions
used by diffuse and fuzzy surfaces. All functions are Taichi functions and
must be called from within a kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components smaller than this (in magnitude) count as zero
NEAR_ZERO_EPSILON = 1e-8

# Upper bound on rejection sampling attempts per random point
MAX_REJECTION_ATTEMPTS = 100


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to
            be unit length; consumers normalize where it matters.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector (no square root)."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length."""
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used by the diffuse material to catch a scatter direction that
    degenerated because the normal and the random unit vector cancelled.

    Args:
        v: The vector to check.

    Returns:
        1 if every component magnitude is below 1e-8, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect a vector about a normal.

    Computes v - 2 * dot(v, n) * n. The normal should be unit length.

    Args:
        v: The incoming direction vector (pointing toward the surface).
        n: The surface normal (should be normalized).

    Returns:
        The mirrored direction vector.
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit vector through a surface using Snell's law.

    The refracted ray is split into the part perpendicular to the normal,
    which scales with the index ratio, and the part parallel to it, whose
    length follows from the refracted ray being unit length.

    Args:
        uv: The incoming direction (unit length).
        n: The surface normal on the incoming side (unit length).
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction vector.
    """
    cos_theta = tm.min(tm.dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -tm.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit sphere.

    Draws points uniformly from the [-1, 1]^3 cube and rejects those
    outside the unit ball.

    Returns:
        A random point with squared length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Rejection sampling loop
    for _ in range(MAX_REJECTION_ATTEMPTS):  # Bounded to keep the kernel finite
        if not found:
            p = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
            )
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector (normalized random_in_unit_sphere)."""
    return normalize(random_in_unit_sphere())


@ti.func
def random_in_hemisphere(normal: vec3) -> vec3:
    """Generate a random point in the unit ball on the normal's side.

    Args:
        normal: The surface normal defining the hemisphere orientation.

    Returns:
        A random point inside the unit sphere with a non-negative dot
        product against the normal.
    """
    in_unit_sphere = random_in_unit_sphere()
    result = in_unit_sphere
    if tm.dot(in_unit_sphere, normal) <= 0.0:
        result = -in_unit_sphere
    return result
