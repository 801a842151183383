"""Lambertian (ideal diffuse) material implementation.

Diffuse surfaces scatter along the surface normal offset by a random unit
vector. Adding a uniformly distributed unit vector to the normal biases the
scattered directions toward the normal, which approximates Lambertian
reflectance without explicit cosine-weighted sampling.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # scatter = scatter_lambertian(albedo, ray_in, hit_record)
"""

import taichi as ti
import taichi.math as tm

from src.spheretrace.core.ray import Ray, near_zero, random_unit_vector
from src.spheretrace.geometry.sphere import HitRecord
from src.spheretrace.materials.material import ScatterRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def lambertian_direction(normal: vec3, offset: vec3) -> vec3:
    """Diffuse scatter direction for a unit normal and a random unit offset.

    Falls back to the normal when the two cancel out.
    """
    scatter_direction = normal + offset

    # Catch degenerate scatter direction
    if near_zero(scatter_direction):
        scatter_direction = normal

    return scatter_direction


@ti.func
def scatter_lambertian(albedo: vec3, ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter a ray off a Lambertian surface.

    Diffuse surfaces never absorb: the result always has did_scatter == 1
    and the scattered ray starts at the hit point.

    Args:
        albedo: The diffuse reflectance color (RGB).
        ray_in: The incoming ray (unused; diffuse scattering is
            independent of the incoming direction).
        rec: The hit record of the intersection.

    Returns:
        A ScatterRecord with attenuation equal to the albedo.
    """
    scatter_direction = lambertian_direction(rec.normal, random_unit_vector())

    return ScatterRecord(
        did_scatter=1,
        origin=rec.point,
        direction=scatter_direction,
        attenuation=albedo,
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def validate_albedo(albedo: tuple[float, float, float]) -> None:
    """Check that an albedo is an RGB triple with components in [0, 1].

    Raises:
        ValueError: If the albedo does not have three components or any
            component is outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if not 0.0 <= component <= 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    validate_albedo(albedo)

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter off the registered Lambertian material at material_idx."""
    return scatter_lambertian(get_lambertian_albedo(material_idx), ray_in, rec)
