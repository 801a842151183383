"""Dielectric (glass/water) material implementation.

Dielectrics transmit light according to Snell's law:
    n1 * sin(theta1) = n2 * sin(theta2)

When the refracted angle would have a sine greater than one the ray is
totally internally reflected instead. The choice between refraction and
reflection is a hard branch on that condition; no Fresnel-weighted random
blending is applied. Glass does not tint, so attenuation is always white.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # scatter = scatter_dielectric(ir, ray_in, hit_record)
"""

import math

import taichi as ti
import taichi.math as tm

from src.spheretrace.core.ray import Ray, reflect, refract
from src.spheretrace.geometry.sphere import HitRecord
from src.spheretrace.materials.material import ScatterRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def refraction_ratio_for(ir: ti.f32, front_face: ti.i32) -> ti.f32:
    """Index ratio for a ray crossing the surface.

    Entering from outside (front_face=1) the ratio is 1/ir (air to glass);
    leaving from inside it is ir (glass to air).
    """
    ratio = 1.0 / ir
    if front_face == 0:
        ratio = ir
    return ratio


@ti.func
def cannot_refract(unit_direction: vec3, normal: vec3, refraction_ratio: ti.f32) -> ti.i32:
    """Check for total internal reflection.

    Args:
        unit_direction: The incoming direction (unit length).
        normal: The surface normal on the incoming side.
        refraction_ratio: Index ratio (incident / transmitted).

    Returns:
        1 if refraction_ratio * sin(theta) > 1, 0 otherwise.
    """
    cos_theta = tm.min(tm.dot(-unit_direction, normal), 1.0)
    sin_theta = tm.sqrt(1.0 - cos_theta * cos_theta)
    return refraction_ratio * sin_theta > 1.0


@ti.func
def scatter_dielectric(ir: ti.f32, ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter a ray through a dielectric surface.

    Args:
        ir: Index of refraction of the material.
        ray_in: The incoming ray.
        rec: The hit record; front_face selects the index ratio.

    Returns:
        A ScatterRecord that always scatters, with white attenuation and
        either the refracted or the totally internally reflected direction.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    refraction_ratio = refraction_ratio_for(ir, rec.front_face)
    unit_direction = tm.normalize(ray_in.direction)

    direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract(unit_direction, rec.normal, refraction_ratio):
        direction = reflect(unit_direction, rec.normal)
    else:
        direction = refract(unit_direction, rec.normal, refraction_ratio)

    return ScatterRecord(
        did_scatter=1,
        origin=rec.point,
        direction=direction,
        attenuation=attenuation,
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for Dielectric material properties
dielectric_irs = ti.field(dtype=ti.f32, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all Dielectric materials."""
    num_dielectric_materials[None] = 0


def add_dielectric_material(ir: float = 1.5) -> int:
    """Add a Dielectric material to the material registry.

    Args:
        ir: Index of refraction. Must be finite and positive.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If ir is not a finite positive number.
    """
    if not math.isfinite(ir) or ir <= 0.0:
        raise ValueError(f"Index of refraction must be a finite positive number, got {ir}")

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_irs[idx] = ir
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of Dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_ir(material_idx: ti.i32) -> ti.f32:
    """Get the index of refraction for a Dielectric material by index."""
    return dielectric_irs[material_idx]


@ti.func
def scatter_dielectric_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter off the registered Dielectric material at material_idx."""
    return scatter_dielectric(get_dielectric_ir(material_idx), ray_in, rec)
