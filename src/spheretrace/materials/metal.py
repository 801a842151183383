"""Metal (specular reflective) material implementation.

Metals mirror the incoming ray about the surface normal:
    R = I - 2(I . N)N

where I is the unit incident direction and N the surface normal. A fuzz
parameter in [0, 1] perturbs the reflected direction by a random point in a
sphere of that radius, blurring the reflection. Rays that end up pointing
into the surface are absorbed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # scatter = scatter_metal(albedo, fuzz, ray_in, hit_record)
"""

import taichi as ti
import taichi.math as tm

from src.spheretrace.core.ray import Ray, random_in_unit_sphere, reflect
from src.spheretrace.geometry.sphere import HitRecord
from src.spheretrace.materials.lambertian import validate_albedo
from src.spheretrace.materials.material import ScatterRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(albedo: vec3, fuzz: ti.f32, ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter a ray off a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: Reflection blur in [0, 1].
        ray_in: The incoming ray.
        rec: The hit record of the intersection.

    Returns:
        A ScatterRecord with attenuation equal to the albedo. did_scatter is
        0 when the (fuzzed) reflection points into the surface.
    """
    reflected = reflect(tm.normalize(ray_in.direction), rec.normal)
    if fuzz > 0.0:
        reflected += fuzz * random_in_unit_sphere()

    did_scatter = 0
    if tm.dot(reflected, rec.normal) > 0.0:
        did_scatter = 1

    return ScatterRecord(
        did_scatter=did_scatter,
        origin=rec.point,
        direction=reflected,
        attenuation=albedo,
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for Metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_METAL_MATERIALS)
metal_fuzz = ti.field(dtype=ti.f32, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all Metal materials."""
    num_metal_materials[None] = 0


def clamp_fuzz(fuzz: float) -> float:
    """Clamp a fuzz value into [0, 1]."""
    return min(max(fuzz, 0.0), 1.0)


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Add a Metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
        fuzz: Reflection blur. Values outside [0, 1] are clamped.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    validate_albedo(albedo)

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of Metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    metal_fuzz[idx] = clamp_fuzz(fuzz)
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of Metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f32:
    """Get the fuzz for a Metal material by index."""
    return metal_fuzz[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord) -> ScatterRecord:
    """Scatter off the registered Metal material at material_idx."""
    return scatter_metal(
        get_metal_albedo(material_idx), get_metal_fuzz(material_idx), ray_in, rec
    )
