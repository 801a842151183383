"""Shared material definitions and the unified material id space.

Every material variant (Lambertian, Metal, Dielectric) keeps its parameters
in its own type-specific registry. Surfaces refer to materials through a
single unified material_id; the tables in this module map that id to the
material type and to the index inside the type-specific registry, so the
integrator can dispatch to the right scattering function on the GPU.

Scattering results are returned as a ScatterRecord: did_scatter == 0 means
the ray was absorbed, otherwise (origin, direction) is the scattered ray and
attenuation the per-channel color multiplier.
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


@ti.dataclass
class ScatterRecord:
    """Result of scattering a ray off a material.

    Attributes:
        did_scatter: 1 if the ray scattered, 0 if it was absorbed.
        origin: Origin of the scattered ray (the hit point).
        direction: Direction of the scattered ray.
        attenuation: Per-channel color multiplier for this bounce.
    """

    did_scatter: ti.i32
    origin: vec3
    direction: vec3
    attenuation: vec3


@ti.func
def make_absorbed_record(origin: vec3) -> ScatterRecord:
    """Create a ScatterRecord for an absorbed ray."""
    return ScatterRecord(
        did_scatter=0,
        origin=origin,
        direction=vec3(0.0, 0.0, 0.0),
        attenuation=vec3(0.0, 0.0, 0.0),
    )


# Maximum number of materials across all types
MAX_MATERIALS = 768  # 256 per type * 3 types

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_material_tracking() -> None:
    """Forget all unified material ids."""
    num_materials[None] = 0


def register_material(material_type: MaterialType, type_index: int) -> int:
    """Assign a unified material id to a type-local material.

    Args:
        material_type: The kind of material being registered.
        type_index: Index of the material in its type-specific registry.

    Returns:
        The new unified material id.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    material_id = num_materials[None]
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


def get_material_count() -> int:
    """Get the number of registered materials."""
    return int(num_materials[None])


def is_valid_material_id(material_id: int) -> bool:
    """Check whether a unified material id has been registered."""
    return 0 <= material_id < num_materials[None]


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    Returns:
        The index into the type-specific material array, or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result
