"""Materials module for light scattering models.

This module implements the surface materials of the path tracer:

Components:
    material: ScatterRecord, MaterialType and the unified material id space
    lambertian: Ideal diffuse reflection (normal + random unit vector)
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like refraction with total internal reflection

Each material provides a scatter function taking the incoming ray and the
hit record and returning a ScatterRecord: absorbed (did_scatter == 0) or a
scattered ray with a per-channel attenuation. Material parameters are kept
in type-specific registries (Taichi fields) so they can be shared read-only
by every surface and every parallel sample during a render.
"""

from .dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_ir,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    lambertian_direction,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .material import (
    MAX_MATERIALS,
    MaterialType,
    ScatterRecord,
    clear_material_tracking,
    get_material_count,
    get_material_type,
    get_material_type_index,
    register_material,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Shared
    "MaterialType",
    "ScatterRecord",
    "MAX_MATERIALS",
    "register_material",
    "clear_material_tracking",
    "get_material_count",
    "get_material_type",
    "get_material_type_index",
    # Lambertian
    "lambertian_direction",
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_ir",
]
