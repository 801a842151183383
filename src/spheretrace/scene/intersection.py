"""Scene-level sphere storage and closest-hit intersection.

The scene aggregate is an ordered list of spheres stored in Taichi fields
(Structure of Arrays layout). intersect_scene tests every sphere, shrinking
the search interval to the closest hit found so far, so the returned record
is the nearest intersection in (t_min, t_max).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.scene.intersection import add_sphere, clear_scene, hit_scene, vec3
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, -1), 0.5, material_id=0)
    0
    >>> hit_scene((0, 0, 0), (0, 0, -1)).t
    0.5
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.spheretrace.core.ray import Ray
from src.spheretrace.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout for GPU efficiency
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero. The actual field data is not cleared
    but will be overwritten when new spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Append a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The unified material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def get_sphere(i: ti.i32) -> Sphere:
    """Load sphere i from the scene fields."""
    return Sphere(
        center=sphere_centers[i],
        radius=sphere_radii[i],
        material_id=sphere_material_ids[i],
    )


@ti.func
def intersect_scene(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Find the closest intersection of a ray with the scene.

    Each sphere is tested with t_max shrunk to the closest t found so far.

    Args:
        ray: The ray to test.
        t_min: Exclusive lower bound on t.
        t_max: Exclusive upper bound on t.

    Returns:
        The HitRecord of the nearest intersection, or a miss record.
    """
    closest_t = t_max
    result = make_miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result


# =============================================================================
# Python-side Queries
# =============================================================================


@dataclass
class HitInfo:
    """A scene intersection read back to Python.

    Attributes:
        t: The ray parameter of the intersection.
        point: The intersection point.
        normal: The unit normal, opposing the incoming ray.
        front_face: Whether the ray struck the outside of the surface.
        material_id: The unified material id of the surface.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    front_face: bool
    material_id: int


_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_front_face = ti.field(dtype=ti.i32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _intersect_scene_kernel(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
):
    """Run intersect_scene for a single ray and store the record."""
    # Single-iteration outer loop keeps the sphere loop serial
    for _ in range(1):
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        rec = intersect_scene(ray, t_min, t_max)
        _query_hit[None] = rec.hit
        _query_t[None] = rec.t
        _query_point[None] = rec.point
        _query_normal[None] = rec.normal
        _query_front_face[None] = rec.front_face
        _query_material_id[None] = rec.material_id


def _to_tuple(v) -> tuple[float, float, float]:
    return (float(v[0]), float(v[1]), float(v[2]))


def hit_scene(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    t_min: float = 0.001,
    t_max: float = float("inf"),
) -> HitInfo | None:
    """Intersect a single ray with the scene from Python.

    Args:
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z).
        t_min: Exclusive lower bound on t.
        t_max: Exclusive upper bound on t.

    Returns:
        The closest HitInfo, or None if the ray misses every sphere.
    """
    _intersect_scene_kernel(
        origin[0], origin[1], origin[2], direction[0], direction[1], direction[2], t_min, t_max
    )
    if _query_hit[None] == 0:
        return None
    return HitInfo(
        t=float(_query_t[None]),
        point=_to_tuple(_query_point[None]),
        normal=_to_tuple(_query_normal[None]),
        front_face=bool(_query_front_face[None]),
        material_id=int(_query_material_id[None]),
    )
