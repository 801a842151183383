"""Sphere primitive and ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the
intersection routine used by the scene aggregate.

The ray-sphere intersection is found by solving:
    |origin + t * direction - center|^2 = radius^2

which, with oc = origin - center, is the quadratic
    a*t^2 + 2*half_b*t + c = 0
    a = dot(direction, direction)
    half_b = dot(oc, direction)
    c = dot(oc, oc) - radius^2

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.spheretrace.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material_id: Unified id of the material shared by this sphere.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: Whether the ray intersected the surface (1 if hit, 0 if miss).
            All other fields are only valid if hit == 1.
        t: The ray parameter of the intersection.
        point: The 3D intersection point.
        normal: The unit surface normal, flipped so that it always opposes
            the incoming ray.
        front_face: 1 if the outward normal opposed the ray (the ray struck
            the outside of the surface), 0 otherwise.
        material_id: The unified material id of the surface. -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection.

    The near root (-half_b - sqrt(d)) / a is tried first, then the far
    root; the first one inside the open interval (t_min, t_max) wins.

    Args:
        ray: The ray to test.
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound on t (avoids self-intersection).
        t_max: Exclusive upper bound on t.

    Returns:
        A HitRecord for the nearest valid root, or a miss record.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrtd = tm.sqrt(discriminant)

        root = (-half_b - sqrtd) / a
        valid = (root > t_min) and (root < t_max)

        if not valid:
            root = (-half_b + sqrtd) / a
            valid = (root > t_min) and (root < t_max)

        if valid:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius

            front_face = 0
            normal = -outward_normal
            if tm.dot(ray.direction, outward_normal) < 0.0:
                front_face = 1
                normal = outward_normal

            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> Sphere:
    """Create a sphere from center, radius and material id."""
    return Sphere(center=center, radius=radius, material_id=material_id)
