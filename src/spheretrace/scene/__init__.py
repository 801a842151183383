"""Scene module: sphere storage, scene queries and scene construction.

Components:
    intersection: Sphere fields and closest-hit scene intersection
    world: The World builder coordinating spheres and materials
    default_scene: The default ground-plus-three-spheres scene

Scene data is kept in Structure-of-Arrays Taichi fields.
"""

from .default_scene import DefaultSceneParams, create_default_scene
from .intersection import (
    MAX_SPHERES,
    HitInfo,
    add_sphere,
    clear_scene,
    get_sphere_count,
    hit_scene,
    intersect_scene,
)
from .world import MaterialInfo, SceneConfig, SphereInfo, World

__all__ = [
    # Intersection module
    "HitInfo",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "hit_scene",
    "intersect_scene",
    "MAX_SPHERES",
    # World module
    "World",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    # Default scene
    "DefaultSceneParams",
    "create_default_scene",
]
