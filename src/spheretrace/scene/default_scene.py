"""Default three-sphere scene.

This module provides a factory function for the classic demo scene: a large
yellowish ground sphere with three small spheres resting on it, viewed by the
fixed pinhole camera at the origin looking down -z.

The scene consists of:
- Ground: large Lambertian sphere (r=100) below the others
- Center: reddish Lambertian sphere
- Left: slightly fuzzy silver metal sphere
- Right: gold metal sphere with maximum fuzz

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.scene.default_scene import create_default_scene
    >>> from src.spheretrace.camera.pinhole import setup_camera
    >>>
    >>> world, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> world.get_sphere_count()
    4
"""

from dataclasses import dataclass

from src.spheretrace.camera.pinhole import PinholeCamera
from src.spheretrace.scene.world import World

# =============================================================================
# Scene Parameters
# =============================================================================


@dataclass
class DefaultSceneParams:
    """Parameters for customizing the default scene.

    All parameters default to the classic configuration.

    Attributes:
        ground_color: RGB albedo of the ground sphere.
        center_color: RGB albedo of the center sphere.
        left_color: RGB albedo of the left (metal) sphere.
        left_fuzz: Fuzz of the left sphere, clamped into [0, 1].
        right_color: RGB albedo of the right (metal) sphere.
        right_fuzz: Fuzz of the right sphere, clamped into [0, 1].

    Example:
        >>> params = DefaultSceneParams(left_fuzz=0.0)  # Perfect mirror
        >>> world, camera = create_default_scene(params=params)
    """

    ground_color: tuple[float, float, float] = (0.8, 0.8, 0.0)
    center_color: tuple[float, float, float] = (0.7, 0.3, 0.3)
    left_color: tuple[float, float, float] = (0.8, 0.8, 0.8)
    left_fuzz: float = 0.3
    right_color: tuple[float, float, float] = (0.8, 0.6, 0.2)
    right_fuzz: float = 1.0


# =============================================================================
# Scene Geometry
# =============================================================================

GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0

SMALL_SPHERE_RADIUS = 0.5
CENTER_SPHERE_CENTER = (0.0, 0.0, -1.0)
LEFT_SPHERE_CENTER = (-1.0, 0.0, -1.0)
RIGHT_SPHERE_CENTER = (1.0, 0.0, -1.0)


def create_default_scene(
    aspect_ratio: float = 16.0 / 9.0,
    params: DefaultSceneParams | None = None,
) -> tuple[World, PinholeCamera]:
    """Create the default scene and its camera.

    Spheres are added in the order ground, center, left, right, each with
    its own material.

    Args:
        aspect_ratio: Aspect ratio of the output image, passed to the camera.
        params: Optional DefaultSceneParams. If None, uses the defaults.

    Returns:
        A tuple of (World, PinholeCamera). The camera still has to be passed
        to setup_camera() before rendering.

    Raises:
        ValueError: If a parameter is out of range.
    """
    if params is None:
        params = DefaultSceneParams()

    world = World()

    world.add_lambertian_sphere(GROUND_CENTER, GROUND_RADIUS, params.ground_color)
    world.add_lambertian_sphere(CENTER_SPHERE_CENTER, SMALL_SPHERE_RADIUS, params.center_color)
    world.add_metal_sphere(
        LEFT_SPHERE_CENTER, SMALL_SPHERE_RADIUS, params.left_color, params.left_fuzz
    )
    world.add_metal_sphere(
        RIGHT_SPHERE_CENTER, SMALL_SPHERE_RADIUS, params.right_color, params.right_fuzz
    )

    # Fixed camera: eye at the origin, viewport 2 units high at z = -1
    camera = PinholeCamera(aspect_ratio=aspect_ratio)

    return world, camera
