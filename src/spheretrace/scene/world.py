"""World: the scene aggregate builder coordinating spheres and materials.

The World provides the high-level API for assembling a scene. It tracks
which material type (Lambertian, Metal, Dielectric) each unified material id
corresponds to, validates geometry before it reaches the render loop, and
can export or import the scene as plain data.

Materials are shared: any number of spheres may reference the same
material id, and nothing mutates a material once it is registered.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.scene.world import World
    >>> world = World()
    >>> red = world.add_lambertian_material(albedo=(0.7, 0.3, 0.3))
    >>> world.add_sphere(center=(0, 0, -1), radius=0.5, material_id=red)
    >>> world.hit((0, 0, 0), (0, 0, -1))
"""

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import taichi.math as tm

from src.spheretrace.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from src.spheretrace.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from src.spheretrace.materials.material import (
    MaterialType,
    clear_material_tracking,
    get_material_count,
    is_valid_material_id,
    register_material,
)
from src.spheretrace.materials.metal import (
    add_metal_material,
    clamp_fuzz,
    clear_metal_materials,
)
from src.spheretrace.scene.intersection import (
    HitInfo,
    add_sphere,
    clear_scene,
    get_sphere_count,
    hit_scene,
)

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material (Lambertian, Metal, Dielectric).
        type_index: The index within the type-specific material array.
        params: The material parameters as stored.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a 3-element sequence to a float triple."""
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


class World:
    """The scene aggregate: an ordered collection of spheres and materials.

    World holds Python-side bookkeeping and writes the actual data into the
    Taichi fields read by the integrator. Since those fields are module
    level, creating a World clears any previously built scene.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.

    Example:
        >>> world = World()
        >>> ground = world.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        >>> steel = world.add_metal_material(albedo=(0.8, 0.8, 0.8), fuzz=0.3)
        >>> glass = world.add_dielectric_material(ir=1.5)
        >>> world.add_sphere((0, -100.5, -1), 100.0, ground)
        >>> world.add_sphere((-1, 0, -1), 0.5, steel)
        >>> world.add_sphere((1, 0, -1), 0.5, glass)
    """

    def __init__(self) -> None:
        """Initialize an empty world."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _track_material(
        self, material_type: MaterialType, type_index: int, params: dict[str, Any]
    ) -> int:
        material_id = register_material(material_type, type_index)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian (diffuse) material.

        Args:
            albedo: The diffuse reflectance color as (R, G, B), each in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_lambertian_material(albedo)
        return self._track_material(
            MaterialType.LAMBERTIAN, type_index, {"albedo": tuple(albedo)}
        )

    def add_metal_material(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Add a metal (specular reflective) material.

        Args:
            albedo: The reflective color as (R, G, B), each in [0, 1].
            fuzz: Reflection blur, clamped into [0, 1]. Default 0 (mirror).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._track_material(
            MaterialType.METAL, type_index, {"albedo": tuple(albedo), "fuzz": clamp_fuzz(fuzz)}
        )

    def add_dielectric_material(self, ir: float = 1.5) -> int:
        """Add a dielectric (glass/water) material.

        Args:
            ir: Index of refraction. Default is 1.5 (typical glass).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If ir is not a finite positive number.
        """
        type_index = add_dielectric_material(ir)
        return self._track_material(MaterialType.DIELECTRIC, type_index, {"ir": ir})

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return get_material_count()

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if unknown."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Append a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere. Must be finite and positive.
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If the geometry is malformed or material_id is invalid.
        """
        center = _as_triple(center, "center")
        if not all(math.isfinite(c) for c in center):
            raise ValueError(f"Sphere center must be finite, got {center}")
        if not math.isfinite(radius) or radius <= 0.0:
            raise ValueError(f"Sphere radius must be a finite positive number, got {radius}")
        if not is_valid_material_id(material_id):
            raise ValueError(f"Invalid material_id: {material_id}")

        sphere_index = add_sphere(vec3(center[0], center[1], center[2]), radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ir: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(ir)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def hit(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        t_min: float = 0.001,
        t_max: float = float("inf"),
    ) -> HitInfo | None:
        """Find the closest intersection of a ray with the scene.

        Args:
            origin: Ray origin as (x, y, z).
            direction: Ray direction as (x, y, z).
            t_min: Exclusive lower bound on t.
            t_max: Exclusive upper bound on t.

        Returns:
            The nearest HitInfo in (t_min, t_max), or None on a miss.
        """
        return hit_scene(origin, direction, t_min, t_max)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration. Materials are
        loaded first so spheres can reference them by position.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for mat_config in config.materials:
            mat_type = mat_config.get("type", "").lower()
            if mat_type == "lambertian":
                albedo = _as_triple(mat_config.get("albedo", [0.5, 0.5, 0.5]), "albedo")
                self.add_lambertian_material(albedo)
            elif mat_type == "metal":
                albedo = _as_triple(mat_config.get("albedo", [0.8, 0.8, 0.8]), "albedo")
                self.add_metal_material(albedo, float(mat_config.get("fuzz", 0.0)))
            elif mat_type == "dielectric":
                self.add_dielectric_material(float(mat_config.get("ir", 1.5)))
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in config.spheres:
            center = _as_triple(sphere_config.get("center", [0, 0, 0]), "center")
            radius = float(sphere_config.get("radius", 1.0))
            material_id = int(sphere_config.get("material_id", 0))
            self.add_sphere(center, radius, material_id)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials' and 'spheres' keys."""
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
        )
        self.from_config(config)

    def load_json(self, path: str | Path) -> None:
        """Load a scene from a JSON file written by save_json.

        Raises:
            ValueError: If the file is not valid JSON or describes an
                invalid scene.
        """
        try:
            data = json.loads(Path(path).read_text())
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid scene file {path}: {e}") from e
        self.from_dict(data)

    def save_json(self, path: str | Path) -> None:
        """Write the scene to a JSON file."""
        Path(path).write_text(json.dumps(self.to_dict(), indent=2))
