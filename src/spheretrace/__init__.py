"""Taichi-based sphere path tracer.

This package renders scenes of spheres with diffuse, metallic and glass
surfaces by Monte Carlo path tracing, with support for:
- Closest-hit ray/sphere intersection over a flat list of spheres
- Lambertian, metal (with fuzz) and dielectric materials
- Jittered multi-sample anti-aliasing and gamma-corrected 8-bit output
- Plain-text PPM and PNG export

Subpackages:
    core: Ray and vector utilities, the integrator, the renderer and settings
    geometry: The sphere primitive and hit records
    materials: Scattering models and the material registries
    scene: Scene storage, the World builder and the default scene
    camera: The pinhole camera and primary ray generation
    output: Color resolution and image export
"""

__version__ = "0.1.0"
