"""Taichi-accelerated Monte Carlo path tracer for sphere scenes.

This package renders scenes of spheres with diffuse, metal and glass
materials through a thin-lens camera, splitting the image into static
per-worker chunks that are traced in parallel by a single Taichi kernel.

Subpackages:
    core: Vector kernel, rays, random streams, integrator and tile renderer
    camera: Thin-lens camera with depth of field
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Scene description, device upload and showcase scenes
    preview: Image sinks (PPM and PNG export)
"""

__version__ = "0.1.0"
