"""Taichi-based offline path tracer for sphere scenes.

This package renders a 2-D image by simulating light transport through a scene
of spheres with diffuse, metallic and dielectric surfaces. Per-ray work runs
inside Taichi kernels; scene assembly, camera configuration and image output
happen on the Python side.

Subpackages:
    core: Ray structure, vector helpers, random streams and the integrator
    geometry: Sphere primitive and ray-sphere intersection
    materials: Diffuse, metal and dielectric scattering models
    scene: Scene aggregation, nearest-hit search and preset scenes
    camera: Camera configuration, ray generation and the render entry point
    preview: Image export and display helpers for the finished pixel buffer
"""

__version__ = "0.1.0"
