"""CPU Whitted-style ray tracer built on Taichi.

One primary ray per pixel, direct lighting from point and directional
lights with optional shadow rays, and a bounded number of mirror bounces
off smooth metals. Supports:
- Spheres, infinite planes, triangles and indexed triangle meshes
- Solid color, Lambert, Lambert-Phong and Cook-Torrance materials
- Four lighting modes for inspecting observed area, radiance and BRDF terms
- Max-to-one tone mapping into an 8-bit framebuffer

Subpackages:
    core: Rays, matrices, render settings, the integrator and the Renderer
    geometry: Shape primitives and intersection algorithms
    materials: BRDF terms and per-kind material registries
    scene: Primitive storage, lights, scene manager, OBJ loading, demo scenes
    camera: Pitch/yaw camera with primary ray generation
    preview: Matplotlib display and PNG export
"""

__version__ = "0.1.0"
