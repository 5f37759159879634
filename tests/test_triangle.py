"""Unit tests for Möller–Trumbore ray-triangle intersection.

The test triangle lies in the plane z = 5 with vertices
(-1, -1), (1, -1), (0, 1), wound so the face normal is +Z.
"""

import pytest
import taichi as ti


def _run_hit(origin, direction, t_min=1e-4, t_max=1e30):
    from src.whitted.geometry.triangle import Triangle, hit_triangle, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f32, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        lo: ti.f32, hi: ti.f32,
    ):
        tri = Triangle(
            v0=vec3(-1.0, -1.0, 5.0),
            v1=vec3(1.0, -1.0, 5.0),
            v2=vec3(0.0, 1.0, 5.0),
            normal=vec3(0.0, 0.0, 1.0),
        )
        rec = hit_triangle(vec3(ox, oy, oz), vec3(dx, dy, dz), tri, lo, hi)
        hit[None] = rec.hit
        t[None] = rec.t
        normal[None] = rec.normal

    test_kernel(*origin, *direction, t_min, t_max)
    return hit[None], t[None], normal[None]


class TestTriangleHit:
    def test_center_hit(self):
        hit, t, normal = _run_hit((0, 0, 0), (0, 0, 1))
        assert hit == 1
        assert t == pytest.approx(5.0)
        assert normal[2] == pytest.approx(1.0)

    def test_two_sided(self):
        """A ray from the back still hits and reports the same face normal."""
        hit, t, normal = _run_hit((0, 0, 10), (0, 0, -1))
        assert hit == 1
        assert t == pytest.approx(5.0)
        assert normal[2] == pytest.approx(1.0)

    @pytest.mark.parametrize("origin", [(2, 0, 0), (0, 1.5, 0), (-0.9, 0.9, 0)])
    def test_outside_edges_miss(self, origin):
        hit, _, _ = _run_hit(origin, (0, 0, 1))
        assert hit == 0

    def test_parallel_miss(self):
        hit, _, _ = _run_hit((0, 0, 5), (1, 0, 0))
        assert hit == 0

    def test_behind_origin_miss(self):
        hit, _, _ = _run_hit((0, 0, 6), (0, 0, 1))
        assert hit == 0

    def test_interval(self):
        hit, _, _ = _run_hit((0, 0, 0), (0, 0, 1), t_max=4.0)
        assert hit == 0


class TestTriangleAny:
    def test_any_agrees(self):
        from src.whitted.geometry.triangle import Triangle, hit_triangle_any, vec3

        inside = ti.field(dtype=ti.i32, shape=())
        outside = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            tri = Triangle(
                v0=vec3(-1.0, -1.0, 5.0),
                v1=vec3(1.0, -1.0, 5.0),
                v2=vec3(0.0, 1.0, 5.0),
                normal=vec3(0.0, 0.0, 1.0),
            )
            d = vec3(0.0, 0.0, 1.0)
            inside[None] = hit_triangle_any(vec3(0.0, 0.0, 0.0), d, tri, 0.0, 10.0)
            outside[None] = hit_triangle_any(vec3(3.0, 0.0, 0.0), d, tri, 0.0, 10.0)

        test_kernel()
        assert inside[None] == 1
        assert outside[None] == 0
