"""Unit tests for ray-plane intersection."""

import pytest
import taichi as ti


def _run_hit(origin, direction, t_min=1e-4, t_max=1e30):
    """Hit the floor plane y = 0 with normal +Y."""
    from src.whitted.geometry.plane import Plane, hit_plane, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        lo: ti.f32, hi: ti.f32,
    ):
        floor = Plane(point=vec3(0.0, 0.0, 0.0), normal=vec3(0.0, 1.0, 0.0))
        rec = hit_plane(vec3(ox, oy, oz), vec3(dx, dy, dz), floor, lo, hi)
        hit[None] = rec.hit
        t[None] = rec.t
        point[None] = rec.point
        normal[None] = rec.normal

    test_kernel(*origin, *direction, t_min, t_max)
    return hit[None], t[None], point[None], normal[None]


class TestPlaneHit:
    def test_straight_down(self):
        hit, t, point, normal = _run_hit((0, 2, 0), (0, -1, 0))
        assert hit == 1
        assert t == pytest.approx(2.0)
        assert point[1] == pytest.approx(0.0, abs=1e-6)
        assert normal[1] == pytest.approx(1.0)

    def test_hit_from_below_keeps_plane_normal(self):
        hit, t, _, normal = _run_hit((0, -3, 0), (0, 1, 0))
        assert hit == 1
        assert t == pytest.approx(3.0)
        assert normal[1] == pytest.approx(1.0)

    def test_parallel_ray_misses(self):
        hit, _, _, _ = _run_hit((0, 1, 0), (1, 0, 0))
        assert hit == 0

    def test_pointing_away_misses(self):
        hit, _, _, _ = _run_hit((0, 2, 0), (0, 1, 0))
        assert hit == 0

    def test_outside_interval(self):
        hit, _, _, _ = _run_hit((0, 2, 0), (0, -1, 0), t_max=1.5)
        assert hit == 0


class TestPlaneAny:
    def test_shadow_interval(self):
        from src.whitted.geometry.plane import Plane, hit_plane_any, vec3

        blocked = ti.field(dtype=ti.i32, shape=())
        clear = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            wall = Plane(point=vec3(0.0, 0.0, 2.0), normal=vec3(0.0, 0.0, -1.0))
            origin = vec3(0.0, 0.0, 0.0)
            direction = vec3(0.0, 0.0, 1.0)
            blocked[None] = hit_plane_any(origin, direction, wall, 0.0, 5.0)
            clear[None] = hit_plane_any(origin, direction, wall, 0.0, 1.0)

        test_kernel()
        assert blocked[None] == 1
        assert clear[None] == 0
