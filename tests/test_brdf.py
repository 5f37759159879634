"""Unit tests for the BRDF building blocks.

Tests cover:
- Lambert normalization (white, kd = 1 gives 1/pi)
- Phong lobe peak and falloff
- Schlick Fresnel at normal and grazing incidence
- GGX distribution and Smith geometry special cases
- Cook-Torrance energy split, grazing-angle guards and the reflected-energy bound
"""

import math

import pytest
import taichi as ti


class TestLambert:
    def test_white_full_reflectance(self):
        from src.whitted.materials.brdf import lambert, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = lambert(1.0, vec3(1.0, 1.0, 1.0))

        test_kernel()
        for c in range(3):
            assert result[None][c] == pytest.approx(1.0 / math.pi, rel=1e-5)

    def test_scales_with_reflectance(self):
        from src.whitted.materials.brdf import lambert_color, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = lambert_color(vec3(0.5, 0.25, 0.0), vec3(1.0, 1.0, 1.0))

        test_kernel()
        assert result[None][0] == pytest.approx(0.5 / math.pi, rel=1e-5)
        assert result[None][1] == pytest.approx(0.25 / math.pi, rel=1e-5)
        assert result[None][2] == pytest.approx(0.0)


class TestPhong:
    def test_peak_along_mirror_direction(self):
        from src.whitted.materials.brdf import phong, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            up = vec3(0.0, 1.0, 0.0)
            result[None] = phong(0.5, 10.0, up, up, up)

        test_kernel()
        assert result[None][0] == pytest.approx(0.5, rel=1e-5)
        assert result[None][0] == pytest.approx(result[None][2])

    def test_falls_off_away_from_mirror(self):
        from src.whitted.materials.brdf import phong, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, 1.0, 0.0)
            l = vec3(1.0, 1.0, 0.0).normalized()
            v = n
            result[None] = phong(1.0, 20.0, l, v, n)

        test_kernel()
        expected = math.cos(math.pi / 4) ** 20
        assert result[None][0] == pytest.approx(expected, rel=1e-3)

    def test_below_horizon_is_zero(self):
        from src.whitted.materials.brdf import phong, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, 1.0, 0.0)
            l = vec3(1.0, 1.0, 0.0).normalized()
            v = vec3(1.0, 1.0, 0.0).normalized()
            result[None] = phong(1.0, 5.0, l, v, n)

        test_kernel()
        assert result[None][0] == pytest.approx(0.0, abs=1e-6)


class TestFresnel:
    def test_normal_incidence_returns_f0(self):
        from src.whitted.materials.brdf import fresnel_schlick, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            v = vec3(0.0, 0.0, 1.0)
            result[None] = fresnel_schlick(v, v, vec3(0.04, 0.5, 0.9))

        test_kernel()
        assert result[None][0] == pytest.approx(0.04, rel=1e-5)
        assert result[None][1] == pytest.approx(0.5, rel=1e-5)
        assert result[None][2] == pytest.approx(0.9, rel=1e-5)

    def test_grazing_returns_one(self):
        from src.whitted.materials.brdf import fresnel_schlick, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = fresnel_schlick(
                vec3(0.0, 0.0, 1.0), vec3(1.0, 0.0, 0.0), vec3(0.04, 0.04, 0.04)
            )

        test_kernel()
        assert result[None][0] == pytest.approx(1.0, rel=1e-5)


class TestMicrofacetTerms:
    def test_ggx_fully_rough_is_uniform(self):
        from src.whitted.materials.brdf import normal_distribution_ggx, vec3

        aligned = ti.field(dtype=ti.f32, shape=())
        tilted = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, 1.0, 0.0)
            aligned[None] = normal_distribution_ggx(n, n, 1.0)
            tilted[None] = normal_distribution_ggx(n, vec3(1.0, 1.0, 0.0).normalized(), 1.0)

        test_kernel()
        assert aligned[None] == pytest.approx(1.0 / math.pi, rel=1e-5)
        assert tilted[None] == pytest.approx(1.0 / math.pi, rel=1e-5)

    def test_ggx_smooth_peaks_at_normal(self):
        from src.whitted.materials.brdf import normal_distribution_ggx, vec3

        aligned = ti.field(dtype=ti.f32, shape=())
        tilted = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, 1.0, 0.0)
            aligned[None] = normal_distribution_ggx(n, n, 0.2)
            tilted[None] = normal_distribution_ggx(n, vec3(1.0, 1.0, 0.0).normalized(), 0.2)

        test_kernel()
        assert aligned[None] > tilted[None] > 0.0

    def test_geometry_terms(self):
        from src.whitted.materials.brdf import geometry_schlick_ggx, geometry_smith, vec3

        head_on = ti.field(dtype=ti.f32, shape=())
        grazing = ti.field(dtype=ti.f32, shape=())
        smith = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, 1.0, 0.0)
            head_on[None] = geometry_schlick_ggx(n, n, 1.0)
            grazing[None] = geometry_schlick_ggx(n, vec3(1.0, 0.0, 0.0), 1.0)
            smith[None] = geometry_smith(n, n, vec3(1.0, 1.0, 0.0).normalized(), 0.5)

        test_kernel()
        assert head_on[None] == pytest.approx(1.0, rel=1e-5)
        assert grazing[None] == pytest.approx(0.0, abs=1e-6)
        assert 0.0 < smith[None] < 1.0


class TestCookTorrance:
    def _terms(self, albedo, metalness, roughness, light):
        from src.whitted.materials.cook_torrance import cook_torrance_terms, vec3

        specular = ti.field(dtype=ti.math.vec3, shape=())
        diffuse = ti.field(dtype=ti.math.vec3, shape=())
        fresnel = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel(
            ar: ti.f32, ag: ti.f32, ab: ti.f32, m: ti.f32, r: ti.f32,
            lx: ti.f32, ly: ti.f32, lz: ti.f32,
        ):
            n = vec3(0.0, 1.0, 0.0)
            s, d, f = cook_torrance_terms(
                vec3(ar, ag, ab), m, r, n, vec3(lx, ly, lz).normalized(), n
            )
            specular[None] = s
            diffuse[None] = d
            fresnel[None] = f

        test_kernel(*albedo, metalness, roughness, *light)
        return specular[None], diffuse[None], fresnel[None]

    def test_dielectric_energy_split(self):
        specular, diffuse, fresnel = self._terms((1.0, 1.0, 1.0), 0.0, 0.5, (0, 1, 0))
        assert fresnel[0] == pytest.approx(0.04, rel=1e-4)
        assert diffuse[0] == pytest.approx(0.96 / math.pi, rel=1e-4)
        assert specular[0] > 0.0

    def test_metal_has_no_diffuse(self):
        specular, diffuse, fresnel = self._terms((0.9, 0.6, 0.5), 1.0, 0.3, (0, 1, 0))
        for c in range(3):
            assert diffuse[c] == pytest.approx(0.0)
        assert fresnel[0] == pytest.approx(0.9, rel=1e-4)
        assert specular[0] > specular[2]

    def test_grazing_light_is_finite(self):
        specular, diffuse, _ = self._terms((1.0, 1.0, 1.0), 1.0, 0.0, (1, 0, 0))
        for c in range(3):
            assert math.isfinite(specular[c])
            assert specular[c] == pytest.approx(0.0)
            assert math.isfinite(diffuse[c])

    def test_opposed_view_and_light_is_finite(self):
        """l == -v has no half vector; the result must still be finite."""
        from src.whitted.materials.cook_torrance import shade_cook_torrance, vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            n = vec3(0.0, 1.0, 0.0)
            l = vec3(1.0, 1.0, 0.0).normalized()
            result[None] = shade_cook_torrance(vec3(0.5, 0.5, 0.5), 0.0, 0.5, n, l, -l)

        test_kernel()
        for c in range(3):
            assert math.isfinite(result[None][c])
            assert result[None][c] >= 0.0

    @staticmethod
    def _directional_albedo(albedo, metalness, roughness, steps=4096):
        """Integrate (f_spec + f_diff) * cos over the hemisphere for a head-on viewer.

        With v == n the integrand only depends on the light's polar angle, so
        the hemisphere integral reduces to 2 pi * sum(f * cos * sin * dtheta).
        """
        from src.whitted.materials.cook_torrance import cook_torrance_terms, vec3

        total = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def integrate(ar: ti.f32, ag: ti.f32, ab: ti.f32, m: ti.f32, r: ti.f32, n_steps: ti.i32):
            n = vec3(0.0, 1.0, 0.0)
            d_theta = (0.5 * ti.math.pi) / n_steps
            for i in range(n_steps):
                theta = (i + 0.5) * d_theta
                l = vec3(ti.sin(theta), ti.cos(theta), 0.0)
                s, d, _ = cook_torrance_terms(vec3(ar, ag, ab), m, r, n, l, n)
                weight = 2.0 * ti.math.pi * ti.cos(theta) * ti.sin(theta) * d_theta
                total[None] += (s + d) * weight

        total[None] = ti.math.vec3(0.0, 0.0, 0.0)
        integrate(*albedo, metalness, roughness, steps)
        return total[None]

    @pytest.mark.parametrize("roughness", [0.3, 0.5, 0.75, 1.0])
    @pytest.mark.parametrize(
        "albedo,metalness",
        [
            ((1.0, 1.0, 1.0), 0.0),
            ((0.5, 0.7, 0.9), 0.0),
            ((1.0, 1.0, 1.0), 1.0),
            ((0.9, 0.6, 0.3), 1.0),
            ((0.8, 0.8, 0.8), 0.5),
        ],
    )
    def test_directional_albedo_is_bounded(self, albedo, metalness, roughness):
        """Reflected energy stays within albedo plus the Fresnel-reflected fraction."""
        _, _, fresnel = self._terms(albedo, metalness, roughness, (0, 1, 0))
        reflected = self._directional_albedo(albedo, metalness, roughness)

        for c in range(3):
            assert reflected[c] > 0.0
            assert reflected[c] <= albedo[c] + fresnel[c] + 1e-3
            # Never more than was received
            assert reflected[c] <= 1.0 + 5e-3

    @pytest.mark.parametrize(
        "metalness,roughness,expected",
        [(1.0, 0.0, 1.0), (1.0, 0.25, 0.75), (1.0, 1.0, 0.0), (0.0, 0.0, 0.0)],
    )
    def test_reflectivity(self, metalness, roughness, expected):
        from src.whitted.materials.cook_torrance import cook_torrance_reflectivity

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(m: ti.f32, r: ti.f32):
            result[None] = cook_torrance_reflectivity(m, r)

        test_kernel(metalness, roughness)
        assert result[None] == pytest.approx(expected)
