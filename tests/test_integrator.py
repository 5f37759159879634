"""End-to-end tests for the Whitted integrator.

Scenes are kept tiny (9x9) and the center pixel is traced directly with
render_pixel(), which runs the same per-pixel code as render_frame().

Tests cover:
- Mid-gray: white Lambert floor lit head-on gives 0.5 (byte 127)
- Occlusion: a blocker between floor and light gives black
- Mirror bounce: a smooth metal sphere shows the decayed wall color
- Each lighting mode, sky handling and bounce termination
- Tone mapping and the framebuffer produced by a full pass
"""

import math

import numpy as np
import pytest


def _mid_gray_scene(scene):
    """Camera 2 units above a white Lambert floor, light at the camera."""
    from src.whitted.camera.camera import Camera

    scene.camera = Camera(origin=(0.0, 2.0, 0.0), total_pitch=-math.pi / 2)
    white = scene.add_lambert_material((1.0, 1.0, 1.0), 1.0)
    scene.add_plane((0, 0, 0), (0, 1, 0), white)
    # Radiance at the floor: 2 pi / 2^2 = pi / 2; times 1 / pi gives 0.5
    scene.add_point_light((0.0, 2.0, 0.0), (1.0, 1.0, 1.0), 2.0 * math.pi)
    return scene


def _mirror_scene(scene):
    """Smooth metal sphere ahead, red wall behind the camera."""
    from src.whitted.camera.camera import Camera

    scene.camera = Camera(origin=(0.0, 0.0, 0.0))
    scene.add_cook_torrance_sphere((0, 0, 5), 1.0, (1.0, 1.0, 1.0), 1.0, 0.0)
    red = scene.add_solid_color_material((1.0, 0.0, 0.0))
    scene.add_plane((0, 0, -2), (0, 0, 1), red)
    scene.add_directional_light((0, 0, -1), (1.0, 1.0, 1.0), 1.0)
    return scene


def _trace_center(scene, settings, size=9, tone_map=False):
    from src.whitted.camera.camera import setup_camera
    from src.whitted.core.integrator import render_pixel, setup_render_target

    setup_render_target(size, size)
    setup_camera(scene.camera)
    return render_pixel(size // 2, size // 2, settings, tone_map=tone_map)


class TestMidGray:
    def test_combined_is_half(self, fresh_scene):
        from src.whitted.core.settings import RenderSettings

        _mid_gray_scene(fresh_scene)
        color = _trace_center(fresh_scene, RenderSettings(shadows_enabled=False))
        assert color == pytest.approx((0.5, 0.5, 0.5), abs=1e-4)

    def test_shadows_do_not_self_occlude(self, fresh_scene):
        from src.whitted.core.settings import RenderSettings

        _mid_gray_scene(fresh_scene)
        color = _trace_center(fresh_scene, RenderSettings(shadows_enabled=True))
        assert color == pytest.approx((0.5, 0.5, 0.5), abs=1e-4)

    def test_framebuffer_byte(self, fresh_scene):
        from src.whitted.camera.camera import setup_camera
        from src.whitted.core.integrator import (
            get_framebuffer_numpy,
            render_frame,
            setup_render_target,
        )
        from src.whitted.core.settings import RenderSettings

        _mid_gray_scene(fresh_scene)
        setup_render_target(9, 9)
        setup_camera(fresh_scene.camera)
        elapsed = render_frame(RenderSettings(shadows_enabled=False))

        image = get_framebuffer_numpy()
        assert elapsed >= 0.0
        assert image.shape == (9, 9, 3)
        assert image.dtype == np.uint8
        assert tuple(image[4, 4]) == (127, 127, 127)


class TestLightingModes:
    @pytest.mark.parametrize(
        "mode,expected",
        [
            ("OBSERVED_AREA", 1.0),
            ("RADIANCE", math.pi / 2),
            ("BRDF", 1.0 / math.pi),
            ("COMBINED", 0.5),
        ],
    )
    def test_mode_values(self, fresh_scene, mode, expected):
        from src.whitted.core.settings import LightingMode, RenderSettings

        _mid_gray_scene(fresh_scene)
        settings = RenderSettings(shadows_enabled=False, lighting_mode=LightingMode[mode])
        color = _trace_center(fresh_scene, settings)
        assert color[0] == pytest.approx(expected, rel=1e-4)

    def test_back_facing_light_only_counts_for_radiance(self, fresh_scene):
        from src.whitted.camera.camera import Camera
        from src.whitted.core.settings import LightingMode, RenderSettings

        fresh_scene.camera = Camera(origin=(0.0, 2.0, 0.0), total_pitch=-math.pi / 2)
        white = fresh_scene.add_lambert_material((1.0, 1.0, 1.0))
        fresh_scene.add_plane((0, 0, 0), (0, 1, 0), white)
        # Light below the floor
        fresh_scene.add_point_light((0.0, -1.0, 0.0), (1.0, 1.0, 1.0), 1.0)

        for mode in (LightingMode.OBSERVED_AREA, LightingMode.BRDF, LightingMode.COMBINED):
            settings = RenderSettings(shadows_enabled=False, lighting_mode=mode)
            assert _trace_center(fresh_scene, settings) == pytest.approx((0.0, 0.0, 0.0))

        radiance = RenderSettings(shadows_enabled=False, lighting_mode=LightingMode.RADIANCE)
        assert _trace_center(fresh_scene, radiance)[0] == pytest.approx(1.0, rel=1e-4)

    def test_lights_are_summed(self, fresh_scene):
        from src.whitted.core.settings import RenderSettings

        _mid_gray_scene(fresh_scene)
        fresh_scene.add_point_light((0.0, 2.0, 0.0), (1.0, 1.0, 1.0), 2.0 * math.pi)
        color = _trace_center(fresh_scene, RenderSettings(shadows_enabled=False))
        assert color[0] == pytest.approx(1.0, rel=1e-4)


class TestShadows:
    def _occluder_scene(self, scene):
        from src.whitted.camera.camera import Camera

        scene.camera = Camera(origin=(0.0, 1.0, 0.0), fov_angle=90.0, total_pitch=-math.pi / 2)
        white = scene.add_lambert_material((1.0, 1.0, 1.0))
        scene.add_plane((0, 0, 0), (0, 1, 0), white)
        scene.add_sphere((0.0, 2.0, 0.0), 0.25, white)
        scene.add_point_light((0.0, 4.0, 0.0), (1.0, 1.0, 1.0), 16.0)
        return scene

    def test_blocked_pixel_is_black(self, fresh_scene):
        from src.whitted.core.settings import RenderSettings

        self._occluder_scene(fresh_scene)
        color = _trace_center(fresh_scene, RenderSettings(shadows_enabled=True))
        assert color == (0.0, 0.0, 0.0)

    def test_unblocked_pixel_is_lit(self, fresh_scene):
        from src.whitted.camera.camera import setup_camera
        from src.whitted.core.integrator import render_pixel, setup_render_target
        from src.whitted.core.settings import RenderSettings

        self._occluder_scene(fresh_scene)
        setup_render_target(9, 9)
        setup_camera(fresh_scene.camera)
        # Left edge, middle row: floor point (-0.89, 0, 0), shadow ray clears the sphere
        color = render_pixel(0, 4, RenderSettings(shadows_enabled=True))
        assert color[0] > 0.0

    def test_disabling_shadows_lights_blocked_pixel(self, fresh_scene):
        from src.whitted.core.settings import RenderSettings

        self._occluder_scene(fresh_scene)
        color = _trace_center(fresh_scene, RenderSettings(shadows_enabled=False))
        # 16 / 4^2 radiance times 1 / pi
        assert color[0] == pytest.approx(1.0 / math.pi, rel=1e-4)


class TestReflections:
    def test_mirror_shows_decayed_wall(self, fresh_scene):
        from src.whitted.core.settings import RenderSettings

        _mirror_scene(fresh_scene)
        settings = RenderSettings(bounce_count=1, shadows_enabled=False)
        color = _trace_center(fresh_scene, settings)
        assert color == pytest.approx((0.7, 0.0, 0.0), abs=1e-4)

    def test_zero_bounces_stops_at_first_hit(self, fresh_scene):
        from src.whitted.core.settings import RenderSettings

        _mirror_scene(fresh_scene)
        settings = RenderSettings(bounce_count=0, shadows_enabled=False)
        assert _trace_center(fresh_scene, settings) == pytest.approx((0.0, 0.0, 0.0))

    def test_reflections_disabled(self, fresh_scene):
        from src.whitted.core.settings import RenderSettings

        _mirror_scene(fresh_scene)
        settings = RenderSettings(bounce_count=3, shadows_enabled=False, reflections_enabled=False)
        assert _trace_center(fresh_scene, settings) == pytest.approx((0.0, 0.0, 0.0))

    def test_reflected_sky_is_constant(self, fresh_scene):
        from src.whitted.camera.camera import Camera
        from src.whitted.core.settings import RenderSettings

        fresh_scene.camera = Camera()
        fresh_scene.add_cook_torrance_sphere((0, 0, 5), 1.0, (1.0, 1.0, 1.0), 1.0, 0.0)
        settings = RenderSettings(bounce_count=2, shadows_enabled=False, sky_color=(0.2, 0.4, 0.6))
        color = _trace_center(fresh_scene, settings)
        assert color == pytest.approx((0.2, 0.4, 0.6), abs=1e-4)

    def test_back_face_mirror_reflects_sky(self, fresh_scene):
        from src.whitted.camera.camera import Camera
        from src.whitted.core.settings import RenderSettings

        fresh_scene.camera = Camera()
        mirror = fresh_scene.add_cook_torrance_material((1.0, 1.0, 1.0), 1.0, 0.0)
        # Normal faces away from the camera, so the center ray hits the back side
        fresh_scene.add_plane((0, 0, 5), (0, 0.5, 1), mirror)
        settings = RenderSettings(bounce_count=1, shadows_enabled=False)
        assert _trace_center(fresh_scene, settings) == pytest.approx((1.0, 1.0, 1.0), abs=1e-4)

    def test_back_face_triangle_mirror_reflects_sky(self, fresh_scene):
        from src.whitted.camera.camera import Camera
        from src.whitted.core.settings import RenderSettings

        fresh_scene.camera = Camera()
        mirror = fresh_scene.add_cook_torrance_material((1.0, 1.0, 1.0), 1.0, 0.0)
        # Wound so the face normal is +z, away from the camera
        fresh_scene.add_triangle((-2, -2, 5), (2, -2, 5), (0, 2, 5), mirror)
        settings = RenderSettings(bounce_count=1, shadows_enabled=False, sky_color=(0.0, 1.0, 0.0))
        assert _trace_center(fresh_scene, settings) == pytest.approx((0.0, 1.0, 0.0), abs=1e-4)

    def test_rough_metal_does_not_bounce(self, fresh_scene):
        from src.whitted.camera.camera import Camera
        from src.whitted.core.settings import RenderSettings

        fresh_scene.camera = Camera()
        fresh_scene.add_cook_torrance_sphere((0, 0, 5), 1.0, (1.0, 1.0, 1.0), 1.0, 1.0)
        settings = RenderSettings(bounce_count=2, shadows_enabled=False, sky_color=(1.0, 0.0, 0.0))
        assert _trace_center(fresh_scene, settings) == pytest.approx((0.0, 0.0, 0.0))


class TestSkyAndToneMap:
    def test_empty_scene_shows_sky(self, fresh_scene):
        from src.whitted.core.settings import RenderSettings

        settings = RenderSettings(sky_color=(0.2, 0.4, 0.6))
        assert _trace_center(fresh_scene, settings) == pytest.approx((0.2, 0.4, 0.6), abs=1e-6)

    def test_tone_map_preserves_hue(self, fresh_scene):
        from src.whitted.core.settings import RenderSettings

        settings = RenderSettings(sky_color=(4.0, 2.0, 1.0))
        color = _trace_center(fresh_scene, settings, tone_map=True)
        assert color == pytest.approx((1.0, 0.5, 0.25))

    def test_tone_map_numpy(self):
        from src.whitted.core.integrator import tone_map_numpy

        np.testing.assert_allclose(tone_map_numpy([0.2, 0.3, 0.4]), [0.2, 0.3, 0.4])
        np.testing.assert_allclose(tone_map_numpy([-1.0, np.nan, np.inf]), [0.0, 0.0, 0.0])
        np.testing.assert_allclose(tone_map_numpy([2.0, 1.0, -3.0]), [1.0, 0.5, 0.0])


class TestRenderTarget:
    def test_invalid_dimensions(self):
        from src.whitted.core.integrator import MAX_IMAGE_WIDTH, setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(0, 10)
        with pytest.raises(ValueError):
            setup_render_target(MAX_IMAGE_WIDTH + 1, 10)

    def test_pixel_outside_target(self):
        from src.whitted.core.integrator import render_pixel, setup_render_target
        from src.whitted.core.settings import RenderSettings

        setup_render_target(4, 4)
        with pytest.raises(ValueError, match="outside"):
            render_pixel(4, 0, RenderSettings())

    def test_uninitialized_target(self):
        from src.whitted.core import integrator
        from src.whitted.core.settings import RenderSettings

        previous = integrator._render_target_initialized[None]
        integrator._render_target_initialized[None] = 0
        try:
            with pytest.raises(RuntimeError, match="setup_render_target"):
                integrator.render_frame(RenderSettings())
        finally:
            integrator._render_target_initialized[None] = previous

    def test_full_pass_is_deterministic(self):
        from src.whitted.camera.camera import setup_camera
        from src.whitted.core.integrator import (
            get_framebuffer_numpy,
            get_image_numpy,
            render_frame,
            setup_render_target,
        )
        from src.whitted.core.settings import RenderSettings
        from src.whitted.scene.demo_scenes import create_sphere_grid_scene

        scene = create_sphere_grid_scene()
        setup_render_target(32, 24)
        setup_camera(scene.camera)

        render_frame(RenderSettings(bounce_count=2))
        first = get_framebuffer_numpy()
        render_frame(RenderSettings(bounce_count=2))
        second = get_framebuffer_numpy()

        np.testing.assert_array_equal(first, second)
        assert first.shape == (24, 32, 3)
        assert first.max() > 0

        image = get_image_numpy()
        assert image.min() >= 0.0
        assert image.max() <= 1.0
        np.testing.assert_array_equal((image * 255.0).astype(np.uint8), first)
