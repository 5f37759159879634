"""Unit tests for RenderSettings and LightingMode."""

import pytest


class TestLightingMode:
    def test_cycle_order(self):
        from src.whitted.core.settings import LightingMode

        mode = LightingMode.OBSERVED_AREA
        seen = [mode]
        for _ in range(4):
            mode = mode.next()
            seen.append(mode)

        assert seen == [
            LightingMode.OBSERVED_AREA,
            LightingMode.RADIANCE,
            LightingMode.BRDF,
            LightingMode.COMBINED,
            LightingMode.OBSERVED_AREA,
        ]


class TestRenderSettings:
    def test_defaults(self):
        from src.whitted.core.settings import LightingMode, RenderSettings

        settings = RenderSettings()
        assert settings.bounce_count == 1
        assert settings.shadows_enabled
        assert settings.reflections_enabled
        assert settings.lighting_mode == LightingMode.COMBINED
        assert settings.sky_color == (1.0, 1.0, 1.0)

    def test_negative_bounce_count(self):
        from src.whitted.core.settings import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(bounce_count=-1)

    def test_negative_sky(self):
        from src.whitted.core.settings import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(sky_color=(0.0, -0.1, 0.0))

    def test_int_mode_is_coerced(self):
        from src.whitted.core.settings import LightingMode, RenderSettings

        settings = RenderSettings(lighting_mode=2)
        assert settings.lighting_mode is LightingMode.BRDF

    def test_invalid_mode(self):
        from src.whitted.core.settings import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(lighting_mode=7)

    def test_copies_are_independent(self):
        from src.whitted.core.settings import LightingMode, RenderSettings

        base = RenderSettings()
        cycled = base.cycled()
        no_shadows = base.with_shadows(False)
        no_reflections = base.with_reflections(False)

        assert base.lighting_mode == LightingMode.COMBINED
        assert cycled.lighting_mode == LightingMode.OBSERVED_AREA
        assert not no_shadows.shadows_enabled and base.shadows_enabled
        assert not no_reflections.reflections_enabled and base.reflections_enabled

    def test_frozen(self):
        import dataclasses

        from src.whitted.core.settings import RenderSettings

        with pytest.raises(dataclasses.FrozenInstanceError):
            RenderSettings().bounce_count = 3
