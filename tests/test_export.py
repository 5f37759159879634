"""Tests for PNG export and image comparison helpers."""

import numpy as np
import pytest


class TestQuantization:
    def test_truncates(self):
        from src.whitted.preview.export import image_to_uint8

        image = np.array([[[0.0, 0.5, 1.0]]], dtype=np.float32)
        np.testing.assert_array_equal(image_to_uint8(image), [[[0, 127, 255]]])

    def test_clips_out_of_range(self):
        from src.whitted.preview.export import image_to_uint8

        image = np.array([[[-0.5, 1.5, 0.999]]])
        np.testing.assert_array_equal(image_to_uint8(image), [[[0, 255, 254]]])


class TestSavePng:
    def test_uint8_round_trip(self, tmp_path):
        from src.whitted.preview.export import load_png, save_png

        rng = np.random.default_rng(7)
        image = rng.integers(0, 256, size=(6, 10, 3), dtype=np.uint8)
        path = save_png(image, tmp_path / "nested" / "dir" / "frame.png")

        assert path.exists()
        loaded = load_png(path)
        assert loaded.shape == (6, 10, 3)
        np.testing.assert_array_equal(loaded, image)

    def test_float_image(self, tmp_path):
        from src.whitted.preview.export import load_png, save_png

        image = np.full((2, 3, 3), 0.5, dtype=np.float32)
        path = save_png(image, tmp_path / "gray.png")
        assert np.all(load_png(path) == 127)

    def test_rejects_grayscale(self, tmp_path):
        from src.whitted.preview.export import save_png

        with pytest.raises(ValueError, match=r"\(H, W, 3\)"):
            save_png(np.zeros((4, 4), dtype=np.uint8), tmp_path / "bad.png")

    def test_accepts_string_path(self, tmp_path):
        from src.whitted.preview.export import save_png

        path = save_png(np.zeros((1, 1, 3), dtype=np.uint8), str(tmp_path / "one.png"))
        assert path.name == "one.png"


class TestRmse:
    def test_identical_images(self):
        from src.whitted.preview.export import compute_rmse

        image = np.ones((3, 3, 3), dtype=np.uint8)
        assert compute_rmse(image, image) == 0.0

    def test_known_difference(self):
        from src.whitted.preview.export import compute_rmse

        a = np.zeros((2, 2, 3), dtype=np.uint8)
        b = np.full((2, 2, 3), 4, dtype=np.uint8)
        assert compute_rmse(a, b) == pytest.approx(4.0)

    def test_shape_mismatch(self):
        from src.whitted.preview.export import compute_rmse

        with pytest.raises(ValueError, match="shapes"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((2, 3, 3)))
