"""Tests for gifpress.dither module."""

import time
from unittest.mock import patch

import numpy as np

from gifpress.dither import _diffuse_errors, floyd_steinberg, nearest_indices, remap_to_palette

BLACK_WHITE = np.array([[0, 0, 0, 255], [255, 255, 255, 255]], dtype=np.uint8)


def _solid(color, width=8, height=8):
    return np.tile(np.array(color, dtype=np.uint8), (height, width, 1))


class TestNearestIndices:
    """Tests for nearest_indices."""

    def test_exact_matches(self):
        palette = np.array([[10, 0, 0, 255], [0, 10, 0, 255], [0, 0, 10, 255]], dtype=np.uint8)
        rgba = palette[[2, 0, 1]].reshape(1, 3, 4)
        assert nearest_indices(rgba, palette).tolist() == [[2, 0, 1]]

    def test_tie_goes_to_lowest_index(self):
        palette = np.array([[0, 0, 0, 255], [2, 0, 0, 255]], dtype=np.uint8)
        rgba = np.array([[[1, 0, 0, 255]]], dtype=np.uint8)
        assert nearest_indices(rgba, palette).tolist() == [[0]]

    def test_alpha_counts_in_distance(self):
        palette = np.array([[0, 0, 0, 0], [40, 40, 40, 255]], dtype=np.uint8)
        rgba = np.array([[[0, 0, 0, 0], [30, 30, 30, 250]]], dtype=np.uint8)
        assert nearest_indices(rgba, palette).tolist() == [[0, 1]]

    def test_single_entry_palette(self):
        result = nearest_indices(_solid((9, 9, 9, 255), 3, 2), BLACK_WHITE[:1])
        assert result.shape == (2, 3)
        assert not result.any()

    def test_large_image_spans_chunks(self):
        rgba = _solid((250, 250, 250, 255), 100, 60)
        result = nearest_indices(rgba, BLACK_WHITE)
        assert result.shape == (60, 100)
        assert (result == 1).all()


class TestFloydSteinberg:
    """Tests for floyd_steinberg."""

    def test_exact_colors_not_diffused(self):
        rgba = np.array(
            [[[0, 0, 0, 255], [255, 255, 255, 255]], [[255, 255, 255, 255], [0, 0, 0, 255]]],
            dtype=np.uint8,
        )
        assert floyd_steinberg(rgba, BLACK_WHITE).tolist() == [[0, 1], [1, 0]]

    def test_mid_gray_mixes_black_and_white(self):
        result = floyd_steinberg(_solid((128, 128, 128, 255)), BLACK_WHITE)
        assert set(np.unique(result).tolist()) == {0, 1}
        assert 0.35 <= result.mean() <= 0.65

    def test_dark_gray_mostly_black(self):
        result = floyd_steinberg(_solid((40, 40, 40, 255)), BLACK_WHITE)
        assert 0.05 <= result.mean() <= 0.35

    def test_input_not_modified(self):
        rgba = _solid((128, 128, 128, 255))
        floyd_steinberg(rgba, BLACK_WHITE)
        assert (rgba == 128).sum() == 8 * 8 * 3

    def test_near_identical_colors_kept_apart(self):
        palette = np.array([[100, 100, 100, 255], [101, 101, 101, 255]], dtype=np.uint8)
        indices = np.array([[0, 1, 1], [1, 0, 0]])
        assert floyd_steinberg(palette[indices], palette).tolist() == indices.tolist()

    def test_transparent_pixels_take_transparent_entry(self):
        palette = np.array(
            [[0, 0, 0, 255], [0, 0, 0, 0], [255, 255, 255, 255]], dtype=np.uint8
        )
        rgba = _solid((128, 128, 128, 255))
        rgba[:, :4] = (200, 10, 10, 0)
        result = floyd_steinberg(rgba, palette)
        assert (result[:, :4] == 1).all()
        assert set(np.unique(result[:, 4:]).tolist()) == {0, 2}

    def test_transparent_pixels_without_transparent_entry_use_nearest(self):
        rgba = np.array([[[250, 250, 250, 0], [0, 0, 0, 255]]], dtype=np.uint8)
        expected = nearest_indices(rgba[:, :1], BLACK_WHITE)[0, 0]
        assert floyd_steinberg(rgba, BLACK_WHITE)[0, 0] == expected

    def test_opaque_palette_does_not_use_numpy_kernel(self):
        with patch("gifpress.dither._diffuse_errors") as kernel:
            floyd_steinberg(_solid((128, 128, 128, 255)), BLACK_WHITE)
        kernel.assert_not_called()

    def test_partial_alpha_palette_uses_numpy_kernel(self):
        palette = np.array([[0, 0, 0, 255], [255, 255, 255, 128]], dtype=np.uint8)
        rgba = _solid((250, 250, 250, 128), 4, 4)
        with patch("gifpress.dither._diffuse_errors", wraps=_diffuse_errors) as kernel:
            result = floyd_steinberg(rgba, palette)
        kernel.assert_called_once()
        assert (result == 1).all()

    def test_large_frame_is_fast(self):
        rng = np.random.default_rng(7)
        rgba = rng.integers(0, 256, size=(256, 256, 4), dtype=np.uint8)
        rgba[..., 3] = np.where(rgba[..., 3] < 32, 0, 255)
        palette = rng.integers(0, 256, size=(64, 4), dtype=np.uint8)
        palette[:, 3] = 255
        palette[0] = (0, 0, 0, 0)

        start = time.perf_counter()
        result = floyd_steinberg(rgba, palette)
        elapsed = time.perf_counter() - start

        assert result.shape == (256, 256)
        assert int(result.max()) < 64
        assert (result[rgba[..., 3] == 0] == 0).all()
        assert elapsed < 1.0


class TestRemapToPalette:
    """Tests for remap_to_palette dispatch."""

    def test_without_dither_matches_nearest(self):
        rgba = _solid((128, 128, 128, 255))
        assert (remap_to_palette(rgba, BLACK_WHITE, dither=False) == 1).all()

    def test_with_dither_matches_floyd_steinberg(self):
        rgba = _solid((100, 100, 100, 255))
        expected = floyd_steinberg(rgba, BLACK_WHITE)
        assert (remap_to_palette(rgba, BLACK_WHITE, dither=True) == expected).all()
