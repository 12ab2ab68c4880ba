"""Tests for grayscale conversion and binarization."""

import numpy as np
import pytest

from zipmeta.preprocessing.binarize import (
    binarize_adaptive,
    binarize_otsu,
    binarize_threshold,
    to_gray,
    to_monochrome,
)


class TestToGray:
    """Tests for grayscale conversion."""

    def test_color_to_gray(self, sample_color_image: np.ndarray) -> None:
        result = to_gray(sample_color_image)
        assert result.ndim == 2
        assert result.shape == sample_color_image.shape[:2]

    def test_rgba_to_gray(self) -> None:
        image = np.zeros((20, 30, 4), dtype=np.uint8)
        assert to_gray(image).shape == (20, 30)

    def test_gray_passthrough(self, sample_image: np.ndarray) -> None:
        assert to_gray(sample_image) is sample_image


class TestBinarizeThreshold:
    """Tests for fixed-threshold binarization."""

    def test_output_is_binary(self, sample_image: np.ndarray) -> None:
        result = binarize_threshold(sample_image)
        assert set(np.unique(result)).issubset({0, 255})

    def test_threshold_percent(self) -> None:
        # 65% of 255 is 165.75: 160 goes black, 170 goes white.
        image = np.array([[160, 170]], dtype=np.uint8)
        result = binarize_threshold(image, 65)
        assert result.tolist() == [[0, 255]]

    def test_lower_percent_whitens_more(self) -> None:
        image = np.array([[100, 200]], dtype=np.uint8)
        assert binarize_threshold(image, 30).tolist() == [[255, 255]]


class TestOtherMethods:
    """Tests for Otsu and adaptive binarization."""

    def test_otsu_binary(self, sample_color_image: np.ndarray) -> None:
        result = binarize_otsu(sample_color_image)
        assert result.ndim == 2
        assert set(np.unique(result)).issubset({0, 255})

    def test_adaptive_shape(self, sample_image: np.ndarray) -> None:
        result = binarize_adaptive(sample_image)
        assert result.shape == sample_image.shape


class TestToMonochrome:
    """Tests for method dispatch."""

    @pytest.mark.parametrize("method", ["threshold", "otsu", "adaptive"])
    def test_methods(self, sample_image: np.ndarray, method: str) -> None:
        result = to_monochrome(sample_image, method=method)
        assert result.shape == sample_image.shape
        assert set(np.unique(result)).issubset({0, 255})
