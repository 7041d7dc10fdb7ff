"""Tests for Otsu thresholding."""

import numpy as np
import pytest

from linevec.threshold import (
    apply_threshold,
    between_class_variances,
    build_histogram,
    otsu_threshold,
)
from linevec.types import DegenerateHistogram


def _split_variance(hist, t):
    """Between-class variance of one split, computed directly."""
    hist = np.asarray(hist, dtype=np.float64)
    levels = np.arange(256, dtype=np.float64)
    w_b, w_f = hist[:t + 1].sum(), hist[t + 1:].sum()
    if w_b == 0 or w_f == 0:
        return 0.0
    mean_b = (levels[:t + 1] * hist[:t + 1]).sum() / w_b
    mean_f = (levels[t + 1:] * hist[t + 1:]).sum() / w_f
    return w_b * w_f * (mean_b - mean_f) ** 2


class TestBuildHistogram:
    """Test cases for build_histogram."""

    def test_sums_to_pixel_count(self):
        """Bucket counts add up to width * height."""
        luma = np.random.default_rng(0).integers(0, 256, (17, 23)).astype(np.uint8)

        hist = build_histogram(luma)

        assert hist.shape == (256,)
        assert hist.sum() == 17 * 23

    def test_counts_values(self):
        """Each value lands in its own bucket."""
        luma = np.array([[0, 0, 7], [255, 7, 7]], dtype=np.uint8)

        hist = build_histogram(luma)

        assert hist[0] == 2 and hist[7] == 3 and hist[255] == 1


class TestOtsuThreshold:
    """Test cases for otsu_threshold."""

    def test_bimodal_between_clusters(self):
        """Two equal clusters at 50 and 200 split strictly between them."""
        hist = np.zeros(256, dtype=np.int64)
        hist[50] = 500
        hist[200] = 500

        t = otsu_threshold(hist)

        assert 50 < t < 200
        # Binarization puts values below t in the first class
        variances = between_class_variances(hist)
        assert variances[t - 1] == pytest.approx(variances.max())

    def test_bimodal_separates_pixels(self):
        """Thresholding with the result splits the two clusters."""
        luma = np.array([[50] * 8 + [200] * 8], dtype=np.uint8)

        t = otsu_threshold(build_histogram(luma))
        mask = apply_threshold(luma, t)

        assert (mask[0, :8] == 0).all()
        assert (mask[0, 8:] == 255).all()

    def test_matches_brute_force_on_dense_histogram(self):
        """Without ties the result is the variance-maximizing split."""
        hist = np.random.default_rng(42).integers(1, 200, 256)

        t = otsu_threshold(hist)

        variances = [_split_variance(hist, c) for c in range(256)]
        assert _split_variance(hist, t) == pytest.approx(max(variances), rel=1e-9)

    def test_uniform_image_gives_zero(self):
        """A single populated bucket degenerates to threshold 0."""
        hist = np.zeros(256, dtype=np.int64)
        hist[255] = 16

        assert otsu_threshold(hist) == 0

    def test_empty_histogram_warns(self):
        """An all-zero histogram is not an error; it warns and returns 0."""
        with pytest.warns(DegenerateHistogram):
            assert otsu_threshold(np.zeros(256, dtype=np.int64)) == 0

    def test_in_byte_range(self):
        """Result is always a valid byte."""
        hist = np.zeros(256, dtype=np.int64)
        hist[254] = 3
        hist[255] = 3

        t = otsu_threshold(hist)

        assert 0 <= t <= 255

    def test_unequal_clusters_use_middle_of_tied_run(self):
        """Every split in the empty gap scores the same; the middle is picked."""
        hist = np.zeros(256, dtype=np.int64)
        hist[50] = 100
        hist[200] = 300

        assert otsu_threshold(hist) == 125


class TestBetweenClassVariances:
    """Test cases for between_class_variances."""

    def test_matches_direct_computation(self):
        hist = np.random.default_rng(7).integers(0, 50, 256)

        variances = between_class_variances(hist)

        assert variances.shape == (256,)
        for t in (0, 17, 128, 254):
            assert variances[t] == pytest.approx(_split_variance(hist, t), rel=1e-9)

    def test_empty_class_scores_zero(self):
        hist = np.zeros(256, dtype=np.int64)
        hist[30] = 4
        hist[90] = 4

        variances = between_class_variances(hist)

        assert np.all(variances[:30] == 0)
        assert variances[255] == 0
        assert variances[30] > 0


class TestApplyThreshold:
    """Test cases for apply_threshold."""

    def test_below_threshold_is_ink(self):
        """Luminance strictly below the threshold becomes ink."""
        luma = np.array([[0, 99, 100, 255]], dtype=np.uint8)

        mask = apply_threshold(luma, 100)

        assert mask.tolist() == [[0, 0, 255, 255]]

    def test_threshold_zero_gives_no_ink(self):
        """Nothing is below 0."""
        luma = np.zeros((3, 3), dtype=np.uint8)

        assert (apply_threshold(luma, 0) == 255).all()
