"""Tests for connected-patch sizing, majority filtering and smoothing."""

import numpy as np
import pytest

from geoclasskit.domain.errors import InvalidConfigurationError
from geoclasskit.domain.smoothing import (
    component_sizes,
    kernel_footprint,
    majority_filter,
    merge_small_patches,
    radius_in_cells,
    smooth_patches,
)


@pytest.fixture
def speckled():
    """5x5 of class 1 with a single class-2 pixel in the middle."""
    raster = np.ones((5, 5), dtype=np.int64)
    raster[2, 2] = 2
    return raster


class TestComponentSizes:

    def test_speckle(self, speckled):
        sizes = component_sizes(speckled)
        assert sizes[2, 2] == 1
        assert sizes[0, 0] == 24

    def test_connectivity(self):
        raster = np.array([[2, 1], [1, 2]], dtype=np.int64)
        np.testing.assert_array_equal(
            component_sizes(raster, eight_connected=True), [[2, 2], [2, 2]]
        )
        np.testing.assert_array_equal(
            component_sizes(raster, eight_connected=False), [[1, 1], [1, 1]]
        )

    def test_separate_patches_same_label(self):
        raster = np.array([[1, 2, 1, 1]], dtype=np.int64)
        np.testing.assert_array_equal(component_sizes(raster), [[1, 1, 2, 2]])

    def test_max_size_caps(self):
        sizes = component_sizes(np.ones((5, 5), dtype=np.int64), max_size=10)
        assert (sizes == 10).all()

    def test_nodata_has_zero_size(self, speckled):
        sizes = component_sizes(speckled, nodata=2)
        assert sizes[2, 2] == 0

    def test_rejects_non_2d(self):
        with pytest.raises(ValueError):
            component_sizes(np.ones(5, dtype=np.int64))

    def test_rejects_float(self):
        with pytest.raises(ValueError):
            component_sizes(np.ones((3, 3)))


class TestMajorityFilter:

    def test_removes_speckle(self, speckled):
        filtered = majority_filter(speckled, radius=1)
        assert (filtered == 1).all()

    def test_tie_goes_to_lowest_label(self):
        raster = np.array([[5, 3]], dtype=np.int64)
        np.testing.assert_array_equal(majority_filter(raster, radius=1), [[3, 3]])

    def test_radius_zero_is_identity(self, speckled):
        np.testing.assert_array_equal(majority_filter(speckled, radius=0), speckled)

    def test_nodata_does_not_vote(self):
        raster = np.array([[0, 0, 0], [0, 7, 0], [0, 0, 0]], dtype=np.int64)
        filtered = majority_filter(raster, radius=1, nodata=0)
        np.testing.assert_array_equal(filtered, raster)

    def test_edges_use_in_raster_cells_only(self):
        raster = np.array([[1, 1, 2, 2, 2]], dtype=np.int64)
        filtered = majority_filter(raster, radius=1)
        np.testing.assert_array_equal(filtered, [[1, 1, 2, 2, 2]])

    def test_circle_footprint(self):
        fp = kernel_footprint(1, "circle")
        assert fp.sum() == 5
        assert not fp[0, 0]
        assert kernel_footprint(2, "square").shape == (5, 5)

    def test_unknown_kernel(self):
        with pytest.raises(InvalidConfigurationError):
            kernel_footprint(1, "diamond")


class TestSmoothPatches:

    def test_clean_raster_unchanged(self):
        raster = np.ones((10, 10), dtype=np.int64)
        raster[:, 5:] = 3
        smoothed = smooth_patches(raster, min_patch_size=5, radius=2)
        np.testing.assert_array_equal(smoothed, raster)

    def test_small_patch_replaced(self, speckled):
        smoothed = smooth_patches(speckled, min_patch_size=2, radius=1)
        assert (smoothed == 1).all()

    def test_large_patch_kept_even_if_minority(self):
        """Cells of big patches keep their label whatever the majority says."""
        raster = np.ones((9, 9), dtype=np.int64)
        raster[:, 0] = 4           # 9-cell column
        smoothed = smooth_patches(raster, min_patch_size=5, radius=2)
        np.testing.assert_array_equal(smoothed, raster)

    def test_single_pass(self):
        """A 2-cell patch is only judged against the original raster."""
        raster = np.ones((1, 6), dtype=np.int64)
        raster[0, 2:4] = 2
        smoothed = smooth_patches(raster, min_patch_size=3, radius=1)
        # windows of width 3 hold two 2s for both cells: majority stays 2
        np.testing.assert_array_equal(smoothed, raster)

    def test_input_not_modified(self, speckled):
        before = speckled.copy()
        smooth_patches(speckled, min_patch_size=2, radius=1)
        np.testing.assert_array_equal(speckled, before)

    def test_nodata_untouched(self):
        raster = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.int64)
        smoothed = smooth_patches(raster, min_patch_size=2, radius=1, nodata=0)
        np.testing.assert_array_equal(smoothed, raster)

    def test_merge(self):
        raster = np.array([[1, 2]], dtype=np.int64)
        sizes = np.array([[10, 1]])
        filtered = np.array([[9, 9]], dtype=np.int64)
        merged = merge_small_patches(raster, sizes, filtered, 5)
        np.testing.assert_array_equal(merged, [[1, 9]])

    def test_max_size_below_threshold_rejected(self, speckled):
        with pytest.raises(InvalidConfigurationError):
            smooth_patches(speckled, min_patch_size=70, max_size=50)

    def test_min_patch_size_must_be_positive(self, speckled):
        with pytest.raises(InvalidConfigurationError):
            smooth_patches(speckled, min_patch_size=0)


class TestRadiusInCells:

    def test_metres_to_cells(self):
        assert radius_in_cells(60, 30) == 2
        assert radius_in_cells(45, 30) == 1
        assert radius_in_cells(60, 30.0000001) == 1

    def test_bad_pixel_size(self):
        with pytest.raises(InvalidConfigurationError):
            radius_in_cells(60, 0)
