"""Patch-based smoothing of classified rasters.

Two independent full-raster passes and one merge:
  1. component_sizes: size of each cell's same-label connected patch.
  2. majority_filter: most frequent label in a window of radius R.
  3. smooth_patches: cells in patches smaller than T take the majority
     label, all other cells keep theirs.
Applied once; there is no iteration to convergence.

No I/O. Only depends on: numpy, scipy.ndimage.
"""

import math
from typing import Optional

import numpy as np
from scipy import ndimage

from .errors import InvalidConfigurationError

KERNEL_SQUARE = "square"
KERNEL_CIRCLE = "circle"
KERNELS = (KERNEL_SQUARE, KERNEL_CIRCLE)


def _as_raster(raster: np.ndarray) -> np.ndarray:
    raster = np.asarray(raster)
    if raster.ndim != 2:
        raise ValueError(f"Expected a 2-D raster, got shape {raster.shape}")
    if not np.issubdtype(raster.dtype, np.integer):
        raise ValueError(f"Expected integer class labels, got {raster.dtype}")
    return raster


def _valid_mask(raster: np.ndarray, nodata: Optional[int]) -> np.ndarray:
    if nodata is None:
        return np.ones(raster.shape, dtype=bool)
    return raster != nodata


def kernel_footprint(radius: int, kernel: str = KERNEL_SQUARE) -> np.ndarray:
    """Boolean (2R+1) x (2R+1) neighbourhood."""
    if radius < 0:
        raise InvalidConfigurationError(f"radius must be >= 0, got {radius}")
    if kernel not in KERNELS:
        raise InvalidConfigurationError(
            f"Unknown kernel {kernel!r} (expected one of {KERNELS})"
        )
    size = 2 * radius + 1
    if kernel == KERNEL_SQUARE:
        return np.ones((size, size), dtype=bool)
    yy, xx = np.mgrid[-radius:radius + 1, -radius:radius + 1]
    return (xx * xx + yy * yy) <= radius * radius


def radius_in_cells(radius_m: float, pixel_size: float) -> int:
    """Convert a metric radius to whole cells (60 m at 30 m -> 2)."""
    if pixel_size <= 0:
        raise InvalidConfigurationError(
            f"pixel_size must be positive, got {pixel_size}"
        )
    # tolerate float noise such as 60 / 30.000001
    return int(math.floor(radius_m / pixel_size + 1e-9))


def component_sizes(
    raster: np.ndarray,
    eight_connected: bool = True,
    max_size: Optional[int] = None,
    nodata: Optional[int] = None,
) -> np.ndarray:
    """Size of the same-label connected component containing each cell.

    Args:
        raster: 2-D integer class raster.
        eight_connected: 8-neighbour connectivity if True, else 4.
        max_size: If given, sizes are capped at this value.
        nodata: Cells with this value get size 0.

    Returns:
        int64 array of raster shape.
    """
    raster = _as_raster(raster)
    valid = _valid_mask(raster, nodata)
    structure = ndimage.generate_binary_structure(2, 2 if eight_connected else 1)

    sizes = np.zeros(raster.shape, dtype=np.int64)
    for value in np.unique(raster[valid]):
        labels, _ = ndimage.label(raster == value, structure=structure)
        counts = np.bincount(labels.ravel())
        inside = labels > 0
        sizes[inside] = counts[labels[inside]]

    if max_size is not None:
        np.minimum(sizes, max_size, out=sizes)
    return sizes


def majority_filter(
    raster: np.ndarray,
    radius: int = 1,
    kernel: str = KERNEL_SQUARE,
    nodata: Optional[int] = None,
) -> np.ndarray:
    """Most frequent label within ``radius`` of each cell.

    Cells outside the raster and nodata cells do not vote. Ties go to
    the lowest label. Nodata cells, and cells without any voter, keep
    their own value.
    """
    raster = _as_raster(raster)
    footprint = kernel_footprint(radius, kernel).astype(np.int32)
    valid = _valid_mask(raster, nodata)

    best_label = raster.copy()
    best_count = np.zeros(raster.shape, dtype=np.int32)

    # ascending label order + strict '>' keeps the lowest label on ties
    for value in np.unique(raster[valid]):
        votes = ((raster == value) & valid).astype(np.int32)
        counts = ndimage.correlate(votes, footprint, mode="constant", cval=0)
        better = (counts > best_count) & valid
        best_label[better] = value
        best_count[better] = counts[better]

    return best_label


def merge_small_patches(
    raster: np.ndarray,
    sizes: np.ndarray,
    filtered: np.ndarray,
    min_patch_size: int,
    nodata: Optional[int] = None,
) -> np.ndarray:
    """where(size < min_patch_size, filtered, raster); nodata untouched."""
    replace = (sizes < min_patch_size) & _valid_mask(raster, nodata)
    return np.where(replace, filtered, raster)


def smooth_patches(
    raster: np.ndarray,
    min_patch_size: int,
    radius: int = 1,
    eight_connected: bool = True,
    kernel: str = KERNEL_SQUARE,
    max_size: Optional[int] = None,
    nodata: Optional[int] = None,
) -> np.ndarray:
    """Replace cells of small patches by their neighbourhood majority.

    Args:
        raster: 2-D integer class raster.
        min_patch_size: Patches with fewer cells than this are smoothed.
        radius: Majority-filter radius in cells.
        eight_connected: Connectivity used for patch sizing.
        kernel: "square" or "circle" majority window.
        max_size: Cap on counted patch size; must be >= min_patch_size.
        nodata: Value never counted, voted or replaced.

    Returns:
        New raster; the input is not modified.
    """
    if min_patch_size < 1:
        raise InvalidConfigurationError(
            f"min_patch_size must be >= 1, got {min_patch_size}"
        )
    if max_size is not None and max_size < min_patch_size:
        raise InvalidConfigurationError(
            f"max_size ({max_size}) < min_patch_size ({min_patch_size}) "
            f"would smooth every patch"
        )

    raster = _as_raster(raster)
    sizes = component_sizes(raster, eight_connected, max_size, nodata)
    filtered = majority_filter(raster, radius, kernel, nodata)
    return merge_small_patches(raster, sizes, filtered, min_patch_size, nodata)
