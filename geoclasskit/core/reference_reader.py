"""Reference map and feature stack access for GeoClassKit.

Works on in-memory arrays: a 2-D reference raster of class values and
a (bands, rows, cols) feature stack. Locations are (row, col) pixel
indices; pixel_center() converts them to map coordinates.

Depends on: numpy, domain.*.
"""

from typing import Dict, Iterator, Optional, Sequence, Tuple

import numpy as np

from ..domain.grid_search import Model
from ..domain.models import LabeledLocation

GeoTransform = Tuple[float, float, float, float, float, float]


def count_pixels_per_class(
    reference: np.ndarray,
    nodata: Optional[int] = None,
    block_size: int = 1024,
) -> Dict[int, int]:
    """Frequency histogram of class values, row block by row block.

    Args:
        reference: 2-D class raster.
        nodata: Value excluded from the histogram.
        block_size: Rows per block.

    Returns:
        {class_value: pixel_count}, sorted by class value.
    """
    counts: Dict[int, int] = {}
    for y_off in range(0, reference.shape[0], block_size):
        block = reference[y_off:y_off + block_size]
        unique, cnts = np.unique(block, return_counts=True)
        for val, cnt in zip(unique, cnts):
            val_int = int(val)
            if nodata is not None and val_int == nodata:
                continue
            counts[val_int] = counts.get(val_int, 0) + int(cnt)
    return dict(sorted(counts.items()))


def iter_class_pixels(
    reference: np.ndarray,
    nodata: Optional[int] = None,
) -> Iterator[Tuple[Tuple[int, int], int]]:
    """Yield ((row, col), class_value) in row-major order, skipping nodata."""
    valid = reference != nodata if nodata is not None else np.ones(reference.shape, bool)
    rows, cols = np.nonzero(valid)
    for r, c, v in zip(rows.tolist(), cols.tolist(), reference[rows, cols].tolist()):
        yield (r, c), int(v)


def pixel_center(row: int, col: int, geotransform: GeoTransform) -> Tuple[float, float]:
    """Map (x, y) of a pixel center from a GDAL-style geotransform."""
    x = geotransform[0] + (col + 0.5) * geotransform[1] + (row + 0.5) * geotransform[2]
    y = geotransform[3] + (col + 0.5) * geotransform[4] + (row + 0.5) * geotransform[5]
    return (x, y)


def extract_features(
    points: Sequence[LabeledLocation],
    feature_stack: np.ndarray,
    band_names: Sequence[str],
) -> Tuple[LabeledLocation, ...]:
    """Attach band values at each (row, col) location.

    Args:
        points: Sampled locations whose ``location`` is (row, col).
        feature_stack: (bands, rows, cols) array.
        band_names: One name per band.

    Returns:
        New LabeledLocations with ``features`` filled in.
    """
    if feature_stack.ndim != 3:
        raise ValueError(
            f"Feature stack must be (bands, rows, cols), got {feature_stack.shape}"
        )
    if len(band_names) != feature_stack.shape[0]:
        raise ValueError(
            f"{len(band_names)} band names for {feature_stack.shape[0]} bands"
        )
    if not points:
        return ()

    rows = np.array([p.location[0] for p in points])
    cols = np.array([p.location[1] for p in points])
    values = feature_stack[:, rows, cols].astype(np.float64)   # (bands, n)

    return tuple(
        p.with_features(dict(zip(band_names, values[:, i].tolist())))
        for i, p in enumerate(points)
    )


def classify_stack(
    model: Model,
    feature_stack: np.ndarray,
    valid_mask: Optional[np.ndarray] = None,
    nodata: int = 0,
    block_rows: int = 512,
) -> np.ndarray:
    """Apply a trained model to every pixel of a feature stack.

    Args:
        model: Anything with predict(n x bands) -> n labels.
        feature_stack: (bands, rows, cols) array; band order must match
            the feature order used in training.
        valid_mask: Pixels to classify; others get ``nodata``.
        nodata: Output value for unclassified pixels.
        block_rows: Rows predicted per call.

    Returns:
        2-D int64 class raster.
    """
    n_bands, height, width = feature_stack.shape
    if valid_mask is None:
        valid_mask = np.ones((height, width), dtype=bool)

    classified = np.full((height, width), nodata, dtype=np.int64)
    for y_off in range(0, height, block_rows):
        block = feature_stack[:, y_off:y_off + block_rows, :]
        mask = valid_mask[y_off:y_off + block_rows, :]
        if not mask.any():
            continue
        pixels = block[:, mask].T                  # (n, bands)
        out = classified[y_off:y_off + block_rows, :]
        out[mask] = np.asarray(model.predict(pixels)).astype(np.int64)
    return classified
