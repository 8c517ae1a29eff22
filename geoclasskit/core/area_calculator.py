"""Mapped area per class.

Converts pixel counts to area from the pixel size. Pixel sizes must be
in metres (projected CRS).

Depends on: numpy, core.reference_reader.
"""

from typing import Dict, Optional

import numpy as np

from ..domain.errors import InvalidConfigurationError
from .reference_reader import count_pixels_per_class

_M2_PER_UNIT = {
    "m2": 1.0,
    "ha": 10_000.0,
    "km2": 1_000_000.0,
}


def compute_class_areas(
    pixel_counts: Dict[int, int],
    pixel_size_x: float,
    pixel_size_y: Optional[float] = None,
    unit: str = "ha",
) -> Dict[int, float]:
    """Area per class.

    Args:
        pixel_counts: {class_value: pixel_count}.
        pixel_size_x: Pixel width in metres.
        pixel_size_y: Pixel height in metres (defaults to width).
        unit: "m2", "ha" or "km2".

    Returns:
        {class_value: area in ``unit``}
    """
    if unit not in _M2_PER_UNIT:
        raise InvalidConfigurationError(
            f"Unknown area unit {unit!r} (expected one of {sorted(_M2_PER_UNIT)})"
        )
    if pixel_size_y is None:
        pixel_size_y = pixel_size_x
    if pixel_size_x <= 0 or pixel_size_y <= 0:
        raise InvalidConfigurationError(
            f"Pixel size must be positive, got {pixel_size_x} x {pixel_size_y}"
        )

    pixel_area = abs(pixel_size_x * pixel_size_y) / _M2_PER_UNIT[unit]
    return {cls: count * pixel_area for cls, count in pixel_counts.items()}


def compute_raster_areas(
    raster: np.ndarray,
    pixel_size: float,
    unit: str = "km2",
    nodata: Optional[int] = None,
) -> Dict[int, float]:
    """Area per class of a classified raster (default km²)."""
    counts = count_pixels_per_class(raster, nodata=nodata)
    return compute_class_areas(counts, pixel_size, unit=unit)
