"""Sampling workflow orchestrator.

Coordinates: validation -> class histogram -> allocation -> stratified
sampling -> feature extraction -> train/validation split -> packaging.

Depends on: core.*, domain.*.
"""

import logging
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..domain.allocation import allocate_clamped
from ..domain.legend import class_name
from ..domain.models import SampleSet
from ..domain.partition import split_stratified
from ..domain.sampling import sample_stratified
from .config import WorkflowConfig
from .input_validator import validate_reference_map, validate_workflow_config
from .reference_reader import (
    count_pixels_per_class,
    extract_features,
    iter_class_pixels,
)

logger = logging.getLogger(__name__)


def run_sample_generation(
    reference: np.ndarray,
    config: Optional[WorkflowConfig] = None,
    feature_stack: Optional[np.ndarray] = None,
    band_names: Optional[Sequence[str]] = None,
    class_names: Optional[Dict[int, str]] = None,
) -> SampleSet:
    """Execute the full sampling workflow.

    Args:
        reference: 2-D reference map of class values.
        config: Workflow parameters (defaults if None).
        feature_stack: Optional (bands, rows, cols) stack; when given,
            every sampled location carries its band values.
        band_names: Names for the feature stack bands.
        class_names: Optional {class_value: name} overriding the legend.

    Returns:
        SampleSet with allocation, sampled points, split and metadata.

    Raises:
        InvalidConfigurationError: Before any sampling, on bad parameters
            or an unusable reference map.
        InsufficientSamplesError: With insufficient_policy="raise".
    """
    config = config or WorkflowConfig()
    all_warnings: List[str] = []

    # Step 1: Validate everything up front
    validation = validate_workflow_config(config)
    validation.issues.extend(validate_reference_map(
        reference, config.nodata, feature_stack, band_names
    ).issues)
    validation.raise_if_invalid()
    for issue in validation.warnings:
        all_warnings.append(issue.message)

    if feature_stack is not None and band_names is None:
        band_names = [f"b{i + 1}" for i in range(feature_stack.shape[0])]

    # Step 2: Count pixels per class
    histogram = count_pixels_per_class(reference, nodata=config.nodata)
    logger.info(
        "Reference map: %d classes, %d valid pixels",
        len(histogram), sum(histogram.values()),
    )

    # Step 3: Allocate samples
    allocation, alloc_warnings = allocate_clamped(
        histogram,
        num_total_points=config.num_total_points,
        min_points=config.min_points,
        max_points=config.max_points,
    )
    all_warnings.extend(alloc_warnings)
    logger.info(
        "Allocated %d samples (nominal %d) over %d classes",
        allocation.total, config.num_total_points, len(allocation.n_per_class),
    )

    # Step 4: Stratified random sampling
    points, sample_warnings = sample_stratified(
        iter_class_pixels(reference, nodata=config.nodata),
        allocation.n_per_class,
        seed=config.seed,
        policy=config.insufficient_policy,
    )
    all_warnings.extend(sample_warnings)
    logger.info("Generated %d sample points", len(points))

    # Step 5: Attach features
    if feature_stack is not None:
        points = extract_features(points, feature_stack, band_names)

    # Step 6: Stratified train/validation split
    split = split_stratified(
        points, split_fraction=config.split_fraction, seed=config.split_seed
    )
    logger.info(
        "Split: %d training, %d validation",
        len(split.training), len(split.validation),
    )

    # Step 7: Build strata info (every class of the histogram is reported)
    sizes = split.sizes_per_class()
    strata_info = {}
    for cls in histogram:
        n_train, n_valid = sizes.get(cls, (0, 0))
        strata_info[cls] = {
            "name": class_name(cls, class_names),
            "pixel_count": histogram[cls],
            "n_requested": allocation.n_per_class.get(cls, 0),
            "n_generated": n_train + n_valid,
            "n_training": n_train,
            "n_validation": n_valid,
        }

    for message in all_warnings:
        logger.warning(message)

    return SampleSet(
        config=config,
        histogram=histogram,
        allocation=allocation,
        points=tuple(points),
        split=split,
        strata_info=strata_info,
        warnings=tuple(all_warnings),
    )
