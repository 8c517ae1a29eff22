"""End-to-end workflow.

reference map -> samples -> split -> grid search -> best model ->
classified raster -> patch smoothing -> accuracy of both rasters.

Depends on: core.*, domain.*.
"""

import logging
from typing import Any, Dict, Optional, Sequence

import numpy as np

from ..domain.grid_search import Trainer
from ..domain.models import HyperparameterPoint, PipelineResult
from ..domain.smoothing import smooth_patches
from .accuracy_workflow import assess_raster
from .config import WorkflowConfig
from .reference_reader import classify_stack
from .sampling_workflow import run_sample_generation
from .tuning_workflow import run_tuning

logger = logging.getLogger(__name__)


def run_pipeline(
    reference: np.ndarray,
    feature_stack: np.ndarray,
    band_names: Sequence[str],
    trainer: Trainer,
    grid: Sequence[HyperparameterPoint],
    config: Optional[WorkflowConfig] = None,
    class_names: Optional[Dict[int, str]] = None,
    baseline_params: Optional[Dict[str, Any]] = None,
) -> PipelineResult:
    """Run every stage on in-memory inputs.

    Args:
        reference: 2-D reference map of class values.
        feature_stack: (bands, rows, cols) predictors.
        band_names: One name per band.
        trainer: Trainer capability.
        grid: Hyperparameter points to search.
        config: Workflow parameters (defaults if None).
        class_names: Optional {class_value: name} overriding the legend.
        baseline_params: Settings of an untuned model scored alongside
            the tuned one.

    Returns:
        PipelineResult.
    """
    config = config or WorkflowConfig()
    logger.info("Starting pipeline on %s reference map", reference.shape)

    sample_set = run_sample_generation(
        reference, config, feature_stack, band_names, class_names
    )

    tuning = run_tuning(
        sample_set.split, grid, trainer, list(band_names),
        max_workers=config.max_workers,
        class_names=class_names,
        confidence_level=config.confidence_level,
        baseline_params=baseline_params,
    )

    valid = (reference != config.nodata) if config.nodata is not None else None
    nodata = config.nodata if config.nodata is not None else 0
    classified = classify_stack(tuning.model, feature_stack, valid, nodata=nodata)

    smoothed = smooth_patches(
        classified,
        min_patch_size=config.min_patch_size,
        radius=config.majority_radius,
        eight_connected=config.eight_connected,
        kernel=config.kernel,
        max_size=config.max_patch_size,
        nodata=config.nodata,
    )
    logger.info(
        "Patch smoothing changed %d of %d cells",
        int(np.count_nonzero(smoothed != classified)), classified.size,
    )

    sampled_classes = tuple(sample_set.split.distribution("all"))
    assessment = assess_raster(
        classified, sample_set.split.validation, class_names,
        config.confidence_level,
        class_labels=sampled_classes,
    )
    smoothed_assessment = assess_raster(
        smoothed, sample_set.split.validation, class_names,
        config.confidence_level,
        class_labels=sampled_classes,
    )

    return PipelineResult(
        sample_set=sample_set,
        tuning=tuning,
        classified=classified,
        smoothed=smoothed,
        assessment=assessment,
        smoothed_assessment=smoothed_assessment,
    )
