"""Hyperparameter tuning workflow orchestrator.

Coordinates: grid search on the split -> log every outcome -> retrain
with the best point -> score the final model on validation.

Depends on: core.*, domain.*.
"""

import logging
from typing import Any, Dict, Optional, Sequence

from ..domain.grid_search import Trainer, run_grid_search, to_arrays
from ..domain.models import DatasetSplit, HyperparameterPoint, TuningResult
from .accuracy_workflow import assess_model
from .sklearn_trainer import relative_importance

logger = logging.getLogger(__name__)


def run_tuning(
    split: DatasetSplit,
    grid: Sequence[HyperparameterPoint],
    trainer: Trainer,
    feature_names: Sequence[str],
    max_workers: int = 1,
    class_names: Optional[Dict[int, str]] = None,
    confidence_level: float = 0.95,
    baseline_params: Optional[Dict[str, Any]] = None,
) -> TuningResult:
    """Search the grid, then train and assess the selected model.

    Args:
        split: Training/validation partition with features attached.
        grid: Hyperparameter points (see domain.grid_search.parameter_grid).
        trainer: Trainer capability.
        feature_names: Feature order for model inputs.
        max_workers: Parallel grid evaluation when > 1.
        class_names: Optional names for the final report.
        confidence_level: CI confidence level.
        baseline_params: If given, a model trained with these settings
            (e.g. {"n_trees": 1000}) is also scored on validation, for
            comparison with the tuned model.

    Returns:
        TuningResult holding every (point, accuracy) outcome, the best
        parameters, the retrained model, its validation assessment and,
        for models exposing one, relative variable importance.

    Raises:
        NoViableModelError: If every grid point failed.
    """
    logger.info(
        "Grid search over %d point(s) with %d worker(s)", len(grid), max_workers
    )
    search = run_grid_search(
        split.training, split.validation, grid, trainer,
        feature_names, max_workers=max_workers,
    )

    for outcome in search.outcomes:
        if outcome.succeeded:
            logger.info(
                "Grid point %d %s: accuracy %.4f",
                outcome.point.index, outcome.point.as_dict(), outcome.accuracy,
            )
        else:
            logger.warning("%s", outcome.error)

    best_params = search.best.point.as_dict()
    logger.info(
        "Best grid point %d %s: accuracy %.4f (%d failed)",
        search.best.point.index, best_params, search.best.accuracy,
        len(search.failures),
    )

    features, labels = to_arrays(split.training, feature_names)
    model = trainer.train(features, labels, best_params)
    # every sampled class is reported, even one with no validation samples
    sampled_classes = tuple(split.distribution("all"))
    assessment = assess_model(
        model, split.validation, feature_names,
        class_names=class_names, confidence_level=confidence_level,
        class_labels=sampled_classes,
    )
    importance = relative_importance(model, feature_names)
    if importance is not None:
        logger.info(
            "Relative importance: %s",
            ", ".join(f"{k}={v:.1f}%" for k, v in importance.items()),
        )

    baseline_assessment = None
    if baseline_params is not None:
        baseline = trainer.train(features, labels, dict(baseline_params))
        baseline_assessment = assess_model(
            baseline, split.validation, feature_names,
            class_names=class_names, confidence_level=confidence_level,
            class_labels=sampled_classes,
        )
        logger.info(
            "Baseline %s: accuracy %.4f (tuned %.4f)",
            baseline_params, baseline_assessment.overall_accuracy,
            assessment.overall_accuracy,
        )

    return TuningResult(
        search=search,
        best_params=best_params,
        model=model,
        assessment=assessment,
        baseline_assessment=baseline_assessment,
        feature_importance=importance,
    )
