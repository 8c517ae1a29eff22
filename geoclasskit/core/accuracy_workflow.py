"""Accuracy assessment workflow orchestrator.

Coordinates: pair values -> build matrix -> compute metrics -> Kappa ->
package. Every metric that can be computed is reported; undefined
values are NaN (per class) or None (Kappa) with a warning.

Depends on: core.*, domain.*.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..domain import confusion_matrix, kappa
from ..domain.confidence import z_score_for_confidence
from ..domain.errors import DegenerateMatrixError
from ..domain.grid_search import Model, to_arrays
from ..domain.legend import class_names as legend_names
from ..domain.models import ConfusionMatrixResult, LabeledLocation

logger = logging.getLogger(__name__)


def run_accuracy_assessment(
    reference_values: Sequence[int],
    predicted_values: Sequence[int],
    class_labels: Optional[Tuple[int, ...]] = None,
    class_names: Optional[Dict[int, str]] = None,
    confidence_level: float = 0.95,
) -> ConfusionMatrixResult:
    """Build the confusion matrix and derive all accuracy metrics.

    Args:
        reference_values: Observed class per sample.
        predicted_values: Predicted class per sample.
        class_labels: Ordered class values; defaults to the union of both.
        class_names: Optional {class_value: name} overriding the legend.
        confidence_level: CI confidence level.

    Returns:
        ConfusionMatrixResult.
    """
    reference_values = np.asarray(reference_values).astype(np.int64)
    predicted_values = np.asarray(predicted_values).astype(np.int64)

    if class_labels is None:
        class_labels = confusion_matrix.class_union(reference_values, predicted_values)

    matrix = confusion_matrix.build_matrix(
        reference_values, predicted_values, class_labels
    )
    metrics = confusion_matrix.compute_metrics(matrix, class_labels, confidence_level)

    warnings: List[str] = []
    for label in class_labels:
        if np.isnan(metrics["producers_accuracy"][label]):
            warnings.append(
                f"Class {label}: producer's accuracy not computable "
                f"(no reference samples)."
            )
        if np.isnan(metrics["consumers_accuracy"][label]):
            warnings.append(
                f"Class {label}: consumer's accuracy not computable "
                f"(never predicted)."
            )

    kappa_val = None
    kappa_ci = None
    try:
        kappa_val, kappa_ci = kappa.compute(
            matrix, z=z_score_for_confidence(confidence_level)
        )
    except DegenerateMatrixError as exc:
        warnings.append(str(exc))

    for message in warnings:
        logger.warning(message)
    logger.info(
        "Accuracy on %d samples: OA=%.4f, Kappa=%s",
        int(matrix.sum()), metrics["overall_accuracy"],
        "undefined" if kappa_val is None else f"{kappa_val:.4f}",
    )

    return ConfusionMatrixResult(
        matrix=matrix,
        class_labels=tuple(class_labels),
        class_names=legend_names(class_labels, class_names),
        n_samples=int(matrix.sum()),
        overall_accuracy=metrics["overall_accuracy"],
        overall_accuracy_ci=metrics["overall_accuracy_ci"],
        producers_accuracy=metrics["producers_accuracy"],
        consumers_accuracy=metrics["consumers_accuracy"],
        producers_accuracy_ci=metrics["producers_accuracy_ci"],
        consumers_accuracy_ci=metrics["consumers_accuracy_ci"],
        f1_per_class=metrics["f1_per_class"],
        kappa=kappa_val,
        kappa_ci=kappa_ci,
        warnings=tuple(warnings),
    )


def _labels_with(
    class_labels: Optional[Sequence[int]],
    reference: np.ndarray,
    predicted: np.ndarray,
) -> Optional[Tuple[int, ...]]:
    """Expected classes plus every class actually seen, sorted."""
    if class_labels is None:
        return None
    return confusion_matrix.class_union(
        np.asarray(list(class_labels), dtype=np.int64),
        np.concatenate([reference, predicted]),
    )


def assess_model(
    model: Model,
    locations: Sequence[LabeledLocation],
    feature_names: Sequence[str],
    class_names: Optional[Dict[int, str]] = None,
    confidence_level: float = 0.95,
    class_labels: Optional[Sequence[int]] = None,
) -> ConfusionMatrixResult:
    """Score any trained model against labeled locations.

    ``class_labels`` lists classes that must appear in the result even
    when absent from ``locations`` and never predicted.
    """
    features, labels = to_arrays(locations, feature_names)
    predicted = np.asarray(model.predict(features)).astype(np.int64)
    return run_accuracy_assessment(
        labels, predicted,
        class_labels=_labels_with(class_labels, labels, predicted),
        class_names=class_names,
        confidence_level=confidence_level,
    )


def assess_raster(
    classified: np.ndarray,
    locations: Sequence[LabeledLocation],
    class_names: Optional[Dict[int, str]] = None,
    confidence_level: float = 0.95,
    class_labels: Optional[Sequence[int]] = None,
) -> ConfusionMatrixResult:
    """Score a classified raster at (row, col) validation locations.

    ``class_labels`` as for assess_model().
    """
    if not locations:
        raise ValueError("No validation locations to assess")
    rows = np.array([loc.location[0] for loc in locations])
    cols = np.array([loc.location[1] for loc in locations])
    reference = np.array([loc.label for loc in locations], dtype=np.int64)
    predicted = np.asarray(classified[rows, cols]).astype(np.int64)
    return run_accuracy_assessment(
        reference, predicted,
        class_labels=_labels_with(class_labels, reference, predicted),
        class_names=class_names,
        confidence_level=confidence_level,
    )
