"""Confusion matrix construction and basic accuracy metrics.

Convention: rows = reference (observed), columns = predicted.
This follows Congalton & Green (2019). Every metric here is derived
from the matrix alone.

No I/O. Only depends on: numpy.
"""

from typing import Dict, Optional, Sequence, Tuple

import numpy as np

from .confidence import wilson_ci, z_score_for_confidence


def class_union(
    reference: Sequence[int],
    predicted: Sequence[int],
) -> Tuple[int, ...]:
    """Sorted union of the labels seen on either axis."""
    return tuple(sorted(
        {int(v) for v in reference} | {int(v) for v in predicted}
    ))


def build_matrix(
    reference: Sequence[int],
    predicted: Sequence[int],
    class_labels: Optional[Tuple[int, ...]] = None,
) -> np.ndarray:
    """Build a confusion matrix from paired reference/predicted values.

    Args:
        reference: 1D sequence of reference (observed) values.
        predicted: 1D sequence of predicted values.
        class_labels: Ordered class values. Defaults to the sorted union
            of both inputs. Pairs with a value outside the labels are
            skipped.

    Returns:
        k x k numpy integer array where:
          matrix[i, j] = count of samples with reference=class_labels[i]
                         and predicted=class_labels[j].
    """
    reference = np.asarray(reference).astype(np.int64).ravel()
    predicted = np.asarray(predicted).astype(np.int64).ravel()

    if len(reference) != len(predicted):
        raise ValueError(
            f"Array length mismatch: reference={len(reference)}, "
            f"predicted={len(predicted)}"
        )
    if len(reference) == 0:
        raise ValueError("Cannot build confusion matrix from empty arrays")

    if class_labels is None:
        class_labels = class_union(reference, predicted)

    k = len(class_labels)
    label_to_idx = {int(label): i for i, label in enumerate(class_labels)}

    matrix = np.zeros((k, k), dtype=np.int64)
    for r_val, p_val in zip(reference.tolist(), predicted.tolist()):
        r_idx = label_to_idx.get(r_val)
        p_idx = label_to_idx.get(p_val)
        if r_idx is not None and p_idx is not None:
            matrix[r_idx, p_idx] += 1

    return matrix


def overall_accuracy(matrix: np.ndarray) -> float:
    """trace(M) / sum(M)."""
    total = int(matrix.sum())
    if total == 0:
        raise ValueError("Confusion matrix has zero total samples")
    return float(np.trace(matrix)) / total


def compute_metrics(
    matrix: np.ndarray,
    class_labels: Tuple[int, ...],
    confidence_level: float = 0.95,
) -> dict:
    """Compute accuracy metrics from a confusion matrix.

    Args:
        matrix: k x k confusion matrix (reference=rows, predicted=cols).
        class_labels: Ordered class labels matching matrix dimensions.
        confidence_level: For Wilson CIs (default 0.95).

    Returns:
        Dictionary with keys:
          overall_accuracy, overall_accuracy_ci,
          producers_accuracy, consumers_accuracy,
          producers_accuracy_ci, consumers_accuracy_ci, f1_per_class
        Per-class values are NaN when the row (producer's) or column
        (consumer's) total is zero.
    """
    k = len(class_labels)
    if matrix.shape != (k, k):
        raise ValueError(
            f"Matrix shape {matrix.shape} does not match "
            f"{k} class labels"
        )

    N = int(matrix.sum())
    oa = overall_accuracy(matrix)
    z = z_score_for_confidence(confidence_level)

    row_totals = matrix.sum(axis=1)    # reference totals
    col_totals = matrix.sum(axis=0)    # predicted totals
    diagonal = matrix.diagonal()

    nan_ci = (float("nan"), float("nan"))
    pa: Dict[int, float] = {}
    ca: Dict[int, float] = {}
    pa_ci: Dict[int, Tuple[float, float]] = {}
    ca_ci: Dict[int, Tuple[float, float]] = {}
    f1: Dict[int, float] = {}

    for i, label in enumerate(class_labels):
        # Producer's accuracy (recall)
        if row_totals[i] > 0:
            pa[label] = float(diagonal[i]) / float(row_totals[i])
            pa_ci[label] = wilson_ci(pa[label], int(row_totals[i]), z)
        else:
            pa[label] = float("nan")
            pa_ci[label] = nan_ci

        # Consumer's accuracy (precision)
        if col_totals[i] > 0:
            ca[label] = float(diagonal[i]) / float(col_totals[i])
            ca_ci[label] = wilson_ci(ca[label], int(col_totals[i]), z)
        else:
            ca[label] = float("nan")
            ca_ci[label] = nan_ci

        p, c = pa[label], ca[label]
        if not (np.isnan(p) or np.isnan(c)) and (p + c) > 0:
            f1[label] = 2.0 * p * c / (p + c)
        else:
            f1[label] = float("nan")

    return {
        "overall_accuracy": oa,
        "overall_accuracy_ci": wilson_ci(oa, N, z),
        "producers_accuracy": pa,
        "consumers_accuracy": ca,
        "producers_accuracy_ci": pa_ci,
        "consumers_accuracy_ci": ca_ci,
        "f1_per_class": f1,
    }


def normalize_confusion_matrix(matrix: np.ndarray, axis: int = 1) -> np.ndarray:
    """Normalize a confusion matrix to percentages along an axis.

    axis=1 row-normalizes (producer's view), axis=0 column-normalizes
    (consumer's view). Zero-sum rows/columns stay all zeros.
    """
    m = matrix.astype(np.float64)
    totals = m.sum(axis=axis, keepdims=True)
    safe_totals = np.where(totals == 0, 1.0, totals)
    return np.where(totals == 0, 0.0, m / safe_totals * 100.0)
